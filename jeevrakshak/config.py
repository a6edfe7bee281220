"""
config.py
=========
Runtime settings for the Jeevrakshak backend, read from the environment
(and an optional .env file).
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    """All tunables of the service. Defaults suit a local demo."""
    database_url: str = "sqlite:///data/jeevrakshak.db"
    jwt_secret: str = "jeevrakshak-dev-secret-change-me-in-production"
    jwt_expires_hours: int = 24
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    pushover_token: str = ""
    pushover_user: str = ""
    log_level: str = "INFO"
    hospital_id: str = "HOSP_JVKSHK_001"
    seed_demo_data: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        db_path = os.getenv("JEEVRAKSHAK_DB", "data/jeevrakshak.db")
        return cls(
            database_url=os.getenv("DATABASE_URL", f"sqlite:///{db_path}"),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_expires_hours=int(os.getenv("JWT_EXPIRES_HOURS", "24")),
            cors_origins=_split(os.getenv("CORS_ORIGINS", "*")),
            pushover_token=os.getenv("PUSHOVER_TOKEN", ""),
            pushover_user=os.getenv("PUSHOVER_USER", ""),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            hospital_id=os.getenv("HOSPITAL_ID", cls.hospital_id),
            seed_demo_data=os.getenv("SEED_DEMO_DATA", "true").lower() == "true",
        )
