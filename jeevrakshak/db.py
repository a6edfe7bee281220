"""
db.py
=====
Handles database connection and session management for the hospital system.
"""

import os
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def make_engine(database_url: str) -> Engine:
    """
    Build an engine for the given URL.
    For file-backed SQLite the parent directory is created if missing.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        db_path = database_url.split("///", 1)[-1]
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
        # For SQLite, we must disable thread check
        connect_args = {"check_same_thread": False, "timeout": 15}
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Create a configured session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(Base, engine: Engine):
    """
    Initializes the database — creates tables if missing.
    Called once on FastAPI startup.
    """
    Base.metadata.create_all(bind=engine)
