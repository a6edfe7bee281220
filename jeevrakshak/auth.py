"""
auth.py
=======
Bearer-token login for staff and patients.
Tokens are HS256 JWTs carrying the account id and role.
"""

import datetime
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

ROLE_STAFF = "staff"
ROLE_PATIENT = "patient"

_bearer = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    id: str
    role: str


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(8)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000).hex()
    return f"{salt}${digest}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored or "$" not in stored:
        return False
    salt, _ = stored.split("$", 1)
    return hmac.compare_digest(hash_password(password, salt), stored)


def create_token(account_id: str, role: str, secret: str, expires_hours: int = 24) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {"id": account_id, "role": role, "iat": now, "exp": now + datetime.timedelta(hours=expires_hours)}
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_token(token: str, secret: str) -> Principal:
    """Raises jwt.InvalidTokenError for a bad, expired or incomplete token."""
    payload = jwt.decode(token, secret, algorithms=["HS256"])
    if "id" not in payload or "role" not in payload:
        raise jwt.InvalidTokenError("token missing id or role")
    return Principal(id=str(payload["id"]), role=payload["role"])


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

def optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[Principal]:
    """Principal for a valid bearer token, None when no token was sent."""
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials, request.app.state.settings.jwt_secret)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")


def current_principal(principal: Optional[Principal] = Depends(optional_principal)) -> Principal:
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Access denied. No token provided.")
    return principal


def require_role(role: str):
    """Dependency factory restricting an endpoint to one role."""
    def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if principal.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {principal.role} role cannot access this resource.",
            )
        return principal
    return dependency


require_staff = require_role(ROLE_STAFF)
require_patient = require_role(ROLE_PATIENT)
