"""
auth.py — Bearer token identity for the API
Tokens are issued by the login service; here they are only verified and
turned into a user id, plus an admin gate for the diagnostics routes.
"""

import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from database import get_db
from models.user import User


def create_token(data: dict, expires_in: timedelta | None = None) -> str:
    claims = dict(data)
    claims["exp"] = datetime.now(timezone.utc) + (expires_in or timedelta(hours=JWT_EXPIRY_HOURS))
    claims["jti"] = uuid.uuid4().hex
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decoded claims, or None if the signature or expiry check fails."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> int:
    """FastAPI dependency — user id from `Authorization: Bearer <jwt>`, else 401."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Missing or invalid Authorization header")

    payload = verify_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        return int(payload["user_id"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Token payload missing required claims")


def is_admin(db: Session, user_id: int) -> bool:
    user = db.query(User).filter_by(id=user_id).first()
    return bool(user and user.is_admin)


async def require_admin(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)) -> int:
    if not is_admin(db, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return user_id
