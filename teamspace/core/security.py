"""
Password hashing, session tokens and invitation tokens.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt

from teamspace.core.config import settings

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash stored for the user
        return False


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed session token.

    `data` must carry `sub` (the user id as a string). Optional claims are
    `email`, `name` and `picture`. A unique `jti` is always added so the
    token can be revoked on logout.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = data.copy()
    to_encode.update({
        "iat": now,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_session_token(user) -> str:
    """Issue a session bound to the user's id, email, name and image."""
    claims = {"sub": str(user.id), "email": user.email}
    if user.display_name:
        claims["name"] = user.display_name
    if user.profile_image_url:
        claims["picture"] = user.profile_image_url
    return create_access_token(data=claims)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a session token. Raises jose.JWTError on failure."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


def generate_invitation_token() -> str:
    return secrets.token_urlsafe(32)
