"""
    Authentication Endpoints

    Registration, credential checks and session handling. Sessions are signed
    JWTs carrying the user's id, email, name and image; they are accepted from
    the Authorization header or from the session cookie set by /login.
    Endpoints:
    - /register: Creates a user with a bcrypt-hashed password.
    - /token: OAuth2 password flow (used by the Swagger "Authorize" button).
    - /login: JSON credential check, returns a token and sets the session cookie.
    - /me: Returns the authenticated user.
    - /session: Returns the current session, or a null user when signed out.
    - /logout: Revokes the session token and clears the cookie.
    Failed credential checks never reveal whether the email is registered.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from teamspace.api.dependencies import (
    REVOKED_KEY_PREFIX,
    get_current_user,
    get_db,
    get_optional_user,
    get_redis,
    get_session_token,
)
from teamspace.core.config import settings
from teamspace.core.errors import Conflict, Unauthenticated
from teamspace.core.security import (
    create_session_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from teamspace.logging import get_logger
from teamspace.models.user import User
from teamspace.schemas.auth import Login, LoginOut, RegisterOut, SessionOut, SessionUser, Token
from teamspace.schemas.user import UserCreate, UserOut

router = APIRouter()
logger = get_logger("auth")

INVALID_CREDENTIALS = "Invalid email or password"


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).filter(User.email == email))
    user = result.scalar_one_or_none()

    # Missing user, credential-less user and wrong password look the same
    if not user or not verify_password(password, user.password):
        raise Unauthenticated(INVALID_CREDENTIALS)
    return user


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    email = user.email.lower()
    result = await db.execute(select(User).filter(User.email == email))
    if result.scalar_one_or_none():
        raise Conflict("User already exists")

    new_user = User(
        email=email,
        password=get_password_hash(user.password),
        display_name=user.display_name or email.split("@")[0],
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("User already exists")
    await db.refresh(new_user)

    logger.great("User registered", user_id=new_user.id)
    return {"message": "User created successfully", "user": new_user}


@router.post("/token", response_model=Token)
async def oauth2_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """
    Standard OAuth2 endpoint, used by Swagger UI's "Authorize" button.

    The OAuth2 `username` field carries the user's email.
    """
    user = await authenticate(db, form_data.username.lower(), form_data.password)
    return {"access_token": create_session_token(user), "token_type": "bearer"}


@router.post("/login", response_model=LoginOut)
async def login(login_data: Login, response: Response, db: AsyncSession = Depends(get_db)):
    """JSON credential check. The token is returned and also set as an HttpOnly cookie."""
    user = await authenticate(db, login_data.email.lower(), login_data.password)
    access_token = create_session_token(user)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.MODE == "production",
        samesite="lax",
    )
    logger.info("User logged in", user_id=user.id)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserOut)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/session", response_model=SessionOut)
async def read_session(current_user: Optional[User] = Depends(get_optional_user)):
    if not current_user:
        return {"user": None}
    return {
        "user": SessionUser(
            id=current_user.id,
            email=current_user.email,
            name=current_user.display_name,
            image=current_user.profile_image_url,
        )
    }


@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    redis=Depends(get_redis),
):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    if not token:
        return {"message": "Logout successful"}

    try:
        payload = decode_access_token(token)
    except JWTError:
        return {"message": "Logout successful"}

    ttl = int(payload["exp"]) - int(datetime.now(timezone.utc).timestamp())
    if ttl > 0 and payload.get("jti"):
        await redis.set(f"{REVOKED_KEY_PREFIX}{payload['jti']}", "revoked", ex=ttl)

    return {"message": "Logout successful"}
