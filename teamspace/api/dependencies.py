from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from teamspace.db.session import SessionAsync
from teamspace.models.user import User
from teamspace.core.config import settings
from teamspace.core.errors import Unauthenticated
from teamspace.core.security import decode_access_token
from teamspace.services.notifications import NotificationSender, build_notification_sender

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/token",
    description="Authentication with email and password",
    auto_error=False,
)

REVOKED_KEY_PREFIX = "revoked:"


async def get_db():
    async with SessionAsync() as session:
        yield session


async def get_redis():
    redis = aioredis.from_url(settings.REDIS_URL)
    try:
        yield redis
    finally:
        await redis.aclose()


def get_notification_sender() -> NotificationSender:
    return build_notification_sender()


def get_session_token(request: Request, bearer: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Bearer header first, then the session cookie set by /api/auth/login."""
    return bearer or request.cookies.get(settings.SESSION_COOKIE_NAME)


async def is_token_revoked(redis, jti: str) -> bool:
    return bool(await redis.exists(f"{REVOKED_KEY_PREFIX}{jti}"))


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
) -> User:
    if not token:
        raise Unauthenticated()
    try:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
        jti = payload.get("jti")
        if user_id is None or jti is None:
            raise Unauthenticated()
    except JWTError:
        raise Unauthenticated()

    if await is_token_revoked(redis, jti):
        raise Unauthenticated()

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if not user:
        raise Unauthenticated()
    return user


async def get_optional_user(
    token: Optional[str] = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
) -> Optional[User]:
    """Same as get_current_user but returns None instead of raising 401."""
    try:
        return await get_current_user(token=token, db=db, redis=redis)
    except Unauthenticated:
        return None

# ==================== Permission Dependencies ====================

from teamspace.core.errors import InsufficientRole
from teamspace.core.permissions import has_permission, Resource, Action
from teamspace.services.authorization import MembershipContext, authorize


async def get_membership_context(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MembershipContext:
    """
    Resolve the current user's membership in organization `organization_id`.

    The owner is always resolved as ADMIN.

    Raises:
        NotFound 404: organization does not exist
        NotAMember 403: user does not belong to the organization
    """
    return await authorize(db, current_user, organization_id)


def require_permission(resource: Resource, action: Action):
    """
    Factory to create a dependency that checks if user has permission.

    Usage:
        @router.patch("/{organization_id}")
        async def update_organization(
            organization_id: int,
            context: MembershipContext = Depends(require_permission(Resource.ORGANIZATION, Action.UPDATE)),
            db: AsyncSession = Depends(get_db)
        ):
            # Only roles with ORGANIZATION:UPDATE permission get here
            ...
    """
    async def permission_checker(
        context: MembershipContext = Depends(get_membership_context)
    ) -> MembershipContext:
        if not has_permission(context.role, resource, action):
            raise InsufficientRole()
        return context

    return permission_checker
