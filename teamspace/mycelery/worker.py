import asyncio

from teamspace.mycelery.app import celery_app
from teamspace.db.session import SessionAsync, engine
from teamspace.logging import get_logger
from teamspace.services.invitations import purge_expired_invitations as purge_expired

logger = get_logger("worker")


async def _purge_expired_invitations() -> int:
    try:
        async with SessionAsync() as db:
            return await purge_expired(db)
    finally:
        # Each task run gets its own event loop; pooled connections must not outlive it
        await engine.dispose()


@celery_app.task(name="purge_expired_invitations", max_retries=3)
def purge_expired_invitations():
    """Delete invitations past their expiry. Scheduled by celery beat."""
    try:
        removed = asyncio.run(_purge_expired_invitations())
    except Exception as e:
        logger.error(f"Failed to purge expired invitations: {e}")
        raise purge_expired_invitations.retry(exc=e, countdown=2 ** purge_expired_invitations.request.retries)
    return {"removed": removed}
