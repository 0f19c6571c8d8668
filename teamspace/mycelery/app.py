from celery import Celery

from teamspace.core.config import settings

celery_app = Celery(
    "teamspace",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["teamspace.mycelery.worker"],
)

celery_app.conf.beat_schedule = {
    "purge-expired-invitations": {
        "task": "purge_expired_invitations",
        "schedule": float(settings.INVITATION_PURGE_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
