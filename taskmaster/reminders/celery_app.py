from celery import Celery

from .config import get_settings


settings = get_settings()

celery_app = Celery(
    "reminders",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND or None,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    worker_prefetch_multiplier=1,
    # Hard execution budget per run; the worker kills a run that overshoots it
    task_time_limit=settings.TASK_TIME_LIMIT_SECONDS,
    task_soft_time_limit=max(settings.TASK_TIME_LIMIT_SECONDS - 10, 1),
    include=["taskmaster.reminders.tasks"],
)

# Celery Beat schedule for periodic scanning
celery_app.conf.beat_schedule = {
    "send-deadline-reminders": {
        "task": "reminders.send_deadline_reminders",
        "schedule": settings.DEADLINE_SCAN_INTERVAL_SECONDS,
    },
    "send-upcoming-plan-reminders": {
        "task": "reminders.send_upcoming_plan_reminders",
        "schedule": settings.PLAN_SCAN_INTERVAL_SECONDS,
    },
}
