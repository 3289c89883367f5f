from typing import Optional

from celery import shared_task

from taskmaster.db.firestore import get_firestore
from .config import ReminderSettings, get_settings
from .repository import FirestoreReminderRepository
from .scanner import DeadlineReminderService, PlanReminderService


def _repository(settings: ReminderSettings) -> FirestoreReminderRepository:
    return FirestoreReminderRepository(
        get_firestore(settings.FIREBASE_PROJECT_ID, settings.FIREBASE_CREDENTIALS_JSON)
    )


def build_deadline_service(settings: Optional[ReminderSettings] = None) -> DeadlineReminderService:
    settings = settings or get_settings()
    return DeadlineReminderService(settings, _repository(settings))


def build_plan_service(settings: Optional[ReminderSettings] = None) -> PlanReminderService:
    settings = settings or get_settings()
    return PlanReminderService(settings, _repository(settings))


@shared_task(name="reminders.send_deadline_reminders")
def send_deadline_reminders_task() -> int:
    """Scan tasks due within the window and remind their owners. Returns number processed."""
    report = build_deadline_service().run()
    return report.processed

@shared_task(name="reminders.send_upcoming_plan_reminders")
def send_upcoming_plan_reminders_task() -> int:
    """Scan planner events starting within the window and remind their owners. Returns number processed."""
    report = build_plan_service().run()
    return report.processed
