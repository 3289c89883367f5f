from datetime import datetime
from typing import Callable

from fastapi import Depends

from taskmaster.db.firestore import get_firestore
from .config import ReminderSettings, get_settings
from .repository import FirestoreReminderRepository
from .window import utcnow


def get_repository_provider(
    settings: ReminderSettings = Depends(get_settings),
) -> Callable[[], FirestoreReminderRepository]:
    # Resolved inside the handler so Firebase init failures become a 500 body, not a crash
    return lambda: FirestoreReminderRepository(
        get_firestore(settings.FIREBASE_PROJECT_ID, settings.FIREBASE_CREDENTIALS_JSON)
    )


def get_clock() -> Callable[[], datetime]:
    return utcnow
