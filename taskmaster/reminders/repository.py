from typing import List, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .models import NotificationDraft, PlanRecord, TaskRecord
from .window import ReminderWindow

TASKS_GROUP = "tasks"
PLANS_GROUP = "plannerEvents"
USERS_COLLECTION = "users"
NOTIFICATIONS_COLLECTION = "notifications"


class FirestoreReminderRepository:
    """Every Firestore read and write the reminder engines perform."""

    def __init__(self, db: firestore.Client):
        self.db = db

    # --- tasks ---

    def get_due_tasks(self, window: ReminderWindow) -> List[TaskRecord]:
        """Single collection-group range query across every user's boards."""
        query = (
            self.db.collection_group(TASKS_GROUP)
            .where(filter=FieldFilter("dueDate", ">", window.now))
            .where(filter=FieldFilter("dueDate", "<=", window.end))
        )
        return [
            TaskRecord.from_document(snap.id, snap.reference.path, snap.to_dict() or {})
            for snap in query.stream()
        ]

    def list_tasks(self) -> List[TaskRecord]:
        return [
            TaskRecord.from_document(snap.id, snap.reference.path, snap.to_dict() or {})
            for snap in self.db.collection_group(TASKS_GROUP).stream()
        ]

    def mark_task_reminded(self, task: TaskRecord) -> None:
        self.db.document(task.path).update({"emailReminderSent": True})

    # --- planner events ---

    def get_due_plans(self, window: ReminderWindow) -> List[PlanRecord]:
        query = (
            self.db.collection_group(PLANS_GROUP)
            .where(filter=FieldFilter("start", ">", window.now))
            .where(filter=FieldFilter("start", "<=", window.end))
            .where(filter=FieldFilter("upcomingEmailSent", "==", False))
        )
        return [
            PlanRecord.from_document(snap.id, snap.reference.path, snap.to_dict() or {})
            for snap in query.stream()
        ]

    def list_plans(self) -> List[PlanRecord]:
        return [
            PlanRecord.from_document(snap.id, snap.reference.path, snap.to_dict() or {})
            for snap in self.db.collection_group(PLANS_GROUP).stream()
        ]

    def mark_plan_reminded(self, plan: PlanRecord) -> None:
        self.db.document(plan.path).update({"upcomingEmailSent": True})

    # --- users ---

    def get_user_email(self, user_id: str) -> Optional[str]:
        snap = self.db.collection(USERS_COLLECTION).document(user_id).get()
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        return data.get("email") or None

    def create_notification(self, user_id: str, draft: NotificationDraft) -> None:
        (
            self.db.collection(USERS_COLLECTION)
            .document(user_id)
            .collection(NOTIFICATIONS_COLLECTION)
            .add(
                {
                    "title": draft.title,
                    "message": draft.message,
                    "type": draft.type,
                    "read": False,
                    "createdAt": firestore.SERVER_TIMESTAMP,
                }
            )
        )
