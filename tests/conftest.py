import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from taskmaster.reminders.config import ReminderSettings
from taskmaster.reminders.email import EmailDeliveryError
from taskmaster.reminders.models import NotificationDraft, PlanRecord, TaskRecord
from taskmaster.reminders.window import ReminderWindow

NOW = datetime(2026, 10, 18, 7, 0, tzinfo=timezone.utc)


class InMemoryReminderRepository:
    """Stands in for Firestore; applies the same filters the real queries do."""

    def __init__(self):
        self.tasks: Dict[str, TaskRecord] = {}
        self.plans: Dict[str, PlanRecord] = {}
        self.user_emails: Dict[str, str] = {}
        self.notifications: List[tuple] = []
        self.fail_notifications = False
        self.fail_marks = False
        self.fail_queries = False

    def add_task(self, task_id: str, uid: str = "u1", board: str = "b1", **fields) -> TaskRecord:
        path = f"users/{uid}/boards/{board}/tasks/{task_id}"
        task = TaskRecord(id=task_id, path=path, **fields)
        self.tasks[path] = task
        return task

    def add_plan(self, plan_id: str, uid: str = "u1", **fields) -> PlanRecord:
        path = f"users/{uid}/plannerEvents/{plan_id}"
        plan = PlanRecord(id=plan_id, path=path, **fields)
        self.plans[path] = plan
        return plan

    def get_due_tasks(self, window: ReminderWindow) -> List[TaskRecord]:
        if self.fail_queries:
            raise RuntimeError("query failed")
        return [t for t in self.tasks.values() if window.contains(t.due)]

    def list_tasks(self) -> List[TaskRecord]:
        if self.fail_queries:
            raise RuntimeError("query failed")
        return list(self.tasks.values())

    def mark_task_reminded(self, task: TaskRecord) -> None:
        if self.fail_marks:
            raise RuntimeError("update failed")
        self.tasks[task.path].email_reminder_sent = True

    def get_due_plans(self, window: ReminderWindow) -> List[PlanRecord]:
        if self.fail_queries:
            raise RuntimeError("query failed")
        return [p for p in self.plans.values() if window.contains(p.start) and not p.upcoming_email_sent]

    def list_plans(self) -> List[PlanRecord]:
        if self.fail_queries:
            raise RuntimeError("query failed")
        return list(self.plans.values())

    def mark_plan_reminded(self, plan: PlanRecord) -> None:
        if self.fail_marks:
            raise RuntimeError("update failed")
        self.plans[plan.path].upcoming_email_sent = True

    def get_user_email(self, user_id: str) -> Optional[str]:
        return self.user_emails.get(user_id)

    def create_notification(self, user_id: str, draft: NotificationDraft) -> None:
        if self.fail_notifications:
            raise RuntimeError("notification write failed")
        self.notifications.append((user_id, draft))


class FakeEmailClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.attempts = 0
        self._lock = threading.Lock()

    def send(self, message) -> None:
        with self._lock:
            self.attempts += 1
        if self.fail:
            raise EmailDeliveryError("SendGrid error 403", status_code=403, body={"errors": [{"message": "forbidden"}]})
        self.sent.append(message)


@pytest.fixture
def settings() -> ReminderSettings:
    return ReminderSettings(
        _env_file=None,
        SENDGRID_API_KEY="SG.test-key",
        SENDER_EMAIL="reminders@taskmaster.test",
        DISPLAY_TIMEZONE="Asia/Manila",
        METRICS_ENABLED=False,
    )


@pytest.fixture
def unconfigured_settings() -> ReminderSettings:
    return ReminderSettings(
        _env_file=None,
        SENDGRID_API_KEY="",
        SENDER_EMAIL="",
        METRICS_ENABLED=False,
    )


@pytest.fixture
def repo() -> InMemoryReminderRepository:
    return InMemoryReminderRepository()


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def clock():
    return lambda: NOW


def minutes(n: int) -> datetime:
    return NOW + timedelta(minutes=n)
