"""
Plain records passed between the repository and the scan engines.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .window import coerce_timestamp

TASK_STATUS_DONE = "Done"


def as_text(value: Any) -> Optional[str]:
    """Firestore is schemaless; display fields can come back as numbers or maps."""
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def owner_id_from_path(path: str) -> Optional[str]:
    """users/{uid}/... -> uid"""
    parts = path.split("/")
    if "users" not in parts:
        return None
    idx = parts.index("users")
    if len(parts) > idx + 1 and parts[idx + 1]:
        return parts[idx + 1]
    return None


@dataclass
class TaskRecord:
    id: str
    path: str
    title: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    user_email: Optional[str] = None
    email_reminder_sent: bool = False
    due_raw: Any = None

    @property
    def user_id(self) -> Optional[str]:
        return owner_id_from_path(self.path)

    @property
    def due(self) -> Optional[datetime]:
        return coerce_timestamp(self.due_raw)

    @classmethod
    def from_document(cls, doc_id: str, path: str, data: Dict[str, Any]) -> "TaskRecord":
        return cls(
            id=doc_id,
            path=path,
            title=as_text(data.get("title")),
            status=as_text(data.get("status")),
            priority=as_text(data.get("priority")),
            user_email=as_text(data.get("userEmail")),
            email_reminder_sent=bool(data.get("emailReminderSent")),
            due_raw=data.get("dueDate"),
        )


@dataclass
class PlanRecord:
    id: str
    path: str
    title: Optional[str] = None
    agenda: Optional[str] = None
    where: Optional[str] = None
    upcoming_email_sent: bool = False
    start_raw: Any = None

    @property
    def user_id(self) -> Optional[str]:
        return owner_id_from_path(self.path)

    @property
    def start(self) -> Optional[datetime]:
        return coerce_timestamp(self.start_raw)

    @classmethod
    def from_document(cls, doc_id: str, path: str, data: Dict[str, Any]) -> "PlanRecord":
        return cls(
            id=doc_id,
            path=path,
            title=as_text(data.get("title")),
            agenda=as_text(data.get("agenda")),
            where=as_text(data.get("where")),
            upcoming_email_sent=bool(data.get("upcomingEmailSent")),
            start_raw=data.get("start"),
        )


@dataclass
class NotificationDraft:
    title: str
    message: str
    type: str = "info"


@dataclass
class SideEffectResult:
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "SideEffectResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, exc: BaseException) -> "SideEffectResult":
        return cls(ok=False, error=str(exc) or exc.__class__.__name__)


@dataclass
class ReminderOutcome:
    """What happened to one reminded document; the three side effects are independent."""

    doc_id: str
    path: str
    email: SideEffectResult
    notification: SideEffectResult
    flag: SideEffectResult

    @property
    def ok(self) -> bool:
        return self.email.ok and self.notification.ok and self.flag.ok


@dataclass
class ScanReport:
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    candidates: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)
    outcomes: List[ReminderOutcome] = field(default_factory=list)
    aborted: Optional[str] = None

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1
