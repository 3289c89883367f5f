"""
Reminder scan engines.

Each run computes a window from the current time, pulls the candidates with a
single collection-group query and, for every eligible document, fires three
independent side effects in parallel:

- send the reminder email
- write an in-app notification for the owner
- flag the document so later runs skip it

A failing side effect is logged and recorded on the ``ReminderOutcome`` but
never stops the other two, so a task whose email bounced is still flagged as
reminded. Errors outside the per-document work (the query, most notably) are
logged and re-raised for the scheduler.
"""
import abc
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from .config import ReminderSettings
from .email import (
    EmailDeliveryError,
    EmailMessage,
    SendGridClient,
    plan_reminder_html,
    plan_reminder_subject,
    task_reminder_html,
    task_reminder_subject,
)
from .metrics import (
    candidates_skipped_total,
    emails_failed_total,
    emails_sent_total,
    notifications_created_total,
    scan_failures_total,
    scans_total,
)
from .models import (
    TASK_STATUS_DONE,
    NotificationDraft,
    PlanRecord,
    ReminderOutcome,
    ScanReport,
    SideEffectResult,
    TaskRecord,
    as_text,
)
from .window import compute_window, format_due_time, format_plan_time, isoformat_utc, utcnow

logger = logging.getLogger(__name__)

EMAIL_NOT_CONFIGURED = "email_not_configured"

# (doc_id, path, work)
ReminderJob = Tuple[str, str, Callable[[], ReminderOutcome]]


class _ReminderEngine(abc.ABC):
    kind = "reminder"
    tag = "[Reminders]"

    def __init__(
        self,
        settings: ReminderSettings,
        repository,
        email_client=None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings
        self.repository = repository
        self.email_client = email_client
        self.clock = clock

    def _get_email_client(self):
        if self.email_client is None:
            self.email_client = SendGridClient(
                api_key=self.settings.SENDGRID_API_KEY,
                api_url=self.settings.SENDGRID_API_URL,
                timeout=self.settings.EMAIL_TIMEOUT_SECONDS,
            )
        return self.email_client

    def _skip(self, report: ScanReport, reason: str) -> None:
        report.skip(reason)
        candidates_skipped_total.labels(self.kind, reason).inc()

    # --- side effects ---

    def _send_email(self, message: EmailMessage) -> None:
        try:
            self._get_email_client().send(message)
        except EmailDeliveryError as e:
            logger.error("❌ %s SendGrid email failed: %s", self.tag, e.body or str(e))
            emails_failed_total.labels(self.kind).inc()
            raise
        except Exception as e:
            logger.error("❌ %s SendGrid email failed: %r", self.tag, e)
            emails_failed_total.labels(self.kind).inc()
            raise
        logger.info('📧 %s Reminder email sent to %s: "%s"', self.tag, message.to, message.subject)
        emails_sent_total.labels(self.kind).inc()

    def _create_notification(self, user_id: Optional[str], draft: NotificationDraft) -> None:
        if not user_id:
            raise ValueError("cannot resolve owning user from document path")
        try:
            self.repository.create_notification(user_id, draft)
        except Exception as e:
            logger.error("❌ %s Notification write failed for user %s: %r", self.tag, user_id, e)
            raise
        notifications_created_total.labels(self.kind).inc()

    def _mark(self, path: str, mark: Callable[[], None]) -> None:
        try:
            mark()
        except Exception as e:
            logger.error("❌ %s Could not flag %s as reminded: %r", self.tag, path, e)
            raise

    def _run_side_effects(
        self,
        doc_id: str,
        path: str,
        send: Callable[[], None],
        notify: Callable[[], None],
        mark: Callable[[], None],
    ) -> ReminderOutcome:
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix=f"{self.kind}-{doc_id}") as pool:
            futures: Dict[str, Future] = {
                "email": pool.submit(send),
                "notification": pool.submit(notify),
                "flag": pool.submit(mark),
            }
        # leaving the with-block joins all three
        results = {name: _settle(f) for name, f in futures.items()}
        return ReminderOutcome(doc_id=doc_id, path=path, **results)

    def _guarded(self, doc_id: str, path: str, work: Callable[[], ReminderOutcome]) -> ReminderOutcome:
        # a bad document (unexpected field types, template errors) fails alone
        try:
            return work()
        except Exception as e:
            logger.exception("❌ %s Could not process %s", self.tag, path)
            failed = SideEffectResult.failure(e)
            return ReminderOutcome(doc_id=doc_id, path=path, email=failed, notification=failed, flag=failed)

    def _process_all(self, jobs: List[ReminderJob]) -> List[ReminderOutcome]:
        """Start every job at once unless MAX_CONCURRENT_REMINDERS sets a cap; wait for all."""
        if not jobs:
            return []
        cap = self.settings.MAX_CONCURRENT_REMINDERS
        workers = len(jobs) if cap is None else min(cap, len(jobs))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=self.kind) as pool:
            futures = [pool.submit(self._guarded, doc_id, path, work) for doc_id, path, work in jobs]
        return [f.result() for f in futures]

    # --- run ---

    def run(self) -> ScanReport:
        report = ScanReport()
        try:
            if not self.settings.email_configured:
                logger.error(
                    "❌ %s SendGrid API key or sender email missing. Skipping email sending for this run.",
                    self.tag,
                )
                report.aborted = EMAIL_NOT_CONFIGURED
                return report

            scans_total.labels(self.kind).inc()
            return self._scan(report)
        except Exception:
            logger.exception("❌ %s run failed", self.tag)
            scan_failures_total.labels(self.kind).inc()
            raise

    @abc.abstractmethod
    def _scan(self, report: ScanReport) -> ScanReport:
        """Query the window, filter candidates and fill in the report."""


class DeadlineReminderService(_ReminderEngine):
    """Emails owners of tasks that fall due within the next window."""

    kind = "deadline"
    tag = "[Deadlines]"

    def _scan(self, report: ScanReport) -> ScanReport:
        window = compute_window(self.clock(), self.settings.DEADLINE_WINDOW_MINUTES)
        report.window_start, report.window_end = window.now, window.end
        logger.info(
            "🔍 %s Checking tasks due between now and +%s minutes | now=%s window_end=%s",
            self.tag,
            self.settings.DEADLINE_WINDOW_MINUTES,
            isoformat_utc(window.now),
            isoformat_utc(window.end),
        )

        tasks = self.repository.get_due_tasks(window)
        report.candidates = len(tasks)
        logger.info("📊 %s Task query returned %s docs", self.tag, len(tasks))

        if not tasks:
            logger.info("✅ %s No tasks due within the reminder window.", self.tag)
            return report

        jobs: List[ReminderJob] = []
        for task in tasks:
            logger.info(
                "🔎 %s Candidate task | id=%s title=%r status=%s user_email=%s reminded=%s due=%r",
                self.tag,
                task.id,
                task.title,
                task.status,
                task.user_email,
                task.email_reminder_sent,
                task.due_raw,
            )
            if task.status == TASK_STATUS_DONE:
                self._skip(report, "done")
                continue
            if task.email_reminder_sent:
                self._skip(report, "already_sent")
                continue
            if not task.user_email:
                logger.warning("⚠️ %s Task %s has no userEmail, skipping reminder.", self.tag, task.id)
                self._skip(report, "no_email")
                continue
            due = task.due
            if due is None:
                logger.warning("⚠️ %s Task %s has an unreadable dueDate %r, skipping.", self.tag, task.id, task.due_raw)
                self._skip(report, "bad_due_date")
                continue

            jobs.append((task.id, task.path, _bind(self._remind, task, due)))

        report.outcomes = self._process_all(jobs)
        logger.info("✅ %s All task reminders processed. Count = %s", self.tag, report.processed)
        return report

    def _remind(self, task: TaskRecord, due: datetime) -> ReminderOutcome:
        formatted = format_due_time(due, self.settings.DISPLAY_TIMEZONE)
        title = as_text(task.title) or ""
        message = EmailMessage(
            to=task.user_email,
            from_email=self.settings.SENDER_EMAIL,
            from_name=self.settings.APP_NAME,
            subject=task_reminder_subject(title),
            html=task_reminder_html(self.settings.APP_NAME, title, formatted, as_text(task.status), as_text(task.priority)),
        )
        draft = NotificationDraft(
            title="Task Due Soon",
            message=f'"{title}" is due at {formatted}.',
            type="warning",
        )
        return self._run_side_effects(
            task.id,
            task.path,
            send=lambda: self._send_email(message),
            notify=lambda: self._create_notification(task.user_id, draft),
            mark=lambda: self._mark(task.path, lambda: self.repository.mark_task_reminded(task)),
        )


class PlanReminderService(_ReminderEngine):
    """Emails owners of planner events starting within the next day."""

    kind = "planner"
    tag = "[Planner]"

    def _scan(self, report: ScanReport) -> ScanReport:
        window = compute_window(self.clock(), self.settings.PLAN_WINDOW_HOURS * 60)
        report.window_start, report.window_end = window.now, window.end
        logger.info(
            "🔍 %s Checking planner events starting between now and +%s hours | now=%s window_end=%s",
            self.tag,
            self.settings.PLAN_WINDOW_HOURS,
            isoformat_utc(window.now),
            isoformat_utc(window.end),
        )

        plans = self.repository.get_due_plans(window)
        report.candidates = len(plans)
        logger.info("📊 %s Planner query returned %s docs", self.tag, len(plans))

        if not plans:
            logger.info("✅ %s No upcoming plans within the reminder window.", self.tag)
            return report

        jobs: List[ReminderJob] = []
        for plan in plans:
            logger.info(
                "🔎 %s Candidate plan | id=%s title=%r where=%r reminded=%s start=%r",
                self.tag,
                plan.id,
                plan.title,
                plan.where,
                plan.upcoming_email_sent,
                plan.start_raw,
            )
            start = plan.start
            if start is None:
                logger.warning("⚠️ %s Plan %s has invalid start date, skipping.", self.tag, plan.id)
                self._skip(report, "bad_start")
                continue

            user_id = plan.user_id
            if not user_id:
                logger.warning("⚠️ %s Could not determine userId from path %s, skipping.", self.tag, plan.path)
                self._skip(report, "no_owner")
                continue

            user_email = self.repository.get_user_email(user_id)
            if not user_email:
                logger.warning("⚠️ %s User %s has no email, skipping plan %s.", self.tag, user_id, plan.id)
                self._skip(report, "no_email")
                continue

            jobs.append((plan.id, plan.path, _bind(self._remind, plan, start, user_id, user_email)))

        report.outcomes = self._process_all(jobs)
        logger.info("✅ %s All upcoming plan reminders processed. Count = %s", self.tag, report.processed)
        return report

    def _remind(self, plan: PlanRecord, start: datetime, user_id: str, user_email: str) -> ReminderOutcome:
        title = as_text(plan.title) or "Upcoming plan"
        formatted = format_plan_time(start, self.settings.DISPLAY_TIMEZONE)
        message = EmailMessage(
            to=user_email,
            from_email=self.settings.SENDER_EMAIL,
            from_name=self.settings.APP_NAME,
            subject=plan_reminder_subject(title),
            html=plan_reminder_html(self.settings.APP_NAME, title, formatted, as_text(plan.agenda) or "", as_text(plan.where) or ""),
        )
        draft = NotificationDraft(
            title="Upcoming Plan",
            message=f'"{title}" is scheduled at {formatted}.',
            type="info",
        )
        return self._run_side_effects(
            plan.id,
            plan.path,
            send=lambda: self._send_email(message),
            notify=lambda: self._create_notification(user_id, draft),
            mark=lambda: self._mark(plan.path, lambda: self.repository.mark_plan_reminded(plan)),
        )


def _bind(fn, *args) -> Callable[[], ReminderOutcome]:
    return lambda: fn(*args)


def _settle(future: Future) -> SideEffectResult:
    exc = future.exception()
    if exc is not None:
        return SideEffectResult.failure(exc)
    return SideEffectResult.success()
