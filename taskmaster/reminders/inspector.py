"""
Read-only window diagnostics.

These recompute the same window the scan engines use and test every stored
document against it, ignoring status, reminded flag and email filters, so an
operator can compare the raw window math with what a run actually selected.
"""
from datetime import datetime
from typing import Callable

from .config import ReminderSettings
from .models import as_text
from .schemas import DeadlineWindowReport, PlanWindowReport, PlanWindowRow, TaskWindowRow
from .window import compute_window, isoformat_utc, utcnow


def inspect_deadline_window(
    settings: ReminderSettings,
    repository,
    clock: Callable[[], datetime] = utcnow,
) -> DeadlineWindowReport:
    window = compute_window(clock(), settings.DEADLINE_WINDOW_MINUTES)

    rows = []
    for task in repository.list_tasks():
        due = task.due
        # No dueIso to report for missing or unreadable dates
        if due is None:
            continue
        rows.append(
            TaskWindowRow(
                id=task.id,
                path=task.path,
                title=as_text(task.title),
                status=as_text(task.status),
                user_email=as_text(task.user_email),
                email_reminder_sent=task.email_reminder_sent,
                due_iso=isoformat_utc(due),
                in_window=window.contains(due),
            )
        )

    return DeadlineWindowReport(
        now_iso=isoformat_utc(window.now),
        window_end_iso=isoformat_utc(window.end),
        total_tasks=len(rows),
        tasks=rows,
    )


def inspect_plan_window(
    settings: ReminderSettings,
    repository,
    clock: Callable[[], datetime] = utcnow,
) -> PlanWindowReport:
    window = compute_window(clock(), settings.PLAN_WINDOW_HOURS * 60)

    rows = []
    for plan in repository.list_plans():
        start = plan.start
        if start is None:
            continue
        rows.append(
            PlanWindowRow(
                id=plan.id,
                path=plan.path,
                title=as_text(plan.title),
                agenda=as_text(plan.agenda),
                where=as_text(plan.where),
                upcoming_email_sent=plan.upcoming_email_sent,
                start_iso=isoformat_utc(start),
                in_window=window.contains(start),
            )
        )

    return PlanWindowReport(
        now_iso=isoformat_utc(window.now),
        window_end_iso=isoformat_utc(window.end),
        total_plans=len(rows),
        plans=rows,
    )
