import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from .config import ReminderSettings, get_settings
from .deps import get_clock, get_repository_provider
from .inspector import inspect_deadline_window, inspect_plan_window
from .schemas import DeadlineWindowReport, PlanWindowReport

logger = logging.getLogger(__name__)

router = APIRouter()


@router.api_route("/debug/deadline-window", methods=["GET", "POST"], response_model=DeadlineWindowReport)
def debug_deadline_window(
    settings: ReminderSettings = Depends(get_settings),
    repository_provider: Callable = Depends(get_repository_provider),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        return inspect_deadline_window(settings, repository_provider(), clock=clock)
    except Exception as e:
        logger.error("❌ [Deadlines] debug window failed: %r", e)
        return PlainTextResponse(str(e), status_code=500)


@router.api_route("/debug/plans-window", methods=["GET", "POST"], response_model=PlanWindowReport)
def debug_plans_window(
    settings: ReminderSettings = Depends(get_settings),
    repository_provider: Callable = Depends(get_repository_provider),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    try:
        return inspect_plan_window(settings, repository_provider(), clock=clock)
    except Exception as e:
        logger.error("❌ [Planner] debug window failed: %r", e)
        return PlainTextResponse(str(e), status_code=500)


@router.get("/health")
def health_check():
    return {"status": "healthy", "service": "reminders"}
