"""
Response schemas for the diagnostic window endpoints.

Field names follow the web app's camelCase JSON.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TaskWindowRow(_CamelModel):
    id: str
    path: str
    title: Optional[str] = None
    status: Optional[str] = None
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    email_reminder_sent: bool = Field(default=False, alias="emailReminderSent")
    due_iso: str = Field(alias="dueIso")
    in_window: bool = Field(alias="inWindow")


class DeadlineWindowReport(_CamelModel):
    now_iso: str = Field(alias="nowIso")
    window_end_iso: str = Field(alias="windowEndIso")
    total_tasks: int = Field(alias="totalTasks")
    tasks: List[TaskWindowRow] = Field(default_factory=list)


class PlanWindowRow(_CamelModel):
    id: str
    path: str
    title: Optional[str] = None
    agenda: Optional[str] = None
    where: Optional[str] = None
    upcoming_email_sent: bool = Field(default=False, alias="upcomingEmailSent")
    start_iso: str = Field(alias="startIso")
    in_window: bool = Field(alias="inWindow")


class PlanWindowReport(_CamelModel):
    now_iso: str = Field(alias="nowIso")
    window_end_iso: str = Field(alias="windowEndIso")
    total_plans: int = Field(alias="totalPlans")
    plans: List[PlanWindowRow] = Field(default_factory=list)
