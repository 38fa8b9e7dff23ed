"""
Pydantic models for tasks within an event.

Every task response embeds its assignee (or ``null``).  The single
task view additionally embeds a brief view of the parent event.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel, Priority
from .user import UserSummary


class TaskCreate(CamelModel):
    """Schema for creating a task.  ``title`` and ``event_id`` are required."""

    title: Optional[str] = Field(None, examples=["Book the venue"])
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    event_id: Optional[str] = None
    assignee_id: Optional[str] = None


class TaskUpdate(CamelModel):
    """Schema for updating a task; only fields present are written."""

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    is_completed: Optional[bool] = None
    assignee_id: Optional[str] = None


class EventBrief(CamelModel):
    id: str
    title: str


class TaskRead(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    is_completed: bool = False
    event_id: str
    assignee_id: Optional[str] = None
    created_at: datetime
    assignee: Optional[UserSummary] = None


class TaskDetail(TaskRead):
    event: EventBrief
