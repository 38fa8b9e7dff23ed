"""Pydantic models for standalone plans."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel, Priority


class PlanCreate(CamelModel):
    title: Optional[str] = Field(None, examples=["Book venue"])
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None


class PlanUpdate(PlanCreate):
    """Partial update; fields absent from the body are left unchanged."""


class PlanRead(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    created_at: datetime
