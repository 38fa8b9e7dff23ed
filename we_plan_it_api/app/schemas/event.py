"""
Pydantic models for event data.

``EventCreate`` and ``EventUpdate`` are request bodies.  Responses use
one of several projections depending on how much related data the
endpoint includes:

* ``EventWithOwner`` - the event and its owner (create).
* ``EventUpdated`` - adds attendees (update).
* ``EventSummary`` - adds attendees, categories and a task count (list).
* ``EventDetail`` - owner with e-mail, attendees, tasks and categories (get).
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import CamelModel
from .task import TaskRead
from .user import UserRead, UserSummary


class AttendeeStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    MAYBE = "MAYBE"


class EventCreate(CamelModel):
    """Schema for creating an event.  ``title`` and ``start_date`` are required."""

    title: Optional[str] = Field(None, examples=["Team offsite"])
    description: Optional[str] = None
    location: Optional[str] = Field(None, examples=["Lisbon"])
    start_date: Optional[datetime] = Field(None, examples=["2026-05-01T09:00:00Z"])
    end_date: Optional[datetime] = None
    image_url: Optional[str] = None
    is_public: Optional[bool] = None


class EventUpdate(EventCreate):
    """Schema for updating an event.

    All fields are optional; only fields present in the body are
    written.
    """


class AttendeeCreate(CamelModel):
    user_id: Optional[str] = None
    status: Optional[AttendeeStatus] = None


class CategoryRead(CamelModel):
    id: str
    name: str
    color: Optional[str] = None


class AttendeeRead(CamelModel):
    id: str
    event_id: str
    user_id: str
    status: AttendeeStatus
    created_at: datetime
    user: UserSummary


class EventRead(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    image_url: Optional[str] = None
    is_public: bool = False
    owner_id: str
    created_at: datetime


class EventWithOwner(EventRead):
    owner: UserSummary


class EventUpdated(EventWithOwner):
    attendees: List[AttendeeRead] = []


class EventCounts(CamelModel):
    tasks: int = 0


class EventSummary(EventUpdated):
    categories: List[CategoryRead] = []
    count: EventCounts = Field(default_factory=EventCounts, alias="_count")


class EventDetail(EventRead):
    owner: UserRead
    attendees: List[AttendeeRead] = []
    tasks: List[TaskRead] = []
    categories: List[CategoryRead] = []
