"""
Event endpoints.

Every route requires a bearer token; the router-level dependency
rejects unauthenticated requests before a database connection is
opened.  Update and delete are restricted to the event owner.
"""

import sqlite3
from typing import List

from fastapi import APIRouter, Depends, status

from we_plan_it_api.app.core.db import get_db
from we_plan_it_api.app.core.errors import internal_error
from we_plan_it_api.app.core.security import get_current_user
from we_plan_it_api.app.schemas.auth import TokenPayload
from we_plan_it_api.app.schemas.common import MessageResponse
from we_plan_it_api.app.schemas.event import (
    AttendeeCreate,
    AttendeeRead,
    EventCreate,
    EventDetail,
    EventSummary,
    EventUpdate,
    EventUpdated,
    EventWithOwner,
)
from we_plan_it_api.app.services.event_service import EventService


router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[EventSummary])
def list_events(
    current_user: TokenPayload = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> List[EventSummary]:
    """List events the caller owns or attends, soonest first."""
    with internal_error("Error fetching events"):
        return EventService.list_events(conn, current_user.user_id)


@router.get("/{event_id}", response_model=EventDetail)
def get_event(event_id: str, conn: sqlite3.Connection = Depends(get_db)) -> EventDetail:
    """Retrieve a single event with attendees, tasks and categories."""
    with internal_error("Error fetching event"):
        return EventService.get_event(conn, event_id)


@router.post("", response_model=EventWithOwner, status_code=status.HTTP_201_CREATED)
def create_event(
    event: EventCreate,
    current_user: TokenPayload = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventWithOwner:
    """Create an event owned by the caller.  ``title`` and ``startDate`` are required."""
    with internal_error("Error creating event"):
        return EventService.create_event(conn, event, current_user.user_id)


@router.put("/{event_id}", response_model=EventUpdated)
def update_event(
    event_id: str,
    updates: EventUpdate,
    current_user: TokenPayload = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventUpdated:
    """Update an event (owner only).  Unspecified fields remain unchanged."""
    with internal_error("Error updating event"):
        return EventService.update_event(conn, event_id, updates, current_user.user_id)


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> MessageResponse:
    """Delete an event (owner only) together with its tasks and attendees."""
    with internal_error("Error deleting event"):
        EventService.delete_event(conn, event_id, current_user.user_id)
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/attendees", response_model=AttendeeRead, status_code=status.HTTP_201_CREATED)
def add_attendee(
    event_id: str,
    attendee: AttendeeCreate,
    conn: sqlite3.Connection = Depends(get_db),
) -> AttendeeRead:
    """Add a user to the event with status ``PENDING`` unless another status is given."""
    with internal_error("Error adding attendee"):
        return EventService.add_attendee(conn, event_id, attendee)
