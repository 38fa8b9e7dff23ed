"""
Business logic for events and their attendees.

Events are visible to their owner and to users listed as attendees.
Only the owner may update or delete an event; ``_get_owned_event`` is
the ownership guard both operations go through.  Adding an attendee is
open to any authenticated user.
"""

import logging
import sqlite3
from collections import defaultdict
from typing import Dict, List

from ..core.db import new_id, to_db_datetime, update_row, utc_now
from ..core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..schemas.event import (
    AttendeeCreate,
    AttendeeRead,
    AttendeeStatus,
    CategoryRead,
    EventCounts,
    EventCreate,
    EventDetail,
    EventRead,
    EventSummary,
    EventUpdate,
    EventUpdated,
    EventWithOwner,
)
from ..schemas.user import UserRead
from .task_service import TaskService, count_tasks
from .user_service import load_user_summaries


logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, title, description, location, start_date, end_date, image_url, is_public, owner_id, created_at"
)

# An explicit null for these fields leaves the column unchanged.
NULL_MEANS_UNCHANGED = {"title", "start_date", "end_date", "is_public"}


def event_read(row: sqlite3.Row) -> EventRead:
    return EventRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        location=row["location"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        image_url=row["image_url"],
        is_public=bool(row["is_public"]),
        owner_id=row["owner_id"],
        created_at=row["created_at"],
    )


def _placeholders(values: List[str]) -> str:
    return ", ".join("?" for _ in values)


def load_attendees(conn: sqlite3.Connection, event_ids: List[str]) -> Dict[str, List[AttendeeRead]]:
    """Fetch attendees (with their user) for ``event_ids``, keyed by event id."""
    grouped: Dict[str, List[AttendeeRead]] = defaultdict(list)
    if not event_ids:
        return grouped
    rows = conn.execute(
        f"""
        SELECT id, event_id, user_id, status, created_at FROM event_attendees
        WHERE event_id IN ({_placeholders(event_ids)})
        ORDER BY created_at ASC
        """,
        tuple(event_ids),
    ).fetchall()
    users = load_user_summaries(conn, (row["user_id"] for row in rows))
    for row in rows:
        grouped[row["event_id"]].append(
            AttendeeRead(
                id=row["id"],
                event_id=row["event_id"],
                user_id=row["user_id"],
                status=row["status"],
                created_at=row["created_at"],
                user=users[row["user_id"]],
            )
        )
    return grouped


def load_categories(conn: sqlite3.Connection, event_ids: List[str]) -> Dict[str, List[CategoryRead]]:
    grouped: Dict[str, List[CategoryRead]] = defaultdict(list)
    if not event_ids:
        return grouped
    rows = conn.execute(
        f"""
        SELECT ec.event_id, c.id, c.name, c.color
        FROM event_categories ec JOIN categories c ON c.id = ec.category_id
        WHERE ec.event_id IN ({_placeholders(event_ids)})
        ORDER BY c.name ASC
        """,
        tuple(event_ids),
    ).fetchall()
    for row in rows:
        grouped[row["event_id"]].append(CategoryRead(id=row["id"], name=row["name"], color=row["color"]))
    return grouped


class EventService:
    """Service for managing events.

    Handlers pass the authenticated user's id; it becomes the owner on
    creation and is compared against ``owner_id`` before any mutation.
    """

    @classmethod
    def list_events(cls, conn: sqlite3.Connection, user_id: str) -> List[EventSummary]:
        """Return events owned or attended by ``user_id`` ordered by start date."""
        rows = conn.execute(
            f"""
            SELECT {EVENT_COLUMNS} FROM events
            WHERE owner_id = ?
               OR id IN (SELECT event_id FROM event_attendees WHERE user_id = ?)
            ORDER BY start_date ASC, created_at ASC
            """,
            (user_id, user_id),
        ).fetchall()
        event_ids = [row["id"] for row in rows]
        owners = load_user_summaries(conn, (row["owner_id"] for row in rows))
        attendees = load_attendees(conn, event_ids)
        categories = load_categories(conn, event_ids)
        task_counts = count_tasks(conn, event_ids)
        return [
            EventSummary(
                **event_read(row).model_dump(),
                owner=owners[row["owner_id"]],
                attendees=attendees[row["id"]],
                categories=categories[row["id"]],
                count=EventCounts(tasks=task_counts.get(row["id"], 0)),
            )
            for row in rows
        ]

    @classmethod
    def get_event(cls, conn: sqlite3.Connection, event_id: str) -> EventDetail:
        """Retrieve a single event with owner, attendees, tasks and categories.

        Raises ``NotFoundError`` if the event does not exist.  Any
        authenticated user may read any event.
        """
        row = cls._require(conn, event_id)
        owner = conn.execute(
            "SELECT id, email, name, avatar FROM users WHERE id = ?", (row["owner_id"],)
        ).fetchone()
        return EventDetail(
            **event_read(row).model_dump(),
            owner=UserRead(id=owner["id"], email=owner["email"], name=owner["name"], avatar=owner["avatar"]),
            attendees=load_attendees(conn, [event_id])[event_id],
            tasks=TaskService.list_tasks_by_due_date(conn, event_id),
            categories=load_categories(conn, [event_id])[event_id],
        )

    @classmethod
    def create_event(cls, conn: sqlite3.Connection, data: EventCreate, user_id: str) -> EventWithOwner:
        """Create an event owned by ``user_id``.

        ``title`` and ``start_date`` are required; ``is_public``
        defaults to ``False`` and the other fields to ``None``.
        """
        if not data.title or not data.start_date:
            raise ValidationError("Title and start date are required")

        event_id = new_id()
        conn.execute(
            f"INSERT INTO events ({EVENT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                event_id,
                data.title,
                data.description,
                data.location,
                to_db_datetime(data.start_date),
                to_db_datetime(data.end_date),
                data.image_url,
                1 if data.is_public else 0,
                user_id,
                utc_now(),
            ),
        )
        conn.commit()
        logger.info("User %s created event %s '%s'", user_id, event_id, data.title)
        row = cls._require(conn, event_id)
        owners = load_user_summaries(conn, [user_id])
        return EventWithOwner(**event_read(row).model_dump(), owner=owners[user_id])

    @classmethod
    def update_event(
        cls, conn: sqlite3.Connection, event_id: str, data: EventUpdate, user_id: str
    ) -> EventUpdated:
        """Update an event owned by ``user_id``.

        Only fields present in the body are written.  Raises
        ``NotFoundError`` or ``ForbiddenError`` before anything is
        changed.
        """
        cls._get_owned_event(conn, event_id, user_id, "update")
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key not in NULL_MEANS_UNCHANGED
        }
        update_row(conn, "events", event_id, updates)
        logger.info("User %s updated event %s (%s)", user_id, event_id, ", ".join(updates) or "no fields")

        row = cls._require(conn, event_id)
        owners = load_user_summaries(conn, [row["owner_id"]])
        return EventUpdated(
            **event_read(row).model_dump(),
            owner=owners[row["owner_id"]],
            attendees=load_attendees(conn, [event_id])[event_id],
        )

    @classmethod
    def delete_event(cls, conn: sqlite3.Connection, event_id: str, user_id: str) -> None:
        """Delete an event owned by ``user_id``.

        Tasks, attendees and category links are removed by the
        ``ON DELETE CASCADE`` foreign keys.
        """
        cls._get_owned_event(conn, event_id, user_id, "delete")
        conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        conn.commit()
        logger.info("User %s deleted event %s", user_id, event_id)

    @classmethod
    def add_attendee(cls, conn: sqlite3.Connection, event_id: str, data: AttendeeCreate) -> AttendeeRead:
        """Add a user to an event's attendee list.

        ``status`` defaults to ``PENDING``.  A user can be listed only
        once per event.
        """
        if not data.user_id:
            raise ValidationError("User ID is required")
        cls._require(conn, event_id)
        if not conn.execute("SELECT id FROM users WHERE id = ?", (data.user_id,)).fetchone():
            raise NotFoundError("User not found")

        attendee_id = new_id()
        status = data.status or AttendeeStatus.PENDING
        try:
            conn.execute(
                "INSERT INTO event_attendees (id, event_id, user_id, status, created_at) VALUES (?, ?, ?, ?, ?)",
                (attendee_id, event_id, data.user_id, status.value, utc_now()),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError("User is already an attendee of this event") from e
        logger.info("Added user %s to event %s as %s", data.user_id, event_id, status.value)
        return next(a for a in load_attendees(conn, [event_id])[event_id] if a.id == attendee_id)

    @staticmethod
    def _require(conn: sqlite3.Connection, event_id: str) -> sqlite3.Row:
        row = conn.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        if not row:
            raise NotFoundError("Event not found")
        return row

    @classmethod
    def _get_owned_event(cls, conn: sqlite3.Connection, event_id: str, user_id: str, action: str) -> sqlite3.Row:
        """Load an event and make sure ``user_id`` owns it."""
        row = cls._require(conn, event_id)
        if row["owner_id"] != user_id:
            logger.warning("User %s attempted to %s event %s owned by %s", user_id, action, event_id, row["owner_id"])
            raise ForbiddenError(f"Not authorized to {action} this event")
        return row
