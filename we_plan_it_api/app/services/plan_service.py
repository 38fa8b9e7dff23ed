"""
Business logic for standalone plans.

Plans are not tied to a user or an event and their endpoints require
no authentication.
"""

import logging
import sqlite3
from typing import List

from ..core.db import new_id, to_db_datetime, update_row, utc_now
from ..core.errors import NotFoundError, ValidationError
from ..schemas.common import Priority
from ..schemas.plan import PlanCreate, PlanRead, PlanUpdate


logger = logging.getLogger(__name__)

PLAN_COLUMNS = "id, title, description, due_date, priority, completed, created_at"

# An explicit null for these fields leaves the column unchanged.
NULL_MEANS_UNCHANGED = {"title", "priority", "completed", "due_date"}


def plan_read(row: sqlite3.Row) -> PlanRead:
    return PlanRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        due_date=row["due_date"],
        priority=row["priority"],
        completed=bool(row["completed"]),
        created_at=row["created_at"],
    )


class PlanService:
    """CRUD operations for plans, plus the completion toggle."""

    @classmethod
    def list_plans(cls, conn: sqlite3.Connection) -> List[PlanRead]:
        """Return all plans, newest first."""
        rows = conn.execute(
            f"SELECT {PLAN_COLUMNS} FROM plans ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [plan_read(row) for row in rows]

    @classmethod
    def get_plan(cls, conn: sqlite3.Connection, plan_id: str) -> PlanRead:
        row = conn.execute(f"SELECT {PLAN_COLUMNS} FROM plans WHERE id = ?", (plan_id,)).fetchone()
        if not row:
            raise NotFoundError("Plan not found")
        return plan_read(row)

    @classmethod
    def create_plan(cls, conn: sqlite3.Connection, data: PlanCreate) -> PlanRead:
        """Create a plan.  Priority defaults to MEDIUM, completed to False."""
        if not data.title:
            raise ValidationError("Title is required")
        plan_id = new_id()
        conn.execute(
            f"INSERT INTO plans ({PLAN_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                plan_id,
                data.title,
                data.description,
                to_db_datetime(data.due_date),
                (data.priority or Priority.MEDIUM).value,
                1 if data.completed else 0,
                utc_now(),
            ),
        )
        conn.commit()
        logger.info("Created plan %s '%s'", plan_id, data.title)
        return cls.get_plan(conn, plan_id)

    @classmethod
    def update_plan(cls, conn: sqlite3.Connection, plan_id: str, data: PlanUpdate) -> PlanRead:
        """Apply a partial update; only fields present in the body are written."""
        cls.get_plan(conn, plan_id)
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key not in NULL_MEANS_UNCHANGED
        }
        update_row(conn, "plans", plan_id, updates)
        return cls.get_plan(conn, plan_id)

    @classmethod
    def toggle_plan(cls, conn: sqlite3.Connection, plan_id: str) -> PlanRead:
        """Flip ``completed``.

        Reads the plan, then writes the negated flag in a separate
        statement.  Concurrent toggles of the same plan can lose an
        update.
        """
        plan = cls.get_plan(conn, plan_id)
        update_row(conn, "plans", plan_id, {"completed": not plan.completed})
        return cls.get_plan(conn, plan_id)

    @classmethod
    def delete_plan(cls, conn: sqlite3.Connection, plan_id: str) -> None:
        cls.get_plan(conn, plan_id)
        conn.execute("DELETE FROM plans WHERE id = ?", (plan_id,))
        conn.commit()
        logger.info("Deleted plan %s", plan_id)
