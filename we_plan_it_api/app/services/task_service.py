"""
Business logic for tasks within an event.

Any authenticated user may create, update, toggle or delete any task;
there is no per-task ownership check.  Listings are ordered with
incomplete tasks first, then by priority (highest first), then by due
date (soonest first, undated last).
"""

import logging
import sqlite3
from typing import Dict, List

from ..core.db import new_id, to_db_datetime, update_row, utc_now
from ..core.errors import NotFoundError, ValidationError
from ..schemas.common import Priority
from ..schemas.task import EventBrief, TaskCreate, TaskDetail, TaskRead, TaskUpdate
from .user_service import load_user_summaries


logger = logging.getLogger(__name__)

TASK_COLUMNS = (
    "id, title, description, due_date, priority, is_completed, event_id, assignee_id, created_at"
)

# Ranks ``priority`` by its declaration order in ``Priority``.
PRIORITY_RANK_SQL = "CASE priority {} ELSE 0 END".format(
    " ".join(f"WHEN '{p.value}' THEN {rank}" for rank, p in enumerate(Priority))
)

# An explicit null for these fields leaves the column unchanged.
NULL_MEANS_UNCHANGED = {"title", "priority", "is_completed", "due_date"}


def task_rows_to_models(conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[TaskRead]:
    """Project task rows, embedding each assignee."""
    assignees = load_user_summaries(conn, (row["assignee_id"] for row in rows))
    return [
        TaskRead(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            due_date=row["due_date"],
            priority=row["priority"],
            is_completed=bool(row["is_completed"]),
            event_id=row["event_id"],
            assignee_id=row["assignee_id"],
            created_at=row["created_at"],
            assignee=assignees.get(row["assignee_id"]),
        )
        for row in rows
    ]


def count_tasks(conn: sqlite3.Connection, event_ids: List[str]) -> Dict[str, int]:
    if not event_ids:
        return {}
    placeholders = ", ".join("?" for _ in event_ids)
    rows = conn.execute(
        f"SELECT event_id, COUNT(*) AS count FROM tasks WHERE event_id IN ({placeholders}) GROUP BY event_id",
        tuple(event_ids),
    ).fetchall()
    return {row["event_id"]: row["count"] for row in rows}


class TaskService:
    """Service for creating, listing, updating and toggling tasks."""

    @classmethod
    def list_tasks(cls, conn: sqlite3.Connection, event_id: str) -> List[TaskRead]:
        """Return the tasks of ``event_id`` (empty if the event has none)."""
        rows = conn.execute(
            f"""
            SELECT {TASK_COLUMNS} FROM tasks
            WHERE event_id = ?
            ORDER BY is_completed ASC, {PRIORITY_RANK_SQL} DESC,
                     due_date IS NULL, due_date ASC, created_at ASC
            """,
            (event_id,),
        ).fetchall()
        return task_rows_to_models(conn, rows)

    @classmethod
    def list_tasks_by_due_date(cls, conn: sqlite3.Connection, event_id: str) -> List[TaskRead]:
        """Return the tasks of ``event_id`` ordered by due date only (event detail view)."""
        rows = conn.execute(
            f"""
            SELECT {TASK_COLUMNS} FROM tasks
            WHERE event_id = ?
            ORDER BY due_date IS NULL, due_date ASC, created_at ASC
            """,
            (event_id,),
        ).fetchall()
        return task_rows_to_models(conn, rows)

    @classmethod
    def get_task(cls, conn: sqlite3.Connection, task_id: str) -> TaskDetail:
        """Retrieve a single task with its event and assignee.

        Raises ``NotFoundError`` if the task does not exist.
        """
        row = conn.execute(f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if not row:
            raise NotFoundError("Task not found")
        event = conn.execute("SELECT id, title FROM events WHERE id = ?", (row["event_id"],)).fetchone()
        task = task_rows_to_models(conn, [row])[0]
        return TaskDetail(**task.model_dump(), event=EventBrief(id=event["id"], title=event["title"]))

    @classmethod
    def create_task(cls, conn: sqlite3.Connection, data: TaskCreate) -> TaskRead:
        """Create a task under an existing event.

        Raises
        ------
        ValidationError
            If ``title`` or ``event_id`` is missing.
        NotFoundError
            If the event or the assignee does not exist.
        """
        if not data.title or not data.event_id:
            raise ValidationError("Title and event ID are required")
        if not conn.execute("SELECT id FROM events WHERE id = ?", (data.event_id,)).fetchone():
            raise NotFoundError("Event not found")
        cls._check_assignee(conn, data.assignee_id)

        task_id = new_id()
        conn.execute(
            f"INSERT INTO tasks ({TASK_COLUMNS}) VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?)",
            (
                task_id,
                data.title,
                data.description,
                to_db_datetime(data.due_date),
                (data.priority or Priority.MEDIUM).value,
                data.event_id,
                data.assignee_id,
                utc_now(),
            ),
        )
        conn.commit()
        logger.info("Created task %s in event %s", task_id, data.event_id)
        return cls._fetch(conn, task_id)

    @classmethod
    def update_task(cls, conn: sqlite3.Connection, task_id: str, data: TaskUpdate) -> TaskRead:
        """Apply a partial update; only fields present in the body are written."""
        cls._require(conn, task_id)
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key not in NULL_MEANS_UNCHANGED
        }
        if "assignee_id" in updates:
            cls._check_assignee(conn, updates["assignee_id"])
        update_row(conn, "tasks", task_id, updates)
        return cls._fetch(conn, task_id)

    @classmethod
    def toggle_task(cls, conn: sqlite3.Connection, task_id: str) -> TaskRead:
        """Flip ``is_completed``.

        The read and the write are separate statements without a
        transaction, so two concurrent toggles can both read the same
        value and one flip is lost.
        """
        task = cls._require(conn, task_id)
        update_row(conn, "tasks", task_id, {"is_completed": not task["is_completed"]})
        return cls._fetch(conn, task_id)

    @classmethod
    def delete_task(cls, conn: sqlite3.Connection, task_id: str) -> None:
        cls._require(conn, task_id)
        conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        conn.commit()
        logger.info("Deleted task %s", task_id)

    @staticmethod
    def _require(conn: sqlite3.Connection, task_id: str) -> sqlite3.Row:
        row = conn.execute("SELECT id, is_completed FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if not row:
            raise NotFoundError("Task not found")
        return row

    @staticmethod
    def _check_assignee(conn: sqlite3.Connection, assignee_id) -> None:
        if assignee_id and not conn.execute("SELECT id FROM users WHERE id = ?", (assignee_id,)).fetchone():
            raise NotFoundError("Assignee not found")

    @staticmethod
    def _fetch(conn: sqlite3.Connection, task_id: str) -> TaskRead:
        row = conn.execute(f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return task_rows_to_models(conn, [row])[0]
