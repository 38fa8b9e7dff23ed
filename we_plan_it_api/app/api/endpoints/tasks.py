"""
Task endpoints.

All routes require a bearer token.  Any authenticated user may modify
any task.
"""

import sqlite3
from typing import List

from fastapi import APIRouter, Depends, status

from we_plan_it_api.app.core.db import get_db
from we_plan_it_api.app.core.errors import internal_error
from we_plan_it_api.app.core.security import get_current_user
from we_plan_it_api.app.schemas.common import MessageResponse
from we_plan_it_api.app.schemas.task import TaskCreate, TaskDetail, TaskRead, TaskUpdate
from we_plan_it_api.app.services.task_service import TaskService


router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/event/{event_id}", response_model=List[TaskRead])
def list_event_tasks(event_id: str, conn: sqlite3.Connection = Depends(get_db)) -> List[TaskRead]:
    """List an event's tasks: open before done, then by priority and due date."""
    with internal_error("Error fetching tasks"):
        return TaskService.list_tasks(conn, event_id)


@router.get("/{task_id}", response_model=TaskDetail)
def get_task(task_id: str, conn: sqlite3.Connection = Depends(get_db)) -> TaskDetail:
    with internal_error("Error fetching task"):
        return TaskService.get_task(conn, task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(task: TaskCreate, conn: sqlite3.Connection = Depends(get_db)) -> TaskRead:
    """Create a task; ``title`` and ``eventId`` are required, priority defaults to MEDIUM."""
    with internal_error("Error creating task"):
        return TaskService.create_task(conn, task)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str, updates: TaskUpdate, conn: sqlite3.Connection = Depends(get_db)
) -> TaskRead:
    with internal_error("Error updating task"):
        return TaskService.update_task(conn, task_id, updates)


@router.patch("/{task_id}/toggle", response_model=TaskRead)
def toggle_task(task_id: str, conn: sqlite3.Connection = Depends(get_db)) -> TaskRead:
    """Flip the task's completion flag."""
    with internal_error("Error toggling task"):
        return TaskService.toggle_task(conn, task_id)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: str, conn: sqlite3.Connection = Depends(get_db)) -> MessageResponse:
    with internal_error("Error deleting task"):
        TaskService.delete_task(conn, task_id)
    return MessageResponse(message="Task deleted successfully")
