"""
Plan endpoints.

Plans are public: none of these routes requires authentication.
"""

import sqlite3
from typing import List

from fastapi import APIRouter, Depends, status

from we_plan_it_api.app.core.db import get_db
from we_plan_it_api.app.core.errors import internal_error
from we_plan_it_api.app.schemas.common import MessageResponse
from we_plan_it_api.app.schemas.plan import PlanCreate, PlanRead, PlanUpdate
from we_plan_it_api.app.services.plan_service import PlanService


router = APIRouter()


@router.get("", response_model=List[PlanRead])
def list_plans(conn: sqlite3.Connection = Depends(get_db)) -> List[PlanRead]:
    """List all plans, most recently created first."""
    with internal_error("Error fetching plans"):
        return PlanService.list_plans(conn)


@router.get("/{plan_id}", response_model=PlanRead)
def get_plan(plan_id: str, conn: sqlite3.Connection = Depends(get_db)) -> PlanRead:
    with internal_error("Error fetching plan"):
        return PlanService.get_plan(conn, plan_id)


@router.post("", response_model=PlanRead, status_code=status.HTTP_201_CREATED)
def create_plan(plan: PlanCreate, conn: sqlite3.Connection = Depends(get_db)) -> PlanRead:
    """Create a plan; only ``title`` is required."""
    with internal_error("Error creating plan"):
        return PlanService.create_plan(conn, plan)


@router.put("/{plan_id}", response_model=PlanRead)
def update_plan(
    plan_id: str, updates: PlanUpdate, conn: sqlite3.Connection = Depends(get_db)
) -> PlanRead:
    with internal_error("Error updating plan"):
        return PlanService.update_plan(conn, plan_id, updates)


@router.patch("/{plan_id}/toggle", response_model=PlanRead)
def toggle_plan(plan_id: str, conn: sqlite3.Connection = Depends(get_db)) -> PlanRead:
    with internal_error("Error toggling plan"):
        return PlanService.toggle_plan(conn, plan_id)


@router.delete("/{plan_id}", response_model=MessageResponse)
def delete_plan(plan_id: str, conn: sqlite3.Connection = Depends(get_db)) -> MessageResponse:
    with internal_error("Error deleting plan"):
        PlanService.delete_plan(conn, plan_id)
    return MessageResponse(message="Plan deleted successfully")
