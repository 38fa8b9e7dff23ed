"""
Top-level API router.

Aggregates the domain routers; ``main.create_app`` mounts it under the
``/api`` prefix next to the index router.  Add new domains here.
"""

from fastapi import APIRouter

from .endpoints import auth, events, plans, tasks


router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(plans.router, prefix="/plans", tags=["plans"])
