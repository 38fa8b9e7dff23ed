"""Welcome and liveness endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter


router = APIRouter()


@router.get("")
async def welcome() -> Dict[str, str]:
    return {"message": "Welcome to We Plan It API 🎉"}


@router.get("/health")
async def health() -> Dict[str, str]:
    """Liveness probe.  Does not touch the database."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
