"""
Pydantic projections of the ``users`` table.

The stored password hash is deliberately absent from every model in
this module.  ``UserSummary`` is the compact form embedded in events,
attendees and tasks; ``UserRead`` adds the e-mail address and
``UserProfile`` the creation timestamp.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class UserSummary(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None


class UserRead(UserSummary):
    """Public view of a user returned by login and verify."""

    email: str = Field(..., examples=["ada@example.com"])


class UserProfile(UserRead):
    """Public view returned right after signup."""

    created_at: datetime
