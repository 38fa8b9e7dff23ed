"""
Business logic for users: registration, credential checks and the
projections other services embed (owner, assignee, attendee user).
"""

import logging
import sqlite3
from typing import Dict, Iterable, Optional

from ..core.db import new_id, utc_now
from ..core.errors import ConflictError, UnauthenticatedError, ValidationError
from ..core.security import hash_password, verify_password
from ..schemas.auth import LoginRequest, SignupRequest
from ..schemas.user import UserProfile, UserRead, UserSummary


logger = logging.getLogger(__name__)

USER_PUBLIC_COLUMNS = "id, email, name, avatar, created_at"


def user_summary(row: sqlite3.Row) -> UserSummary:
    return UserSummary(id=row["id"], name=row["name"], avatar=row["avatar"])


def user_read(row: sqlite3.Row) -> UserRead:
    return UserRead(id=row["id"], email=row["email"], name=row["name"], avatar=row["avatar"])


def load_user_summaries(conn: sqlite3.Connection, user_ids: Iterable[Optional[str]]) -> Dict[str, UserSummary]:
    """Fetch summaries for ``user_ids`` in one query, keyed by id."""
    ids = sorted({uid for uid in user_ids if uid})
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    rows = conn.execute(
        f"SELECT id, name, avatar FROM users WHERE id IN ({placeholders})", tuple(ids)
    ).fetchall()
    return {row["id"]: user_summary(row) for row in rows}


class UserService:
    """Service for registering and authenticating users.

    Users are never deleted.  The ``password`` column holds a salted
    PBKDF2 hash and is never copied into a response model.
    """

    @classmethod
    def create_user(cls, conn: sqlite3.Connection, data: SignupRequest) -> UserProfile:
        """Register a new user.

        Raises
        ------
        ValidationError
            If ``email``, ``password`` or ``name`` is missing or empty.
        ConflictError
            If the e-mail address is already registered.
        """
        if not data.email or not data.password or not data.name:
            raise ValidationError("All fields are required")

        existing = conn.execute("SELECT id FROM users WHERE email = ?", (data.email,)).fetchone()
        if existing:
            raise ConflictError("Email already in use")

        user_id = new_id()
        created_at = utc_now()
        try:
            conn.execute(
                "INSERT INTO users (id, email, password, name, avatar, created_at) VALUES (?, ?, ?, ?, NULL, ?)",
                (user_id, data.email, hash_password(data.password), data.name, created_at),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            # Another signup for the same address won the race.
            conn.rollback()
            raise ConflictError("Email already in use") from e
        logger.info("Registered user %s", user_id)
        return UserProfile(id=user_id, email=data.email, name=data.name, avatar=None, created_at=created_at)

    @classmethod
    def authenticate(cls, conn: sqlite3.Connection, data: LoginRequest) -> UserRead:
        """Check an e-mail/password pair.

        An unknown address and a wrong password raise the same
        ``UnauthenticatedError`` so callers cannot tell which one failed.
        """
        if not data.email or not data.password:
            raise ValidationError("Email and password are required")

        row = conn.execute(
            f"SELECT {USER_PUBLIC_COLUMNS}, password FROM users WHERE email = ?", (data.email,)
        ).fetchone()
        if not row or not verify_password(data.password, row["password"]):
            raise UnauthenticatedError("Invalid credentials")
        return user_read(row)

    @classmethod
    def get_user(cls, conn: sqlite3.Connection, user_id: str) -> Optional[UserRead]:
        row = conn.execute(f"SELECT {USER_PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        return user_read(row) if row else None
