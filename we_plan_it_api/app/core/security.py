"""
Security helpers for password hashing and bearer token authentication.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random 16-byte salt
per record, stored as ``salthex$hashhex``.  Access tokens are HS256
JSON Web Tokens issued and verified with PyJWT; their payload carries
``userId`` and ``email`` together with the standard ``iat``/``exp``
claims.

``get_current_user`` is the authentication dependency: it rejects a
request with 401 before any handler or database dependency runs when
the ``Authorization`` header is missing or its token does not verify.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, Request
from pydantic import ValidationError as PydanticValidationError

from ..schemas.auth import TokenPayload
from .config import Settings
from .errors import UnauthenticatedError


PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16
BEARER_PREFIX = "Bearer "


def _derive_key(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)


def hash_password(password: str) -> str:
    """Return ``salthex$hashhex`` for ``password`` with a fresh salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    return "$".join((salt.hex(), _derive_key(password, salt).hex()))


def verify_password(password: str, stored: Optional[str]) -> bool:
    """Check ``password`` against a ``hash_password`` result.

    Anything that is not two hex fields separated by ``$`` never matches.
    """
    salt_hex, sep, key_hex = (stored or "").partition("$")
    if not sep:
        return False
    try:
        salt, expected = bytes.fromhex(salt_hex), bytes.fromhex(key_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_derive_key(password, salt), expected)


def create_access_token(
    settings: Settings,
    user_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed token for ``user_id``.

    Parameters
    ----------
    settings : Settings
        Provides the signing secret, algorithm and default lifetime.
    user_id, email : str
        Identity embedded as the ``userId`` and ``email`` claims.
    expires_delta : Optional[timedelta]
        Lifetime of the token.  Defaults to
        ``settings.access_token_expire_days`` days.
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_delta if expires_delta is not None else timedelta(days=settings.access_token_expire_days)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.token_secret, algorithm=settings.algorithm)


def decode_access_token(settings: Settings, token: str) -> TokenPayload:
    """Verify a token's signature and expiry and return its payload.

    Raises
    ------
    UnauthenticatedError
        If the token is malformed, signed with another secret, expired
        or lacks the ``userId``/``email`` claims.
    """
    try:
        claims = jwt.decode(token, settings.token_secret, algorithms=[settings.algorithm])
        return TokenPayload.model_validate(claims)
    except (jwt.InvalidTokenError, PydanticValidationError) as e:
        raise UnauthenticatedError("Invalid or expired token") from e


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> TokenPayload:
    """Dependency that authenticates the request.

    The ``Bearer `` prefix is optional; whatever remains is verified as
    a token, so a header with another scheme fails verification rather
    than counting as absent.  The decoded payload is stored on
    ``request.state.payload`` and returned.  No database access happens
    here; handlers that need the full user record (e.g.
    ``/auth/verify``) load it themselves.
    """
    token = authorization or ""
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    if not token.strip():
        raise UnauthenticatedError("No token provided")
    payload = decode_access_token(request.app.state.settings, token.strip())
    request.state.payload = payload
    return payload
