"""
Authentication endpoints.

Signup and login are public.  ``/verify`` requires a bearer token and
returns the user it belongs to, so clients can restore a session.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, Request, status

from we_plan_it_api.app.core.db import get_db
from we_plan_it_api.app.core.errors import NotFoundError, internal_error
from we_plan_it_api.app.core.security import create_access_token, get_current_user
from we_plan_it_api.app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    TokenPayload,
    VerifyResponse,
)
from we_plan_it_api.app.services.user_service import UserService


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, conn: sqlite3.Connection = Depends(get_db)) -> SignupResponse:
    """Register a new user.

    Returns 400 when a field is missing or the e-mail is taken.  The
    password hash is never part of the response.
    """
    with internal_error("Error creating user"):
        user = UserService.create_user(conn, data)
    return SignupResponse(user=user)


@router.post("/login", response_model=LoginResponse)
def login(
    data: LoginRequest,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
) -> LoginResponse:
    """Exchange e-mail and password for a bearer token valid for seven days.

    Unknown e-mail and wrong password both answer 401 "Invalid
    credentials".
    """
    with internal_error("Error logging in"):
        user = UserService.authenticate(conn, data)
        token = create_access_token(request.app.state.settings, user.id, user.email)
    logger.info("User %s logged in", user.id)
    return LoginResponse(auth_token=token, user=user)


@router.get("/verify", response_model=VerifyResponse)
def verify(
    current_user: TokenPayload = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> VerifyResponse:
    """Return the user behind the presented token.

    Answers 404 if the user no longer exists.
    """
    with internal_error("Error verifying token"):
        user = UserService.get_user(conn, current_user.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return VerifyResponse(user=user)
