"""User API endpoints."""
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webapp.auth.basic import get_current_user
from webapp.config import settings
from webapp.database import get_db
from webapp.dependencies import get_clock, get_publisher
from webapp.models import User
from webapp.schemas import UserCreate, UserUpdate, UserResponse, VerifyResponse
from webapp.schemas.base import parse_payload
from webapp.services import access, credentials, verification
from webapp.services.notifications import NotificationPublisher
from webapp.utils.exceptions import AppException, handle_database_error, validation_error
from webapp.utils.logger import logger

router = APIRouter(prefix="/v1/user", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_publisher),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> UserResponse:
    """
    Register a new user and queue the verification email.

    The user and its verification token are stored in a single commit.
    A failure to queue the email is logged; the user is still created.
    """
    now = clock()
    try:
        user = credentials.register(
            db,
            email=request.username,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
            prepare=lambda new_user: verification.assign(new_user, now=now),
        )
    except AppException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"POST /v1/user - Error creating user: {e}", exc_info=True)
        raise handle_database_error(e, "create_user")

    published = await publisher.publish(
        settings.notification_topic,
        {
            "email": user.username,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "token": user.verification_token,
        },
    )
    if not published:
        logger.warning(f"POST /v1/user - Verification email for user {user.id} was not queued")

    return UserResponse.from_orm(user)


@router.get("/verify", response_model=VerifyResponse)
async def verify_email(
    email: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> VerifyResponse:
    """
    Verify an email address with the token from the verification email.

    Calling again after a successful verification also returns 200.
    """
    if not email or not token:
        raise validation_error("Both email and token are required")

    try:
        user = verification.check(db, email, token, now=clock())
    except AppException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"GET /v1/user/verify - Error verifying {email}: {e}", exc_info=True)
        raise handle_database_error(e, "verify_email")

    return VerifyResponse(message="Email verified successfully", email_verified=user.email_verified)


def _update_user(db: Session, user: User, payload: Any) -> Response:
    update = parse_payload(UserUpdate, payload)
    try:
        credentials.update_profile(
            db,
            user,
            first_name=update.first_name,
            last_name=update.last_name,
            password=update.password,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"PUT /v1/user - Error updating user {user.id}: {e}", exc_info=True)
        raise handle_database_error(e, "update_user")

    logger.info(f"User {user.id} updated")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/self", response_model=UserResponse)
async def get_self(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Get the authenticated user."""
    return UserResponse.from_orm(current_user)


@router.put("/self", status_code=status.HTTP_204_NO_CONTENT)
async def update_self(
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Replace the authenticated user's name and password."""
    return _update_user(db, current_user, payload)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Get a user by ID. Users can only read their own record."""
    user = access.authorize_user(db, current_user, user_id)
    return UserResponse.from_orm(user)


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: str,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Replace a user's name and password. Users can only update themselves."""
    user = access.authorize_user(db, current_user, user_id)
    return _update_user(db, user, payload)
