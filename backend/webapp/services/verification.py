"""Email verification token lifecycle.

A user moves through three states:

    unverified, no token  ->  unverified, token pending  ->  verified

``assign`` performs the first transition at registration, before the user row
is first committed (``issue`` does the same for an existing user). ``check`` performs
the second and is idempotent once the user is verified. Tokens live for
``verification_token_ttl_seconds`` (60s by default) and are valid through the
exact expiry instant.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from webapp.config import settings
from webapp.constants import VerificationState
from webapp.models import User
from webapp.services.credentials import normalize_email
from webapp.utils import db as db_utils
from webapp.utils.clock import utc_now, as_utc
from webapp.utils.exceptions import UnknownIdentityError, TokenMismatchError, TokenExpiredError
from webapp.utils.hashing import generate_verification_token, tokens_match
from webapp.utils.logger import logger


def state_of(user: User) -> str:
    """Return the verification state of a user."""
    if user.email_verified:
        return VerificationState.VERIFIED
    if user.verification_token is None:
        return VerificationState.UNVERIFIED_NO_TOKEN
    return VerificationState.UNVERIFIED_PENDING_TOKEN


def assign(
    user: User,
    now: Optional[datetime] = None,
    ttl_seconds: Optional[int] = None,
) -> str:
    """
    Set a fresh token and its expiry on the user without committing.

    Used at registration so the user row and its token land in one commit.

    Returns:
        The raw token
    """
    now = now or utc_now()
    ttl = settings.verification_token_ttl_seconds if ttl_seconds is None else ttl_seconds
    token = generate_verification_token()

    user.verification_token = token
    user.verification_token_expiry = now + timedelta(seconds=ttl)
    return token


def issue(
    db: Session,
    user: User,
    now: Optional[datetime] = None,
    ttl_seconds: Optional[int] = None,
) -> str:
    """
    Generate a token for an existing user and persist it with its expiry.

    Returns:
        The raw token, to be handed to the notification publisher
    """
    token = assign(user, now=now, ttl_seconds=ttl_seconds)
    db_utils.update(db, user)
    logger.info(f"Issued verification token for user {user.id}")
    return token


def check(db: Session, email: str, token: str, now: Optional[datetime] = None) -> User:
    """
    Verify a user's email address with the token they were sent.

    Raises:
        UnknownIdentityError: No user has this email
        TokenMismatchError: The token is not the pending one
        TokenExpiredError: The token expired before this call
    """
    now = now or utc_now()
    user = db_utils.get_by_field(db, User, "username", normalize_email(email))

    if user is None:
        raise UnknownIdentityError()

    if user.email_verified:
        logger.info(f"User {user.id} already verified")
        return user

    if user.verification_token is None or not tokens_match(token, user.verification_token):
        logger.warning(f"Verification token mismatch for user {user.id}")
        raise TokenMismatchError()

    if now > as_utc(user.verification_token_expiry):
        logger.warning(f"Expired verification token used for user {user.id}")
        raise TokenExpiredError()

    user = db_utils.update(
        db,
        user,
        email_verified=True,
        verification_token=None,
        verification_token_expiry=None,
    )
    logger.info(f"User {user.id} verified")
    return user
