"""Credential store: registration, authentication and profile updates.

Passwords are hashed here, at the service boundary, before a User row is
built. Nothing in this module logs a raw password.
"""
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from webapp.models import User
from webapp.utils import db as db_utils
from webapp.utils.exceptions import DuplicateIdentityError, InvalidCredentialsError
from webapp.utils.hashing import hash_password, verify_password, burn_password_check
from webapp.utils.logger import logger


def normalize_email(email: str) -> str:
    """Usernames are compared case-insensitively."""
    return email.strip().lower()


def register(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    prepare: Optional[Callable[[User], object]] = None,
) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        email: Email address, also used as the login name
        password: Raw password (hashed before persisting)
        first_name: Profile first name
        last_name: Profile last name
        prepare: Called with the new, not yet committed user; whatever it
            sets is stored in the same commit

    Returns:
        The created user, unverified and without a token unless ``prepare``
        assigned one

    Raises:
        DuplicateIdentityError: If a user with this email already exists
    """
    username = normalize_email(email)

    if db_utils.get_by_field(db, User, "username", username):
        raise DuplicateIdentityError()

    user = User(
        first_name=first_name,
        last_name=last_name,
        password_hash=hash_password(password),
        username=username,
        email_verified=False,
    )
    if prepare is not None:
        prepare(user)

    try:
        user = db_utils.create(db, user)
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        db.rollback()
        raise DuplicateIdentityError()

    logger.info(f"Registered user {user.id}")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Resolve an email/password pair to a user.

    Unknown emails still pay for a bcrypt comparison, and both failure
    paths raise the same error.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong
    """
    user = db_utils.get_by_field(db, User, "username", normalize_email(email))

    if user is None:
        burn_password_check(password)
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return user


def update_profile(
    db: Session,
    user: User,
    first_name: str,
    last_name: str,
    password: str,
) -> User:
    """Replace the user's profile fields and password."""
    return db_utils.update(
        db,
        user,
        first_name=first_name,
        last_name=last_name,
        password_hash=hash_password(password),
    )
