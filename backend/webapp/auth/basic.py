"""HTTP Basic authentication."""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from webapp.database import get_db
from webapp.models import User
from webapp.services import credentials
from webapp.utils.exceptions import InvalidCredentialsError

security = HTTPBasic(auto_error=False)


def get_current_user(
    basic: Optional[HTTPBasicCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the Basic credentials (email, password) to a user.

    Raises:
        InvalidCredentialsError: If credentials are missing or don't match
    """
    if basic is None:
        raise InvalidCredentialsError("Authentication required")

    return credentials.authenticate(db, basic.username, basic.password)
