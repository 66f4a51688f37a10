"""User model for registered accounts."""
from sqlalchemy import Column, String, DateTime, Boolean, Uuid
import uuid
from webapp.database import Base
from webapp.utils.clock import utc_now


class User(Base):
    """Registered user. The username is the email address."""
    __tablename__ = "users"
    __touch_column__ = "account_updated"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    username = Column(String, unique=True, nullable=False, index=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    verification_token = Column(String, nullable=True)  # Set only while verification is pending
    verification_token_expiry = Column(DateTime(timezone=True), nullable=True)
    account_created = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    account_updated = Column(DateTime(timezone=True), default=utc_now, nullable=False)
