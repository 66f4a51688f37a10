"""Schemas for users."""
from typing import Optional

from pydantic import BaseModel, EmailStr

from webapp.models import User
from webapp.schemas.base import NonEmptyStr, Password, RequestModel
from webapp.utils.serialization import serialize_uuid, serialize_datetime


class UserCreate(RequestModel):
    """Request schema for POST /v1/user."""
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    password: Password
    username: EmailStr


class UserUpdate(RequestModel):
    """Request schema for PUT /v1/user/self and /v1/user/{id}. All fields required."""
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    password: Password


class UserResponse(BaseModel):
    """Public representation of a user. Never carries the password or token fields."""
    id: str
    first_name: str
    last_name: str
    username: str
    email_verified: bool
    account_created: Optional[str]
    account_updated: Optional[str]

    class Config:
        from_attributes = True

    @classmethod
    def from_orm(cls, obj: User) -> "UserResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            first_name=obj.first_name,
            last_name=obj.last_name,
            username=obj.username,
            email_verified=obj.email_verified,
            account_created=serialize_datetime(obj.account_created),
            account_updated=serialize_datetime(obj.account_updated),
        )


class VerifyResponse(BaseModel):
    """Response schema for GET /v1/user/verify."""
    message: str
    email_verified: bool = True
