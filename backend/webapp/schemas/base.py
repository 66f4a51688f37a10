"""Shared schema types and request body parsing."""
from typing import Annotated, Any, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictInt, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from webapp.utils.exceptions import ValidationError
from webapp.utils.hashing import MAX_PASSWORD_BYTES

M = TypeVar("M", bound=BaseModel)


def _fits_bcrypt(value: str) -> str:
    # bcrypt only uses the first 72 bytes and newer releases refuse longer input
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Passwords are hashed exactly as sent; surrounding whitespace is part of the secret
Password = Annotated[str, StringConstraints(min_length=1), AfterValidator(_fits_bcrypt)]
Quantity = Annotated[StrictInt, Field(ge=0)]


class RequestModel(BaseModel):
    """Request body that rejects unknown fields."""
    model_config = ConfigDict(extra="forbid")


def describe_errors(error: PydanticValidationError) -> str:
    """Flatten pydantic errors into one readable message."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()) if p != "body")
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


def parse_payload(schema: Type[M], payload: Any) -> M:
    """
    Validate a raw JSON body against a schema.

    Used by handlers that authorize before validating the body.

    Raises:
        ValidationError: If the body is missing or invalid
    """
    if payload is None:
        raise ValidationError("Request body is required")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e))
