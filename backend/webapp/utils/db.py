"""Database query utility functions."""
from typing import Optional, TypeVar, Type, Any
from uuid import UUID
from sqlalchemy.orm import Session

from webapp.utils.clock import utc_now
from webapp.utils.exceptions import NotFoundError, ValidationError

T = TypeVar("T")


def parse_uuid(value: str | UUID, label: str = "ID") -> UUID:
    """
    Parse a path/query value into a UUID.

    Raises:
        ValidationError: If the value is not a well-formed UUID
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f"Invalid {label} format")


def get_by_id(
    db: Session,
    model: Type[T],
    id_value: str | UUID,
    error_message: Optional[str] = None,
) -> T:
    """
    Get a model instance by primary key.

    Args:
        db: Database session
        model: SQLAlchemy model class
        id_value: ID value (UUID string or UUID object)
        error_message: Custom error message if not found

    Returns:
        Model instance

    Raises:
        ValidationError: If the ID is malformed
        NotFoundError: If model not found
    """
    id_value = parse_uuid(id_value, f"{model.__name__} ID")

    instance = db.get(model, id_value)
    if instance is None:
        raise NotFoundError(error_message or f"{model.__name__} not found")

    return instance


def get_by_field(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
    error_message: Optional[str] = None,
) -> Optional[T]:
    """
    Get a model instance by a specific field.

    Args:
        db: Database session
        model: SQLAlchemy model class
        field_name: Name of the field to filter by
        field_value: Value to filter by
        error_message: Custom error message if not found (if None, returns None instead of raising)

    Returns:
        Model instance or None
    """
    field = getattr(model, field_name)
    instance = db.query(model).filter(field == field_value).first()

    if not instance and error_message:
        raise NotFoundError(error_message)

    return instance


def create(db: Session, instance: T) -> T:
    """Insert a new row and return it refreshed from the database."""
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


def touch(instance: Any) -> None:
    """Refresh the model's last-updated column, if it declares one."""
    column = getattr(instance, "__touch_column__", None)
    if column:
        setattr(instance, column, utc_now())


def update(db: Session, instance: T, **fields: Any) -> T:
    """
    Apply field changes, touch the last-updated column and commit.

    Every update goes through here so the timestamp is always refreshed.
    """
    for name, value in fields.items():
        setattr(instance, name, value)
    touch(instance)
    db.commit()
    db.refresh(instance)
    return instance


def delete(db: Session, instance: Any) -> None:
    """Delete a row (ORM cascades apply) and commit."""
    db.delete(instance)
    db.commit()
