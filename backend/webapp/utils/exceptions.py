"""Custom exceptions and error handling utilities."""
from fastapi import status
from sqlalchemy.exc import IntegrityError
from typing import Optional


class AppException(Exception):
    """Base exception for application errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when request input is malformed or incomplete."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateIdentityError(AppException):
    """Raised when registering an email that already has an account."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User with this email already exists"


class InvalidCredentialsError(AppException):
    """Raised when an email/password pair does not authenticate."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class NotFoundError(AppException):
    """Raised when a resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class UnknownIdentityError(NotFoundError):
    """Raised when no user has the given email address."""
    default_message = "User not found"


class ForbiddenError(AppException):
    """Raised when the actor does not own the target resource."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class TokenMismatchError(AppException):
    """Raised when a verification token does not match the stored one."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid verification token"


class TokenExpiredError(AppException):
    """Raised when a verification token is used after its expiry."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Verification token has expired"


class UpstreamFailureError(AppException):
    """Raised when the database, storage or notification service fails."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service failure"


def handle_database_error(error: Exception, operation: str) -> AppException:
    """
    Convert database errors to application exceptions.

    Args:
        error: The database error
        operation: Description of the operation that failed

    Returns:
        AppException with appropriate status code
    """
    if isinstance(error, AppException):
        return error

    error_message = str(error).lower()

    if isinstance(error, IntegrityError) and ("duplicate" in error_message or "unique" in error_message):
        return ValidationError(f"Resource already exists: {operation}")

    # Default to 500 for unknown database errors
    return UpstreamFailureError(f"Database error during {operation}")


def not_found_error(resource: str, identifier: Optional[str] = None) -> NotFoundError:
    """
    Create a standardized 404 error.

    Args:
        resource: Name of the resource (e.g., "Product", "Image")
        identifier: Optional identifier that was not found

    Returns:
        NotFoundError
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return NotFoundError(message)


def validation_error(message: str) -> ValidationError:
    """Create a standardized 400 validation error."""
    return ValidationError(message)


def forbidden_error(message: str = "Access denied") -> ForbiddenError:
    """Create a standardized 403 forbidden error."""
    return ForbiddenError(message)

