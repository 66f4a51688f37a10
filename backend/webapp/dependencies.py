"""FastAPI dependencies for the collaborators built at startup."""
from datetime import datetime
from typing import Callable

from fastapi import Request

from webapp.services.notifications import NotificationPublisher
from webapp.services.storage import StorageService
from webapp.utils.exceptions import UpstreamFailureError


def get_storage(request: Request) -> StorageService:
    """Object storage client. Fails the request if storage isn't configured."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise UpstreamFailureError("Object storage is not configured")
    return storage


def get_publisher(request: Request) -> NotificationPublisher:
    return request.app.state.publisher


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock
