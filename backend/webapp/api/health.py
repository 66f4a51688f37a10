"""Health check endpoint."""
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webapp.constants import NO_CACHE_HEADERS
from webapp.database import get_db
from webapp.models import HealthCheck
from webapp.utils import db as db_utils
from webapp.utils.logger import logger

router = APIRouter(tags=["health"])


def _empty(status_code: int) -> Response:
    return Response(status_code=status_code, headers=NO_CACHE_HEADERS)


@router.get("/healthz")
async def health_check(request: Request, db: Session = Depends(get_db)) -> Response:
    """
    Record a health check row.

    Returns 200 with an empty body when the database accepts the insert,
    400 when the request carries a payload, 503 when the database fails.
    """
    body = await request.body()
    if body or request.query_params:
        logger.warning("GET /healthz - Request with payload rejected")
        return _empty(status.HTTP_400_BAD_REQUEST)

    try:
        db_utils.create(db, HealthCheck())
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"GET /healthz - Health check failed: {e}", exc_info=True)
        return _empty(status.HTTP_503_SERVICE_UNAVAILABLE)

    return _empty(status.HTTP_200_OK)


@router.api_route("/healthz", methods=["POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"], include_in_schema=False)
async def health_check_method_not_allowed(request: Request) -> Response:
    logger.warning(f"{request.method} /healthz - Unsupported HTTP method")
    return _empty(status.HTTP_405_METHOD_NOT_ALLOWED)
