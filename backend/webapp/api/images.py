"""Product image API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webapp.auth.basic import get_current_user
from webapp.config import settings
from webapp.constants import ALLOWED_IMAGE_TYPES
from webapp.database import get_db
from webapp.dependencies import get_storage
from webapp.models import Image, User
from webapp.schemas import ImageResponse
from webapp.services import access
from webapp.services.storage import build_storage_path
from webapp.utils import db as db_utils
from webapp.utils.exceptions import UpstreamFailureError, handle_database_error, validation_error
from webapp.utils.logger import logger

router = APIRouter(prefix="/v1/product/{product_id}/image", tags=["images"])


async def read_limited(upload: UploadFile, limit: int) -> bytes:
    """
    Read an upload, refusing anything larger than ``limit`` bytes.

    Reads at most ``limit + 1`` bytes so an oversized file is never fully
    buffered.
    """
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise validation_error(f"File too large. Maximum size is {limit // (1024 * 1024)}MB")
    return data


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ImageResponse)
async def upload_image(
    product_id: str,
    request: Request,
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ImageResponse:
    """
    Upload an image for a product.

    This endpoint:
    1. Authorizes the caller against the product
    2. Validates the file (content type, size)
    3. Uploads the bytes to object storage
    4. Records the image metadata
    """
    product = access.authorize(db, current_user.id, product_id)

    if image is None:
        raise validation_error("No image file provided")

    content_type = (image.content_type or "").lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        logger.warning(f"Rejected upload of type {content_type!r} for product {product.id}")
        raise validation_error("Invalid file type. Only JPEG, PNG, and GIF are allowed.")

    data = await read_limited(image, settings.max_image_size_bytes)
    if not data:
        raise validation_error("Uploaded file is empty")

    storage = get_storage(request)
    storage_path = build_storage_path(current_user.id, product.id, image.filename, content_type)
    result = await storage.put(data, content_type, storage_path)
    if not result.success:
        logger.error(f"Failed to store image for product {product.id}: {result.error}")
        raise UpstreamFailureError("Failed to upload image")

    try:
        new_image = db_utils.create(db, Image(
            product_id=product.id,
            file_name=image.filename or storage_path.rsplit("/", 1)[-1],
            storage_path=result.path,
        ))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record image {result.path} for product {product.id}: {e}", exc_info=True)
        raise handle_database_error(e, "upload_image")

    logger.info(f"Image {new_image.image_id} uploaded for product {product.id} ({len(data)} bytes)")
    return ImageResponse.from_orm(new_image)


@router.get("", response_model=list[ImageResponse])
async def list_images(
    product_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ImageResponse]:
    """List the images of a product."""
    product = access.authorize(db, current_user.id, product_id)
    return [ImageResponse.from_orm(i) for i in product.images]


@router.get("/{image_id}", response_model=ImageResponse)
async def get_image(
    product_id: str,
    image_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ImageResponse:
    """Get one image's details."""
    image = access.authorize_image(db, current_user.id, product_id, image_id)
    return ImageResponse.from_orm(image)


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    product_id: str,
    image_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """
    Delete an image.

    The bytes are removed from storage before the metadata row. If storage
    deletion fails, the row is kept and the request fails.
    """
    image = access.authorize_image(db, current_user.id, product_id, image_id)

    result = await get_storage(request).delete(image.storage_path)
    if not result.success:
        logger.error(f"Failed to delete image {image.image_id} from storage: {result.error}")
        raise UpstreamFailureError("Failed to delete image")

    try:
        db_utils.delete(db, image)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete image {image_id}: {e}", exc_info=True)
        raise handle_database_error(e, "delete_image")

    logger.info(f"Deleted image {image_id} of product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
