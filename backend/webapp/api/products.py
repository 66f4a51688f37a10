"""Product API endpoints."""
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webapp.auth.basic import get_current_user
from webapp.database import get_db
from webapp.dependencies import get_storage
from webapp.models import Product, User
from webapp.schemas import ProductCreate, ProductUpdate, ProductPatch, ProductResponse
from webapp.schemas.base import parse_payload
from webapp.services import access
from webapp.utils import db as db_utils
from webapp.utils.exceptions import UpstreamFailureError, handle_database_error
from webapp.utils.logger import logger

router = APIRouter(prefix="/v1/product", tags=["products"])


@router.get("", response_model=list[ProductResponse])
async def list_products(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ProductResponse]:
    """List the authenticated user's products."""
    try:
        products = db.query(Product).filter(
            Product.owner_user_id == current_user.id
        ).order_by(Product.date_added).all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list products for user {current_user.id}: {e}", exc_info=True)
        raise handle_database_error(e, "list_products")

    return [ProductResponse.from_orm(p) for p in products]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
async def create_product(
    product: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProductResponse:
    """
    Create a product owned by the authenticated user.

    Returns:
        Created product
    """
    try:
        new_product = db_utils.create(db, Product(
            name=product.name,
            description=product.description,
            sku=product.sku,
            manufacturer=product.manufacturer,
            quantity=product.quantity,
            owner_user_id=current_user.id,
        ))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create product for user {current_user.id}: {e}", exc_info=True)
        raise handle_database_error(e, "create_product")

    logger.info(f"Created product {new_product.id} for user {current_user.id}")
    return ProductResponse.from_orm(new_product)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProductResponse:
    """Get a product the authenticated user owns."""
    product = access.authorize(db, current_user.id, product_id)
    return ProductResponse.from_orm(product)


def _apply_changes(db: Session, product: Product, changes: dict, operation: str) -> Response:
    try:
        db_utils.update(db, product, **changes)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {operation} product {product.id}: {e}", exc_info=True)
        raise handle_database_error(e, f"{operation}_product")

    logger.info(f"Product {product.id} updated ({operation}): {', '.join(sorted(changes))}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: str,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Replace every field of a product."""
    product = access.authorize(db, current_user.id, product_id)
    update = parse_payload(ProductUpdate, payload)
    return _apply_changes(db, product, update.model_dump(), "update")


@router.patch("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def patch_product(
    product_id: str,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Update the supplied fields of a product."""
    product = access.authorize(db, current_user.id, product_id)
    patch = parse_payload(ProductPatch, payload)
    return _apply_changes(db, product, patch.changes(), "patch")


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """
    Delete a product and all of its images.

    Image bytes are removed from storage first; if any removal fails the
    product and its remaining metadata are left in place.
    """
    product = access.authorize(db, current_user.id, product_id)

    images = list(product.images)
    storage = get_storage(request) if images else None

    for image in images:
        result = await storage.delete(image.storage_path)
        if not result.success:
            logger.error(f"Failed to delete image {image.image_id} of product {product.id}: {result.error}")
            raise UpstreamFailureError("Failed to delete product images from storage")

    try:
        db_utils.delete(db, product)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete product {product.id}: {e}", exc_info=True)
        raise handle_database_error(e, "delete_product")

    logger.info(f"Deleted product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
