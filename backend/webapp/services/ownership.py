"""Ownership lookups for products and their images."""
from uuid import UUID

from sqlalchemy.orm import Session

from webapp.models import Product, Image
from webapp.utils.db import get_by_id, parse_uuid
from webapp.utils.exceptions import not_found_error


def find_product(db: Session, product_id: str | UUID) -> Product:
    """Load a product or raise NotFoundError (ValidationError for a malformed ID)."""
    return get_by_id(db, Product, product_id, "Product not found")


def owner_of(db: Session, product_id: str | UUID) -> UUID:
    """Return the ID of the user who owns the product."""
    return find_product(db, product_id).owner_user_id


def find_image(db: Session, product_id: str | UUID, image_id: str | UUID) -> Image:
    """Load an image that belongs to the given product."""
    image_uuid = parse_uuid(image_id, "Image ID")
    image = db.query(Image).filter(
        Image.image_id == image_uuid,
        Image.product_id == parse_uuid(product_id, "Product ID"),
    ).first()

    if not image:
        raise not_found_error("Image")

    return image


def owner_of_image(db: Session, product_id: str | UUID, image_id: str | UUID) -> UUID:
    """Return the ID of the user who owns the image's product."""
    return owner_of(db, find_image(db, product_id, image_id).product_id)
