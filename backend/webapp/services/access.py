"""Access guard for owner-only resources.

Checks run in a fixed order: the target must exist (404) before ownership is
compared (403). Non-owners can therefore tell an existing product from a
missing one; the order is kept as the API's documented behavior.
"""
from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session

from webapp.models import User, Product, Image
from webapp.services.ownership import find_product, find_image
from webapp.utils.db import get_by_id
from webapp.utils.exceptions import forbidden_error
from webapp.utils.logger import logger


class Relation(str, Enum):
    """Relation the actor must have to the resource."""
    OWNER = "owner"


def _require_relation(relation: Relation) -> None:
    if relation is not Relation.OWNER:
        raise ValueError(f"Unsupported relation: {relation}")


def authorize(
    db: Session,
    actor_id: UUID,
    product_id: str | UUID,
    relation: Relation = Relation.OWNER,
) -> Product:
    """
    Authorize an actor against a product.

    Returns:
        The loaded product, so handlers don't query it twice

    Raises:
        NotFoundError: The product doesn't exist
        ForbiddenError: The actor doesn't own it
    """
    _require_relation(relation)

    product = find_product(db, product_id)

    if product.owner_user_id != actor_id:
        logger.warning(f"User {actor_id} denied access to product {product.id}")
        raise forbidden_error("You do not have permission to access this product")

    return product


def authorize_image(
    db: Session,
    actor_id: UUID,
    product_id: str | UUID,
    image_id: str | UUID,
    relation: Relation = Relation.OWNER,
) -> Image:
    """Authorize against the image's product, then load the image."""
    authorize(db, actor_id, product_id, relation)
    return find_image(db, product_id, image_id)


def authorize_user(db: Session, actor: User, user_id: str | UUID) -> User:
    """
    Authorize an actor against a user record. Users may only reach themselves.

    Raises:
        ValidationError: Malformed user ID
        NotFoundError: No such user
        ForbiddenError: The record belongs to someone else
    """
    target = get_by_id(db, User, user_id, "User not found")

    if target.id != actor.id:
        logger.warning(f"User {actor.id} denied access to user {target.id}")
        raise forbidden_error("You can only access your own account")

    return target
