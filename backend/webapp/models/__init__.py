"""Models package."""
from webapp.models.user import User
from webapp.models.product import Product
from webapp.models.image import Image
from webapp.models.health_check import HealthCheck

__all__ = ["User", "Product", "Image", "HealthCheck"]
