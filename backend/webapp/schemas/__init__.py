"""Pydantic schemas for request/response validation."""
from webapp.schemas.user import UserCreate, UserUpdate, UserResponse, VerifyResponse
from webapp.schemas.product import ProductCreate, ProductUpdate, ProductPatch, ProductResponse
from webapp.schemas.image import ImageResponse

__all__ = [
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "VerifyResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductPatch",
    "ProductResponse",
    "ImageResponse",
]
