"""Schemas for products."""
from typing import Optional

from pydantic import BaseModel, model_validator

from webapp.models import Product
from webapp.schemas.base import NonEmptyStr, Quantity, RequestModel
from webapp.utils.serialization import serialize_uuid, serialize_datetime


class ProductCreate(RequestModel):
    """Request schema for POST /v1/product."""
    name: NonEmptyStr
    description: NonEmptyStr
    sku: NonEmptyStr
    manufacturer: NonEmptyStr
    quantity: Quantity


class ProductUpdate(ProductCreate):
    """Request schema for PUT /v1/product/{id}. Full replace, all fields required."""


class ProductPatch(RequestModel):
    """Request schema for PATCH /v1/product/{id}. At least one field, none null."""
    name: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    sku: Optional[NonEmptyStr] = None
    manufacturer: Optional[NonEmptyStr] = None
    quantity: Optional[Quantity] = None

    @model_validator(mode="after")
    def check_fields(self) -> "ProductPatch":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        """Only the fields the client sent."""
        return self.model_dump(include=self.model_fields_set)


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    sku: str
    manufacturer: str
    quantity: int
    owner_user_id: str
    date_added: Optional[str]
    date_last_updated: Optional[str]

    class Config:
        from_attributes = True

    @classmethod
    def from_orm(cls, obj: Product) -> "ProductResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            name=obj.name,
            description=obj.description,
            sku=obj.sku,
            manufacturer=obj.manufacturer,
            quantity=obj.quantity,
            owner_user_id=serialize_uuid(obj.owner_user_id),
            date_added=serialize_datetime(obj.date_added),
            date_last_updated=serialize_datetime(obj.date_last_updated),
        )
