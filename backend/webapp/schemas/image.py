"""Schemas for product images."""
from typing import Optional

from pydantic import BaseModel

from webapp.models import Image
from webapp.utils.serialization import serialize_uuid, serialize_datetime


class ImageResponse(BaseModel):
    image_id: str
    product_id: str
    file_name: str
    date_created: Optional[str]
    s3_bucket_path: str

    class Config:
        from_attributes = True

    @classmethod
    def from_orm(cls, obj: Image) -> "ImageResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            image_id=serialize_uuid(obj.image_id),
            product_id=serialize_uuid(obj.product_id),
            file_name=obj.file_name,
            date_created=serialize_datetime(obj.date_created),
            s3_bucket_path=obj.storage_path,
        )
