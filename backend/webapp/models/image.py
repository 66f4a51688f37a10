"""Image metadata model. The bytes live in object storage."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from webapp.database import Base
from webapp.utils.clock import utc_now


class Image(Base):
    """Image attached to a product."""
    __tablename__ = "images"

    image_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String, nullable=False)  # Original filename from the upload
    storage_path = Column(String, nullable=False)  # {owner_id}/{product_id}/{uuid}.{ext}
    date_created = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="images")
