"""Product model."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from webapp.database import Base
from webapp.utils.clock import utc_now


class Product(Base):
    """Product owned by exactly one user."""
    __tablename__ = "products"
    __touch_column__ = "date_last_updated"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    sku = Column(String, unique=True, nullable=False, index=True)
    manufacturer = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    owner_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    date_added = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    date_last_updated = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    owner = relationship("User", backref="products")
    images = relationship(
        "Image",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Image.date_created",
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    )
