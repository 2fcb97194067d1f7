from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from storefront.core.database import Base


class Product(Base):
    """
    Product model.

    ``thumbnail`` holds either a path relative to the blob store or an
    absolute URL for externally hosted images. The URL clients see is built
    at serialization time.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    thumbnail = Column(String, nullable=True)
    # No ON DELETE rule - categories with products are guarded in the service
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # lazy="raise": the category must be loaded explicitly (joinedload) by the service
    category = relationship("Category", lazy="raise")
