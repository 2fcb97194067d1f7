from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from storefront.core.database import Base

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, index=True, nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
