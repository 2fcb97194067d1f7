from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from storefront.core.validation import MAX_ID
from storefront.schemas.category import CategoryResponse
from storefront.storage.local_storage import resolve_public_url


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: int = Field(..., gt=0, le=MAX_ID)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0, le=MAX_ID)


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    category_id: int
    category: Optional[CategoryResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("thumbnail")
    def serialize_thumbnail(self, value: Optional[str], _info):
        return resolve_public_url(value)
