from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

CategoryStatus = Literal["active", "inactive"]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    status: Optional[CategoryStatus] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[CategoryStatus] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
