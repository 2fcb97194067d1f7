from datetime import datetime
from typing import Annotated, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

Role = Literal["user", "admin"]


def _check_email_length(value: str) -> str:
    if len(value) > 255:
        raise ValueError("The email may not be greater than 255 characters.")
    return value


Email = Annotated[EmailStr, AfterValidator(_check_email_length)]


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Email
    password: str = Field(..., min_length=8)
    password_confirmation: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdateRequest(BaseModel):
    """Partial update - only the fields sent are changed"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[Email] = None
    password: Optional[str] = Field(None, min_length=8)
    password_confirmation: Optional[str] = None


class AdminUserCreateRequest(RegisterRequest):
    role: Role


class AdminUserUpdateRequest(UserUpdateRequest):
    role: Optional[Role] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_users: int
    total_admins: int
    total_regular_users: int
