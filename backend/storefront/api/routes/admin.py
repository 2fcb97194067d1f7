from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storefront.core.database import get_db
from storefront.core.responses import success_response
from storefront.core.validation import parse_id
from storefront.api.dependencies import require_role
from storefront.models.user import ROLE_ADMIN, User
from storefront.schemas.user import (
    AdminUserCreateRequest,
    AdminUserUpdateRequest,
    DashboardStats,
    UserResponse,
)
from storefront.services.user_service import user_service

require_admin = require_role(ROLE_ADMIN)

# Every route here goes through the admin gate
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/dashboard")
async def dashboard(db: Session = Depends(get_db)):
    stats = DashboardStats(**user_service.dashboard_stats(db))
    return success_response("Dashboard stats retrieved successfully", {"stats": stats})


@router.get("/users")
async def list_users(db: Session = Depends(get_db)):
    users = user_service.list_users(db)
    return success_response(
        "Users retrieved successfully",
        {"users": [UserResponse.model_validate(user) for user in users], "total": len(users)},
    )


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(payload: AdminUserCreateRequest, db: Session = Depends(get_db)):
    user = user_service.create_user(db, payload.model_dump())
    return success_response(
        "User created successfully",
        {"user": UserResponse.model_validate(user)},
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/users/{user_id}")
async def get_user(user_id: str, db: Session = Depends(get_db)):
    user = user_service.get_user(db, parse_id(user_id, "user"))
    return success_response("User retrieved successfully", {"user": UserResponse.model_validate(user)})


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    payload: Optional[AdminUserUpdateRequest] = None,
    db: Session = Depends(get_db)
):
    user = user_service.get_user(db, parse_id(user_id, "user"))
    fields = payload.model_dump(exclude_unset=True) if payload else {}
    user = user_service.update(db, user, fields)
    return success_response("User updated successfully", {"user": UserResponse.model_validate(user)})


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a user by ID; admins cannot delete themselves here"""
    user_service.delete_user(db, current_user, parse_id(user_id, "user"))
    return success_response("User deleted successfully")
