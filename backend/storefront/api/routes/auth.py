from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storefront.core.database import get_db
from storefront.core.responses import success_response
from storefront.api.dependencies import get_current_token, get_current_user
from storefront.models.token import PersonalAccessToken
from storefront.models.user import User
from storefront.schemas.user import LoginRequest, RegisterRequest, UserResponse, UserUpdateRequest
from storefront.services.user_service import user_service

router = APIRouter(tags=["auth"])


def _token_payload(user: User, access_token: str) -> dict:
    return {
        "user": UserResponse.model_validate(user),
        "access_token": access_token,
        "token_type": "Bearer",
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user and log them in"""
    user, access_token = user_service.register(db, payload.model_dump())
    return success_response(
        "User registered successfully",
        _token_payload(user, access_token),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Login and get a new access token"""
    user, access_token = user_service.login(db, payload.email, payload.password)
    return success_response("Login successful", _token_payload(user, access_token))


@router.post("/logout")
async def logout(
    token: PersonalAccessToken = Depends(get_current_token),
    db: Session = Depends(get_db)
):
    """Revoke the token used for this request"""
    user_service.logout(db, token)
    return success_response("Logged out successfully")


@router.get("/user")
async def get_user(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return success_response(
        "User retrieved successfully",
        {"user": UserResponse.model_validate(current_user)},
    )


@router.put("/user/update")
async def update_user(
    payload: Optional[UserUpdateRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    fields = payload.model_dump(exclude_unset=True) if payload else {}
    user = user_service.update(db, current_user, fields)
    return success_response("User updated successfully", {"user": UserResponse.model_validate(user)})


@router.delete("/user/delete")
async def delete_user(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete the current user and revoke all of their tokens"""
    user_service.delete(db, current_user)
    return success_response("User deleted successfully")
