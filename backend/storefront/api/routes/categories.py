from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storefront.core.database import get_db
from storefront.core.responses import success_response
from storefront.core.validation import parse_id
from storefront.api.dependencies import get_current_user
from storefront.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from storefront.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(db: Session = Depends(get_db)):
    categories = category_service.list_categories(db)
    return success_response(
        "Categories retrieved successfully",
        {
            "categories": [CategoryResponse.model_validate(category) for category in categories],
            "total": len(categories),
        },
    )


@router.get("/{category_id}")
async def get_category(category_id: str, db: Session = Depends(get_db)):
    category = category_service.get_category(db, parse_id(category_id, "category"))
    return success_response("Category retrieved successfully", {"category": CategoryResponse.model_validate(category)})


# Mutating routes all require a valid token
@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_user)])
async def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    category = category_service.create_category(db, payload.model_dump())
    return success_response(
        "Category created successfully",
        {"category": CategoryResponse.model_validate(category)},
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{category_id}", dependencies=[Depends(get_current_user)])
async def update_category(
    category_id: str,
    payload: Optional[CategoryUpdate] = None,
    db: Session = Depends(get_db)
):
    fields = payload.model_dump(exclude_unset=True) if payload else {}
    category = category_service.update_category(db, parse_id(category_id, "category"), fields)
    return success_response("Category updated successfully", {"category": CategoryResponse.model_validate(category)})


@router.delete("/{category_id}", dependencies=[Depends(get_current_user)])
async def delete_category(category_id: str, db: Session = Depends(get_db)):
    category_service.delete_category(db, parse_id(category_id, "category"))
    return success_response("Category deleted successfully")
