from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session
from storefront.core.database import get_db
from storefront.core.responses import success_response
from storefront.core.validation import parse_id, validate_payload
from storefront.api.dependencies import get_current_user
from storefront.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from storefront.services.product_service import ThumbnailUpload, product_service

router = APIRouter(prefix="/products", tags=["products"])


async def _read_thumbnail(thumbnail: Optional[UploadFile]) -> Optional[ThumbnailUpload]:
    # Browsers send an empty part with no filename when no file was picked
    if thumbnail is None or not thumbnail.filename:
        return None
    content = await thumbnail.read()
    return ThumbnailUpload(filename=thumbnail.filename, content=content)


def _form_fields(**values) -> dict:
    """Keep only the form fields the client actually sent"""
    return {key: value for key, value in values.items() if value is not None}


@router.get("")
async def list_products(
    category_id: Optional[str] = Query(None, description="Only products of this category"),
    db: Session = Depends(get_db)
):
    """List products, each with its category"""
    parsed_category_id = parse_id(category_id, "category") if category_id is not None else None
    products = product_service.list_products(db, parsed_category_id)
    return success_response(
        "Products retrieved successfully",
        {
            "products": [ProductResponse.model_validate(product) for product in products],
            "total": len(products),
        },
    )


@router.get("/{product_id}")
async def get_product(product_id: str, db: Session = Depends(get_db)):
    product = product_service.get_product(db, parse_id(product_id, "product"))
    return success_response("Product retrieved successfully", {"product": ProductResponse.model_validate(product)})


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_user)])
async def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Create a product (multipart form, thumbnail optional)"""
    data = validate_payload(
        ProductCreate,
        _form_fields(name=name, description=description, category_id=category_id),
    )
    product = product_service.create_product(db, data.model_dump(), await _read_thumbnail(thumbnail))
    return success_response(
        "Product created successfully",
        {"product": ProductResponse.model_validate(product)},
        status_code=status.HTTP_201_CREATED,
    )


# POST rather than PUT so multipart uploads work from plain HTML forms
@router.post("/{product_id}", dependencies=[Depends(get_current_user)])
async def update_product(
    product_id: str,
    request: Request,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    parsed_id = parse_id(product_id, "product")
    fields = _form_fields(name=name, description=description, category_id=category_id)
    # FastAPI hands empty form values over as None; an empty description means "clear it"
    if description is None and (await request.form()).get("description") == "":
        fields["description"] = ""
    data = validate_payload(ProductUpdate, fields)
    product = product_service.update_product(
        db,
        parsed_id,
        data.model_dump(exclude_unset=True),
        await _read_thumbnail(thumbnail),
    )
    return success_response("Product updated successfully", {"product": ProductResponse.model_validate(product)})


@router.delete("/{product_id}", dependencies=[Depends(get_current_user)])
async def delete_product(product_id: str, db: Session = Depends(get_db)):
    product_service.delete_product(db, parse_id(product_id, "product"))
    return success_response("Product deleted successfully")
