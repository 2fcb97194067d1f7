import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from PIL import Image
from sqlalchemy.orm import Session, joinedload
from storefront.core.config import settings
from storefront.core.database import transaction
from storefront.core.exceptions import (
    AppError,
    BadRequestError,
    InternalError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationFailedError,
)
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.storage.local_storage import is_absolute_url, storage

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("jpeg", "png", "jpg", "gif")
# Pillow format names accepted for each upload
ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "GIF"}


@dataclass
class ThumbnailUpload:
    """An uploaded thumbnail, already read into memory by the route"""
    filename: str
    content: bytes


class ProductService:
    @staticmethod
    def list_products(db: Session, category_id: Optional[int] = None) -> List[Product]:
        # Category is joined explicitly; Product.category never lazy-loads
        query = db.query(Product).options(joinedload(Product.category))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        return query.order_by(Product.id).all()

    @staticmethod
    def get_product(db: Session, product_id: int) -> Product:
        product = db.query(Product).options(joinedload(Product.category)).filter(
            Product.id == product_id
        ).populate_existing().first()
        if not product:
            raise NotFoundError("Product not found", "The requested product does not exist.")
        return product

    @staticmethod
    def create_product(db: Session, fields: Dict[str, Any], thumbnail: Optional[ThumbnailUpload] = None) -> Product:
        """
        Create a product, storing its thumbnail first.

        The blob is written before the row; if the row cannot be committed the
        blob is removed again so nothing is left behind.
        """
        ProductService._ensure_category_exists(db, fields["category_id"])

        thumbnail_path = None
        if thumbnail is not None:
            thumbnail_path = ProductService._store_thumbnail(thumbnail)

        try:
            with transaction(db, "Failed to create product"):
                product = Product(
                    name=fields["name"],
                    description=fields.get("description") or None,
                    category_id=fields["category_id"],
                    thumbnail=thumbnail_path,
                )
                db.add(product)
        except AppError:
            ProductService._release_thumbnail(thumbnail_path)
            raise

        return ProductService.get_product(db, product.id)

    @staticmethod
    def update_product(
        db: Session,
        product_id: int,
        fields: Dict[str, Any],
        thumbnail: Optional[ThumbnailUpload] = None,
    ) -> Product:
        """
        Partial update. A new thumbnail replaces the old one; the old blob is
        only released after the row points at the new one.
        """
        product = ProductService.get_product(db, product_id)

        update_data = {
            key: fields[key]
            for key in ("name", "category_id")
            if fields.get(key) is not None
        }
        if "description" in fields:
            # A description sent empty clears it
            update_data["description"] = fields["description"] or None
        if "category_id" in update_data:
            ProductService._ensure_category_exists(db, update_data["category_id"])

        if not update_data and thumbnail is None:
            raise BadRequestError("No data to update", "Please provide at least one field to update.")

        previous_thumbnail = product.thumbnail
        if thumbnail is not None:
            update_data["thumbnail"] = ProductService._store_thumbnail(thumbnail)

        try:
            with transaction(db, "Failed to update product"):
                for key, value in update_data.items():
                    setattr(product, key, value)
        except AppError:
            ProductService._release_thumbnail(update_data.get("thumbnail"))
            raise

        if thumbnail is not None:
            ProductService._release_thumbnail(previous_thumbnail)

        return ProductService.get_product(db, product_id)

    @staticmethod
    def delete_product(db: Session, product_id: int) -> None:
        product = ProductService.get_product(db, product_id)
        # Blob first, best-effort; the row is deleted regardless
        ProductService._release_thumbnail(product.thumbnail)

        with transaction(db, "Failed to delete product"):
            db.delete(product)

    @staticmethod
    def validate_thumbnail(thumbnail: ThumbnailUpload) -> str:
        """Check type, decoded content and size; returns the file extension"""
        extension = Path(thumbnail.filename or "").suffix.lower().lstrip(".")
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationFailedError({
                "thumbnail": [f"The thumbnail must be a file of type: {', '.join(ALLOWED_EXTENSIONS)}."]
            })

        try:
            with Image.open(io.BytesIO(thumbnail.content)) as image:
                image_format = image.format
                image.verify()
        except Exception as e:
            logger.info(f"Rejected thumbnail {thumbnail.filename}: {str(e)}")
            image_format = None
        if image_format not in ALLOWED_IMAGE_FORMATS:
            raise ValidationFailedError({"thumbnail": ["The thumbnail must be an image."]})

        # Size is checked on the actual bytes, after the format checks
        if len(thumbnail.content) > settings.MAX_THUMBNAIL_SIZE:
            raise PayloadTooLargeError(
                "File too large",
                f"The thumbnail file size must not exceed {settings.MAX_THUMBNAIL_SIZE // 1024} kilobytes.",
            )
        return extension

    @staticmethod
    def _store_thumbnail(thumbnail: ThumbnailUpload) -> str:
        extension = ProductService.validate_thumbnail(thumbnail)
        try:
            return storage.save_file(thumbnail.content, extension)
        except Exception as e:
            logger.exception(f"Error uploading file: {str(e)}")
            raise InternalError("File upload failed", detail=str(e))

    @staticmethod
    def _release_thumbnail(path: Optional[str]) -> None:
        """Best-effort blob removal; failures are logged and never raised"""
        if not path or is_absolute_url(path):
            return
        try:
            storage.delete_file(path)
        except Exception as e:
            logger.warning(f"Error deleting thumbnail {path}: {str(e)}")

    @staticmethod
    def _ensure_category_exists(db: Session, category_id: int) -> None:
        exists = db.query(Category.id).filter(Category.id == category_id).first()
        if exists is None:
            raise ValidationFailedError({"category_id": ["The selected category id is invalid."]})


product_service = ProductService()
