from typing import Any, Dict, List
from sqlalchemy.orm import Session
from storefront.core.database import transaction
from storefront.core.exceptions import BadRequestError, ConflictError, NotFoundError, ValidationFailedError
from storefront.models.category import STATUS_ACTIVE, Category
from storefront.models.product import Product

NAME_TAKEN = {"name": ["The name has already been taken."]}


class CategoryService:
    @staticmethod
    def list_categories(db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.id).all()

    @staticmethod
    def get_category(db: Session, category_id: int) -> Category:
        category = db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found", "The requested category does not exist.")
        return category

    @staticmethod
    def create_category(db: Session, fields: Dict[str, Any]) -> Category:
        CategoryService._ensure_name_available(db, fields["name"])

        with transaction(db, "Failed to create category", conflict_message="Category already exists"):
            category = Category(
                name=fields["name"],
                status=fields.get("status") or STATUS_ACTIVE,
            )
            db.add(category)

        db.refresh(category)
        return category

    @staticmethod
    def update_category(db: Session, category_id: int, fields: Dict[str, Any]) -> Category:
        """Partial update; the uniqueness check skips the row being updated"""
        category = CategoryService.get_category(db, category_id)

        update_data = {key: fields[key] for key in ("name", "status") if fields.get(key) is not None}
        if "name" in update_data:
            CategoryService._ensure_name_available(db, update_data["name"], exclude_id=category.id)

        if not update_data:
            raise BadRequestError("No data to update", "Please provide at least one field to update.")

        with transaction(db, "Failed to update category", conflict_message="Category already exists"):
            for key, value in update_data.items():
                setattr(category, key, value)

        db.refresh(category)
        return category

    @staticmethod
    def delete_category(db: Session, category_id: int) -> None:
        category = CategoryService.get_category(db, category_id)

        with transaction(db, "Failed to delete category", conflict_message="Cannot delete category"):
            # Referential guard - checked inside the transaction that deletes
            product_count = db.query(Product).filter(Product.category_id == category.id).count()
            if product_count:
                raise ConflictError(
                    "Cannot delete category",
                    f"This category has {product_count} associated product(s). "
                    "Reassign or delete them first.",
                )
            db.delete(category)

    @staticmethod
    def _ensure_name_available(db: Session, name: str, exclude_id: int = None) -> None:
        query = db.query(Category).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            raise ValidationFailedError(NAME_TAKEN)


category_service = CategoryService()
