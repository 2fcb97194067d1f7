import logging
from typing import Any, Dict, List, Tuple
from sqlalchemy.orm import Session
from storefront.core.database import transaction
from storefront.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationFailedError,
)
from storefront.core.security import get_password_hash, verify_password
from storefront.core.validation import require_confirmation
from storefront.models.token import PersonalAccessToken
from storefront.models.user import ROLE_ADMIN, ROLE_USER, User
from storefront.services.token_service import token_service

logger = logging.getLogger(__name__)

USER_EXISTS = ("User already exists", "A user with this email address already exists.")


class UserService:
    """Registration, login, self-service profile and admin user management"""

    # Self-service
    # -----------------------------

    @staticmethod
    def register(db: Session, fields: Dict[str, Any]) -> Tuple[User, str]:
        """Create a regular user and issue their first token in one transaction"""
        fields = dict(fields)
        require_confirmation(fields, "password")
        UserService._ensure_email_available(db, fields["email"])

        with transaction(db, "Registration failed", conflict_message=USER_EXISTS[0]):
            user = User(
                name=fields["name"],
                email=fields["email"],
                hashed_password=get_password_hash(fields["password"]),
                role=ROLE_USER,
            )
            db.add(user)
            db.flush()
            access_token = token_service.issue(db, user)

        db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user, access_token

    @staticmethod
    def login(db: Session, email: str, password: str) -> Tuple[User, str]:
        user = db.query(User).filter(User.email == email).first()

        # Same message for unknown email and wrong password - no account enumeration
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthenticatedError("Invalid credentials", "The provided credentials are incorrect.")

        with transaction(db, "Login failed"):
            access_token = token_service.issue(db, user)

        db.refresh(user)
        return user, access_token

    @staticmethod
    def logout(db: Session, token: PersonalAccessToken) -> None:
        """Revoke only the token used for this request"""
        with transaction(db, "Logout failed"):
            token_service.revoke(db, token)

    @staticmethod
    def update(db: Session, user: User, fields: Dict[str, Any]) -> User:
        """
        Apply a partial update.

        ``fields`` holds only what the client sent; None values count as not
        sent. Used by both the self-service and the admin endpoints.
        """
        fields = {key: value for key, value in fields.items() if value is not None}
        require_confirmation(fields, "password")

        if "email" in fields:
            UserService._ensure_email_available(db, fields["email"], exclude_id=user.id, as_conflict=False)

        update_data: Dict[str, Any] = {}
        for key in ("name", "email", "role"):
            if key in fields:
                update_data[key] = fields[key]
        if "password" in fields:
            update_data["hashed_password"] = get_password_hash(fields["password"])

        if not update_data:
            raise BadRequestError("No data to update", "Please provide at least one field to update.")

        with transaction(db, "Failed to update user", conflict_message=USER_EXISTS[0]):
            for key, value in update_data.items():
                setattr(user, key, value)

        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, user: User) -> None:
        """Revoke every token of the user, then remove the row"""
        user_id = user.id
        with transaction(db, "Failed to delete user"):
            token_service.revoke_all(db, user)
            db.delete(user)
        logger.info(f"Deleted user {user_id}")

    # Admin
    # -----------------------------

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.id).all()

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found", "The requested user does not exist.")
        return user

    @staticmethod
    def create_user(db: Session, fields: Dict[str, Any]) -> User:
        """Admin creation - explicit role, no token issued"""
        fields = dict(fields)
        require_confirmation(fields, "password")
        UserService._ensure_email_available(db, fields["email"])

        with transaction(db, "Failed to create user", conflict_message=USER_EXISTS[0]):
            user = User(
                name=fields["name"],
                email=fields["email"],
                hashed_password=get_password_hash(fields["password"]),
                role=fields["role"],
            )
            db.add(user)

        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, caller: User, user_id: int) -> None:
        user = UserService.get_user(db, user_id)
        if user.id == caller.id:
            raise ForbiddenError("Cannot delete own account", "You cannot delete your own account.")
        UserService.delete(db, user)

    @staticmethod
    def dashboard_stats(db: Session) -> Dict[str, int]:
        total_admins = db.query(User).filter(User.role == ROLE_ADMIN).count()
        total_regular_users = db.query(User).filter(User.role == ROLE_USER).count()
        return {
            "total_users": db.query(User).count(),
            "total_admins": total_admins,
            "total_regular_users": total_regular_users,
        }

    @staticmethod
    def _ensure_email_available(db: Session, email: str, exclude_id: int = None, as_conflict: bool = True) -> None:
        query = db.query(User).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first() is None:
            return
        if as_conflict:
            raise ConflictError(*USER_EXISTS)
        raise ValidationFailedError({"email": ["The email has already been taken."]})


user_service = UserService()
