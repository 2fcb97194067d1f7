from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from storefront.core.database import get_db
from storefront.core.exceptions import ForbiddenError, UnauthenticatedError
from storefront.models.token import PersonalAccessToken
from storefront.models.user import User
from storefront.services.token_service import token_service

# OAuth2 password bearer scheme - extracts token from Authorization header
# auto_error=False so a missing header goes through our own 401 envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)


async def get_current_token(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> PersonalAccessToken:
    """
    Resolve the bearer token of the request to its stored record.

    Missing, malformed, forged and revoked tokens all fail the same way.
    """
    record = token_service.validate(db, token)
    if record is None:
        raise UnauthenticatedError()
    return record


async def get_current_user(
    token: PersonalAccessToken = Depends(get_current_token)
) -> User:
    """Get the user the request's token is bound to"""
    return token.user


def require_role(role: str):
    """
    Build a dependency that admits only users whose role is exactly ``role``.

    Authentication runs first, so an anonymous request gets 401, not 403.
    """
    async def check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise ForbiddenError(
                "Unauthorized",
                f"This action requires {role} role. You do not have permission to perform this action.",
            )
        return current_user

    return check_role
