import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session
from storefront.core.config import settings
from storefront.core.security import create_access_token, decode_access_token, generate_token_id
from storefront.models.token import PersonalAccessToken
from storefront.models.user import User

logger = logging.getLogger(__name__)


class TokenService:
    """Issues, resolves and revokes bearer tokens"""

    @staticmethod
    def issue(db: Session, user: User, name: str = "auth_token") -> str:
        """
        Persist a new token record for ``user`` and return the bearer string.

        The record is added to the caller's session but not committed, so the
        issuance belongs to whatever transaction the caller is running.
        """
        token_id = generate_token_id()
        expires_delta = None
        expires_at = None
        if settings.ACCESS_TOKEN_EXPIRE_MINUTES:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
            expires_at = datetime.now(timezone.utc) + expires_delta

        access_token = create_access_token(
            data={"sub": str(user.id), "jti": token_id},
            expires_delta=expires_delta,
        )

        db.add(PersonalAccessToken(
            user_id=user.id,
            name=name,
            token_id=token_id,
            expires_at=expires_at,
        ))
        db.flush()
        return access_token

    @staticmethod
    def validate(db: Session, access_token: Optional[str]) -> Optional[PersonalAccessToken]:
        """Return the stored token record, or None if the token is unusable"""
        if not access_token:
            return None

        payload = decode_access_token(access_token)
        if payload is None:
            return None

        token_id = payload.get("jti")
        try:
            user_id = int(payload.get("sub"))
        except (ValueError, TypeError):
            return None
        if not token_id:
            return None

        record = db.query(PersonalAccessToken).filter(
            PersonalAccessToken.token_id == token_id
        ).first()
        # Revoked tokens have no record; a record bound to another user means tampering
        if record is None or record.user_id != user_id:
            return None
        return record

    @staticmethod
    def revoke(db: Session, token: PersonalAccessToken) -> None:
        db.delete(token)

    @staticmethod
    def revoke_all(db: Session, user: User) -> int:
        revoked = db.query(PersonalAccessToken).filter(
            PersonalAccessToken.user_id == user.id
        ).delete(synchronize_session=False)
        logger.info(f"Revoked {revoked} token(s) for user {user.id}")
        return revoked


token_service = TokenService()
