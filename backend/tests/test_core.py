from datetime import timedelta

import pytest
from storefront.core.config import settings
from storefront.core.database import transaction
from storefront.core.exceptions import BadRequestError, ConflictError, InternalError, NotFoundError
from storefront.core.security import create_access_token
from storefront.core.validation import format_validation_errors, parse_id
from storefront.models.category import Category
from storefront.models.token import PersonalAccessToken
from storefront.services.category_service import category_service
from storefront.services.token_service import token_service
from storefront.storage.local_storage import resolve_public_url


@pytest.mark.parametrize("value,expected", [("1", 1), ("42", 42), (7, 7)])
def test_parse_id_accepts_positive_integers(value, expected):
    assert parse_id(value, "product") == expected


@pytest.mark.parametrize("value", ["0", "-1", "abc", "1.5", "", "²", "99999999999999999999"])
def test_parse_id_rejects_everything_else(value):
    with pytest.raises(BadRequestError) as exc_info:
        parse_id(value, "product")
    assert exc_info.value.message == "Invalid product ID"


def test_format_validation_errors_groups_by_field():
    errors = [
        {"loc": ("body", "name"), "type": "missing", "msg": "Field required"},
        {"loc": ("body", "email"), "type": "value_error", "msg": "Value error, bad email"},
        {"loc": ("body", "email"), "type": "string_too_long", "msg": "too long"},
    ]

    assert format_validation_errors(errors) == {
        "name": ["The name field is required."],
        "email": ["bad email", "too long"],
    }


def test_resolve_public_url(monkeypatch):
    monkeypatch.setattr(settings, "APP_URL", "https://shop.test/")
    monkeypatch.setattr(settings, "ASSET_URL", None)

    assert resolve_public_url("thumbnails/a.png") == "https://shop.test/storage/thumbnails/a.png"
    assert resolve_public_url("/thumbnails/a.png") == "https://shop.test/storage/thumbnails/a.png"
    assert resolve_public_url("http://cdn.test/a.png") == "http://cdn.test/a.png"
    assert resolve_public_url(None) is None


def test_resolve_public_url_prefers_asset_url(monkeypatch):
    monkeypatch.setattr(settings, "ASSET_URL", "https://assets.test/")

    assert resolve_public_url("thumbnails/a.png") == "https://assets.test/thumbnails/a.png"


def test_transaction_rolls_back_unexpected_errors(db_session):
    with pytest.raises(InternalError) as exc_info:
        with transaction(db_session, "Failed to create category"):
            db_session.add(Category(name="Temporary"))
            db_session.flush()
            raise RuntimeError("disk on fire")

    assert exc_info.value.message == "Failed to create category"
    assert exc_info.value.detail == "disk on fire"
    assert db_session.query(Category).count() == 0


def test_transaction_turns_integrity_errors_into_conflicts(db_session, create_category):
    create_category("Books")

    with pytest.raises(ConflictError):
        with transaction(db_session, "Failed to create category", conflict_message="Category already exists"):
            db_session.add(Category(name="Books"))

    assert db_session.query(Category).count() == 1


def test_transaction_keeps_business_errors(db_session):
    with pytest.raises(NotFoundError):
        with transaction(db_session, "Failed"):
            db_session.add(Category(name="Temporary"))
            db_session.flush()
            raise NotFoundError()

    assert db_session.query(Category).count() == 0


def test_expired_token_is_rejected(db_session, regular_user):
    token_service.issue(db_session, regular_user)
    db_session.commit()
    record = db_session.query(PersonalAccessToken).one()
    expired = create_access_token(
        {"sub": str(regular_user.id), "jti": record.token_id},
        expires_delta=timedelta(seconds=-1),
    )

    assert token_service.validate(db_session, expired) is None


def test_configured_expiry_is_recorded(db_session, regular_user, monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES", 5)

    access_token = token_service.issue(db_session, regular_user)
    db_session.commit()

    record = token_service.validate(db_session, access_token)
    assert record is not None
    assert record.expires_at is not None


def test_internal_error_detail_only_in_debug(client, monkeypatch, user_headers):
    def failing_create(db, fields):
        raise InternalError("Failed to create category", detail="connection reset")

    monkeypatch.setattr(category_service, "create_category", failing_create)

    hidden = client.post("/api/categories", json={"name": "Music"}, headers=user_headers)
    assert hidden.status_code == 500
    assert hidden.json()["success"] is False
    assert "connection reset" not in hidden.json()["error"]

    monkeypatch.setattr(settings, "DEBUG", True)
    shown = client.post("/api/categories", json={"name": "Music"}, headers=user_headers)
    assert shown.json()["error"] == "connection reset"


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
