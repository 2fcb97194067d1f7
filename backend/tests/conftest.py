import io
import os

# Must be set before storefront modules read their settings
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.database import Base, enable_sqlite_foreign_keys, get_db
from storefront.core.security import get_password_hash
from storefront.main import app
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.token_service import token_service
from storefront.storage.local_storage import storage

PASSWORD = "password1"


@pytest.fixture
def make_image():
    def _make_image(image_format="PNG", size=(4, 4)) -> bytes:
        """Small valid image in the given Pillow format"""
        buffer = io.BytesIO()
        Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
        return buffer.getvalue()
    return _make_image


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def blob_root(tmp_path, monkeypatch):
    root = tmp_path / "storage"
    monkeypatch.setattr(storage, "root", root)
    return root


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(db_session):
    def _create_user(email="user@x.com", role="user", name="Test User", password=PASSWORD):
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create_user


@pytest.fixture
def auth_headers(db_session):
    def _auth_headers(user):
        access_token = token_service.issue(db_session, user)
        db_session.commit()
        return {"Authorization": f"Bearer {access_token}"}
    return _auth_headers


@pytest.fixture
def regular_user(create_user):
    return create_user()


@pytest.fixture
def user_headers(regular_user, auth_headers):
    return auth_headers(regular_user)


@pytest.fixture
def admin_user(create_user):
    return create_user(email="admin@x.com", role="admin", name="Admin")


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)


@pytest.fixture
def create_category(db_session):
    def _create_category(name="Books", status="active"):
        category = Category(name=name, status=status)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category
    return _create_category


@pytest.fixture
def create_product(db_session):
    def _create_product(category, name="Widget", description=None, thumbnail=None):
        product = Product(
            name=name,
            description=description,
            category_id=category.id,
            thumbnail=thumbnail,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _create_product
