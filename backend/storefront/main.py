import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from storefront.core.config import settings
from storefront.core.database import engine, Base
from storefront.core.exceptions import register_exception_handlers
from storefront.api.routes import admin, auth, categories, products, storage

# Models must be imported so their tables are registered on Base.metadata
from storefront.models import category, product, token, user  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: configure log level and create missing tables
    """
    logging.getLogger("storefront").setLevel(settings.LOG_LEVEL)
    # In production, use migrations (Alembic) instead of create_all
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Products, categories and user administration with token auth",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware - allows frontend to make requests to backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every error leaves the app in the success/message/error envelope
register_exception_handlers(app)

# Register API route modules
# All routes are prefixed with /api for consistency
app.include_router(auth.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
# Stored thumbnails are public and live outside /api
app.include_router(storage.router)


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": settings.APP_NAME, "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}
