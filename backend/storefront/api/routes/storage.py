from fastapi import APIRouter
from fastapi.responses import FileResponse
from storefront.core.config import settings
from storefront.core.exceptions import NotFoundError
from storefront.storage.local_storage import storage

router = APIRouter(prefix=settings.STORAGE_URL_PREFIX, tags=["storage"])


@router.get("/{file_path:path}")
async def get_stored_file(file_path: str):
    """Serve a stored blob (product thumbnails) read-only"""
    if not storage.file_exists(file_path):
        raise NotFoundError("File not found", "The requested file does not exist.")
    return FileResponse(storage.get_file_path(file_path))
