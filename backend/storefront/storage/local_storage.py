import secrets
import time
from pathlib import Path
from typing import Optional
from storefront.core.config import settings


class LocalStorage:
    """
    Blob store for uploaded thumbnails.

    Blobs are addressed by a path relative to the storage root; that relative
    path is what gets persisted on the product row.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR)

    def save_file(self, content: bytes, extension: str, directory: str = "thumbnails") -> str:
        """Write content under a fresh unique name and return its relative path"""
        unique_filename = f"{secrets.token_hex(10)}_{int(time.time())}.{extension.lower()}"
        target_dir = self.root / directory
        target_dir.mkdir(parents=True, exist_ok=True)

        with open(target_dir / unique_filename, "wb") as f:
            f.write(content)

        return f"{directory}/{unique_filename}"

    def get_file_path(self, relative_path: str) -> Path:
        """Get full path to a blob, refusing paths that escape the storage root"""
        root = self.root.resolve()
        file_path = (root / relative_path).resolve()
        if root != file_path and root not in file_path.parents:
            raise ValueError(f"Path outside storage root: {relative_path}")
        return file_path

    def delete_file(self, relative_path: str) -> bool:
        """Delete a blob; returns False if it was already gone"""
        file_path = self.get_file_path(relative_path)
        if file_path.is_file():
            file_path.unlink()
            return True
        return False

    def file_exists(self, relative_path: str) -> bool:
        """Check if blob exists"""
        try:
            return self.get_file_path(relative_path).is_file()
        except ValueError:
            return False


def is_absolute_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def resolve_public_url(value: Optional[str]) -> Optional[str]:
    """
    Turn a stored thumbnail value into the URL clients use.

    Absolute URLs (externally hosted images) pass through unchanged; relative
    blob paths are appended to the configured asset base.
    """
    if not value:
        return None
    if is_absolute_url(value):
        return value
    return f"{settings.get_asset_base_url()}/{value.lstrip('/')}"


storage = LocalStorage()
