"""
Local file system storage for chat uploads.

Files live under base_path and are served by the app's /storage mount,
so public URLs are <BASE_URL>/storage/<path>.
"""

from pathlib import Path
from typing import Optional

from chatclone.core.config import get_settings
from chatclone.core.exceptions import InfrastructureError, NotFoundError, ValidationError
from chatclone.interfaces.storage_provider import IStorageProvider


class LocalStorageProvider(IStorageProvider):
    """Storage-relative paths mapped onto a local directory."""

    def __init__(self, base_path: Optional[str] = None, public_base_url: Optional[str] = None):
        """
        Args:
            base_path: Storage root (default: ./storage)
            public_base_url: URL the root is served at (default: <BASE_URL>/storage)
        """
        self.base_path = Path(base_path or "./storage")
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._public_base_url = public_base_url

    def _resolve_path(self, path: str) -> Path:
        root = self.base_path.resolve()
        target = (root / path).resolve()
        if target != root and root not in target.parents:
            raise ValidationError(f"Path escapes storage root: {path}")
        return target

    async def upload(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._resolve_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise InfrastructureError(f"Failed to store {path}: {e}")
        return str(target)

    async def download(self, path: str) -> bytes:
        target = self._resolve_path(path)
        if not target.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            return target.read_bytes()
        except OSError as e:
            raise InfrastructureError(f"Failed to read {path}: {e}")

    async def delete(self, path: str) -> bool:
        target = self._resolve_path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise InfrastructureError(f"Failed to delete {path}: {e}")
        return True

    async def exists(self, path: str) -> bool:
        return self._resolve_path(path).is_file()

    def get_public_url(self, path: str) -> str:
        base_url = self._public_base_url or f"{get_settings().BASE_URL}/storage"
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
