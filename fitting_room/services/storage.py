import asyncio
import shutil
from pathlib import Path

import aiofiles

from fitting_room.config import get_settings

settings = get_settings()


class LocalStorage:
    """
    Local file storage for generated media (video previews).

    Files are served by the app under ``/files``.
    """

    def __init__(self, base_path: Path | None = None):
        self.base_path = Path(base_path or settings.storage_path)
        self._ensure_base_path()

    def _ensure_base_path(self) -> None:
        """Ensure the base storage directory exists."""
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Get the full filesystem path for a storage key."""
        return self.base_path / key

    async def upload(self, file_data: bytes, key: str) -> str:
        """Save a file to local storage and return the key."""
        full_path = self._get_full_path(key)

        # Ensure parent directories exist
        full_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(full_path, "wb") as f:
            await f.write(file_data)

        return key

    async def get_url(self, key: str) -> str:
        """URL under which the app serves the stored file."""
        return f"/files/{key}"

    async def delete_prefix(self, prefix: str) -> None:
        """Delete a stored directory (e.g. every video of one session)."""
        full_path = self._get_full_path(prefix)

        if full_path.is_dir():
            await asyncio.to_thread(shutil.rmtree, full_path)
        elif full_path.exists():
            full_path.unlink()

    async def ensure_storage_exists(self) -> None:
        """Ensure storage is ready (create directories)."""
        self._ensure_base_path()
        (self.base_path / "videos").mkdir(exist_ok=True)


def video_key(session_id: str, result_id: str) -> str:
    return f"videos/{session_id}/{result_id}.mp4"


# Singleton instance
storage = LocalStorage()
