import hashlib
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Iterable, List

from fastapi import UploadFile

from app.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredFile:
    """A received upload written to the temporary upload directory."""
    path: str
    filename: str
    original_name: str
    size: int
    content_type: str = None

    @property
    def extension(self) -> str:
        return self.original_name.rsplit(".", 1)[-1].lower() if "." in self.original_name else ""


class StorageService:
    def __init__(self, upload_dir: str = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR

    def _target_path(self, original_name: str) -> tuple[str, str]:
        os.makedirs(self.upload_dir, exist_ok=True)
        extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else ""
        filename = f"{uuid.uuid4().hex}.{extension}" if extension else uuid.uuid4().hex
        return filename, os.path.join(self.upload_dir, filename)

    async def save_upload(self, file: UploadFile) -> StoredFile:
        """Stream an UploadFile to disk under a unique stored filename."""
        original_name = os.path.basename(file.filename or "untitled")
        filename, path = self._target_path(original_name)
        size = 0
        with open(path, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                out.write(chunk)
        return StoredFile(
            path=path,
            filename=filename,
            original_name=original_name,
            size=size,
            content_type=file.content_type,
        )

    async def save_uploads(self, files: Iterable[UploadFile]) -> List[StoredFile]:
        stored = []
        try:
            for file in files:
                stored.append(await self.save_upload(file))
        except Exception:
            self.discard_all(stored)
            raise
        return stored

    @staticmethod
    def compute_hash(path: str) -> str:
        digest = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()

    @staticmethod
    def discard(stored: StoredFile) -> bool:
        """Best-effort delete of a temporary file. Failures are logged only."""
        try:
            os.remove(stored.path)
            return True
        except OSError as e:
            logger.error("Error deleting file %s: %s", stored.path, e)
            return False

    @staticmethod
    def discard_all(stored_files: Iterable[StoredFile]):
        for stored in stored_files:
            StorageService.discard(stored)


storage_service = StorageService()
