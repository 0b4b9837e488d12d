"""Storage backends for uploaded images and their thumbnails."""
import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from config import THUMBNAIL_DIR, UPLOAD_DIR
from errors import DeletionError, ListingError
from models import GalleryEntry
from scanner import scan, thumbnail_name, thumbnail_url, upload_url
from thumbnails import generate_thumbnail
from utils import StoredFilename, resolve_under_root

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """What the routes need from a place that keeps images."""

    def store(self, data: bytes, name: StoredFilename) -> str:
        """Persist ``data`` under ``name`` and return its public URL path."""

    def create_thumbnail(self, name: StoredFilename) -> str:
        """Generate the thumbnail of a stored image; raises ThumbnailError."""

    def list(self) -> List[GalleryEntry]:
        """Current images; raises ListingError."""

    def delete(self, name: StoredFilename) -> bool:
        """Remove an image and its thumbnail. False when neither existed."""

    def stage_batch(self, token: StoredFilename, names: Sequence[StoredFilename]) -> Optional[Path]:
        """Collect one request's files for post-processing, if supported."""


class FilesystemStorage:
    """Originals flat in ``upload_dir``, thumbnails in ``thumbnail_dir``.

    Batches staged for post-processing live in ``upload_dir/<token>/`` and
    hold links to the originals; listing never descends into them.
    """

    def __init__(self, upload_dir: Path, thumbnail_dir: Path):
        self.upload_dir = Path(upload_dir)
        self.thumbnail_dir = Path(thumbnail_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.thumbnail_dir.mkdir(parents=True, exist_ok=True)

    def _upload_path(self, name: StoredFilename) -> Path:
        return resolve_under_root(self.upload_dir, self.upload_dir / name)

    def _thumbnail_path(self, name: StoredFilename) -> Path:
        return resolve_under_root(self.thumbnail_dir, self.thumbnail_dir / thumbnail_name(name))

    def store(self, data: bytes, name: StoredFilename) -> str:
        path = self._upload_path(name)
        # "xb" so a name collision fails instead of overwriting another upload
        with path.open("xb") as f:
            f.write(data)
        return upload_url(name)

    def create_thumbnail(self, name: StoredFilename) -> str:
        generate_thumbnail(self._upload_path(name), self._thumbnail_path(name))
        return thumbnail_url(name)

    def list(self) -> List[GalleryEntry]:
        try:
            return scan(self.upload_dir, self.thumbnail_dir)
        except OSError as exc:
            raise ListingError("Failed to get images") from exc

    def delete(self, name: StoredFilename) -> bool:
        removed = False
        try:
            for path in (self._upload_path(name), self._thumbnail_path(name)):
                if path.is_file():
                    path.unlink()
                    removed = True
            for batch in self._batch_dirs():
                staged = batch / name
                if staged.is_file():
                    staged.unlink()
        except OSError as exc:
            raise DeletionError("Failed to delete image") from exc
        return removed

    def stage_batch(self, token: StoredFilename, names: Sequence[StoredFilename]) -> Optional[Path]:
        batch_dir = resolve_under_root(self.upload_dir, self.upload_dir / token)
        batch_dir.mkdir(exist_ok=True)
        for name in names:
            src = self._upload_path(name)
            dest = batch_dir / name
            if dest.exists():
                continue
            try:
                os.link(src, dest)
            except OSError:
                logger.debug("Cannot link %s into %s, copying", name, batch_dir)
                shutil.copy2(src, dest)
        return batch_dir

    def _batch_dirs(self) -> List[Path]:
        return [p for p in self.upload_dir.iterdir() if p.is_dir()]


_default_storage: Optional[FilesystemStorage] = None


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the process-wide storage backend."""
    global _default_storage
    if _default_storage is None:
        _default_storage = FilesystemStorage(UPLOAD_DIR, THUMBNAIL_DIR)
    return _default_storage
