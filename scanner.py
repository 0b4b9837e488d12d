"""Upload directory scanning."""
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List

from config import ALLOWED_EXTS, THUMBNAIL_PREFIX, THUMBNAIL_URL_PREFIX, UPLOAD_URL_PREFIX
from models import GalleryEntry


def thumbnail_name(filename: str) -> str:
    """Thumbnail file name for a stored original."""
    return f"{THUMBNAIL_PREFIX}{filename}"


def upload_url(filename: str) -> str:
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def thumbnail_url(filename: str) -> str:
    return f"{THUMBNAIL_URL_PREFIX}/{thumbnail_name(filename)}"


def iter_image_files(root: Path) -> Iterable[Path]:
    """Iterate through the top-level image files of ``root``.

    Batch directories and anything without an allowed extension are skipped.
    Order is whatever the filesystem enumerates.
    """
    for p in root.iterdir():
        if p.suffix.lower() in ALLOWED_EXTS and p.is_file():
            yield p


def read_entry(path: Path, thumb_dir: Path) -> GalleryEntry:
    """Build a listing entry from filesystem metadata.

    The thumbnail is reported by existence only, so an original whose
    thumbnail is missing still lists with ``thumbnail_path`` set to None.
    """
    stat = path.stat()
    has_thumb = (thumb_dir / thumbnail_name(path.name)).exists()
    return GalleryEntry(
        filename=path.name,
        upload_path=upload_url(path.name),
        thumbnail_path=thumbnail_url(path.name) if has_thumb else None,
        size=stat.st_size,
        upload_date=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def scan(upload_dir: Path, thumb_dir: Path) -> List[GalleryEntry]:
    """Index all images directly under upload_dir. Raises OSError on read failures."""
    return [read_entry(p, thumb_dir) for p in iter_image_files(upload_dir)]
