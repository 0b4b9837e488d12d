"""Utility functions."""
import random
import time
from pathlib import Path
from typing import Optional

from config import ALLOWED_EXTS, MIME_EXTENSIONS
from errors import InvalidFilename, ValidationError


class StoredFilename(str):
    """A bare file name that is safe to join onto a storage directory.

    Only build these through :meth:`parse`; the raw string from a URL or form
    must never reach ``Path`` joining directly.
    """

    __slots__ = ()

    @classmethod
    def parse(cls, raw: str) -> "StoredFilename":
        if raw is None:
            raise InvalidFilename("Filename required")
        name = str(raw)
        if not name or name.strip() != name:
            raise InvalidFilename("Invalid filename")
        if name in {".", ".."} or "/" in name or "\\" in name or "\x00" in name:
            raise InvalidFilename("Invalid filename")
        if Path(name).name != name:
            raise InvalidFilename("Invalid filename")
        return cls(name)


def resolve_under_root(root: Path, candidate: Path) -> Path:
    """Resolve a path ensuring it's under the root directory."""
    root = root.resolve()
    real = candidate.resolve()
    if root not in real.parents and real != root:
        raise InvalidFilename("Path is outside root")
    return real


def stored_extension(original_name: str, content_type: Optional[str] = None) -> str:
    """Pick an extension the listing recognizes.

    The client's suffix wins when it is on the allow-list, otherwise the
    declared MIME type decides. Raises ValidationError for anything else.
    """
    suffix = Path(original_name or "").suffix
    if suffix.lower() in ALLOWED_EXTS:
        return suffix
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime in MIME_EXTENSIONS:
        return MIME_EXTENSIONS[mime]
    raise ValidationError(f"Unsupported image type: {content_type or 'unknown'}")


def make_stored_name(
    original_name: str, content_type: Optional[str] = None, prefix: str = "images"
) -> StoredFilename:
    """Build a collision-resistant name: ``<prefix>-<epoch ms>-<random><ext>``."""
    ext = stored_extension(original_name, content_type)
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return StoredFilename.parse(f"{prefix}-{unique}{ext}")


def format_size(num_bytes: int) -> str:
    """Human readable byte count for templates and log lines."""
    if num_bytes == 0:
        return "0 Bytes"
    size = float(num_bytes)
    for unit in ("Bytes", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{round(size, 2):g} {unit}"
        size /= 1024
