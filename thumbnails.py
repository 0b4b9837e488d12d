"""Thumbnail generation."""
import io
import logging
from pathlib import Path
from typing import Tuple, Union

from PIL import Image as PILImage, ImageOps

from config import THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from errors import ThumbnailError

logger = logging.getLogger(__name__)

Source = Union[Path, str, bytes]


def _open(source: Source) -> PILImage.Image:
    if isinstance(source, bytes):
        return PILImage.open(io.BytesIO(source))
    return PILImage.open(source)


def render_thumbnail(
    source: Source,
    size: Tuple[int, int] = THUMBNAIL_SIZE,
    quality: int = THUMBNAIL_QUALITY,
) -> bytes:
    """Cover-fit ``source`` into ``size``, cropping the overflow around the
    center, and return JPEG bytes.

    ``source`` is a path or the raw image bytes. Raises ThumbnailError when
    the image cannot be decoded or encoded.
    """
    try:
        with _open(source) as im:
            im = ImageOps.exif_transpose(im)
            if im.mode not in ("RGB", "L"):
                # Flatten transparency onto white instead of black
                rgba = im.convert("RGBA")
                im = PILImage.new("RGB", rgba.size, (255, 255, 255))
                im.paste(rgba, mask=rgba.getchannel("A"))
            fitted = ImageOps.fit(
                im, size, method=PILImage.Resampling.LANCZOS, centering=(0.5, 0.5)
            )
            buf = io.BytesIO()
            fitted.convert("RGB").save(buf, format="JPEG", quality=quality)
            return buf.getvalue()
    except Exception as exc:
        raise ThumbnailError(f"Cannot generate thumbnail: {exc}") from exc


def generate_thumbnail(source_path: Path, dest_path: Path) -> Path:
    """Write a thumbnail of ``source_path`` to ``dest_path``."""
    data = render_thumbnail(source_path)
    try:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(data)
    except OSError as exc:
        raise ThumbnailError(f"Cannot write thumbnail {dest_path.name}: {exc}") from exc
    logger.debug("Thumbnail written to %s", dest_path)
    return dest_path
