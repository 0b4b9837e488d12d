"""
Tests for cover-fit thumbnail generation.
"""

import io

import pytest
from PIL import Image as PILImage

from config import THUMBNAIL_SIZE
from conftest import make_image
from errors import ThumbnailError
from thumbnails import generate_thumbnail, render_thumbnail


def decode(data: bytes) -> PILImage.Image:
    im = PILImage.open(io.BytesIO(data))
    im.load()
    return im


def striped(width=600, height=200) -> bytes:
    """Red, green and blue vertical thirds."""
    im = PILImage.new("RGB", (width, height))
    third = width // 3
    im.paste((255, 0, 0), (0, 0, third, height))
    im.paste((0, 255, 0), (third, 0, 2 * third, height))
    im.paste((0, 0, 255), (2 * third, 0, width, height))
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def close_to(pixel, expected, tolerance=40):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


@pytest.mark.parametrize("size", [(640, 480), (120, 900), (50, 50)])
def test_output_is_fixed_square_jpeg(size):
    thumb = decode(render_thumbnail(make_image("PNG", size=size)))

    assert thumb.format == "JPEG"
    assert thumb.size == THUMBNAIL_SIZE


def test_cover_fit_crops_around_center():
    thumb = decode(render_thumbnail(striped())).convert("RGB")

    # The middle third fills the whole 200x200 box
    assert close_to(thumb.getpixel((100, 100)), (0, 255, 0))
    assert close_to(thumb.getpixel((10, 100)), (0, 255, 0))
    assert close_to(thumb.getpixel((190, 100)), (0, 255, 0))


def test_transparent_image_flattened_on_white():
    data = make_image("PNG", size=(300, 300), color=(0, 0, 0, 0), mode="RGBA")

    thumb = decode(render_thumbnail(data)).convert("RGB")

    assert close_to(thumb.getpixel((100, 100)), (255, 255, 255), tolerance=5)


def test_accepts_path(tmp_path):
    src = tmp_path / "src.webp"
    src.write_bytes(make_image("WEBP"))

    assert decode(render_thumbnail(src)).size == THUMBNAIL_SIZE


def test_corrupt_bytes_raise():
    with pytest.raises(ThumbnailError):
        render_thumbnail(b"definitely not an image")


def test_truncated_image_raises():
    data = make_image("PNG", size=(400, 400))

    with pytest.raises(ThumbnailError):
        render_thumbnail(data[: len(data) // 2])


def test_generate_thumbnail_writes_destination(tmp_path):
    src = tmp_path / "in.png"
    src.write_bytes(make_image())
    dest = tmp_path / "thumbs" / "thumb_in.png"

    assert generate_thumbnail(src, dest) == dest
    assert decode(dest.read_bytes()).size == THUMBNAIL_SIZE


def test_generate_thumbnail_missing_source(tmp_path):
    with pytest.raises(ThumbnailError):
        generate_thumbnail(tmp_path / "missing.png", tmp_path / "out.jpg")
