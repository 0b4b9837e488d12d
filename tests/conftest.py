"""
Pytest configuration and shared fixtures for the upload gallery tests.
"""

import io
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

# Keep the module-level app away from the project directories
_SCRATCH = tempfile.mkdtemp(prefix="image-upload-tests-")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_SCRATCH, "uploads"))
os.environ.setdefault("THUMBNAIL_DIR", os.path.join(_SCRATCH, "thumbnails"))
os.environ["POSTPROCESS_COMMAND"] = ""

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from app import create_app
from config import ALLOWED_EXTS
from models import GalleryEntry
from postprocess import PostProcessor
from scanner import thumbnail_url, upload_url
from storage import FilesystemStorage
from thumbnails import render_thumbnail


def make_image(fmt: str = "PNG", size=(320, 240), color=(200, 40, 40), mode: str = "RGB") -> bytes:
    """Encode a solid test image."""
    buf = io.BytesIO()
    PILImage.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


class MemoryStorage:
    """In-memory storage backend."""

    def __init__(self):
        self.files = {}
        self.thumbnails = {}
        self.batches = {}

    def store(self, data, name):
        if name in self.files:
            raise FileExistsError(name)
        self.files[name] = data
        return upload_url(name)

    def create_thumbnail(self, name):
        self.thumbnails[name] = render_thumbnail(self.files[name])
        return thumbnail_url(name)

    def list(self):
        return [
            GalleryEntry(
                filename=name,
                upload_path=upload_url(name),
                thumbnail_path=thumbnail_url(name) if name in self.thumbnails else None,
                size=len(data),
                upload_date=datetime.now(timezone.utc),
            )
            for name, data in self.files.items()
            if Path(name).suffix.lower() in ALLOWED_EXTS
        ]

    def delete(self, name):
        removed = self.files.pop(name, None) is not None
        removed = (self.thumbnails.pop(name, None) is not None) or removed
        return removed

    def stage_batch(self, token, names):
        self.batches[token] = list(names)
        return None


class RecordingPostProcessor(PostProcessor):
    """Records scheduled folders instead of running anything."""

    def __init__(self):
        super().__init__(command="")
        self.folders = []

    def schedule(self, tasks, folder):
        self.folders.append(folder)
        return True


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def fs_storage(tmp_path):
    return FilesystemStorage(tmp_path / "uploads", tmp_path / "thumbnails")


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def postprocessor():
    return RecordingPostProcessor()


@pytest.fixture
def client(fs_storage, postprocessor):
    with TestClient(create_app(storage=fs_storage, postprocessor=postprocessor)) as c:
        yield c


@pytest.fixture
def memory_client(memory_storage, postprocessor):
    with TestClient(create_app(storage=memory_storage, postprocessor=postprocessor)) as c:
        yield c
