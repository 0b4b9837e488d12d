"""
Tests for the filesystem storage backend and directory scanning.
"""

import os
from pathlib import Path

import pytest

from conftest import make_image
from errors import DeletionError, InvalidFilename, ListingError, ThumbnailError
from scanner import thumbnail_name
from storage import FilesystemStorage
from utils import StoredFilename


def stored(name: str) -> StoredFilename:
    return StoredFilename.parse(name)


def test_directories_created(tmp_path):
    FilesystemStorage(tmp_path / "a" / "uploads", tmp_path / "a" / "thumbs")

    assert (tmp_path / "a" / "uploads").is_dir()
    assert (tmp_path / "a" / "thumbs").is_dir()


def test_store_and_thumbnail(fs_storage, png_bytes):
    name = stored("images-1-1.png")

    assert fs_storage.store(png_bytes, name) == "/uploads/images-1-1.png"
    assert fs_storage.create_thumbnail(name) == "/thumbnails/thumb_images-1-1.png"
    assert (fs_storage.upload_dir / name).read_bytes() == png_bytes
    assert (fs_storage.thumbnail_dir / "thumb_images-1-1.png").read_bytes()[:2] == b"\xff\xd8"


def test_store_never_overwrites(fs_storage, png_bytes):
    name = stored("images-1-1.png")
    fs_storage.store(png_bytes, name)

    with pytest.raises(FileExistsError):
        fs_storage.store(b"other", name)
    assert (fs_storage.upload_dir / name).read_bytes() == png_bytes


def test_thumbnail_of_corrupt_file(fs_storage):
    name = stored("images-1-1.jpg")
    fs_storage.store(b"garbage", name)

    with pytest.raises(ThumbnailError):
        fs_storage.create_thumbnail(name)
    assert not (fs_storage.thumbnail_dir / thumbnail_name(name)).exists()


def test_list_filters_extensions_and_directories(fs_storage, png_bytes):
    for name in ("a.png", "b.JPG", "c.webp", "notes.txt", "archive.zip"):
        (fs_storage.upload_dir / name).write_bytes(png_bytes)
    (fs_storage.upload_dir / "batch.png").mkdir()

    names = sorted(e.filename for e in fs_storage.list())

    assert names == ["a.png", "b.JPG", "c.webp"]


def test_list_reports_thumbnail_presence_independently(fs_storage, png_bytes):
    with_thumb, without_thumb = stored("images-1-1.png"), stored("images-2-2.png")
    fs_storage.store(png_bytes, with_thumb)
    fs_storage.store(png_bytes, without_thumb)
    fs_storage.create_thumbnail(with_thumb)

    entries = {e.filename: e for e in fs_storage.list()}

    assert entries[with_thumb].thumbnail_path == "/thumbnails/thumb_images-1-1.png"
    assert entries[without_thumb].thumbnail_path is None
    assert entries[without_thumb].size == len(png_bytes)
    assert entries[without_thumb].upload_date.tzinfo is not None


def test_list_error(fs_storage):
    fs_storage.upload_dir.rmdir()

    with pytest.raises(ListingError):
        fs_storage.list()


def test_delete_removes_both(fs_storage, png_bytes):
    name = stored("images-1-1.png")
    fs_storage.store(png_bytes, name)
    fs_storage.create_thumbnail(name)

    assert fs_storage.delete(name) is True
    assert fs_storage.list() == []
    assert list(fs_storage.thumbnail_dir.iterdir()) == []


def test_delete_is_idempotent(fs_storage):
    assert fs_storage.delete(stored("images-9-9.png")) is False


def test_delete_orphan_thumbnail(fs_storage, png_bytes):
    (fs_storage.thumbnail_dir / "thumb_gone.png").write_bytes(png_bytes)

    assert fs_storage.delete(stored("gone.png")) is True
    assert not (fs_storage.thumbnail_dir / "thumb_gone.png").exists()


def test_delete_error(fs_storage, png_bytes, monkeypatch):
    name = stored("images-1-1.png")
    fs_storage.store(png_bytes, name)

    def refuse(self, *args, **kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "unlink", refuse)

    with pytest.raises(DeletionError):
        fs_storage.delete(name)


def test_symlink_outside_root_rejected(fs_storage, tmp_path):
    outside = tmp_path / "outside.png"
    outside.write_bytes(make_image())
    os.symlink(outside, fs_storage.upload_dir / "link.png")

    with pytest.raises(InvalidFilename):
        fs_storage.delete(stored("link.png"))
    assert outside.exists()


def test_stage_batch_links_files(fs_storage, png_bytes):
    names = [stored("images-1-1.png"), stored("images-2-2.png")]
    for name in names:
        fs_storage.store(png_bytes, name)

    batch = fs_storage.stage_batch(stored("session"), names)

    assert batch == (fs_storage.upload_dir / "session").resolve()
    assert sorted(p.name for p in batch.iterdir()) == sorted(names)
    # Staging twice is harmless
    assert fs_storage.stage_batch(stored("session"), names) == batch
