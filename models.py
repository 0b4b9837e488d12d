"""Response models for the upload gallery.

Nothing here is a table: files on disk are the only record of an upload, so
these are plain SQLModel schemas used as FastAPI response models.
"""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, SQLModel


class UploadedFile(SQLModel):
    """One accepted file of an upload request."""
    filename: str = Field(description="Generated stored name")
    original_name: str
    size: int = 0
    mime_type: str
    upload_path: str
    thumbnail_path: Optional[str] = None
    thumbnail_error: bool = False


class RejectedFile(SQLModel):
    """A submitted file refused before storage."""
    original_name: str
    error: str


class GalleryEntry(SQLModel):
    """Listing entry, rebuilt from the filesystem on every request."""
    filename: str
    upload_path: str
    thumbnail_path: Optional[str] = None
    size: int = 0
    upload_date: datetime


class UploadResponse(SQLModel):
    success: bool = True
    message: str
    files: List[UploadedFile] = Field(default_factory=list)
    rejected: List[RejectedFile] = Field(default_factory=list)


class GalleryResponse(SQLModel):
    images: List[GalleryEntry] = Field(default_factory=list)


class DeleteResponse(SQLModel):
    success: bool = True
    message: Optional[str] = None
