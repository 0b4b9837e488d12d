"""Exceptions raised by the upload, listing and deletion layers.

Storage code raises these instead of logging; routes let them propagate and
the handler registered in ``app.py`` turns them into ``{"error": ...}``
responses carrying ``status_code``.
"""
from typing import Optional


class ImageHostError(Exception):
    """Base class for every error that can reach a client."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class ValidationError(ImageHostError):
    """A submitted file or parameter does not meet the upload constraints."""

    status_code = 400


class RequestRejected(ValidationError):
    """The request as a whole is refused; nothing was stored."""


class InvalidFilename(ValidationError):
    """A filename or grouping token would escape its directory."""


class ThumbnailError(ImageHostError):
    """Decoding or encoding a thumbnail failed."""


class ListingError(ImageHostError):
    """The upload directory could not be read."""


class DeletionError(ImageHostError):
    """An image or its thumbnail could not be removed."""


class PostProcessError(ImageHostError):
    """The external post-processing command failed. Never sent to clients."""
