"""Application configuration."""
import os
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = APP_DIR / "templates"
STATIC_DIR = APP_DIR / "static"

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 7860))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Storage
UPLOAD_DIR = Path(os.environ.get("UPLOAD_DIR", APP_DIR / "uploads"))
THUMBNAIL_DIR = Path(os.environ.get("THUMBNAIL_DIR", APP_DIR / "thumbnails"))
UPLOAD_URL_PREFIX = "/uploads"
THUMBNAIL_URL_PREFIX = "/thumbnails"
ALLOWED_EXTS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# Upload limits
UPLOAD_FIELD = "images"
GROUP_FIELD = "hash"
MAX_FILES_PER_REQUEST = 10
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

# Thumbnails
THUMBNAIL_PREFIX = "thumb_"
THUMBNAIL_SIZE = (200, 200)
THUMBNAIL_QUALITY = 80

# Post-processing; an empty command disables the step
POSTPROCESS_COMMAND = os.environ.get("POSTPROCESS_COMMAND", "python ../trellis-run.py")
POSTPROCESS_TIMEOUT = float(os.environ.get("POSTPROCESS_TIMEOUT", 600))
