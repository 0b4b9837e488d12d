"""FastAPI routes for the upload gallery."""
import logging
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import (
    GROUP_FIELD,
    MAX_FILE_SIZE,
    MAX_FILES_PER_REQUEST,
    TEMPLATES_DIR,
    UPLOAD_FIELD,
)
from errors import (
    DeletionError,
    ImageHostError,
    ListingError,
    RequestRejected,
    ThumbnailError,
    ValidationError,
)
from models import (
    DeleteResponse,
    GalleryResponse,
    RejectedFile,
    UploadedFile,
    UploadResponse,
)
from postprocess import PostProcessor, get_postprocessor
from storage import StorageBackend, get_storage
from utils import StoredFilename, format_size, make_stored_name

logger = logging.getLogger(__name__)

# Jinja environment
jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


def render(name: str, **ctx) -> HTMLResponse:
    """Render template with context."""
    template = jinja_env.get_template(name)
    ctx.setdefault("title", "Image Upload")
    return HTMLResponse(template.render(**ctx))


def index(request: Request):
    """Upload page with the gallery."""
    return render(
        "index.html",
        max_files=MAX_FILES_PER_REQUEST,
        max_file_size=MAX_FILE_SIZE,
        max_file_size_label=format_size(MAX_FILE_SIZE),
        upload_field=UPLOAD_FIELD,
        group_field=GROUP_FIELD,
    )


async def read_upload(upload: UploadFile, max_size: int = MAX_FILE_SIZE) -> bytes:
    """Read an uploaded file, enforcing the image MIME type and size ceiling."""
    if not (upload.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed!")
    # One byte past the ceiling is enough to tell it was exceeded
    data = await upload.read(max_size + 1)
    if len(data) > max_size:
        raise ValidationError(f"File exceeds the {format_size(max_size)} limit")
    return data


async def upload_images(
    background_tasks: BackgroundTasks,
    images: Optional[List[UploadFile]] = File(None, alias=UPLOAD_FIELD),
    group_token: Optional[str] = Form(None, alias=GROUP_FIELD),
    storage: StorageBackend = Depends(get_storage),
    postprocessor: PostProcessor = Depends(get_postprocessor),
):
    """Store a batch of images, thumbnail them and queue post-processing."""
    if not images:
        raise RequestRejected("No files uploaded")
    if len(images) > MAX_FILES_PER_REQUEST:
        raise RequestRejected(f"Too many files: at most {MAX_FILES_PER_REQUEST} per upload")
    token = StoredFilename.parse(group_token) if group_token else None
    logger.info("Received hash: %s", token)

    accepted: List[UploadedFile] = []
    rejected: List[RejectedFile] = []
    store_failed = False
    for upload in images:
        original_name = upload.filename or ""
        try:
            data = await read_upload(upload)
            name = make_stored_name(original_name, upload.content_type)
        except ValidationError as exc:
            logger.warning("Rejected %s: %s", original_name, exc)
            rejected.append(RejectedFile(original_name=original_name, error=exc.message))
            continue

        try:
            upload_path = await run_in_threadpool(storage.store, data, name)
        except OSError as exc:
            logger.exception("Upload error for %s", original_name)
            store_failed = True
            rejected.append(RejectedFile(original_name=original_name, error=f"Upload failed: {exc}"))
            continue
        logger.info("Stored %s as %s (%s)", original_name, name, format_size(len(data)))

        thumbnail_path = None
        try:
            thumbnail_path = await run_in_threadpool(storage.create_thumbnail, name)
        except ThumbnailError:
            logger.exception("Error generating thumbnail for %s", name)

        accepted.append(
            UploadedFile(
                filename=name,
                original_name=original_name,
                size=len(data),
                mime_type=upload.content_type,
                upload_path=upload_path,
                thumbnail_path=thumbnail_path,
                thumbnail_error=thumbnail_path is None,
            )
        )

    if not accepted:
        message = "; ".join(sorted({r.error for r in rejected}))
        if store_failed:
            raise ImageHostError(message)
        raise RequestRejected(message)

    if token is None:
        logger.info("No %s supplied, skipping post-processing", GROUP_FIELD)
    else:
        try:
            folder = await run_in_threadpool(
                storage.stage_batch, token, [StoredFilename.parse(f.filename) for f in accepted]
            )
        except (OSError, ImageHostError) as exc:
            logger.error("Cannot stage batch %s for post-processing: %s", token, exc)
            folder = None
        if folder is not None:
            postprocessor.schedule(background_tasks, folder)

    return UploadResponse(
        success=True,
        message=f"{len(accepted)} file(s) uploaded successfully",
        files=accepted,
        rejected=rejected,
    )


def list_images(storage: StorageBackend = Depends(get_storage)):
    """List stored images with their thumbnails."""
    try:
        images = storage.list()
    except ListingError:
        logger.exception("Error getting images")
        raise
    return GalleryResponse(images=images)


def delete_image(filename: str, storage: StorageBackend = Depends(get_storage)):
    """Delete an image and its thumbnail. Unknown names succeed too."""
    name = StoredFilename.parse(filename)
    try:
        removed = storage.delete(name)
    except DeletionError:
        logger.exception("Delete error for %s", name)
        raise
    if removed:
        logger.info("Deleted %s", name)
    else:
        logger.info("Nothing to delete for %s", name)
    return DeleteResponse(success=True, message="Image deleted successfully")
