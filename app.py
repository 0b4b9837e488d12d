"""
Image Upload – drag-and-drop image uploader with thumbnails (FastAPI + Pillow)

Quick start
-----------
1) python -m venv .venv && source .venv/bin/activate  # or .venv\\Scripts\\activate on Windows
2) pip install -e .
3) python app.py  # auto-writes templates/static and creates uploads/ + thumbnails/
4) Open http://localhost:7860 → drop images → Upload

Notes
-----
• Originals are stored flat under ./uploads/, 200×200 JPEG thumbnails under ./thumbnails/.
• An upload carrying a "hash" field is staged in ./uploads/<hash>/ and handed to
  POSTPROCESS_COMMAND in the background; set it to "" to disable.
• PORT, UPLOAD_DIR, THUMBNAIL_DIR and LOG_LEVEL are read from the environment.
"""

import logging
import sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import HOST, LOG_LEVEL, PORT, STATIC_DIR
from errors import ImageHostError
from models import DeleteResponse, GalleryResponse, UploadResponse
from postprocess import PostProcessor, get_postprocessor
from routes import delete_image, index, list_images, upload_images
from storage import StorageBackend, get_storage
from templates_static import ensure_assets

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")


async def image_host_error_handler(request: Request, exc: ImageHostError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "Invalid request"})


def create_app(
    storage: Optional[StorageBackend] = None,
    postprocessor: Optional[PostProcessor] = None,
) -> FastAPI:
    """Build the application. Without arguments the configured directories and
    post-processing command are used."""
    app = FastAPI(title="Image Upload")

    if storage is not None:
        app.dependency_overrides[get_storage] = lambda: storage
    else:
        storage = get_storage()
    if postprocessor is not None:
        app.dependency_overrides[get_postprocessor] = lambda: postprocessor

    # Ensure templates and static files exist
    ensure_assets()

    # Mount static files; in-memory backends have nothing to serve
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    upload_dir = getattr(storage, "upload_dir", None)
    thumbnail_dir = getattr(storage, "thumbnail_dir", None)
    if upload_dir is not None and thumbnail_dir is not None:
        app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")
        app.mount("/thumbnails", StaticFiles(directory=str(thumbnail_dir)), name="thumbnails")
        logger.info("Upload directory: %s", upload_dir)
        logger.info("Thumbnails directory: %s", thumbnail_dir)

    app.add_exception_handler(ImageHostError, image_host_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Routes
    app.get("/", response_class=HTMLResponse)(index)
    app.post("/upload", response_model=UploadResponse)(upload_images)
    app.get("/api/images", response_model=GalleryResponse)(list_images)
    app.delete("/api/images/{filename}", response_model=DeleteResponse)(delete_image)

    return app


app = create_app()


if __name__ == "__main__":
    # Allow `python app.py 8000`
    port = int(sys.argv[1]) if len(sys.argv) > 1 else PORT
    logger.info("Server running on http://localhost:%d", port)
    import uvicorn

    uvicorn.run("app:app", host=HOST, port=port)
