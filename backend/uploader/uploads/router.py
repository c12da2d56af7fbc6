"""FastAPI router for image upload endpoints."""
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from .context import UploadContext, get_upload_context
from .schemas import UploadResponse
from .service import RecordStoreError
from .storage import UploadRejected

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"

router = APIRouter(tags=["uploads"])


def get_image_url(request: Request, filename: str) -> str:
    """Public URL of a stored file, built from the request's own base URL."""
    base_url = str(request.base_url).rstrip("/")
    return f"{base_url}{URL_PREFIX}/{filename}"


def _error(status_code: int, **body) -> JSONResponse:
    return JSONResponse(body, status_code=status_code)


def _database_error(e: RecordStoreError) -> JSONResponse:
    logger.error("Database error: %s", e)
    return _error(500, error="Database error", details=str(e))


@router.post("/upload")
async def upload_image(
    request: Request,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    image: Union[UploadFile, str, None] = File(None),
    ctx: UploadContext = Depends(get_upload_context),
) -> JSONResponse:
    """Store one image and record who uploaded it.

    Checks run in order and stop at the first failure: name/email present,
    email not yet registered, file present and acceptable. The file is
    written before the record is inserted; if the insert fails the file
    stays on disk.

    Returns:
        200 with name, email and imageUrl
        400 for missing fields, duplicate email, missing or invalid file
        500 if the database or disk write fails
    """
    if not name or not email:
        return _error(400, error="Name and email are required!")

    try:
        existing = ctx.store.find_by_email(email)
    except RecordStoreError as e:
        return _database_error(e)
    if existing is not None:
        return _error(400, message="Email already registered")

    # A plain text "image" field counts as no file.
    if not isinstance(image, StarletteUploadFile) or not image.filename:
        return _error(400, error="No file uploaded!")

    # One byte over the limit is enough to reject.
    content = await image.read(ctx.storage.max_file_size_bytes + 1)

    try:
        stored_filename = ctx.storage.save(
            filename=image.filename,
            mime_type=image.content_type or "application/octet-stream",
            content=content,
        )
    except UploadRejected as e:
        logger.warning("Upload rejected for %s (%s): %s", email, image.filename, e)
        return _error(400, error=str(e))
    except OSError as e:
        logger.error("File storage failed for %s: %s", image.filename, e)
        return _error(500, error="File storage error", details=str(e))

    image_url = get_image_url(request, stored_filename)

    try:
        ctx.store.insert(name=name, email=email, image_url=image_url)
    except RecordStoreError as e:
        logger.error("Record insert failed; %s left without a record", stored_filename)
        return _database_error(e)

    logger.info("Upload recorded: %s -> %s", email, image_url)
    response = UploadResponse(name=name, email=email, image_url=image_url)
    return JSONResponse(response.model_dump(by_alias=True))


@router.get("/images")
async def list_images(ctx: UploadContext = Depends(get_upload_context)) -> JSONResponse:
    """List every upload record."""
    try:
        records = ctx.store.list_all()
    except RecordStoreError as e:
        return _database_error(e)
    return JSONResponse([r.to_json() for r in records])


@router.get(URL_PREFIX + "/{filename}")
async def get_uploaded_file(filename: str, ctx: UploadContext = Depends(get_upload_context)):
    """Serve a stored image; content type is inferred from the name."""
    try:
        file_path = ctx.storage.resolve(filename)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path=file_path)
