import asyncio

from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import UploadRequest
from server.models.responses import UploadResponse
from services.library.UploadService import read_files_metadata
from shared.models.errors import InvalidInputError

router = APIRouter(prefix="/documents", tags=["upload"])


@router.post("/upload")
async def upload_files(
    request: Request,
    body: UploadRequest,
    _: None = Depends(verify_api_key),
) -> UploadResponse:
    """Upload local files into the library store.

    Paths that are not readable files or have an unknown MIME type are skipped.

    Args:
        request (Request): FastAPI request (provides app.state.upload_service).
        body (UploadRequest): Local file paths to upload.
        _ (None): Auth dependency result (unused).

    Returns:
        UploadResponse: The store used and the indexed documents.
    """
    logging = request.app.state.logging
    # stat and MIME lookups hit the filesystem
    files = await asyncio.to_thread(read_files_metadata, body.paths, logging)
    if not files:
        raise InvalidInputError("Please pick at least one file.")

    def on_progress(file, index, total):
        logging.info("Uploading %s (%d/%d)", file.name, index + 1, total)

    result = await request.app.state.upload_service.upload_files(files, on_progress=on_progress)
    return UploadResponse(
        store=result.store,
        documents=result.documents,
        message=f"{len(result.documents)} file(s) ready",
    )
