from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import NoteRequest
from shared.models.document import NoteResult

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("")
async def save_note(
    request: Request,
    body: NoteRequest,
    _: None = Depends(verify_api_key),
) -> NoteResult:
    """Store a short text note as a Markdown document in the library.

    Args:
        request (Request): FastAPI request (provides app.state.note_service).
        body (NoteRequest): Note content, optional title and source application.
        _ (None): Auth dependency result (unused).

    Returns:
        NoteResult: Id, title, size and status of the stored note.
    """
    note_service = request.app.state.note_service
    return await note_service.save_note(content=body.content, title=body.title, source_name=body.source_name)
