from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import AskRequest
from server.models.responses import AskResponse, CitationItem, SessionResponse
from services.library.ConversationService import ConversationSession
from shared.helper.format_helper import truncate

router = APIRouter(prefix="/ask", tags=["ask"])


def _get_session(request: Request, session_id: str) -> ConversationSession:
    try:
        return request.app.state.conversation_service.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")


@router.post("")
async def ask_question(
    request: Request,
    body: AskRequest,
    _: None = Depends(verify_api_key),
) -> AskResponse:
    """Ask a question grounded against the library, continuing the given session.

    A failed answer is reported on the returned entry (status "error") rather
    than as an HTTP error, so the session history stays visible to the caller.

    Args:
        request (Request): FastAPI request (provides app.state.conversation_service).
        body (AskRequest): The question and an optional session id.
        _ (None): Auth dependency result (unused).

    Returns:
        AskResponse: The session id, the resolved entry and display-ready citations.
    """
    session, entry = await request.app.state.conversation_service.ask(body.question, session_id=body.session_id)
    citations = [
        CitationItem(
            documentId=citation.documentId,
            documentName=citation.documentName,
            snippet=citation.snippet,
            snippet_preview=truncate(citation.snippet),
            uri=citation.uri,
        )
        for citation in entry.citations
    ]
    return AskResponse(session_id=session.id, entry=entry, citations=citations)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request, _: None = Depends(verify_api_key)) -> SessionResponse:
    """Return the Q&A entries of a session, newest first."""
    session = _get_session(request, session_id)
    return SessionResponse(session_id=session.id, entries=session.entries, conversation_length=len(session.conversation))


@router.delete("/sessions/{session_id}")
async def clear_session(session_id: str, request: Request, _: None = Depends(verify_api_key)) -> SessionResponse:
    """Forget a session with its entries and conversation history."""
    session = _get_session(request, session_id)
    request.app.state.conversation_service.clear_session(session_id)
    return SessionResponse(session_id=session.id, entries=[], conversation_length=0)
