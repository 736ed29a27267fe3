from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.responses import DeleteResponse, DocumentItem, DocumentsResponse
from shared.helper.format_helper import format_bytes
from shared.models.document import StoredDocument

router = APIRouter(prefix="/documents", tags=["documents"])


def _to_response(documents: list[StoredDocument]) -> DocumentsResponse:
    items = [DocumentItem(**doc.model_dump(), size_label=format_bytes(doc.size)) for doc in documents]
    return DocumentsResponse(documents=items, total=len(items))


@router.get("")
async def list_documents(request: Request, _: None = Depends(verify_api_key)) -> DocumentsResponse:
    """Return the locally cached documents, newest first."""
    documents = await request.app.state.document_service.get_cached_documents()
    return _to_response(documents)


@router.post("/sync")
async def sync_documents(request: Request, _: None = Depends(verify_api_key)) -> DocumentsResponse:
    """Refresh the cache from the remote store listing and return it."""
    documents = await request.app.state.document_service.sync_documents()
    return _to_response(documents)


@router.delete("/cache")
async def reset_cache(request: Request, _: None = Depends(verify_api_key)) -> DeleteResponse:
    """Drop the local document cache. The next sync or upload rebuilds it from the remote store."""
    dropped = await request.app.state.document_service.reset_cache()
    return DeleteResponse(deleted=dropped, message=f"Cleared {dropped} cached document(s)")


@router.delete("/{document_id}")
async def delete_document(document_id: str, request: Request, _: None = Depends(verify_api_key)) -> DeleteResponse:
    """Delete one document from the library store and the cache."""
    await request.app.state.document_service.delete_document(document_id)
    return DeleteResponse(deleted=1, message=f"Deleted document {document_id}")


@router.delete("")
async def delete_all_documents(request: Request, _: None = Depends(verify_api_key)) -> DeleteResponse:
    """Delete every document of the library store."""
    deleted = await request.app.state.document_service.delete_all_documents()
    return DeleteResponse(deleted=deleted, message=f"Deleted {deleted} document(s)")
