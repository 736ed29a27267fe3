from pydantic import BaseModel

from shared.models.ask import QAEntry
from shared.models.document import StoreHandle, StoredDocument


class DocumentItem(StoredDocument):
    size_label: str


class DocumentsResponse(BaseModel):
    documents: list[DocumentItem]
    total: int


class UploadResponse(BaseModel):
    store: StoreHandle
    documents: list[StoredDocument]
    message: str


class DeleteResponse(BaseModel):
    deleted: int
    message: str


class CitationItem(BaseModel):
    documentId: str | None
    documentName: str
    snippet: str | None
    snippet_preview: str
    uri: str | None


class AskResponse(BaseModel):
    session_id: str
    entry: QAEntry
    citations: list[CitationItem]


class SessionResponse(BaseModel):
    session_id: str
    entries: list[QAEntry]
    conversation_length: int
