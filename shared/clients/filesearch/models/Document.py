"""Remote file search document model."""

from pydantic import BaseModel


class CustomMetadata(BaseModel):
    key: str | None = None
    stringValue: str | None = None
    numericValue: float | None = None


class RemoteDocument(BaseModel):
    """
    A document inside a file search store. name is the full resource name (e.g. "fileSearchStores/abc/documents/xyz").
    state is one of STATE_PENDING, STATE_ACTIVE, STATE_FAILED.
    """
    name: str | None = None
    displayName: str | None = None
    customMetadata: list[CustomMetadata] | None = None
    createTime: str | None = None
    updateTime: str | None = None
    state: str | None = None
    sizeBytes: int | None = None
    mimeType: str | None = None


class DocumentsListResponse(BaseModel):
    """
    One page of a document listing.
    """
    documents: list[RemoteDocument] = []
    nextPageToken: str | None = None
