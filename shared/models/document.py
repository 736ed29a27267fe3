"""Pydantic models for locally cached document data.

Hierarchy:
  StoredDocument  — one indexed file or note as recorded in the local cache.
  CacheState      — the single blob persisted under the cache key.
  UploadableFile  — a local file selected for upload.
  UploadResult    — outcome of one upload batch.
"""

from typing import Literal

from pydantic import BaseModel

UploadStatus = Literal["pending", "uploading", "processing", "indexed", "error"]


class StoreHandle(BaseModel):
    """Resolved file search store.

    id is the last segment of name (e.g. name "fileSearchStores/abc" -> id "abc").
    """

    id: str
    name: str
    displayName: str | None = None


class StoredDocument(BaseModel):
    """A document recorded in the local cache.

    The id is unique within the cache; upserts overwrite existing records by id.
    uploadDate is an ISO-8601 string so records sort chronologically as text.
    """

    id: str
    name: str
    uploadDate: str
    size: int = 0
    status: UploadStatus = "pending"
    metadata: dict[str, str] | None = None


class CacheState(BaseModel):
    """The persisted cache blob."""

    storeId: str | None = None
    documents: list[StoredDocument] = []


class UploadableFile(BaseModel):
    path: str
    name: str
    size: int
    mimeType: str


class UploadResult(BaseModel):
    store: StoreHandle
    documents: list[StoredDocument] = []


class NoteResult(BaseModel):
    noteId: str
    title: str
    size: int
    status: UploadStatus
