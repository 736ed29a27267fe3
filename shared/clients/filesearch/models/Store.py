"""Remote file search store model."""

from pydantic import BaseModel


class StoreDetails(BaseModel):
    """
    A file search store as returned by the remote service. name is the full resource name (e.g. "fileSearchStores/abc").
    """
    name: str
    displayName: str | None = None
    createTime: str | None = None
    updateTime: str | None = None
    activeDocumentsCount: int | None = None
    pendingDocumentsCount: int | None = None
    failedDocumentsCount: int | None = None
    sizeBytes: int | None = None


class StoresListResponse(BaseModel):
    """
    One page of a store listing.
    """
    stores: list[StoreDetails] = []
    nextPageToken: str | None = None
