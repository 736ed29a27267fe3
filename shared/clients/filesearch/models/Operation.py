"""Long-running upload operation model."""

from typing import Any

from pydantic import BaseModel


class UploadOperationResponse(BaseModel):
    documentName: str | None = None
    parent: str | None = None
    mimeType: str | None = None
    sizeBytes: int | None = None


class UploadOperation(BaseModel):
    """
    Handle of an upload-and-index job. The job is finished once done is True; error then carries the failure payload.
    """
    name: str | None = None
    done: bool = False
    error: dict[str, Any] | None = None
    response: UploadOperationResponse | None = None
    metadata: dict[str, Any] | None = None
