"""Typed generateContent response schema, independent of the backend engine.

Field names follow the Gemini REST payload so a response can be validated
directly with model_validate(). Every field the service reads is optional.
"""

from pydantic import BaseModel


class Part(BaseModel):
    text: str | None = None


class Content(BaseModel):
    """One conversation turn. role is "user" or "model"."""

    role: str | None = None
    parts: list[Part] = []


class RagChunk(BaseModel):
    text: str | None = None


class RetrievedContext(BaseModel):
    """Context retrieved from a file search store for one grounding chunk."""

    documentName: str | None = None
    title: str | None = None
    uri: str | None = None
    text: str | None = None
    ragChunk: RagChunk | None = None


class WebSource(BaseModel):
    uri: str | None = None
    title: str | None = None


class MapsSource(BaseModel):
    uri: str | None = None
    title: str | None = None
    text: str | None = None


class GroundingChunk(BaseModel):
    retrievedContext: RetrievedContext | None = None
    web: WebSource | None = None
    maps: MapsSource | None = None


class GroundingMetadata(BaseModel):
    groundingChunks: list[GroundingChunk] = []
    webSearchQueries: list[str] = []


class Candidate(BaseModel):
    content: Content | None = None
    groundingMetadata: GroundingMetadata | None = None
    finishReason: str | None = None


class GenerateContentResponse(BaseModel):
    """Response of a grounded generation request.

    text is filled by the client with the concatenated text of the first
    candidate when the backend does not return a direct text field.
    """

    text: str | None = None
    candidates: list[Candidate] = []
    modelVersion: str | None = None

    def first_candidate(self) -> Candidate | None:
        return self.candidates[0] if self.candidates else None
