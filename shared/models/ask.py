"""Pydantic models for question answering.

Hierarchy:
  CitationEntry  — de-duplicated reference to a source document backing an answer.
  AskResult      — outcome of a single grounded question.
  QAEntry        — one question of a conversation session, mutated while it resolves.
"""

from typing import Literal

from pydantic import BaseModel

from shared.clients.llm.models.Generation import Content, GroundingMetadata
from shared.models.document import StoreHandle

DEFAULT_MAX_CONTEXT_MESSAGES = 10
NO_ANSWER_PLACEHOLDER = "_The model returned no answer._"


class CitationEntry(BaseModel):
    id: str
    documentId: str | None = None
    documentName: str
    snippet: str | None = None
    uri: str | None = None


class AskResult(BaseModel):
    """Answer, citations and the updated conversation for one question.

    history is the request history sent to the model (prior conversation plus
    the new user turn); conversation is history plus the model turn, trimmed
    to the configured window.
    """

    answer: str | None = None
    citations: list[CitationEntry] = []
    modelContent: Content | None = None
    metadata: GroundingMetadata | None = None
    store: StoreHandle
    history: list[Content] = []
    conversation: list[Content] = []


class QAEntry(BaseModel):
    id: str
    question: str
    status: Literal["pending", "ready", "error"] = "pending"
    answer: str | None = None
    error: str | None = None
    citations: list[CitationEntry] = []
    createdAt: str
