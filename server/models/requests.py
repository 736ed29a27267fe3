from pydantic import BaseModel


class NoteRequest(BaseModel):
    content: str
    title: str | None = None
    source_name: str | None = None


class UploadRequest(BaseModel):
    paths: list[str]


class AskRequest(BaseModel):
    question: str
    session_id: str | None = None
