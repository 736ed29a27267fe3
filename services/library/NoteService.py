"""Quick notes: short text captured by the user and stored as a Markdown document."""

import asyncio
import os
import re
import tempfile
import uuid

from services.library.UploadService import UploadService
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import truncate
from shared.models.document import NoteResult, UploadableFile
from shared.models.errors import FileTooLargeError, InvalidInputError, UploadError

UNTITLED_NOTE = "Untitled Note"
QUICK_NOTE = "Quick Note"
TITLE_MAX_LENGTH = 80


def build_slug(value: str) -> str:
    """Lowercase, dash-separated file name stem of at most 50 characters."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")[:50]
    return slug or "note"


def derive_note_title(content: str, source_name: str | None = None) -> str:
    """Title from the first non-empty line, prefixed with the source application when known."""
    first_line = next((line.strip() for line in content.splitlines() if line.strip()), None)
    base_title = truncate(first_line, TITLE_MAX_LENGTH) if first_line else QUICK_NOTE
    source = (source_name or "").strip()
    if source:
        return truncate(f"{source}: {base_title}", TITLE_MAX_LENGTH)
    return base_title


def format_note_content(title: str, content: str) -> str:
    if not title or title == UNTITLED_NOTE:
        return f"{content}\n"
    return f"# {title}\n\n{content}\n"


class NoteService:
    def __init__(self, helper_config: HelperConfig, upload_service: UploadService) -> None:
        self.logging = helper_config.get_logger()
        self._upload_service = upload_service
        self._tmp_dir = tempfile.gettempdir()

    async def save_note(self, content: str, title: str | None = None, source_name: str | None = None) -> NoteResult:
        """Write a note to a temporary Markdown file and upload it to the library.

        Args:
            content (str): Note body.
            title (str | None): Explicit title. None derives one from the content; a blank title means "Untitled Note".
            source_name (str | None): Application the text was captured from.

        Returns:
            NoteResult: Id, title, size and status of the stored note.

        Raises:
            InvalidInputError: If the content is empty.
            FileTooLargeError: If the note exceeds the upload size limit.
        """
        body = (content or "").strip()
        if not body:
            raise InvalidInputError("Provide the note content to upload.")

        if title is None:
            title = derive_note_title(body, source_name)
        title = title.strip() or UNTITLED_NOTE

        file_contents = format_note_content(title, body)
        encoded = file_contents.encode("utf-8")
        if len(encoded) > self._upload_service.max_file_size:
            raise FileTooLargeError(title, self._upload_service.max_file_size)

        file_name = f"{build_slug(title)}-{uuid.uuid4().hex[:8]}.md"
        file_path = os.path.join(self._tmp_dir, file_name)
        await asyncio.to_thread(self._write_file, file_path, encoded)
        self.logging.info("Captured note %r (%d chars)", title, len(body))

        try:
            uploadable = UploadableFile(path=file_path, name=title, size=len(encoded), mimeType="text/markdown")
            result = await self._upload_service.upload_files([uploadable])
        finally:
            await asyncio.to_thread(self._remove_file, file_path)

        if not result.documents:
            raise UploadError("The note was not stored successfully.")
        document = result.documents[0]
        return NoteResult(noteId=document.id, title=document.name, size=document.size, status=document.status)

    @staticmethod
    def _write_file(path: str, data: bytes) -> None:
        with open(path, "wb") as fh:
            fh.write(data)

    def _remove_file(self, path: str) -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logging.warning("Could not remove temporary note file %s: %s", path, e)
