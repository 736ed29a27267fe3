"""In-memory question/answer sessions.

Each session keeps its conversation history and the list of Q&A entries,
newest first. Entries are created pending and updated in place once the
answer (or the error) arrives.
"""

import uuid
from collections import OrderedDict

from pydantic import BaseModel

from services.library.AskService import AskService
from shared.clients.llm.models.Generation import Content
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import now_iso
from shared.models.ask import NO_ANSWER_PLACEHOLDER, QAEntry
from shared.models.errors import InvalidInputError

DEFAULT_MAX_SESSIONS = 100
DEFAULT_MAX_SESSION_ENTRIES = 50


class SessionBusyError(Exception):
    """Raised when a session is asked a new question while still answering the previous one."""


class ConversationSession(BaseModel):
    id: str
    conversation: list[Content] = []
    entries: list[QAEntry] = []
    busy: bool = False


class ConversationService:
    def __init__(self, helper_config: HelperConfig, ask_service: AskService) -> None:
        self.logging = helper_config.get_logger()
        self._ask_service = ask_service
        self.max_sessions = max(1, int(helper_config.get_number_val("LIBRARY_MAX_SESSIONS", default=DEFAULT_MAX_SESSIONS)))
        self.max_entries = max(1, int(helper_config.get_number_val("LIBRARY_MAX_SESSION_ENTRIES", default=DEFAULT_MAX_SESSION_ENTRIES)))
        # least recently used first
        self._sessions: OrderedDict[str, ConversationSession] = OrderedDict()

    def get_session(self, session_id: str) -> ConversationSession:
        """
        Raises:
            KeyError: If no session with this id exists.
        """
        return self._sessions[session_id]

    def open_session(self, session_id: str | None = None) -> ConversationSession:
        """Return the session for session_id, creating it (with a fresh id when None) if needed.

        Creating a session beyond LIBRARY_MAX_SESSIONS evicts the least recently
        used idle sessions first.
        """
        session_id = session_id or str(uuid.uuid4())
        if session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return self._sessions[session_id]

        self._evict(keep=self.max_sessions - 1)
        session = ConversationSession(id=session_id)
        self._sessions[session_id] = session
        return session

    def clear_session(self, session_id: str) -> None:
        """Forget a session with its entries and history.

        Raises:
            KeyError: If no session with this id exists.
        """
        del self._sessions[session_id]

    def _evict(self, keep: int) -> None:
        idle = [sid for sid, session in self._sessions.items() if not session.busy]
        for sid in idle[: max(0, len(self._sessions) - keep)]:
            del self._sessions[sid]
            self.logging.debug("Evicted conversation session %s", sid)

    async def ask(self, question: str, session_id: str | None = None) -> tuple[ConversationSession, QAEntry]:
        """Ask a question within a session.

        Failures of the remote call are recorded on the entry and do not raise.

        Returns:
            tuple[ConversationSession, QAEntry]: The session and the resolved entry.

        Raises:
            InvalidInputError: If the question is empty.
            SessionBusyError: If the session is already answering a question.
        """
        trimmed = (question or "").strip()
        if not trimmed:
            raise InvalidInputError("A question is required to query the Great Library.")

        session = self.open_session(session_id)
        if session.busy:
            raise SessionBusyError(f"Session {session.id} is still answering the previous question.")

        entry = QAEntry(id=str(uuid.uuid4()), question=trimmed, createdAt=now_iso())
        session.entries.insert(0, entry)
        del session.entries[self.max_entries :]
        session.busy = True
        try:
            result = await self._ask_service.ask(question=trimmed, conversation=session.conversation)
        except Exception as e:
            entry.status = "error"
            entry.error = str(e) or e.__class__.__name__
            self.logging.error("Question failed in session %s: %s", session.id, entry.error)
        else:
            session.conversation = result.conversation
            entry.status = "ready"
            entry.answer = result.answer or NO_ANSWER_PLACEHOLDER
            entry.citations = result.citations
        finally:
            session.busy = False
        return session, entry
