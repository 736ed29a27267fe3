"""Question answering grounded against the library store.

Builds the request history, asks the model with the file search tool
restricted to the library store, extracts the answer and a de-duplicated
citation list from the grounding metadata, and trims the conversation to a
fixed window.
"""

import uuid

from services.library.StoreResolver import StoreResolver
from shared.cache.LibraryCache import LibraryCache
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.models.Generation import Content, GroundingChunk, GroundingMetadata, Part
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import first_present, parse_resource_id, truncate
from shared.models.ask import DEFAULT_MAX_CONTEXT_MESSAGES, AskResult, CitationEntry
from shared.models.document import StoreHandle, StoredDocument
from shared.models.errors import InvalidInputError


def build_ask_history(question: str, conversation: list[Content] | None = None) -> list[Content]:
    """Prior conversation followed by one user turn carrying the trimmed question.

    Raises:
        InvalidInputError: If the question is empty after trimming.
    """
    trimmed = (question or "").strip()
    if not trimmed:
        raise InvalidInputError("A question is required to build the ask history.")
    return [*(conversation or []), Content(role="user", parts=[Part(text=trimmed)])]


def append_model_response(history: list[Content], model_content: Content | None, answer: str | None) -> list[Content]:
    """Append the model turn to history.

    The structured model content is preferred; a text-only turn is synthesised
    from the answer otherwise. Nothing is appended when neither exists.
    """
    if not history:
        return history
    next_history = list(history)
    if model_content is not None:
        next_history.append(Content(role=model_content.role or "model", parts=model_content.parts))
    elif answer:
        next_history.append(Content(role="model", parts=[Part(text=answer)]))
    return next_history


def trim_conversation(history: list[Content], max_context_messages: int = DEFAULT_MAX_CONTEXT_MESSAGES) -> list[Content]:
    """Keep only the most recent max_context_messages turns, in order."""
    if len(history) <= max_context_messages:
        return history
    if max_context_messages <= 0:
        return []
    return history[-max_context_messages:]


def extract_text(content: Content | None) -> str | None:
    """Join the text parts of a content with blank lines."""
    if content is None or not content.parts:
        return None
    return "\n\n".join(part.text for part in content.parts if part.text).strip()


def extract_citations(metadata: GroundingMetadata | None, documents: list[StoredDocument]) -> list[CitationEntry]:
    """Build one citation per source document from the grounding chunks.

    Chunks are keyed by document id, else by context uri, else by a fresh
    random id. The first chunk of a key creates the citation; later chunks of
    the same key only fill a missing snippet. Order of first appearance is kept.
    """
    if metadata is None or not metadata.groundingChunks:
        return []

    by_key: dict[str, CitationEntry] = {}
    doc_names = {doc.id: doc.name for doc in documents}

    for chunk in metadata.groundingChunks:
        context = chunk.retrievedContext
        if context is None:
            continue

        document_id = parse_resource_id(context.documentName) if context.documentName else None
        key = first_present(document_id, context.uri, str(uuid.uuid4()))
        snippet = first_present(context.ragChunk.text if context.ragChunk else None, context.text)

        existing = by_key.get(key)
        if existing is None:
            by_key[key] = CitationEntry(
                id=key,
                documentId=document_id,
                documentName=first_present(
                    doc_names.get(document_id) if document_id else None, context.title, document_id, "Document"
                ),
                snippet=snippet,
                uri=context.uri,
            )
        elif not existing.snippet and snippet:
            existing.snippet = snippet

    return list(by_key.values())


def describe_grounding_chunk(chunk: GroundingChunk) -> dict:
    """Summarise a grounding chunk for debug logging."""
    context, web, maps = chunk.retrievedContext, chunk.web, chunk.maps
    sources = [source for source in (context, maps, web) if source is not None]
    snippet_source = first_present(
        context.ragChunk.text if context and context.ragChunk else None,
        context.text if context else None,
        maps.text if maps else None,
        web.title if web else None,
    )

    if context is not None:
        source_type = "file-search"
    elif maps is not None:
        source_type = "maps"
    elif web is not None:
        source_type = "web"
    else:
        source_type = "unknown"

    return {
        "sourceType": source_type,
        "documentName": context.documentName if context else None,
        "title": first_present(*(source.title for source in sources)),
        "uri": first_present(*(source.uri for source in sources)),
        "snippetPreview": truncate(snippet_source),
        "hasRagChunk": bool(context and context.ragChunk),
    }


class AskService:
    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        store_resolver: StoreResolver,
        cache: LibraryCache,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._llm = llm_client
        self._store_resolver = store_resolver
        self._cache = cache
        self.max_context_messages = helper_config.get_number_val("LIBRARY_MAX_CONTEXT_MESSAGES", default=DEFAULT_MAX_CONTEXT_MESSAGES)

    ##########################################
    ################ CORE ####################
    ##########################################

    async def ask(
        self,
        question: str,
        conversation: list[Content] | None = None,
        documents: list[StoredDocument] | None = None,
        max_context_messages: int | None = None,
        store: StoreHandle | None = None,
        model: str | None = None,
    ) -> AskResult:
        """Answer a question grounded against the library store.

        Args:
            question (str): The natural language question.
            conversation (list[Content] | None): Prior turns, oldest first.
            documents (list[StoredDocument] | None): Documents used to name citations; read from the cache when omitted.
            max_context_messages (int | None): Conversation window, defaults to the configured value.
            store (StoreHandle | None): A pre-resolved store; resolved via the store resolver when omitted.
            model (str | None): Model override.

        Returns:
            AskResult: Answer, citations, request history and the trimmed conversation.

        Raises:
            InvalidInputError: If the question is empty.
            RemoteCallError: If the generation request fails. No retry is attempted.
        """
        trimmed = (question or "").strip()
        if not trimmed:
            raise InvalidInputError("A question is required to query the Great Library.")

        store = store or await self._store_resolver.ensure_store()
        history = build_ask_history(trimmed, conversation)

        self.logging.info(
            "Asking %r against %s (history=%d)", truncate(trimmed), store.name, len(history),
        )
        response = await self._llm.do_generate(contents=history, store_names=[store.name], model=model)

        candidate = response.first_candidate()
        model_content = candidate.content if candidate else None
        metadata = candidate.groundingMetadata if candidate else None
        answer = response.text if response.text is not None else extract_text(model_content)
        answer = answer.strip() if answer is not None else None

        if documents is None:
            documents = await self._cache.get_all()
        citations = extract_citations(metadata, documents)

        if metadata is not None and metadata.groundingChunks:
            self.logging.debug("Grounding chunks: %s", [describe_grounding_chunk(c) for c in metadata.groundingChunks])
        self.logging.info(
            "Answer received: %d chars, %d citation(s)", len(answer or ""), len(citations),
        )

        window = max_context_messages if max_context_messages is not None else self.max_context_messages
        conversation_out = trim_conversation(append_model_response(history, model_content, answer), window)

        return AskResult(
            answer=answer,
            citations=citations,
            modelContent=model_content,
            metadata=metadata,
            store=store,
            history=history,
            conversation=conversation_out,
        )

    def resolve_store_name(self, store_name: str, display_name: str | None = None) -> StoreHandle:
        """Wrap an already known store name so ask() can skip store resolution."""
        return StoreHandle(id=parse_resource_id(store_name), name=store_name, displayName=display_name)
