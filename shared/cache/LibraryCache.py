"""Local document metadata cache.

The whole cache state lives in one serialized blob under CACHE_KEY. Every
mutation is a read-modify-write of that blob performed while holding the
cache lock, so concurrent coroutines in this process never overwrite each
other's changes.
"""

import asyncio
import json
from typing import Callable

from pydantic import ValidationError

from shared.cache.KeyValueStoreInterface import KeyValueStoreInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import CacheState, StoredDocument

CACHE_KEY = "great-library-cache"


def merge_documents(current: list[StoredDocument], new_docs: list[StoredDocument]) -> list[StoredDocument]:
    """Merge new_docs into current by id, newer records winning.

    Returns:
        list[StoredDocument]: The merged list sorted by uploadDate, newest first.
    """
    by_id: dict[str, StoredDocument] = {doc.id: doc for doc in current}
    for doc in new_docs:
        by_id[doc.id] = doc
    return sorted(by_id.values(), key=lambda doc: doc.uploadDate, reverse=True)


class LibraryCache:
    """Single-writer owner of the persisted cache state."""

    def __init__(self, helper_config: HelperConfig, store: KeyValueStoreInterface, key: str = CACHE_KEY) -> None:
        self.logging = helper_config.get_logger()
        self._store = store
        self._key = key
        self._lock = asyncio.Lock()

    ##########################################
    ################ STATE ###################
    ##########################################

    async def _read_state(self) -> CacheState:
        """Deserialize the persisted blob.

        A missing blob, invalid JSON or a non-object payload yields an empty state.
        Otherwise the store id is kept when it is a string and documents are
        validated one by one, so a single bad record only drops that record.
        """
        raw = await self._store.get_item(self._key)
        if not raw:
            return CacheState()
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            self.logging.debug("Discarding unreadable cache blob under %r: %s", self._key, e)
            return CacheState()
        if not isinstance(parsed, dict):
            self.logging.debug("Discarding cache blob under %r: expected an object", self._key)
            return CacheState()

        store_id = parsed.get("storeId")
        raw_documents = parsed.get("documents")
        documents: list[StoredDocument] = []
        for item in raw_documents if isinstance(raw_documents, list) else []:
            try:
                documents.append(StoredDocument.model_validate(item))
            except ValidationError as e:
                self.logging.debug("Dropping malformed cached document %r: %s", item, e)
        return CacheState(storeId=store_id if isinstance(store_id, str) else None, documents=documents)

    async def _write_state(self, state: CacheState) -> None:
        await self._store.set_item(self._key, state.model_dump_json(exclude_none=True))

    async def _mutate(self, mutator: Callable[[CacheState], CacheState]) -> CacheState:
        async with self._lock:
            current = await self._read_state()
            next_state = mutator(current)
            await self._write_state(next_state)
            return next_state

    ##########################################
    ################ STORE ###################
    ##########################################

    async def get_store_id(self) -> str | None:
        return (await self._read_state()).storeId

    async def set_store_id(self, store_id: str) -> None:
        await self._mutate(lambda state: state.model_copy(update={"storeId": store_id}))

    ##########################################
    ############### DOCUMENTS ################
    ##########################################

    async def get_all(self) -> list[StoredDocument]:
        return (await self._read_state()).documents

    async def upsert(self, new_docs: list[StoredDocument]) -> list[StoredDocument]:
        """Merge documents into the cache by id.

        Returns:
            list[StoredDocument]: The full cached list after the merge, newest first.
        """
        state = await self._mutate(
            lambda state: state.model_copy(update={"documents": merge_documents(state.documents, new_docs)})
        )
        return state.documents

    async def replace_all(self, documents: list[StoredDocument]) -> None:
        await self._mutate(lambda state: state.model_copy(update={"documents": list(documents)}))

    async def remove(self, document_ids: list[str]) -> list[StoredDocument]:
        """Drop documents by id. Unknown ids are ignored."""
        ids = set(document_ids)
        state = await self._mutate(
            lambda state: state.model_copy(update={"documents": [doc for doc in state.documents if doc.id not in ids]})
        )
        return state.documents

    async def clear(self) -> None:
        """Drop the persisted blob, forgetting the store id as well. Reads afterwards see the empty state."""
        async with self._lock:
            await self._store.remove_item(self._key)
            self.logging.info("Local document cache cleared.", color="yellow")
