"""Document listing, remote sync and deletion for the library store."""

import time

from services.library.StoreResolver import StoreResolver
from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.models.Document import RemoteDocument
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import now_iso, parse_resource_id
from shared.models.document import StoredDocument, UploadStatus

DOCUMENT_PAGE_SIZE = 20

_STATE_TO_STATUS: dict[str, UploadStatus] = {
    "STATE_ACTIVE": "indexed",
    "STATE_PENDING": "processing",
    "STATE_FAILED": "error",
}


def map_document_state(state: str | None) -> UploadStatus:
    """Map a remote document state onto a local upload status. Unknown states are "pending"."""
    return _STATE_TO_STATUS.get(state or "", "pending")


def map_remote_document(document: RemoteDocument) -> StoredDocument:
    """Convert a remote document into the cached representation."""
    doc_id = parse_resource_id(document.name) if document.name else f"doc-{int(time.time() * 1000)}"
    metadata = None
    if document.customMetadata is not None:
        metadata = {entry.key: entry.stringValue for entry in document.customMetadata if entry.key and entry.stringValue}
    return StoredDocument(
        id=doc_id,
        name=document.displayName or document.name or "Untitled Document",
        uploadDate=document.createTime or now_iso(),
        size=document.sizeBytes or 0,
        status=map_document_state(document.state),
        metadata=metadata,
    )


class DocumentService:
    def __init__(
        self,
        helper_config: HelperConfig,
        filesearch_client: FileSearchClientInterface,
        store_resolver: StoreResolver,
        cache: LibraryCache,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._client = filesearch_client
        self._store_resolver = store_resolver
        self._cache = cache

    async def get_cached_documents(self) -> list[StoredDocument]:
        return await self._cache.get_all()

    async def sync_documents(self) -> list[StoredDocument]:
        """Replace the cached document list with the remote listing of the library store.

        Returns:
            list[StoredDocument]: The documents now cached, in remote listing order.
        """
        store = await self._store_resolver.ensure_store()
        remote_docs = await self._client.do_fetch_documents(store.name, page_size=DOCUMENT_PAGE_SIZE)
        documents = [map_remote_document(doc) for doc in remote_docs]
        await self._cache.replace_all(documents)
        self.logging.info("Synced %d document(s) from %s", len(documents), store.name)
        return documents

    async def delete_document(self, document_id: str) -> list[StoredDocument]:
        """Delete one document remotely (including its chunks) and drop it from the cache.

        Returns:
            list[StoredDocument]: The remaining cached documents.
        """
        store = await self._store_resolver.ensure_store()
        await self._client.do_delete_document(self._client.get_document_name(store.name, document_id), force=True)
        return await self._cache.remove([document_id])

    async def delete_all_documents(self) -> int:
        """Delete every document of the library store and empty the cached list.

        Stops at the first failing deletion; documents deleted before it are
        removed from the cache.

        Returns:
            int: Number of deleted documents.
        """
        store = await self._store_resolver.ensure_store()
        remote_docs = await self._client.do_fetch_documents(store.name, page_size=DOCUMENT_PAGE_SIZE)
        deleted: list[str] = []
        try:
            for doc in remote_docs:
                if not doc.name:
                    continue
                await self._client.do_delete_document(doc.name, force=True)
                deleted.append(parse_resource_id(doc.name))
        finally:
            if len(deleted) == len([doc for doc in remote_docs if doc.name]):
                await self._cache.replace_all([])
            elif deleted:
                await self._cache.remove(deleted)
        self.logging.info("Deleted %d document(s) from %s", len(deleted), store.name)
        return len(deleted)

    async def reset_cache(self) -> int:
        """Forget the local cache, store id included. Remote documents are untouched.

        The next store resolution rediscovers the store by display name.

        Returns:
            int: Number of cached documents that were dropped.
        """
        dropped = len(await self._cache.get_all())
        await self._cache.clear()
        return dropped
