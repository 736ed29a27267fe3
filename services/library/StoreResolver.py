"""Resolves the one file search store backing the library.

Resolution order: cached store id → existing remote store with the configured
display name → newly created store. The resolved id is written to the local
cache whenever a store is discovered or created.
"""

from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.models.Store import StoreDetails
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import parse_resource_id
from shared.models.document import StoreHandle

DEFAULT_STORE_DISPLAY_NAME = "Great Library"


class StoreResolver:
    def __init__(
        self,
        helper_config: HelperConfig,
        filesearch_client: FileSearchClientInterface,
        cache: LibraryCache,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._client = filesearch_client
        self._cache = cache
        self.display_name = (
            helper_config.get_string_val("LIBRARY_STORE_DISPLAY_NAME", default=DEFAULT_STORE_DISPLAY_NAME)
            or DEFAULT_STORE_DISPLAY_NAME
        )

    ##########################################
    ################ CORE ####################
    ##########################################

    async def ensure_store(self) -> StoreHandle:
        """Return the library store, discovering or creating it when nothing is cached.

        Returns:
            StoreHandle: The resolved store.

        Raises:
            RemoteCallError: If a new store has to be created and creation fails.
        """
        cached_id = await self._cache.get_store_id()
        if cached_id:
            return await self._resolve_cached(cached_id)

        existing = await self._find_existing_store()
        if existing is not None:
            handle = self._to_handle(existing)
            await self._cache.set_store_id(handle.id)
            self.logging.info("Reusing existing file search store %s (%s)", handle.name, handle.displayName)
            return handle

        store = await self._client.do_create_store(self.display_name)
        handle = self._to_handle(store)
        await self._cache.set_store_id(handle.id)
        self.logging.info("File search store ready: %s", handle.name, color="green")
        return handle

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _resolve_cached(self, cached_id: str) -> StoreHandle:
        """Confirm the cached store remotely; fall back to the cached id if the lookup fails."""
        store_name = self._client.get_store_name(cached_id)
        try:
            store = await self._client.do_fetch_store(store_name)
        except Exception as e:
            self.logging.warning("Could not fetch cached store %s, using cached id: %s", store_name, e)
            return StoreHandle(id=cached_id, name=store_name)
        return self._to_handle(store)

    async def _find_existing_store(self) -> StoreDetails | None:
        """First remote store named like the configured store (or unnamed). Listing failures count as "none found"."""
        try:
            stores = await self._client.do_fetch_stores(page_size=20)
        except Exception as e:
            self.logging.warning("Listing file search stores failed, a new store will be created: %s", e)
            return None
        for store in stores:
            if not store.displayName or store.displayName == self.display_name:
                return store
        return None

    def _to_handle(self, store: StoreDetails) -> StoreHandle:
        return StoreHandle(id=parse_resource_id(store.name), name=store.name, displayName=store.displayName)
