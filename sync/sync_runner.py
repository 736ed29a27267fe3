"""Sync runner entry point.

Mirrors the document listing of the library store into the local cache.
Run directly for a one-shot sync.

Usage:
    python -m sync.sync_runner
"""

import asyncio

from services.library.DocumentService import DocumentService
from services.library.StoreResolver import StoreResolver
from shared.cache.KeyValueStoreFile import KeyValueStoreFile
from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.FileSearchClientManager import FileSearchClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


async def main() -> None:
    """Run a full remote-to-cache document sync."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    filesearch_client = FileSearchClientManager(helper_config=config).get_client()
    cache = LibraryCache(helper_config=config, store=KeyValueStoreFile(helper_config=config))

    try:
        await filesearch_client.boot()
        store_resolver = StoreResolver(helper_config=config, filesearch_client=filesearch_client, cache=cache)
        document_service = DocumentService(
            helper_config=config,
            filesearch_client=filesearch_client,
            store_resolver=store_resolver,
            cache=cache,
        )
        documents = await document_service.sync_documents()
        logger.info("Documents synced: %d", len(documents), color="green")
    except Exception as e:
        logger.error("Sync failed: %s", e)
        raise
    finally:
        await filesearch_client.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
