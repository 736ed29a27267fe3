"""Unit tests for DocumentService."""

import pytest

from services.library.DocumentService import DocumentService, map_document_state, map_remote_document
from services.library.StoreResolver import StoreResolver
from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.models.Document import CustomMetadata, RemoteDocument
from shared.clients.filesearch.models.Store import StoreDetails
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import StoredDocument
from shared.models.errors import RemoteCallError
from tests.fakes import FakeFileSearchClient

STORE = "fileSearchStores/lib"


def _remote(doc_id: str, **kwargs) -> RemoteDocument:
    return RemoteDocument(name=f"{STORE}/documents/{doc_id}", **kwargs)


@pytest.fixture(name="filesearch_client")
def filesearch_client_fixture() -> FakeFileSearchClient:
    client = FakeFileSearchClient(stores=[StoreDetails(name=STORE, displayName="Great Library")])
    client.documents[STORE] = [
        _remote("d1", displayName="a.pdf", createTime="2025-01-02T00:00:00Z", sizeBytes=100, state="STATE_ACTIVE"),
        _remote("d2", displayName="b.txt", createTime="2025-01-01T00:00:00Z", sizeBytes=5, state="STATE_PENDING"),
    ]
    return client


@pytest.fixture(name="document_service")
def document_service_fixture(helper_config: HelperConfig, filesearch_client: FakeFileSearchClient, cache: LibraryCache) -> DocumentService:
    resolver = StoreResolver(helper_config=helper_config, filesearch_client=filesearch_client, cache=cache)
    return DocumentService(helper_config=helper_config, filesearch_client=filesearch_client, store_resolver=resolver, cache=cache)


def test_map_document_state() -> None:
    assert map_document_state("STATE_ACTIVE") == "indexed"
    assert map_document_state("STATE_PENDING") == "processing"
    assert map_document_state("STATE_FAILED") == "error"
    assert map_document_state("STATE_UNSPECIFIED") == "pending"
    assert map_document_state(None) == "pending"


def test_map_remote_document() -> None:
    doc = map_remote_document(
        _remote(
            "d1",
            displayName="a.pdf",
            createTime="2025-01-02T00:00:00Z",
            sizeBytes=100,
            state="STATE_ACTIVE",
            customMetadata=[CustomMetadata(key="source", stringValue="raycast"), CustomMetadata(key="pages", numericValue=3)],
        )
    )
    assert doc == StoredDocument(
        id="d1", name="a.pdf", uploadDate="2025-01-02T00:00:00Z", size=100, status="indexed", metadata={"source": "raycast"}
    )


def test_map_remote_document_fallbacks() -> None:
    doc = map_remote_document(RemoteDocument())
    assert doc.id.startswith("doc-")
    assert doc.name == "Untitled Document"
    assert doc.size == 0
    assert doc.status == "pending"
    assert doc.metadata is None


@pytest.mark.asyncio
async def test_sync_replaces_cache(document_service: DocumentService, cache: LibraryCache) -> None:
    await cache.upsert([StoredDocument(id="stale", name="old.pdf", uploadDate="2024-01-01T00:00:00Z")])

    documents = await document_service.sync_documents()

    assert [doc.id for doc in documents] == ["d1", "d2"]
    assert [doc.id for doc in await document_service.get_cached_documents()] == ["d1", "d2"]


@pytest.mark.asyncio
async def test_delete_document(
    document_service: DocumentService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    await document_service.sync_documents()

    remaining = await document_service.delete_document("d1")

    assert [doc.id for doc in remaining] == ["d2"]
    assert ("delete_document", f"{STORE}/documents/d1", True) in filesearch_client.calls


@pytest.mark.asyncio
async def test_delete_all_documents(document_service: DocumentService, cache: LibraryCache) -> None:
    await document_service.sync_documents()

    assert await document_service.delete_all_documents() == 2
    assert await cache.get_all() == []


@pytest.mark.asyncio
async def test_delete_all_stops_at_first_failure(
    document_service: DocumentService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    await document_service.sync_documents()
    filesearch_client.fail_delete_for = {f"{STORE}/documents/d2"}

    with pytest.raises(RemoteCallError):
        await document_service.delete_all_documents()

    assert [doc.id for doc in await cache.get_all()] == ["d2"]


@pytest.mark.asyncio
async def test_reset_cache_keeps_remote_documents(
    document_service: DocumentService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    await document_service.sync_documents()

    assert await document_service.reset_cache() == 2
    assert await cache.get_all() == []
    assert await cache.get_store_id() is None
    assert len(filesearch_client.documents[STORE]) == 2

    resynced = await document_service.sync_documents()
    assert [doc.id for doc in resynced] == ["d1", "d2"]
    assert await cache.get_store_id() == "lib"
