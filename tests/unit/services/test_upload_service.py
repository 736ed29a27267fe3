"""Unit tests for UploadService."""

import itertools

import pytest

from services.library.OperationPoller import OperationPoller
from services.library.StoreResolver import StoreResolver
from services.library.UploadService import MAX_FILE_SIZE_BYTES, UploadService, find_oversized_file, read_files_metadata
from shared.cache.LibraryCache import LibraryCache
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import UploadableFile
from shared.models.errors import FileTooLargeError, InvalidInputError, RemoteCallError, UploadError
from tests.fakes import FakeFileSearchClient, no_sleep

MB = 1024 * 1024


def _file(name: str, size: int, mime_type: str = "application/pdf") -> UploadableFile:
    return UploadableFile(path=f"/tmp/{name}", name=name, size=size, mimeType=mime_type)


def _ticking_clock():
    """Strictly increasing ISO timestamps, one second apart."""
    counter = itertools.count(1)
    return lambda: f"2025-06-01T10:00:{next(counter):02d}.000Z"


@pytest.fixture(name="upload_service")
def upload_service_fixture(helper_config: HelperConfig, filesearch_client: FakeFileSearchClient, cache: LibraryCache) -> UploadService:
    resolver = StoreResolver(helper_config=helper_config, filesearch_client=filesearch_client, cache=cache)
    poller = OperationPoller(helper_config=helper_config, filesearch_client=filesearch_client, sleep=no_sleep)
    return UploadService(
        helper_config=helper_config,
        filesearch_client=filesearch_client,
        store_resolver=resolver,
        cache=cache,
        poller=poller,
        now=_ticking_clock(),
    )


def test_find_oversized_file() -> None:
    small, big = _file("small.pdf", 10), _file("big.pdf", MAX_FILE_SIZE_BYTES + 1)
    assert find_oversized_file([small, big]) is big
    assert find_oversized_file([small, _file("exact.pdf", MAX_FILE_SIZE_BYTES)]) is None
    assert find_oversized_file([]) is None


@pytest.mark.asyncio
async def test_file_over_limit_makes_no_remote_call(upload_service: UploadService, filesearch_client: FakeFileSearchClient) -> None:
    """A file of 100 MiB + 1 byte is rejected before the store is even resolved."""
    with pytest.raises(FileTooLargeError) as exc_info:
        await upload_service.upload_files([_file("a.pdf", 1), _file("huge.pdf", 100 * MB + 1)])

    assert "huge.pdf" in str(exc_info.value)
    assert "100 MB" in str(exc_info.value)
    assert filesearch_client.remote_calls() == []


@pytest.mark.asyncio
async def test_empty_batch_is_rejected(upload_service: UploadService, filesearch_client: FakeFileSearchClient) -> None:
    with pytest.raises(InvalidInputError):
        await upload_service.upload_files([])
    assert filesearch_client.remote_calls() == []


@pytest.mark.asyncio
async def test_two_files_are_indexed_and_cached(
    upload_service: UploadService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    progress: list[tuple[str, int, int]] = []
    files = [_file("a.pdf", 10 * MB), _file("b.txt", 1024, "text/plain")]

    result = await upload_service.upload_files(files, on_progress=lambda f, i, total: progress.append((f.name, i, total)))

    assert [doc.name for doc in result.documents] == ["a.pdf", "b.txt"]
    assert progress == [("a.pdf", 0, 2), ("b.txt", 1, 2)]

    uploads = [call for call in filesearch_client.calls if call[0] == "upload"]
    assert [call[2] for call in uploads] == ["a.pdf", "b.txt"]

    cached = await cache.get_all()
    assert len(cached) == 2
    assert all(doc.status == "indexed" for doc in cached)
    assert [doc.name for doc in cached] == ["b.txt", "a.pdf"]
    assert cached[1].size == 10 * MB
    assert {doc.id for doc in cached} == {"doc-1", "doc-2"}


@pytest.mark.asyncio
async def test_failure_keeps_completed_files_cached(
    upload_service: UploadService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    """The batch stops at the failing file; earlier files stay recorded."""
    filesearch_client.fail_upload_for = {"b.txt"}

    with pytest.raises(RemoteCallError):
        await upload_service.upload_files([_file("a.pdf", 10), _file("b.txt", 10), _file("c.md", 10)])

    assert [doc.name for doc in await cache.get_all()] == ["a.pdf"]
    assert "c.md" not in [call[2] for call in filesearch_client.calls if call[0] == "upload"]


@pytest.mark.asyncio
async def test_operation_error_aborts_batch(
    upload_service: UploadService, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    filesearch_client.operation_errors["a.pdf"] = {"message": "indexing failed"}

    with pytest.raises(UploadError, match="indexing failed"):
        await upload_service.upload_files([_file("a.pdf", 10)])

    assert await cache.get_all() == []


@pytest.mark.asyncio
async def test_configured_size_limit(
    helper_config: HelperConfig, monkeypatch: pytest.MonkeyPatch, filesearch_client: FakeFileSearchClient, cache: LibraryCache
) -> None:
    monkeypatch.setenv("LIBRARY_MAX_FILE_SIZE_BYTES", str(MB))
    resolver = StoreResolver(helper_config=helper_config, filesearch_client=filesearch_client, cache=cache)
    service = UploadService(helper_config=helper_config, filesearch_client=filesearch_client, store_resolver=resolver, cache=cache)

    with pytest.raises(FileTooLargeError, match="1 MB"):
        service.validate_files([_file("a.pdf", MB + 1)])


def test_read_files_metadata(tmp_path) -> None:
    (tmp_path / "paper.pdf").write_bytes(b"%PDF")
    (tmp_path / "blob.unknownext").write_bytes(b"?")
    (tmp_path / "folder").mkdir()

    files = read_files_metadata(
        [
            str(tmp_path / "paper.pdf"),
            str(tmp_path / "blob.unknownext"),
            str(tmp_path / "folder"),
            str(tmp_path / "missing.txt"),
        ]
    )

    assert [(f.name, f.size, f.mimeType) for f in files] == [("paper.pdf", 4, "application/pdf")]
