"""Unit tests for the Gemini file search client, backed by httpx.MockTransport."""

import json

import httpx
import pytest

from shared.clients.filesearch.FileSearchClientManager import FileSearchClientManager
from shared.clients.filesearch.gemini.FileSearchClientGemini import FileSearchClientGemini
from shared.clients.filesearch.models.Operation import UploadOperation
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import MalformedResponseError, RemoteCallError

BASE_URL = "https://gemini.test"


@pytest.fixture(name="gemini_env")
def gemini_env_fixture(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FILESEARCH_GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("FILESEARCH_GEMINI_BASE_URL", BASE_URL)
    monkeypatch.delenv("FILESEARCH_GEMINI_API_VERSION", raising=False)
    monkeypatch.delenv("FILESEARCH_ENGINE", raising=False)


def _client(helper_config: HelperConfig, handler) -> FileSearchClientGemini:
    client = FileSearchClientGemini(helper_config=helper_config)
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


def test_missing_api_key_fails_on_construction(helper_config: HelperConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FILESEARCH_GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="FILESEARCH_GEMINI_API_KEY"):
        FileSearchClientGemini(helper_config=helper_config)


def test_manager_selects_gemini(helper_config: HelperConfig, gemini_env: None) -> None:
    assert isinstance(FileSearchClientManager(helper_config=helper_config).get_client(), FileSearchClientGemini)


def test_manager_rejects_unknown_engine(helper_config: HelperConfig, gemini_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FILESEARCH_ENGINE", "nope")
    with pytest.raises(ValueError):
        FileSearchClientManager(helper_config=helper_config).get_client()


def test_resource_names(helper_config: HelperConfig, gemini_env: None) -> None:
    client = FileSearchClientGemini(helper_config=helper_config)
    assert client.get_store_name("abc") == "fileSearchStores/abc"
    assert client.get_store_name("fileSearchStores/abc") == "fileSearchStores/abc"
    assert client.get_document_name("fileSearchStores/abc", "d1") == "fileSearchStores/abc/documents/d1"


@pytest.mark.asyncio
async def test_request_before_boot_raises(helper_config: HelperConfig, gemini_env: None) -> None:
    client = FileSearchClientGemini(helper_config=helper_config)
    with pytest.raises(RuntimeError, match="boot"):
        await client.do_fetch_stores()


@pytest.mark.asyncio
async def test_fetch_stores_follows_page_tokens(helper_config: HelperConfig, gemini_env: None) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.params.get("pageToken") == "next":
            return httpx.Response(200, json={"fileSearchStores": [{"name": "fileSearchStores/b"}]})
        return httpx.Response(
            200,
            json={"fileSearchStores": [{"name": "fileSearchStores/a", "displayName": "Great Library"}], "nextPageToken": "next"},
        )

    client = _client(helper_config, handler)
    stores = await client.do_fetch_stores(page_size=20)

    assert [store.name for store in stores] == ["fileSearchStores/a", "fileSearchStores/b"]
    assert seen[0].url.path == "/v1beta/fileSearchStores"
    assert seen[0].url.params["pageSize"] == "20"
    assert seen[0].headers["x-goog-api-key"] == "test-key"


@pytest.mark.asyncio
async def test_create_store_posts_display_name(helper_config: HelperConfig, gemini_env: None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert json.loads(request.content) == {"displayName": "Great Library"}
        return httpx.Response(200, json={"name": "fileSearchStores/new", "displayName": "Great Library"})

    store = await _client(helper_config, handler).do_create_store("Great Library")
    assert store.name == "fileSearchStores/new"


@pytest.mark.asyncio
async def test_error_status_raises_remote_call_error(helper_config: HelperConfig, gemini_env: None) -> None:
    client = _client(helper_config, lambda request: httpx.Response(403, text="permission denied"))
    with pytest.raises(RemoteCallError) as exc_info:
        await client.do_fetch_store("fileSearchStores/abc")
    assert exc_info.value.status_code == 403
    assert "permission denied" in exc_info.value.body


@pytest.mark.asyncio
async def test_unexpected_payload_raises_malformed_response(helper_config: HelperConfig, gemini_env: None) -> None:
    client = _client(helper_config, lambda request: httpx.Response(200, json={"displayName": "no name"}))
    with pytest.raises(MalformedResponseError):
        await client.do_fetch_store("fileSearchStores/abc")

    client = _client(helper_config, lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(MalformedResponseError):
        await client.do_fetch_store("fileSearchStores/abc")


@pytest.mark.asyncio
async def test_fetch_documents_and_delete(helper_config: HelperConfig, gemini_env: None) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "DELETE":
            return httpx.Response(200, json={})
        return httpx.Response(
            200,
            json={"documents": [{"name": "fileSearchStores/s/documents/d1", "displayName": "a.pdf", "state": "STATE_ACTIVE"}]},
        )

    client = _client(helper_config, handler)
    documents = await client.do_fetch_documents("fileSearchStores/s")
    await client.do_delete_document("fileSearchStores/s/documents/d1")

    assert documents[0].displayName == "a.pdf"
    assert seen[0].url.path == "/v1beta/fileSearchStores/s/documents"
    assert seen[1].method == "DELETE"
    assert seen[1].url.path == "/v1beta/fileSearchStores/s/documents/d1"
    assert seen[1].url.params["force"] == "true"


@pytest.mark.asyncio
async def test_resumable_upload(helper_config: HelperConfig, gemini_env: None, tmp_path) -> None:
    """The upload announces size and type, then sends the bytes to the returned session URL."""
    file_path = tmp_path / "report.pdf"
    file_path.write_bytes(b"%PDF-1.4 hello")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.headers.get("X-Goog-Upload-Command") == "start":
            return httpx.Response(200, headers={"x-goog-upload-url": "https://upload.test/session/1"})
        return httpx.Response(200, json={"name": "fileSearchStores/s/upload/operations/op-1", "done": False})

    operation = await _client(helper_config, handler).do_upload_document(
        store_name="fileSearchStores/s",
        file_path=str(file_path),
        display_name="report.pdf",
        mime_type="application/pdf",
    )

    assert operation.name == "fileSearchStores/s/upload/operations/op-1"
    assert operation.done is False

    start, upload = seen
    assert start.url.path == "/upload/v1beta/fileSearchStores/s:uploadToFileSearchStore"
    assert start.headers["X-Goog-Upload-Header-Content-Length"] == str(len(b"%PDF-1.4 hello"))
    assert start.headers["X-Goog-Upload-Header-Content-Type"] == "application/pdf"
    assert json.loads(start.content) == {"displayName": "report.pdf", "mimeType": "application/pdf"}
    assert str(upload.url) == "https://upload.test/session/1"
    assert upload.headers["X-Goog-Upload-Command"] == "upload, finalize"
    assert upload.content == b"%PDF-1.4 hello"


@pytest.mark.asyncio
async def test_upload_without_session_url(helper_config: HelperConfig, gemini_env: None, tmp_path) -> None:
    file_path = tmp_path / "a.txt"
    file_path.write_text("hi")
    client = _client(helper_config, lambda request: httpx.Response(200))
    with pytest.raises(MalformedResponseError):
        await client.do_upload_document("fileSearchStores/s", str(file_path), "a.txt", "text/plain")


@pytest.mark.asyncio
async def test_fetch_operation(helper_config: HelperConfig, gemini_env: None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1beta/fileSearchStores/s/upload/operations/op-1"
        return httpx.Response(
            200,
            json={
                "name": "fileSearchStores/s/upload/operations/op-1",
                "done": True,
                "response": {"documentName": "fileSearchStores/s/documents/d1"},
            },
        )

    client = _client(helper_config, handler)
    operation = await client.do_fetch_operation(UploadOperation(name="fileSearchStores/s/upload/operations/op-1"))
    assert operation.done is True
    assert operation.response.documentName == "fileSearchStores/s/documents/d1"

    with pytest.raises(ValueError):
        await client.do_fetch_operation(UploadOperation(name=None))
