"""In-process fakes of the remote clients, injected into services under test."""

import os

from shared.clients.filesearch.models.Document import RemoteDocument
from shared.clients.filesearch.models.Operation import UploadOperation, UploadOperationResponse
from shared.clients.filesearch.models.Store import StoreDetails
from shared.clients.llm.models.Generation import Content, GenerateContentResponse
from shared.models.errors import RemoteCallError


class FakeFileSearchClient:
    """Records every call. Uploads complete after `polls_until_done` operation fetches."""

    def __init__(self, stores: list[StoreDetails] | None = None, polls_until_done: int = 1) -> None:
        self.stores: list[StoreDetails] = list(stores or [])
        self.documents: dict[str, list[RemoteDocument]] = {}
        self.polls_until_done = polls_until_done
        self.calls: list[tuple] = []
        self.fail_fetch_store = False
        self.fail_list_stores = False
        self.fail_create_store = False
        self.fail_upload_for: set[str] = set()
        self.fail_delete_for: set[str] = set()
        self.operation_errors: dict[str, dict] = {}
        self._poll_counts: dict[str, int] = {}
        self._operation_docs: dict[str, str] = {}
        self.uploaded_bytes: dict[str, bytes] = {}
        self._counter = 0

    def get_store_name(self, store_id: str) -> str:
        return store_id if store_id.startswith("fileSearchStores/") else f"fileSearchStores/{store_id}"

    def get_document_name(self, store_name: str, document_id: str) -> str:
        return f"{store_name}/documents/{document_id}"

    async def do_create_store(self, display_name: str) -> StoreDetails:
        self.calls.append(("create_store", display_name))
        if self.fail_create_store:
            raise RemoteCallError(url="fake://stores", status_code=500, body="boom")
        store = StoreDetails(name=f"fileSearchStores/store-{len(self.stores) + 1}", displayName=display_name)
        self.stores.append(store)
        return store

    async def do_fetch_stores(self, page_size: int = 20) -> list[StoreDetails]:
        self.calls.append(("list_stores", page_size))
        if self.fail_list_stores:
            raise RemoteCallError(url="fake://stores", status_code=503, body="unavailable")
        return list(self.stores)

    async def do_fetch_store(self, store_name: str) -> StoreDetails:
        self.calls.append(("get_store", store_name))
        if self.fail_fetch_store:
            raise RemoteCallError(url=f"fake://{store_name}", status_code=404, body="not found")
        for store in self.stores:
            if store.name == store_name:
                return store
        return StoreDetails(name=store_name)

    async def do_fetch_documents(self, store_name: str, page_size: int = 20) -> list[RemoteDocument]:
        self.calls.append(("list_documents", store_name))
        return list(self.documents.get(store_name, []))

    async def do_delete_document(self, document_name: str, force: bool = True) -> None:
        self.calls.append(("delete_document", document_name, force))
        if document_name in self.fail_delete_for:
            raise RemoteCallError(url=f"fake://{document_name}", status_code=500, body="cannot delete")
        store_name = document_name.split("/documents/")[0]
        self.documents[store_name] = [d for d in self.documents.get(store_name, []) if d.name != document_name]

    async def do_upload_document(self, store_name: str, file_path: str, display_name: str, mime_type: str) -> UploadOperation:
        self.calls.append(("upload", store_name, display_name, mime_type))
        if os.path.isfile(file_path):
            with open(file_path, "rb") as fh:
                self.uploaded_bytes[display_name] = fh.read()
        if display_name in self.fail_upload_for:
            raise RemoteCallError(url="fake://upload", status_code=500, body=f"cannot upload {display_name}")
        self._counter += 1
        op_name = f"{store_name}/upload/operations/op-{self._counter}"
        self._poll_counts[op_name] = 0
        self._operation_docs[op_name] = f"{store_name}/documents/doc-{self._counter}"
        if display_name in self.operation_errors:
            self.operation_errors[op_name] = self.operation_errors[display_name]
        return UploadOperation(name=op_name, done=False)

    async def do_fetch_operation(self, operation: UploadOperation) -> UploadOperation:
        self.calls.append(("get_operation", operation.name))
        self._poll_counts[operation.name] += 1
        if self._poll_counts[operation.name] < self.polls_until_done:
            return UploadOperation(name=operation.name, done=False)
        error = self.operation_errors.get(operation.name)
        if error:
            return UploadOperation(name=operation.name, done=True, error=error)
        return UploadOperation(
            name=operation.name,
            done=True,
            response=UploadOperationResponse(documentName=self._operation_docs[operation.name]),
        )

    def remote_calls(self) -> list[tuple]:
        return list(self.calls)


class FakeLLMClient:
    """Returns queued responses in order and records the request history."""

    def __init__(self, responses: list[GenerateContentResponse] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[tuple[list[Content], list[str], str | None]] = []
        self.error: Exception | None = None

    async def do_generate(self, contents: list[Content], store_names: list[str], model: str | None = None) -> GenerateContentResponse:
        self.requests.append((list(contents), list(store_names), model))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


async def no_sleep(_: float) -> None:
    return None
