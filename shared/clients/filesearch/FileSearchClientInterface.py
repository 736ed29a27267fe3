from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.filesearch.models.Document import DocumentsListResponse, RemoteDocument
from shared.clients.filesearch.models.Operation import UploadOperation
from shared.clients.filesearch.models.Store import StoreDetails, StoresListResponse
from shared.helper.HelperConfig import HelperConfig


class FileSearchClientInterface(ClientInterface):
    """Client for a hosted file search service: stores, documents and upload operations."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "filesearch"

    @abstractmethod
    def get_store_name(self, store_id: str) -> str:
        """
        Builds the full resource name of a store from its id (e.g. "abc" -> "fileSearchStores/abc").
        """
        pass

    @abstractmethod
    def get_document_name(self, store_name: str, document_id: str) -> str:
        """
        Builds the full resource name of a document inside a store.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_stores(self) -> str:
        """
        Returns the endpoint path for store listing and creation (e.g. "/v1beta/fileSearchStores").
        """
        pass

    @abstractmethod
    def _get_endpoint_resource(self, resource_name: str) -> str:
        """
        Returns the endpoint path addressing a single resource by its full name (store, document or operation).
        """
        pass

    @abstractmethod
    def _get_endpoint_documents(self, store_name: str) -> str:
        """
        Returns the endpoint path for document listing inside a store.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def _parse_endpoint_stores(self, response: dict) -> StoresListResponse:
        pass

    @abstractmethod
    def _parse_endpoint_documents(self, response: dict) -> DocumentsListResponse:
        pass

    def _parse_endpoint_store(self, response: dict) -> StoreDetails:
        return self._parse_model(StoreDetails, response)

    def _parse_endpoint_operation(self, response: dict) -> UploadOperation:
        return self._parse_model(UploadOperation, response)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ############# STORE REQUESTS ##############
    async def do_create_store(self, display_name: str) -> StoreDetails:
        """
        Creates a new file search store.

        Args:
            display_name (str): Human readable name of the store.

        Returns:
            StoreDetails: The created store.
        """
        resp = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_stores(),
            json={"displayName": display_name},
            raise_on_error=True,
        )
        store = self._parse_endpoint_store(self._decode_json(resp))
        self.logging.info("Created file search store %s (%s) on %s", store.name, display_name, self._get_engine_name())
        return store

    async def do_fetch_stores(self, page_size: int = 20) -> list[StoreDetails]:
        """
        Fetches all stores, following page tokens until the listing is exhausted.
        """
        stores: list[StoreDetails] = []
        page_token: str | None = None
        while True:
            params = {"pageSize": page_size}
            if page_token:
                params["pageToken"] = page_token
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_stores(), params=params, raise_on_error=True)
            page = self._parse_endpoint_stores(self._decode_json(resp))
            stores.extend(page.stores)
            self.logging.debug("Fetched %d stores so far from %s", len(stores), self._get_engine_name())
            page_token = page.nextPageToken
            if not page_token:
                break
        return stores

    async def do_fetch_store(self, store_name: str) -> StoreDetails:
        """
        Fetches a single store by its full resource name.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_resource(store_name), raise_on_error=True)
        return self._parse_endpoint_store(self._decode_json(resp))

    ############# DOCUMENT REQUESTS ##############
    async def do_fetch_documents(self, store_name: str, page_size: int = 20) -> list[RemoteDocument]:
        """
        Fetches all documents of a store, following page tokens until the listing is exhausted.

        Args:
            store_name (str): Full resource name of the store.
            page_size (int): Number of documents requested per page.

        Returns:
            list[RemoteDocument]: All documents of the store.
        """
        documents: list[RemoteDocument] = []
        page_token: str | None = None
        while True:
            params = {"pageSize": page_size}
            if page_token:
                params["pageToken"] = page_token
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_documents(store_name), params=params, raise_on_error=True)
            page = self._parse_endpoint_documents(self._decode_json(resp))
            documents.extend(page.documents)
            self.logging.info("Fetched documents page from %s, total documents so far: %d", self._get_engine_name(), len(documents))
            page_token = page.nextPageToken
            if not page_token:
                break
        return documents

    async def do_delete_document(self, document_name: str, force: bool = True) -> None:
        """
        Deletes a document. With force, its indexed chunks are deleted as well.
        """
        await self.do_request(
            method="DELETE",
            endpoint=self._get_endpoint_resource(document_name),
            params={"force": "true" if force else "false"},
            raise_on_error=True,
        )
        self.logging.info("Deleted document %s from %s", document_name, self._get_engine_name())

    @abstractmethod
    async def do_upload_document(self, store_name: str, file_path: str, display_name: str, mime_type: str) -> UploadOperation:
        """
        Uploads a local file into a store and starts indexing it.

        Args:
            store_name (str): Full resource name of the target store.
            file_path (str): Local path of the file.
            display_name (str): Display name of the created document.
            mime_type (str): MIME type of the file.

        Returns:
            UploadOperation: Handle of the long-running upload-and-index operation.
        """
        pass

    ############# OPERATION REQUESTS ##############
    async def do_fetch_operation(self, operation: UploadOperation) -> UploadOperation:
        """
        Re-fetches the current state of a long-running operation.

        Raises:
            ValueError: If the operation has no name and can therefore not be addressed.
        """
        if not operation.name:
            raise ValueError("Cannot fetch an operation without a name.")
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_resource(operation.name), raise_on_error=True)
        return self._parse_endpoint_operation(self._decode_json(resp))
