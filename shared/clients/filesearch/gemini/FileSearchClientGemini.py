import asyncio
from pathlib import Path

from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.models.Document import DocumentsListResponse
from shared.clients.filesearch.models.Operation import UploadOperation
from shared.clients.filesearch.models.Store import StoresListResponse
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.errors import MalformedResponseError


class FileSearchClientGemini(FileSearchClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="v1beta", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    def get_store_name(self, store_id: str) -> str:
        if store_id.startswith("fileSearchStores/"):
            return store_id
        return f"fileSearchStores/{store_id}"

    def get_document_name(self, store_name: str, document_id: str) -> str:
        return f"{store_name}/documents/{document_id}"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="API_VERSION", val_type="string", default="v1beta"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/{self._api_version}/fileSearchStores?pageSize=1"

    def _get_endpoint_stores(self) -> str:
        return f"/{self._api_version}/fileSearchStores"

    def _get_endpoint_resource(self, resource_name: str) -> str:
        return f"/{self._api_version}/{resource_name}"

    def _get_endpoint_documents(self, store_name: str) -> str:
        return f"/{self._api_version}/{store_name}/documents"

    def _get_endpoint_upload(self, store_name: str) -> str:
        return f"/upload/{self._api_version}/{store_name}:uploadToFileSearchStore"

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_endpoint_stores(self, response: dict) -> StoresListResponse:
        return self._parse_model(
            StoresListResponse,
            {"stores": response.get("fileSearchStores", []), "nextPageToken": response.get("nextPageToken")},
        )

    def _parse_endpoint_documents(self, response: dict) -> DocumentsListResponse:
        return self._parse_model(DocumentsListResponse, response)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_upload_document(self, store_name: str, file_path: str, display_name: str, mime_type: str) -> UploadOperation:
        """
        Uploads a file with the resumable upload protocol: a start request announcing size and
        type, then a single upload-and-finalize request carrying the bytes.

        Raises:
            MalformedResponseError: If the start request does not return an upload URL.
        """
        data = await asyncio.to_thread(Path(file_path).read_bytes)

        start = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_upload(store_name),
            json={"displayName": display_name, "mimeType": mime_type},
            additional_headers={
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(len(data)),
                "X-Goog-Upload-Header-Content-Type": mime_type,
            },
            raise_on_error=True,
        )
        upload_url = start.headers.get("x-goog-upload-url")
        if not upload_url:
            raise MalformedResponseError("UploadStart", "response carries no x-goog-upload-url header")

        self.logging.debug("Uploading %d bytes of %s to %s", len(data), display_name, store_name)
        resp = await self.do_request(
            method="POST",
            endpoint=upload_url,
            content=data,
            additional_headers={
                "X-Goog-Upload-Command": "upload, finalize",
                "X-Goog-Upload-Offset": "0",
                "Content-Type": mime_type,
            },
            raise_on_error=True,
        )
        return self._parse_endpoint_operation(self._decode_json(resp))
