"""Upload orchestration.

Validates a batch of local files, uploads them one after another into the
library store, waits for each upload to be indexed and records the resulting
documents in the local cache.
"""

import mimetypes
import os
from typing import Callable

from services.library.OperationPoller import OperationPoller
from services.library.StoreResolver import StoreResolver
from shared.cache.LibraryCache import LibraryCache
from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.models.Operation import UploadOperation
from shared.helper.HelperConfig import HelperConfig
from shared.helper.format_helper import now_iso, parse_resource_id
from shared.models.document import StoredDocument, UploadableFile, UploadResult
from shared.models.errors import FileTooLargeError, InvalidInputError

MAX_FILE_SIZE_BYTES = 100 * 1024 * 1024

ProgressCallback = Callable[[UploadableFile, int, int], None]
OperationTickCallback = Callable[[UploadableFile, UploadOperation], None]


def find_oversized_file(files: list[UploadableFile], max_size_bytes: int = MAX_FILE_SIZE_BYTES) -> UploadableFile | None:
    """Return the first file larger than max_size_bytes, or None."""
    return next((file for file in files if file.size > max_size_bytes), None)


def read_files_metadata(paths: list[str], logger=None) -> list[UploadableFile]:
    """Stat local paths and build uploadable file descriptions.

    Directories, unreadable paths and files with an unknown MIME type are skipped.
    """
    files: list[UploadableFile] = []
    for path in paths:
        try:
            if not os.path.isfile(path):
                continue
            name = os.path.basename(path)
            mime_type, _ = mimetypes.guess_type(name)
            if mime_type is None:
                raise ValueError(f"Unable to determine MIME type for file: {name}")
            files.append(UploadableFile(path=path, name=name, size=os.path.getsize(path), mimeType=mime_type))
        except (OSError, ValueError) as e:
            if logger is not None:
                logger.warning("Unable to read file metadata for %s: %s", path, e)
    return files


class UploadService:
    def __init__(
        self,
        helper_config: HelperConfig,
        filesearch_client: FileSearchClientInterface,
        store_resolver: StoreResolver,
        cache: LibraryCache,
        poller: OperationPoller | None = None,
        now: Callable[[], str] = now_iso,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._client = filesearch_client
        self._store_resolver = store_resolver
        self._cache = cache
        self._poller = poller or OperationPoller(helper_config=helper_config, filesearch_client=filesearch_client)
        self._now = now
        self.max_file_size = helper_config.get_number_val("LIBRARY_MAX_FILE_SIZE_BYTES", default=MAX_FILE_SIZE_BYTES)

    ##########################################
    ############### VALIDATION ###############
    ##########################################

    def validate_files(self, files: list[UploadableFile]) -> None:
        """Reject empty batches and oversized files.

        Raises:
            InvalidInputError: If files is empty.
            FileTooLargeError: If any file exceeds the size limit.
        """
        if not files:
            raise InvalidInputError("Provide at least one file to upload.")
        oversized = find_oversized_file(files, self.max_file_size)
        if oversized is not None:
            raise FileTooLargeError(oversized.name, self.max_file_size)

    ##########################################
    ################ CORE ####################
    ##########################################

    async def upload_files(
        self,
        files: list[UploadableFile],
        on_progress: ProgressCallback | None = None,
        on_operation_tick: OperationTickCallback | None = None,
    ) -> UploadResult:
        """Upload a batch of files sequentially and record them in the cache.

        A failing file aborts the rest of the batch. Files that completed before
        the failure stay recorded in the cache.

        Args:
            files (list[UploadableFile]): The files to upload.
            on_progress (ProgressCallback | None): Called as (file, index, total) before each upload starts.
            on_operation_tick (OperationTickCallback | None): Called on every poll of a file's operation.

        Returns:
            UploadResult: The store used and the recorded documents.

        Raises:
            InvalidInputError: If the batch is empty or a file is too large (no remote call is made).
            UploadError: If an upload operation finishes with an error.
        """
        self.validate_files(files)

        store = await self._store_resolver.ensure_store()
        self.logging.info(
            "Uploading %d file(s) to store %s (%s)",
            len(files), store.name, store.displayName or "no display name",
        )

        uploaded: list[StoredDocument] = []
        total = len(files)
        try:
            for index, file in enumerate(files):
                if on_progress is not None:
                    on_progress(file, index, total)
                uploaded.append(await self._upload_one(store.name, file, on_operation_tick))
        finally:
            if uploaded:
                await self._cache.upsert(uploaded)

        self.logging.info("Upload complete: %d file(s) indexed", len(uploaded), color="green")
        return UploadResult(store=store, documents=uploaded)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _upload_one(
        self,
        store_name: str,
        file: UploadableFile,
        on_operation_tick: OperationTickCallback | None,
    ) -> StoredDocument:
        operation = await self._client.do_upload_document(
            store_name=store_name,
            file_path=file.path,
            display_name=file.name,
            mime_type=file.mimeType,
        )
        tick = (lambda op: on_operation_tick(file, op)) if on_operation_tick is not None else None
        completed = await self._poller.wait_for_completion(
            operation,
            on_tick=tick,
            on_state_change=lambda state: self.logging.debug("Upload of %s: %s", file.name, state.value),
        )

        document_name = (completed.response.documentName if completed.response else None) or completed.name or ""
        document = StoredDocument(
            id=parse_resource_id(document_name),
            name=file.name,
            uploadDate=self._now(),
            size=file.size,
            status="indexed",
        )
        self.logging.info("Indexed %s as document %s", file.name, document.id)
        return document
