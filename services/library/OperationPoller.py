"""Tracks long-running upload operations until they finish.

The poller is a small state machine:

    SUBMITTED ──► POLLING ──► DONE
        │            │
        └────────────┴──────► FAILED

Sleep and clock are injectable so tests do not wait in real time.
"""

import asyncio
import json
import time
from enum import Enum
from typing import Awaitable, Callable

from shared.clients.filesearch.FileSearchClientInterface import FileSearchClientInterface
from shared.clients.filesearch.models.Operation import UploadOperation
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import OperationCancelledError, OperationTimeoutError, UploadError

DEFAULT_POLL_INTERVAL = 2
DEFAULT_MAX_WAIT = 900


class OperationState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


class OperationPoller:
    def __init__(
        self,
        helper_config: HelperConfig,
        filesearch_client: FileSearchClientInterface,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._client = filesearch_client
        self._sleep = sleep
        self._clock = clock
        self.poll_interval = helper_config.get_number_val("LIBRARY_POLL_INTERVAL", default=DEFAULT_POLL_INTERVAL)
        # 0 disables the limit
        self.max_wait = helper_config.get_number_val("LIBRARY_UPLOAD_TIMEOUT", default=DEFAULT_MAX_WAIT)

    async def wait_for_completion(
        self,
        operation: UploadOperation,
        on_tick: Callable[[UploadOperation], None] | None = None,
        cancel_event: asyncio.Event | None = None,
        on_state_change: Callable[[OperationState], None] | None = None,
    ) -> UploadOperation:
        """Poll an operation until it is done.

        Args:
            operation (UploadOperation): The handle returned by the upload request.
            on_tick (Callable | None): Called with every re-fetched operation.
            cancel_event (asyncio.Event | None): Stops waiting once set. The remote operation keeps running.
            on_state_change (Callable | None): Called with every state this wait enters, SUBMITTED first.

        Returns:
            UploadOperation: The completed operation.

        Raises:
            UploadError: If the operation has no name to poll, or finished with an error payload.
            OperationTimeoutError: If the operation is not done within max_wait seconds.
            OperationCancelledError: If cancel_event is set while waiting.
        """
        # local to this wait
        state: OperationState | None = None

        def enter(next_state: OperationState) -> None:
            nonlocal state
            if next_state != state:
                state = next_state
                if on_state_change is not None:
                    on_state_change(next_state)

        enter(OperationState.SUBMITTED)
        current = operation
        started = self._clock()

        while not current.done:
            if not current.name:
                enter(OperationState.FAILED)
                raise UploadError("Upload failed: the upload operation carries no name and cannot be polled.")
            if cancel_event is not None and cancel_event.is_set():
                enter(OperationState.FAILED)
                raise OperationCancelledError(f"Stopped waiting for operation {current.name}.")
            if self.max_wait and self._clock() - started >= self.max_wait:
                enter(OperationState.FAILED)
                raise OperationTimeoutError(f"Operation {current.name} did not finish within {self.max_wait} seconds.")

            enter(OperationState.POLLING)
            await self._sleep(self.poll_interval)
            current = await self._client.do_fetch_operation(current)
            self.logging.debug("Operation %s done=%s", current.name, current.done)
            if on_tick is not None:
                on_tick(current)

        if current.error:
            enter(OperationState.FAILED)
            raise UploadError(f"Upload failed: {json.dumps(current.error)}", payload=current.error)

        enter(OperationState.DONE)
        return current
