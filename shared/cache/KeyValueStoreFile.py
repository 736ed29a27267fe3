"""Key-value store persisted as a single JSON object on disk."""

import asyncio
import json
import os
import tempfile

from shared.cache.KeyValueStoreInterface import KeyValueStoreInterface
from shared.helper.HelperConfig import HelperConfig


class KeyValueStoreFile(KeyValueStoreInterface):
    """Stores all keys in one JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the original, so a crash never leaves a half-written file behind.
    An unreadable file is treated as empty.
    """

    def __init__(self, helper_config: HelperConfig, file_path: str | None = None) -> None:
        self.logging = helper_config.get_logger()
        default_path = os.path.join(helper_config.get_root_dir(), "data", "cache.json")
        self._file_path = file_path or helper_config.get_string_val("LIBRARY_CACHE_FILE", default=default_path)

    def get_file_path(self) -> str:
        return self._file_path

    ##########################################
    ################ HELPERS #################
    ##########################################

    def _read_all(self) -> dict[str, str]:
        try:
            with open(self._file_path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            self.logging.warning("Key-value file %s is unreadable, starting empty: %s", self._file_path, e)
            return {}
        if not isinstance(data, dict):
            self.logging.warning("Key-value file %s does not contain an object, starting empty.", self._file_path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        directory = os.path.dirname(self._file_path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".cache-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False)
            os.replace(tmp_path, self._file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _set(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def _remove(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    ##########################################
    ############### INTERFACE ################
    ##########################################

    async def get_item(self, key: str) -> str | None:
        items = await asyncio.to_thread(self._read_all)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)
