from shared.cache.KeyValueStoreInterface import KeyValueStoreInterface


class KeyValueStoreMemory(KeyValueStoreInterface):
    """Process-local key-value store. Nothing survives a restart."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
