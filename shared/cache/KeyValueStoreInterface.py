from abc import ABC, abstractmethod


class KeyValueStoreInterface(ABC):
    """Local persistence capability: one serialized string per key."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """
        Returns the stored value for key, or None if nothing is stored.
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        pass
