"""
Type protocols for the key-value store and collection handles

Repositories depend on these interfaces so tests can inject an in-memory store.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Synchronous string key-value store (the host's persistent storage)"""

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text, or None when the key is missing"""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store text under key, raising StorageQuotaExceeded when full"""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key if present"""
        ...

    def keys(self) -> List[str]:
        """List stored keys"""
        ...

    def clear(self) -> None:
        """Remove every key"""
        ...


class CollectionHandleProtocol(Protocol):
    """One whole-array-serialized record set"""

    name: str

    def load(self) -> List[Dict[str, Any]]:
        ...

    def save(self, records: List[Dict[str, Any]]) -> bool:
        ...

    def remove(self) -> bool:
        ...
