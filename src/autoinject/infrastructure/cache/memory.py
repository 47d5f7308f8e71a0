from typing import Any, Dict

from autoinject.domain import MISS, IMetadataCache


class InMemoryMetadataCache(IMetadataCache):
    """Unbounded dictionary-backed metadata cache.

    Entries live as long as the cache object; nothing is ever evicted.

    Attributes:
        _entries: Stored values by key.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def fetch(self, key: str) -> Any:
        """Return the value stored under ``key``, or ``MISS``.

        Example:
            >>> cache = InMemoryMetadataCache()
            >>> cache.fetch("ctor.app.service") is MISS
            True
        """
        return self._entries.get(key, MISS)

    def store(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        """Forget every stored entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
