from __future__ import annotations

from typing import Optional

from promptverse.app.infra.storage.base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Key-value store kept in process memory; contents vanish with the process."""

    def __init__(self, max_value_bytes: Optional[int] = None):
        self._data: dict[str, str] = {}
        self.max_value_bytes = max_value_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value, self.max_value_bytes)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
