# promptverse/app/infra/storage/base.py
"""
Abstract base class for the local key-value store.
Whole values are read and written per key; there are no partial updates.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from promptverse.app.domain.errors import StorageQuotaError


class KeyValueStore(ABC):
    """
    Abstract interface for durable key-value storage.

    Implementations:
    - FileKeyValueStore: one JSON document per key on local disk
    - MemoryKeyValueStore: process memory (sessions, tests)
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None when the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under a key.

        Args:
            key: Storage key
            value: Serialized value

        Raises:
            StorageQuotaError: If the value exceeds the store quota
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Args:
            key: Storage key
        """
        pass

    def _check_quota(self, key: str, value: str, limit: Optional[int]) -> None:
        if limit is not None and len(value.encode("utf-8")) > limit:
            raise StorageQuotaError(key, limit)
