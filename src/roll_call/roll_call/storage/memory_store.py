from __future__ import annotations

import json
import threading
from typing import Any, Optional

from ..core.exceptions import StorageUnavailable
from .repository import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dict-backed store with the same copy semantics as the file store.

    Values are round-tripped through JSON so callers never share mutable
    state with the store. ``fail_reads``/``fail_writes`` simulate a broken
    medium (quota exceeded, storage disabled) and ``wipe()`` simulates the
    user clearing site data.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()
        self.fail_reads = False
        self.fail_writes = False
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    def get(self, key: str) -> Optional[Any]:
        if self.fail_reads:
            raise StorageUnavailable("storage disabled")
        with self._lock:
            raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise StorageUnavailable("quota exceeded")
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageUnavailable(f"Value for {key!r} is not serializable: {e}") from e
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailable("storage disabled")
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)

    def wipe(self) -> None:
        with self._lock:
            self._data.clear()
