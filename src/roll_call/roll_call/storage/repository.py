from __future__ import annotations

from typing import Any, Optional, Protocol


class KeyValueStore(Protocol):
    """Durable key-value medium owned by the device.

    Values are JSON-compatible (dict/list/str/int/float/bool/None).
    Every method raises ``StorageUnavailable`` when the medium fails.
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
