from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

from ..core.exceptions import StorageUnavailable
from .repository import KeyValueStore

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore(KeyValueStore):
    """One JSON file per key inside ``directory``.

    Writes go to a temp file in the same directory and are moved in place with
    ``os.replace``, so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: str | Path):
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Unsupported storage key: {key!r}")
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self._dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageUnavailable(f"Cannot write {path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageUnavailable(f"Cannot delete {path}: {e}") from e
