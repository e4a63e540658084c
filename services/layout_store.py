"""
Key-value stores backing the layout collection.

The editor only ever reads and writes whole string values under a
couple of fixed keys, so any string -> string store will do:

- MemoryStore: in-process dict (tests, headless use)
- JsonFileStore: one JSON object on disk, rewritten on every set()
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


LAYOUTS_KEY = "arena-editor/arena-layouts"
SELECTED_LAYOUT_KEY = "arena-editor/arena-layout-selected"


class KeyValueStore(Protocol):
    """
    Whole-value string store.

    ``set`` and ``remove`` raise OSError when the value could not be
    persisted; the store is left as it was.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Dictionary-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.write_count += 1

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self.write_count += 1

    def keys(self):
        return list(self._data.keys())


class JsonFileStore:
    """
    Store persisted as a single JSON object file.

    An unreadable or malformed file is treated as empty (and logged);
    the next write replaces it.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._data: Dict[str, str] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        updated = dict(self._data)
        updated[key] = value
        self._write(updated)
        self._data = updated

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        updated = dict(self._data)
        del updated[key]
        self._write(updated)
        self._data = updated

    def _load(self):
        if not self._path.exists():
            return

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read layout store {self._path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Layout store {self._path} is not a JSON object, ignoring it")
            return

        self._data = {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]):
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            logger.error(f"Error writing layout store {self._path}: {e}")
            raise
