from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict


class SessionStorage(ABC):
    """Key/value backend that keeps the persisted session across restarts."""

    @abstractmethod
    def read(self, key: str) -> Dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def write(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError


class MemorySessionStorage(SessionStorage):
    def __init__(self) -> None:
        self._lock = Lock()
        self._items: Dict[str, str] = {}

    def read(self, key: str) -> Dict[str, Any] | None:
        with self._lock:
            raw = self._items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, value: Dict[str, Any]) -> None:
        encoded = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        with self._lock:
            self._items[key] = encoded


class JsonFileSessionStorage(SessionStorage):
    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        safe_key = "".join(char if char.isalnum() or char in "-_." else "_" for char in key)
        return self.directory / f"{safe_key}.json"

    def read(self, key: str) -> Dict[str, Any] | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def write(self, key: str, value: Dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        fd, temp_path = tempfile.mkstemp(prefix=f".{path.stem}_", suffix=".tmp", dir=str(self.directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(value, handle, ensure_ascii=False, separators=(",", ":"))
            os.replace(temp_path, path)
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise
