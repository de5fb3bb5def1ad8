from __future__ import annotations
import json
import os
from pathlib import Path

from accumulation_tracker.errors import DecodeFailure, PersistenceFailure

class JsonFileKeyValueStore:
    """String values under string keys, kept in one JSON file.

    The file is rewritten atomically (temp file + rename) on every set.
    """
    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise DecodeFailure(f"unreadable store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise DecodeFailure(f"unexpected store layout in {self.path}")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except DecodeFailure:
            data = {}   # a corrupt file is replaced, not patched
        data[key] = value
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceFailure(f"could not write {self.path}: {e}") from e
