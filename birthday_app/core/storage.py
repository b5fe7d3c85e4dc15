"""Key-value store adapters holding whole-object JSON blobs.

Architecture note:
    Every value is a complete JSON document. Callers read the whole object,
    modify it in memory and write the whole object back; there are no partial
    field updates and no cross-key transactions. ``compare_and_put`` lets a
    caller opt into optimistic writes for a single key, but nothing in the
    store forces it, so concurrent plain ``put`` calls on the same key are
    last-writer-wins.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal get/put port the icebreaker core depends on."""

    def get(self, key: str) -> bytes | None: ...

    def put(self, key: str, value: bytes) -> None: ...

    def compare_and_put(self, key: str, expected: bytes | None, value: bytes) -> bool: ...


class InMemoryKeyValueStore:
    """Dictionary-backed store; each key is read and written atomically."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._lock = Lock()
        self._values: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._values[key] = value

    def compare_and_put(self, key: str, expected: bytes | None, value: bytes) -> bool:
        with self._lock:
            if self._values.get(key) != expected:
                return False
            self._values[key] = value
            return True


class JsonFileKeyValueStore:
    """Store persisted to a single JSON document on disk.

    The whole file is rewritten on every put through a temporary file and an
    atomic rename, so a failed write leaves the previous contents intact.
    """

    def __init__(self, file_path: Path) -> None:
        self._path = file_path.resolve()
        self._lock = Lock()
        self._values: dict[str, str] = self._load()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            value = self._values.get(key)
        return None if value is None else value.encode("utf-8")

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            updated = dict(self._values)
            updated[key] = value.decode("utf-8")
            self._flush(updated)
            self._values = updated

    def compare_and_put(self, key: str, expected: bytes | None, value: bytes) -> bool:
        with self._lock:
            current = self._values.get(key)
            current_bytes = None if current is None else current.encode("utf-8")
            if current_bytes != expected:
                return False
            updated = dict(self._values)
            updated[key] = value.decode("utf-8")
            self._flush(updated)
            self._values = updated
            return True

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        document = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError(f"Store file {self._path} must contain a JSON object.")
        logger.info("Loaded %d keys from %s", len(document), self._path)
        return {str(key): str(value) for key, value in document.items()}

    def _flush(self, values: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        temp_path.write_text(json.dumps(values, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(temp_path, self._path)


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    return json.loads(raw)


def encode_json(value: Any) -> bytes:
    return json.dumps(value, ensure_ascii=False).encode("utf-8")


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.put(key, encode_json(value))
