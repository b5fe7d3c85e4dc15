"""Persistence of per-guest progress records."""

from __future__ import annotations

import json

from birthday_app.constants.storage_constants import guest_state_key
from birthday_app.core.models import ProgressRecord
from birthday_app.core.storage import KeyValueStore, encode_json


class ProgressRepository:
    """Reads and writes ``guest-state:<name>`` records as whole JSON objects."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self, guest_name: str) -> ProgressRecord | None:
        record, _ = self.load_with_snapshot(guest_name)
        return record

    def load_with_snapshot(self, guest_name: str) -> tuple[ProgressRecord | None, bytes | None]:
        """Return the record together with the raw bytes it was decoded from."""
        raw = self._store.get(guest_state_key(guest_name))
        if raw is None:
            return None, None
        return ProgressRecord.from_dict(guest_name, json.loads(raw)), raw

    def load_many(self, guest_names: list[str]) -> dict[str, ProgressRecord]:
        records: dict[str, ProgressRecord] = {}
        for name in guest_names:
            record = self.load(name)
            if record is not None:
                records[name] = record
        return records

    def save(self, record: ProgressRecord) -> None:
        self._store.put(guest_state_key(record.owner), encode_json(record.to_dict()))

    def save_if_unchanged(self, record: ProgressRecord, snapshot: bytes | None) -> bool:
        """Write the record only if the stored bytes still equal ``snapshot``."""
        return self._store.compare_and_put(
            guest_state_key(record.owner),
            snapshot,
            encode_json(record.to_dict()),
        )
