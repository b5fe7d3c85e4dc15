"""Service for managing the registered guests and their password hashes."""

from __future__ import annotations

import logging

from birthday_app.constants.storage_constants import GUESTS_KEY
from birthday_app.core.models import Guest
from birthday_app.core.security import hash_password, verify_password
from birthday_app.core.storage import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)


class GuestDirectory:
    """Guest name -> password hash mapping stored under a single key."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_guest_names(self) -> list[str]:
        """Return guest names in registration order."""
        return list(self._load())

    def has_guest(self, name: str) -> bool:
        return name.strip() in self._load()

    def add_guest(self, name: str, password: str) -> Guest:
        cleaned = self._clean_name(name)
        self._validate_password(password)
        guests = self._load()
        if cleaned in guests:
            raise RuntimeError(f"Guest '{cleaned}' is already registered.")
        guests[cleaned] = hash_password(password)
        self._save(guests)
        logger.info("Registered guest %s", cleaned)
        return Guest(name=cleaned, password_hash=guests[cleaned])

    def add_guests(self, entries: list[tuple[str, str]]) -> list[Guest]:
        """Register several guests at once, skipping names that already exist."""
        if not entries:
            raise ValueError("Guest list cannot be empty.")
        guests = self._load()
        added: list[Guest] = []
        for name, password in entries:
            cleaned = name.strip()
            if not cleaned or cleaned in guests:
                continue
            self._validate_password(password)
            guests[cleaned] = hash_password(password)
            added.append(Guest(name=cleaned, password_hash=guests[cleaned]))
        if added:
            self._save(guests)
            logger.info("Registered %d guests in bulk", len(added))
        return added

    def update_password(self, name: str, password: str) -> Guest:
        cleaned = self._clean_name(name)
        self._validate_password(password)
        guests = self._load()
        if cleaned not in guests:
            raise KeyError(cleaned)
        guests[cleaned] = hash_password(password)
        self._save(guests)
        logger.info("Updated password for guest %s", cleaned)
        return Guest(name=cleaned, password_hash=guests[cleaned])

    def remove_guest(self, name: str) -> None:
        # Other guests' progress records keep referencing the removed name.
        cleaned = self._clean_name(name)
        guests = self._load()
        if cleaned not in guests:
            raise KeyError(cleaned)
        del guests[cleaned]
        self._save(guests)
        logger.info("Removed guest %s", cleaned)

    def verify_credentials(self, name: str, password: str) -> bool:
        digest = self._load().get(name.strip())
        if digest is None or not password:
            return False
        return verify_password(password, digest)

    def _load(self) -> dict[str, str]:
        return dict(read_json(self._store, GUESTS_KEY, default={}))

    def _save(self, guests: dict[str, str]) -> None:
        write_json(self._store, GUESTS_KEY, guests)

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Guest name must not be empty.")
        return cleaned

    @staticmethod
    def _validate_password(password: str) -> None:
        if not password:
            raise ValueError("Guest password must not be empty.")
