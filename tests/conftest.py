from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from birthday_app.core.icebreaker_manager import IcebreakerManager
from birthday_app.core.models import Question
from birthday_app.core.storage import InMemoryKeyValueStore
from birthday_app.server.api_server import create_api_app
from birthday_app.utils.settings import Settings

GUEST_PASSWORDS = {"Alice": "alice-pw", "Bob": "bob-pw", "Carol": "carol-pw"}


def first_index(count: int) -> int:
    """Deterministic picker: always the first eligible option."""
    return 0


class ConflictingStore(InMemoryKeyValueStore):
    """Store whose conditional writes on progress records lose a fixed number of races.

    ``on_conflict`` runs just before a lost write is reported, standing in for
    the competing writer.
    """

    def __init__(self, conflicts: int = 0, on_conflict: Callable[[str], None] | None = None) -> None:
        super().__init__()
        self.conflicts = conflicts
        self.on_conflict = on_conflict

    def compare_and_put(self, key: str, expected: bytes | None, value: bytes) -> bool:
        if key.startswith("guest-state:") and self.conflicts > 0:
            self.conflicts -= 1
            if self.on_conflict is not None:
                self.on_conflict(key)
            return False
        return super().compare_and_put(key, expected, value)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def manager(store: InMemoryKeyValueStore) -> IcebreakerManager:
    manager = IcebreakerManager(store, pick_index=first_index)
    for name, password in GUEST_PASSWORDS.items():
        manager.add_guest(name, password)
    manager.add_question(Question(id="q1", text="What is their favourite film?"))
    manager.add_question(Question(id="q2", text="Where did you **first** meet?"))
    return manager


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        guests_password=SecretStr("party"),
        admin_username="host",
        admin_password=SecretStr("host-pw"),
        session_secret=SecretStr("test-secret"),
        secure_cookies=False,
    )


@pytest.fixture
def client(manager: IcebreakerManager, settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_api_app(manager, settings)) as test_client:
        yield test_client


def login_guest(client: TestClient, name: str) -> None:
    response = client.post(
        "/guest-login",
        data={"name": name, "password": GUEST_PASSWORDS[name], "redirect": "/icebreaker"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/icebreaker"
