from fastapi.testclient import TestClient
from pydantic import SecretStr

from birthday_app.core.icebreaker_manager import IcebreakerManager
from birthday_app.core.models import Question
from birthday_app.core.security import create_guest_token, shared_cookie_value
from birthday_app.core.storage import InMemoryKeyValueStore
from birthday_app.server.api_server import create_api_app
from birthday_app.utils.settings import Settings

from conftest import GUEST_PASSWORDS, ConflictingStore, first_index, login_guest

ADMIN = ("host", "host-pw")


def test_invitation_requires_shared_password(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 401
    assert 'action="/login"' in response.text

    response = client.post("/login", data={"password": "party", "redirect": "/"}, follow_redirects=False)
    assert response.status_code == 302
    assert response.cookies.get("birthday_auth") == shared_cookie_value("party")

    response = client.get("/")
    assert response.status_code == 200
    assert "invited" in response.text


def test_wrong_shared_password_redirects_with_error(client: TestClient) -> None:
    response = client.post("/login", data={"password": "nope", "redirect": "/"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/?error=1"
    assert "birthday_auth" not in response.cookies


def test_login_ignores_offsite_redirects(client: TestClient) -> None:
    response = client.post(
        "/login",
        data={"password": "party", "redirect": "//evil.example"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/"


def test_invitation_open_without_shared_password(manager: IcebreakerManager) -> None:
    settings = Settings(_env_file=None, session_secret=SecretStr("s"), secure_cookies=False)
    with TestClient(create_api_app(manager, settings)) as open_client:
        assert open_client.get("/").status_code == 200


def test_guest_login_rejects_bad_credentials(client: TestClient) -> None:
    response = client.post(
        "/guest-login",
        data={"name": "Alice", "password": "wrong", "redirect": "/icebreaker"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/guest-login?redirect=%2Ficebreaker&error=1"


def test_icebreaker_requires_guest_session(client: TestClient) -> None:
    assert client.get("/api/icebreaker/assignment").status_code == 401
    assert client.post("/api/icebreaker/answer", json={"answer": "x"}).status_code == 401
    assert client.get("/api/icebreaker/leaderboard").status_code == 401

    page = client.get("/icebreaker", follow_redirects=False)
    assert page.status_code == 302
    assert page.headers["location"].startswith("/guest-login")


def test_session_of_removed_guest_is_rejected(client: TestClient, manager: IcebreakerManager) -> None:
    login_guest(client, "Alice")
    manager.remove_guest("Alice")

    assert client.get("/api/icebreaker/assignment").status_code == 401


def test_tampered_session_is_rejected(client: TestClient) -> None:
    token = create_guest_token("Alice", "other-secret")
    response = client.get("/api/icebreaker/identity", headers={"Cookie": f"birthday_guest={token}"})

    assert response.status_code == 401


def test_assignment_flow_until_completion(client: TestClient) -> None:
    login_guest(client, "Alice")
    assert client.get("/api/icebreaker/identity").json() == {"name": "Alice"}

    first = client.get("/api/icebreaker/assignment").json()
    assert first["completed"] is False
    assert first["currentGuest"] == "Bob"
    assert first["currentQuestion"] == "q1"
    assert first["currentQuestionText"] == "What is their favourite film?"
    assert client.get("/api/icebreaker/assignment").json() == first

    payloads = [client.post("/api/icebreaker/answer", json={"answer": f"a{n}"}).json() for n in range(4)]
    assert [p["completed"] for p in payloads] == [False, False, False, True]
    assert "<strong>first</strong>" in payloads[0]["currentQuestionHtml"]
    assert "currentGuest" not in payloads[-1]

    final = client.get("/api/icebreaker/assignment").json()
    assert final["completed"] is True
    assert final["message"]


def test_answer_without_assignment_is_not_found(client: TestClient) -> None:
    login_guest(client, "Bob")

    response = client.post("/api/icebreaker/answer", json={"answer": "hello"})
    assert response.status_code == 404


def test_blank_answer_is_rejected(client: TestClient) -> None:
    login_guest(client, "Bob")
    client.get("/api/icebreaker/assignment")

    assert client.post("/api/icebreaker/answer", json={"answer": "  "}).status_code == 422


def test_no_peers_is_a_server_error(settings: Settings) -> None:
    manager = IcebreakerManager(InMemoryKeyValueStore())
    manager.add_guest("Solo", "pw")
    with TestClient(create_api_app(manager, settings)) as solo_client:
        solo_client.post("/guest-login", data={"name": "Solo", "password": "pw"}, follow_redirects=False)
        response = solo_client.get("/api/icebreaker/assignment")

    assert response.status_code == 500


def test_leaderboard_and_answers_about(client: TestClient) -> None:
    login_guest(client, "Alice")
    client.get("/api/icebreaker/assignment")
    client.post("/api/icebreaker/answer", json={"answer": "Jaws"})

    rows = client.get("/api/icebreaker/leaderboard").json()
    assert rows[0] == {"name": "Alice", "guestsTalkedTo": 1, "totalAnswered": 1}
    assert len(rows) == 3

    about_bob = client.get("/api/icebreaker/answers/Bob").json()
    assert about_bob == {"guest": "Bob", "answers": {"q1": [{"answeredBy": "Alice", "answer": "Jaws"}]}}


def test_admin_endpoints_require_credentials(client: TestClient) -> None:
    assert client.get("/api/guests").status_code == 401
    assert client.get("/api/guests", auth=("host", "wrong")).status_code == 401
    assert client.get("/api/questions", auth=("intruder", "host-pw")).status_code == 401


def test_admin_guest_crud(client: TestClient) -> None:
    response = client.post("/api/guests", json={"name": "Dana", "password": "d"}, auth=ADMIN)
    assert response.status_code == 201
    assert response.json()["guests"] == ["Alice", "Bob", "Carol", "Dana"]

    response = client.post(
        "/api/guests",
        json={"guests": [{"name": "Eve", "password": "e"}, {"name": "Dana", "password": "x"}]},
        auth=ADMIN,
    )
    assert response.json()["guests"][-1] == "Eve"

    assert client.post("/api/guests", json={"name": "Dana", "password": "d"}, auth=ADMIN).status_code == 409
    assert client.post("/api/guests", json={}, auth=ADMIN).status_code == 422

    assert client.put("/api/guests/Dana", json={"password": "new"}, auth=ADMIN).status_code == 200
    assert client.put("/api/guests/Ghost", json={"password": "new"}, auth=ADMIN).status_code == 404
    assert client.delete("/api/guests/Eve", auth=ADMIN).status_code == 204
    assert client.delete("/api/guests/Eve", auth=ADMIN).status_code == 404
    assert "Eve" not in client.get("/api/guests", auth=ADMIN).json()["guests"]


def test_admin_question_crud_and_transfer(client: TestClient) -> None:
    response = client.post("/api/questions", json={"id": "q3", "text": "Pets?"}, auth=ADMIN)
    assert response.status_code == 201
    assert client.post("/api/questions", json={"id": "q3", "text": "Again"}, auth=ADMIN).status_code == 409

    assert client.put("/api/questions/q3", json={"text": "Any pets?"}, auth=ADMIN).json() == {
        "id": "q3",
        "text": "Any pets?",
    }
    assert client.put("/api/questions/nope", json={"text": "x"}, auth=ADMIN).status_code == 404

    exported = client.get("/api/questions/export", auth=ADMIN).text
    assert "ID: q3\nQ: Any pets?" in exported

    response = client.post(
        "/api/questions/import",
        json={"text": "ID: q3\nQ: Ignored\n\nID: q4\nQ: Hobbies?"},
        auth=ADMIN,
    )
    assert response.json() == {"added": ["q4"]}
    assert client.post("/api/questions/import", json={"text": "Q: no id"}, auth=ADMIN).status_code == 422

    assert client.delete("/api/questions/q4", auth=ADMIN).status_code == 204
    ids = [q["id"] for q in client.get("/api/questions", auth=ADMIN).json()["questions"]]
    assert ids == ["q1", "q2", "q3"]


def test_answer_conflict_maps_to_409(settings: Settings) -> None:
    store = ConflictingStore()
    manager = IcebreakerManager(store, pick_index=first_index, optimistic_writes=True, write_retries=2)
    for name, password in GUEST_PASSWORDS.items():
        manager.add_guest(name, password)
    manager.add_question(Question(id="q1", text="Favourite film?"))

    with TestClient(create_api_app(manager, settings)) as racing_client:
        login_guest(racing_client, "Alice")
        assert racing_client.get("/api/icebreaker/assignment").status_code == 200

        store.conflicts = 10
        response = racing_client.post("/api/icebreaker/answer", json={"answer": "Jaws"})

    assert response.status_code == 409
    assert "Try again" in response.json()["detail"]
