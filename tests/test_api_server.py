from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from proctor_app.constants.network_constants import CLIENT_COOKIE
from proctor_app.core.session_manager import SessionManager
from proctor_app.server.api_server import create_api_app
from tests.conftest import make_identity


@pytest.fixture
def manager(store, scheduler, notifier) -> SessionManager:
    return SessionManager(
        store=store,
        scheduler=scheduler,
        notifier=notifier,
        classification_duration_s=10,
        classification_feedback_s=3,
    )


@pytest.fixture
def client(manager) -> TestClient:
    client = TestClient(create_api_app(manager))
    client.get("/state")
    return client


def _login_body(quiz_code: str, candidate_code: str, **identity: str) -> dict:
    body = make_identity().to_dict()
    body.update(identity)
    return {"quiz_code": quiz_code, "candidate_code": candidate_code, "identity": body}


def test_candidate_page_is_served(manager) -> None:
    response = TestClient(create_api_app(manager)).get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "visibilitychange" in response.text


def test_first_contact_assigns_client_cookie(manager) -> None:
    response = TestClient(create_api_app(manager)).get("/state")
    assert response.status_code == 200
    assert CLIENT_COOKIE in response.cookies
    assert response.json()["phase"] == "login"


def test_verify_returns_quiz_and_roster_identity(client, quiz, candidate_code) -> None:
    response = client.post("/verify", json={"quiz_code": "quiz0001", "candidate_code": candidate_code})
    assert response.status_code == 200
    body = response.json()
    assert body["quiz_name"] == "Bookkeeping basics"
    assert body["question_count"] == 3
    assert body["has_classification_game"] is False
    assert body["identity"]["email"] == "ada.lovelace@example.com"


def test_verify_rejects_bad_codes(client, quiz, candidate_code) -> None:
    response = client.post("/verify", json={"quiz_code": "WRONG000", "candidate_code": candidate_code})
    assert response.status_code == 422
    assert "not valid" in response.json()["detail"]


def test_full_quiz_over_http(client, store, quiz, candidate_code, notifier) -> None:
    response = client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert response.status_code == 201
    state = response.json()
    assert state["phase"] == "in_progress"
    assert state["question"]["index"] == 0
    assert state["question"]["time_remaining"] == 5

    assert client.post("/next", json={}).status_code == 409

    for index, choice in enumerate((0, 1, 2)):
        selected = client.post("/select", json={"choice": choice}).json()
        assert selected["question"]["selected"] == choice
        response = client.post("/next", json={"question_index": index})
        assert response.json()["advanced"] is True

    final = response.json()["state"]
    assert final["phase"] == "completed"
    assert final["score"] == 100
    assert len(notifier.payloads) == 1

    stale = client.post("/next", json={"question_index": 2}).json()
    assert stale["advanced"] is False


def test_invalid_login_identity_is_rejected(client, quiz, candidate_code) -> None:
    response = client.post("/login", json=_login_body(quiz.access_code, candidate_code, level="C9"))
    assert response.status_code == 422
    assert client.get("/state").json()["phase"] == "login"


def test_second_login_in_same_browser_conflicts(client, quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    response = client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert response.status_code == 409


def test_out_of_range_choice_is_rejected(client, quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert client.post("/select", json={"choice": 5}).status_code == 422


def test_tab_switch_signals_warn_then_cancel(client, quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))

    first = client.post("/signal", json={"type": "tab_switch"}).json()
    assert first == {"recorded": True, "suppress": False, "warning": True, "cancelled": False}
    assert client.get("/state").json()["warning_banner"] is True

    second = client.post("/signal", json={"type": "tab_switch"}).json()
    assert second["cancelled"] is True
    assert client.get("/state").json()["phase"] == "cancelled"
    assert client.post("/select", json={"choice": 0}).status_code == 409


def test_devtools_keydown_is_suppressed(client, quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))

    devtools = client.post("/signal", json={"type": "keydown", "key": "I", "ctrl": True, "shift": True}).json()
    plain = client.post("/signal", json={"type": "keydown", "key": "a"}).json()

    assert devtools["recorded"] is True
    assert devtools["suppress"] is True
    assert plain["recorded"] is False


def test_unknown_signal_is_rejected(client) -> None:
    assert client.post("/signal", json={"type": "screenshot"}).status_code == 422


def test_classification_over_http(client, scheduler, classification_quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(classification_quiz.access_code, candidate_code))
    client.post("/select", json={"choice": 0})
    state = client.post("/next", json={}).json()["state"]

    assert state["phase"] == "classification_game"
    board = state["classification"]
    assert len(board["unassigned"]) == 12
    assert board["can_validate"] is False
    assert set(board["labels"]) == {"asset", "liability", "revenue", "expense"}

    assert client.post("/classification/validate").status_code == 409
    assert client.post("/classification/assign", json={"term_id": "99", "category": "asset"}).status_code == 422

    state = client.post("/classification/assign", json={"term_id": "2", "category": "asset"}).json()
    assert [term["id"] for term in state["classification"]["board"]["asset"]] == ["2"]

    scheduler.advance(10)
    feedback = client.get("/state").json()["classification"]
    assert feedback["validated"] is True
    assert feedback["score"] == 8
    assert feedback["board"]["asset"][0]["correct"] is True

    scheduler.advance(3)
    final = client.get("/state").json()
    assert final["phase"] == "completed"
    assert final["classification_score"] == 8


def test_restart_after_completion_returns_to_login(client, quiz, candidate_code) -> None:
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert client.post("/restart").status_code == 409

    for choice in (0, 1, 2):
        client.post("/select", json={"choice": choice})
        client.post("/next", json={})

    assert client.post("/restart").json()["phase"] == "login"
    replay = client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert replay.status_code == 422
    assert replay.json()["detail"] == "You have already completed this quiz."


def test_browsers_are_isolated(manager, quiz, candidate_code) -> None:
    first = TestClient(create_api_app(manager))
    second = TestClient(create_api_app(manager))
    first.get("/state")
    second.get("/state")

    first.post("/login", json=_login_body(quiz.access_code, candidate_code))

    assert first.get("/state").json()["phase"] == "in_progress"
    assert second.get("/state").json()["phase"] == "login"


def test_cookieless_polling_keeps_no_engines(manager, quiz, candidate_code) -> None:
    app = create_api_app(manager)
    for _ in range(25):
        assert TestClient(app).get("/state").json()["phase"] == "login"
    assert manager.active_client_count == 0

    client = TestClient(app)
    client.get("/state")
    client.post("/login", json=_login_body(quiz.access_code, candidate_code))
    assert manager.active_client_count == 1

    for index, choice in enumerate((0, 1, 2)):
        client.post("/select", json={"choice": choice})
        client.post("/next", json={"question_index": index})
    assert manager.active_client_count == 0
    assert client.get("/state").json()["phase"] == "completed"

    assert client.post("/restart").json()["phase"] == "login"
    assert manager.active_client_count == 0
