"""Tests for API functionality."""

import pytest

try:
    from fastapi.testclient import TestClient

    from marginalia.api.app import create_app, generate_token
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False
    TestClient = None  # type: ignore

from marginalia.runtime import build_runtime

pytestmark = pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")

NOTES = """# Book
:PROPERTIES:
:NOTER_DOCUMENT: book.pdf
:END:

## A
:PROPERTIES:
:NOTER_PAGE: 1
:END:

## B
:PROPERTIES:
:NOTER_PAGE: 3
:END:

## C
:PROPERTIES:
:NOTER_PAGE: (3 . 0.5)
:END:
"""


@pytest.fixture
def runtime():
    return build_runtime()


@pytest.fixture
def client(runtime):
    return TestClient(create_app(runtime, token=None))


def start(client, page=3, **extra):
    response = client.post(
        "/sessions", json={"document": "book.pdf", "notes_text": NOTES, "page": page, **extra}
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint(client):
    """Test /health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "sessions": 0}


def test_auth_required(runtime):
    """Test that endpoints require authentication when token is set."""
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    assert client.get("/health").status_code == 401
    assert client.get("/health", headers={"Authorization": "Bearer wrong"}).status_code == 401
    response = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_create_session(client):
    data = start(client)

    assert data["count"] == "2 notes"
    assert [n["title"] for n in data["notes"]] == ["B", "C"]

    sessions = client.get("/sessions").json()
    assert sessions == [
        {"id": data["session"], "document": "book.pdf", "kind": "paged", "count": "2 notes"}
    ]


def test_unsupported_document(client, runtime):
    response = client.post("/sessions", json={"document": "notes.txt", "notes_text": NOTES})
    assert response.status_code == 415
    assert "not supported" in response.json()["detail"]
    assert len(runtime.registry) == 0


def test_unknown_session(client):
    assert client.get("/sessions/nope/view").status_code == 404
    assert client.post("/sessions/nope/navigate/next-note").status_code == 404


def test_location_change(client):
    session_id = start(client)["session"]

    response = client.post(f"/sessions/{session_id}/location", json={"page": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == "0 notes"
    assert [n["title"] for n in data["notes"]] == ["C"]
    assert data["regions"] == []
    assert len(data["prev_regions"]) == 1

    view = client.get(f"/sessions/{session_id}/view").json()
    assert view["count"] == "0 notes"


def test_insert_note(client):
    session_id = start(client, page=5)["session"]

    response = client.post(f"/sessions/{session_id}/notes", json={"title": "Thoughts"})
    assert response.status_code == 200
    assert response.json()["title"] == "Thoughts"
    assert response.json()["count"] == "1 note"

    text = client.get(f"/sessions/{session_id}/notes-file").json()["text"]
    assert "## Thoughts\n:PROPERTIES:\n:NOTER_PAGE: 5\n:END:\n" in text


def test_insert_precise_note(client):
    session_id = start(client)["session"]

    response = client.post(
        f"/sessions/{session_id}/notes", json={"precise": True, "click": [0.4, 0.2]}
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Notes for page (3 0.4 . 0.2)"

    response = client.post(f"/sessions/{session_id}/notes", json={"precise": True})
    assert response.status_code == 409


def test_navigation(client):
    session_id = start(client, page=1)["session"]

    response = client.post(f"/sessions/{session_id}/navigate/next-page")
    assert response.status_code == 200
    assert response.json()["location"] == "3"
    assert response.json()["count"] == "2 notes"

    response = client.post(f"/sessions/{session_id}/navigate/next-page")
    assert response.status_code == 409
    assert "following pages" in response.json()["detail"]

    response = client.post(f"/sessions/{session_id}/navigate/sideways")
    assert response.status_code == 404


def test_start_location_and_no_questions(client):
    session_id = start(client, page=4)["session"]

    response = client.put(f"/sessions/{session_id}/start-location", json={})
    assert response.json() == {"location": "4"}
    response = client.put(f"/sessions/{session_id}/start-location", json={"clear": True})
    assert response.json() == {"location": None}

    response = client.post(f"/sessions/{session_id}/no-questions")
    assert response.json() == {"no_questions": True}


def test_kill_session(client, runtime):
    session_id = start(client)["session"]

    response = client.delete(f"/sessions/{session_id}")
    assert response.status_code == 200
    assert response.json() == {"killed": session_id}
    assert len(runtime.registry) == 0
    assert client.get(f"/sessions/{session_id}/view").status_code == 404
    assert client.get("/sessions").json() == []
