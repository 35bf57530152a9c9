"""
Tests for the HTTP API.

Tests:
- Game lifecycle over HTTP
- Request/response serialization
- Error codes
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..session import BoardController
from ..store import InMemoryGameStore


@pytest.fixture
def client():
    app = create_app(BoardController(InMemoryGameStore()))
    with TestClient(app) as test_client:
        yield test_client


def _create(client, game_type="counter", **extra):
    response = client.post("/api/v1/games", json={"game_type": game_type, "board_id": "tv", **extra})
    assert response.status_code == 200
    return response.json()


def _join(client, join_code, player_id):
    response = client.post("/api/v1/games/join", json={"join_code": join_code, "player_id": player_id})
    assert response.status_code == 200
    return response.json()


class TestSystem:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/api/docs"


class TestGameLifecycle:

    def test_create_and_join(self, client):
        created = _create(client)
        joined = _join(client, created["join_code"].lower(), "p1")

        assert created["role"] == "board"
        assert joined["role"] == "player"
        assert joined["game_id"] == created["game_id"]

        snapshot = client.get(f"/api/v1/games/{created['game_id']}").json()
        assert snapshot["context"]["status"] == "active"
        assert snapshot["context"]["phase"] == "play"
        assert snapshot["context"]["current_player_id"] == "p1"
        assert snapshot["player_ids"] == ["p1"]
        assert snapshot["state"]["score"] == 0

    def test_submit_and_process(self, client):
        created = _create(client)
        game_id = created["game_id"]
        _join(client, created["join_code"], "p1")

        submitted = client.post(
            f"/api/v1/games/{game_id}/actions",
            json={"player_id": "p1", "type": "increment", "payload": {"amount": 2}},
        )
        client.post(f"/api/v1/games/{game_id}/actions", json={"player_id": "p1", "type": "unknownMove"})
        response = client.post(f"/api/v1/games/{game_id}/process", json={"board_id": "tv"})

        assert response.status_code == 200
        body = response.json()
        assert body["processed"] is True
        assert body["consumed_ids"] == [submitted.json()["action_id"]]
        assert body["rejected"][0]["reason"] == "not_allowed"
        assert body["snapshot"]["state"]["score"] == 2

    def test_process_reports_faults(self, client):
        game_id = _create(client)["game_id"]
        client.post(
            f"/api/v1/games/{game_id}/actions",
            json={"player_id": "p1", "type": "increment", "payload": {"amount": "many"}},
        )
        body = client.post(f"/api/v1/games/{game_id}/process", json={"board_id": "tv"}).json()

        assert body["faults"][0]["error_type"] == "ValueError"
        assert body["rejected"][0]["reason"] == "reducer_fault"

    def test_empty_process_is_skipped(self, client):
        game_id = _create(client)["game_id"]
        body = client.post(f"/api/v1/games/{game_id}/process", json={"board_id": "tv"}).json()

        assert body["processed"] is False
        assert body["consumed_ids"] == []

    def test_end_turn(self, client):
        created = _create(client)
        game_id = created["game_id"]
        _join(client, created["join_code"], "p1")
        _join(client, created["join_code"], "p2")

        body = client.post(f"/api/v1/games/{game_id}/end-turn", json={"board_id": "tv"}).json()

        assert body["advanced"] is True
        assert body["updates"] == {"turn": 1, "current_player_index": 1}
        assert body["snapshot"]["context"]["current_player_id"] == "p2"

    def test_poker_phases(self, client):
        game_id = _create(client, game_type="poker")["game_id"]

        moves = client.get(f"/api/v1/games/{game_id}/moves").json()
        assert moves == {"game_id": game_id, "phase": "bet", "moves": ["bet", "fold"]}

        client.post(f"/api/v1/games/{game_id}/phase", json={"board_id": "tv", "phase": "resolve"})
        body = client.post(f"/api/v1/games/{game_id}/end-phase", json={"board_id": "tv"}).json()

        assert body["updates"] == {"phase": "bet", "round": 1}
        assert body["snapshot"]["context"]["round"] == 1

        body = client.post(
            f"/api/v1/games/{game_id}/end-phase", json={"board_id": "tv", "target": "act"}
        ).json()
        assert body["snapshot"]["context"]["phase"] == "act"
        assert body["snapshot"]["context"]["round"] == 1

    def test_turn_order_and_status(self, client):
        game_id = _create(client)["game_id"]

        body = client.post(
            f"/api/v1/games/{game_id}/turn-order", json={"board_id": "tv", "turn_order": ["b", "a"]}
        ).json()
        assert body["context"]["turn_order"] == ["b", "a"]

        body = client.post(f"/api/v1/games/{game_id}/status", json={"board_id": "tv", "status": "ended"}).json()
        assert body["context"]["status"] == "ended"

    def test_update_state_writes_present_fields(self, client):
        game_id = _create(client, meta={"theme": "neon"})["game_id"]

        body = client.put(f"/api/v1/games/{game_id}/state", json={"state": {"score": 9}}).json()

        assert body["state"] == {"score": 9}
        assert body["meta"] == {"theme": "neon"}


class TestErrors:

    def test_unknown_game_type(self, client):
        response = client.post("/api/v1/games", json={"game_type": "chess", "board_id": "tv"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_GAME_TYPE"

    def test_game_not_found(self, client):
        response = client.get("/api/v1/games/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"

    def test_unknown_join_code(self, client):
        response = client.post("/api/v1/games/join", json={"join_code": "ZZZZZZ", "player_id": "p1"})

        assert response.status_code == 404

    def test_not_board(self, client):
        game_id = _create(client)["game_id"]
        response = client.post(f"/api/v1/games/{game_id}/end-turn", json={"board_id": "p1"})

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_BOARD"

    def test_join_ended_game(self, client):
        created = _create(client)
        client.post(f"/api/v1/games/{created['game_id']}/status", json={"board_id": "tv", "status": "ended"})
        response = client.post("/api/v1/games/join", json={"join_code": created["join_code"], "player_id": "p1"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "GAME_NOT_JOINABLE"

    def test_invalid_body(self, client):
        response = client.post("/api/v1/games/join", json={"player_id": "p1"})
        assert response.status_code == 422
