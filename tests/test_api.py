"""Tests for the HTTP session endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.sessions import SessionStore

LETTERS = [
    ["M", "U", "S", "E", "X"],
    ["C", "A", "T", "O", "P"],
    ["H", "O", "U", "S", "E"],
    ["P", "L", "A", "N", "E"],
    ["Q", "R", "T", "Y", "Z"],
]


def _questions(count: int = 3) -> list[dict]:
    return [
        {
            "id": f"q{i}",
            "type": "spelling",
            "prompt": f"Spell word number {i}",
            "correct_answer": f"word{i}",
            "difficulty": 2,
        }
        for i in range(count)
    ]


@pytest.fixture
def client():
    """Test client with fresh session stores."""
    from main import app
    old_cards, old_grids = app.state.card_games, app.state.word_grids
    app.state.card_games = SessionStore(10)
    app.state.word_grids = SessionStore(10)
    yield TestClient(app)
    app.state.card_games, app.state.word_grids = old_cards, old_grids


def _start_card_game(client, **overrides) -> dict:
    body = {"questions": _questions(), "seed": 3, **overrides}
    resp = client.post("/card-game", json=body)
    assert resp.status_code == 200
    return resp.json()


def _start_word_grid(client, **overrides) -> dict:
    body = {
        "letters": LETTERS,
        "words": [{"word": "MUSE", "hint": "source of inspiration"}, {"word": "CAT"}],
        **overrides,
    }
    resp = client.post("/word-grid", json=body)
    assert resp.status_code == 200
    return resp.json()


class TestRoot:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    def test_health_counts_sessions(self, client):
        _start_card_game(client)
        _start_word_grid(client)
        data = client.get("/health").json()
        assert data["healthy"]
        assert data["card_games"] == 1
        assert data["word_grids"] == 1


class TestCardGameEndpoints:
    """Tests for /card-game."""

    def test_start(self, client):
        data = _start_card_game(client)
        state = data["state"]
        assert state["status"] == "in_progress"
        assert len(state["hand"]) == 3
        assert state["total_questions"] == 3
        assert state["question"]["id"] == "q0"
        assert "questions" not in state
        assert "correct_answer" not in state["question"]

    def test_seed_fixes_the_hand(self, client):
        first = _start_card_game(client)["state"]["hand"]
        second = _start_card_game(client)["state"]["hand"]
        assert [c["type"] for c in first] == [c["type"] for c in second]

    def test_bad_question_bank(self, client):
        resp = client.post("/card-game", json={"questions": []})
        assert resp.status_code == 400

    def test_bad_config(self, client):
        resp = client.post(
            "/card-game",
            json={"questions": _questions(), "config": {"initial_hand_size": 9}},
        )
        assert resp.status_code == 400

    def test_answer(self, client):
        session_id = _start_card_game(client)["session_id"]
        resp = client.post(f"/card-game/{session_id}/answer", json={"answer": " WORD0 "})
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"]["correct"]
        assert data["result"]["score_delta"] == 22
        assert data["score"] == 22
        assert not data["is_game_over"]

        question = client.get(f"/card-game/{session_id}/question").json()
        assert question["id"] == "q1"

    def test_play_card(self, client):
        data = _start_card_game(client)
        session_id = data["session_id"]
        card_id = data["state"]["hand"][0]["id"]
        resp = client.post(f"/card-game/{session_id}/cards/{card_id}")
        assert resp.status_code == 200
        assert card_id not in [c["id"] for c in resp.json()["hand"]]
        assert card_id in [c["id"] for c in resp.json()["discard_pile"]]

    def test_play_unknown_card(self, client):
        session_id = _start_card_game(client)["session_id"]
        resp = client.post(f"/card-game/{session_id}/cards/buff_nope")
        assert resp.status_code == 400

    def test_tick_to_game_over_then_answer_conflicts(self, client):
        session_id = _start_card_game(client)["session_id"]
        resp = client.post(f"/card-game/{session_id}/tick", json={"delta_seconds": 9999})
        assert resp.json() == {"time_remaining": 0, "is_game_over": True}

        resp = client.post(f"/card-game/{session_id}/answer", json={"answer": "word0"})
        assert resp.status_code == 409

    def test_negative_tick_rejected(self, client):
        session_id = _start_card_game(client)["session_id"]
        resp = client.post(f"/card-game/{session_id}/tick", json={"delta_seconds": -1})
        assert resp.status_code == 422

    def test_end_and_result(self, client):
        session_id = _start_card_game(client)["session_id"]
        client.post(f"/card-game/{session_id}/answer", json={"answer": "word0"})
        client.post(f"/card-game/{session_id}/answer", json={"answer": "nope"})
        resp = client.post(f"/card-game/{session_id}/end")
        assert resp.status_code == 200
        result = resp.json()
        assert result["correct_count"] == 1
        assert result["wrong_count"] == 1
        assert result["accuracy"] == 50
        assert client.get(f"/card-game/{session_id}").json()["is_game_over"]

    def test_event_log(self, client):
        session_id = _start_card_game(client)["session_id"]
        client.post(f"/card-game/{session_id}/answer", json={"answer": "word0"})
        events = client.get(f"/card-game/{session_id}/log").json()
        assert [e["action_type"] for e in events] == ["start", "answer"]

    def test_unknown_session(self, client):
        assert client.get("/card-game/missing").status_code == 404
        resp = client.post("/card-game/missing/answer", json={"answer": "x"})
        assert resp.status_code == 404

    def test_delete(self, client):
        session_id = _start_card_game(client)["session_id"]
        assert client.delete(f"/card-game/{session_id}").status_code == 200
        assert client.get(f"/card-game/{session_id}").status_code == 404
        assert client.delete(f"/card-game/{session_id}").status_code == 404

    def test_session_limit(self, client):
        from main import app
        app.state.card_games = SessionStore(1)
        _start_card_game(client)
        resp = client.post("/card-game", json={"questions": _questions(), "seed": 3})
        assert resp.status_code == 429


class TestWordGridEndpoints:
    """Tests for /word-grid."""

    def test_start(self, client):
        state = _start_word_grid(client)["state"]
        assert state["grid"][1][2]["letter"] == "T"
        assert state["time_remaining"] == 120
        assert state["current_word"] == ""

    def test_bad_grid(self, client):
        resp = client.post("/word-grid", json={"letters": LETTERS[:2], "words": []})
        assert resp.status_code == 400

    def test_trace_and_submit(self, client):
        session_id = _start_word_grid(client)["session_id"]
        for row, col in [(0, 0), (0, 1), (0, 2), (0, 3)]:
            resp = client.post(f"/word-grid/{session_id}/click", json={"row": row, "col": col})
        assert resp.json()["current_word"] == "MUSE"

        resp = client.post(f"/word-grid/{session_id}/submit")
        data = resp.json()
        assert data["result"] == {"success": True, "word": "MUSE", "is_new": True, "score_delta": 50}
        assert data["score"] == 50

        result = client.get(f"/word-grid/{session_id}/result").json()
        assert result["found_words"] == ["MUSE"]
        assert result["total_words"] == 2

    def test_clear(self, client):
        session_id = _start_word_grid(client)["session_id"]
        client.post(f"/word-grid/{session_id}/click", json={"row": 1, "col": 0})
        resp = client.post(f"/word-grid/{session_id}/clear")
        assert resp.json()["current_path"] == []

    def test_tick(self, client):
        session_id = _start_word_grid(client, time_limit=10)["session_id"]
        resp = client.post(f"/word-grid/{session_id}/tick", json={"delta_seconds": 15})
        assert resp.json() == {"time_remaining": 0, "is_game_over": True}

    def test_unknown_session(self, client):
        assert client.get("/word-grid/missing").status_code == 404


class TestSessionEviction:
    """Finished sessions make room for new ones when the store is full."""

    def test_finished_card_game_evicted_oldest_first(self, client):
        from main import app
        app.state.card_games = SessionStore(2)
        first = _start_card_game(client)["session_id"]
        second = _start_card_game(client)["session_id"]
        for session_id in (first, second):
            resp = client.post(f"/card-game/{session_id}/tick", json={"delta_seconds": 9999})
            assert resp.json()["is_game_over"]

        third = client.post("/card-game", json={"questions": _questions(), "seed": 3})
        assert third.status_code == 200
        assert client.get(f"/card-game/{first}").status_code == 404
        assert client.get(f"/card-game/{second}").status_code == 200

    def test_running_games_are_never_evicted(self, client):
        from main import app
        app.state.card_games = SessionStore(2)
        running = _start_card_game(client)["session_id"]
        finished = _start_card_game(client)["session_id"]
        client.post(f"/card-game/{finished}/tick", json={"delta_seconds": 9999})

        assert client.post("/card-game", json={"questions": _questions()}).status_code == 200
        assert client.post("/card-game", json={"questions": _questions()}).status_code == 429
        assert client.get(f"/card-game/{running}").status_code == 200

    def test_finished_word_grid_evicted(self, client):
        from main import app
        app.state.word_grids = SessionStore(1)
        old = _start_word_grid(client, time_limit=5)["session_id"]
        client.post(f"/word-grid/{old}/tick", json={"delta_seconds": 10})

        _start_word_grid(client)
        assert client.get(f"/word-grid/{old}").status_code == 404


class TestPollingKeepsDrawsSeeded:
    """Reading a session must not change which cards it deals next."""

    def _start_shuffled(self, client) -> str:
        from engine.buffs import create_buff
        from main import app
        from models.buffs import BuffType

        questions = [
            {
                "id": f"c{i}",
                "type": "choice",
                "prompt": f"Pick the fruit {i}",
                "correct_answer": "apple",
                "options": ["pear", "apple", "plum", "fig"],
            }
            for i in range(3)
        ]
        session_id = client.post("/card-game", json={"questions": questions, "seed": 11}).json()["session_id"]
        card = create_buff(BuffType.SHUFFLE)
        app.state.card_games.get(session_id).state.hand.insert(0, card)
        assert client.post(f"/card-game/{session_id}/cards/{card.id}").status_code == 200
        return session_id

    def test_polling_does_not_shift_draws(self, client):
        polled = self._start_shuffled(client)
        quiet = self._start_shuffled(client)
        for _ in range(5):
            client.get(f"/card-game/{polled}")
            client.get(f"/card-game/{polled}/question")

        hands = []
        for session_id in (polled, quiet):
            state = client.get(f"/card-game/{session_id}").json()
            card_id = state["hand"][0]["id"]
            resp = client.post(f"/card-game/{session_id}/cards/{card_id}")
            hands.append([c["type"] for c in resp.json()["hand"]])
        assert hands[0] == hands[1]
