from __future__ import annotations

from fastapi.testclient import TestClient

from habit_hero.api import build_app
from habit_hero.outbox import RemoteOutbox
from habit_hero.session import GameSession
from habit_hero.storage import LocalSnapshotStore, NullRemoteStore


def _client(tmp_path, token: str | None = "secret") -> TestClient:
    remote = NullRemoteStore()
    session = GameSession(
        local=LocalSnapshotStore(tmp_path / "hero.db"),
        remote=remote,
        outbox=RemoteOutbox(remote, retry_delay=0),
    )
    return TestClient(build_app(session, token))


def test_requires_token(tmp_path) -> None:
    with _client(tmp_path) as client:
        assert client.get("/api/status").status_code == 401
        assert client.get("/api/status", headers={"x-api-token": "secret"}).status_code == 200
        assert client.get("/api/classes", params={"token": "secret"}).status_code == 200


def test_status_and_catalogs(tmp_path) -> None:
    with _client(tmp_path, token=None) as client:
        body = client.get("/api/status").json()
        assert body["source"] == "loaded-fresh"
        assert body["status"]["level"] == 1
        assert body["status"]["coins"] == 0
        assert len(body["player_id"]) == 36

        classes = client.get("/api/classes").json()["classes"]
        assert {c["id"] for c in classes} == {"warrior", "mage", "hunter"}

        tiers = client.get("/api/difficulties").json()["difficulties"]
        assert [t["key"] for t in tiers] == ["muito_facil", "facil", "normal", "dificil", "epico"]

        state = client.get("/api/state").json()["state"]
        assert len(state["shop_items"]) == 4


def test_intents_roundtrip(tmp_path) -> None:
    with _client(tmp_path, token=None) as client:
        created = client.post(
            "/api/intents",
            json={"type": "create_task", "payload": {"name": "Gym", "penalty": "burpees", "difficulty": "epico"}},
        ).json()
        assert created["ok"] is True
        assert created["status"] == "applied"

        second = client.post(
            "/api/intents",
            json={"type": "create_task", "payload": {"name": "Dragon", "penalty": "x", "difficulty": "epico"}},
        )
        assert second.status_code == 200
        assert second.json()["ok"] is False
        assert second.json()["status"] == "rejected"

        missing = client.post("/api/intents", json={"type": "complete_task", "payload": {"task_id": "ghost"}}).json()
        assert missing["status"] == "noop"

        task_id = client.get("/api/state").json()["state"]["tasks"][0]["id"]
        done = client.post("/api/intents", json={"type": "complete_task", "payload": {"task_id": task_id}}).json()
        assert done["ok"] is True
        assert client.get("/api/status").json()["status"]["progress"]["base_xp"] == 23


def test_unknown_intent_type_is_400(tmp_path) -> None:
    with _client(tmp_path, token=None) as client:
        resp = client.post("/api/intents", json={"type": "cast_fireball", "payload": {}})
        assert resp.status_code == 400
