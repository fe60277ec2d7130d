from fastapi.testclient import TestClient

from core.errors import StoreError
from server.app import ServerApp
from server.services import AuthService
from server.store.memory_store import MemoryMatchStore


def bearer(auth: AuthService, user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth.create_access_token({'sub': user_id})}"}


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_random_join_scenario(client):
    a = client.post("/api/match/join-random", json={"level": "intermedio", "userId": "alice"})
    b = client.post("/api/match/join-random", json={"level": "intermedio", "userId": "bob"})
    c = client.post("/api/match/join-random", json={"level": "intermedio", "userId": "carol"})

    assert a.status_code == b.status_code == c.status_code == 200
    match_a, match_b, match_c = (r.json()["match"] for r in (a, b, c))

    assert match_a["status"] == "waiting"
    assert len(match_a["match_code"]) == 6
    assert match_b["id"] == match_a["id"]
    assert match_b["status"] == "active"
    assert match_b["current_player_id"] == "alice"
    assert match_c["id"] != match_a["id"]
    assert match_c["status"] == "waiting"

    detail = client.get(f"/api/match/{match_a['id']}").json()
    assert [(p["user_id"], p["player_number"]) for p in detail["players"]] == [
        ("alice", 1),
        ("bob", 2),
    ]


def test_different_levels_create_independent_matches(client):
    a = client.post("/api/match/join-random", json={"level": "basico", "userId": "alice"}).json()
    b = client.post("/api/match/join-random", json={"level": "avanzado", "userId": "bob"}).json()

    assert a["match"]["id"] != b["match"]["id"]
    assert a["match"]["status"] == b["match"]["status"] == "waiting"


def test_missing_level_is_bad_request(client):
    response = client.post("/api/match/join-random", json={"userId": "alice"})
    assert response.status_code == 400
    assert response.json() == {"error": "level is required"}


def test_missing_level_is_reported_before_identity(client):
    response = client.post("/api/match/join-random", json={})
    assert response.status_code == 400


def test_missing_identity_is_unauthorized(client):
    response = client.post("/api/match/join-random", json={"level": "basico"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: userId not provided"}


def test_malformed_body_is_bad_request(client):
    response = client.post(
        "/api/match/join-random",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


def test_bearer_credential_takes_precedence(client, auth):
    response = client.post(
        "/api/match/join-random",
        json={"level": "basico", "userId": "mallory"},
        headers=bearer(auth, "alice"),
    )
    match_id = response.json()["match"]["id"]

    players = client.get(f"/api/match/{match_id}").json()["players"]
    assert [p["user_id"] for p in players] == ["alice"]


def test_bearer_credential_alone_is_enough(client, auth):
    response = client.post(
        "/api/match/join-random", json={"level": "basico"}, headers=bearer(auth, "alice")
    )
    assert response.status_code == 200


def test_invalid_bearer_falls_back_to_body(client):
    response = client.post(
        "/api/match/join-random",
        json={"level": "basico", "userId": "bob"},
        headers={"Authorization": "Bearer forged.token.value"},
    )
    match_id = response.json()["match"]["id"]

    players = client.get(f"/api/match/{match_id}").json()["players"]
    assert [p["user_id"] for p in players] == ["bob"]


def test_join_by_code(client):
    host = client.post(
        "/api/match/join-random", json={"level": "intermedio", "userId": "alice"}
    ).json()["match"]

    joined = client.post(
        "/api/match/join", json={"matchCode": host["match_code"].lower(), "userId": "bob"}
    )
    full = client.post("/api/match/join", json={"matchCode": host["match_code"], "userId": "carol"})
    unknown = client.post("/api/match/join", json={"matchCode": "ZZZZZZ", "userId": "carol"})
    no_code = client.post("/api/match/join", json={"userId": "carol"})

    assert joined.status_code == 200
    assert joined.json()["match"]["status"] == "active"
    assert joined.json()["match"]["current_player_id"] == "alice"
    assert full.status_code == 409
    assert full.json() == {"error": "Match is full"}
    assert unknown.status_code == 404
    assert no_code.status_code == 400


def test_unknown_match_is_not_found(client):
    response = client.get("/api/match/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Match not found"}


def test_store_failure_is_internal_error(settings):
    class DownStore(MemoryMatchStore):
        async def list_waiting_matches(self, level, limit):
            raise StoreError("could not connect to server")

    client = TestClient(ServerApp(settings, store=DownStore()).app)

    response = client.post("/api/match/join-random", json={"level": "basico", "userId": "alice"})

    assert response.status_code == 500
    assert response.json() == {"error": "could not connect to server"}


def test_lifespan_connects_store(settings):
    class TrackingStore(MemoryMatchStore):
        def __init__(self) -> None:
            super().__init__()
            self.events: list[str] = []

        async def connect(self):
            self.events.append("connect")

        async def disconnect(self):
            self.events.append("disconnect")

    store = TrackingStore()
    with TestClient(ServerApp(settings, store=store).app) as client:
        client.get("/api/health")

    assert store.events == ["connect", "disconnect"]


def test_shared_code_reaches_the_friend_not_random_joiners(client):
    created = client.post("/api/match/create", json={"level": "basico", "userId": "alice"})
    assert created.status_code == 200
    private = created.json()["match"]
    assert private["status"] == "active"
    assert private["current_player_id"] == "alice"

    random_join = client.post(
        "/api/match/join-random", json={"level": "basico", "userId": "carol"}
    ).json()["match"]
    friend_join = client.post(
        "/api/match/join", json={"matchCode": private["match_code"], "userId": "bob"}
    )

    assert random_join["id"] != private["id"]
    assert friend_join.status_code == 200
    assert friend_join.json()["match"]["id"] == private["id"]
    players = client.get(f"/api/match/{private['id']}").json()["players"]
    assert [(p["user_id"], p["player_number"]) for p in players] == [("alice", 1), ("bob", 2)]


def test_create_requires_level_and_identity(client):
    no_level = client.post("/api/match/create", json={"userId": "alice"})
    no_user = client.post("/api/match/create", json={"level": "basico"})

    assert no_level.status_code == 400
    assert no_level.json() == {"error": "level is required"}
    assert no_user.status_code == 401


def test_non_string_level_is_bad_request(client):
    response = client.post("/api/match/join-random", json={"level": 5, "userId": "alice"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request body")


def test_unexpected_error_keeps_error_shape(settings):
    class CrashingStore(MemoryMatchStore):
        async def list_waiting_matches(self, level, limit):
            raise RuntimeError("driver exploded")

    app = ServerApp(settings, store=CrashingStore()).app
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/api/match/join-random", json={"level": "basico", "userId": "alice"})

    assert response.status_code == 500
    assert response.json() == {"error": "driver exploded"}
