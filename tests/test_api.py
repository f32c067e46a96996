import random

from fastapi.testclient import TestClient

from leaderboard_backend.app import create_app
from leaderboard_backend.core import DEFAULT_SEED_USERS

from .conftest import assert_ranks_consistent


def _users(client):
    response = client.get("/api/users")
    assert response.status_code == 200
    return response.json()


def _by_name(client):
    return {u["name"]: u for u in _users(client)}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/healthz").json() == {"ok": True}


def test_config_exposes_history_limits(client):
    payload = client.get("/config").json()
    assert payload["history_default_limit"] == 50
    assert payload["ws_path"] == "/ws/leaderboard"


def test_first_start_seeds_default_users(engine):
    app = create_app(engine, seed_names=DEFAULT_SEED_USERS)
    with TestClient(app) as client:
        users = _users(client)
    assert [u["name"] for u in users] == DEFAULT_SEED_USERS
    assert_ranks_consistent(users)


def test_seed_is_skipped_when_users_exist(engine, client):
    client.post("/api/users", json={"name": "D"})
    app = create_app(engine, seed_names=["X", "Y"])
    with TestClient(app) as second:
        names = [u["name"] for u in _users(second)]
    assert names == ["A", "B", "C", "D"]


def test_initial_ranks_follow_creation_order(client):
    users = _users(client)
    assert [(u["name"], u["rank"], u["totalPoints"]) for u in users] == [
        ("A", 1, 0),
        ("B", 2, 0),
        ("C", 3, 0),
    ]
    assert all(u["createdAt"].endswith("Z") for u in users)


def test_claim_moves_user_to_top(client, points):
    points.set(7)
    c_id = _by_name(client)["C"]["id"]

    response = client.post("/api/claim-points", json={"userId": c_id})

    assert response.status_code == 200
    body = response.json()
    assert body["pointsAwarded"] == 7
    assert body["newTotalPoints"] == 7
    assert body["user"]["name"] == "C"
    assert body["user"]["rank"] == 1

    users = _users(client)
    assert [(u["name"], u["rank"]) for u in users] == [("C", 1), ("A", 2), ("B", 3)]
    assert users[0]["totalPoints"] == 7


def test_claim_accepts_numeric_string_id(client):
    a_id = _by_name(client)["A"]["id"]
    response = client.post("/api/claim-points", json={"userId": str(a_id)})
    assert response.status_code == 200


def test_claim_with_real_randomness_appends_matching_record(app):
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        a_id = _by_name(client)["A"]["id"]
        client.post("/api/claim-points", json={"userId": a_id})
        previous = client.get("/api/points-history").json()
        assert len(previous) == 1
        a = _by_name(client)["A"]

        body = client.post("/api/claim-points", json={"userId": a_id}).json()

        assert 1 <= body["pointsAwarded"] <= 10
        assert body["newTotalPoints"] == a["totalPoints"] + body["pointsAwarded"]
        assert body["user"]["totalPoints"] == body["newTotalPoints"]

        history = client.get(f"/api/points-history/{a_id}").json()
        assert len(history) == 2
        record = history[0]
        assert record["pointsAwarded"] == body["pointsAwarded"]
        assert record["userName"] == "A"
        assert record["userId"] == a_id
        assert record["timestamp"] >= previous[0]["timestamp"]


def test_claim_requires_user_id(client):
    response = client.post("/api/claim-points", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "User ID is required"

    response = client.post("/api/claim-points", json={"userId": "abc"})
    assert response.status_code == 400


def test_claim_rejects_non_integral_user_ids(client):
    a_id = _by_name(client)["A"]["id"]
    for raw in (a_id + 0.7, float(a_id), True, "1.5", "-1", " ", [a_id], {"id": a_id}):
        response = client.post("/api/claim-points", json={"userId": raw})
        assert response.status_code == 400, raw
    assert client.get("/api/points-history").json() == []
    assert all(u["totalPoints"] == 0 for u in _users(client))


def test_out_of_range_user_ids_are_not_found(client):
    huge = 10**30
    response = client.post("/api/claim-points", json={"userId": huge})
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"

    response = client.post("/api/claim-points", json={"userId": str(huge)})
    assert response.status_code == 404

    assert client.get(f"/api/users/{huge}").status_code == 404
    history = client.get(f"/api/points-history/{huge}")
    assert history.status_code == 200
    assert history.json() == []


def test_claim_unknown_user_is_rejected_without_side_effects(client, app):
    published = []
    app.state.broadcaster.publish = published.append
    before = _users(client)

    response = client.post("/api/claim-points", json={"userId": 9999})

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"
    assert client.get("/api/points-history").json() == []
    assert _users(client) == before
    assert published == []


def test_successful_mutations_are_published(client, app):
    published = []
    app.state.broadcaster.publish = published.append

    client.post("/api/users", json={"name": "D"})
    client.post("/api/claim-points", json={"userId": _by_name(client)["B"]["id"]})

    assert len(published) == 2
    assert published[0].sequence < published[1].sequence
    assert [u["name"] for u in published[1].users][0] == "B"


def test_add_user_trims_and_ranks(client):
    response = client.post("/api/users", json={"name": "  Dana  "})

    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "Dana"
    assert created["totalPoints"] == 0
    assert created["rank"] == 4

    users = _users(client)
    assert [u["name"] for u in users] == ["A", "B", "C", "Dana"]
    assert_ranks_consistent(users)


def test_add_duplicate_user_is_rejected(client):
    before = _users(client)

    response = client.post("/api/users", json={"name": " A "})

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"
    assert _users(client) == before


def test_add_blank_user_is_rejected(client):
    for body in ({"name": ""}, {"name": "   "}, {}, {"name": 42}):
        response = client.post("/api/users", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "User name is required"
    assert len(_users(client)) == 3


def test_get_single_user(client):
    a = _by_name(client)["A"]
    assert client.get(f"/api/users/{a['id']}").json() == a
    assert client.get("/api/users/9999").status_code == 404


def test_recent_history_is_capped_and_newest_first(client, points):
    points.set(*range(1, 11))
    ids = [u["id"] for u in _users(client)]
    claimed = []
    for i in range(60):
        user_id = ids[i % 3]
        body = client.post("/api/claim-points", json={"userId": user_id}).json()
        claimed.append((user_id, body["pointsAwarded"]))

    history = client.get("/api/points-history").json()

    assert len(history) == 50
    assert [(h["userId"], h["pointsAwarded"]) for h in history] == list(reversed(claimed[-50:]))
    stamps = [h["timestamp"] for h in history]
    assert stamps == sorted(stamps, reverse=True)

    assert len(client.get("/api/points-history", params={"limit": 5}).json()) == 5
    assert client.get("/api/points-history", params={"limit": 0}).status_code == 422


def test_user_history_is_unbounded_and_newest_first(client, points):
    points.set(1, 2, 3)
    a_id = _by_name(client)["A"]["id"]
    for _ in range(3):
        client.post("/api/claim-points", json={"userId": a_id})

    history = client.get(f"/api/points-history/{a_id}").json()
    assert [h["pointsAwarded"] for h in history] == [3, 2, 1]
    assert client.get("/api/points-history/9999").json() == []


def test_ranks_stay_consistent_across_random_operations(client, points):
    rng = random.Random(1234)
    points.set(*[rng.randint(1, 10) for _ in range(40)])
    for step in range(40):
        users = _users(client)
        if step % 7 == 0:
            client.post("/api/users", json={"name": f"user-{step}"})
        else:
            target = rng.choice(users)
            client.post("/api/claim-points", json={"userId": target["id"]})
        assert_ranks_consistent(_users(client))


def test_websocket_receives_update_after_claim(client, app, points):
    points.set(4)
    b_id = _by_name(client)["B"]["id"]

    with client.websocket_connect("/ws/leaderboard") as ws:
        hello = ws.receive_json()
        assert hello["type"] == "subscribed"

        client.post("/api/claim-points", json={"userId": b_id})

        update = ws.receive_json()
        assert update["type"] == "leaderboard-update"
        assert update["sequence"] >= 1
        names = [u["name"] for u in update["payload"]]
        assert names == ["B", "A", "C"]
        assert update["payload"][0]["totalPoints"] == 4

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
        assert len(app.state.broadcaster) == 1

    assert len(app.state.broadcaster) == 0
