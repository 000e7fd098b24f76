import globals


def start(client, **body):
    payload = {"variant": "standard", "total_legs": 3, "player_names": ["Ann", "Bo"]}
    payload.update(body)
    return client.post("/start-match", json=payload)


def throw(client, target, multiplier=1):
    return client.post("/throw", json={"target": target, "multiplier": multiplier})


def test_game_state_without_match(client):
    resp = client.get("/game-state")
    assert resp.status_code == 400
    assert resp.json()["error"] == "No match in progress"


def test_commands_without_match(client):
    for route in ("/undo", "/switch-player", "/reset-leg", "/advance-leg"):
        assert client.post(route).status_code == 400
    assert throw(client, "20").status_code == 400


def test_start_match(client):
    resp = start(client)
    assert resp.status_code == 200
    state = resp.json()["game_state"]
    assert state["players"] == {"1": "Ann", "2": "Bo"}
    assert state["phase"] == "active"
    assert state["match"]["total_legs"] == 3
    assert state["stats"]["1"]["marks"]["20"] == 0
    assert globals.current_session is not None


def test_start_match_with_preset(client):
    resp = start(client, variant="super", total_legs=None, match_type="best-of-5")
    state = resp.json()["game_state"]
    assert state["variant"] == "super"
    assert state["match"]["total_legs"] == 5
    assert "T" in state["stats"]["1"]["marks"]


def test_start_match_rejects_even_legs(client):
    resp = start(client, total_legs=4)
    assert resp.status_code == 400
    assert "odd" in resp.json()["error"]
    assert globals.current_session is None


def test_start_match_rejects_unknown_variant(client):
    assert start(client, variant="501").status_code == 400


def test_throws_and_scoring(client):
    start(client)
    for _ in range(3):
        assert throw(client, "20").json()["status"] == "success"

    resp = throw(client, "19")
    assert resp.json()["status"] == "rejected"
    assert resp.json()["game_state"]["darts_thrown"] == 3

    client.post("/switch-player")
    for _ in range(3):
        throw(client, "18")
    client.post("/switch-player")
    throw(client, "20", 2)

    resp = client.get("/stats/1")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Ann"
    assert resp.json()["stats"]["score"] == 40
    assert resp.json()["stats"]["closed"]["20"] is True


def test_undo(client):
    start(client)
    throw(client, "20", 3)
    resp = client.post("/undo")
    state = resp.json()["game_state"]
    assert resp.json()["status"] == "success"
    assert state["stats"]["1"]["marks"]["20"] == 0
    assert state["throws"]["1"] == []
    assert client.post("/undo").json()["status"] == "rejected"


def test_malformed_throw(client):
    start(client)
    resp = client.post("/throw", json={"target": "20", "multiplier": "lots"})
    assert resp.status_code == 422


def test_target_query(client):
    start(client)
    resp = client.get("/targets/b")
    assert resp.status_code == 200
    body = resp.json()
    assert body["target"] == "B"
    assert body["disabled"] is False
    assert body["multipliers"] == {"1": True, "2": True, "3": False}

    assert client.get("/targets/T").status_code == 404
    assert client.get("/targets/99").status_code == 404


def test_unknown_player(client):
    start(client)
    assert client.get("/stats/3").status_code == 404


def test_leg_and_match_flow(client):
    start(client, total_legs=1)
    assert client.post("/advance-leg").json()["status"] == "rejected"

    for target in ("20", "19", "18"):
        throw(client, target, 3)
    client.post("/switch-player")
    client.post("/switch-player")
    for target in ("17", "16", "15"):
        throw(client, target, 3)
    client.post("/switch-player")
    client.post("/switch-player")
    throw(client, "B", 2)
    state = throw(client, "B", 1).json()["game_state"]
    assert state["phase"] == "leg_won"
    assert state["leg_winner"] == 1

    state = client.post("/advance-leg").json()["game_state"]
    assert state["phase"] == "match_won"
    assert state["match"]["winner"] == 1
    assert state["match"]["history"][0]["leg"] == 1

    assert client.post("/reset-leg").json()["status"] == "rejected"

    resp = client.post("/restart-match", json={"total_legs": 3})
    state = resp.json()["game_state"]
    assert state["phase"] == "active"
    assert state["players"] == {"1": "Ann", "2": "Bo"}
    assert state["match"]["legs_won"] == {"1": 0, "2": 0}

    assert client.post("/restart-match", json={"total_legs": 2}).status_code == 400


def test_root_and_health(client):
    body = client.get("/").json()
    assert body["variants"] == ["standard", "super"]
    assert body["match_in_progress"] is False
    assert client.get("/ping").json() == {"pong": True}
    assert client.get("/healthz").json()["ok"] is True
