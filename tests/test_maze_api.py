import pytest

from dragonmaze import create_app
from dragonmaze.maze import Grid, InvalidSizeError, is_valid
from dragonmaze.maze import pipeline
from dragonmaze.maze.validation import Violation


def test_seed_and_map_roundtrip(client):
    r = client.post("/api/maze/seed", json={"seed": 42, "size": 7})
    assert r.status_code == 200
    assert r.get_json() == {"seed": 42, "size": 7}
    r = client.get("/api/maze/map")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 42
    assert data["size"] == 7
    assert len(data["rows"]) == 7
    assert data["grid"][0][0] == "wall"
    assert set(data["positions"]) == {"exit", "hero", "dragon", "item"}
    assert is_valid(Grid.from_rows(data["rows"]))


def test_string_seed_is_deterministic(client):
    a = client.post("/api/maze/seed", json={"seed": "dragon-lair"}).get_json()["seed"]
    b = client.post("/api/maze/seed", json={"seed": "dragon-lair"}).get_json()["seed"]
    c = client.post("/api/maze/seed", json={"seed": "other-lair"}).get_json()["seed"]
    assert a == b
    assert a != c


def test_numeric_string_seed(client):
    r = client.post("/api/maze/seed", json={"seed": "123"})
    assert r.get_json()["seed"] == 123


def test_missing_seed_defaults(client, test_app):
    r = client.post("/api/maze/seed", json={})
    data = r.get_json()
    assert isinstance(data["seed"], int)
    assert data["size"] == test_app.config["MAZE_DEFAULT_SIZE"]


@pytest.mark.parametrize("size", [6, 3, "abc", 103, True])
def test_invalid_size_rejected(client, size):
    r = client.post("/api/maze/seed", json={"seed": 1, "size": size})
    assert r.status_code == 400
    assert r.get_json()["code"] == "invalid_size"


def test_query_args_override_session(client):
    client.post("/api/maze/seed", json={"seed": 1, "size": 5})
    r = client.get("/api/maze/map?seed=5&size=9")
    data = r.get_json()
    assert data["seed"] == 5 and data["size"] == 9
    again = client.get("/api/maze/map?seed=5&size=9").get_json()
    assert again["rows"] == data["rows"]


def test_map_invalid_query_size(client):
    r = client.get("/api/maze/map?seed=5&size=8")
    assert r.status_code == 400


def test_metrics_endpoint(client):
    client.post("/api/maze/seed", json={"seed": 77, "size": 9})
    r = client.get("/api/maze/gen/metrics")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 77
    assert data["metrics"]["attempts"] >= 1
    assert "phase_ms" in data["metrics"]


def test_relocate_exit(client):
    client.post("/api/maze/seed", json={"seed": 9, "size": 11})
    before = client.get("/api/maze/map").get_json()
    r = client.post("/api/maze/exit")
    assert r.status_code == 200
    data = r.get_json()
    assert data["seed"] == 9
    row, col = data["exit"]
    assert data["rows"][row][col] == "S"
    assert sum(line.count("S") for line in data["rows"]) == 1
    assert is_valid(Grid.from_rows(data["rows"]))
    # Cached maze reflects the move
    after = client.get("/api/maze/map").get_json()
    assert after["positions"]["exit"] == [row, col]
    assert after["positions"]["hero"] == before["positions"]["hero"]


def test_generation_failure_maps_to_503(monkeypatch):
    app = create_app({"TESTING": True, "MAZE_MAX_ATTEMPTS": 2})
    monkeypatch.setattr(
        pipeline, "violations", lambda grid, rules=(): [Violation("connectivity", (1, 1), "forced")]
    )
    client = app.test_client()
    r = client.get("/api/maze/map?seed=123&size=5")
    assert r.status_code == 503
    data = r.get_json()
    assert data["code"] == "generation_failed"
    assert data["seed"] == 123


def test_cache_disabled_builds_fresh():
    app = create_app({"TESTING": True, "MAZE_DISABLE_CACHE": True})
    client = app.test_client()
    a = client.get("/api/maze/map?seed=3&size=7").get_json()
    b = client.get("/api/maze/map?seed=3&size=7").get_json()
    assert a["rows"] == b["rows"]


def _relocate_until_moved(client, original):
    # A relocation may redraw the same cell; a few tries always move it
    for _ in range(6):
        data = client.post("/api/maze/exit").get_json()
        if data["exit"] != original:
            return data["exit"]
    raise AssertionError("exit never moved")


def test_relocation_stays_in_its_session(test_app):
    alice = test_app.test_client()
    bob = test_app.test_client()
    for c in (alice, bob):
        c.post("/api/maze/seed", json={"seed": 31, "size": 11})
    original = bob.get("/api/maze/map").get_json()["positions"]["exit"]
    moved = _relocate_until_moved(alice, original)
    assert bob.get("/api/maze/map").get_json()["positions"]["exit"] == original
    assert alice.get("/api/maze/map").get_json()["positions"]["exit"] == moved
    # Another client asking for the same maze by query args sees it untouched
    fresh = test_app.test_client().get("/api/maze/map?seed=31&size=11").get_json()
    assert fresh["positions"]["exit"] == original


def test_relocation_survives_disabled_cache():
    app = create_app({"TESTING": True, "MAZE_DISABLE_CACHE": True})
    client = app.test_client()
    client.post("/api/maze/seed", json={"seed": 31, "size": 11})
    original = client.get("/api/maze/map").get_json()["positions"]["exit"]
    moved = _relocate_until_moved(client, original)
    data = client.get("/api/maze/map").get_json()
    assert data["positions"]["exit"] == moved
    row, col = moved
    assert data["rows"][row][col] == "S"


def test_new_seed_resets_relocation(client):
    client.post("/api/maze/seed", json={"seed": 31, "size": 11})
    original = client.get("/api/maze/map").get_json()["positions"]["exit"]
    _relocate_until_moved(client, original)
    client.post("/api/maze/seed", json={"seed": 31, "size": 11})
    assert client.get("/api/maze/map").get_json()["positions"]["exit"] == original


@pytest.mark.parametrize("size", [10, 3, 103])
def test_bad_default_size_rejected_at_startup(size):
    with pytest.raises(InvalidSizeError):
        create_app({"TESTING": True, "MAZE_DEFAULT_SIZE": size})


def test_valid_default_size_used():
    app = create_app({"TESTING": True, "MAZE_DEFAULT_SIZE": 9})
    data = app.test_client().get("/api/maze/map?seed=1").get_json()
    assert data["size"] == 9
