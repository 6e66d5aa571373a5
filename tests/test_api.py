"""Bridge and HTTP round-trips for the city growth host."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from api import ui_bridge
from app import app
from citygrowth.game_state import get_game_state


@pytest.fixture(autouse=True)
def reset_state():
    ui_bridge.init_game(force_reset=True)
    yield


@pytest.fixture()
def client():
    app.config.update(TESTING=True)
    with app.test_client() as test_client:
        yield test_client


def test_init_returns_empty_city():
    response = ui_bridge.init_game(force_reset=True)
    assert response["ok"] is True
    assert response["buildings"] == []
    assert response["hud"]["year"] == 1
    assert response["hud"]["score"] == 0.0


def test_init_without_reset_keeps_buildings():
    ui_bridge.place_building("hub-cross", 0, 5, 5)
    response = ui_bridge.init_game(force_reset="0")
    assert len(response["buildings"]) == 1


def test_place_building_success_payload():
    response = ui_bridge.place_building("hub-cross", 0, 5, 5)
    assert response["ok"] is True
    assert response["building"]["id"] == "b-1"
    assert response["building"]["cells"] == [[5, 5]]
    assert response["state"]["hud"]["building_count"] == 1


def test_place_building_blocked():
    ui_bridge.place_building("hub-cross", 0, 5, 5)
    response = ui_bridge.place_building("hub-cross", 0, 5, 5)
    assert response["ok"] is False
    assert response["error_code"] == "placement_blocked"
    assert response["http_status"] == 409
    assert len(get_game_state().buildings) == 1


@pytest.mark.parametrize(
    "args, code, status",
    [
        (("castle", 0, 1, 1), "invalid_template", 404),
        (("hub-cross", 45, 1, 1), "invalid_rotation", 400),
        (("hub-cross", 0, "a", 1), "invalid_origin", 400),
        (("hub-cross", 0, float("inf"), 1), "invalid_origin", 400),
        (("hub-cross", 10**400, 1, 1), "invalid_rotation", 400),
        (("hub-cross", float("inf"), 1, 1), "invalid_rotation", 400),
    ],
)
def test_place_building_contract_errors(args, code, status):
    response = ui_bridge.place_building(*args)
    assert response["ok"] is False
    assert response["error_code"] == code
    assert response["http_status"] == status
    assert get_game_state().buildings == []


def test_preview_does_not_place():
    response = ui_bridge.preview_placement("power-core", 90, 9, 8)
    assert response["ok"] is True
    assert response["preview"]["valid"] is False
    assert response["preview"]["cells"] == [[9, 8], [9, 9], [9, 10]]
    assert get_game_state().buildings == []


def test_advance_and_run_to_max_year():
    ui_bridge.place_building("hub-cross", 0, 5, 5)
    response = ui_bridge.advance_year()
    assert response["advanced"] is True
    assert response["logs"][0]["text"] == "Year 1: clusters=1, supply=5.00, topLv=1"

    response = ui_bridge.run_to_max_year()
    state = get_game_state()
    assert response["years_advanced"] == state.max_year - 1
    assert response["hud"]["finished"] is True

    response = ui_bridge.advance_year()
    assert response["advanced"] is False


def test_http_placement_flow(client):
    init = client.post("/api/init?reset=1")
    assert init.status_code == 200
    assert init.headers["Cache-Control"].startswith("no-store")
    assert "request_id" in init.get_json()

    templates = client.get("/api/templates").get_json()["templates"]
    assert {t["id"] for t in templates} >= {"hub-cross", "residential-line"}

    preview = client.post(
        "/api/preview", json={"template_id": "hub-cross", "rotation": 0, "x": 5, "y": 5}
    )
    assert preview.status_code == 200
    assert preview.get_json()["preview"]["valid"] is True

    placed = client.post(
        "/api/buildings", json={"template_id": "hub-cross", "rotation": 0, "x": 5, "y": 5}
    )
    assert placed.status_code == 200

    neighbour = client.post(
        "/api/buildings",
        json={"template_id": "residential-line", "rotation": 180, "position": {"x": 4, "y": 4}},
    )
    assert neighbour.status_code == 200
    clusters = neighbour.get_json()["state"]["clusters"]
    assert len(clusters) == 1
    assert clusters[0]["links"][0]["type"] == "port"

    blocked = client.post(
        "/api/buildings", json={"template_id": "hub-cross", "rotation": 0, "x": 5, "y": 5}
    )
    assert blocked.status_code == 409

    unknown = client.post("/api/buildings", json={"template_id": "castle", "x": 1, "y": 1})
    assert unknown.status_code == 404


def test_http_year_endpoints(client):
    client.post("/api/init?reset=1")
    client.post("/api/buildings", json={"template_id": "hub-cross", "x": 5, "y": 5})

    next_year = client.post("/api/year/next")
    assert next_year.status_code == 200
    assert next_year.get_json()["hud"]["year"] == 2

    hud = client.get("/api/hud").get_json()
    assert hud["cumulative_supply"] == pytest.approx(5.0)

    run = client.post("/api/year/run")
    assert run.status_code == 200
    assert run.get_json()["hud"]["finished"] is True

    state = client.get("/api/state").get_json()
    assert len(state["logs"]) == get_game_state().max_year


def test_http_init_with_reset_false_keeps_city(client):
    client.post("/api/buildings", json={"template_id": "hub-cross", "x": 5, "y": 5})

    kept = client.post("/api/init", json={"reset": False})
    assert kept.status_code == 200
    assert len(kept.get_json()["buildings"]) == 1

    wiped = client.post("/api/init", json={"force_reset": True})
    assert wiped.get_json()["buildings"] == []


def test_http_non_finite_origin_is_rejected(client):
    response = client.post(
        "/api/buildings",
        data='{"template_id": "hub-cross", "rotation": 0, "x": 1e999, "y": 1}',
        content_type="application/json",
    )
    assert response.status_code == 400
    assert response.get_json()["error_code"] == "invalid_origin"
    assert get_game_state().buildings == []
