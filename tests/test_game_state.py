import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from citygrowth import config
from citygrowth.game_state import GameState

LAYOUT = [
    ("hub-cross", 0, (5, 5)),
    ("residential-line", 180, (4, 4)),
    ("industry-l", 0, (2, 5)),
    ("power-core", 0, (6, 6)),
    ("research-z", 270, (0, 0)),
]


def _build(state):
    for template_id, rotation, origin in LAYOUT:
        assert state.place_building(template_id, rotation, origin)
    return state


def _frozen(state):
    return (
        state.year,
        state.cumulative_supply,
        [(b.level, b.stored_supply) for b in state.buildings],
    )


def test_initial_state():
    state = GameState()
    assert state.year == 1
    assert state.buildings == []
    assert state.clusters == []
    assert state.cumulative_supply == 0.0
    assert state.list_logs() == []


def test_advance_year_appends_summary_newest_first():
    state = _build(GameState())
    assert state.advance_year()
    assert state.advance_year()

    assert state.year == 3
    assert [entry.year for entry in state.logs] == [2, 1]
    latest = state.logs[0]
    assert latest.cluster_count == len(state.clusters)
    assert latest.top_level == max(b.level for b in state.buildings)
    assert state.list_logs()[0].startswith("Year 2: clusters=")


def test_year_summary_records_that_years_supply():
    state = GameState()
    state.place_building("hub-cross", 0, (5, 5))
    state.advance_year()
    assert state.logs[0].total_supply == pytest.approx(5.0)
    assert str(state.logs[0]) == "Year 1: clusters=1, supply=5.00, topLv=1"


def test_advancing_past_max_year_is_a_no_op():
    state = _build(GameState(max_year=3))
    for _ in range(3):
        assert state.advance_year()
    assert state.year == 4
    frozen = _frozen(state)
    logs = state.list_logs()

    assert state.advance_year() is False
    assert _frozen(state) == frozen
    assert state.list_logs() == logs


def test_run_to_max_year_advances_all_remaining_years():
    state = _build(GameState(max_year=10))
    state.advance_year()
    assert state.run_to_max_year() == 9
    assert state.finished
    assert state.run_to_max_year() == 0
    assert state.snapshot_hud()["year"] == 10


def test_log_history_is_bounded():
    state = GameState(max_year=config.YEAR_LOG_LIMIT + 20)
    state.place_building("hub-cross", 0, (5, 5))
    state.run_to_max_year()
    assert len(state.logs) == config.YEAR_LOG_LIMIT
    assert state.logs[0].year == config.YEAR_LOG_LIMIT + 20
    assert state.logs[-1].year == 21


def test_simulation_is_deterministic_for_a_seed():
    first = _build(GameState(seed=99))
    second = _build(GameState(seed=99))
    first.run_to_max_year()
    second.run_to_max_year()
    assert _frozen(first) == _frozen(second)
    assert first.score() == second.score()


def test_reset_restores_a_fresh_city():
    state = _build(GameState())
    state.advance_year()
    catalogue = state.catalogue

    state.reset()

    assert state.year == 1
    assert state.buildings == []
    assert state.clusters == []
    assert state.cumulative_supply == 0.0
    assert state.catalogue is catalogue
    assert state.place_building("hub-cross", 0, (5, 5))
    assert state.buildings[0].id == "b-1"


def test_cumulative_supply_matches_cluster_totals():
    state = _build(GameState())
    total = 0.0
    for _ in range(5):
        state.advance_year()
        total += sum(cluster.total_supply for cluster in state.clusters)
    assert state.cumulative_supply == pytest.approx(total)


def test_snapshot_contains_render_data():
    state = _build(GameState())
    state.advance_year()
    snapshot = state.snapshot_state()

    assert snapshot["grid_size"] == config.GRID_SIZE
    assert snapshot["grid"][5][5] == "b-1"
    assert len(snapshot["buildings"]) == len(LAYOUT)
    hub = snapshot["buildings"][0]
    assert hub["position"] == {"x": 5, "y": 5}
    assert hub["growth_cap"] == state.growth_cap_for(state.buildings[0])
    assert snapshot["hud"]["building_count"] == len(LAYOUT)
    assert snapshot["hud"]["cluster_count"] == len(snapshot["clusters"])
    assert snapshot["logs"][0]["year"] == 1
    assert snapshot["version"] == len(LAYOUT) + 1


def test_placement_after_years_rebuilds_clusters():
    state = GameState()
    state.place_building("industry-l", 0, (0, 0))
    state.place_building("industry-l", 0, (5, 0))
    state.advance_year()
    assert len(state.clusters) == 2

    state.place_building("hub-cross", 0, (3, 1))
    assert len(state.clusters) == 1
    assert len({b.cluster_id for b in state.buildings}) == 1
