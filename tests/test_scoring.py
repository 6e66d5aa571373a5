import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from citygrowth.game_state import GameState
from citygrowth.scoring import building_complexity, compute_score


def test_empty_city_scores_zero():
    assert GameState().score() == 0.0


def test_lone_hub_score():
    state = GameState()
    state.place_building("hub-cross", 0, (5, 5))
    # level 1 + (1 cell + 4 ports * 1.5 + 4 directions * 2)
    assert state.score() == pytest.approx(16.0)


def test_exponential_template_adds_level_bonus():
    state = GameState()
    state.place_building("power-core", 0, (0, 0))
    building = state.buildings[0]
    template = state.catalogue["power-core"]
    assert building_complexity(building, template) == pytest.approx(3 + 6 + 8 + 2)

    building.level = 3
    assert building_complexity(building, template) == pytest.approx(3 + 6 + 8 + 6)


def test_cumulative_supply_contributes_a_tenth():
    state = GameState()
    state.place_building("hub-cross", 0, (5, 5))
    score = compute_score(state.buildings, state.catalogue, cumulative_supply=100.0)
    assert score == pytest.approx(26.0)


def test_score_does_not_mutate_state():
    state = GameState()
    state.place_building("research-z", 0, (1, 1))
    state.advance_year()
    before = state.snapshot_state()
    state.score()
    assert state.snapshot_state() == before
