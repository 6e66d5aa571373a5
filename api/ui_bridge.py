"""Public API between the UI layer and the simulation core."""
from __future__ import annotations

from typing import Dict

from citygrowth.game_state import get_game_state
from citygrowth.grid import InvalidRotationError, PlacementError
from citygrowth.template_catalog import UnknownTemplateError


def _success_response(**payload: object) -> Dict[str, object]:
    response: Dict[str, object] = {"ok": True}
    response.update(payload)
    return response


def _error_response(
    code: str, message: str, *, http_status: int | None = None
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "ok": False,
        "error_code": code,
        "error_message": message,
        "error": message,
    }
    if http_status is not None:
        payload["http_status"] = int(http_status)
    return payload


def _should_reset(flag: object) -> bool:
    if flag is None:
        return True
    if isinstance(flag, str):
        return flag.strip().lower() not in {"0", "false", "no"}
    return bool(flag)


def _placement_error(exc: ValueError) -> Dict[str, object]:
    if isinstance(exc, UnknownTemplateError):
        error = _error_response("invalid_template", str(exc), http_status=404)
    elif isinstance(exc, InvalidRotationError):
        error = _error_response("invalid_rotation", str(exc), http_status=400)
    else:
        error = _error_response("invalid_origin", str(exc), http_status=400)
    error.update(get_game_state().response_metadata())
    return error


# ---------------------------------------------------------------------------
# Initialisation and snapshots


def init_game(force_reset: object = None) -> Dict[str, object]:
    """Initialise or reset the global city state."""

    state = get_game_state()
    if _should_reset(force_reset):
        state.reset()
    return _success_response(**state.snapshot_state())


def get_state() -> Dict[str, object]:
    """Return a snapshot of the overall simulation state."""

    return _success_response(**get_game_state().snapshot_state())


def get_hud_snapshot() -> Dict[str, object]:
    return _success_response(**get_game_state().snapshot_hud())


def list_templates() -> Dict[str, object]:
    return _success_response(templates=get_game_state().snapshot_templates())


# ---------------------------------------------------------------------------
# Placement


def preview_placement(template_id: str, rotation: object, x: object, y: object) -> Dict[str, object]:
    """Report the footprint and validity of a placement without committing it."""

    state = get_game_state()
    try:
        preview = state.preview_placement(template_id, rotation, (x, y))
    except (UnknownTemplateError, PlacementError) as exc:
        return _placement_error(exc)
    return _success_response(preview=preview)


def place_building(template_id: str, rotation: object, x: object, y: object) -> Dict[str, object]:
    state = get_game_state()
    try:
        building = state.place(template_id, rotation, (x, y))
    except (UnknownTemplateError, PlacementError) as exc:
        return _placement_error(exc)

    if building is None:
        error = _error_response(
            "placement_blocked",
            "Target cells are occupied or outside the grid",
            http_status=409,
        )
        error.update(state.response_metadata())
        return error

    payload: Dict[str, object] = {
        "building": building.to_payload(),
        "state": state.snapshot_state(),
        "http_status": 200,
    }
    payload.update(state.response_metadata())
    return _success_response(**payload)


# ---------------------------------------------------------------------------
# Calendar


def advance_year() -> Dict[str, object]:
    """Simulate one year; a no-op once the final year has passed."""

    state = get_game_state()
    advanced = state.advance_year()
    return _success_response(advanced=advanced, **state.snapshot_state())


def run_to_max_year() -> Dict[str, object]:
    state = get_game_state()
    years = state.run_to_max_year()
    return _success_response(years_advanced=years, **state.snapshot_state())
