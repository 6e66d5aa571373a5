import logging
import time
import uuid
from datetime import datetime, timezone

from flask import Flask, jsonify, request

from api import ui_bridge

app = Flask(__name__)

logger = logging.getLogger(__name__)


def _generate_request_metadata() -> tuple[str, str]:
    request_id = str(uuid.uuid4())
    server_time = datetime.now(timezone.utc).isoformat()
    return request_id, server_time


def _enrich_payload(payload: dict, request_id: str, server_time: str) -> dict:
    body = dict(payload or {})
    body["request_id"] = request_id
    body["server_time"] = server_time
    nested_state = body.get("state")
    if isinstance(nested_state, dict):
        nested_copy = dict(nested_state)
        nested_copy.setdefault("request_id", request_id)
        nested_copy.setdefault("server_time", server_time)
        body["state"] = nested_copy
    return body


def _json_response(payload: dict, status: int = 200, *, request_id: str, server_time: str):
    body = _enrich_payload(payload, request_id, server_time)
    response = jsonify(body)
    response.status_code = status
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return response


def _status_for(payload: dict) -> int:
    if payload.get("ok", False):
        return 200
    return int(payload.get("http_status", 400))


def _placement_args() -> tuple:
    payload = request.get_json(silent=True) or {}
    template_id = payload.get("template_id") or payload.get("template")
    rotation = payload.get("rotation", 0)
    position = payload.get("position")
    if isinstance(position, dict):
        x, y = position.get("x"), position.get("y")
    else:
        x, y = payload.get("x"), payload.get("y")
    return template_id, rotation, x, y


@app.post("/api/init")
def api_init():
    """Initialise the city, optionally forcing a reset."""

    reset_flag = request.args.get("reset")
    if reset_flag is None:
        payload = request.get_json(silent=True) or {}
        reset_flag = payload["reset"] if "reset" in payload else payload.get("force_reset")

    response = ui_bridge.init_game(reset_flag)
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


@app.get("/api/state")
def api_state():
    """Return the current snapshot of the city."""

    response = ui_bridge.get_state()
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


@app.get("/api/hud")
def api_hud():
    response = ui_bridge.get_hud_snapshot()
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


@app.get("/api/templates")
def api_templates():
    response = ui_bridge.list_templates()
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


@app.post("/api/preview")
def api_preview():
    """Check whether a template fits at the given cell without placing it."""

    template_id, rotation, x, y = _placement_args()
    response = ui_bridge.preview_placement(template_id, rotation, x, y)
    request_id, server_time = _generate_request_metadata()
    return _json_response(
        response,
        _status_for(response),
        request_id=request_id,
        server_time=server_time,
    )


@app.post("/api/buildings")
def api_place_building():
    """Place a template at the given cell and rotation."""

    template_id, rotation, x, y = _placement_args()
    request_id, server_time = _generate_request_metadata()
    logger.info(
        "Placement handler enter request_id=%s template=%s rotation=%s x=%s y=%s",
        request_id,
        template_id,
        rotation,
        x,
        y,
    )
    start = time.perf_counter()
    response = ui_bridge.place_building(template_id, rotation, x, y)
    status = _status_for(response)
    duration_ms = (time.perf_counter() - start) * 1000.0
    logger.info(
        "Placement handler exit request_id=%s status=%s error_code=%s duration_ms=%.2f",
        request_id,
        status,
        response.get("error_code"),
        duration_ms,
    )
    return _json_response(
        response,
        status,
        request_id=request_id,
        server_time=server_time,
    )


@app.post("/api/year/next")
def api_next_year():
    """Advance the simulation by one year."""

    response = ui_bridge.advance_year()
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


@app.post("/api/year/run")
def api_run_all():
    """Advance through every remaining year."""

    response = ui_bridge.run_to_max_year()
    request_id, server_time = _generate_request_metadata()
    return _json_response(response, request_id=request_id, server_time=server_time)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
