from __future__ import annotations
from pathlib import Path
from typing import Dict, Tuple, Union

from flask import Blueprint, current_app, request, abort, jsonify

from .errors import DirectoryUnreadableError
from .games import available_games, get_game, missing_capabilities
from .launch import launch, launch_async
from .matching import parse_rules
from .models import GameServer, LaunchConfiguration, LaunchType
from .selection import select
from .settings import load_settings, save_settings

bp = Blueprint("modlaunch", __name__)

def _settings_file() -> Path:
    return Path(current_app.config["SETTINGS_FILE"])

def _game_or_404(key: str, settings: Dict):
    try:
        return get_game(key, custom=settings["custom_games"])
    except KeyError:
        abort(404)

def _json_body() -> Tuple[bool, Union[Dict, str]]:
    body = request.get_json(silent=True)
    if body is None:
        return True, {}
    if not isinstance(body, dict):
        return False, "request body must be a JSON object"
    return True, body

def _build_config(game, settings: Dict, body: Dict) -> Tuple[bool, Union[LaunchConfiguration, str]]:
    lt_raw = body.get("launch_type") or settings["default_launch_type"] or current_app.config["DEFAULT_LAUNCH_TYPE"]
    try:
        launch_type = LaunchType.parse(lt_raw)
    except ValueError as e:
        return False, str(e)

    ok, rules = parse_rules(body.get("rules", []))
    if not ok:
        return False, rules

    srv = body.get("server") or {}
    try:
        server = GameServer(
            address=str(srv.get("address", ".")),
            port=int(srv.get("port", 0) or 0),
            password=str(srv.get("password", "")),
        )
    except (TypeError, ValueError):
        return False, "server port must be a number"

    dirs = list(settings["mod_directories"]) + list(body.get("mod_directories", []))
    cfg = LaunchConfiguration(
        game=game,
        launch_type=launch_type,
        rules=rules,
        extra_search_directories=dirs,
        extra_arguments=[str(a) for a in body.get("extra_arguments", [])],
        server=server,
    )
    if body.get("allow_missing"):
        cfg.missing_rules_policy = lambda unmatched: True
    return True, cfg

@bp.get("/games")
def games():
    settings = load_settings(_settings_file())
    keys = available_games() + [g["key"] for g in settings["custom_games"] if g.get("key")]
    keys = list(dict.fromkeys(keys))
    out = []
    for key in keys:
        game = get_game(key, custom=settings["custom_games"])
        out.append({
            "key": key,
            "name": game.name,
            "installed": {lt.value: bool(game.is_installed(lt)) for lt in LaunchType},
        })
    return jsonify(app_title=current_app.config["APP_TITLE"], games=out)

@bp.post("/games/<key>/preview")
def preview(key):
    settings = load_settings(_settings_file())
    game = _game_or_404(key, settings)
    ok, body = _json_body()
    if not ok:
        return jsonify(error=body), 400
    ok, cfg = _build_config(game, settings, body)
    if not ok:
        return jsonify(error=cfg), 400
    missing = missing_capabilities(game)
    if missing:
        return jsonify(error="incomplete game definition", missing=missing), 409
    try:
        outcome = select(cfg)
    except DirectoryUnreadableError as e:
        return jsonify(error=str(e), directory=e.directory), 409
    return jsonify(outcome.to_dict())

@bp.post("/games/<key>/launch")
def launch_game(key):
    settings = load_settings(_settings_file())
    game = _game_or_404(key, settings)
    ok, body = _json_body()
    if not ok:
        return jsonify(error=body), 400
    ok, cfg = _build_config(game, settings, body)
    if not ok:
        return jsonify(error=cfg), 400

    if body.get("wait"):
        outcome = launch(cfg)
        return jsonify(outcome.to_dict()), (200 if outcome.ok else 409)

    launch_async(cfg)
    return jsonify(status="started", game=key), 202

@bp.get("/settings")
def settings_get():
    return jsonify(load_settings(_settings_file()))

@bp.post("/settings")
def settings_post():
    settings = load_settings(_settings_file())
    ok, body = _json_body()
    if not ok:
        return jsonify(error=body), 400
    for k in settings:
        if k in body:
            settings[k] = body[k]
    if settings["default_launch_type"]:
        try:
            LaunchType.parse(settings["default_launch_type"])
        except ValueError as e:
            return jsonify(error=str(e)), 400
    save_settings(_settings_file(), settings)
    return jsonify(settings)
