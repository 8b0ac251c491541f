import json

import pytest

import modlaunch.launch as L
from modlaunch import create_app
from modlaunch.settings import load_settings, save_settings

from conftest import make_install


@pytest.fixture
def app_env(tmp_path):
    install = make_install(tmp_path / "Portable", folders=("AddOns", "@CBA", "@ACE", "ModA"))
    settings_file = tmp_path / "settings.json"
    save_settings(settings_file, {
        "custom_games": [{
            "key": "portable",
            "name": "Portable Game",
            "install_dir": str(install),
            "executable": "game.exe",
            "reserved": ["AddOns"],
        }],
    })
    app = create_app(str(settings_file))
    app.config["TESTING"] = True
    return app, install, settings_file


def test_games_lists_builtin_and_custom(app_env):
    app, _, _ = app_env
    data = app.test_client().get("/games").get_json()
    keys = [g["key"] for g in data["games"]]
    assert keys[:5] == ["arma2", "arma2oa", "arma2co", "tkoh", "tkoh_rearmed"]
    portable = next(g for g in data["games"] if g["key"] == "portable")
    assert portable["installed"]["release"] is True
    assert portable["installed"]["steam"] is False


def test_preview(app_env):
    app, _, _ = app_env
    r = app.test_client().post("/games/portable/preview", json={
        "rules": ["wildcard:@*", "!exact:@ace", "exact:@missing", "exact:AddOns"],
    })
    assert r.status_code == 200
    data = r.get_json()
    assert data["selected"] == ["@CBA"]
    assert data["excluded"] == ["@ACE"]
    assert data["unmatched_rules"] == [{"engine": "exact", "pattern": "@missing", "exclude": False}]


def test_preview_unreadable_directory(app_env, tmp_path):
    app, _, _ = app_env
    r = app.test_client().post("/games/portable/preview", json={"mod_directories": [str(tmp_path / "gone")]})
    assert r.status_code == 409
    assert r.get_json()["directory"].endswith("gone")


def test_bad_rule_is_400(app_env):
    app, _, _ = app_env
    r = app.test_client().post("/games/portable/launch", json={"rules": [{"engine": "regex", "pattern": "("}]})
    assert r.status_code == 400
    assert "rule 0" in r.get_json()["error"]


def test_bad_launch_type_is_400(app_env):
    app, _, _ = app_env
    r = app.test_client().post("/games/portable/launch", json={"launch_type": "nightly"})
    assert r.status_code == 400


def test_unknown_game_is_404(app_env):
    app, _, _ = app_env
    assert app.test_client().post("/games/arma3/launch", json={}).status_code == 404


def test_launch_wait(app_env, monkeypatch):
    app, install, _ = app_env
    calls = []

    class FakePopen:
        def __init__(self, *a, **kw):
            calls.append((a, kw))
        def wait(self):
            return 0

    monkeypatch.setattr(L, "is_windows", lambda: False)
    monkeypatch.setattr(L.subprocess, "Popen", FakePopen)
    client = app.test_client()

    r = client.post("/games/portable/launch", json={"rules": ["exact:@missing"], "wait": True})
    assert r.status_code == 409
    assert r.get_json()["kind"] == "missing_mods"
    assert calls == []

    r = client.post("/games/portable/launch", json={
        "rules": ["exact:@cba", "exact:@missing"],
        "allow_missing": True,
        "extra_arguments": ["-nosplash"],
        "server": {"address": "10.1.1.1", "port": 2302},
        "wait": True,
    })
    assert r.status_code == 200
    data = r.get_json()
    assert data["kind"] == "success" and data["selected"] == ["@CBA"]
    (argv,), kw = calls[0]
    assert argv == [str(install / "game.exe"), "-mod=@CBA", "-nosplash", "-connect=10.1.1.1", "-port=2302"]


def test_launch_async_returns_202(app_env, monkeypatch):
    app, _, _ = app_env
    started = []
    import modlaunch.routes as R
    monkeypatch.setattr(R, "launch_async", lambda cfg, observer=None: started.append(cfg))
    r = app.test_client().post("/games/portable/launch", json={"rules": ["exact:ModA"]})
    assert r.status_code == 202
    assert len(started) == 1 and started[0].rules[0].pattern == "ModA"


def test_settings_roundtrip(app_env):
    app, _, settings_file = app_env
    client = app.test_client()
    r = client.post("/settings", json={"default_launch_type": "beta", "mod_directories": ["/mods"], "junk": 1})
    assert r.status_code == 200
    saved = json.loads(settings_file.read_text("utf-8"))
    assert saved["default_launch_type"] == "beta"
    assert saved["mod_directories"] == ["/mods"]
    assert "junk" not in saved
    assert client.get("/settings").get_json()["custom_games"][0]["key"] == "portable"

    assert client.post("/settings", json={"default_launch_type": "nightly"}).status_code == 400


def test_corrupt_settings_fall_back(tmp_path):
    f = tmp_path / "s.json"
    f.write_text("{not json", encoding="utf-8")
    assert load_settings(f) == {"mod_directories": [], "default_launch_type": "", "custom_games": []}


@pytest.mark.parametrize("url", ["/games/portable/launch", "/games/portable/preview", "/settings"])
def test_non_object_body_is_400(app_env, url):
    app, _, _ = app_env
    client = app.test_client()
    assert client.post(url, json=["exact:ModA"]).status_code == 400
    assert client.post(url, json="exact:ModA").status_code == 400
