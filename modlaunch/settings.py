import json
import logging
from typing import Dict
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULTS = {
    "mod_directories": [],
    "default_launch_type": "",
    "custom_games": [],
}

def load_settings(settings_file: Path) -> Dict:
    settings = json.loads(json.dumps(DEFAULTS))
    try:
        if settings_file.exists():
            data = json.loads(settings_file.read_text("utf-8"))
            settings.update({k: data.get(k, settings[k]) for k in settings})
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", settings_file, e)
    return settings

def save_settings(settings_file: Path, settings: dict) -> None:
    data = {k: settings.get(k, DEFAULTS[k]) for k in DEFAULTS}
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
