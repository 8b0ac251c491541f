import os
from pathlib import Path
from flask import Flask
from .routes import bp as routes_bp

# Bind only localhost unless overridden
BIND = os.environ.get("BIND", "127.0.0.1")
PORT = int(os.environ.get("PORT", "5000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

def default_settings_file() -> str:
    env = os.environ.get("MODLAUNCH_SETTINGS")
    if env:
        return env
    return str(Path.home() / ".modlaunch.json")

def create_app(settings_file: str = None) -> Flask:
    app = Flask(__name__)
    app.config["APP_TITLE"] = "BIS Mod Launcher"
    app.config["SETTINGS_FILE"] = settings_file or default_settings_file()
    app.config["DEFAULT_LAUNCH_TYPE"] = os.environ.get("MODLAUNCH_LAUNCH_TYPE", "release")

    app.register_blueprint(routes_bp)
    return app
