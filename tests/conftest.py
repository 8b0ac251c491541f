from __future__ import annotations
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure project root import
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modlaunch.games import CustomGame
from modlaunch.models import ProcessResult


def _touch(p: Path, data: bytes = b""):
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data or b"stub")


def make_install(root: Path, folders=("AddOns", "ModA", "ModB"), exe="game.exe") -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name in folders:
        (root / name).mkdir(parents=True, exist_ok=True)
    if exe:
        _touch(root / exe)
    return root


def make_game(install: Path, **kw) -> CustomGame:
    kw.setdefault("reserved", ["AddOns"])
    return CustomGame(key="test", name="Test Game", install_dir=install, executable="game.exe", **kw)


class FakeRunner:
    """Stand-in for run_process; records calls instead of spawning."""

    def __init__(self, exit_code=0, error=None):
        self.calls = []
        self.exit_code = exit_code
        self.error = error

    def __call__(self, executable, cwd, arguments):
        self.calls.append((executable, cwd, arguments))
        if self.error is not None:
            raise self.error
        now = datetime.now()
        return ProcessResult(started_at=now, ended_at=now, exit_code=self.exit_code)


@pytest.fixture
def install(tmp_path):
    return make_install(tmp_path / "Game")


@pytest.fixture
def game(install):
    return make_game(install)


@pytest.fixture
def runner():
    return FakeRunner()
