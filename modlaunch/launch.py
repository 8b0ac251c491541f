# modlaunch/launch.py
from __future__ import annotations

import logging
import shlex
import subprocess
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from . import selection
from .arguments import assemble_mod_argument, build_argument_list, build_argument_string
from .errors import DirectoryUnreadableError
from .games import missing_capabilities
from .models import (
    DirectoryUnreadable,
    LaunchConfiguration,
    GameServer,
    LaunchOutcome,
    LaunchType,
    MissingCapability,
    MissingMods,
    NotInstalled,
    ProcessFailure,
    ProcessResult,
    SelectionOutcome,
    Success,
)
from .utils import is_windows

log = logging.getLogger(__name__)

Observer = Callable[[LaunchOutcome], None]


@dataclass(frozen=True)
class LaunchPlan:
    launch_type: LaunchType
    executable: str
    working_directory: str
    arguments: str
    selection: SelectionOutcome
    base_arguments: str = ""
    mod_argument: str = ""
    extra_arguments: Tuple[str, ...] = ()
    server: Optional[GameServer] = None

    def argument_list(self) -> List[str]:
        return build_argument_list(self.base_arguments, self.mod_argument, self.extra_arguments, self.server)

# ──────────────────────────────────────────────────────────────────────────────
# Process collaborator
# ──────────────────────────────────────────────────────────────────────────────

def command_line(executable: str, arguments: str,
                 argument_list: Optional[Sequence[str]] = None) -> Union[str, List[str]]:
    """
    Windows gets one command-line string (the -mod token is pre-quoted).
    Elsewhere an argv list: `argument_list` when given, else the string split.
    """
    if is_windows():
        return f"{subprocess.list2cmdline([executable])} {arguments}".rstrip()
    if argument_list is not None:
        return [executable] + list(argument_list)
    return [executable] + shlex.split(arguments)

def run_process(executable: str, cwd: str, arguments: str,
                argument_list: Optional[Sequence[str]] = None) -> ProcessResult:
    """Start the game and block until it exits. OSError if it cannot start."""
    argv = command_line(executable, arguments, argument_list)
    started = datetime.now()
    p = subprocess.Popen(argv, cwd=cwd, shell=False)
    code = p.wait()
    return ProcessResult(started_at=started, ended_at=datetime.now(), exit_code=code)

# ──────────────────────────────────────────────────────────────────────────────
# State machine
# ──────────────────────────────────────────────────────────────────────────────

def plan_launch(config: LaunchConfiguration) -> Union[LaunchPlan, LaunchOutcome]:
    """
    Every step up to (not including) starting the process.

    Returns a LaunchPlan, or the terminal LaunchOutcome when a step refuses
    the launch.
    """
    game = config.game

    missing = missing_capabilities(game)
    if missing:
        return MissingCapability(
            "Selected game has not been implemented properly: missing " + ", ".join(missing),
            missing=tuple(missing),
        )

    if not game.is_installed(config.launch_type):
        return NotInstalled("Game executable could not be located, please ensure that the game is installed")

    launch_type = game.resolve_launch_type(config.launch_type)
    executable = game.executable_path(launch_type)
    install_dir = game.install_directory(launch_type)
    if executable is None or install_dir is None:
        return NotInstalled(f"No executable for the {launch_type.value} launch type")

    base_arguments = game.base_arguments(launch_type) or ""
    base_mods = game.base_mods(launch_type) or ""
    if config.pre_filter is not None:
        base_mods = config.pre_filter(base_mods) or ""

    try:
        outcome = selection.select(config, launch_type)
    except DirectoryUnreadableError as e:
        return DirectoryUnreadable(str(e), directory=e.directory)

    if outcome.unmatched_rules:
        policy = config.missing_rules_policy
        if policy is None or not policy(list(outcome.unmatched_rules)):
            return MissingMods(
                "Could not find some of the mods that were specified",
                selected=outcome.selected,
                excluded=outcome.excluded,
                unmatched_rules=outcome.unmatched_rules,
            )
        log.info("%d unmatched rule(s) allowed by policy", len(outcome.unmatched_rules))

    mod_argument = assemble_mod_argument(
        base_mods,
        outcome.selected,
        launch_type,
        mod_list_filter=config.mod_list_filter,
        post_filter=config.post_filter,
    )
    arguments = build_argument_string(
        base_arguments,
        mod_argument,
        config.extra_arguments,
        config.server,
    )
    return LaunchPlan(
        launch_type=launch_type,
        executable=str(executable),
        working_directory=str(install_dir),
        arguments=arguments,
        selection=outcome,
        base_arguments=base_arguments,
        mod_argument=mod_argument,
        extra_arguments=tuple(config.extra_arguments),
        server=config.server,
    )


def launch(config: LaunchConfiguration) -> LaunchOutcome:
    """Run the whole launch on the calling thread; blocks until the game exits."""
    plan = plan_launch(config)
    if isinstance(plan, LaunchOutcome):
        log.warning("%s: launch refused (%s): %s", getattr(config.game, "name", "?"), plan.kind, plan.message)
        return plan

    log.info("Launching %s %s", plan.executable, plan.arguments)
    try:
        if config.runner is not None:
            result = config.runner(plan.executable, plan.working_directory, plan.arguments)
        else:
            result = run_process(plan.executable, plan.working_directory, plan.arguments,
                                 argument_list=None if is_windows() else plan.argument_list())
    except (OSError, ValueError) as e:
        log.error("Could not start %s: %s", plan.executable, e)
        return ProcessFailure(f"Could not start {Path(plan.executable).name}: {e}")

    log.info("%s exited with %s", plan.executable, result.exit_code)
    return Success(
        "Game was successfully launched",
        started_at=result.started_at,
        ended_at=result.ended_at,
        selected=plan.selection.selected,
        excluded=plan.selection.excluded,
        exit_code=result.exit_code,
    )


def launch_async(config: LaunchConfiguration, observer: Optional[Observer] = None) -> "Future[LaunchOutcome]":
    """
    Run launch() on a daemon worker thread and return immediately.

    The returned future resolves once with the outcome; `observer`, when
    given, is called once with the same outcome on the worker thread.
    """
    fut: "Future[LaunchOutcome]" = Future()
    fut.set_running_or_notify_cancel()

    def _worker():
        try:
            outcome = launch(config)
        except Exception as e:
            log.exception("launch crashed")
            fut.set_exception(e)
            return
        try:
            if observer is not None:
                observer(outcome)
        finally:
            fut.set_result(outcome)

    threading.Thread(target=_worker, name="modlaunch-launch", daemon=True).start()
    return fut
