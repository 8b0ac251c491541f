from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import DirectoryUnreadableError
from .models import LaunchConfiguration, LaunchType, SelectionOutcome, SelectionRule

log = logging.getLogger(__name__)


def list_mod_folders(directory: Union[Path, str]) -> List[str]:
    """Immediate child directory names of `directory`, sorted case-insensitively."""
    d = Path(directory)
    try:
        entries = list(d.iterdir())
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        raise DirectoryUnreadableError(str(d), e.strerror or type(e).__name__) from e
    except OSError as e:
        raise DirectoryUnreadableError(str(d), str(e)) from e
    return sorted((e.name for e in entries if e.is_dir()), key=lambda n: n.lower())


def search_directories(config: LaunchConfiguration, launch_type: Optional[LaunchType] = None) -> List[str]:
    lt = launch_type or config.game.resolve_launch_type(config.launch_type)
    dirs: List[str] = []
    install_dir = config.game.install_directory(lt)
    if install_dir:
        dirs.append(str(install_dir))
    dirs.extend(str(p) for p in config.extra_search_directories)
    return dirs


def select(config: LaunchConfiguration, launch_type: Optional[LaunchType] = None) -> SelectionOutcome:
    """
    Run the configured rules over every search directory.

    Every directory is listed before any rule runs, so an unreadable one
    aborts the selection (DirectoryUnreadableError) instead of yielding a
    partial result.
    """
    game = config.game
    candidates: List[str] = []
    for directory in search_directories(config, launch_type):
        names = list_mod_folders(directory)
        log.debug("%s: %d candidate folders", directory, len(names))
        candidates.extend(names)

    selected: Dict[str, None] = {}
    excluded: Dict[str, None] = {}
    unmatched: List[SelectionRule] = []

    for rule in config.rules:
        matched = rule.match(candidates)
        if config.rule_override is not None:
            override = config.rule_override(rule, list(matched))
            matched = list(override) if override is not None else []

        if not matched:
            log.debug("rule %s matched nothing", rule.describe())
            unmatched.append(rule)
            continue

        target = excluded if rule.exclude else selected
        for name in matched:
            if game.is_reserved_folder(name):
                continue
            target.setdefault(name, None)

    # exclusion wins regardless of rule order
    for name in excluded:
        selected.pop(name, None)

    return SelectionOutcome(
        selected=tuple(selected),
        excluded=tuple(excluded),
        unmatched_rules=tuple(unmatched),
    )
