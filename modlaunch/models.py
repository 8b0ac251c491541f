from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import InvalidPattern


class LaunchType(enum.Enum):
    STEAM = "steam"
    RELEASE = "release"
    BETA = "beta"
    LATEST = "latest"

    @classmethod
    def parse(cls, value: str) -> "LaunchType":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown launch type: {value!r}") from None


class SelectionEngine(enum.Enum):
    PREDICATE = "predicate"
    EXACT = "exact"
    WILDCARD = "wildcard"
    REGEX = "regex"


@dataclass(frozen=True)
class SelectionRule:
    engine: SelectionEngine
    pattern: Optional[str] = None
    predicate: Optional[Callable[[str], bool]] = None
    exclude: bool = False

    def __post_init__(self):
        if not isinstance(self.engine, SelectionEngine):
            raise InvalidPattern(f"not a selection engine: {self.engine!r}")
        if self.engine is SelectionEngine.PREDICATE:
            if self.predicate is None or not callable(self.predicate):
                raise InvalidPattern("predicate rules need a callable predicate")
            if self.pattern is not None:
                raise InvalidPattern("predicate rules take no pattern")
        else:
            if self.predicate is not None:
                raise InvalidPattern(f"{self.engine.value} rules take no predicate")
            if not isinstance(self.pattern, str):
                raise InvalidPattern(f"{self.engine.value} rules need a pattern string")
            if not self.pattern:
                raise InvalidPattern(f"{self.engine.value} rules need a non-empty pattern")
        # compiled matcher; built here so a bad pattern never reaches a launch
        from .matching import build_matcher
        object.__setattr__(self, "_matcher", build_matcher(self))

    def match(self, candidates: Sequence[str]) -> List[str]:
        return self._matcher(candidates)

    def describe(self) -> str:
        kind = "exclude" if self.exclude else "include"
        if self.engine is SelectionEngine.PREDICATE:
            name = getattr(self.predicate, "__name__", "predicate")
            return f"{kind} {self.engine.value}:{name}"
        return f"{kind} {self.engine.value}:{self.pattern}"

    def to_dict(self) -> Dict:
        return {
            "engine": self.engine.value,
            "pattern": self.pattern,
            "exclude": self.exclude,
        }


@dataclass(frozen=True)
class GameServer:
    address: str = "."
    port: int = 0
    password: str = ""

    @classmethod
    def singleplayer(cls) -> "GameServer":
        return cls()

    @property
    def is_singleplayer(self) -> bool:
        return self.address in ("", ".")


@dataclass(frozen=True)
class ProcessResult:
    started_at: datetime
    ended_at: datetime
    exit_code: Optional[int] = None


@dataclass
class LaunchConfiguration:
    game: object
    launch_type: LaunchType = LaunchType.RELEASE
    rules: List[SelectionRule] = field(default_factory=list)
    extra_search_directories: List[str] = field(default_factory=list)
    extra_arguments: List[str] = field(default_factory=list)
    server: GameServer = field(default_factory=GameServer.singleplayer)

    # policy hooks
    pre_filter: Optional[Callable[[str], str]] = None
    post_filter: Optional[Callable[[str], str]] = None
    mod_list_filter: Optional[Callable[[List[str]], Sequence[str]]] = None
    missing_rules_policy: Optional[Callable[[List[SelectionRule]], bool]] = None
    rule_override: Optional[Callable[[SelectionRule, List[str]], Optional[Sequence[str]]]] = None

    # process collaborator; None means modlaunch.launch.run_process
    runner: Optional[Callable[[str, str, str], ProcessResult]] = None


@dataclass(frozen=True)
class SelectionOutcome:
    selected: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    unmatched_rules: Tuple[SelectionRule, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "selected": list(self.selected),
            "excluded": list(self.excluded),
            "unmatched_rules": [r.to_dict() for r in self.unmatched_rules],
        }


# ──────────────────────────────────────────────────────────────────────────────
# Launch outcomes
# ──────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LaunchOutcome:
    message: str

    kind = "outcome"
    ok = False

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "ok": self.ok, "message": self.message}


@dataclass(frozen=True)
class Success(LaunchOutcome):
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    selected: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    exit_code: Optional[int] = None

    kind = "success"
    ok = True

    def to_dict(self) -> Dict:
        d = super().to_dict()
        d.update(
            started_at=self.started_at.isoformat() if self.started_at else None,
            ended_at=self.ended_at.isoformat() if self.ended_at else None,
            selected=list(self.selected),
            excluded=list(self.excluded),
            exit_code=self.exit_code,
        )
        return d


@dataclass(frozen=True)
class MissingCapability(LaunchOutcome):
    missing: Tuple[str, ...] = ()

    kind = "missing_capability"

    def to_dict(self) -> Dict:
        d = super().to_dict()
        d["missing"] = list(self.missing)
        return d


@dataclass(frozen=True)
class NotInstalled(LaunchOutcome):
    kind = "not_installed"


@dataclass(frozen=True)
class MissingMods(LaunchOutcome):
    selected: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    unmatched_rules: Tuple[SelectionRule, ...] = ()

    kind = "missing_mods"

    def to_dict(self) -> Dict:
        d = super().to_dict()
        d.update(
            selected=list(self.selected),
            excluded=list(self.excluded),
            unmatched_rules=[r.to_dict() for r in self.unmatched_rules],
        )
        return d


@dataclass(frozen=True)
class DirectoryUnreadable(LaunchOutcome):
    directory: str = ""

    kind = "directory_unreadable"

    def to_dict(self) -> Dict:
        d = super().to_dict()
        d["directory"] = self.directory
        return d


@dataclass(frozen=True)
class ProcessFailure(LaunchOutcome):
    kind = "process_failure"
