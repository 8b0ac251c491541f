from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple, Union

from .errors import InvalidPattern
from .models import SelectionEngine, SelectionRule

Matcher = Callable[[Sequence[str]], List[str]]


def wildcard_to_regex(pattern: str) -> str:
    """Translate a `*` wildcard into a regex string.

    Literal segments are escaped and joined with `.*`. The result is meant
    for re.match: anchored at the start of the name, open at the end, so
    "ab*cd" accepts "abXYZcd" and "abcdxyz" but not "xxabcd".
    """
    return ".*".join(re.escape(part) for part in pattern.split("*"))


def _compile(expr: str, flags: int = 0) -> "re.Pattern[str]":
    try:
        return re.compile(expr, flags)
    except re.error as e:
        raise InvalidPattern(f"invalid pattern {expr!r}: {e}") from e


def build_matcher(rule: SelectionRule) -> Matcher:
    engine = rule.engine

    if engine is SelectionEngine.PREDICATE:
        pred = rule.predicate
        return lambda values: [v for v in values if pred(v)]

    if engine is SelectionEngine.EXACT:
        want = rule.pattern.casefold()
        return lambda values: [v for v in values if v.casefold() == want]

    if engine is SelectionEngine.WILDCARD:
        rx = _compile(wildcard_to_regex(rule.pattern), re.IGNORECASE)
        return lambda values: [v for v in values if rx.match(v)]

    if engine is SelectionEngine.REGEX:
        rx = _compile(rule.pattern)
        return lambda values: [v for v in values if rx.search(v)]

    raise InvalidPattern(f"unsupported selection engine: {engine!r}")


# ──────────────────────────────────────────────────────────────────────────────
# Rule constructors
# ──────────────────────────────────────────────────────────────────────────────

def predicate(fn: Callable[[str], bool], exclude: bool = False) -> SelectionRule:
    return SelectionRule(SelectionEngine.PREDICATE, predicate=fn, exclude=exclude)

def exact(name: str, exclude: bool = False) -> SelectionRule:
    return SelectionRule(SelectionEngine.EXACT, pattern=name, exclude=exclude)

def wildcard(pattern: str, exclude: bool = False) -> SelectionRule:
    return SelectionRule(SelectionEngine.WILDCARD, pattern=pattern, exclude=exclude)

def regex(pattern: str, exclude: bool = False) -> SelectionRule:
    return SelectionRule(SelectionEngine.REGEX, pattern=pattern, exclude=exclude)


def parse_rule(data: Union[dict, str]) -> Tuple[bool, Union[SelectionRule, str]]:
    """
    Build a rule from user input without raising.

    Accepts {"engine": "wildcard", "pattern": "@ace*", "exclude": false} or the
    short string form "wildcard:@ace*" ("!" prefix marks an exclusion).
    Returns (True, rule) or (False, message).
    """
    if isinstance(data, str):
        text = data.strip()
        exclude = text.startswith("!")
        if exclude:
            text = text[1:]
        engine_name, sep, pattern = text.partition(":")
        if not sep:
            engine_name, pattern = "exact", text
        data = {"engine": engine_name, "pattern": pattern, "exclude": exclude}

    if not isinstance(data, dict):
        return False, f"rule must be an object or string, got {type(data).__name__}"

    engine_name = str(data.get("engine") or "exact").strip().lower()
    try:
        engine = SelectionEngine(engine_name)
    except ValueError:
        return False, f"unknown selection engine: {engine_name!r}"
    if engine is SelectionEngine.PREDICATE:
        return False, "predicate rules cannot be built from text"

    try:
        rule = SelectionRule(engine, pattern=data.get("pattern"), exclude=bool(data.get("exclude", False)))
    except InvalidPattern as e:
        return False, str(e)
    return True, rule


def parse_rules(items) -> Tuple[bool, Union[List[SelectionRule], str]]:
    rules: List[SelectionRule] = []
    for i, item in enumerate(items or []):
        ok, res = parse_rule(item)
        if not ok:
            return False, f"rule {i}: {res}"
        rules.append(res)
    return True, rules
