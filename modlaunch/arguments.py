from __future__ import annotations

import shlex
from typing import Callable, Iterable, List, Optional, Sequence

from .models import GameServer, LaunchType

MOD_FLAG = "-mod="
SEPARATOR = ";"


def join_mods(base_mods: str, mods: Iterable[str]) -> str:
    value = base_mods or ""
    if value and not value.endswith(SEPARATOR):
        value += SEPARATOR
    for mod in mods:
        value += mod + SEPARATOR
    # drop the trailing separator
    return value[:-1] if value else value


def quote_if_needed(flag: str, launch_type: LaunchType) -> str:
    # Steam hands the value through another command line, so always quote there
    if launch_type is LaunchType.STEAM or " " in flag:
        return f'"{flag}"'
    return flag


def assemble_mod_argument(
    base_mods: str,
    selected: Sequence[str],
    launch_type: LaunchType,
    *,
    mod_list_filter: Optional[Callable[[List[str]], Sequence[str]]] = None,
    post_filter: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Build the single `-mod=` token.

    `mod_list_filter` replaces the selection outright before it is joined
    onto the base mods; `post_filter` sees the finished (quoted) token. An
    empty mod list gives "" and skips `post_filter`.
    """
    mods = list(selected)
    if mod_list_filter is not None:
        mods = list(mod_list_filter(mods) or [])

    value = join_mods(base_mods, mods)
    if not value:
        return ""

    flag = quote_if_needed(MOD_FLAG + value, launch_type)
    if post_filter is not None:
        flag = post_filter(flag) or ""
    return flag


def server_arguments(server: Optional[GameServer]) -> List[str]:
    if server is None or server.is_singleplayer:
        return []
    args = [f"-connect={server.address}"]
    if server.port:
        args.append(f"-port={int(server.port)}")
    if server.password:
        args.append(f"-password={server.password}")
    return args


def strip_outer_quotes(s: str) -> str:
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        return s[1:-1]
    return s


def build_argument_list(
    base_arguments: str,
    mod_argument: str,
    extra_arguments: Sequence[str] = (),
    server: Optional[GameServer] = None,
) -> List[str]:
    """
    The argument string as an argv tail, for hosts that exec without a shell.

    Only the base arguments are re-split; the mod flag (outer quotes removed),
    each extra argument and each server argument stay whole, so folder names
    with quotes or spaces reach the game untouched. ValueError if the base
    arguments have unbalanced quotes.
    """
    args = shlex.split(base_arguments or "")
    if mod_argument:
        args.append(strip_outer_quotes(mod_argument))
    args.extend(a.strip() for a in extra_arguments if a and a.strip())
    args.extend(server_arguments(server))
    return args


def build_argument_string(
    base_arguments: str,
    mod_argument: str,
    extra_arguments: Sequence[str] = (),
    server: Optional[GameServer] = None,
) -> str:
    parts = [(base_arguments or "").strip(), mod_argument]
    parts.extend(a.strip() for a in extra_arguments)
    parts.extend(server_arguments(server))
    return " ".join(p for p in parts if p)
