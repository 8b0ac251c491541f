from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from . import utils
from .models import LaunchType

CAPABILITIES: Tuple[str, ...] = (
    "is_installed",
    "install_directory",
    "executable_path",
    "resolve_launch_type",
    "base_arguments",
    "base_mods",
    "is_reserved_folder",
)


class GameDescriptor:
    """
    Capability set for one title.

    Subclasses provide the seven methods named in CAPABILITIES. The base
    class leaves them as None so a partially written descriptor is detected
    by missing_capabilities() instead of failing halfway through a launch.
    """

    key = ""
    name = ""

    is_installed: Optional[Callable[[LaunchType], bool]] = None
    install_directory: Optional[Callable[[LaunchType], Optional[Path]]] = None
    executable_path: Optional[Callable[[LaunchType], Optional[Path]]] = None
    resolve_launch_type: Optional[Callable[[LaunchType], LaunchType]] = None
    base_arguments: Optional[Callable[[LaunchType], str]] = None
    base_mods: Optional[Callable[[LaunchType], str]] = None
    is_reserved_folder: Optional[Callable[[str], bool]] = None

    def missing_capabilities(self) -> List[str]:
        return missing_capabilities(self)

    @property
    def complete(self) -> bool:
        return not self.missing_capabilities()

    def __repr__(self):
        return f"<{type(self).__name__} {self.key!r}>"


def missing_capabilities(game) -> List[str]:
    return [c for c in CAPABILITIES if not callable(getattr(game, c, None))]


# ──────────────────────────────────────────────────────────────────────────────
# Bohemia Interactive titles
# ──────────────────────────────────────────────────────────────────────────────

ARMA2_FOLDERS = frozenset({
    "AddOns", "BattlEye", "BEsetup", "beta", "Campaigns", "DirectX", "Dta",
    "Keys", "Missions", "MPMissions", "userconfig",
})
OA_FOLDERS = frozenset({
    "AddOns", "BattlEye", "BEsetup", "Common", "Campaigns", "DirectX", "Dta",
    "Keys", "Missions", "MPMissions", "userconfig", "BAF", "PMC",
})
TKOH_FOLDERS = frozenset({
    "AddOns", "DirectX", "DLCsetup", "dll", "Dta", "Hinds", "jre", "Keys",
    "missions", "mpmissions", "Rearmed",
})


class BISGame(GameDescriptor):
    registry_title = ""
    env_var = ""
    release_exe: Tuple[str, ...] = ()
    beta_exe: Tuple[str, ...] = ()
    steam_app_id = 0
    reserved: FrozenSet[str] = frozenset()

    def __init__(self, install_dir=None, steam_dir=None):
        # explicit paths win over the registry lookups done on every call
        self._install_dir = Path(install_dir) if install_dir else None
        self._steam_dir = Path(steam_dir) if steam_dir else None
        self._reserved = frozenset(f.casefold() for f in self.reserved)

    def _game_dir(self) -> Optional[Path]:
        if self._install_dir is not None:
            return self._install_dir
        return utils.find_bis_directory(self.registry_title, self.release_exe[-1], self.env_var)

    def _steam_root(self) -> Optional[Path]:
        if self._steam_dir is not None:
            return self._steam_dir
        return utils.find_steam_directory()

    def install_directory(self, launch_type: LaunchType) -> Optional[Path]:
        return self._game_dir()

    def executable_path(self, launch_type: LaunchType) -> Optional[Path]:
        if launch_type is LaunchType.STEAM:
            steam = self._steam_root()
            return steam / "Steam.exe" if steam else None
        parts = {LaunchType.RELEASE: self.release_exe, LaunchType.BETA: self.beta_exe}.get(launch_type)
        base = self._game_dir()
        if not parts or base is None:
            return None
        return base.joinpath(*parts)

    def is_installed(self, launch_type: LaunchType) -> bool:
        if launch_type is LaunchType.LATEST:
            return self.is_installed(LaunchType.RELEASE) or self.is_installed(LaunchType.BETA)
        exe = self.executable_path(launch_type)
        return exe is not None and exe.is_file()

    def resolve_launch_type(self, launch_type: LaunchType) -> LaunchType:
        if launch_type is not LaunchType.LATEST:
            return launch_type
        if not self.is_installed(LaunchType.BETA):
            return LaunchType.RELEASE
        if not self.is_installed(LaunchType.RELEASE):
            return LaunchType.BETA
        release = utils.file_version(self.executable_path(LaunchType.RELEASE))
        beta = utils.file_version(self.executable_path(LaunchType.BETA))
        if release is not None and beta is not None and release < beta:
            return LaunchType.BETA
        return LaunchType.RELEASE

    def base_arguments(self, launch_type: LaunchType) -> str:
        if launch_type is LaunchType.STEAM:
            return f"-applaunch {self.steam_app_id}"
        return ""

    def base_mods(self, launch_type: LaunchType) -> str:
        return "beta" if launch_type is LaunchType.BETA else ""

    def is_reserved_folder(self, name: str) -> bool:
        return name.casefold() in self._reserved


class ArmA2(BISGame):
    key = "arma2"
    name = "ArmA 2"
    registry_title = "ArmA 2"
    env_var = "MODLAUNCH_ARMA2_DIR"
    release_exe = ("arma2.exe",)
    beta_exe = ("beta", "arma2.exe")
    steam_app_id = 33910
    reserved = ARMA2_FOLDERS


class OperationArrowhead(BISGame):
    key = "arma2oa"
    name = "Operation Arrowhead"
    registry_title = "ArmA 2 OA"
    env_var = "MODLAUNCH_ARMA2OA_DIR"
    release_exe = ("arma2oa.exe",)
    beta_exe = ("Expansion", "beta", "arma2oa.exe")
    steam_app_id = 33930
    reserved = OA_FOLDERS

    def base_mods(self, launch_type: LaunchType) -> str:
        return "Expansion/beta" if launch_type is LaunchType.BETA else ""


class CombinedOperations(OperationArrowhead):
    """Operation Arrowhead loading the ArmA 2 content; both games must be present."""

    key = "arma2co"
    name = "Combined Operations"

    def __init__(self, install_dir=None, steam_dir=None, arma2_dir=None):
        super().__init__(install_dir, steam_dir)
        self._arma2 = ArmA2(arma2_dir, steam_dir)

    def is_installed(self, launch_type: LaunchType) -> bool:
        return super().is_installed(launch_type) and self._arma2.is_installed(launch_type)

    def base_mods(self, launch_type: LaunchType) -> str:
        mods = "Expansion/beta;" if launch_type is LaunchType.BETA else ""
        return mods + "Expansion;ca"


class TakeOnHelicopters(BISGame):
    key = "tkoh"
    name = "Take On Helicopters"
    registry_title = "Take On Helicopters"
    env_var = "MODLAUNCH_TKOH_DIR"
    release_exe = ("takeonh.exe",)
    steam_app_id = 65730
    reserved = TKOH_FOLDERS


class TakeOnHelicoptersRearmed(TakeOnHelicopters):
    """TKOH running the ArmA 2 content through the Rearmed bridge."""

    key = "tkoh_rearmed"
    name = "Take On Helicopters: Rearmed"
    reserved = TKOH_FOLDERS | OA_FOLDERS

    def __init__(self, install_dir=None, steam_dir=None, arma2_dir=None, oa_dir=None):
        super().__init__(install_dir, steam_dir)
        self._arma2 = ArmA2(arma2_dir, steam_dir)
        self._combined = CombinedOperations(oa_dir, steam_dir, arma2_dir)

    def is_installed(self, launch_type: LaunchType) -> bool:
        return super().is_installed(launch_type) and self._combined.is_installed(launch_type)

    def base_mods(self, launch_type: LaunchType) -> str:
        arma2 = self._arma2.install_directory(LaunchType.RELEASE)
        oa = self._combined.install_directory(LaunchType.RELEASE)
        tkoh = self.install_directory(launch_type)
        parts = [arma2, oa, oa / "Expansion" if oa else None, tkoh]
        return ";".join([str(p) for p in parts if p] + ["Rearmed"])


# ──────────────────────────────────────────────────────────────────────────────
# User-defined titles
# ──────────────────────────────────────────────────────────────────────────────

class CustomGame(GameDescriptor):
    """A title described entirely by the user's settings file."""

    def __init__(self, key: str, name: str, install_dir, executable: str,
                 reserved: Iterable[str] = (), base_mods: str = "",
                 base_arguments: str = "", beta_executable: Optional[str] = None):
        self.key = key
        self.name = name or key
        self._install_dir = Path(install_dir) if install_dir else None
        self._executable = executable
        self._beta_executable = beta_executable
        self._reserved = frozenset(r.casefold() for r in reserved)
        self._base_mods = base_mods or ""
        self._base_arguments = base_arguments or ""

    @classmethod
    def from_dict(cls, data: Dict) -> "CustomGame":
        return cls(
            key=str(data["key"]),
            name=data.get("name", ""),
            install_dir=data.get("install_dir"),
            executable=data.get("executable", ""),
            reserved=data.get("reserved", []),
            base_mods=data.get("base_mods", ""),
            base_arguments=data.get("base_arguments", ""),
            beta_executable=data.get("beta_executable"),
        )

    def install_directory(self, launch_type: LaunchType) -> Optional[Path]:
        return self._install_dir

    def executable_path(self, launch_type: LaunchType) -> Optional[Path]:
        rel = {LaunchType.RELEASE: self._executable, LaunchType.BETA: self._beta_executable}.get(launch_type)
        if not rel or self._install_dir is None:
            return None
        return self._install_dir / rel

    def is_installed(self, launch_type: LaunchType) -> bool:
        if launch_type is LaunchType.LATEST:
            return self.is_installed(LaunchType.RELEASE) or self.is_installed(LaunchType.BETA)
        exe = self.executable_path(launch_type)
        return exe is not None and exe.is_file()

    def resolve_launch_type(self, launch_type: LaunchType) -> LaunchType:
        if launch_type is not LaunchType.LATEST:
            return launch_type
        if self.is_installed(LaunchType.RELEASE) or not self.is_installed(LaunchType.BETA):
            return LaunchType.RELEASE
        return LaunchType.BETA

    def base_arguments(self, launch_type: LaunchType) -> str:
        return self._base_arguments

    def base_mods(self, launch_type: LaunchType) -> str:
        return self._base_mods

    def is_reserved_folder(self, name: str) -> bool:
        return name.casefold() in self._reserved


# ──────────────────────────────────────────────────────────────────────────────
# Registry
# ──────────────────────────────────────────────────────────────────────────────

GAMES: Dict[str, type] = {
    cls.key: cls
    for cls in (ArmA2, OperationArrowhead, CombinedOperations, TakeOnHelicopters, TakeOnHelicoptersRearmed)
}


def available_games() -> List[str]:
    return list(GAMES)

def get_game(key: str, custom: Iterable[Dict] = (), **kwargs) -> GameDescriptor:
    """Fresh descriptor for `key`; custom entries (settings dicts) are checked first."""
    for entry in custom or ():
        if entry.get("key") == key:
            return CustomGame.from_dict(entry)
    try:
        cls = GAMES[key]
    except KeyError:
        raise KeyError(f"unknown game: {key!r}") from None
    return cls(**kwargs)
