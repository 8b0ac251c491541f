import os
from pathlib import Path
from typing import Optional, Tuple

REGISTRY_ROOTS = ("SOFTWARE", r"SOFTWARE\Wow6432Node")


def is_windows() -> bool:
    return os.name == "nt"

def read_hklm_value(subkey: str, value: str) -> Optional[str]:
    """Look up HKLM\\SOFTWARE[\\Wow6432Node]\\<subkey> -> value. None off Windows."""
    if not is_windows():
        return None
    import winreg
    for root in REGISTRY_ROOTS:
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, rf"{root}\{subkey}") as k:
                data, _ = winreg.QueryValueEx(k, value)
        except OSError:
            continue
        if data:
            return str(data)
    return None

def find_steam_directory() -> Optional[Path]:
    env = os.environ.get("MODLAUNCH_STEAM_DIR")
    if env and Path(env).is_dir():
        return Path(env)
    reg = read_hklm_value(r"Valve\Steam", "InstallPath")
    return Path(reg) if reg else None

def find_bis_directory(registry_title: str, exe_name: str, env_var: Optional[str] = None) -> Optional[Path]:
    """Install directory of a Bohemia Interactive title.

    Order: explicit environment override, the registry, then the current
    working directory when it holds the title's executable.
    """
    if env_var:
        env = os.environ.get(env_var)
        if env and Path(env).is_dir():
            return Path(env)
    reg = read_hklm_value(rf"Bohemia Interactive Studio\{registry_title}", "Main")
    if reg:
        return Path(reg)
    cwd = Path.cwd()
    if (cwd / exe_name).is_file():
        return cwd
    return None

def file_version(path) -> Optional[Tuple[int, int, int, int]]:
    """Product version stamped into a Windows executable, or None."""
    if not path or not is_windows() or not Path(path).is_file():
        return None
    import ctypes
    from ctypes import wintypes

    ver = ctypes.WinDLL("version")
    size = ver.GetFileVersionInfoSizeW(str(path), None)
    if not size:
        return None
    buf = ctypes.create_string_buffer(size)
    if not ver.GetFileVersionInfoW(str(path), 0, size, buf):
        return None
    ptr = ctypes.c_void_p()
    length = wintypes.UINT()
    if not ver.VerQueryValueW(buf, "\\", ctypes.byref(ptr), ctypes.byref(length)):
        return None
    # VS_FIXEDFILEINFO; words 4/5 are dwProductVersionMS/LS
    info = ctypes.cast(ptr, ctypes.POINTER(ctypes.c_uint32 * 13)).contents
    ms, ls = info[4], info[5]
    return (ms >> 16, ms & 0xFFFF, ls >> 16, ls & 0xFFFF)
