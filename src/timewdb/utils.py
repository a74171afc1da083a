from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

DEFAULT_APP_DIRNAME = "timewdb"


def default_config_dir() -> Path:
    """Return OS-appropriate config directory for timewdb.

    - Windows: %APPDATA%\\timewdb
    - macOS:  ~/Library/Application Support/timewdb
    - Linux:  ~/.config/timewdb (or $XDG_CONFIG_HOME)
    """
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / DEFAULT_APP_DIRNAME
        return Path.home() / "AppData" / "Roaming" / DEFAULT_APP_DIRNAME

    # XDG for *nix
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / DEFAULT_APP_DIRNAME

    if sys_platform() == "darwin":
        return Path.home() / "Library" / "Application Support" / DEFAULT_APP_DIRNAME

    return Path.home() / ".config" / DEFAULT_APP_DIRNAME


def sys_platform() -> str:
    import platform
    return platform.system().lower()


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def pretty_duration(d: timedelta) -> str:
    """HH:MM:SS; hours are not wrapped at 24."""
    total = max(0, int(d.total_seconds()))
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"
