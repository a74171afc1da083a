from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .utils import default_config_dir, ensure_dir

logger = logging.getLogger(__name__)

DEFAULT_WEEK_START = "monday"


@dataclass
class TWConfig:
    data_dir: Optional[str] = None
    week_start: str = DEFAULT_WEEK_START


def config_path(explicit_path: Optional[Union[str, Path]] = None) -> Path:
    if explicit_path:
        return Path(explicit_path).expanduser()
    return default_config_dir() / "config.json"


def load_config(explicit_path: Optional[Union[str, Path]] = None) -> TWConfig:
    p = config_path(explicit_path)
    if not p.exists():
        return TWConfig()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", p, exc)
        return TWConfig()

    cfg = TWConfig()
    if isinstance(data, dict):
        if data.get("data_dir"):
            cfg.data_dir = str(data["data_dir"])
        if data.get("week_start") is not None:
            cfg.week_start = str(data["week_start"])
    return cfg


def save_config(cfg: TWConfig, explicit_path: Optional[Union[str, Path]] = None) -> Path:
    p = config_path(explicit_path)
    ensure_dir(p.parent)
    payload = {
        "data_dir": cfg.data_dir,
        "week_start": cfg.week_start,
    }
    p.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return p
