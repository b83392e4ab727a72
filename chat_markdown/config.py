"""Configuration: built-in defaults < packaged config.default.yaml < user config.yaml."""

import copy
import os
from pathlib import Path
from typing import Optional

import yaml

from .log import log_debug, log_warn

PACKAGE_DIR = Path(__file__).resolve().parent
APP_NAME = "chat-markdown"

DEFAULT_CONFIG = {
    "max_depth": 100,
    "base_url": None,
    "profile": None,
    "profiles_dir": None,
    "separator": "---",
    "output": {
        "dir": "outputs/chat_markdown",
        "filename": "chat_{time}_{profile}.md",
    },
    "time_format": "%Y%m%d_%H%M%S",
    "year_format": "%Y",
    "month_format": "%m",
    "date_format": "%Y%m%d",
}

# JS-like date tokens accepted in config files
TOKEN_MAP = {
    "yyyy": "%Y", "MM": "%m", "dd": "%d",
    "HH": "%H", "mm": "%M", "ss": "%S",
}
FORMAT_KEYS = ("time_format", "year_format", "month_format", "date_format")


def get_config_paths() -> dict:
    """Candidate config locations, highest priority first for user files."""
    appdata = os.environ.get("APPDATA") or os.environ.get("XDG_CONFIG_HOME")
    if not appdata:
        appdata = str(Path.home() / ".config")
    return {
        "local": Path.cwd() / "config.yaml",
        "appdata": Path(appdata) / APP_NAME / "config.yaml",
        "default": PACKAGE_DIR / "config.default.yaml",
    }


def deep_merge(target: dict, source: dict) -> dict:
    for k, v in source.items():
        if k in target and isinstance(target[k], dict) and isinstance(v, dict):
            deep_merge(target[k], v)
        else:
            target[k] = v
    return target


def normalize(d):
    """Turn ``"true"``/``"false"`` strings into booleans, recursively."""
    if isinstance(d, dict):
        return {k: normalize(v) for k, v in d.items()}
    if isinstance(d, list):
        return [normalize(i) for i in d]
    if isinstance(d, str) and d.lower() in ("true", "false"):
        return d.lower() == "true"
    return d


def load_file(path: Optional[Path]) -> dict:
    if not path or not path.exists(): return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log_warn(f"Failed to load {path.name}: {e}")
        return {}
    if not isinstance(data, dict):
        log_warn(f"Ignoring {path.name}: expected a mapping at the top level")
        return {}
    log_debug(f"Loaded config from {path}")
    return normalize(data)


def translate_date_tokens(fmt: str) -> str:
    for js_tok, py_tok in TOKEN_MAP.items():
        fmt = fmt.replace(js_tok, py_tok)
    return fmt


def load_config(path: Optional[Path] = None) -> dict:
    """Merged configuration.

    An explicit ``path`` replaces the user-file lookup (local, then
    APPDATA / XDG config dir).
    """
    paths = get_config_paths()
    config = copy.deepcopy(DEFAULT_CONFIG)

    deep_merge(config, load_file(paths["default"]))

    if path is not None:
        deep_merge(config, load_file(Path(path)))
    elif paths["local"].exists():
        deep_merge(config, load_file(paths["local"]))
    elif paths["appdata"].exists():
        deep_merge(config, load_file(paths["appdata"]))

    for key in FORMAT_KEYS:
        if key in config:
            config[key] = translate_date_tokens(str(config[key]))
    return config
