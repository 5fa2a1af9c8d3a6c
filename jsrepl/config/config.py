#!/usr/bin/env python3
# jsrepl/config/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only).

Precedence (low to high):
  1) Built-in defaults
  2) Files in CWD: .env, jsrepl.ini, jsrepl.json, jsrepl.toml
  3) Environment variables prefixed with JSREPL_
  4) Command-line overrides passed to load_config()

Validation:
  - EDIT_MODE: 'emacs' or 'vi'
  - HISTORY_FILE: normalized path, relative to CWD when not absolute
  - HISTORY_SIZE: int >= 1
  - PROMPT / CONTINUATION_PROMPT: non-empty str
  - COLOR / SHOW_BANNER: bool
  - LOG_LEVEL: one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - LOG_FILE_PATH: None or normalized path
"""

import configparser
import json
import os
import re
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from jsrepl.errors import ConfigError

ENV_PREFIX = "JSREPL_"

# History log location, relative to the working directory.
DEFAULT_HISTORY_FILE = ".jsrepl_history"

DEFAULTS: dict[str, Any] = {
    "EDIT_MODE": "emacs",
    "HISTORY_FILE": DEFAULT_HISTORY_FILE,
    "HISTORY_SIZE": 1000,
    "PROMPT": ">> ",
    "CONTINUATION_PROMPT": ".. ",
    "COLOR": True,
    "SHOW_BANNER": True,
    "LOG_LEVEL": "WARNING",
    "LOG_FILE_PATH": None,
}


class EditMode(str, Enum):
    """Line-editing key binding profile."""

    EMACS = "emacs"
    VI = "vi"


# ---------- data model ----------

@dataclass(frozen=True)
class AppConfig:
    edit_mode: EditMode
    history_file: Path
    history_size: int
    prompt: str
    continuation_prompt: str
    color: bool
    show_banner: bool
    log_level: str
    log_file_path: Path | None

    # Unrecognized keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        # .env files are shared with other tools; only our prefixed keys count
        if k.startswith(ENV_PREFIX):
            out[k[len(ENV_PREFIX):]] = v
    return out


def _load_ini_file(path: Path) -> dict[str, str]:
    cfg = configparser.ConfigParser(interpolation=None)
    try:
        with path.open(encoding="utf-8") as f:
            cfg.read_file(f)
    except FileNotFoundError:
        return {}
    except configparser.Error as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    flat: dict[str, str] = {}
    for sec in cfg.sections():
        for k, v in cfg.items(sec):
            flat[k.upper()] = v
    return flat


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'history': {'size': 50}} -> {'HISTORY_SIZE': 50}
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _find_config_files(base: Path) -> list[Path]:
    return [
        base / ".env",
        base / "jsrepl.ini",
        base / "jsrepl.json",
        base / "jsrepl.toml",
    ]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _as_bool(key: str, val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ConfigError(f"{key}: expected boolean, got {val!r}")


def _as_int(key: str, val: Any) -> int:
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    try:
        return int(str(val).strip())
    except ValueError as exc:
        raise ConfigError(f"{key}: expected integer, got {val!r}") from exc


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_edit_mode(val: Any) -> EditMode:
    try:
        return EditMode(str(val).strip().lower())
    except ValueError as exc:
        allowed = [m.value for m in EditMode]
        raise ConfigError(f"EDIT_MODE must be one of {allowed}, got {val!r}") from exc


def _as_log_level(val: Any) -> str:
    up = str(val).strip().upper()
    if up not in _LOG_LEVELS:
        raise ConfigError(
            f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {val!r}")
    return up


def _as_prompt(key: str, val: Any) -> str:
    s = "" if val is None else str(val)
    if not s:
        raise ConfigError(f"{key} must not be empty")
    return s


def _resolve_under(base: Path, value: str) -> Path:
    """Resolve a config path relative to `base` when not absolute."""
    p = Path(os.path.expandvars(os.path.expanduser(value)))
    return p if p.is_absolute() else (base / p)


# ---------- merge & load ----------

def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _merge_sources(base: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(base):
        if file.name == ".env":
            merged.update(_normalize_keys(_load_env_file(file)))
        elif file.suffix == ".ini":
            merged.update(_normalize_keys(_load_ini_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_toml_file(file))))

    env_overrides = {k[len(ENV_PREFIX):]: v for k, v in environ.items()
                     if k.startswith(ENV_PREFIX) and re.fullmatch(r"[A-Z0-9_]+", k)}
    merged.update(env_overrides)
    return merged


def _validate_and_build(config: dict[str, Any], base: Path) -> AppConfig:
    history_raw = _as_opt_str(config.get("HISTORY_FILE")) or DEFAULT_HISTORY_FILE
    log_raw = _as_opt_str(config.get("LOG_FILE_PATH"))

    history_size = _as_int("HISTORY_SIZE", config.get("HISTORY_SIZE"))
    if history_size < 1:
        raise ConfigError("HISTORY_SIZE must be >= 1")

    recognized = set(DEFAULTS.keys())
    extra = {k: v for k, v in config.items() if k not in recognized}

    return AppConfig(
        edit_mode=_as_edit_mode(config.get("EDIT_MODE")),
        history_file=_resolve_under(base, history_raw),
        history_size=history_size,
        prompt=_as_prompt("PROMPT", config.get("PROMPT")),
        continuation_prompt=_as_prompt(
            "CONTINUATION_PROMPT", config.get("CONTINUATION_PROMPT")),
        color=_as_bool("COLOR", config.get("COLOR")),
        show_banner=_as_bool("SHOW_BANNER", config.get("SHOW_BANNER")),
        log_level=_as_log_level(config.get("LOG_LEVEL")),
        log_file_path=None if log_raw is None else _resolve_under(base, log_raw),
        extra=extra,
    )


# ---------- public API ----------

def load_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load, merge, normalize, and validate configuration.

    `overrides` carries command-line values (keys as in DEFAULTS); entries
    set to None are ignored so unset flags never mask file or env values.
    No filesystem side-effects.
    """
    base = (cwd or Path.cwd()).resolve()
    raw = _merge_sources(base, os.environ if environ is None else environ)
    if overrides:
        raw.update({k.upper(): v for k, v in overrides.items() if v is not None})
    return _validate_and_build(raw, base)
