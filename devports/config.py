from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from platformdirs import user_config_dir

from .errors import ConfigError

APP_NAME = "devports"
DEFAULT_TIMEOUT = 10.0
SORT_CHOICES = ("port", "process", "state")
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True, slots=True)
class Settings:
    # seconds; None waits on the tools forever
    timeout: Optional[float] = DEFAULT_TIMEOUT
    dev_only: bool = False
    sort_by: str = "port"


def config_path() -> Path:
    return Path(user_config_dir(appname=APP_NAME, appauthor=False)) / "config.toml"


def _timeout(value: Any) -> Optional[float]:
    try:
        t = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"timeout must be a number, got {value!r}") from None
    return t if t > 0 else None


def _bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _sort(value: Any) -> str:
    if value not in SORT_CHOICES:
        raise ConfigError(
            f"sort_by must be one of {', '.join(SORT_CHOICES)}, got {value!r}"
        )
    return value


def _apply(settings: Settings, table: Mapping[str, Any]) -> Settings:
    if "timeout" in table:
        settings = replace(settings, timeout=_timeout(table["timeout"]))
    if "dev_only" in table:
        settings = replace(settings, dev_only=_bool(table["dev_only"], "dev_only"))
    if "sort_by" in table:
        settings = replace(settings, sort_by=_sort(table["sort_by"]))
    return settings


def load_settings(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Defaults, then ``[devports]`` in config.toml, then DEVPORTS_* env vars."""
    env = os.environ if environ is None else environ
    settings = Settings()

    path = path or config_path()
    if path.is_file():
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Could not read {path}: {e}") from e
        settings = _apply(settings, data.get(APP_NAME, {}))

    overrides = {}
    if "DEVPORTS_TIMEOUT" in env:
        overrides["timeout"] = env["DEVPORTS_TIMEOUT"]
    if "DEVPORTS_DEV_ONLY" in env:
        overrides["dev_only"] = env["DEVPORTS_DEV_ONLY"]
    if "DEVPORTS_SORT" in env:
        overrides["sort_by"] = env["DEVPORTS_SORT"]
    return _apply(settings, overrides)
