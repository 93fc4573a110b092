"""Configuration module: frozen dataclass built from defaults, YAML and env vars."""

import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field, fields
from typing import Callable

import yaml

logger = logging.getLogger(__name__)


def discard_error(err: Exception) -> None:
    """Default sweep error handler: drop the error."""


def default_log_path() -> str:
    """``<tmpdir>/<program name>-rollinglog.log``"""
    name = os.path.basename(sys.argv[0]) or "python"
    return os.path.join(tempfile.gettempdir(), f"{name}-rollinglog.log")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    filename: str = field(default_factory=default_log_path)
    max_bytes: int = 0        # 0 = never rotate
    max_backups: int = 0      # 0 = keep every backup
    max_age_days: int = 0     # 0 = no age limit
    compress: bool = False
    localtime: bool = False   # UTC timestamps unless set
    error_handler: Callable[[Exception], None] = field(
        default=discard_error, compare=False, repr=False
    )

    def __post_init__(self):
        for name in ("max_bytes", "max_backups", "max_age_days"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.error_handler is None:
            object.__setattr__(self, "error_handler", discard_error)


# Config field -> (environment variable, parser)
_ENV_VARS = {
    "filename": ("LOG_FILE", str),
    "max_bytes": ("MAX_BYTES", int),
    "max_backups": ("MAX_BACKUPS", int),
    "max_age_days": ("MAX_AGE_DAYS", int),
    "compress": ("COMPRESS", _parse_bool),
    "localtime": ("LOCALTIME", _parse_bool),
}


def load_yaml_config(path: str | None) -> dict:
    """Load writer settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(yaml_data: dict | None = None, env=None, error_handler=None) -> Config:
    """Build Config from defaults, then YAML data, then environment variables."""
    env = os.environ if env is None else env
    yaml_data = yaml_data or {}
    known = {f.name for f in fields(Config)}

    unknown = set(yaml_data) - known
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))

    values = {}
    for name, (var, parse) in _ENV_VARS.items():
        if var in env:
            values[name] = parse(env[var])
        elif name in yaml_data:
            values[name] = parse(yaml_data[name])

    return Config(error_handler=error_handler, **values)
