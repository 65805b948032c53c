"""Configuration management for orgtracker."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ORGTRACKER_HOME = Path(os.environ.get("ORGTRACKER_HOME", Path.home() / "orgtracker"))
CONFIG_FILE = ORGTRACKER_HOME / "config" / "orgtracker.conf"
DATA_DIR = ORGTRACKER_HOME / "data"


@dataclass
class Config:
    """orgtracker configuration."""

    store_backend: str = "file"  # file | rest
    data_file: str = ""
    # Hosted store (PostgREST-style API)
    store_url: str = ""
    store_api_key: str = ""
    store_table: str = "org_nodes"
    user_id: str = ""
    request_timeout: float = 10.0
    # Planning policy
    hours_per_week: float = 25.0
    report_window_days: int = 28
    duplicate_window_seconds: int = 60

    @property
    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "nodes.json"


def _strip_value(value: str) -> str:
    """Remove quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _number(key: str, value: str, default, cast):
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"Invalid value for {key.upper()}: {value!r}, using {default}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from orgtracker.conf, then environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _strip_value(value.strip()))

    # Secrets may come from the environment instead of the file
    if os.environ.get("ORGTRACKER_STORE_API_KEY"):
        config.store_api_key = os.environ["ORGTRACKER_STORE_API_KEY"]

    return config


def _apply(config: Config, key: str, value: str) -> None:
    match key:
        case "store_backend":
            if value in ("file", "rest"):
                config.store_backend = value
            else:
                logger.warning(f"Unknown STORE_BACKEND {value!r}, using {config.store_backend}")
        case "data_file":
            config.data_file = value
        case "store_url":
            config.store_url = value.rstrip("/")
        case "store_api_key":
            config.store_api_key = value
        case "store_table":
            config.store_table = value
        case "user_id":
            config.user_id = value
        case "request_timeout":
            config.request_timeout = _number(key, value, config.request_timeout, float)
        case "hours_per_week":
            config.hours_per_week = _number(key, value, config.hours_per_week, float)
        case "report_window_days":
            config.report_window_days = _number(key, value, config.report_window_days, int)
        case "duplicate_window_seconds":
            config.duplicate_window_seconds = _number(key, value, config.duplicate_window_seconds, int)
        case _:
            logger.debug(f"Ignoring unknown config key {key.upper()}")
