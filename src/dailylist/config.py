"""Configuration management for dailylist."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.undo import DEFAULT_UNDO_SECONDS

logger = logging.getLogger(__name__)

DAILYLIST_HOME = Path(os.environ.get("DAILYLIST_HOME", Path.home() / "dailylist"))
CONFIG_FILE = DAILYLIST_HOME / "config" / "dailylist.conf"
DATA_DIR = DAILYLIST_HOME / "data"


@dataclass
class Config:
    """dailylist configuration."""

    data_file: str = ""
    state_file: str = ""
    timezone: str = ""
    undo_seconds: float = DEFAULT_UNDO_SECONDS
    completed_first: bool = False

    @property
    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "tasks.json"

    @property
    def state_path(self) -> Path:
        if self.state_file:
            return Path(self.state_file).expanduser()
        return DATA_DIR / "state.json"


def _parse_bool(value: str) -> bool | None:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    return None


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from dailylist.conf."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_file":
                config.data_file = value
            case "state_file":
                config.state_file = value
            case "timezone":
                config.timezone = value
            case "undo_seconds":
                try:
                    seconds = float(value)
                except ValueError:
                    logger.warning(f"Invalid UNDO_SECONDS value: {value}")
                    continue
                if seconds <= 0:
                    logger.warning(f"UNDO_SECONDS must be positive, got {value}")
                    continue
                config.undo_seconds = seconds
            case "completed_first":
                parsed = _parse_bool(value)
                if parsed is None:
                    logger.warning(f"Invalid COMPLETED_FIRST value: {value}")
                else:
                    config.completed_first = parsed

    return config
