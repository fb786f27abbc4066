"""Runtime settings read from the environment and an optional ``.env`` file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from flash10.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
STATE_ROOT = Path("res/state")
STATE_FILE = STATE_ROOT / "review_data.json"
WORD_SHEET = Path("res/words.xlsx")
STORAGE_KEY = "flash10_review_data"
DEFAULT_LOG_LEVEL = "INFO"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    state_file: Path = STATE_FILE
    word_sheet: Path = WORD_SHEET
    storage_key: str = STORAGE_KEY
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = False
    reminders_enabled: bool = True


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean", {"value": raw})


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[Path] = None,
) -> Settings:
    """Build :class:`Settings` from *env* (defaults to ``os.environ``).

    Values from *dotenv_path* are used only where *env* does not define the
    key. Without *dotenv_path*, ``.env`` in the working directory is read
    only when *env* is omitted.
    """

    source = dict(os.environ if env is None else env)
    env_file = dotenv_path
    if env_file is None and env is None:
        env_file = Path(".env")
    if env_file is not None and env_file.exists():
        for key, value in dotenv_values(env_file).items():
            if value is not None:
                source.setdefault(key, value)

    state_file = source.get("FLASH10_STATE_FILE") or str(STATE_FILE)
    word_sheet = source.get("FLASH10_WORD_SHEET") or str(WORD_SHEET)
    storage_key = source.get("FLASH10_STORAGE_KEY") or STORAGE_KEY
    log_level = (source.get("FLASH10_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    log_json = (source.get("LOG_FORMAT") or "").lower() == "json"
    reminders = _parse_bool("FLASH10_REMINDERS", source.get("FLASH10_REMINDERS"), True)

    return Settings(
        state_file=Path(state_file),
        word_sheet=Path(word_sheet),
        storage_key=storage_key,
        log_level=log_level,
        log_json=log_json,
        reminders_enabled=reminders,
    )


__all__ = ["STATE_FILE", "STORAGE_KEY", "WORD_SHEET", "Settings", "load_settings"]
