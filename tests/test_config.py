import io
import json
import sys
from pathlib import Path

import pytest
from loguru import logger

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from flash10.config import STATE_FILE, STORAGE_KEY, WORD_SHEET, load_settings
from flash10.errors import ConfigurationError
from flash10.logging_config import configure_logging


def test_defaults(tmp_path):
    settings = load_settings({}, dotenv_path=tmp_path / ".env")

    assert settings.state_file == STATE_FILE
    assert settings.word_sheet == WORD_SHEET
    assert settings.storage_key == STORAGE_KEY
    assert settings.log_level == "INFO"
    assert settings.reminders_enabled is True
    assert settings.log_json is False


def test_environment_overrides(tmp_path):
    env = {
        "FLASH10_STATE_FILE": str(tmp_path / "state.json"),
        "FLASH10_WORD_SHEET": str(tmp_path / "words.csv"),
        "FLASH10_STORAGE_KEY": "custom",
        "FLASH10_LOG_LEVEL": "debug",
        "FLASH10_REMINDERS": "off",
        "LOG_FORMAT": "JSON",
    }
    settings = load_settings(env, dotenv_path=tmp_path / ".env")

    assert settings.state_file == tmp_path / "state.json"
    assert settings.word_sheet == tmp_path / "words.csv"
    assert settings.storage_key == "custom"
    assert settings.log_level == "DEBUG"
    assert settings.reminders_enabled is False
    assert settings.log_json is True


def test_dotenv_fills_missing_values_only(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("FLASH10_STORAGE_KEY=from_file\nFLASH10_LOG_LEVEL=WARNING\n", encoding="utf-8")

    settings = load_settings({"FLASH10_LOG_LEVEL": "ERROR"}, dotenv_path=env_file)

    assert settings.storage_key == "from_file"
    assert settings.log_level == "ERROR"


def test_invalid_boolean_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings({"FLASH10_REMINDERS": "maybe"}, dotenv_path=tmp_path / ".env")


def test_explicit_env_ignores_working_directory_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("FLASH10_STORAGE_KEY=stray\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert load_settings({}).storage_key == STORAGE_KEY


def test_working_directory_dotenv_used_with_process_environment(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("FLASH10_STORAGE_KEY=from_cwd\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FLASH10_STORAGE_KEY", raising=False)

    assert load_settings().storage_key == "from_cwd"


@pytest.fixture
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


def test_configure_logging_json_sink(restore_logging):
    buffer = io.StringIO()
    configure_logging("DEBUG", json_format=True, sink=buffer)

    logger.debug("scheduler ready")

    record = json.loads(buffer.getvalue().splitlines()[-1])
    assert record["record"]["message"] == "scheduler ready"


def test_configure_logging_filters_by_level(restore_logging):
    buffer = io.StringIO()
    configure_logging("WARNING", json_format=False, sink=buffer)

    logger.info("hidden")
    logger.warning("shown")

    output = buffer.getvalue()
    assert "shown" in output
    assert "hidden" not in output
