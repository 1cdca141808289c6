"""Unit tests for the Logging Manager."""

from __future__ import annotations

import json
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

from vnite_sdk.core.logging_manager import LoggingManager, get_logger
from vnite_sdk.utils.exceptions import ManagerInitializationError


def _config(**overrides: Any) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "level": "INFO",
        "format": "text",
        "file": {"enabled": False, "path": "logs/vnite-sdk.log", "rotation": "10 MB", "retention": "30 days"},
        "console": {"enabled": True, "level": "INFO"},
    }
    config.update(overrides)
    return config


@pytest.fixture
def config_manager() -> MagicMock:
    """Create a mock config manager serving a logging section."""
    manager = MagicMock()
    manager.get.return_value = _config()
    return manager


@pytest.fixture
def logging_manager(config_manager: MagicMock):
    manager = LoggingManager(config_manager)
    yield manager
    manager.shutdown()


def test_logging_manager_initialization(logging_manager: LoggingManager, config_manager: MagicMock) -> None:
    """Test console-only initialization."""
    logging_manager.initialize()

    assert logging_manager.initialized
    assert logging_manager.healthy
    config_manager.get.assert_called_with("logging", {})

    root = logging.getLogger()
    assert root.level == logging.INFO
    status = logging_manager.status()
    assert status["handlers"] == {"console": True, "file": False}
    assert status["format"] == "text"


def test_console_output_goes_to_stderr(capsys: pytest.CaptureFixture, logging_manager: LoggingManager) -> None:
    logging_manager.initialize()

    get_logger("vnite_sdk.tests").info("Archive written", size=1024)

    out, err = capsys.readouterr()
    assert out == ""
    assert "Archive written" in err
    assert "size=1024" in err


def test_level_filters_records(config_manager: MagicMock, capsys: pytest.CaptureFixture) -> None:
    config_manager.get.return_value = _config(level="WARNING", console={"enabled": True, "level": "WARNING"})
    manager = LoggingManager(config_manager)
    manager.initialize()
    try:
        logger = get_logger("vnite_sdk.tests")
        logger.info("hidden message")
        logger.warning("visible message")
    finally:
        manager.shutdown()

    _, err = capsys.readouterr()
    assert "hidden message" not in err
    assert "visible message" in err


def test_set_level(capsys: pytest.CaptureFixture, logging_manager: LoggingManager) -> None:
    logging_manager.initialize()
    logging_manager.set_level("debug")

    get_logger("vnite_sdk.tests").debug("Debug detail")

    _, err = capsys.readouterr()
    assert logging.getLogger().level == logging.DEBUG
    assert "Debug detail" in err


def test_file_handler_json(config_manager: MagicMock, tmp_path: Path) -> None:
    """Test that a JSON log file is written when enabled."""
    log_path = tmp_path / "logs" / "sdk.log"
    config_manager.get.return_value = _config(
        format="json",
        file={"enabled": True, "path": str(log_path), "rotation": "1 MB", "retention": "3 days"},
        console={"enabled": False},
    )
    manager = LoggingManager(config_manager)
    manager.initialize()
    try:
        handler = manager._file_handler
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 1024 * 1024
        assert handler.backupCount == 3

        logging.getLogger("vnite_sdk.tests").warning("Stdlib record")
    finally:
        manager.shutdown()

    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert records[-1]["message"] == "Stdlib record"
    assert records[-1]["levelname"] == "WARNING"
    assert records[-1]["name"] == "vnite_sdk.tests"


@pytest.mark.parametrize(
    "value, expected",
    [("10 MB", 10 * 1024 * 1024), ("5 MB", 5 * 1024 * 1024), ("unbounded", 10 * 1024 * 1024)],
)
def test_parse_rotation(value: str, expected: int) -> None:
    assert LoggingManager._parse_rotation(value) == expected


def test_parse_retention() -> None:
    assert LoggingManager._parse_retention("7 days") == 7
    assert LoggingManager._parse_retention(None) == 30


def test_initialization_failure(config_manager: MagicMock) -> None:
    config_manager.get.side_effect = RuntimeError("config unavailable")
    manager = LoggingManager(config_manager)

    with pytest.raises(ManagerInitializationError, match="config unavailable"):
        manager.initialize()

    assert not manager.initialized


def test_shutdown_removes_handlers(logging_manager: LoggingManager) -> None:
    logging_manager.initialize()
    handler = logging_manager._console_handler

    logging_manager.shutdown()

    assert handler not in logging.getLogger().handlers
    assert not logging_manager.initialized
    assert logging_manager.status()["handlers"] == {"console": False, "file": False}
