# tests/test_logging_config.py

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from featscale.config import FeatscaleConfig
from featscale.utils.logging_config import setup_logging


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    package_logger = logging.getLogger("featscale")
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = True


@pytest.mark.parametrize("verbosity, expected_level", [
    (0, logging.WARNING),
    (1, logging.INFO),
    (2, logging.DEBUG),
    (5, logging.DEBUG),
])
def test_console_level_follows_verbosity(verbosity, expected_level):
    setup_logging(FeatscaleConfig(), verbosity)
    handlers = logging.getLogger("featscale").handlers
    rich_handlers = [h for h in handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert rich_handlers[0].level == expected_level

def test_quiet_installs_no_console_handler():
    setup_logging(FeatscaleConfig(), -1)
    handlers = logging.getLogger("featscale").handlers
    assert not any(isinstance(h, RichHandler) for h in handlers)

def test_file_logging(tmp_path: Path):
    config = FeatscaleConfig(
        paths={"log_directory": tmp_path / "logs"},
        logging={"log_file_enabled": True, "log_level_file": "INFO"},
    )
    log_path = setup_logging(config, 0)
    assert log_path is not None and log_path.parent == (tmp_path / "logs").resolve()
    logging.getLogger("featscale.test").info("scaled 3 columns")
    for handler in logging.getLogger("featscale").handlers:
        handler.flush()
    content = log_path.read_text()
    assert "featscale v" in content
    assert "scaled 3 columns" in content

def test_file_logging_disabled_returns_none():
    assert setup_logging(FeatscaleConfig(), 0) is None
