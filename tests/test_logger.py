# File: tests/test_logger.py
"""Тесты настройки логгера (`page_dumper.logger`)."""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from page_dumper.logger import LOGGER_NAME, init_logging, logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_default_logger():
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]


def test_log_file_is_written(tmp_path):
    log_file = tmp_path / "dump.log"
    lg = init_logging("DEBUG", log_file=log_file, log_format="%(levelname)s %(message)s")
    lg.debug("captured %s", "img.png")
    for handler in lg.handlers:
        handler.flush()
    assert "DEBUG captured img.png" in log_file.read_text(encoding="utf-8")
    file_handler = lg.handlers[-1]
    assert isinstance(file_handler, RotatingFileHandler)
    assert file_handler.maxBytes == 5 * 1024 * 1024
    assert file_handler.backupCount == 3


def test_reinit_replaces_handlers(tmp_path):
    init_logging(log_file=tmp_path / "a.log")
    lg = init_logging("WARNING")
    assert len(lg.handlers) == 1
    assert lg.level == logging.WARNING
    assert lg is logger
