"""
Unit tests for logging setup.
"""

import logging
import logging.handlers

from ratingwatch.core.config import Config
from ratingwatch.core.logging_config import setup_logging


def test_console_and_rotating_file_handlers(tmp_path):
    settings = Config(_env_file=None, logs_dir=tmp_path / "logs", log_level="DEBUG")
    logger = setup_logging("ratingwatch.test.handlers", settings)
    try:
        kinds = {type(h) for h in logger.handlers}
        assert logging.StreamHandler in kinds
        assert logging.handlers.RotatingFileHandler in kinds
        assert (tmp_path / "logs" / "ratingwatch.test.handlers.log").exists()
        assert logger.level == logging.DEBUG
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_setup_is_idempotent(tmp_path):
    settings = Config(_env_file=None, logs_dir=tmp_path / "logs")
    first = setup_logging("ratingwatch.test.idempotent", settings)
    try:
        second = setup_logging("ratingwatch.test.idempotent", settings)
        assert first is second
        assert len(second.handlers) == 2
    finally:
        for handler in list(first.handlers):
            handler.close()
            first.removeHandler(handler)
