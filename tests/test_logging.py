"""Tests for the logging helpers."""

import logging

from rich.logging import RichHandler

from lib_shield.utils.logging import get_logger


class TestGetLogger:
    """Test handler management on named loggers."""

    def test_attached_handlers_survive_new_instances(self):
        logger = logging.getLogger("lib_shield.tests.attached")
        handler = logging.NullHandler()
        logger.addHandler(handler)
        try:
            get_logger("lib_shield.tests.attached")
            get_logger("lib_shield.tests.attached")
            assert handler in logger.handlers
        finally:
            logger.removeHandler(handler)

    def test_single_rich_handler(self):
        get_logger("lib_shield.tests.rich")
        get_logger("lib_shield.tests.rich")
        logger = logging.getLogger("lib_shield.tests.rich")
        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1
        assert logger.propagate is False

    def test_records_reach_attached_handler(self, caplog):
        logger = logging.getLogger("lib_shield.tests.caplog")
        logger.addHandler(caplog.handler)
        try:
            get_logger("lib_shield.tests.caplog").warning("advisory skipped")
        finally:
            logger.removeHandler(caplog.handler)
        assert [r.getMessage() for r in caplog.records] == ["advisory skipped"]
