# test_logger.py

import logging
import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routerline.logger import Logger


class TestLogger:

    def setup_method(self):
        self.name = "routerline.tests.logger"
        self.stdlib = logging.getLogger(self.name)

    def teardown_method(self):
        for handler in list(self.stdlib.handlers):
            self.stdlib.removeHandler(handler)
            handler.close()

    def test_handler_is_attached_once(self):
        Logger(self.name, True, "-")
        Logger(self.name, True, "-")
        assert len(self.stdlib.handlers) == 1
        assert isinstance(self.stdlib.handlers[0], logging.StreamHandler)

    def test_disabled_logger_gets_single_null_handler(self):
        Logger(self.name)
        Logger(self.name)
        assert len(self.stdlib.handlers) == 1
        assert isinstance(self.stdlib.handlers[0], logging.NullHandler)

    def test_enabling_after_disabled_adds_output_handler(self):
        Logger(self.name)
        Logger(self.name, True, "-")
        assert any(not isinstance(h, logging.NullHandler) for h in self.stdlib.handlers)

    def test_file_handler_writes_messages(self, tmp_path):
        log_file = tmp_path / "logs" / "out.log"
        logger = Logger(self.name, True, str(log_file))
        logger.child("turn").info("turn started")
        for handler in self.stdlib.handlers:
            handler.flush()
        assert "turn started" in log_file.read_text()
