# logger.py

import os, sys, logging
from typing import Optional
from functools import partial

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Logger:
    """
    Thin facade over the standard logging module.

    When logging is disabled every call is swallowed by a NullHandler, so
    components can log unconditionally.
    """

    def __init__(self, name: str, logging_enabled: bool = False, log_file: Optional[str] = None):
        self._logger = logging.getLogger(name)
        self.logging_enabled = logging_enabled
        # Named loggers are process-wide; attach handlers only once
        if logging_enabled:
            self._logger.setLevel(logging.DEBUG)
            if not any(not isinstance(h, logging.NullHandler) for h in self._logger.handlers):
                self._logger.addHandler(self._make_handler(log_file))
            self._logger.propagate = False
        elif not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

        # Dynamically create logging methods
        for level in ['debug', 'info', 'warning', 'error']:
            setattr(self, level, partial(self._log, level))

    @staticmethod
    def _make_handler(log_file: Optional[str]) -> logging.Handler:
        if log_file == "-":
            handler = logging.StreamHandler(sys.stdout)
        else:
            if not log_file:
                project_root = os.path.dirname(os.path.dirname(__file__))
                log_file = os.path.join(project_root, 'logs', 'routerline.log')
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        return handler

    def child(self, suffix: str) -> "Logger":
        """Return a logger for a sub-component sharing this logger's handlers."""
        child = Logger.__new__(Logger)
        child._logger = self._logger.getChild(suffix)
        child.logging_enabled = self.logging_enabled
        for level in ['debug', 'info', 'warning', 'error']:
            setattr(child, level, partial(child._log, level))
        return child

    def _log(self, level: str, msg: str, exc_info: Optional[bool] = None) -> None:
        getattr(self._logger, level)(msg, exc_info=exc_info)
