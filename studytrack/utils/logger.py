"""
Logging for StudyTrack - file only, structured key/value payloads.

The terminal belongs to the dashboard, so nothing is ever written to the
console. Call setup_logging() once at startup to attach the file handler.
"""

import logging
import json
from pathlib import Path
from typing import Dict, Union

ROOT_LOGGER_NAME = 'studytrack'

_root = logging.getLogger(ROOT_LOGGER_NAME)
_root.addHandler(logging.NullHandler())


class StructuredLogger:
    """Structured logger that doesn't spam console."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    def log_action(self, level: str, message: str, **kwargs):
        """Log an action with structured data."""
        line = message
        if kwargs:
            line = f"{message} | {json.dumps(kwargs, default=str)}"

        if level == 'error':
            self.logger.error(line)
        elif level == 'warning':
            self.logger.warning(line)
        elif level == 'info':
            self.logger.info(line)
        else:
            self.logger.debug(line)

    def debug(self, message: str, **kwargs):
        self.log_action('debug', message, **kwargs)

    def info(self, message: str, **kwargs):
        self.log_action('info', message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.log_action('warning', message, **kwargs)

    def error(self, message: str, **kwargs):
        self.log_action('error', message, **kwargs)


def setup_logging(log_level: str = 'INFO', log_file: Union[str, Path, None] = 'logs/studytrack.log'):
    """
    Attach the file handler to the package logger.

    Args:
        log_level: Standard level name (DEBUG, INFO, ...)
        log_file: Destination file; parent directories are created
    """
    _root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in list(_root.handlers):
        if isinstance(handler, logging.FileHandler):
            _root.removeHandler(handler)
            handler.close()

    if log_file is None:
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    _root.addHandler(file_handler)


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str = 'app') -> StructuredLogger:
    """Get the logger instance for a component."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]
