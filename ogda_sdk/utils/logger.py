"""SDK logging.

All loggers live under the ``ogda.`` namespace and write to stdout with one
shared format, so a single :func:`set_log_level` call tunes the whole SDK.
"""
import logging
import sys
from functools import lru_cache

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class DALogger:
    """Thin wrapper over ``logging.Logger`` for DA pipeline modules.

    Keyword arguments passed to the log methods become ``extra`` fields on
    the record (e.g. ``chunk_index=3``).
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(f"ogda.{name}")
        self.logger.setLevel(level)

        # get_logger is cached, but logging.getLogger may be hit directly too
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            self.logger.addHandler(handler)

    def debug(self, msg: str, **kwargs):
        self.logger.debug(msg, extra=kwargs)

    def info(self, msg: str, **kwargs):
        self.logger.info(msg, extra=kwargs)

    def warning(self, msg: str, exc_info: bool = False, **kwargs):
        self.logger.warning(msg, exc_info=exc_info, extra=kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs):
        self.logger.error(msg, exc_info=exc_info, extra=kwargs)


@lru_cache(maxsize=None)
def get_logger(name: str, level: int = logging.INFO) -> DALogger:
    """Logger for an SDK module, e.g. ``get_logger("da.client")``."""
    return DALogger(name, level)


def set_log_level(level: int):
    """Set ``level`` on every ``ogda.*`` logger and its handlers."""
    logging.getLogger("ogda").setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("ogda."):
            sdk_logger = logging.getLogger(name)
            sdk_logger.setLevel(level)
            for handler in sdk_logger.handlers:
                handler.setLevel(level)
