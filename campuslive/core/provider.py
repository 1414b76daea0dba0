import datetime
import inspect
import logging.config
import typing as t

from .logging import CampusLiveLogger, install_trace_level

TimestampProvider = t.Callable[..., datetime.datetime]


class LoggingProvider(object):
    """Applies the `logging` configuration section for the lifetime of the container."""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        install_trace_level()
        logging.config.dictConfig(config)
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def get_logger(name: str | None = None, depth: int = 1) -> CampusLiveLogger:
        """Logger named `name`, or named after the calling module."""
        if name is None:
            frame = inspect.stack()[depth].frame
            name = frame.f_globals.get("__name__", "campuslive")
        return t.cast(CampusLiveLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
