import logging
import typing as t

TRACE: t.Final[int] = 5


class CampusLiveLogger(logging.Logger):
    """Logger with a `trace` level below DEBUG, used for per-frame websocket logging."""

    def trace(self, msg: str, *args: t.Any, **kwargs: t.Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)


def install_trace_level() -> None:
    logging.addLevelName(TRACE, "TRACE")
    logging.setLoggerClass(CampusLiveLogger)
