"""Log events — stdlib logging plus in-process listeners.

Every dispatch event goes to the ``kestrel.server`` logger and is also
fanned out to listeners registered with ``App.on()``::

    app.on("warn", lambda message, data: sentry.capture(data.get("e")))

Console output is opt-in per process via ``configure_logging()``; the App
calls it once at startup with ``AppConfig.console_log`` and calls
``shutdown_logging()`` when the server shuts down.
"""

import logging
import sys
import threading
from datetime import UTC, datetime
from typing import Any

from kestrel._internal.types import LogListener
from kestrel.errors import ConfigurationError

logger = logging.getLogger("kestrel.server")

ERROR = "error"
WARN = "warn"
INFO = "info"

LEVELS: dict[str, int] = {
    ERROR: logging.ERROR,
    WARN: logging.WARNING,
    INFO: logging.INFO,
}


class EventLog:
    """Structured log emitter with per-level listeners.

    A listener that raises is reported on the logger and skipped; the
    remaining listeners still run and the caller never sees the error.

    Thread safety:
        Listener registration takes a lock; emission iterates over a
        snapshot so listeners may be added while requests are in flight.
    """

    __slots__ = ("_listeners", "_lock", "_logger")

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger
        self._lock = threading.Lock()
        self._listeners: dict[str, tuple[LogListener, ...]] = {level: () for level in LEVELS}

    def on(self, level: str, listener: LogListener) -> None:
        """Call *listener(message, data)* for every event of *level*."""
        if level not in LEVELS:
            msg = f"Unknown log level {level!r}; expected one of {sorted(LEVELS)}"
            raise ConfigurationError(msg)
        with self._lock:
            self._listeners[level] = (*self._listeners[level], listener)

    def error(self, message: str, **data: Any) -> None:
        self._emit(ERROR, message, data)

    def warn(self, message: str, **data: Any) -> None:
        self._emit(WARN, message, data)

    def info(self, message: str, **data: Any) -> None:
        self._emit(INFO, message, data)

    def _emit(self, level: str, message: str, data: dict[str, Any]) -> None:
        exc = data.get("e")
        self._logger.log(
            LEVELS[level],
            message,
            exc_info=exc if isinstance(exc, BaseException) else None,
            extra={"data": data},
        )
        for listener in self._listeners[level]:
            try:
                listener(message, data)
            except Exception:
                self._logger.exception(
                    "Log listener %r failed on %s event %r",
                    listener,
                    level,
                    message,
                )


class ConsoleFormatter(logging.Formatter):
    """``LEVEL     2026-01-01T12:00:00.000Z     message {data}``"""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")
        line = f"{record.levelname:<9} {stamp.replace('+00:00', 'Z')}     {record.getMessage()}"
        data = getattr(record, "data", None)
        if data:
            shown = {key: value for key, value in data.items() if key != "e"}
            if shown:
                line = f"{line} {shown!r}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_console_handler: logging.Handler | None = None
_console_lock = threading.Lock()


def console_level(setting: str | bool) -> int | None:
    """Translate an ``AppConfig.console_log`` value to a logging level.

    ``True`` shows everything, ``False`` disables console output.
    """
    if setting is True:
        return logging.DEBUG
    if setting is False:
        return None
    try:
        return LEVELS[setting]
    except KeyError:
        msg = f"console_log must be one of {sorted(LEVELS)}, True or False, got {setting!r}"
        raise ConfigurationError(msg) from None


def configure_logging(setting: str | bool = INFO) -> None:
    """Install (or replace) the console handler on the ``kestrel`` logger."""
    global _console_handler
    level = console_level(setting)
    root = logging.getLogger("kestrel")
    with _console_lock:
        if _console_handler is not None:
            root.removeHandler(_console_handler)
            _console_handler = None
        if level is None:
            return
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ConsoleFormatter())
        handler.setLevel(level)
        root.addHandler(handler)
        root.setLevel(min(level, root.level or logging.WARNING))
        _console_handler = handler


def shutdown_logging() -> None:
    """Flush and detach the console handler."""
    global _console_handler
    with _console_lock:
        if _console_handler is None:
            return
        _console_handler.flush()
        logging.getLogger("kestrel").removeHandler(_console_handler)
        _console_handler.close()
        _console_handler = None
