"""Console that keeps ordinary output intact while mirroring it as framed stderr events."""

import json
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, TextIO

from .events import MODULE_EVENT_PREFIX, ConsoleEvent, ConsoleLevel


def stringify(value: Any) -> str:
    """Render a logged value as text. Never raises."""
    if isinstance(value, str):
        return value

    try:
        return json.dumps(value)
    except (TypeError, ValueError, OverflowError, RecursionError):
        pass

    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


class FramedConsole:
    """Logger passed to host components and bridged to provider logging.

    Every call is framed on stderr as
    ``WEBSTIR_MODULE_EVENT {"type": ..., "message": ...}`` and then written
    verbatim to the real stream (stdout for log/info, stderr for warn/error).
    """

    def __init__(self, event_stream: TextIO | None = None):
        self._event_stream = event_stream

    @property
    def event_stream(self) -> TextIO:
        return self._event_stream or sys.stderr

    def log(self, *values: Any) -> None:
        self._forward("log", sys.stdout, values)

    def info(self, *values: Any) -> None:
        self._forward("info", sys.stdout, values)

    def warn(self, *values: Any) -> None:
        self._forward("warn", sys.stderr, values)

    def error(self, *values: Any) -> None:
        self._forward("error", sys.stderr, values)

    def _forward(self, level: ConsoleLevel, target: TextIO, values: tuple[Any, ...]) -> None:
        message = " ".join(stringify(value) for value in values)

        payload = ConsoleEvent(type=level, message=message)
        stream = self.event_stream
        stream.write(f"{MODULE_EVENT_PREFIX}{payload.model_dump_json()}\n")
        stream.flush()

        # Raw write: tabs and control characters reach the real stream untouched.
        target.write(message + "\n")
        target.flush()


class FramedLogHandler(logging.Handler):
    """Routes ``logging`` records from provider code through a FramedConsole."""

    def __init__(self, console: FramedConsole, level: int = logging.NOTSET):
        super().__init__(level)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                self.console.error(message)
            elif record.levelno >= logging.WARNING:
                self.console.warn(message)
            elif record.levelno >= logging.INFO:
                self.console.info(message)
            else:
                self.console.log(message)
        except Exception:
            self.handleError(record)


@contextmanager
def capture_logging(console: FramedConsole) -> Iterator[FramedLogHandler]:
    """Attach a FramedLogHandler to the root logger for the duration of a provider call.

    The root level is lowered to DEBUG meanwhile so unconfigured provider
    loggers still reach the handler, then restored.
    """
    handler = FramedLogHandler(console)
    root = logging.getLogger()
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    try:
        yield handler
    finally:
        root.removeHandler(handler)
        root.setLevel(previous_level)
