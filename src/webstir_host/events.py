"""Structured protocol events and the line framer that writes them."""

import random
import string
import sys
import time
from typing import Annotated, Any, Literal, TextIO, Union

from pydantic import Field, TypeAdapter

from .models import RunSummary, TestManifest, TestResult, WireModel

TEST_EVENT_PREFIX = "WEBSTIR_TEST "
MODULE_RESULT_PREFIX = "WEBSTIR_MODULE_RESULT "
MODULE_EVENT_PREFIX = "WEBSTIR_MODULE_EVENT "

LogLevel = Literal["info", "warn"]
ConsoleLevel = Literal["log", "info", "warn", "error"]


class StartEvent(WireModel):
    type: Literal["start"] = "start"
    run_id: str
    manifest: TestManifest


class LogEvent(WireModel):
    type: Literal["log"] = "log"
    run_id: str
    level: LogLevel
    message: str


class ResultEvent(WireModel):
    type: Literal["result"] = "result"
    run_id: str
    runtime: str
    module_id: str
    result: TestResult


class SummaryEvent(WireModel):
    type: Literal["summary"] = "summary"
    run_id: str
    runtime: str  # a runtime name or "all"
    summary: RunSummary


class ErrorEvent(WireModel):
    type: Literal["error"] = "error"
    run_id: str
    message: str
    stack: str | None = None


Event = Annotated[
    Union[StartEvent, LogEvent, ResultEvent, SummaryEvent, ErrorEvent],
    Field(discriminator="type"),
]

event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


class ConsoleEvent(WireModel):
    """A console call re-emitted on stderr."""

    type: ConsoleLevel
    message: str


class ModuleResult(WireModel):
    """The single payload written by the module host."""

    provider: Any = None
    manifest: Any = None
    artifacts: list[Any] = Field(default_factory=list)


def create_run_id() -> str:
    """Short token that tells concurrent runs apart for a human reader."""
    alphabet = string.digits + string.ascii_lowercase
    millis = int(time.time() * 1000)
    stamp = ""
    while millis:
        millis, digit = divmod(millis, 36)
        stamp = alphabet[digit] + stamp
    suffix = "".join(random.choices(alphabet, k=6))
    return f"{stamp or '0'}-{suffix}"


class EventWriter:
    """Writes framed JSON lines to stdout.

    The stream is looked up on every write so redirected or captured
    ``sys.stdout`` objects are honoured.
    """

    def __init__(self, prefix: str = TEST_EVENT_PREFIX, stream: TextIO | None = None):
        self.prefix = prefix
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def emit(self, event: WireModel) -> None:
        self.write_line(event.model_dump_json(by_alias=True))

    def write_line(self, body: str) -> None:
        stream = self.stream
        stream.write(f"{self.prefix}{body}\n")
        stream.flush()
