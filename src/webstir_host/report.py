"""Parent-side reader for the framed event stream."""

from dataclasses import dataclass, field
from typing import Iterable

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .events import (
    MODULE_EVENT_PREFIX,
    MODULE_RESULT_PREFIX,
    TEST_EVENT_PREFIX,
    ConsoleEvent,
    ErrorEvent,
    Event,
    LogEvent,
    ModuleResult,
    ResultEvent,
    StartEvent,
    SummaryEvent,
    event_adapter,
)
from .models import ALL_RUNTIMES, RunSummary, TestManifest


def parse_event_line(line: str) -> Event | None:
    """Parse one stdout line from the test host. Unprefixed lines are passthrough output."""
    line = line.rstrip("\r\n")
    if not line.startswith(TEST_EVENT_PREFIX):
        return None
    return event_adapter.validate_json(line[len(TEST_EVENT_PREFIX):])


def parse_module_result_line(line: str) -> ModuleResult | None:
    line = line.rstrip("\r\n")
    if not line.startswith(MODULE_RESULT_PREFIX):
        return None
    return ModuleResult.model_validate_json(line[len(MODULE_RESULT_PREFIX):])


def parse_console_event_line(line: str) -> ConsoleEvent | None:
    line = line.rstrip("\r\n")
    if not line.startswith(MODULE_EVENT_PREFIX):
        return None
    return ConsoleEvent.model_validate_json(line[len(MODULE_EVENT_PREFIX):])


@dataclass
class RunReport:
    """Run progress rebuilt from the event stream."""

    run_id: str | None = None
    manifest: TestManifest | None = None
    results: list[ResultEvent] = field(default_factory=list)
    summaries: dict[str, RunSummary] = field(default_factory=dict)
    logs: list[LogEvent] = field(default_factory=list)
    errors: list[ErrorEvent] = field(default_factory=list)
    malformed_lines: int = 0

    @property
    def overall(self) -> RunSummary | None:
        return self.summaries.get(ALL_RUNTIMES)

    @property
    def aborted(self) -> bool:
        """No final "all" summary means the run did not finish, whatever the exit code."""
        return self.overall is None

    @property
    def succeeded(self) -> bool:
        overall = self.overall
        return overall is not None and overall.failed == 0 and not self.errors


def reconstruct_run(lines: Iterable[str]) -> RunReport:
    report = RunReport()
    for line in lines:
        try:
            event = parse_event_line(line)
        except ValidationError:
            report.malformed_lines += 1
            continue
        if event is None:
            continue

        report.run_id = report.run_id or event.run_id
        if isinstance(event, StartEvent):
            report.manifest = event.manifest
        elif isinstance(event, LogEvent):
            report.logs.append(event)
        elif isinstance(event, ResultEvent):
            report.results.append(event)
        elif isinstance(event, SummaryEvent):
            report.summaries[event.runtime] = event.summary
        elif isinstance(event, ErrorEvent):
            report.errors.append(event)
        else:
            raise TypeError(f"Unhandled event type: {type(event).__name__}")
    return report


def render_report(report: RunReport, console: Console) -> None:
    """Print a per-runtime summary table."""
    table = Table(title=f"Test run {report.run_id or '-'}")
    table.add_column("Runtime", style="cyan")
    table.add_column("Passed", style="green", justify="right")
    table.add_column("Failed", style="red", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Duration (ms)", style="dim", justify="right")

    for runtime, summary in report.summaries.items():
        if runtime == ALL_RUNTIMES:
            continue
        table.add_row(runtime, str(summary.passed), str(summary.failed), str(summary.total), f"{summary.duration_ms:g}")

    overall = report.overall
    if overall is not None:
        table.add_section()
        table.add_row(
            "[bold]all[/]", str(overall.passed), str(overall.failed), str(overall.total), f"{overall.duration_ms:g}"
        )

    console.print(table)

    for log in report.logs:
        if log.level == "warn":
            console.print(f"[yellow]warn:[/] {escape(log.message)}")
    for error in report.errors:
        console.print(f"[bold red]error:[/] {escape(error.message)}")

    if report.aborted:
        console.print("[bold red]Run aborted: no final summary was reported.[/]")
    elif report.succeeded:
        console.print("[bold green]✓ All tests passed![/]")
    elif overall.failed:
        console.print(f"[red]{overall.failed} failed[/]")
    else:
        console.print("[red]Run reported errors.[/]")
