"""Runtime dispatcher - hands each runtime group to its provider and folds the summaries."""

import os
from contextlib import nullcontext
from typing import Iterable

from .console import FramedConsole, capture_logging
from .events import EventWriter, LogEvent, ResultEvent, SummaryEvent
from .models import ALL_RUNTIMES, RunSummary, TestManifest, TestModule
from .providers.base import ProviderRegistry, TestProvider, maybe_await
from .tracing import TracingClient


def group_by_runtime(modules: Iterable[TestModule]) -> dict[str, list[TestModule]]:
    """Partition modules by runtime, keeping first-seen runtime order and module order."""
    groups: dict[str, list[TestModule]] = {}
    for module in modules:
        groups.setdefault(module.runtime, []).append(module)
    return groups


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class RuntimeDispatcher:
    """Runs one manifest against a provider registry, one runtime at a time."""

    def __init__(
        self,
        run_id: str,
        registry: ProviderRegistry,
        writer: EventWriter,
        console: FramedConsole | None = None,
        tracing: TracingClient | None = None,
    ):
        self.run_id = run_id
        self.registry = registry
        self.writer = writer
        self.console = console or FramedConsole()
        self.tracing = tracing

    async def run(self, manifest: TestManifest) -> RunSummary:
        """Dispatch every runtime group and return the folded aggregate."""
        aggregate = RunSummary.empty()

        for runtime, modules in group_by_runtime(manifest.modules).items():
            provider = self.registry.get(runtime)
            if provider is None:
                self.log(
                    "warn",
                    f"Skipping {len(modules)} test{_plural(len(modules))} "
                    f"for unsupported runtime '{runtime}'.",
                )
                continue

            summary = await self.run_with_provider(runtime, modules, provider)
            aggregate = aggregate.merge(summary)

        return aggregate

    async def run_with_provider(
        self,
        runtime: str,
        modules: list[TestModule],
        provider: TestProvider,
    ) -> RunSummary:
        files: list[str] = []
        module_by_path: dict[str, TestModule] = {}

        for module in modules:
            if not module.compiled_path:
                self.log("warn", f"Test {module.id} has no compiled output; skipping.")
                continue
            absolute = os.path.abspath(module.compiled_path)
            module_by_path[absolute] = module
            files.append(absolute)

        if not files:
            summary = RunSummary.empty()
            self.emit_summary(runtime, summary)
            return summary

        summary = await self._invoke(runtime, provider, files)

        for result in summary.results:
            absolute = os.path.abspath(result.file)
            module = module_by_path.get(absolute)
            if module is None:
                self.log(
                    "warn",
                    f"Provider for '{runtime}' reported a result for {absolute}, "
                    "which was not dispatched.",
                )
            self.writer.emit(ResultEvent(
                run_id=self.run_id,
                runtime=runtime,
                module_id=module.id if module else absolute,
                result=result,
            ))

        self.emit_summary(runtime, summary)
        return summary

    async def _invoke(self, runtime: str, provider: TestProvider, files: list[str]) -> RunSummary:
        span_context = (
            self.tracing.span(
                f"run_tests:{runtime}",
                input_data={"files": files},
                metadata={"run_id": self.run_id},
            )
            if self.tracing
            else nullcontext()
        )
        with span_context as span:
            with capture_logging(self.console):
                raw = await maybe_await(provider.run_tests(files))
            summary = RunSummary.coerce(raw)
            if self.tracing:
                self.tracing.record_output(
                    span, {"passed": summary.passed, "failed": summary.failed, "total": summary.total}
                )
        return summary

    def emit_summary(self, runtime: str, summary: RunSummary) -> None:
        self.writer.emit(SummaryEvent(run_id=self.run_id, runtime=runtime, summary=summary))

    def emit_overall(self, summary: RunSummary) -> None:
        self.emit_summary(ALL_RUNTIMES, summary)

    def log(self, level: str, message: str) -> None:
        self.writer.emit(LogEvent(run_id=self.run_id, level=level, message=message))
