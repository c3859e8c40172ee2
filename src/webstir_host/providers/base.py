"""Capability interfaces that build and test providers implement."""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Mapping, Protocol, Sequence, runtime_checkable

from ..models import RunSummary


@runtime_checkable
class TestProvider(Protocol):
    """Executes compiled test files for one runtime."""

    def run_tests(self, files: Sequence[str]) -> RunSummary | Mapping[str, Any] | Awaitable[Any]:
        """
        Run every file in one batch.

        Returns:
            Counters plus a ``results`` list whose entries carry a ``file`` field
        """
        ...


@runtime_checkable
class ProviderRegistry(Protocol):
    """Lookup from runtime name to test provider."""

    def get(self, runtime: str) -> TestProvider | None:
        ...


@dataclass
class BuildOptions:
    """Arguments handed to a module provider's build operation."""

    workspace_root: str
    env: dict[str, str | None] = field(default_factory=dict)
    incremental: bool = False


@dataclass
class BuildResult:
    """What a build returns. Providers may also return a plain mapping."""

    manifest: Any
    artifacts: list[Any] | None = None


@runtime_checkable
class ModuleProvider(Protocol):
    """Builds one workspace and describes itself through ``metadata``."""

    metadata: Any

    def build(self, options: BuildOptions) -> BuildResult | Mapping[str, Any] | Awaitable[Any]:
        ...


class StaticProviderRegistry:
    """Registry map constructed by the host application at startup."""

    def __init__(self, providers: Mapping[str, TestProvider] | None = None):
        self._providers: dict[str, TestProvider] = dict(providers or {})

    def register(self, runtime: str, provider: TestProvider) -> "StaticProviderRegistry":
        self._providers[runtime] = provider
        return self

    def get(self, runtime: str) -> TestProvider | None:
        return self._providers.get(runtime)

    def runtimes(self) -> list[str]:
        return list(self._providers)


async def maybe_await(value: Any) -> Any:
    """Providers may be sync or async; await only what needs awaiting."""
    if inspect.isawaitable(value):
        return await value
    return value
