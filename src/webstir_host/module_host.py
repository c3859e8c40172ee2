"""Module host - loads one build provider, runs its build once and reports the result."""

import os
from collections.abc import Mapping
from typing import Any, Iterable

from .arguments import validate_host_args, write_fatal
from .config import load_config
from .errors import ProviderResolutionError
from .console import FramedConsole, capture_logging
from .events import MODULE_RESULT_PREFIX, EventWriter, ModuleResult
from .providers.base import BuildOptions, ModuleProvider, maybe_await
from .providers.loader import load_provider_target, resolve_module_provider
from .tracing import TracingClient

MODE_ENV_KEY = "WEBSTIR_MODULE_MODE"
DEFAULT_MODE = "build"


def parse_env_entries(entries: Iterable[str]) -> dict[str, str | None]:
    """Turn repeated ``KEY=VALUE`` entries into a map; a bare ``KEY`` maps to None."""
    env: dict[str, str | None] = {}
    for entry in entries:
        key, separator, value = entry.partition("=")
        env[key] = value if separator else None
    return env


def _field(result: Any, name: str) -> Any:
    if isinstance(result, Mapping):
        return result.get(name)
    return getattr(result, name, None)


async def run_module_host(
    provider_id: str | None,
    workspace: str | None,
    *,
    mode: str | None = None,
    env_entries: Iterable[str] = (),
    incremental: str | None = None,
    provider: ModuleProvider | None = None,
    writer: EventWriter | None = None,
    console: FramedConsole | None = None,
    tracing: TracingClient | None = None,
) -> int:
    """Invoke the provider's build and return the process exit code."""
    writer = writer or EventWriter(MODULE_RESULT_PREFIX)
    console = console or FramedConsole()

    try:
        validate_host_args(provider_id, workspace, provider_hint="package")
        os.chdir(workspace)

        if provider is None:
            target = load_provider_target(provider_id)
            provider = resolve_module_provider(target, provider_id)

        env = parse_env_entries(env_entries)
        env[MODE_ENV_KEY] = mode.lower() if isinstance(mode, str) else DEFAULT_MODE

        options = BuildOptions(
            workspace_root=workspace,
            env=env,
            incremental=incremental == "true",
        )

        tracing = tracing or TracingClient(load_config())
        try:
            with tracing.span("build", input_data={"mode": env[MODE_ENV_KEY], "incremental": options.incremental}):
                with capture_logging(console):
                    build_result = await maybe_await(provider.build(options))
        finally:
            tracing.flush()

        if build_result is None or _field(build_result, "manifest") is None:
            raise ProviderResolutionError(
                provider_id, f"Module provider '{provider_id}' returned no build manifest."
            )

        artifacts = _field(build_result, "artifacts")
        output = ModuleResult(
            provider=provider.metadata,
            manifest=_field(build_result, "manifest"),
            artifacts=list(artifacts) if artifacts is not None else [],
        )
        writer.emit(output)
    except Exception as e:
        write_fatal(e, include_traceback=True)
        return 1

    return 0
