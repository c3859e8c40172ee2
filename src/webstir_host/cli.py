"""CLI entry point for the Webstir hosts."""

import asyncio
import sys

import click
from rich.console import Console

from .module_host import run_module_host
from .report import reconstruct_run, render_report
from .test_host import run_test_host

# Flags the parent process passes that a given host does not read are ignored.
HOST_CONTEXT = {"ignore_unknown_options": True, "allow_extra_args": True}


@click.group()
@click.version_option(package_name="webstir-host")
def main() -> None:
    """Webstir hosts - run build and test providers for a workspace."""


@main.command(context_settings=HOST_CONTEXT)
@click.option("--provider", "provider_id", help="Importable module resolving to a provider registry")
@click.option("--workspace", help="Absolute path to the workspace root")
def test(provider_id: str | None, workspace: str | None) -> None:
    """Discover tests under src/**/tests/ and run them through the providers."""
    exit_code = asyncio.run(run_test_host(provider_id, workspace))
    sys.exit(exit_code)


@main.command(context_settings=HOST_CONTEXT)
@click.option("--provider", "provider_id", help="Importable module exporting a build provider")
@click.option("--workspace", help="Absolute path to the workspace root")
@click.option("--mode", help="Build mode, defaults to 'build'")
@click.option("--env", "env_entries", multiple=True, help="KEY=VALUE passed to the provider; repeatable")
@click.option("--incremental", help="'true' to request an incremental build")
def module(
    provider_id: str | None,
    workspace: str | None,
    mode: str | None,
    env_entries: tuple[str, ...],
    incremental: str | None,
) -> None:
    """Load one build provider, run its build and print the result."""
    exit_code = asyncio.run(run_module_host(
        provider_id,
        workspace,
        mode=mode,
        env_entries=env_entries,
        incremental=incremental,
    ))
    sys.exit(exit_code)


@main.command()
@click.argument("stream", type=click.File("r", encoding="utf-8"), default="-")
def report(stream) -> None:
    """Summarize a captured test host stdout stream (file or '-')."""
    console = Console()
    run = reconstruct_run(stream)
    render_report(run, console)
    if not run.succeeded:
        sys.exit(1)


def run_test_main() -> None:
    """Entry point for launching the test host as its own child process."""
    main(["test", *sys.argv[1:]])


def run_module_main() -> None:
    """Entry point for launching the module host as its own child process."""
    main(["module", *sys.argv[1:]])


if __name__ == "__main__":
    main()
