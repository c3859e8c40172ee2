"""Argument checks and fatal error output shared by both hosts."""

import os
import traceback

import click

from .errors import ConfigurationError


def validate_host_args(provider_id: str | None, workspace: str | None, provider_hint: str = "module") -> None:
    if not provider_id:
        raise ConfigurationError(f"Missing required --provider <{provider_hint}> argument.")

    if not workspace:
        raise ConfigurationError("Missing required --workspace <path> argument.")

    if not os.path.isabs(workspace):
        raise ConfigurationError(f"Workspace must be an absolute path (received: {workspace}).")


def write_fatal(error: BaseException, include_traceback: bool = False) -> None:
    """Write an unframed error to stderr; no run exists yet to tag it with."""
    if include_traceback and error.__traceback__ is not None:
        message = "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    else:
        message = str(error)
    click.echo(message, err=True)
