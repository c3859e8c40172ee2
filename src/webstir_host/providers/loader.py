"""Load provider modules and normalize them to a registry or a module provider."""

import importlib
import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from ..errors import ProviderResolutionError
from .base import ModuleProvider, ProviderRegistry, maybe_await

REGISTRY_ATTRIBUTE = "registry"
REGISTRY_FACTORIES = ("create_provider_registry", "create_default_provider_registry")
DEFAULT_EXPORT = "default"


def load_provider_target(provider_id: str) -> Any:
    """
    Import a provider reference.

    Accepts ``pkg.module``, ``pkg.module:attribute`` or a path to a ``.py`` file.
    """
    try:
        if provider_id.endswith(".py") or Path(provider_id).is_file():
            return _load_file(Path(provider_id))

        module_name, _, attribute = provider_id.partition(":")
        target: Any = importlib.import_module(module_name)
        for part in filter(None, attribute.split(".")):
            target = getattr(target, part)
        return target
    except ProviderResolutionError:
        raise
    except Exception as e:
        raise ProviderResolutionError(
            provider_id, f"Failed to load provider '{provider_id}': {e}"
        ) from e


def _load_file(path: Path) -> ModuleType:
    path = path.resolve()
    module_name = f"webstir_provider_{path.stem.replace('-', '_').replace('.', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ProviderResolutionError(str(path), f"Cannot import provider file {path}.")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def _has_get(value: Any) -> bool:
    return (
        value is not None
        and not isinstance(value, (ModuleType, type))
        and callable(getattr(value, "get", None))
    )


async def resolve_registry(target: Any, provider_id: str) -> ProviderRegistry:
    """Normalize a loaded provider reference to an object exposing ``get(runtime)``."""
    if _has_get(target):
        return target

    registry = getattr(target, REGISTRY_ATTRIBUTE, None)
    if _has_get(registry):
        return registry

    candidates = []
    for name in REGISTRY_FACTORIES:
        factory = getattr(target, name, None)
        if callable(factory):
            candidates.append(factory)

    if callable(target) and not isinstance(target, ModuleType):
        candidates.append(target)

    default = getattr(target, DEFAULT_EXPORT, None)
    if default is not None:
        default_factories = [getattr(default, name, None) for name in REGISTRY_FACTORIES]
        if callable(default):
            candidates.append(default)
        elif any(callable(factory) for factory in default_factories):
            candidates.append(next(f for f in default_factories if callable(f)))
        elif _has_get(default):
            return default

    for factory in candidates:
        try:
            value = await maybe_await(factory())
        except Exception as e:
            raise ProviderResolutionError(
                provider_id, f"Failed to initialize provider '{provider_id}': {e}"
            ) from e
        if _has_get(value):
            return value

    raise ProviderResolutionError(
        provider_id, f"Unable to resolve provider registry from '{provider_id}'."
    )


def _carries_metadata(value: Any) -> bool:
    if value is None or isinstance(value, (ModuleType, type)):
        return False
    if inspect.isroutine(value):
        return False
    return hasattr(value, "metadata")


def resolve_module_provider(target: Any, provider_id: str) -> ModuleProvider:
    """Select the single exported object that carries build ``metadata``."""
    default = getattr(target, DEFAULT_EXPORT, None)
    if _carries_metadata(default):
        return default

    if _carries_metadata(target):
        return target

    if isinstance(target, ModuleType):
        for value in vars(target).values():
            if _carries_metadata(value):
                return value

    raise ProviderResolutionError(provider_id, f"No module provider exported by {provider_id}.")
