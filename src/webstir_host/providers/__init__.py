"""Provider interfaces and loading."""

from .base import (
    BuildOptions,
    BuildResult,
    ModuleProvider,
    ProviderRegistry,
    StaticProviderRegistry,
    TestProvider,
)
from .loader import load_provider_target, resolve_module_provider, resolve_registry

__all__ = [
    "BuildOptions",
    "BuildResult",
    "ModuleProvider",
    "ProviderRegistry",
    "StaticProviderRegistry",
    "TestProvider",
    "load_provider_target",
    "resolve_module_provider",
    "resolve_registry",
]
