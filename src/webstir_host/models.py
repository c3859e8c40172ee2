"""Core data models for the Webstir hosts."""

import dataclasses
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Runtime = Literal["frontend", "backend"]

ALL_RUNTIMES = "all"


def attributes_as_mapping(data: Any) -> Any:
    """Turn a provider's plain object (dataclass, namespace, instance) into a dict of its fields."""
    if data is None or isinstance(data, (Mapping, BaseModel)):
        return data
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    if hasattr(data, "__dict__"):
        return {key: value for key, value in vars(data).items() if not key.startswith("_")}
    return data


class WireModel(BaseModel):
    """Base for models that travel over the stdio protocol with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TestModule(WireModel):
    """One discovered test file."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    id: str  # slash-joined path relative to the source root
    runtime: Runtime
    source_path: str
    compiled_path: str | None


class TestManifest(WireModel):
    """Sorted discovery result for one run."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    workspace_root: str
    generated_at: datetime
    modules: list[TestModule] = Field(default_factory=list)


class TestResult(WireModel):
    """A single provider-reported test outcome. Only ``file`` is guaranteed."""

    __test__ = False
    model_config = ConfigDict(extra="allow", from_attributes=True)

    file: str

    @model_validator(mode="before")
    @classmethod
    def _keep_every_attribute(cls, data: Any) -> Any:
        return attributes_as_mapping(data)


class RunSummary(WireModel):
    """Pass/fail counters for one runtime or for the whole run."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    duration_ms: int | float = 0
    results: list[TestResult] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_provider_object(cls, data: Any) -> Any:
        return attributes_as_mapping(data)

    @classmethod
    def empty(cls) -> "RunSummary":
        return cls()

    @classmethod
    def coerce(cls, raw: Any) -> "RunSummary":
        """Normalize whatever a provider returned into a summary."""
        if raw is None:
            return cls.empty()
        if isinstance(raw, RunSummary):
            return raw
        if isinstance(raw, Mapping):
            return cls.model_validate(dict(raw))
        return cls.model_validate(raw, from_attributes=True)

    def merge(self, other: "RunSummary") -> "RunSummary":
        """Field-wise addition; ``self`` results precede ``other`` results."""
        return RunSummary(
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            total=self.total + other.total,
            duration_ms=self.duration_ms + other.duration_ms,
            results=[*self.results, *other.results],
        )
