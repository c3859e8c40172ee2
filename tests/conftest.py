"""Shared fixtures: temporary workspaces, fake providers and event capture."""

import textwrap
from pathlib import Path

import pytest

from webstir_host.report import parse_event_line


class FakeProvider:
    """Test provider that passes every file except those listed in ``failing``."""

    def __init__(self, failing=(), extra_files=(), duration_ms=5):
        self.failing = {Path(name).name for name in failing}
        self.extra_files = list(extra_files)
        self.duration_ms = duration_ms
        self.calls: list[list[str]] = []

    def _summary(self, files):
        self.calls.append(list(files))
        results = []
        for file in [*files, *self.extra_files]:
            status = "failed" if Path(file).name in self.failing else "passed"
            results.append({"file": file, "name": Path(file).name, "status": status})
        failed = sum(1 for result in results if result["status"] == "failed")
        return {
            "passed": len(results) - failed,
            "failed": failed,
            "total": len(results),
            "durationMs": self.duration_ms,
            "results": results,
        }

    def run_tests(self, files):
        return self._summary(files)


class AsyncFakeProvider(FakeProvider):
    async def run_tests(self, files):
        return self._summary(files)


class ExplodingProvider:
    def run_tests(self, files):
        raise RuntimeError("runner crashed")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's WEBSTIR_* settings out of the tests."""
    for name in ("WEBSTIR_TEST_RUNTIME", "WEBSTIR_LANGFUSE__ENABLED"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """An empty workspace root; cwd is restored after the test."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.chdir(tmp_path)
    return root


@pytest.fixture
def add_files(workspace):
    """Create files relative to the workspace root."""
    def _add(*relative_paths: str) -> list[Path]:
        created = []
        for relative in relative_paths:
            path = workspace / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("// test\n")
            created.append(path)
        return created
    return _add


@pytest.fixture
def write_module(tmp_path):
    """Write a provider module to disk and return its path."""
    modules_dir = tmp_path / "providers"
    modules_dir.mkdir(exist_ok=True)

    def _write(name: str, source: str) -> Path:
        path = modules_dir / f"{name}.py"
        path.write_text(textwrap.dedent(source))
        return path
    return _write


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def async_fake_provider():
    return AsyncFakeProvider


@pytest.fixture
def exploding_provider():
    return ExplodingProvider()


@pytest.fixture
def read_events(capsys):
    """Parse framed test host events out of captured stdout."""
    def _read():
        captured = capsys.readouterr()
        events = [parse_event_line(line) for line in captured.out.splitlines()]
        return [event for event in events if event is not None], captured
    return _read
