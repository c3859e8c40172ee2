"""Test discovery - walks the workspace source tree and builds the manifest."""

import os
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Callable

from .config import LayoutConfig
from .models import TestManifest, TestModule


def discover_test_manifest(workspace_root: Path | str, layout: LayoutConfig | None = None) -> TestManifest:
    """Collect every test file under ``<root>/src/**/tests/`` sorted by id."""
    layout = layout or LayoutConfig()
    root = Path(os.path.abspath(workspace_root))
    src_root = root / layout.src_folder

    modules: list[TestModule] = []

    if src_root.is_dir():
        def on_file(file_path: Path) -> None:
            relative = file_path.relative_to(src_root)
            if not is_under_tests_folder(relative, layout) or not is_test_file(file_path, layout):
                return
            modules.append(TestModule(
                id=normalize_module_id(relative),
                runtime=infer_runtime(relative, layout),
                source_path=str(src_root / relative),
                compiled_path=str(compute_compiled_path(root, relative, layout)),
            ))

        walk_directory(src_root, on_file, layout)

    modules.sort(key=lambda module: module.id)

    return TestManifest(
        workspace_root=str(root),
        generated_at=datetime.now(timezone.utc),
        modules=modules,
    )


def walk_directory(root: Path, on_file: Callable[[Path], None], layout: LayoutConfig) -> None:
    """Depth-first walk. Unreadable directories count as empty; symlinks are ignored."""
    excluded = set(layout.excluded_directories)
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError:
        return

    for entry in entries:
        entry_path = root / entry.name
        try:
            if entry.is_dir(follow_symlinks=False):
                if entry.name in excluded or entry.name.startswith("."):
                    continue
                walk_directory(entry_path, on_file, layout)
            elif entry.is_file(follow_symlinks=False):
                on_file(entry_path)
        except OSError:
            continue


def is_test_file(file_path: Path, layout: LayoutConfig) -> bool:
    return any(file_path.name.endswith(suffix) for suffix in layout.test_suffixes)


def is_under_tests_folder(relative: Path, layout: LayoutConfig) -> bool:
    # Directory segments only; a file named "tests" does not count.
    return layout.tests_folder in relative.parts[:-1]


def infer_runtime(relative: Path, layout: LayoutConfig) -> str:
    parts = relative.parts
    if parts and parts[0] == layout.backend_folder:
        return "backend"
    return "frontend"


def compute_compiled_path(workspace_root: Path, relative: Path, layout: LayoutConfig) -> Path:
    """Swap the last extension for the compiled one and rebase under the build folder."""
    if relative.suffix:
        compiled = relative.with_suffix(layout.compiled_extension)
    else:
        compiled = relative.with_name(relative.name + layout.compiled_extension)
    return workspace_root / layout.build_folder / compiled


def normalize_module_id(relative: Path) -> str:
    return str(PurePosixPath(*relative.parts))


def normalize_runtime_filter(value: str | None) -> str | None:
    """Return "frontend" or "backend"; anything else, including "all", disables filtering."""
    if not value:
        return None
    normalized = value.strip().lower()
    if normalized in ("frontend", "backend"):
        return normalized
    return None


def apply_runtime_filter(manifest: TestManifest, runtime: str | None) -> TestManifest:
    if not runtime:
        return manifest
    modules = [module for module in manifest.modules if module.runtime == runtime]
    return manifest.model_copy(update={"modules": modules})


def runtime_filter_message(runtime: str, before_count: int, after_count: int) -> str:
    skipped = max(before_count - after_count, 0)
    noun = "test" if after_count == 1 else "tests"
    return f"Runtime filter '{runtime}' matched {after_count} {noun} ({skipped} skipped)."
