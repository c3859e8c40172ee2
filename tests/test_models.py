"""Summary aggregation and wire model tests."""

import json
from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from webstir_host.models import RunSummary


def summary(passed, failed, total, duration, files):
    return RunSummary(
        passed=passed,
        failed=failed,
        total=total,
        duration_ms=duration,
        results=[{"file": name} for name in files],
    )


class TestRunSummaryMerge:
    """Merging is field-wise addition plus ordered concatenation."""

    def test_merge_adds_counters_and_concatenates_results(self):
        merged = summary(2, 0, 2, 50, ["a", "b"]).merge(summary(0, 1, 1, 10, ["c"]))

        assert (merged.passed, merged.failed, merged.total, merged.duration_ms) == (2, 1, 3, 60)
        assert [result.file for result in merged.results] == ["a", "b", "c"]

    def test_empty_is_identity_on_both_sides(self):
        original = summary(3, 1, 4, 12.5, ["x", "y"])

        assert original.merge(RunSummary.empty()) == original
        assert RunSummary.empty().merge(original) == original

    def test_merge_is_associative(self):
        a = summary(1, 0, 1, 1, ["a"])
        b = summary(0, 2, 2, 2, ["b1", "b2"])
        c = summary(4, 0, 4, 3, ["c"])

        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_merge_leaves_operands_untouched(self):
        left = summary(1, 0, 1, 1, ["a"])
        left.merge(summary(1, 0, 1, 1, ["b"]))

        assert [result.file for result in left.results] == ["a"]


class TestRunSummaryCoerce:
    """Provider return values in the shapes providers actually produce."""

    def test_none_becomes_empty(self):
        assert RunSummary.coerce(None) == RunSummary.empty()

    def test_camel_case_mapping(self):
        result = RunSummary.coerce({"passed": 1, "failed": 0, "total": 1, "durationMs": 7, "results": []})
        assert result.duration_ms == 7

    def test_snake_case_attributes(self):
        raw = SimpleNamespace(
            passed=0,
            failed=1,
            total=1,
            duration_ms=3,
            results=[SimpleNamespace(file="/t.js", status="failed", error="boom")],
        )
        result = RunSummary.coerce(raw)
        assert result.failed == 1
        assert result.results[0].file == "/t.js"
        dumped = json.loads(result.model_dump_json(by_alias=True))
        assert dumped["results"] == [{"file": "/t.js", "status": "failed", "error": "boom"}]

    def test_dataclass_results_keep_outcome(self):
        @dataclass
        class Outcome:
            file: str
            name: str
            status: str

        @dataclass
        class Report:
            passed: int
            total: int
            results: list = field(default_factory=list)

        result = RunSummary.coerce(Report(passed=1, total=1, results=[Outcome("/a.js", "adds", "passed")]))
        dumped = json.loads(result.model_dump_json(by_alias=True))
        assert dumped["passed"] == 1
        assert dumped["results"] == [{"file": "/a.js", "name": "adds", "status": "passed"}]

    def test_results_keep_extra_fields(self):
        result = RunSummary.coerce({"results": [{"file": "/t.js", "name": "adds", "status": "passed"}]})
        dumped = json.loads(result.model_dump_json(by_alias=True))
        assert dumped["results"][0] == {"file": "/t.js", "name": "adds", "status": "passed"}
        assert dumped["durationMs"] == 0

    def test_result_without_file_is_rejected(self):
        with pytest.raises(ValidationError):
            RunSummary.coerce({"results": [{"name": "orphan"}]})
