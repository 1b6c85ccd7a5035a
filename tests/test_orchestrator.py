"""Tests for autodocs.orchestrator."""

from __future__ import annotations

import json
from http.client import IncompleteRead

import pytest

from autodocs.errors import EmptyInputError, OutputFormatError, ProseServiceError
from autodocs.extractors import discover_extractors
from autodocs.llm.runner import LLMRunner
from autodocs.models import Module, SourceFile
from autodocs.orchestrator import Orchestrator, PipelineEvent
from autodocs.prose import FunctionProse, LLMProseProvider, Prose

SOURCES = [
    SourceFile("src/math.py", 'def add(a, b):\n    """Add."""\n    return a + b\n'),
    SourceFile("src/broken.js", "function (a, {\n"),
    SourceFile("src/app.js", "export function start() {}\n"),
    SourceFile("src/script.rb", "puts 1\n"),
]


class RecordingProvider:
    """Returns canned prose and fails for configured paths."""

    def __init__(self, failing: tuple[str, ...] = ()) -> None:
        self.failing = failing
        self.calls: list[str] = []

    def generate(self, module: Module) -> Prose:
        self.calls.append(module.path)
        if module.path in self.failing:
            raise ProseServiceError("service timed out", path=module.path)
        return Prose(
            title=f"Docs for {module.path}",
            functions={f.name: FunctionProse(description=f"{f.name} helper") for f in module.functions},
        )


def _orchestrator(provider=None, **kwargs) -> Orchestrator:
    return Orchestrator(
        discover_extractors(include_plugins=False),
        provider or RecordingProvider(),
        **kwargs,
    )


def test_run_documents_supported_files_and_skips_the_rest(fixed_clock) -> None:
    provider = RecordingProvider()
    report = _orchestrator(provider, clock=fixed_clock, workers=2).run(SOURCES, ["markdown"])

    assert report.attempted == 4
    assert report.succeeded == 2
    assert [doc.path for doc in report.documents] == ["src/app.js", "src/math.py"]
    assert [item.path for item in report.skipped] == ["src/broken.js", "src/script.rb"]
    assert "syntax error" in report.skipped[0].reason or "missing" in report.skipped[0].reason
    assert report.skipped[1].reason == "no extractor for extension '.rb'"
    assert sorted(provider.calls) == ["src/app.js", "src/math.py"]
    assert [a.name for a in report.artifacts["markdown"]] == ["app.md", "math.md", "index.md"]


def test_prose_failure_keeps_structural_documentation(fixed_clock) -> None:
    provider = RecordingProvider(failing=("src/math.py",))
    report = _orchestrator(provider, clock=fixed_clock).run(SOURCES[:1], ["markdown"])

    assert report.succeeded == 1
    doc = report.documents[0]
    assert doc.prose_error == "service timed out"
    assert doc.title == "math.py"
    assert [f.symbol.name for f in doc.functions] == ["add"]
    assert "Documentation unavailable: service timed out" in report.artifacts["markdown"][0].content


def test_truncated_llm_reply_keeps_structural_documentation(fixed_clock) -> None:
    def truncated(request):
        raise IncompleteRead(b"")

    provider = LLMProseProvider(runner=LLMRunner(model="m", base_url=None, api_key=None, runner=truncated))
    report = _orchestrator(provider, clock=fixed_clock).run(SOURCES[:1], ["markdown"])

    assert report.succeeded == 1
    assert report.skipped == []
    assert "IncompleteRead" in report.documents[0].prose_error
    assert [a.name for a in report.artifacts["markdown"]] == ["math.md", "index.md"]


def test_json_run_adds_combined_artifact(fixed_clock) -> None:
    report = _orchestrator(clock=fixed_clock).run(SOURCES, ["json", "json"])

    names = [a.name for a in report.artifacts["json"]]
    assert names == ["app.json", "math.json", "index.json", "combined-documentation.json"]
    combined = json.loads(report.artifacts["json"][-1].content)
    assert combined["meta"]["totalFiles"] == 2


def test_combined_artifact_can_be_disabled(fixed_clock) -> None:
    report = _orchestrator(clock=fixed_clock, combined=False).run(SOURCES, ["json"])

    assert "combined-documentation.json" not in [a.name for a in report.artifacts["json"]]


def test_bad_template_disables_only_html(fixed_clock) -> None:
    report = _orchestrator(clock=fixed_clock, template="<html>{{TITLE}}</html>").run(
        SOURCES, ["html", "markdown"]
    )

    assert "html" not in report.artifacts
    assert "{{FUNCTIONS}}" in report.format_errors["html"]
    assert len(report.artifacts["markdown"]) == 3


def test_events_are_emitted_in_order(fixed_clock) -> None:
    events: list[PipelineEvent] = []
    provider = RecordingProvider(failing=("src/app.js",))

    _orchestrator(provider, clock=fixed_clock, workers=1, on_event=events.append).run(
        SOURCES, ["markdown"]
    )

    assert (events[0].type, events[0].stage, events[0].total) == ("start", "run", 4)
    assert (events[-1].type, events[-1].stage) == ("complete", "run")
    kinds = [(e.type, e.stage) for e in events]
    assert kinds.count(("skip", "extract")) == 2
    assert kinds.count(("error", "prose")) == 1
    assert kinds.count(("progress", "document")) == 2
    assert ("progress", "render") in kinds
    assert [e.current for e in events if e.stage in {"extract", "document"}] == sorted(
        e.current for e in events if e.stage in {"extract", "document"}
    )


@pytest.mark.parametrize(
    "sources, formats, error",
    [
        ([], ["markdown"], EmptyInputError),
        (SOURCES, [], EmptyInputError),
        (SOURCES, ["pdf"], OutputFormatError),
    ],
)
def test_run_rejects_invalid_requests(sources, formats, error) -> None:
    provider = RecordingProvider()

    with pytest.raises(error):
        _orchestrator(provider).run(sources, formats)

    assert provider.calls == []


def test_all_files_skipped_produces_no_artifacts() -> None:
    report = _orchestrator().run([SourceFile("a.rb", "")], ["markdown"])

    assert report.succeeded == 0
    assert report.artifacts == {"markdown": []}
    assert report.all_artifacts == []
