"""Pipeline orchestration: extract, describe, assemble and render a batch of files."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .assembler import assemble
from .errors import (
    AutoDocsError,
    EmptyInputError,
    GrammarError,
    ProseServiceError,
    TemplateError,
    UnsupportedGrammarError,
)
from .extractors import ExtractorRegistry, default_registry
from .logging import get_logger
from .models import Documentation, SourceFile
from .normalize import normalize
from .prose import OfflineProseProvider, ProseProvider
from .renderers import Artifact, HtmlRenderer, JsonRenderer, Renderer, get_renderer, resolve_format
from .renderers.base import Clock


@dataclass(frozen=True)
class PipelineEvent:
    """Progress notification emitted while a run is in flight."""

    type: str
    stage: str
    path: Optional[str] = None
    current: int = 0
    total: int = 0
    message: str = ""


@dataclass(frozen=True)
class SkippedFile:
    path: str
    reason: str


@dataclass
class RunReport:
    """Outcome of one pipeline run."""

    attempted: int = 0
    succeeded: int = 0
    skipped: List[SkippedFile] = field(default_factory=list)
    artifacts: Dict[str, List[Artifact]] = field(default_factory=dict)
    format_errors: Dict[str, str] = field(default_factory=dict)
    render_errors: List[Tuple[str, str, str]] = field(default_factory=list)
    documents: List[Documentation] = field(default_factory=list)

    @property
    def all_artifacts(self) -> List[Artifact]:
        return [artifact for items in self.artifacts.values() for artifact in items]


EventCallback = Callable[[PipelineEvent], None]


@dataclass(frozen=True)
class _Outcome:
    path: str
    document: Optional[Documentation] = None
    skip_reason: Optional[str] = None
    prose_error: Optional[str] = None


class Orchestrator:
    """Runs extraction and prose generation per file, then renders each format."""

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        provider: ProseProvider | None = None,
        *,
        template: Optional[str] = None,
        clock: Optional[Clock] = None,
        workers: Optional[int] = None,
        combined: bool = True,
        on_event: EventCallback | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.provider = provider or OfflineProseProvider()
        self.template = template
        self.clock = clock
        self.workers = max(1, workers or os.cpu_count() or 1)
        self.combined = combined
        self._on_event = on_event
        self.logger = get_logger("orchestrator")

    def run(self, sources: Sequence[SourceFile], formats: Sequence[str]) -> RunReport:
        """Document *sources* in every requested format.

        Only an empty input set or an unknown format aborts the run; every other
        failure is recorded on the returned report.
        """
        if not sources:
            raise EmptyInputError("no source files to document")
        if not formats:
            raise EmptyInputError("no output formats requested")
        renderers = self._resolve_renderers(formats)

        total = len(sources)
        report = RunReport(attempted=total)
        self._emit("start", "run", total=total, message=f"Documenting {total} file(s)")

        outcomes = self._process(sources)
        for outcome in outcomes:
            if outcome.document is None:
                reason = outcome.skip_reason or "unknown failure"
                report.skipped.append(SkippedFile(outcome.path, reason))
                continue
            report.documents.append(outcome.document)
        report.documents.sort(key=lambda doc: doc.path)
        report.skipped.sort(key=lambda item: item.path)
        report.succeeded = len(report.documents)

        for renderer in renderers:
            self._render(renderer, report)

        self._emit(
            "complete",
            "run",
            current=total,
            total=total,
            message=(
                f"Documented {report.succeeded} of {total} file(s), "
                f"skipped {len(report.skipped)}"
            ),
        )
        return report

    def _resolve_renderers(self, formats: Sequence[str]) -> List[Renderer]:
        renderers: List[Renderer] = []
        seen: List[str] = []
        for name in formats:
            key = resolve_format(name)
            if key in seen:
                continue
            seen.append(key)
            renderers.append(get_renderer(key, template=self.template, clock=self.clock))
        return renderers

    def _process(self, sources: Sequence[SourceFile]) -> List[_Outcome]:
        total = len(sources)
        outcomes: List[_Outcome] = []
        with ThreadPoolExecutor(max_workers=min(self.workers, total)) as pool:
            futures = {pool.submit(self._document, source): source for source in sources}
            for done, future in enumerate(as_completed(futures), start=1):
                source = futures[future]
                try:
                    outcome = future.result()
                except Exception as exc:  # pragma: no cover - unexpected extractor failure
                    self._log_exception(f"Unexpected failure documenting {source.path}", exc)
                    outcome = _Outcome(path=source.path, skip_reason=str(exc) or type(exc).__name__)
                outcomes.append(outcome)
                if outcome.document is None:
                    self._emit(
                        "skip", "extract", path=outcome.path, current=done, total=total,
                        message=f"Skipped {outcome.path}: {outcome.skip_reason}",
                    )
                    continue
                if outcome.prose_error:
                    self._emit(
                        "error", "prose", path=outcome.path, current=done, total=total,
                        message=f"Prose unavailable for {outcome.path}: {outcome.prose_error}",
                    )
                self._emit(
                    "progress", "document", path=outcome.path, current=done, total=total,
                    message=f"Documented {outcome.path}",
                )
        return outcomes

    def _document(self, source: SourceFile) -> _Outcome:
        try:
            module = normalize(self.registry.extract(source.path, source.text))
        except (GrammarError, UnsupportedGrammarError) as exc:
            self.logger.debug("Skipping %s: %s", source.path, exc.message)
            return _Outcome(path=source.path, skip_reason=exc.message)

        try:
            prose = self.provider.generate(module)
        except ProseServiceError as exc:
            self.logger.warning("Prose generation failed for %s: %s", source.path, exc.message)
            return _Outcome(
                path=source.path,
                document=assemble(module, None, error=exc.message),
                prose_error=exc.message,
            )
        return _Outcome(path=source.path, document=assemble(module, prose))

    def _render(self, renderer: Renderer, report: RunReport) -> None:
        fmt = renderer.format
        if isinstance(renderer, HtmlRenderer):
            try:
                renderer.validate()
            except TemplateError as exc:
                self.logger.error("HTML rendering disabled: %s", exc.message)
                report.format_errors[fmt] = exc.message
                self._emit("error", "render", message=f"{fmt}: {exc.message}")
                return

        artifacts: List[Artifact] = []
        rendered: List[Documentation] = []
        for doc in report.documents:
            try:
                artifacts.append(renderer.render_file(doc))
            except (AutoDocsError, ValueError, TypeError, KeyError) as exc:
                self._log_exception(f"Failed to render {doc.path} as {fmt}", exc)
                report.render_errors.append((doc.path, fmt, str(exc)))
                self._emit("error", "render", path=doc.path, message=f"{fmt}: {exc}")
                continue
            rendered.append(doc)

        if rendered:
            artifacts.append(renderer.render_index(rendered))
            if self.combined and isinstance(renderer, JsonRenderer):
                artifacts.append(renderer.render_combined(rendered))
        report.artifacts[fmt] = artifacts
        self._emit("progress", "render", message=f"Rendered {len(artifacts)} {fmt} artifact(s)")

    def _emit(
        self,
        event_type: str,
        stage: str,
        *,
        path: Optional[str] = None,
        current: int = 0,
        total: int = 0,
        message: str = "",
    ) -> None:
        if self._on_event is None:
            return
        self._on_event(
            PipelineEvent(
                type=event_type, stage=stage, path=path, current=current, total=total, message=message
            )
        )

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["EventCallback", "Orchestrator", "PipelineEvent", "RunReport", "SkippedFile"]
