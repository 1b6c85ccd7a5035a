"""FastAPI application for documenting pasted code snippets."""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Literal, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import load_config
from ..errors import AutoDocsError
from ..logging import get_logger
from ..models import SourceFile
from ..orchestrator import Orchestrator, RunReport
from ..prose import OfflineProseProvider, ProseProvider, provider_from_config
from ..renderers import FORMATS

SNIPPET_EXTENSIONS = {
    "javascript": ".js",
    "typescript": ".ts",
    "python": ".py",
    "go": ".go",
}

logger = get_logger("service")


class GenerateDocsRequest(BaseModel):
    code: str = Field(min_length=1)
    language: Literal["javascript", "typescript", "python", "go"]
    format: Literal["markdown", "html", "json"] = "markdown"
    style: Literal["concise", "detailed"] = "detailed"
    filename: Optional[str] = None


class SnippetStats(BaseModel):
    functions_count: int
    classes_count: int
    exports_count: int


class GenerateDocsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    format: str
    content: str
    markdown: str
    html: str
    json_output: str = Field(alias="json")
    processing_time_ms: int
    stats: SnippetStats
    prose_error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _offline_provider(style: str) -> ProseProvider:
    return OfflineProseProvider()


def create_app(
    provider_factory: Callable[[str], ProseProvider] = _offline_provider,
) -> FastAPI:
    """Create the FastAPI application; *provider_factory* receives the requested style."""
    app = FastAPI(title="autodocs service", version="1.0.0")

    async def get_provider_factory() -> Callable[[str], ProseProvider]:
        return provider_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/api/generate-docs", response_model=GenerateDocsResponse, response_model_by_alias=True)
    async def generate_docs(
        payload: GenerateDocsRequest,
        factory: Callable[[str], ProseProvider] = Depends(get_provider_factory),
    ) -> GenerateDocsResponse:
        name = payload.filename or f"snippet{SNIPPET_EXTENSIONS[payload.language]}"
        source = SourceFile(path=name, text=payload.code)
        orchestrator = Orchestrator(provider=factory(payload.style), workers=1, combined=False)

        started = time.perf_counter()
        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, orchestrator.run, [source], FORMATS)
        elapsed = int((time.perf_counter() - started) * 1000)
        return _build_response(payload.format, report, elapsed)

    @app.exception_handler(AutoDocsError)
    async def autodocs_error_handler(_: Any, exc: AutoDocsError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _build_response(fmt: str, report: RunReport, elapsed: int) -> GenerateDocsResponse:
    if not report.documents:
        reason = report.skipped[0].reason if report.skipped else "no documentation produced"
        raise AutoDocsError(reason, path=report.skipped[0].path if report.skipped else None)

    doc = report.documents[0]
    rendered: Dict[str, str] = {}
    for name, artifacts in report.artifacts.items():
        for artifact in artifacts:
            if not artifact.name.startswith("index."):
                rendered[name] = artifact.content
    return GenerateDocsResponse(
        format=fmt,
        content=rendered.get(fmt, ""),
        markdown=rendered.get("markdown", ""),
        html=rendered.get("html", ""),
        json_output=rendered.get("json", ""),
        processing_time_ms=elapsed,
        stats=SnippetStats(
            functions_count=len(doc.functions),
            classes_count=len(doc.types),
            exports_count=len(doc.exports),
        ),
        prose_error=doc.prose_error,
    )


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    config = load_config(Path.cwd())

    def _factory(style: str) -> ProseProvider:
        return provider_from_config(replace(config, style=style))

    logger.info("Serving autodocs on %s:%d", host, port)
    uvicorn.run(create_app(_factory), host=host, port=port)


__all__ = ["GenerateDocsRequest", "GenerateDocsResponse", "create_app", "run_service"]
