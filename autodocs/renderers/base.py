"""Shared renderer contract and formatting helpers."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from ..models import UNKNOWN_TYPES, Documentation, FunctionSymbol, Parameter

PLACEHOLDER = "No description available"
NO_DESCRIPTION = "No description"
UNAVAILABLE = "Documentation unavailable"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Artifact:
    """Rendered text plus the file name it should be stored under."""

    name: str
    content: str


def output_name(path: str, extension: str) -> str:
    """Return ``<base name without extension>.<extension>`` for *path*."""
    base, _ = os.path.splitext(os.path.basename(path))
    return f"{base}.{extension}"


def sentinel_for(doc: Documentation) -> str:
    return UNKNOWN_TYPES.get(doc.grammar, "any")


def format_parameter(parameter: Parameter, sentinel: str) -> str:
    text = parameter.name
    if parameter.type and parameter.type != sentinel:
        text += f": {parameter.type}"
    if parameter.default is not None:
        text += f" = {parameter.default}"
    return text


def signature(function: FunctionSymbol, sentinel: str) -> str:
    params = ", ".join(format_parameter(p, sentinel) for p in function.parameters)
    text = f"{function.name}({params})"
    if function.return_type and function.return_type != sentinel:
        text += f" -> {function.return_type}"
    return text


def badges(function: FunctionSymbol) -> List[str]:
    tags: List[str] = []
    if function.is_async:
        tags.append("async")
    if function.is_generator:
        tags.append("generator")
    if function.is_static:
        tags.append("static")
    if function.visibility in {"private", "protected"}:
        tags.append(function.visibility)
    return tags


def returns_value(function: FunctionSymbol) -> bool:
    return bool(function.return_type) and function.return_type != "void"


class Renderer(ABC):
    """Pure text emitter for one output format."""

    format: str = ""
    extension: str = ""

    def __init__(self, *, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now

    def timestamp(self) -> str:
        return self._clock().isoformat()

    def file_name(self, doc: Documentation) -> str:
        return output_name(doc.path, self.extension)

    def render_file(self, doc: Documentation) -> Artifact:
        return Artifact(name=self.file_name(doc), content=self.file_content(doc))

    def render_index(self, docs: Sequence[Documentation]) -> Artifact:
        return Artifact(name=f"index.{self.extension}", content=self.index_content(docs))

    @abstractmethod
    def file_content(self, doc: Documentation) -> str:
        """Render one per-file artifact."""

    @abstractmethod
    def index_content(self, docs: Sequence[Documentation]) -> str:
        """Render the index, keeping the caller's order."""


__all__ = [
    "Artifact",
    "Clock",
    "NO_DESCRIPTION",
    "PLACEHOLDER",
    "Renderer",
    "UNAVAILABLE",
    "badges",
    "format_parameter",
    "output_name",
    "returns_value",
    "sentinel_for",
    "signature",
    "utc_now",
]
