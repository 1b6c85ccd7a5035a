"""Output renderers and format lookup."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from ..errors import OutputFormatError
from .base import Artifact, Clock, Renderer, output_name
from .html import HtmlRenderer
from .json import JsonRenderer
from .markdown import MarkdownRenderer

FORMATS: tuple[str, ...] = ("markdown", "html", "json")

_ALIASES = {"md": "markdown", "htm": "html"}


def resolve_format(name: str) -> str:
    """Return the canonical format name or raise ``OutputFormatError``."""
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in FORMATS:
        supported = ", ".join(FORMATS)
        raise OutputFormatError(f"Unsupported output format '{name}' (expected one of: {supported})")
    return key


def get_renderer(
    name: str, *, template: Optional[str] = None, clock: Optional[Clock] = None
) -> Renderer:
    factories: Dict[str, Callable[[], Renderer]] = {
        "markdown": lambda: MarkdownRenderer(clock=clock),
        "html": lambda: HtmlRenderer(template, clock=clock),
        "json": lambda: JsonRenderer(clock=clock),
    }
    return factories[resolve_format(name)]()


__all__ = [
    "Artifact",
    "FORMATS",
    "HtmlRenderer",
    "JsonRenderer",
    "MarkdownRenderer",
    "Renderer",
    "get_renderer",
    "output_name",
    "resolve_format",
]
