"""Grammar extractors and extension-based dispatch."""

from __future__ import annotations

import os
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import UnsupportedGrammarError
from ..logging import get_logger
from ..models import Module
from .base import Extractor
from .go import GoExtractor
from .python import PythonExtractor
from .tree_sitter import JavaScriptExtractor, TypeScriptExtractor

_ENTRY_POINT_GROUP = "autodocs.extractors"

_BUILTIN_FACTORIES: Dict[str, Callable[[], Extractor]] = {
    "javascript": JavaScriptExtractor,
    "typescript": TypeScriptExtractor,
    "python": PythonExtractor,
    "go": GoExtractor,
}

logger = get_logger("extractors")


class ExtractorRegistry:
    """Maps lower-cased file extensions to extractor instances."""

    def __init__(self, extractors: Iterable[Extractor] = ()) -> None:
        self._by_extension: Dict[str, Extractor] = {}
        for extractor in extractors:
            self.register(extractor)

    def register(self, extractor: Extractor) -> None:
        if not isinstance(extractor, Extractor):
            raise TypeError("Extractor registry only accepts Extractor instances")
        for extension in extractor.extensions:
            self._by_extension[extension.lower()] = extractor

    @property
    def extensions(self) -> List[str]:
        return sorted(self._by_extension)

    def grammars(self) -> List[str]:
        return sorted({extractor.grammar for extractor in self._by_extension.values()})

    def supports(self, path: str) -> bool:
        return self.lookup(path) is not None

    def lookup(self, path: str) -> Optional[Extractor]:
        _, extension = os.path.splitext(path)
        return self._by_extension.get(extension.lower())

    def for_path(self, path: str) -> Extractor:
        extractor = self.lookup(path)
        if extractor is None:
            _, extension = os.path.splitext(path)
            raise UnsupportedGrammarError(
                f"no extractor for extension '{extension or '<none>'}'", path=path
            )
        return extractor

    def extract(self, path: str, text: str) -> Module:
        return self.for_path(path).extract(path, text)


def discover_extractors(include_plugins: bool = True) -> ExtractorRegistry:
    """Return a registry holding built-in extractors plus entry point plugins.

    Plugins registered later win for extensions they share with a built-in.
    """
    registry = ExtractorRegistry(factory() for factory in _BUILTIN_FACTORIES.values())
    if not include_plugins:
        return registry

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - plugin import failures
            raise RuntimeError(f"Failed to load extractor entry point '{entry.name}': {exc}") from exc
        instance = _coerce_extractor(loaded)
        logger.debug("Registered extractor plugin %s for %s", entry.name, ", ".join(instance.extensions))
        registry.register(instance)
    return registry


def _coerce_extractor(obj: object) -> Extractor:
    if isinstance(obj, Extractor):
        return obj
    if isinstance(obj, type) and issubclass(obj, Extractor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Extractor):
            return instance
    raise TypeError("Extractor entry point must be an Extractor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


_default_registry: Optional[ExtractorRegistry] = None


def default_registry() -> ExtractorRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = discover_extractors()
    return _default_registry


def extract(path: str, text: str) -> Module:
    """Extract *text* with the extractor chosen by the extension of *path*."""
    return default_registry().extract(path, text)


__all__ = [
    "Extractor",
    "ExtractorRegistry",
    "GoExtractor",
    "JavaScriptExtractor",
    "PythonExtractor",
    "TypeScriptExtractor",
    "default_registry",
    "discover_extractors",
    "extract",
]
