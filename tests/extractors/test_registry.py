"""Tests for extension dispatch and extractor discovery."""

from __future__ import annotations

import pytest

from autodocs.errors import UnsupportedGrammarError
from autodocs.extractors import (
    ExtractorRegistry,
    GoExtractor,
    PythonExtractor,
    discover_extractors,
)
from autodocs.extractors.base import Extractor
from autodocs.models import Module
from autodocs.normalize import normalize


class _RubyExtractor(Extractor):
    grammar = "ruby"
    extensions = (".rb",)

    def extract(self, path: str, text: str) -> Module:
        return Module(path=path, grammar=self.grammar, raw_text=text)


def test_builtin_extensions_are_registered() -> None:
    registry = discover_extractors(include_plugins=False)

    assert registry.extensions == [".cjs", ".go", ".js", ".jsx", ".mjs", ".py", ".ts", ".tsx"]
    assert registry.grammars() == ["go", "javascript", "python", "typescript"]


def test_lookup_is_case_insensitive() -> None:
    registry = discover_extractors(include_plugins=False)

    assert isinstance(registry.lookup("pkg/Main.GO"), GoExtractor)
    assert isinstance(registry.for_path("tool.py"), PythonExtractor)


def test_unknown_extension_raises() -> None:
    registry = ExtractorRegistry([PythonExtractor()])

    with pytest.raises(UnsupportedGrammarError) as excinfo:
        registry.extract("script.rb", "puts 1")

    assert excinfo.value.path == "script.rb"
    assert not registry.supports("script.rb")


def test_register_rejects_non_extractors() -> None:
    registry = ExtractorRegistry()

    with pytest.raises(TypeError):
        registry.register(object())  # type: ignore[arg-type]


def test_entry_point_plugins_are_loaded(monkeypatch) -> None:
    class _EntryPoint:
        name = "ruby"

        def load(self):
            return _RubyExtractor

    monkeypatch.setattr("autodocs.extractors._iter_entry_points", lambda: [_EntryPoint()])

    registry = discover_extractors()

    assert registry.supports("app.rb")
    assert registry.extract("app.rb", "").grammar == "ruby"


@pytest.mark.parametrize(
    ("path", "text"),
    [
        ("pkg/tool.py", 'import os\n\ndef run(a: int = 1):\n    """Run."""\n    yield a\n'),
        ("pkg/main.go", "package main\n\n// Run runs.\nfunc Run(a int) error {\n    return nil\n}\n"),
        ("web/app.js", "import x from 'x';\n\n/** Go. */\nexport function go({a}, ...rest) {}\n"),
        ("web/model.ts", "export type Id = string | number;\nexport class Box { size: number = 1; }\n"),
    ],
)
def test_extraction_is_repeatable(path: str, text: str) -> None:
    registry = discover_extractors(include_plugins=False)

    first = registry.extract(path, text)
    second = registry.extract(path, text)

    assert first == second
    assert normalize(first) == normalize(second)
    assert normalize(normalize(first)) == normalize(first)
