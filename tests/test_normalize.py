"""Tests for module normalization."""

from __future__ import annotations

from autodocs.models import (
    ExportEdge,
    FunctionSymbol,
    ImportBinding,
    ImportEdge,
    Module,
    Parameter,
    Property,
    TypeSymbol,
)
from autodocs.normalize import normalize


def _raw_module(grammar: str = "go") -> Module:
    return Module(
        path="pkg/shapes.go",
        grammar=grammar,
        raw_text="package shapes\n",
        symbols=(
            FunctionSymbol(
                name=" Area ",
                parameters=(Parameter(name="scale"), Parameter(name="unit", type="  ")),
                comments="   ",
                start_line=4,
                end_line=2,
            ),
            TypeSymbol(
                name="Circle",
                properties=(Property(name="Radius"),),
                constructor=FunctionSymbol(name="NewCircle", start_line=1, end_line=3),
                super_type="",
                start_line=1,
                end_line=9,
            ),
        ),
        imports=(ImportEdge(source=" fmt ", bindings=(ImportBinding(name="fmt", imported=""),)),),
        exports=(ExportEdge(name="Circle", kind="type", type_definition=" "),),
    )


def test_normalize_fills_grammar_sentinels() -> None:
    module = normalize(_raw_module())
    area, circle = module.symbols

    assert area.name == "Area"
    assert [p.type for p in area.parameters] == ["interface{}", "interface{}"]
    assert area.return_type == "interface{}"
    assert area.visibility == "unspecified"
    assert area.comments is None
    assert circle.properties[0].type == "interface{}"
    assert circle.properties[0].visibility == "unspecified"
    assert circle.constructor is not None
    assert circle.constructor.return_type == "interface{}"
    assert circle.super_type is None


def test_normalize_uses_python_sentinel() -> None:
    module = normalize(_raw_module(grammar="python"))

    assert module.functions[0].return_type == "Any"
    assert module.functions[0].parameters[0].type == "Any"


def test_normalize_resets_impossible_spans() -> None:
    module = normalize(_raw_module())

    assert (module.functions[0].start_line, module.functions[0].end_line) == (0, 0)
    assert (module.types[0].start_line, module.types[0].end_line) == (1, 9)


def test_normalize_cleans_edges() -> None:
    module = normalize(_raw_module())

    assert module.imports[0].source == "fmt"
    assert module.imports[0].bindings[0].imported is None
    assert module.exports[0].type_definition is None


def test_normalize_is_idempotent() -> None:
    once = normalize(_raw_module())

    assert normalize(once) == once


def test_normalize_keeps_declared_types() -> None:
    module = Module(
        path="a.ts",
        grammar="typescript",
        raw_text="",
        symbols=(FunctionSymbol(name="f", return_type="string", start_line=1, end_line=1),),
    )

    assert normalize(module).functions[0].return_type == "string"
