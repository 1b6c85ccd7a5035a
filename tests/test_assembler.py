"""Tests for merging modules with generated prose."""

from __future__ import annotations

from autodocs.assembler import assemble
from autodocs.models import ExportEdge, FunctionSymbol, Module, Parameter, Property, TypeSymbol
from autodocs.prose import FunctionProse, Prose, TypeProse


def _module() -> Module:
    return Module(
        path="src/lib/math.js",
        grammar="javascript",
        raw_text="",
        symbols=(
            FunctionSymbol(name="add", parameters=(Parameter(name="a"), Parameter(name="b"))),
            TypeSymbol(
                name="Dog",
                methods=(FunctionSymbol(name="bark"),),
                properties=(Property(name="age"),),
                constructor=FunctionSymbol(name="constructor", parameters=(Parameter(name="name"),)),
            ),
        ),
        exports=(ExportEdge(name="add", kind="function"),),
    )


def test_assemble_matches_prose_by_name() -> None:
    prose = Prose(
        title="Math helpers",
        description="Arithmetic.",
        functions={
            "add": FunctionProse(
                description="Adds two numbers.",
                parameters={"a": "first", "b": "second", "c": "not declared"},
                returns="The sum.",
                example="add(1, 2)",
            ),
            "subtract": FunctionProse(description="Not in the module."),
        },
        types={
            "Dog": TypeProse(
                description="A dog.",
                methods={"bark": FunctionProse(description="Barks."), "constructor": FunctionProse(description="Makes a dog.")},
                properties={"age": "Years old.", "owner": "Unknown."},
            )
        },
        exports={"add": "Main entry point."},
        usage="Import and call.",
    )

    doc = assemble(_module(), prose)

    assert doc.title == "Math helpers"
    assert doc.description == "Arithmetic."
    assert [f.symbol.name for f in doc.functions] == ["add"]
    add = doc.functions[0]
    assert add.description == "Adds two numbers."
    assert add.parameters == {"a": "first", "b": "second"}
    assert add.returns == "The sum."
    assert add.example == "add(1, 2)"

    dog = doc.types[0]
    assert dog.description == "A dog."
    assert dog.methods[0].description == "Barks."
    assert dog.constructor is not None
    assert dog.constructor.description == "Makes a dog."
    assert dog.properties == {"age": "Years old."}
    assert doc.exports[0].description == "Main entry point."
    assert doc.usage == "Import and call."
    assert doc.prose_error is None


def test_assemble_without_prose_uses_file_name_title() -> None:
    doc = assemble(_module(), None)

    assert doc.title == "math.js"
    assert doc.description is None
    assert doc.functions[0].description is None
    assert doc.functions[0].parameters == {}
    assert doc.types[0].constructor is not None
    assert doc.types[0].constructor.description is None


def test_assemble_records_prose_error() -> None:
    doc = assemble(_module(), Prose(title="Ignored"), error="service timed out")

    assert doc.title == "math.js"
    assert doc.prose_error == "service timed out"
    assert len(doc.functions) == 1
    assert len(doc.exports) == 1
