"""Tests for the tree-sitter JavaScript and TypeScript extractors."""

from __future__ import annotations

import pytest

from autodocs.errors import GrammarError
from autodocs.extractors import JavaScriptExtractor, TypeScriptExtractor
from autodocs.models import ImportBinding

JS_SAMPLE = """
import React, { useState as useS } from 'react';
import * as path from 'path';

/**
 * Adds numbers.
 */
export function add(a, b = 2) {
  return a + b;
}

const double = async (x) => x * 2;

export class Dog extends Animal {
  constructor(name) {
    super(name);
  }

  bark() {
    return 'woof';
  }

  static create() {
    return new Dog('rex');
  }
}

export default add;
"""

TS_SAMPLE = """
export interface Shape extends Base {
  name: string;
  area?(): number;
}

export type Id = string | number;

export class Box {
  private readonly size: number;
  static count = 0;

  constructor(public width: number, height?: number) {}

  grow(by: number = 1): Box {
    return this;
  }
}
"""


def test_javascript_functions(extract_module) -> None:
    module = extract_module("math.js", JS_SAMPLE)

    assert [f.name for f in module.functions] == ["add", "double"]
    add, double = module.functions
    assert [(p.name, p.default, p.optional) for p in add.parameters] == [
        ("a", None, False),
        ("b", "2", True),
    ]
    assert [p.type for p in add.parameters] == ["any", "any"]
    assert add.return_type == "any"
    assert (add.start_line, add.end_line) == (7, 9)
    assert add.comments is not None and "Adds numbers." in add.comments
    assert double.is_async is True
    assert [p.name for p in double.parameters] == ["x"]


def test_javascript_class(extract_module) -> None:
    module = extract_module("math.js", JS_SAMPLE)
    dog = module.types[0]

    assert dog.name == "Dog"
    assert dog.super_type == "Animal"
    assert dog.kind == "class"
    assert dog.constructor is not None
    assert [p.name for p in dog.constructor.parameters] == ["name"]
    assert [m.name for m in dog.methods] == ["bark", "create"]
    assert dog.methods[1].is_static is True
    assert dog.methods[0].is_static is False


def test_javascript_imports(extract_module) -> None:
    module = extract_module("math.js", JS_SAMPLE)
    react, path = module.imports

    assert react.source == "react"
    assert react.bindings == (
        ImportBinding(name="React", kind="default"),
        ImportBinding(name="useS", kind="named", imported="useState"),
    )
    assert path.source == "path"
    assert path.bindings == (ImportBinding(name="path", kind="namespace"),)


def test_javascript_exports(extract_module) -> None:
    module = extract_module("math.js", JS_SAMPLE)

    assert [(e.name, e.kind) for e in module.exports] == [
        ("add", "function"),
        ("Dog", "type"),
        ("add", "default"),
    ]


def test_typescript_interface(extract_module) -> None:
    module = extract_module("shapes.ts", TS_SAMPLE)
    shape = module.types[0]

    assert shape.name == "Shape"
    assert shape.is_interface is True
    assert shape.kind == "interface"
    assert shape.super_type == "Base"
    assert [(p.name, p.type) for p in shape.properties] == [("name", "string")]
    assert [m.name for m in shape.methods] == ["area"]
    assert shape.methods[0].return_type == "number"


def test_typescript_type_alias_export(extract_module) -> None:
    module = extract_module("shapes.ts", TS_SAMPLE)
    aliases = [e for e in module.exports if e.kind == "type-alias"]

    assert [(e.name, e.type_definition) for e in aliases] == [("Id", "string | number")]
    assert [e.name for e in module.exports] == ["Shape", "Id", "Box"]


def test_typescript_class_members(extract_module) -> None:
    module = extract_module("shapes.ts", TS_SAMPLE)
    box = module.types[1]
    properties = {p.name: p for p in box.properties}

    assert properties["size"].visibility == "private"
    assert properties["size"].type == "number"
    assert properties["count"].is_static is True
    assert properties["width"].visibility == "public"
    assert "height" not in properties

    grow = box.methods[0]
    assert grow.name == "grow"
    assert grow.return_type == "Box"
    assert [(p.name, p.type, p.default) for p in grow.parameters] == [("by", "number", "1")]


def test_syntax_error_raises_grammar_error() -> None:
    with pytest.raises(GrammarError) as excinfo:
        JavaScriptExtractor().extract("broken.js", "function (a, {\n")

    assert excinfo.value.path == "broken.js"
    assert "line" in excinfo.value.message


def test_tsx_files_use_the_tsx_grammar() -> None:
    extractor = TypeScriptExtractor()

    assert extractor.language_for("view.tsx") == "tsx"
    assert extractor.language_for("model.ts") == "typescript"
    module = extractor.extract("view.tsx", "export const View = () => <div>hi</div>;\n")
    assert [f.name for f in module.functions] == ["View"]
    assert module.grammar == "typescript"


def test_javascript_destructured_and_rest_parameters(extract_module) -> None:
    source = """
    function f({a, b}, [c], ...rest) {}

    function g({a} = {}) {}
    """
    module = extract_module("params.js", source)
    f, g = module.functions

    assert [(p.name, p.optional) for p in f.parameters] == [
        ("{object}", False),
        ("[array]", False),
        ("...rest", False),
    ]
    assert [(p.name, p.default, p.optional) for p in g.parameters] == [("{object}", "{}", True)]


def test_typescript_rest_parameter_keeps_array_type(extract_module) -> None:
    module = extract_module("log.ts", "function log(level: string, ...args: string[]): void {}\n")

    assert [(p.name, p.type) for p in module.functions[0].parameters] == [
        ("level", "string"),
        ("...args", "string[]"),
    ]


def test_comment_two_blank_lines_above_is_not_attached(extract_module) -> None:
    source = """
    // Detached note.


    function detached() {}

    // Attached note.

    function attached() {}
    """
    module = extract_module("notes.js", source)
    detached, attached = module.functions

    assert detached.comments is None
    assert attached.comments == "Attached note."


def test_multi_line_type_alias_collapses_whitespace(extract_module) -> None:
    source = """
    export type Id =
      string
      | number;
    """
    module = extract_module("ids.ts", source)

    assert [(e.name, e.type_definition) for e in module.exports] == [("Id", "string | number")]
