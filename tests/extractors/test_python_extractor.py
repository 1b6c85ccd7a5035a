"""Tests for the indentation-based Python extractor."""

from __future__ import annotations

from autodocs.models import ExportEdge, ImportBinding, ImportEdge, Parameter

SAMPLE = '''
import os
from typing import List, Optional as Opt


def first(a, b):
    """Add things.

    More.
    """
    return a + b


class Base:
    pass


class Child(Base):
    """A child."""

    limit: int = 3
    name = "x"

    def __init__(self, value: int) -> None:
        self.value = value
        self._cache = {}

    @staticmethod
    def build(*args, **kwargs):
        return Child(1)

    async def fetch(self):
        yield self.value

    def _hidden(self):
        pass


def gen():
    for i in range(3):
        yield i

__all__ = ["first", "Child"]
'''


def test_single_function_with_annotations_and_default(extract_module) -> None:
    module = extract_module("f.py", 'def f(x: int = 1) -> str:\n    return "a"\n')

    assert len(module.functions) == 1
    function = module.functions[0]
    assert function.name == "f"
    assert function.parameters == (Parameter(name="x", type="int", default="1", optional=True),)
    assert function.return_type == "str"
    assert (function.start_line, function.end_line) == (1, 2)


def test_symbol_count_matches_module_level_headers(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)

    assert [s.name for s in module.symbols] == ["first", "Base", "Child", "gen"]
    assert [f.name for f in module.functions] == ["first", "gen"]
    assert [t.name for t in module.types] == ["Base", "Child"]


def test_block_extent_follows_indentation(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)
    spans = {s.name: (s.start_line, s.end_line) for s in module.symbols}

    # A block ends on the line before the next header at the same indentation.
    assert spans["first"] == (5, 12)
    assert spans["Base"] == (13, 16)
    assert spans["Child"] == (17, 37)
    assert spans["gen"] == (38, 41)


def test_docstrings_become_comments(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)
    first = module.functions[0]
    child = module.types[1]

    assert first.comments == "Add things.\n\nMore."
    assert child.comments == "A child."
    assert module.types[0].comments is None


def test_class_members(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)
    child = module.types[1]

    assert child.super_type == "Base"
    assert module.types[0].super_type is None
    assert child.constructor is not None
    assert child.constructor.name == "__init__"
    assert [p.name for p in child.constructor.parameters] == ["value"]
    assert [m.name for m in child.methods] == ["build", "fetch", "_hidden"]

    build, fetch, hidden = child.methods
    assert build.is_static is True
    assert [p.name for p in build.parameters] == ["*args", "**kwargs"]
    assert fetch.is_async is True
    assert fetch.is_generator is True
    assert fetch.parameters == ()
    assert hidden.visibility == "private"
    assert build.visibility == "public"


def test_class_properties_include_instance_attributes(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)
    child = module.types[1]
    properties = {p.name: p for p in child.properties}

    assert list(properties) == ["limit", "name", "value", "_cache"]
    assert properties["limit"].type == "int"
    assert properties["name"].type == "Any"
    assert properties["_cache"].visibility == "private"


def test_generators_and_unknown_types(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)
    first, gen = module.functions

    assert gen.is_generator is True
    assert first.is_generator is False
    assert [p.type for p in first.parameters] == ["Any", "Any"]
    assert first.return_type == "Any"


def test_yield_in_docstring_or_string_is_not_a_generator(extract_module) -> None:
    source = '''
    def f():
        """Return values; never yield them."""
        return 1

    def g():
        """Collect items.

        Callers may yield control between calls.
        """
        message = "yield"  # yield
        return message
    '''
    module = extract_module("strings.py", source)

    assert [fn.is_generator for fn in module.functions] == [False, False]


def test_yield_in_nested_function_does_not_mark_outer(extract_module) -> None:
    source = """
    def outer():
        def inner():
            yield 1
        return list(inner())

    def producer():
        class Box:
            def items(self):
                yield self
        yield Box()
    """
    module = extract_module("nested_gen.py", source)
    outer, producer = module.functions

    assert outer.is_generator is False
    assert producer.is_generator is True


def test_imports_and_all_exports(extract_module) -> None:
    module = extract_module("sample.py", SAMPLE)

    assert module.imports == (
        ImportEdge(source="os", bindings=(ImportBinding(name="os", kind="default"),), start_line=1),
        ImportEdge(
            source="typing",
            bindings=(
                ImportBinding(name="List", kind="named"),
                ImportBinding(name="Opt", kind="named", imported="Optional"),
            ),
            start_line=2,
        ),
    )
    assert module.exports == (
        ExportEdge(name="first", kind="named", start_line=42),
        ExportEdge(name="Child", kind="named", start_line=42),
    )


def test_multi_line_header(extract_module) -> None:
    source = '''
    def long(
        a: int,
        b: str = "x",
    ) -> Optional[str]:
        return None
    '''
    module = extract_module("long.py", source)
    function = module.functions[0]

    assert [(p.name, p.type, p.default) for p in function.parameters] == [
        ("a", "int", None),
        ("b", "str", '"x"'),
    ]
    assert function.return_type == "Optional[str]"
    assert (function.start_line, function.end_line) == (1, 5)


def test_nested_definitions_are_not_module_symbols(extract_module) -> None:
    source = """
    def outer():
        def inner():
            return 1
        return inner
    """
    module = extract_module("nested.py", source)

    assert [s.name for s in module.symbols] == ["outer"]


def test_wildcard_and_plain_imports(extract_module) -> None:
    source = """
    import json, re as regex
    from .models import *
    from pkg import (
        alpha,
        beta as b,
    )
    """
    module = extract_module("imports.py", source)

    assert [edge.source for edge in module.imports] == ["json", "re", ".models", "pkg"]
    assert module.imports[1].bindings == (ImportBinding(name="regex", kind="default", imported="re"),)
    assert module.imports[2].bindings == (ImportBinding(name="*", kind="namespace"),)
    assert [b.name for b in module.imports[3].bindings] == ["alpha", "b"]


def test_empty_file_has_no_symbols(extract_module) -> None:
    module = extract_module("empty.py", "")

    assert module.symbols == ()
    assert module.imports == ()
    assert module.exports == ()
