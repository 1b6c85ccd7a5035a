"""Indentation-based heuristic extractor for Python sources.

The extractor never builds a syntax tree. Headers are recognised with
regular expressions and block extents are derived purely from indentation:
a block ends at the first later non-blank line indented at or left of its
header. Mixed tabs and spaces are not reconciled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from ..models import (
    ExportEdge,
    FunctionSymbol,
    ImportBinding,
    ImportEdge,
    Module,
    Parameter,
    Property,
    Symbol,
    TypeSymbol,
)
from .base import Extractor
from .utils import indentation, split_once_top_level, split_top_level

_DEF_START = re.compile(r"^(async\s+)?def\s+([A-Za-z_]\w*)\s*\(")
_CLASS_START = re.compile(r"^class\s+([A-Za-z_]\w*)\b")
_CLASS_HEADER = re.compile(r"^class\s+([A-Za-z_]\w*)\s*(?:\((.*)\))?\s*$", re.S)
_RETURN = re.compile(r"^\s*(?:->\s*(.+?))?\s*$", re.S)
_IMPORT = re.compile(r"^import\s+(.+)$")
_FROM_IMPORT = re.compile(r"^from\s+(\S+)\s+import\s+(.+)$")
_ALL = re.compile(r"^__all__\s*\+?=\s*(.*)$")
_ATTRIBUTE = re.compile(r"^([A-Za-z_]\w*)\s*(?::\s*([^=]+?))?\s*(?:=\s*(.+))?$")
_SELF_ATTRIBUTE = re.compile(r"^self\.([A-Za-z_]\w*)\s*(?::\s*([^=]+?))?\s*=[^=]")
_YIELD = re.compile(r"\byield\b")
_DOC_MARKERS = ('"""', "'''")
_MAX_HEADER_LINES = 64


@dataclass
class _Header:
    text: str
    start: int
    end: int


class PythonExtractor(Extractor):
    """Extracts functions, classes, imports and `__all__` exports line by line."""

    grammar = "python"
    extensions = (".py",)

    def extract(self, path: str, text: str) -> Module:
        lines = text.split("\n")
        total = len(text.splitlines())
        symbols: List[Symbol] = []

        index = 0
        while index < len(lines):
            line = lines[index]
            if not line.strip() or indentation(line) != 0:
                index += 1
                continue
            stripped = line.strip()
            if _DEF_START.match(stripped):
                function = self._parse_function(lines, index, total)
                if function is not None:
                    symbols.append(function)
            elif _CLASS_START.match(stripped):
                cls = self._parse_class(lines, index, total)
                if cls is not None:
                    symbols.append(cls)
            index += 1

        return Module(
            path=path,
            grammar=self.grammar,
            raw_text=text,
            symbols=tuple(symbols),
            imports=tuple(_parse_imports(lines)),
            exports=tuple(_parse_exports(lines)),
        )

    def _parse_function(
        self,
        lines: Sequence[str],
        index: int,
        total: int,
        *,
        is_method: bool = False,
    ) -> Optional[FunctionSymbol]:
        header = _read_header(lines, index)
        if header is None:
            return None
        match = _DEF_START.match(header.text)
        if match is None:
            return None
        open_paren = match.end() - 1
        close_paren = _matching_paren(header.text, open_paren)
        if close_paren is None:
            return None
        returns = _RETURN.match(header.text[close_paren + 1 :])
        if returns is None:
            return None

        name = match.group(2)
        parameters = _parse_parameters(header.text[open_paren + 1 : close_paren])
        if is_method and parameters and parameters[0].name in {"self", "cls"}:
            parameters = parameters[1:]
        end = _block_end(lines, index, header.end, total)
        decorators = _decorators(lines, index)

        return FunctionSymbol(
            name=name,
            parameters=tuple(parameters),
            return_type=(returns.group(1) or "").strip() or None,
            is_async=bool(match.group(1)),
            is_generator=_contains_yield(lines, header.end + 1, end),
            is_static=is_method and bool({"staticmethod", "classmethod"} & decorators),
            visibility=_visibility(name),
            comments=_docstring(lines, header.end + 1, end),
            start_line=index + 1,
            end_line=end,
        )

    def _parse_class(self, lines: Sequence[str], index: int, total: int) -> Optional[TypeSymbol]:
        header = _read_header(lines, index)
        if header is None:
            return None
        match = _CLASS_HEADER.match(header.text)
        if match is None:
            return None

        bases = [
            base
            for base in split_top_level(match.group(2) or "")
            if "=" not in base and not base.startswith("*")
        ]
        end = _block_end(lines, index, header.end, total)
        docstring = _docstring(lines, header.end + 1, end)
        body_start = _skip_docstring(lines, header.end + 1, end)

        body_indent: Optional[int] = None
        methods: List[FunctionSymbol] = []
        constructor: Optional[FunctionSymbol] = None
        properties: List[Property] = []
        seen_properties: Set[str] = set()

        def _add_property(prop: Property) -> None:
            if prop.name not in seen_properties:
                seen_properties.add(prop.name)
                properties.append(prop)

        cursor = body_start
        while cursor < end:
            line = lines[cursor]
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                cursor += 1
                continue
            if body_indent is None:
                body_indent = indentation(line)
            if indentation(line) != body_indent:
                cursor += 1
                continue
            if _DEF_START.match(stripped):
                method = self._parse_function(lines, cursor, total, is_method=True)
                if method is not None:
                    if method.name == "__init__":
                        constructor = method
                        for prop in _instance_attributes(lines, cursor + 1, method.end_line):
                            _add_property(prop)
                    else:
                        methods.append(method)
                    cursor = max(cursor + 1, method.end_line)
                    continue
            elif not stripped.startswith(("@", "class ", "def ", "async ")):
                attribute = _ATTRIBUTE.match(stripped)
                if attribute and (attribute.group(2) or attribute.group(3)):
                    _add_property(
                        Property(
                            name=attribute.group(1),
                            type=(attribute.group(2) or "").strip() or None,
                            visibility=_visibility(attribute.group(1)),
                            optional=attribute.group(3) is not None,
                        )
                    )
            cursor += 1

        return TypeSymbol(
            name=match.group(1),
            methods=tuple(methods),
            properties=tuple(properties),
            constructor=constructor,
            super_type=bases[0] if bases else None,
            start_line=index + 1,
            end_line=end,
            comments=docstring,
            kind="class",
        )


def _read_header(lines: Sequence[str], start: int) -> Optional[_Header]:
    """Join physical lines until the header's top-level colon is found."""
    pieces: List[str] = []
    depth = 0
    quote: Optional[str] = None
    for offset in range(_MAX_HEADER_LINES):
        index = start + offset
        if index >= len(lines):
            return None
        line = lines[index].strip()
        for position, char in enumerate(line):
            if quote is not None:
                if char == quote:
                    quote = None
                continue
            if char in {'"', "'"}:
                quote = char
            elif char == "#":
                line = line[:position]
                break
            elif char in "([{":
                depth += 1
            elif char in ")]}":
                depth -= 1
            elif char == ":" and depth == 0:
                pieces.append(line[:position])
                return _Header(text=" ".join(p for p in pieces if p).strip(), start=start, end=index)
        quote = None
        pieces.append(line)
    return None


def _matching_paren(text: str, open_index: int) -> Optional[int]:
    depth = 0
    quote: Optional[str] = None
    for index in range(open_index, len(text)):
        char = text[index]
        if quote is not None:
            if char == quote:
                quote = None
            continue
        if char in {'"', "'"}:
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _block_end(lines: Sequence[str], start: int, header_end: int, total: int) -> int:
    """Return the 1-based last line of the block opened at *start*.

    The block ends on the line right before the first later non-blank line
    indented at or left of the header; otherwise it runs to end of file.
    """
    header_indent = indentation(lines[start])
    for index in range(header_end + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        if indentation(line) <= header_indent:
            return index
    return max(total, header_end + 1)


def _docstring(lines: Sequence[str], start: int, end: int) -> Optional[str]:
    """Capture a triple-quoted block on the first body line, if any."""
    index = _first_code_line(lines, start, end)
    if index is None:
        return None
    first = lines[index].strip()
    for prefix in ("r", "u", "R", "U"):
        if first.startswith(prefix + '"""') or first.startswith(prefix + "'''"):
            first = first[1:]
            break
    marker = next((m for m in _DOC_MARKERS if first.startswith(m)), None)
    if marker is None:
        return None

    remainder = first[len(marker) :]
    if marker in remainder:
        return remainder[: remainder.index(marker)].strip() or None

    collected = [remainder]
    for cursor in range(index + 1, len(lines)):
        line = lines[cursor]
        if marker in line:
            collected.append(line[: line.index(marker)])
            break
        collected.append(line)
    return _dedent_doc(collected) or None


def _dedent_doc(pieces: Sequence[str]) -> str:
    head = pieces[0].strip()
    rest = list(pieces[1:])
    margins = [indentation(line) for line in rest if line.strip()]
    margin = min(margins) if margins else 0
    body = [line[margin:].rstrip() for line in rest]
    return "\n".join([head, *body]).strip()


def _skip_docstring(lines: Sequence[str], start: int, end: int) -> int:
    """Return the first index after a leading docstring in the given range."""
    index = _first_code_line(lines, start, end)
    if index is None:
        return start
    first = lines[index].strip().lstrip("rRuU")
    marker = next((m for m in _DOC_MARKERS if first.startswith(m)), None)
    if marker is None:
        return start
    if marker in first[len(marker) :]:
        return index + 1
    for cursor in range(index + 1, len(lines)):
        if marker in lines[cursor]:
            return cursor + 1
    return len(lines)


def _first_code_line(lines: Sequence[str], start: int, end: int) -> Optional[int]:
    for index in range(start, min(end, len(lines))):
        if lines[index].strip():
            return index
    return None


def _decorators(lines: Sequence[str], index: int) -> Set[str]:
    names: Set[str] = set()
    cursor = index - 1
    while cursor >= 0:
        stripped = lines[cursor].strip()
        if not stripped.startswith("@"):
            break
        names.add(stripped[1:].split("(", 1)[0].split(".")[-1].strip())
        cursor -= 1
    return names


def _contains_yield(lines: Sequence[str], start: int, end: int) -> bool:
    """Report a `yield` in the function's own body.

    The docstring, string literals, comments and nested `def`/`class`
    blocks are not part of the function's own body.
    """
    open_quote: Optional[str] = None
    nested_indent: Optional[int] = None
    for index in range(_skip_docstring(lines, start, end), min(end, len(lines))):
        line = lines[index]
        in_string = open_quote is not None
        code, open_quote = _code_text(line, open_quote)
        if in_string or not line.strip():
            if _YIELD.search(code) and nested_indent is None:
                return True
            continue
        if nested_indent is not None:
            if indentation(line) > nested_indent:
                continue
            nested_indent = None
        stripped = code.strip()
        if _DEF_START.match(stripped) or _CLASS_START.match(stripped):
            nested_indent = indentation(line)
            continue
        if _YIELD.search(code):
            return True
    return False


def _code_text(line: str, open_quote: Optional[str]) -> Tuple[str, Optional[str]]:
    """Return *line* without string literals and comments.

    *open_quote* is a triple quote left open by an earlier line; the second
    item is the triple quote this line leaves open, if any.
    """
    code: List[str] = []
    quote = open_quote
    index = 0
    while index < len(line):
        if quote is not None:
            if line.startswith(quote, index):
                index += len(quote)
                quote = None
            else:
                index += 2 if line[index] == "\\" else 1
            continue
        char = line[index]
        if char == "#":
            break
        if line.startswith(_DOC_MARKERS, index):
            quote = line[index : index + 3]
            index += 3
            continue
        if char in {'"', "'"}:
            quote = char
        else:
            code.append(char)
        index += 1
    if quote is not None and len(quote) == 1:
        quote = None
    return "".join(code), quote


def _visibility(name: str) -> str:
    if name.startswith("__") and name.endswith("__"):
        return "public"
    if name.startswith("_"):
        return "private"
    return "public"


def _parse_parameters(text: str) -> List[Parameter]:
    parameters: List[Parameter] = []
    for piece in split_top_level(text):
        if piece in {"*", "/"}:
            continue
        declaration, default = split_once_top_level(piece, "=")
        name, annotation = split_once_top_level(declaration, ":")
        default_value = default.strip() if default is not None else None
        parameters.append(
            Parameter(
                name=name.strip(),
                type=(annotation or "").strip() or None,
                default=default_value or None,
                optional=default_value is not None,
            )
        )
    return parameters


def _instance_attributes(lines: Sequence[str], start: int, end: int) -> List[Property]:
    attributes: List[Property] = []
    for index in range(start, min(end, len(lines))):
        match = _SELF_ATTRIBUTE.match(lines[index].strip())
        if match:
            attributes.append(
                Property(
                    name=match.group(1),
                    type=(match.group(2) or "").strip() or None,
                    visibility=_visibility(match.group(1)),
                )
            )
    return attributes


def _parse_imports(lines: Sequence[str]) -> List[ImportEdge]:
    imports: List[ImportEdge] = []
    index = 0
    while index < len(lines):
        stripped = lines[index].split("#", 1)[0].strip()
        start = index
        index += 1

        from_match = _FROM_IMPORT.match(stripped)
        if from_match:
            names = from_match.group(2).strip()
            if names.startswith("(") and ")" not in names:
                while index < len(lines):
                    continuation = lines[index].split("#", 1)[0].strip()
                    names += " " + continuation
                    index += 1
                    if ")" in continuation:
                        break
            names = names.strip().strip("()").rstrip("\\")
            bindings = tuple(_binding(item, "named") for item in split_top_level(names))
            imports.append(
                ImportEdge(source=from_match.group(1), bindings=bindings, start_line=start + 1)
            )
            continue

        import_match = _IMPORT.match(stripped)
        if import_match:
            for item in split_top_level(import_match.group(1)):
                binding = _binding(item, "default")
                source = binding.imported or binding.name
                imports.append(ImportEdge(source=source, bindings=(binding,), start_line=start + 1))
    return imports


def _binding(item: str, kind: str) -> ImportBinding:
    item = item.strip()
    if item == "*":
        return ImportBinding(name="*", kind="namespace")
    if " as " in item:
        original, alias = item.split(" as ", 1)
        return ImportBinding(name=alias.strip(), kind=kind, imported=original.strip())
    return ImportBinding(name=item, kind=kind)


def _parse_exports(lines: Sequence[str]) -> List[ExportEdge]:
    exports: List[ExportEdge] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        match = _ALL.match(line) if indentation(line) == 0 else None
        start = index
        index += 1
        if not match:
            continue
        literal = match.group(1).split("#", 1)[0].strip()
        closer = {"[": "]", "(": ")"}.get(literal[:1])
        if closer is None:
            continue
        while closer not in literal and index < len(lines):
            literal += " " + lines[index].split("#", 1)[0].strip()
            index += 1
        inner = literal[1 : literal.rfind(closer)] if closer in literal else literal[1:]
        for item in split_top_level(inner):
            name = item.strip().strip("'\"")
            if name:
                exports.append(ExportEdge(name=name, kind="named", start_line=start + 1))
    return exports


__all__ = ["PythonExtractor"]
