"""Brace-depth heuristic extractor for Go sources."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

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
from .utils import join_comments, split_top_level

_FUNC = re.compile(r"^func(?:\s*\(([^)]*)\))?\s+([A-Za-z_]\w*)\s*(\[[^\]]*\])?\s*\(")
_IDENTIFIER = re.compile(r"[A-Za-z_]\w*")
_TYPE_KEYWORDS = {"chan", "func", "map", "struct", "interface"}
_TYPE = re.compile(r"^type\s+([A-Za-z_]\w*)\s*(\[[^\]]*\])?\s+(struct|interface)\s*\{")
_GROUPED_TYPE = re.compile(r"^([A-Za-z_]\w*)\s*(\[[^\]]*\])?\s+(struct|interface)\s*\{")
_TYPE_DEFINITION = re.compile(r"^type\s+([A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*(=)?\s*(\S.*)$")
_FIELD = re.compile(r"^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+(\S.*)$")
_INTERFACE_METHOD = re.compile(r"^([A-Za-z_]\w*)\s*\(")
_EMBEDDED = re.compile(r"^\*?[A-Za-z_][\w.]*(?:\[[^\]]*\])?$")
_SINGLE_IMPORT = re.compile(r'^import\s+(?:([A-Za-z_]\w*|\.)\s+)?"([^"]+)"')
_GROUPED_IMPORT = re.compile(r'^(?:([A-Za-z_]\w*|\.)\s+)?"([^"]+)"')


class GoExtractor(Extractor):
    """Extracts functions, structs, interfaces and imports from Go files."""

    grammar = "go"
    extensions = (".go",)

    def extract(self, path: str, text: str) -> Module:
        lines = text.split("\n")
        total = len(text.splitlines())

        functions = _parse_functions(lines, total)
        types = _parse_types(lines, total)

        by_name: Dict[str, int] = {t.name: i for i, t in enumerate(types)}
        attached: Dict[str, List[FunctionSymbol]] = {}
        for function in functions:
            if function.receiver and function.receiver in by_name:
                attached.setdefault(function.receiver, []).append(function)
        types = [
            replace(t, methods=t.methods + tuple(attached.get(t.name, ()))) for t in types
        ]

        symbols: List[Symbol] = sorted([*functions, *types], key=lambda s: s.start_line)
        exports = _exports(lines, functions, types)

        return Module(
            path=path,
            grammar=self.grammar,
            raw_text=text,
            symbols=tuple(symbols),
            imports=tuple(_parse_imports(lines)),
            exports=tuple(exports),
        )


def _parse_functions(lines: Sequence[str], total: int) -> List[FunctionSymbol]:
    functions: List[FunctionSymbol] = []
    for index, line in enumerate(lines):
        if not line.startswith("func"):
            continue
        header, body = _read_signature(lines, index)
        match = _FUNC.match(header)
        if match is None:
            continue
        open_paren = match.end() - 1
        close_paren = _matching(header, open_paren)
        if close_paren is None:
            continue

        receiver_text = (match.group(1) or "").strip()
        name = match.group(2)
        if body is None:
            end = index + 1
        else:
            end = _closing_line(lines, body[0], body[1], total)

        functions.append(
            FunctionSymbol(
                name=name,
                parameters=tuple(_parse_parameters(header[open_paren + 1 : close_paren])),
                return_type=_result_type(header[close_paren + 1 :]),
                visibility=_visibility(name),
                comments=_leading_comments(lines, index),
                start_line=index + 1,
                end_line=end,
                receiver=_receiver_type(receiver_text),
            )
        )
    return functions


def _read_signature(lines: Sequence[str], start: int) -> Tuple[str, Optional[Tuple[int, int]]]:
    """Return the header text and the (line, column) of the body's opening brace."""
    pieces: List[str] = []
    depth = 0
    for index in range(start, min(len(lines), start + 64)):
        line = _strip_line_comment(lines[index])
        for column, char in enumerate(line):
            if char in "([":
                depth += 1
            elif char in ")]":
                depth -= 1
            elif char == "{":
                prefix = line[:column].rstrip()
                if depth == 0 and not prefix.endswith(("interface", "struct")):
                    pieces.append(line[:column])
                    return " ".join(p.strip() for p in pieces).strip(), (index, column)
                depth += 1
            elif char == "}":
                depth -= 1
        pieces.append(line)
        # The body brace must share a line with the closing paren of the signature.
        if depth <= 0:
            break
    return " ".join(p.strip() for p in pieces).strip(), None


def _matching(text: str, open_index: int) -> Optional[int]:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _closing_line(lines: Sequence[str], line_index: int, column: int, total: int) -> int:
    """Return the 1-based line whose brace brings depth back to zero.

    Braces inside string, rune and raw string literals or comments are ignored.
    """
    depth = 0
    state = "code"
    for index in range(line_index, len(lines)):
        line = lines[index]
        position = column if index == line_index else 0
        while position < len(line):
            char = line[position]
            following = line[position + 1] if position + 1 < len(line) else ""
            if state == "code":
                if char == "/" and following == "/":
                    break
                if char == "/" and following == "*":
                    state = "block-comment"
                    position += 1
                elif char == '"':
                    state = "string"
                elif char == "'":
                    state = "rune"
                elif char == "`":
                    state = "raw"
                elif char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        return index + 1
            elif state == "block-comment":
                if char == "*" and following == "/":
                    state = "code"
                    position += 1
            elif state in {"string", "rune"}:
                if char == "\\":
                    position += 1
                elif (char == '"' and state == "string") or (char == "'" and state == "rune"):
                    state = "code"
            elif state == "raw" and char == "`":
                state = "code"
            position += 1
        if state in {"string", "rune"}:
            state = "code"
    return max(total, line_index + 1)


def _strip_line_comment(line: str) -> str:
    quote: Optional[str] = None
    for index, char in enumerate(line):
        if quote is not None:
            if char == quote:
                quote = None
            continue
        if char in {'"', "'", "`"}:
            quote = char
        elif char == "/" and line[index + 1 : index + 2] == "/":
            return line[:index]
    return line


def _parse_parameters(text: str) -> List[Parameter]:
    """Parse a Go parameter list, sharing grouped types (`a, b int`)."""
    pieces = split_top_level(text)
    split: List[Tuple[str, Optional[str]]] = []
    named = False
    for piece in pieces:
        parts = piece.split(None, 1)
        if (
            len(parts) == 2
            and _IDENTIFIER.fullmatch(parts[0])
            and parts[0] not in _TYPE_KEYWORDS
        ):
            split.append((parts[0], parts[1].strip()))
            named = True
        else:
            split.append((piece, None))

    if not named:
        return [Parameter(name="_", type=piece) for piece in pieces]

    parameters: List[Parameter] = []
    pending: List[str] = []
    for name, declared in split:
        if declared is None:
            pending.append(name)
            continue
        for waiting in pending:
            parameters.append(Parameter(name=waiting, type=declared))
        pending = []
        parameters.append(Parameter(name=name, type=declared))
    for waiting in pending:
        parameters.append(Parameter(name=waiting))
    return parameters


def _result_type(text: str) -> str:
    results = text.strip()
    if not results:
        return "void"
    if results.startswith("(") and results.endswith(")"):
        inner = results[1:-1].strip()
        if not inner:
            return "void"
        if len(split_top_level(inner)) > 1:
            return f"({', '.join(split_top_level(inner))})"
        return inner
    return results


def _receiver_type(receiver: str) -> str:
    if not receiver:
        return ""
    declared = receiver.split()[-1]
    declared = declared.lstrip("*")
    return declared.split("[", 1)[0]


def _visibility(name: str) -> str:
    return "public" if name[:1].isupper() else "private"


def _leading_comments(lines: Sequence[str], index: int) -> Optional[str]:
    # Only `//` lines and single-line `/* */` comments attach.
    collected: List[str] = []
    cursor = index - 1
    while cursor >= 0:
        stripped = lines[cursor].strip()
        if stripped.startswith("//"):
            collected.insert(0, stripped[2:].strip())
        elif stripped.startswith("/*") and stripped.endswith("*/"):
            collected.insert(0, stripped[2:-2].strip())
        elif stripped:
            break
        cursor -= 1
    return join_comments(collected)


def _parse_types(lines: Sequence[str], total: int) -> List[TypeSymbol]:
    types: List[TypeSymbol] = []
    in_group = False
    for index, line in enumerate(lines):
        stripped = line.strip()
        if line.startswith("type") and re.match(r"^type\s*\($", stripped):
            in_group = True
            continue
        if in_group and stripped == ")" and not line[:1].isspace():
            in_group = False
            continue

        match = _TYPE.match(stripped) if line.startswith("type") else None
        if match is None and in_group and line[:1].isspace():
            match = _GROUPED_TYPE.match(stripped)
        if match is None:
            continue

        brace = line.index("{", line.index(match.group(3)))
        end = _closing_line(lines, index, brace, total)
        body = _body_lines(lines, index, brace, end)
        name = match.group(1)
        comments = _leading_comments(lines, index)

        if match.group(3) == "struct":
            properties, embedded = _struct_fields(body)
            types.append(
                TypeSymbol(
                    name=name,
                    properties=tuple(properties),
                    super_type=embedded[0] if embedded else None,
                    start_line=index + 1,
                    end_line=end,
                    comments=comments,
                    kind="struct",
                )
            )
        else:
            methods, embedded = _interface_members(body)
            types.append(
                TypeSymbol(
                    name=name,
                    methods=tuple(methods),
                    super_type=embedded[0] if embedded else None,
                    is_interface=True,
                    start_line=index + 1,
                    end_line=end,
                    comments=comments,
                    kind="interface",
                )
            )
    return types


def _body_lines(
    lines: Sequence[str], start: int, brace: int, end: int
) -> List[Tuple[int, str]]:
    """Return (line index, text) pairs directly inside the braces at depth one."""
    collected: List[Tuple[int, str]] = []
    tail = lines[start][brace + 1 :]
    if "}" in tail:
        inner = tail[: tail.rindex("}")]
        return [(start, part) for part in inner.split(";") if part.strip()]
    depth = 1
    for index in range(start + 1, min(end, len(lines))):
        line = lines[index]
        code = _strip_line_comment(line)
        if depth == 1 and code.strip() != "}":
            collected.append((index, line))
        depth += code.count("{") - code.count("}")
        if depth <= 0:
            break
    return collected


def _split_field(line: str) -> Tuple[str, Optional[str]]:
    code = _strip_line_comment(line)
    comment = line[len(code) :].strip()
    comment_text = comment[2:].strip() if comment.startswith("//") else None
    code = re.sub(r"`[^`]*`\s*$", "", code.strip()).strip()
    return code, comment_text or None


def _struct_fields(body: Sequence[Tuple[int, str]]) -> Tuple[List[Property], List[str]]:
    properties: List[Property] = []
    embedded: List[str] = []
    for _, line in body:
        code, comment = _split_field(line)
        if not code or code.startswith(("/*", "}")):
            continue
        if _EMBEDDED.match(code):
            embedded.append(code.lstrip("*"))
            continue
        match = _FIELD.match(code)
        if match is None:
            continue
        field_type = match.group(2).strip()
        for name in split_top_level(match.group(1)):
            properties.append(
                Property(
                    name=name,
                    type=field_type,
                    visibility=_visibility(name),
                    comments=comment,
                )
            )
    return properties, embedded


def _interface_members(
    body: Sequence[Tuple[int, str]],
) -> Tuple[List[FunctionSymbol], List[str]]:
    methods: List[FunctionSymbol] = []
    embedded: List[str] = []
    for index, line in body:
        code, comment = _split_field(line)
        if not code:
            continue
        match = _INTERFACE_METHOD.match(code)
        if match is not None:
            close = _matching(code, match.end() - 1)
            if close is None:
                continue
            line_number = index + 1
            methods.append(
                FunctionSymbol(
                    name=match.group(1),
                    parameters=tuple(_parse_parameters(code[match.end() : close])),
                    return_type=_result_type(code[close + 1 :]),
                    visibility=_visibility(match.group(1)),
                    comments=comment,
                    start_line=line_number,
                    end_line=line_number,
                )
            )
        elif _EMBEDDED.match(code):
            embedded.append(code)
    return methods, embedded


def _exports(
    lines: Sequence[str], functions: Sequence[FunctionSymbol], types: Sequence[TypeSymbol]
) -> List[ExportEdge]:
    edges: List[ExportEdge] = []
    for function in functions:
        if not function.receiver and function.name[:1].isupper():
            edges.append(ExportEdge(name=function.name, kind="function", start_line=function.start_line))
    for declared in types:
        if declared.name[:1].isupper():
            edges.append(ExportEdge(name=declared.name, kind="type", start_line=declared.start_line))
    for index, line in enumerate(lines):
        if not line.startswith("type"):
            continue
        match = _TYPE_DEFINITION.match(_strip_line_comment(line).strip())
        if match is None or match.group(3).startswith(("struct", "interface", "(")):
            continue
        if match.group(1)[:1].isupper():
            edges.append(
                ExportEdge(
                    name=match.group(1),
                    kind="type-alias",
                    type_definition=match.group(3).strip(),
                    start_line=index + 1,
                )
            )
    return sorted(edges, key=lambda edge: edge.start_line)


def _parse_imports(lines: Sequence[str]) -> List[ImportEdge]:
    imports: List[ImportEdge] = []
    in_block = False
    for index, line in enumerate(lines):
        stripped = _strip_line_comment(line).strip()
        if not in_block:
            if re.match(r"^import\s*\($", stripped):
                in_block = True
                continue
            match = _SINGLE_IMPORT.match(stripped)
        else:
            if stripped == ")":
                in_block = False
                continue
            match = _GROUPED_IMPORT.match(stripped)
        if match is None:
            continue
        alias, source = match.group(1), match.group(2)
        imports.append(
            ImportEdge(source=source, bindings=(_import_binding(alias, source),), start_line=index + 1)
        )
    return imports


def _import_binding(alias: Optional[str], source: str) -> ImportBinding:
    if alias == ".":
        return ImportBinding(name=".", kind="namespace", imported=source)
    if alias:
        return ImportBinding(name=alias, kind="default", imported=source)
    return ImportBinding(name=source.rsplit("/", 1)[-1], kind="default")


__all__ = ["GoExtractor"]
