"""Shared helper utilities for extractor implementations."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split *text* on *separator* outside brackets and string literals.

    Empty pieces are dropped and the rest are stripped.
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    escaped = False
    for char in text:
        if quote is not None:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in {'"', "'", "`"}:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and depth > 0:
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def split_once_top_level(text: str, separator: str) -> tuple[str, Optional[str]]:
    """Split *text* at the first top-level *separator*; second item is None if absent."""
    depth = 0
    quote: Optional[str] = None
    for index, char in enumerate(text):
        if quote is not None:
            if char == quote:
                quote = None
            continue
        if char in {'"', "'", "`"}:
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}" and depth > 0:
            depth -= 1
        elif char == separator and depth == 0:
            return text[:index], text[index + 1 :]
    return text, None


def indentation(line: str) -> int:
    """Return the width of the leading whitespace of *line*."""
    return len(line) - len(line.lstrip())


def strip_block_comment(text: str) -> str:
    """Strip `/* */` markers and leading `*` gutters from a block comment."""
    body = text.strip()
    if body.startswith("/*"):
        body = body[2:]
        if body.startswith("*"):
            body = body[1:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = []
    for line in body.split("\n"):
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:].strip()
        lines.append(stripped)
    return "\n".join(lines).strip()


def strip_comment(text: str) -> str:
    """Strip any C-style comment markers from *text*."""
    stripped = text.strip()
    if stripped.startswith("//"):
        return stripped[2:].strip()
    if stripped.startswith("/*"):
        return strip_block_comment(stripped)
    return stripped


def join_comments(chunks: Sequence[str]) -> Optional[str]:
    """Join comment chunks with newlines, returning None when nothing remains."""
    joined = "\n".join(chunk for chunk in chunks if chunk).strip()
    return joined or None


_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


def leading_identifier(text: str) -> Optional[str]:
    """Return the first identifier-looking token in *text*."""
    match = _IDENTIFIER.search(text)
    return match.group(0) if match else None


__all__ = [
    "indentation",
    "join_comments",
    "leading_identifier",
    "split_once_top_level",
    "split_top_level",
    "strip_block_comment",
    "strip_comment",
]
