"""Markdown renderer."""

from __future__ import annotations

import os
import re
from typing import Dict, List, Sequence

from ..models import Documentation, DocumentedFunction, DocumentedType
from .base import (
    NO_DESCRIPTION,
    PLACEHOLDER,
    UNAVAILABLE,
    Renderer,
    badges,
    returns_value,
    sentinel_for,
    signature,
)

TOC_PLACEHOLDER = "<!-- autodocs:toc -->"


class MarkdownRenderer(Renderer):
    format = "markdown"
    extension = "md"

    def file_content(self, doc: Documentation) -> str:
        sentinel = sentinel_for(doc)
        lines: List[str] = [
            f"# {doc.title}",
            "",
            f"**File:** `{doc.path}`  ",
            f"**Language:** {doc.grammar}",
            "",
            doc.description or PLACEHOLDER,
            "",
        ]
        if doc.prose_error:
            lines.extend([f"> **Note:** {UNAVAILABLE}: {doc.prose_error}", ""])
        lines.extend([TOC_PLACEHOLDER, ""])

        if doc.functions:
            lines.extend(["## Functions", ""])
            for entry in doc.functions:
                lines.extend(self._function(entry, sentinel, doc.grammar, level=3))

        if doc.types:
            lines.extend(["## Classes", ""])
            for entry in doc.types:
                lines.extend(self._type(entry, sentinel, doc.grammar))

        if doc.exports:
            lines.extend(["## Exports", ""])
            for entry in doc.exports:
                item = f"- `{entry.export.name}` ({entry.export.kind})"
                if entry.description:
                    item += f": {entry.description}"
                lines.append(item)
                if entry.export.type_definition:
                    lines.append(f"  - Type definition: `{entry.export.type_definition}`")
            lines.append("")

        if doc.usage:
            lines.extend(["## Usage", "", doc.usage, ""])
        if doc.notes:
            lines.extend(["## Notes", "", doc.notes, ""])

        lines.extend(["---", "", f"*Generated by autodocs on {self.timestamp()}*"])
        markdown = "\n".join(lines)
        return lint(build_toc(markdown))

    def index_content(self, docs: Sequence[Documentation]) -> str:
        lines: List[str] = [
            "# Documentation Index",
            "",
            f"Generated on {self.timestamp()}",
            "",
            "## Files",
            "",
        ]
        for doc in docs:
            lines.append(f"### [{doc.title}]({self.file_name(doc)})")
            lines.append("")
            lines.append(f"**File:** `{os.path.basename(doc.path)}`  ")
            lines.append(f"**Description:** {doc.description or PLACEHOLDER}  ")
            lines.append(
                f"**Functions:** {len(doc.functions)} | "
                f"**Classes:** {len(doc.types)} | "
                f"**Exports:** {len(doc.exports)}"
            )
            lines.append("")
        return lint("\n".join(lines))

    def _function(
        self, entry: DocumentedFunction, sentinel: str, grammar: str, *, level: int
    ) -> List[str]:
        symbol = entry.symbol
        lines = [f"{'#' * level} `{symbol.name}`", ""]
        tags = badges(symbol)
        if tags:
            lines.extend([" ".join(f"`{tag}`" for tag in tags), ""])
        lines.extend([entry.description or PLACEHOLDER, ""])
        lines.extend([f"```{grammar}", signature(symbol, sentinel), "```", ""])

        if symbol.parameters:
            lines.append("**Parameters:**")
            lines.append("")
            for parameter in symbol.parameters:
                detail = f"`{parameter.type}`"
                if parameter.default is not None:
                    detail += f", default `{parameter.default}`"
                prose = entry.parameters.get(parameter.name, NO_DESCRIPTION)
                lines.append(f"- `{parameter.name}` ({detail}): {prose}")
            lines.append("")

        if returns_value(symbol):
            returns = f"**Returns:** `{symbol.return_type}`"
            if entry.returns:
                returns += f" - {entry.returns}"
            lines.extend([returns, ""])

        if entry.example:
            lines.extend(["**Example:**", "", f"```{grammar}", entry.example, "```", ""])
        return lines

    def _type(self, entry: DocumentedType, sentinel: str, grammar: str) -> List[str]:
        symbol = entry.symbol
        lines = [f"### `{symbol.name}`", ""]
        if symbol.kind != "class":
            lines.extend([f"`{symbol.kind}`", ""])
        if symbol.super_type:
            lines.extend([f"**Extends:** `{symbol.super_type}`", ""])
        lines.extend([entry.description or PLACEHOLDER, ""])

        if entry.constructor is not None:
            lines.extend(
                [
                    "**Constructor:**",
                    "",
                    f"```{grammar}",
                    signature(entry.constructor.symbol, sentinel),
                    "```",
                    "",
                ]
            )

        if symbol.properties:
            lines.extend(["**Properties:**", ""])
            for prop in symbol.properties:
                tags = []
                if prop.is_static:
                    tags.append("static")
                if prop.visibility in {"private", "protected"}:
                    tags.append(prop.visibility)
                if prop.optional:
                    tags.append("optional")
                prefix = "".join(f"`{tag}` " for tag in tags)
                prose = entry.properties.get(prop.name, NO_DESCRIPTION)
                lines.append(f"- {prefix}`{prop.name}` (`{prop.type}`): {prose}")
            lines.append("")

        if entry.methods:
            lines.extend(["**Methods:**", ""])
            for method in entry.methods:
                lines.extend(self._function(method, sentinel, grammar, level=4))
        return lines


def build_toc(markdown: str) -> str:
    """Replace the TOC placeholder with links to the level two and three headings."""
    headings: List[tuple[int, str, str]] = []
    seen: Dict[str, int] = {}
    in_code = False
    for line in markdown.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_code = not in_code
            continue
        if in_code:
            continue
        match = re.match(r"^(#{2,3})\s+(.*)$", stripped)
        if match:
            title = match.group(2).strip()
            headings.append((len(match.group(1)), title, _anchor(title, seen)))

    if not headings:
        return markdown.replace(TOC_PLACEHOLDER, "", 1)
    block = ["## Table of Contents", ""]
    for level, title, anchor in headings:
        indent = "  " * (level - 2)
        block.append(f"{indent}- [{title.replace('`', '')}](#{anchor})")
    return markdown.replace(TOC_PLACEHOLDER, "\n".join(block), 1)


def _anchor(title: str, seen: Dict[str, int]) -> str:
    slug = slugify(title)
    count = seen.get(slug, 0)
    seen[slug] = count + 1
    return slug if count == 0 else f"{slug}-{count}"


def slugify(title: str) -> str:
    """GitHub-style heading anchor: lower-case, punctuation dropped, spaces to dashes."""
    slug = title.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s", "-", slug)
    return slug


def lint(markdown: str) -> str:
    """Normalize newlines, collapse blank runs and pad headings outside code fences."""
    normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
    cleaned: List[str] = []
    in_code = False
    previous_blank = False

    for line in normalized.split("\n"):
        stripped = line if line.endswith("  ") and line.strip() else line.rstrip()
        if stripped.startswith("```"):
            in_code = not in_code
            cleaned.append(stripped)
            previous_blank = False
            continue

        if not in_code:
            if stripped.startswith("#") and cleaned and cleaned[-1] != "":
                cleaned.append("")
            if not stripped:
                if previous_blank:
                    continue
                previous_blank = True
                cleaned.append("")
                continue

        cleaned.append(stripped)
        previous_blank = False

    while cleaned and cleaned[-1] == "":
        cleaned.pop()
    return "\n".join(cleaned) + "\n"


__all__ = ["MarkdownRenderer", "build_toc", "lint", "slugify"]
