"""HTML renderer based on literal ``{{SLOT}}`` substitution."""

from __future__ import annotations

import os
import re
from html import escape
from typing import Dict, List, Optional, Sequence

from ..errors import TemplateError
from ..models import Documentation, DocumentedExport, DocumentedFunction, DocumentedType
from .base import (
    NO_DESCRIPTION,
    PLACEHOLDER,
    UNAVAILABLE,
    Clock,
    Renderer,
    badges,
    returns_value,
    sentinel_for,
    signature,
)

SLOTS: tuple[str, ...] = (
    "TITLE",
    "FILE_PATH",
    "LANGUAGE",
    "DESCRIPTION",
    "TABLE_OF_CONTENTS",
    "FUNCTIONS",
    "CLASSES",
    "EXPORTS",
    "USAGE",
    "NOTES",
    "GENERATED_DATE",
)
OPTIONAL_SLOTS = frozenset({"FILE_PATH", "LANGUAGE", "GENERATED_DATE"})
REQUIRED_SLOTS: tuple[str, ...] = tuple(slot for slot in SLOTS if slot not in OPTIONAL_SLOTS)

_SLOT_PATTERN = re.compile(r"\{\{([A-Z_]+)\}\}")

_STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; background: #f8f9fa; }
        .container { max-width: 1200px; margin: 0 auto; padding: 20px; background: white; min-height: 100vh; }
        .header { border-bottom: 2px solid #e9ecef; padding-bottom: 20px; margin-bottom: 30px; }
        .header h1 { color: #2c3e50; margin-bottom: 10px; font-size: 2.5em; }
        .header .meta { color: #6c757d; font-size: 0.9em; }
        .description { background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 30px; border-left: 4px solid #007bff; }
        .unavailable { background: #fff3cd; padding: 12px 20px; border-radius: 8px; margin-bottom: 30px; }
        .toc { border: 1px solid #e9ecef; border-radius: 8px; padding: 20px; margin-bottom: 30px; }
        .toc ul { list-style: none; }
        .toc a { color: #007bff; text-decoration: none; }
        .section { margin-bottom: 40px; }
        .section h2 { color: #2c3e50; margin-bottom: 20px; padding-bottom: 10px; border-bottom: 1px solid #e9ecef; }
        .function, .class, .export { border: 1px solid #e9ecef; border-radius: 8px; padding: 25px; margin-bottom: 25px; }
        .function h3, .class h3, .export h3 { color: #2c3e50; margin-bottom: 15px; font-family: 'Monaco', 'Menlo', monospace; }
        .signature, .example { background: #f8f9fa; border: 1px solid #e9ecef; border-radius: 6px; padding: 15px; margin: 15px 0; font-family: 'Monaco', 'Menlo', monospace; overflow-x: auto; }
        .param { background: #f8f9fa; border-left: 3px solid #28a745; padding: 10px 15px; margin-bottom: 8px; }
        .param-name { font-weight: bold; font-family: 'Monaco', 'Menlo', monospace; }
        .param-type { color: #6f42c1; font-family: 'Monaco', 'Menlo', monospace; }
        .method { border-left: 3px solid #17a2b8; padding-left: 20px; margin-bottom: 20px; }
        .footer { margin-top: 50px; padding-top: 20px; border-top: 1px solid #e9ecef; text-align: center; color: #6c757d; }
        code { background: #f8f9fa; color: #e83e8c; padding: 2px 6px; border-radius: 3px; }
        .badge { display: inline-block; padding: 3px 8px; font-size: 0.75em; font-weight: bold; border-radius: 12px; text-transform: uppercase; margin-right: 8px; }
        .badge-async { background: #28a745; color: white; }
        .badge-generator { background: #6f42c1; color: white; }
        .badge-static { background: #17a2b8; color: white; }
        .badge-private { background: #dc3545; color: white; }
        .badge-protected { background: #ffc107; color: #212529; }
"""

DEFAULT_TEMPLATE = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{{{TITLE}}}} - Documentation</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{{{{TITLE}}}}</h1>
            <div class="meta">
                <strong>File:</strong> <code>{{{{FILE_PATH}}}}</code><br>
                <strong>Language:</strong> {{{{LANGUAGE}}}}
            </div>
        </div>
        <div class="description">{{{{DESCRIPTION}}}}</div>
        {{{{TABLE_OF_CONTENTS}}}}
        {{{{FUNCTIONS}}}}
        {{{{CLASSES}}}}
        {{{{EXPORTS}}}}
        {{{{USAGE}}}}
        {{{{NOTES}}}}
        <div class="footer">Generated by autodocs on {{{{GENERATED_DATE}}}}</div>
    </div>
</body>
</html>
"""


def missing_slots(template: str) -> List[str]:
    present = set(_SLOT_PATTERN.findall(template))
    return [slot for slot in REQUIRED_SLOTS if slot not in present]


def substitute(template: str, values: Dict[str, str]) -> str:
    """Replace every known ``{{SLOT}}`` in one pass; unknown markers stay as written."""

    def _replace(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    return _SLOT_PATTERN.sub(_replace, template)


class HtmlRenderer(Renderer):
    format = "html"
    extension = "html"

    def __init__(self, template: Optional[str] = None, *, clock: Optional[Clock] = None) -> None:
        super().__init__(clock=clock)
        self.template = template if template is not None else DEFAULT_TEMPLATE

    def validate(self) -> None:
        """Raise ``TemplateError`` when the template lacks a content slot."""
        missing = missing_slots(self.template)
        if missing:
            markers = ", ".join("{{%s}}" % slot for slot in missing)
            raise TemplateError(f"HTML template is missing required slots: {markers}")

    def file_content(self, doc: Documentation) -> str:
        self.validate()
        sentinel = sentinel_for(doc)
        description = f"<p>{_text(doc.description or PLACEHOLDER)}</p>"
        if doc.prose_error:
            description += (
                f'<p class="unavailable"><strong>{UNAVAILABLE}:</strong> '
                f"{_text(doc.prose_error)}</p>"
            )
        values = {
            "TITLE": _text(doc.title),
            "FILE_PATH": _text(doc.path),
            "LANGUAGE": _text(doc.grammar),
            "DESCRIPTION": description,
            "TABLE_OF_CONTENTS": self._toc(doc),
            "FUNCTIONS": self._section(
                "Functions", [self._function(f, sentinel) for f in doc.functions]
            ),
            "CLASSES": self._section("Classes", [self._type(t, sentinel) for t in doc.types]),
            "EXPORTS": self._section("Exports", [self._export(e) for e in doc.exports]),
            "USAGE": self._prose_section("Usage", doc.usage),
            "NOTES": self._prose_section("Notes", doc.notes),
            "GENERATED_DATE": _text(self.timestamp()),
        }
        return substitute(self.template, values)

    def index_content(self, docs: Sequence[Documentation]) -> str:
        items: List[str] = []
        for doc in docs:
            items.append(
                '<div class="file-item">'
                f'<h3><a href="{_text(self.file_name(doc))}">{_text(doc.title)}</a></h3>'
                f"<p><strong>File:</strong> <code>{_text(os.path.basename(doc.path))}</code></p>"
                f"<p><strong>Description:</strong> {_text(doc.description or PLACEHOLDER)}</p>"
                f"<p><strong>Functions:</strong> {len(doc.functions)} "
                f"<strong>Classes:</strong> {len(doc.types)} "
                f"<strong>Exports:</strong> {len(doc.exports)}</p>"
                "</div>"
            )
        body = "\n    ".join(items)
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '    <meta charset="UTF-8">\n'
            "    <title>Documentation Index</title>\n"
            f"    <style>{_STYLE}    </style>\n"
            "</head>\n"
            "<body>\n"
            "    <h1>Documentation Index</h1>\n"
            f"    <p>Generated on {_text(self.timestamp())}</p>\n"
            f"    {body}\n"
            "</body>\n"
            "</html>\n"
        )

    def _toc(self, doc: Documentation) -> str:
        groups = [
            ("Functions", "func", [f.symbol.name for f in doc.functions], "()"),
            ("Classes", "class", [t.symbol.name for t in doc.types], ""),
            ("Exports", "export", [e.export.name for e in doc.exports], ""),
        ]
        parts: List[str] = []
        for heading, prefix, names, suffix in groups:
            if not names:
                continue
            links = "".join(
                f'<li><a href="#{prefix}-{_text(name)}">{_text(name)}{suffix}</a></li>' for name in names
            )
            parts.append(f"<h3>{heading}</h3><ul>{links}</ul>")
        if not parts:
            return ""
        return '<div class="toc"><h2>Table of Contents</h2>' + "".join(parts) + "</div>"

    @staticmethod
    def _section(heading: str, blocks: Sequence[str]) -> str:
        if not blocks:
            return ""
        return f'<div class="section"><h2>{heading}</h2>' + "".join(blocks) + "</div>"

    @staticmethod
    def _prose_section(heading: str, text: Optional[str]) -> str:
        if not text:
            return ""
        return f'<div class="section"><h2>{heading}</h2><p>{_text(text)}</p></div>'

    def _function(self, entry: DocumentedFunction, sentinel: str, *, anchor: str = "func") -> str:
        symbol = entry.symbol
        tags = "".join(f'<span class="badge badge-{tag}">{tag}</span>' for tag in badges(symbol))
        parts = [
            f'<div class="function" id="{anchor}-{_text(symbol.name)}">',
            f"<h3>{tags}{_text(symbol.name)}</h3>",
            f"<p>{_text(entry.description or PLACEHOLDER)}</p>",
            f'<div class="signature"><strong>Signature:</strong> {_text(signature(symbol, sentinel))}</div>',
        ]
        if symbol.parameters:
            parts.append('<div class="parameters"><h4>Parameters:</h4>')
            for parameter in symbol.parameters:
                default = (
                    f" <em>(default: {_text(parameter.default)})</em>"
                    if parameter.default is not None
                    else ""
                )
                prose = entry.parameters.get(parameter.name, NO_DESCRIPTION)
                parts.append(
                    '<div class="param">'
                    f'<span class="param-name">{_text(parameter.name)}</span> '
                    f'<span class="param-type">{_text(parameter.type or sentinel)}</span>{default}'
                    f"<div>{_text(prose)}</div></div>"
                )
            parts.append("</div>")
        if returns_value(symbol):
            parts.append(
                '<div class="returns"><h4>Returns:</h4><div class="param">'
                f'<span class="param-type">{_text(symbol.return_type or sentinel)}</span>'
                f"<div>{_text(entry.returns or NO_DESCRIPTION)}</div></div></div>"
            )
        if entry.example:
            parts.append(
                f'<div class="example"><h4>Example:</h4><pre><code>{_text(entry.example)}</code></pre></div>'
            )
        parts.append("</div>")
        return "".join(parts)

    def _type(self, entry: DocumentedType, sentinel: str) -> str:
        symbol = entry.symbol
        parts = [
            f'<div class="class" id="class-{_text(symbol.name)}">',
            f"<h3>{_text(symbol.name)}</h3>",
        ]
        if symbol.kind != "class":
            parts.append(f"<p><code>{_text(symbol.kind)}</code></p>")
        parts.append(f"<p>{_text(entry.description or PLACEHOLDER)}</p>")
        if symbol.super_type:
            parts.append(f"<p><strong>Extends:</strong> <code>{_text(symbol.super_type)}</code></p>")
        if entry.constructor is not None:
            parts.append(
                '<div class="signature"><strong>Constructor:</strong> '
                f"{_text(signature(entry.constructor.symbol, sentinel))}</div>"
            )
        if symbol.properties:
            parts.append('<div class="properties"><h4>Properties:</h4>')
            for prop in symbol.properties:
                tags: List[str] = []
                if prop.is_static:
                    tags.append("static")
                if prop.visibility in {"private", "protected"}:
                    tags.append(prop.visibility)
                badge_html = "".join(f'<span class="badge badge-{tag}">{tag}</span>' for tag in tags)
                optional = " <em>(optional)</em>" if prop.optional else ""
                prose = entry.properties.get(prop.name, NO_DESCRIPTION)
                parts.append(
                    f'<div class="param">{badge_html}'
                    f'<span class="param-name">{_text(prop.name)}</span> '
                    f'<span class="param-type">{_text(prop.type or sentinel)}</span>{optional}'
                    f"<div>{_text(prose)}</div></div>"
                )
            parts.append("</div>")
        if entry.methods:
            parts.append('<div class="methods"><h4>Methods:</h4>')
            for method in entry.methods:
                anchor = f"method-{symbol.name}"
                parts.append(f'<div class="method">{self._function(method, sentinel, anchor=anchor)}</div>')
            parts.append("</div>")
        parts.append("</div>")
        return "".join(parts)

    @staticmethod
    def _export(entry: DocumentedExport) -> str:
        edge = entry.export
        parts = [
            f'<div class="export" id="export-{_text(edge.name)}">',
            f"<h3>{_text(edge.name)}</h3>",
            f"<p><strong>Type:</strong> <code>{_text(edge.kind)}</code></p>",
        ]
        if entry.description:
            parts.append(f"<p>{_text(entry.description)}</p>")
        if edge.type_definition:
            parts.append(
                '<div class="signature"><strong>Type Definition:</strong> '
                f"{_text(edge.type_definition)}</div>"
            )
        parts.append("</div>")
        return "".join(parts)


def _text(value: str) -> str:
    return escape(value, quote=True)


__all__ = [
    "DEFAULT_TEMPLATE",
    "HtmlRenderer",
    "REQUIRED_SLOTS",
    "SLOTS",
    "missing_slots",
    "substitute",
]
