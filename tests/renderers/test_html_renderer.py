"""Tests for the slot-substituting HTML renderer."""

from __future__ import annotations

import pytest

from autodocs.assembler import assemble
from autodocs.errors import TemplateError
from autodocs.models import FunctionSymbol, Module, Parameter, Property, TypeSymbol
from autodocs.normalize import normalize
from autodocs.prose import Prose
from autodocs.renderers import HtmlRenderer
from autodocs.renderers.html import REQUIRED_SLOTS, missing_slots, substitute


def _document(prose=None, error=None):
    module = normalize(
        Module(
            path="lib/widget.py",
            grammar="python",
            raw_text="",
            symbols=(
                FunctionSymbol(name="ping"),
                FunctionSymbol(
                    name="render",
                    parameters=(Parameter(name="markup", type="str", default="'<b>'"),),
                    return_type="str",
                ),
                TypeSymbol(
                    name="Widget",
                    properties=(Property(name="_cache", visibility="private"),),
                    methods=(FunctionSymbol(name="draw", is_static=True),),
                ),
            ),
        )
    )
    return assemble(module, prose, error=error)


def test_html_fills_every_slot(fixed_clock) -> None:
    content = HtmlRenderer(clock=fixed_clock).file_content(_document(Prose(title="Widgets & <Co>")))

    assert "{{" not in content
    assert "<title>Widgets &amp; &lt;Co&gt; - Documentation</title>" in content
    assert "<code>lib/widget.py</code>" in content
    assert '<div class="function" id="func-render">' in content
    assert "(default: &#x27;&lt;b&gt;&#x27;)" in content
    assert '<span class="badge badge-static">static</span>' in content
    assert '<span class="badge badge-private">private</span>' in content
    assert "Generated by autodocs on 2024-01-02T03:04:05+00:00" in content


def test_html_skips_empty_parameter_lists_and_missing_super(fixed_clock) -> None:
    content = HtmlRenderer(clock=fixed_clock).file_content(_document())
    ping = content.split('id="func-ping">', 1)[1].split('id="func-render">', 1)[0]

    assert "Parameters:" not in ping
    assert "Extends" not in content


def test_html_empty_sections_are_blank(fixed_clock) -> None:
    content = HtmlRenderer(clock=fixed_clock).file_content(_document())

    assert "<h2>Exports</h2>" not in content
    assert "<h2>Usage</h2>" not in content


def test_html_shows_prose_error(fixed_clock) -> None:
    content = HtmlRenderer(clock=fixed_clock).file_content(_document(error="bad <json>"))

    assert "Documentation unavailable:</strong> bad &lt;json&gt;" in content


def test_custom_template_substitutes_slots(fixed_clock) -> None:
    template = " ".join("{{%s}}" % slot for slot in REQUIRED_SLOTS) + " {{UNKNOWN}}"
    content = HtmlRenderer(template, clock=fixed_clock).file_content(_document())

    assert content.startswith("widget.py ")
    assert content.endswith(" {{UNKNOWN}}")


def test_malformed_template_raises_template_error() -> None:
    renderer = HtmlRenderer("<html>{{TITLE}}</html>")

    with pytest.raises(TemplateError) as excinfo:
        renderer.validate()

    assert "{{FUNCTIONS}}" in str(excinfo.value)
    with pytest.raises(TemplateError):
        renderer.file_content(_document())


def test_missing_slots_and_substitute() -> None:
    assert missing_slots("{{TITLE}} {{DESCRIPTION}}")[0] == "TABLE_OF_CONTENTS"
    assert substitute("{{A}}-{{B}}", {"A": "{{B}}"}) == "{{B}}-{{B}}"


def test_html_index(fixed_clock) -> None:
    artifact = HtmlRenderer(clock=fixed_clock).render_index([_document()])

    assert artifact.name == "index.html"
    assert '<a href="widget.html">widget.py</a>' in artifact.content
    assert "<strong>Functions:</strong> 2" in artifact.content
