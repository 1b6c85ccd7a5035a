"""Tests for .autodocs.yml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from autodocs.config import AutoDocsConfig, ConfigError, LLMConfig, load_config
from autodocs.renderers import FORMATS


def _write(root: Path, text: str) -> Path:
    path = root / ".autodocs.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_config_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == AutoDocsConfig()
    assert config.formats == ("markdown",)


def test_config_file_values(tmp_path: Path) -> None:
    _write(
        tmp_path,
        """
format: [markdown, json]
output: build/docs
template: theme/page.html
ignore:
  - "**/generated/**"
ai:
  provider: ollama
  style: concise
  include_examples: false
workers: 4
combined: no
llm:
  model: llama3.1:8b
  base_url: http://localhost:11434/v1
  temperature: 0.2
  max_tokens: "800"
""",
    )

    config = load_config(tmp_path)

    assert config.formats == ("markdown", "json")
    assert config.output == tmp_path / "build/docs"
    assert config.template == tmp_path / "theme/page.html"
    assert config.ignore == ("**/generated/**",)
    assert config.ai_provider == "ollama"
    assert config.style == "concise"
    assert config.include_examples is False
    assert config.workers == 4
    assert config.combined is False
    assert config.llm == LLMConfig(
        model="llama3.1:8b",
        base_url="http://localhost:11434/v1",
        temperature=0.2,
        max_tokens=800,
    )


def test_overrides_win_and_none_is_ignored(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "format: html\nstyle: concise\nprovider: offline\n")

    config = load_config(tmp_path, {"format": "all", "style": None, "output": "out"})

    assert config.formats == FORMATS
    assert config.style == "concise"
    assert config.ai_provider == "offline"
    assert config.output == tmp_path / "out"


def test_explicit_config_file_path(tmp_path: Path) -> None:
    path = tmp_path / "custom.yml"
    path.write_text("format: md\n", encoding="utf-8")

    assert load_config(path).formats == ("md",)


@pytest.mark.parametrize(
    "text, message",
    [
        ("format: pdf\n", "Unsupported output format 'pdf'"),
        ("style: verbose\n", "style must be one of"),
        ("ai:\n  provider: bard\n", "ai provider must be one of"),
        ("workers: 0\n", "workers must be a positive integer"),
        ("combined: maybe\n", "combined must be a boolean"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("format: [markdown\n", "Failed to parse"),
        ("llm: fast\n", "llm must be a mapping"),
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str, message: str) -> None:
    _write(tmp_path, text)

    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    _write(tmp_path, "\n")

    assert load_config(tmp_path) == AutoDocsConfig()
