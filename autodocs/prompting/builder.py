"""Builds prose-generation prompts from extracted modules."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from ..models import Module
from ..serialization import module_to_dict

STYLES: tuple[str, ...] = ("concise", "detailed")


@dataclass(frozen=True)
class PromptRequest:
    """A rendered prompt ready for the runner."""

    system: str
    prompt: str


class PromptBuilder:
    """Renders the prose prompt template for one module."""

    SYSTEM_PROMPT = (
        "You are an expert technical documentation writer. Generate clear and useful "
        "documentation for code files. Always respond with valid JSON in the requested format."
    )
    TEMPLATE_NAME = "prose_prompt.j2"

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        style: str | None = None,
        include_examples: bool = True,
        max_source_chars: Optional[int] = 24000,
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.style = (style or "detailed").lower()
        if self.style not in STYLES:
            self.style = "detailed"
        self.include_examples = include_examples
        self.max_source_chars = max_source_chars
        self._env = self._create_env(self.templates_dir)

    def build(self, module: Module) -> PromptRequest:
        structure = module_to_dict(module, include_source=False)
        structure.pop("filePath", None)
        structure.pop("language", None)
        source = module.raw_text
        if self.max_source_chars is not None and len(source) > self.max_source_chars:
            source = source[: self.max_source_chars] + "\n... (truncated)"
        template = self._env.get_template(self.TEMPLATE_NAME)
        prompt = template.render(
            path=module.path,
            language=module.grammar,
            style=self.style,
            include_examples=self.include_examples,
            structure=json.dumps(structure, indent=2),
            source=source,
        )
        return PromptRequest(system=self.SYSTEM_PROMPT, prompt=prompt.strip() + "\n")

    def _create_env(self, templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["PromptBuilder", "PromptRequest", "STYLES"]
