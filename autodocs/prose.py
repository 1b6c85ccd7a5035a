"""Prose providers: the external text-generation side of documentation."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any, Dict, Mapping, Optional, Protocol

from jinja2 import TemplateError

from .config import AutoDocsConfig
from .errors import ProseServiceError
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import Module
from .prompting.builder import PromptBuilder
from .serialization import optional_text

logger = get_logger("prose")

_FENCE = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```\s*$", re.S)


@dataclass(frozen=True)
class FunctionProse:
    description: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)
    returns: Optional[str] = None
    example: Optional[str] = None


@dataclass(frozen=True)
class TypeProse:
    description: Optional[str] = None
    methods: Dict[str, FunctionProse] = field(default_factory=dict)
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Prose:
    """Generated prose for one module, keyed by symbol name."""

    title: Optional[str] = None
    description: Optional[str] = None
    functions: Dict[str, FunctionProse] = field(default_factory=dict)
    types: Dict[str, TypeProse] = field(default_factory=dict)
    exports: Dict[str, str] = field(default_factory=dict)
    usage: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Prose":
        """Build prose from a decoded service reply; missing keys stay empty."""
        functions = {
            entry["name"]: _function_prose(entry)
            for entry in _entries(payload.get("functions"))
        }
        types = {
            entry["name"]: TypeProse(
                description=_text(entry.get("description")),
                methods={m["name"]: _function_prose(m) for m in _entries(entry.get("methods"))},
                properties=_described(entry.get("properties")),
            )
            for entry in _entries(payload.get("classes"))
        }
        return cls(
            title=_text(payload.get("title")),
            description=_text(payload.get("description")),
            functions=functions,
            types=types,
            exports=_described(payload.get("exports")),
            usage=_text(payload.get("usage")),
            notes=_text(payload.get("notes")),
        )


class ProseProvider(Protocol):
    def generate(self, module: Module) -> Prose:
        """Return prose for *module* or raise ``ProseServiceError``."""


class OfflineProseProvider:
    """Produces empty prose so rendering falls back to placeholders."""

    def generate(self, module: Module) -> Prose:
        return Prose()


class LLMProseProvider:
    """Asks a chat-completion model for prose and parses its JSON reply."""

    def __init__(self, runner: LLMRunner | None = None, builder: PromptBuilder | None = None) -> None:
        self.runner = runner or LLMRunner()
        self.builder = builder or PromptBuilder()

    def generate(self, module: Module) -> Prose:
        try:
            request = self.builder.build(module)
        except TemplateError as exc:
            raise ProseServiceError(f"prompt rendering failed: {exc}", path=module.path) from exc
        try:
            reply = self.runner.run(request.prompt, system=request.system, json_mode=True)
        except (RuntimeError, OSError, HTTPException) as exc:
            raise ProseServiceError(str(exc) or repr(exc), path=module.path) from exc
        try:
            payload = parse_payload(reply)
        except ValueError as exc:
            raise ProseServiceError(f"unreadable prose reply: {exc}", path=module.path) from exc
        logger.debug("Received prose for %s", module.path)
        return Prose.from_payload(payload)


OLLAMA_DEFAULT_MODEL = "llama3.1"


def provider_from_config(config: AutoDocsConfig) -> ProseProvider:
    """Build the prose provider named by ``config.ai_provider``."""
    if config.ai_provider == "offline":
        return OfflineProseProvider()

    llm = config.llm
    options: Dict[str, Any] = {}
    for key in ("temperature", "max_tokens", "request_timeout"):
        value = getattr(llm, key)
        if value is not None:
            options[key] = value
    if llm.api_key is not None:
        options["api_key"] = llm.api_key

    if config.ai_provider == "ollama":
        options["base_url"] = llm.base_url
        options["executable"] = llm.executable or "ollama"
        runner = LLMRunner(llm.model or OLLAMA_DEFAULT_MODEL, **options)
    else:
        if llm.base_url is not None:
            options["base_url"] = llm.base_url
        runner = LLMRunner(llm.model, **options)

    builder = PromptBuilder(style=config.style, include_examples=config.include_examples)
    return LLMProseProvider(runner=runner, builder=builder)


def parse_payload(reply: str) -> Dict[str, Any]:
    """Decode a JSON object reply, tolerating surrounding code fences."""
    text = reply.strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1).strip()
    if not text.startswith("{"):
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("no JSON object found")
        text = text[start : end + 1]
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("expected a JSON object")
    return payload


def _entries(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping) and isinstance(item.get("name"), str)]


def _described(value: Any) -> Dict[str, str]:
    described: Dict[str, str] = {}
    for entry in _entries(value):
        text = _text(entry.get("description"))
        if text:
            described[entry["name"]] = text
    return described


def _function_prose(entry: Mapping[str, Any]) -> FunctionProse:
    returns = entry.get("returns")
    if isinstance(returns, Mapping):
        returns = returns.get("description")
    return FunctionProse(
        description=_text(entry.get("description")),
        parameters=_described(entry.get("parameters")),
        returns=_text(returns),
        example=_text(entry.get("example")),
    )


def _text(value: Any) -> Optional[str]:
    return optional_text(value) if isinstance(value, str) else None


__all__ = [
    "FunctionProse",
    "LLMProseProvider",
    "OfflineProseProvider",
    "Prose",
    "ProseProvider",
    "TypeProse",
    "parse_payload",
    "provider_from_config",
]
