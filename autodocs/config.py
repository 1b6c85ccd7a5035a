"""Configuration loading for autodocs (.autodocs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from .prompting.builder import STYLES
from .errors import OutputFormatError
from .renderers import FORMATS, resolve_format

CONFIG_FILENAME = ".autodocs.yml"
PROVIDERS = ("openai", "ollama", "offline")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or holds invalid values."""


@dataclass(frozen=True)
class LLMConfig:
    """Model runtime settings from the ``llm`` block."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None
    executable: Optional[str] = None


@dataclass(frozen=True)
class AutoDocsConfig:
    """Resolved settings for one run; built once from defaults, file and overrides."""

    format: str = "markdown"
    style: str = "detailed"
    output: Path = Path("docs")
    ignore: Tuple[str, ...] = ()
    ai_provider: str = "openai"
    template: Optional[Path] = None
    include_examples: bool = True
    combined: bool = True
    workers: Optional[int] = None
    llm: LLMConfig = field(default_factory=LLMConfig)

    @property
    def formats(self) -> Tuple[str, ...]:
        """Requested formats; ``all`` expands to every supported format."""
        if self.format == "all":
            return FORMATS
        return tuple(part.strip() for part in self.format.split(",") if part.strip())


def load_config(path: Path | None = None, overrides: Mapping[str, Any] | None = None) -> AutoDocsConfig:
    """Resolve defaults, the config file at *path* and CLI *overrides* into one value.

    *path* may be a directory (searched for ``.autodocs.yml``) or a file. A missing
    file contributes nothing. ``None`` values in *overrides* are ignored.
    """
    config = AutoDocsConfig()
    root = Path.cwd()
    if path is not None:
        config_file = _resolve_config_path(path)
        root = config_file.parent
        if config_file.exists():
            config = _apply(config, _read_config(config_file), root)

    if overrides:
        layer = {key: value for key, value in overrides.items() if value is not None}
        config = _apply(config, layer, Path.cwd())
    return _validate(config)


def _resolve_config_path(path: Path) -> Path:
    path = path.expanduser()
    if path.is_dir():
        return (path / CONFIG_FILENAME).resolve()
    return path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _apply(config: AutoDocsConfig, data: Mapping[str, Any], root: Path) -> AutoDocsConfig:
    changes: Dict[str, Any] = {}
    known = {f.name for f in fields(AutoDocsConfig)}

    ai = data.get("ai")
    if isinstance(ai, Mapping):
        if "provider" in ai:
            changes["ai_provider"] = _as_str(ai["provider"], "ai.provider")
        if "include_examples" in ai:
            changes["include_examples"] = _as_bool(ai["include_examples"], "ai.include_examples")
        if "style" in ai:
            changes["style"] = _as_str(ai["style"], "ai.style")

    for key, value in data.items():
        if key in {"ai", "llm"}:
            continue
        name = "ai_provider" if key == "provider" else key
        if name not in known:
            continue
        if name == "format":
            changes[name] = ",".join(_as_str_list(value, key)) if isinstance(value, list) else _as_str(value, key)
        elif name in {"style", "ai_provider"}:
            changes[name] = _as_str(value, key)
        elif name == "output":
            changes[name] = root / _as_str(value, key)
        elif name == "template":
            changes[name] = root / _as_str(value, key)
        elif name == "ignore":
            changes[name] = config.ignore + tuple(_as_str_list(value, key))
        elif name in {"include_examples", "combined"}:
            changes[name] = _as_bool(value, key)
        elif name == "workers":
            changes[name] = _as_int(value, key)

    llm = data.get("llm")
    if llm is not None:
        if not isinstance(llm, Mapping):
            raise ConfigError("llm must be a mapping")
        changes["llm"] = _merge_llm(config.llm, llm)
    return replace(config, **changes)


def _merge_llm(current: LLMConfig, data: Mapping[str, Any]) -> LLMConfig:
    changes: Dict[str, Any] = {}
    for key in ("model", "base_url", "api_key", "executable"):
        if data.get(key) is not None:
            changes[key] = _as_str(data[key], f"llm.{key}")
    for key in ("temperature", "request_timeout"):
        if data.get(key) is not None:
            changes[key] = _as_float(data[key], f"llm.{key}")
    if data.get("max_tokens") is not None:
        changes["max_tokens"] = _as_int(data["max_tokens"], "llm.max_tokens")
    return replace(current, **changes)


def _validate(config: AutoDocsConfig) -> AutoDocsConfig:
    if config.format != "all":
        if not config.formats:
            raise ConfigError("format must name at least one output format")
        for name in config.formats:
            try:
                resolve_format(name)
            except OutputFormatError as exc:
                raise ConfigError(f"{exc.message}; use 'all' for every format") from exc
    if config.style not in STYLES:
        raise ConfigError(f"style must be one of {', '.join(STYLES)} (got '{config.style}')")
    if config.ai_provider not in PROVIDERS:
        raise ConfigError(
            f"ai provider must be one of {', '.join(PROVIDERS)} (got '{config.ai_provider}')"
        )
    if config.workers is not None and config.workers < 1:
        raise ConfigError("workers must be a positive integer")
    return config


def _as_str(value: Any, key: str) -> str:
    if isinstance(value, (str, int, float, Path)) and not isinstance(value, bool):
        return str(value).strip()
    raise ConfigError(f"{key} must be a string")


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"{key} must be a boolean")


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ConfigError(f"{key} must be an integer")


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ConfigError(f"{key} must be a number")


def _as_str_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [_as_str(item, key) for item in value]
    raise ConfigError(f"{key} must be a list of strings")


__all__ = ["AutoDocsConfig", "CONFIG_FILENAME", "ConfigError", "LLMConfig", "PROVIDERS", "load_config"]
