"""Adapters around chat-completion runtimes (OpenAI-compatible HTTP or Ollama)."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass
from http.client import HTTPException
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger

_AUTO_BASE_URL = object()
_AUTO_API_KEY = object()

logger = get_logger("llm")


class LLMError(RuntimeError):
    """Raised when the runtime cannot produce a completion."""


@dataclass
class LLMRequest:
    """Represents one inference request."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    executable: Optional[str]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]
    json_mode: bool = False


class LLMRunner:
    """Executes prompts against the configured model runtime."""

    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("AUTODOCS_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("AUTODOCS_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("AUTODOCS_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None | object = _AUTO_BASE_URL,
        executable: str = "ollama",
        temperature: Optional[float] = 0.3,
        max_tokens: Optional[int] = 4000,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = self._resolve_model(model)
        self.base_url = self._resolve_base_url(base_url)
        self.executable = executable
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = self._resolve_api_key(api_key)
        self.request_timeout = request_timeout
        if runner is not None:
            self._runner = runner
        else:
            self._runner = self._http_runner if self.base_url else self._cli_runner

    def run(self, prompt: str, *, system: str | None = None, json_mode: bool = False) -> str:
        """Send the prompt to the configured model and return the response text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            executable=self.executable,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
            json_mode=json_mode,
        )
        logger.debug("Dispatching prompt (%d chars) to %s", len(prompt), request.base_url or request.executable)
        return self._runner(request)

    @staticmethod
    def _normalize_base_url(url: str) -> str:
        return url.rstrip("/")

    @staticmethod
    def _cli_runner(request: LLMRequest) -> str:
        args = [request.executable or "ollama", "run", request.model]
        if request.json_mode:
            args.extend(["--format", "json"])
        prompt = request.prompt
        if request.system:
            prompt = f"{request.system}\n\n{prompt}"
        args.append(prompt)
        try:
            completed = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                timeout=request.request_timeout,
            )
        except FileNotFoundError as exc:  # pragma: no cover - depends on environment
            raise LLMError(
                f"Unable to locate '{request.executable}'. Install Ollama or configure a base_url."
            ) from exc
        except subprocess.TimeoutExpired as exc:  # pragma: no cover - depends on environment
            raise LLMError(f"LLM runner timed out after {exc.timeout}s") from exc
        except subprocess.CalledProcessError as exc:  # pragma: no cover - depends on environment
            raise LLMError(
                f"LLM runner failed with exit code {exc.returncode}: {exc.stderr.strip()}"
            ) from exc
        return completed.stdout.strip()

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        if not request.base_url:
            raise LLMError("HTTP runner requires a base_url to be configured.")
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": LLMRunner._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        if request.json_mode:
            payload["response_format"] = {"type": "json_object"}

        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise LLMError(f"LLM HTTP runner failed with status {exc.code}: {message}") from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise LLMError(f"LLM HTTP runner failed: {exc.reason}") from exc
        except TimeoutError as exc:  # pragma: no cover - depends on runtime
            raise LLMError(f"LLM HTTP runner timed out after {timeout}s") from exc
        except (HTTPException, OSError) as exc:
            raise LLMError(f"LLM HTTP runner failed: {exc!r}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise LLMError("LLM HTTP runner returned invalid JSON") from exc

        content = LLMRunner._extract_content(response_payload)
        if not content:
            raise LLMError("LLM HTTP runner returned an empty response")
        return content.strip()

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""

    def _resolve_model(self, model: str | None) -> str:
        if model:
            return model
        return self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL

    def _resolve_base_url(self, base_url: str | None | object) -> str | None:
        if base_url is None:
            return None
        if base_url is not _AUTO_BASE_URL:
            return self._normalize_base_url(str(base_url))
        env_value = self._first_env_value(self.ENV_BASE_URL_KEYS)
        return self._normalize_base_url(env_value or self.DEFAULT_BASE_URL)

    def _resolve_api_key(self, api_key: str | None | object) -> str | None:
        if api_key is _AUTO_API_KEY:
            return self._first_env_value(self.ENV_API_KEY_KEYS)
        return api_key  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["LLMError", "LLMRequest", "LLMRunner"]
