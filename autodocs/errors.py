"""Typed failures raised by the autodocs pipeline."""

from __future__ import annotations


class AutoDocsError(RuntimeError):
    """Base class for autodocs failures, optionally tied to a source path."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class GrammarError(AutoDocsError):
    """A source file could not be parsed by its grammar's extractor."""


class UnsupportedGrammarError(AutoDocsError):
    """No extractor is registered for the file's extension."""


class ProseServiceError(AutoDocsError):
    """The prose service failed or returned an unusable payload."""


class TemplateError(AutoDocsError):
    """An HTML template is missing required slot markers."""


class OutputFormatError(AutoDocsError):
    """The requested output format has no renderer."""


class EmptyInputError(AutoDocsError):
    """A run was started without any source files."""


__all__ = [
    "AutoDocsError",
    "EmptyInputError",
    "GrammarError",
    "OutputFormatError",
    "ProseServiceError",
    "TemplateError",
    "UnsupportedGrammarError",
]
