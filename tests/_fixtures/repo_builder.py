"""Helper utilities for writing throwaway source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List, Mapping

from autodocs.models import SourceFile
from autodocs.scanner import SourceScanner


class SourceTreeBuilder:
    """Writes files into a temporary source tree and rescans it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "src"
        self.root.mkdir()
        self._scanner = SourceScanner()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def scan(self) -> List[SourceFile]:
        """Return the supported files currently in the tree."""
        return self._scanner.scan(self.root)

    def path(self) -> Path:
        return self.root


__all__ = ["SourceTreeBuilder"]
