"""Source discovery: walk a file or directory and read the files autodocs can document."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .extractors import ExtractorRegistry, default_registry
from .logging import get_logger
from .models import SourceFile

DEFAULT_IGNORE: tuple[str, ...] = (
    "node_modules/",
    ".git/",
    "dist/",
    "build/",
    "__pycache__/",
    ".venv/",
    "vendor/",
    "__tests__/",
    "__mocks__/",
    "*.min.js",
    "*.d.ts",
    "*.test.*",
    "*.spec.*",
)

MAX_FILE_SIZE = 10 * 1024 * 1024

logger = get_logger("scanner")


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore-style pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False
        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    """Parse *pattern*, accepting ``**/name/**`` globs as well as gitignore syntax."""
    pattern = pattern.strip()
    if pattern.startswith("!"):
        negate = not negate
        pattern = pattern[1:]
    while pattern.startswith("**/"):
        pattern = pattern[3:]
    directory_only = False
    if pattern.endswith("/**"):
        pattern = pattern[:-3]
        directory_only = True
    if pattern.endswith("/"):
        pattern = pattern[:-1]
        directory_only = True
    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]
    if not pattern:
        return None
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []
    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        rule = build_ignore_rule(line)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    """Last matching rule wins, so a later ``!pattern`` re-includes a path."""
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceScanner:
    """Collects supported source files under a path, sorted by path."""

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        *,
        ignore: Iterable[str] = (),
        use_defaults: bool = True,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.registry = registry or default_registry()
        patterns = list(DEFAULT_IGNORE) if use_defaults else []
        patterns.extend(ignore)
        self.rules = [rule for rule in map(build_ignore_rule, patterns) if rule is not None]
        self.max_file_size = max_file_size

    def scan(self, source: str | Path) -> List[SourceFile]:
        """Return every readable, supported file at *source*.

        A single file is returned as-is when its extension is supported, even if
        an ignore pattern would match it.
        """
        path = Path(source).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Source path not found: {source}")
        if path.is_file():
            if not self.registry.supports(path.name):
                return []
            loaded = self._read(path, str(path))
            return [loaded] if loaded is not None else []

        root = path.resolve()
        rules = self.rules + parse_gitignore(root / ".gitignore")
        files: List[SourceFile] = []
        for file_path in sorted(self._iter_files(root, rules)):
            loaded = self._read(file_path, str(file_path))
            if loaded is not None:
                files.append(loaded)
        logger.debug("Found %d file(s) to document under %s", len(files), root)
        return files

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in sorted(dirnames):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if not should_ignore(rel_path, True, rules):
                    kept.append(name)
            dirnames[:] = kept

            for filename in filenames:
                if not self.registry.supports(filename):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename

    def _read(self, path: Path, display: str) -> SourceFile | None:
        try:
            size = path.stat().st_size
            if size > self.max_file_size:
                logger.warning("Skipping large file (%d bytes): %s", size, display)
                return None
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", display, exc)
            return None
        return SourceFile(path=display, text=text)


__all__ = [
    "DEFAULT_IGNORE",
    "IgnoreRule",
    "SourceScanner",
    "build_ignore_rule",
    "parse_gitignore",
    "should_ignore",
]
