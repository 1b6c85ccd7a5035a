from __future__ import annotations

import logging
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from autodocs.extractors import discover_extractors
from autodocs.models import Module
from autodocs.normalize import normalize
from tests._fixtures.repo_builder import SourceTreeBuilder

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_autodocs_logger():
    """Drop handlers the CLI installs so they never outlive captured streams."""
    yield
    logger = logging.getLogger("autodocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTreeBuilder:
    """Provide a reusable source tree rooted at the pytest tmp_path."""
    return SourceTreeBuilder(tmp_path)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIME


@pytest.fixture
def extract_module() -> Callable[[str, str], Module]:
    """Extract and normalize dedented source text with the built-in extractors."""
    registry = discover_extractors(include_plugins=False)

    def _extract(path: str, text: str) -> Module:
        return normalize(registry.extract(path, textwrap.dedent(text).lstrip("\n")))

    return _extract
