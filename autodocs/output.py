"""Writes rendered artifacts to disk."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from .logging import get_logger
from .renderers import Artifact

logger = get_logger("output")


def write_artifacts(artifacts: Iterable[Artifact], output_dir: Path) -> List[Path]:
    """Write each artifact under *output_dir*, creating it when needed.

    Returns the written paths in order. Artifacts sharing a name overwrite
    one another.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for artifact in artifacts:
        target = output_dir / artifact.name
        target.write_text(artifact.content, encoding="utf-8")
        logger.debug("Wrote %s", target)
        written.append(target)
    return written


__all__ = ["write_artifacts"]
