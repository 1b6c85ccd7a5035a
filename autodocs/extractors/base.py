"""Base classes for grammar extractors."""

from abc import ABC, abstractmethod
from typing import Tuple

from ..models import Module


class Extractor(ABC):
    """Contract for extractors that turn raw source text into a Module."""

    grammar: str = ""
    extensions: Tuple[str, ...] = ()

    def supports(self, path: str) -> bool:
        """Return True when this extractor handles the file extension of *path*."""
        return path.lower().endswith(self.extensions)

    @abstractmethod
    def extract(self, path: str, text: str) -> Module:
        """Parse *text* and return the structural record for *path*."""
