"""JSON renderer: per-file objects, an index and a combined artifact."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Sequence

from ..models import Documentation
from ..serialization import (
    counts,
    documentation_from_dict,
    documentation_to_dict,
    module_from_dict,
    module_to_dict,
)
from .base import Artifact, Renderer

COMBINED_NAME = "combined-documentation.json"
GENERATOR = "autodocs"


class JsonRenderer(Renderer):
    format = "json"
    extension = "json"

    def file_content(self, doc: Documentation) -> str:
        module = doc.module
        payload = {
            "meta": {
                "file": doc.path,
                "fileName": os.path.basename(doc.path),
                "language": doc.grammar,
                "generatedAt": self.timestamp(),
                "generatedBy": GENERATOR,
            },
            "documentation": documentation_to_dict(doc),
            "sourceInfo": {
                "totalLines": module.line_count,
                "functionsCount": len(module.functions),
                "classesCount": len(module.types),
                "importsCount": len(module.imports),
                "exportsCount": len(module.exports),
            },
            "parsing": module_to_dict(module),
        }
        return _dumps(payload)

    def index_content(self, docs: Sequence[Documentation]) -> str:
        payload = {
            "title": "Documentation Index",
            "generated": self.timestamp(),
            "files": [
                {
                    "file": doc.path,
                    "title": doc.title,
                    "description": doc.description,
                    "link": self.file_name(doc),
                    **counts(doc),
                }
                for doc in docs
            ],
        }
        return _dumps(payload)

    def render_combined(self, docs: Sequence[Documentation]) -> Artifact:
        """Render every document into one object keyed by base file name.

        Documents sharing a base name overwrite earlier ones.
        """
        languages: List[str] = []
        for doc in docs:
            if doc.grammar not in languages:
                languages.append(doc.grammar)
        documentation: Dict[str, Any] = {}
        for doc in docs:
            key, _ = os.path.splitext(os.path.basename(doc.path))
            documentation[key] = {
                "file": doc.path,
                "language": doc.grammar,
                "documentation": documentation_to_dict(doc),
            }
        payload = {
            "meta": {
                "generatedAt": self.timestamp(),
                "generatedBy": GENERATOR,
                "totalFiles": len(docs),
                "outputFormat": self.format,
            },
            "summary": {
                "totalFunctions": sum(len(doc.functions) for doc in docs),
                "totalClasses": sum(len(doc.types) for doc in docs),
                "totalExports": sum(len(doc.exports) for doc in docs),
                "languages": languages,
            },
            "files": [
                {
                    "file": doc.path,
                    "language": doc.grammar,
                    "title": doc.title,
                    "description": doc.description,
                    "functionsCount": len(doc.functions),
                    "classesCount": len(doc.types),
                    "exportsCount": len(doc.exports),
                    "sourceLines": doc.module.line_count,
                }
                for doc in docs
            ],
            "documentation": documentation,
        }
        return Artifact(name=COMBINED_NAME, content=_dumps(payload))

    @staticmethod
    def parse(content: str) -> Documentation:
        """Rebuild the ``Documentation`` a per-file artifact was rendered from."""
        data = json.loads(content)
        module = module_from_dict(data["parsing"])
        return documentation_from_dict(data["documentation"], module)


def _dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


__all__ = ["COMBINED_NAME", "JsonRenderer"]
