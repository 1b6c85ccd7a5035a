"""Merge extracted modules with generated prose."""

from __future__ import annotations

import os
from typing import Dict, Optional

from .models import (
    Documentation,
    DocumentedExport,
    DocumentedFunction,
    DocumentedType,
    FunctionSymbol,
    Module,
    TypeSymbol,
)
from .prose import FunctionProse, Prose, TypeProse


def assemble(module: Module, prose: Optional[Prose], error: Optional[str] = None) -> Documentation:
    """Pair every symbol of *module* with its prose.

    Prose entries are matched by name and entries naming symbols the module
    does not declare are dropped. When *error* is given the document carries
    no generated prose and records the reason instead.
    """
    if error is not None or prose is None:
        prose = Prose()

    return Documentation(
        module=module,
        title=prose.title or os.path.basename(module.path),
        description=prose.description,
        functions=tuple(_function(f, prose.functions.get(f.name)) for f in module.functions),
        types=tuple(_type(t, prose.types.get(t.name)) for t in module.types),
        exports=tuple(
            DocumentedExport(export=edge, description=prose.exports.get(edge.name))
            for edge in module.exports
        ),
        usage=prose.usage,
        notes=prose.notes,
        prose_error=error,
    )


def _function(symbol: FunctionSymbol, prose: Optional[FunctionProse]) -> DocumentedFunction:
    if prose is None:
        return DocumentedFunction(symbol=symbol)
    known = {p.name for p in symbol.parameters}
    return DocumentedFunction(
        symbol=symbol,
        description=prose.description,
        parameters={name: text for name, text in prose.parameters.items() if name in known},
        returns=prose.returns,
        example=prose.example,
    )


def _type(symbol: TypeSymbol, prose: Optional[TypeProse]) -> DocumentedType:
    methods: Dict[str, FunctionProse] = prose.methods if prose is not None else {}
    properties = prose.properties if prose is not None else {}
    known_properties = {p.name for p in symbol.properties}
    constructor = symbol.constructor
    return DocumentedType(
        symbol=symbol,
        description=prose.description if prose is not None else None,
        methods=tuple(_function(m, methods.get(m.name)) for m in symbol.methods),
        constructor=_function(constructor, methods.get(constructor.name)) if constructor else None,
        properties={name: text for name, text in properties.items() if name in known_properties},
    )


__all__ = ["assemble"]
