"""Fill grammar-appropriate defaults so renderers never branch on grammar."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Tuple

from .models import (
    UNKNOWN_TYPES,
    ExportEdge,
    FunctionSymbol,
    ImportBinding,
    ImportEdge,
    Module,
    Parameter,
    Property,
    Symbol,
    TypeSymbol,
)

_UNSPECIFIED = "unspecified"


def normalize(module: Module) -> Module:
    """Return a copy of *module* with every sentinel and default filled in.

    Applying it twice yields an equal module.
    """
    sentinel = UNKNOWN_TYPES.get(module.grammar, "any")
    return replace(
        module,
        symbols=tuple(_symbol(symbol, sentinel) for symbol in module.symbols),
        imports=tuple(_import(edge) for edge in module.imports),
        exports=tuple(_export(edge) for edge in module.exports),
    )


def _symbol(symbol: Symbol, sentinel: str) -> Symbol:
    if isinstance(symbol, TypeSymbol):
        return _type(symbol, sentinel)
    return _function(symbol, sentinel)


def _function(function: FunctionSymbol, sentinel: str) -> FunctionSymbol:
    start, end = _span(function.start_line, function.end_line)
    return replace(
        function,
        name=function.name.strip(),
        parameters=tuple(_parameter(p, sentinel) for p in function.parameters),
        return_type=_text(function.return_type) or sentinel,
        visibility=_text(function.visibility) or _UNSPECIFIED,
        comments=_text(function.comments),
        start_line=start,
        end_line=end,
        receiver=function.receiver.strip(),
    )


def _parameter(parameter: Parameter, sentinel: str) -> Parameter:
    return replace(
        parameter,
        name=parameter.name.strip(),
        type=_text(parameter.type) or sentinel,
        default=_text(parameter.default),
    )


def _type(symbol: TypeSymbol, sentinel: str) -> TypeSymbol:
    start, end = _span(symbol.start_line, symbol.end_line)
    constructor = symbol.constructor
    return replace(
        symbol,
        name=symbol.name.strip(),
        methods=tuple(_function(m, sentinel) for m in symbol.methods),
        properties=tuple(_property(p, sentinel) for p in symbol.properties),
        constructor=_function(constructor, sentinel) if constructor is not None else None,
        super_type=_text(symbol.super_type),
        comments=_text(symbol.comments),
        start_line=start,
        end_line=end,
    )


def _property(prop: Property, sentinel: str) -> Property:
    return replace(
        prop,
        name=prop.name.strip(),
        type=_text(prop.type) or sentinel,
        visibility=_text(prop.visibility) or _UNSPECIFIED,
        comments=_text(prop.comments),
    )


def _import(edge: ImportEdge) -> ImportEdge:
    return replace(
        edge,
        source=edge.source.strip(),
        bindings=tuple(
            ImportBinding(
                name=binding.name.strip(),
                kind=binding.kind,
                imported=_text(binding.imported),
            )
            for binding in edge.bindings
        ),
    )


def _export(edge: ExportEdge) -> ExportEdge:
    return replace(edge, name=edge.name.strip(), type_definition=_text(edge.type_definition))


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _span(start: int, end: int) -> Tuple[int, int]:
    if start <= 0 or end < start:
        return 0, 0
    return start, end


__all__ = ["normalize"]
