"""Plain-dict conversion for modules and documentation records.

Keys use camelCase so the JSON artifacts read the same as other
JavaScript-facing tooling. Every ``*_from_dict`` inverts its ``*_to_dict``
exactly, which is what makes the JSON renderer's output parseable back into
an equal ``Documentation``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .models import (
    Documentation,
    DocumentedExport,
    DocumentedFunction,
    DocumentedType,
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


def parameter_to_dict(parameter: Parameter) -> Dict[str, Any]:
    return {
        "name": parameter.name,
        "type": parameter.type,
        "default": parameter.default,
        "optional": parameter.optional,
    }


def parameter_from_dict(data: Mapping[str, Any]) -> Parameter:
    return Parameter(
        name=data["name"],
        type=data.get("type"),
        default=data.get("default"),
        optional=bool(data.get("optional", False)),
    )


def function_to_dict(function: FunctionSymbol) -> Dict[str, Any]:
    return {
        "name": function.name,
        "parameters": [parameter_to_dict(p) for p in function.parameters],
        "returnType": function.return_type,
        "isAsync": function.is_async,
        "isGenerator": function.is_generator,
        "isStatic": function.is_static,
        "visibility": function.visibility,
        "comments": function.comments,
        "startLine": function.start_line,
        "endLine": function.end_line,
        "isOptional": function.is_optional,
        "receiver": function.receiver,
    }


def function_from_dict(data: Mapping[str, Any]) -> FunctionSymbol:
    return FunctionSymbol(
        name=data["name"],
        parameters=tuple(parameter_from_dict(p) for p in data.get("parameters", [])),
        return_type=data.get("returnType"),
        is_async=bool(data.get("isAsync", False)),
        is_generator=bool(data.get("isGenerator", False)),
        is_static=bool(data.get("isStatic", False)),
        visibility=data.get("visibility"),
        comments=data.get("comments"),
        start_line=int(data.get("startLine", 0)),
        end_line=int(data.get("endLine", 0)),
        is_optional=bool(data.get("isOptional", False)),
        receiver=data.get("receiver", ""),
    )


def property_to_dict(prop: Property) -> Dict[str, Any]:
    return {
        "name": prop.name,
        "type": prop.type,
        "isStatic": prop.is_static,
        "visibility": prop.visibility,
        "optional": prop.optional,
        "comments": prop.comments,
    }


def property_from_dict(data: Mapping[str, Any]) -> Property:
    return Property(
        name=data["name"],
        type=data.get("type"),
        is_static=bool(data.get("isStatic", False)),
        visibility=data.get("visibility"),
        optional=bool(data.get("optional", False)),
        comments=data.get("comments"),
    )


def type_to_dict(symbol: TypeSymbol) -> Dict[str, Any]:
    return {
        "name": symbol.name,
        "kind": symbol.kind,
        "methods": [function_to_dict(m) for m in symbol.methods],
        "properties": [property_to_dict(p) for p in symbol.properties],
        "constructor": function_to_dict(symbol.constructor) if symbol.constructor else None,
        "superClass": symbol.super_type,
        "isInterface": symbol.is_interface,
        "startLine": symbol.start_line,
        "endLine": symbol.end_line,
        "comments": symbol.comments,
    }


def type_from_dict(data: Mapping[str, Any]) -> TypeSymbol:
    constructor = data.get("constructor")
    return TypeSymbol(
        name=data["name"],
        methods=tuple(function_from_dict(m) for m in data.get("methods", [])),
        properties=tuple(property_from_dict(p) for p in data.get("properties", [])),
        constructor=function_from_dict(constructor) if constructor else None,
        super_type=data.get("superClass"),
        is_interface=bool(data.get("isInterface", False)),
        start_line=int(data.get("startLine", 0)),
        end_line=int(data.get("endLine", 0)),
        comments=data.get("comments"),
        kind=data.get("kind", "class"),
    )


def symbol_to_dict(symbol: Symbol) -> Dict[str, Any]:
    if isinstance(symbol, TypeSymbol):
        return {"symbol": "type", **type_to_dict(symbol)}
    return {"symbol": "function", **function_to_dict(symbol)}


def symbol_from_dict(data: Mapping[str, Any]) -> Symbol:
    if data.get("symbol") == "type":
        return type_from_dict(data)
    return function_from_dict(data)


def import_to_dict(edge: ImportEdge) -> Dict[str, Any]:
    return {
        "source": edge.source,
        "specifiers": [
            {"name": b.name, "type": b.kind, "imported": b.imported} for b in edge.bindings
        ],
        "startLine": edge.start_line,
    }


def import_from_dict(data: Mapping[str, Any]) -> ImportEdge:
    return ImportEdge(
        source=data["source"],
        bindings=tuple(
            ImportBinding(name=b["name"], kind=b.get("type", "named"), imported=b.get("imported"))
            for b in data.get("specifiers", [])
        ),
        start_line=int(data.get("startLine", 0)),
    )


def export_to_dict(edge: ExportEdge) -> Dict[str, Any]:
    return {
        "name": edge.name,
        "type": edge.kind,
        "typeDefinition": edge.type_definition,
        "startLine": edge.start_line,
    }


def export_from_dict(data: Mapping[str, Any]) -> ExportEdge:
    return ExportEdge(
        name=data["name"],
        kind=data.get("type", "named"),
        type_definition=data.get("typeDefinition"),
        start_line=int(data.get("startLine", 0)),
    )


def module_to_dict(module: Module, *, include_source: bool = True) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "filePath": module.path,
        "language": module.grammar,
        "symbols": [symbol_to_dict(s) for s in module.symbols],
        "imports": [import_to_dict(i) for i in module.imports],
        "exports": [export_to_dict(e) for e in module.exports],
    }
    if include_source:
        payload["rawText"] = module.raw_text
    return payload


def module_from_dict(data: Mapping[str, Any]) -> Module:
    return Module(
        path=data["filePath"],
        grammar=data["language"],
        raw_text=data.get("rawText", ""),
        symbols=tuple(symbol_from_dict(s) for s in data.get("symbols", [])),
        imports=tuple(import_from_dict(i) for i in data.get("imports", [])),
        exports=tuple(export_from_dict(e) for e in data.get("exports", [])),
    )


def _documented_function_to_dict(entry: DocumentedFunction) -> Dict[str, Any]:
    return {
        **function_to_dict(entry.symbol),
        "description": entry.description,
        "parameterDocs": dict(entry.parameters),
        "returns": entry.returns,
        "example": entry.example,
    }


def _documented_function_from_dict(data: Mapping[str, Any]) -> DocumentedFunction:
    return DocumentedFunction(
        symbol=function_from_dict(data),
        description=data.get("description"),
        parameters=dict(data.get("parameterDocs") or {}),
        returns=data.get("returns"),
        example=data.get("example"),
    )


def _documented_type_to_dict(entry: DocumentedType) -> Dict[str, Any]:
    return {
        "symbol": type_to_dict(entry.symbol),
        "description": entry.description,
        "methods": [_documented_function_to_dict(m) for m in entry.methods],
        "constructor": _documented_function_to_dict(entry.constructor) if entry.constructor else None,
        "propertyDocs": dict(entry.properties),
    }


def _documented_type_from_dict(data: Mapping[str, Any]) -> DocumentedType:
    constructor = data.get("constructor")
    return DocumentedType(
        symbol=type_from_dict(data["symbol"]),
        description=data.get("description"),
        methods=tuple(_documented_function_from_dict(m) for m in data.get("methods", [])),
        constructor=_documented_function_from_dict(constructor) if constructor else None,
        properties=dict(data.get("propertyDocs") or {}),
    )


def documentation_to_dict(doc: Documentation) -> Dict[str, Any]:
    """Serialize the prose-bearing part of *doc*; the module is stored separately."""
    return {
        "title": doc.title,
        "description": doc.description,
        "functions": [_documented_function_to_dict(f) for f in doc.functions],
        "classes": [_documented_type_to_dict(t) for t in doc.types],
        "exports": [
            {**export_to_dict(e.export), "description": e.description} for e in doc.exports
        ],
        "usage": doc.usage,
        "notes": doc.notes,
        "proseError": doc.prose_error,
    }


def documentation_from_dict(data: Mapping[str, Any], module: Module) -> Documentation:
    return Documentation(
        module=module,
        title=data["title"],
        description=data.get("description"),
        functions=tuple(_documented_function_from_dict(f) for f in data.get("functions", [])),
        types=tuple(_documented_type_from_dict(t) for t in data.get("classes", [])),
        exports=tuple(
            DocumentedExport(export=export_from_dict(e), description=e.get("description"))
            for e in data.get("exports", [])
        ),
        usage=data.get("usage"),
        notes=data.get("notes"),
        prose_error=data.get("proseError"),
    )


def counts(doc: Documentation) -> Dict[str, int]:
    """Return the symbol counts shown in index entries."""
    return {
        "functions": len(doc.functions),
        "classes": len(doc.types),
        "exports": len(doc.exports),
    }


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = [
    "counts",
    "documentation_from_dict",
    "documentation_to_dict",
    "module_from_dict",
    "module_to_dict",
    "optional_text",
    "symbol_from_dict",
    "symbol_to_dict",
]
