"""Core data models shared across autodocs components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

GRAMMARS: tuple[str, ...] = ("javascript", "typescript", "python", "go")

UNKNOWN_TYPES: Dict[str, str] = {
    "javascript": "any",
    "typescript": "any",
    "python": "Any",
    "go": "interface{}",
}

VISIBILITIES: tuple[str, ...] = ("public", "private", "protected", "unspecified")


@dataclass(frozen=True)
class SourceFile:
    """A file handed to the core: resolved path plus its raw text."""

    path: str
    text: str


@dataclass(frozen=True)
class Parameter:
    """A single declared parameter."""

    name: str
    type: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False


@dataclass(frozen=True)
class FunctionSymbol:
    """A function, method, or function-valued variable."""

    name: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    is_async: bool = False
    is_generator: bool = False
    is_static: bool = False
    visibility: Optional[str] = None
    comments: Optional[str] = None
    start_line: int = 0
    end_line: int = 0
    is_optional: bool = False
    receiver: str = ""


@dataclass(frozen=True)
class Property:
    """A field declared on a class, struct, or interface."""

    name: str
    type: Optional[str] = None
    is_static: bool = False
    visibility: Optional[str] = None
    optional: bool = False
    comments: Optional[str] = None


@dataclass(frozen=True)
class TypeSymbol:
    """A class, struct, or interface."""

    name: str
    methods: Tuple[FunctionSymbol, ...] = ()
    properties: Tuple[Property, ...] = ()
    constructor: Optional[FunctionSymbol] = None
    super_type: Optional[str] = None
    is_interface: bool = False
    start_line: int = 0
    end_line: int = 0
    comments: Optional[str] = None
    kind: str = "class"


Symbol = Union[FunctionSymbol, TypeSymbol]


@dataclass(frozen=True)
class ImportBinding:
    """A local name introduced by an import."""

    name: str
    kind: str = "named"  # "default", "named", "namespace"
    imported: Optional[str] = None


@dataclass(frozen=True)
class ImportEdge:
    """One import statement, with the module specifier exactly as written."""

    source: str
    bindings: Tuple[ImportBinding, ...] = ()
    start_line: int = 0


@dataclass(frozen=True)
class ExportEdge:
    """A name made visible outside the module."""

    name: str
    kind: str
    type_definition: Optional[str] = None
    start_line: int = 0


@dataclass(frozen=True)
class Module:
    """Normalized structural record for one source file."""

    path: str
    grammar: str
    raw_text: str
    symbols: Tuple[Symbol, ...] = ()
    imports: Tuple[ImportEdge, ...] = ()
    exports: Tuple[ExportEdge, ...] = ()

    @property
    def functions(self) -> Tuple[FunctionSymbol, ...]:
        return tuple(s for s in self.symbols if isinstance(s, FunctionSymbol))

    @property
    def types(self) -> Tuple[TypeSymbol, ...]:
        return tuple(s for s in self.symbols if isinstance(s, TypeSymbol))

    @property
    def line_count(self) -> int:
        return len(self.raw_text.split("\n"))


@dataclass(frozen=True)
class DocumentedFunction:
    """A function paired with its generated prose."""

    symbol: FunctionSymbol
    description: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)
    returns: Optional[str] = None
    example: Optional[str] = None


@dataclass(frozen=True)
class DocumentedType:
    """A type paired with its generated prose."""

    symbol: TypeSymbol
    description: Optional[str] = None
    methods: Tuple[DocumentedFunction, ...] = ()
    constructor: Optional[DocumentedFunction] = None
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentedExport:
    """An export paired with its generated prose."""

    export: ExportEdge
    description: Optional[str] = None


@dataclass(frozen=True)
class Documentation:
    """A module's symbols merged with externally generated prose."""

    module: Module
    title: str
    description: Optional[str] = None
    functions: Tuple[DocumentedFunction, ...] = ()
    types: Tuple[DocumentedType, ...] = ()
    exports: Tuple[DocumentedExport, ...] = ()
    usage: Optional[str] = None
    notes: Optional[str] = None
    prose_error: Optional[str] = None

    @property
    def path(self) -> str:
        return self.module.path

    @property
    def grammar(self) -> str:
        return self.module.grammar


__all__ = [
    "Documentation",
    "DocumentedExport",
    "DocumentedFunction",
    "DocumentedType",
    "ExportEdge",
    "FunctionSymbol",
    "GRAMMARS",
    "ImportBinding",
    "ImportEdge",
    "Module",
    "Parameter",
    "Property",
    "SourceFile",
    "Symbol",
    "TypeSymbol",
    "UNKNOWN_TYPES",
    "VISIBILITIES",
]
