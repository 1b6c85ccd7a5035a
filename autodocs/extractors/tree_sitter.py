"""Tree-sitter powered extractor for JavaScript and TypeScript."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

from tree_sitter import Language, Node, Parser
from tree_sitter_language_pack import get_language

from ..errors import GrammarError
from ..models import (
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
from .base import Extractor
from .utils import join_comments, strip_comment

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}
_CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration", "class"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
_FIELD_DEFINITIONS = {"public_field_definition", "field_definition"}
_PARAMETER_WRAPPERS = {"required_parameter", "optional_parameter"}


@lru_cache(maxsize=None)
def _language(key: str) -> Language:
    return get_language(key)


class TreeSitterExtractor(Extractor):
    """Walks a tree-sitter syntax tree once, collecting top-level declarations.

    One walker serves both dialects; subclasses only pick the grammar name,
    file extensions and which tree-sitter language to load for a path.
    """

    def language_for(self, path: str) -> str:
        return self.grammar

    def extract(self, path: str, text: str) -> Module:
        # Parser instances are not shared between threads.
        parser = Parser(_language(self.language_for(path)))
        source = text.encode("utf-8")
        tree = parser.parse(source)
        if tree.root_node.has_error:
            raise GrammarError(_describe_error(tree.root_node), path=path)

        walker = _Walker(source)
        for statement in tree.root_node.named_children:
            walker.visit_statement(statement)

        return Module(
            path=path,
            grammar=self.grammar,
            raw_text=text,
            symbols=tuple(walker.symbols),
            imports=tuple(walker.imports),
            exports=tuple(walker.exports),
        )


class JavaScriptExtractor(TreeSitterExtractor):
    grammar = "javascript"
    extensions = (".js", ".jsx", ".mjs", ".cjs")


class TypeScriptExtractor(TreeSitterExtractor):
    grammar = "typescript"
    extensions = (".ts", ".tsx")

    def language_for(self, path: str) -> str:
        return "tsx" if path.lower().endswith(".tsx") else "typescript"


def _describe_error(root: Node) -> str:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            if node.is_missing:
                return f"missing '{node.type}' at line {row + 1}, column {column + 1}"
            return f"syntax error at line {row + 1}, column {column + 1}"
        stack.extend(reversed(node.children))
    return "syntax error"


class _Walker:
    def __init__(self, source: bytes) -> None:
        self.source = source
        self.symbols: List[Symbol] = []
        self.imports: List[ImportEdge] = []
        self.exports: List[ExportEdge] = []

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    # Statements ----------------------------------------------------------------

    def visit_statement(self, node: Node, anchor: Optional[Node] = None) -> None:
        anchor = anchor or node
        kind = node.type
        if kind == "import_statement":
            self._visit_import(node)
        elif kind == "export_statement":
            self._visit_export(node)
        elif kind in _FUNCTION_DECLARATIONS:
            function = self._function(node, node, anchor)
            if function is not None:
                self.symbols.append(function)
        elif kind in _VARIABLE_DECLARATIONS:
            self.symbols.extend(self._variable_functions(node, anchor))
        elif kind in _CLASS_DECLARATIONS:
            cls = self._class(node, anchor)
            if cls is not None:
                self.symbols.append(cls)
        elif kind == "interface_declaration":
            self.symbols.append(self._interface(node, anchor))
        elif kind == "type_alias_declaration":
            self.exports.append(
                ExportEdge(
                    name=self.text(node.child_by_field_name("name")),
                    kind="type-alias",
                    type_definition=" ".join(self.text(node.child_by_field_name("value")).split())
                    or None,
                    start_line=_line(node),
                )
            )

    def _visit_import(self, node: Node) -> None:
        source = _unquote(self.text(node.child_by_field_name("source")))
        bindings: List[ImportBinding] = []
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for child in clause.named_children:
                if child.type == "identifier":
                    bindings.append(ImportBinding(name=self.text(child), kind="default"))
                elif child.type == "namespace_import":
                    identifier = _first_of(child, "identifier")
                    bindings.append(ImportBinding(name=self.text(identifier), kind="namespace"))
                elif child.type == "named_imports":
                    for spec in child.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = self.text(spec.child_by_field_name("name"))
                        alias = spec.child_by_field_name("alias")
                        bindings.append(
                            ImportBinding(
                                name=self.text(alias) if alias is not None else imported,
                                kind="named",
                                imported=imported,
                            )
                        )
        self.imports.append(ImportEdge(source=source, bindings=tuple(bindings), start_line=_line(node)))

    def _visit_export(self, node: Node) -> None:
        is_default = any(child.type == "default" for child in node.children)
        declaration = node.child_by_field_name("declaration")
        line = _line(node)

        if declaration is not None:
            self.visit_statement(declaration, anchor=node)
            names = self._declared_names(declaration)
            if is_default:
                self.exports.append(
                    ExportEdge(name=names[0][0] if names else "default", kind="default", start_line=line)
                )
                return
            for name, kind in names:
                self.exports.append(ExportEdge(name=name, kind=kind, start_line=line))
            return

        if is_default:
            value = node.child_by_field_name("value")
            name = "default"
            if value is not None and value.type in _CLASS_DECLARATIONS | _FUNCTION_VALUES:
                name = self.text(value.child_by_field_name("name")) or "default"
            elif value is not None and value.type == "identifier":
                name = self.text(value)
            self.exports.append(ExportEdge(name=name, kind="default", start_line=line))
            return

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                alias = spec.child_by_field_name("alias")
                exported = alias if alias is not None else spec.child_by_field_name("name")
                self.exports.append(ExportEdge(name=self.text(exported), kind="named", start_line=line))

    def _declared_names(self, declaration: Node) -> List[Tuple[str, str]]:
        kind = declaration.type
        if kind in _FUNCTION_DECLARATIONS:
            return [(self.text(declaration.child_by_field_name("name")), "function")]
        if kind in _VARIABLE_DECLARATIONS:
            return [
                (self.text(declarator.child_by_field_name("name")), "variable")
                for declarator in declaration.named_children
                if declarator.type == "variable_declarator"
            ]
        if kind in _CLASS_DECLARATIONS or kind in {"interface_declaration", "enum_declaration"}:
            name = declaration.child_by_field_name("name")
            return [(self.text(name), "type")] if name is not None else []
        # Type aliases are recorded when the declaration itself is visited.
        return []

    # Functions -----------------------------------------------------------------

    def _function(
        self,
        node: Node,
        name_source: Node,
        anchor: Node,
        *,
        name: Optional[str] = None,
    ) -> Optional[FunctionSymbol]:
        resolved = name or self.text(name_source.child_by_field_name("name"))
        if not resolved:
            return None
        return FunctionSymbol(
            name=resolved,
            parameters=tuple(self._parameters(node)),
            return_type=self._flatten(node.child_by_field_name("return_type")),
            is_async=_has_token(node, "async"),
            is_generator=node.type.startswith("generator") or _has_token(node, "*"),
            comments=self._leading_comments(anchor),
            start_line=_line(anchor),
            end_line=_end_line(anchor),
        )

    def _variable_functions(self, node: Node, anchor: Node) -> Iterable[FunctionSymbol]:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is None or name_node.type != "identifier":
                continue
            if value is None or value.type not in _FUNCTION_VALUES:
                continue
            function = self._function(value, declarator, anchor, name=self.text(name_node))
            if function is not None:
                yield function

    def _parameters(self, node: Node) -> List[Parameter]:
        single = node.child_by_field_name("parameter")
        if single is not None:
            return [Parameter(name=self.text(single))]
        container = node.child_by_field_name("parameters")
        if container is None:
            return []
        parameters: List[Parameter] = []
        for child in container.named_children:
            if child.type == "comment":
                continue
            parameters.append(self._parameter(child))
        return parameters

    def _parameter(self, node: Node) -> Parameter:
        declared: Optional[str] = None
        default: Optional[str] = None
        optional = False
        pattern = node

        if node.type in _PARAMETER_WRAPPERS:
            pattern = node.child_by_field_name("pattern") or node
            declared = self._flatten(node.child_by_field_name("type"))
            value = node.child_by_field_name("value")
            default = self.text(value) if value is not None else None
            optional = node.type == "optional_parameter" or default is not None
        if pattern.type == "assignment_pattern":
            value = pattern.child_by_field_name("right")
            default = self.text(value) if value is not None else default
            optional = True
            pattern = pattern.child_by_field_name("left") or pattern

        return Parameter(
            name=self._pattern_name(pattern),
            type=declared,
            default=default,
            optional=optional,
        )

    def _pattern_name(self, pattern: Node) -> str:
        if pattern.type == "object_pattern":
            return "{object}"
        if pattern.type == "array_pattern":
            return "[array]"
        if pattern.type == "rest_pattern":
            identifier = _first_of(pattern, "identifier")
            return f"...{self.text(identifier)}" if identifier is not None else "...rest"
        return self.text(pattern)

    def _flatten(self, node: Optional[Node]) -> Optional[str]:
        """Flatten a type node to a display string; unknown shapes become `any`."""
        if node is None:
            return None
        if node.type == "type_annotation":
            inner = node.named_children
            return self._flatten(inner[0]) if inner else None
        if node.type in {"predefined_type", "type_identifier", "nested_type_identifier"}:
            return self.text(node)
        if node.type == "generic_type":
            return self._flatten(node.child_by_field_name("name") or node.named_children[0])
        if node.type == "array_type":
            inner = node.named_children
            return f"{self._flatten(inner[0]) if inner else 'any'}[]"
        return "any"

    # Classes and interfaces ----------------------------------------------------

    def _class(self, node: Node, anchor: Node) -> Optional[TypeSymbol]:
        name = self.text(node.child_by_field_name("name"))
        if not name:
            return None
        methods: List[FunctionSymbol] = []
        properties: List[Property] = []
        constructor: Optional[FunctionSymbol] = None

        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type == "method_definition":
                method = self._method(member)
                if method.name == "constructor":
                    constructor = method
                    properties.extend(self._parameter_properties(member))
                else:
                    methods.append(method)
            elif member.type in _FIELD_DEFINITIONS:
                field = self._field(member)
                if field is not None:
                    properties.append(field)

        return TypeSymbol(
            name=name,
            methods=tuple(methods),
            properties=tuple(properties),
            constructor=constructor,
            super_type=self._super_class(node),
            start_line=_line(anchor),
            end_line=_end_line(anchor),
            comments=self._leading_comments(anchor),
            kind="class",
        )

    def _method(self, node: Node) -> FunctionSymbol:
        name_node = node.child_by_field_name("name")
        return FunctionSymbol(
            name=self.text(name_node),
            parameters=tuple(self._parameters(node)),
            return_type=self._flatten(node.child_by_field_name("return_type")),
            is_async=_has_token(node, "async"),
            is_generator=_has_token(node, "*"),
            is_static=_has_token(node, "static"),
            visibility=self._visibility(node, name_node),
            comments=self._leading_comments(node),
            start_line=_line(node),
            end_line=_end_line(node),
            is_optional=_has_token(node, "?"),
        )

    def _field(self, node: Node) -> Optional[Property]:
        name_node = node.child_by_field_name("name") or node.child_by_field_name("property")
        if name_node is None:
            return None
        return Property(
            name=self.text(name_node),
            type=self._flatten(node.child_by_field_name("type")),
            is_static=_has_token(node, "static"),
            visibility=self._visibility(node, name_node),
            optional=_has_token(node, "?"),
            comments=self._leading_comments(node),
        )

    def _parameter_properties(self, constructor: Node) -> List[Property]:
        container = constructor.child_by_field_name("parameters")
        properties: List[Property] = []
        for child in container.named_children if container is not None else []:
            modifier = _first_of(child, "accessibility_modifier")
            if child.type not in _PARAMETER_WRAPPERS or modifier is None:
                continue
            pattern = child.child_by_field_name("pattern")
            properties.append(
                Property(
                    name=self.text(pattern),
                    type=self._flatten(child.child_by_field_name("type")),
                    visibility=self.text(modifier),
                    optional=child.type == "optional_parameter",
                )
            )
        return properties

    def _visibility(self, node: Node, name_node: Optional[Node]) -> Optional[str]:
        modifier = _first_of(node, "accessibility_modifier")
        if modifier is not None:
            return self.text(modifier)
        if name_node is not None and name_node.type == "private_property_identifier":
            return "private"
        return None

    def _super_class(self, node: Node) -> Optional[str]:
        heritage = _first_of(node, "class_heritage")
        if heritage is None:
            return None
        clause = _first_of(heritage, "extends_clause")
        if clause is not None:
            target = clause.child_by_field_name("value") or (
                clause.named_children[0] if clause.named_children else None
            )
        elif _has_token(heritage, "extends"):
            target = heritage.named_children[0] if heritage.named_children else None
        else:
            target = None
        if target is None or target.type not in {"identifier", "member_expression"}:
            return None
        return self.text(target)

    def _interface(self, node: Node, anchor: Node) -> TypeSymbol:
        methods: List[FunctionSymbol] = []
        properties: List[Property] = []
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type == "property_signature":
                properties.append(
                    Property(
                        name=self.text(member.child_by_field_name("name")),
                        type=self._flatten(member.child_by_field_name("type")),
                        optional=_has_token(member, "?"),
                        comments=self._leading_comments(member),
                    )
                )
            elif member.type == "method_signature":
                methods.append(self._method(member))

        super_type: Optional[str] = None
        extends = _first_of(node, "extends_type_clause")
        if extends is not None and extends.named_children:
            super_type = self._flatten(extends.named_children[0])
            if super_type == "any":
                super_type = self.text(extends.named_children[0])

        return TypeSymbol(
            name=self.text(node.child_by_field_name("name")),
            methods=tuple(methods),
            properties=tuple(properties),
            super_type=super_type,
            is_interface=True,
            start_line=_line(anchor),
            end_line=_end_line(anchor),
            comments=self._leading_comments(anchor),
            kind="interface",
        )

    # Comments ------------------------------------------------------------------

    def _leading_comments(self, node: Node) -> Optional[str]:
        """Collect comment siblings directly above *node*, allowing one blank line."""
        chunks: List[str] = []
        boundary = node.start_point[0]
        sibling = node.prev_sibling
        while sibling is not None and sibling.type == "comment":
            if boundary - sibling.end_point[0] > 2:
                break
            chunks.insert(0, strip_comment(self.text(sibling)))
            boundary = sibling.start_point[0]
            sibling = sibling.prev_sibling
        return join_comments(chunks)


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _end_line(node: Node) -> int:
    return node.end_point[0] + 1


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _first_of(node: Node, kind: str) -> Optional[Node]:
    for child in node.children:
        if child.type == kind:
            return child
    return None


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'", "`"}:
        return text[1:-1]
    return text


__all__ = ["JavaScriptExtractor", "TreeSitterExtractor", "TypeScriptExtractor"]
