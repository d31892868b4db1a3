# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""C# declaration parser backed by tree-sitter."""

import logging
from functools import lru_cache

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

from srcdigest.declarations import ANONYMOUS, Declaration, DeclarationKind
from srcdigest.parsers.base import ParseError

logger = logging.getLogger(__name__)

_CONTAINER_TYPES: dict[str, DeclarationKind] = {
    "namespace_declaration": "namespace",
    "file_scoped_namespace_declaration": "namespace",
    "class_declaration": "class",
    "interface_declaration": "interface",
    "struct_declaration": "struct",
}
_MEMBER_SUFFIX = "_declaration"
_GLOBAL_STATEMENT = "global_statement"


@lru_cache(maxsize=1)
def get_csharp_language() -> Language:
    return Language(tree_sitter_c_sharp.language())


@lru_cache(maxsize=1)
def get_csharp_parser() -> Parser:
    parser = Parser()
    parser.language = get_csharp_language()
    return parser


class CSharpParser:
    """Parse C# compilation units into declaration trees.

    Namespaces, classes, interfaces and structs are containers; methods,
    properties and fields are leaves. Any other member declaration (enums,
    records, constructors, delegates, events, top-level statements) is kept
    as an ``other`` node carrying its tree-sitter node type. A file-scoped
    namespace owns every declaration that follows it.
    """

    suffixes: tuple[str, ...] = (".cs",)

    def parse(self, source: str) -> list[Declaration]:
        """Parse one C# compilation unit.

        Args:
            source: File source text.

        Returns:
            Root declarations in source order.

        Raises:
            ParseError: If tree-sitter reports syntax errors.
        """
        source_bytes = source.encode("utf-8")
        tree = get_csharp_parser().parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise ParseError(_describe_error(root))
        return self._extract_root(root=root, source_bytes=source_bytes)

    def _extract_root(self, root: Node, source_bytes: bytes) -> list[Declaration]:
        declarations: list[Declaration] = []
        members = _member_nodes(root)
        for index, node in enumerate(members):
            if node.type == "file_scoped_namespace_declaration":
                trailing = [
                    self._build(node=member, source_bytes=source_bytes)
                    for member in members[index + 1 :]
                ]
                own = self._build(node=node, source_bytes=source_bytes)
                declarations.append(
                    Declaration(
                        kind="namespace",
                        identifier=own.identifier,
                        children=own.children + tuple(trailing),
                        raw_kind=node.type,
                    )
                )
                break
            declarations.append(self._build(node=node, source_bytes=source_bytes))
        return declarations

    def _build(self, node: Node, source_bytes: bytes) -> Declaration:
        container_kind = _CONTAINER_TYPES.get(node.type)
        if container_kind is not None:
            body = node.child_by_field_name("body")
            children = tuple(
                self._build(node=member, source_bytes=source_bytes)
                for member in _member_nodes(body if body is not None else node)
            )
            return Declaration(
                kind=container_kind,
                identifier=_name_text(node, source_bytes),
                children=children,
                raw_kind=node.type,
            )
        if node.type == "method_declaration":
            return Declaration(
                kind="method",
                identifier=_name_text(node, source_bytes),
                source_text=_node_text(node, source_bytes),
                raw_kind=node.type,
            )
        if node.type == "property_declaration":
            return Declaration(
                kind="property",
                identifier=_name_text(node, source_bytes),
                declared_type=_field_text(node, "type", source_bytes),
                raw_kind=node.type,
            )
        if node.type == "field_declaration":
            return self._build_field(node=node, source_bytes=source_bytes)
        return Declaration(
            kind="other",
            identifier=_name_text(node, source_bytes),
            raw_kind=node.type,
        )

    def _build_field(self, node: Node, source_bytes: bytes) -> Declaration:
        declaration = _first_child_of_type(node, "variable_declaration")
        if declaration is None:
            logger.debug(
                f"Field declaration without variable declaration (line={node.start_point[0] + 1})"
            )
            return Declaration(kind="other", identifier=ANONYMOUS, raw_kind=node.type)
        variables = tuple(
            _name_text(declarator, source_bytes)
            for declarator in declaration.named_children
            if declarator.type == "variable_declarator"
        )
        return Declaration(
            kind="field",
            identifier=variables[0] if variables else ANONYMOUS,
            declared_type=_field_text(declaration, "type", source_bytes),
            variables=variables,
            raw_kind=node.type,
        )


def _member_nodes(node: Node) -> list[Node]:
    """Return declaration-like named children in source order."""
    return [
        child
        for child in node.named_children
        if child.type.endswith(_MEMBER_SUFFIX) or child.type == _GLOBAL_STATEMENT
    ]


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")


def _field_text(node: Node, field_name: str, source_bytes: bytes) -> str:
    child = node.child_by_field_name(field_name)
    if child is None:
        return ANONYMOUS
    return _node_text(child, source_bytes)


def _name_text(node: Node, source_bytes: bytes) -> str:
    name = node.child_by_field_name("name")
    if name is None:
        name = _first_child_of_type(node, "identifier")
    if name is None:
        declaration = _first_child_of_type(node, "variable_declaration")
        declarator = (
            _first_child_of_type(declaration, "variable_declarator")
            if declaration is not None
            else None
        )
        if declarator is None:
            return ANONYMOUS
        return _name_text(declarator, source_bytes)
    return _node_text(name, source_bytes)


def _first_child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _describe_error(root: Node) -> str:
    """Describe the first syntax error below ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            line, column = node.start_point
            label = f"missing {node.type}" if node.is_missing else "syntax error"
            return f"{label} at line {line + 1}, column {column + 1}"
        stack.extend(
            reversed(
                [
                    child
                    for child in node.children
                    if child.has_error or child.is_missing
                ]
            )
        )
    return "syntax error"
