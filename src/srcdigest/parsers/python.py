# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Python declaration parser implementation."""

import ast
import logging

from srcdigest.declarations import Declaration, DeclarationKind
from srcdigest.parsers.base import ParseError

logger = logging.getLogger(__name__)

_INTERFACE_BASES = frozenset({"Protocol", "ABC"})
_STRUCT_BASES = frozenset({"NamedTuple", "TypedDict"})
_PROPERTY_DECORATORS = frozenset({"property", "cached_property"})
_UNTYPED = "Any"
_COMPOUND_STATEMENTS = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.TryStar,
    ast.Match,
)


class PythonParser:
    """Parse Python modules into declaration trees.

    Classes map to containers (``Protocol``/``ABC`` subclasses become
    interfaces; dataclasses, ``NamedTuple`` and ``TypedDict`` become structs),
    functions to methods, ``@property`` accessors to properties and
    assignments to fields. Declarations inside ``if``, ``try``, ``with``,
    loop and ``match`` blocks belong to the enclosing level. Nested functions
    are part of their enclosing method body and are not visited separately.
    """

    suffixes: tuple[str, ...] = (".py",)

    def parse(self, source: str) -> list[Declaration]:
        """Parse one Python module.

        Args:
            source: Module source text.

        Returns:
            Root declarations in source order.

        Raises:
            ParseError: If the module has a syntax error.
        """
        try:
            tree = ast.parse(source)
        except (SyntaxError, ValueError) as exc:
            raise ParseError(str(exc)) from exc
        lines = source.splitlines()
        return self._extract_declarations(lines=lines, body=tree.body)

    def _extract_declarations(
        self, lines: list[str], body: list[ast.stmt]
    ) -> list[Declaration]:
        declarations: list[Declaration] = []
        for node in body:
            if isinstance(node, ast.ClassDef):
                declarations.append(
                    Declaration(
                        kind=self._classify_class(node),
                        identifier=node.name,
                        children=tuple(
                            self._extract_declarations(lines=lines, body=node.body)
                        ),
                        raw_kind="ClassDef",
                    )
                )
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                declaration = self._create_function(lines=lines, node=node)
                if declaration is not None:
                    declarations.append(declaration)
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                declaration = self._create_field(node)
                if declaration is not None:
                    declarations.append(declaration)
            elif isinstance(node, _COMPOUND_STATEMENTS):
                for block in _nested_blocks(node):
                    declarations.extend(
                        self._extract_declarations(lines=lines, body=block)
                    )
        return declarations

    def _classify_class(self, node: ast.ClassDef) -> DeclarationKind:
        base_names = {_dotted_tail(base) for base in node.bases}
        if base_names & _INTERFACE_BASES:
            return "interface"
        decorator_names = {_dotted_tail(decorator) for decorator in node.decorator_list}
        if "dataclass" in decorator_names or base_names & _STRUCT_BASES:
            return "struct"
        return "class"

    def _create_function(
        self, lines: list[str], node: ast.FunctionDef | ast.AsyncFunctionDef
    ) -> Declaration | None:
        decorator_names = [_dotted_tail(decorator) for decorator in node.decorator_list]
        if any(name in {"setter", "deleter"} for name in decorator_names):
            return None
        if any(name in _PROPERTY_DECORATORS for name in decorator_names):
            declared_type = ast.unparse(node.returns) if node.returns else _UNTYPED
            return Declaration(
                kind="property",
                identifier=node.name,
                declared_type=declared_type,
                raw_kind=type(node).__name__,
            )
        start_line = min(
            [int(node.lineno)]
            + [int(decorator.lineno) for decorator in node.decorator_list]
        )
        end_line = int(getattr(node, "end_lineno", node.lineno))
        return Declaration(
            kind="method",
            identifier=node.name,
            source_text=self._slice_lines(
                lines=lines, start_line=start_line, end_line=end_line
            ),
            raw_kind=type(node).__name__,
        )

    def _create_field(self, node: ast.Assign | ast.AnnAssign) -> Declaration | None:
        if isinstance(node, ast.AnnAssign):
            targets = [node.target]
            declared_type = ast.unparse(node.annotation)
        else:
            targets = list(node.targets)
            declared_type = _UNTYPED
        variables: list[str] = []
        for target in targets:
            variables.extend(_target_names(target))
        if not variables:
            logger.debug(
                f"Skipping assignment without plain names (line={node.lineno})"
            )
            return None
        return Declaration(
            kind="field",
            identifier=variables[0],
            declared_type=declared_type,
            variables=tuple(variables),
            raw_kind=type(node).__name__,
        )

    def _slice_lines(self, lines: list[str], start_line: int, end_line: int) -> str:
        return "\n".join(lines[start_line - 1 : end_line])


def _dotted_tail(node: ast.expr) -> str:
    """Return the last name of a dotted or called expression."""
    if isinstance(node, ast.Call):
        return _dotted_tail(node.func)
    if isinstance(node, ast.Subscript):
        return _dotted_tail(node.value)
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return ""


def _nested_blocks(node: ast.stmt) -> list[list[ast.stmt]]:
    """Return the statement blocks of a compound statement in source order."""
    if isinstance(node, ast.Match):
        return [case.body for case in node.cases]
    blocks = [node.body]  # type: ignore[attr-defined]
    if isinstance(node, (ast.Try, ast.TryStar)):
        blocks.extend(handler.body for handler in node.handlers)
        blocks.append(node.orelse)
        blocks.append(node.finalbody)
    elif isinstance(node, (ast.If, ast.For, ast.AsyncFor, ast.While)):
        blocks.append(node.orelse)
    return blocks


def _target_names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        names: list[str] = []
        for element in target.elts:
            names.extend(_target_names(element))
        return names
    return []
