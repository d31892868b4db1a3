# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Declaration tree model shared by parsers and the visitor."""

from dataclasses import dataclass
from typing import Literal

DeclarationKind = Literal[
    "namespace",
    "class",
    "interface",
    "struct",
    "method",
    "property",
    "field",
    "other",
]

ANONYMOUS = "<anonymous>"


@dataclass(frozen=True)
class Declaration:
    """Represent one node of a parsed declaration tree.

    Attributes:
        kind: Closed declaration kind discriminant.
        identifier: Declared name; for fields, the first declared variable.
        children: Nested declarations in source order (containers only).
        declared_type: Declared type text for fields and properties.
        variables: Variable names declared by a field, in declaration order.
        source_text: Full rendered source text for methods.
        raw_kind: Parser-native node type name.
    """

    kind: DeclarationKind
    identifier: str
    children: tuple["Declaration", ...] = ()
    declared_type: str | None = None
    variables: tuple[str, ...] = ()
    source_text: str | None = None
    raw_kind: str = ""
