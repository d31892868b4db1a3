# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Declaration tree flattening into ordered summary lines."""

import logging
from collections.abc import Iterable
from typing import Protocol

from srcdigest.config import MethodErrorPolicy
from srcdigest.declarations import Declaration
from srcdigest.llm_client import SummarizationError
from srcdigest.model import KIND_LABELS, MemberSummary

logger = logging.getLogger(__name__)

UNAVAILABLE_DESCRIPTION = "(summary unavailable)"


class Summarizer(Protocol):
    """Describe method bodies."""

    def summarize(self, method_source: str) -> str:
        """Return a one-line description of ``method_source``."""


class DeclarationVisitor:
    """Flatten declaration trees in pre-order, left-to-right.

    Every node yields at least one line. Unknown kinds produce an ``Other``
    placeholder line naming the parser node type.
    """

    def __init__(
        self, summarizer: Summarizer, on_method_error: MethodErrorPolicy = "file"
    ) -> None:
        """Initialize the visitor.

        Args:
            summarizer: Method description provider.
            on_method_error: ``method`` substitutes a placeholder description
                when summarization fails; ``file`` and ``run`` re-raise.
        """
        self._summarizer = summarizer
        self._on_method_error = on_method_error

    def visit_root(self, declarations: Iterable[Declaration]) -> list[MemberSummary]:
        """Flatten the root declarations of one file.

        Root namespaces are unwrapped: their header is emitted and their
        direct children are visited at the root depth.

        Raises:
            SummarizationError: If a method fails and the policy re-raises.
        """
        summaries: list[MemberSummary] = []
        for declaration in declarations:
            if declaration.kind == "namespace":
                summaries.append(self._header(declaration, depth=0))
                for child in declaration.children:
                    summaries.extend(self.visit(child, depth=0))
            else:
                summaries.extend(self.visit(declaration, depth=0))
        return summaries

    def visit(self, node: Declaration, depth: int = 0) -> list[MemberSummary]:
        """Flatten one node and all of its descendants.

        Raises:
            SummarizationError: If a method fails and the policy re-raises.
        """
        match node.kind:
            case "namespace" | "class" | "interface" | "struct":
                summaries = [self._header(node, depth=depth)]
                for child in node.children:
                    summaries.extend(self.visit(child, depth=depth + 1))
                return summaries
            case "method":
                description = self._describe_method(node)
                return [
                    MemberSummary(
                        kind="method",
                        identifier=node.identifier,
                        text=_single_line(f"Method: {node.identifier} - {description}"),
                        depth=depth,
                    )
                ]
            case "property":
                return [
                    MemberSummary(
                        kind="property",
                        identifier=node.identifier,
                        text=_single_line(
                            f"Property: {node.identifier} ({node.declared_type})"
                        ),
                        depth=depth,
                    )
                ]
            case "field":
                variables = node.variables or (node.identifier,)
                return [
                    MemberSummary(
                        kind="field",
                        identifier=variable,
                        text=_single_line(f"Field: {variable} ({node.declared_type})"),
                        depth=depth,
                    )
                    for variable in variables
                ]
            case _:
                return [
                    MemberSummary(
                        kind="other",
                        identifier=node.identifier,
                        text=_single_line(
                            f"Other: {node.identifier} [{node.raw_kind or node.kind}]"
                        ),
                        depth=depth,
                    )
                ]

    def _header(self, node: Declaration, depth: int) -> MemberSummary:
        return MemberSummary(
            kind=node.kind,
            identifier=node.identifier,
            text=_single_line(f"{KIND_LABELS[node.kind]}: {node.identifier}"),
            depth=depth,
        )

    def _describe_method(self, node: Declaration) -> str:
        try:
            return self._summarizer.summarize(node.source_text or "")
        except SummarizationError as exc:
            if self._on_method_error != "method":
                raise
            logger.warning(
                f"Method summarization failed; using placeholder "
                f"(method={node.identifier} error={exc})"
            )
            return UNAVAILABLE_DESCRIPTION


def _single_line(text: str) -> str:
    if "\n" not in text and "\r" not in text:
        return text
    return " ".join(text.split())
