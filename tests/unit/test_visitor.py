import pytest

from srcdigest.declarations import Declaration
from srcdigest.llm_client import SummarizationError
from srcdigest.visitor import UNAVAILABLE_DESCRIPTION, DeclarationVisitor


class _EchoSummarizer:
    def __init__(self, fail_on: set[str] | None = None) -> None:
        self._fail_on = fail_on or set()
        self.calls: list[str] = []

    def summarize(self, method_source: str) -> str:
        self.calls.append(method_source)
        if method_source in self._fail_on:
            raise SummarizationError("remote call failed")
        return f"does {method_source}."


def _count_nodes(declarations: list[Declaration]) -> int:
    total = 0
    stack = list(declarations)
    while stack:
        node = stack.pop()
        total += 1
        stack.extend(node.children)
    return total


def _method(name: str) -> Declaration:
    return Declaration(kind="method", identifier=name, source_text=name)


def _sample_tree() -> list[Declaration]:
    return [
        Declaration(
            kind="namespace",
            identifier="App",
            children=(
                Declaration(
                    kind="class",
                    identifier="Service",
                    children=(
                        Declaration(
                            kind="field",
                            identifier="count",
                            declared_type="int",
                            variables=("count",),
                        ),
                        Declaration(
                            kind="property", identifier="Name", declared_type="string"
                        ),
                        _method("Run"),
                        Declaration(
                            kind="struct",
                            identifier="Point",
                            children=(_method("Length"),),
                        ),
                    ),
                ),
                Declaration(
                    kind="interface", identifier="IService", children=(_method("Stop"),)
                ),
            ),
        )
    ]


def test_ph1_vis_001_visit_root_emits_pre_order_left_to_right() -> None:
    visitor = DeclarationVisitor(summarizer=_EchoSummarizer())

    summaries = visitor.visit_root(_sample_tree())

    assert [summary.text for summary in summaries] == [
        "Namespace: App",
        "Class: Service",
        "Field: count (int)",
        "Property: Name (string)",
        "Method: Run - does Run.",
        "Struct: Point",
        "Method: Length - does Length.",
        "Interface: IService",
        "Method: Stop - does Stop.",
    ]


def test_ph1_vis_002_output_has_at_least_one_line_per_node() -> None:
    tree = _sample_tree()
    visitor = DeclarationVisitor(summarizer=_EchoSummarizer())

    summaries = visitor.visit_root(tree)

    assert len(summaries) >= _count_nodes(tree)


def test_ph1_vis_003_field_declaration_expands_one_line_per_variable() -> None:
    field = Declaration(
        kind="field", identifier="a", declared_type="int", variables=("a", "b", "c")
    )

    summaries = DeclarationVisitor(summarizer=_EchoSummarizer()).visit(field)

    assert [summary.text for summary in summaries] == [
        "Field: a (int)",
        "Field: b (int)",
        "Field: c (int)",
    ]
    assert [summary.identifier for summary in summaries] == ["a", "b", "c"]


def test_ph1_vis_004_unknown_kind_emits_placeholder_line() -> None:
    node = Declaration(kind="other", identifier="Color", raw_kind="enum_declaration")

    summaries = DeclarationVisitor(summarizer=_EchoSummarizer()).visit(node)

    assert len(summaries) == 1
    assert summaries[0].text == "Other: Color [enum_declaration]"
    assert summaries[0].kind == "other"


def test_ph1_vis_005_empty_container_emits_only_header() -> None:
    node = Declaration(kind="class", identifier="Empty")

    summaries = DeclarationVisitor(summarizer=_EchoSummarizer()).visit(node)

    assert [summary.text for summary in summaries] == ["Class: Empty"]


def test_ph1_vis_006_root_namespace_children_stay_at_root_depth() -> None:
    visitor = DeclarationVisitor(summarizer=_EchoSummarizer())

    summaries = visitor.visit_root(_sample_tree())

    depths = {summary.text: summary.depth for summary in summaries}
    assert depths["Namespace: App"] == 0
    assert depths["Class: Service"] == 0
    assert depths["Field: count (int)"] == 1
    assert depths["Method: Length - does Length."] == 2


def test_ph1_vis_007_nested_namespace_is_visited_as_container() -> None:
    tree = Declaration(
        kind="namespace",
        identifier="Outer",
        children=(
            Declaration(
                kind="namespace",
                identifier="Inner",
                children=(Declaration(kind="class", identifier="Leaf"),),
            ),
        ),
    )

    summaries = DeclarationVisitor(summarizer=_EchoSummarizer()).visit_root([tree])

    assert [(summary.text, summary.depth) for summary in summaries] == [
        ("Namespace: Outer", 0),
        ("Namespace: Inner", 0),
        ("Class: Leaf", 1),
    ]


def test_ph1_vis_008_method_failure_propagates_under_file_policy() -> None:
    visitor = DeclarationVisitor(
        summarizer=_EchoSummarizer(fail_on={"Run"}), on_method_error="file"
    )

    with pytest.raises(SummarizationError):
        visitor.visit_root(_sample_tree())


def test_ph1_vis_009_method_failure_uses_placeholder_under_method_policy() -> None:
    summarizer = _EchoSummarizer(fail_on={"Run"})
    visitor = DeclarationVisitor(summarizer=summarizer, on_method_error="method")

    summaries = visitor.visit_root(_sample_tree())

    texts = [summary.text for summary in summaries]
    assert f"Method: Run - {UNAVAILABLE_DESCRIPTION}" in texts
    assert "Method: Stop - does Stop." in texts
    assert summarizer.calls == ["Run", "Length", "Stop"]


def test_ph1_vis_010_multiline_type_text_is_collapsed_to_one_line() -> None:
    node = Declaration(
        kind="property", identifier="Pair", declared_type="(int a,\n int b)"
    )

    summaries = DeclarationVisitor(summarizer=_EchoSummarizer()).visit(node)

    assert summaries[0].text == "Property: Pair ((int a, int b))"
