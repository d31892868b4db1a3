import pytest

from srcdigest.normalizer import normalize_summary


def test_ph2_norm_001_truncated_enumeration_is_closed_with_period() -> None:
    assert (
        normalize_summary("Computes the sum, logs it, and", budget=50)
        == "Computes the sum, logs it."
    )


def test_ph2_norm_002_complete_reply_at_budget_is_unchanged() -> None:
    reply = "Returns the cached value."

    assert normalize_summary(reply, budget=10) == reply


def test_ph2_norm_003_long_reply_ending_with_comma_is_closed() -> None:
    assert normalize_summary("Parses input, validates it,", budget=5) == (
        "Parses input, validates it."
    )


def test_ph2_norm_004_short_reply_gets_period() -> None:
    assert normalize_summary("  Returns total  ", budget=80) == "Returns total."


def test_ph2_norm_005_word_ending_in_and_is_not_stripped() -> None:
    assert normalize_summary("Runs command", budget=80) == "Runs command."
    assert normalize_summary("Handles expand", budget=80) == "Handles expand."


def test_ph2_norm_006_newlines_are_collapsed() -> None:
    assert normalize_summary("Reads file\nand parses", budget=80) == (
        "Reads file and parses."
    )


@pytest.mark.parametrize(
    ("reply", "budget"),
    [
        ("Computes the sum, logs it, and", 50),
        ("Returns the cached value.", 10),
        ("Validates input,", 80),
        ("Sends request and", 4),
        ("Opens socket", 80),
    ],
)
def test_ph2_norm_007_normalization_is_idempotent(reply: str, budget: int) -> None:
    once = normalize_summary(reply, budget=budget)

    assert normalize_summary(once, budget=budget) == once
    assert not once.endswith("..")


def test_ph2_norm_008_lone_conjunction_normalizes_to_empty() -> None:
    assert normalize_summary("and", budget=80) == ""
