from __future__ import annotations

import pytest

from core.events.errors import InvalidTopicPattern
from core.events.matcher import (
    candidate_patterns,
    is_wildcard,
    matches,
    validate_pattern,
    wildcard_for,
)


def test_wildcard_is_built_from_first_segment() -> None:
    assert wildcard_for("inventory.low_stock") == "inventory.*"
    assert wildcard_for("a.b.c") == "a.*"


def test_candidate_patterns_are_exact_and_first_segment_wildcard() -> None:
    assert candidate_patterns("invoice.posted") == ("invoice.posted", "invoice.*")


def test_exact_pattern_matches_only_its_topic() -> None:
    assert matches("invoice.posted", "invoice.posted") is True
    assert matches("invoice.posted", "invoice.overdue") is False


def test_namespace_wildcard_matches_every_topic_in_namespace() -> None:
    assert matches("inventory.*", "inventory.low_stock") is True
    assert matches("inventory.*", "inventory.adjusted") is True
    assert matches("inventory.*", "invoice.posted") is False


def test_wildcard_does_not_match_nested_namespace_prefix() -> None:
    # Only the first segment participates.
    assert matches("a.b.*", "a.b.c") is False
    assert matches("a.*", "a.b.c") is True


def test_empty_pattern_or_topic_never_matches() -> None:
    assert matches("", "invoice.posted") is False
    assert matches("invoice.posted", "") is False


def test_is_wildcard() -> None:
    assert is_wildcard("hr.*") is True
    assert is_wildcard("hr.leave") is False


@pytest.mark.parametrize(
    "pattern",
    ["invoice.posted", "inventory.*", "a.b.c", "  approval.completed  "],
)
def test_validate_pattern_accepts_exact_and_namespace_wildcard(pattern: str) -> None:
    assert validate_pattern(pattern) == pattern.strip()


@pytest.mark.parametrize(
    "pattern",
    ["", "invoice", "*", "*.posted", "a.b.*", "invoice.", ".posted", "inv*.x"],
)
def test_validate_pattern_rejects_other_forms(pattern: str) -> None:
    with pytest.raises(InvalidTopicPattern):
        validate_pattern(pattern)
