"""
Tests for domain enums and priority ordering.
"""

import pytest

from teamtack.core.domain.enums import (
    DEFAULT_PRIORITY_ORDER,
    CompletionMode,
    LocalStatus,
    SemanticState,
    SourceType,
    StatusSource,
    get_priority_sort_index,
)
from teamtack.core.exceptions import ValidationError


class TestLocalStatus:
    """Tests for LocalStatus parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("pending", LocalStatus.PENDING),
            ("in-progress", LocalStatus.IN_PROGRESS),
            ("in_progress", LocalStatus.IN_PROGRESS),
            ("In Review", LocalStatus.IN_REVIEW),
            ("COMPLETED", LocalStatus.COMPLETED),
            ("blocked", LocalStatus.BLOCKED),
        ],
    )
    def test_from_string(self, value, expected):
        """Should accept hyphen, underscore and space spellings."""
        assert LocalStatus.from_string(value) is expected

    def test_from_string_invalid(self):
        """Should reject unknown statuses with the valid values listed."""
        with pytest.raises(ValidationError, match="Valid values"):
            LocalStatus.from_string("finished")


class TestSemanticState:
    def test_from_string(self):
        assert SemanticState.from_string("in-progress") is SemanticState.IN_PROGRESS
        assert SemanticState.from_string("Testing") is SemanticState.TESTING

    def test_invalid(self):
        with pytest.raises(ValidationError):
            SemanticState.from_string("review")


class TestCompletionMode:
    """Tests for CompletionMode."""

    def test_from_string_accepts_hyphens(self):
        assert CompletionMode.from_string("upstream-strict") is CompletionMode.UPSTREAM_STRICT

    def test_invalid_mode(self):
        with pytest.raises(ValidationError, match="Unknown completion mode"):
            CompletionMode.from_string("lenient")

    def test_every_mode_has_description(self):
        for mode in CompletionMode:
            assert mode.description


class TestSourceEnums:
    def test_source_type_defaults_to_linear(self):
        """Missing source type means Linear."""
        assert SourceType.from_string(None) is SourceType.LINEAR
        assert SourceType.from_string("Trello") is SourceType.TRELLO

    def test_unknown_source_type(self):
        with pytest.raises(ValidationError):
            SourceType.from_string("jira")

    def test_status_source_defaults_to_remote(self):
        assert StatusSource.from_string("") is StatusSource.REMOTE
        assert StatusSource.from_string("local") is StatusSource.LOCAL


class TestPrioritySortIndex:
    """Tests for get_priority_sort_index."""

    def test_default_order(self):
        """Urgent sorts first, no priority last among known names."""
        assert get_priority_sort_index(1) == 0
        assert get_priority_sort_index(2) == 1
        assert get_priority_sort_index(4) == 3
        assert get_priority_sort_index(0) == DEFAULT_PRIORITY_ORDER.index("none")

    def test_custom_order(self):
        order = ["high", "urgent"]
        assert get_priority_sort_index(2, order) == 0
        assert get_priority_sort_index(1, order) == 1

    def test_unknown_priority_sorts_last(self):
        """Codes without a name, or names missing from the order, sort after all ranks."""
        order = ["urgent", "high"]
        assert get_priority_sort_index(9, order) == len(order)
        assert get_priority_sort_index(3, order) == len(order)
