"""Tests for Label and LabelGroup set notation."""

from batchtool.domain import Label, LabelGroup, Markers
from batchtool.domain.label import label_names


class TestLabel:
    """Tests for Label."""

    def test_str_sorted_union(self):
        assert str(Label({"b", "a", "c"})) == "a ∪ b ∪ c"

    def test_str_single(self):
        assert str(Label({"a"})) == "a"

    def test_to_list(self):
        assert Label({"b", "a"}).to_list() == ["a", "b"]


class TestLabelGroup:
    """Tests for LabelGroup parsing and rendering."""

    def test_parse_buckets(self):
        group = LabelGroup.parse(["~frontend", "!mobile-app", "+deprecated-app"])
        assert group.forced == {"deprecated-app"}
        assert group.included == {"frontend~"}
        assert group.excluded == {"mobile-app"}

    def test_label_skip_keeps_marker(self):
        group = LabelGroup.parse(["~all", "deprecated~!"])
        assert group.excluded == {"deprecated~"}

    def test_custom_label_marker(self):
        group = LabelGroup.parse(["@frontend"], Markers(label="@"))
        assert group.included == {"frontend@"}

    def test_str_included_only(self):
        group = LabelGroup.parse(["~frontend", "~backend"])
        assert str(group) == "(backend~ ∪ frontend~)"

    def test_str_with_excluded(self):
        group = LabelGroup.parse(["~frontend", "!mobile-app"])
        assert str(group) == "(frontend~) ∖ (mobile-app)"

    def test_str_with_forced(self):
        group = LabelGroup.parse(["~frontend", "+deprecated-app"])
        assert str(group) == "(deprecated-app) ∪ (frontend~)"

    def test_str_full_expression(self):
        """Test the difference is parenthesised when forced entries exist."""
        group = LabelGroup.parse(["~frontend", "!mobile-app", "+deprecated-app"])
        assert str(group) == "(deprecated-app) ∪ ( (frontend~) ∖ (mobile-app) )"

    def test_str_empty(self):
        assert str(LabelGroup()) == "()"

    def test_to_lists(self):
        group = LabelGroup.parse(["~b", "~a", "!c", "+d"])
        assert group.to_lists() == (["d"], ["a~", "b~"], ["c"])


class TestLabelNames:
    """Tests for extracting label names from display entries."""

    def test_only_label_entries(self):
        assert label_names(["frontend~", "mobile-app", "backend~"], Markers()) == ["backend", "frontend"]

    def test_empty(self):
        assert label_names([], Markers()) == []
