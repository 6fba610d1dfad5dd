"""Tests for tag parsing and identity keys."""

from action_sync.models import (
    ActionItem,
    ActionState,
    annotation_round_trips,
    identity_key,
    split_annotation,
    strip_annotation,
)
from action_sync.tags import TagParser, split_lines


# ---------------------------------------------------------------------------
# identity_key()
# ---------------------------------------------------------------------------

class TestIdentityKey:
    def test_case_insensitive(self):
        assert identity_key("Buy Groceries") == identity_key("buy groceries")

    def test_trims_and_collapses_whitespace(self):
        assert identity_key("  Call   dentist \t") == "call dentist"

    def test_strips_annotation(self):
        assert identity_key("Buy groceries [Shopping]") == "buy groceries"

    def test_annotation_helpers(self):
        assert split_annotation("Buy groceries [Shopping]") == ("Buy groceries", "Shopping")
        assert split_annotation("Buy groceries") == ("Buy groceries", None)
        assert strip_annotation("Buy groceries [Shopping]") == "Buy groceries"

    def test_bracketed_note_name_read_whole(self):
        assert split_annotation("Ship report [Project [Q3]]") == ("Ship report", "Project [Q3]")
        assert identity_key("Ship report [Project [Q3]]") == "ship report"

    def test_unbalanced_suffix_is_not_an_annotation(self):
        assert split_annotation("Ship report [Q3]]") == ("Ship report [Q3]]", None)
        assert split_annotation("Ship report []") == ("Ship report []", None)

    def test_annotation_round_trips(self):
        assert annotation_round_trips("Ship report", "Project [Q3]")
        assert not annotation_round_trips("Ship report", "Q3]")
        assert not annotation_round_trips("Ship report", "[Q3")


# ---------------------------------------------------------------------------
# split_lines()
# ---------------------------------------------------------------------------

class TestSplitLines:
    def test_mixed_line_endings(self):
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_trailing_newline_does_not_add_line(self):
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_keeps_inner_blank_lines(self):
        assert split_lines("a\n\nb") == ["a", "", "b"]

    def test_empty(self):
        assert split_lines("") == []


# ---------------------------------------------------------------------------
# TagParser
# ---------------------------------------------------------------------------

class TestClassify:
    def setup_method(self):
        self.parser = TagParser("#act", "#done")

    def test_open_line(self):
        item = self.parser.classify("#act Buy groceries")
        assert item.text == "Buy groceries"
        assert item.state == ActionState.OPEN

    def test_completed_line(self):
        item = self.parser.classify("#done Buy groceries")
        assert item.state == ActionState.COMPLETED

    def test_marker_case_insensitive(self):
        assert self.parser.classify("#ACT Buy groceries").is_open
        assert self.parser.classify("#Done Buy groceries").is_completed

    def test_leading_whitespace(self):
        assert self.parser.classify("   #act  Buy groceries  ").text == "Buy groceries"

    def test_marker_only_is_ignored(self):
        assert self.parser.classify("#act") is None
        assert self.parser.classify("#act    ") is None

    def test_marker_must_be_whole_word(self):
        assert self.parser.classify("#activity log") is None

    def test_untagged_line(self):
        assert self.parser.classify("Meeting notes") is None
        assert self.parser.classify("call #act later") is None

    def test_annotation_kept_in_text_for_sources(self):
        item = self.parser.classify("#act Buy milk [urgent]")
        assert item.text == "Buy milk [urgent]"
        assert item.source is None

    def test_annotation_split_for_action_list(self):
        item = self.parser.classify("#act Buy milk [Shopping]", annotated=True)
        assert item.text == "Buy milk"
        assert item.source == "Shopping"

    def test_bracketed_note_name_split_whole(self):
        item = self.parser.classify("#act Ship report [Project [Q3]]", annotated=True)
        assert item.text == "Ship report"
        assert item.source == "Project [Q3]"

    def test_bracket_only_body_is_not_annotation(self):
        item = self.parser.classify("#act [Shopping]", annotated=True)
        assert item.text == "[Shopping]"
        assert item.source is None

    def test_custom_markers(self):
        parser = TagParser("TODO:", "DONE:")
        assert parser.classify("TODO: write report").text == "write report"
        assert parser.classify("done: write report").is_completed


class TestParse:
    def test_parse_is_ordered_and_records_source(self):
        parser = TagParser()
        text = "Weekly\n#act First\nnotes\n#done Second\n#act Third\n"
        items = parser.parse(text, source="Weekly")
        assert [(i.text, i.state) for i in items] == [
            ("First", ActionState.OPEN),
            ("Second", ActionState.COMPLETED),
            ("Third", ActionState.OPEN),
        ]
        assert {i.source for i in items} == {"Weekly"}

    def test_parse_is_deterministic(self):
        parser = TagParser()
        text = "#act A\n#act B\n"
        assert parser.parse(text) == parser.parse(text)

    def test_parse_lines_keeps_untagged_text(self):
        parser = TagParser()
        lines = parser.parse_lines("Action List\n#act A [Note]\n\n--- Done ---\n#done B\n")
        assert lines[0] == "Action List"
        assert isinstance(lines[1], ActionItem) and lines[1].source == "Note"
        assert lines[2] == ""
        assert lines[3] == "--- Done ---"
        assert lines[4].is_completed


class TestFormat:
    def test_unmodified_line_round_trips_verbatim(self):
        parser = TagParser()
        line = "  #ACT   Buy groceries [Shopping]"
        item = parser.classify(line, annotated=True)
        assert parser.format(item) == line

    def test_modified_item_is_rendered(self):
        parser = TagParser()
        item = parser.classify("#act Buy groceries [Shopping]", annotated=True)
        item.complete()
        assert parser.format(item) == "#done Buy groceries [Shopping]"

    def test_new_item_without_source(self):
        assert TagParser().format(ActionItem("Buy groceries")) == "#act Buy groceries"
