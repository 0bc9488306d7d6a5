"""Tests for tag extraction and the rest-state heuristic."""

import pytest

from plcortex.core.instruction import Instruction, Opcode
from plcortex.core.parser import parse_rung
from plcortex.core.tags import RestPolicy, TagPartition, extract_tags

PROGRAMS = [
    "XIC(Start) XIO(Stop) OTE(Motor)",
    "[XIC(Start), XIC(Motor)] XIO(Stop) OTE(Motor)",
    "XIC(A) OTL(Out)\nXIC(B) OTU(Out)\nXIC(Out) OTE(Lamp)",
    "XIC(A) XIO(A) OTE(B)\nXIC(B) OTE(A)",
    "// only a comment\nXIC(X)",
    "",
]


class TestExtractTags:
    def test_inputs_and_outputs(self):
        partition = extract_tags("XIC(Start) XIO(Stop) OTE(Motor)")

        assert partition.inputs == ("Start", "Stop")
        assert partition.outputs == ("Motor",)
        assert partition.no_tags_detected is False

    def test_output_wins_over_input(self):
        """A tag examined on one rung and driven on another is an output."""
        partition = extract_tags("XIC(Start) XIC(Motor) OTE(Motor)\nXIC(Motor) OTE(Lamp)")

        assert partition.inputs == ("Start",)
        assert partition.outputs == ("Motor", "Lamp")

    def test_condition_only_tag_is_input(self):
        """Output-looking names stay inputs when nothing drives them."""
        partition = extract_tags("XIC(Motor_Running) OTE(Lamp)")

        assert partition.inputs == ("Motor_Running",)

    def test_deduplicated_in_first_seen_order(self):
        partition = extract_tags("XIC(B) XIC(A) OTE(Y)\nXIC(A) XIC(B) OTE(X)\nXIC(C) OTL(Y)")

        assert partition.inputs == ("B", "A", "C")
        assert partition.outputs == ("Y", "X")

    def test_bracketed_tags_are_found(self):
        partition = extract_tags("[XIC(A), XIO(B)] OTE(C)")

        assert partition.inputs == ("A", "B")

    def test_comment_lines_are_ignored(self):
        partition = extract_tags("// XIC(Old) OTE(Legacy)\nXIC(A) OTE(B)")

        assert partition.all_tags == ("A", "B")

    def test_no_tags_detected(self):
        """Code without any token is flagged, not raised."""
        partition = extract_tags("this is not ladder logic")

        assert partition == TagPartition(no_tags_detected=True)

    def test_padded_contact_is_an_input_and_gates_the_rung(self):
        """Extractor and parser agree on tokens with padded tag names."""
        text = "XIC( A ) OTE(B)"

        assert extract_tags(text) == TagPartition(inputs=("A",), outputs=("B",))
        assert parse_rung(text).conditions == (Instruction(Opcode.XIC, "A"),)

    def test_tokens_the_parser_rejects_are_not_tags(self):
        partition = extract_tags("XIC(A)junk OTE(B)")

        assert partition.inputs == ()
        assert partition.outputs == ("B",)

    def test_blank_text_is_not_flagged(self):
        assert extract_tags("  \n// just a note\n").no_tags_detected is False

    @pytest.mark.parametrize("text", PROGRAMS)
    def test_partition_is_disjoint_and_complete(self, text):
        partition = extract_tags(text)
        tokens = {
            tag
            for line in text.splitlines()
            if not line.strip().startswith("//")
            for tag in _token_tags(line)
        }

        assert set(partition.inputs).isdisjoint(partition.outputs)
        assert set(partition.all_tags) == tokens


def _token_tags(line: str) -> list[str]:
    import re

    return re.findall(r"(?:XIC|XIO|OTE|OTL|OTU)\(([A-Za-z0-9_]+)\)", line)


class TestRestPolicy:
    """Normally-closed naming heuristic (stop/fault/overload rest energized)."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Stop", True),
            ("E_STOP_PB", True),
            ("Motor_Fault", True),
            ("OL_Overload", True),
            ("Start", False),
            ("Motor", False),
            ("Stopwatch", True),
        ],
    )
    def test_default_rest_values(self, name, expected):
        assert RestPolicy().rest_value(name) is expected

    def test_custom_patterns(self):
        policy = RestPolicy(normally_closed_patterns=("NC_",))

        assert policy.rest_value("nc_guard") is True
        assert policy.rest_value("Stop") is False

    def test_overrides_take_precedence(self):
        policy = RestPolicy(overrides={"Stop": False, "Permissive": True})

        assert policy.rest_value("Stop") is False
        assert policy.rest_value("Permissive") is True

    def test_momentary_patterns(self):
        policy = RestPolicy()

        assert policy.is_momentary("Start_PB") is True
        assert policy.is_momentary("ResetButton") is True
        assert policy.is_momentary("Selector") is False

    def test_rest_values_mapping(self):
        assert RestPolicy().rest_values(["Start", "Stop"]) == {"Start": False, "Stop": True}

    def test_rejects_bare_string(self):
        with pytest.raises(TypeError):
            RestPolicy(normally_closed_patterns="stop")  # type: ignore[arg-type]

    def test_rejects_empty_pattern(self):
        with pytest.raises(ValueError, match="empty"):
            RestPolicy(momentary_patterns=("pb", ""))
