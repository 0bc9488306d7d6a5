"""Tests for contacts, coils and parallel branches."""

import pytest

from plcortex.core import SystemState
from plcortex.core.context import ScanContext
from plcortex.core.instruction import Branch, Instruction, Opcode
from plcortex.core.rung import Rung
from tests.conftest import evaluate_condition, evaluate_rung


def XIC(tag: str) -> Instruction:
    return Instruction(Opcode.XIC, tag)


def XIO(tag: str) -> Instruction:
    return Instruction(Opcode.XIO, tag)


class TestContacts:
    """XIC/XIO read the start-of-scan image."""

    @pytest.mark.parametrize("level", [True, False])
    def test_xic_follows_tag(self, level):
        state = SystemState.from_tags({"A": level})

        assert evaluate_condition(XIC("A"), state) is level

    @pytest.mark.parametrize("level", [True, False])
    def test_xio_inverts_tag(self, level):
        state = SystemState.from_tags({"A": level})

        assert evaluate_condition(XIO("A"), state) is (not level)

    def test_unknown_tag_reads_false(self):
        """A tag missing from the state is de-energized."""
        state = SystemState()

        assert evaluate_condition(XIC("Ghost"), state) is False
        assert evaluate_condition(XIO("Ghost"), state) is True

    def test_coil_has_no_contact_value(self):
        ctx = ScanContext(SystemState())

        with pytest.raises(TypeError, match="is an action"):
            Instruction(Opcode.OTE, "Motor").evaluate(ctx)


class TestSeries:
    """Conditions on a rung are ANDed."""

    @pytest.mark.parametrize(
        "a,b",
        [(True, True), (True, False), (False, True), (False, False)],
    )
    def test_series_and(self, a, b):
        rung = Rung((XIC("a"), XIC("b")))
        ctx = ScanContext(SystemState.from_tags({"a": a, "b": b}))

        assert rung.continuity(ctx) is (a and b)

    def test_empty_series_is_true(self):
        """A rung with only a coil is always energized."""
        rung = Rung((Instruction(Opcode.OTE, "Lamp"),))

        new_state = evaluate_rung(rung, SystemState())

        assert new_state.tags["Lamp"] is True


class TestBranch:
    """A branch is an OR of ANDed legs."""

    @pytest.mark.parametrize(
        "a,b",
        [(True, True), (True, False), (False, True), (False, False)],
    )
    def test_parallel_or(self, a, b):
        branch = Branch(((XIC("a"),), (XIC("b"),)))
        state = SystemState.from_tags({"a": a, "b": b})

        assert evaluate_condition(branch, state) is (a or b)

    def test_each_leg_is_an_and(self):
        branch = Branch(((XIC("a"), XIC("b")), (XIC("c"),)))

        assert evaluate_condition(branch, SystemState.from_tags({"a": True, "b": False})) is False
        assert (
            evaluate_condition(branch, SystemState.from_tags({"a": True, "b": True})) is True
        )
        assert evaluate_condition(branch, SystemState.from_tags({"c": True})) is True

    def test_branch_rejects_coils(self):
        with pytest.raises(ValueError, match="XIC/XIO"):
            Branch(((Instruction(Opcode.OTE, "Motor"),),))

    def test_str_round_trips_notation(self):
        branch = Branch(((XIC("a"), XIO("b")), (XIC("c"),)))

        assert str(branch) == "[XIC(a) XIO(b), XIC(c)]"


class TestCoils:
    """OTE mirrors continuity; OTL/OTU only act on a true rung."""

    def _apply(self, opcode: Opcode, continuity: bool, start: bool) -> bool:
        ctx = ScanContext(SystemState.from_tags({"Out": start}))
        Instruction(opcode, "Out").apply(ctx, continuity)
        return ctx.commit().tags["Out"]

    @pytest.mark.parametrize("start", [True, False])
    def test_ote_mirrors_continuity(self, start):
        assert self._apply(Opcode.OTE, True, start) is True
        assert self._apply(Opcode.OTE, False, start) is False

    @pytest.mark.parametrize("start", [True, False])
    def test_otl_sets_only_when_true(self, start):
        assert self._apply(Opcode.OTL, True, start) is True
        assert self._apply(Opcode.OTL, False, start) is start

    @pytest.mark.parametrize("start", [True, False])
    def test_otu_clears_only_when_true(self, start):
        assert self._apply(Opcode.OTU, True, start) is False
        assert self._apply(Opcode.OTU, False, start) is start

    def test_contact_cannot_be_applied(self):
        ctx = ScanContext(SystemState())

        with pytest.raises(TypeError, match="is a condition"):
            XIC("A").apply(ctx, True)


class TestOpcode:
    def test_roles(self):
        assert {op for op in Opcode if op.is_condition} == {Opcode.XIC, Opcode.XIO}
        assert {op for op in Opcode if op.is_action} == {Opcode.OTE, Opcode.OTL, Opcode.OTU}
