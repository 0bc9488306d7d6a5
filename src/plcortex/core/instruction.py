"""Instructions and parallel branches.

Contacts (XIC/XIO) are pure reads of the start-of-scan image. Coils
(OTE/OTL/OTU) never take part in continuity; the scan engine hands them the
rung's result through ``apply``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from plcortex.core.context import ScanContext


class Opcode(Enum):
    """Instruction mnemonics understood by the simulator."""

    XIC = "XIC"  # examine if closed
    XIO = "XIO"  # examine if open
    OTE = "OTE"  # output energize
    OTL = "OTL"  # output latch
    OTU = "OTU"  # output unlatch

    @property
    def is_condition(self) -> bool:
        return self in _CONDITIONS

    @property
    def is_action(self) -> bool:
        return not self.is_condition


_CONDITIONS = frozenset({Opcode.XIC, Opcode.XIO})

CONDITION_OPCODES = frozenset(op.value for op in _CONDITIONS)
ACTION_OPCODES = frozenset(op.value for op in Opcode if op not in _CONDITIONS)


@dataclass(frozen=True)
class Instruction:
    """One ``OPCODE(TAG)`` token."""

    opcode: Opcode
    tag: str

    @property
    def is_condition(self) -> bool:
        return self.opcode.is_condition

    @property
    def is_action(self) -> bool:
        return self.opcode.is_action

    def evaluate(self, ctx: ScanContext) -> bool:
        """Contact value against the start-of-scan image.

        Raises:
            TypeError: If called on a coil.
        """
        if self.opcode is Opcode.XIC:
            return ctx.get_tag(self.tag)
        if self.opcode is Opcode.XIO:
            return not ctx.get_tag(self.tag)
        raise TypeError(f"{self.opcode.value} is an action and has no contact value")

    def apply(self, ctx: ScanContext, continuity: bool) -> None:
        """Write this coil's effect for a rung with the given continuity.

        OTE mirrors continuity every scan. OTL/OTU only act on a true rung
        and otherwise leave the tag as it was.

        Raises:
            TypeError: If called on a contact.
        """
        match self.opcode:
            case Opcode.OTE:
                ctx.set_tag(self.tag, continuity)
            case Opcode.OTL:
                if continuity:
                    ctx.set_tag(self.tag, True)
            case Opcode.OTU:
                if continuity:
                    ctx.set_tag(self.tag, False)
            case _:
                raise TypeError(f"{self.opcode.value} is a condition and cannot be applied")

    def __str__(self) -> str:
        return f"{self.opcode.value}({self.tag})"


@dataclass(frozen=True)
class Branch:
    """Parallel legs: OR of ANDed condition sequences.

    Only one level is supported; a leg holds plain contacts, never another
    branch.
    """

    legs: tuple[tuple[Instruction, ...], ...]

    def __post_init__(self) -> None:
        for leg in self.legs:
            for instr in leg:
                if not isinstance(instr, Instruction) or not instr.is_condition:
                    raise ValueError(f"Branch legs may only contain XIC/XIO contacts, got {instr!r}")

    def evaluate(self, ctx: ScanContext) -> bool:
        return any(all(instr.evaluate(ctx) for instr in leg) for leg in self.legs)

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(instr.tag for leg in self.legs for instr in leg)

    def __str__(self) -> str:
        return "[" + ", ".join(" ".join(str(i) for i in leg) for leg in self.legs) + "]"


RungElement: TypeAlias = "Instruction | Branch"
