"""Rung and Program containers.

A rung is the flat element list produced by the parser. Its conditions are
ANDed in series; at most one coil is honored.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from plcortex.core.instruction import Branch, Instruction

if TYPE_CHECKING:
    from plcortex.core.context import ScanContext
    from plcortex.core.instruction import RungElement


@dataclass(frozen=True)
class Rung:
    """One line of ladder logic.

    Attributes:
        elements: Instructions and branches in source order.
        source_line: 1-based line number in the program text, if known.
    """

    elements: tuple[RungElement, ...] = ()
    source_line: int | None = None

    @property
    def conditions(self) -> tuple[RungElement, ...]:
        """Contacts and branches, in source order."""
        return tuple(
            el for el in self.elements if isinstance(el, Branch) or el.is_condition
        )

    @property
    def actions(self) -> tuple[Instruction, ...]:
        """Every coil on the line, in source order."""
        return tuple(
            el for el in self.elements if isinstance(el, Instruction) and el.is_action
        )

    @property
    def action(self) -> Instruction | None:
        """The coil this rung drives.

        When a line carries several coils the first one wins and the rest are
        ignored by the scan.
        """
        actions = self.actions
        return actions[0] if actions else None

    @property
    def tags(self) -> tuple[str, ...]:
        names: list[str] = []
        for el in self.elements:
            names.extend(el.tags if isinstance(el, Branch) else (el.tag,))
        return tuple(dict.fromkeys(names))

    def continuity(self, ctx: ScanContext) -> bool:
        """Evaluate all conditions (AND logic).

        Returns True if all conditions are true, or if there are no conditions.
        """
        for cond in self.conditions:
            if not cond.evaluate(ctx):
                return False
        return True

    def evaluate(self, ctx: ScanContext) -> bool:
        """Evaluate this rung and write its coil into the context.

        Returns:
            The rung continuity.
        """
        energized = self.continuity(ctx)
        action = self.action
        if action is not None:
            action.apply(ctx, energized)
        return energized

    def __str__(self) -> str:
        return " ".join(str(el) for el in self.elements)


@dataclass(frozen=True)
class Program:
    """Parsed program: rungs in scan order plus the text they came from."""

    rungs: tuple[Rung, ...] = ()
    source: str = field(default="", compare=False)

    @classmethod
    def from_rungs(cls, rungs: Sequence[Rung], source: str = "") -> Program:
        return cls(rungs=tuple(rungs), source=source)

    def __iter__(self) -> Iterator[Rung]:
        return iter(self.rungs)

    def __len__(self) -> int:
        return len(self.rungs)

    @property
    def tags(self) -> tuple[str, ...]:
        """Every referenced tag, ordered by first appearance."""
        names: list[str] = []
        for rung in self.rungs:
            names.extend(rung.tags)
        return tuple(dict.fromkeys(names))
