"""Pytest configuration and test helpers."""

from __future__ import annotations

from collections.abc import Mapping

from plcortex.core import SystemState
from plcortex.core.context import ScanContext
from plcortex.core.instruction import RungElement
from plcortex.core.parser import parse_program
from plcortex.core.rung import Rung
from plcortex.core.scan import scan


def evaluate_rung(rung: Rung, state: SystemState) -> SystemState:
    """Evaluate a single rung and return the committed state.

    Test helper that wraps the ScanContext API for unit testing of
    individual rungs.
    """
    ctx = ScanContext(state)
    rung.evaluate(ctx)
    return ctx.commit()


def evaluate_condition(cond: RungElement, state: SystemState) -> bool:
    """Evaluate a contact or branch against ``state``."""
    ctx = ScanContext(state)
    return cond.evaluate(ctx)


def scan_text(text: str, tags: Mapping[str, bool], *, scans: int = 1) -> SystemState:
    """Parse ``text`` and run ``scans`` scans starting from ``tags``.

    Args:
        text: Program text, one rung per line.
        tags: Initial tag levels.
        scans: Number of scans to run.

    Returns:
        The state after the last scan.
    """
    program = parse_program(text)
    state = SystemState.from_tags(tags)
    for _ in range(scans):
        state = scan(program, state)
    return state
