"""One scan cycle as a pure function: scan(rungs, state) -> next state."""

from __future__ import annotations

from collections.abc import Iterable

from plcortex.core.context import ScanContext
from plcortex.core.rung import Rung
from plcortex.core.state import SystemState


def scan(rungs: Iterable[Rung], state: SystemState, *, dt: float = 0.0) -> SystemState:
    """Evaluate every rung top to bottom and commit the result.

    Continuity of each rung is computed from ``state`` as it was when the
    scan started; coil writes only become visible on the following scan.
    When two rungs drive the same tag, the lower rung's write is kept.

    Args:
        rungs: Rungs in program order.
        state: Start-of-scan snapshot.
        dt: Seconds to add to the simulation clock.

    Returns:
        The committed next-scan snapshot.
    """
    ctx = ScanContext(state)
    for rung in rungs:
        rung.evaluate(ctx)
    return ctx.commit(dt=dt)
