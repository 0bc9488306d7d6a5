"""PLCRunner - consumer-driven scan execution over a parsed program.

The runner owns the current snapshot for one program. Callers drive it with
step()/run(), and may change input levels between scans.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from plcortex.core.rung import Program, Rung
from plcortex.core.scan import scan
from plcortex.core.state import SystemState


class PLCRunner:
    """Scan engine bound to one program.

    Executes logic as a pure function per scan: scan(rungs, state) -> new_state.
    The runner keeps only the latest snapshot.

    Attributes:
        current_state: The current SystemState snapshot.
        rungs: Rungs in scan order.
    """

    def __init__(
        self,
        logic: Program | Sequence[Rung] | Rung | None = None,
        initial_state: SystemState | None = None,
        *,
        dt: float = 0.2,
    ) -> None:
        """Create a new PLCRunner.

        Args:
            logic: Program, list of rungs, single rung, or None for empty logic.
            initial_state: Starting state. Defaults to SystemState().
            dt: Simulation seconds added per scan.
        """
        if dt < 0:
            raise ValueError("dt must be >= 0")

        self._rungs: tuple[Rung, ...]
        if logic is None:
            self._rungs = ()
        elif isinstance(logic, Program):
            self._rungs = logic.rungs
        elif isinstance(logic, Rung):
            self._rungs = (logic,)
        else:
            self._rungs = tuple(logic)

        self._state = initial_state if initial_state is not None else SystemState()
        self._dt = dt

    @property
    def current_state(self) -> SystemState:
        """Current state snapshot."""
        return self._state

    @property
    def rungs(self) -> tuple[Rung, ...]:
        return self._rungs

    @property
    def simulation_time(self) -> float:
        """Current simulation clock in seconds."""
        return self._state.timestamp

    def value(self, name: str) -> bool:
        return self._state.value(name)

    def set_input(self, name: str, value: bool) -> SystemState:
        """Change one tag level now, without scanning."""
        return self.set_inputs({name: value})

    def set_inputs(self, values: Mapping[str, bool]) -> SystemState:
        """Change several tag levels now, without scanning.

        The change is visible to the next scan's input image.
        """
        self._state = self._state.with_tags(values)
        return self._state

    def reset(self, values: Mapping[str, bool]) -> SystemState:
        """Replace every tag with ``values``; the scan counter keeps counting."""
        self._state = self._state.set(tags=SystemState.from_tags(values).tags)
        return self._state

    def step(self) -> SystemState:
        """Execute one full scan cycle and return the committed state."""
        self._state = scan(self._rungs, self._state, dt=self._dt)
        return self._state

    def run(self, cycles: int) -> SystemState:
        """Execute multiple scan cycles.

        Args:
            cycles: Number of scans to execute.

        Returns:
            The final SystemState after all cycles.
        """
        for _ in range(cycles):
            self.step()
        return self._state

    def run_until(
        self,
        predicate: Callable[[SystemState], bool],
        max_cycles: int = 10000,
    ) -> SystemState:
        """Run until predicate returns True or max_cycles reached.

        Args:
            predicate: Function that takes SystemState and returns bool.
            max_cycles: Maximum scans before giving up (default 10000).

        Returns:
            The state that matched the predicate, or final state if max reached.
        """
        for _ in range(max_cycles):
            self.step()
            if predicate(self._state):
                break
        return self._state
