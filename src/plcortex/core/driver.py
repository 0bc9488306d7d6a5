"""SimulationDriver - analyze / run / stop state machine around PLCRunner.

States::

    STOPPED --analyze()--> ANALYZING --clean--> RUNNING <--start()/stop()--> STOPPED
                               |
                               +--issues--> FAULT --edit()--> STOPPED

Editing the source from any state returns to STOPPED and throws away the
parsed program, so a running simulation only ever executes logic it parsed
itself. An analysis that is still awaiting the validator when the source is
edited is discarded on completion.

Everything runs on one asyncio loop. Scans are synchronous and run to
completion; the only background work is the interval timer task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from enum import Enum

from plcortex.core.config import SimulationConfig
from plcortex.core.parser import parse_program
from plcortex.core.rung import Program
from plcortex.core.runner import PLCRunner
from plcortex.core.state import SystemState
from plcortex.core.tags import TagPartition, extract_tags
from plcortex.validation.issues import LogicIssue, LogicValidator, Severity, clean_suggestion

logger = logging.getLogger(__name__)

NO_TAGS_MESSAGE = "No tags detected"


class DriverState(Enum):
    STOPPED = "stopped"
    ANALYZING = "analyzing"
    RUNNING = "running"
    FAULT = "fault"


class SimulationDriver:
    """Owns the source text, its analysis, and the running simulation.

    Attributes:
        state: Current DriverState.
        source: Program text being edited/simulated.
        issues: Issues from the last analysis (kept in FAULT for display).
        suggestion: Replacement text proposed by the validator, if any.
        last_error: Message of the last failed collaborator call.
    """

    def __init__(
        self,
        validator: LogicValidator,
        source: str = "",
        *,
        config: SimulationConfig | None = None,
    ) -> None:
        self._validator = validator
        self._config = config if config is not None else SimulationConfig()
        self._source = source
        self._revision = 0
        self._state = DriverState.STOPPED
        self._issues: list[LogicIssue] = []
        self._suggestion: str | None = None
        self._last_error: str | None = None
        self._partition: TagPartition | None = None
        self._program: Program | None = None
        self._runner: PLCRunner | None = None
        self._timer: asyncio.Task[None] | None = None

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def source(self) -> str:
        return self._source

    @property
    def revision(self) -> int:
        """Incremented on every edit."""
        return self._revision

    @property
    def issues(self) -> list[LogicIssue]:
        return list(self._issues)

    @property
    def suggestion(self) -> str | None:
        return self._suggestion

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def partition(self) -> TagPartition | None:
        return self._partition

    @property
    def program(self) -> Program | None:
        return self._program

    @property
    def runner(self) -> PLCRunner | None:
        return self._runner

    @property
    def is_analyzed(self) -> bool:
        return self._runner is not None

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def tag_state(self) -> dict[str, bool]:
        """Every known tag and its level; empty until a clean analysis."""
        if self._runner is None:
            return {}
        return dict(self._runner.current_state.tags)

    @property
    def inputs(self) -> dict[str, bool]:
        if self._runner is None or self._partition is None:
            return {}
        return self._runner.current_state.subset(self._partition.inputs)

    @property
    def outputs(self) -> dict[str, bool]:
        if self._runner is None or self._partition is None:
            return {}
        return self._runner.current_state.subset(self._partition.outputs)

    # =========================================================================
    # Editing
    # =========================================================================

    def edit(self, source: str) -> None:
        """Replace the program text and return to STOPPED.

        Clears the parsed program, tag values, issues and suggestion. Any
        analysis still in flight for the previous text will be discarded.
        """
        self._cancel_timer()
        self._source = source
        self._revision += 1
        self._issues = []
        self._suggestion = None
        self._clear_program()
        self._set_state(DriverState.STOPPED)

    # =========================================================================
    # Analysis
    # =========================================================================

    async def analyze(self) -> list[LogicIssue]:
        """Validate and parse the current source.

        On a clean result the program is parsed, every tag is put at rest and
        the driver starts RUNNING. Blocking issues move it to FAULT instead.

        Returns:
            The issues found (including a local "no tags detected" issue).

        Raises:
            RuntimeError: If an analysis is already in flight, or the driver
                is in FAULT and the source has not been edited since.
            Exception: Whatever the validator raised; the driver is left
                STOPPED with ``last_error`` set. A cancelled analysis also
                leaves it STOPPED.
        """
        if self._state is DriverState.ANALYZING:
            raise RuntimeError("An analysis is already in progress")
        if self._state is DriverState.FAULT:
            raise RuntimeError("Program has unresolved issues; edit it before analyzing again")

        self._cancel_timer()
        self._clear_program()
        self._issues = []
        self._suggestion = None
        self._last_error = None
        revision = self._revision
        source = self._source
        self._set_state(DriverState.ANALYZING)

        try:
            issues = list(await self._validator.validate(source))
        except asyncio.CancelledError:
            if revision == self._revision:
                self._set_state(DriverState.STOPPED)
            logger.warning("Logic validation was cancelled")
            raise
        except Exception as exc:
            if revision == self._revision:
                self._last_error = str(exc) or type(exc).__name__
                self._set_state(DriverState.STOPPED)
            logger.warning(f"Logic validation failed: {exc}")
            raise

        if revision != self._revision:
            logger.warning(f"Discarding analysis of revision {revision}; source was edited meanwhile")
            return issues

        partition = extract_tags(source)
        if partition.no_tags_detected:
            issues.append(LogicIssue(line=0, type=Severity.ERROR, message=NO_TAGS_MESSAGE))
        self._issues = issues

        blocking = [issue for issue in issues if issue.type in self._config.blocking_severities]
        if blocking:
            logger.info(f"Analysis found {len(blocking)} blocking issue(s)")
            self._set_state(DriverState.FAULT)
            return issues

        program = parse_program(source)
        self._partition = partition
        self._program = program
        known = tuple(dict.fromkeys(partition.all_tags + program.tags))
        initial = SystemState.from_tags(self._config.rest_policy.rest_values(known))
        self._runner = PLCRunner(program, initial_state=initial, dt=self._config.dt)
        logger.info(
            f"Parsed {len(program)} rung(s): {len(partition.inputs)} input(s), "
            f"{len(partition.outputs)} output(s)"
        )
        self._set_state(DriverState.RUNNING)
        self._start_timer()
        return issues

    async def suggest_fix(self) -> str:
        """Ask the validator for corrected text addressing the current issues.

        Raises:
            RuntimeError: If there are no issues to fix.
        """
        if not self._issues:
            raise RuntimeError("There are no issues to fix")

        revision = self._revision
        try:
            text = await self._validator.suggest_fix(self._source, list(self._issues))
        except Exception as exc:
            if revision == self._revision:
                self._last_error = f"Failed to get suggestion: {exc}"
            logger.warning(f"Suggestion request failed: {exc}")
            raise

        suggestion = clean_suggestion(text)
        if revision == self._revision:
            self._suggestion = suggestion
        return suggestion

    def apply_suggestion(self) -> None:
        """Replace the source with the pending suggestion (back to STOPPED)."""
        if self._suggestion is None:
            raise RuntimeError("No suggestion to apply")
        self.edit(self._suggestion)

    # =========================================================================
    # Running
    # =========================================================================

    def start(self) -> None:
        """Resume scanning an analyzed program.

        While already RUNNING this only restarts a timer that has died, e.g.
        because the event loop that owned it has closed.

        Raises:
            RuntimeError: If the current source has not been analyzed cleanly.
        """
        if self._state is DriverState.RUNNING:
            self._start_timer()
            return
        if self._state is not DriverState.STOPPED or self._runner is None:
            raise RuntimeError(f"Cannot start from {self._state.name}; analyze the program first")
        self._set_state(DriverState.RUNNING)
        self._start_timer()

    def stop(self) -> None:
        """Stop scanning and put every known tag back at rest."""
        self._cancel_timer()
        if self._runner is not None:
            self._runner.reset(self._rest_values())
        if self._state is DriverState.RUNNING:
            self._set_state(DriverState.STOPPED)

    def tick(self) -> SystemState | None:
        """Run one scan if RUNNING; otherwise do nothing."""
        if self._state is not DriverState.RUNNING or self._runner is None:
            return None
        return self._runner.step()

    def toggle(self, tag: str) -> SystemState:
        """Flip a maintained input and scan once."""
        self._require_input(tag)
        assert self._runner is not None
        return self.set_input(tag, not self._runner.value(tag))

    def set_input(self, tag: str, value: bool) -> SystemState:
        """Drive an input to ``value`` and scan once.

        Raises:
            RuntimeError: If the simulation is not running.
            KeyError: If ``tag`` is not a known tag.
            ValueError: If ``tag`` is an output.
        """
        self._require_input(tag)
        assert self._runner is not None
        self._runner.set_input(tag, value)
        return self._runner.step()

    async def press(self, tag: str) -> SystemState:
        """Momentary press: actuate, scan, hold ``release_delay``, release, scan.

        Actuating drives the input to the opposite of its rest value rather
        than always to True. This is a policy choice: a normally-closed stop
        button rests True, so pressing it opens the contact (False) and
        releasing closes it again.
        """
        self._require_input(tag)
        assert self._runner is not None
        rest = self._config.rest_policy.rest_value(tag)
        revision = self._revision
        runner = self._runner
        self.set_input(tag, not rest)

        await asyncio.sleep(self._config.release_delay)

        # Stopped or edited while held: stop() already put the tag at rest.
        if (
            revision != self._revision
            or self._runner is not runner
            or self._state is not DriverState.RUNNING
        ):
            return runner.current_state
        runner.set_input(tag, rest)
        return runner.step()

    async def actuate(self, tag: str) -> SystemState:
        """Operate an input the way its name suggests: press buttons, toggle switches."""
        if self._config.rest_policy.is_momentary(tag):
            return await self.press(tag)
        return self.toggle(tag)

    def set_inputs(self, values: Mapping[str, bool]) -> SystemState:
        """Drive several inputs at once and scan once."""
        for tag in values:
            self._require_input(tag)
        assert self._runner is not None
        self._runner.set_inputs(values)
        return self._runner.step()

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_input(self, tag: str) -> None:
        if self._state is not DriverState.RUNNING or self._runner is None or self._partition is None:
            raise RuntimeError("Inputs can only be changed while the simulation is running")
        if self._partition.is_output(tag):
            raise ValueError(f"Tag '{tag}' is an output and is driven by the logic")
        if not self._partition.is_input(tag):
            raise KeyError(tag)

    def _rest_values(self) -> dict[str, bool]:
        assert self._runner is not None
        return self._config.rest_policy.rest_values(self._runner.current_state.tags.keys())

    def _clear_program(self) -> None:
        self._partition = None
        self._program = None
        self._runner = None

    def _set_state(self, state: DriverState) -> None:
        if state is not self._state:
            logger.info(f"Simulation {self._state.value} -> {state.value}")
        self._state = state

    def _start_timer(self) -> None:
        if self._config.scan_interval is None or self.timer_active:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; scans are driven by tick()")
            return
        self._timer = loop.create_task(self._scan_loop(self._config.scan_interval))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _scan_loop(self, interval: float) -> None:
        while self._state is DriverState.RUNNING:
            await asyncio.sleep(interval)
            self.tick()
