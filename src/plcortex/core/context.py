"""ScanContext - frozen input image plus batched writes for one scan.

Every read during a scan comes from the snapshot the scan started with;
writes are collected in a pyrsistent evolver and committed once at the end.
An output energized by rung 1 is therefore not visible to rung 2 until the
next scan, the same as a PLC working from its input image table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plcortex.core.state import SystemState


class ScanContext:
    """Read-from-snapshot, write-to-pending context for a single scan cycle.

    Attributes:
        _state: The start-of-scan SystemState (never modified).
        _tags_evolver: Pyrsistent evolver for the final tag commit.
        _tags_pending: Tag writes made so far during this scan.
    """

    __slots__ = ("_state", "_tags_evolver", "_tags_pending")

    def __init__(self, state: SystemState) -> None:
        self._state = state
        self._tags_evolver = state.tags.evolver()
        self._tags_pending: dict[str, bool] = {}

    # =========================================================================
    # Read operations (start-of-scan image only)
    # =========================================================================

    def get_tag(self, name: str, default: bool = False) -> bool:
        """Read a tag from the start-of-scan image.

        Pending writes made earlier in the same scan are deliberately not
        visible here.
        """
        return bool(self._state.tags.get(name, default))

    def get_pending(self, name: str) -> bool | None:
        """Value written to ``name`` so far this scan, or None."""
        return self._tags_pending.get(name)

    @property
    def pending(self) -> dict[str, bool]:
        """Copy of all writes made so far during this scan."""
        return dict(self._tags_pending)

    # =========================================================================
    # Write operations (batched)
    # =========================================================================

    def set_tag(self, name: str, value: bool) -> None:
        """Set a tag value (batched, committed at end of scan)."""
        self._tags_pending[name] = bool(value)
        self._tags_evolver[name] = bool(value)

    # =========================================================================
    # Passthrough properties
    # =========================================================================

    @property
    def scan_id(self) -> int:
        """Current scan ID from the original state."""
        return self._state.scan_id

    @property
    def original_state(self) -> SystemState:
        """The start-of-scan snapshot."""
        return self._state

    # =========================================================================
    # Commit
    # =========================================================================

    def commit(self, dt: float = 0.0) -> SystemState:
        """Commit all pending writes and advance to the next scan.

        Args:
            dt: Time delta in seconds to add to timestamp.

        Returns:
            New SystemState with all changes applied.
        """
        new_state = self._state.set(tags=self._tags_evolver.persistent())
        return new_state.next_scan(dt=dt)
