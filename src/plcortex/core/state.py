"""Immutable tag state for the ladder simulator.

Every scan produces a new SystemState; a snapshot is never changed after it
is built, so the start-of-scan image can be shared freely while the next one
is assembled.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import cast

from pyrsistent import PMap, PRecord, field, pmap


class SystemState(PRecord):
    """Immutable snapshot of the simulated tag image.

    Attributes:
        scan_id: Monotonically increasing scan counter.
        timestamp: Simulation clock in seconds.
        tags: Immutable mapping of tag names to boolean signal levels.
    """

    scan_id = field(type=int, initial=0)
    timestamp = field(type=float, initial=0.0)
    tags = field(type=PMap, initial=pmap())

    @classmethod
    def from_tags(cls, tags: Mapping[str, bool]) -> SystemState:
        """Build an initial snapshot holding exactly ``tags``."""
        return cls(tags=pmap({name: bool(value) for name, value in tags.items()}))

    def with_tags(self, updates: Mapping[str, bool]) -> SystemState:
        """Return new state with updated tags. Original unchanged."""
        coerced = {name: bool(value) for name, value in updates.items()}
        return self.set(tags=self.tags.update(coerced))

    def value(self, name: str) -> bool:
        """Signal level of ``name``; tags never seen read as de-energized."""
        return bool(self.tags.get(name, False))

    def subset(self, names: Iterable[str]) -> dict[str, bool]:
        """Plain dict of the named tags that exist in this snapshot."""
        return {name: bool(self.tags[name]) for name in names if name in self.tags}

    def next_scan(self, dt: float) -> SystemState:
        """Return new state for next scan cycle.

        Args:
            dt: Time delta in seconds to add to timestamp.
        """
        e = self.evolver()
        e.set("scan_id", self.scan_id + 1)
        e.set("timestamp", self.timestamp + dt)
        return cast(SystemState, e.persistent())
