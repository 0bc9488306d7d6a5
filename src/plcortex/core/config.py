"""Simulation settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from plcortex.core.tags import RestPolicy
from plcortex.validation.issues import Severity


@dataclass(frozen=True)
class SimulationConfig:
    """Tunables for the simulation driver.

    Attributes:
        scan_interval: Seconds between timer scans while running. None turns
            the timer off; scans then happen only through ``tick()`` and
            input changes.
        release_delay: Seconds a momentary press is held before release.
        rest_policy: Decides each tag's rest value and which inputs are
            pushbuttons.
        blocking_severities: Issue severities that keep a program from
            running. Any reported issue blocks by default.
    """

    scan_interval: float | None = 0.2
    release_delay: float = 0.1
    rest_policy: RestPolicy = field(default_factory=RestPolicy)
    blocking_severities: frozenset[Severity] = frozenset(Severity)

    def __post_init__(self) -> None:
        if self.scan_interval is not None and self.scan_interval <= 0:
            raise ValueError("scan_interval must be > 0 or None")
        if self.release_delay < 0:
            raise ValueError("release_delay must be >= 0")
        object.__setattr__(self, "blocking_severities", frozenset(self.blocking_severities))

    @property
    def dt(self) -> float:
        """Simulation seconds charged to each scan."""
        return self.scan_interval if self.scan_interval is not None else 0.0
