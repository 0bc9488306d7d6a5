"""Tag discovery and rest-state policy."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from plcortex.core.parser import is_code_line, tokenize_line


@dataclass(frozen=True)
class TagPartition:
    """Tags referenced by a program, split by role.

    Attributes:
        inputs: Tags only ever read by XIC/XIO, ordered by first appearance.
        outputs: Tags written by OTE/OTL/OTU, ordered by first appearance.
        no_tags_detected: The text had code but no recognizable token.
    """

    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    no_tags_detected: bool = False

    @property
    def all_tags(self) -> tuple[str, ...]:
        return self.inputs + self.outputs

    def is_input(self, name: str) -> bool:
        return name in self.inputs

    def is_output(self, name: str) -> bool:
        return name in self.outputs


def extract_tags(text: str) -> TagPartition:
    """Classify every tag in ``text`` as an input or an output.

    A tag written by any coil is an output even if other rungs only examine
    it; inputs are what remains. Tokens are recognized exactly as the parser
    recognizes them.
    """
    inputs: dict[str, None] = {}
    outputs: dict[str, None] = {}
    has_code = False

    for line in text.splitlines():
        if not is_code_line(line):
            continue
        has_code = True
        for instr in tokenize_line(line):
            (inputs if instr.is_condition else outputs).setdefault(instr.tag, None)

    return TagPartition(
        inputs=tuple(tag for tag in inputs if tag not in outputs),
        outputs=tuple(outputs),
        no_tags_detected=has_code and not inputs and not outputs,
    )


def _matches(name: str, patterns: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(pattern in lowered for pattern in patterns)


@dataclass(frozen=True)
class RestPolicy:
    """Name-based guess at how a tag is wired.

    This is a heuristic, not a hardware binding. Tags whose name contains a
    normally-closed pattern rest energized (a healthy stop string or
    overload contact carries signal); everything else rests de-energized.
    Momentary patterns mark pushbuttons that spring back after a press.
    Matching is a case-insensitive substring test.
    """

    normally_closed_patterns: tuple[str, ...] = ("stop", "fault", "overload")
    momentary_patterns: tuple[str, ...] = ("pb", "btn", "button", "push")
    overrides: dict[str, bool] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        for attr in ("normally_closed_patterns", "momentary_patterns"):
            patterns = getattr(self, attr)
            if isinstance(patterns, str):
                raise TypeError(f"{attr} must be a sequence of strings, not a string")
            if any(not p for p in patterns):
                raise ValueError(f"{attr} must not contain empty patterns")
            object.__setattr__(self, attr, tuple(p.lower() for p in patterns))

    def is_normally_closed(self, name: str) -> bool:
        return _matches(name, self.normally_closed_patterns)

    def is_momentary(self, name: str) -> bool:
        return _matches(name, self.momentary_patterns)

    def rest_value(self, name: str) -> bool:
        """Value ``name`` holds when nothing is pressed or energized."""
        if name in self.overrides:
            return bool(self.overrides[name])
        return self.is_normally_closed(name)

    def rest_values(self, names: Iterable[str]) -> dict[str, bool]:
        return {name: self.rest_value(name) for name in names}
