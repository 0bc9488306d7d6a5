"""Logic issues reported by the validation service and how to decode them."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ValidatorError(Exception):
    """The validation service failed or answered with something unusable."""


class Severity(Enum):
    """Issue severities, spelled the way the service returns them."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"

    @classmethod
    def parse(cls, value: str) -> Severity:
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown severity {value!r}")


@dataclass(frozen=True)
class LogicIssue:
    """One finding about the program text.

    Attributes:
        line: 1-based line the issue refers to; 0 for the program as a whole.
        type: Severity of the finding.
        message: Human readable description.
    """

    line: int
    type: Severity
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> LogicIssue:
        """Build an issue from one decoded JSON object.

        Raises:
            ValidatorError: If the object is not a well-formed issue.
        """
        if not isinstance(data, dict):
            raise ValidatorError(f"Issue entries must be objects, got {type(data).__name__}")
        try:
            return cls(
                line=int(data["line"]),
                type=Severity.parse(data["type"]),
                message=str(data["message"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidatorError(f"Malformed issue entry {data!r}: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "type": self.type.value, "message": self.message}


_JSON_FENCE_OPEN = re.compile(r"^```json\s*")
_ANY_FENCE_OPEN = re.compile(r"^```(?:\w+\s*)?\s*")
_FENCE_CLOSE = re.compile(r"```\s*$")


def parse_issues(text: str) -> list[LogicIssue]:
    """Decode the service's answer to a validation request.

    The service may wrap its JSON in a ```` ```json ```` fence. An empty
    answer or a JSON value that is not a list means "no issues".

    Raises:
        ValidatorError: On invalid JSON or malformed issue entries.
    """
    payload = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", text.strip())).strip()
    if not payload:
        return []
    try:
        result = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValidatorError(f"Failed to parse analysis result: {exc}") from exc
    if not isinstance(result, list):
        return []
    return [LogicIssue.from_dict(entry) for entry in result]


def clean_suggestion(text: str) -> str:
    """Strip a surrounding code fence from a suggested program."""
    return _FENCE_CLOSE.sub("", _ANY_FENCE_OPEN.sub("", text.strip())).strip()


@runtime_checkable
class LogicValidator(Protocol):
    """Remote reviewer that checks program text and proposes corrections."""

    async def validate(self, source: str) -> list[LogicIssue]:
        """Return the issues found in ``source``; empty when it looks sound."""
        ...

    async def suggest_fix(self, source: str, issues: Sequence[LogicIssue]) -> str:
        """Return replacement program text addressing ``issues``."""
        ...


@dataclass
class StaticValidator:
    """In-process validator that returns configured answers.

    Useful offline and in tests. ``issues`` maps exact source text to the
    issues it should produce; any other text validates clean. Calls are
    recorded in ``calls``.
    """

    issues: dict[str, list[LogicIssue]] = field(default_factory=dict)
    suggestion: str = ""
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def validate(self, source: str) -> list[LogicIssue]:
        self.calls.append(("validate", source))
        return list(self.issues.get(source, ()))

    async def suggest_fix(self, source: str, issues: Sequence[LogicIssue]) -> str:
        self.calls.append(("suggest_fix", source))
        return self.suggestion
