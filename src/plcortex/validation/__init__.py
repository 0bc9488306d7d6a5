"""Collaborators that review program text before it is simulated."""

from plcortex.validation.endpoint import GenerateEndpointValidator
from plcortex.validation.issues import (
    LogicIssue,
    LogicValidator,
    Severity,
    StaticValidator,
    ValidatorError,
    clean_suggestion,
    parse_issues,
)

__all__ = [
    "GenerateEndpointValidator",
    "LogicIssue",
    "LogicValidator",
    "Severity",
    "StaticValidator",
    "ValidatorError",
    "clean_suggestion",
    "parse_issues",
]
