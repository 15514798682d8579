"""Error taxonomy for rejected operations.

Rule helpers raise :class:`RuleViolation`; each public operation catches it
at its boundary and reports an :class:`OperationError` on the result with
the caller's empire left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    INSUFFICIENT = "insufficient"
    RULE_GATE = "rule_gate"
    DEFEATED = "defeated"


@dataclass(frozen=True, slots=True)
class OperationError:
    kind: ErrorKind
    reason: str


class RuleViolation(ValueError):
    """A request the rules refuse; carries the category and a readable reason."""

    def __init__(self, kind: ErrorKind, reason: str) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason

    def to_error(self) -> OperationError:
        return OperationError(self.kind, self.reason)


def invalid(reason: str) -> RuleViolation:
    return RuleViolation(ErrorKind.VALIDATION, reason)


def insufficient(reason: str) -> RuleViolation:
    return RuleViolation(ErrorKind.INSUFFICIENT, reason)


def gated(reason: str) -> RuleViolation:
    return RuleViolation(ErrorKind.RULE_GATE, reason)
