"""Shared type aliases, outcomes and errors for the state machine engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Hashable, Union

State = Hashable
Trigger = Hashable

# (history, context) -> bool. Must not mutate either argument.
Guard = Callable[[tuple[Trigger, ...], Any], bool]


class ConfigurationError(ValueError):
    """Raised at build time for an ambiguous or contradictory transition table."""


class SnapshotError(Exception):
    """Raised on restore failures (version mismatch, unknown state)."""


class RejectReason(Enum):
    NO_RULE = "no_rule"
    GUARD_FAILED = "guard_failed"
    TERMINAL = "terminal"


@dataclass(frozen=True, slots=True)
class Accepted:
    """The trigger fired a rule; ``state`` is the new current state."""

    previous: State
    trigger: Trigger
    state: State

    accepted: ClassVar[bool] = True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Rejected:
    """No satisfied rule matched; ``state`` is the unchanged current state."""

    state: State
    trigger: Trigger
    reason: RejectReason

    accepted: ClassVar[bool] = False

    def __bool__(self) -> bool:
        return False


TransitionOutcome = Union[Accepted, Rejected]
