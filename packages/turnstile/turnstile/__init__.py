"""turnstile - Guarded finite state machines with data-driven transition tables."""

from turnstile.config import MachineConfig
from turnstile.guards import Guards, all_of
from turnstile.machine import Machine
from turnstile.table import TableBuilder, TransitionRule, TransitionTable
from turnstile.types import (
    Accepted,
    ConfigurationError,
    Rejected,
    RejectReason,
    SnapshotError,
    TransitionOutcome,
)

__all__ = [
    "Machine",
    "MachineConfig",
    "TableBuilder",
    "TransitionTable",
    "TransitionRule",
    "Guards",
    "all_of",
    "Accepted",
    "Rejected",
    "RejectReason",
    "TransitionOutcome",
    "ConfigurationError",
    "SnapshotError",
]
