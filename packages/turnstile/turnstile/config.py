"""Machine configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MachineConfig:
    """Immutable per-machine settings.

    Attributes:
        name: Tag used in log lines to tell machines apart.
        record_rejected: Append rejected triggers to history. Triggers
            rejected because the machine is terminal are never recorded.
        notify_rejected: Call listeners for rejected outcomes as well as
            accepted ones. Terminal rejections are never notified.
    """

    name: str = "machine"
    record_rejected: bool = True
    notify_rejected: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("MachineConfig name must be non-empty")
