"""Machine - current state, input history and the apply loop."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable

from turnstile.config import MachineConfig
from turnstile.table import TransitionRule, TransitionTable
from turnstile.types import (
    Accepted,
    Rejected,
    RejectReason,
    SnapshotError,
    State,
    TransitionOutcome,
    Trigger,
)

logger = logging.getLogger(__name__)

Listener = Callable[["Machine", TransitionOutcome], None]

_SNAPSHOT_VERSION = 2


class Machine:
    """A running instance of a :class:`TransitionTable`.

    The machine owns its current state and history; the table is shared and
    never modified. ``apply`` is the only way the state changes and it never
    raises for an unknown or unexpected trigger: a trigger that fires no rule
    comes back as :class:`Rejected`.

    History policy:

    - Accepted triggers are always appended.
    - Rejected triggers are appended when ``config.record_rejected`` is set
      (the default), so a presentation layer sees every input typed.
    - Triggers applied in a terminal state are dropped silently: no history
      entry, no listener call.

    Exit hooks run before the state changes. The transition is committed
    (state and history updated) before entry hooks run, so an exception from
    an entry hook propagates with the new state already in place and
    listeners not notified.
    """

    def __init__(
        self,
        table: TransitionTable,
        initial: State,
        config: MachineConfig | None = None,
    ) -> None:
        self._table = table
        self._initial = initial
        self._config = config if config is not None else MachineConfig()
        self._state: State = initial
        self._history: list[Trigger] = []
        self._listeners: list[Listener] = []

    @property
    def table(self) -> TransitionTable:
        return self._table

    @property
    def config(self) -> MachineConfig:
        return self._config

    @property
    def initial(self) -> State:
        return self._initial

    @property
    def state(self) -> State:
        return self._state

    @property
    def history(self) -> tuple[Trigger, ...]:
        return tuple(self._history)

    def is_terminal(self) -> bool:
        return self._table.is_terminal(self._state)

    # --- Listeners ---

    def add_listener(self, listener: Listener) -> None:
        """Register ``listener(machine, outcome)``, called after each apply."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- Driving ---

    def apply(self, trigger: Trigger, context: Any = None) -> TransitionOutcome:
        """Apply one trigger. First matching rule whose guard passes wins."""
        state = self._state
        name = self._config.name
        if self._table.is_terminal(state):
            logger.debug("[%s] %r ignored in terminal state %r", name, trigger, state)
            return Rejected(state, trigger, RejectReason.TERMINAL)

        rule, reason = self._select(trigger, context)
        if rule is not None:
            return self._fire(rule)

        outcome = Rejected(state, trigger, reason)
        if self._config.record_rejected:
            self._history.append(trigger)
        logger.debug("[%s] %r rejected in %r (%s)", name, trigger, state, reason.value)
        if self._config.notify_rejected:
            self._emit(outcome)
        return outcome

    def apply_all(
        self, triggers: Iterable[Trigger], context: Any = None
    ) -> list[TransitionOutcome]:
        """Apply triggers in order and return every outcome.

        Rejections do not stop the run; once terminal, the remaining
        triggers come back as ``Rejected(TERMINAL)``.
        """
        return [self.apply(trigger, context) for trigger in triggers]

    def reset(self) -> None:
        """Start a new session: back to the initial state, empty history."""
        logger.debug("[%s] reset to %r", self._config.name, self._initial)
        self._state = self._initial
        self._history.clear()

    # --- Queries ---

    def can_apply(self, trigger: Trigger, context: Any = None) -> bool:
        """Would ``apply(trigger, context)`` be accepted right now? Purely
        informational; guards are evaluated but nothing changes."""
        if self.is_terminal():
            return False
        rule, _ = self._select(trigger, context)
        return rule is not None

    def permitted_triggers(self, context: Any = None) -> list[Trigger]:
        """Triggers that would currently be accepted, in declaration order."""
        if self.is_terminal():
            return []
        history = tuple(self._history)
        permitted: list[Trigger] = []
        for rule in self._table.rules_for(self._state):
            if rule.trigger in permitted:
                continue
            if rule.permits(history, context):
                permitted.append(rule.trigger)
        return permitted

    # --- Internal helpers ---

    def _select(
        self, trigger: Trigger, context: Any
    ) -> tuple[TransitionRule | None, RejectReason]:
        history = tuple(self._history)
        reason = RejectReason.NO_RULE
        for rule in self._table.rules_for(self._state):
            if rule.trigger != trigger:
                continue
            if rule.permits(history, context):
                return rule, reason
            reason = RejectReason.GUARD_FAILED
        return None, reason

    def _fire(self, rule: TransitionRule) -> Accepted:
        outcome = Accepted(self._state, rule.trigger, rule.target)
        for hook in self._table.exit_hooks(outcome.previous):
            hook(self, outcome)
        self._state = rule.target
        self._history.append(rule.trigger)
        logger.debug(
            "[%s] %r --%r--> %r", self._config.name, outcome.previous, rule.trigger, rule.target
        )
        for hook in self._table.enter_hooks(rule.target):
            hook(self, outcome)
        self._emit(outcome)
        return outcome

    def _emit(self, outcome: TransitionOutcome) -> None:
        for listener in tuple(self._listeners):
            listener(self, outcome)

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize the session (not the table).

        JSON-compatible as long as labels are Enum members, strings or
        numbers. Enum members are stored as ``{"enum": class, "name": name}``
        so they never collide with plain string labels.
        """
        return {
            "version": _SNAPSHOT_VERSION,
            "name": self._config.name,
            "initial": _encode(self._initial),
            "state": _encode(self._state),
            "history": [_encode(t) for t in self._history],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore a session onto this machine's table.

        A stored state is accepted when the table knows it or it equals
        this machine's own initial state. Plain history entries are restored
        as stored; only tagged Enum entries go through the table's triggers.
        Raises SnapshotError on a version mismatch, a missing or unknown
        state, or an Enum entry the table does not know. The machine is
        untouched when restore fails.
        """
        version = data.get("version")
        if version != _SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Unsupported snapshot version {version!r}, expected {_SNAPSHOT_VERSION}"
            )

        states = _enum_lookup(self._table.states)
        triggers = _enum_lookup(self._table.triggers)
        known = set(self._table.states)
        known.add(self._initial)
        decoded: dict[str, State] = {}
        for key in ("initial", "state"):
            raw = data.get(key)
            try:
                if _is_tagged(raw):
                    decoded[key] = states[(raw["enum"], raw["name"])]
                elif raw in known:
                    decoded[key] = raw
                else:
                    raise KeyError(raw)
            except (KeyError, TypeError):
                raise SnapshotError(f"Snapshot {key} {raw!r} is not a known state") from None
            # A state equal to the stored initial is valid even off-table.
            known.add(decoded[key])

        history: list[Trigger] = []
        for raw in data.get("history", []):
            if not _is_tagged(raw):
                history.append(raw)
                continue
            try:
                history.append(triggers[(raw["enum"], raw["name"])])
            except (KeyError, TypeError):
                raise SnapshotError(f"Snapshot history entry {raw!r} is not a known trigger") from None

        self._initial = decoded["initial"]
        self._state = decoded["state"]
        self._history = history
        logger.debug("[%s] restored at %r", self._config.name, self._state)

    def __repr__(self) -> str:
        return f"Machine(name={self._config.name!r}, state={self._state!r})"


def _encode(label: Any) -> Any:
    if isinstance(label, Enum):
        return {"enum": type(label).__name__, "name": label.name}
    return label


def _is_tagged(raw: Any) -> bool:
    return isinstance(raw, dict) and set(raw) == {"enum", "name"}


def _enum_lookup(labels: Iterable[Any]) -> dict[tuple[str, str], Enum]:
    return {
        (type(label).__name__, label.name): label
        for label in labels
        if isinstance(label, Enum)
    }
