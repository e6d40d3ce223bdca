"""Transition rules, the immutable transition table and its builder."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Union

from turnstile.guards import Guards, all_of
from turnstile.types import Accepted, ConfigurationError, Guard, State, Trigger

if TYPE_CHECKING:
    from turnstile.machine import Machine

logger = logging.getLogger(__name__)

Hook = Callable[["Machine", Accepted], None]
GuardSpec = Union[Guard, str, list[str], None]


@dataclass(frozen=True, slots=True)
class TransitionRule:
    """One ``source --trigger--> target`` edge, optionally guarded."""

    source: State
    trigger: Trigger
    target: State
    guard: Guard | None = None
    guard_name: str | None = None

    def permits(self, history: tuple[Trigger, ...], context: Any) -> bool:
        """True if the rule is unguarded or its guard passes."""
        if self.guard is None:
            return True
        return bool(self.guard(history, context))


class TransitionTable:
    """Read-only transition table. Build with :class:`TableBuilder`.

    Rules for each source state are kept in declaration order. Nothing in
    the table changes after construction, so one table can back any number
    of machines, including machines running on different threads.
    """

    __slots__ = ("_rules", "_terminal", "_states", "_triggers", "_enter", "_exit")

    def __init__(
        self,
        rules: Mapping[State, tuple[TransitionRule, ...]],
        terminal: frozenset[State],
        states: frozenset[State],
        triggers: frozenset[Trigger],
        enter_hooks: Mapping[State, tuple[Hook, ...]],
        exit_hooks: Mapping[State, tuple[Hook, ...]],
    ) -> None:
        self._rules = MappingProxyType(dict(rules))
        self._terminal = terminal
        self._states = states
        self._triggers = triggers
        self._enter = MappingProxyType(dict(enter_hooks))
        self._exit = MappingProxyType(dict(exit_hooks))

    @property
    def states(self) -> frozenset[State]:
        return self._states

    @property
    def triggers(self) -> frozenset[Trigger]:
        return self._triggers

    @property
    def terminal_states(self) -> frozenset[State]:
        return self._terminal

    def rules_for(self, state: State) -> tuple[TransitionRule, ...]:
        """Rules leaving ``state`` in declaration order. Empty if none."""
        return self._rules.get(state, ())

    def is_terminal(self, state: State) -> bool:
        return state in self._terminal

    def enter_hooks(self, state: State) -> tuple[Hook, ...]:
        return self._enter.get(state, ())

    def exit_hooks(self, state: State) -> tuple[Hook, ...]:
        return self._exit.get(state, ())

    def __len__(self) -> int:
        return sum(len(r) for r in self._rules.values())

    def __repr__(self) -> str:
        return (
            f"TransitionTable(states={len(self._states)}, rules={len(self)}, "
            f"terminal={sorted(map(repr, self._terminal))})"
        )


class TableBuilder:
    """Collects rule declarations, validates them, and builds a table.

    ``guards`` resolves guard names. ``states`` and ``triggers`` optionally
    restrict the allowed labels (an ``Enum`` class works, since iterating
    it yields its members).
    """

    def __init__(
        self,
        guards: Guards | None = None,
        states: Iterable[State] | None = None,
        triggers: Iterable[Trigger] | None = None,
    ) -> None:
        self._guards = guards
        self._allowed_states = None if states is None else frozenset(states)
        self._allowed_triggers = None if triggers is None else frozenset(triggers)
        self._declared: list[tuple[State, Trigger, State, GuardSpec]] = []
        self._terminal: list[State] = []
        self._enter: dict[State, list[Hook]] = {}
        self._exit: dict[State, list[Hook]] = {}

    # --- Declarations ---

    def transition(
        self,
        source: State,
        trigger: Trigger,
        target: State,
        guard: GuardSpec = None,
    ) -> TableBuilder:
        """Declare a rule. ``guard`` is a callable, a registered name, or a
        list of names that must all pass."""
        self._declared.append((source, trigger, target, guard))
        return self

    def terminal(self, *states: State) -> TableBuilder:
        """Mark states as terminal. A terminal machine accepts no input."""
        self._terminal.extend(states)
        return self

    def on_enter(self, state: State, fn: Hook) -> TableBuilder:
        """Run ``fn(machine, outcome)`` after each transition into ``state``."""
        self._enter.setdefault(state, []).append(fn)
        return self

    def on_exit(self, state: State, fn: Hook) -> TableBuilder:
        """Run ``fn(machine, outcome)`` before each transition out of ``state``."""
        self._exit.setdefault(state, []).append(fn)
        return self

    # --- Build ---

    def build(self) -> TransitionTable:
        """Validate declarations and return an immutable table.

        Raises ConfigurationError on ambiguous rules, unknown guard names,
        labels outside the declared sets, or rules leaving a terminal state.
        """
        terminal = frozenset(self._terminal)
        for state in terminal:
            self._check_state(state)
        for state in (*self._enter, *self._exit):
            self._check_state(state)

        rules: dict[State, list[TransitionRule]] = {}
        for source, trigger, target, spec in self._declared:
            self._check_state(source)
            self._check_state(target)
            self._check_trigger(trigger)
            if source in terminal:
                raise ConfigurationError(
                    f"Rule {source!r} --{trigger!r}--> {target!r} leaves a terminal state"
                )
            guard, guard_name = self._resolve_guard(spec)
            rules.setdefault(source, []).append(
                TransitionRule(source, trigger, target, guard, guard_name)
            )

        for source, source_rules in rules.items():
            _check_ambiguity(source, source_rules)

        states = {s for r in self._declared for s in (r[0], r[2])}
        states |= terminal
        if self._allowed_states is not None:
            states |= self._allowed_states
        triggers = {r[1] for r in self._declared}
        if self._allowed_triggers is not None:
            triggers |= self._allowed_triggers

        table = TransitionTable(
            rules={s: tuple(r) for s, r in rules.items()},
            terminal=terminal,
            states=frozenset(states),
            triggers=frozenset(triggers),
            enter_hooks={s: tuple(h) for s, h in self._enter.items()},
            exit_hooks={s: tuple(h) for s, h in self._exit.items()},
        )
        logger.debug("Built %r", table)
        return table

    # --- Internal helpers ---

    def _check_state(self, state: State) -> None:
        if self._allowed_states is not None and state not in self._allowed_states:
            raise ConfigurationError(f"Unknown state {state!r}")

    def _check_trigger(self, trigger: Trigger) -> None:
        if self._allowed_triggers is not None and trigger not in self._allowed_triggers:
            raise ConfigurationError(f"Unknown trigger {trigger!r}")

    def _resolve_guard(self, spec: GuardSpec) -> tuple[Guard | None, str | None]:
        if spec is None:
            return None, None
        if isinstance(spec, str):
            return self._lookup(spec), spec
        if isinstance(spec, list):
            if not spec:
                raise ConfigurationError("Guard name list must be non-empty")
            return all_of(*(self._lookup(n) for n in spec)), "&".join(spec)
        if callable(spec):
            return spec, getattr(spec, "__name__", repr(spec))
        raise ConfigurationError(f"Invalid guard {spec!r}")

    def _lookup(self, name: str) -> Guard:
        if self._guards is None:
            raise ConfigurationError(f"Guard {name!r} given by name but no Guards registry")
        if not self._guards.has(name):
            raise ConfigurationError(f"Guard {name!r} is not registered")
        return self._guards.get(name)


def _check_ambiguity(source: State, rules: list[TransitionRule]) -> None:
    """Reject two unguarded rules on one (source, trigger) pair."""
    unguarded: dict[Trigger, TransitionRule] = {}
    for rule in rules:
        first = unguarded.get(rule.trigger)
        if first is None:
            if rule.guard is None:
                unguarded[rule.trigger] = rule
            continue
        if rule.guard is None:
            raise ConfigurationError(
                f"Ambiguous rules for ({source!r}, {rule.trigger!r}): "
                f"unguarded targets {first.target!r} and {rule.target!r}"
            )
        logger.warning(
            "Rule %r --%r--> %r [%s] is shadowed by an earlier unguarded rule",
            source, rule.trigger, rule.target, rule.guard_name,
        )
