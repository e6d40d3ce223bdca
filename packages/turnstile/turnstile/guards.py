"""Guards registry."""
from __future__ import annotations

from typing import Any

from turnstile.types import Guard, Trigger


class Guards:
    """Maps guard name strings to callable predicates.

    Tables refer to guards by name; names are resolved once at build time,
    so a registry can be shared by several builders.
    """

    def __init__(self) -> None:
        self._guards: dict[str, Guard] = {}

    def register(self, name: str, fn: Guard) -> None:
        """Bind ``name`` to a predicate; a later call with the same name wins."""
        self._guards[name] = fn

    def get(self, name: str) -> Guard:
        """Return the guard callable. Raises KeyError if not registered."""
        return self._guards[name]

    def check(self, name: str, history: tuple[Trigger, ...], context: Any) -> bool:
        """Run the named predicate against a history and context outside
        any machine, e.g. to test a guard on its own. Unknown names raise
        KeyError."""
        return self._guards[name](history, context)

    def has(self, name: str) -> bool:
        return name in self._guards

    def names(self) -> list[str]:
        """Registered names, oldest registration first."""
        return list(self._guards)


def all_of(*guards: Guard) -> Guard:
    """Combine guards; the result passes only when every guard passes."""

    def _all(history: tuple[Trigger, ...], context: Any) -> bool:
        return all(g(history, context) for g in guards)

    return _all
