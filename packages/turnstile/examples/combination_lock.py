"""Combination lock -- guards over the input history.

Demonstrates:
- Integer triggers (digits) and a rendered status built from history
- Guarded rules sharing one (state, trigger) pair, first passing guard wins
- Two terminal states (OPEN and ERROR)
- Listeners observing every outcome

Run: python -m examples.combination_lock
"""

from enum import Enum

from turnstile import Machine, MachineConfig, TableBuilder

DIGITS = range(10)


class Lock(Enum):
    LOCKED = "LOCKED"
    ENTERING = "ENTERING"
    OPEN = "OPEN"
    ERROR = "ERROR"


def build_table(combination: list[int]):
    if not combination:
        raise ValueError("combination must be non-empty")
    code = tuple(combination)

    def completes(digit):
        return lambda history, ctx: history + (digit,) == code

    def exhausts(history, ctx):
        return len(history) + 1 == len(code)

    builder = TableBuilder(states=Lock, triggers=DIGITS)
    for source in (Lock.LOCKED, Lock.ENTERING):
        for digit in DIGITS:
            builder.transition(source, digit, Lock.OPEN, guard=completes(digit))
            builder.transition(source, digit, Lock.ERROR, guard=exhausts)
            builder.transition(source, digit, Lock.ENTERING)
    return builder.terminal(Lock.OPEN, Lock.ERROR).build()


def status(lock: Machine) -> str:
    if lock.is_terminal() or lock.state is Lock.LOCKED:
        return lock.state.value
    return "".join(str(d) for d in lock.history)


def attempt(table, digits: list[int]) -> None:
    lock = Machine(table, Lock.LOCKED, MachineConfig(name="lock"))
    lock.add_listener(lambda m, outcome: print(f"    {outcome.trigger} -> {status(m)}"))
    print(f"  entering {digits}  (start: {status(lock)})")
    lock.apply_all(digits)
    print(f"  final: {status(lock)}\n")


def main() -> None:
    print("=== Combination Lock ===\n")
    table = build_table([1, 2, 3])
    attempt(table, [1, 2, 3])
    attempt(table, [1, 2, 5])


if __name__ == "__main__":
    main()
