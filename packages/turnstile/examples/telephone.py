"""Telephone -- a classic call lifecycle as a transition table.

Demonstrates:
- Enum states and triggers with a label set restricted at build time
- A terminal state (ON_HOOK) that ends the session
- Asking the machine which triggers it would accept right now
- Ignoring stray input with ``record_rejected=False``

Run: python -m examples.telephone
"""

from enum import Enum, auto

from turnstile import Machine, MachineConfig, TableBuilder


class State(Enum):
    OFF_HOOK = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    ON_HOLD = auto()
    ON_HOOK = auto()


class Trigger(Enum):
    CALL_DIALED = auto()
    HUNG_UP = auto()
    CALL_CONNECTED = auto()
    PLACED_ON_HOLD = auto()
    TAKEN_OFF_HOLD = auto()
    LEFT_MESSAGE = auto()
    STOP_USING_PHONE = auto()


LABELS = {
    State.OFF_HOOK: "Off the hook",
    State.CONNECTING: "Connecting",
    State.CONNECTED: "Connected",
    State.ON_HOLD: "On hold",
    State.ON_HOOK: "On hook",
}


def build_table():
    return (
        TableBuilder(states=State, triggers=Trigger)
        .transition(State.OFF_HOOK, Trigger.CALL_DIALED, State.CONNECTING)
        .transition(State.OFF_HOOK, Trigger.STOP_USING_PHONE, State.ON_HOOK)
        .transition(State.CONNECTING, Trigger.HUNG_UP, State.OFF_HOOK)
        .transition(State.CONNECTING, Trigger.CALL_CONNECTED, State.CONNECTED)
        .transition(State.CONNECTED, Trigger.LEFT_MESSAGE, State.OFF_HOOK)
        .transition(State.CONNECTED, Trigger.HUNG_UP, State.OFF_HOOK)
        .transition(State.CONNECTED, Trigger.PLACED_ON_HOLD, State.ON_HOLD)
        .transition(State.ON_HOLD, Trigger.TAKEN_OFF_HOLD, State.CONNECTED)
        .transition(State.ON_HOLD, Trigger.HUNG_UP, State.OFF_HOOK)
        .terminal(State.ON_HOOK)
        .build()
    )


def main() -> None:
    print("=== Telephone ===\n")

    phone = Machine(
        build_table(),
        State.OFF_HOOK,
        MachineConfig(name="phone", record_rejected=False),
    )

    script = [
        Trigger.CALL_DIALED,
        Trigger.PLACED_ON_HOLD,  # not allowed while connecting, ignored
        Trigger.CALL_CONNECTED,
        Trigger.PLACED_ON_HOLD,
        Trigger.TAKEN_OFF_HOLD,
        Trigger.HUNG_UP,
        Trigger.STOP_USING_PHONE,
    ]
    for trigger in script:
        before = phone.state
        outcome = phone.apply(trigger)
        mark = "ok " if outcome else "-- "
        print(f"  {mark}{LABELS[before]:<12} + {trigger.name:<16} -> {LABELS[phone.state]}")
        if not phone.is_terminal():
            options = ", ".join(t.name for t in phone.permitted_triggers())
            print(f"      next: {options}")

    print(f"\nDone. {len(phone.history)} triggers accepted.")


if __name__ == "__main__":
    main()
