"""Light switch -- entry hooks instead of per-state objects.

Demonstrates:
- String states and triggers with no terminal state
- Entry hooks that run after the state has changed
- Default handling of unmatched input via a listener

Run: python -m examples.light_switch
"""

from turnstile import Machine, TableBuilder


def main() -> None:
    print("=== Light Switch ===\n")

    table = (
        TableBuilder()
        .transition("off", "on", "on")
        .transition("on", "off", "off")
        .on_enter("on", lambda m, o: print("  Light is turned on!"))
        .on_enter("off", lambda m, o: print("  Light is switched off!"))
        .build()
    )

    switch = Machine(table, "off")
    switch.add_listener(
        lambda m, o: None if o else print(f"  Light is already {m.state}.")
    )

    for press in ["on", "off", "off", "on", "on"]:
        switch.apply(press)

    print(f"\nDone. History: {list(switch.history)}")


if __name__ == "__main__":
    main()
