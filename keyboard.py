"""Keyboard dispatch.

Translates a physical key (the DOM `KeyboardEvent.key` value) into the
same `Command` values the on-screen buttons produce. The session runs
the command; this module only decides what a key means.

Key map
-------
0-9 .              digit entry
+ - * /            binary operators
Enter =            equals
Backspace          backspace
Escape             clear
h                  toggle the shortcuts overlay (any mode)
s c t r l n p e    scientific functions and constants (scientific mode only)
"""
from __future__ import annotations

from dataclasses import dataclass

from models import (
    BackspaceCommand,
    ClearCommand,
    Command,
    Constant,
    ConstantCommand,
    DIGITS,
    DigitCommand,
    EqualsCommand,
    Operator,
    OperatorCommand,
    UnaryCommand,
    UnaryFunction,
)

SHORTCUTS_KEY = "h"

# Keys whose browser default (form submit, page close) is suppressed.
PREVENT_DEFAULT_KEYS = frozenset({"Enter", "=", "Escape"})

OPERATOR_KEYS: dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
}

SCIENTIFIC_KEYS: dict[str, UnaryFunction | Constant] = {
    "s": UnaryFunction.SIN,
    "c": UnaryFunction.COS,
    "t": UnaryFunction.TAN,
    "r": UnaryFunction.SQRT,
    "l": UnaryFunction.LOG,
    "n": UnaryFunction.LN,
    "p": Constant.PI,
    "e": Constant.E,
}

SHORTCUTS: dict[str, list[tuple[str, str]]] = {
    "Basic Operations": [
        ("Numbers", "0-9"),
        ("Decimal", "."),
        ("Add", "+"),
        ("Subtract", "-"),
        ("Multiply", "*"),
        ("Divide", "/"),
        ("Equal", "Enter"),
        ("Backspace", "Backspace"),
        ("Clear", "Escape"),
        ("Shortcuts", SHORTCUTS_KEY),
    ],
    "Scientific Mode": [
        ("Sin", "s"),
        ("Cos", "c"),
        ("Tan", "t"),
        ("Square Root", "r"),
        ("Log", "l"),
        ("Ln", "n"),
        ("Pi", "p"),
        ("Euler's number", "e"),
    ],
}


@dataclass(frozen=True)
class KeyAction:
    """What a single key press should do."""

    key: str
    command: Command | None = None
    toggle_shortcuts: bool = False
    prevent_default: bool = False

    @property
    def handled(self) -> bool:
        return self.command is not None or self.toggle_shortcuts


def _scientific_command(key: str) -> Command | None:
    target = SCIENTIFIC_KEYS.get(key.lower())
    if isinstance(target, UnaryFunction):
        return UnaryCommand(function=target)
    if isinstance(target, Constant):
        return ConstantCommand(name=target)
    return None


def key_to_command(key: str, scientific: bool = False) -> Command | None:
    """Map a key to a command, or None if the key does nothing."""
    if len(key) == 1 and key in DIGITS:
        return DigitCommand(digit=key)
    if key in OPERATOR_KEYS:
        return OperatorCommand(operator=OPERATOR_KEYS[key])
    if key in ("Enter", "="):
        return EqualsCommand()
    if key == "Backspace":
        return BackspaceCommand()
    if key == "Escape":
        return ClearCommand()
    if scientific and len(key) == 1:
        return _scientific_command(key)
    return None


def translate_key(key: str, scientific: bool = False) -> KeyAction:
    """Translate a key press into a `KeyAction`."""
    if key.lower() == SHORTCUTS_KEY:
        return KeyAction(key=key, toggle_shortcuts=True)
    return KeyAction(
        key=key,
        command=key_to_command(key, scientific),
        prevent_default=key in PREVENT_DEFAULT_KEYS,
    )
