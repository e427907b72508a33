"""Calculator data models.

The calculator is a flat record (`CalculatorState`) transformed by pure
functions in calculator.py. Completed calculations become immutable
`CalculationRecord` entries in the history log. Button presses and key
presses are both expressed as `Command` values so that one dispatcher
serves every input surface. This module defines the data models only --
no evaluation logic.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


# ---------------------------------------------------------------------------
# Operators, functions, constants
# ---------------------------------------------------------------------------

class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "×"
    DIVIDE = "÷"

    @classmethod
    def parse(cls, value: str | Operator) -> Operator:
        """Accept the display symbol or its ASCII keyboard alias."""
        if isinstance(value, Operator):
            return value
        try:
            return cls(_OPERATOR_ALIASES.get(value, value))
        except ValueError:
            raise ValueError(f"Unknown operator: {value!r}") from None


_OPERATOR_ALIASES = {"*": "×", "x": "×", "/": "÷"}


class UnaryFunction(str, Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    SQRT = "sqrt"
    SQUARE = "square"
    CUBE = "cube"
    LOG = "log"
    LN = "ln"
    RECIPROCAL = "reciprocal"
    NEGATE = "negate"

    @classmethod
    def parse(cls, value: str | UnaryFunction) -> UnaryFunction:
        if isinstance(value, UnaryFunction):
            return value
        try:
            return cls(_FUNCTION_ALIASES.get(value, value))
        except ValueError:
            raise ValueError(f"Unknown function: {value!r}") from None


_FUNCTION_ALIASES = {"log10": "log", "1/x": "reciprocal", "+/-": "negate"}


class Constant(str, Enum):
    PI = "pi"
    E = "e"


DIGITS = frozenset("0123456789.")


# ---------------------------------------------------------------------------
# CalculatorState: the working registers of one session
# ---------------------------------------------------------------------------

class CalculatorState(BaseModel):
    """Immutable snapshot of the calculator registers.

    A pending operator is always paired with a pending operand. When
    `error_message` is set it replaces the current operand on the display.
    """

    model_config = ConfigDict(frozen=True)

    current_operand: str = "0"
    pending_operand: str = ""
    pending_operator: Operator | None = None
    error_message: str = ""

    @property
    def has_pending(self) -> bool:
        return self.pending_operator is not None and bool(self.pending_operand)

    @property
    def display(self) -> str:
        return self.error_message or self.current_operand

    @property
    def expression(self) -> str:
        """Secondary display line: the operation being built."""
        parts = [self.pending_operand]
        if self.pending_operator is not None:
            parts.append(self.pending_operator.value)
        if self.current_operand != "0":
            parts.append(self.current_operand)
        return " ".join(p for p in parts if p)


# ---------------------------------------------------------------------------
# CalculationRecord: one completed calculation
# ---------------------------------------------------------------------------

_id_lock = threading.Lock()
_last_id = 0


def _new_id() -> int:
    """Millisecond timestamp, bumped so ids strictly increase."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        _last_id = max(candidate, _last_id + 1)
        return _last_id


def reserve_ids(max_id: int) -> None:
    """Make every id handed out from now on larger than ``max_id``."""
    global _last_id
    with _id_lock:
        _last_id = max(_last_id, max_id)


def _timestamp_text() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class CalculationRecord(BaseModel):
    """History entry. Serialized with the widget's storage field names."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(default_factory=_new_id)
    expression_text: str = Field(..., min_length=1, alias="calculation")
    result_text: str = Field(..., min_length=1, alias="result")
    timestamp_text: str = Field(default_factory=_timestamp_text, alias="timestamp")

    def __str__(self) -> str:
        return f"{self.expression_text} = {self.result_text}"


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

class Preferences(BaseModel):
    dark_mode: bool = True


# ---------------------------------------------------------------------------
# Commands: the single input vocabulary for buttons and keys
# ---------------------------------------------------------------------------

class DigitCommand(BaseModel):
    kind: Literal["digit"] = "digit"
    digit: str = Field(..., min_length=1, max_length=1)

    @field_validator("digit")
    @classmethod
    def digit_is_known(cls, v: str) -> str:
        if v not in DIGITS:
            raise ValueError(f"Digit must be 0-9 or '.', got {v!r}")
        return v


class OperatorCommand(BaseModel):
    kind: Literal["operator"] = "operator"
    operator: Operator

    @field_validator("operator", mode="before")
    @classmethod
    def accept_aliases(cls, v: object) -> object:
        return Operator.parse(v) if isinstance(v, str) else v


class EqualsCommand(BaseModel):
    kind: Literal["equals"] = "equals"


class ClearCommand(BaseModel):
    kind: Literal["clear"] = "clear"


class BackspaceCommand(BaseModel):
    kind: Literal["backspace"] = "backspace"


class UnaryCommand(BaseModel):
    kind: Literal["unary"] = "unary"
    function: UnaryFunction

    @field_validator("function", mode="before")
    @classmethod
    def accept_aliases(cls, v: object) -> object:
        return UnaryFunction.parse(v) if isinstance(v, str) else v


class ConstantCommand(BaseModel):
    kind: Literal["constant"] = "constant"
    name: Constant


Command = Annotated[
    Union[
        DigitCommand,
        OperatorCommand,
        EqualsCommand,
        ClearCommand,
        BackspaceCommand,
        UnaryCommand,
        ConstantCommand,
    ],
    Field(discriminator="kind"),
]


class CommandPayload(RootModel[Command]):
    """Request body carrying a single command."""


# ---------------------------------------------------------------------------
# View: what the UI renders after every event
# ---------------------------------------------------------------------------

class CalculatorView(BaseModel):
    display: str
    expression: str
    error: bool
    scientific: bool
    show_shortcuts: bool
    show_history: bool
    dark_mode: bool
    active_key: str | None = None
    history_size: int = 0
