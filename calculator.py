"""Calculator reducer.

Every operation takes a `CalculatorState` and returns a `Transition`: the
next state plus the `CalculationRecord` produced when a binary operation
or scientific function completes. Nothing here touches persistence; the
session commits records after each transition.

Arithmetic is IEEE float. Results are rounded to 8 decimal places before
display, which hides noise such as 0.1 + 0.2 = 0.30000000000000004.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from models import (
    BackspaceCommand,
    CalculationRecord,
    CalculatorState,
    ClearCommand,
    Command,
    Constant,
    ConstantCommand,
    DigitCommand,
    EqualsCommand,
    Operator,
    OperatorCommand,
    UnaryCommand,
    UnaryFunction,
)

DECIMAL_PLACES = 8
INITIAL_STATE = CalculatorState()


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CalculationError(Exception):
    """Base class for failures shown on the display instead of a result."""

    message = "Error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def description(self) -> str:
        return str(self)


class DivisionByZero(CalculationError):
    message = "Cannot divide by zero"


class InvalidDomain(CalculationError):
    message = "Invalid input"


class ResultOverflow(CalculationError):
    message = "Result is too large"


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transition:
    state: CalculatorState
    record: CalculationRecord | None = None


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------

def parse_operand(text: str) -> float:
    """Parse an operand; text that is not a number becomes NaN."""
    try:
        return float(text)
    except ValueError:
        return math.nan


def format_number(value: float) -> str:
    """Round to 8 decimals and render the shortest plain decimal string.

    Only magnitudes of 1e21 and above fall back to exponent notation.
    """
    value = round(value, DECIMAL_PLACES)
    if value == 0:
        return "0"
    if abs(value) >= 1e21:
        return repr(value)
    if value.is_integer():
        return str(int(value))
    return format(value, f".{DECIMAL_PLACES}f").rstrip("0").rstrip(".")


def _finite(value: float, message: str) -> float:
    if not math.isfinite(value):
        raise ResultOverflow(message)
    return value


# ---------------------------------------------------------------------------
# Binary operations
# ---------------------------------------------------------------------------

def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZero()
    return a / b


BINARY_OPERATIONS: dict[Operator, Callable[[float, float], float]] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUBTRACT: lambda a, b: a - b,
    Operator.MULTIPLY: lambda a, b: a * b,
    Operator.DIVIDE: _divide,
}


def compute_binary(op: Operator, left: float, right: float) -> float:
    """Apply a binary operator, raising a CalculationError on failure."""
    try:
        raw = BINARY_OPERATIONS[op](left, right)
    except OverflowError:
        raise ResultOverflow() from None
    return _finite(raw, ResultOverflow.message)


# ---------------------------------------------------------------------------
# Unary functions
# ---------------------------------------------------------------------------

def _sqrt(x: float) -> float:
    if x < 0:
        raise InvalidDomain("Invalid input for square root")
    return math.sqrt(x)


def _log10(x: float) -> float:
    if x <= 0:
        raise InvalidDomain("Invalid input for logarithm")
    return math.log10(x)


def _ln(x: float) -> float:
    if x <= 0:
        raise InvalidDomain("Invalid input for natural logarithm")
    return math.log(x)


def _reciprocal(x: float) -> float:
    if x == 0:
        raise DivisionByZero()
    return 1 / x


UNARY_FUNCTIONS: dict[UnaryFunction, Callable[[float], float]] = {
    UnaryFunction.SIN: lambda x: math.sin(math.radians(x)),
    UnaryFunction.COS: lambda x: math.cos(math.radians(x)),
    UnaryFunction.TAN: lambda x: math.tan(math.radians(x)),
    UnaryFunction.SQRT: _sqrt,
    UnaryFunction.SQUARE: lambda x: x ** 2,
    UnaryFunction.CUBE: lambda x: x ** 3,
    UnaryFunction.LOG: _log10,
    UnaryFunction.LN: _ln,
    UnaryFunction.RECIPROCAL: _reciprocal,
    UnaryFunction.NEGATE: lambda x: -x,
}

CONSTANTS: dict[Constant, float] = {
    Constant.PI: math.pi,
    Constant.E: math.e,
}


def compute_unary(fn: UnaryFunction, value: float) -> float:
    """Apply a single-argument function, raising a CalculationError on failure.

    Trigonometric functions take their argument in degrees.
    """
    if math.isnan(value):
        raise ResultOverflow("Result is undefined")
    try:
        raw = UNARY_FUNCTIONS[fn](value)
    except (OverflowError, ValueError):
        raise ResultOverflow("Result is undefined") from None
    return _finite(raw, "Result is undefined")


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _failed(error: CalculationError) -> CalculatorState:
    return CalculatorState(current_operand="0", error_message=error.description)


def enter_digit(state: CalculatorState, digit: str) -> Transition:
    """Append a digit or decimal point to the current operand."""
    current = state.current_operand
    if digit == ".":
        if "." in current:
            return Transition(state.model_copy(update={"error_message": ""}))
        current = current + "."
    elif current == "0":
        current = digit
    else:
        current = current + digit
    return Transition(
        state.model_copy(update={"current_operand": current, "error_message": ""})
    )


def resolve(state: CalculatorState) -> Transition:
    """Evaluate the pending binary operation against the current operand.

    No-op unless a pending operand, pending operator and current operand
    are all present.
    """
    if not (state.has_pending and state.current_operand):
        return Transition(state)

    op = state.pending_operator
    left = parse_operand(state.pending_operand)
    right = parse_operand(state.current_operand)
    try:
        result = format_number(compute_binary(op, left, right))
    except CalculationError as e:
        return Transition(_failed(e))

    record = CalculationRecord(
        expression_text=f"{state.pending_operand} {op.value} {state.current_operand}",
        result_text=result,
    )
    return Transition(CalculatorState(current_operand=result), record)


def equals(state: CalculatorState) -> Transition:
    return resolve(state)


def enter_operator(state: CalculatorState, op: Operator | str) -> Transition:
    """Start a pending operation, resolving any chained one first.

    If the chained resolution fails the error state stands and no new
    operation is started.
    """
    op = Operator.parse(op)
    record = None
    if state.has_pending and state.current_operand:
        transition = resolve(state)
        if transition.state.error_message:
            return transition
        state, record = transition.state, transition.record

    next_state = CalculatorState(
        current_operand="0",
        pending_operand=state.current_operand,
        pending_operator=op,
    )
    return Transition(next_state, record)


def clear_all(state: CalculatorState | None = None) -> Transition:
    return Transition(INITIAL_STATE)


def backspace(state: CalculatorState) -> Transition:
    """Remove the last character, or dismiss a displayed error."""
    if state.error_message:
        return Transition(
            state.model_copy(update={"current_operand": "0", "error_message": ""})
        )
    current = state.current_operand[:-1]
    if current in ("", "-"):
        current = "0"
    return Transition(state.model_copy(update={"current_operand": current}))


def apply_unary(state: CalculatorState, fn: UnaryFunction | str) -> Transition:
    """Apply a scientific function to the current operand.

    On success a pending binary operation is left in place so the result
    can serve as its right-hand operand. Failure shows the error and resets
    the current operand but keeps the pending operation too.
    """
    fn = UnaryFunction.parse(fn)
    operand = state.current_operand
    try:
        result = format_number(compute_unary(fn, parse_operand(operand)))
    except CalculationError as e:
        return Transition(
            state.model_copy(
                update={"current_operand": "0", "error_message": e.description}
            )
        )

    record = CalculationRecord(
        expression_text=f"{fn.value}({operand})",
        result_text=result,
    )
    next_state = state.model_copy(
        update={"current_operand": result, "error_message": ""}
    )
    return Transition(next_state, record)


def insert_constant(state: CalculatorState, name: Constant | str) -> Transition:
    """Replace the current operand with a constant at full precision."""
    value = CONSTANTS[Constant(name)]
    return Transition(
        state.model_copy(update={"current_operand": repr(value), "error_message": ""})
    )


def load_operand(state: CalculatorState, text: str) -> Transition:
    """Start a fresh calculation from a previous result."""
    return Transition(CalculatorState(current_operand=text))


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def dispatch(state: CalculatorState, command: Command) -> Transition:
    """Apply one command to the state."""
    if isinstance(command, DigitCommand):
        return enter_digit(state, command.digit)
    if isinstance(command, OperatorCommand):
        return enter_operator(state, command.operator)
    if isinstance(command, EqualsCommand):
        return equals(state)
    if isinstance(command, ClearCommand):
        return clear_all(state)
    if isinstance(command, BackspaceCommand):
        return backspace(state)
    if isinstance(command, UnaryCommand):
        return apply_unary(state, command.function)
    if isinstance(command, ConstantCommand):
        return insert_constant(state, command.name)
    raise TypeError(f"Unsupported command: {command!r}")
