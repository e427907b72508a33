"""Tests for the calculator reducer."""

from __future__ import annotations

import math

import pytest

from calculator import (
    INITIAL_STATE,
    DivisionByZero,
    InvalidDomain,
    ResultOverflow,
    apply_unary,
    backspace,
    clear_all,
    compute_binary,
    compute_unary,
    dispatch,
    enter_digit,
    enter_operator,
    equals,
    format_number,
    insert_constant,
    load_operand,
    parse_operand,
    resolve,
)
from models import (
    BackspaceCommand,
    CalculatorState,
    ClearCommand,
    Constant,
    ConstantCommand,
    DigitCommand,
    EqualsCommand,
    Operator,
    OperatorCommand,
    UnaryCommand,
    UnaryFunction,
)


def _typed(text: str, state: CalculatorState = INITIAL_STATE) -> CalculatorState:
    for ch in text:
        state = enter_digit(state, ch).state
    return state


def _binary(left: str, op: str, right: str) -> CalculatorState:
    state = enter_operator(_typed(left), op).state
    return _typed(right, state)


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------

class TestFormatNumber:

    def test_integral_value_has_no_fraction(self):
        assert format_number(8.0) == "8"

    def test_rounding_hides_float_noise(self):
        assert format_number(0.1 + 0.2) == "0.3"

    def test_rounds_to_eight_places(self):
        assert format_number(2 / 3) == "0.66666667"

    def test_tiny_values_round_to_zero(self):
        assert format_number(1e-9) == "0"

    def test_negative_zero(self):
        assert format_number(-0.0) == "0"

    def test_large_integral_value(self):
        assert format_number(1e20) == "100000000000000000000"

    def test_huge_value_uses_exponent(self):
        assert format_number(1e21) == "1e+21"

    def test_small_value_stays_plain_decimal(self):
        assert format_number(0.00005) == "0.00005"
        assert format_number(1e-8) == "0.00000001"
        assert format_number(-1.5e-7) == "-0.00000015"

    def test_small_result_accepts_more_digits(self):
        state = _binary("1", "÷", "20000")
        state = equals(state).state
        assert state.current_operand == "0.00005"
        state = _typed(".5", state)
        assert state.current_operand == "0.000055"
        state = _typed("1", enter_operator(state, "+").state)
        assert equals(state).state.current_operand == "1.000055"

    def test_negative_fraction(self):
        assert format_number(-1.25) == "-1.25"


class TestParseOperand:

    def test_plain_number(self):
        assert parse_operand("12.5") == 12.5

    def test_trailing_point(self):
        assert parse_operand("5.") == 5.0

    def test_not_a_number(self):
        assert math.isnan(parse_operand("-"))


# ---------------------------------------------------------------------------
# Digit entry
# ---------------------------------------------------------------------------

class TestEnterDigit:

    def test_replaces_leading_zero(self):
        assert enter_digit(INITIAL_STATE, "5").state.current_operand == "5"

    def test_appends(self):
        assert _typed("123").current_operand == "123"

    def test_point_after_zero(self):
        assert enter_digit(INITIAL_STATE, ".").state.current_operand == "0."

    def test_second_point_is_ignored(self):
        assert _typed("1.2.3").current_operand == "1.23"

    def test_zero_after_point(self):
        assert _typed("0.05").current_operand == "0.05"

    def test_never_emits_record(self):
        assert enter_digit(INITIAL_STATE, "7").record is None

    def test_clears_error(self, pending_division):
        failed = equals(pending_division).state
        state = enter_digit(failed, "4").state
        assert state.error_message == ""
        assert state.current_operand == "4"

    def test_point_clears_error(self, pending_division):
        failed = equals(pending_division).state
        state = enter_digit(failed, ".").state
        assert state.error_message == ""
        assert state.current_operand == "0."

    def test_keeps_pending_operation(self):
        state = _binary("5", "+", "12")
        assert state.pending_operand == "5"
        assert state.pending_operator == Operator.ADD
        assert state.current_operand == "12"


# ---------------------------------------------------------------------------
# Operators and resolution
# ---------------------------------------------------------------------------

class TestEnterOperator:

    def test_moves_current_to_pending(self):
        state = enter_operator(_typed("5"), "+").state
        assert state.pending_operand == "5"
        assert state.pending_operator == Operator.ADD
        assert state.current_operand == "0"

    def test_accepts_ascii_aliases(self):
        assert enter_operator(_typed("5"), "*").state.pending_operator == Operator.MULTIPLY
        assert enter_operator(_typed("5"), "/").state.pending_operator == Operator.DIVIDE

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError, match="Unknown operator"):
            enter_operator(INITIAL_STATE, "%")

    def test_chained_operator_resolves_first(self):
        transition = enter_operator(_binary("2", "+", "3"), "×")
        assert transition.record is not None
        assert transition.record.expression_text == "2 + 3"
        assert transition.record.result_text == "5"
        assert transition.state.pending_operand == "5"
        assert transition.state.pending_operator == Operator.MULTIPLY
        assert transition.state.current_operand == "0"

    def test_chain_continues_to_result(self):
        state = enter_operator(_binary("2", "+", "3"), "×").state
        state = equals(_typed("4", state)).state
        assert state.current_operand == "20"

    def test_chained_failure_keeps_error(self, pending_division):
        transition = enter_operator(pending_division, "+")
        assert transition.record is None
        assert transition.state.error_message == "Cannot divide by zero"
        assert transition.state.pending_operator is None
        assert transition.state.pending_operand == ""

    def test_clears_error(self, pending_division):
        failed = equals(pending_division).state
        state = enter_operator(failed, "+").state
        assert state.error_message == ""
        assert state.pending_operand == "0"


class TestResolve:

    def test_addition_round_trip(self):
        transition = equals(_binary("5", "+", "3"))
        assert transition.state.current_operand == "8"
        assert transition.state.pending_operand == ""
        assert transition.state.pending_operator is None
        assert transition.record is not None
        assert transition.record.expression_text == "5 + 3"
        assert transition.record.result_text == "8"

    def test_subtraction_goes_negative(self):
        assert equals(_binary("10", "-", "15")).state.current_operand == "-5"

    def test_multiplication_symbol_in_expression(self):
        transition = equals(_binary("7", "×", "6"))
        assert transition.record.expression_text == "7 × 6"
        assert transition.state.current_operand == "42"

    def test_division(self):
        transition = equals(_binary("1", "÷", "3"))
        assert transition.state.current_operand == "0.33333333"
        assert transition.record.expression_text == "1 ÷ 3"

    def test_decimal_noise_is_rounded(self):
        assert equals(_binary("0.1", "+", "0.2")).state.current_operand == "0.3"

    def test_fractional_operands_with_integral_result(self):
        assert equals(_binary("1.5", "×", "2")).state.current_operand == "3"

    def test_division_by_zero(self, pending_division):
        transition = resolve(pending_division)
        assert transition.record is None
        assert transition.state.current_operand == "0"
        assert transition.state.error_message == "Cannot divide by zero"
        assert transition.state.pending_operand == ""
        assert transition.state.pending_operator is None

    def test_overflow(self):
        big = "9" * 200
        transition = equals(_binary(big, "×", big))
        assert transition.record is None
        assert transition.state.error_message == "Result is too large"
        assert transition.state.current_operand == "0"

    def test_no_pending_is_noop(self):
        state = _typed("42")
        transition = resolve(state)
        assert transition.state == state
        assert transition.record is None

    def test_equals_without_operator_is_noop(self):
        assert equals(INITIAL_STATE).state == INITIAL_STATE

    def test_repeat_operator_uses_zero(self):
        state = enter_operator(_typed("5"), "+").state
        transition = enter_operator(state, "+")
        assert transition.record.expression_text == "5 + 0"
        assert transition.state.pending_operand == "5"


class TestComputeBinary:

    def test_divide_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            compute_binary(Operator.DIVIDE, 8.0, 0.0)

    def test_non_finite_raises(self):
        with pytest.raises(ResultOverflow):
            compute_binary(Operator.MULTIPLY, 1e200, 1e200)


# ---------------------------------------------------------------------------
# Clear and backspace
# ---------------------------------------------------------------------------

class TestClearAll:

    def test_resets_everything(self, pending_division):
        assert clear_all(pending_division).state == INITIAL_STATE

    def test_idempotent(self):
        once = clear_all(_binary("5", "+", "3")).state
        twice = clear_all(once).state
        assert once == twice == CalculatorState()


class TestBackspace:

    def test_removes_last_character(self):
        assert backspace(_typed("12")).state.current_operand == "1"

    def test_last_character_becomes_zero(self):
        assert backspace(_typed("1")).state.current_operand == "0"

    def test_zero_stays_zero(self):
        assert backspace(INITIAL_STATE).state.current_operand == "0"

    def test_lone_minus_becomes_zero(self):
        state = CalculatorState(current_operand="-5")
        assert backspace(state).state.current_operand == "0"

    def test_dismisses_error(self, pending_division):
        failed = equals(pending_division).state
        state = backspace(failed).state
        assert state.error_message == ""
        assert state.current_operand == "0"

    def test_leaves_pending_operand(self):
        state = backspace(_binary("5", "+", "12")).state
        assert state.current_operand == "1"
        assert state.pending_operand == "5"
        assert state.pending_operator == Operator.ADD


# ---------------------------------------------------------------------------
# Scientific functions and constants
# ---------------------------------------------------------------------------

class TestApplyUnary:

    @pytest.mark.parametrize(
        "fn, operand, expected",
        [
            ("sqrt", "4", "2"),
            ("square", "3", "9"),
            ("cube", "2", "8"),
            ("log", "100", "2"),
            ("ln", "1", "0"),
            ("reciprocal", "4", "0.25"),
            ("negate", "5", "-5"),
            ("negate", "0", "0"),
            ("sin", "30", "0.5"),
            ("sin", "180", "0"),
            ("cos", "60", "0.5"),
            ("tan", "45", "1"),
        ],
    )
    def test_results(self, fn, operand, expected):
        state = CalculatorState(current_operand=operand)
        assert apply_unary(state, fn).state.current_operand == expected

    def test_sqrt_emits_record(self):
        transition = apply_unary(CalculatorState(current_operand="4"), UnaryFunction.SQRT)
        assert transition.record is not None
        assert transition.record.expression_text == "sqrt(4)"
        assert transition.record.result_text == "2"
        assert str(transition.record) == "sqrt(4) = 2"

    def test_negative_sqrt_is_invalid(self):
        transition = apply_unary(CalculatorState(current_operand="-4"), "sqrt")
        assert transition.record is None
        assert transition.state.current_operand == "0"
        assert transition.state.error_message == "Invalid input for square root"

    @pytest.mark.parametrize("operand", ["0", "-1"])
    def test_log_domain(self, operand):
        state = CalculatorState(current_operand=operand)
        assert apply_unary(state, "log").state.error_message == "Invalid input for logarithm"
        assert (
            apply_unary(state, "ln").state.error_message
            == "Invalid input for natural logarithm"
        )

    def test_reciprocal_of_zero(self):
        transition = apply_unary(INITIAL_STATE, "1/x")
        assert transition.state.error_message == "Cannot divide by zero"
        assert transition.record is None

    def test_overflowing_square(self):
        state = CalculatorState(current_operand="1" + "0" * 200)
        transition = apply_unary(state, "square")
        assert transition.state.error_message == "Result is undefined"
        assert transition.record is None

    def test_non_numeric_operand(self):
        transition = apply_unary(CalculatorState(current_operand="-"), "sqrt")
        assert transition.state.error_message == "Result is undefined"

    def test_result_feeds_pending_operation(self):
        state = _binary("5", "+", "9")
        state = apply_unary(state, "sqrt").state
        assert state.current_operand == "3"
        assert state.pending_operand == "5"
        assert equals(state).state.current_operand == "8"

    def test_failure_keeps_pending_operation(self):
        state = apply_unary(_binary("5", "+", "4"), "negate").state
        state = apply_unary(state, "sqrt").state
        assert state.error_message == "Invalid input for square root"
        assert state.current_operand == "0"
        assert state.pending_operand == "5"
        assert state.pending_operator is Operator.ADD
        state = _typed("3", state)
        assert state.error_message == ""
        assert equals(state).state.current_operand == "8"

    def test_success_clears_error(self, pending_division):
        failed = equals(pending_division).state
        state = apply_unary(failed, "negate").state
        assert state.error_message == ""


class TestComputeUnary:

    def test_invalid_domain_raises(self):
        with pytest.raises(InvalidDomain):
            compute_unary(UnaryFunction.SQRT, -1.0)

    def test_reciprocal_zero_raises(self):
        with pytest.raises(DivisionByZero):
            compute_unary(UnaryFunction.RECIPROCAL, 0.0)


class TestInsertConstant:

    def test_pi(self):
        transition = insert_constant(_typed("12"), Constant.PI)
        assert transition.state.current_operand == "3.141592653589793"
        assert transition.record is None

    def test_e(self):
        assert insert_constant(INITIAL_STATE, "e").state.current_operand == "2.718281828459045"

    def test_keeps_pending_operation(self):
        state = insert_constant(enter_operator(_typed("2"), "×").state, "pi").state
        assert state.pending_operand == "2"
        assert equals(state).state.current_operand == "6.28318531"


class TestLoadOperand:

    def test_starts_fresh_calculation(self):
        state = load_operand(_binary("5", "+", "3"), "42").state
        assert state == CalculatorState(current_operand="42")


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:

    def test_full_sequence(self):
        commands = [
            DigitCommand(digit="5"),
            OperatorCommand(operator="+"),
            DigitCommand(digit="3"),
            EqualsCommand(),
        ]
        state = INITIAL_STATE
        records = []
        for command in commands:
            transition = dispatch(state, command)
            state = transition.state
            if transition.record is not None:
                records.append(transition.record)
        assert state.current_operand == "8"
        assert [str(r) for r in records] == ["5 + 3 = 8"]

    def test_backspace_and_clear(self):
        state = _typed("12")
        assert dispatch(state, BackspaceCommand()).state.current_operand == "1"
        assert dispatch(state, ClearCommand()).state == INITIAL_STATE

    def test_unary_and_constant(self):
        state = dispatch(CalculatorState(current_operand="9"), UnaryCommand(function="sqrt")).state
        assert state.current_operand == "3"
        state = dispatch(state, ConstantCommand(name="pi")).state
        assert state.current_operand == "3.141592653589793"

    def test_unknown_command_raises(self):
        with pytest.raises(TypeError):
            dispatch(INITIAL_STATE, object())
