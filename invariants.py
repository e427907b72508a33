"""Calculator state invariants.

Defines the rules every `CalculatorState` must satisfy after each
transition. Each rule is a callable predicate that returns True/False,
so the rules can be run by the session at runtime and by conformance
tests against known-good and known-bad states.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from models import CalculatorState


# ---------------------------------------------------------------------------
# Rule: a named, executable predicate over a state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named validation rule for calculator states."""

    id: str
    name: str
    description: str
    check: Callable[[CalculatorState], bool]


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

def _operator_paired_with_operand(s: CalculatorState) -> bool:
    return (s.pending_operator is not None) == bool(s.pending_operand)


def _current_operand_present(s: CalculatorState) -> bool:
    return bool(s.current_operand)


def _single_decimal_point(s: CalculatorState) -> bool:
    return s.current_operand.count(".") <= 1


def _error_resets_current(s: CalculatorState) -> bool:
    if not s.error_message:
        return True
    return s.current_operand == "0"


STATE_RULES: list[Rule] = [
    Rule(
        id="STATE-PENDING-PAIR",
        name="operator_paired_with_operand",
        description="A pending operator is set exactly when a pending operand is",
        check=_operator_paired_with_operand,
    ),
    Rule(
        id="STATE-CURRENT",
        name="current_operand_present",
        description="The current operand is never empty",
        check=_current_operand_present,
    ),
    Rule(
        id="STATE-POINT",
        name="single_decimal_point",
        description="The current operand contains at most one decimal point",
        check=_single_decimal_point,
    ),
    Rule(
        id="STATE-ERROR",
        name="error_resets_current",
        description="A displayed error leaves the current operand at '0'",
        check=_error_resets_current,
    ),
]


@dataclass(frozen=True)
class ValidationResult:
    rule_id: str
    rule_name: str
    passed: bool
    description: str


@dataclass(frozen=True)
class ValidationReport:
    results: list[ValidationResult]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        total = len(self.results)
        failed = len(self.failures)
        if failed == 0:
            return f"All {total} rules passed"
        lines = [f"{failed}/{total} rules failed:"]
        for f in self.failures:
            lines.append(f"  [{f.rule_id}] {f.rule_name}: {f.description}")
        return "\n".join(lines)


class StateInvariantError(Exception):
    """Raised when a transition produces a state that breaks a rule."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        super().__init__(report.summary())


def validate_state(state: CalculatorState) -> ValidationReport:
    """Run every rule against a state and return a report."""
    results = []
    for rule in STATE_RULES:
        try:
            passed = rule.check(state)
        except Exception:
            passed = False
        results.append(
            ValidationResult(
                rule_id=rule.id,
                rule_name=rule.name,
                passed=passed,
                description=rule.description,
            )
        )
    return ValidationReport(results=results)
