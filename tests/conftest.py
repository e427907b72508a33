"""Shared fixtures for calculator tests."""

from __future__ import annotations

import pytest

from calculator import INITIAL_STATE, enter_digit, enter_operator
from models import CalculationRecord, CalculatorState
from persistence import MemoryStorage
from session import CalculatorSession
from store import HistoryStore, PreferencesStore


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def history(storage) -> HistoryStore:
    return HistoryStore(storage)


@pytest.fixture
def preferences(storage) -> PreferencesStore:
    return PreferencesStore(storage)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(history, preferences, clock) -> CalculatorSession:
    return CalculatorSession(history, preferences, active_key_seconds=0.1, clock=clock)


@pytest.fixture
def pending_division() -> CalculatorState:
    """State after typing 8 ÷ 0."""
    state = enter_digit(INITIAL_STATE, "8").state
    state = enter_operator(state, "÷").state
    return enter_digit(state, "0").state


@pytest.fixture
def sample_records() -> list[CalculationRecord]:
    return [
        CalculationRecord(expression_text="5 + 3", result_text="8"),
        CalculationRecord(expression_text="sqrt(4)", result_text="2"),
        CalculationRecord(expression_text="7 × 6", result_text="42"),
    ]

