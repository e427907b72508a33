"""Calculator session.

One session corresponds to one open calculator window. It owns the
current `CalculatorState` and the UI flags (scientific mode, shortcuts
overlay, history screen), runs every command through the reducer, and
commits completed calculations to the history store.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

from calculator import INITIAL_STATE, Transition, dispatch, load_operand
from invariants import StateInvariantError, validate_state
from keyboard import KeyAction, translate_key
from models import CalculatorState, CalculatorView, Command, Preferences
from store import HistoryStore, PreferencesStore

logger = logging.getLogger(__name__)


class CalculatorSession:

    def __init__(
        self,
        history: HistoryStore,
        preferences: PreferencesStore,
        *,
        active_key_seconds: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.history = history
        self.preferences = preferences
        self.state: CalculatorState = INITIAL_STATE
        self.scientific = False
        self.show_shortcuts = False
        self.show_history = False
        self._active_key_seconds = active_key_seconds
        self._clock = clock
        self._active_key: str | None = None
        self._active_until = 0.0

    # -- state transitions ---------------------------------------------------

    def _commit(self, transition: Transition) -> CalculatorState:
        """Adopt the next state and persist any completed calculation."""
        report = validate_state(transition.state)
        if not report.passed:
            raise StateInvariantError(report)
        self.state = transition.state
        if transition.record is not None:
            self.history.append(transition.record)
        return self.state

    def execute(self, command: Command) -> CalculatorState:
        """Run one button-press command."""
        return self._commit(dispatch(self.state, command))

    def press_key(self, key: str) -> KeyAction:
        """Run one key press. Unhandled keys change nothing."""
        action = translate_key(key, scientific=self.scientific)
        if action.toggle_shortcuts:
            self.toggle_shortcuts()
        elif action.command is not None:
            self._commit(dispatch(self.state, action.command))
            self._mark_active(key)
        return action

    def use_record(self, record_id: int) -> CalculatorState:
        """Load a history result as a fresh operand and leave the history screen."""
        result = self.history.reuse(record_id)
        self._commit(load_operand(self.state, result))
        logger.debug("Reusing result %s of calculation %s", result, record_id)
        self.show_history = False
        return self.state

    # -- UI flags ------------------------------------------------------------

    def toggle_scientific(self) -> bool:
        self.scientific = not self.scientific
        return self.scientific

    def toggle_shortcuts(self) -> bool:
        self.show_shortcuts = not self.show_shortcuts
        return self.show_shortcuts

    def toggle_theme(self) -> Preferences:
        return self.preferences.toggle_theme()

    def open_history(self) -> None:
        self.show_history = True

    def close_history(self) -> None:
        self.show_history = False

    # -- active key marker ---------------------------------------------------

    def _mark_active(self, key: str) -> None:
        self._active_key = key
        self._active_until = self._clock() + self._active_key_seconds

    @property
    def active_key(self) -> str | None:
        if self._active_key is not None and self._clock() >= self._active_until:
            self._active_key = None
        return self._active_key

    # -- rendering -----------------------------------------------------------

    def view(self) -> CalculatorView:
        return CalculatorView(
            display=self.state.display,
            expression=self.state.expression,
            error=bool(self.state.error_message),
            scientific=self.scientific,
            show_shortcuts=self.show_shortcuts,
            show_history=self.show_history,
            dark_mode=self.preferences.get().dark_mode,
            active_key=self.active_key,
            history_size=self.history.count(),
        )
