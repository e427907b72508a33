"""FastAPI endpoints for the calculator window.

Routes
------
GET    /calculator               Current display state
POST   /calculator/commands      Dispatch one command (button press)
POST   /calculator/keys          Dispatch one key press
POST   /calculator/scientific    Toggle scientific mode
GET    /calculator/shortcuts     Keyboard shortcut reference
POST   /calculator/shortcuts     Toggle the shortcuts overlay
GET    /history                  List calculations, newest first
DELETE /history                  Clear all calculations
DELETE /history/{id}             Delete one calculation
POST   /history/{id}/use         Load a calculation's result
POST   /history/open             Show the history screen
POST   /history/close            Return to the calculator
GET    /preferences              Current preferences
PUT    /preferences              Replace preferences
POST   /preferences/theme        Toggle dark mode
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel, Field

from keyboard import SHORTCUTS
from models import CalculationRecord, CalculatorView, CommandPayload, Preferences
from session import CalculatorSession
from store import RecordNotFoundError

calculator_router = APIRouter(prefix="/calculator", tags=["calculator"])
history_router = APIRouter(prefix="/history", tags=["history"])
preferences_router = APIRouter(prefix="/preferences", tags=["preferences"])

# The session instance is injected by the app factory (see app.py).
_session: CalculatorSession | None = None


def set_session(session: CalculatorSession) -> None:
    """Inject the session instance. Called once at app startup."""
    global _session
    _session = session


def get_session() -> CalculatorSession:
    assert _session is not None, "Session not initialized"
    return _session


# ---------------------------------------------------------------------------
# Request / response helpers
# ---------------------------------------------------------------------------

class KeyPress(BaseModel):
    key: str = Field(..., min_length=1, max_length=32)


class KeyPressResponse(BaseModel):
    handled: bool
    prevent_default: bool
    view: CalculatorView


class ShortcutEntry(BaseModel):
    action: str
    key: str


class HistoryListResponse(BaseModel):
    items: list[CalculationRecord]
    total: int


def _not_found(record_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Calculation not found: {record_id}")


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

@calculator_router.get("", response_model=CalculatorView)
def get_view() -> CalculatorView:
    return get_session().view()


@calculator_router.post("/commands", response_model=CalculatorView)
def run_command(payload: CommandPayload) -> CalculatorView:
    """Apply one button press."""
    session = get_session()
    session.execute(payload.root)
    return session.view()


@calculator_router.post("/keys", response_model=KeyPressResponse)
def press_key(payload: KeyPress) -> KeyPressResponse:
    """Apply one key press."""
    session = get_session()
    action = session.press_key(payload.key)
    return KeyPressResponse(
        handled=action.handled,
        prevent_default=action.prevent_default,
        view=session.view(),
    )


@calculator_router.post("/scientific", response_model=CalculatorView)
def toggle_scientific() -> CalculatorView:
    session = get_session()
    session.toggle_scientific()
    return session.view()


@calculator_router.get("/shortcuts", response_model=dict[str, list[ShortcutEntry]])
def list_shortcuts() -> dict[str, list[ShortcutEntry]]:
    return {
        section: [ShortcutEntry(action=a, key=k) for a, k in entries]
        for section, entries in SHORTCUTS.items()
    }


@calculator_router.post("/shortcuts", response_model=CalculatorView)
def toggle_shortcuts() -> CalculatorView:
    session = get_session()
    session.toggle_shortcuts()
    return session.view()


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@history_router.get("", response_model=HistoryListResponse)
def list_history(
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int | None = Query(default=None, ge=1, description="Pagination limit"),
) -> HistoryListResponse:
    history = get_session().history
    return HistoryListResponse(
        items=history.list(offset=offset, limit=limit), total=history.count()
    )


@history_router.delete("", status_code=204)
def clear_history() -> Response:
    get_session().history.clear()
    return Response(status_code=204)


@history_router.post("/open", response_model=CalculatorView)
def open_history() -> CalculatorView:
    session = get_session()
    session.open_history()
    return session.view()


@history_router.post("/close", response_model=CalculatorView)
def close_history() -> CalculatorView:
    session = get_session()
    session.close_history()
    return session.view()


@history_router.delete("/{record_id}", status_code=204)
def delete_record(record_id: int) -> Response:
    """Delete one calculation. Unknown ids are a no-op."""
    get_session().history.remove(record_id)
    return Response(status_code=204)


@history_router.post("/{record_id}/use", response_model=CalculatorView)
def use_record(record_id: int) -> CalculatorView:
    """Start a new calculation from a previous result."""
    session = get_session()
    try:
        session.use_record(record_id)
    except RecordNotFoundError:
        raise _not_found(record_id)
    return session.view()


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

@preferences_router.get("", response_model=Preferences)
def get_preferences() -> Preferences:
    return get_session().preferences.get()


@preferences_router.put("", response_model=Preferences)
def update_preferences(payload: Preferences) -> Preferences:
    return get_session().preferences.update(payload)


@preferences_router.post("/theme", response_model=Preferences)
def toggle_theme() -> Preferences:
    return get_session().toggle_theme()
