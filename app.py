"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
or:
    calcmaster
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from api import calculator_router, history_router, preferences_router, set_session
from config import Settings
from persistence import JsonFileStorage, KeyValueStorage, MemoryStorage
from session import CalculatorSession
from store import HistoryStore, PreferencesStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_path is None:
        return MemoryStorage()
    return JsonFileStorage(settings.storage_path)


def create_app(
    settings: Settings | None = None,
    storage: KeyValueStorage | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts optional settings and storage for testing; settings default to
    the environment and storage to whatever the settings select.
    """
    if settings is None:
        settings = Settings.from_env()
    if storage is None:
        storage = build_storage(settings)

    session = CalculatorSession(
        history=HistoryStore(storage),
        preferences=PreferencesStore(storage),
        active_key_seconds=settings.active_key_seconds,
    )
    set_session(session)
    logger.info(
        "Calculator session ready (%d saved calculations)", session.history.count()
    )

    app = FastAPI(
        title="CalcMaster API",
        description=(
            "Headless calculator window. Button presses and key presses are "
            "posted as commands; completed calculations are kept in a "
            "persisted history alongside the theme preference."
        ),
        version="0.1.0",
    )
    app.include_router(calculator_router)
    app.include_router(history_router)
    app.include_router(preferences_router)
    return app


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# Default app instance for `uvicorn app:app`
app = create_app()


if __name__ == "__main__":
    main()
