"""
Dependency injection for FastAPI routes.
Provides the shared data store and settings.
"""
from typing import Annotated, Optional

from fastapi import Depends

from portfolio.config import Settings, get_settings
from portfolio.services.resilient import ResilientStore


# === Data Store ===

_store: Optional[ResilientStore] = None


def get_store() -> ResilientStore:
    """
    Get or create the process-wide store.

    The health cache lives on the store, so it must be shared across requests.

    Usage:
        @router.get("/notes")
        def list_notes(store: StoreDep):
            return store.list_notes()
    """
    global _store
    if _store is None:
        _store = ResilientStore.from_settings(get_settings())
    return _store


def reset_store() -> None:
    """
    Drop the cached store (and its engine).
    Useful for testing or after settings change.
    """
    global _store
    if _store is not None and _store.primary is not None:
        _store.primary.engine.dispose()
    _store = None


# === Type Aliases ===

StoreDep = Annotated[ResilientStore, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
