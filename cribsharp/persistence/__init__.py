"""
Persistence for the cribsharp engine.

Saved games, lifetime stats and settings are stored through the
``PersistenceGateway`` interface.
"""

from cribsharp.persistence.storage import (
    GAME_STATE_KEY,
    SETTINGS_KEY,
    STATS_KEY,
    PersistenceGateway,
    SQLiteStateStore,
)

__all__ = [
    "GAME_STATE_KEY",
    "SETTINGS_KEY",
    "STATS_KEY",
    "PersistenceGateway",
    "SQLiteStateStore",
]
