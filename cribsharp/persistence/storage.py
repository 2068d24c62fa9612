"""
Persistence for the game in progress, lifetime stats and settings.

The engine talks to a ``PersistenceGateway``; ``SQLiteStateStore`` is the
concrete implementation. Storage problems never reach the game: failures are
logged and reads fall back to ``None``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import json
import logging
import sqlite3

from cribsharp.cribbage.state import GameSettings, GameState, GameStats
from cribsharp.persistence.schema import initialize_database

logger = logging.getLogger(__name__)

GAME_STATE_KEY = "cribbage_game_state"
STATS_KEY = "cribbage_stats"
SETTINGS_KEY = "cribbage_settings"


class PersistenceGateway(ABC):
    """Storage interface used by the engine."""

    @abstractmethod
    def save_game_state(self, state: GameState) -> None:
        pass

    @abstractmethod
    def load_game_state(self) -> Optional[GameState]:
        pass

    @abstractmethod
    def save_stats(self, stats: GameStats) -> None:
        pass

    @abstractmethod
    def load_stats(self) -> Optional[GameStats]:
        pass

    @abstractmethod
    def save_settings(self, settings: GameSettings) -> None:
        pass

    @abstractmethod
    def load_settings(self) -> Optional[GameSettings]:
        pass

    @abstractmethod
    def clear_all_data(self) -> None:
        pass


class SQLiteStateStore(PersistenceGateway):
    """
    Store saved documents as JSON in SQLite.

    This class keeps one JSON document per key in the ``kv_store`` table.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the SQLite state store.

        Args:
            db_path: Optional path to the database file. If None, uses an
                in-memory database.
        """
        self.db_path = db_path
        self.conn = initialize_database(db_path)

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _write(self, key: str, document: Dict[str, Any]) -> bool:
        try:
            cursor = self.conn.cursor()
            cursor.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, json.dumps(document)),
            )
            self.conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to save {key}: {e}", exc_info=True)
            return False

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
        except (sqlite3.Error, AttributeError) as e:
            logger.error(f"Failed to load {key}: {e}", exc_info=True)
            return None

        if row is None:
            return None

        try:
            document = json.loads(row["value"])
        except ValueError as e:
            logger.error(f"Saved {key} is not valid JSON: {e}", exc_info=True)
            return None

        if not isinstance(document, dict):
            logger.error(f"Saved {key} is not a JSON object")
            return None
        return document

    def save_game_state(self, state: GameState) -> None:
        self._write(GAME_STATE_KEY, state.to_dict())

    def load_game_state(self) -> Optional[GameState]:
        """
        Load the saved game, or None when there is none or it is unreadable.
        """
        document = self._read(GAME_STATE_KEY)
        if document is None:
            return None
        try:
            return GameState.from_dict(document)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Saved game state is malformed: {e}", exc_info=True)
            return None

    def save_stats(self, stats: GameStats) -> None:
        self._write(STATS_KEY, stats.to_dict())

    def load_stats(self) -> Optional[GameStats]:
        document = self._read(STATS_KEY)
        if document is None:
            return None
        try:
            return GameStats.from_dict(document)
        except (ValueError, TypeError) as e:
            logger.error(f"Saved stats are malformed: {e}", exc_info=True)
            return None

    def save_settings(self, settings: GameSettings) -> None:
        self._write(SETTINGS_KEY, settings.to_dict())

    def load_settings(self) -> Optional[GameSettings]:
        document = self._read(SETTINGS_KEY)
        if document is None:
            return None
        try:
            return GameSettings.from_dict(document)
        except (ValueError, TypeError) as e:
            logger.error(f"Saved settings are malformed: {e}", exc_info=True)
            return None

    def clear_all_data(self) -> None:
        """Delete the saved game, stats and settings."""
        try:
            cursor = self.conn.cursor()
            cursor.execute(
                "DELETE FROM kv_store WHERE key IN (?, ?, ?)",
                (GAME_STATE_KEY, STATS_KEY, SETTINGS_KEY),
            )
            self.conn.commit()
        except (sqlite3.Error, AttributeError) as e:
            logger.error(f"Failed to clear saved data: {e}", exc_info=True)
