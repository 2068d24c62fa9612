"""
Base engine class for the cribsharp framework.

This module provides the abstract base class for game engines. It defines the
common interface that the engines must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from cribsharp.adapters import PlatformAdapter
from cribsharp.events import EventBus


class CribsharpEngine(ABC):
    """
    Abstract base class for game engines.

    This class defines the common interface that game engines must implement,
    providing methods for starting games, handling player actions, and managing
    the game state.
    """

    def __init__(self, adapter: PlatformAdapter, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the engine.

        Args:
            adapter: Platform adapter to use for rendering and input
            config: Configuration options for the game
        """
        self.adapter = adapter
        self.config = config or {}
        self.event_bus = EventBus.get_instance()
        self.state = None

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the engine and prepare for a game.
        """
        await self.adapter.initialize()

    @abstractmethod
    async def shutdown(self) -> None:
        """
        Shut down the engine and clean up resources.
        """
        await self.adapter.shutdown()

    @abstractmethod
    async def start_game(self) -> None:
        """
        Start a new game.
        """
        pass

    @abstractmethod
    async def execute_player_action(self, action: Any, **kwargs) -> Any:
        """
        Execute a player action.

        Args:
            action: Action to perform
            **kwargs: Action-specific parameters
        """
        pass

    @abstractmethod
    async def render_state(self) -> None:
        """
        Render the current game state.
        """
        pass
