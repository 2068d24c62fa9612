"""
Base adapter interface for the cribsharp engine.

This module defines the interface that platform-specific adapters must implement
to interact with the cribsharp engine.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union
from enum import Enum

from cribsharp.common.card import Card
from cribsharp.cribbage.action import Action


class PlatformAdapter(ABC):
    """
    Base interface for platform-specific adapters.

    This abstract class defines the methods that platform-specific adapters
    must implement to interact with the cribsharp engine. These methods handle
    rendering the game state, requesting player decisions, and notifying of
    game events.
    """

    @abstractmethod
    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Render the current game state to the platform.

        Args:
            state: The state in ``GameState.to_adapter_format()`` form
        """
        pass

    @abstractmethod
    async def request_player_action(
        self,
        player_id: str,
        player_name: str,
        valid_actions: List[Action],
        timeout_seconds: Optional[float] = None,
    ) -> Action:
        """
        Request an action from a player.

        Args:
            player_id: Unique identifier for the player
            player_name: Display name of the player
            valid_actions: List of valid actions the player can take
            timeout_seconds: Optional timeout for the player's decision

        Returns:
            The player's chosen action

        Raises:
            TimeoutError: If the player doesn't respond within the timeout period
        """
        pass

    @abstractmethod
    async def request_card_selection(
        self,
        player_id: str,
        player_name: str,
        cards: Sequence[Card],
        count: int,
    ) -> List[Card]:
        """
        Ask a player to pick ``count`` distinct cards out of ``cards``.

        Used for the discard to the crib (two cards) and for pegging (one card).

        Args:
            player_id: Unique identifier for the player
            player_name: Display name of the player
            cards: The cards to choose from
            count: How many cards to pick

        Returns:
            The chosen cards
        """
        pass

    @abstractmethod
    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Notify the platform of a game event.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        pass

    # The following methods have default implementations but can be overridden

    async def initialize(self) -> None:
        """
        Initialize the adapter.

        This method is called when the adapter is first connected to the engine.
        """
        pass

    async def shutdown(self) -> None:
        """
        Shutdown the adapter.

        This method is called when the engine is shutting down.
        """
        pass
