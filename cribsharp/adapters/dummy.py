"""
Dummy adapter for the cribsharp engine, used for testing and simulation.

This module provides a non-interactive adapter that can be used for automated
testing and simulations where no user interaction is needed.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from enum import Enum
import logging

from cribsharp.adapters.base import PlatformAdapter
from cribsharp.common.card import Card
from cribsharp.cribbage.action import Action

logger = logging.getLogger(__name__)


class DummyAdapter(PlatformAdapter):
    """
    Dummy adapter for testing and simulation.

    This adapter doesn't interact with any real platform. It records every
    rendered state and event, and answers requests from a script of
    predefined actions, a strategy function, or by taking the first option.
    """

    def __init__(
        self,
        auto_actions: Optional[List[Action]] = None,
        strategy_function: Optional[Callable[[List[Action]], Action]] = None,
        card_function: Optional[Callable[[Sequence[Card], int], List[Card]]] = None,
        verbose: bool = False,
    ):
        """
        Initialize the dummy adapter.

        Args:
            auto_actions: Optional list of actions to take in sequence
            strategy_function: Optional function that takes the valid actions
                and returns the action to take
            card_function: Optional function that takes (cards, count) and
                returns the cards to pick
            verbose: Whether to log every event at info level
        """
        self.auto_actions = list(auto_actions or [])
        self.strategy_function = strategy_function
        self.card_function = card_function
        self.verbose = verbose

        self.action_index = 0

        # Track events and rendered states for later inspection
        self.events = []
        self.rendered_states = []

        self.initialized = False
        self.shut_down = False

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.shut_down = True

    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Store the game state for later inspection.

        Args:
            state: The current game state
        """
        self.rendered_states.append(state)

        if self.verbose:
            logger.info(
                "phase=%s scores=%s message=%s",
                state.get("phase"),
                state.get("scores"),
                state.get("message"),
            )

    async def request_player_action(
        self,
        player_id: str,
        player_name: str,
        valid_actions: List[Action],
        timeout_seconds: Optional[float] = None,
    ) -> Action:
        """
        Return a predefined action or select one using the strategy function.

        Args:
            player_id: Unique identifier for the player
            player_name: Display name of the player
            valid_actions: List of valid actions the player can take
            timeout_seconds: Optional timeout (ignored in this adapter)

        Returns:
            A selected action
        """
        selected_action = None

        # Use the scripted actions first
        if self.action_index < len(self.auto_actions):
            selected_action = self.auto_actions[self.action_index]
            self.action_index += 1

        if selected_action is None and self.strategy_function:
            selected_action = self.strategy_function(valid_actions)

        # Make sure the selected action is valid
        if selected_action not in valid_actions:
            selected_action = valid_actions[0]

        if self.verbose:
            logger.info("%s selects %s", player_name, selected_action.name)

        return selected_action

    async def request_card_selection(
        self,
        player_id: str,
        player_name: str,
        cards: Sequence[Card],
        count: int,
    ) -> List[Card]:
        """
        Pick cards with the card function, or the first ``count`` cards.
        """
        if self.card_function:
            return list(self.card_function(cards, count))
        return list(cards[:count])

    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Store the event for later inspection.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type

        self.events.append((event_type_str, data))

        if self.verbose:
            logger.info("Event: %s %s", event_type_str, data)

    def get_events_by_type(self, event_type: Union[str, Enum]) -> List[Dict[str, Any]]:
        """
        Get all events of a specific type.

        Args:
            event_type: The type of events to retrieve

        Returns:
            A list of event data dictionaries
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type
        return [data for typ, data in self.events if typ == event_type_str]

    def clear(self) -> None:
        """Clear all stored events and states."""
        self.events.clear()
        self.rendered_states.clear()
        self.action_index = 0
