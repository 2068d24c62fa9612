"""
Command-line interface adapter for the cribsharp engine.

This module provides an adapter for console-based play against the computer.
"""

from typing import Any, Dict, List, Optional, Sequence, Union
from enum import Enum
import asyncio
import logging

from cribsharp.adapters.base import PlatformAdapter
from cribsharp.common.card import Card
from cribsharp.common.io_interface import (
    AsyncIOInterfaceWrapper,
    ConsoleIOInterface,
    IOInterface,
    LoggingIOInterface,
)
from cribsharp.cribbage.action import Action

logger = logging.getLogger(__name__)

PHASE_TITLES = {
    "selecting-dealer": "Cut for deal",
    "dealing": "Dealing",
    "discarding": "Discard to the crib",
    "cutting": "Cut the starter",
    "pegging": "Pegging",
    "counting": "Counting",
    "game-over": "Game over",
}


class CLIAdapter(PlatformAdapter):
    """
    Command-line interface adapter for the cribsharp engine.

    This adapter uses the standard console for input/output, providing a
    simple text-based interface to the game. Everything written to the
    console can also be copied to a transcript file.
    """

    def __init__(
        self,
        io_interface: Optional[IOInterface] = None,
        transcript: Optional[LoggingIOInterface] = None,
    ):
        """
        Initialize the CLI adapter.

        Args:
            io_interface: Optional IOInterface to use for I/O. If None, a default
                          console IOInterface will be created.
            transcript: Optional transcript that receives a copy of all output
        """
        self.io_interface = io_interface or ConsoleIOInterface()
        self.transcript = transcript
        self._async_io = AsyncIOInterfaceWrapper(self.io_interface)

    async def shutdown(self) -> None:
        """Shutdown the CLI adapter."""
        self._async_io.close()

    async def _output(self, message: str) -> None:
        self.io_interface.output(message)
        if self.transcript is not None:
            await self.transcript.output_async(message)

    async def _input(self, prompt: str, timeout_seconds: Optional[float]) -> str:
        try:
            if timeout_seconds:
                response = await asyncio.wait_for(
                    self._async_io.input(prompt), timeout_seconds
                )
            else:
                response = await self._async_io.input(prompt)
        except asyncio.TimeoutError:
            raise TimeoutError("No response before the time limit")
        if self.transcript is not None:
            await self.transcript.output_async(f"{prompt}{response}")
        return response

    async def render_game_state(self, state: Dict[str, Any]) -> None:
        """
        Render the current game state to the console.

        Args:
            state: The current game state
        """
        phase = state.get("phase", "")
        scores = state.get("scores", {})
        lines = [
            f"\n=== {PHASE_TITLES.get(phase, phase)} ===",
            f"Score - You: {scores.get('user', 0)}  AI: {scores.get('ai', 0)}",
        ]

        dealer = state.get("dealer")
        if dealer:
            lines.append(f"Dealer: {'You' if dealer == 'user' else 'AI'}")

        selection = state.get("dealer_selection", {})
        if phase == "selecting-dealer" and selection.get("user_card"):
            lines.append(
                f"You cut {selection['user_card']}, AI cut {selection['ai_card']}"
            )

        if state.get("starter"):
            lines.append(f"Starter: {state['starter']}")

        if phase == "pegging":
            pegging = state.get("pegging", {})
            played = ", ".join(pegging.get("cards", [])) or "-"
            lines.append(f"Count: {pegging.get('total', 0)}  ({played})")
            lines.append(f"AI holds {state.get('ai_hand_size', 0)} cards")

        if phase in ("counting", "game-over"):
            lines.append(f"Your hand: {', '.join(state.get('player_show', []))}")
            lines.append(f"AI hand: {', '.join(state.get('ai_show', []))}")
            lines.append(f"Crib: {', '.join(state.get('crib', []))}")
        elif state.get("player_hand"):
            lines.append(f"Your cards: {', '.join(state['player_hand'])}")

        if state.get("message"):
            lines.append(f">> {state['message']}")

        for line in lines:
            await self._output(line)

    async def request_player_action(
        self,
        player_id: str,
        player_name: str,
        valid_actions: List[Action],
        timeout_seconds: Optional[float] = None,
    ) -> Action:
        """
        Request an action from a player via the console.

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
        # Map numbers and action names to actions for easier input
        action_map = {str(i + 1): action for i, action in enumerate(valid_actions)}
        for action in valid_actions:
            action_map[action.name.lower()] = action

        while True:
            await self._output("Valid actions:")
            for i, action in enumerate(valid_actions):
                await self._output(f"{i+1}: {action.name}")

            choice = (await self._input("> ", timeout_seconds)).strip().lower()
            if choice in action_map:
                return action_map[choice]
            await self._output("Invalid choice. Please try again.")

    async def request_card_selection(
        self,
        player_id: str,
        player_name: str,
        cards: Sequence[Card],
        count: int,
    ) -> List[Card]:
        """
        Ask for ``count`` cards by position or by code, e.g. ``1 4`` or ``5H JS``.
        """
        while True:
            await self._output(f"Choose {count} card{'s' if count > 1 else ''}:")
            for i, card in enumerate(cards):
                await self._output(f"{i+1}: {card} [{card.code}]")

            selected = self._parse_selection(await self._input("> ", None), cards)
            if selected is not None and len(selected) == count:
                return selected
            await self._output("Invalid choice. Please try again.")

    @staticmethod
    def _parse_selection(text: str, cards: Sequence[Card]) -> Optional[List[Card]]:
        selected = []
        for token in text.replace(",", " ").split():
            if token.isdigit():
                index = int(token) - 1
                if not 0 <= index < len(cards):
                    return None
                card = cards[index]
            else:
                try:
                    card = Card.from_code(token)
                except ValueError:
                    return None
                if card not in cards:
                    return None
            if card in selected:
                return None
            selected.append(card)
        return selected

    async def notify_game_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Notify the user of a game event via the console.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        message = self._format_event_message(event_type, data)
        if message:
            await self._output(message)

    def _format_event_message(
        self, event_type: str, data: Dict[str, Any]
    ) -> Optional[str]:
        """
        Format an event message based on the event type.

        Args:
            event_type: The type of event
            data: Data associated with the event

        Returns:
            Formatted message string or None if no message needed
        """
        if event_type == "DEALER_REDRAW":
            return "Both cut the same rank. Cut again."

        elif event_type == "CARD_PLAYED" and data.get("player") == "ai":
            return f"AI plays {data.get('card')} (count {data.get('total')})"

        elif event_type == "PLAYER_PASSED":
            who = "You" if data.get("player") == "user" else "AI"
            return f"{who}: go"

        elif event_type == "POINTS_SCORED":
            who = "You" if data.get("player") == "user" else "AI"
            return f"{who} +{data.get('points')} for {data.get('reason')}"

        elif event_type == "GAME_ENDED":
            scores = data.get("scores", {})
            winner = "You win" if data.get("winner") == "user" else "AI wins"
            return f"{winner}! Final score {scores.get('user')}-{scores.get('ai')}"

        return None
