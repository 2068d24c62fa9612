"""
Cribbage game engine implementation.

This module provides the CribbageEngine class, which implements the
CribsharpEngine interface for two-player cribbage against the computer.

The engine owns the authoritative game state. Every change goes through a
pure transition from :mod:`cribsharp.cribbage.transitions`, and is then
committed: saved, rendered and followed by any computer move that is due.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Set, Union
import asyncio
import logging
import random
import time

from cribsharp.adapters import PlatformAdapter
from cribsharp.common.card import Card
from cribsharp.cribbage.action import Action
from cribsharp.cribbage.constants import CARDS_TO_CRIB, Player
from cribsharp.cribbage.pegging import playable_cards
from cribsharp.cribbage.state import (
    GamePhase,
    GameSettings,
    GameState,
    GameStats,
)
from cribsharp.cribbage.strategy import Difficulty
from cribsharp.cribbage.transitions import StateTransitionEngine
from cribsharp.engine.base import CribsharpEngine
from cribsharp.events import EngineEventType
from cribsharp.persistence import PersistenceGateway, SQLiteStateStore

logger = logging.getLogger(__name__)

PERFECT_HAND = 28
TWENTY_NINE = 29


@dataclass(frozen=True)
class ActionTicket:
    """
    Identifies the state a scheduled computer action was planned for.

    Attributes:
        game_id: Game the action belongs to
        phase: Phase at scheduling time
        current_player: Player to act at scheduling time
        revision: Engine revision at scheduling time
        action: Which automatic action to run (deal, cut or peg)
    """

    game_id: str
    phase: GamePhase
    current_player: Player
    revision: int
    action: str


class CribbageEngine(CribsharpEngine):
    """
    Engine implementation for cribbage.

    This class implements the CribsharpEngine interface for cribbage,
    providing methods for each player decision, scheduling the computer's
    moves, and persisting the game, stats and settings.
    """

    def __init__(
        self,
        adapter: PlatformAdapter,
        config: Optional[Dict[str, Any]] = None,
        store: Optional[PersistenceGateway] = None,
    ):
        """
        Initialize the cribbage engine.

        Args:
            adapter: Platform adapter to use for rendering and input
            config: Configuration options for the game
            store: Persistence gateway; defaults to a SQLite store at
                ``config["db_path"]``
        """
        super().__init__(adapter, config)

        # Apply default configuration
        default_config = {
            "difficulty": Difficulty.EASY.value,
            "ai_delay": 1.0,  # seconds before each computer move
            "db_path": None,  # None keeps everything in memory
            "seed": None,
        }

        # Merge with provided config
        if config:
            default_config.update(config)

        self.config = default_config

        self.rng = random.Random(self.config["seed"])
        self.store = store if store is not None else SQLiteStateStore(
            self.config["db_path"]
        )
        self.settings = GameSettings(difficulty=Difficulty(self.config["difficulty"]))
        self.stats = GameStats()
        self.state = GameState(difficulty=self.settings.difficulty)

        self._revision = 0
        self._tasks: Set[asyncio.Task] = set()
        self._pending_events: List[tuple] = []
        self._unsubscribe = None

    @property
    def revision(self) -> int:
        """Number of committed state changes so far."""
        return self._revision

    async def initialize(self) -> None:
        """
        Initialize the engine, restoring saved settings and stats.
        """
        await super().initialize()

        # Forward everything the transitions announce to the adapter
        self._unsubscribe = self.event_bus.on_any(self._collect_event)

        settings = self.store.load_settings()
        if settings is not None:
            self.settings = settings
        stats = self.store.load_stats()
        if stats is not None:
            self.stats = stats

        self.event_bus.emit(
            EngineEventType.ENGINE_INIT,
            {
                "engine_type": "cribbage",
                "config": self.config,
                "timestamp": time.time(),
            },
        )
        await self._flush_events()

    async def shutdown(self) -> None:
        """
        Shut down the engine, cancelling any pending computer move.
        """
        self._cancel_pending()

        self.event_bus.emit(EngineEventType.ENGINE_SHUTDOWN, {"timestamp": time.time()})
        await self._flush_events()

        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

        await super().shutdown()

    async def start_game(self) -> None:
        """
        Start a new game of cribbage.
        """
        await self.start_new_game()

    async def start_new_game(self) -> GameState:
        """Throw away the current game and start a fresh one."""
        self._cancel_pending()
        state = StateTransitionEngine.new_game(self.settings.difficulty, self.rng)
        return await self._commit(state)

    async def load_saved_game(self) -> GameState:
        """
        Resume the saved game, or start a new one when there is none.

        The saved settings decide the difficulty of the resumed game.
        """
        saved = self.store.load_game_state()
        if saved is None:
            logger.info("No saved game found, starting a new one")
            return await self.start_new_game()

        self._cancel_pending()
        state = replace(saved, difficulty=self.settings.difficulty)

        self.event_bus.emit(
            EngineEventType.GAME_LOADED,
            {"game_id": state.id, "phase": state.phase.value, "timestamp": time.time()},
        )
        return await self._commit(state, track_stats=False)

    async def draw_for_dealer(self) -> GameState:
        return await self._apply(
            StateTransitionEngine.draw_for_dealer(self.state, self.rng), Action.DRAW
        )

    async def start_dealing(self) -> GameState:
        return await self._apply(
            StateTransitionEngine.start_dealing(self.state, self.rng), Action.DEAL
        )

    async def discard_to_crib(self, cards: Sequence[Card]) -> GameState:
        return await self._apply(
            StateTransitionEngine.discard_to_crib(self.state, cards, self.rng),
            Action.DISCARD,
        )

    async def cut_deck(self) -> GameState:
        """Cut the starter. Only the non-dealer cuts, so the human cuts when the AI deals."""
        if self.state.dealer is Player.USER:
            logger.debug("Rejected cut: the computer cuts for your deal")
            return self.state
        return await self._apply(
            StateTransitionEngine.cut_deck(self.state, self.rng), Action.CUT
        )

    async def play_card(self, card: Card) -> GameState:
        return await self._apply(
            StateTransitionEngine.play_card(self.state, card, Player.USER),
            Action.PLAY_CARD,
        )

    async def pass_turn(self) -> GameState:
        return await self._apply(
            StateTransitionEngine.pass_turn(self.state, Player.USER), Action.PASS
        )

    async def acknowledge_score(self) -> GameState:
        return await self._apply(
            StateTransitionEngine.acknowledge_score(self.state, self.rng),
            Action.ACKNOWLEDGE,
        )

    async def set_difficulty(self, difficulty: Union[Difficulty, str]) -> GameState:
        """Change the difficulty for this game and future games."""
        difficulty = Difficulty(difficulty)
        self.settings = replace(self.settings, difficulty=difficulty)
        self.store.save_settings(self.settings)
        if self.state.difficulty == difficulty:
            return self.state
        return await self._commit(replace(self.state, difficulty=difficulty))

    def set_sound_enabled(self, enabled: bool) -> None:
        self.settings = replace(self.settings, sound_enabled=bool(enabled))
        self.store.save_settings(self.settings)

    def set_haptic_enabled(self, enabled: bool) -> None:
        self.settings = replace(self.settings, haptic_enabled=bool(enabled))
        self.store.save_settings(self.settings)

    async def execute_player_action(
        self, action: Union[Action, str], **kwargs
    ) -> GameState:
        """
        Execute a player action.

        Args:
            action: Action to perform, as an ``Action`` or its name
            **kwargs: ``cards`` for DISCARD, ``card`` for PLAY_CARD; cards
                may be given as ``Card`` objects or codes such as ``"5H"``

        Returns:
            The committed game state

        Raises:
            ValueError: If the action is unknown or its card arguments are missing
        """
        if isinstance(action, str):
            try:
                action = Action[action.upper()]
            except KeyError:
                raise ValueError(f"Unknown action: {action}")

        if action is Action.NEW_GAME:
            return await self.start_new_game()
        elif action is Action.DRAW:
            return await self.draw_for_dealer()
        elif action is Action.DEAL:
            return await self.start_dealing()
        elif action is Action.DISCARD:
            cards = kwargs.get("cards")
            if not cards:
                raise ValueError("Missing cards to discard")
            return await self.discard_to_crib([self._to_card(c) for c in cards])
        elif action is Action.CUT:
            return await self.cut_deck()
        elif action is Action.PLAY_CARD:
            card = kwargs.get("card")
            if card is None:
                raise ValueError("Missing card to play")
            return await self.play_card(self._to_card(card))
        elif action is Action.PASS:
            return await self.pass_turn()
        elif action is Action.ACKNOWLEDGE:
            return await self.acknowledge_score()

        raise ValueError(f"Unknown action: {action}")

    @staticmethod
    def _to_card(card: Union[Card, str]) -> Card:
        return card if isinstance(card, Card) else Card.from_code(card)

    def get_valid_actions(self) -> Dict[str, List[str]]:
        """
        Get the actions the human can take right now.

        Returns:
            Dictionary mapping action names to lists of valid card codes
            (empty for actions that take no card)
        """
        state = self.state
        valid_actions: Dict[str, List[str]] = {}

        if state.phase == GamePhase.SELECTING_DEALER:
            valid_actions[Action.DRAW.name] = []

        elif state.phase == GamePhase.DEALING:
            valid_actions[Action.DEAL.name] = []

        elif state.phase == GamePhase.DISCARDING:
            valid_actions[Action.DISCARD.name] = [c.code for c in state.player_hand]

        elif state.phase == GamePhase.CUTTING:
            if state.dealer is Player.AI:
                valid_actions[Action.CUT.name] = []

        elif state.phase == GamePhase.PEGGING:
            if state.current_player is Player.USER:
                playable = playable_cards(state.player_hand, state.pegging.total)
                if playable:
                    valid_actions[Action.PLAY_CARD.name] = [c.code for c in playable]
                else:
                    valid_actions[Action.PASS.name] = []
            if state.scoring_message:
                valid_actions[Action.ACKNOWLEDGE.name] = []

        elif state.phase == GamePhase.COUNTING:
            if state.waiting_for_acknowledgement:
                valid_actions[Action.ACKNOWLEDGE.name] = []

        # Can always start over
        valid_actions[Action.NEW_GAME.name] = []

        return valid_actions

    async def run(self, max_actions: Optional[int] = None) -> GameState:
        """
        Play the current game through the adapter until it is over.

        Args:
            max_actions: Optional limit on the number of human decisions

        Returns:
            The final game state
        """
        actions_taken = 0
        while not self.state.is_game_over:
            await self.wait_until_idle()
            if self.state.is_game_over:
                break

            choices = [
                Action[name]
                for name in self.get_valid_actions()
                if name != Action.NEW_GAME.name
            ]
            if not choices:
                logger.warning(
                    "No action available in phase %s", self.state.phase.value
                )
                break

            action = await self.adapter.request_player_action(
                player_id=Player.USER.value,
                player_name=Player.USER.display_name,
                valid_actions=choices,
            )

            kwargs = {}
            if action is Action.DISCARD:
                kwargs["cards"] = await self.adapter.request_card_selection(
                    Player.USER.value,
                    Player.USER.display_name,
                    self.state.player_hand,
                    CARDS_TO_CRIB,
                )
            elif action is Action.PLAY_CARD:
                playable = playable_cards(
                    self.state.player_hand, self.state.pegging.total
                )
                selected = await self.adapter.request_card_selection(
                    Player.USER.value, Player.USER.display_name, playable, 1
                )
                kwargs["card"] = selected[0]

            await self.execute_player_action(action, **kwargs)

            actions_taken += 1
            if max_actions is not None and actions_taken >= max_actions:
                break

        return self.state

    async def wait_until_idle(self) -> None:
        """Wait until no computer move is scheduled."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    async def render_state(self) -> None:
        """
        Render the current game state.
        """
        adapter_state = self.state.to_adapter_format()
        await self.adapter.render_game_state(adapter_state)

    # Commit and scheduling

    async def _apply(self, new_state: GameState, action: Action) -> GameState:
        if new_state is self.state:
            logger.debug(
                "Rejected %s in phase %s", action.name, self.state.phase.value
            )
            return self.state
        return await self._commit(new_state)

    async def _commit(self, new_state: GameState, track_stats: bool = True) -> GameState:
        """Make ``new_state`` current, save it, render it and schedule the computer."""
        previous = self.state
        self.state = new_state
        self._revision += 1

        if track_stats:
            self._update_stats(previous, new_state)

        self.store.save_game_state(new_state)
        self.event_bus.emit(
            EngineEventType.STATE_SAVED,
            {"game_id": new_state.id, "revision": self._revision},
        )

        # Render errors are logged; the state stays committed and play goes on
        try:
            await self.render_state()
            await self._flush_events()
        except Exception as e:
            logger.error(
                f"Failed to render revision {self._revision}: {e}", exc_info=True
            )
            self.event_bus.emit(
                EngineEventType.ERROR,
                {"game_id": new_state.id, "revision": self._revision, "error": str(e)},
            )

        await self._schedule_automatic_action()
        return self.state

    def _update_stats(self, previous: GameState, state: GameState) -> None:
        stats = self.stats

        count = state.last_count
        if (
            count is not None
            and count is not previous.last_count
            and count.owner is Player.USER
        ):
            total = count.breakdown.total
            stats = replace(
                stats,
                highest_score=max(stats.highest_score, total),
                perfect_hands=stats.perfect_hands + (1 if total >= PERFECT_HAND else 0),
                twenty_nine_hands=stats.twenty_nine_hands
                + (1 if total == TWENTY_NINE else 0),
            )

        if state.is_game_over and not previous.is_game_over:
            stats = replace(
                stats,
                games_played=stats.games_played + 1,
                games_won=stats.games_won + (1 if state.winner is Player.USER else 0),
            )

        if stats != self.stats:
            self.stats = stats
            self.store.save_stats(stats)

    def _automatic_action(self, state: GameState) -> Optional[str]:
        if state.phase == GamePhase.DEALING:
            return "deal"
        if state.phase == GamePhase.CUTTING and state.dealer is Player.USER:
            return "cut"
        if state.phase == GamePhase.PEGGING and state.current_player is Player.AI:
            return "peg"
        return None

    def _ticket(self, action: str) -> ActionTicket:
        return ActionTicket(
            game_id=self.state.id,
            phase=self.state.phase,
            current_player=self.state.current_player,
            revision=self._revision,
            action=action,
        )

    def _is_current(self, ticket: ActionTicket) -> bool:
        return (
            ticket.game_id == self.state.id
            and ticket.phase == self.state.phase
            and ticket.current_player == self.state.current_player
            and ticket.revision == self._revision
        )

    async def _schedule_automatic_action(self) -> None:
        action = self._automatic_action(self.state)
        if action is None:
            return

        ticket = self._ticket(action)
        delay = self.config["ai_delay"]

        self.event_bus.emit(
            EngineEventType.AI_ACTION_SCHEDULED,
            {"game_id": ticket.game_id, "action": action, "delay": delay},
        )

        if not delay or delay <= 0:
            await self._run_ticket(ticket)
            return

        task = asyncio.create_task(self._run_after_delay(ticket, delay))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_after_delay(self, ticket: ActionTicket, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self._run_ticket(ticket)
        except Exception as e:
            logger.error(
                f"Scheduled {ticket.action} at revision {ticket.revision} failed: {e}",
                exc_info=True,
            )

    async def _run_ticket(self, ticket: ActionTicket) -> None:
        """Run a scheduled computer action unless the state has moved on."""
        if not self._is_current(ticket):
            logger.debug(
                "Discarding stale %s scheduled at revision %d (now %d)",
                ticket.action,
                ticket.revision,
                self._revision,
            )
            self.event_bus.emit(
                EngineEventType.AI_ACTION_DISCARDED,
                {
                    "game_id": ticket.game_id,
                    "action": ticket.action,
                    "revision": ticket.revision,
                },
            )
            await self._flush_events()
            return

        if ticket.action == "deal":
            new_state = StateTransitionEngine.start_dealing(self.state, self.rng)
            await self._apply(new_state, Action.DEAL)
        elif ticket.action == "cut":
            new_state = StateTransitionEngine.cut_deck(self.state, self.rng)
            await self._apply(new_state, Action.CUT)
        else:
            new_state = StateTransitionEngine.ai_peg_turn(self.state, self.rng)
            await self._apply(new_state, Action.PLAY_CARD)

    def _cancel_pending(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # Event forwarding

    def _collect_event(self, event: tuple) -> None:
        self._pending_events.append(event)

    async def _flush_events(self) -> None:
        while self._pending_events:
            event_type, data = self._pending_events.pop(0)
            await self.adapter.notify_game_event(event_type, data)

    def is_game_over(self) -> bool:
        """
        Check if the game is over.

        Returns:
            True if the game is over, False otherwise
        """
        return self.state.is_game_over

    def get_winner(self) -> Optional[Player]:
        """
        Get the player who won the game.

        Returns:
            The winner, or None if the game is not over
        """
        return self.state.winner
