"""
Immutable state models for the cribbage card game.

This module provides dataclasses for representing the state of a cribbage
game in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional
import time
import uuid

from cribsharp.common.card import Card
from cribsharp.cribbage.constants import Player, WINNING_SCORE
from cribsharp.cribbage.pegging import PeggingState
from cribsharp.cribbage.scoring import HandScore
from cribsharp.cribbage.strategy import Difficulty


class GamePhase(Enum):
    """Phases of a cribbage game, in the order they occur each round."""

    SELECTING_DEALER = "selecting-dealer"
    DEALING = "dealing"
    DISCARDING = "discarding"
    CUTTING = "cutting"
    PEGGING = "pegging"
    COUNTING = "counting"
    GAME_OVER = "game-over"


class CountingStep(Enum):
    """Which count is currently shown during the counting phase."""

    NON_DEALER_HAND = "non-dealer-hand"
    DEALER_HAND = "dealer-hand"
    CRIB = "crib"
    DONE = "done"


def _code(card: Optional[Card]) -> Optional[str]:
    return card.code if card else None


def _card(code: Optional[str]) -> Optional[Card]:
    return Card.from_code(code) if code else None


def _cards(codes: List[str]) -> List[Card]:
    return [Card.from_code(code) for code in codes]


@dataclass(frozen=True)
class DealerSelection:
    """
    The cut for deal.

    Attributes:
        user_card: Card cut by the human player
        ai_card: Card cut by the computer
        needs_redraw: True when both cards had the same rank
    """

    user_card: Optional[Card] = None
    ai_card: Optional[Card] = None
    needs_redraw: bool = False


@dataclass(frozen=True)
class Scores:
    """Game scores for both players."""

    user: int = 0
    ai: int = 0

    def of(self, player: Player) -> int:
        return self.user if player is Player.USER else self.ai

    def add(self, player: Player, points: int) -> "Scores":
        if player is Player.USER:
            return replace(self, user=self.user + points)
        return replace(self, ai=self.ai + points)

    def winner(self) -> Optional[Player]:
        """The player who has reached the winning score, if any."""
        if self.user >= WINNING_SCORE:
            return Player.USER
        if self.ai >= WINNING_SCORE:
            return Player.AI
        return None


@dataclass(frozen=True)
class CountResult:
    """
    The most recent hand or crib count.

    Attributes:
        owner: Player credited with the points
        step: Which count this was
        breakdown: Points per category
    """

    owner: Player
    step: CountingStep
    breakdown: HandScore


@dataclass(frozen=True)
class GameStats:
    """Lifetime statistics for the human player."""

    games_played: int = 0
    games_won: int = 0
    highest_score: int = 0
    perfect_hands: int = 0
    twenty_nine_hands: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games_played": self.games_played,
            "games_won": self.games_won,
            "highest_score": self.highest_score,
            "perfect_hands": self.perfect_hands,
            "twenty_nine_hands": self.twenty_nine_hands,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameStats":
        return cls(**{key: int(data[key]) for key in cls().to_dict() if key in data})


@dataclass(frozen=True)
class GameSettings:
    """User-facing settings."""

    difficulty: Difficulty = Difficulty.EASY
    sound_enabled: bool = True
    haptic_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty.value,
            "sound_enabled": self.sound_enabled,
            "haptic_enabled": self.haptic_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSettings":
        return cls(
            difficulty=Difficulty(data.get("difficulty", Difficulty.EASY.value)),
            sound_enabled=bool(data.get("sound_enabled", True)),
            haptic_enabled=bool(data.get("haptic_enabled", True)),
        )


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of the cribbage game state.

    Attributes:
        id: Unique identifier for this game
        phase: Current phase of the game
        deck: Undealt cards, top of the deck first
        player_hand: Cards the human still holds
        ai_hand: Cards the computer still holds
        player_show: The human's four kept cards, counted after pegging
        ai_show: The computer's four kept cards, counted after pegging
        crib: The dealer's crib
        starter: The cut card
        current_player: Player expected to act during pegging
        dealer: Dealer for this round
        dealer_selection: Result of the cut for deal
        scores: Game scores
        pegging: The current count
        counting_step: Which count is shown during counting
        last_count: The most recent hand or crib count
        winner: Player who reached 121, once the game is over
        scoring_message: Description of the latest score for display
        difficulty: Computer opponent difficulty
        current_round: Number of hands dealt so far
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    phase: GamePhase = GamePhase.SELECTING_DEALER
    deck: List[Card] = field(default_factory=list)
    player_hand: List[Card] = field(default_factory=list)
    ai_hand: List[Card] = field(default_factory=list)
    player_show: List[Card] = field(default_factory=list)
    ai_show: List[Card] = field(default_factory=list)
    crib: List[Card] = field(default_factory=list)
    starter: Optional[Card] = None
    current_player: Player = Player.USER
    dealer: Optional[Player] = None
    dealer_selection: DealerSelection = field(default_factory=DealerSelection)
    scores: Scores = field(default_factory=Scores)
    pegging: PeggingState = field(default_factory=PeggingState)
    counting_step: Optional[CountingStep] = None
    last_count: Optional[CountResult] = None
    winner: Optional[Player] = None
    scoring_message: Optional[str] = None
    difficulty: Difficulty = Difficulty.EASY
    current_round: int = 0
    timestamp: float = field(default_factory=lambda: time.time())

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def non_dealer(self) -> Optional[Player]:
        return self.dealer.opponent if self.dealer else None

    @property
    def waiting_for_acknowledgement(self) -> bool:
        """True while a count is shown and the next one has not been made."""
        return self.phase == GamePhase.COUNTING and self.counting_step in (
            CountingStep.NON_DEALER_HAND,
            CountingStep.DEALER_HAND,
            CountingStep.CRIB,
        )

    def hand_of(self, player: Player) -> List[Card]:
        return self.player_hand if player is Player.USER else self.ai_hand

    def show_of(self, player: Player) -> List[Card]:
        return self.player_show if player is Player.USER else self.ai_show

    def all_cards(self) -> List[Card]:
        """
        Every card the state accounts for.

        Holds each of the 52 cards exactly once once a deck has been built.
        """
        cards = (
            list(self.deck)
            + list(self.player_hand)
            + list(self.ai_hand)
            + list(self.crib)
            + list(self.pegging.cards)
            + list(self.pegging.history)
        )
        if self.starter is not None:
            cards.append(self.starter)
        return cards

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for serialization.

        Returns:
            JSON-compatible dictionary; ``from_dict`` reverses it
        """
        return {
            "id": self.id,
            "phase": self.phase.value,
            "deck": [card.code for card in self.deck],
            "player_hand": [card.code for card in self.player_hand],
            "ai_hand": [card.code for card in self.ai_hand],
            "player_show": [card.code for card in self.player_show],
            "ai_show": [card.code for card in self.ai_show],
            "crib": [card.code for card in self.crib],
            "starter": _code(self.starter),
            "current_player": self.current_player.value,
            "dealer": self.dealer.value if self.dealer else None,
            "dealer_selection": {
                "user_card": _code(self.dealer_selection.user_card),
                "ai_card": _code(self.dealer_selection.ai_card),
                "needs_redraw": self.dealer_selection.needs_redraw,
            },
            "scores": {"user": self.scores.user, "ai": self.scores.ai},
            "pegging": self.pegging.to_dict(),
            "counting_step": self.counting_step.value if self.counting_step else None,
            "last_count": {
                "owner": self.last_count.owner.value,
                "step": self.last_count.step.value,
                "breakdown": self.last_count.breakdown.to_dict(),
            }
            if self.last_count
            else None,
            "winner": self.winner.value if self.winner else None,
            "scoring_message": self.scoring_message,
            "difficulty": self.difficulty.value,
            "current_round": self.current_round,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        """
        Rebuild a game state from ``to_dict`` output.

        Raises:
            KeyError, ValueError, TypeError: If the data is malformed
        """
        selection = data["dealer_selection"]
        last_count = data.get("last_count")
        return cls(
            id=data["id"],
            phase=GamePhase(data["phase"]),
            deck=_cards(data["deck"]),
            player_hand=_cards(data["player_hand"]),
            ai_hand=_cards(data["ai_hand"]),
            player_show=_cards(data["player_show"]),
            ai_show=_cards(data["ai_show"]),
            crib=_cards(data["crib"]),
            starter=_card(data.get("starter")),
            current_player=Player(data["current_player"]),
            dealer=Player(data["dealer"]) if data.get("dealer") else None,
            dealer_selection=DealerSelection(
                user_card=_card(selection.get("user_card")),
                ai_card=_card(selection.get("ai_card")),
                needs_redraw=bool(selection.get("needs_redraw", False)),
            ),
            scores=Scores(
                user=int(data["scores"]["user"]), ai=int(data["scores"]["ai"])
            ),
            pegging=PeggingState.from_dict(data["pegging"]),
            counting_step=CountingStep(data["counting_step"])
            if data.get("counting_step")
            else None,
            last_count=CountResult(
                owner=Player(last_count["owner"]),
                step=CountingStep(last_count["step"]),
                breakdown=HandScore.from_dict(last_count["breakdown"]),
            )
            if last_count
            else None,
            winner=Player(data["winner"]) if data.get("winner") else None,
            scoring_message=data.get("scoring_message"),
            difficulty=Difficulty(data.get("difficulty", Difficulty.EASY.value)),
            current_round=int(data.get("current_round", 0)),
            timestamp=float(data.get("timestamp", time.time())),
        )

    def to_adapter_format(self) -> Dict[str, Any]:
        """
        Convert the game state to a format suitable for platform adapters.

        The computer's hand is hidden until it is counted.

        Returns:
            Dictionary in adapter-friendly format
        """
        reveal_ai = self.phase in (GamePhase.COUNTING, GamePhase.GAME_OVER)
        return {
            "game_id": self.id,
            "phase": self.phase.value,
            "round": self.current_round,
            "dealer": self.dealer.value if self.dealer else None,
            "current_player": self.current_player.value,
            "scores": {"user": self.scores.user, "ai": self.scores.ai},
            "player_hand": [str(card) for card in self.player_hand],
            "ai_hand_size": len(self.ai_hand),
            "ai_show": [str(card) for card in self.ai_show] if reveal_ai else [],
            "player_show": [str(card) for card in self.player_show],
            "crib": [str(card) for card in self.crib] if reveal_ai else [],
            "crib_size": len(self.crib),
            "starter": str(self.starter) if self.starter else None,
            "dealer_selection": {
                "user_card": str(self.dealer_selection.user_card)
                if self.dealer_selection.user_card
                else None,
                "ai_card": str(self.dealer_selection.ai_card)
                if self.dealer_selection.ai_card
                else None,
                "needs_redraw": self.dealer_selection.needs_redraw,
            },
            "pegging": {
                "cards": [str(card) for card in self.pegging.cards],
                "total": self.pegging.total,
            },
            "counting_step": self.counting_step.value if self.counting_step else None,
            "message": self.scoring_message,
            "winner": self.winner.value if self.winner else None,
        }
