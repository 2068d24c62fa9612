"""
Pegging (the play) for cribbage.

``PeggingState`` is the immutable running count for one segment of play.
``score_play`` scores the card that was just added to that segment.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from cribsharp.common.card import Card
from cribsharp.common.util import is_consecutive
from cribsharp.cribbage.constants import FIFTEEN, PEGGING_LIMIT, Player, card_value

# Points for a trailing streak of 2, 3 or 4 cards of one rank
STREAK_POINTS = {2: 2, 3: 6, 4: 12}


@dataclass(frozen=True)
class PeggingState:
    """
    Immutable representation of the current count.

    Attributes:
        cards: Cards played since the last reset, in play order
        total: Running sum of the values of ``cards``
        last_played_by: Player who added the most recent card, if any
        history: Cards played earlier this round, before the last reset
    """

    cards: List[Card] = field(default_factory=list)
    total: int = 0
    last_played_by: Optional[Player] = None
    history: List[Card] = field(default_factory=list)

    def can_play(self, card: Card) -> bool:
        return is_playable(card, self.total)

    def with_card(self, card: Card, player: Player) -> "PeggingState":
        """Return a new count with ``card`` played by ``player``."""
        return replace(
            self,
            cards=list(self.cards) + [card],
            total=self.total + card_value(card.rank),
            last_played_by=player,
        )

    def reset(self) -> "PeggingState":
        """Start a new count, keeping the played cards in ``history``."""
        return PeggingState(history=list(self.history) + list(self.cards))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cards": [card.code for card in self.cards],
            "total": self.total,
            "last_played_by": self.last_played_by.value
            if self.last_played_by
            else None,
            "history": [card.code for card in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeggingState":
        cards = [Card.from_code(code) for code in data.get("cards", [])]
        last = data.get("last_played_by")
        return cls(
            cards=cards,
            total=sum(card_value(card.rank) for card in cards),
            last_played_by=Player(last) if last else None,
            history=[Card.from_code(code) for code in data.get("history", [])],
        )


@dataclass(frozen=True)
class PeggingScore:
    """Points earned by a single play, broken down by category."""

    fifteen: int = 0
    thirty_one: int = 0
    pairs: int = 0
    run: int = 0

    @property
    def total(self) -> int:
        return self.fifteen + self.thirty_one + self.pairs + self.run

    def describe(self) -> str:
        parts = []
        if self.fifteen:
            parts.append(f"fifteen for {self.fifteen}")
        if self.thirty_one:
            parts.append(f"thirty-one for {self.thirty_one}")
        if self.pairs:
            parts.append(f"pairs for {self.pairs}")
        if self.run:
            parts.append(f"run for {self.run}")
        return ", ".join(parts)


def is_playable(card: Card, total: int) -> bool:
    """A card may be played if it keeps the count at or under 31."""
    return card_value(card.rank) + total <= PEGGING_LIMIT


def playable_cards(hand: Sequence[Card], total: int) -> List[Card]:
    """The cards of ``hand`` that may be played on ``total``, in hand order."""
    return [card for card in hand if is_playable(card, total)]


def pair_points(cards: Sequence[Card]) -> int:
    """Points for the streak of equal ranks ending at the last card."""
    if not cards:
        return 0
    last_rank = cards[-1].rank
    streak = 0
    for card in reversed(cards):
        if card.rank != last_rank:
            break
        streak += 1
    return STREAK_POINTS.get(streak, 0)


def run_points(cards: Sequence[Card]) -> int:
    """Length of the longest run (3+) formed by a suffix of ``cards``."""
    for length in range(len(cards), 2, -1):
        if is_consecutive([card.rank.order for card in cards[-length:]]):
            return length
    return 0


def score_play(cards: Sequence[Card]) -> PeggingScore:
    """
    Score the last card of ``cards``, the count since the last reset.

    Args:
        cards: Cards played since the last reset, ending with the new card

    Returns:
        PeggingScore for the new card
    """
    total = sum(card_value(card.rank) for card in cards)
    return PeggingScore(
        fifteen=2 if total == FIFTEEN else 0,
        thirty_one=2 if total == PEGGING_LIMIT else 0,
        pairs=pair_points(cards),
        run=run_points(cards),
    )


def go_points(state: PeggingState) -> int:
    """
    Points for "go" or last card, owed to ``state.last_played_by``.

    A count that stopped at 31 already scored for the thirty-one.
    """
    if state.last_played_by is None or not state.cards:
        return 0
    return 0 if state.total == PEGGING_LIMIT else 1
