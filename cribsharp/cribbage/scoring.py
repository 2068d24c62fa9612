"""
Hand and crib counting for cribbage.

All functions here are pure: they take cards and return points, with no
dependence on card order. ``score_hand`` combines them into a ``HandScore``
breakdown.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from cribsharp.common.card import Card, Rank
from cribsharp.common.util import all_subsets, is_consecutive
from cribsharp.cribbage.constants import FIFTEEN, card_value


@dataclass(frozen=True)
class HandScore:
    """
    Points awarded to a counted hand, broken down by category.

    Attributes:
        fifteens: Points from combinations summing to 15
        pairs: Points from pairs, pairs royal and double pairs royal
        runs: Points from runs, including multiplied runs
        flushes: Points from a four or five card flush
        nobs: One point for the jack of the starter's suit
    """

    fifteens: int = 0
    pairs: int = 0
    runs: int = 0
    flushes: int = 0
    nobs: int = 0

    @property
    def total(self) -> int:
        return self.fifteens + self.pairs + self.runs + self.flushes + self.nobs

    def describe(self) -> str:
        """Human-readable breakdown, e.g. "fifteens 4, pairs 2 = 6"."""
        parts = [
            f"{name} {points}"
            for name, points in (
                ("fifteens", self.fifteens),
                ("pairs", self.pairs),
                ("runs", self.runs),
                ("flush", self.flushes),
                ("nobs", self.nobs),
            )
            if points
        ]
        if not parts:
            return "nineteen (0)"
        return f"{', '.join(parts)} = {self.total}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fifteens": self.fifteens,
            "pairs": self.pairs,
            "runs": self.runs,
            "flushes": self.flushes,
            "nobs": self.nobs,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HandScore":
        return cls(
            fifteens=data["fifteens"],
            pairs=data["pairs"],
            runs=data["runs"],
            flushes=data["flushes"],
            nobs=data["nobs"],
        )


def count_fifteens(cards: Sequence[Card]) -> int:
    """Two points for every distinct subset whose values sum to 15."""
    combos = sum(
        1
        for subset in all_subsets(cards, min_size=2)
        if sum(card_value(card.rank) for card in subset) == FIFTEEN
    )
    return combos * 2


def count_pairs(cards: Sequence[Card]) -> int:
    """Two points for every unordered pair of equal rank."""
    counts = Counter(card.rank for card in cards)
    return sum(n * (n - 1) for n in counts.values())


def count_runs(cards: Sequence[Card]) -> int:
    """
    Score runs of three or more using the published convention.

    Only the longest run length counts, but every distinct set of cards
    forming a run of that length scores it, so duplicate ranks multiply
    runs: 3-4-5-5 is two runs of three for 6 points.
    """
    for length in range(len(cards), 2, -1):
        runs = sum(
            1
            for subset in all_subsets(cards, min_size=length, max_size=length)
            if is_consecutive([card.rank.order for card in subset])
        )
        if runs:
            return runs * length
    return 0


def count_flush(
    hand: Sequence[Card], starter: Optional[Card] = None, is_crib: bool = False
) -> int:
    """
    Score a flush.

    A hand scores 4 when all of its cards share a suit, 5 when the starter
    matches too. A crib only scores when all five cards match.
    """
    if len(hand) < 4:
        return 0
    suits = {card.suit for card in hand}
    if len(suits) != 1:
        return 0
    starter_matches = starter is not None and starter.suit in suits
    if starter_matches:
        return 5
    return 0 if is_crib else 4


def count_nobs(hand: Sequence[Card], starter: Optional[Card]) -> int:
    """One point for holding the jack of the starter's suit."""
    if starter is None:
        return 0
    return int(any(c.rank == Rank.JACK and c.suit == starter.suit for c in hand))


def score_hand(
    hand: Sequence[Card], starter: Optional[Card] = None, is_crib: bool = False
) -> HandScore:
    """
    Count a hand or crib.

    Args:
        hand: The four kept cards (or the crib)
        starter: The cut card, or None when evaluating a hand before the cut
        is_crib: Apply the stricter crib flush rule

    Returns:
        HandScore with the points per category
    """
    cards: List[Card] = list(hand)
    if starter is not None:
        cards.append(starter)

    return HandScore(
        fifteens=count_fifteens(cards),
        pairs=count_pairs(cards),
        runs=count_runs(cards),
        flushes=count_flush(hand, starter, is_crib),
        nobs=count_nobs(hand, starter),
    )
