"""
Computer opponent strategies for cribbage.

Three difficulty levels share one interface. Discards are chosen by trying
all fifteen two-card discards and keeping the best four-card hand. Pegging
choices are random on easy, heuristic on hard, and a 70/30 mix on medium.
"""

import logging
import random
from abc import ABC, abstractmethod
from enum import Enum
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

from cribsharp.common.card import Card
from cribsharp.common.util import is_consecutive
from cribsharp.cribbage.constants import FIFTEEN, PEGGING_LIMIT, card_value
from cribsharp.cribbage.pegging import PeggingState, playable_cards
from cribsharp.cribbage.scoring import score_hand

logger = logging.getLogger(__name__)

# Chance that the medium opponent pegs with the hard heuristic
MEDIUM_SKILL = 0.7


class Difficulty(Enum):
    """Computer opponent difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class CribbageStrategy(ABC):
    """
    Base class for computer opponents.

    Subclasses decide which card to peg; discard selection is shared and
    only the keep-hand evaluation varies.
    """

    difficulty: Difficulty

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random

    def evaluate_keep(self, kept: Sequence[Card]) -> float:
        """Value of keeping ``kept`` before the starter is known."""
        return score_hand(kept).total

    def select_discard(self, hand: Sequence[Card]) -> List[Card]:
        """
        Choose two cards to throw to the crib.

        Ties go to the first discard found in ``itertools.combinations`` order.

        Args:
            hand: The six dealt cards

        Returns:
            The two cards to discard
        """
        best_score = None
        best_discard: Tuple[Card, ...] = tuple(hand[:2])

        for discard in combinations(hand, 2):
            kept = [card for card in hand if card not in discard]
            score = self.evaluate_keep(kept)
            if best_score is None or score > best_score:
                best_score = score
                best_discard = discard

        logger.debug(
            "%s discard %s (keep value %s)",
            self.difficulty.value,
            [card.code for card in best_discard],
            best_score,
        )
        return list(best_discard)

    @abstractmethod
    def choose_peg_card(
        self, playable: List[Card], pegging: PeggingState
    ) -> Card:
        """Pick one of the (non-empty) ``playable`` cards."""
        pass

    def select_peg_card(
        self, hand: Sequence[Card], pegging: PeggingState
    ) -> Optional[Card]:
        """
        Choose a card to peg, or None when no card fits under 31.

        Args:
            hand: Cards still held
            pegging: The current count

        Returns:
            A legal card, or None to signal "go"
        """
        playable = playable_cards(hand, pegging.total)
        if not playable:
            return None
        return self.choose_peg_card(playable, pegging)


def peg_heuristic(card: Card, pegging: PeggingState) -> int:
    """
    Rough value of pegging ``card`` on the current count.

    +2 for making 15 or 31, +2 for pairing the last card, +3 for a run with
    the last two cards, and -1 for leaving the count at 16.
    """
    score = 0
    new_total = pegging.total + card_value(card.rank)

    if new_total in (FIFTEEN, PEGGING_LIMIT):
        score += 2

    if pegging.cards and pegging.cards[-1].rank == card.rank:
        score += 2

    if len(pegging.cards) >= 2:
        window = [c.rank.order for c in pegging.cards[-2:]] + [card.rank.order]
        if is_consecutive(window):
            score += len(window)

    if PEGGING_LIMIT - new_total == FIFTEEN:
        score -= 1

    return score


class EasyStrategy(CribbageStrategy):
    """Random legal pegging; discards keep the best counted hand."""

    difficulty = Difficulty.EASY

    def choose_peg_card(self, playable: List[Card], pegging: PeggingState) -> Card:
        return self.rng.choice(playable)


class HardStrategy(CribbageStrategy):
    """Heuristic pegging and discards that favour pegging strength."""

    difficulty = Difficulty.HARD

    def evaluate_keep(self, kept: Sequence[Card]) -> float:
        score = float(score_hand(kept).total)

        # Prefer keeping high cards for pegging
        score += sum(card_value(card.rank) for card in kept) * 0.1

        # Prefer keeping cards that could make runs
        ranks = [card.rank.order for card in kept]
        if is_consecutive(ranks):
            score += len(ranks)

        # Prefer keeping same suits for flush potential
        if len({card.suit for card in kept}) == 1:
            score += 2

        return score

    def choose_peg_card(self, playable: List[Card], pegging: PeggingState) -> Card:
        best_card = playable[0]
        best_score = None
        for card in playable:
            score = peg_heuristic(card, pegging)
            if best_score is None or score > best_score:
                best_score = score
                best_card = card
        return best_card


class MediumStrategy(CribbageStrategy):
    """Pegs like the hard strategy most of the time, randomly otherwise."""

    difficulty = Difficulty.MEDIUM

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self._hard = HardStrategy(rng)
        self._easy = EasyStrategy(rng)

    def choose_peg_card(self, playable: List[Card], pegging: PeggingState) -> Card:
        if self.rng.random() < MEDIUM_SKILL:
            return self._hard.choose_peg_card(playable, pegging)
        return self._easy.choose_peg_card(playable, pegging)


STRATEGIES = {
    Difficulty.EASY: EasyStrategy,
    Difficulty.MEDIUM: MediumStrategy,
    Difficulty.HARD: HardStrategy,
}


def get_strategy(
    difficulty: Difficulty, rng: Optional[random.Random] = None
) -> CribbageStrategy:
    """Build the strategy for a difficulty level."""
    return STRATEGIES[Difficulty(difficulty)](rng)
