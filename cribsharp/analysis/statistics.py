"""
Statistical checks for the cribbage engine.

This module provides tools for validating the statistical properties of the
engine: that the shuffle is uniform, and how the computer's discards score
at each difficulty level, with confidence intervals.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import random

import numpy as np
import scipy.stats as stats

from cribsharp.common.deck import create_deck, shuffle_cards
from cribsharp.common.util import calculate_chi_square
from cribsharp.cribbage.constants import CARDS_DEALT
from cribsharp.cribbage.scoring import score_hand
from cribsharp.cribbage.strategy import Difficulty, get_strategy

logger = logging.getLogger(__name__)

# Highest possible hand count
MAX_HAND_SCORE = 29


class AnalysisType(Enum):
    """Types of statistical analysis."""

    SHUFFLE_UNIFORMITY = auto()
    HAND_DISTRIBUTION = auto()


@dataclass
class ConfidenceInterval:
    """
    Represents a confidence interval with lower and upper bounds.

    Attributes:
        lower: The lower bound of the confidence interval
        upper: The upper bound of the confidence interval
        confidence: The confidence level (e.g., 0.95 for 95% confidence)
    """

    lower: float
    upper: float
    confidence: float

    def contains(self, value: float) -> bool:
        """Check if the interval contains a value."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, float]:
        """Convert to a dictionary."""
        return {"lower": self.lower, "upper": self.upper, "confidence": self.confidence}


def calculate_confidence_interval(
    values: List[float], confidence: float = 0.95
) -> ConfidenceInterval:
    """
    Calculate a t-based confidence interval for the mean of ``values``.

    Args:
        values: The values to calculate the confidence interval for
        confidence: The confidence level (e.g., 0.95 for 95% confidence)

    Returns:
        A ConfidenceInterval object
    """
    if len(values) < 2:
        mean = float(values[0]) if values else 0.0
        return ConfidenceInterval(mean, mean, confidence)

    mean = np.mean(values)
    std_err = stats.sem(values)

    margin = std_err * stats.t.ppf((1 + confidence) / 2, len(values) - 1)
    return ConfidenceInterval(float(mean - margin), float(mean + margin), confidence)


class StatisticalValidator:
    """
    Validates the statistical properties of the cribbage engine.

    All sampling goes through one random source, so a seeded validator
    produces the same report every time.
    """

    def __init__(self, rng: Optional[random.Random] = None, alpha: float = 0.01):
        """
        Initialize the validator.

        Args:
            rng: Random source for shuffles and strategies
            alpha: Significance level for the uniformity test
        """
        self.rng = rng or random.Random()
        self.alpha = alpha

    def check_shuffle_uniformity(self, trials: int = 5200) -> Dict[str, Any]:
        """
        Chi-square test that each card is equally likely to end up on top.

        Args:
            trials: Number of shuffles to sample

        Returns:
            A dictionary with the statistic, p-value and verdict
        """
        deck = create_deck()
        index = {card: i for i, card in enumerate(deck)}

        observed = np.zeros(len(deck))
        for _ in range(trials):
            observed[index[shuffle_cards(deck, self.rng)[0]]] += 1

        expected = np.full(len(deck), trials / len(deck))
        statistic, p_value = stats.chisquare(observed, expected)

        # Recomputed without scipy
        manual = calculate_chi_square(observed.tolist(), expected.tolist())

        result = {
            "trials": trials,
            "statistic": float(statistic),
            "manual_statistic": float(manual),
            "p_value": float(p_value),
            "degrees_of_freedom": len(deck) - 1,
            "uniform": bool(p_value > self.alpha),
        }
        logger.info(
            "Shuffle uniformity: chi2=%.2f p=%.4f over %d trials",
            result["statistic"],
            result["p_value"],
            trials,
        )
        return result

    def calculate_hand_distribution(
        self, difficulty: Difficulty = Difficulty.EASY, deals: int = 1000
    ) -> Dict[str, Any]:
        """
        Distribution of the counted value of the hand the computer keeps.

        Each sample deals six cards, lets the strategy discard two, cuts a
        starter from the rest of the deck and counts the four kept cards.

        Args:
            difficulty: Strategy to sample
            deals: Number of hands to sample

        Returns:
            A dictionary with the distribution, mean and confidence interval
        """
        strategy = get_strategy(difficulty, self.rng)

        totals = np.zeros(deals, dtype=int)
        for i in range(deals):
            deck = shuffle_cards(create_deck(), self.rng)
            hand, rest = deck[:CARDS_DEALT], deck[CARDS_DEALT:]
            discard = strategy.select_discard(hand)
            kept = [card for card in hand if card not in discard]
            starter = rest[self.rng.randrange(len(rest))]
            totals[i] = score_hand(kept, starter).total

        if deals == 0:
            return {
                "difficulty": Difficulty(difficulty).value,
                "distribution": {},
                "sample_size": 0,
                "average_score": 0.0,
                "standard_deviation": 0.0,
                "confidence_interval": ConfidenceInterval(0.0, 0.0, 0.95).to_dict(),
            }

        counts = np.bincount(totals, minlength=MAX_HAND_SCORE + 1)
        distribution = {
            str(score): float(count / deals)
            for score, count in enumerate(counts)
            if count
        }

        return {
            "difficulty": Difficulty(difficulty).value,
            "distribution": distribution,
            "sample_size": deals,
            "average_score": float(np.mean(totals)),
            "standard_deviation": float(np.std(totals)),
            "max_score": int(np.max(totals)),
            "confidence_interval": calculate_confidence_interval(
                totals.tolist()
            ).to_dict(),
        }

    def run_all_analyses(self, trials: int = 5200, deals: int = 1000) -> Dict[str, Any]:
        """
        Run the uniformity test and the hand distribution for every difficulty.

        Args:
            trials: Shuffles for the uniformity test
            deals: Hands sampled per difficulty

        Returns:
            A dictionary with the results keyed by analysis type
        """
        return {
            AnalysisType.SHUFFLE_UNIFORMITY.name: self.check_shuffle_uniformity(trials),
            AnalysisType.HAND_DISTRIBUTION.name: {
                difficulty.value: self.calculate_hand_distribution(difficulty, deals)
                for difficulty in Difficulty
            },
        }
