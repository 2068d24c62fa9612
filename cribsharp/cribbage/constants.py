"""Cribbage-specific constants and value mappings."""

from enum import Enum

from cribsharp.common.card import Rank

# Pip values used for fifteens and the pegging count
CRIBBAGE_VALUES = {
    Rank.ACE: 1,
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
}

WINNING_SCORE = 121
PEGGING_LIMIT = 31
FIFTEEN = 15
CARDS_DEALT = 6
CARDS_TO_CRIB = 2
HIS_HEELS_POINTS = 2


class Player(Enum):
    """The two seats at the table."""

    USER = "user"
    AI = "ai"

    @property
    def opponent(self) -> "Player":
        return Player.AI if self is Player.USER else Player.USER

    @property
    def display_name(self) -> str:
        return "You" if self is Player.USER else "AI"


def card_value(rank: Rank) -> int:
    """Get the cribbage value for a given rank."""
    return CRIBBAGE_VALUES[rank]
