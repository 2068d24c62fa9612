"""
This module defines the `Suit`, `Rank`, and `Card` classes, which are used to represent playing cards.

- `Suit`: An enum representing the four suits of a standard deck of playing
cards: Hearts, Diamonds, Clubs, and Spades.

- `Rank`: An enum representing the thirteen ranks of a standard deck of playing
cards, ordered Ace (low) through King. The enum value is the rank order, which
is what runs and the dealer cut compare.

- `Card`: An immutable playing card. A card has a suit and a rank, compares
and hashes by both, and has a compact code ("5H", "10S", "JD") used for
serialization.

This module is part of the `cribsharp` package.
"""

from enum import Enum, unique
from typing import List


@unique
class Suit(Enum):
    """
    Enum for suits in a card deck.
    """

    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    @property
    def code(self) -> str:
        """Single-letter code for the suit (H, D, C, S)."""
        return self.name[0]

    @classmethod
    def from_code(cls, code: str) -> "Suit":
        for suit in cls:
            if suit.code == code.upper() or suit.value == code:
                return suit
        raise ValueError(f"Invalid suit code: {code!r}")

    def __str__(self) -> str:
        return self.value


@unique
class Rank(Enum):
    """
    Enum for ranks in a card deck, in cribbage order (Ace low).
    """

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def order(self) -> int:
        """Position of the rank from Ace (1) to King (13)."""
        return self.value

    @property
    def rank_str(self):
        """A string representation of the rank."""
        if self in (Rank.ACE, Rank.JACK, Rank.QUEEN, Rank.KING):
            return self.name[0]
        return str(self.value)

    @classmethod
    def from_code(cls, code: str) -> "Rank":
        for rank in cls:
            if rank.rank_str == code.upper():
                return rank
        raise ValueError(f"Invalid rank code: {code!r}")

    def __str__(self) -> str:
        return self.rank_str


class Card:
    """
    Class representing a playing card. Cards are immutable once created.

    >>> card = Card(Suit.HEARTS, Rank.TWO)
    >>> print(card)
    2 of ♥
    >>> card.code
    '2H'
    """

    __slots__ = ("_suit", "_rank")

    def __init__(self, suit: Suit, rank: Rank):
        """
        Initialize a Card instance.

        :param suit: Suit of the card (one of the Suit enums)
        :param rank: Rank of the card (one of the Rank enums)
        """
        if not isinstance(suit, Suit):
            raise TypeError(f"Invalid suit: {suit}")
        if not isinstance(rank, Rank):
            raise TypeError(f"Invalid rank: {rank}")
        object.__setattr__(self, "_suit", suit)
        object.__setattr__(self, "_rank", rank)

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def rank(self) -> Rank:
        return self._rank

    @property
    def code(self) -> str:
        """Compact code such as "5H" or "10S"."""
        return f"{self._rank.rank_str}{self._suit.code}"

    @classmethod
    def from_code(cls, code: str) -> "Card":
        """
        Build a card from its compact code.

        :param code: Rank code followed by a suit letter or symbol, e.g. "JD" or "10♠"
        :return: The matching card
        :raises ValueError: If the code cannot be parsed
        """
        code = code.strip()
        if len(code) < 2:
            raise ValueError(f"Invalid card code: {code!r}")
        return cls(Suit.from_code(code[-1]), Rank.from_code(code[:-1]))

    def __setattr__(self, name, value):
        raise AttributeError("Card objects are immutable")

    def __eq__(self, other):
        """
        Checks if this card is equal to another card.

        :param other: The other card to compare to.
        :return: True if the cards have the same rank and suit, False otherwise.
        """
        if isinstance(other, Card):
            return self._rank == other._rank and self._suit == other._suit
        return NotImplemented

    def __hash__(self):
        return hash((self._suit, self._rank))

    def __reduce__(self):
        return (Card, (self._suit, self._rank))

    def __repr__(self) -> str:
        """
        Provide a machine-readable representation of the card.

        :return: A string representation of the card.
        """
        return f"Card(Suit.{self._suit.name}, Rank.{self._rank.name})"

    def __str__(self) -> str:
        """
        Provide a human-readable representation of the card.

        :return: A string representation of the card.
        """
        return f"{self._rank.rank_str} of {str(self._suit)}"


def parse_cards(text: str) -> List[Card]:
    """
    Parse a whitespace-separated list of card codes.

    >>> parse_cards("5S 5C JH")
    [Card(Suit.SPADES, Rank.FIVE), Card(Suit.CLUBS, Rank.FIVE), Card(Suit.HEARTS, Rank.JACK)]
    """
    return [Card.from_code(code) for code in text.split()]
