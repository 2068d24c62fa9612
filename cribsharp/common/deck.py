"""
This module contains the Deck class, which represents a deck of cards, plus
the `create_deck` and `shuffle_cards` helpers used by the game transitions.

>>> deck = Deck()
>>> deck.size
52
>>> deck.deal()
Card(Suit.HEARTS, Rank.ACE)
>>> deck.size
51
"""

import random
from typing import List, Optional, Union

from cribsharp.common.card import Card, Rank, Suit

SUIT_ORDER = [Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES]


def create_deck() -> List[Card]:
    """
    Build the 52 standard cards in a fixed order: suit-major, Ace to King.

    :return: A new list of Card instances
    """
    return [Card(suit, rank) for suit in SUIT_ORDER for rank in Rank]


def shuffle_cards(
    cards: List[Card], rng: Optional[random.Random] = None
) -> List[Card]:
    """
    Return a uniformly shuffled copy of ``cards`` (Fisher-Yates).

    :param cards: The cards to shuffle; the list is not modified
    :param rng: Optional random source, defaults to the ``random`` module
    :return: A new list holding the same cards in random order
    """
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class Deck:
    """
    A class representing a deck of cards. Index 0 is the top of the deck.
    """

    # Precompute the default deck
    _default_deck = create_deck()

    def __init__(self, cards: Union[List[Card], None] = None):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, a default deck will be constructed.
        """
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
        else:
            self.cards = list(cards)

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct a default deck with all possible combinations of suits and ranks.

        :return: A list of Card instances representing the default deck.
        """
        return self._default_deck.copy()

    def shuffle(self, rng: Optional[random.Random] = None):
        """
        Shuffle the cards in the deck.

        :param rng: Optional random source used for the permutation
        :return: The deck itself, to allow chaining
        """
        self.cards = shuffle_cards(self.cards, rng)
        return self

    def deal(self, num_cards=1) -> Union[Card, List[Card]]:
        """
        Take n cards from the top of the deck.

        :return: A card instance or a list of card instances.
        :raises IndexError: If the deck holds fewer than ``num_cards`` cards
        """
        if num_cards > len(self.cards):
            raise IndexError(
                f"Cannot deal {num_cards} cards from a deck of {len(self.cards)}"
            )
        if num_cards == 1:
            return self.cards.pop(0)
        return [self.cards.pop(0) for _ in range(num_cards)]

    @property
    def size(self) -> int:
        """
        Return the number of remaining cards in the deck.
        """
        return len(self.cards)

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
