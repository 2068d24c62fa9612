"""Defines the Action enum for the actions a player can take in a game of cribbage."""
from enum import Enum


class Action(Enum):
    """Enum for the possible actions a player can take in a game of cribbage."""

    NEW_GAME = "new_game"
    DRAW = "draw"
    DEAL = "deal"
    DISCARD = "discard"
    CUT = "cut"
    PLAY_CARD = "play_card"
    PASS = "pass"
    ACKNOWLEDGE = "acknowledge"
