"""
Tests for the computer opponent strategies.
"""

import random

import pytest

from cribsharp.common.card import Card, parse_cards
from cribsharp.cribbage.constants import Player
from cribsharp.cribbage.pegging import PeggingState
from cribsharp.cribbage.strategy import (
    Difficulty,
    EasyStrategy,
    HardStrategy,
    MediumStrategy,
    get_strategy,
    peg_heuristic,
)


def pegged(codes, player=Player.USER):
    state = PeggingState()
    for card in parse_cards(codes):
        state = state.with_card(card, player)
    return state


class TestDiscard:
    """Tests for choosing the two cards thrown to the crib."""

    def test_keeps_the_best_counted_hand(self):
        hand = parse_cards("5H 5S 5D JC AS 2C")
        discard = EasyStrategy(random.Random(1)).select_discard(hand)
        assert set(discard) == set(parse_cards("AS 2C"))

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_discard_is_two_held_cards(self, difficulty):
        hand = parse_cards("KH 9D 4S 7C 2H QS")
        discard = get_strategy(difficulty, random.Random(5)).select_discard(hand)
        assert len(discard) == 2
        assert len(set(discard)) == 2
        assert all(card in hand for card in discard)

    def test_hard_discard_is_deterministic(self):
        hand = parse_cards("3H 4H 9C KD 6S 6D")
        first = HardStrategy(random.Random(1)).select_discard(hand)
        second = HardStrategy(random.Random(99)).select_discard(hand)
        assert first == second

    def test_hard_prefers_flush_and_pegging_strength(self):
        strategy = HardStrategy()
        flush = parse_cards("2H 6H 9H KH")
        mixed = parse_cards("2H 6D 9H KH")
        assert strategy.evaluate_keep(flush) > strategy.evaluate_keep(mixed)

    def test_ties_go_to_first_combination(self):
        # Every keep of four unrelated cards counts zero on easy
        hand = parse_cards("AH 3D 7S 9C QH KD")
        discard = EasyStrategy().select_discard(hand)
        assert discard == parse_cards("AH 3D")


class TestPegSelection:
    """Tests for choosing a card to peg."""

    @pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.MEDIUM])
    def test_random_choices_are_legal(self, difficulty):
        rng = random.Random(3)
        strategy = get_strategy(difficulty, rng)
        hand = parse_cards("KH 5D AS QC")
        pegging = pegged("10H JD 5C")  # 25

        for _ in range(50):
            card = strategy.select_peg_card(hand, pegging)
            assert card in parse_cards("5D AS")

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_returns_none_when_nothing_fits(self, difficulty):
        strategy = get_strategy(difficulty, random.Random(3))
        assert strategy.select_peg_card(parse_cards("KH QD"), pegged("10H JD 9C")) is None

    def test_hard_takes_the_fifteen(self):
        strategy = HardStrategy()
        card = strategy.select_peg_card(parse_cards("2D 8C 4S"), pegged("7H"))
        assert card == Card.from_code("8C")

    def test_hard_prefers_first_of_equal_options(self):
        # 8C makes fifteen, 7S pairs the seven; both are worth 2
        strategy = HardStrategy()
        card = strategy.select_peg_card(parse_cards("7S 8C"), pegged("7H"))
        assert card == Card.from_code("7S")

    def test_medium_mixes_strategies(self):
        class AlwaysSkilled(random.Random):
            def random(self):
                return 0.0

        strategy = MediumStrategy(AlwaysSkilled())
        card = strategy.select_peg_card(parse_cards("2D 8C 4S"), pegged("7H"))
        assert card == Card.from_code("8C")


class TestPegHeuristic:
    @pytest.mark.parametrize(
        "codes,card,expected",
        [
            ("7H", "8C", 2),  # fifteen
            ("KH QD AS", "10C", 2),  # thirty-one
            ("9H", "9C", 2),  # pair
            ("3H 4D", "5C", 3),  # run with the last two
            ("6H", "KC", -1),  # leaves sixteen
            ("", "9C", 0),
        ],
    )
    def test_heuristic_values(self, codes, card, expected):
        assert peg_heuristic(Card.from_code(card), pegged(codes)) == expected


def test_get_strategy_accepts_strings():
    assert isinstance(get_strategy("hard"), HardStrategy)
    assert isinstance(get_strategy(Difficulty.EASY), EasyStrategy)
    with pytest.raises(ValueError):
        get_strategy("impossible")
