"""
Tests for the cribbage state models.
"""

import json

import pytest
from dataclasses import replace

from cribsharp.common.card import Card, parse_cards
from cribsharp.common.deck import create_deck
from cribsharp.cribbage.constants import Player
from cribsharp.cribbage.pegging import PeggingState
from cribsharp.cribbage.scoring import HandScore
from cribsharp.cribbage.state import (
    CountingStep,
    CountResult,
    GamePhase,
    GameSettings,
    GameState,
    GameStats,
    Scores,
)
from cribsharp.cribbage.strategy import Difficulty


def mid_game_state():
    deck = create_deck()
    player_hand, ai_hand = deck[:3], deck[3:6]
    crib = deck[6:10]
    starter = deck[10]
    pegging = PeggingState(history=deck[11:13]).with_card(deck[13], Player.AI)
    return GameState(
        phase=GamePhase.PEGGING,
        deck=deck[14:],
        player_hand=player_hand,
        ai_hand=ai_hand,
        player_show=deck[:4],
        ai_show=deck[3:7],
        crib=crib,
        starter=starter,
        current_player=Player.USER,
        dealer=Player.AI,
        scores=Scores(user=12, ai=30),
        pegging=pegging,
        last_count=CountResult(
            Player.USER, CountingStep.CRIB, HandScore(fifteens=2, runs=3)
        ),
        scoring_message="AI scored 2 (fifteen for 2)",
        difficulty=Difficulty.HARD,
        current_round=3,
    )


class TestGameState:
    """Tests for the GameState model."""

    def test_game_state_initialization(self):
        state = GameState()

        assert state.id is not None
        assert state.phase == GamePhase.SELECTING_DEALER
        assert state.deck == []
        assert state.dealer is None
        assert state.scores == Scores()
        assert state.counting_step is None
        assert state.winner is None
        assert state.difficulty == Difficulty.EASY
        assert state.timestamp > 0

    def test_state_is_frozen(self):
        with pytest.raises(Exception):
            GameState().phase = GamePhase.DEALING

    def test_all_cards_accounts_for_every_zone(self):
        state = mid_game_state()
        cards = state.all_cards()
        assert len(cards) == 52
        assert set(cards) == set(create_deck())

    def test_dict_round_trip(self):
        state = mid_game_state()
        data = json.loads(json.dumps(state.to_dict()))
        assert GameState.from_dict(data) == state

    def test_from_dict_rejects_malformed_data(self):
        data = mid_game_state().to_dict()
        data["player_hand"] = ["XX"]
        with pytest.raises(ValueError):
            GameState.from_dict(data)

        data = mid_game_state().to_dict()
        del data["phase"]
        with pytest.raises(KeyError):
            GameState.from_dict(data)

    def test_adapter_format_hides_ai_cards(self):
        view = mid_game_state().to_adapter_format()
        assert view["ai_hand_size"] == 3
        assert view["ai_show"] == []
        assert view["crib"] == []
        assert view["crib_size"] == 4
        assert view["phase"] == "pegging"

    def test_adapter_format_reveals_ai_cards_when_counting(self):
        state = replace(mid_game_state(), phase=GamePhase.COUNTING)
        view = state.to_adapter_format()
        assert len(view["ai_show"]) == 4
        assert len(view["crib"]) == 4

    def test_waiting_for_acknowledgement(self):
        state = replace(
            mid_game_state(),
            phase=GamePhase.COUNTING,
            counting_step=CountingStep.DEALER_HAND,
        )
        assert state.waiting_for_acknowledgement
        assert not replace(state, counting_step=CountingStep.DONE).waiting_for_acknowledgement

    def test_hand_and_show_lookup(self):
        state = mid_game_state()
        assert state.hand_of(Player.AI) == state.ai_hand
        assert state.show_of(Player.USER) == state.player_show
        assert state.non_dealer is Player.USER


class TestScores:
    def test_add_and_winner(self):
        scores = Scores(user=119).add(Player.USER, 2)
        assert scores.of(Player.USER) == 121
        assert scores.winner() is Player.USER
        assert Scores(ai=120).winner() is None


class TestStatsAndSettings:
    def test_stats_round_trip(self):
        stats = GameStats(games_played=4, games_won=3, highest_score=24)
        assert GameStats.from_dict(stats.to_dict()) == stats

    def test_settings_defaults_and_round_trip(self):
        settings = GameSettings()
        assert settings.difficulty == Difficulty.EASY
        assert settings.sound_enabled and settings.haptic_enabled

        changed = GameSettings(Difficulty.MEDIUM, sound_enabled=False)
        assert GameSettings.from_dict(changed.to_dict()) == changed
