"""
Tests for the cribbage engine.

This module covers committing player actions, the computer's scheduled
moves, stats tracking and persistence through the engine.
"""

import pytest

from cribsharp.adapters import DummyAdapter
from cribsharp.common.card import Card, parse_cards
from cribsharp.cribbage.action import Action
from cribsharp.cribbage.constants import Player
from cribsharp.cribbage.pegging import PeggingState
from cribsharp.cribbage.state import (
    CountingStep,
    GamePhase,
    GameSettings,
    GameState,
    Scores,
)
from cribsharp.cribbage.strategy import Difficulty
from cribsharp.cribbage.transitions import StateTransitionEngine
from cribsharp.engine import CribbageEngine
from cribsharp.events import EngineEventType
from cribsharp.persistence import GAME_STATE_KEY, SQLiteStateStore


async def make_engine(adapter=None, store=None, **config):
    config.setdefault("ai_delay", 0)
    config.setdefault("seed", 42)
    engine = CribbageEngine(adapter or DummyAdapter(), config, store=store)
    await engine.initialize()
    return engine


async def draw_until_dealt(engine):
    while engine.state.phase == GamePhase.SELECTING_DEALER:
        await engine.draw_for_dealer()


class FailingRenderAdapter(DummyAdapter):
    """Raises from one render call, like a transcript on a full disk."""

    def __init__(self, fail_on_call):
        super().__init__()
        self.fail_on_call = fail_on_call
        self.render_calls = 0

    async def render_game_state(self, state):
        self.render_calls += 1
        if self.render_calls == self.fail_on_call:
            raise OSError("transcript disk full")
        await super().render_game_state(state)


def user_pegging_state(**kwargs) -> GameState:
    fields = dict(
        phase=GamePhase.PEGGING,
        player_hand=parse_cards("8C 2D"),
        ai_hand=parse_cards("9S"),
        player_show=parse_cards("8C 2D 3H 4H"),
        ai_show=parse_cards("9S 6D 6C KC"),
        crib=parse_cards("2C 3C 4C 6S"),
        starter=Card.from_code("QC"),
        dealer=Player.AI,
        current_player=Player.USER,
        pegging=PeggingState().with_card(Card.from_code("7H"), Player.AI),
    )
    fields.update(kwargs)
    return GameState(**fields)


@pytest.mark.asyncio
class TestCribbageEngine:
    """Tests for the engine lifecycle and player actions."""

    async def test_engine_initialization(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter)

        assert adapter.initialized
        assert engine.config["ai_delay"] == 0
        assert engine.config["difficulty"] == Difficulty.EASY.value
        assert adapter.get_events_by_type(EngineEventType.ENGINE_INIT)

    async def test_start_game(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter)
        await engine.start_game()

        assert engine.state.phase == GamePhase.SELECTING_DEALER
        assert engine.revision == 1
        assert adapter.rendered_states[-1]["phase"] == "selecting-dealer"
        assert adapter.get_events_by_type(EngineEventType.GAME_CREATED)

    async def test_deal_follows_dealer_selection(self):
        engine = await make_engine()
        await engine.start_new_game()
        await draw_until_dealt(engine)

        # With no delay the computer deals straight away
        assert engine.state.phase == GamePhase.DISCARDING
        assert len(engine.state.player_hand) == 6
        assert engine.state.current_round == 1

    async def test_rejected_action_keeps_revision(self):
        engine = await make_engine()
        await engine.start_new_game()
        revision = engine.revision

        state = await engine.pass_turn()

        assert state is engine.state
        assert engine.revision == revision

    async def test_execute_player_action_with_codes(self):
        engine = await make_engine()
        await engine.start_new_game()
        await draw_until_dealt(engine)

        codes = [card.code for card in engine.state.player_hand[:2]]
        state = await engine.execute_player_action("discard", cards=codes)

        assert len(state.crib) == 4
        assert all(Card.from_code(code) not in state.player_hand for code in codes)

    async def test_execute_player_action_errors(self):
        engine = await make_engine()
        await engine.start_new_game()

        with pytest.raises(ValueError):
            await engine.execute_player_action("shuffle")
        with pytest.raises(ValueError):
            await engine.execute_player_action(Action.DISCARD)
        with pytest.raises(ValueError):
            await engine.execute_player_action(Action.PLAY_CARD)

    async def test_user_cannot_cut_own_deal(self):
        engine = await make_engine()
        engine.state = GameState(
            phase=GamePhase.CUTTING, deck=parse_cards("5H 6H"), dealer=Player.USER
        )
        assert await engine.cut_deck() is engine.state
        assert engine.state.starter is None

    async def test_full_game(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter)
        await engine.start_new_game()

        state = await engine.run(max_actions=2000)

        assert state.is_game_over
        assert engine.is_game_over()
        assert engine.get_winner() in (Player.USER, Player.AI)
        assert max(state.scores.user, state.scores.ai) >= 121
        assert engine.stats.games_played == 1
        assert adapter.get_events_by_type(EngineEventType.GAME_ENDED)
        assert engine.store.load_stats() == engine.stats

    async def test_shutdown(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter)
        await engine.start_new_game()
        await engine.shutdown()

        assert adapter.shut_down
        assert adapter.get_events_by_type(EngineEventType.ENGINE_SHUTDOWN)


@pytest.mark.asyncio
class TestValidActions:
    async def test_selecting_dealer(self):
        engine = await make_engine()
        await engine.start_new_game()
        assert engine.get_valid_actions() == {"DRAW": [], "NEW_GAME": []}

    async def test_discarding_lists_hand(self):
        engine = await make_engine()
        await engine.start_new_game()
        await draw_until_dealt(engine)

        actions = engine.get_valid_actions()
        assert actions["DISCARD"] == [c.code for c in engine.state.player_hand]
        assert list(actions)[-1] == "NEW_GAME"

    async def test_pegging_lists_playable_cards(self):
        engine = await make_engine()
        engine.state = user_pegging_state(
            pegging=PeggingState()
            .with_card(Card.from_code("KH"), Player.AI)
            .with_card(Card.from_code("QH"), Player.USER),
            scoring_message="AI said go",
        )
        actions = engine.get_valid_actions()

        assert actions["PLAY_CARD"] == ["8C", "2D"]
        assert "ACKNOWLEDGE" in actions
        assert "PASS" not in actions

    async def test_pegging_pass_when_nothing_fits(self):
        engine = await make_engine()
        engine.state = user_pegging_state(
            player_hand=parse_cards("KC"),
            pegging=PeggingState()
            .with_card(Card.from_code("KH"), Player.AI)
            .with_card(Card.from_code("QH"), Player.USER)
            .with_card(Card.from_code("5S"), Player.AI),
        )
        assert engine.get_valid_actions() == {"PASS": [], "NEW_GAME": []}


@pytest.mark.asyncio
class TestComputerMoves:
    """Tests for scheduled computer moves."""

    async def test_computer_pegs_after_user(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter)
        engine.state = user_pegging_state()

        await engine.play_card(Card.from_code("2D"))

        played = adapter.get_events_by_type(EngineEventType.CARD_PLAYED)
        assert [event["player"] for event in played] == ["user", "ai"]
        assert engine.state.ai_hand == []

    async def test_delayed_move_runs(self):
        engine = await make_engine(ai_delay=0.01)
        await engine.start_new_game()
        await draw_until_dealt(engine)
        assert engine.state.phase == GamePhase.DEALING

        await engine.wait_until_idle()

        assert engine.state.phase == GamePhase.DISCARDING

    async def test_stale_move_is_discarded(self):
        adapter = DummyAdapter()
        engine = await make_engine(adapter, ai_delay=0.05)
        await engine.start_new_game()
        await draw_until_dealt(engine)

        # A change before the deal fires makes the scheduled deal stale
        await engine.set_difficulty("hard")
        await engine.wait_until_idle()

        assert len(adapter.get_events_by_type(EngineEventType.AI_ACTION_DISCARDED)) == 1
        assert engine.state.phase == GamePhase.DISCARDING
        assert engine.state.current_round == 1
        assert engine.state.difficulty == Difficulty.HARD

    async def test_new_game_cancels_pending_move(self):
        engine = await make_engine(ai_delay=10)
        await engine.start_new_game()
        await draw_until_dealt(engine)
        assert engine._tasks

        await engine.start_new_game()

        assert not engine._tasks
        assert engine.state.phase == GamePhase.SELECTING_DEALER

    @pytest.mark.parametrize("ai_delay", [0, 0.01])
    async def test_render_failure_does_not_stop_computer(self, ai_delay, caplog):
        adapter = FailingRenderAdapter(fail_on_call=2)
        engine = await make_engine(adapter, ai_delay=ai_delay)
        engine.state = user_pegging_state(
            player_hand=parse_cards("2D"), ai_hand=parse_cards("9S 3C")
        )

        # The render of the computer's first play fails
        await engine.play_card(Card.from_code("2D"))
        await engine.wait_until_idle()

        assert engine.state.ai_hand == []
        assert engine.state.phase == GamePhase.COUNTING
        assert adapter.get_events_by_type(EngineEventType.ERROR)
        assert "Failed to render" in caplog.text

    async def test_failed_delayed_move_is_logged(self, monkeypatch, caplog):
        def broken_peg(state, rng=None):
            raise RuntimeError("strategy exploded")

        monkeypatch.setattr(
            StateTransitionEngine, "ai_peg_turn", staticmethod(broken_peg)
        )
        engine = await make_engine(ai_delay=0.01)
        engine.state = user_pegging_state()

        await engine.play_card(Card.from_code("2D"))
        await engine.wait_until_idle()

        assert engine.state.current_player is Player.AI
        assert "Scheduled peg" in caplog.text
        assert "strategy exploded" in caplog.text


@pytest.mark.asyncio
class TestStatsAndPersistence:
    """Tests for stats tracking and saved data."""

    async def test_win_updates_stats(self):
        engine = await make_engine()
        engine.state = user_pegging_state(scores=Scores(user=120, ai=90))

        state = await engine.play_card(Card.from_code("8C"))

        assert state.winner is Player.USER
        assert engine.stats.games_played == 1
        assert engine.stats.games_won == 1
        assert engine.store.load_stats().games_won == 1

    async def test_hand_counts_update_stats(self):
        engine = await make_engine()
        engine.state = GameState(
            phase=GamePhase.COUNTING,
            counting_step=CountingStep.NON_DEALER_HAND,
            dealer=Player.USER,
            player_show=parse_cards("5H 5D 5S JC"),
            ai_show=parse_cards("2C 4D 9H KS"),
            crib=parse_cards("AH 3S 7D 8C"),
            starter=Card.from_code("5C"),
            scores=Scores(user=10, ai=10),
        )

        await engine.acknowledge_score()

        assert engine.state.counting_step == CountingStep.DEALER_HAND
        assert engine.state.scores.user == 39
        assert engine.stats.highest_score == 29
        assert engine.stats.perfect_hands == 1
        assert engine.stats.twenty_nine_hands == 1

    async def test_resume_saved_game(self):
        store = SQLiteStateStore()
        engine = await make_engine(store=store)
        await engine.start_new_game()
        await draw_until_dealt(engine)
        saved = engine.state

        resumed = await make_engine(store=store)
        state = await resumed.load_saved_game()

        assert state.id == saved.id
        assert state.player_hand == saved.player_hand
        assert resumed.adapter.get_events_by_type(EngineEventType.GAME_LOADED)

    async def test_corrupt_save_starts_new_game(self):
        store = SQLiteStateStore()
        store.conn.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?)",
            (GAME_STATE_KEY, "{not json"),
        )
        store.conn.commit()

        engine = await make_engine(store=store)
        state = await engine.load_saved_game()

        assert state.phase == GamePhase.SELECTING_DEALER
        assert len(state.deck) == 52

    async def test_settings_are_restored(self):
        store = SQLiteStateStore()
        engine = await make_engine(store=store)
        await engine.start_new_game()
        await engine.set_difficulty(Difficulty.MEDIUM)
        engine.set_sound_enabled(False)
        engine.set_haptic_enabled(False)

        restored = await make_engine(store=store)

        assert restored.settings.difficulty == Difficulty.MEDIUM
        assert restored.settings.sound_enabled is False
        assert restored.settings.haptic_enabled is False

    async def test_resumed_game_uses_saved_difficulty(self):
        store = SQLiteStateStore()
        engine = await make_engine(store=store)
        await engine.start_new_game()
        store.save_settings(GameSettings(difficulty=Difficulty.HARD))

        resumed = await make_engine(store=store)
        state = await resumed.load_saved_game()

        assert state.difficulty == Difficulty.HARD
