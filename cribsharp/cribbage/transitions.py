"""
State transition functions for the cribbage card game.

This module provides pure functions for transitioning between game states,
without modifying the original state objects. A transition that is not
legal for the given state (wrong phase, wrong player, a card not held, a
card that would take the count past 31) returns the state unchanged.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence
import logging
import random

from cribsharp.common.card import Card, Rank
from cribsharp.common.deck import Deck, create_deck, shuffle_cards
from cribsharp.cribbage.constants import (
    CARDS_DEALT,
    CARDS_TO_CRIB,
    HIS_HEELS_POINTS,
    PEGGING_LIMIT,
    Player,
)
from cribsharp.cribbage.pegging import (
    PeggingState,
    go_points,
    is_playable,
    playable_cards,
    score_play,
)
from cribsharp.cribbage.scoring import score_hand
from cribsharp.cribbage.state import (
    CountingStep,
    CountResult,
    DealerSelection,
    GamePhase,
    GameState,
)
from cribsharp.cribbage.strategy import Difficulty, get_strategy
from cribsharp.events import EventBus, EngineEventType

logger = logging.getLogger(__name__)


def _emit(event_type: EngineEventType, state: GameState, data: Dict[str, Any]) -> None:
    event_bus = EventBus.get_instance()
    payload = {"game_id": state.id, "timestamp": state.timestamp}
    payload.update(data)
    event_bus.emit(event_type, payload)


class StateTransitionEngine:
    """
    Pure functions for state transitions in cribbage.

    This class contains static methods that implement game state transitions.
    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def new_game(
        difficulty: Difficulty = Difficulty.EASY,
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """
        Create a fresh game waiting for the cut for deal.

        Args:
            difficulty: Computer opponent difficulty
            rng: Optional random source for the shuffle

        Returns:
            New game state in the selecting-dealer phase
        """
        state = GameState(
            deck=shuffle_cards(create_deck(), rng),
            difficulty=Difficulty(difficulty),
        )

        _emit(
            EngineEventType.GAME_CREATED,
            state,
            {"difficulty": state.difficulty.value},
        )
        return state

    @staticmethod
    def draw_for_dealer(
        state: GameState, rng: Optional[random.Random] = None
    ) -> GameState:
        """
        Cut for deal. The lower card deals; equal ranks must cut again.

        Args:
            state: Current game state
            rng: Optional random source for the reshuffle after a tie

        Returns:
            New game state in the dealing phase, or still selecting the
            dealer with ``needs_redraw`` set after a tie
        """
        if state.phase != GamePhase.SELECTING_DEALER or len(state.deck) < 2:
            return state

        user_card, ai_card = state.deck[0], state.deck[1]

        if user_card.rank == ai_card.rank:
            new_state = replace(
                state,
                deck=shuffle_cards(state.deck, rng),
                dealer_selection=DealerSelection(user_card, ai_card, True),
                scoring_message="Both cut the same rank - cut again",
            )
            _emit(
                EngineEventType.DEALER_REDRAW,
                new_state,
                {"user_card": str(user_card), "ai_card": str(ai_card)},
            )
            return new_state

        dealer = (
            Player.USER if user_card.rank.order < ai_card.rank.order else Player.AI
        )
        new_state = replace(
            state,
            deck=shuffle_cards(state.deck, rng),
            dealer_selection=DealerSelection(user_card, ai_card, False),
            dealer=dealer,
            current_player=dealer.opponent,
            phase=GamePhase.DEALING,
            scoring_message=f"{dealer.display_name} cut low and deal first",
        )

        _emit(
            EngineEventType.DEALER_SELECTED,
            new_state,
            {
                "user_card": str(user_card),
                "ai_card": str(ai_card),
                "dealer": dealer.value,
            },
        )
        return new_state

    @staticmethod
    def start_dealing(
        state: GameState, rng: Optional[random.Random] = None
    ) -> GameState:
        """
        Deal the first hand once the dealer is known.

        Args:
            state: Current game state
            rng: Optional random source for the shuffle

        Returns:
            New game state in the discarding phase
        """
        if state.phase != GamePhase.DEALING or state.dealer is None:
            return state
        return StateTransitionEngine._deal_round(state, state.dealer, rng)

    @staticmethod
    def discard_to_crib(
        state: GameState,
        cards: Sequence[Card],
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """
        Throw the human's two cards and the computer's two cards to the crib.

        Args:
            state: Current game state
            cards: Exactly two distinct cards from the human's hand
            rng: Optional random source passed to the computer's strategy

        Returns:
            New game state in the cutting phase
        """
        if state.phase != GamePhase.DISCARDING:
            return state

        discard = list(cards)
        if (
            len(discard) != CARDS_TO_CRIB
            or len(set(discard)) != CARDS_TO_CRIB
            or any(card not in state.player_hand for card in discard)
        ):
            return state

        strategy = get_strategy(state.difficulty, rng)
        ai_discard = strategy.select_discard(state.ai_hand)

        player_kept = [card for card in state.player_hand if card not in discard]
        ai_kept = [card for card in state.ai_hand if card not in ai_discard]

        new_state = replace(
            state,
            player_hand=player_kept,
            ai_hand=ai_kept,
            player_show=list(player_kept),
            ai_show=list(ai_kept),
            crib=discard + list(ai_discard),
            phase=GamePhase.CUTTING,
            scoring_message=None,
        )

        _emit(
            EngineEventType.CRIB_FORMED,
            new_state,
            {"dealer": state.dealer.value if state.dealer else None},
        )
        return new_state

    @staticmethod
    def cut_deck(state: GameState, rng: Optional[random.Random] = None) -> GameState:
        """
        Cut the starter. A jack scores two for the dealer ("his heels").

        Args:
            state: Current game state
            rng: Optional random source for the cut position

        Returns:
            New game state in the pegging phase, or game over if his heels
            took the dealer to 121
        """
        if state.phase != GamePhase.CUTTING or not state.deck or state.dealer is None:
            return state

        rng = rng or random
        deck = list(state.deck)
        starter = deck.pop(rng.randrange(len(deck)))

        new_state = replace(
            state,
            deck=deck,
            starter=starter,
            phase=GamePhase.PEGGING,
            current_player=state.dealer.opponent,
            pegging=PeggingState(),
            scoring_message=None,
        )

        _emit(EngineEventType.STARTER_CUT, new_state, {"starter": str(starter)})

        if starter.rank == Rank.JACK:
            new_state = StateTransitionEngine._award_points(
                new_state, state.dealer, HIS_HEELS_POINTS, "his heels"
            )
        return new_state

    @staticmethod
    def play_card(
        state: GameState, card: Card, player: Player = Player.USER
    ) -> GameState:
        """
        Peg a card.

        Args:
            state: Current game state
            card: The card to play
            player: Player making the play; must be the current player

        Returns:
            New game state with the card played and any points scored
        """
        if state.phase != GamePhase.PEGGING or player != state.current_player:
            return state

        hand = state.hand_of(player)
        if card not in hand or not is_playable(card, state.pegging.total):
            return state

        new_hand = [c for c in hand if c != card]
        pegging = state.pegging.with_card(card, player)
        new_state = StateTransitionEngine._with_hand(state, player, new_hand)
        new_state = replace(new_state, pegging=pegging, scoring_message=None)

        _emit(
            EngineEventType.CARD_PLAYED,
            new_state,
            {
                "player": player.value,
                "card": str(card),
                "total": pegging.total,
                "remaining_hand_size": len(new_hand),
            },
        )

        play_score = score_play(pegging.cards)
        new_state = StateTransitionEngine._award_points(
            new_state, player, play_score.total, play_score.describe()
        )
        if new_state.is_game_over:
            return new_state

        return StateTransitionEngine._after_play(new_state, player)

    @staticmethod
    def pass_turn(state: GameState, player: Player = Player.USER) -> GameState:
        """
        Say "go". Only allowed when the player has no card that fits.

        Args:
            state: Current game state
            player: Player passing; must be the current player

        Returns:
            New game state with the turn handed over, or with the go point
            awarded and the count reset when neither player can play
        """
        if state.phase != GamePhase.PEGGING or player != state.current_player:
            return state
        if playable_cards(state.hand_of(player), state.pegging.total):
            return state

        _emit(
            EngineEventType.PLAYER_PASSED,
            state,
            {"player": player.value, "total": state.pegging.total},
        )

        opponent = player.opponent
        if playable_cards(state.hand_of(opponent), state.pegging.total):
            return replace(
                state,
                current_player=opponent,
                scoring_message=f"{player.display_name} said go",
            )

        last = state.pegging.last_played_by
        new_state = state
        if last is not None:
            new_state = StateTransitionEngine._award_points(
                state, last, go_points(state.pegging), "go"
            )
            if new_state.is_game_over:
                return new_state

        next_leader = last.opponent if last is not None else opponent
        return StateTransitionEngine._reset_count(new_state, next_leader)

    @staticmethod
    def ai_peg_turn(
        state: GameState, rng: Optional[random.Random] = None
    ) -> GameState:
        """
        Let the computer play a card, or say go when it cannot.

        Args:
            state: Current game state
            rng: Optional random source passed to the computer's strategy

        Returns:
            New game state after the computer's play or pass
        """
        if state.phase != GamePhase.PEGGING or state.current_player != Player.AI:
            return state

        strategy = get_strategy(state.difficulty, rng)
        card = strategy.select_peg_card(state.ai_hand, state.pegging)
        if card is None:
            return StateTransitionEngine.pass_turn(state, Player.AI)
        return StateTransitionEngine.play_card(state, card, Player.AI)

    @staticmethod
    def acknowledge_score(
        state: GameState, rng: Optional[random.Random] = None
    ) -> GameState:
        """
        Acknowledge the score shown and move on.

        During counting this makes the next count (dealer's hand, then the
        crib) and, after the crib, deals the next round with the deal passed
        to the other player. During pegging it only clears the message.

        Args:
            state: Current game state
            rng: Optional random source for the next round's shuffle

        Returns:
            New game state
        """
        if state.phase == GamePhase.PEGGING:
            if state.scoring_message is None:
                return state
            return replace(state, scoring_message=None)

        if state.phase != GamePhase.COUNTING or state.dealer is None:
            return state

        if state.counting_step == CountingStep.NON_DEALER_HAND:
            return StateTransitionEngine._count(state, CountingStep.DEALER_HAND)
        if state.counting_step == CountingStep.DEALER_HAND:
            return StateTransitionEngine._count(state, CountingStep.CRIB)
        if state.counting_step == CountingStep.CRIB:
            counted = replace(state, counting_step=CountingStep.DONE)
            return StateTransitionEngine._deal_round(
                counted, state.dealer.opponent, rng
            )
        return state

    # Internal helpers

    @staticmethod
    def _with_hand(state: GameState, player: Player, hand) -> GameState:
        if player is Player.USER:
            return replace(state, player_hand=list(hand))
        return replace(state, ai_hand=list(hand))

    @staticmethod
    def _deal_round(
        state: GameState, dealer: Player, rng: Optional[random.Random]
    ) -> GameState:
        # Every card comes back to the pack before the shuffle
        deck = Deck().shuffle(rng)
        hands = {Player.USER: [], Player.AI: []}
        for _ in range(CARDS_DEALT):
            hands[dealer.opponent].append(deck.deal())
            hands[dealer].append(deck.deal())

        new_state = replace(
            state,
            phase=GamePhase.DISCARDING,
            deck=deck.cards,
            player_hand=hands[Player.USER],
            ai_hand=hands[Player.AI],
            player_show=[],
            ai_show=[],
            crib=[],
            starter=None,
            dealer=dealer,
            current_player=dealer.opponent,
            pegging=PeggingState(),
            counting_step=None,
            last_count=None,
            scoring_message=None,
            current_round=state.current_round + 1,
        )

        _emit(
            EngineEventType.ROUND_STARTED,
            new_state,
            {"round_number": new_state.current_round, "dealer": dealer.value},
        )
        _emit(
            EngineEventType.CARDS_DEALT,
            new_state,
            {"cards_per_player": CARDS_DEALT, "deck_remaining": deck.size},
        )
        return new_state

    @staticmethod
    def _award_points(
        state: GameState,
        player: Player,
        points: int,
        reason: str,
        message: Optional[str] = None,
    ) -> GameState:
        """Add points to a score and end the game the moment it reaches 121."""
        if points <= 0:
            return state

        scores = state.scores.add(player, points)
        new_state = replace(
            state,
            scores=scores,
            scoring_message=message
            or f"{player.display_name} scored {points} ({reason})",
        )

        _emit(
            EngineEventType.POINTS_SCORED,
            new_state,
            {
                "player": player.value,
                "points": points,
                "reason": reason,
                "score": scores.of(player),
            },
        )

        winner = scores.winner()
        if winner is None:
            return new_state

        new_state = replace(
            new_state,
            phase=GamePhase.GAME_OVER,
            winner=winner,
            counting_step=CountingStep.DONE
            if state.phase == GamePhase.COUNTING
            else state.counting_step,
            scoring_message=f"{new_state.scoring_message}. "
            f"{'You win' if winner is Player.USER else 'AI wins'}!",
        )
        logger.info(
            "Game %s won by %s %d-%d",
            state.id,
            winner.value,
            scores.user,
            scores.ai,
        )
        _emit(
            EngineEventType.GAME_ENDED,
            new_state,
            {
                "winner": winner.value,
                "scores": {"user": scores.user, "ai": scores.ai},
            },
        )
        return new_state

    @staticmethod
    def _after_play(state: GameState, player: Player) -> GameState:
        """Decide who acts next after ``player`` pegged a card."""
        opponent = player.opponent
        pegging = state.pegging

        if pegging.total == PEGGING_LIMIT:
            return StateTransitionEngine._reset_count(state, opponent)

        if not state.player_hand and not state.ai_hand:
            new_state = StateTransitionEngine._award_points(
                state, player, go_points(pegging), "last card"
            )
            if new_state.is_game_over:
                return new_state
            return StateTransitionEngine._reset_count(new_state, opponent)

        if state.hand_of(opponent):
            return replace(state, current_player=opponent)

        # The opponent is out of cards, so the player keeps going if able
        if playable_cards(state.hand_of(player), pegging.total):
            return replace(state, current_player=player)

        new_state = StateTransitionEngine._award_points(
            state, player, go_points(pegging), "go"
        )
        if new_state.is_game_over:
            return new_state
        return StateTransitionEngine._reset_count(new_state, opponent)

    @staticmethod
    def _reset_count(state: GameState, next_leader: Player) -> GameState:
        """Start a new count, or move to counting once both hands are empty."""
        new_state = replace(state, pegging=state.pegging.reset())

        if not new_state.player_hand and not new_state.ai_hand:
            return StateTransitionEngine._begin_counting(new_state)

        leader = next_leader if new_state.hand_of(next_leader) else next_leader.opponent
        new_state = replace(new_state, current_player=leader)

        _emit(
            EngineEventType.COUNT_RESET,
            new_state,
            {"leader": leader.value, "previous_total": state.pegging.total},
        )
        return new_state

    @staticmethod
    def _begin_counting(state: GameState) -> GameState:
        new_state = replace(
            state,
            phase=GamePhase.COUNTING,
            current_player=state.dealer.opponent,
        )
        return StateTransitionEngine._count(new_state, CountingStep.NON_DEALER_HAND)

    @staticmethod
    def _count(state: GameState, step: CountingStep) -> GameState:
        """Count the hand or crib for ``step`` and credit its owner."""
        dealer = state.dealer
        if step == CountingStep.NON_DEALER_HAND:
            owner, cards, is_crib = dealer.opponent, state.show_of(dealer.opponent), False
        elif step == CountingStep.DEALER_HAND:
            owner, cards, is_crib = dealer, state.show_of(dealer), False
        else:
            owner, cards, is_crib = dealer, state.crib, True

        breakdown = score_hand(cards, state.starter, is_crib=is_crib)
        label = "crib" if is_crib else "hand"
        whose = "Your" if owner is Player.USER else "AI's"
        message = f"{whose} {label} scores {breakdown.total}: {breakdown.describe()}"

        new_state = replace(
            state,
            counting_step=step,
            last_count=CountResult(owner=owner, step=step, breakdown=breakdown),
            scoring_message=message,
        )

        _emit(
            EngineEventType.HAND_COUNTED,
            new_state,
            {
                "player": owner.value,
                "step": step.value,
                "cards": [str(card) for card in cards],
                "starter": str(state.starter) if state.starter else None,
                "breakdown": breakdown.to_dict(),
            },
        )

        return StateTransitionEngine._award_points(
            new_state, owner, breakdown.total, label, message=message
        )
