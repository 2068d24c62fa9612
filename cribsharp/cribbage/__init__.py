"""
Cribbage card game module.

This module provides the implementation for two-player cribbage,
including scoring, pegging, the computer opponent, state models and
state transitions.
"""

from cribsharp.cribbage.action import Action as Action
from cribsharp.cribbage.constants import Player as Player
from cribsharp.cribbage.pegging import (
    PeggingScore as PeggingScore,
    PeggingState as PeggingState,
    score_play as score_play,
)
from cribsharp.cribbage.scoring import HandScore as HandScore, score_hand as score_hand
from cribsharp.cribbage.state import (
    CountingStep as CountingStep,
    GamePhase as GamePhase,
    GameSettings as GameSettings,
    GameState as GameState,
    GameStats as GameStats,
)
from cribsharp.cribbage.strategy import (
    CribbageStrategy as CribbageStrategy,
    Difficulty as Difficulty,
    get_strategy as get_strategy,
)
from cribsharp.cribbage.transitions import (
    StateTransitionEngine as StateTransitionEngine,
)

__all__ = [
    "Action",
    "Player",
    "PeggingScore",
    "PeggingState",
    "score_play",
    "HandScore",
    "score_hand",
    "CountingStep",
    "GamePhase",
    "GameSettings",
    "GameState",
    "GameStats",
    "CribbageStrategy",
    "Difficulty",
    "get_strategy",
    "StateTransitionEngine",
]
