"""
Core engine for the cribsharp framework.

This package provides the game engine that drives a game of cribbage,
implementing the game flow in a platform-agnostic way.
"""

from cribsharp.engine.base import CribsharpEngine
from cribsharp.engine.cribbage import ActionTicket, CribbageEngine

__all__ = ["CribsharpEngine", "CribbageEngine", "ActionTicket"]
