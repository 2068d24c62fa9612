"""
cribsharp: a two-player cribbage engine.

The rules live in :mod:`cribsharp.cribbage` as pure state transitions, the
async :class:`cribsharp.engine.CribbageEngine` drives a game, and platform
adapters render it.
"""

__version__ = "0.1.0"
