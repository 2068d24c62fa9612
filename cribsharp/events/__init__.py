"""
Event system for the cribsharp engine.

This package provides the event bus that transitions, the engine and
platform adapters use to communicate.
"""

from cribsharp.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "EngineEventType"]
