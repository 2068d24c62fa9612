"""
Platform adapters for the cribsharp engine.

This package provides adapters that translate between the core game engine
and the platforms it is played on.
"""

from cribsharp.adapters.base import PlatformAdapter
from cribsharp.adapters.cli import CLIAdapter
from cribsharp.adapters.dummy import DummyAdapter

__all__ = ["PlatformAdapter", "CLIAdapter", "DummyAdapter"]
