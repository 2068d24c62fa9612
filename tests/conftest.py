"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures shared by the cribsharp tests.
"""

import random

import pytest

from cribsharp.common.card import parse_cards
from cribsharp.events import EventBus


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before and after each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def rng():
    """A seeded random source so shuffles are reproducible."""
    return random.Random(1234)


@pytest.fixture
def cards():
    """Shorthand for building card lists from codes, e.g. cards("5H JS")."""
    return parse_cards
