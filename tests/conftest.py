"""
Shared test fixtures for prismora-layout tests.

Provides the two-card board used throughout the routing scenarios
(A on the left, B 200px to its right) and small assertion helpers for
path properties.
"""

import pytest

from prismora_layout.geometry import EPSILON, segment_crosses_rect
from prismora_layout.models import Card, Point, Rect


def make_card(card_id: str, x: float, y: float, w: float = 100.0, h: float = 100.0, **extra) -> Card:
    return Card(id=card_id, x=x, y=y, width=w, height=h, **extra)


def assert_axis_aligned(path: list[Point]) -> None:
    for a, b in zip(path, path[1:]):
        horizontal = abs(a.y - b.y) < EPSILON
        vertical = abs(a.x - b.x) < EPSILON
        assert horizontal or vertical, f"diagonal segment {a} -> {b}"


def assert_avoids(path: list[Point], rect: Rect) -> None:
    for a, b in zip(path, path[1:]):
        assert not segment_crosses_rect(a, b, rect), f"segment {a} -> {b} crosses {rect}"


@pytest.fixture
def card_a() -> Card:
    """Source card at the origin."""
    return make_card("A", 0, 0)


@pytest.fixture
def card_b() -> Card:
    """Target card level with A, 200px to its right."""
    return make_card("B", 300, 0)


@pytest.fixture
def card_c() -> Card:
    """A tall card sitting between A and B."""
    return make_card("C", 150, -20, w=50, h=140)


@pytest.fixture
def board_layout(card_a, card_b) -> dict[str, Card]:
    return {card_a.id: card_a, card_b.id: card_b}
