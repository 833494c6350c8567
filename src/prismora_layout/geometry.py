"""Geometry primitives shared by the resolver, the port selector and the router."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from .models import Card, Point, Rect, Side


# Tolerance for treating a floating-point difference as zero.
EPSILON = 1e-9

_OPPOSITE: dict[Side, Side] = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}

# Outward unit vector of each side (board y grows downward).
_DIRECTION: dict[Side, tuple[float, float]] = {
    Side.TOP: (0.0, -1.0),
    Side.RIGHT: (1.0, 0.0),
    Side.BOTTOM: (0.0, 1.0),
    Side.LEFT: (-1.0, 0.0),
}


# --- Sides and ports ---

def opposite_side(side: Side) -> Side:
    """Top↔Bottom, Left↔Right."""
    return _OPPOSITE[side]


def side_direction(side: Side) -> tuple[float, float]:
    """Unit vector pointing away from the card through ``side``."""
    return _DIRECTION[side]


def port_position(rect: Rect, side: Side) -> Point:
    """Get the docking point of a side: the midpoint of that edge.

    Port coordinate mapping:
        top     → top edge, horizontal center
        right   → right edge, vertical center
        bottom  → bottom edge, horizontal center
        left    → left edge, vertical center
    """
    if side is Side.TOP:
        return Point(x=rect.x + rect.width / 2, y=rect.y)
    if side is Side.RIGHT:
        return Point(x=rect.x + rect.width, y=rect.y + rect.height / 2)
    if side is Side.BOTTOM:
        return Point(x=rect.x + rect.width / 2, y=rect.y + rect.height)
    return Point(x=rect.x, y=rect.y + rect.height / 2)


def offset_point(point: Point, side: Side, distance: float) -> Point:
    """Move ``point`` by ``distance`` outward through ``side``."""
    dx, dy = _DIRECTION[side]
    return Point(x=point.x + dx * distance, y=point.y + dy * distance)


# --- Rectangles ---

def rects_overlap(a: Rect, b: Rect) -> bool:
    """Standard AABB test.

    Rectangles that only touch along an edge or at a corner share no area
    and do not overlap.
    """
    return (
        a.x < b.right
        and b.x < a.right
        and a.y < b.bottom
        and b.y < a.bottom
    )


def inflate(rect: Rect, amount: float) -> Rect:
    """Grow ``rect`` by ``amount`` on every side, keeping its id."""
    return Rect(
        x=rect.x - amount,
        y=rect.y - amount,
        width=rect.width + 2 * amount,
        height=rect.height + 2 * amount,
        id=rect.id,
    )


def distance_to_rect(point: Point, rect: Rect) -> float:
    """Euclidean distance from a point to the nearest point of a rectangle.

    Zero when the point is inside the rectangle.
    """
    dx = max(rect.x - point.x, 0.0, point.x - rect.right)
    dy = max(rect.y - point.y, 0.0, point.y - rect.bottom)
    return math.hypot(dx, dy)


def segment_crosses_rect(start: Point, end: Point, rect: Rect) -> bool:
    """Does the segment start→end pass through the interior of ``rect``?

    Liang-Barsky clipping against the rectangle.  A segment that runs
    along an edge or only touches a corner does not cross; a segment
    that stays inside the rectangle, even a zero-length one, does.
    """
    dx = end.x - start.x
    dy = end.y - start.y

    t0, t1 = 0.0, 1.0
    for edge_p, edge_q in (
        (-dx, start.x - rect.x),
        (dx, rect.right - start.x),
        (-dy, start.y - rect.y),
        (dy, rect.bottom - start.y),
    ):
        if abs(edge_p) < EPSILON:
            # Parallel to this edge: outside (or on) it means no crossing.
            if edge_q <= EPSILON:
                return False
            continue
        t = edge_q / edge_p
        if edge_p < 0:
            t0 = max(t0, t)
        else:
            t1 = min(t1, t)
        if t0 > t1:
            return False

    if abs(dx) < EPSILON and abs(dy) < EPSILON:
        return True
    # Entering and leaving at the same parameter is a corner touch.
    return t1 - t0 > EPSILON


def bounding_rect(points: Iterable[Point], margin: float = 0.0) -> Rect:
    """Smallest rectangle covering ``points``, grown by ``margin``.

    A zero extent on either axis is widened to ``EPSILON`` so the result is
    always a valid Rect even for a single point and no margin.
    """
    xs: list[float] = []
    ys: list[float] = []
    for pt in points:
        xs.append(pt.x)
        ys.append(pt.y)
    if not xs:
        raise ValueError("bounding_rect() needs at least one point")

    min_x = min(xs) - margin
    min_y = min(ys) - margin
    width = max(xs) + margin - min_x
    height = max(ys) + margin - min_y
    return Rect(x=min_x, y=min_y, width=max(width, EPSILON), height=max(height, EPSILON))


# --- Points ---

def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def find_closest_card(point: Point, cards: Iterable[Card]) -> Optional[Card]:
    """Find the card whose center is nearest to ``point``.

    Ties go to the card seen first.  Returns None when there are no cards.
    """
    closest: Optional[Card] = None
    min_distance = math.inf
    for card in cards:
        d = distance(point, card.center)
        if d < min_distance:
            min_distance = d
            closest = card
    return closest
