"""
Obstacle-avoiding connector routing for prismora-layout.

A connector is drawn as an orthogonal polyline from a port on one card to
a port on another.  It always leaves the source perpendicular to its side
and arrives perpendicular to the target's side.  The router tries three
shapes in order of complexity and keeps the first one that clears every
obstacle:

  direct  (2 points)  start → end, only when the ports face each other
                      on a common line
  exit    (4 points)  start → exit → exit → end, one channel segment
                      between the two perpendicular legs
  detour  (6 points)  start → exit → waypoint → waypoint → exit → end,
                      stepping around the nearest blocking card on
                      whichever side adds the least travel

The detour is the last resort: when even that is blocked (a dense pile of
cards) the least-bad detour is returned anyway.  The router is a short
ladder of fixed shapes, not a search; it always terminates after the same
handful of candidate checks.

Obstacles are grown by ``clearance`` before testing, so a path that
"clears" an obstacle keeps at least that much distance from it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .geometry import (
    EPSILON,
    distance_to_rect,
    inflate,
    offset_point,
    opposite_side,
    segment_crosses_rect,
    side_direction,
)
from .models import Point, Rect, RouteOptions, Side


logger = logging.getLogger(__name__)


@dataclass
class _RouteRequest:
    """One routing call, with obstacles already filtered and inflated."""
    start: Point
    end: Point
    from_side: Side
    to_side: Side
    obstacles: list[Rect]
    endpoints: list[Rect]
    stub: float
    gap: float


Strategy = Callable[[_RouteRequest], Optional[list[Point]]]


# ---------------------------------------------------------------------------
# Path checks
# ---------------------------------------------------------------------------

def _segments(path: list[Point]) -> Iterable[tuple[Point, Point]]:
    return zip(path, path[1:])


def _blockers(path: list[Point], obstacles: list[Rect]) -> list[Rect]:
    """Obstacles that any segment of ``path`` passes through."""
    return [
        rect for rect in obstacles
        if any(segment_crosses_rect(a, b, rect) for a, b in _segments(path))
    ]


def _is_clear(path: list[Point], obstacles: list[Rect]) -> bool:
    for a, b in _segments(path):
        for rect in obstacles:
            if segment_crosses_rect(a, b, rect):
                return False
    return True


def _end_crossings(path: list[Point], req: _RouteRequest) -> int:
    """How many of the connected cards themselves ``path`` runs through."""
    return len(_blockers(path, req.endpoints))


def path_length(path: list[Point]) -> float:
    """Total length of a polyline (Manhattan length for orthogonal paths)."""
    return sum(abs(b.x - a.x) + abs(b.y - a.y) for a, b in _segments(path))


# ---------------------------------------------------------------------------
# Candidate shapes
# ---------------------------------------------------------------------------

def _pick_channel(low: float, high: float) -> float:
    """Channel coordinate inside [low, high]: centered when both bounds exist."""
    if math.isinf(low):
        return high
    if math.isinf(high):
        return low
    return (low + high) / 2


def _exit_candidate(req: _RouteRequest) -> Optional[list[Point]]:
    """The 4-point shape, or None when the ports make it impossible.

    Parallel sides (both left/right or both top/bottom) share a channel
    line between the two perpendicular legs; the channel has to sit at
    least one stub length out from each port.  Perpendicular sides meet
    at the corner where the two legs cross, provided the corner is at
    least a stub length out from both ports.
    """
    start, end = req.start, req.end
    stub = req.stub
    from_h = req.from_side.is_horizontal
    to_h = req.to_side.is_horizontal

    if from_h == to_h:
        axis = 0 if from_h else 1
        low, high = -math.inf, math.inf
        for point, side in ((start, req.from_side), (end, req.to_side)):
            direction = side_direction(side)[axis]
            limit = (point.x, point.y)[axis] + direction * stub
            if direction > 0:
                low = max(low, limit)
            else:
                high = min(high, limit)
        if low > high + EPSILON:
            return None
        channel = _pick_channel(low, high)
        if from_h:
            return [start, Point(x=channel, y=start.y), Point(x=channel, y=end.y), end]
        return [start, Point(x=start.x, y=channel), Point(x=end.x, y=channel), end]

    from_dx, from_dy = side_direction(req.from_side)
    to_dx, to_dy = side_direction(req.to_side)

    if from_h:
        corner = Point(x=end.x, y=start.y)
        if (corner.x - start.x) * from_dx < stub - EPSILON:
            return None
        if (corner.y - end.y) * to_dy < stub - EPSILON:
            return None
        return [start, corner, offset_point(end, req.to_side, stub), end]

    corner = Point(x=start.x, y=end.y)
    if (corner.y - start.y) * from_dy < stub - EPSILON:
        return None
    if (corner.x - end.x) * to_dx < stub - EPSILON:
        return None
    return [start, offset_point(start, req.from_side, stub), corner, end]


def _detour_via_row(req: _RouteRequest, y: float) -> list[Point]:
    """6-point shape whose middle segment runs horizontally at ``y``."""
    exit_from = offset_point(req.start, req.from_side, req.stub)
    exit_to = offset_point(req.end, req.to_side, req.stub)
    return [
        req.start,
        exit_from,
        Point(x=exit_from.x, y=y),
        Point(x=exit_to.x, y=y),
        exit_to,
        req.end,
    ]


def _detour_via_column(req: _RouteRequest, x: float) -> list[Point]:
    """6-point shape whose middle segment runs vertically at ``x``."""
    exit_from = offset_point(req.start, req.from_side, req.stub)
    exit_to = offset_point(req.end, req.to_side, req.stub)
    return [
        req.start,
        exit_from,
        Point(x=x, y=exit_from.y),
        Point(x=x, y=exit_to.y),
        exit_to,
        req.end,
    ]


def _default_detour(req: _RouteRequest) -> list[Point]:
    """6-point shape halfway between the two exits.

    Used when the ports cannot be joined by the 4-point shape at all,
    e.g. a target that sits behind the source's side.  When the halfway
    channel would run through one of the connected cards (ports facing
    away from each other on a common line), the channel moves out to one
    stub length beyond the cards, on whichever side is closer.
    """
    exit_from = offset_point(req.start, req.from_side, req.stub)
    exit_to = offset_point(req.end, req.to_side, req.stub)
    ends = req.endpoints
    outside: list[float] = []

    if req.from_side.is_horizontal:
        halfway = (exit_from.y + exit_to.y) / 2
        shape = _detour_via_row
        if ends:
            outside = [min(r.y for r in ends) - req.stub, max(r.bottom for r in ends) + req.stub]
    else:
        halfway = (exit_from.x + exit_to.x) / 2
        shape = _detour_via_column
        if ends:
            outside = [min(r.x for r in ends) - req.stub, max(r.right for r in ends) + req.stub]

    outside.sort(key=lambda v: abs(v - halfway))
    candidates = [shape(req, v) for v in [halfway, *outside]]
    ranked = [(_end_crossings(path, req), index) for index, path in enumerate(candidates)]
    _, best = min(ranked)
    return candidates[best]


def _around(req: _RouteRequest, obstacle: Rect) -> list[list[Point]]:
    """Detours passing above, right of, below and left of ``obstacle``."""
    gap = req.gap
    return [
        _detour_via_row(req, obstacle.y - gap),
        _detour_via_column(req, obstacle.right + gap),
        _detour_via_row(req, obstacle.bottom + gap),
        _detour_via_column(req, obstacle.x - gap),
    ]


def _rect_key(rect: Rect) -> tuple:
    return (rect.id, rect.x, rect.y, rect.width, rect.height)


def _nearest(req: _RouteRequest, rects: list[Rect]) -> Rect:
    return min(rects, key=lambda r: (distance_to_rect(req.start, r), *_rect_key(r)))


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _direct_route(req: _RouteRequest) -> Optional[list[Point]]:
    """Straight segment, when the ports face each other on one line."""
    if req.to_side is not opposite_side(req.from_side):
        return None

    dx, dy = side_direction(req.from_side)
    along_x = req.end.x - req.start.x
    along_y = req.end.y - req.start.y
    if req.from_side.is_horizontal:
        aligned = abs(along_y) < EPSILON and along_x * dx > EPSILON
    else:
        aligned = abs(along_x) < EPSILON and along_y * dy > EPSILON
    if not aligned:
        return None

    path = [req.start, req.end]
    return path if _is_clear(path, req.obstacles) else None


def _exit_route(req: _RouteRequest) -> Optional[list[Point]]:
    path = _exit_candidate(req)
    if path is None or not _is_clear(path, req.obstacles):
        return None
    return path


def _detour_route(req: _RouteRequest) -> list[Point]:
    """Best 6-point detour; never fails.

    Candidates are the halfway detour plus, when something blocks the
    simpler route, the four ways around the blocking obstacle nearest to
    the start.  The shortest clear candidate wins.  If none is clear, the
    one crossing the fewest obstacles wins, then the shortest.  A candidate
    that folds back through one of the connected cards loses to any that
    does not.  Remaining ties go to the earlier candidate (halfway, above,
    right, below, left).
    """
    default = _default_detour(req)
    baseline = _exit_candidate(req) or default
    candidates = [default]

    blockers = _blockers(baseline, req.obstacles)
    if blockers:
        candidates.extend(_around(req, _nearest(req, blockers)))

    ranked = []
    for index, path in enumerate(candidates):
        blocked = len(_blockers(path, req.obstacles))
        ranked.append((_end_crossings(path, req), blocked, path_length(path), index))
    _, _, _, best = min(ranked)
    return candidates[best]


_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("direct", _direct_route),
    ("exit", _exit_route),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_path_avoiding_obstacles(
    start: Point,
    end: Point,
    obstacles: Iterable[Rect],
    exclude_ids: Iterable[str],
    from_side: Side,
    to_side: Side,
    options: Optional[RouteOptions] = None,
) -> list[Point]:
    """Route an orthogonal connector from ``start`` to ``end``.

    Args:
        start:       Port position on the source card.
        end:         Port position on the target card.
        obstacles:   Cards the path should not cross.
        exclude_ids: Ids to drop from ``obstacles``, at least the two
                     cards being connected.
        from_side:   Side of the source card ``start`` sits on.
        to_side:     Side of the target card ``end`` sits on.
        options:     Clearance around obstacles and exit stub length.

    Returns 2, 4 or 6 points.  The first and last are ``start`` and
    ``end`` themselves, and every segment is horizontal or vertical.
    Identical inputs always produce the identical path, whatever order
    the obstacles arrive in.
    """
    opts = options or RouteOptions()
    excluded = set(exclude_ids)
    obstacles = list(obstacles)

    inflated = sorted(
        (inflate(rect, opts.clearance) for rect in obstacles if rect.id not in excluded),
        key=_rect_key,
    )
    endpoints = sorted((rect for rect in obstacles if rect.id in excluded), key=_rect_key)

    req = _RouteRequest(
        start=start,
        end=end,
        from_side=from_side,
        to_side=to_side,
        obstacles=inflated,
        endpoints=endpoints,
        stub=opts.stub_length,
        gap=opts.clearance,
    )

    for name, strategy in _STRATEGIES:
        path = strategy(req)
        if path is not None:
            logger.debug("route %s→%s: %s (%d points)", from_side.value, to_side.value, name, len(path))
            return path

    path = _detour_route(req)
    if not _is_clear(path, inflated):
        logger.debug(
            "route %s→%s: no clear detour among %d obstacle(s), using best effort",
            from_side.value, to_side.value, len(inflated),
        )
    else:
        logger.debug("route %s→%s: detour (%d points)", from_side.value, to_side.value, len(path))
    return path
