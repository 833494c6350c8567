"""
Overlap resolution for prismora-layout.

After a card is moved or created, every other card it now overlaps has to
make room, and the cards pushed aside may in turn collide with their own
neighbours.  ``resolve_overlaps`` settles this with an iterative
push-apart pass:

  1. Scan every unordered pair of cards (in sorted id order, so the
     result never depends on map insertion order).
  2. For each pair whose padded rectangles overlap, compute the minimum
     translation that separates them along one axis, whichever axis
     needs the smaller move, horizontal on a tie.
  3. Move the card further from the anchor by the full translation, or
     both cards by half of it when neither has been reached from the
     anchor yet.
  4. After the pass, snap every displaced card to the grid, rounding in
     the direction it was pushed.
  5. Repeat until a pass finds no overlap, or the iteration budget runs
     out.  Residual overlap after the budget is accepted; bounded running
     time wins over a perfect layout.

The anchor (the card the user just placed) never moves.

Push rank: the anchor has rank 0, and a card pushed by a rank ``r`` card
gets rank ``r + 1`` for the rest of the call.  The lower-ranked card of a
pair holds still, so a row of cards pressed against the anchor moves
outward as a front instead of bouncing back into it.  Between two cards
of equal rank, the later id moves.

Padding: each card is grown by ``padding / 2`` on every side before the
overlap test, so any two cards end up at least ``padding`` apart.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

from .models import LayoutMap, ResolveOptions


logger = logging.getLogger(__name__)

# Penetration depths at or below this are rounding noise, not overlap.
OVERLAP_TOLERANCE = 1e-9

# Rank of cards the anchor's pushes have not reached.
_UNRANKED = math.inf


@dataclass
class _Box:
    """Mutable working copy of a card's rectangle."""
    id: str
    x: float
    y: float
    width: float
    height: float
    rank: float = _UNRANKED


@dataclass
class _Separation:
    """Signed translation that moves ``second`` clear of ``first``."""
    dx: float
    dy: float


def _snap(value: float, grid: float, direction: float = 0.0) -> float:
    """Round to a multiple of ``grid``.

    A positive ``direction`` rounds up and a negative one rounds down, so a
    pushed card never lands back inside the card that pushed it.  Without
    a direction the nearest multiple wins, halves rounding up.
    """
    steps = value / grid
    if direction > 0:
        return math.ceil(steps - OVERLAP_TOLERANCE) * grid
    if direction < 0:
        return math.floor(steps + OVERLAP_TOLERANCE) * grid
    return math.floor(steps + 0.5) * grid


def _separation(first: _Box, second: _Box, padding: float) -> Optional[_Separation]:
    """Minimum translation separating two padded boxes, or None if clear.

    On each axis there are two ways out: push ``second`` forward past
    ``first`` or backward before it.  The shorter one wins; on an exact
    tie (identical centers) ``second`` goes forward.  The returned vector
    only moves along the axis that needs less travel, preferring
    horizontal when both need the same.
    """
    forward_x = first.x + first.width + padding - second.x
    backward_x = second.x + second.width + padding - first.x
    forward_y = first.y + first.height + padding - second.y
    backward_y = second.y + second.height + padding - first.y

    if min(forward_x, backward_x, forward_y, backward_y) <= OVERLAP_TOLERANCE:
        return None

    shift_x = forward_x if forward_x <= backward_x else -backward_x
    shift_y = forward_y if forward_y <= backward_y else -backward_y

    if abs(shift_x) <= abs(shift_y):
        return _Separation(dx=shift_x, dy=0.0)
    return _Separation(dx=0.0, dy=shift_y)


def _boxes_from_layout(layout: LayoutMap, anchor_id: str) -> list[_Box]:
    return [
        _Box(
            id=card_id,
            x=card.x,
            y=card.y,
            width=card.width,
            height=card.height,
            rank=0 if card_id == anchor_id else _UNRANKED,
        )
        for card_id, card in sorted(layout.items())
    ]


def _push(box: _Box, dx: float, dy: float, displaced: dict[str, tuple[_Box, float, float]]) -> None:
    """Move ``box``, remembering where it started this pass."""
    displaced.setdefault(box.id, (box, box.x, box.y))
    box.x += dx
    box.y += dy


def find_overlaps(layout: LayoutMap, padding: float = 0.0) -> list[tuple[str, str]]:
    """List every pair of cards whose padded rectangles overlap.

    Pairs come out as ``(smaller_id, larger_id)`` in sorted order.  With
    ``padding=0`` this is exactly the pairs for which ``rects_overlap`` is
    true.
    """
    boxes = _boxes_from_layout(layout, anchor_id="")
    return [
        (first.id, second.id)
        for first, second in combinations(boxes, 2)
        if _separation(first, second, padding) is not None
    ]


def resolve_overlaps(
    layout: LayoutMap,
    anchor_id: str,
    options: Optional[ResolveOptions] = None,
) -> LayoutMap:
    """Push cards apart until no two overlap, keeping the anchor fixed.

    Args:
        layout:    Snapshot of every card, keyed by id.  Not modified.
        anchor_id: The card that just moved or was created.  If it is not
                   in ``layout`` (the card was deleted meanwhile) the
                   snapshot is returned unchanged.
        options:   Iteration budget, grid size and padding.

    Returns a new map with the same keys in the same order.  Cards that
    did not move are returned as-is; moved cards are copies with updated
    ``x``/``y`` and everything else (size, z-index, payload) untouched.
    """
    opts = options or ResolveOptions()

    if anchor_id not in layout:
        logger.debug("resolve_overlaps: anchor %r not in layout, nothing to do", anchor_id)
        return dict(layout)

    boxes = _boxes_from_layout(layout, anchor_id)
    padding = opts.padding
    grid = opts.snap_to_grid

    converged = False
    iterations = 0

    for iteration in range(opts.max_iterations):
        overlaps = 0
        displaced: dict[str, tuple[_Box, float, float]] = {}

        for first, second in combinations(boxes, 2):
            sep = _separation(first, second, padding)
            if sep is None:
                continue
            overlaps += 1

            if first.rank == second.rank == _UNRANKED:
                _push(first, -sep.dx / 2, -sep.dy / 2, displaced)
                _push(second, sep.dx / 2, sep.dy / 2, displaced)
            elif first.rank <= second.rank:
                _push(second, sep.dx, sep.dy, displaced)
                second.rank = first.rank + 1
            else:
                _push(first, -sep.dx, -sep.dy, displaced)
                first.rank = second.rank + 1

        if overlaps == 0:
            converged = True
            break

        iterations = iteration + 1
        if grid > 0:
            for box, start_x, start_y in displaced.values():
                box.x = _snap(box.x, grid, box.x - start_x)
                box.y = _snap(box.y, grid, box.y - start_y)

    if converged:
        logger.debug(
            "resolve_overlaps: anchor %r settled after %d iteration(s)", anchor_id, iterations
        )
    else:
        residual = sum(
            1
            for first, second in combinations(boxes, 2)
            if _separation(first, second, padding) is not None
        )
        if residual:
            logger.debug(
                "resolve_overlaps: anchor %r stopped after %d iteration(s) with %d overlap(s) left",
                anchor_id, iterations, residual,
            )

    moved = {box.id: box for box in boxes}
    result: LayoutMap = {}
    for card_id, card in layout.items():
        box = moved[card_id]
        if box.x == card.x and box.y == card.y:
            result[card_id] = card
        else:
            result[card_id] = card.model_copy(update={"x": box.x, "y": box.y})
    return result
