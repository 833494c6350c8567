"""Port selection: which sides two cards should connect through."""

from __future__ import annotations

from .geometry import opposite_side
from .models import PortPair, Rect, Side


def find_optimal_ports(source: Rect, target: Rect) -> PortPair:
    """Determine connection sides based on relative card positions.

    The center-to-center vector decides the flow direction: when the
    horizontal distance dominates (or ties), the connector runs between
    the facing left/right sides; otherwise between the facing top/bottom
    sides.  The chosen sides are always mutual opposites, so the line
    leaves one card towards the other and never doubles back through
    either card's body.

    Cards with identical centers fall into the horizontal branch and get
    right → left.

    Returns a PortPair where each side is one of:
        right   → target lies to the right
        left    → target lies to the left
        bottom  → target lies below
        top     → target lies above
    """
    src = source.center
    tgt = target.center

    dx = tgt.x - src.x
    dy = tgt.y - src.y

    if abs(dx) >= abs(dy):
        from_side = Side.RIGHT if dx >= 0 else Side.LEFT
    else:
        from_side = Side.BOTTOM if dy >= 0 else Side.TOP

    return PortPair(from_side=from_side, to_side=opposite_side(from_side))
