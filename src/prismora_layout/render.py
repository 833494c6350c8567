"""Connector bounds and SVG path data for the render layer."""

from __future__ import annotations

from typing import Optional

from .geometry import EPSILON, bounding_rect, side_direction
from .models import (
    DEFAULT_BOUNDS_MARGIN,
    DEFAULT_CONTROL_OFFSET,
    DEFAULT_CORNER_RADIUS,
    Point,
    Rect,
    Side,
)


# --- Number formatting ---

def _fmt(value: float) -> str:
    """Format a coordinate for path data: at most 3 decimals, no trailing zeros."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _xy(point: Point, origin: Optional[Point]) -> str:
    if origin is None:
        return f"{_fmt(point.x)} {_fmt(point.y)}"
    return f"{_fmt(point.x - origin.x)} {_fmt(point.y - origin.y)}"


def _sign(value: float) -> float:
    return 1.0 if value > 0 else -1.0


# --- Bounds ---

def get_connector_bounds(
    start: Point,
    end: Point,
    path: list[Point],
    margin: float = DEFAULT_BOUNDS_MARGIN,
) -> Rect:
    """Local viewport for a connector.

    Covers both ports and every point of ``path``, grown by ``margin`` so
    the stroke and the arrowhead are not clipped at the edges.
    """
    return bounding_rect([start, *path, end], margin=margin)


# --- Path data ---

def build_rounded_path(
    points: list[Point],
    corner_radius: float = DEFAULT_CORNER_RADIUS,
    origin: Optional[Point] = None,
) -> str:
    """SVG path data for an orthogonal polyline with rounded corners.

    Each interior vertex where the path turns by a right angle is replaced
    by a line that stops short of the vertex and a quadratic curve whose
    control point is the vertex.  The cut-back is ``corner_radius``,
    shrunk to half the shorter adjacent segment so neighbouring corners
    never overlap.  Any other joint (straight-through, diagonal, or a
    zero-length segment) is drawn as a plain line through the vertex.

    When ``origin`` is given, coordinates are emitted relative to it:
    pass the top-left of ``get_connector_bounds`` to draw inside the
    connector's own viewport.
    """
    if len(points) < 2:
        return ""

    d = f"M {_xy(points[0], origin)}"
    if len(points) == 2:
        return f"{d} L {_xy(points[1], origin)}"

    for prev, curr, nxt in zip(points, points[1:], points[2:]):
        v1x = curr.x - prev.x
        v1y = curr.y - prev.y
        v2x = nxt.x - curr.x
        v2y = nxt.y - curr.y

        v1_horizontal = abs(v1y) < EPSILON and abs(v1x) > EPSILON
        v1_vertical = abs(v1x) < EPSILON and abs(v1y) > EPSILON
        v2_horizontal = abs(v2y) < EPSILON and abs(v2x) > EPSILON
        v2_vertical = abs(v2x) < EPSILON and abs(v2y) > EPSILON

        if not ((v1_horizontal and v2_vertical) or (v1_vertical and v2_horizontal)):
            d += f" L {_xy(curr, origin)}"
            continue

        len1 = abs(v1x) if v1_horizontal else abs(v1y)
        len2 = abs(v2x) if v2_horizontal else abs(v2y)
        r = min(corner_radius, max(0.0, min(len1, len2) / 2))

        if v1_horizontal:
            before = Point(x=curr.x - _sign(v1x) * r, y=curr.y)
        else:
            before = Point(x=curr.x, y=curr.y - _sign(v1y) * r)
        if v2_horizontal:
            after = Point(x=curr.x + _sign(v2x) * r, y=curr.y)
        else:
            after = Point(x=curr.x, y=curr.y + _sign(v2y) * r)

        d += f" L {_xy(before, origin)}"
        d += f" Q {_xy(curr, origin)}, {_xy(after, origin)}"

    d += f" L {_xy(points[-1], origin)}"
    return d


def build_curved_path(
    start: Point,
    end: Point,
    from_side: Side,
    to_side: Side,
    control_offset: float = DEFAULT_CONTROL_OFFSET,
    origin: Optional[Point] = None,
) -> str:
    """SVG path data for a smooth cubic-bezier connector.

    The alternative to the routed style: each control point is pushed
    ``control_offset`` outward from its port along the port's side, so the
    curve leaves and enters the cards perpendicular to their edges.
    """
    fdx, fdy = side_direction(from_side)
    tdx, tdy = side_direction(to_side)
    cp1 = Point(x=start.x + fdx * control_offset, y=start.y + fdy * control_offset)
    cp2 = Point(x=end.x + tdx * control_offset, y=end.y + tdy * control_offset)
    return (
        f"M {_xy(start, origin)} "
        f"C {_xy(cp1, origin)}, {_xy(cp2, origin)}, {_xy(end, origin)}"
    )


def path_midpoint(path: list[Point]) -> Point:
    """Anchor point for a connector label or overlay.

    The midpoint of the segment that carries the connector visually: the
    chord of a 2-point path, the channel of a 4-point path, the detour
    segment of a 6-point path, and the longest segment otherwise.
    """
    if not path:
        raise ValueError("path_midpoint() needs at least one point")
    if len(path) == 1:
        return path[0]

    if len(path) == 2:
        a, b = path[0], path[1]
    elif len(path) == 4:
        a, b = path[1], path[2]
    elif len(path) == 6:
        a, b = path[2], path[3]
    else:
        a, b = max(
            zip(path, path[1:]),
            key=lambda seg: (seg[1].x - seg[0].x) ** 2 + (seg[1].y - seg[0].y) ** 2,
        )
    return Point(x=(a.x + b.x) / 2, y=(a.y + b.y) / 2)
