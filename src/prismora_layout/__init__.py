"""prismora-layout: card layout and connector routing for the Prismora board."""

from .collision import find_overlaps, resolve_overlaps
from .connectors import connection_exists, layout_board, route_connector, route_connectors
from .geometry import (
    distance,
    find_closest_card,
    opposite_side,
    port_position,
    rects_overlap,
)
from .models import (
    Board,
    Card,
    Connector,
    ConnectorGeometry,
    LayoutMap,
    LayoutSettings,
    Point,
    PortPair,
    Rect,
    ResolveOptions,
    RouteOptions,
    Side,
)
from .ports import find_optimal_ports
from .render import build_curved_path, build_rounded_path, get_connector_bounds, path_midpoint
from .routing import find_path_avoiding_obstacles

__version__ = "0.1.0"

__all__ = [
    "Board",
    "Card",
    "Connector",
    "ConnectorGeometry",
    "LayoutMap",
    "LayoutSettings",
    "Point",
    "PortPair",
    "Rect",
    "ResolveOptions",
    "RouteOptions",
    "Side",
    "build_curved_path",
    "build_rounded_path",
    "connection_exists",
    "distance",
    "find_closest_card",
    "find_optimal_ports",
    "find_overlaps",
    "find_path_avoiding_obstacles",
    "get_connector_bounds",
    "layout_board",
    "opposite_side",
    "path_midpoint",
    "port_position",
    "rects_overlap",
    "resolve_overlaps",
    "route_connector",
    "route_connectors",
]
