"""
Connector pipeline: from a board snapshot to drawable connector geometry.

This is the control flow the editor runs after every move or insert:

  1. ``resolve_overlaps`` settles the cards around the one that changed.
  2. For each connector, ``find_optimal_ports`` picks the sides unless the
     connector pins them.
  3. The port positions are routed around every other card.
  4. The route is wrapped in a local viewport and turned into rounded
     SVG path data, with a midpoint for the connector's label.

Everything here is stateless: the functions take a snapshot and return
new values, so connectors can be routed independently and in any order.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .collision import resolve_overlaps
from .geometry import port_position
from .models import Board, Card, Connector, ConnectorGeometry, LayoutMap, LayoutSettings, Point
from .ports import find_optimal_ports
from .render import build_rounded_path, get_connector_bounds, path_midpoint
from .routing import find_path_avoiding_obstacles


logger = logging.getLogger(__name__)


def connection_exists(connectors: Iterable[Connector], a_id: str, b_id: str) -> bool:
    """True when some connector joins the two cards, in either direction."""
    return any(
        (c.from_id == a_id and c.to_id == b_id) or (c.from_id == b_id and c.to_id == a_id)
        for c in connectors
    )


def route_connector(
    layout: LayoutMap,
    connector: Connector,
    settings: Optional[LayoutSettings] = None,
) -> ConnectorGeometry:
    """Compute the drawable geometry of one connector.

    Sides pinned on the connector are kept; if either side is missing,
    both are chosen by the port selector.  Every card other than the two
    endpoints is an obstacle.

    Raises:
        KeyError: If either endpoint card is not in ``layout``.
    """
    cfg = settings or LayoutSettings()

    source: Optional[Card] = layout.get(connector.from_id)
    target: Optional[Card] = layout.get(connector.to_id)
    if source is None:
        raise KeyError(f"Connector '{connector.id}' starts at unknown card '{connector.from_id}'")
    if target is None:
        raise KeyError(f"Connector '{connector.id}' ends at unknown card '{connector.to_id}'")

    if connector.from_side is not None and connector.to_side is not None:
        from_side, to_side = connector.from_side, connector.to_side
    else:
        ports = find_optimal_ports(source, target)
        from_side, to_side = ports.from_side, ports.to_side

    start = port_position(source, from_side)
    end = port_position(target, to_side)

    path = find_path_avoiding_obstacles(
        start,
        end,
        layout.values(),
        [source.id, target.id],
        from_side,
        to_side,
        cfg.route_options(),
    )
    bounds = get_connector_bounds(start, end, path, margin=cfg.bounds_margin)
    path_data = build_rounded_path(
        path,
        corner_radius=cfg.corner_radius,
        origin=Point(x=bounds.x, y=bounds.y),
    )

    return ConnectorGeometry(
        connector_id=connector.id,
        from_side=from_side,
        to_side=to_side,
        start=start,
        end=end,
        path=path,
        bounds=bounds,
        path_data=path_data,
        midpoint=path_midpoint(path),
    )


def route_connectors(
    layout: LayoutMap,
    connectors: Iterable[Connector],
    settings: Optional[LayoutSettings] = None,
) -> list[ConnectorGeometry]:
    """Route every connector whose endpoints are both on the board.

    Dangling connectors (an endpoint was deleted) are skipped with a
    warning rather than failing the whole batch.
    """
    results: list[ConnectorGeometry] = []
    for connector in connectors:
        try:
            results.append(route_connector(layout, connector, settings))
        except KeyError as e:
            logger.warning("Skipping connector %r: %s", connector.id, e)
    return results


def layout_board(
    board: Board,
    anchor_id: str,
    settings: Optional[LayoutSettings] = None,
) -> tuple[Board, list[ConnectorGeometry]]:
    """Resolve overlaps around ``anchor_id``, then route every connector.

    ``settings`` defaults to the board's own settings.  Returns the board
    with its cards moved and the geometry of its connectors on the
    resolved layout.
    """
    cfg = settings or board.settings
    resolved = resolve_overlaps(board.layout(), anchor_id, cfg.resolve_options())
    geometries = route_connectors(resolved, board.connectors, cfg)
    return board.with_layout(resolved), geometries
