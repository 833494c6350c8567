"""
Data models for prismora-layout: the board geometry vocabulary.

Every value the layout core consumes or produces is one of these models.
They are plain snapshots: the core never keeps them between calls, and the
editor replaces its own copies wholesale with whatever the core returns.

    Point: a location in board (un-zoomed, un-panned) coordinates
    Rect: an axis-aligned rectangle, optionally tagged with an id
    Card: a Rect that belongs to a card on the board, plus z-index
      and an opaque payload the core never looks at
    Side: one of the four docking sides of a card
    Connector: a logical edge between two cards' sides
    Board: a snapshot of cards and connectors

This module also holds the **option models** and their defaults.  The
algorithms take their tuning values only through these objects, never from
globals or the environment.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_ITERATIONS = 16
DEFAULT_SNAP_TO_GRID = 10.0
DEFAULT_PADDING = 50.0

# Obstacle inflation used by the router when testing a path for collisions.
DEFAULT_CLEARANCE = 12.0
# Length of the perpendicular leg leaving / entering a card edge.
DEFAULT_STUB_LENGTH = 24.0

DEFAULT_CORNER_RADIUS = 12.0
# Extra room around a connector's bounding box for stroke and arrowhead.
DEFAULT_BOUNDS_MARGIN = 10.0

# Control point distance for the curved connector style.
DEFAULT_CONTROL_OFFSET = 50.0


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class Point(BaseModel):
    """A location in board coordinates."""
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class Rect(BaseModel):
    """An axis-aligned rectangle.

    ``x``/``y`` is the top-left corner.  ``width`` and ``height`` must be
    strictly positive; a degenerate rectangle is rejected at construction
    so it can never reach the layout algorithms.

    ``id`` identifies the owning card within a layout pass.  Computed
    rectangles (connector bounds, inflated obstacles) leave it empty.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    id: str = ""

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)


class Card(Rect):
    """A card (prismion) on the board.

    Position and size are what the layout core works with.  ``z_index`` and
    ``payload`` are carried through untouched so the editor can hand over
    its cards as-is and get the same cards back, moved.
    """
    id: str
    z_index: int = 0
    payload: dict[str, Any] = Field(default_factory=dict)


# A snapshot of every card on the board, keyed by card id.
LayoutMap = dict[str, Card]


class Side(str, Enum):
    """The four docking sides of a card.

    The string values are the literals the editor stores on connectors, so
    a side survives a round trip through YAML or JSON unchanged.
    """
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def is_horizontal(self) -> bool:
        """True for the sides a connector leaves horizontally (left/right)."""
        return self in (Side.LEFT, Side.RIGHT)


class PortPair(BaseModel):
    """The pair of sides a connector should dock to."""
    from_side: Side
    to_side: Side


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------

class Connector(BaseModel):
    """A logical edge between two cards.

    The layout core does not own connectors; it only computes their
    geometry.  When ``from_side`` or ``to_side`` is left unset, the port
    selector picks both sides from the cards' relative position.
    """
    id: str
    from_id: str
    to_id: str
    from_side: Optional[Side] = None
    to_side: Optional[Side] = None
    label: Optional[str] = None


class ConnectorGeometry(BaseModel):
    """Everything the render layer needs to draw one connector.

    Attributes:
        connector_id: Id of the connector this geometry belongs to.
        from_side:    Side used on the source card.
        to_side:      Side used on the target card.
        start:        Port position on the source card.
        end:          Port position on the target card.
        path:         Routed polyline, ``start`` first and ``end`` last.
        bounds:       Local viewport covering the path plus a margin.
        path_data:    SVG path data relative to ``bounds``' top-left corner.
        midpoint:     Anchor for a label or hover overlay, board coordinates.
    """
    connector_id: str
    from_side: Side
    to_side: Side
    start: Point
    end: Point
    path: list[Point]
    bounds: Rect
    path_data: str
    midpoint: Point


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class ResolveOptions(BaseModel):
    """Tuning for the overlap resolver.

    Attributes:
        max_iterations: Upper bound on resolution passes.
        snap_to_grid:   Grid size displaced cards are rounded to; 0 disables.
        padding:        Minimum gap enforced between any two cards.
    """
    model_config = ConfigDict(extra="forbid")

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=0)
    snap_to_grid: float = Field(default=DEFAULT_SNAP_TO_GRID, ge=0)
    padding: float = Field(default=DEFAULT_PADDING, ge=0)


class RouteOptions(BaseModel):
    """Tuning for the obstacle-avoiding router.

    Both values are visual tuning constants, not correctness parameters.
    """
    model_config = ConfigDict(extra="forbid")

    clearance: float = Field(default=DEFAULT_CLEARANCE, ge=0)
    stub_length: float = Field(default=DEFAULT_STUB_LENGTH, gt=0)


class LayoutSettings(BaseModel):
    """Every tuning value of the layout core in one place.

    This is what a settings file deserializes into.  ``resolve_options()``
    and ``route_options()`` split it back into what each algorithm takes.
    """
    model_config = ConfigDict(extra="forbid")

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=0)
    snap_to_grid: float = Field(default=DEFAULT_SNAP_TO_GRID, ge=0)
    padding: float = Field(default=DEFAULT_PADDING, ge=0)
    clearance: float = Field(default=DEFAULT_CLEARANCE, ge=0)
    stub_length: float = Field(default=DEFAULT_STUB_LENGTH, gt=0)
    corner_radius: float = Field(default=DEFAULT_CORNER_RADIUS, ge=0)
    bounds_margin: float = Field(default=DEFAULT_BOUNDS_MARGIN, ge=0)

    def resolve_options(self) -> ResolveOptions:
        return ResolveOptions(
            max_iterations=self.max_iterations,
            snap_to_grid=self.snap_to_grid,
            padding=self.padding,
        )

    def route_options(self) -> RouteOptions:
        return RouteOptions(
            clearance=self.clearance,
            stub_length=self.stub_length,
        )


# ---------------------------------------------------------------------------
# Board (root snapshot)
# ---------------------------------------------------------------------------

class Board(BaseModel):
    """A snapshot of a board: its cards and the connectors between them.

    The board keeps a ``_card_map`` for O(1) lookup by id.  Use
    ``get_card(id)`` for single lookups and ``layout()`` for the id-keyed
    map the algorithms take.
    """
    cards: list[Card] = Field(default_factory=list)
    connectors: list[Connector] = Field(default_factory=list)
    settings: LayoutSettings = Field(default_factory=LayoutSettings)

    _card_map: dict[str, Card] = {}

    def model_post_init(self, __context):
        """Build the lookup map after initialization."""
        self._card_map = {card.id: card for card in self.cards}

    def get_card(self, card_id: str) -> Optional[Card]:
        """Look up a card by id."""
        return self._card_map.get(card_id)

    def layout(self) -> LayoutMap:
        """Return the cards as a fresh id-keyed map."""
        return {card.id: card for card in self.cards}

    def with_layout(self, layout: LayoutMap) -> Board:
        """Return a copy of this board whose cards come from ``layout``.

        Card order follows this board's order; cards missing from
        ``layout`` are kept as they are.
        """
        cards = [layout.get(card.id, card) for card in self.cards]
        return Board(cards=cards, connectors=list(self.connectors), settings=self.settings)
