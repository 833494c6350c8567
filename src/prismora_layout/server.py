"""prismora-layout MCP server: board layout and connector routing as MCP tools."""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .collision import find_overlaps, resolve_overlaps
from .connectors import layout_board, route_connectors
from .models import LayoutSettings, Rect
from .parser import board_to_yaml, load_settings, parse_board_yaml
from .ports import find_optimal_ports


logger = logging.getLogger(__name__)

# --- Constants ---
SETTINGS_ENV_VAR = "PRISMORA_LAYOUT_SETTINGS"

server = Server("prismora-layout")


def _server_settings() -> Optional[LayoutSettings]:
    """Settings from the file named by PRISMORA_LAYOUT_SETTINGS, if set.

    When set, these replace the settings embedded in incoming snapshots.
    """
    path = os.environ.get(SETTINGS_ENV_VAR)
    if not path:
        return None
    return load_settings(path)


_SNAPSHOT_DESCRIPTION = (
    "YAML board snapshot. Example:\n"
    "cards:\n"
    "  - {id: a, x: 0, y: 0, width: 300, height: 200}\n"
    "  - {id: b, x: 250, y: 50, width: 300, height: 200}\n"
    "connectors:\n"
    "  - {id: c1, from_id: a, to_id: b}\n"
    "settings: {padding: 50, snap_to_grid: 10}\n"
    "\n"
    "Connector sides (top/right/bottom/left) are optional; they are chosen "
    "from the cards' relative position when omitted."
)

_RECT_SCHEMA = {
    "type": "object",
    "properties": {
        "x": {"type": "number"},
        "y": {"type": "number"},
        "width": {"type": "number", "exclusiveMinimum": 0},
        "height": {"type": "number", "exclusiveMinimum": 0},
    },
    "required": ["x", "y", "width", "height"],
}


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="resolve_overlaps",
            description=(
                "Push cards apart after one card was moved or created. The anchor card "
                "never moves; every other card that overlaps it (or ends up overlapping "
                "a neighbour) is displaced until all cards keep the configured padding. "
                "Returns the resolved snapshot as YAML."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "snapshot_yaml": {"type": "string", "description": _SNAPSHOT_DESCRIPTION},
                    "anchor_id": {
                        "type": "string",
                        "description": "Id of the card that just moved or was created.",
                    },
                },
                "required": ["snapshot_yaml", "anchor_id"],
            },
        ),
        Tool(
            name="route_connectors",
            description=(
                "Compute orthogonal, obstacle-avoiding routes for every connector in a "
                "snapshot. Returns JSON with each connector's sides, polyline, bounding "
                "box, rounded SVG path data (relative to the bounding box) and label anchor."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "snapshot_yaml": {"type": "string", "description": _SNAPSHOT_DESCRIPTION},
                    "anchor_id": {
                        "type": "string",
                        "description": (
                            "Optional: resolve overlaps around this card before routing."
                        ),
                    },
                },
                "required": ["snapshot_yaml"],
            },
        ),
        Tool(
            name="find_optimal_ports",
            description=(
                "Pick the pair of facing sides two cards should connect through."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "source": _RECT_SCHEMA,
                    "target": _RECT_SCHEMA,
                },
                "required": ["source", "target"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    if name == "resolve_overlaps":
        return await _resolve_overlaps(arguments)
    elif name == "route_connectors":
        return await _route_connectors(arguments)
    elif name == "find_optimal_ports":
        return await _find_optimal_ports(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def _resolve_overlaps(args: dict) -> list[TextContent]:
    """Resolve overlaps around the anchor card and return the new snapshot."""
    anchor_id = args.get("anchor_id")
    if not anchor_id:
        return [TextContent(type="text", text="Missing required argument: anchor_id")]

    try:
        board = parse_board_yaml(args["snapshot_yaml"])
        settings = _server_settings() or board.settings
    except Exception as e:
        logger.warning("resolve_overlaps: bad input: %s", e)
        return [TextContent(type="text", text=f"Failed to parse snapshot: {e}")]

    resolved = resolve_overlaps(board.layout(), anchor_id, settings.resolve_options())
    result = board.with_layout(resolved)

    moved = sorted(
        card_id for card_id, card in resolved.items()
        if board.get_card(card_id) is not card
    )
    remaining = find_overlaps(resolved, settings.padding)

    return [TextContent(
        type="text",
        text=json.dumps({
            "status": "success",
            "anchor_id": anchor_id,
            "anchor_found": board.get_card(anchor_id) is not None,
            "moved": moved,
            "remaining_overlaps": [list(pair) for pair in remaining],
            "snapshot_yaml": board_to_yaml(result),
        }),
    )]


async def _route_connectors(args: dict) -> list[TextContent]:
    """Route every connector in the snapshot."""
    try:
        board = parse_board_yaml(args["snapshot_yaml"])
        settings = _server_settings() or board.settings
    except Exception as e:
        logger.warning("route_connectors: bad input: %s", e)
        return [TextContent(type="text", text=f"Failed to parse snapshot: {e}")]

    anchor_id = args.get("anchor_id")
    if anchor_id:
        board, geometries = layout_board(board, anchor_id, settings)
    else:
        geometries = route_connectors(board.layout(), board.connectors, settings)

    return [TextContent(
        type="text",
        text=json.dumps({
            "status": "success",
            "connectors": [g.model_dump(mode="json") for g in geometries],
            "skipped": len(board.connectors) - len(geometries),
        }),
    )]


async def _find_optimal_ports(args: dict) -> list[TextContent]:
    """Choose the sides for a connector between two rectangles."""
    try:
        source = Rect(**args["source"])
        target = Rect(**args["target"])
    except Exception as e:
        return [TextContent(type="text", text=f"Invalid rectangle: {e}")]

    ports = find_optimal_ports(source, target)
    return [TextContent(type="text", text=ports.model_dump_json())]


def main():
    """Entry point for the MCP server."""
    import asyncio

    # stdout carries the MCP stdio transport; logs go to stderr.
    logging.basicConfig(
        level=os.environ.get("PRISMORA_LAYOUT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
