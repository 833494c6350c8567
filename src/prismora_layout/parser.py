"""YAML board snapshots and layout settings for prismora-layout.

A snapshot lists the cards and connectors of a board, optionally with the
layout settings to use for it:

    cards:
      - id: idea
        x: 0
        y: 0
        width: 300
        height: 200
        payload: {title: "First idea"}
      - id: answer
        x: 400
        y: 0
        width: 300
        height: 200
    connectors:
      - id: c1
        from_id: idea
        to_id: answer
        from_side: right      # optional, chosen automatically if omitted
        to_side: left
    settings:
      padding: 40
"""

from __future__ import annotations

from pathlib import Path

import yaml

from .models import Board, Card, Connector, LayoutSettings


def _load_mapping(yaml_str: str, what: str) -> dict:
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError(f"Empty YAML {what}")
    if not isinstance(data, dict):
        raise ValueError(f"YAML {what} must be a mapping, got {type(data).__name__}")
    return data


def parse_board_yaml(yaml_str: str) -> Board:
    """Parse a YAML snapshot string into a Board.

    Raises:
        ValueError: If the document is empty, not a mapping, or lists the
            same card id twice.
        pydantic.ValidationError: If a card, connector or setting is
            malformed (e.g. a card with zero width).
    """
    data = _load_mapping(yaml_str, "snapshot")

    cards = [_parse_card(card_data) for card_data in data.get("cards") or []]
    seen: set[str] = set()
    for card in cards:
        if card.id in seen:
            raise ValueError(f"Duplicate card id '{card.id}'")
        seen.add(card.id)

    connectors = [Connector(**conn_data) for conn_data in data.get("connectors") or []]
    settings = LayoutSettings(**(data.get("settings") or {}))

    return Board(cards=cards, connectors=connectors, settings=settings)


def parse_board_file(path: str) -> Board:
    """Parse a YAML snapshot file into a Board."""
    content = Path(path).read_text()
    return parse_board_yaml(content)


def load_settings(path: str) -> LayoutSettings:
    """Load layout settings from a YAML file.

    The file may hold the settings at the top level or under a
    ``settings`` key, so a full snapshot file works too.
    """
    data = _load_mapping(Path(path).read_text(), "settings")
    if isinstance(data.get("settings"), dict):
        data = data["settings"]
    return LayoutSettings(**data)


def _parse_card(data: dict) -> Card:
    """Parse a single card from YAML data.

    Ids are taken as strings even when YAML reads them as numbers.  A
    missing size is left for validation to reject.
    """
    return Card(
        id=str(data["id"]),
        x=data.get("x", 0),
        y=data.get("y", 0),
        width=data.get("width"),
        height=data.get("height"),
        z_index=int(data.get("z_index", 0)),
        payload=data.get("payload") or {},
    )


def board_to_yaml(board: Board) -> str:
    """Serialize a Board back to YAML.

    Settings that still have their default value are left out, as are
    unset connector sides and empty payloads.
    """
    data: dict = {"cards": [], "connectors": []}

    for card in board.cards:
        card_data = {
            "id": card.id,
            "x": card.x,
            "y": card.y,
            "width": card.width,
            "height": card.height,
        }
        if card.z_index:
            card_data["z_index"] = card.z_index
        if card.payload:
            card_data["payload"] = card.payload
        data["cards"].append(card_data)

    for connector in board.connectors:
        conn_data = {
            k: v for k, v in connector.model_dump(mode="json").items()
            if v is not None
        }
        data["connectors"].append(conn_data)

    settings = board.settings.model_dump(exclude_defaults=True)
    if settings:
        data["settings"] = settings

    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
