"""Tests for YAML snapshot parsing and settings files."""

import pytest
from pydantic import ValidationError

from prismora_layout.models import LayoutSettings, Side
from prismora_layout.parser import board_to_yaml, load_settings, parse_board_file, parse_board_yaml


SAMPLE_YAML = """
cards:
  - id: idea
    x: 0
    y: 0
    width: 300
    height: 200
    z_index: 3
    payload:
      title: First idea
  - id: answer
    x: 400
    y: 0
    width: 300
    height: 200
connectors:
  - id: c1
    from_id: idea
    to_id: answer
    from_side: right
    to_side: left
    label: leads to
  - id: c2
    from_id: answer
    to_id: idea
settings:
  padding: 40
  snap_to_grid: 20
"""


class TestParseBoard:
    def test_parses_cards(self):
        board = parse_board_yaml(SAMPLE_YAML)
        assert [c.id for c in board.cards] == ["idea", "answer"]
        idea = board.get_card("idea")
        assert (idea.x, idea.y, idea.width, idea.height) == (0, 0, 300, 200)
        assert idea.z_index == 3
        assert idea.payload == {"title": "First idea"}
        assert board.get_card("answer").payload == {}

    def test_parses_connectors(self):
        board = parse_board_yaml(SAMPLE_YAML)
        c1, c2 = board.connectors
        assert (c1.from_side, c1.to_side) == (Side.RIGHT, Side.LEFT)
        assert c1.label == "leads to"
        assert c2.from_side is None

    def test_parses_settings(self):
        board = parse_board_yaml(SAMPLE_YAML)
        assert board.settings.padding == 40
        assert board.settings.snap_to_grid == 20
        assert board.settings.clearance == LayoutSettings().clearance

    def test_numeric_ids_become_strings(self):
        board = parse_board_yaml("cards:\n  - {id: 7, width: 10, height: 10}\n")
        assert board.get_card("7") is not None
        assert board.get_card("7").x == 0

    def test_cards_only(self):
        board = parse_board_yaml("cards:\n  - {id: a, width: 10, height: 10}\n")
        assert board.connectors == []
        assert board.settings == LayoutSettings()

    def test_duplicate_ids_rejected(self):
        yaml_str = "cards:\n  - {id: a, width: 10, height: 10}\n  - {id: a, width: 20, height: 20}\n"
        with pytest.raises(ValueError, match="Duplicate card id 'a'"):
            parse_board_yaml(yaml_str)

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="Empty YAML"):
            parse_board_yaml("")

    def test_non_mapping_rejected(self):
        with pytest.raises(ValueError, match="mapping"):
            parse_board_yaml("- a\n- b\n")

    def test_zero_width_rejected(self):
        with pytest.raises(ValidationError):
            parse_board_yaml("cards:\n  - {id: a, width: 0, height: 10}\n")

    def test_missing_size_rejected(self):
        with pytest.raises(ValidationError):
            parse_board_yaml("cards:\n  - {id: a, x: 5}\n")

    def test_unknown_side_rejected(self):
        yaml_str = (
            "cards:\n  - {id: a, width: 10, height: 10}\n"
            "connectors:\n  - {id: c, from_id: a, to_id: a, from_side: north}\n"
        )
        with pytest.raises(ValidationError):
            parse_board_yaml(yaml_str)

    def test_unknown_setting_rejected(self):
        with pytest.raises(ValidationError):
            parse_board_yaml("cards: []\nsettings: {gravity: 9.8}\n")

    def test_parse_file(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text(SAMPLE_YAML)
        assert len(parse_board_file(str(path)).cards) == 2


class TestBoardToYaml:
    def test_round_trip(self):
        board = parse_board_yaml(SAMPLE_YAML)
        again = parse_board_yaml(board_to_yaml(board))
        assert again == board

    def test_defaults_are_omitted(self):
        board = parse_board_yaml("cards:\n  - {id: a, width: 10, height: 10}\n")
        text = board_to_yaml(board)
        assert "settings" not in text
        assert "z_index" not in text
        assert "payload" not in text


class TestLoadSettings:
    def test_top_level(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("padding: 20\nclearance: 4\n")
        settings = load_settings(str(path))
        assert settings.padding == 20
        assert settings.route_options().clearance == 4

    def test_nested_in_snapshot(self, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text(SAMPLE_YAML)
        settings = load_settings(str(path))
        assert settings.resolve_options().snap_to_grid == 20

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("padding: 20\nspacing: 4\n")
        with pytest.raises(ValidationError):
            load_settings(str(path))

    def test_negative_value_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("padding: -1\n")
        with pytest.raises(ValidationError):
            load_settings(str(path))
