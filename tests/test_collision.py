"""
Tests for overlap resolution.

Tests cover:
- Missing anchor and empty-budget no-ops
- Minimum-translation push along the cheaper axis, horizontal on ties
- Padding and grid snapping, including anchors off the grid
- Anchor invariance, idempotence and input immutability
- Convergence on a full board and on rows pressed against the anchor
- Bounded output when the budget runs out
"""

import pytest

from prismora_layout.collision import find_overlaps, resolve_overlaps
from prismora_layout.models import ResolveOptions

from conftest import make_card


NO_SNAP = ResolveOptions(max_iterations=16, snap_to_grid=0, padding=0)


def layout_of(*cards):
    return {card.id: card for card in cards}


class TestNoOps:
    def test_missing_anchor_returns_layout_unchanged(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "deleted", NO_SNAP)
        assert result == layout
        assert result is not layout

    def test_zero_iterations_moves_nothing(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions(max_iterations=0, snap_to_grid=0, padding=0))
        assert result == layout

    def test_input_is_not_mutated(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        resolve_overlaps(layout, "a", NO_SNAP)
        assert layout["b"].x == 50


class TestPush:
    def test_pushes_along_axis_of_least_overlap(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert (result["b"].x, result["b"].y) == (100, 0)

    def test_vertical_push_when_cheaper(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 10, 80))
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert (result["b"].x, result["b"].y) == (10, 100)

    def test_tie_prefers_horizontal(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 60, 60))
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert (result["b"].x, result["b"].y) == (100, 60)

    def test_pushes_backward_when_cheaper(self):
        layout = layout_of(make_card("a", 100, 0), make_card("b", 30, 0))
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert result["b"].x == 0

    def test_anchor_sorted_after_other_card(self):
        layout = layout_of(make_card("z-anchor", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "z-anchor", NO_SNAP)
        assert result["b"].x == 100
        assert result["z-anchor"] is layout["z-anchor"]

    def test_neither_anchor_splits_the_move(self):
        layout = layout_of(make_card("anchor", 1000, 1000), make_card("b", 0, 0), make_card("c", 50, 0))
        result = resolve_overlaps(layout, "anchor", NO_SNAP)
        assert result["b"].x == -25
        assert result["c"].x == 75

    def test_padding_is_enforced(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions(snap_to_grid=0, padding=50))
        assert result["b"].x == 150
        assert find_overlaps(result, padding=50) == []

    def test_grid_snap_rounds_away_from_pusher(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions(snap_to_grid=10, padding=7))
        assert result["b"].x == 110
        assert result["b"].y == 0
        assert find_overlaps(result, padding=7) == []

    def test_grid_snap_rounds_down_to_nearest_multiple(self):
        # b is pushed left to x=123.4 and settles on x=120
        layout = layout_of(make_card("a", 273.4, 0), make_card("b", 200, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions())
        assert result["b"].x == 120
        assert result["b"].y == 0
        assert find_overlaps(result, padding=50) == []

    def test_off_grid_anchor_forward_push_settles(self):
        layout = layout_of(make_card("a", 3, 0), make_card("b", 50, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions())
        assert result["b"].x == 160
        assert find_overlaps(result, padding=50) == []

    def test_off_grid_anchor_backward_push_settles(self):
        layout = layout_of(make_card("a", 3, 0), make_card("b", -30, 0))
        result = resolve_overlaps(layout, "a", ResolveOptions())
        assert result["b"].x == -150
        assert find_overlaps(result, padding=50) == []

    def test_off_grid_anchor_vertical_push_settles(self):
        layout = layout_of(make_card("a", 0, 7), make_card("b", 10, 80))
        result = resolve_overlaps(layout, "a", ResolveOptions())
        assert result["b"].y == 160
        assert result["b"].x == 10
        assert find_overlaps(result, padding=50) == []

    def test_moved_card_keeps_payload(self):
        moved = make_card("b", 50, 0, z_index=7, payload={"title": "Idea"})
        layout = layout_of(make_card("a", 0, 0), moved)
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert result["b"].payload == {"title": "Idea"}
        assert result["b"].z_index == 7
        assert result["b"].width == 100


class TestInvariants:
    @pytest.fixture
    def crowded(self):
        """19 cards on a 300px grid and a wide card dropped onto one of them."""
        cards = [
            make_card(f"card-{row}-{col}", col * 300, row * 300)
            for row in range(4)
            for col in range(5)
            if (row, col) != (3, 4)
        ]
        anchor = make_card("anchor", 320, 300)
        return layout_of(anchor, *cards)

    def test_converges_without_overlap(self, crowded):
        result = resolve_overlaps(crowded, "anchor", ResolveOptions())
        assert find_overlaps(result, padding=50) == []
        assert result["card-1-1"].x == 170

    def test_anchor_never_moves(self, crowded):
        result = resolve_overlaps(crowded, "anchor", ResolveOptions())
        assert result["anchor"].x == crowded["anchor"].x
        assert result["anchor"].y == crowded["anchor"].y

    def test_untouched_cards_are_returned_as_is(self, crowded):
        result = resolve_overlaps(crowded, "anchor", ResolveOptions())
        assert result["card-0-0"] is crowded["card-0-0"]
        assert list(result) == list(crowded)

    def test_idempotent(self, crowded):
        once = resolve_overlaps(crowded, "anchor", ResolveOptions())
        twice = resolve_overlaps(once, "anchor", ResolveOptions())
        assert twice == once
        assert all(twice[k] is once[k] for k in once)

    def test_insertion_order_does_not_matter(self, crowded):
        reversed_layout = dict(reversed(list(crowded.items())))
        a = resolve_overlaps(crowded, "anchor", ResolveOptions())
        b = resolve_overlaps(reversed_layout, "anchor", ResolveOptions())
        assert {k: (v.x, v.y) for k, v in a.items()} == {k: (v.x, v.y) for k, v in b.items()}


class TestChains:
    def test_row_pressed_against_anchor_settles_within_default_budget(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 80, 0), make_card("c", 190, 0))
        result = resolve_overlaps(layout, "a", NO_SNAP)
        assert result["a"] is layout["a"]
        assert (result["b"].x, result["c"].x) == (100, 200)
        assert find_overlaps(result) == []

    def test_longer_row_with_default_options(self):
        layout = layout_of(
            make_card("a", 0, 0), make_card("b", 80, 0), make_card("c", 190, 0), make_card("d", 300, 0),
        )
        result = resolve_overlaps(layout, "a", ResolveOptions())
        assert [result[k].x for k in "bcd"] == [150, 300, 450]
        assert find_overlaps(result, padding=50) == []

    def test_exhausted_budget_returns_best_effort(self):
        # the anchor sorts last, so b only reaches c on the second pass
        layout = layout_of(make_card("z", 0, 0), make_card("b", 80, 0), make_card("c", 190, 0))
        result = resolve_overlaps(layout, "z", ResolveOptions(max_iterations=1, snap_to_grid=0, padding=0))
        assert result["z"] is layout["z"]
        assert (result["b"].x, result["c"].x) == (100, 190)
        assert find_overlaps(result) == [("b", "c")]

        settled = resolve_overlaps(layout, "z", NO_SNAP)
        assert (settled["b"].x, settled["c"].x) == (100, 200)
        assert find_overlaps(settled) == []


class TestFindOverlaps:
    def test_lists_pairs_in_sorted_order(self):
        layout = layout_of(make_card("c", 50, 0), make_card("a", 0, 0), make_card("b", 500, 500))
        assert find_overlaps(layout) == [("a", "c")]

    def test_padding_widens_the_test(self):
        layout = layout_of(make_card("a", 0, 0), make_card("b", 120, 0))
        assert find_overlaps(layout) == []
        assert find_overlaps(layout, padding=50) == [("a", "b")]
