"""Tests for list selection and paging helpers."""

import pytest

from feather_player.ui.blessed.helpers.scrolling import (
    clamp_selection,
    move_selection,
    page_bounds,
    turn_page,
)


class TestMoveSelection:
    def test_moves_within_list(self):
        assert move_selection(3, 1, 10) == 4
        assert move_selection(3, -1, 10) == 2

    def test_stops_at_edges(self):
        assert move_selection(9, 1, 10) == 9
        assert move_selection(0, -1, 10) == 0

    def test_empty_list(self):
        assert move_selection(0, 1, 0) == 0


class TestClampSelection:
    @pytest.mark.parametrize(
        "selection, total, expected",
        [(15, 10, 9), (5, 0, 0), (-2, 4, 0), (2, 4, 2)],
    )
    def test_clamp(self, selection, total, expected):
        assert clamp_selection(selection, total) == expected


class TestPaging:
    def test_bounds_of_middle_page(self):
        assert page_bounds(25, 45, 20) == (20, 40, 1, 3)

    def test_bounds_of_last_partial_page(self):
        assert page_bounds(44, 45, 20) == (40, 45, 2, 3)

    def test_empty_list_has_one_page(self):
        assert page_bounds(0, 0, 20) == (0, 0, 0, 1)

    def test_turn_page_forward_and_back(self):
        assert turn_page(5, 1, 45, 20) == 20
        assert turn_page(25, -1, 45, 20) == 0

    def test_turn_page_stops_at_ends(self):
        assert turn_page(44, 1, 45, 20) == 40
        assert turn_page(3, -1, 45, 20) == 0
        assert turn_page(0, 1, 0, 20) == 0
