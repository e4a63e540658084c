"""
Unit tests for seat grid geometry.
"""

import pytest

from models.layout import SectionDocument
from models.seat_grid import compute_seat_grid, Rect, SEAT_ASPECT_RATIO


class TestRect:
    def test_edges(self):
        rect = Rect(2, 3, 10, 5)
        assert rect.right == 12
        assert rect.bottom == 8
        assert rect.contains(2, 3)
        assert rect.contains(12, 8)
        assert not rect.contains(13, 4)


class TestComputeSeatGrid:
    """Tests for compute_seat_grid."""

    def test_unlabeled_rows(self):
        section = SectionDocument(
            id="s", grid=[["1", "2", "3", "4"], ["5", "6"]], seat_size=10, gap_size=2
        )
        grid = compute_seat_grid(section)

        assert grid.seat_height == 10
        assert grid.seat_width == 10 * SEAT_ASPECT_RATIO
        assert len(grid.seats) == 6
        assert grid.width == 126
        assert grid.height == 22

        second_row = [cell for cell in grid.seats if cell.row == 1]
        assert second_row[0].rect == Rect(0, 12, 30, 10)
        assert second_row[1].rect == Rect(32, 12, 30, 10)

    def test_empty_cells_keep_their_slot(self):
        section = SectionDocument(id="s", grid=[["1", None, "", "2"]], seat_size=10, gap_size=2)
        grid = compute_seat_grid(section)

        assert [cell.seat_id for cell in grid.seats] == ["1", "2"]
        assert grid.seats[1].rect.x == 96
        assert grid.seats[1].column == 3
        assert grid.width == 126

    def test_row_labels_take_a_column(self):
        section = SectionDocument(
            id="s", grid=[["1", "2"], ["3"]], row_labels=["A"], seat_size=10, gap_size=2
        )
        grid = compute_seat_grid(section)

        assert len(grid.labels) == 1
        assert grid.labels[0].text == "A"
        assert grid.labels[0].rect == Rect(0, 0, 30, 10)

        first_row = [cell for cell in grid.seats if cell.row == 0]
        assert first_row[0].rect.x == 32
        # Unlabeled second row starts at the left edge
        assert [cell for cell in grid.seats if cell.row == 1][0].rect.x == 0
        assert grid.width == 94

    def test_zoom_scales_everything(self):
        section = SectionDocument(
            id="s", grid=[["1", "2", "3", "4"], ["5", "6"]], seat_size=10, gap_size=2
        )
        grid = compute_seat_grid(section, zoom=2)

        assert grid.seat_height == 20
        assert grid.width == 252
        assert grid.height == 44

    def test_default_sizes(self):
        grid = compute_seat_grid(SectionDocument(id="s", grid=[["1"]]))
        assert grid.seat_height == 36
        assert grid.width == 108
        assert grid.height == 36

    def test_empty_section(self):
        grid = compute_seat_grid(SectionDocument(id="s"))
        assert grid.seats == []
        assert grid.width == 0
        assert grid.height == 0

    def test_seat_at(self):
        section = SectionDocument(id="s", grid=[["1", "2"]], seat_size=10, gap_size=2)
        grid = compute_seat_grid(section)

        assert grid.seat_at(5, 5).seat_id == "1"
        assert grid.seat_at(40, 5).seat_id == "2"
        assert grid.seat_at(31, 5) is None
        assert grid.seat_at(5, 50) is None

    @pytest.mark.parametrize("zoom", [0.1, 0.4, 2.5])
    def test_width_proportional_to_zoom(self, zoom):
        section = SectionDocument(id="s", grid=[["1", "2", "3"]], seat_size=30, gap_size=6)
        base = compute_seat_grid(section, 1.0)
        scaled = compute_seat_grid(section, zoom)
        assert scaled.width == pytest.approx(base.width * zoom)
        assert scaled.height == pytest.approx(base.height * zoom)
