"""Tests for textwfc.domain.types."""

import pytest

from textwfc.domain import Direction


class TestDirection:
    """Tests for Direction."""

    def test_offsets_are_screen_coordinates(self):
        assert Direction.UP.offset == (0, -1)
        assert Direction.DOWN.offset == (0, 1)
        assert Direction.LEFT.offset == (-1, 0)
        assert Direction.RIGHT.offset == (1, 0)
        assert (Direction.RIGHT.dx, Direction.RIGHT.dy) == (1, 0)

    def test_opposite(self):
        assert Direction.UP.opposite() == Direction.DOWN
        assert Direction.LEFT.opposite() == Direction.RIGHT
        for direction in Direction:
            assert direction.opposite().opposite() == direction

    def test_opposite_offsets_cancel(self):
        for direction in Direction:
            ox, oy = direction.opposite().offset
            assert (direction.dx + ox, direction.dy + oy) == (0, 0)

    def test_iteration_order(self):
        assert list(Direction) == [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]

    @pytest.mark.parametrize("text,expected", [
        ("up", Direction.UP),
        ("LEFT", Direction.LEFT),
        (" down ", Direction.DOWN),
        (Direction.RIGHT, Direction.RIGHT),
    ])
    def test_parse(self, text, expected):
        assert Direction.parse(text) == expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Direction.parse("north")
