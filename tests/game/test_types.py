"""Tests for types and constants."""

import pytest

from flank_ai.game.types import (
    BOARD_SIZE,
    LEFT_TURNS,
    MOVE_BUDGET,
    RIGHT_TURNS,
    Direction,
    Step,
    forward_direction,
)


def test_defaults() -> None:
    assert BOARD_SIZE == 8
    assert MOVE_BUDGET == 3


def test_left_turn_cycle() -> None:
    assert LEFT_TURNS[Direction.UP] == Direction.LEFT
    assert LEFT_TURNS[Direction.LEFT] == Direction.DOWN
    assert LEFT_TURNS[Direction.DOWN] == Direction.RIGHT
    assert LEFT_TURNS[Direction.RIGHT] == Direction.UP


def test_right_turn_is_inverse_of_left() -> None:
    for d in Direction:
        assert RIGHT_TURNS[LEFT_TURNS[d]] == d


def test_opposites() -> None:
    for d in Direction:
        assert d.opposite.opposite == d
        dx, dy = d.vector
        assert d.opposite.vector == (-dx, -dy)


def test_from_vector() -> None:
    assert Direction.from_vector(0, -1) == Direction.UP
    assert Direction.from_vector(1, 0) == Direction.RIGHT
    assert Direction.from_vector(1, 1) is None
    assert Direction.from_vector(0, 0) is None


@pytest.mark.parametrize(
    ("dx", "dy", "expected"),
    [(0, 1, True), (-1, 0, True), (1, 1, False), (0, 0, False), (0, 2, False)],
)
def test_step_is_unit(dx: int, dy: int, expected: bool) -> None:
    assert Step(0, dx, dy).is_unit is expected


def test_forward_direction() -> None:
    # player 0 starts on the top row, player 1 on the bottom row
    assert forward_direction(0) == Direction.DOWN
    assert forward_direction(1) == Direction.UP
