"""Tests for board display."""

from flank_ai.game.board import Board, Piece
from flank_ai.game.display import board_to_str, piece_to_str
from flank_ai.game.types import Direction


def test_piece_to_str() -> None:
    assert piece_to_str(0, Direction.DOWN) == "0v"
    assert piece_to_str(1, Direction.UP) == "1^"
    assert piece_to_str(1, Direction.LEFT) == "1<"


def test_initial_board_rows() -> None:
    lines = board_to_str(Board()).splitlines()
    assert len(lines) == 9
    assert lines[0].split() == [str(x) for x in range(8)]
    assert lines[1].split() == ["0", ".", ".", "0v", "0v", "0v", "0v", ".", "."]
    assert lines[8].split() == ["7", ".", ".", "1^", "1^", "1^", "1^", ".", "."]


def test_empty_rows() -> None:
    lines = board_to_str(Board()).splitlines()
    for line in lines[2:8]:
        assert line.split()[1:] == ["."] * 8


def test_facing_shown() -> None:
    board = Board(size=4, pieces=((Piece(1, 2, Direction.RIGHT),), ()))
    assert "0>" in board_to_str(board).splitlines()[3]
