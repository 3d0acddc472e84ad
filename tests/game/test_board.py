"""Tests for Board data structure."""

import pytest

from flank_ai.game.board import Board, Piece, default_pieces
from flank_ai.game.types import Direction, GameConfig


class TestInitialBoard:
    def test_size(self) -> None:
        assert Board().size == 8

    def test_player0_top_row_facing_down(self) -> None:
        board = Board()
        assert board.pieces_of(0) == tuple(Piece(x, 0, Direction.DOWN) for x in (2, 3, 4, 5))

    def test_player1_bottom_row_facing_up(self) -> None:
        board = Board()
        assert board.pieces_of(1) == tuple(Piece(x, 7, Direction.UP) for x in (2, 3, 4, 5))

    def test_initial_matches_default_config(self) -> None:
        assert Board.initial(GameConfig()) == Board()

    def test_smaller_board_centres_pieces(self) -> None:
        board = Board.initial(GameConfig(board_size=6, pieces_per_player=2))
        assert [p.x for p in board.pieces_of(0)] == [2, 3]
        assert all(p.y == 5 for p in board.pieces_of(1))

    def test_no_layout_for_three_players(self) -> None:
        with pytest.raises(ValueError):
            default_pieces(GameConfig(num_players=3))


class TestQueries:
    def test_occupant(self) -> None:
        board = Board()
        assert board.occupant(3, 0) == (0, 1)
        assert board.occupant(5, 7) == (1, 3)
        assert board.occupant(0, 0) is None

    def test_piece_at(self) -> None:
        board = Board()
        assert board.piece_at(2, 7) == Piece(2, 7, Direction.UP)
        assert board.piece_at(4, 4) is None

    def test_unknown_player_has_no_pieces(self) -> None:
        assert Board().pieces_of(5) == ()

    def test_alive_players(self) -> None:
        board = Board().with_pieces(0, ())
        assert board.alive_players() == [1]


class TestImmutability:
    def test_replace_returns_new_board(self) -> None:
        board = Board()
        new = board.replace_piece(0, 0, Piece(2, 1, Direction.DOWN))
        assert board.pieces_of(0)[0] == Piece(2, 0, Direction.DOWN)
        assert new.pieces_of(0)[0] == Piece(2, 1, Direction.DOWN)

    def test_remove_compacts_list(self) -> None:
        board = Board().remove_piece(1, 1)
        assert len(board.pieces_of(1)) == 3
        assert board.pieces_of(1)[1] == Piece(4, 7, Direction.UP)
        assert len(Board().pieces_of(1)) == 4

    def test_boards_are_hashable(self) -> None:
        assert hash(Board()) == hash(Board())


class TestSnapshotValidation:
    def test_valid_snapshot(self) -> None:
        pieces = tuple(Piece(x, 2, Direction.DOWN) for x in (2, 3, 4, 5))
        assert Board().is_valid_snapshot(0, pieces)

    def test_overlap_with_opponent(self) -> None:
        pieces = (Piece(2, 7, Direction.DOWN),)
        assert not Board().is_valid_snapshot(0, pieces)

    def test_duplicate_square(self) -> None:
        pieces = (Piece(1, 1, Direction.DOWN), Piece(1, 1, Direction.UP))
        assert not Board().is_valid_snapshot(0, pieces)

    def test_out_of_bounds(self) -> None:
        pieces = (Piece(8, 0, Direction.DOWN),)
        assert not Board().is_valid_snapshot(0, pieces)

    def test_unknown_player(self) -> None:
        assert not Board().is_valid_snapshot(2, ())
