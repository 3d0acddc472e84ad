"""Tests for move legality and combat resolution."""

from __future__ import annotations

import pytest

from flank_ai.game.board import Board, Piece
from flank_ai.game.rules import (
    Combat,
    Rejection,
    apply_move,
    pivot,
    pivot_direction,
    resolve_combat,
    step,
    step_to,
)
from flank_ai.game.types import Direction, Pivot, Step, Turn


def _duel(attacker: Piece, defender: Piece) -> Board:
    """Helper: player 0 owns the defender, player 1 owns the attacker."""
    return Board(size=8, pieces=((defender,), (attacker,)))


class TestPivot:
    @pytest.mark.parametrize("turn", list(Turn))
    def test_four_pivots_return_to_start(self, turn: Turn) -> None:
        for start in Direction:
            facing = start
            for _ in range(4):
                facing = pivot_direction(facing, turn)
            assert facing == start

    def test_pivot_left_from_up(self) -> None:
        outcome = pivot(Board(), 1, 0, Turn.LEFT)
        assert outcome.accepted
        assert outcome.board.pieces_of(1)[0] == Piece(2, 7, Direction.LEFT)

    def test_pivot_right_from_up(self) -> None:
        outcome = pivot(Board(), 1, 0, Turn.RIGHT)
        assert outcome.board.pieces_of(1)[0].facing == Direction.RIGHT

    def test_pivot_does_not_move_piece(self) -> None:
        outcome = pivot(Board(), 0, 2, Turn.LEFT)
        piece = outcome.board.pieces_of(0)[2]
        assert (piece.x, piece.y) == (4, 0)

    def test_out_of_range_index_rejected(self) -> None:
        board = Board()
        outcome = pivot(board, 0, 4, Turn.LEFT)
        assert outcome.rejection == Rejection.PIECE_OUT_OF_RANGE
        assert outcome.board is board

    def test_negative_index_rejected(self) -> None:
        assert pivot(Board(), 0, -1, Turn.LEFT).rejection == Rejection.PIECE_OUT_OF_RANGE


class TestStep:
    def test_scenario_a_step_to_empty_square(self) -> None:
        """Piece at (3,7) facing UP steps to (3,6)."""
        outcome = step(Board(), 1, 1, 3, 6)
        assert outcome.accepted
        assert outcome.combat is None
        assert outcome.board.pieces_of(1)[1] == Piece(3, 6, Direction.UP)

    @pytest.mark.parametrize(
        ("tx", "ty"),
        [(4, 6), (2, 6), (3, 7), (3, 5), (5, 7)],
    )
    def test_non_unit_steps_rejected(self, tx: int, ty: int) -> None:
        """Diagonal, zero-distance and long steps are never accepted."""
        board = Board()
        outcome = step(board, 1, 1, tx, ty)
        assert outcome.rejection == Rejection.NOT_ADJACENT
        assert outcome.board is board

    def test_off_board_rejected(self) -> None:
        outcome = step(Board(), 1, 0, 2, 8)
        assert outcome.rejection == Rejection.OUT_OF_BOUNDS

    def test_own_piece_rejected(self) -> None:
        board = Board()
        outcome = step(board, 0, 0, 3, 0)
        assert outcome.rejection == Rejection.OWN_PIECE
        assert outcome.board == board

    def test_out_of_range_index_rejected(self) -> None:
        assert step(Board(), 0, 7, 0, 0).rejection == Rejection.PIECE_OUT_OF_RANGE


class TestCombatScenarios:
    def test_scenario_b_nose_to_nose_destroys_attacker(self) -> None:
        board = _duel(attacker=Piece(3, 7, Direction.UP), defender=Piece(3, 6, Direction.DOWN))
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.combat == Combat.ATTACKER_DESTROYED
        assert outcome.board.pieces_of(1) == ()
        assert outcome.board.pieces_of(0) == (Piece(3, 6, Direction.DOWN),)

    def test_scenario_c_nose_to_body_destroys_defender(self) -> None:
        board = _duel(attacker=Piece(3, 7, Direction.UP), defender=Piece(3, 6, Direction.LEFT))
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.combat == Combat.DEFENDER_DESTROYED
        assert outcome.board.pieces_of(0) == ()
        assert outcome.board.pieces_of(1) == (Piece(3, 6, Direction.UP),)

    def test_attack_from_behind_is_a_flank(self) -> None:
        board = _duel(attacker=Piece(3, 7, Direction.UP), defender=Piece(3, 6, Direction.UP))
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.combat == Combat.DEFENDER_DESTROYED

    def test_body_to_body_destroys_attacker(self) -> None:
        board = _duel(attacker=Piece(3, 7, Direction.LEFT), defender=Piece(3, 6, Direction.LEFT))
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.combat == Combat.ATTACKER_DESTROYED
        assert outcome.board.pieces_of(0) == (Piece(3, 6, Direction.LEFT),)

    def test_body_to_nose_destroys_attacker(self) -> None:
        board = _duel(attacker=Piece(3, 7, Direction.RIGHT), defender=Piece(3, 6, Direction.DOWN))
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.combat == Combat.ATTACKER_DESTROYED

    def test_attacker_removal_shifts_later_indices(self) -> None:
        board = Board(
            size=8,
            pieces=(
                (Piece(3, 6, Direction.DOWN),),
                (Piece(3, 7, Direction.UP), Piece(6, 7, Direction.UP)),
            ),
        )
        outcome = step(board, 1, 0, 3, 6)
        assert outcome.board.pieces_of(1) == (Piece(6, 7, Direction.UP),)


class TestResolveCombat:
    @pytest.mark.parametrize("attacker", list(Direction))
    @pytest.mark.parametrize("defender", list(Direction))
    @pytest.mark.parametrize("approach", list(Direction))
    def test_only_nose_on_body_flanks(
        self, attacker: Direction, defender: Direction, approach: Direction
    ) -> None:
        dx, dy = approach.vector
        expected = (
            Combat.DEFENDER_DESTROYED
            if attacker == approach and defender != approach.opposite
            else Combat.ATTACKER_DESTROYED
        )
        assert resolve_combat(attacker, defender, dx, dy) == expected


    @pytest.mark.parametrize(("dx", "dy"), [(0, 0), (1, 1), (0, -2)])
    def test_non_unit_delta_never_flanks(self, dx: int, dy: int) -> None:
        assert resolve_combat(Direction.UP, Direction.LEFT, dx, dy) == Combat.ATTACKER_DESTROYED


class TestApplyMove:
    def test_dispatch_pivot(self) -> None:
        outcome = apply_move(Board(), 0, Pivot(0, Turn.LEFT))
        assert outcome.board.pieces_of(0)[0].facing == Direction.RIGHT

    def test_dispatch_step(self) -> None:
        outcome = apply_move(Board(), 0, Step(0, 0, 1))
        assert outcome.board.pieces_of(0)[0] == Piece(2, 1, Direction.DOWN)

    def test_diagonal_record_rejected(self) -> None:
        assert apply_move(Board(), 0, Step(0, 1, 1)).rejection == Rejection.NOT_ADJACENT

    def test_step_record_out_of_range(self) -> None:
        assert apply_move(Board(), 0, Step(9, 0, 1)).rejection == Rejection.PIECE_OUT_OF_RANGE

    def test_step_to(self) -> None:
        assert step_to(Board(), 1, 1, 3, 6) == Step(1, 0, -1)
        assert step_to(Board(), 1, 1, 4, 6) is None
        assert step_to(Board(), 1, 9, 3, 6) is None
