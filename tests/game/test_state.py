"""Tests for FlankState."""

from __future__ import annotations

from flank_ai.game.board import Board, Piece
from flank_ai.game.protocol import Enumerator, GameState
from flank_ai.game.rules import Rejection
from flank_ai.game.state import (
    FlankState,
    GameResult,
    Outcome,
    SequenceEnumerator,
    TurnState,
    apply_sequence,
)
from flank_ai.game.types import Direction, GameConfig, Pivot, Step, Turn


def _make_state(*pieces: tuple[Piece, ...], mover: int = 0, moves_used: int = 0) -> FlankState:
    """Helper: create a state from per-player piece tuples."""
    order = tuple(range(len(pieces)))
    board = Board(size=8, pieces=tuple(pieces))
    return FlankState(board=board, turn=TurnState(mover=mover, moves_used=moves_used, order=order))


class TestProtocolCompliance:
    def test_implements_game_state(self) -> None:
        assert isinstance(FlankState(), GameState)

    def test_enumerator_capability(self) -> None:
        assert isinstance(SequenceEnumerator(), Enumerator)


class TestInitialState:
    def test_first_player_starts(self) -> None:
        state = FlankState.new_game()
        assert state.current_player == 0
        assert state.turn.moves_used == 0
        assert state.turn.move_budget == 3

    def test_default_equals_new_game(self) -> None:
        assert FlankState() == FlankState.new_game()

    def test_not_terminal(self) -> None:
        state = FlankState()
        assert not state.is_terminal
        assert state.result == GameResult(Outcome.IN_PROGRESS)
        assert state.winner is None

    def test_custom_budget(self) -> None:
        state = FlankState.new_game(GameConfig(move_budget=2))
        assert state.turn.moves_left == 2


class TestMoveBudget:
    def test_move_increments_counter(self) -> None:
        state, rejection = FlankState().apply_move(Pivot(0, Turn.LEFT))
        assert rejection is None
        assert state.turn.moves_used == 1
        assert state.current_player == 0

    def test_budget_forces_turn_transition(self) -> None:
        state = FlankState()
        for _ in range(3):
            assert state.turn.moves_used < state.turn.move_budget
            state, _ = state.apply_move(Pivot(0, Turn.LEFT))
        assert state.current_player == 1
        assert state.turn.moves_used == 0
        assert state.turn_count == 1

    def test_rejected_move_does_not_count(self) -> None:
        state = FlankState()
        new_state, rejection = state.apply_move(Step(0, 1, 0))
        assert rejection == Rejection.OWN_PIECE
        assert new_state is state

    def test_end_turn_early(self) -> None:
        state, _ = FlankState().apply_move(Step(0, 0, 1))
        state = state.end_turn()
        assert state.current_player == 1
        assert state.turn.moves_used == 0

    def test_pass_with_zero_moves(self) -> None:
        state = FlankState().end_turn()
        assert state.current_player == 1
        assert state.board == Board()

    def test_apply_does_not_mutate(self) -> None:
        state = FlankState()
        state.apply_move(Step(0, 0, 1))
        assert state.board == Board()
        assert state.turn.moves_used == 0


class TestTerminalConditions:
    def test_sole_survivor_wins(self) -> None:
        state = _make_state((Piece(0, 0, Direction.DOWN),), ())
        assert state.result == GameResult(Outcome.WINNER, 0)
        assert state.winner == 0
        assert state.is_terminal

    def test_nobody_left_is_draw(self) -> None:
        state = _make_state((), ())
        assert state.result.outcome == Outcome.DRAW
        assert state.winner is None

    def test_winning_flank_ends_game(self) -> None:
        state = _make_state((Piece(3, 5, Direction.DOWN),), (Piece(3, 6, Direction.LEFT),))
        state, _ = state.apply_move(Step(0, 0, 1))
        assert state.winner == 0
        # 終局後は手番も手数も動かない
        assert state.current_player == 0
        assert state.legal_moves() == []

    def test_moves_rejected_after_game_over(self) -> None:
        state = _make_state((Piece(0, 0, Direction.DOWN),), ())
        new_state, rejection = state.apply_move(Pivot(0, Turn.LEFT))
        assert rejection == Rejection.GAME_OVER
        assert new_state is state

    def test_end_turn_after_game_over_is_noop(self) -> None:
        state = _make_state((Piece(0, 0, Direction.DOWN),), ())
        assert state.end_turn() is state


class TestTurnOrder:
    def test_eliminated_player_is_skipped(self) -> None:
        state = _make_state(
            (Piece(0, 0, Direction.DOWN),),
            (),
            (Piece(7, 7, Direction.UP),),
        )
        assert state.end_turn().current_player == 2

    def test_order_wraps_around(self) -> None:
        state = _make_state(
            (Piece(0, 0, Direction.DOWN),),
            (Piece(4, 4, Direction.UP),),
            (Piece(7, 7, Direction.UP),),
            mover=2,
        )
        assert state.end_turn().current_player == 0

    def test_mover_losing_last_piece_passes_turn(self) -> None:
        state = _make_state(
            (Piece(3, 5, Direction.DOWN),),
            (Piece(3, 6, Direction.UP),),
            (Piece(7, 7, Direction.UP),),
        )
        state, _ = state.apply_move(Step(0, 0, 1))  # nose to nose: attacker destroyed
        assert not state.is_terminal
        assert state.current_player == 1
        assert state.turn.moves_used == 0


class TestApplySequence:
    def test_sequence_ends_turn(self) -> None:
        state = FlankState().apply_sequence((Step(1, 0, 1),))
        assert state.current_player == 1
        assert state.board.pieces_of(0)[1] == Piece(3, 1, Direction.DOWN)

    def test_empty_sequence_is_pass(self) -> None:
        state = FlankState().apply_sequence(())
        assert state.current_player == 1
        assert state.board == Board()

    def test_invalid_moves_skipped(self) -> None:
        state = FlankState().apply_sequence((Step(0, 1, 1), Step(0, 0, 1)))
        assert state.board.pieces_of(0)[0] == Piece(2, 1, Direction.DOWN)
        assert state.current_player == 1

    def test_moves_beyond_budget_ignored(self) -> None:
        seq = (Pivot(0, Turn.LEFT),) * 4
        state = FlankState().apply_sequence(seq)
        # 3 left turns from DOWN: RIGHT, UP, LEFT
        assert state.board.pieces_of(0)[0].facing == Direction.LEFT
        assert state.current_player == 1
        assert state.turn.moves_used == 0

    def test_module_function_requires_mover(self) -> None:
        state = FlankState()
        assert apply_sequence(state, 1, (Step(0, 0, -1),)) is state
        assert apply_sequence(state, 0, ()).current_player == 1


class TestLegalSequences:
    def test_respects_moves_left(self) -> None:
        state, _ = FlankState().apply_move(Pivot(0, Turn.LEFT))
        state, _ = state.apply_move(Pivot(0, Turn.LEFT))
        assert max(len(s) for s in state.legal_sequences(max_depth=3)) == 1

    def test_terminal_returns_pass(self) -> None:
        state = _make_state((Piece(0, 0, Direction.DOWN),), ())
        assert state.legal_sequences() == [()]


class TestSnapshot:
    def test_with_turn_start(self) -> None:
        pieces = tuple(Piece(x, 2, Direction.DOWN) for x in (2, 3, 4, 5))
        state = FlankState().with_turn_start(0, pieces)
        assert state is not None
        assert state.board.pieces_of(0) == pieces

    def test_invalid_snapshot(self) -> None:
        assert FlankState().with_turn_start(0, (Piece(2, 7, Direction.DOWN),)) is None


class TestTensorPlanes:
    def test_shape(self) -> None:
        planes = FlankState().to_tensor_planes()
        assert planes.shape == (9, 8, 8)

    def test_own_pieces_first(self) -> None:
        planes = FlankState().to_tensor_planes()
        assert planes[Direction.DOWN.value, 0, 2] == 1.0
        assert planes[4 + Direction.UP.value, 7, 2] == 1.0
        assert planes[:4].sum().item() == 4.0

    def test_moves_left_plane(self) -> None:
        state, _ = FlankState().apply_move(Pivot(0, Turn.LEFT))
        planes = state.to_tensor_planes()
        assert abs(planes[8, 0, 0].item() - 2 / 3) < 1e-6
