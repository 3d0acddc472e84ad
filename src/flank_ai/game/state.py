"""GameState implementation for Flank.

Flank の対局状態（ゲームツリーのノード）。
Board クラスが盤面データを持ち、FlankState が手数管理・手番・勝敗判定を担当する。

1ターンは最大 move_budget（3）手。手数を使い切ると自動的に次のプレイヤーへ手番が移る。
途中でターンを終えること（パス）もできる。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, unique

import torch

from flank_ai.game.board import Board, Piece
from flank_ai.game.moves import DEFAULT_SEQUENCE_DEPTH, atomic_moves, enumerate_sequences
from flank_ai.game.rules import MoveOutcome, Rejection
from flank_ai.game.rules import apply_move as _apply_move
from flank_ai.game.types import (
    DEFAULT_GAME_CONFIG,
    MOVE_BUDGET,
    Direction,
    GameConfig,
    Move,
    TurnSequence,
)


@unique
class Outcome(Enum):
    IN_PROGRESS = "in_progress"
    WINNER = "winner"
    DRAW = "draw"


@dataclass(frozen=True)
class GameResult:
    """Winner(player) | Draw | InProgress.

    対局結果。winner は outcome が WINNER の場合のみ設定される。
    """

    outcome: Outcome
    winner: int | None = None

    @classmethod
    def from_board(cls, board: Board) -> GameResult:
        """残りブロックから結果を判定する。

        ちょうど1人だけブロックが残っていればその勝ち、誰も残っていなければ引き分け。
        """
        alive = board.alive_players()
        if len(alive) == 1:
            return cls(Outcome.WINNER, alive[0])
        if not alive:
            return cls(Outcome.DRAW)
        return cls(Outcome.IN_PROGRESS)


@dataclass(frozen=True)
class TurnState:
    """Per-turn counters.

    mover:       現在の手番プレイヤー
    moves_used:  このターンで使った手数（0 ≤ moves_used < move_budget）
    move_budget: 1ターンの手数上限
    order:       手番の順序
    """

    mover: int = 0
    moves_used: int = 0
    move_budget: int = MOVE_BUDGET
    order: tuple[int, ...] = (0, 1)

    @property
    def moves_left(self) -> int:
        return self.move_budget - self.moves_used


def _initial_board() -> Board:
    return Board.initial(DEFAULT_GAME_CONFIG)


@dataclass(frozen=True)  # イミュータブル: apply_move() は新しいオブジェクトを返す
class FlankState:
    """Immutable game state for Flank.

    Flank の対局状態。GameState プロトコルを実装する。

    Terminal conditions（終局条件）:
    1. ブロックが残っているプレイヤーがちょうど1人 → そのプレイヤーの勝ち
    2. 誰もブロックを持っていない → 引き分け
    """

    board: Board = field(default_factory=_initial_board)
    turn: TurnState = field(default_factory=TurnState)
    _turn_count: int = 0  # 終了したターン数（記録用）

    @classmethod
    def new_game(cls, config: GameConfig = DEFAULT_GAME_CONFIG) -> FlankState:
        """設定から初期局面を作る。手番は order の先頭、手数は0から。"""
        order = tuple(range(config.num_players))
        return cls(
            board=Board.initial(config),
            turn=TurnState(mover=order[0], moves_used=0, move_budget=config.move_budget, order=order),
        )

    @property
    def current_player(self) -> int:
        return self.turn.mover

    @property
    def turn_count(self) -> int:
        return self._turn_count

    @property
    def result(self) -> GameResult:
        return GameResult.from_board(self.board)

    @property
    def is_terminal(self) -> bool:
        """ゲームが終局ならば True。"""
        return self.result.outcome != Outcome.IN_PROGRESS

    @property
    def winner(self) -> int | None:
        """勝者を返す。対局中または引き分けは None。"""
        return self.result.winner

    @property
    def players(self) -> tuple[int, ...]:
        return self.turn.order

    def alive_players(self) -> list[int]:
        return [p for p in self.turn.order if self.board.pieces_of(p)]

    def legal_moves(self) -> list[Move]:
        """現在の手番プレイヤーのアトミックな手のリストを返す。"""
        if self.is_terminal:
            return []
        return atomic_moves(self.board, self.turn.mover)

    def legal_sequences(self, max_depth: int = DEFAULT_SEQUENCE_DEPTH) -> list[TurnSequence]:
        """残り手数の範囲でターンの手順列を列挙する（空の手順 = パスを含む）。"""
        if self.is_terminal:
            return [()]
        return enumerate_sequences(
            self.board,
            self.turn.mover,
            max_depth=max_depth,
            move_budget=self.turn.moves_left,
        )

    def apply_move(self, move: Move) -> tuple[FlankState, Rejection | None]:
        """Apply one atomic move for the current player.

        手を適用して新しい対局状態を返す。元の状態は変更しない。
        手数を使い切ったら自動的に次のプレイヤーへ手番が移る。
        却下された場合は (self, 却下理由) を返す。
        """
        state, outcome = self.apply_move_outcome(move)
        return state, outcome.rejection

    def apply_move_outcome(self, move: Move) -> tuple[FlankState, MoveOutcome]:
        """apply_move() と同じだが、戦闘結果を含む MoveOutcome を返す。"""
        if self.is_terminal:
            return self, MoveOutcome(self.board, Rejection.GAME_OVER)

        mover = self.turn.mover
        outcome = _apply_move(self.board, mover, move)
        if not outcome.accepted:
            return self, outcome

        moved = replace(
            self,
            board=outcome.board,
            turn=replace(self.turn, moves_used=self.turn.moves_used + 1),
        )
        # 終局したらそれ以上の手番移動はしない
        if moved.is_terminal:
            return moved, outcome
        # 手数を使い切った、または手番プレイヤーのブロックが全滅した → 手番交代
        if moved.turn.moves_used >= moved.turn.move_budget or not moved.board.pieces_of(mover):
            moved = moved.end_turn()
        return moved, outcome

    def end_turn(self) -> FlankState:
        """End the current turn and pass to the next alive player.

        ターンを終了し、order の中でブロックが残っている次のプレイヤーに手番を渡す。
        ブロックが0個のプレイヤーは飛ばす。
        """
        if self.is_terminal:
            return self
        return replace(
            self,
            turn=replace(self.turn, mover=self._next_mover(), moves_used=0),
            _turn_count=self._turn_count + 1,
        )

    def _next_mover(self) -> int:
        order = self.turn.order
        start = order.index(self.turn.mover) if self.turn.mover in order else -1
        for offset in range(1, len(order) + 1):
            candidate = order[(start + offset) % len(order)]
            if self.board.pieces_of(candidate):
                return candidate
        return self.turn.mover

    def with_turn_start(self, player: int, pieces: tuple[Piece, ...]) -> FlankState | None:
        """Reset player's pieces to a turn-start snapshot.

        プレイヤーの駒列をターン開始時のスナップショットに戻した状態を返す。
        スナップショットが盤面の不変条件を破る場合は None。
        """
        if not self.board.is_valid_snapshot(player, pieces):
            return None
        return replace(
            self,
            board=self.board.with_pieces(player, pieces),
            turn=replace(self.turn, moves_used=0),
        )

    def apply_sequence(self, sequence: TurnSequence) -> FlankState:
        """Replay a turn sequence for the current player and end the turn.

        ターンの手順列を1手ずつ再生してターンを終える。
        却下された手は飛ばして残りを続ける（手順全体は中断しない）。
        手数を使い切った時点で手番が移るので、それ以降の手は適用しない。
        """
        turn_count = self._turn_count
        state = self
        for move in sequence:
            if state.is_terminal or state._turn_count != turn_count:
                break
            state, _ = state.apply_move(move)
        if state._turn_count == turn_count:
            state = state.end_turn()  # 終局済みなら end_turn() は何もしない
        return state

    def to_tensor_planes(self) -> torch.Tensor:
        """Convert to tensor planes for learning agents.

        局面をテンソルに変換する。常に「現プレイヤーの視点」で作る。

        Planes（チャンネル）の構成（合計9チャンネル）:
        ch.0-3: 現プレイヤーのブロック（向き UP, DOWN, LEFT, RIGHT）
        ch.4-7: 相手プレイヤーのブロック（同上）
        ch.8:   このターンの残り手数の割合（全マス同じ値）
        """
        size = self.board.size
        planes = torch.zeros(9, size, size)
        cp = self.turn.mover

        for player, pieces in enumerate(self.board.pieces):
            offset = 0 if player == cp else len(Direction)
            for piece in pieces:
                planes[offset + piece.facing.value, piece.y, piece.x] = 1.0

        planes[8, :, :] = self.turn.moves_left / self.turn.move_budget
        return planes


@dataclass(frozen=True)
class SequenceEnumerator:
    """Enumerator capability backed by the breadth-first sequence generator.

    max_depth: 列挙する手順の最大長（move_budget で頭打ち）
    """

    max_depth: int = DEFAULT_SEQUENCE_DEPTH

    def enumerate_sequences(self, state: FlankState, player: int) -> list[TurnSequence]:
        if state.is_terminal:
            return [()]
        # 手番中のプレイヤーは残り手数まで、それ以外はまるまる1ターン分
        budget = state.turn.moves_left if player == state.current_player else state.turn.move_budget
        return enumerate_sequences(state.board, player, max_depth=self.max_depth, move_budget=budget)


def apply_sequence(state: FlankState, player: int, sequence: TurnSequence) -> FlankState:
    """Replay sequence for player on a copy of state.

    探索用の純粋関数。player が手番でなければ状態をそのまま返す。
    """
    if state.is_terminal or player != state.current_player:
        return state
    return state.apply_sequence(sequence)
