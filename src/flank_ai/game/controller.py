"""Turn controller, the single owner of the canonical game state.

正規の対局状態を唯一所有するターン管理クラス。

外部（CLI・Web API・AI）はすべてこのクラスのコマンドを通して手を指す。
探索コードは state プロパティで得たイミュータブルな値を使うだけで、
正規の状態を書き換えることはできない。

状態遷移:
  AWAITING_MOVE(mover, moves_used)
    ── 手を適用 ──▶ moves_used + 1（上限に達したら TURN_COMPLETE）
    ── end_turn ──▶ TURN_COMPLETE
  TURN_COMPLETE ──▶ 次の生存プレイヤーの AWAITING_MOVE(mover', 0)
  いずれかの手の後に勝敗が決まれば GAME_OVER(result)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, unique

from flank_ai.game.board import Piece
from flank_ai.game.moves import format_move
from flank_ai.game.rules import Combat, Rejection, step_to
from flank_ai.game.state import FlankState, GameResult, Outcome
from flank_ai.game.types import (
    DEFAULT_GAME_CONFIG,
    GameConfig,
    Move,
    Pivot,
    Turn,
    TurnSequence,
)

logger = logging.getLogger(__name__)


@unique
class TurnPhase(Enum):
    AWAITING_MOVE = "awaiting_move"
    TURN_COMPLETE = "turn_complete"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class HistoryEntry:
    """One applied move in the game record.

    棋譜の1手。turn_complete はこの手でターンが終わったかどうか。
    """

    player: int
    move: Move
    combat: Combat | None = None
    turn_complete: bool = False


@dataclass
class CommitReport:
    """Result of an authoritative turn replay.

    commit_turn() の結果。
    rejection: 手順全体が受け付けられなかった場合の理由（手番違い・不正な開始局面など）
    applied:   実際に適用された手
    skipped:   却下されて飛ばされた手とその理由
    dropped:   手数を使い切った後、または終局後で再生されなかった手
    """

    rejection: Rejection | None = None
    applied: list[Move] = field(default_factory=list)
    skipped: list[tuple[Move, Rejection]] = field(default_factory=list)
    dropped: list[Move] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.rejection is None


class TurnController:
    """Owns the canonical FlankState and enforces turn order.

    正規の対局状態を所有し、手番・手数上限・終局判定を管理する。
    """

    def __init__(self, config: GameConfig = DEFAULT_GAME_CONFIG, state: FlankState | None = None) -> None:
        self.config = config
        self._state = state if state is not None else FlankState.new_game(config)
        self._last_phase = TurnPhase.GAME_OVER if self._state.is_terminal else TurnPhase.AWAITING_MOVE
        self.history: list[HistoryEntry] = []

    @property
    def state(self) -> FlankState:
        """現在の正規の状態（イミュータブルなので外部に渡しても安全）。"""
        return self._state

    @property
    def phase(self) -> TurnPhase:
        """直前のコマンドによる遷移先のフェーズ。"""
        return self._last_phase

    def result(self) -> GameResult:
        return self._state.result

    def pivot(self, player: int, piece_index: int, turn: Turn) -> Rejection | None:
        """Rotate one of player's pieces. Returns the rejection reason, or None."""
        return self._play(player, Pivot(piece_index, turn))

    def step(self, player: int, piece_index: int, target_x: int, target_y: int) -> Rejection | None:
        """Step one of player's pieces to an adjacent square.

        目標マス指定のステップ。斜め・距離0・2マス以上は NOT_ADJACENT で却下。
        """
        check = self._check_turn(player)
        if check is not None:
            return check
        pieces = self._state.board.pieces_of(player)
        if not 0 <= piece_index < len(pieces):
            return Rejection.PIECE_OUT_OF_RANGE
        move = step_to(self._state.board, player, piece_index, target_x, target_y)
        if move is None:
            return Rejection.NOT_ADJACENT
        return self._play(player, move)

    def end_turn(self, player: int) -> Rejection | None:
        """End player's turn early (zero or more moves used)."""
        check = self._check_turn(player)
        if check is not None:
            return check
        self._state = self._state.end_turn()
        self._last_phase = TurnPhase.TURN_COMPLETE
        logger.debug("player %d ended turn; next mover %d", player, self._state.current_player)
        return None

    def commit_turn(
        self,
        player: int,
        turn_start_pieces: tuple[Piece, ...],
        sequence: TurnSequence,
    ) -> CommitReport:
        """Authoritatively replay a whole turn submitted by a client.

        クライアントが計算した最終局面は信用せず、
        1. プレイヤーの駒列を turn_start_pieces に戻し
        2. sequence を1手ずつ rules で検証しながら再生し
        3. ターンを終える。

        却下された手は飛ばして残りの再生を続ける（手順全体は中断しない）。
        このターンですでに pivot / step を指していれば TURN_IN_PROGRESS で却下する。
        正規の状態は再生がすべて終わってから差し替える（途中状態は外部に見えない）。
        """
        check = self._check_turn(player)
        if check is not None:
            return CommitReport(rejection=check)
        if self._state.turn.moves_used > 0:
            logger.debug(
                "player %d commit rejected: %d moves already played", player, self._state.turn.moves_used
            )
            return CommitReport(rejection=Rejection.TURN_IN_PROGRESS)

        state = self._state.with_turn_start(player, tuple(turn_start_pieces))
        if state is None:
            logger.debug("player %d commit rejected: invalid turn-start snapshot", player)
            return CommitReport(rejection=Rejection.INVALID_SNAPSHOT)

        report = CommitReport()
        entries: list[HistoryEntry] = []
        turn_count = state.turn_count
        for i, move in enumerate(sequence):
            if state.is_terminal or state.turn_count != turn_count:
                report.dropped = list(sequence[i:])  # 手数を使い切った、または終局した
                break
            state, outcome = state.apply_move_outcome(move)
            if outcome.rejection is not None:
                logger.debug("player %d skipped %s: %s", player, format_move(move), outcome.rejection.value)
                report.skipped.append((move, outcome.rejection))
                continue
            report.applied.append(move)
            entries.append(HistoryEntry(player, move, outcome.combat))

        if state.turn_count == turn_count:
            state = state.end_turn()
        if entries:
            entries[-1] = HistoryEntry(player, entries[-1].move, entries[-1].combat, turn_complete=True)

        self._state = state
        self.history.extend(entries)
        logger.debug(
            "player %d committed turn: %d applied, %d skipped, %d dropped",
            player,
            len(report.applied),
            len(report.skipped),
            len(report.dropped),
        )
        self._update_phase(turn_complete=True)
        return report

    def _play(self, player: int, move: Move) -> Rejection | None:
        check = self._check_turn(player)
        if check is not None:
            return check
        before = self._state.turn_count
        state, outcome = self._state.apply_move_outcome(move)
        if outcome.rejection is not None:
            return outcome.rejection
        self._state = state
        turn_complete = state.turn_count != before
        self.history.append(HistoryEntry(player, move, outcome.combat, turn_complete))
        logger.debug("player %d played %s", player, format_move(move))
        self._update_phase(turn_complete)
        return None

    def _check_turn(self, player: int) -> Rejection | None:
        if self._state.is_terminal:
            return Rejection.GAME_OVER
        if player != self._state.current_player:
            return Rejection.NOT_YOUR_TURN
        return None

    def _update_phase(self, turn_complete: bool) -> None:
        result = self._state.result
        if result.outcome != Outcome.IN_PROGRESS:
            self._last_phase = TurnPhase.GAME_OVER
            logger.info("game over: %s (winner=%s)", result.outcome.value, result.winner)
        elif turn_complete:
            self._last_phase = TurnPhase.TURN_COMPLETE
        else:
            self._last_phase = TurnPhase.AWAITING_MOVE
