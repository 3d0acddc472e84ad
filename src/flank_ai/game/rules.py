"""Move legality and combat resolution for Flank.

ピボット・ステップの合法性判定と戦闘解決。
すべて純粋関数で、盤面を受け取り新しい盤面を返す（元の盤面は変化しない）。

不正な手は例外ではなく「却下（Rejection）」として返す。
却下された場合、盤面は入力のまま変化しない。

戦闘ルール（最重要の不変条件）:
  攻撃側のノーズが防御側のボディに当たった場合のみ側面攻撃（フランク）成功。
  それ以外の接触（ノーズ同士・ボディ同士・ボディ対ノーズ）は攻撃側が消滅する。
"""

from __future__ import annotations

from enum import Enum, unique
from typing import NamedTuple

from flank_ai.game.board import Board
from flank_ai.game.types import (
    LEFT_TURNS,
    RIGHT_TURNS,
    Direction,
    Move,
    Pivot,
    Step,
    Turn,
)


@unique
class Rejection(Enum):
    """Why a move was not applied.

    手が却下された理由。
    """

    PIECE_OUT_OF_RANGE = "piece_out_of_range"  # 存在しないブロック番号
    NOT_ADJACENT = "not_adjacent"  # 直交1マスではない（斜め・距離0・2マス以上）
    OUT_OF_BOUNDS = "out_of_bounds"  # 盤外への移動
    OWN_PIECE = "own_piece"  # 自分のブロックがあるマスへの移動
    NOT_YOUR_TURN = "not_your_turn"  # 手番ではないプレイヤーの手
    GAME_OVER = "game_over"  # 終局後の手
    INVALID_SNAPSHOT = "invalid_snapshot"  # commit_turn の開始局面が不正
    TURN_IN_PROGRESS = "turn_in_progress"  # このターンですでに手を指した後の commit_turn


@unique
class Combat(Enum):
    """Result of a collision between an attacker and a defender."""

    DEFENDER_DESTROYED = "defender_destroyed"  # ノーズ対ボディ: 側面攻撃成功
    ATTACKER_DESTROYED = "attacker_destroyed"  # それ以外: 攻撃側が消滅


class MoveOutcome(NamedTuple):
    """Result of applying one atomic move.

    board:     適用後の盤面（却下時は入力と同じ盤面）
    rejection: 却下理由。適用できた場合は None
    combat:    戦闘が発生した場合はその結果
    """

    board: Board
    rejection: Rejection | None = None
    combat: Combat | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def pivot_direction(facing: Direction, turn: Turn) -> Direction:
    """Return facing rotated 90° in the given sense.

    向きを90度回転させる。同じ向きに4回回すと元に戻る（位数4の巡回群）。
    """
    table = LEFT_TURNS if turn == Turn.LEFT else RIGHT_TURNS
    return table[facing]


def resolve_combat(
    attacker_facing: Direction,
    defender_facing: Direction,
    dx: int,
    dy: int,
) -> Combat:
    """Resolve a collision from the attacker's step delta (dx, dy).

    攻撃側のステップ方向 (dx, dy) から戦闘結果を決める純粋関数。

    attacker_nose: 攻撃側が進行方向 (dx, dy) を向いている
    defender_nose: 防御側が攻撃側の方向 (-dx, -dy) を向いている

    ノーズ対ノーズ → 攻撃側消滅
    ノーズ対ボディ → 防御側消滅（攻撃側がマスを占める）
    それ以外       → 攻撃側消滅
    """
    attacker_nose = attacker_facing == Direction.from_vector(dx, dy)
    defender_nose = defender_facing == Direction.from_vector(-dx, -dy)
    if attacker_nose and not defender_nose:
        return Combat.DEFENDER_DESTROYED
    return Combat.ATTACKER_DESTROYED


def pivot(board: Board, player: int, piece_index: int, turn: Turn) -> MoveOutcome:
    """Rotate player's piece at piece_index by 90°.

    ブロックをその場で90度回転させる。番号が範囲外なら却下。
    """
    pieces = board.pieces_of(player)
    if not 0 <= piece_index < len(pieces):
        return MoveOutcome(board, Rejection.PIECE_OUT_OF_RANGE)
    piece = pieces[piece_index]
    turned = piece.turned_to(pivot_direction(piece.facing, turn))
    return MoveOutcome(board.replace_piece(player, piece_index, turned))


def step(
    board: Board,
    player: int,
    piece_index: int,
    target_x: int,
    target_y: int,
) -> MoveOutcome:
    """Move player's piece at piece_index to the adjacent (target_x, target_y).

    ブロックを直交1マス先へ移動させる。

    - 空マス: そのまま移動
    - 自分のブロック: 却下（盤面は変化しない）
    - 相手のブロック: resolve_combat() で戦闘を解決
    """
    pieces = board.pieces_of(player)
    if not 0 <= piece_index < len(pieces):
        return MoveOutcome(board, Rejection.PIECE_OUT_OF_RANGE)
    piece = pieces[piece_index]

    dx, dy = target_x - piece.x, target_y - piece.y
    if abs(dx) + abs(dy) != 1:
        return MoveOutcome(board, Rejection.NOT_ADJACENT)
    if not board.in_bounds(target_x, target_y):
        return MoveOutcome(board, Rejection.OUT_OF_BOUNDS)

    found = board.occupant(target_x, target_y)
    if found is None:
        return MoveOutcome(board.replace_piece(player, piece_index, piece.moved_to(target_x, target_y)))

    defender_player, defender_index = found
    if defender_player == player:
        return MoveOutcome(board, Rejection.OWN_PIECE)

    defender = board.pieces[defender_player][defender_index]
    combat = resolve_combat(piece.facing, defender.facing, dx, dy)
    if combat == Combat.DEFENDER_DESTROYED:
        # 防御側を取り除き、攻撃側が空いたマスに入る
        new_board = board.remove_piece(defender_player, defender_index)
        new_board = new_board.replace_piece(player, piece_index, piece.moved_to(target_x, target_y))
    else:
        # 攻撃側は元のマスから消える（移動先には入らない）
        new_board = board.remove_piece(player, piece_index)
    return MoveOutcome(new_board, None, combat)


def apply_move(board: Board, player: int, move: Move) -> MoveOutcome:
    """Apply a move record and return the outcome.

    手のレコード（Pivot / Step）を見て pivot() か step() に振り分ける。
    """
    if isinstance(move, Pivot):
        return pivot(board, player, move.piece_index, move.turn)
    if not move.is_unit:
        return MoveOutcome(board, Rejection.NOT_ADJACENT)
    pieces = board.pieces_of(player)
    if not 0 <= move.piece_index < len(pieces):
        return MoveOutcome(board, Rejection.PIECE_OUT_OF_RANGE)
    piece = pieces[move.piece_index]
    return step(board, player, move.piece_index, piece.x + move.dx, piece.y + move.dy)


def step_to(board: Board, player: int, piece_index: int, target_x: int, target_y: int) -> Step | None:
    """Return the Step record for a target square, or None if it is not adjacent.

    目標マス指定の手を Step レコード（dx, dy 形式）に変換する。
    """
    pieces = board.pieces_of(player)
    if not 0 <= piece_index < len(pieces):
        return None
    piece = pieces[piece_index]
    record = Step(piece_index, target_x - piece.x, target_y - piece.y)
    return record if record.is_unit else None
