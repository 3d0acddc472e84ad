"""Move generation for Flank.

合法手の生成（アトミックな手と、ターン単位の手順列）。

アトミックな手:
  各ブロックについて Pivot(LEFT), Pivot(RIGHT) と、
  盤内かつ自分のブロックがない直交隣接マスへの Step。
  相手ブロックのあるマスへの Step も攻撃候補として含める
  （結果は適用時に rules.step() が解決する）。

手順列:
  長さ 0..max_depth の手順を幅優先で列挙する。
  各手順は一時的な盤面に適用した結果から次の手を伸ばす。
  葉だけでなく途中のノード（空の手順 = パスを含む）もすべて候補として返す。
  分岐数はおよそ 6 × ブロック数 / 手 なので、探索では深さ2程度に抑える。
"""

from __future__ import annotations

from collections import deque

from flank_ai.game.board import Board
from flank_ai.game.rules import apply_move
from flank_ai.game.types import (
    DIRECTION_VECTORS,
    MOVE_BUDGET,
    Move,
    Pivot,
    Step,
    Turn,
    TurnSequence,
)

# 探索で使うデフォルトの手順の深さ
DEFAULT_SEQUENCE_DEPTH = 2


def piece_moves(board: Board, player: int, piece_index: int) -> list[Move]:
    """Generate the atomic moves for a single piece."""
    piece = board.pieces_of(player)[piece_index]
    moves: list[Move] = [Pivot(piece_index, Turn.LEFT), Pivot(piece_index, Turn.RIGHT)]
    for dx, dy in DIRECTION_VECTORS.values():
        nx, ny = piece.x + dx, piece.y + dy
        if not board.in_bounds(nx, ny):
            continue  # 盤外はスキップ
        found = board.occupant(nx, ny)
        if found is not None and found[0] == player:
            continue  # 自分のブロックのある場所には動けない
        moves.append(Step(piece_index, dx, dy))
    return moves


def atomic_moves(board: Board, player: int) -> list[Move]:
    """Generate all atomic moves for the given player.

    プレイヤーのすべてのアトミックな手を生成する。
    """
    moves: list[Move] = []
    for idx in range(len(board.pieces_of(player))):
        moves.extend(piece_moves(board, player, idx))
    return moves


def enumerate_sequences(
    board: Board,
    player: int,
    max_depth: int = DEFAULT_SEQUENCE_DEPTH,
    move_budget: int = MOVE_BUDGET,
) -> list[TurnSequence]:
    """Enumerate every turn sequence of length 0..max_depth.

    幅優先探索でターンの手順列を列挙する。
    max_depth は move_budget を超えないように切り詰める。

    Returns sequences in BFS order; the first one is always the empty pass.
    """
    depth_cap = max(0, min(max_depth, move_budget))
    sequences: list[TurnSequence] = [()]
    frontier: deque[tuple[TurnSequence, Board]] = deque([((), board)])

    while frontier:
        sequence, current = frontier.popleft()
        if len(sequence) >= depth_cap:
            continue
        for move in atomic_moves(current, player):
            outcome = apply_move(current, player, move)
            if not outcome.accepted:
                continue
            extended = sequence + (move,)
            sequences.append(extended)
            frontier.append((extended, outcome.board))

    return sequences


def apply_moves(board: Board, player: int, sequence: TurnSequence) -> Board:
    """Replay a sequence on board, skipping rejected moves.

    手順列を盤面に順番に適用する。却下された手は飛ばして残りを続ける。
    """
    for move in sequence:
        board = apply_move(board, player, move).board
    return board


def format_move(move: Move) -> str:
    """Format a move for display.

    手を人間が読みやすい文字列に変換する。
    例: ピボット → "#1 pivot left"
        ステップ → "#2 step (0,-1)"
    """
    if isinstance(move, Pivot):
        return f"#{move.piece_index} pivot {move.turn.name.lower()}"
    return f"#{move.piece_index} step ({move.dx},{move.dy})"


def format_sequence(sequence: TurnSequence) -> str:
    if not sequence:
        return "pass"
    return ", ".join(format_move(m) for m in sequence)
