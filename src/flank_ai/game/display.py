"""Terminal display for Flank boards.

Flank の盤面をターミナルに表示するためのモジュール。
"""

from __future__ import annotations

from flank_ai.game.board import Board
from flank_ai.game.types import Direction

# ブロックの向きの表示文字（ノーズの方向を矢印で示す）
FACING_CHARS: dict[Direction, str] = {
    Direction.UP: "^",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
}


def piece_to_str(player: int, facing: Direction) -> str:
    """Convert a piece to its two-character cell, e.g. "0v"."""
    return f"{player}{FACING_CHARS[facing]}"


def board_to_str(board: Board) -> str:
    """Convert a board to a human-readable string.

    盤面を人間が読みやすい文字列に変換する。

    Example output (8×8 initial position):
           0  1  2  3  4  5  6  7
        0  .  . 0v 0v 0v 0v  .  .
        1  .  .  .  .  .  .  .  .
        ...
        7  .  . 1^ 1^ 1^ 1^  .  .

    マス目の見方:
    - 数字 = 所有プレイヤー、記号 = ノーズの向き（^ v < >）
    - "." = 空マス
    - 列ラベルが x、行ラベルが y
    """
    cells: dict[tuple[int, int], str] = {}
    for player, pieces in enumerate(board.pieces):
        for piece in pieces:
            cells[(piece.x, piece.y)] = piece_to_str(player, piece.facing)

    lines: list[str] = ["   " + "".join(f"{x:>3}" for x in range(board.size))]
    for y in range(board.size):
        row = "".join(f"{cells.get((x, y), '.'):>3}" for x in range(board.size))
        lines.append(f"{y:>3}{row}")
    return "\n".join(lines)
