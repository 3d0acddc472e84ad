"""Types and constants for Flank.

Flank の基本型・定数定義。
盤面は 8×8（64マス）で、各プレイヤーは向き（ノーズ）を持つブロックを4個ずつ持つ。
座標は (x, y) で、y は下向きに増える（row 0 が盤面の上端）。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique

# 盤面のサイズ: 8×8
BOARD_SIZE = 8
# 1ターンに指せる手数の上限
MOVE_BUDGET = 3
# 各プレイヤーの初期ブロック数
PIECES_PER_PLAYER = 4


@unique
class Direction(IntEnum):
    """Facing of a piece.

    ブロックの向き。ノーズ（鼻先）はこの方向を向き、残り3面はボディ。
    値は to_tensor_planes() でのチャンネルオフセットに対応する。
    """

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def vector(self) -> tuple[int, int]:
        """この向きの単位ベクトル (dx, dy) を返す。"""
        return DIRECTION_VECTORS[self]

    @property
    def opposite(self) -> Direction:
        """反対向きを返す。"""
        return _OPPOSITES[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @classmethod
    def from_vector(cls, dx: int, dy: int) -> Direction | None:
        """単位ベクトルから向きを返す。直交単位ベクトル以外は None。"""
        for direction, vec in DIRECTION_VECTORS.items():
            if vec == (dx, dy):
                return direction
        return None


@unique
class Turn(IntEnum):
    """Pivot rotation sense.

    ピボット（その場回転）の回転方向。
    """

    LEFT = 0
    RIGHT = 1


# 向きごとの単位ベクトル (dx, dy)。y は下向きが正。
DIRECTION_VECTORS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# 左回転の隣接表: Up → Left → Down → Right → Up
LEFT_TURNS: dict[Direction, Direction] = {
    Direction.UP: Direction.LEFT,
    Direction.LEFT: Direction.DOWN,
    Direction.DOWN: Direction.RIGHT,
    Direction.RIGHT: Direction.UP,
}

# 右回転は左回転の逆: Up → Right → Down → Left → Up
RIGHT_TURNS: dict[Direction, Direction] = {after: before for before, after in LEFT_TURNS.items()}


def forward_direction(player: int) -> Direction:
    """Return the direction in which player advances toward the opponent's home edge.

    プレイヤーの前進方向を返す。
    初期配置では偶数番プレイヤーが上端（row 0）から下へ、
    奇数番プレイヤーが下端から上へ進む。
    """
    return Direction.DOWN if player % 2 == 0 else Direction.UP


@dataclass(frozen=True)
class Pivot:
    """Rotate piece_index by 90° in place.

    ピボット手: ブロックをその場で90度回転させる（1手消費）。
    """

    piece_index: int
    turn: Turn


@dataclass(frozen=True)
class Step:
    """Move piece_index one square by (dx, dy).

    ステップ手: ブロックを直交方向に1マス動かす（1手消費）。
    移動先に相手ブロックがあれば戦闘が発生する。
    (dx, dy) は直交単位ベクトルでなければならない（|dx| + |dy| = 1）。
    """

    piece_index: int
    dx: int
    dy: int

    @property
    def is_unit(self) -> bool:
        return abs(self.dx) + abs(self.dy) == 1


# 1手（アトミックな手）の型
Move = Pivot | Step
# 1ターン分の手の列。空のタプルはパス（何もせずターン終了）を表す。
TurnSequence = tuple[Move, ...]


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a new game.

    対局設定。盤面サイズ・手数上限・プレイヤー数・初期ブロック数を持つ。

    Attributes:
        board_size:        盤面の一辺のマス数
        move_budget:       1ターンに指せる最大手数
        num_players:       プレイヤー数（初期配置は2人まで定義）
        pieces_per_player: 各プレイヤーの初期ブロック数
    """

    board_size: int = BOARD_SIZE
    move_budget: int = MOVE_BUDGET
    num_players: int = 2
    pieces_per_player: int = PIECES_PER_PLAYER


DEFAULT_GAME_CONFIG = GameConfig()
