"""Board representation for Flank.

盤面のデータ構造。イミュータブル（frozen=True）設計で、
盤面を変更するメソッドはすべて新しい Board オブジェクトを返す。

ブロックはプレイヤーごとの順序付きタプルに格納する。
手のレコードはブロックをこのタプル内のインデックスで指定するため、
順序は意味を持つ（定跡の一致判定も順序込みで比較する）。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from flank_ai.game.types import (
    BOARD_SIZE,
    PIECES_PER_PLAYER,
    Direction,
    GameConfig,
)


@dataclass(frozen=True)
class Piece:
    """A block on the board.

    盤面上の1つのブロック。位置と向きを持つ。
    """

    x: int
    y: int
    facing: Direction

    def moved_to(self, x: int, y: int) -> Piece:
        return replace(self, x=x, y=y)

    def turned_to(self, facing: Direction) -> Piece:
        return replace(self, facing=facing)

    def nose_square(self) -> tuple[int, int]:
        """ノーズが向いている隣接マスの座標を返す（盤外の場合もある）。"""
        dx, dy = self.facing.vector
        return self.x + dx, self.y + dy


def default_pieces(config: GameConfig) -> tuple[tuple[Piece, ...], ...]:
    """Return the standard starting position.

    標準的な初期配置を返す。8×8 の場合:

    Row 0 (top):    player 0, columns 2..5, facing DOWN
    Row 7 (bottom): player 1, columns 2..5, facing UP
    """
    if config.num_players > 2:
        msg = f"No default layout for {config.num_players} players"
        raise ValueError(msg)

    first_col = (config.board_size - config.pieces_per_player) // 2
    cols = range(first_col, first_col + config.pieces_per_player)

    top = tuple(Piece(x, 0, Direction.DOWN) for x in cols)
    if config.num_players == 1:
        return (top,)
    bottom_row = config.board_size - 1
    bottom = tuple(Piece(x, bottom_row, Direction.UP) for x in cols)
    return (top, bottom)


def _standard_pieces() -> tuple[tuple[Piece, ...], ...]:
    return default_pieces(GameConfig(board_size=BOARD_SIZE, pieces_per_player=PIECES_PER_PLAYER))


@dataclass(frozen=True)
class Board:
    """Immutable board state for Flank.

    盤面を表すイミュータブルなデータ構造。

    size:   盤面の一辺のマス数
    pieces: プレイヤーごとのブロックのタプル。pieces[player] が player の駒列。

    不変条件:
    - 1マスに置けるブロックは全プレイヤー合わせて最大1個
    - すべての座標は [0, size) の範囲内

    複製のコストは盤面の広さではなくブロック数に比例する。
    """

    size: int = BOARD_SIZE
    pieces: tuple[tuple[Piece, ...], ...] = field(default_factory=_standard_pieces)

    @classmethod
    def initial(cls, config: GameConfig) -> Board:
        return cls(size=config.board_size, pieces=default_pieces(config))

    @property
    def num_players(self) -> int:
        return len(self.pieces)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def pieces_of(self, player: int) -> tuple[Piece, ...]:
        """Return player's ordered pieces (empty for an unknown player)."""
        if not 0 <= player < len(self.pieces):
            return ()
        return self.pieces[player]

    def occupant(self, x: int, y: int) -> tuple[int, int] | None:
        """Return (player, piece_index) of the block at (x, y), or None.

        マス(x, y)にあるブロックの (所有者, インデックス) を返す。空なら None。
        """
        for player, pieces in enumerate(self.pieces):
            for idx, piece in enumerate(pieces):
                if piece.x == x and piece.y == y:
                    return player, idx
        return None

    def piece_at(self, x: int, y: int) -> Piece | None:
        found = self.occupant(x, y)
        if found is None:
            return None
        player, idx = found
        return self.pieces[player][idx]

    def alive_players(self) -> list[int]:
        """ブロックが1個以上残っているプレイヤーの一覧を返す。"""
        return [player for player, pieces in enumerate(self.pieces) if pieces]

    def replace_piece(self, player: int, idx: int, piece: Piece) -> Board:
        """Return a new Board with player's piece at idx replaced.

        元の Board は変更されない（イミュータブル）。
        """
        own = list(self.pieces[player])
        own[idx] = piece
        return self.with_pieces(player, tuple(own))

    def remove_piece(self, player: int, idx: int) -> Board:
        """Return a new Board with player's piece at idx removed.

        除去後のタプルは詰められるため、idx より後ろのインデックスは1つずれる。
        """
        own = self.pieces[player]
        return self.with_pieces(player, own[:idx] + own[idx + 1 :])

    def with_pieces(self, player: int, pieces: tuple[Piece, ...]) -> Board:
        """プレイヤーの駒列を丸ごと差し替えた新しい Board を返す。"""
        all_pieces = list(self.pieces)
        all_pieces[player] = tuple(pieces)
        return Board(size=self.size, pieces=tuple(all_pieces))

    def is_valid_snapshot(self, player: int, pieces: tuple[Piece, ...]) -> bool:
        """Check that pieces could legally replace player's current pieces.

        駒列を差し替えても不変条件（盤内・重複なし）が保たれるか判定する。
        """
        if not 0 <= player < len(self.pieces):
            return False
        seen: set[tuple[int, int]] = set()
        for other, others in enumerate(self.pieces):
            if other == player:
                continue
            seen.update((p.x, p.y) for p in others)
        for piece in pieces:
            if not self.in_bounds(piece.x, piece.y):
                return False
            if (piece.x, piece.y) in seen:
                return False
            seen.add((piece.x, piece.y))
        return True
