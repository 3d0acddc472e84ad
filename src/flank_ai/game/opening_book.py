"""Opening book of pre-authored early-game turns.

序盤の定跡テーブル。

キーは "{盤面サイズ}-{プレイヤー}"（例: "8-1"）。
各エントリはターン開始時に期待するそのプレイヤーの駒列と、その局面で指す手順の組。
実際の駒列が期待値と「位置・向き・順序」まで完全に一致したときだけ定跡手順を返す。
一致しなければ None を返し、呼び出し側は通常の探索に進む。

定跡は正しさには関係しない純粋な最適化（序盤理論）の層。
"""

from __future__ import annotations

from dataclasses import dataclass

from flank_ai.game.board import Board, Piece
from flank_ai.game.types import Direction, Pivot, Step, Turn, TurnSequence

_UP = Direction.UP
_DOWN = Direction.DOWN


@dataclass(frozen=True)
class BookEntry:
    """An expected turn-start snapshot and the sequence to play from it."""

    turn_start: tuple[Piece, ...]
    sequence: TurnSequence


def book_key(board_size: int, player: int) -> str:
    return f"{board_size}-{player}"


def _pieces(facing: Direction, *squares: tuple[int, int]) -> tuple[Piece, ...]:
    return tuple(Piece(x, y, facing) for x, y in squares)


# 定跡テーブル
# player 0 は上端（row 0）から下へ、player 1 は下端（row 7）から上へ進む。
# 各エントリの手順を適用した結果が次のエントリの開始局面になる（相手の手で崩れなければ）。
OPENING_BOOK: dict[str, list[BookEntry]] = {
    "8-0": [
        # 1ターン目: 中央の2個を前進させ、片方をさらに1マス進める
        BookEntry(
            turn_start=_pieces(_DOWN, (2, 0), (3, 0), (4, 0), (5, 0)),
            sequence=(Step(1, 0, 1), Step(2, 0, 1), Step(1, 0, 1)),
        ),
        # 2ターン目: 中央を揃え、両端を1段上げる
        BookEntry(
            turn_start=_pieces(_DOWN, (2, 0), (3, 2), (4, 1), (5, 0)),
            sequence=(Step(2, 0, 1), Step(0, 0, 1), Step(3, 0, 1)),
        ),
        # 3ターン目: 中央の2個を押し出す
        BookEntry(
            turn_start=_pieces(_DOWN, (2, 1), (3, 2), (4, 2), (5, 1)),
            sequence=(Step(1, 0, 1), Step(2, 0, 1)),
        ),
        # 4ターン目: 両端を内向きに回して側面攻撃の形を作る
        BookEntry(
            turn_start=_pieces(_DOWN, (2, 1), (3, 3), (4, 3), (5, 1)),
            sequence=(Pivot(0, Turn.LEFT), Pivot(3, Turn.RIGHT)),
        ),
    ],
    "8-1": [
        BookEntry(
            turn_start=_pieces(_UP, (2, 7), (3, 7), (4, 7), (5, 7)),
            sequence=(Step(1, 0, -1), Step(2, 0, -1), Step(1, 0, -1)),
        ),
        BookEntry(
            turn_start=_pieces(_UP, (2, 7), (3, 5), (4, 6), (5, 7)),
            sequence=(Step(2, 0, -1), Step(0, 0, -1), Step(3, 0, -1)),
        ),
        BookEntry(
            turn_start=_pieces(_UP, (2, 6), (3, 5), (4, 5), (5, 6)),
            sequence=(Step(1, 0, -1), Step(2, 0, -1)),
        ),
        BookEntry(
            turn_start=_pieces(_UP, (2, 6), (3, 4), (4, 4), (5, 6)),
            sequence=(Pivot(0, Turn.RIGHT), Pivot(3, Turn.LEFT)),
        ),
    ],
}


def lookup(
    board: Board,
    player: int,
    turn_index: int | None = None,
    book: dict[str, list[BookEntry]] | None = None,
) -> TurnSequence | None:
    """Return the book sequence matching player's live pieces, or None.

    定跡を引く。turn_index を指定した場合はそのエントリだけを照合する。
    比較は駒列全体の値比較（位置・向き・順序）。
    """
    entries = (OPENING_BOOK if book is None else book).get(book_key(board.size, player), [])
    live = board.pieces_of(player)

    if turn_index is not None:
        if not 0 <= turn_index < len(entries):
            return None
        entry = entries[turn_index]
        return entry.sequence if entry.turn_start == live else None

    for entry in entries:
        if entry.turn_start == live:
            return entry.sequence
    return None
