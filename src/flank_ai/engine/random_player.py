"""Random player: plays a random turn made of random legal moves.

ランダムプレイヤー: 合法手の中からランダムに手を選んで1ターン分の手順を作る。

用途:
- 実装の動作確認（ルールが正しく実装されているかテスト）
- ベースラインとの対戦（ランダムに勝てないAIは弱すぎる）
- MCTS のロールアウト
"""

from __future__ import annotations

import random

from flank_ai.game.state import FlankState
from flank_ai.game.types import Move, TurnSequence


def random_sequence(state: FlankState, rng: random.Random | None = None) -> TurnSequence:
    """Return a random turn of 1..moves_left legal moves.

    1〜残り手数のランダムな長さの手順を返す。
    終局局面や手がない場合は空の手順（パス）を返す。
    """
    rng = rng or random
    if state.is_terminal:
        return ()
    length = rng.randint(1, state.turn.moves_left)

    moves: list[Move] = []
    current = state
    for _ in range(length):
        legal = current.legal_moves()
        if not legal:
            break
        move = rng.choice(legal)  # 一様ランダムサンプリング
        moves.append(move)
        nxt, _ = current.apply_move(move)
        if nxt.is_terminal or nxt.turn_count != current.turn_count:
            break  # 終局、または手数を使い切った
        current = nxt
    return tuple(moves)
