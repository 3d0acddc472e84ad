"""Arena for evaluating player strength through head-to-head matches.

アリーナ: 2つのプレイヤー関数を対戦させて強さを評価するモジュール。
MCTS の設定や評価関数の重みを変えたときに、どちらが強いかを確かめるのに使う。

各ターンの手順は TurnController.commit_turn() を通して適用するので、
AI の手も人間の手と同じ検証・再生の経路を通る。
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from flank_ai.game.controller import TurnController
from flank_ai.game.state import FlankState, Outcome
from flank_ai.game.types import DEFAULT_GAME_CONFIG, GameConfig, TurnSequence

logger = logging.getLogger(__name__)

PlayerFn = Callable[[FlankState], TurnSequence]


def play_game(
    first_fn: PlayerFn,
    second_fn: PlayerFn,
    config: GameConfig = DEFAULT_GAME_CONFIG,
    max_turns: int = 200,
) -> int | None:
    """Play one game between two player functions.

    1局を対戦させ、勝者（0=先手, 1=後手）を返す。引き分けや最大ターン数到達は None。
    """
    controller = TurnController(config)
    players = {0: first_fn, 1: second_fn}

    for _ in range(max_turns):
        state = controller.state
        if state.is_terminal:
            break
        mover = state.current_player
        sequence = players[mover](state)
        controller.commit_turn(mover, state.board.pieces_of(mover), sequence)

    result = controller.result()
    if result.outcome == Outcome.WINNER:
        return result.winner
    return None


def pit(
    player1_fn: PlayerFn,
    player2_fn: PlayerFn,
    num_games: int = 10,
    max_turns: int = 200,
    config: GameConfig = DEFAULT_GAME_CONFIG,
) -> tuple[int, int, int]:
    """Play num_games between two players, alternating who goes first.

    2つのプレイヤー関数を num_games 局対戦させる。
    先手・後手を交互に入れ替えることで先手有利バイアスを打ち消す。

    Args:
        player1_fn: 局面を受け取り手順を返す関数（プレイヤー1）
        player2_fn: 局面を受け取り手順を返す関数（プレイヤー2）
        num_games: 対局数（偶数にすると先後均等になる）
        max_turns: 1局の最大ターン数（超えたら引き分け扱い）
        config: 対局設定

    Returns:
        (player1_wins, player2_wins, draws)
    """
    p1_wins = 0
    p2_wins = 0
    draws = 0

    for game_idx in range(num_games):
        # 偶数局はプレイヤー1が先手、奇数局はプレイヤー2が先手
        p1_first = game_idx % 2 == 0
        if p1_first:
            winner = play_game(player1_fn, player2_fn, config, max_turns)
        else:
            winner = play_game(player2_fn, player1_fn, config, max_turns)

        if winner is None:
            draws += 1
        elif (winner == 0) == p1_first:
            p1_wins += 1
        else:
            p2_wins += 1
        logger.info("game %d/%d: winner=%s", game_idx + 1, num_games, winner)

    return p1_wins, p2_wins, draws
