"""Search driver: picks a turn for the automated player.

AI の手順選択。
1. 定跡（opening book）に一致すればその手順をそのまま返す
2. 一致しなければ MCTS で探索する

選んだ手順は TurnController.commit_turn() に人間の手と同じ形で渡す。
AI の手が人間の手より優遇されることはない。
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from flank_ai.engine.heuristic import DEFAULT_WEIGHTS, HeuristicEvaluator, HeuristicWeights
from flank_ai.engine.mcts import MCTS, MCTSConfig
from flank_ai.game.moves import DEFAULT_SEQUENCE_DEPTH, format_sequence
from flank_ai.game.opening_book import lookup
from flank_ai.game.state import FlankState, SequenceEnumerator
from flank_ai.game.types import TurnSequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    """Configuration for the search driver.

    max_depth:        列挙する手順の最大長（分岐数を抑えるため通常は2）
    use_opening_book: 定跡を先に引くかどうか
    mcts:             MCTS のパラメータ
    weights:          評価関数の重み
    """

    max_depth: int = DEFAULT_SEQUENCE_DEPTH
    use_opening_book: bool = True
    mcts: MCTSConfig = field(default_factory=MCTSConfig)
    weights: HeuristicWeights = DEFAULT_WEIGHTS


def choose_sequence(state: FlankState, config: SearchConfig | None = None) -> TurnSequence:
    """Return the turn sequence the automated player should commit.

    終局局面や手がない場合は空の手順（パス）を返す。エラーにはしない。
    """
    config = config or SearchConfig()
    if state.is_terminal:
        return ()

    player = state.current_player
    if config.use_opening_book and state.turn.moves_used == 0:
        # プレイヤーごとのターン番号（何ターン目か）に対応する定跡エントリだけを照合する
        turn_index = state.turn_count // len(state.players)
        book_sequence = lookup(state.board, player, turn_index=turn_index)
        if book_sequence is not None:
            logger.debug("player %d plays book line: %s", player, format_sequence(book_sequence))
            return book_sequence

    mcts = MCTS(
        SequenceEnumerator(max_depth=config.max_depth),
        HeuristicEvaluator(config.weights),
        config.mcts,
    )
    sequence = mcts.best_sequence(state)
    logger.debug("player %d plays searched line: %s", player, format_sequence(sequence))
    return sequence


def make_player(config: SearchConfig | None = None) -> Callable[[FlankState], TurnSequence]:
    """Return a state -> sequence function bound to config (for arenas and the web app)."""

    def player(state: FlankState) -> TurnSequence:
        return choose_sequence(state, config)

    return player
