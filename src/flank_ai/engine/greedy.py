"""Greedy one-turn search for Flank."""

from __future__ import annotations

from flank_ai.engine.heuristic import DEFAULT_WEIGHTS, HeuristicWeights, evaluate
from flank_ai.game.moves import DEFAULT_SEQUENCE_DEPTH
from flank_ai.game.state import FlankState
from flank_ai.game.types import TurnSequence


def score_sequences(
    state: FlankState,
    max_depth: int = DEFAULT_SEQUENCE_DEPTH,
    weights: HeuristicWeights = DEFAULT_WEIGHTS,
) -> list[tuple[TurnSequence, float]]:
    """Score every enumerated sequence for the current player.

    現在のプレイヤーの全手順を、適用後の局面の評価値で採点する。
    """
    player = state.current_player
    return [
        (sequence, evaluate(state.apply_sequence(sequence), player, weights))
        for sequence in state.legal_sequences(max_depth)
    ]


def greedy_sequence(
    state: FlankState,
    max_depth: int = DEFAULT_SEQUENCE_DEPTH,
    weights: HeuristicWeights = DEFAULT_WEIGHTS,
) -> TurnSequence:
    """Return the sequence whose resulting position evaluates best.

    1ターン先だけを読む貪欲法。同点なら列挙順で先の（短い）手順を選ぶ。
    MCTS のベースラインとして使う。
    """
    if state.is_terminal:
        return ()
    scored = score_sequences(state, max_depth, weights)
    best_sequence: TurnSequence = ()
    best_score = float("-inf")
    for sequence, score in scored:
        if score > best_score:
            best_score = score
            best_sequence = sequence
    return best_sequence
