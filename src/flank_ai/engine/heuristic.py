"""Heuristic position evaluation for Flank."""

from __future__ import annotations

from dataclasses import dataclass

from flank_ai.game.board import Board, Piece
from flank_ai.game.moves import piece_moves
from flank_ai.game.rules import Combat, resolve_combat
from flank_ai.game.state import FlankState, Outcome
from flank_ai.game.types import (
    DIRECTION_VECTORS,
    PIECES_PER_PLAYER,
    Direction,
    forward_direction,
)


@dataclass(frozen=True)
class HeuristicWeights:
    """Weights for the static evaluation.

    評価関数の重み。material（駒得）は位置的な項より1桁大きくして、
    戦術的な得が駒損を上回らないようにする。
    """

    win: float = 2000.0  # 終局（唯一の生存者）のスコア
    material: float = 100.0  # 失った駒1個あたり
    presence: float = 5.0  # 盤上に残っている駒1個あたり
    advance: float = 2.0  # 相手陣に向かって1段進むごと
    facing: float = 3.0  # 前進方向を向いている
    mobility: float = 0.5  # アトミックな手1つあたり
    threat: float = 15.0  # 次の手で側面攻撃できる相手駒がいる
    exposure: float = 12.0  # 相手のノーズが自分のボディに向いている
    coordination: float = 6.0  # L字（斜め隣）で縦向き・横向きの組
    pressure: float = 2.0  # L字の近くに相手駒がいるときの倍率
    safety: float = 4.0  # 残り駒が少ないときの、最寄りの相手駒までの距離1あたり
    low_count: int = 2  # この数以下で「残り少ない」とみなす
    risk_aversion: float = 2.0  # 勝ちが近いときの exposure の倍率
    start_count: int = PIECES_PER_PLAYER  # 初期駒数（駒損の基準）


DEFAULT_WEIGHTS = HeuristicWeights()


def evaluate(state: FlankState, player: int, weights: HeuristicWeights = DEFAULT_WEIGHTS) -> float:
    """Evaluate a position from player's perspective.

    局面を player の視点から数値評価する（静的評価関数）。

    Scoring:
    - Terminal: ±win (sole survivor), 0 for a draw
    - Material relative to the starting count
    - Per-piece positional, facing, mobility and tactical terms
    - Coordination bonus for L-shaped pairs

    Returns positive if player is better off.
    """
    result = state.result
    if result.outcome == Outcome.WINNER:
        return weights.win if result.winner == player else -weights.win
    if result.outcome == Outcome.DRAW:
        return 0.0
    return evaluate_board(state.board, player, weights)


def evaluate_board(board: Board, player: int, weights: HeuristicWeights = DEFAULT_WEIGHTS) -> float:
    """Evaluate a non-terminal board for player."""
    own = board.pieces_of(player)
    if not own:
        return -weights.win  # 自分だけ全滅（3人以上の対局）

    opponents = [p for p in range(board.num_players) if p != player]
    enemy = [piece for p in opponents for piece in board.pieces[p]]
    enemy_at = {(piece.x, piece.y): piece for piece in enemy}

    # 駒得: 初期駒数からの損失の差
    own_lost = weights.start_count - len(own)
    enemy_lost = weights.start_count * len(opponents) - len(enemy)
    score = weights.material * (enemy_lost - own_lost)

    low_own = len(own) <= weights.low_count
    # 相手の残りが少なく自分が優勢なら、相打ちの危険を避ける
    nearly_won = len(enemy) <= weights.low_count and len(own) > len(enemy)
    exposure_weight = weights.exposure * (weights.risk_aversion if nearly_won else 1.0)
    forward = forward_direction(player)

    for idx, piece in enumerate(own):
        score += weights.presence

        if low_own:
            score += weights.safety * _nearest_distance(piece, enemy, board.size)
        else:
            score += weights.advance * _advance(piece, forward, board.size)

        if piece.facing == forward:
            score += weights.facing

        score += weights.mobility * len(piece_moves(board, player, idx))

        if _threatens(piece, enemy_at):
            score += weights.threat
        if _exposed(piece, enemy_at):
            score -= exposure_weight

    score += _coordination(own, enemy, weights)
    return score


class HeuristicEvaluator:
    """Evaluator capability backed by evaluate()."""

    def __init__(self, weights: HeuristicWeights = DEFAULT_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(self, state: FlankState, player: int) -> float:
        return evaluate(state, player, self.weights)


def _advance(piece: Piece, forward: Direction, size: int) -> int:
    """相手の後ろ段に向かって進んだ段数。"""
    dx, dy = forward.vector
    if dy > 0:
        return piece.y
    if dy < 0:
        return size - 1 - piece.y
    return piece.x if dx > 0 else size - 1 - piece.x


def _nearest_distance(piece: Piece, enemy: list[Piece], size: int) -> int:
    if not enemy:
        return size
    return min(abs(piece.x - e.x) + abs(piece.y - e.y) for e in enemy)


def _threatens(piece: Piece, enemy_at: dict[tuple[int, int], Piece]) -> bool:
    """ノーズの先に、ノーズを向け返していない相手駒がいる（側面攻撃が可能）。"""
    target = enemy_at.get(piece.nose_square())
    if target is None:
        return False
    dx, dy = piece.facing.vector
    return resolve_combat(piece.facing, target.facing, dx, dy) == Combat.DEFENDER_DESTROYED


def _exposed(piece: Piece, enemy_at: dict[tuple[int, int], Piece]) -> bool:
    """隣接する相手駒のノーズが自分のボディに向いている。"""
    for dx, dy in DIRECTION_VECTORS.values():
        attacker = enemy_at.get((piece.x + dx, piece.y + dy))
        if attacker is None:
            continue
        # 攻撃側から見たステップ方向は (-dx, -dy)
        if resolve_combat(attacker.facing, piece.facing, -dx, -dy) == Combat.DEFENDER_DESTROYED:
            return True
    return False


def _coordination(own: tuple[Piece, ...], enemy: list[Piece], weights: HeuristicWeights) -> float:
    """L字（斜め1マス）に並び、縦向きと横向きが組になった駒のペアを評価する。"""
    score = 0.0
    for i, a in enumerate(own):
        for b in own[i + 1 :]:
            if abs(a.x - b.x) != 1 or abs(a.y - b.y) != 1:
                continue
            if a.facing.is_vertical == b.facing.is_vertical:
                continue
            bonus = weights.coordination
            near = any(
                min(abs(e.x - a.x) + abs(e.y - a.y), abs(e.x - b.x) + abs(e.y - b.y)) <= 2
                for e in enemy
            )
            if near:
                bonus *= weights.pressure
            score += bonus
    return score
