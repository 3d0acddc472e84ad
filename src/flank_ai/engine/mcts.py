"""Monte Carlo Tree Search (MCTS) over whole-turn sequences."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import torch

from flank_ai.engine.random_player import random_sequence
from flank_ai.game.protocol import Enumerator, Evaluator
from flank_ai.game.state import FlankState
from flank_ai.game.types import TurnSequence

logger = logging.getLogger(__name__)


@dataclass
class MCTSNode:
    """A node in the MCTS tree.

    MCTSの探索木の1ノード。各ノードは1ターン分の手順を適用した後の局面に対応する。

    visit_count (N): このノードが訪問された回数
    total_value (W): このノードに入る手順を指したプレイヤー視点の価値の合計
    prior (P):       評価関数から作った事前確率
    sequence:        親の局面からこのノードに至る手順
    children:        子ノードのリスト（展開前は空）
    """

    state: FlankState
    sequence: TurnSequence = ()
    visit_count: int = 0
    total_value: float = 0.0
    prior: float = 0.0
    children: list[MCTSNode] = field(default_factory=list)
    expanded: bool = False

    @property
    def q_value(self) -> float:
        """Average value (W/N).

        Q値 = 総価値 / 訪問回数（-1〜+1）。
        """
        if self.visit_count == 0:
            return 0.0
        return self.total_value / self.visit_count


@dataclass(frozen=True)
class MCTSConfig:
    """Configuration for MCTS search.

    探索パラメータは呼び出し側が持つ（ルールエンジン側には持たせない）。
    """

    num_simulations: int = 64  # 1ターンあたりのシミュレーション回数
    c_puct: float = 1.4  # 探索と活用のバランス係数（大きいほど探索重視）
    temperature: float = 0.0  # 行動選択の温度（0 なら最多訪問を決定的に選ぶ）
    top_k: int = 24  # 展開時に残す子ノードの数（評価値の上位）
    prior_scale: float = 25.0  # 事前確率のソフトマックスに使う評価値のスケール
    value_scale: float = 200.0  # 評価値を tanh で [-1, 1] に写すときのスケール
    rollout_turns: int = 0  # 葉ノードからランダムに進めるターン数（0 なら評価値のみ）
    dirichlet_alpha: float = 0.3  # ディリクレノイズの集中度パラメータ
    dirichlet_epsilon: float = 0.0  # ノイズの混合率（自己対局では 0.25 程度）


class MCTS:
    """Monte Carlo Tree Search guided by a heuristic evaluator.

    評価関数で誘導する MCTS。1つの「手」はターン全体の手順列。

    アルゴリズムの4ステップ:
    1. 選択 (Selection):   PUCT スコアで子ノードを選ぶ
    2. 展開 (Expansion):   Enumerator で手順を列挙し、評価値から事前確率を作る
    3. 評価 (Evaluation):  葉の局面を（必要ならランダムに進めてから）評価する
    4. バックアップ (Backup): 各ノードで「手番プレイヤー視点」の価値を加算する

    価値はプレイヤーごとに持つ（max-n 方式）ので、3人以上の対局でも使える。
    """

    def __init__(self, enumerator: Enumerator, evaluator: Evaluator, config: MCTSConfig) -> None:
        self.enumerator = enumerator
        self.evaluator = evaluator
        self.config = config

    def search(self, state: FlankState) -> list[tuple[TurnSequence, float]]:
        """Run MCTS and return (sequence, probability) pairs for the root.

        MCTSを実行し、ルートの各手順の選択確率を返す。
        終局局面では空のリストを返す。
        """
        if state.is_terminal:
            return []

        root = MCTSNode(state=state)
        self._expand(root)
        if len(root.children) == 1:
            return [(root.children[0].sequence, 1.0)]

        # ルートにディリクレノイズを加えて探索の多様性を確保
        if self.config.dirichlet_epsilon > 0:
            self._add_dirichlet_noise(root)

        for _ in range(self.config.num_simulations):
            self._simulate(root)

        best = max(root.children, key=lambda c: (c.visit_count, c.prior))
        logger.debug(
            "mcts: %d children, best visits=%d q=%.3f after %d simulations",
            len(root.children),
            best.visit_count,
            best.q_value,
            self.config.num_simulations,
        )

        if self.config.temperature == 0:
            # 温度0: 最も訪問されたノードを決定論的に選択（本番対局用）
            return [(c.sequence, 1.0 if c is best else 0.0) for c in root.children]

        total = sum(c.visit_count ** (1.0 / self.config.temperature) for c in root.children)
        if total == 0:
            return [(c.sequence, c.prior) for c in root.children]
        return [
            (c.sequence, c.visit_count ** (1.0 / self.config.temperature) / total)
            for c in root.children
        ]

    def best_sequence(self, state: FlankState) -> TurnSequence:
        """Return the most probable sequence (the empty pass if nothing is possible)."""
        probs = self.search(state)
        if not probs:
            return ()
        return max(probs, key=lambda item: item[1])[0]

    def _simulate(self, node: MCTSNode) -> dict[int, float]:
        """Run one simulation from node. Returns per-player values.

        1回のシミュレーション（選択→展開→評価→バックアップ）。
        戻り値: プレイヤーごとの価値（+1=勝, -1=負）
        """
        if node.state.is_terminal:
            return self._values(node.state)

        # 葉ノード（未展開）: 展開して評価値を返す
        if not node.expanded:
            self._expand(node)
            return self._values(self._rollout(node.state))

        mover = node.state.current_player
        child = self._select_child(node)
        values = self._simulate(child)

        # バックアップ: この手順を選んだプレイヤー視点の価値を加算
        child.visit_count += 1
        child.total_value += values.get(mover, 0.0)
        return values

    def _select_child(self, node: MCTSNode) -> MCTSNode:
        """Select child with highest PUCT score.

        PUCT = Q(s,a) + c_puct * P(s,a) * sqrt(N(s)) / (1 + N(s,a))
        """
        parent_n = sum(c.visit_count for c in node.children)
        sqrt_parent = math.sqrt(parent_n + 1)

        best_child = node.children[0]
        best_score = float("-inf")
        for child in node.children:
            puct = child.q_value + self.config.c_puct * child.prior * sqrt_parent / (
                1 + child.visit_count
            )
            if puct > best_score:
                best_score = puct
                best_child = child
        return best_child

    def _expand(self, node: MCTSNode) -> None:
        """Enumerate the mover's sequences and attach the top_k children.

        同じ局面になる手順は最初に見つかった（最短の）ものだけを残す。
        事前確率は評価値のソフトマックス。
        """
        node.expanded = True
        state = node.state
        mover = state.current_player

        seen: set[FlankState] = set()
        candidates: list[tuple[TurnSequence, FlankState, float]] = []
        for sequence in self.enumerator.enumerate_sequences(state, mover):
            child_state = state.apply_sequence(sequence)
            if child_state in seen:
                continue
            seen.add(child_state)
            candidates.append((sequence, child_state, self.evaluator.evaluate(child_state, mover)))

        candidates.sort(key=lambda item: item[2], reverse=True)  # 安定ソート: 同点は列挙順
        candidates = candidates[: max(1, self.config.top_k)]

        scores = torch.tensor([score for _, _, score in candidates], dtype=torch.float32)
        priors = torch.softmax(scores / self.config.prior_scale, dim=0).tolist()
        node.children = [
            MCTSNode(state=child_state, sequence=sequence, prior=prior)
            for (sequence, child_state, _), prior in zip(candidates, priors)
        ]

    def _rollout(self, state: FlankState) -> FlankState:
        """葉の局面からランダムな手順で rollout_turns ターン進める。"""
        for _ in range(self.config.rollout_turns):
            if state.is_terminal:
                break
            state = state.apply_sequence(random_sequence(state))
        return state

    def _values(self, state: FlankState) -> dict[int, float]:
        """各プレイヤー視点の評価値を tanh で [-1, 1] に写す。"""
        return {
            player: math.tanh(self.evaluator.evaluate(state, player) / self.config.value_scale)
            for player in state.players
        }

    def _add_dirichlet_noise(self, root: MCTSNode) -> None:
        """Add Dirichlet noise to root priors for exploration.

        混合: new_prior = (1 - ε) * P(s,a) + ε * noise
        """
        noise = (
            torch.distributions.Dirichlet(
                torch.full((len(root.children),), self.config.dirichlet_alpha)
            )
            .sample()
            .tolist()
        )

        eps = self.config.dirichlet_epsilon
        for child, n in zip(root.children, noise):
            child.prior = (1 - eps) * child.prior + eps * n
