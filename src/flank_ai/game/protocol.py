"""Capability interfaces shared by the rule engine and the search engines.

ルールエンジンと探索エンジンの間の共通インタフェース（プロトコル）。

探索アルゴリズム（MCTS・貪欲法・ランダム）は具体的なクラスではなく、
このプロトコルにだけ依存する。Enumerator と Evaluator を差し替えれば、
ルールのコードに触れずに探索戦略を変えられる。
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flank_ai.game.types import TurnSequence


@runtime_checkable  # isinstance() でのランタイムチェックを有効にする
class GameState(Protocol):
    """Common interface for turn-based game states.

    重要: apply_sequence() は新しい状態を返す（イミュータブル設計）。
    イミュータブルにすることで、探索木のノードを安全に共有できる。
    """

    @property
    def current_player(self) -> int:
        """現在手番のプレイヤーを返す。"""
        ...

    @property
    def players(self) -> tuple[int, ...]:
        """手番順のプレイヤー一覧を返す。"""
        ...

    @property
    def is_terminal(self) -> bool:
        """ゲームが終了していれば True を返す。"""
        ...

    @property
    def winner(self) -> int | None:
        """勝者を返す。引き分けや対局中は None。"""
        ...

    def apply_sequence(self, sequence: TurnSequence) -> GameState:
        """手順列を適用してターンを終えた新しい状態を返す（元の状態は変化しない）。"""
        ...


@runtime_checkable
class Enumerator(Protocol):
    """Produces candidate turn sequences for a player."""

    def enumerate_sequences(self, state: GameState, player: int) -> list[TurnSequence]:
        """候補となる手順列を返す。手がなければ空の手順（パス）だけを返す。"""
        ...


@runtime_checkable
class Evaluator(Protocol):
    """Scores a state from one player's perspective."""

    def evaluate(self, state: GameState, player: int) -> float:
        """player から見た局面の評価値を返す（大きいほど player に有利）。"""
        ...
