"""CLI entry point for flank-ai: Human vs AI.

コマンドラインで動く Flank 対局プログラム。
プレイヤー（player 0、上側）対 AI（player 1、下側）で対局できる。

起動方法: `flank-cli`
"""

from __future__ import annotations

import logging

from flank_ai.engine.mcts import MCTSConfig
from flank_ai.engine.search import SearchConfig, choose_sequence
from flank_ai.game.controller import TurnController
from flank_ai.game.display import board_to_str
from flank_ai.game.moves import format_move, format_sequence
from flank_ai.game.state import Outcome
from flank_ai.game.types import Pivot

HUMAN = 0


def main() -> None:
    """Run a Human (player 0) vs AI (player 1) game.

    ゲームの流れ:
    1. 盤面を表示
    2. 合法手一覧を表示して番号入力を求める（"e" でターン終了）
    3. 手数を使い切るかターンを終えると AI が1ターン指す
    4. 終局まで繰り返す
    """
    logging.basicConfig(level=logging.WARNING)
    print("=== Flank ===")
    print("You are player 0 (top). AI is player 1 (bottom).")
    print()

    controller = TurnController()
    search_config = SearchConfig(mcts=MCTSConfig(num_simulations=48))

    while not controller.state.is_terminal:
        state = controller.state
        print(board_to_str(state.board))
        print()

        if state.current_player == HUMAN:
            moves = state.legal_moves()
            print(f"Moves left this turn: {state.turn.moves_left}")
            for i, m in enumerate(moves):
                print(f"  {i}: {format_move(m)}")
            print("  e: end turn")
            print()

            # 入力検証ループ（正しい番号が入力されるまで繰り返す）
            while True:
                try:
                    choice = input("Your move (number): ").strip()
                    if choice == "e":
                        controller.end_turn(HUMAN)
                        break
                    idx = int(choice)
                    if 0 <= idx < len(moves):
                        move = moves[idx]
                        if isinstance(move, Pivot):
                            rejection = controller.pivot(HUMAN, move.piece_index, move.turn)
                        else:
                            piece = state.board.pieces_of(HUMAN)[move.piece_index]
                            rejection = controller.step(
                                HUMAN, move.piece_index, piece.x + move.dx, piece.y + move.dy
                            )
                        if rejection is not None:
                            print(f"Rejected: {rejection.value}")
                            continue
                        break
                    print(f"Invalid: choose 0-{len(moves) - 1} or e")
                except ValueError:
                    print("Enter a number or e.")
                except (EOFError, KeyboardInterrupt):
                    print("\nGame aborted.")
                    return
        else:
            # AI の番: 1ターン分の手順を探索して確定する
            mover = state.current_player
            sequence = choose_sequence(state, search_config)
            print(f"AI plays: {format_sequence(sequence)}")
            controller.commit_turn(mover, state.board.pieces_of(mover), sequence)

        print()

    # 終局: 結果を表示
    print(board_to_str(controller.state.board))
    print()
    result = controller.result()
    if result.outcome == Outcome.DRAW:
        print("Draw!")
    elif result.winner == HUMAN:
        print("You win!")
    else:
        print("AI wins!")


if __name__ == "__main__":
    main()
