"""FastAPI web application for playing Flank.

FastAPI を使った Flank の Web API。
サーバ側の TurnController が正規の対局状態を持ち、クライアントの手はすべてここで検証する。
クライアントがターン全体をまとめて送る場合（/api/commit-turn）も、
サーバはターン開始局面から手順を1手ずつ再生し、クライアントが計算した結果は信用しない。

エンドポイント:
  POST /api/new-game         新規対局を開始（ゲームIDを返す）
  GET  /api/state/{id}       現在の局面情報を取得
  POST /api/pivot            ブロックを回転させる
  POST /api/step             ブロックを隣のマスへ動かす
  POST /api/end-turn         ターンを終える
  POST /api/commit-turn      ターン全体（開始局面 + 手順）を確定する
  POST /api/ai-turn/{id}     AI が現在の手番で1ターン指す

手の却下はエラーではないので 200 で返し、rejection フィールドに理由を入れる。
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from flank_ai.engine.greedy import greedy_sequence
from flank_ai.engine.mcts import MCTSConfig
from flank_ai.engine.random_player import random_sequence
from flank_ai.engine.search import SearchConfig, make_player
from flank_ai.game.board import Piece
from flank_ai.game.controller import TurnController
from flank_ai.game.display import board_to_str
from flank_ai.game.rules import Rejection
from flank_ai.game.state import FlankState
from flank_ai.game.types import Direction, GameConfig, Move, Pivot, Step, Turn, TurnSequence

logger = logging.getLogger(__name__)

app = FastAPI(title="Flank AI")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_games: dict[str, dict[str, Any]] = {}

FacingName = Literal["up", "down", "left", "right"]


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    board_size: int = Field(8, ge=4, le=16)
    ai_type: str = "mcts"  # AI種別: "mcts", "greedy", "random"
    ai_player: int | None = 1  # AI が担当するプレイヤー（None なら人間同士）
    num_simulations: int = Field(48, ge=1, le=2000)  # MCTS のシミュレーション回数


class PieceModel(BaseModel):
    x: int
    y: int
    facing: FacingName


class MoveModel(BaseModel):
    """手のレコード。type="pivot" は turn、type="step" は dx, dy を使う。"""

    type: Literal["pivot", "step"]
    piece_index: int
    turn: Literal["left", "right"] = "left"
    dx: int = 0
    dy: int = 0


class PivotRequest(BaseModel):
    game_id: str
    player: int
    piece_index: int
    turn: Literal["left", "right"]


class StepRequest(BaseModel):
    game_id: str
    player: int
    piece_index: int
    target_x: int
    target_y: int


class EndTurnRequest(BaseModel):
    game_id: str
    player: int


class CommitTurnRequest(BaseModel):
    """ターン確定リクエスト。turn_start はそのプレイヤーのターン開始時の駒列。"""

    game_id: str
    player: int
    turn_start: list[PieceModel]
    sequence: list[MoveModel]


def _get_ai_fn(ai_type: str, num_simulations: int) -> Callable[[FlankState], TurnSequence]:
    """Get the AI turn function based on type.

    AI種別に応じた手順選択関数を返す。
    """
    if ai_type == "random":
        # ランダムAI（最弱、動作確認用）
        return lambda state: random_sequence(state)
    if ai_type == "greedy":
        return lambda state: greedy_sequence(state)
    if ai_type == "mcts":
        return make_player(SearchConfig(mcts=MCTSConfig(num_simulations=num_simulations)))
    msg = f"Unknown AI type: {ai_type}"
    raise ValueError(msg)


def _piece_to_dict(piece: Piece) -> dict[str, Any]:
    return {"x": piece.x, "y": piece.y, "facing": piece.facing.name.lower()}


def _piece_from_model(model: PieceModel) -> Piece:
    return Piece(model.x, model.y, Direction[model.facing.upper()])


def _move_to_dict(move: Move) -> dict[str, Any]:
    if isinstance(move, Pivot):
        return {"type": "pivot", "piece_index": move.piece_index, "turn": move.turn.name.lower()}
    return {"type": "step", "piece_index": move.piece_index, "dx": move.dx, "dy": move.dy}


def _move_from_model(model: MoveModel) -> Move:
    if model.type == "pivot":
        return Pivot(model.piece_index, Turn[model.turn.upper()])
    return Step(model.piece_index, model.dx, model.dy)


def _state_to_dict(state: FlankState) -> dict[str, Any]:
    """Convert game state to JSON-serializable dict.

    局面情報を JSON 形式（辞書）に変換する。
    """
    result = state.result
    return {
        "size": state.board.size,
        "current_player": state.current_player,  # 手番
        "moves_used": state.turn.moves_used,  # このターンで使った手数
        "moves_left": state.turn.moves_left,
        "order": list(state.turn.order),
        "is_terminal": state.is_terminal,  # 終局フラグ
        "outcome": result.outcome.value,
        "winner": result.winner,  # 勝者（None=対局中または引き分け）
        "pieces": [[_piece_to_dict(p) for p in pieces] for pieces in state.board.pieces],
        "legal_moves": [_move_to_dict(m) for m in state.legal_moves()],
        "board_display": board_to_str(state.board),  # テキスト形式の盤面表示
    }


def _get_game(game_id: str) -> dict[str, Any]:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return game


def _move_response(controller: TurnController, rejection: Rejection | None) -> dict[str, Any]:
    return {
        "accepted": rejection is None,
        "rejection": rejection.value if rejection is not None else None,
        "phase": controller.phase.value,
        "state": _state_to_dict(controller.state),
    }


@app.post("/api/new-game")
async def new_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。

    対局IDと初期局面情報を返す。
    """
    try:
        ai_fn = _get_ai_fn(req.ai_type, req.num_simulations) if req.ai_player is not None else None
    except ValueError as e:
        raise HTTPException(400, str(e)) from e

    game_id = str(uuid.uuid4())[:8]  # 短いIDを生成
    controller = TurnController(GameConfig(board_size=req.board_size))
    _games[game_id] = {
        "controller": controller,
        "ai_fn": ai_fn,
        "ai_player": req.ai_player,
    }
    logger.info("new game %s (ai=%s as player %s)", game_id, req.ai_type, req.ai_player)

    return {
        "game_id": game_id,
        "state": _state_to_dict(controller.state),
    }


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。"""
    controller: TurnController = _get_game(game_id)["controller"]
    return _state_to_dict(controller.state)


@app.post("/api/pivot")
async def pivot(req: PivotRequest) -> dict[str, Any]:
    controller: TurnController = _get_game(req.game_id)["controller"]
    rejection = controller.pivot(req.player, req.piece_index, Turn[req.turn.upper()])
    return _move_response(controller, rejection)


@app.post("/api/step")
async def step(req: StepRequest) -> dict[str, Any]:
    controller: TurnController = _get_game(req.game_id)["controller"]
    rejection = controller.step(req.player, req.piece_index, req.target_x, req.target_y)
    return _move_response(controller, rejection)


@app.post("/api/end-turn")
async def end_turn(req: EndTurnRequest) -> dict[str, Any]:
    controller: TurnController = _get_game(req.game_id)["controller"]
    rejection = controller.end_turn(req.player)
    return _move_response(controller, rejection)


@app.post("/api/commit-turn")
async def commit_turn(req: CommitTurnRequest) -> dict[str, Any]:
    """ターン全体を確定する。

    サーバはプレイヤーの駒列を turn_start に戻し、sequence を1手ずつ再生する。
    却下された手は飛ばして続ける（skipped に理由を返す）。
    """
    controller: TurnController = _get_game(req.game_id)["controller"]
    report = controller.commit_turn(
        req.player,
        tuple(_piece_from_model(p) for p in req.turn_start),
        tuple(_move_from_model(m) for m in req.sequence),
    )
    response = _move_response(controller, report.rejection)
    response["applied"] = [_move_to_dict(m) for m in report.applied]
    response["skipped"] = [
        {"move": _move_to_dict(m), "rejection": r.value} for m, r in report.skipped
    ]
    response["dropped"] = [_move_to_dict(m) for m in report.dropped]
    return response


@app.post("/api/ai-turn/{game_id}")
async def ai_turn(game_id: str) -> dict[str, Any]:
    """AI が現在の手番で1ターン指す。

    AI の手順も commit_turn() を通すので、人間の手と同じ検証を受ける。
    """
    game = _get_game(game_id)
    controller: TurnController = game["controller"]
    state = controller.state

    if state.is_terminal:
        raise HTTPException(400, "Game is already over")
    mover = state.current_player
    if game["ai_fn"] is None or mover != game["ai_player"]:
        raise HTTPException(400, "Current player is human; submit moves instead")

    sequence = game["ai_fn"](state)
    report = controller.commit_turn(mover, state.board.pieces_of(mover), sequence)
    response = _move_response(controller, report.rejection)
    response["sequence"] = [_move_to_dict(m) for m in sequence]
    response["moved_by"] = mover
    return response


def main() -> None:
    """Run the web server.

    `flank-web` または `python -m flank_ai.web.app` で起動する。
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
