"""Flank: turn-based directional grid combat."""

from flank_ai.game.board import Board, Piece
from flank_ai.game.controller import TurnController
from flank_ai.game.display import board_to_str
from flank_ai.game.moves import atomic_moves, enumerate_sequences
from flank_ai.game.rules import Combat, Rejection, resolve_combat
from flank_ai.game.state import FlankState, GameResult, Outcome
from flank_ai.game.types import BOARD_SIZE, MOVE_BUDGET, Direction, Pivot, Step, Turn

__all__ = [
    "BOARD_SIZE",
    "Board",
    "Combat",
    "Direction",
    "FlankState",
    "GameResult",
    "MOVE_BUDGET",
    "Outcome",
    "Piece",
    "Pivot",
    "Rejection",
    "Step",
    "Turn",
    "TurnController",
    "atomic_moves",
    "board_to_str",
    "enumerate_sequences",
    "resolve_combat",
]
