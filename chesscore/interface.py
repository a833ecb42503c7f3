"""
What the chess core offers to the outside world (CLI, UI, persistence, service layer).

The core consumes and produces structured values (Position, Move, GameStatus). Strings only enter through the
notation adapter (chesscore/chess/notation.py) and FEN (Position.from_fen / Position.to_fen).

Captured pieces are tracked per game: see `Game.captured_pieces(color)`.
"""

from typing import Optional

from chesscore.chess import movegen
from chesscore.chess.game import Game
from chesscore.chess.history import History
from chesscore.chess.moves import Move
from chesscore.chess.position import Position
from chesscore.chess.status import GameStatus, classify
from chesscore.core.config import SearchConfig
from chesscore.engine.evaluation import Evaluator
from chesscore.engine.search import SearchEngine, SearchResult

__all__ = [
    "Game",
    "GameStatus",
    "History",
    "Move",
    "Position",
    "SearchConfig",
    "SearchResult",
    "apply",
    "best_move",
    "legal_moves",
    "new_game",
    "search",
    "status",
]


def new_game() -> Position:
    """The standard starting arrangement"""
    return Position.starting_position()


def legal_moves(position: Position) -> list[Move]:
    return movegen.legal_moves(position)


def apply(position: Position, move: Move) -> Position:
    """The position after the move (raises IllegalMoveError, IncompleteMoveError or GameOverError)"""
    return position.apply(move)


def status(position: Position, history: Optional[History] = None) -> GameStatus:
    return classify(position, history)


def search(
    position: Position,
    config: Optional[SearchConfig] = None,
    history: Optional[History] = None,
    evaluator: Optional[Evaluator] = None,
) -> SearchResult:
    return SearchEngine(evaluator, config).search(position, config, history)


def best_move(
    position: Position,
    config: Optional[SearchConfig] = None,
    history: Optional[History] = None,
    evaluator: Optional[Evaluator] = None,
) -> Move:
    return search(position, config, history, evaluator).move
