"""
Game state machine: classify a position as ongoing / check / checkmate / stalemate / draw.

The status is computed, never stored. Everything but the repetition rule can be read off the position itself;
repetitions need the History of the game.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional, Self

from chesscore.chess import movegen
from chesscore.chess.board import Board
from chesscore.chess.pieces import Color, PieceType
from chesscore.core.shared_types import Status

if TYPE_CHECKING:
    from chesscore.chess.history import History
    from chesscore.chess.position import Position

# 50 moves by each player without a pawn move or capture
FIFTY_MOVE_RULE_HALF_MOVES = 100
REPETITIONS_FOR_DRAW = 3


class GameState(Enum):
    ONGOING = auto()
    CHECK = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW = auto()


class DrawReason(Enum):
    FIFTY_MOVE = "fifty-move"
    INSUFFICIENT_MATERIAL = "insufficient-material"
    REPETITION = "repetition"


@dataclass(frozen=True)
class GameStatus:
    """
    Tagged variant
    ---
    * Ongoing
    * Check(side): `side` is the color in check
    * Checkmate(winner): `side` is the color that delivered mate
    * Stalemate
    * Draw(reason)
    """

    state: GameState
    side: Optional[Color] = None
    reason: Optional[DrawReason] = None

    @classmethod
    def ongoing(cls) -> Self:
        return cls(GameState.ONGOING)

    @classmethod
    def check(cls, side: Color) -> Self:
        return cls(GameState.CHECK, side=side)

    @classmethod
    def checkmate(cls, winner: Color) -> Self:
        return cls(GameState.CHECKMATE, side=winner)

    @classmethod
    def stalemate(cls) -> Self:
        return cls(GameState.STALEMATE)

    @classmethod
    def draw(cls, reason: DrawReason) -> Self:
        return cls(GameState.DRAW, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state in (GameState.CHECKMATE, GameState.STALEMATE, GameState.DRAW)

    @property
    def winner(self) -> Optional[Color]:
        return self.side if self.state == GameState.CHECKMATE else None

    @property
    def label(self) -> Status:
        """Human readable version, shared with the outer layers"""
        if self.state == GameState.DRAW:
            return _DRAW_LABELS[self.reason]
        return _STATE_LABELS[self.state]


_STATE_LABELS: dict[GameState, Status] = {
    GameState.ONGOING: Status.IN_PROGRESS,
    GameState.CHECK: Status.CHECK,
    GameState.CHECKMATE: Status.CHECKMATE,
    GameState.STALEMATE: Status.STALEMATE,
}
_DRAW_LABELS: dict[Optional[DrawReason], Status] = {
    DrawReason.FIFTY_MOVE: Status.DRAW_FIFTY_MOVE_RULE,
    DrawReason.INSUFFICIENT_MATERIAL: Status.DRAW_INSUFFICIENT_MATERIAL,
    DrawReason.REPETITION: Status.DRAW_REPETITION,
}


def classify(position: Position, history: Optional[History] = None) -> GameStatus:
    """
    Evaluated in this order (first match wins):
    1. no legal moves and in check --> Checkmate
    2. no legal moves, not in check --> Stalemate
    3. half move clock reached 100 --> Draw (fifty-move)
    4. current position occurred 3 times --> Draw (repetition). Only when a history is supplied.
    5. neither side can deliver mate --> Draw (insufficient material)
    6. in check --> Check
    7. Ongoing
    """
    color = position.color_to_move
    in_check = position.board.is_check(color)

    if not movegen.has_legal_move(position):
        if in_check:
            return GameStatus.checkmate(color.opponent)
        return GameStatus.stalemate()

    if position.half_move_clock >= FIFTY_MOVE_RULE_HALF_MOVES:
        return GameStatus.draw(DrawReason.FIFTY_MOVE)

    if history is not None and history.count(position.key) >= REPETITIONS_FOR_DRAW:
        return GameStatus.draw(DrawReason.REPETITION)

    if is_insufficient_material(position.board):
        return GameStatus.draw(DrawReason.INSUFFICIENT_MATERIAL)

    if in_check:
        return GameStatus.check(color)
    return GameStatus.ongoing()


MINOR_PIECES = (PieceType.KNIGHT, PieceType.BISHOP)


def is_insufficient_material(board: Board) -> bool:
    """
    Neither side can possibly deliver checkmate
    ---
    * king vs king
    * king + a single minor piece vs king
    * kings + bishops only, all bishops on squares of the same color (any number, either side)

    Anything else (pawns, rooks, queens, two knights, ...) counts as sufficient.
    """
    non_king_pieces = [
        (square, piece)
        for square, piece in board.position.items()
        if piece.type != PieceType.KING
    ]
    if len(non_king_pieces) == 0:
        return True

    if len(non_king_pieces) == 1:
        _, piece = non_king_pieces[0]
        return piece.type in MINOR_PIECES

    if all(piece.type == PieceType.BISHOP for _, piece in non_king_pieces):
        square_colors = {square.is_light for square, _ in non_king_pieces}
        return len(square_colors) == 1
    return False
