"""
Type definitions used across layers (domain, service, API, persistence)

The domain layer has its own Enums (chesscore/chess/pieces.py). These string versions are what travels across
the boundaries (JSON, database columns).
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_REPETITION = "draw by repetition"
    DRAW_FIFTY_MOVE_RULE = "draw by fifty-move rule"
    DRAW_INSUFFICIENT_MATERIAL = "draw by insufficient material"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PromotionPiece(StrEnum):
    """Piece types a pawn can promote into"""

    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
