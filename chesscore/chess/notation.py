"""
Thin adapter between move strings and structured Move values.

Only coordinate (UCI) notation: "e2e4", "e7e8q", castling as the king move "e1g1".
"""

from typing import Optional

from chesscore.chess import movegen
from chesscore.chess.fen import is_valid_square
from chesscore.chess.moves import Move
from chesscore.chess.pieces import FEN_TO_PIECE, PieceType
from chesscore.chess.position import Position
from chesscore.chess.square import Square
from chesscore.core.exceptions import IllegalMoveError


def build_uci(
    from_square_alg: str, to_square_alg: str, promotion: Optional[str] = None
) -> str:
    """Combine separately supplied squares (+ optional piece name, e.g. 'queen') into UCI notation."""
    promotion_char = ""
    if promotion:
        promotion_char = next(
            (char for char, piece in FEN_TO_PIECE.items() if piece.name.lower() == promotion.lower()),
            "",
        )
    return f"{from_square_alg}{to_square_alg}{promotion_char}"


def parse_uci(position: Position, uci: str) -> Move:
    """
    Resolve a UCI string to the matching legal move of the position (piece, capture and flags filled in).

    Raises IllegalMoveError for malformed strings or moves that are not legal,
    IncompleteMoveError for a pawn reaching the final rank without promotion piece.
    """
    uci = uci.strip()
    from_alg, to_alg, promotion_char = uci[:2], uci[2:4], uci[4:]
    if not (len(uci) in (4, 5) and is_valid_square(from_alg) and is_valid_square(to_alg)):
        raise IllegalMoveError(f"Cannot interpret {uci!r} as a move in UCI notation.")

    promote_to: Optional[PieceType] = None
    if promotion_char:
        promote_to = FEN_TO_PIECE.get(promotion_char.lower())
        if promote_to is None or promote_to in (PieceType.PAWN, PieceType.KING):
            raise IllegalMoveError(f"Cannot promote into {promotion_char!r}: {uci}")

    return movegen.find_legal_move(
        position,
        Square.from_algebraic(from_alg),
        Square.from_algebraic(to_alg),
        promote_to,
    )
