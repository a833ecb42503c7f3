"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from chesscore.chess.pieces import Color
from chesscore.chess.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value.lower() == "k"


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def between(self) -> list[Square]:
        """Squares in between king and rook. All of them must be empty to castle."""
        return squares_between_on_rank(self.king_from, self.rook_from)

    @property
    def king_path(self) -> list[Square]:
        """Squares the king stands on, passes through, and lands on. None of them may be attacked."""
        return [self.king_from] + squares_between_on_rank(
            self.king_from, self.king_to
        ) + [self.king_to]


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank

    Needed for checking if you can still castle (the Board will check which of those are empty etc.)
    """
    if from_square.rank != to_square.rank:
        raise ValueError(
            f"squares_between_on_rank requires both squares to lie on the same rank. \n from: {from_square}\n to:{to_square}"
        )

    df = 1 if to_square.file > from_square.file else -1
    return [
        Square(file, from_square.rank)
        for file in range(from_square.file + df, to_square.file, df)
    ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_options(color: Color) -> tuple[CastlingDirection, ...]:
    """The two directions a player of the given color could castle in"""
    return tuple(direction for direction in CASTLING_ORDER if direction.color == color)


def castling_direction(color: Color, king_side: bool) -> CastlingDirection:
    return next(
        direction
        for direction in castling_options(color)
        if direction.is_king_side == king_side
    )


def castling_from_fen(castle_fen: str) -> frozenset[CastlingDirection]:
    """parse the part of the FEN string that encodes castling rights"""
    return frozenset(
        direction for direction in CastlingDirection if direction.value in castle_fen
    )


def castling_to_fen(castling_rights: frozenset[CastlingDirection]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        [direction.value for direction in CASTLING_ORDER if direction in castling_rights]
    )
    return castling_chars or "-"


def revoked_rights(
    castling_rights: frozenset[CastlingDirection], touched: tuple[Square, ...]
) -> frozenset[CastlingDirection]:
    """
    Which rights get lost when a move touches (leaves or lands on) the given squares
    ----

    * the king leaving its home square --> both directions of that color
    * a rook leaving its home square --> the direction of that rook
    * anything landing on a rook home square (i.e. capturing the rook) --> the direction of that rook

    While a right is held, king and rook are known to still stand on their home squares, so simply
    looking at the squares involved is enough.
    """
    return frozenset(
        direction
        for direction in castling_rights
        if CASTLING_RULES[direction].king_from in touched
        or CASTLING_RULES[direction].rook_from in touched
    )
