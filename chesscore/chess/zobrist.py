"""
Zobrist hashing of positions.

A position's key XORs one random 64-bit number per (piece, square), one for black to move, one per castling right
still held and one per en passant file. Keys are used for repetition detection (History) and as transposition table
index.

The key is computed from scratch (no incremental maintenance on make/unmake).

NOTE two different positions can share a key. With 64-bit keys that is rare enough to accept for the transposition
table; it is not ruled out.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chesscore.chess.castling import CastlingDirection
from chesscore.chess.pieces import Color, Piece, PieceType
from chesscore.chess.square import BOARD_DIMENSIONS, Square

if TYPE_CHECKING:
    from chesscore.chess.position import Position

# Fixed seed: keys (and therefore search results) are identical across runs
ZOBRIST_SEED = 0x5EED_C4E55


@dataclass(frozen=True)
class ZobristKeys:
    pieces: dict[Piece, tuple[int, ...]]
    black_to_move: int
    castling: dict[CastlingDirection, int]
    en_passant_file: tuple[int, ...]

    @classmethod
    def generate(cls, seed: int = ZOBRIST_SEED) -> ZobristKeys:
        rng = random.Random(seed)
        num_squares = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]
        pieces = {
            Piece(piece_type, color): tuple(
                rng.getrandbits(64) for _ in range(num_squares)
            )
            for color in Color
            for piece_type in PieceType
        }
        black_to_move = rng.getrandbits(64)
        castling = {direction: rng.getrandbits(64) for direction in CastlingDirection}
        en_passant_file = tuple(
            rng.getrandbits(64) for _ in range(BOARD_DIMENSIONS[0])
        )
        return cls(pieces, black_to_move, castling, en_passant_file)


ZOBRIST = ZobristKeys.generate()


def zobrist_key(position: Position, keys: ZobristKeys = ZOBRIST) -> int:
    key = 0
    for square, piece in position.board.position.items():
        key ^= keys.pieces[piece][square.index]

    if position.color_to_move == Color.BLACK:
        key ^= keys.black_to_move

    for direction in position.castling_rights:
        key ^= keys.castling[direction]

    ep_square = position.en_passant_square
    if ep_square is not None and _en_passant_capturable(position, ep_square):
        key ^= keys.en_passant_file[ep_square.file - 1]
    return key


def _en_passant_capturable(position: Position, ep_square: Square) -> bool:
    """
    Only hash the en passant square when a pawn could actually take there.

    Otherwise the same placement would hash differently depending on whether the last move was a double push,
    which would hide repetitions.
    """
    color = position.color_to_move
    capturing_pawn = Piece(PieceType.PAWN, color)
    pawn_rank = ep_square.rank - color.forward
    return any(
        position.board.piece_at(Square(ep_square.file + df, pawn_rank)) == capturing_pawn
        for df in (-1, 1)
    )
