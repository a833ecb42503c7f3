"""
Validation of FEN strings (Forsyth-Edwards Notation).

    <placement> <active color> <castling rights> <en passant square> <half move clock> <full move number>

ex) rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

Only the notation is checked here. Whether the position makes sense (one king per color) is up to Position.from_fen.
"""

from itertools import combinations
from string import ascii_lowercase
from typing import Callable, Optional

from chesscore.chess.pieces import FEN_TO_PIECE
from chesscore.chess.square import BOARD_DIMENSIONS

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# rights are always written in this order, a "-" when none are left
CASTLING_LETTERS = "KQkq"
VALID_CASTLING_ENCODINGS: list[str] = ["-"] + [
    "".join(letters)
    for length in range(1, len(CASTLING_LETTERS) + 1)
    for letters in combinations(CASTLING_LETTERS, length)
]


def fen_problem(fen: str) -> Optional[str]:
    """Describe the first thing wrong with the FEN string, or None if it is fine."""
    fields = fen.split(" ")
    if len(fields) != len(FEN_FIELDS):
        return f"expected {len(FEN_FIELDS)} space separated fields, got {len(fields)}"

    for (name, check), value in zip(FEN_FIELDS, fields):
        if not check(value):
            return f"invalid {name} {value!r}"
    return None


def is_valid_fen(fen: str) -> bool:
    return fen_problem(fen) is None


def is_valid_position(position: str) -> bool:
    """Eight ranks separated by "/", each adding up to eight files of pieces and empty squares."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                return False
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """A '-' or a square on the rank a pawn skips with its double push (3rd or 6th)"""
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and en_passant[1:] in {
        "3",
        str(BOARD_DIMENSIONS[1] - 2),
    }


def is_valid_square(square: str) -> bool:
    """A letter for the file followed by a number for the rank, both on the board"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    file_char, rank_char = square[0], square[1:]
    return (
        file_char in ascii_lowercase[:num_files]
        and rank_char.isdigit()
        and 1 <= int(rank_char) <= num_ranks
    )


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


FEN_FIELDS: tuple[tuple[str, Callable[[str], bool]], ...] = (
    ("piece placement", is_valid_position),
    ("active color", is_valid_color_code),
    ("castling rights", is_valid_castling_rights),
    ("en passant square", is_valid_en_passant),
    ("half move clock", is_valid_move_counter),
    ("full move number", is_valid_move_counter),
)
