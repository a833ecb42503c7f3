"""
Representation of a single position: everything that can be encoded in a FEN string.

Positions transition through `apply(move)`, which returns a new Position and leaves the original untouched.
Search and move generation need something cheaper: `make_move` updates the position in place and returns an
UndoRecord, which `unmake_move` uses to restore the exact previous position. Calls must be strictly paired
(stack discipline).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Self

from chesscore.chess import movegen
from chesscore.chess.board import Board
from chesscore.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    castling_direction,
    castling_from_fen,
    castling_to_fen,
    revoked_rights,
)
from chesscore.chess.fen import STARTING_FEN, fen_problem
from chesscore.chess.moves import Move, MoveFlag
from chesscore.chess.pieces import Color, Piece, PieceType
from chesscore.chess.square import Square
from chesscore.chess.status import classify
from chesscore.chess.zobrist import zobrist_key
from chesscore.core.exceptions import GameOverError, InvalidFENError


@dataclass(frozen=True)
class UndoRecord:
    """Snapshot of everything `make_move` cannot recompute when taking the move back."""

    move: Move
    captured_piece: Optional[Piece]
    capture_square: Optional[Square]
    castling_rights: frozenset[CastlingDirection]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int


@dataclass
class Position:
    """
    * board: where the pieces are
    * color_to_move: whose turn it is
    * castling_rights: the castling directions still available (rights only ever get revoked)
    * en_passant_square: the square a pawn skipped with a double push on the previous move (if any)
    * half_move_clock: moves since the last pawn move or capture (draw after 100 half-moves)
    * num_turns: starts at 1 and increments after every move black makes.
    """

    board: Board
    color_to_move: Color
    castling_rights: frozenset[CastlingDirection]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    def __post_init__(self) -> None:
        # exactly one king each: anything else is a programming error, not a game state
        assert all(self.board.count_kings(color) == 1 for color in Color), (
            f"Position requires exactly one king per color: {self.board.to_fen()}"
        )

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into a position"""

        problem = fen_problem(fen)
        if problem is not None:
            raise InvalidFENError(f"Cannot interpret {fen!r} as FEN: {problem}")

        # extract the different components. FEN is space separated
        (
            placement,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            num_turns,
        ) = fen.split(" ")

        board = Board.from_fen(placement)
        for color in Color:
            if board.count_kings(color) != 1:
                raise InvalidFENError(
                    f"FEN must contain exactly one {color.name.lower()} king: {fen}"
                )

        # Check which color is to move
        color_to_move = Color.WHITE if active_color == "w" else Color.BLACK

        # parse en passant target square
        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )
        return cls(
            board,
            color_to_move,
            castling_from_fen(castling_str),
            en_passant_square,
            int(half_move_clock),
            int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        castling_str = castling_to_fen(self.castling_rights)

        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return f"{self.board.to_fen()} {active_color} {castling_str} {en_passant_algebraic} {self.half_move_clock} {self.num_turns}"

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    def copy(self) -> Self:
        return type(self)(
            self.board.copy(),
            self.color_to_move,
            self.castling_rights,
            self.en_passant_square,
            self.half_move_clock,
            self.num_turns,
        )

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.board.piece_at(square)

    @property
    def key(self) -> int:
        """Zobrist hash: piece placement, side to move, castling rights, and (capturable) en passant file"""
        return zobrist_key(self)

    def legal_moves(self) -> list[Move]:
        return movegen.legal_moves(self)

    def is_check(self) -> bool:
        return movegen.is_in_check(self)

    # --- TRANSITIONS ---
    def apply(self, move: Move) -> Position:
        """
        The position after the move. Does not change this position.

        Raises
        ---
        * GameOverError: the position is checkmate, stalemate or a draw
        * IncompleteMoveError: promotion move without a piece type to promote into
        * IllegalMoveError: the move is not in the legal move set
        """
        status = classify(self)
        if status.is_terminal:
            raise GameOverError(f"No moves can be made: {status.label}")

        movegen.ensure_legal(self, move)

        new_position = self.copy()
        new_position.make_move(move)
        return new_position

    def make_move(self, move: Move) -> UndoRecord:
        """
        Update the position in place. Does NOT check legality: only feed it moves from the move generator.

        1. update the board (NOTE: if castling, move the king and the rook. En passant removes a pawn next to the target square)
        2. revoke castling rights if needed
        3. set / clear the en passant square
        4. move counters
        5. hand the turn to the opponent
        """
        color = self.color_to_move
        board = self.board
        previous_rights = self.castling_rights
        previous_en_passant = self.en_passant_square
        previous_half_move_clock = self.half_move_clock
        previous_num_turns = self.num_turns

        if move.is_en_passant:
            capture_square: Optional[Square] = movegen.en_passant_capture_square(move)
            captured_piece = board.remove_piece(capture_square)
            board.move_piece(move.from_square, move.to_square)
        else:
            captured_piece = board.move_piece(move.from_square, move.to_square)
            capture_square = move.to_square if captured_piece is not None else None

        if move.promote_to is not None:
            board.place_piece(Piece(move.promote_to, color), move.to_square)

        if move.is_castling:
            rule = CASTLING_RULES[
                castling_direction(color, MoveFlag.KING_SIDE_CASTLE in move.flags)
            ]
            board.move_piece(rule.rook_from, rule.rook_to)

        if self.castling_rights:
            self.castling_rights = self.castling_rights - revoked_rights(
                self.castling_rights, (move.from_square, move.to_square)
            )

        self.en_passant_square = (
            move.from_square.shifted(0, color.forward)
            if move.is_double_pawn_push
            else None
        )

        if move.piece == PieceType.PAWN or captured_piece is not None:
            self.half_move_clock = 0
        else:
            self.half_move_clock += 1

        if color == Color.BLACK:
            self.num_turns += 1

        self.color_to_move = color.opponent

        return UndoRecord(
            move=move,
            captured_piece=captured_piece,
            capture_square=capture_square,
            castling_rights=previous_rights,
            en_passant_square=previous_en_passant,
            half_move_clock=previous_half_move_clock,
            num_turns=previous_num_turns,
        )

    def unmake_move(self, record: UndoRecord) -> None:
        """Exact inverse of `make_move`: must be called with the record of the last move made."""
        move = record.move
        color = self.color_to_move.opponent
        board = self.board

        if move.is_castling:
            rule = CASTLING_RULES[
                castling_direction(color, MoveFlag.KING_SIDE_CASTLE in move.flags)
            ]
            board.move_piece(rule.rook_to, rule.rook_from)

        board.move_piece(move.to_square, move.from_square)
        if move.promote_to is not None:
            board.place_piece(Piece(PieceType.PAWN, color), move.from_square)

        if record.captured_piece is not None:
            assert record.capture_square is not None
            board.place_piece(record.captured_piece, record.capture_square)

        self.color_to_move = color
        self.castling_rights = record.castling_rights
        self.en_passant_square = record.en_passant_square
        self.half_move_clock = record.half_move_clock
        self.num_turns = record.num_turns
