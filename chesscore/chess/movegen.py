"""
Move generation: from candidate (pseudo-legal) moves to the legal move set of a position.

1. generate candidate moves, using the basic movement rules for all pieces (the board does this calculation)
2. add candidate castling moves
3. add candidate en passant moves
4. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.

Promotions are already expanded by the pawn movement rule (one move per piece type to promote into).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from chesscore.chess.castling import CASTLING_RULES, castling_options
from chesscore.chess.moves import Move, MoveFlag
from chesscore.chess.pieces import Piece, PieceType
from chesscore.chess.square import Square
from chesscore.core.exceptions import IllegalMoveError, IncompleteMoveError

if TYPE_CHECKING:
    from chesscore.chess.position import Position


def pseudo_legal_moves(position: Position) -> list[Move]:
    """Obeys the movement rules of the pieces, but might leave your own king in check."""
    color = position.color_to_move
    candidate_moves = position.board.generate_candidate_moves(color)
    candidate_moves.extend(castling_moves(position))
    if position.en_passant_square is not None:
        candidate_moves.extend(en_passant_moves(position))
    return candidate_moves


def legal_moves(position: Position) -> list[Move]:
    """
    The legal move set of the position, in a deterministic (generation) order.

    NOTE the order carries no meaning for correctness. Search re-orders the moves for pruning efficiency.
    """
    return [move for move in pseudo_legal_moves(position) if _is_legal(position, move)]


def has_legal_move(position: Position) -> bool:
    """Early exit version of `legal_moves`: enough to tell a mate/stalemate apart from an ongoing game."""
    return any(_is_legal(position, move) for move in pseudo_legal_moves(position))


def is_in_check(position: Position) -> bool:
    return position.board.is_check(position.color_to_move)


def _is_legal(position: Position, move: Move) -> bool:
    """
    Return True if the move does not leave (or put) your own king in check

    plan:
    1. make the candidate move on the position itself
    2. determine if king is in check on the new board
    3. take the move back
    """
    color = position.color_to_move
    record = position.make_move(move)
    try:
        return not position.board.is_check(color)
    finally:
        position.unmake_move(record)


def find_legal_move(
    position: Position,
    from_square: Square,
    to_square: Square,
    promote_to: Optional[PieceType] = None,
) -> Move:
    """
    Look up the legal move matching a (from, to, promotion) request, with all move details (piece, capture, flags) filled in.

    Raises
    ---
    * IncompleteMoveError: a pawn would reach the final rank, but no piece type to promote into was given
    * IllegalMoveError: no legal move matches
    """
    matches = [
        move
        for move in legal_moves(position)
        if move.from_square == from_square and move.to_square == to_square
    ]
    for move in matches:
        if move.promote_to == promote_to:
            return move

    if promote_to is None and any(move.promote_to is not None for move in matches):
        raise IncompleteMoveError(
            f"Move {from_square.to_algebraic()}{to_square.to_algebraic()} requires a piece type to promote into."
        )
    raise IllegalMoveError(
        f"Move not allowed: {from_square.to_algebraic()}{to_square.to_algebraic()}"
        + (f" (promotion to {promote_to.name.lower()})" if promote_to else "")
    )


def ensure_legal(position: Position, move: Move) -> None:
    """
    Defend against moves that did not come from the move generator.

    Raises IncompleteMoveError if the move only lacks the promotion piece type, IllegalMoveError otherwise.
    """
    if move in legal_moves(position):
        return
    if move.promote_to is None:
        # raises IncompleteMoveError when a promotion with the same squares exists
        find_legal_move(position, move.from_square, move.to_square)
    raise IllegalMoveError(f"Move not allowed: {move.to_uci()}")


# -- CASTLING RULE HELPERS ---
def castling_moves(position: Position) -> list[Move]:
    """
    Candidate castling moves for the player to move
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (and king / rook are really on their starting squares).
    * You are not currently in check (you cannot castle out of check).
    * All squares in between the king and the rook are empty.
    * The king does not pass through, or land on, a square that is under attack.
    """
    color = position.color_to_move
    board = position.board
    directions = [
        direction
        for direction in castling_options(color)
        if direction in position.castling_rights
    ]
    if not directions:
        return []

    # Cannot castle out of a check.
    if board.is_check(color):
        return []

    moves: list[Move] = []
    for direction in directions:
        rule = CASTLING_RULES[direction]
        if board.piece_at(rule.king_from) != Piece(PieceType.KING, color):
            continue
        if board.piece_at(rule.rook_from) != Piece(PieceType.ROOK, color):
            continue

        # Cannot castle if any of the squares in between is occupied
        if board.is_any_occupied(rule.between):
            continue

        # Cannot castle if the king would cross or land on a square under attack
        if board.is_any_under_attack(rule.king_path, color.opponent):
            continue

        flag = (
            MoveFlag.KING_SIDE_CASTLE
            if direction.is_king_side
            else MoveFlag.QUEEN_SIDE_CASTLE
        )
        moves.append(Move(rule.king_from, rule.king_to, PieceType.KING, flags=flag))
    return moves


# --- EN PASSANT RULE HELPERS ----
def en_passant_moves(position: Position) -> list[Move]:
    """
    Given the en passant square, check the adjacent files (in the rank one up/down from the en passant square) for pawns of the correct color.

    NOTE: The en passant square is the square the opponent's pawn skipped. That pawn is standing one rank further (seen from the mover).
    """
    en_passant_square = position.en_passant_square
    if en_passant_square is None:
        return []

    color = position.color_to_move
    own_pawn = Piece(PieceType.PAWN, color)
    opponent_pawn = Piece(PieceType.PAWN, color.opponent)
    pawn_rank = en_passant_square.rank - color.forward

    # the double-pushed pawn must still be standing next to the skipped square
    if position.board.piece_at(Square(en_passant_square.file, pawn_rank)) != opponent_pawn:
        return []

    moves: list[Move] = []
    for df in (-1, 1):
        maybe_pawn_square = Square(en_passant_square.file + df, pawn_rank)
        if not maybe_pawn_square.is_within_bounds():
            continue
        if position.board.piece_at(maybe_pawn_square) == own_pawn:
            moves.append(
                Move(
                    maybe_pawn_square,
                    en_passant_square,
                    PieceType.PAWN,
                    captured=PieceType.PAWN,
                    flags=MoveFlag.EN_PASSANT,
                )
            )
    return moves


def en_passant_capture_square(move: Move) -> Square:
    """The pawn taken en passant stands on the file it skipped, in the rank the capturing pawn started from."""
    return Square(move.to_square.file, move.from_square.rank)


# --- VALIDATION ---
def perft(position: Position, depth: int) -> int:
    """
    Count the leaf nodes of the legal move tree up to the given depth.

    Standard way of validating a move generator against known counts.
    """
    if depth == 0:
        return 1
    moves = legal_moves(position)
    if depth == 1:
        return len(moves)

    nodes = 0
    for move in moves:
        record = position.make_move(move)
        try:
            nodes += perft(position, depth - 1)
        finally:
            position.unmake_move(record)
    return nodes
