"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define candidate move sets (and attack checks) for each piece type.

Legality (not leaving your own king in check), castling and en passant are handled in movegen.py
"""

from dataclasses import dataclass
from enum import Flag, auto
from functools import cache
from typing import Callable, Optional, Protocol

from chesscore.chess.pieces import PIECE_TO_FEN, Color, Piece, PieceType
from chesscore.chess.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece_at(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]


class MoveFlag(Flag):
    NONE = 0
    DOUBLE_PAWN_PUSH = auto()
    EN_PASSANT = auto()
    KING_SIDE_CASTLE = auto()
    QUEEN_SIDE_CASTLE = auto()


@dataclass(frozen=True)
class Move:
    """
    A move is a value: it describes what happens, but does not own any board state.

    `piece` is the kind of the moving piece, `captured` the kind of the piece taken (if any, including en passant).
    """

    from_square: Square
    to_square: Square
    piece: PieceType
    captured: Optional[PieceType] = None
    promote_to: Optional[PieceType] = None
    flags: MoveFlag = MoveFlag.NONE

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_en_passant(self) -> bool:
        return MoveFlag.EN_PASSANT in self.flags

    @property
    def is_double_pawn_push(self) -> bool:
        return MoveFlag.DOUBLE_PAWN_PUSH in self.flags

    @property
    def is_castling(self) -> bool:
        return bool(
            self.flags & (MoveFlag.KING_SIDE_CASTLE | MoveFlag.QUEEN_SIDE_CASTLE)
        )

    def to_uci(self) -> str:
        """
        Universal Chess Interface notation
        ---
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": king side castling for white
        """
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


# --- PRECOMPUTED GEOMETRY ---
KNIGHT_DELTAS: tuple[Vector, ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)
KING_DELTAS: tuple[Vector, ...] = (
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)
DIAGONALS: tuple[Vector, ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))
STRAIGHTS: tuple[Vector, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@cache
def ray(square: Square, direction: Vector) -> tuple[Square, ...]:
    """All squares along a direction, up to the edge of the board (excluding the starting square)"""
    squares: list[Square] = []
    target = square.shifted(*direction)
    while target.is_within_bounds():
        squares.append(target)
        target = target.shifted(*direction)
    return tuple(squares)


@cache
def step_targets(square: Square, deltas: tuple[Vector, ...]) -> tuple[Square, ...]:
    """Single step version of `ray`: the squares reachable by one of the deltas, within bounds"""
    targets = (square.shifted(df, dr) for df, dr in deltas)
    return tuple(target for target in targets if target.is_within_bounds())


def last_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


def pawn_start_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: tuple[Vector, ...]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moving_piece = board.piece_at(square)
    assert moving_piece is not None

    moves: list[Move] = []
    for direction in directions:
        for target_square in ray(square, direction):
            target_piece = board.piece_at(target_square)
            if target_piece is None:
                moves.append(Move(square, target_square, moving_piece.type))
                continue

            # only need to add the first occupied square found if it is the opponent's: then it can be captured.
            if target_piece.color != moving_piece.color:
                moves.append(
                    Move(
                        square,
                        target_square,
                        moving_piece.type,
                        captured=target_piece.type,
                    )
                )
            break
    return moves


def single_step_move(
    square: Square, board: Board, deltas: tuple[Vector, ...]
) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moving_piece = board.piece_at(square)
    assert moving_piece is not None

    moves: list[Move] = []
    for target_square in step_targets(square, deltas):
        target_piece = board.piece_at(target_square)
        if target_piece is None:
            moves.append(Move(square, target_square, moving_piece.type))
        elif target_piece.color != moving_piece.color:
            moves.append(
                Move(
                    square, target_square, moving_piece.type, captured=target_piece.type
                )
            )
    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in their first move (so when on their starting rank)
    - takes diagonally
    - promotes when reaching the final rank

    NOTE: En passant is taken care of in movegen.py (needs the en passant square of the position)
    """
    pawn = board.piece_at(square)
    assert pawn is not None
    forward = pawn.color.forward

    moves: list[Move] = []
    # Pawn pushes: the square in front must be empty, for the double push both of them.
    one_step = square.shifted(0, forward)
    if one_step.is_within_bounds() and board.piece_at(one_step) is None:
        moves.extend(_with_promotions(Move(square, one_step, PieceType.PAWN), pawn.color))
        two_steps = one_step.shifted(0, forward)
        if square.rank == pawn_start_rank(pawn.color) and board.piece_at(two_steps) is None:
            moves.append(
                Move(
                    square, two_steps, PieceType.PAWN, flags=MoveFlag.DOUBLE_PAWN_PUSH
                )
            )

    # pawns take diagonally:
    for target_square in step_targets(square, ((1, forward), (-1, forward))):
        target_piece = board.piece_at(target_square)
        if target_piece is not None and target_piece.color != pawn.color:
            capture = Move(
                square, target_square, PieceType.PAWN, captured=target_piece.type
            )
            moves.extend(_with_promotions(capture, pawn.color))
    return moves


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: tuple[Vector, ...],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along any of the directions is one of the given types and color.
    """
    for direction in directions:
        for target_square in ray(square, direction):
            piece_found = board.piece_at(target_square)
            if piece_found is None:
                continue
            if piece_found.color == by_color and piece_found.type in by_piece_types:
                return True
            break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: tuple[Vector, ...],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.

    ---
    Returns TRUE if a piece of the specified type and color stands one step away.
    """
    attacker = Piece(by_piece_type, by_color)
    return any(
        board.piece_at(target_square) == attacker
        for target_square in step_targets(square, deltas)
    )


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could move into your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"
    """
    backwards = -by_color.forward
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, ((1, backwards), (-1, backwards))
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_on_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and Queens"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_on_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and Queens"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_on_diagonal,
    is_attacked_on_straight,
    is_attacked_by_king,
)


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """
    Could any piece of `by_color` capture on this square?

    NOTE works on piece geometry only, it never asks whether the attacking move would be legal.
    """
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


def _with_promotions(pawn_move: Move, color: Color) -> list[Move]:
    """Pawn move onto the final rank? Return a copy of the move for every piece type to promote into."""
    if pawn_move.to_square.rank != last_rank(color):
        return [pawn_move]
    return [
        Move(
            pawn_move.from_square,
            pawn_move.to_square,
            PieceType.PAWN,
            captured=pawn_move.captured,
            promote_to=piece_type,
        )
        for piece_type in PROMOTION_OPTIONS
    ]
