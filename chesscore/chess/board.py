"""The Game board: where all the pieces are (in chess: the piece placement part of a position)"""

from dataclasses import dataclass, field
from typing import Optional, Self

from chesscore.chess.moves import MOVEMENT_RULES, CandidateMovesFn, Move, is_square_attacked
from chesscore.chess.pieces import Color, Piece, PieceType
from chesscore.chess.square import BOARD_DIMENSIONS, Square


@dataclass
class Board:
    """
    Occupied squares mapped to the piece standing there. Empty squares are simply not in the mapping.

    `king_squares` is an index alongside the position (not a replacement for it): it avoids scanning the
    whole board every time we need to know whether a king is in check.
    """

    position: dict[Square, Piece]
    king_squares: dict[Color, Square] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.king_squares:
            self.king_squares = {
                piece.color: square
                for square, piece in self.position.items()
                if piece.type == PieceType.KING
            }

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces. Again, left-to-right reads a1-h1.
        """
        position: dict[Square, Piece] = {}
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 1
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    position[Square(file, rank)] = Piece.from_fen(character)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return cls(position)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, BOARD_DIMENSIONS[0] + 1):
            piece = self.piece_at(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> Self:
        return type(self)(dict(self.position), dict(self.king_squares))

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_empty(self, square: Square) -> bool:
        return square not in self.position

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(square in self.position for square in squares)

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        target = Piece(piece_type, color)
        return [square for square, piece in self.position.items() if piece == target]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        return self.king_squares.get(color)

    def count_kings(self, color: Color) -> int:
        return len(self.locate_pieces(PieceType.KING, color))

    # --- ATTACKS ---
    def is_under_attack(self, square: Square, by_color: Color) -> bool:
        return is_square_attacked(square, by_color, self)

    def is_any_under_attack(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_under_attack(square, by_color) for square in squares)

    def is_check(self, color: Color) -> bool:
        """Is the king of the given color attacked? (A board without that king is never in check.)"""
        king_square = self.king_square(color)
        if king_square is None:
            return False
        return self.is_under_attack(king_square, color.opponent)

    # --- CANDIDATE MOVES ---
    def generate_candidate_moves(self, color: Color) -> list[Move]:
        """
        Before knowing the set of legal moves, we use raycasting to find candidate moves, which will later be tested for legality
        (making sure it does not put yourself in check.)

        ---
        NOTE: Castling and En passant are added in movegen.py.
        """
        candidate_moves: list[Move] = []
        for starting_square in self.locate_color(color):
            piece_type = self.position[starting_square].type
            movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece_type]
            candidate_moves.extend(movement_rule(starting_square, self))
        return candidate_moves

    # --- UPDATES ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece
        if piece.type == PieceType.KING:
            self.king_squares[piece.color] = square

    def remove_piece(self, square: Square) -> Optional[Piece]:
        """Empty the square. Returns whatever stood there."""
        piece = self.position.pop(square, None)
        if piece is not None and piece.type == PieceType.KING:
            self.king_squares.pop(piece.color, None)
        return piece

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Update the position on the board. Returns the piece that was standing on the target square (if any)."""
        piece_that_moved = self.position.pop(from_square)
        captured = self.position.get(to_square)
        self.position[to_square] = piece_that_moved
        if piece_that_moved.type == PieceType.KING:
            self.king_squares[piece_that_moved.color] = to_square
        return captured

    # --- MATERIAL ---
    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def _player_pieces(self, color: Color) -> list[Piece]:
        """find all pieces of a given color"""
        return [piece for piece in self.position.values() if piece.color == color]

    def _count_material_player(self, color: Color) -> int:
        """Tally the points of material for a specific player"""
        return sum(piece.points for piece in self._player_pieces(color))
