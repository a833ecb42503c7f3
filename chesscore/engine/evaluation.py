"""
Static evaluation of positions.

Every evaluator answers `evaluate(position) -> int`: centipawns, positive is good for White.
The search negates the score for Black.
"""

from collections import Counter
from typing import Optional, Protocol

from chesscore.chess.board import Board
from chesscore.chess.pieces import Color, Piece, PieceType
from chesscore.chess.position import Position
from chesscore.chess.square import Square
from chesscore.core.config import EvalWeights


class Evaluator(Protocol):
    def evaluate(self, position: Position) -> int: ...


def color_sign(color: Color) -> int:
    return 1 if color == Color.WHITE else -1


class MaterialEvaluator:
    """Baseline strategy: material count with standard piece values"""

    def __init__(self, weights: Optional[EvalWeights] = None) -> None:
        self.weights = weights or EvalWeights()
        self._values = {
            piece_type: self.weights.piece_value(piece_type) for piece_type in PieceType
        }

    def piece_value(self, piece_type: PieceType) -> int:
        return self._values[piece_type]

    def evaluate(self, position: Position) -> int:
        return self.material(position.board)

    def material(self, board: Board) -> int:
        return sum(
            color_sign(piece.color) * self._values[piece.type]
            for piece in board.position.values()
        )


class PositionalEvaluator(MaterialEvaluator):
    """
    Material, adjusted by simple positional terms:
    * mobility: difference in number of candidate moves
    * king safety: own pawns shielding the king
    * pawn structure: doubled, isolated and passed pawns
    """

    def evaluate(self, position: Position) -> int:
        board = position.board
        return (
            self.material(board)
            + self.mobility(board)
            + self.king_safety(board)
            + self.pawn_structure(board)
        )

    def mobility(self, board: Board) -> int:
        if not self.weights.mobility:
            return 0
        white_moves = len(board.generate_candidate_moves(Color.WHITE))
        black_moves = len(board.generate_candidate_moves(Color.BLACK))
        return self.weights.mobility * (white_moves - black_moves)

    def king_safety(self, board: Board) -> int:
        score = 0
        for color in Color:
            king_square = board.king_square(color)
            if king_square is None:
                continue
            own_pawn = Piece(PieceType.PAWN, color)
            shield = sum(
                1
                for df in (-1, 0, 1)
                if board.piece_at(king_square.shifted(df, color.forward)) == own_pawn
            )
            score += color_sign(color) * self.weights.king_shield * shield
        return score

    def pawn_structure(self, board: Board) -> int:
        pawns = {
            color: board.locate_pieces(PieceType.PAWN, color) for color in Color
        }
        score = 0
        for color in Color:
            own_pawns = pawns[color]
            files = Counter(square.file for square in own_pawns)
            doubled = sum(count - 1 for count in files.values() if count > 1)
            isolated = sum(
                1
                for square in own_pawns
                if files[square.file - 1] == 0 and files[square.file + 1] == 0
            )
            passed = sum(
                1
                for square in own_pawns
                if _is_passed(square, color, pawns[color.opponent])
            )
            score += color_sign(color) * (
                self.weights.passed_pawn * passed
                - self.weights.doubled_pawn * doubled
                - self.weights.isolated_pawn * isolated
            )
        return score


def _is_passed(square: Square, color: Color, opponent_pawns: list[Square]) -> bool:
    """No opponent pawn ahead of this pawn on its own or an adjacent file"""
    return not any(
        abs(other.file - square.file) <= 1
        and (other.rank - square.rank) * color.forward > 0
        for other in opponent_pawns
    )
