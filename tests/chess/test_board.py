"""Unit tests for chesscore/chess/board.py"""

from typing import Callable
from unittest.mock import Mock, patch

import pytest

from chesscore.chess.board import Board
from chesscore.chess.moves import Move
from chesscore.chess.pieces import PIECE_TO_FEN, Color, Piece, PieceType
from chesscore.chess.square import Square

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_FEN = "/".join(["8"] * 8)


@pytest.fixture
def board_with_single_piece() -> Callable[[PieceType, Color, str], Board]:
    """Call the inner function that will be returned with the desired piece type, color, and square"""

    def _create_board(
        piece_type: PieceType,
        color: Color,
        square_name: str = "d4",
    ) -> Board:
        fen_char = PIECE_TO_FEN[piece_type]
        if color == Color.WHITE:
            fen_char = fen_char.upper()
        board = Board.from_fen(EMPTY_FEN)
        board.place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square_name))
        return board

    return _create_board


# -- CREATION LOGIC ---
def test_creating_board_in_starting_position() -> None:
    """Make sure board position is correctly initialized using a partial FEN string"""
    board = Board.from_fen(STARTING_POSITION_FEN)
    back_rank = [
        PieceType.ROOK,
        PieceType.KNIGHT,
        PieceType.BISHOP,
        PieceType.QUEEN,
        PieceType.KING,
        PieceType.BISHOP,
        PieceType.KNIGHT,
        PieceType.ROOK,
    ]
    for file, piece_type in enumerate(back_rank, start=1):
        assert board.piece_at(Square(file, 1)) == Piece(piece_type, Color.WHITE)
        assert board.piece_at(Square(file, 2)) == Piece(PieceType.PAWN, Color.WHITE)
        assert board.piece_at(Square(file, 7)) == Piece(PieceType.PAWN, Color.BLACK)
        assert board.piece_at(Square(file, 8)) == Piece(piece_type, Color.BLACK)

    # 6th, 5th, 4th, 3rd ranks all empty
    for rank in range(3, 7):
        for file in range(1, 9):
            assert board.is_empty(Square(file, rank))
    assert len(board.position) == 32


def test_creating_board_mid_game() -> None:
    """Create a board from a game after a bunch of random moves (incl a couple of captures and castling just for good measure)"""
    random_position = "2kr1b1r/p1p1pppp/2p2n2/3q2B1/6Q1/2NP4/PPP2PPP/R4RK1"
    board = Board.from_fen(random_position)
    assert board.piece_at(Square.from_algebraic("c8")) == Piece(PieceType.KING, Color.BLACK)
    assert board.piece_at(Square.from_algebraic("d5")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert board.piece_at(Square.from_algebraic("g5")) == Piece(PieceType.BISHOP, Color.WHITE)
    assert board.piece_at(Square.from_algebraic("g1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.piece_at(Square.from_algebraic("a8")) is None
    assert board.king_square(Color.WHITE) == Square.from_algebraic("g1")
    assert board.king_square(Color.BLACK) == Square.from_algebraic("c8")


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_POSITION_FEN,
        "2kr1b1r/p1p1pppp/2p2n2/3q2B1/6Q1/2NP4/PPP2PPP/R4RK1",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R",
        EMPTY_FEN,
    ],
)
def test_board_fen_both_ways(fen: str) -> None:
    """Parse the placement, and write it back out again"""
    assert Board.from_fen(fen).to_fen() == fen


# --- QUERIES ---
def test_locate_pieces() -> None:
    board = Board.from_fen(STARTING_POSITION_FEN)
    assert set(board.locate_pieces(PieceType.KNIGHT, Color.BLACK)) == {
        Square.from_algebraic("b8"),
        Square.from_algebraic("g8"),
    }
    assert len(board.locate_color(Color.WHITE)) == 16
    assert board.count_kings(Color.WHITE) == 1


def test_copy_is_independent() -> None:
    """Changing the copy should not affect the original"""
    board = Board.from_fen(STARTING_POSITION_FEN)
    board_copy = board.copy()
    board_copy.move_piece(Square.from_algebraic("e1"), Square.from_algebraic("e3"))

    assert board.piece_at(Square.from_algebraic("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.king_square(Color.WHITE) == Square.from_algebraic("e1")
    assert board_copy.king_square(Color.WHITE) == Square.from_algebraic("e3")


# --- UPDATES ---
def test_move_piece_returns_captured_piece() -> None:
    board = Board.from_fen("8/8/8/3p4/4P3/8/8/8")
    captured = board.move_piece(Square.from_algebraic("e4"), Square.from_algebraic("d5"))
    assert captured == Piece(PieceType.PAWN, Color.BLACK)
    assert board.piece_at(Square.from_algebraic("d5")) == Piece(PieceType.PAWN, Color.WHITE)
    assert board.is_empty(Square.from_algebraic("e4"))


def test_king_index_follows_updates() -> None:
    """The king squares are kept up to date when placing, moving and removing kings"""
    board = Board.from_fen(EMPTY_FEN)
    e1 = Square.from_algebraic("e1")
    f2 = Square.from_algebraic("f2")

    board.place_piece(Piece(PieceType.KING, Color.WHITE), e1)
    assert board.king_square(Color.WHITE) == e1

    board.move_piece(e1, f2)
    assert board.king_square(Color.WHITE) == f2

    assert board.remove_piece(f2) == Piece(PieceType.KING, Color.WHITE)
    assert board.king_square(Color.WHITE) is None


# --- ATTACKS ---
@pytest.mark.parametrize(
    "piece_type, attacked, safe",
    [
        (PieceType.ROOK, ["d8", "a4", "d1"], ["e5", "c3"]),
        (PieceType.BISHOP, ["a7", "h8", "g1"], ["d5", "d1"]),
        (PieceType.QUEEN, ["d8", "h8", "a1"], ["e6", "c2"]),
        (PieceType.KNIGHT, ["e6", "c2", "b5"], ["d5", "e5"]),
        (PieceType.KING, ["c3", "e5", "d5"], ["d6", "f4"]),
        (PieceType.PAWN, ["c5", "e5"], ["d5", "c3"]),
    ],
)
def test_attacks_of_single_piece(
    board_with_single_piece: Callable[[PieceType, Color, str], Board],
    piece_type: PieceType,
    attacked: list[str],
    safe: list[str],
) -> None:
    """White piece on d4 on an otherwise empty board"""
    board = board_with_single_piece(piece_type, Color.WHITE, "d4")
    for name in attacked:
        assert board.is_under_attack(Square.from_algebraic(name), Color.WHITE), name
    for name in safe:
        assert not board.is_under_attack(Square.from_algebraic(name), Color.WHITE), name


def test_black_pawn_attacks_downwards(
    board_with_single_piece: Callable[[PieceType, Color, str], Board],
) -> None:
    board = board_with_single_piece(PieceType.PAWN, Color.BLACK, "d4")
    assert board.is_under_attack(Square.from_algebraic("c3"), Color.BLACK)
    assert not board.is_under_attack(Square.from_algebraic("c5"), Color.BLACK)


def test_sliding_attack_is_blocked() -> None:
    """A piece in between takes away the line of sight"""
    board = Board.from_fen("3r4/8/8/3P4/8/8/8/3K4")
    assert not board.is_under_attack(Square.from_algebraic("d1"), Color.BLACK)
    assert board.is_under_attack(Square.from_algebraic("d5"), Color.BLACK)


def test_is_check() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4R1K1")
    assert board.is_check(Color.BLACK)
    assert not board.is_check(Color.WHITE)


def test_no_king_means_no_check() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/4R3")
    assert not board.is_check(Color.BLACK)


# --- CANDIDATE MOVES ---
def test_candidate_moves_use_movement_rule_per_piece() -> None:
    """Every piece of the color is handed to the movement rule of its type"""
    mock_move = Mock(spec=Move)
    mock_rules = {piece_type: Mock(return_value=[mock_move]) for piece_type in PieceType}
    board = Board.from_fen(STARTING_POSITION_FEN)

    with patch.dict("chesscore.chess.board.MOVEMENT_RULES", mock_rules):
        moves = board.generate_candidate_moves(Color.WHITE)

    assert len(moves) == 16
    assert mock_rules[PieceType.PAWN].call_count == 8
    assert mock_rules[PieceType.KNIGHT].call_count == 2
    assert mock_rules[PieceType.KING].call_count == 1


def test_candidate_moves_in_starting_position() -> None:
    """16 pawn moves and 4 knight moves, everything else is blocked"""
    board = Board.from_fen(STARTING_POSITION_FEN)
    assert len(board.generate_candidate_moves(Color.WHITE)) == 20
    assert len(board.generate_candidate_moves(Color.BLACK)) == 20


# --- MATERIAL ---
def test_count_material() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/1q6/RN2K3")
    assert board.count_material() == {Color.WHITE: 8, Color.BLACK: 9}
