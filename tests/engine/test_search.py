"""Unit tests for chesscore/engine/search.py"""

from datetime import timedelta

import pytest

from chesscore.chess.fen import STARTING_FEN
from chesscore.chess.history import History
from chesscore.chess.moves import Move
from chesscore.chess.pieces import PieceType
from chesscore.chess.position import Position
from chesscore.chess.square import Square
from chesscore.core.config import SearchConfig
from chesscore.core.exceptions import GameOverError
from chesscore.engine.evaluation import MaterialEvaluator
from chesscore.engine.search import (
    MATE_SCORE,
    SearchEngine,
    is_mate_score,
    minimax,
    terminal_score,
)

KIWIPETE_FEN = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
ENDGAME_FEN = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
HANGING_QUEEN_FEN = "4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1"
WHITE_MATES_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
BLACK_MATES_IN_ONE = "r5k1/8/8/8/8/8/5PPP/6K1 b - - 0 1"
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.mark.parametrize(
    "fen, best",
    [(WHITE_MATES_IN_ONE, "a1a8"), (BLACK_MATES_IN_ONE, "a8a1")],
)
def test_finds_mate_in_one(fen: str, best: str) -> None:
    result = SearchEngine(config=SearchConfig(max_depth=2)).search(Position.from_fen(fen))
    assert result.move.to_uci() == best
    assert result.score == MATE_SCORE - 1
    assert is_mate_score(result.score)
    assert result.completed


def test_takes_hanging_queen() -> None:
    engine = SearchEngine(MaterialEvaluator(), SearchConfig(max_depth=2))
    assert engine.best_move(Position.from_fen(HANGING_QUEEN_FEN)).to_uci() == "d2d5"


@pytest.mark.parametrize(
    "fen, depth",
    [
        (STARTING_FEN, 2),
        (WHITE_MATES_IN_ONE, 2),
        (HANGING_QUEEN_FEN, 2),
        (ENDGAME_FEN, 3),
    ],
)
@pytest.mark.parametrize("use_table", [True, False])
def test_alpha_beta_agrees_with_minimax(fen: str, depth: int, use_table: bool) -> None:
    """Pruning and the transposition table speed the search up, they do not change the score"""
    evaluator = MaterialEvaluator()
    config = SearchConfig(max_depth=depth, use_transposition_table=use_table)

    result = SearchEngine(evaluator, config).search(Position.from_fen(fen))
    assert result.score == minimax(Position.from_fen(fen), depth, evaluator)
    assert result.depth == depth


def test_search_is_deterministic() -> None:
    """Same position, same configuration --> same move, score and effort"""
    config = SearchConfig(max_depth=2)
    first = SearchEngine(config=config).search(Position.from_fen(KIWIPETE_FEN))
    engine = SearchEngine(config=config)
    second = engine.search(Position.from_fen(KIWIPETE_FEN))
    third = engine.search(Position.from_fen(KIWIPETE_FEN))
    assert (first.move, first.score, first.nodes) == (second.move, second.score, second.nodes)
    assert (second.move, second.score, second.nodes) == (third.move, third.score, third.nodes)


def test_search_leaves_position_unchanged() -> None:
    position = Position.from_fen(KIWIPETE_FEN)
    key = position.key
    history = History.from_keys([key])

    SearchEngine(config=SearchConfig(max_depth=2)).search(position, history=history)

    assert position.to_fen() == KIWIPETE_FEN
    assert position.key == key
    assert history.keys == [key]


def test_returned_move_is_legal() -> None:
    position = Position.from_fen(KIWIPETE_FEN)
    result = SearchEngine(config=SearchConfig(max_depth=2)).search(position)
    assert result.move in position.legal_moves()


# --- BUDGET ---
def test_node_limit_returns_last_completed_iteration() -> None:
    """The first iteration always completes, the second one runs out of nodes"""
    config = SearchConfig(max_depth=6, node_limit=50)
    position = Position.starting_position()
    result = SearchEngine(config=config).search(position)
    assert result.depth == 1
    assert not result.completed
    assert result.move in position.legal_moves()
    assert position.to_fen() == STARTING_FEN


def test_time_limit_returns_last_completed_iteration() -> None:
    config = SearchConfig(max_depth=20, time_limit=timedelta(0), check_interval=1)
    position = Position.from_fen(KIWIPETE_FEN)
    result = SearchEngine(config=config).search(position)
    assert result.depth == 1
    assert not result.completed
    assert position.to_fen() == KIWIPETE_FEN


def test_config_per_call_overrides_engine_config() -> None:
    engine = SearchEngine(config=SearchConfig(max_depth=3))
    result = engine.search(Position.starting_position(), SearchConfig(max_depth=1))
    assert result.depth == 1
    assert result.nodes == 20


# --- TERMINAL POSITIONS ---
def test_search_finished_game() -> None:
    with pytest.raises(GameOverError):
        SearchEngine().search(Position.from_fen(FOOLS_MATE_FEN))


def test_search_after_threefold_repetition() -> None:
    position = Position.starting_position()
    with pytest.raises(GameOverError):
        SearchEngine().search(position, history=History.from_keys([position.key] * 3))


def test_terminal_scores() -> None:
    mated = Position.from_fen(FOOLS_MATE_FEN)
    assert terminal_score(mated, History(), mated.key, 3, has_moves=False) == -(MATE_SCORE - 3)

    stalemated = Position.from_fen("k7/2Q5/1K6/8/8/8/8/8 b - - 0 1")
    assert terminal_score(stalemated, History(), stalemated.key, 1, has_moves=False) == 0

    start = Position.starting_position()
    assert terminal_score(start, History(), start.key, 0, has_moves=True) is None
    repeated = History.from_keys([start.key] * 3)
    assert terminal_score(start, repeated, start.key, 4, has_moves=True) == 0


# --- MOVE ORDERING ---
def test_move_ordering() -> None:
    """Table move, then captures (most valuable victim, least valuable attacker), promotions, quiet moves"""
    quiet = Move(sq("a2"), sq("a3"), PieceType.PAWN)
    queen_takes_pawn = Move(sq("d1"), sq("d7"), PieceType.QUEEN, captured=PieceType.PAWN)
    knight_takes_pawn = Move(sq("c5"), sq("d7"), PieceType.KNIGHT, captured=PieceType.PAWN)
    pawn_takes_queen = Move(sq("b2"), sq("c3"), PieceType.PAWN, captured=PieceType.QUEEN)
    promotion = Move(sq("e7"), sq("e8"), PieceType.PAWN, promote_to=PieceType.QUEEN)
    table_move = Move(sq("g1"), sq("f3"), PieceType.KNIGHT)

    ordered = SearchEngine.order_moves(
        [quiet, queen_takes_pawn, knight_takes_pawn, pawn_takes_queen, promotion, table_move],
        table_move,
    )
    assert ordered == [
        table_move,
        pawn_takes_queen,
        knight_takes_pawn,
        queen_takes_pawn,
        promotion,
        quiet,
    ]
