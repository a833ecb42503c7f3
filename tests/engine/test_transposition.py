"""Unit tests for chesscore/engine/transposition.py"""

from chesscore.chess.moves import Move
from chesscore.chess.pieces import PieceType
from chesscore.chess.square import Square
from chesscore.engine.transposition import Bound, TranspositionTable, TTEntry

E2E4 = Move(Square.from_algebraic("e2"), Square.from_algebraic("e4"), PieceType.PAWN)


def test_store_and_get() -> None:
    table = TranspositionTable()
    table.store(42, 3, 15, Bound.EXACT, E2E4)
    assert table.get(42) == TTEntry(42, 3, 15, Bound.EXACT, E2E4)
    assert 42 in table
    assert table.get(7) is None


def test_deeper_entry_is_kept() -> None:
    table = TranspositionTable()
    table.store(42, 5, 100, Bound.LOWER, E2E4)
    table.store(42, 2, -30, Bound.UPPER, None)
    entry = table.get(42)
    assert entry is not None
    assert entry.depth == 5
    assert entry.score == 100


def test_same_or_deeper_search_replaces_entry() -> None:
    table = TranspositionTable()
    table.store(42, 2, 100, Bound.LOWER, None)
    table.store(42, 2, 50, Bound.EXACT, E2E4)
    entry = table.get(42)
    assert entry is not None
    assert entry.bound == Bound.EXACT
    assert len(table) == 1


def test_oldest_entry_evicted_when_full() -> None:
    table = TranspositionTable(max_entries=2)
    table.store(1, 1, 0, Bound.EXACT, None)
    table.store(2, 1, 0, Bound.EXACT, None)
    table.store(3, 1, 0, Bound.EXACT, None)
    assert len(table) == 2
    assert 1 not in table
    assert 2 in table and 3 in table


def test_clear() -> None:
    table = TranspositionTable()
    table.store(1, 1, 0, Bound.EXACT, None)
    table.clear()
    assert len(table) == 0
