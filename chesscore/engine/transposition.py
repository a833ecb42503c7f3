"""
Transposition table: results of earlier searches, keyed by the Zobrist key of the position.

Each entry stores the depth it was searched to, the score, the bound type of that score, and the best move found.

- EXACT: the score lies inside the alpha-beta window, it is the true value
- LOWER: the search failed high (beta cutoff), the true value is at least the score
- UPPER: the search failed low, the true value is at most the score

Entries are only trusted for a search at the same or a smaller remaining depth.

NOTE keys are 64-bit hashes: two different positions sharing a key (a collision) would make the table answer
for the wrong position. That is an accepted risk of the accelerating structure; the best move of an entry is only
ever used for move ordering after checking it is legal in the current position.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from chesscore.chess.moves import Move

DEFAULT_TABLE_SIZE = 1 << 18


class Bound(Enum):
    EXACT = auto()
    LOWER = auto()
    UPPER = auto()


@dataclass(frozen=True)
class TTEntry:
    key: int
    depth: int
    score: int
    bound: Bound
    best_move: Optional[Move]


class TranspositionTable:
    """
    Dictionary of TTEntry by Zobrist key, bounded in size.

    Single-threaded: one table per search engine, not shared between threads.

    Replacement: an existing entry for the same key is replaced unless it was searched deeper. When the table is
    full, the oldest entry is dropped.
    """

    def __init__(self, max_entries: int = DEFAULT_TABLE_SIZE) -> None:
        self.max_entries = max_entries
        self._table: dict[int, TTEntry] = {}

    def get(self, key: int) -> Optional[TTEntry]:
        return self._table.get(key)

    def store(
        self,
        key: int,
        depth: int,
        score: int,
        bound: Bound,
        best_move: Optional[Move],
    ) -> None:
        existing = self._table.get(key)
        if existing is not None:
            if existing.depth > depth:
                return
            del self._table[key]
        elif len(self._table) >= self.max_entries:
            del self._table[next(iter(self._table))]
        self._table[key] = TTEntry(key, depth, score, bound, best_move)

    def clear(self) -> None:
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: int) -> bool:
        return key in self._table
