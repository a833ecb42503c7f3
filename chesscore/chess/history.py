"""Ordered record of position hashes, with repetition counts (needed for the threefold repetition rule)"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Self

from chesscore.core.exceptions import NoHistoryError


@dataclass
class History:
    """
    Every position of the game so far, the current one included, as Zobrist keys.

    Grows by one key for every move applied, shrinks by one for every move taken back.
    """

    keys: list[int] = field(default_factory=list)
    counts: Counter[int] = field(default_factory=Counter)

    @classmethod
    def from_keys(cls, keys: Iterable[int]) -> Self:
        keys = list(keys)
        return cls(keys, Counter(keys))

    def push(self, key: int) -> None:
        self.keys.append(key)
        self.counts[key] += 1

    def pop(self) -> int:
        if not self.keys:
            raise NoHistoryError("History is empty")
        key = self.keys.pop()
        self.counts[key] -= 1
        if self.counts[key] == 0:
            del self.counts[key]
        return key

    def count(self, key: int) -> int:
        """How often the position with this key occurred"""
        return self.counts.get(key, 0)

    def copy(self) -> Self:
        return type(self)(list(self.keys), Counter(self.counts))

    def __len__(self) -> int:
        return len(self.keys)
