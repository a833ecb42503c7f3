"""
Move selection: negamax with alpha-beta pruning, iterative deepening, move ordering, and a transposition table.

The search works on the position it is given, making and unmaking moves in place. Every move made is taken back
before returning (also when the search gets cancelled), so the position after `search()` equals the position before.

Scores are in centipawns from the point of view of the side to move. Checkmate scores are +/-(MATE_SCORE - ply),
so that shorter mates score higher. Draws score 0.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from chesscore.chess import movegen
from chesscore.chess.history import History
from chesscore.chess.moves import Move
from chesscore.chess.pieces import PIECE_POINTS, Color, PieceType
from chesscore.chess.position import Position
from chesscore.chess.status import (
    FIFTY_MOVE_RULE_HALF_MOVES,
    REPETITIONS_FOR_DRAW,
    classify,
    is_insufficient_material,
)
from chesscore.core.config import SearchConfig
from chesscore.core.exceptions import GameOverError
from chesscore.engine.evaluation import Evaluator, PositionalEvaluator
from chesscore.engine.transposition import Bound, TranspositionTable

logger = logging.getLogger(__name__)

INF = 1_000_000
MATE_SCORE = 100_000
# anything beyond this is a mate score (leaves room for mates up to 1000 plies away)
MATE_THRESHOLD = MATE_SCORE - 1_000

# MVV-LVA: the king never gets captured, but it can capture
ORDERING_VALUES: dict[PieceType, int] = {**PIECE_POINTS, PieceType.KING: 100}


class SearchCancelled(Exception):
    """Raised inside the recursion once the time or node budget is used up"""


@dataclass(frozen=True)
class SearchResult:
    move: Move
    score: int
    depth: int
    nodes: int
    # False if the budget ran out before reaching max_depth
    completed: bool
    elapsed: float


def side_sign(color: Color) -> int:
    return 1 if color == Color.WHITE else -1


def is_mate_score(score: int) -> bool:
    return abs(score) >= MATE_THRESHOLD


def _score_to_table(score: int, ply: int) -> int:
    """Mate scores are stored relative to the node (not the root), so they stay valid when reached via another path"""
    if score >= MATE_THRESHOLD:
        return score + ply
    if score <= -MATE_THRESHOLD:
        return score - ply
    return score


def _score_from_table(score: int, ply: int) -> int:
    if score >= MATE_THRESHOLD:
        return score - ply
    if score <= -MATE_THRESHOLD:
        return score + ply
    return score


def terminal_score(
    position: Position, history: History, key: int, ply: int, has_moves: bool
) -> Optional[int]:
    """
    Score of a terminal node (from the side to move's perspective), or None if the game goes on.

    Same order as the game state machine: mate / stalemate first, then the draw rules.
    """
    if not has_moves:
        if position.is_check():
            return -(MATE_SCORE - ply)
        return 0
    if position.half_move_clock >= FIFTY_MOVE_RULE_HALF_MOVES:
        return 0
    if history.count(key) >= REPETITIONS_FOR_DRAW:
        return 0
    if is_insufficient_material(position.board):
        return 0
    return None


def root_history(position: Position, history: Optional[History]) -> History:
    """Copy of the game history to push/pop search moves on. Without one, the root is the only position seen."""
    if history is None:
        return History.from_keys([position.key])
    return history.copy()


class SearchEngine:
    """
    Chooses a move for the side to move.

    The evaluation function is pluggable: anything with `evaluate(position) -> int` (positive = good for White).
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self.evaluator = evaluator or PositionalEvaluator()
        self.config = config or SearchConfig()
        self.tt = TranspositionTable(self.config.table_size)
        self.nodes = 0
        self._history = History()
        self._deadline: Optional[float] = None
        self._budget_active = False
        self._active_config = self.config

    # --- PUBLIC ---
    def search(
        self,
        position: Position,
        config: Optional[SearchConfig] = None,
        history: Optional[History] = None,
    ) -> SearchResult:
        """
        Iterative deepening from depth 1 up to `config.max_depth`.

        * The first iteration always runs to completion, so there always is a move to return.
        * When the time / node budget runs out, the result of the deepest completed iteration is returned.
        * The transposition table starts empty for every call: same position + same config --> same result.

        Raises GameOverError if the position is terminal.
        """
        config = config or self.config
        status = classify(position, history)
        if status.is_terminal:
            raise GameOverError(f"Cannot search a finished game: {status.label}")

        self._active_config = config
        self.tt = TranspositionTable(config.table_size)
        self.nodes = 0
        self._history = root_history(position, history)
        start = time.monotonic()
        self._deadline = (
            start + config.time_limit.total_seconds()
            if config.time_limit is not None
            else None
        )

        root_key = position.key
        result: Optional[SearchResult] = None
        for depth in range(1, config.max_depth + 1):
            self._budget_active = depth > 1
            try:
                move, score = self._search_root(position, depth, root_key)
            except SearchCancelled:
                logger.info(
                    "Search budget used up during depth %d (%d nodes), returning depth %d result",
                    depth,
                    self.nodes,
                    depth - 1,
                )
                break

            result = SearchResult(
                move=move,
                score=score,
                depth=depth,
                nodes=self.nodes,
                completed=depth == config.max_depth,
                elapsed=time.monotonic() - start,
            )
            logger.debug(
                "depth %d score %d nodes %d best %s",
                depth,
                score,
                self.nodes,
                move.to_uci(),
            )

        # the first iteration is never cancelled
        assert result is not None
        return result

    def best_move(
        self,
        position: Position,
        config: Optional[SearchConfig] = None,
        history: Optional[History] = None,
    ) -> Move:
        return self.search(position, config, history).move

    # --- RECURSION ---
    def _search_root(self, position: Position, depth: int, key: int) -> tuple[Move, int]:
        """
        Root node: like `_negamax`, but keeps track of the move that produced the best score.

        Window is fully open at the root, so the returned score is exact.
        """
        entry = self.tt.get(key) if self._active_config.use_transposition_table else None
        moves = self.order_moves(
            movegen.legal_moves(position), entry.best_move if entry else None
        )

        alpha = -INF
        best_move = moves[0]
        best_score = -INF
        for move in moves:
            score = -self._search_child(position, move, depth - 1, -INF, -alpha, 1)
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, score)

        if self._active_config.use_transposition_table:
            self.tt.store(key, depth, best_score, Bound.EXACT, best_move)
        return best_move, best_score

    def _search_child(
        self,
        position: Position,
        move: Move,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
    ) -> int:
        """Make the move, search the resulting position, and take the move back (no matter what)."""
        record = position.make_move(move)
        child_key = position.key
        self._history.push(child_key)
        try:
            return self._negamax(position, depth, alpha, beta, ply, child_key)
        finally:
            self._history.pop()
            position.unmake_move(record)

    def _negamax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
        key: int,
    ) -> int:
        self.nodes += 1
        self._check_budget()

        # at the horizon we only need to know whether there is any move (mate / stalemate), not all of them
        if depth <= 0:
            terminal = terminal_score(
                position, self._history, key, ply, movegen.has_legal_move(position)
            )
            if terminal is not None:
                return terminal
            return side_sign(position.color_to_move) * self.evaluator.evaluate(position)

        moves = movegen.legal_moves(position)
        terminal = terminal_score(position, self._history, key, ply, bool(moves))
        if terminal is not None:
            return terminal

        use_table = self._active_config.use_transposition_table
        tt_move: Optional[Move] = None
        if use_table:
            entry = self.tt.get(key)
            if entry is not None:
                tt_move = entry.best_move
                if entry.depth >= depth:
                    score = _score_from_table(entry.score, ply)
                    if entry.bound == Bound.EXACT:
                        return score
                    if entry.bound == Bound.LOWER and score >= beta:
                        return score
                    if entry.bound == Bound.UPPER and score <= alpha:
                        return score

        alpha_original = alpha
        best_score = -INF
        best_move: Optional[Move] = None
        for move in self.order_moves(moves, tt_move):
            score = -self._search_child(position, move, depth - 1, -beta, -alpha, ply + 1)
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, score)
            if alpha >= beta:
                # the opponent will avoid this line: no need to look at the other moves
                break

        if use_table:
            if best_score <= alpha_original:
                bound = Bound.UPPER
            elif best_score >= beta:
                bound = Bound.LOWER
            else:
                bound = Bound.EXACT
            self.tt.store(key, depth, _score_to_table(best_score, ply), bound, best_move)
        return best_score

    # --- HELPERS ---
    @staticmethod
    def order_moves(moves: list[Move], tt_move: Optional[Move] = None) -> list[Move]:
        """
        Best guesses first, to cut off as much as possible
        ---
        1. the best move found earlier for this position (transposition table)
        2. captures: most valuable victim first, then least valuable attacker
        3. promotions: queen first
        4. quiet moves (in generation order)
        """

        def priority(move: Move) -> tuple[int, int, int]:
            if move == tt_move:
                return (0, 0, 0)
            if move.captured is not None:
                return (
                    1,
                    -ORDERING_VALUES[move.captured],
                    ORDERING_VALUES[move.piece],
                )
            if move.promote_to is not None:
                return (2, -ORDERING_VALUES[move.promote_to], 0)
            return (3, 0, 0)

        return sorted(moves, key=priority)

    def _check_budget(self) -> None:
        if not self._budget_active:
            return
        config = self._active_config
        if config.node_limit is not None and self.nodes >= config.node_limit:
            raise SearchCancelled
        if (
            self._deadline is not None
            and self.nodes % config.check_interval == 0
            and time.monotonic() >= self._deadline
        ):
            raise SearchCancelled


def minimax(
    position: Position,
    depth: int,
    evaluator: Optional[Evaluator] = None,
    history: Optional[History] = None,
) -> int:
    """
    Plain negamax without pruning or transposition table: the reference the alpha-beta search must agree with.

    Same terminal scoring and horizon evaluation as SearchEngine. Exponentially slow: small depths only.
    """
    evaluator = evaluator or PositionalEvaluator()
    search_history = root_history(position, history)

    def _minimax(depth: int, ply: int, key: int) -> int:
        moves = movegen.legal_moves(position)
        terminal = terminal_score(position, search_history, key, ply, bool(moves))
        if terminal is not None:
            return terminal
        if depth == 0:
            return side_sign(position.color_to_move) * evaluator.evaluate(position)

        best_score = -INF
        for move in moves:
            record = position.make_move(move)
            child_key = position.key
            search_history.push(child_key)
            try:
                best_score = max(best_score, -_minimax(depth - 1, ply + 1, child_key))
            finally:
                search_history.pop()
                position.unmake_move(record)
        return best_score

    return _minimax(depth, 0, position.key)
