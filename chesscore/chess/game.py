"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn:
the position, the history of positions (repetitions), the pieces captured, and taking moves back.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from chesscore.chess import movegen
from chesscore.chess.fen import STARTING_FEN
from chesscore.chess.history import History
from chesscore.chess.moves import Move
from chesscore.chess.notation import parse_uci
from chesscore.chess.pieces import Color, Piece
from chesscore.chess.position import Position, UndoRecord
from chesscore.chess.status import GameStatus, classify
from chesscore.core.exceptions import GameOverError, NoHistoryError
from chesscore.core.models import GameModel

logger = logging.getLogger(__name__)


def _no_pieces() -> dict[Color, list[Piece]]:
    return {color: [] for color in Color}


@dataclass
class CapturedPieces:
    """
    Per color, the pieces of that color removed from the board, in the order they were taken.

    Grows when a move captures, shrinks when that move is taken back.
    """

    pieces: dict[Color, list[Piece]] = field(default_factory=_no_pieces)

    def append(self, piece: Piece) -> None:
        self.pieces[piece.color].append(piece)

    def pop(self, color: Color) -> Piece:
        return self.pieces[color].pop()

    def of(self, color: Color) -> tuple[Piece, ...]:
        return tuple(self.pieces[color])

    def points(self, color: Color) -> int:
        """Material points of the given color that were lost"""
        return sum(piece.points for piece in self.pieces[color])


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    position: Position
    history: History
    moves: list[Move] = field(default_factory=list)
    captured: CapturedPieces = field(default_factory=CapturedPieces)
    undo_stack: list[UndoRecord] = field(default_factory=list)
    starting_fen: str = STARTING_FEN

    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None) -> Self:
        """Start from the standard starting position, or from a custom FEN"""
        position = (
            Position.from_fen(starting_fen)
            if starting_fen
            else Position.starting_position()
        )
        history = History()
        history.push(position.key)
        return cls(position, history, starting_fen=position.to_fen())

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Rebuild the game by replaying the recorded moves on the starting position"""
        game = cls.new_game(model.starting_fen)
        for move_uci in model.moves_uci:
            game.play(move_uci)
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            starting_fen=self.starting_fen,
            current_fen=self.position.to_fen(),
            moves_uci=[move.to_uci() for move in self.moves],
            status=self.status.label,
        )

    @property
    def status(self) -> GameStatus:
        return classify(self.position, self.history)

    @property
    def winner(self) -> Optional[Color]:
        return self.status.winner

    @property
    def color_to_move(self) -> Color:
        return self.position.color_to_move

    def legal_moves(self) -> list[Move]:
        """
        The legal moves for the player to move.
        ----
        Raises GameOverError once the game has ended (even if the pieces could still move, e.g. after a draw).
        """
        self._assert_not_over()
        return self.position.legal_moves()

    def make_move(self, move: Move) -> GameStatus:
        """
        Attempt to make a move
        -----

        1. make sure the game is (still) in progress
        2. make sure the move is legal
        3. update the position (in place, keeping the undo record)
        4. update the history of positions, the list of moves, and the captured pieces
        5. return the new status of the game
        """
        self._assert_not_over()
        movegen.ensure_legal(self.position, move)
        return self._push_move(move)

    def play(self, move_uci: str) -> GameStatus:
        """Convenience method: make a move given in UCI notation"""
        self._assert_not_over()
        # parse_uci only ever returns a legal move
        return self._push_move(parse_uci(self.position, move_uci))

    def _push_move(self, move: Move) -> GameStatus:
        record = self.position.make_move(move)
        self.undo_stack.append(record)
        self.history.push(self.position.key)
        self.moves.append(move)
        if record.captured_piece is not None:
            self.captured.append(record.captured_piece)

        status = self.status
        logger.debug("Played %s, status: %s", move.to_uci(), status.label)
        if status.is_terminal:
            logger.info("Game over after %d moves: %s", len(self.moves), status.label)
        return status

    def undo(self) -> Position:
        """Take back the last move. Returns the restored position."""
        if not self.undo_stack:
            raise NoHistoryError("No moves to take back.")

        record = self.undo_stack.pop()
        self.position.unmake_move(record)
        self.history.pop()
        self.moves.pop()
        if record.captured_piece is not None:
            self.captured.pop(record.captured_piece.color)

        logger.debug("Took back %s", record.move.to_uci())
        return self.position

    def captured_pieces(self, color: Color) -> tuple[Piece, ...]:
        """Pieces of the given color that were captured, in order"""
        return self.captured.of(color)

    def captured_points(self, color: Color) -> int:
        """Material points the given color has won by capturing"""
        return self.captured.points(color.opponent)

    # -- PRIVATE HELPERS ---
    def _assert_not_over(self) -> None:
        status = self.status
        if status.is_terminal:
            raise GameOverError(f"Game is over. status: {status.label}")
