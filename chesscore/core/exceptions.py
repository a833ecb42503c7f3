"""
Exceptions shared across layers.

All of these are local, recoverable conditions reported to the caller. The core never auto-corrects a move:
callers (CLI / UI / service) decide whether to re-prompt or reject.
"""


class ChessError(Exception):
    """Base class for everything the chess core raises on purpose"""


# --- DOMAIN ---
class MoveError(ChessError):
    """Something is wrong with a requested move"""


class IllegalMoveError(MoveError):
    """Move is not part of the legal move set of the current position"""


class IncompleteMoveError(MoveError):
    """A pawn reaches the last rank, but no piece type to promote into was given"""


class NoHistoryError(ChessError):
    """Undo requested, but no move has been made"""


class GameOverError(ChessError):
    """The position is terminal (checkmate, stalemate or draw): no more moves can be applied or searched"""


class InvalidFENError(ChessError):
    """String cannot be interpreted as (a legal) FEN"""


# --- GLUE LAYERS ---
class RepositoryError(ChessError):
    """Persistence layer could not find / store a record"""


class InvalidRequestError(ValueError):
    """
    Incoming request cannot be interpreted.

    NOTE derives from ValueError so pydantic field validators wrap it into a ValidationError.
    """
