"""Requests and Response models"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from chesscore.chess.fen import fen_problem, is_valid_square
from chesscore.core.exceptions import InvalidRequestError
from chesscore.core.shared_types import Color, PromotionPiece, Status

PieceColor = str
PieceName = str


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        problem = fen_problem(value)
        if problem is not None:
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a FEN string: {problem}"
            )
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PromotionPiece] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_valid_square(value) or len(value) != 2:
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value


class UndoRequest(BaseModel):
    game_id: UUID


class EngineMoveRequest(BaseModel):
    """Let the engine pick (and play) the move for the side to move"""

    game_id: UUID
    max_depth: int = Field(default=3, ge=1)
    time_limit: Optional[timedelta] = None
    node_limit: Optional[int] = Field(default=None, ge=1)


class DeleteGameRequest(BaseModel):
    game_id: UUID


class ListGamesRequest(BaseModel):
    """Stored games, optionally only those with the given status"""

    status: Optional[Status] = None


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    move_history: list[str]
    status: Status
    color_to_move: Color
    captured: dict[PieceColor, list[PieceName]]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    legal_moves: list[str]


class EngineMoveResponse(BaseModel):
    game: GameResponse
    move: str
    score: int
    depth: int
    nodes: int


class ListGamesResponse(BaseModel):
    games: list[GameResponse]
