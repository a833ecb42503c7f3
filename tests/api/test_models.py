"""Unit tests for chesscore/api/models.py"""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from chesscore.api.models import CreateGameRequest, EngineMoveRequest, MoveRequest
from chesscore.core.shared_types import PromotionPiece


@pytest.fixture
def mock_id() -> UUID:
    return uuid4()


# -- Validation - CreateGameRequest --
def test_valid_fen() -> None:
    """Test that CreateGameRequest accepts a valid FEN string."""

    valid_fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    request = CreateGameRequest(starting_fen=valid_fen)
    assert request.starting_fen == valid_fen


def test_fen_gets_stripped() -> None:
    valid_fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    request = CreateGameRequest(starting_fen=f"  {valid_fen} ")
    assert request.starting_fen == valid_fen


def test_starting_fen_is_optional() -> None:
    """Should be able to not supply a starting FEN, and validator just returns None."""
    assert CreateGameRequest().starting_fen is None


@pytest.mark.parametrize(
    "invalid_fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0",  # only 5 space-separated values
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1 extra",  # too many space-separated values
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e5 0 1",  # impossible en passant square
    ],
)
def test_invalid_fen(invalid_fen: str) -> None:
    """Structurally invalid FEN gets rejected by the request validation."""
    with pytest.raises(ValidationError):
        _ = CreateGameRequest(starting_fen=invalid_fen)


# -- Validation - MoveRequest --
def test_valid_square_names(mock_id: UUID) -> None:
    """Test that MoveRequest accepts correctly written squares in algebraic notation."""
    request = MoveRequest(game_id=mock_id, from_square="e7", to_square="e8", promote_to="queen")
    assert request.from_square == "e7"
    assert request.to_square == "e8"
    assert request.promote_to == PromotionPiece.QUEEN


@pytest.mark.parametrize(
    "square",
    [
        "nonsense",  # anything more than two characters.
        "11",  # First character is not a letter
        "aa",  # second character is not a number
        "a10",  # rank beyond the board
    ],
)
@pytest.mark.parametrize("field", ["from_square", "to_square"])
def test_invalid_square(mock_id: UUID, square: str, field: str) -> None:
    """Test that an exception is raised when using invalid square name."""
    squares = {"from_square": "e2", "to_square": "e4", field: square}
    with pytest.raises(ValidationError):
        _ = MoveRequest(game_id=mock_id, **squares)


def test_invalid_promotion_piece(mock_id: UUID) -> None:
    """Pawns cannot promote into a king"""
    with pytest.raises(ValidationError):
        _ = MoveRequest(game_id=mock_id, from_square="e7", to_square="e8", promote_to="king")


# -- Validation - EngineMoveRequest --
def test_engine_move_request_defaults(mock_id: UUID) -> None:
    request = EngineMoveRequest(game_id=mock_id)
    assert request.max_depth == 3
    assert request.time_limit is None
    assert request.node_limit is None


def test_engine_move_request_time_limit_in_seconds(mock_id: UUID) -> None:
    request = EngineMoveRequest(game_id=mock_id, time_limit=1.5)
    assert request.time_limit == timedelta(seconds=1.5)


@pytest.mark.parametrize("limits", [{"max_depth": 0}, {"node_limit": 0}])
def test_engine_move_request_limits(mock_id: UUID, limits: dict[str, int]) -> None:
    with pytest.raises(ValidationError):
        _ = EngineMoveRequest(game_id=mock_id, **limits)
