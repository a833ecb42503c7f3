"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

from chesscore.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    EngineMoveResponse,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    ListGamesRequest,
    ListGamesResponse,
    MoveRequest,
    UndoRequest,
)
from chesscore.chess.game import Game
from chesscore.chess.notation import build_uci
from chesscore.chess.pieces import Color as DomainColor
from chesscore.core.config import EngineSettings
from chesscore.core.exceptions import RepositoryError
from chesscore.core.models import GameModel
from chesscore.core.shared_types import Color, Status
from chesscore.db.repository import GameRepository
from chesscore.engine.evaluation import PositionalEvaluator
from chesscore.engine.search import SearchEngine

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self, repository: GameRepository, settings: Optional[EngineSettings] = None
    ) -> None:
        self.repo = repository
        self.settings = settings or EngineSettings()

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Create a new game (standard or custom starting position) and persist it."""
        new_game = Game.new_game(starting_fen=request.starting_fen)
        stored_game, game_id = self.repo.create_game(new_game.to_model())
        logger.info("Created game %s", game_id)
        return self._create_game_response(game_id, stored_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game_model = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, game_model)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """retrieve set of legal moves."""
        game = Game.from_model(self._fetch_game(request.game_id))
        legal_moves = game.legal_moves()
        return LegalMovesResponse(
            game_id=request.game_id,
            color=Color[game.color_to_move.name],
            legal_moves=[move.to_uci() for move in legal_moves],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt."""
        stored_model = self._fetch_game(request.game_id)

        # Parse data in MoveRequest to UCI notation
        move_uci = build_uci(
            from_square_alg=request.from_square,
            to_square_alg=request.to_square,
            promotion=request.promote_to,
        )

        game = Game.from_model(stored_model)
        game.play(move_uci)
        logger.info("Game %s: played %s", request.game_id, move_uci)
        return self._store(request.game_id, game)

    def undo_move(self, request: UndoRequest) -> GameResponse:
        """Take back the last move made."""
        game = Game.from_model(self._fetch_game(request.game_id))
        game.undo()
        logger.info("Game %s: took back a move", request.game_id)
        return self._store(request.game_id, game)

    def engine_move(self, request: EngineMoveRequest) -> EngineMoveResponse:
        """Let the search engine choose the move for the side to move, and play it."""
        game = Game.from_model(self._fetch_game(request.game_id))
        config = self.settings.search.model_copy(
            update={
                "max_depth": request.max_depth,
                "time_limit": request.time_limit,
                "node_limit": request.node_limit,
            }
        )
        engine = SearchEngine(PositionalEvaluator(self.settings.evaluation), config)
        result = engine.search(game.position, config, game.history)
        game.make_move(result.move)
        logger.info(
            "Game %s: engine played %s (score %d, depth %d, %d nodes)",
            request.game_id,
            result.move.to_uci(),
            result.score,
            result.depth,
            result.nodes,
        )
        return EngineMoveResponse(
            game=self._store(request.game_id, game),
            move=result.move.to_uci(),
            score=result.score,
            depth=result.depth,
            nodes=result.nodes,
        )

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        self.repo.delete_game(request.game_id)

    def list_games(self, request: ListGamesRequest) -> ListGamesResponse:
        """Look up stored games, e.g. the unfinished ones to resume."""
        status = request.status.value if request.status is not None else None
        return ListGamesResponse(
            games=[
                self._create_game_response(game_id, model)
                for game_id, model in self.repo.list_games(status)
            ]
        )

    # -- Internal helpers --
    def _store(self, game_id: UUID, game: Game) -> GameResponse:
        """Capture updated state in GameModel, store in repository, and build the response."""
        model = game.to_model()
        self.repo.update_game(game_id, model)
        return self._create_game_response(game_id, model, game)

    def _create_game_response(
        self, game_id: UUID, model: GameModel, game: Optional[Game] = None
    ) -> GameResponse:
        """Convert info in GameModel to a GameResponse (for game with given ID.)"""
        game = game or Game.from_model(model)
        return GameResponse(
            game_id=game_id,
            fen_state=model.current_fen,
            starting_state=model.starting_fen,
            move_history=model.moves_uci,
            status=Status(model.status),
            color_to_move=Color[game.color_to_move.name],
            captured={
                color.name.lower(): [
                    piece.type.name.lower() for piece in game.captured_pieces(color)
                ]
                for color in DomainColor
            },
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
