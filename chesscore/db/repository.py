"""Protocol repository (the service only depends on this, not on SQLAlchemy)"""

from typing import Optional, Protocol
from uuid import UUID

from chesscore.core.models import GameModel


class GameRepository(Protocol):
    """Where games live between two requests"""

    def get_game(self, game_id: UUID) -> GameModel | None: ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the stored game. None if there is no game with that ID."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None: ...

    def list_games(self, status: Optional[str] = None) -> list[tuple[UUID, GameModel]]:
        """All stored games (oldest first), optionally only those with the given status."""
        ...
