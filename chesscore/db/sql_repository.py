"""GameRepository backed by a SQLAlchemy session"""

import logging
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from chesscore.core.models import GameModel
from chesscore.db.schema import DBGame

logger = logging.getLogger(__name__)


class SQLGameRepository:
    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        game_db = self._fetch_game(game_id)
        return self._to_model(game_db) if game_db else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        new_id = uuid4()
        game_db = DBGame(id=new_id)
        self._copy_into(game_db, game)
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        logger.debug("Stored new game %s", new_id)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        self._copy_into(game_db, game)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        logger.debug("Deleted game %s", game_id)
        return game_model

    def list_games(self, status: Optional[str] = None) -> list[tuple[UUID, GameModel]]:
        query = select(DBGame).order_by(DBGame.created_at)
        if status is not None:
            query = query.where(DBGame.status == status)
        return [(game_db.id, self._to_model(game_db)) for game_db in self.db.scalars(query)]

    # --- HELPERS ---
    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        return self.db.scalar(select(DBGame).where(DBGame.id == game_id))

    @staticmethod
    def _copy_into(game_db: DBGame, game: GameModel) -> None:
        game_db.starting_fen = game.starting_fen
        game_db.current_fen = game.current_fen
        # new list object, so the JSON column is flagged as changed
        game_db.moves_uci = list(game.moves_uci)
        game_db.status = game.status

    @staticmethod
    def _to_model(game_db: DBGame) -> GameModel:
        return GameModel(
            starting_fen=game_db.starting_fen,
            current_fen=game_db.current_fen,
            moves_uci=list(game_db.moves_uci),
            status=game_db.status,
        )
