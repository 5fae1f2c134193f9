"""Implementation of the repositories using SQLAlchemy"""

import logging
from contextlib import contextmanager
from typing import Iterator
from uuid import UUID, uuid4

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from corrchess.core.exceptions import ConflictError
from corrchess.core.models import GameModel, MoveRecordModel, PlayerModel
from corrchess.core.shared_types import GameStatus
from corrchess.db.schema import DBGame, DBMove, DBPlayer, as_utc

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """
    Data stored using SQL / methods implemented using SQLAlchemy

    save_game and append_move_record only flush: wrap them in `atomic()` so they are committed (or rolled back)
    together.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def create_game(self, game: GameModel) -> GameModel:
        """Store new game and return the stored data."""
        game_db = DBGame(
            id=game.id,
            white_player_id=game.white_player_id,
            black_player_id=game.black_player_id,
            current_position=game.current_fen,
            status=game.status,
            current_turn=game.current_turn,
            move_deadline=game.move_deadline,
            created_at=game.created_at,
            completed_at=game.completed_at,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def load_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def save_game(self, game: GameModel, expected_prior_position: str) -> GameModel:
        """
        Compare-and-set on the position column.

        Only ongoing games are ever rewritten, so the status is part of the condition too: two sweeps racing to
        abandon the same game cannot both win.
        """
        query = (
            update(DBGame)
            .where(
                DBGame.id == game.id,
                DBGame.current_position == expected_prior_position,
                DBGame.status == GameStatus.ONGOING.value,
            )
            .values(
                current_position=game.current_fen,
                status=game.status,
                current_turn=game.current_turn,
                move_deadline=game.move_deadline,
                completed_at=game.completed_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(query)
        if result.rowcount != 1:
            logger.warning(
                "Conditional write on game %s lost: position changed since it was read",
                game.id,
            )
            raise ConflictError(
                f"Game {game.id} was changed by another request. Reload it and try again."
            )
        self.db.flush()
        return game

    def append_move_record(self, record: MoveRecordModel) -> None:
        self.db.add(
            DBMove(
                game_id=record.game_id,
                ply=record.ply,
                move_number=record.move_number,
                player_color=record.player_color,
                move_uci=record.move_uci,
                move_san=record.move_san,
                position_before=record.position_before,
                position_after=record.position_after,
                played_at=record.played_at,
            )
        )
        self.db.flush()

    def list_move_records(self, game_id: UUID) -> list[MoveRecordModel]:
        query = select(DBMove).where(DBMove.game_id == game_id).order_by(DBMove.ply)
        return [self._move_to_model(move_db) for move_db in self.db.scalars(query)]

    def count_move_records(self, game_id: UUID) -> int:
        query = select(func.count()).select_from(DBMove).where(DBMove.game_id == game_id)
        return self.db.scalar(query) or 0

    def list_games_for_player(
        self, player_id: UUID, active_only: bool = False
    ) -> list[GameModel]:
        """Newest first; with active_only, the most urgent deadline first instead."""
        query = select(DBGame).where(
            or_(DBGame.white_player_id == player_id, DBGame.black_player_id == player_id)
        )
        if active_only:
            query = query.where(DBGame.status == GameStatus.ONGOING.value).order_by(
                DBGame.move_deadline.asc().nulls_last(), DBGame.created_at.desc()
            )
        else:
            query = query.order_by(DBGame.created_at.desc())
        return [self._to_model(game_db) for game_db in self.db.scalars(query)]

    def list_ongoing_games(self) -> list[GameModel]:
        query = (
            select(DBGame)
            .where(DBGame.status == GameStatus.ONGOING.value)
            .order_by(DBGame.created_at)
        )
        return [self._to_model(game_db) for game_db in self.db.scalars(query)]

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            id=game_db.id,
            white_player_id=game_db.white_player_id,
            black_player_id=game_db.black_player_id,
            current_fen=game_db.current_position,
            status=game_db.status,
            current_turn=game_db.current_turn,
            move_deadline=as_utc(game_db.move_deadline),
            created_at=as_utc(game_db.created_at),
            completed_at=as_utc(game_db.completed_at),
        )

    def _move_to_model(self, move_db: DBMove) -> MoveRecordModel:
        return MoveRecordModel(
            game_id=move_db.game_id,
            ply=move_db.ply,
            move_number=move_db.move_number,
            player_color=move_db.player_color,
            move_uci=move_db.move_uci,
            move_san=move_db.move_san,
            position_before=move_db.position_before,
            position_after=move_db.position_after,
            played_at=as_utc(move_db.played_at),
        )


class SQLPlayerRepository:
    """Just enough of a player registry to resolve identifiers and display names."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_player(self, player_id: UUID) -> PlayerModel | None:
        player_db = self.db.scalar(select(DBPlayer).where(DBPlayer.id == player_id))
        return self._to_model(player_db) if player_db else None

    def get_player_by_username(self, username: str) -> PlayerModel | None:
        player_db = self.db.scalar(select(DBPlayer).where(DBPlayer.username == username))
        return self._to_model(player_db) if player_db else None

    def create_player(self, username: str) -> PlayerModel:
        player_db = DBPlayer(id=uuid4(), username=username)
        self.db.add(player_db)
        self.db.commit()
        self.db.refresh(player_db)
        return self._to_model(player_db)

    def _to_model(self, player_db: DBPlayer) -> PlayerModel:
        return PlayerModel(id=player_db.id, username=player_db.username)
