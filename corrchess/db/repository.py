"""Protocol repositories (implemented with SQLAlchemy in sql_repository.py, with dictionaries in the tests)"""

from contextlib import AbstractContextManager
from typing import Protocol
from uuid import UUID

from corrchess.core.models import GameModel, MoveRecordModel, PlayerModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def atomic(self) -> AbstractContextManager[None]:
        """Everything written inside the block is committed together, or not at all."""
        ...

    def create_game(self, game: GameModel) -> GameModel:
        """Store a new game."""
        ...

    def load_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def save_game(self, game: GameModel, expected_prior_position: str) -> GameModel:
        """
        Overwrite an ongoing game, but only if its stored position still equals `expected_prior_position`.
        Raises ConflictError otherwise.
        """
        ...

    def append_move_record(self, record: MoveRecordModel) -> None:
        """Add one move to a game's history. Records are never updated afterwards."""
        ...

    def list_move_records(self, game_id: UUID) -> list[MoveRecordModel]:
        """All moves of a game, in the order they were played."""
        ...

    def count_move_records(self, game_id: UUID) -> int: ...

    def list_games_for_player(
        self, player_id: UUID, active_only: bool = False
    ) -> list[GameModel]: ...

    def list_ongoing_games(self) -> list[GameModel]: ...


class PlayerRepository(Protocol):
    def get_player(self, player_id: UUID) -> PlayerModel | None: ...

    def get_player_by_username(self, username: str) -> PlayerModel | None: ...

    def create_player(self, username: str) -> PlayerModel: ...
