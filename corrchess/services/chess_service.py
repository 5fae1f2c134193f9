"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
import random
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from corrchess.api.models import (
    CreateGameRequest,
    GameListResponse,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    ListGamesRequest,
    ListMovesRequest,
    MoveListResponse,
    MoveRecordResponse,
    MoveResponse,
    PgnRequest,
    PgnResponse,
    PlayerResponse,
    RegisterPlayerRequest,
    SubmitMoveRequest,
)
from corrchess.chess.fen import encode
from corrchess.chess.game import (
    Game,
    MoveRecord,
    approaching_deadlines,
    deadline_sweep,
    is_unbroken_chain,
)
from corrchess.chess.pgn import export_pgn, headers_for
from corrchess.chess.position import Position
from corrchess.chess.rules import PythonChessRules, RulesEngine
from corrchess.core.config import Settings
from corrchess.core.exceptions import (
    ConflictError,
    GameNotFoundError,
    InvalidRequestError,
    RepositoryError,
    SelfPlayError,
    UnknownPlayerError,
)
from corrchess.core.models import PlayerModel
from corrchess.core.shared_types import Color, GameStatus
from corrchess.db.repository import GameRepository, PlayerRepository
from corrchess.db.schema import utc_now
from corrchess.services.notifier import (
    GameChangedEvent,
    GameEventNotifier,
    LoggingNotifier,
)

logger = logging.getLogger(__name__)

UNKNOWN_PLAYER_NAME = "?"


class ChessService:
    """
    Orchestration of layers for correspondence chess.

    The only writer of game state. Every write of an existing game is conditional on the position that was read,
    so two requests racing on the same game cannot both advance it: the loser gets a ConflictError and leaves
    nothing behind.
    """

    def __init__(
        self,
        repository: GameRepository,
        players: PlayerRepository,
        settings: Settings,
        rules: Optional[RulesEngine] = None,
        notifier: Optional[GameEventNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.players = players
        self.settings = settings
        self.rules = rules or PythonChessRules()
        self.notifier = notifier or LoggingNotifier()
        self._clock = clock
        self._rng = rng or random.Random()

    # -- API routes logic ---
    def register_player(self, request: RegisterPlayerRequest) -> PlayerResponse:
        if self.players.get_player_by_username(request.username) is not None:
            raise InvalidRequestError(f"Username {request.username!r} is already taken.")
        player = self.players.create_player(request.username)
        logger.info("Registered player %s (%s)", player.username, player.id)
        return PlayerResponse(player_id=player.id, username=player.username)

    def create_game(self, request: CreateGameRequest) -> GameResponse:
        """A player challenges an opponent. The game starts right away, white to move."""
        if request.player_id == request.opponent_id:
            raise SelfPlayError("A player cannot play a game against themselves.")

        # Both players must exist
        requester = self._fetch_player(request.player_id)
        opponent = self._fetch_player(request.opponent_id)

        # Explicit color choice, or an unbiased coin flip
        color = request.color or self._rng.choice([Color.WHITE, Color.BLACK])
        white, black = (requester, opponent) if color == Color.WHITE else (opponent, requester)

        now = self._clock()
        deadline = now + self.settings.move_deadline if self.settings.deadline_on_create else None
        new_game = Game.create(white.id, black.id, now=now, move_deadline=deadline)

        # Store the GameModel in the repository
        stored = Game.from_model(self.repo.create_game(new_game.to_model()))
        logger.info(
            "Created game %s: %s (white) vs %s (black)",
            stored.id,
            white.username,
            black.username,
        )
        self._notify(stored)
        return self._create_game_response(stored)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        return self._create_game_response(self._fetch_game(request.game_id))

    def list_games(self, request: ListGamesRequest) -> GameListResponse:
        """All games of a player; with active_only, only ongoing ones, most urgent deadline first."""
        self._fetch_player(request.player_id)
        models = self.repo.list_games_for_player(
            request.player_id, active_only=request.active_only
        )
        return GameListResponse(
            games=[self._create_game_response(Game.from_model(m)) for m in models]
        )

    def submit_move(self, request: SubmitMoveRequest) -> MoveResponse:
        """
        Make a move attempt.
        ----

        All checks and the new state are computed on immutable values first. Only then are the new game state and
        the move record written, together, on condition that the stored position is still the one we started from.
        """
        # Retrieve persisted game and how many half-moves it has seen
        game = self._fetch_game(request.game_id)
        prior_move_count = self.repo.count_move_records(game.id)

        # Attempt the move (raises on any rule / turn / input violation, nothing written yet)
        record, updated = game.submit_move(
            self.rules,
            player_id=request.player_id,
            move_text=request.move,
            prior_move_count=prior_move_count,
            now=self._clock(),
            deadline_window=self.settings.move_deadline,
        )

        # Conditional write of game + move record
        with self.repo.atomic():
            self.repo.save_game(
                updated.to_model(),
                expected_prior_position=encode(game.current_position),
            )
            self.repo.append_move_record(record.to_model())

        logger.info(
            "Game %s: %s played %s (%s)",
            game.id,
            record.color,
            record.san,
            record.move.to_uci(),
        )
        if updated.status.is_terminal:
            logger.info("Game %s finished: %s", game.id, updated.status)
        self._notify(updated)

        return MoveResponse(
            move=self._create_move_response(record),
            game=self._create_game_response(updated),
        )

    def get_legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Moves the side to move may play, as UCI text. Empty once the game is over."""
        game = self._fetch_game(request.game_id)
        legal_moves: list[str] = []
        if game.status == GameStatus.ONGOING:
            legal_moves = sorted(
                move.to_uci() for move in self.rules.legal_moves(game.current_position)
            )
        return LegalMovesResponse(
            game_id=game.id, current_turn=game.current_turn, legal_moves=legal_moves
        )

    def list_moves(self, request: ListMovesRequest) -> MoveListResponse:
        game = self._fetch_game(request.game_id)
        records = self._fetch_move_records(game)
        return MoveListResponse(
            game_id=game.id,
            moves=[self._create_move_response(record) for record in records],
        )

    def export_pgn(self, request: PgnRequest) -> PgnResponse:
        game = self._fetch_game(request.game_id)
        records = self._fetch_move_records(game)
        headers = headers_for(
            game,
            white_name=self._player_name(game.white_id),
            black_name=self._player_name(game.black_id),
            event=self.settings.event_name,
            site=self.settings.site_name,
        )
        return PgnResponse(game_id=game.id, pgn=export_pgn(headers, records))

    # -- Periodic jobs (triggered from outside) ---
    def sweep_deadlines(self, now: Optional[datetime] = None) -> GameListResponse:
        """
        Abandon every ongoing game whose deadline has passed; the player on move forfeits.

        A game that received a move between reading and writing is left alone (its deadline moved on), so running
        the sweep twice, or next to move submissions, is harmless.
        """
        now = now or self._clock()
        games = [Game.from_model(model) for model in self.repo.list_ongoing_games()]

        abandoned: list[Game] = []
        for game, new_status in deadline_sweep(games, now):
            match new_status:
                case GameStatus.ABANDONED:
                    updated = game.abandon(now)
                case _:
                    raise RepositoryError(
                        f"Deadline sweep produced unexpected status {new_status} for game {game.id}"
                    )
            try:
                with self.repo.atomic():
                    self.repo.save_game(
                        updated.to_model(),
                        expected_prior_position=encode(game.current_position),
                    )
            except ConflictError:
                logger.info("Game %s changed during deadline sweep, skipped", game.id)
                continue

            logger.info(
                "Game %s abandoned: %s missed the deadline %s",
                game.id,
                game.current_turn,
                game.move_deadline,
            )
            self._notify(updated)
            abandoned.append(updated)

        return GameListResponse(
            games=[self._create_game_response(game) for game in abandoned]
        )

    def deadline_reminders(self, now: Optional[datetime] = None) -> GameListResponse:
        """Ongoing games whose deadline runs out within the configured reminder window."""
        now = now or self._clock()
        games = [Game.from_model(model) for model in self.repo.list_ongoing_games()]
        upcoming = approaching_deadlines(
            games, now, self.settings.deadline_reminder_window
        )
        return GameListResponse(
            games=[self._create_game_response(game) for game in upcoming]
        )

    # -- Internal helpers --
    def _fetch_game(self, game_id: UUID) -> Game:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.load_game(game_id)
        if game_model is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return Game.from_model(game_model)

    def _fetch_move_records(self, game: Game) -> list[MoveRecord]:
        records = [
            MoveRecord.from_model(model) for model in self.repo.list_move_records(game.id)
        ]
        if not is_unbroken_chain(Position.initial(), records):
            raise RepositoryError(f"Move history of game {game.id} is not a continuous chain.")
        return records

    def _fetch_player(self, player_id: UUID) -> PlayerModel:
        player = self.players.get_player(player_id)
        if player is None:
            raise UnknownPlayerError(f"Player with {player_id=} not found.")
        return player

    def _player_name(self, player_id: UUID) -> str:
        player = self.players.get_player(player_id)
        return player.username if player is not None else UNKNOWN_PLAYER_NAME

    def _notify(self, game: Game) -> None:
        """Runs after the change is committed: a failing notifier must not turn a stored move into an error."""
        try:
            self.notifier.game_changed(GameChangedEvent.from_game(game))
        except Exception:
            logger.exception("Notifier failed for game %s (status %s)", game.id, game.status)

    def _create_game_response(self, game: Game) -> GameResponse:
        """Convert a Game into a GameResponse."""
        return GameResponse(
            game_id=game.id,
            white_player_id=game.white_id,
            black_player_id=game.black_id,
            fen_state=encode(game.current_position),
            status=game.status,
            current_turn=game.current_turn,
            move_deadline=game.move_deadline,
            created_at=game.created_at,
            completed_at=game.completed_at,
            winner_id=game.winner_id,
        )

    def _create_move_response(self, record: MoveRecord) -> MoveRecordResponse:
        return MoveRecordResponse(
            ply=record.ply,
            move_number=record.move_number,
            color=record.color,
            uci=record.move.to_uci(),
            san=record.san,
            position_before=encode(record.position_before),
            position_after=encode(record.position_after),
            played_at=record.played_at,
        )
