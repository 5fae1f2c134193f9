"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of a correspondence game -->
passes this information to the service layer, which can then persist it and pass it onwards to the API layer.

Games and move records are immutable values. Every transition returns a new Game; the service layer is the only
place where those new values get written back.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, Optional, Self, Sequence
from uuid import UUID, uuid4

from corrchess.chess.fen import decode, encode
from corrchess.chess.moves import Move
from corrchess.chess.notation import to_san
from corrchess.chess.position import Position
from corrchess.chess.rules import RulesEngine
from corrchess.chess.validator import GameResultKind, check_game_result, validate_move
from corrchess.core.exceptions import (
    GameNotActiveError,
    MalformedPositionError,
    NotAPlayerError,
    RepositoryError,
    SelfPlayError,
    WrongTurnError,
)
from corrchess.core.models import GameModel, MoveRecordModel
from corrchess.core.shared_types import Color, GameStatus


def move_number_for(prior_move_count: int) -> int:
    """Full-move number of the next half-move: both 1. e4 and 1... e5 carry number 1."""
    return prior_move_count // 2 + 1


@dataclass(frozen=True)
class MoveRecord:
    """Permanent record of one applied half-move. Append-only, never revised."""

    game_id: UUID
    ply: int
    move_number: int
    color: Color
    move: Move
    san: str
    position_before: Position
    position_after: Position
    played_at: datetime

    @classmethod
    def from_model(cls, model: MoveRecordModel) -> Self:
        try:
            return cls(
                game_id=model.game_id,
                ply=model.ply,
                move_number=model.move_number,
                color=Color(model.player_color),
                move=Move.from_uci(model.move_uci),
                san=model.move_san,
                position_before=decode(model.position_before),
                position_after=decode(model.position_after),
                played_at=model.played_at,
            )
        except (ValueError, MalformedPositionError) as e:
            raise RepositoryError(
                f"Stored move {model.ply} of game {model.game_id} is corrupt: {e}"
            ) from e

    def to_model(self) -> MoveRecordModel:
        return MoveRecordModel(
            game_id=self.game_id,
            ply=self.ply,
            move_number=self.move_number,
            player_color=self.color.value,
            move_uci=self.move.to_uci(),
            move_san=self.san,
            position_before=encode(self.position_before),
            position_after=encode(self.position_after),
            played_at=self.played_at,
        )


@dataclass(frozen=True)
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    id: UUID
    white_id: UUID
    black_id: UUID
    current_position: Position
    status: GameStatus
    move_deadline: Optional[datetime]
    created_at: datetime
    completed_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        white_id: UUID,
        black_id: UUID,
        now: datetime,
        move_deadline: Optional[datetime] = None,
        game_id: Optional[UUID] = None,
    ) -> Self:
        """A new game starts from the standard position, white to move."""
        if white_id == black_id:
            raise SelfPlayError("A player cannot play a game against themselves.")
        return cls(
            id=game_id or uuid4(),
            white_id=white_id,
            black_id=black_id,
            current_position=Position.initial(),
            status=GameStatus.ONGOING,
            move_deadline=move_deadline,
            created_at=now,
        )

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""
        try:
            status = GameStatus(model.status)
            stored_turn = Color(model.current_turn)
        except ValueError as e:
            raise RepositoryError(f"Game {model.id} has an invalid record: {e}") from e
        try:
            position = decode(model.current_fen)
        except MalformedPositionError as e:
            raise RepositoryError(f"Game {model.id} has a corrupt position: {e}") from e

        if stored_turn != position.side_to_move:
            raise RepositoryError(
                f"Game {model.id}: stored turn {stored_turn} disagrees with position {model.current_fen!r}"
            )

        return cls(
            id=model.id,
            white_id=model.white_player_id,
            black_id=model.black_player_id,
            current_position=position,
            status=status,
            move_deadline=model.move_deadline,
            created_at=model.created_at,
            completed_at=model.completed_at,
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            id=self.id,
            white_player_id=self.white_id,
            black_player_id=self.black_id,
            current_fen=encode(self.current_position),
            status=self.status.value,
            current_turn=self.current_turn.value,
            move_deadline=self.move_deadline,
            created_at=self.created_at,
            completed_at=self.completed_at,
        )

    # --- Derived state ---
    @property
    def current_turn(self) -> Color:
        """Always read off the position, so the two can never disagree."""
        return self.current_position.side_to_move

    @property
    def players(self) -> dict[Color, UUID]:
        return {Color.WHITE: self.white_id, Color.BLACK: self.black_id}

    @property
    def player_on_move(self) -> UUID:
        return self.players[self.current_turn]

    @property
    def winner_color(self) -> Optional[Color]:
        """
        Checkmate gives the win to the mating side, a deadline forfeit gives it to the side that was not on move.
        """
        match self.status:
            case GameStatus.WHITE_WON:
                return Color.WHITE
            case GameStatus.BLACK_WON:
                return Color.BLACK
            case GameStatus.ABANDONED:
                return self.current_turn.opposite
            case GameStatus.ONGOING | GameStatus.DRAWN:
                return None

    @property
    def winner_id(self) -> Optional[UUID]:
        color = self.winner_color
        return self.players[color] if color is not None else None

    def color_of(self, player_id: UUID) -> Color:
        if player_id == self.white_id:
            return Color.WHITE
        if player_id == self.black_id:
            return Color.BLACK
        raise NotAPlayerError(f"Player {player_id} is not playing in game {self.id}.")

    def has_player(self, player_id: UUID) -> bool:
        return player_id in (self.white_id, self.black_id)

    def is_deadline_elapsed(self, now: datetime) -> bool:
        return (
            self.status == GameStatus.ONGOING
            and self.move_deadline is not None
            and now >= self.move_deadline
        )

    # --- Transitions ---
    def submit_move(
        self,
        rules: RulesEngine,
        player_id: UUID,
        move_text: str,
        prior_move_count: int,
        now: datetime,
        deadline_window: timedelta,
    ) -> tuple[MoveRecord, Self]:
        """
        Attempt to make a move
        -----

        1. the game must still be going on
        2. the player must be in this game ...
        3. ... and it must be their turn
        4. the move must be well-formed and legal
        5. derive the notation from the position before the move
        6. compute the position after the move
        7. number the move (increments once per pair of half-moves)
        8. build the record linking the position before and after
        9. finish the game on checkmate / stalemate, otherwise hand the turn over with a fresh deadline

        Nothing is changed in place. On any failure no record exists and this Game is untouched.
        """
        if self.status != GameStatus.ONGOING:
            raise GameNotActiveError(
                f"Game {self.id} is not active. status: {self.status}"
            )

        mover = self.color_of(player_id)
        if mover != self.current_turn:
            raise WrongTurnError(
                f"It is not your turn. Waiting for {self.current_turn} to make a move first."
            )

        before = self.current_position
        move = validate_move(rules, before, move_text)
        san = to_san(rules, before, move)
        after = rules.apply(before, move)

        record = MoveRecord(
            game_id=self.id,
            ply=prior_move_count,
            move_number=move_number_for(prior_move_count),
            color=mover,
            move=move,
            san=san,
            position_before=before,
            position_after=after,
            played_at=now,
        )

        moved = replace(self, current_position=after)
        result = check_game_result(rules, after)
        if result is None:
            return record, replace(moved, move_deadline=now + deadline_window)

        match result.kind:
            case GameResultKind.CHECKMATE:
                # the side to move in `after` is mated, i.e. the mover wins
                final_status = GameStatus.won_by(mover)
            case GameResultKind.STALEMATE:
                final_status = GameStatus.DRAWN
        return record, moved._finish(final_status, now)

    def abandon(self, now: datetime) -> Self:
        """The player on move let the deadline pass and forfeits."""
        if self.status != GameStatus.ONGOING:
            raise GameNotActiveError(
                f"Game {self.id} is not active. status: {self.status}"
            )
        return self._finish(GameStatus.ABANDONED, now)

    def _finish(self, status: GameStatus, now: datetime) -> Self:
        """Terminal transition: sets the completion time once, clears the deadline."""
        assert status.is_terminal
        return replace(self, status=status, completed_at=now, move_deadline=None)


# --- Deadlines ---
def deadline_sweep(
    games: Iterable[Game], now: datetime
) -> list[tuple[Game, GameStatus]]:
    """
    Ongoing games whose deadline has passed, paired with the status they move to.

    Pure: the caller decides how (and whether) to write the transitions. Running it again after the transitions
    have been written yields nothing for those games, since they are no longer ongoing.
    """
    return [
        (game, GameStatus.ABANDONED) for game in games if game.is_deadline_elapsed(now)
    ]


def approaching_deadlines(
    games: Iterable[Game], now: datetime, within: timedelta
) -> list[Game]:
    """Ongoing games whose deadline falls within the coming `within`, soonest first."""
    upcoming = [
        game
        for game in games
        if game.status == GameStatus.ONGOING
        and game.move_deadline is not None
        and now < game.move_deadline <= now + within
    ]
    return sorted(upcoming, key=lambda game: game.move_deadline or now)


def is_unbroken_chain(initial: Position, records: Sequence[MoveRecord]) -> bool:
    """Each record must start from the position the previous one ended in (the first from `initial`)."""
    expected = initial
    for ply, record in enumerate(records):
        if record.ply != ply or record.position_before != expected:
            return False
        expected = record.position_after
    return True
