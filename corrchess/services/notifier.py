"""'Game changed' signals for whoever needs to tell players about it (push, e-mail, polling endpoint...)."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

from corrchess.chess.game import Game
from corrchess.core.shared_types import Color, GameStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameChangedEvent:
    game_id: UUID
    status: GameStatus
    current_turn: Color
    # only set once the game has a winner
    winner_id: Optional[UUID] = None

    @classmethod
    def from_game(cls, game: Game) -> "GameChangedEvent":
        return cls(
            game_id=game.id,
            status=game.status,
            current_turn=game.current_turn,
            winner_id=game.winner_id,
        )


class GameEventNotifier(Protocol):
    """
    Delivery is at-least-once: receivers must tolerate seeing the same event twice.
    Called after the change is committed; an exception raised here is logged by the service, not propagated.
    """

    def game_changed(self, event: GameChangedEvent) -> None: ...


class LoggingNotifier:
    """Default notifier: writes the event to the log and nothing else."""

    def game_changed(self, event: GameChangedEvent) -> None:
        logger.info(
            "Game %s changed: status=%s turn=%s winner=%s",
            event.game_id,
            event.status,
            event.current_turn,
            event.winner_id,
        )


class RecordingNotifier:
    """Keeps every event in memory, e.g. to back a polling endpoint."""

    def __init__(self) -> None:
        self.events: list[GameChangedEvent] = []

    def game_changed(self, event: GameChangedEvent) -> None:
        self.events.append(event)

    def events_for(self, game_id: UUID) -> list[GameChangedEvent]:
        return [event for event in self.events if event.game_id == game_id]
