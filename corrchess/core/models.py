"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class PlayerModel:
    id: UUID
    username: str


@dataclass(frozen=True)
class GameModel:
    """Transport-safe representation of a correspondence game used between Service, DB, and Game layers."""

    id: UUID
    white_player_id: UUID
    black_player_id: UUID
    current_fen: str
    status: str
    current_turn: str
    move_deadline: Optional[datetime]
    created_at: datetime
    completed_at: Optional[datetime]


@dataclass(frozen=True)
class MoveRecordModel:
    """One applied half-move, as stored."""

    game_id: UUID
    ply: int
    move_number: int
    player_color: str
    move_uci: str
    move_san: str
    position_before: str
    position_after: str
    played_at: datetime
