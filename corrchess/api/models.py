"""Requests and Response models"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from corrchess.core.exceptions import InvalidRequestError
from corrchess.core.shared_types import Color, GameStatus

MAX_USERNAME_LENGTH = 32


# --- REQUEST MODELS ---
class RegisterPlayerRequest(BaseModel):
    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        username = value.strip()
        if not username:
            raise InvalidRequestError("Username cannot be empty.")
        if len(username) > MAX_USERNAME_LENGTH:
            raise InvalidRequestError(
                f"Username cannot be longer than {MAX_USERNAME_LENGTH} characters."
            )
        return username


class CreateGameRequest(BaseModel):
    """`color` is what the requesting player wants to play. Left out: a coin flip decides."""

    player_id: UUID
    opponent_id: UUID
    color: Optional[Color] = None


class SubmitMoveRequest(BaseModel):
    game_id: UUID
    player_id: UUID
    move: str

    @field_validator("move")
    @classmethod
    def normalize_move(cls, value: str) -> str:
        # only cosmetic clean-up here: whether it is a move at all is decided by the move validator
        return value.strip().lower()


class GetGameRequest(BaseModel):
    game_id: UUID


class ListGamesRequest(BaseModel):
    player_id: UUID
    active_only: bool = False


class ListMovesRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID


class PgnRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class PlayerResponse(BaseModel):
    player_id: UUID
    username: str


class GameResponse(BaseModel):
    game_id: UUID
    white_player_id: UUID
    black_player_id: UUID
    fen_state: str
    status: GameStatus
    current_turn: Color
    move_deadline: Optional[datetime]
    created_at: datetime
    completed_at: Optional[datetime]
    winner_id: Optional[UUID]


class MoveRecordResponse(BaseModel):
    ply: int
    move_number: int
    color: Color
    uci: str
    san: str
    position_before: str
    position_after: str
    played_at: datetime


class MoveResponse(BaseModel):
    move: MoveRecordResponse
    game: GameResponse


class MoveListResponse(BaseModel):
    game_id: UUID
    moves: list[MoveRecordResponse]


class GameListResponse(BaseModel):
    games: list[GameResponse]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    current_turn: Color
    legal_moves: list[str]


class PgnResponse(BaseModel):
    game_id: UUID
    pgn: str
