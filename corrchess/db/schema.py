"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands datetimes back without tzinfo. Everything is stored in UTC, so re-attach it."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    type_annotation_map = {datetime: DateTime(timezone=True)}


class DBPlayer(Base):
    __tablename__ = "players"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(unique=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)


class DBGame(Base):
    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("white_player_id != black_player_id", name="different_players"),
        CheckConstraint(
            "status IN ('ongoing', 'white_won', 'black_won', 'drawn', 'abandoned')",
            name="valid_status",
        ),
        CheckConstraint("current_turn IN ('white', 'black')", name="valid_turn"),
        Index("idx_games_status_deadline", "status", "move_deadline"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True)
    white_player_id: Mapped[UUID] = mapped_column(ForeignKey("players.id"), index=True)
    black_player_id: Mapped[UUID] = mapped_column(ForeignKey("players.id"), index=True)
    current_position: Mapped[str]
    status: Mapped[str]
    current_turn: Mapped[str]
    move_deadline: Mapped[Optional[datetime]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    completed_at: Mapped[Optional[datetime]]


class DBMove(Base):
    __tablename__ = "moves"
    __table_args__ = (
        UniqueConstraint("game_id", "ply", name="unique_game_ply"),
        CheckConstraint("player_color IN ('white', 'black')", name="valid_player_color"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[UUID] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"))
    ply: Mapped[int]
    move_number: Mapped[int]
    player_color: Mapped[str]
    move_uci: Mapped[str]
    move_san: Mapped[str]
    position_before: Mapped[str]
    position_after: Mapped[str]
    played_at: Mapped[datetime] = mapped_column(default=utc_now)
