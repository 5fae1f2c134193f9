"""
Type definitions used across layers
"""

from __future__ import annotations

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class GameStatus(StrEnum):
    """
    Lifecycle of a correspondence game.

    A game is created directly in ONGOING (the 'created' state only exists until the record is first stored).
    Every other status is terminal: once reached, the game never returns to ONGOING.
    """

    ONGOING = "ongoing"
    WHITE_WON = "white_won"
    BLACK_WON = "black_won"
    DRAWN = "drawn"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self != GameStatus.ONGOING

    @classmethod
    def won_by(cls, color: Color) -> GameStatus:
        match color:
            case Color.WHITE:
                return cls.WHITE_WON
            case Color.BLACK:
                return cls.BLACK_WON


class TerminalStatus(StrEnum):
    """What the rules engine reports about a single position."""

    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
