"""
Representation of a single position on the board. The part that can be encoded in a FEN string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from corrchess.chess.square import Square
from corrchess.core.shared_types import Color


class CastlingDirection(Enum):
    """Rights will be revoked during the game. Enum prevents silly typos/ inconsistent naming later in the application."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


def castling_from_fen(castle_fen: str) -> tuple[CastlingDirection, ...]:
    """parse the part of the FEN string that encodes castling rights"""
    return tuple(
        direction for direction in CASTLING_ORDER if direction.value in castle_fen
    )


def castling_to_fen(castling_rights: tuple[CastlingDirection, ...]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        [direction.value for direction in CASTLING_ORDER if direction in castling_rights]
    )
    return castling_chars or "-"


@dataclass(frozen=True)
class Position:
    """
    Immutable snapshot of everything a FEN string describes.
    ----

    <piece placement> <active color> <castling rights> <en passant square> <half move clock> <full move number>

    * The placement lists ranks 8 down to 1, separated by '/'. Letters are pieces (upper case white, lower case black),
      digits count consecutive empty squares.
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
    * The en passant square is the square a pawn skipped over with a double push on the previous move, or "-".
    * The half move clock counts the moves made since the last pawn move or capture.
    * The full move number starts at 1 and increments after every move black makes.

    A Position is never changed after construction. Playing a move produces a new Position; the old one stays valid
    as a historical record, which is also what lets the persistence layer compare positions by value.
    """

    placement: str
    side_to_move: Color
    castling_rights: tuple[CastlingDirection, ...]
    en_passant_square: Optional[Square]
    half_move_clock: int
    full_move_number: int

    @classmethod
    def initial(cls) -> Position:
        # deferred import: the codec module depends on this one
        from corrchess.chess.fen import STARTING_FEN, decode

        return decode(STARTING_FEN)

    def castling_options(self, color: Color) -> list[CastlingDirection]:
        """The castling directions (still) available to one side."""
        return [
            direction for direction in self.castling_rights if direction.color == color
        ]

    def can_castle(self, color: Color) -> bool:
        return bool(self.castling_options(color))

    def __str__(self) -> str:
        from corrchess.chess.fen import encode

        return encode(self)
