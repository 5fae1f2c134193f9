"""
Moves as submitted by players: a source square, a destination square and maybe a promotion piece.

A Move carries no game context. Whether it may be played is decided against a specific Position by the rules engine.
"""

from dataclasses import dataclass
from typing import Optional, Self

from corrchess.chess.pieces import PIECE_TO_FEN, PROMOTION_PIECES
from corrchess.chess.square import Square, is_algebraic_square
from corrchess.core.exceptions import MalformedMoveError
from corrchess.core.shared_types import PieceType


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side (castling is written as the king's own move)

        Raises MalformedMoveError if the text is not of this form.
        """
        if not isinstance(uci, str):
            raise MalformedMoveError(f"Move must be text, got {type(uci).__name__}")

        text = uci.strip()
        if len(text) not in (4, 5):
            raise MalformedMoveError(
                f"Move must be 4 or 5 characters (e.g. 'e2e4', 'e7e8q'), got {uci!r}"
            )

        from_alg, to_alg = text[:2].lower(), text[2:4].lower()
        if not (is_algebraic_square(from_alg) and is_algebraic_square(to_alg)):
            raise MalformedMoveError(f"Move does not name two board squares: {uci!r}")
        if from_alg == to_alg:
            raise MalformedMoveError(f"Move must change square: {uci!r}")

        promote_to = None
        if len(text) == 5:
            promotion_char = text[4].lower()
            if promotion_char not in PROMOTION_PIECES:
                raise MalformedMoveError(
                    f"Promotion piece must be one of {', '.join(PROMOTION_PIECES)}, got {text[4]!r}"
                )
            promote_to = PROMOTION_PIECES[promotion_char]

        return cls(
            from_square=Square.from_algebraic(from_alg),
            to_square=Square.from_algebraic(to_alg),
            promote_to=promote_to,
        )

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


def parse_move(move_text: str) -> Move:
    """Syntactic validation only; never consults the rules engine."""
    return Move.from_uci(move_text)
