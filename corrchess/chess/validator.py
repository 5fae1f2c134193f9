"""
Move validation and end-of-game detection.

The two move checks are independent: `validate_syntax` never touches the rules engine, `validate_legality` assumes a
well-formed Move. `validate_move` chains them.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from corrchess.chess.fen import encode
from corrchess.chess.moves import Move, parse_move
from corrchess.chess.position import Position
from corrchess.chess.rules import RulesEngine
from corrchess.core.exceptions import IllegalMoveError, MalformedMoveError
from corrchess.core.shared_types import Color, TerminalStatus

logger = logging.getLogger(__name__)


class GameResultKind(StrEnum):
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass(frozen=True)
class GameResult:
    kind: GameResultKind
    winner: Optional[Color] = None

    @property
    def is_draw(self) -> bool:
        return self.kind == GameResultKind.STALEMATE


def validate_syntax(move_text: str) -> Move:
    """Raises MalformedMoveError if the text is not a square pair with optional promotion letter."""
    try:
        return parse_move(move_text)
    except MalformedMoveError as e:
        logger.debug("Rejected malformed move %r: %s", move_text, e)
        raise


def validate_legality(rules: RulesEngine, position: Position, move: Move) -> Move:
    """Raises IllegalMoveError if the rules engine does not accept the move in this position."""
    if not rules.is_legal(position, move):
        logger.debug("Rejected illegal move %s in %s", move.to_uci(), encode(position))
        raise IllegalMoveError(f"Illegal move: {move.to_uci()}")
    return move


def validate_move(rules: RulesEngine, position: Position, move_text: str) -> Move:
    move = validate_syntax(move_text)
    return validate_legality(rules, position, move)


def check_game_result(rules: RulesEngine, position: Position) -> Optional[GameResult]:
    """
    None while the game can go on.

    In a checkmate position the side to move is the side that got mated, so the winner is its opponent
    (the player who just made the mating move).
    """
    match rules.terminal_status(position):
        case TerminalStatus.CHECKMATE:
            return GameResult(
                GameResultKind.CHECKMATE, winner=position.side_to_move.opposite
            )
        case TerminalStatus.STALEMATE:
            return GameResult(GameResultKind.STALEMATE)
        case TerminalStatus.ONGOING:
            return None
