"""
Short algebraic notation (SAN) for moves that have already been accepted as legal.

The notation depends on the position the move is played from (which piece moves, what is captured, which other pieces
could have reached the same square) and on the position it produces (check / mate marker).
"""

from corrchess.chess.fen import encode
from corrchess.chess.moves import Move
from corrchess.chess.pieces import PIECE_TO_SAN, Piece
from corrchess.chess.position import Position
from corrchess.chess.rules import RulesEngine
from corrchess.chess.square import Square
from corrchess.core.exceptions import IllegalMoveError
from corrchess.core.shared_types import Color, PieceType, TerminalStatus

KING_SIDE_CASTLE = "O-O"
QUEEN_SIDE_CASTLE = "O-O-O"
CAPTURE = "x"
PROMOTION = "="
CHECK = "+"
CHECKMATE = "#"

HOME_RANKS: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: 8}
KING_SIDE_FILE = 7  # g
QUEEN_SIDE_FILE = 3  # c


def to_san(rules: RulesEngine, position: Position, move: Move) -> str:
    """
    Convert a legal move into short algebraic notation.
    ----

    1. castling is written as O-O / O-O-O and nothing else (not even a check marker)
    2. piece letter (none for pawns)
    3. disambiguation, if another piece of the same kind could also move to the destination
    4. capture marker (pawn captures are prefixed with the file the pawn came from)
    5. destination square
    6. promotion piece
    7. check (+) or checkmate (#) marker

    Raises IllegalMoveError for moves that are not legal in the given position.
    """
    if not rules.is_legal(position, move):
        raise IllegalMoveError(
            f"Cannot write notation for illegal move {move.to_uci()} in {encode(position)}"
        )

    piece = rules.piece_at(position, move.from_square)
    if piece is None:
        # a legal move always starts from an occupied square; a rules engine saying otherwise is broken
        raise IllegalMoveError(f"No piece on {move.from_square.to_algebraic()}")

    castle = _castling_notation(piece, move)
    if castle is not None:
        return castle

    san_parts: list[str] = []
    if piece.type != PieceType.PAWN:
        san_parts.append(PIECE_TO_SAN[piece.type])

    if piece.type not in (PieceType.PAWN, PieceType.KING):
        san_parts.append(_disambiguation(rules, position, move, piece))

    if _is_capture(rules, position, move, piece):
        if piece.type == PieceType.PAWN:
            san_parts.append(move.from_square.file_name)
        san_parts.append(CAPTURE)

    san_parts.append(move.to_square.to_algebraic())

    if move.promote_to is not None:
        san_parts.append(PROMOTION + PIECE_TO_SAN[move.promote_to])

    san_parts.append(_check_suffix(rules, position, move))
    return "".join(san_parts)


def _castling_notation(piece: Piece, move: Move) -> str | None:
    """A king moving two files along its home rank is castling."""
    if piece.type != PieceType.KING:
        return None
    home_rank = HOME_RANKS[piece.color]
    if not (move.from_square.rank == move.to_square.rank == home_rank):
        return None
    if abs(move.to_square.file - move.from_square.file) != 2:
        return None
    if move.to_square.file == KING_SIDE_FILE:
        return KING_SIDE_CASTLE
    if move.to_square.file == QUEEN_SIDE_FILE:
        return QUEEN_SIDE_CASTLE
    return None


def _disambiguation(
    rules: RulesEngine, position: Position, move: Move, piece: Piece
) -> str:
    """
    Other pieces of the same kind that can legally reach the same square force us to say which one moved:
    the file if that is unique, else the rank if that is unique, else both.
    """
    competitors: set[Square] = {
        other.from_square
        for other in rules.legal_moves(position)
        if other.to_square == move.to_square
        and other.from_square != move.from_square
        and rules.piece_at(position, other.from_square) == piece
    }
    if not competitors:
        return ""

    source = move.from_square
    if all(square.file != source.file for square in competitors):
        return source.file_name
    if all(square.rank != source.rank for square in competitors):
        return str(source.rank)
    return source.to_algebraic()


def _is_capture(
    rules: RulesEngine, position: Position, move: Move, piece: Piece
) -> bool:
    if rules.piece_at(position, move.to_square) is not None:
        return True
    # en passant: the pawn lands on an empty square, but still moved diagonally
    return piece.type == PieceType.PAWN and move.from_square.file != move.to_square.file


def _check_suffix(rules: RulesEngine, position: Position, move: Move) -> str:
    after = rules.apply(position, move)
    if rules.terminal_status(after) == TerminalStatus.CHECKMATE:
        return CHECKMATE
    if rules.is_in_check(after):
        return CHECK
    return ""
