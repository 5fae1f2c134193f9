"""
Position codec: Position <-> FEN text.

Decoding validates the grammar only. Whether a position could actually arise in a game (one king per side, pawns off
the back ranks, ...) is left to the rules engine.
"""

from corrchess.chess.pieces import FEN_TO_PIECE
from corrchess.chess.position import (
    Position,
    castling_from_fen,
    castling_to_fen,
)
from corrchess.chess.square import BOARD_DIMENSIONS, Square, is_algebraic_square
from corrchess.core.exceptions import MalformedPositionError
from corrchess.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_ENCODINGS = [
    "-",
    "K",
    "Q",
    "k",
    "q",
    "KQ",
    "Kk",
    "Kq",
    "Qk",
    "Qq",
    "kq",
    "KQk",
    "KQq",
    "Kkq",
    "Qkq",
    "KQkq",
]
# a double pawn push by white skips a square on rank 3, one by black a square on rank 6
EN_PASSANT_RANKS = (3, 6)

COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in COLOR_CODES.items()}


def encode(position: Position) -> str:
    """Write the six space-separated FEN fields."""
    en_passant_algebraic = (
        position.en_passant_square.to_algebraic()
        if position.en_passant_square is not None
        else "-"
    )
    return " ".join(
        [
            position.placement,
            COLOR_TO_CODE[position.side_to_move],
            castling_to_fen(position.castling_rights),
            en_passant_algebraic,
            str(position.half_move_clock),
            str(position.full_move_number),
        ]
    )


def decode(fen: str) -> Position:
    """Parse FEN text into a Position, or raise MalformedPositionError explaining which field is wrong."""
    parts = fen.split(" ")
    if len(parts) != 6:
        raise MalformedPositionError(
            f"FEN must contain 6 space-separated fields, got {len(parts)}: {fen!r}"
        )
    (
        placement,
        active_color,
        castling_str,
        en_passant_algebraic,
        half_move_clock,
        full_move_number,
    ) = parts

    if not is_valid_placement(placement):
        raise MalformedPositionError(f"Invalid piece placement: {placement!r}")
    if not is_valid_color_code(active_color):
        raise MalformedPositionError(f"Invalid side to move: {active_color!r}")
    if not is_valid_castling_rights(castling_str):
        raise MalformedPositionError(f"Invalid castling rights: {castling_str!r}")
    if not is_valid_en_passant(en_passant_algebraic):
        raise MalformedPositionError(
            f"Invalid en passant square: {en_passant_algebraic!r}"
        )
    if not is_valid_move_counter(half_move_clock):
        raise MalformedPositionError(f"Invalid half move clock: {half_move_clock!r}")
    if not (
        is_valid_move_counter(full_move_number) and int(full_move_number) >= 1
    ):
        raise MalformedPositionError(
            f"Invalid full move number: {full_move_number!r}"
        )

    en_passant_square = (
        Square.from_algebraic(en_passant_algebraic)
        if en_passant_algebraic != "-"
        else None
    )
    return Position(
        placement=placement,
        side_to_move=COLOR_CODES[active_color],
        castling_rights=castling_from_fen(castling_str),
        en_passant_square=en_passant_square,
        half_move_clock=int(half_move_clock),
        full_move_number=int(full_move_number),
    )


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """
    try:
        decode(fen)
    except MalformedPositionError:
        return False
    return True


def is_valid_placement(placement: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = placement.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        previous_was_digit = False
        for character in rank_fen:
            # make sure every character is valid
            if character.isascii() and character.isdigit():
                # runs of empty squares are written as a single digit: "44" or "0" are not canonical
                if previous_was_digit or not (1 <= int(character) <= num_files):
                    return False
                file_count += int(character)
                previous_was_digit = True
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
                previous_was_digit = False
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square a pawn can skip over, or a '-'"""
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and int(en_passant[1]) in EN_PASSANT_RANKS


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    return is_algebraic_square(square)


def is_valid_move_counter(counter: str) -> bool:
    # str.isdigit() also accepts things like superscripts, which int() refuses
    if not (counter.isascii() and counter.isdigit()):
        return False
    # no leading zeros, so that every accepted string encodes back to itself
    return counter == "0" or not counter.startswith("0")
