"""Unit tests for corrchess/chess/fen.py"""

import pytest

from corrchess.chess.fen import (
    STARTING_FEN,
    VALID_CASTLING_ENCODINGS,
    decode,
    encode,
    is_valid_castling_rights,
    is_valid_color_code,
    is_valid_en_passant,
    is_valid_fen,
    is_valid_move_counter,
    is_valid_placement,
)
from corrchess.chess.position import (
    CastlingDirection,
    Position,
    castling_from_fen,
    castling_to_fen,
)
from corrchess.chess.square import Square
from corrchess.core.exceptions import MalformedPositionError
from corrchess.core.shared_types import Color

VALID_FENS = [
    STARTING_FEN,
    "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
    "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1 b kq - 3 9",
    "rnbqk2r/pppp1ppp/5n2/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4",
    "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3",
    "8/8/8/8/8/8/8/8 w - - 0 1",
    "4k3/8/8/8/8/8/8/4K3 b - - 99 120",
]


@pytest.mark.parametrize(
    "fen, expected_rights",
    [
        ("KQkq", tuple(CastlingDirection)),
        (
            "KQk",
            (
                CastlingDirection.WHITE_KING_SIDE,
                CastlingDirection.WHITE_QUEEN_SIDE,
                CastlingDirection.BLACK_KING_SIDE,
            ),
        ),
        ("q", (CastlingDirection.BLACK_QUEEN_SIDE,)),
        ("-", ()),
    ],
)
def test_castling_from_and_to_fen(
    fen: str, expected_rights: tuple[CastlingDirection, ...]
) -> None:
    """Check encoding of castling rights is correctly decoded, and written back the same way"""
    assert castling_from_fen(fen) == expected_rights
    assert castling_to_fen(expected_rights) == fen


def test_decode_starting_position() -> None:
    position = decode(STARTING_FEN)
    assert position.placement == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
    assert position.side_to_move == Color.WHITE
    assert position.castling_rights == tuple(CastlingDirection)
    assert position.en_passant_square is None
    assert position.half_move_clock == 0
    assert position.full_move_number == 1
    assert position == Position.initial()


def test_decode_en_passant_square() -> None:
    position = decode("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    assert position.en_passant_square == Square.from_algebraic("e3")
    assert position.side_to_move == Color.BLACK


@pytest.mark.parametrize("fen", VALID_FENS)
def test_round_trip(fen: str) -> None:
    """decode(encode(p)) == p, and the accepted text itself is reproduced exactly."""
    position = decode(fen)
    assert decode(encode(position)) == position
    assert encode(position) == fen
    assert is_valid_fen(fen)


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/XXXXX/8 w KQkq - 0 1",  # invalid placement
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w KQkq - 0 1",  # only 7 ranks
        "rnbqkbnr/pppppppp/44/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # consecutive digits
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # rank too long
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN² w KQkq - 0 1",  # superscript digit
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e³ 0 1",  # superscript rank
        "rnbqkbnr/pppppppp/٨/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # arabic-indic digit
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR X KQkq - 0 1",  # invalid color
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR white KQkq - 0 1",  # color spelled out
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w X - 0 1",  # invalid castling
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w qkQK - 0 1",  # castling out of order
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq 3b 0 1",  # invalid en passant square
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e4 0 1",  # en passant on wrong rank
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - - 1",  # invalid half-move counter
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - -1 1",  # negative half-move counter
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 y",  # invalid full move counter
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 0",  # full moves start at 1
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1 X",  # an additional element
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq 0 1",  # missing element
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1 ",  # trailing space
        " rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # starting space
        "",
    ],
)
def test_invalid_fen(fen: str) -> None:
    assert not is_valid_fen(fen)

    with pytest.raises(MalformedPositionError):
        decode(fen)


def test_decoding_does_not_check_legality() -> None:
    """Two white kings and no black one is still grammatical FEN."""
    position = decode("K7/8/8/8/8/8/8/K7 w - - 0 1")
    assert position.placement == "K7/8/8/8/8/8/8/K7"


@pytest.mark.parametrize("castling", VALID_CASTLING_ENCODINGS)
def test_valid_castling_encodings(castling: str) -> None:
    assert is_valid_castling_rights(castling)


@pytest.mark.parametrize("en_passant", ["-", "a3", "h3", "c6", "f6"])
def test_valid_en_passant(en_passant: str) -> None:
    assert is_valid_en_passant(en_passant)


@pytest.mark.parametrize("en_passant", ["e4", "a1", "i3", "e", "e33", "--"])
def test_invalid_en_passant(en_passant: str) -> None:
    assert not is_valid_en_passant(en_passant)


@pytest.mark.parametrize("color", ["w", "b"])
def test_valid_color(color: str) -> None:
    assert is_valid_color_code(color)


@pytest.mark.parametrize("counter, valid", [("0", True), ("12", True), ("01", False), ("", False), ("²", False)])
def test_move_counters(counter: str, valid: bool) -> None:
    assert is_valid_move_counter(counter) == valid


def test_placement_needs_eight_full_ranks() -> None:
    assert is_valid_placement("8/8/8/8/8/8/8/8")
    assert not is_valid_placement("8/8/8/8/8/8/8/7")
    assert not is_valid_placement("8/8/8/8/8/8/8/8/8")
