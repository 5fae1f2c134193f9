"""
PGN (Portable Game Notation) export.

Output depends only on the game's metadata and its move records, so exporting an unchanged game twice gives
byte-identical text.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from corrchess.chess.game import Game, MoveRecord
from corrchess.core.shared_types import Color, GameStatus

MAX_LINE_LENGTH = 80
UNKNOWN_ROUND = "-"


@dataclass(frozen=True)
class PgnHeaders:
    """The seven-tag roster plus optional extension tags."""

    event: str
    site: str
    date: date
    white: str
    black: str
    result: str  # "1-0", "0-1", "1/2-1/2", "*"
    round: str = UNKNOWN_ROUND
    extra: dict[str, str] = field(default_factory=dict)


def result_token(game: Game) -> str:
    """Score of the game as PGN writes it. An abandoned game is a forfeit by the side that was on move."""
    match game.status:
        case GameStatus.ONGOING:
            return "*"
        case GameStatus.DRAWN:
            return "1/2-1/2"
        case GameStatus.WHITE_WON | GameStatus.BLACK_WON | GameStatus.ABANDONED:
            return "1-0" if game.winner_color == Color.WHITE else "0-1"


def headers_for(
    game: Game, white_name: str, black_name: str, event: str, site: str
) -> PgnHeaders:
    extra: dict[str, str] = {}
    if game.status == GameStatus.ABANDONED:
        extra["Termination"] = "time forfeit"
    return PgnHeaders(
        event=event,
        site=site,
        date=game.created_at.date(),
        white=white_name,
        black=black_name,
        result=result_token(game),
        extra=extra,
    )


def export_pgn(headers: PgnHeaders, records: Sequence[MoveRecord]) -> str:
    """Format headers + movetext into a PGN string."""
    header_lines = [
        _format_header_line("Event", headers.event),
        _format_header_line("Site", headers.site),
        _format_header_line("Date", headers.date.strftime("%Y.%m.%d")),
        _format_header_line("Round", headers.round),
        _format_header_line("White", headers.white),
        _format_header_line("Black", headers.black),
        _format_header_line("Result", headers.result),
    ]
    # extension tags in name order, so the output does not depend on dict insertion order
    header_lines.extend(
        _format_header_line(key, headers.extra[key]) for key in sorted(headers.extra)
    )
    ordered = sorted(records, key=lambda record: record.ply)
    movetext = _format_movetext([record.san for record in ordered], headers.result)
    return "\n".join(header_lines) + "\n\n" + movetext + "\n"


def _format_header_line(key: str, value: str) -> str:
    # backslashes and quotes inside a tag value must be escaped
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'[{key} "{escaped}"]'


def _format_movetext(moves: list[str], result: str) -> str:
    """Move-number-prefixed pairs and the result token, wrapped at MAX_LINE_LENGTH."""
    tokens: list[str] = []
    for idx, san in enumerate(moves):
        if idx % 2 == 0:
            tokens.append(f"{idx // 2 + 1}.")
        tokens.append(san)
    tokens.append(result)

    lines: list[str] = []
    current = ""
    for token in tokens:
        if current and len(current) + 1 + len(token) > MAX_LINE_LENGTH:
            lines.append(current)
            current = token
        else:
            current = f"{current} {token}" if current else token
    lines.append(current)
    return "\n".join(lines)
