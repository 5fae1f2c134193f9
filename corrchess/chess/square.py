"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


@dataclass(frozen=True, order=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)

        Raises ValueError for anything that is not a square on the board, so callers can wrap it in their own error type.
        """
        if not is_algebraic_square(sq):
            raise ValueError(f"Not a square on the board: {sq!r}")
        file = FILE_NAMES.index(sq[0]) + 1
        rank = int(sq[1])
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{self.file_name}{self.rank}"

    @property
    def file_name(self) -> str:
        return FILE_NAMES[self.file - 1]

    @property
    def index(self) -> int:
        """0 (a1) .. 63 (h8), rank-major. Same numbering python-chess uses."""
        return (self.rank - 1) * BOARD_DIMENSIONS[0] + (self.file - 1)

    @classmethod
    def from_index(cls, index: int) -> Square:
        num_files = BOARD_DIMENSIONS[0]
        return cls(index % num_files + 1, index // num_files + 1)

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )


def is_algebraic_square(sq: str) -> bool:
    """A letter for the file + a single digit for the rank, both on the board."""
    if len(sq) != 2:
        return False
    file_char, rank_char = sq[0], sq[1]
    if file_char not in FILE_NAMES:
        return False
    # str.isdigit() also accepts superscripts and other scripts' digits
    if not (rank_char.isascii() and rank_char.isdigit()):
        return False
    return 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]
