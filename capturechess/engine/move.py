from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


FILES = "abcdefgh"


class OutOfBoundsError(ValueError):
    """Raised when a square coordinate falls outside the 8x8 board."""


@dataclass(frozen=True)
class Square:
    """Board coordinate with 1-based file and rank.

    Attributes:
        file (int): File number, 1 (``a``) to 8 (``h``).
        rank (int): Rank number, 1 to 8.

    Raises:
        OutOfBoundsError: If either coordinate is outside ``1..8``.
    """

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not (1 <= self.file <= 8) or not (1 <= self.rank <= 8):
            raise OutOfBoundsError(f"square out of bounds: file={self.file} rank={self.rank}")

    def __str__(self) -> str:
        return FILES[self.file - 1] + str(self.rank)

    def offset(self, df: int, dr: int) -> Optional["Square"]:
        """Return the square shifted by ``(df, dr)``, or ``None`` when off the board."""
        f = self.file + df
        r = self.rank + dr
        if 1 <= f <= 8 and 1 <= r <= 8:
            return Square(f, r)
        return None

    @classmethod
    def parse(cls, s: str) -> "Square":
        """Convert algebraic notation such as ``"e4"`` into a square.

        Raises:
            ValueError: If ``s`` is not a valid square name.
        """
        if len(s) != 2 or s[0] not in FILES or s[1] < "1" or s[1] > "8":
            raise ValueError(f"invalid square: {s!r}")
        return cls(FILES.index(s[0]) + 1, int(s[1]))

    @classmethod
    def all(cls) -> List["Square"]:
        """All 64 squares, rank-major from a1 to h8."""
        return list(ALL_SQUARES)


ALL_SQUARES = tuple(Square(f, r) for r in range(1, 9) for f in range(1, 9))


@dataclass(frozen=True)
class Move:
    """Pure geometry of a move; capture and legality are judged elsewhere.

    Attributes:
        start (Square): Origin square.
        end (Square): Destination square.
    """

    start: Square
    end: Square

    def to_uci(self) -> str:
        """Serialize the move into four-character UCI form, e.g. ``"e2e4"``."""
        return str(self.start) + str(self.end)

    def __str__(self) -> str:
        return self.to_uci()


def parse_uci(uci: str) -> Optional[Move]:
    """Parse a four-character UCI move string.

    Args:
        uci (str): Move such as ``"a1a5"``.

    Returns:
        Optional[Move]: Parsed move, or ``None`` when the string has the wrong
            length, non-digit ranks, or coordinates off the board.
    """
    if not isinstance(uci, str) or len(uci) != 4:
        return None
    if not (uci[1].isdigit() and uci[3].isdigit()):
        return None
    try:
        return Move(Square.parse(uci[0:2]), Square.parse(uci[2:4]))
    except ValueError:
        return None
