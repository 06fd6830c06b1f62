from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple

from .move import Square


FEN_SUFFIX = " w - - 0 1"
EMPTY_FEN = "8/8/8/8/8/8/8/8" + FEN_SUFFIX


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"
    NONE = ""

    @classmethod
    def from_char(cls, ch: str) -> "PieceKind":
        """Map a FEN letter (either case) to a kind; unknown letters give ``NONE``."""
        low = ch.lower()
        for kind in cls:
            if kind.value and kind.value == low:
                return kind
        return cls.NONE

    @property
    def is_slider(self) -> bool:
        return self in (PieceKind.BISHOP, PieceKind.ROOK, PieceKind.QUEEN)


class Side(Enum):
    WHITE = "w"
    BLACK = "b"
    NONE = "-"

    @property
    def opponent(self) -> "Side":
        if self is Side.WHITE:
            return Side.BLACK
        if self is Side.BLACK:
            return Side.WHITE
        return Side.NONE


@dataclass(frozen=True)
class Piece:
    """A piece kind owned by a side.

    ``Piece.NONE`` is what an empty square reads as; it is never stored in a board.
    """

    kind: PieceKind
    side: Side

    NONE: ClassVar["Piece"]

    @property
    def is_none(self) -> bool:
        return self.kind is PieceKind.NONE

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        kind = PieceKind.from_char(ch)
        if kind is PieceKind.NONE:
            return cls.NONE
        return cls(kind, Side.WHITE if ch.isupper() else Side.BLACK)

    def to_char(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black, ``""`` for none."""
        if self.is_none:
            return ""
        return self.kind.value.upper() if self.side is Side.WHITE else self.kind.value

    def __str__(self) -> str:
        return self.to_char() or "."


Piece.NONE = Piece(PieceKind.NONE, Side.NONE)


@dataclass(frozen=True, eq=False)
class Board:
    """Immutable sparse board: only occupied squares have entries.

    Notes:
    - Every mutation (``set``, ``remove``, ``move``) returns a new Board; the
      receiver is never changed, so search code can branch and backtrack by
      simply dropping references.
    - Squares are :class:`Square` values (1-based file/rank).
    """

    _pieces: Mapping[Square, Piece] = field(default_factory=dict)
    _key: Tuple[Tuple[Square, Piece], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        clean: Dict[Square, Piece] = {}
        for sq, p in self._pieces.items():
            if p.is_none:
                continue
            clean[sq] = p
        object.__setattr__(self, "_pieces", MappingProxyType(clean))
        key = tuple(sorted(clean.items(), key=lambda kv: (kv[0].rank, kv[0].file)))
        object.__setattr__(self, "_key", key)

    @classmethod
    def empty(cls) -> "Board":
        return cls({})

    # --- queries ---
    def get(self, square: Square) -> Piece:
        """Return the occupant of ``square`` or ``Piece.NONE`` when empty."""
        return self._pieces.get(square, Piece.NONE)

    def is_empty(self, square: Square) -> bool:
        return square not in self._pieces

    def pieces(self, side: Optional[Side] = None) -> Dict[Square, Piece]:
        """Occupied squares, optionally restricted to one side."""
        if side is None:
            return dict(self._pieces)
        return {sq: p for sq, p in self._pieces.items() if p.side is side}

    def count(self, side: Optional[Side] = None) -> int:
        if side is None:
            return len(self._pieces)
        return sum(1 for p in self._pieces.values() if p.side is side)

    def find(self, kind: PieceKind, side: Side) -> List[Square]:
        return [sq for sq, p in self._pieces.items() if p.kind is kind and p.side is side]

    def __iter__(self) -> Iterator[Tuple[Square, Piece]]:
        return iter(self._key)

    def __len__(self) -> int:
        return len(self._pieces)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    # --- derivations ---
    def set(self, square: Square, piece: Piece) -> "Board":
        """Return a new board with ``piece`` on ``square`` (``Piece.NONE`` clears it)."""
        new = dict(self._pieces)
        if piece.is_none:
            new.pop(square, None)
        else:
            new[square] = piece
        return Board(new)

    def remove(self, square: Square) -> "Board":
        if square not in self._pieces:
            return self
        new = dict(self._pieces)
        del new[square]
        return Board(new)

    def move(self, start: Square, end: Square) -> "Board":
        """Move the piece on ``start`` to ``end``, replacing any occupant of ``end``.

        Returns the receiver unchanged when ``start`` is empty.
        """
        mover = self._pieces.get(start)
        if mover is None:
            return self
        new = dict(self._pieces)
        del new[start]
        new[end] = mover
        return Board(new)

    # --- FEN I/O ---
    @classmethod
    def from_fen(cls, fen: str, *, strict: bool = False) -> "Board":
        """Decode the placement field of a FEN string.

        Args:
            fen (str): FEN text; only the first field is read.
            strict (bool): Raise on malformed placement instead of skipping.

        Returns:
            Board: Decoded board. Letters may be either case (uppercase is
                White); digits advance files and ``/`` drops a rank.

        Raises:
            ValueError: Only when ``strict`` is set and the placement field has
                the wrong number of ranks, an unknown character, or a rank that
                does not cover exactly eight files.
        """
        parts = fen.strip().split() if isinstance(fen, str) else []
        placement = parts[0] if parts else ""
        if strict:
            _validate_placement(placement)

        pieces: Dict[Square, Piece] = {}
        rank = 8
        file_idx = 1
        for ch in placement:
            if "0" <= ch <= "9":
                file_idx += int(ch)
            elif ch == "/":
                rank -= 1
                file_idx = 1
            else:
                piece = Piece.from_char(ch)
                if piece.is_none:
                    continue
                if 1 <= file_idx <= 8 and 1 <= rank <= 8:
                    pieces[Square(file_idx, rank)] = piece
                file_idx += 1
        return cls(pieces)

    def to_fen(self) -> str:
        """Serialize to FEN with the fixed ``" w - - 0 1"`` suffix."""
        return self.placement + FEN_SUFFIX

    @cached_property
    def placement(self) -> str:
        """Placement field of the FEN, used by solvers as a state key."""
        rows: List[str] = []
        for rank in range(8, 0, -1):
            run = 0
            row: List[str] = []
            for file_idx in range(1, 9):
                p = self._pieces.get(Square(file_idx, rank))
                if p is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(p.to_char())
            if run > 0:
                row.append(str(run))
            rows.append("".join(row))
        return "/".join(rows)

    def diagram(self) -> str:
        lines = []
        for rank in range(8, 0, -1):
            cells = " ".join(str(self.get(Square(f, rank))) for f in range(1, 9))
            lines.append(f"{rank} | {cells}")
        lines.append("    a b c d e f g h")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Board({self.placement!r})"


def _validate_placement(placement: str) -> None:
    if not placement:
        raise ValueError("FEN must be a non-empty string")
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError("FEN board must have 8 ranks")
    for rank in ranks:
        width = 0
        for ch in rank:
            if "0" <= ch <= "9":
                n = int(ch)
                if n < 1 or n > 8:
                    raise ValueError("invalid empty count in FEN rank")
                width += n
            elif PieceKind.from_char(ch) is PieceKind.NONE:
                raise ValueError(f"invalid piece in FEN: {ch!r}")
            else:
                width += 1
        if width != 8:
            raise ValueError("rank does not sum to 8 squares in FEN")
