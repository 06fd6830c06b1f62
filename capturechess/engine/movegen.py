from __future__ import annotations

from typing import List, Optional, Set, Tuple

from .board import Board, Piece, PieceKind, Side
from .move import Move, Square


KNIGHT_STEPS: Tuple[Tuple[int, int], ...] = (
    (-1, 2),
    (1, 2),
    (-2, 1),
    (2, 1),
    (-2, -1),
    (2, -1),
    (-1, -2),
    (1, -2),
)
KING_STEPS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)
BISHOP_DIRS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS = BISHOP_DIRS + ROOK_DIRS

SLIDER_DIRS = {
    PieceKind.BISHOP: BISHOP_DIRS,
    PieceKind.ROOK: ROOK_DIRS,
    PieceKind.QUEEN: QUEEN_DIRS,
}


def pawn_direction(side: Side) -> int:
    return 1 if side is Side.WHITE else -1


def pawn_start_rank(side: Side) -> int:
    return 2 if side is Side.WHITE else 7


def raw_destinations(board: Board, origin: Square, piece: Optional[Piece] = None) -> List[Square]:
    """Return the squares a piece on ``origin`` can move to by geometry.

    Args:
        board (Board): Position used for blocking and capture decisions.
        origin (Square): Square the piece moves from.
        piece (Optional[Piece]): Piece to move; defaults to the occupant of
            ``origin``. Passing it explicitly lets callers probe a square the
            piece does not stand on yet.

    Returns:
        List[Square]: Destinations. Sliders stop at the first occupied square
            and include it only when it holds an opposing piece. Knights and
            kings skip own-side squares. Pawns push onto empty squares (two
            squares from the start rank when both are empty) and move
            diagonally only to capture.
    """
    if piece is None:
        piece = board.get(origin)
    if piece.is_none:
        return []
    kind = piece.kind
    side = piece.side
    dests: List[Square] = []

    if kind in SLIDER_DIRS:
        for df, dr in SLIDER_DIRS[kind]:
            sq = origin.offset(df, dr)
            while sq is not None:
                occupant = board.get(sq)
                if occupant.is_none:
                    dests.append(sq)
                else:
                    if occupant.side is not side:
                        dests.append(sq)
                    break
                sq = sq.offset(df, dr)
        return dests

    if kind is PieceKind.KNIGHT or kind is PieceKind.KING:
        steps = KNIGHT_STEPS if kind is PieceKind.KNIGHT else KING_STEPS
        for df, dr in steps:
            sq = origin.offset(df, dr)
            if sq is not None and board.get(sq).side is not side:
                dests.append(sq)
        return dests

    if kind is PieceKind.PAWN:
        d = pawn_direction(side)
        one = origin.offset(0, d)
        if one is not None and board.is_empty(one):
            dests.append(one)
            if origin.rank == pawn_start_rank(side):
                two = origin.offset(0, 2 * d)
                if two is not None and board.is_empty(two):
                    dests.append(two)
        for df in (-1, 1):
            cap = origin.offset(df, d)
            if cap is None:
                continue
            occupant = board.get(cap)
            if not occupant.is_none and occupant.side is side.opponent:
                dests.append(cap)
        return dests

    return dests


def squares_between(start: Square, end: Square) -> List[Square]:
    """Open segment of squares strictly between two collinear squares.

    Returns an empty list for identical, adjacent, or non-collinear pairs
    (knight jumps included). Order runs from ``start`` towards ``end``.
    """
    df = end.file - start.file
    dr = end.rank - start.rank
    if df == 0 and dr == 0:
        return []
    if df != 0 and dr != 0 and abs(df) != abs(dr):
        return []
    step_f = (df > 0) - (df < 0)
    step_r = (dr > 0) - (dr < 0)
    out: List[Square] = []
    f, r = start.file + step_f, start.rank + step_r
    while (f, r) != (end.file, end.rank):
        out.append(Square(f, r))
        f += step_f
        r += step_r
    return out


def is_path_clear(board: Board, start: Square, end: Square, kind: PieceKind) -> bool:
    """True when no piece stands between ``start`` and ``end`` for a slider.

    Knights, kings and pawns always have a clear path in this sense.
    """
    if not kind.is_slider:
        return True
    return all(board.is_empty(sq) for sq in squares_between(start, end))


def attacked_squares(board: Board, origin: Square, piece: Optional[Piece] = None) -> Set[Square]:
    """Squares controlled by the piece on ``origin``.

    Unlike :func:`raw_destinations`, pawns attack both forward diagonals whether
    or not anything stands there, and sliders include the first blocker of
    either side.
    """
    if piece is None:
        piece = board.get(origin)
    if piece.is_none:
        return set()
    kind = piece.kind
    out: Set[Square] = set()
    if kind in SLIDER_DIRS:
        for df, dr in SLIDER_DIRS[kind]:
            sq = origin.offset(df, dr)
            while sq is not None:
                out.add(sq)
                if not board.is_empty(sq):
                    break
                sq = sq.offset(df, dr)
    elif kind is PieceKind.KNIGHT or kind is PieceKind.KING:
        steps = KNIGHT_STEPS if kind is PieceKind.KNIGHT else KING_STEPS
        for df, dr in steps:
            sq = origin.offset(df, dr)
            if sq is not None:
                out.add(sq)
    elif kind is PieceKind.PAWN:
        d = pawn_direction(piece.side)
        for df in (-1, 1):
            sq = origin.offset(df, d)
            if sq is not None:
                out.add(sq)
    return out


def is_square_attacked(board: Board, square: Square, by_side: Side) -> bool:
    for origin, piece in board.pieces(by_side).items():
        if square in attacked_squares(board, origin, piece):
            return True
    return False


def moves_for_side(board: Board, side: Side) -> List[Move]:
    """Every geometric move available to ``side``, origins in board order."""
    moves: List[Move] = []
    for origin, piece in board:
        if piece.side is not side:
            continue
        moves.extend(Move(origin, dest) for dest in raw_destinations(board, origin, piece))
    return moves


def capture_moves(board: Board, origin: Square) -> List[Move]:
    """Moves from ``origin`` that land on an opposing piece."""
    piece = board.get(origin)
    if piece.is_none:
        return []
    enemy = piece.side.opponent
    return [
        Move(origin, dest)
        for dest in raw_destinations(board, origin, piece)
        if board.get(dest).side is enemy
    ]
