"""Coordinate transforms between private boards and the public board.

Each player sets up a private board from where they stand; the public
board is upright between them, so its rows and columns line up with a
player's board only after a mirror, and, on east/west tables, after
swapping rows with columns.

    to_public(c, s, o)            private cell -> public cell
    to_local(p, s, o)             public cell  -> private cell
    mirror_for_opponent(c, s, o)  my private cell -> same public spot
                                  on the opponent's private board
"""

from enum import Enum
import string

from .errors import OutOfBounds
from .grid import BOARD_SIZE, Coord


class Orientation(str, Enum):
    """Which way the public board faces. Fixed for a table."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @classmethod
    def from_str(cls, value: str) -> "Orientation":
        return cls(value.strip().lower())

    @property
    def swaps_axes(self) -> bool:
        return self in (Orientation.EAST, Orientation.WEST)


class PlayerSlot(str, Enum):
    """Seat at the table, fixed by join order."""

    FIRST = "first"
    SECOND = "second"

    @property
    def index(self) -> int:
        return 0 if self is PlayerSlot.FIRST else 1

    @property
    def other(self) -> "PlayerSlot":
        return PlayerSlot.SECOND if self is PlayerSlot.FIRST else PlayerSlot.FIRST

    @classmethod
    def from_index(cls, index: int) -> "PlayerSlot":
        return cls.FIRST if index == 0 else cls.SECOND


def _mirror(row: int, col: int, slot: PlayerSlot, size: int) -> tuple[int, int]:
    # Second faces the board from the far side; First only sees it upright.
    if slot is PlayerSlot.SECOND:
        return size - 1 - row, size - 1 - col
    return size - 1 - row, col


def to_public(
    local: Coord, slot: PlayerSlot, orientation: Orientation, size: int = BOARD_SIZE
) -> Coord:
    local.check(size)
    row, col = local.row, local.col
    if orientation.swaps_axes:
        row, col = col, row
    row, col = _mirror(row, col, slot, size)
    return Coord(row, col)


def to_local(
    public: Coord, slot: PlayerSlot, orientation: Orientation, size: int = BOARD_SIZE
) -> Coord:
    public.check(size)
    row, col = _mirror(public.row, public.col, slot, size)
    if orientation.swaps_axes:
        row, col = col, row
    return Coord(row, col)


def mirror_for_opponent(
    local: Coord, slot: PlayerSlot, orientation: Orientation, size: int = BOARD_SIZE
) -> Coord:
    return to_local(to_public(local, slot, orientation, size), slot.other, orientation, size)


# (dx, dz) world offset of a slot's markers from the public board
_MARKER_SIDES = {
    Orientation.NORTH: ((0, -1), (0, 1)),
    Orientation.SOUTH: ((0, 1), (0, -1)),
    Orientation.EAST: ((1, 0), (-1, 0)),
    Orientation.WEST: ((-1, 0), (1, 0)),
}


def marker_offset(slot: PlayerSlot, orientation: Orientation) -> tuple[int, int]:
    """Which side of the public board a slot hangs its markers on."""
    return _MARKER_SIDES[orientation][slot.index]


def format_coord(coord: Coord) -> str:
    """Coord(1, 2) -> 'C2'. Columns are letters, rows are 1-based numbers."""
    return f"{string.ascii_uppercase[coord.col]}{coord.row + 1}"


def parse_coord(text: str, size: int = BOARD_SIZE) -> Coord:
    """
    Parse an 'A1'-style label.

    Raises:
        ValueError: The label is not a letter followed by a number.
        OutOfBounds: The label names a cell outside the board.
    """
    label = text.strip().upper()
    if len(label) < 2 or label[0] not in string.ascii_uppercase or not label[1:].isdigit():
        raise ValueError(f"not a cell label: {text!r}")
    col = string.ascii_uppercase.index(label[0])
    row = int(label[1:]) - 1
    if not (0 <= row < size and 0 <= col < size):
        raise OutOfBounds(row, col)
    return Coord(row, col)
