"""Board model: coordinates, private grids and the shared public grid."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from mashumaro.mixins.json import DataClassJSONMixin

from .errors import OutOfBounds

if TYPE_CHECKING:
    from .coords import PlayerSlot

BOARD_SIZE = 7


class CellState(str, Enum):
    EMPTY = "empty"
    OCCUPIED = "occupied"


class Mark(str, Enum):
    """Attack result written over a cell during combat."""

    UNKNOWN = "unknown"
    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True)
class Coord(DataClassJSONMixin):
    """A (row, col) cell address, both in [0, BOARD_SIZE)."""

    row: int
    col: int

    def in_bounds(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.row < size and 0 <= self.col < size

    def check(self, size: int = BOARD_SIZE) -> "Coord":
        """Return self, raising OutOfBounds if outside a size x size grid."""
        if not self.in_bounds(size):
            raise OutOfBounds(self.row, self.col)
        return self

    def neighbours(self) -> list["Coord"]:
        """The eight surrounding cells (may be out of bounds)."""
        return [
            Coord(self.row + dr, self.col + dc)
            for dr in (-1, 0, 1)
            for dc in (-1, 0, 1)
            if dr or dc
        ]


def _empty_cells(size: int = BOARD_SIZE) -> list[list[CellState]]:
    return [[CellState.EMPTY] * size for _ in range(size)]


def _unknown_marks(size: int = BOARD_SIZE) -> list[list[Mark]]:
    return [[Mark.UNKNOWN] * size for _ in range(size)]


@dataclass
class Grid(DataClassJSONMixin):
    """
    One player's private board.

    cells holds where ships were placed; marks holds the opponent's shots
    against this board. Neither knows anything about ship shapes.
    """

    size: int = BOARD_SIZE
    cells: list[list[CellState]] = field(default_factory=_empty_cells)
    marks: list[list[Mark]] = field(default_factory=_unknown_marks)

    def in_bounds(self, coord: Coord) -> bool:
        return coord.in_bounds(self.size)

    def get_cell(self, coord: Coord) -> CellState:
        coord.check(self.size)
        return self.cells[coord.row][coord.col]

    def set_cell(self, coord: Coord, state: CellState) -> None:
        coord.check(self.size)
        self.cells[coord.row][coord.col] = state

    def is_occupied(self, coord: Coord) -> bool:
        return self.get_cell(coord) == CellState.OCCUPIED

    def count_occupied(self) -> int:
        return sum(row.count(CellState.OCCUPIED) for row in self.cells)

    def occupied_cells(self) -> list[Coord]:
        """Occupied cells in row-major order."""
        return [
            Coord(r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.cells[r][c] == CellState.OCCUPIED
        ]

    def get_mark(self, coord: Coord) -> Mark:
        coord.check(self.size)
        return self.marks[coord.row][coord.col]

    def set_mark(self, coord: Coord, mark: Mark) -> None:
        coord.check(self.size)
        self.marks[coord.row][coord.col] = mark

    def clear(self) -> None:
        """Empty every cell and forget every shot."""
        self.cells = _empty_cells(self.size)
        self.marks = _unknown_marks(self.size)

    def rows(self) -> list[str]:
        """Text rows for display: '#' ship, 'X' hit, 'o' miss, '.' water."""
        lines = []
        for r in range(self.size):
            chars = []
            for c in range(self.size):
                mark = self.marks[r][c]
                if mark == Mark.HIT:
                    chars.append("X")
                elif mark == Mark.MISS:
                    chars.append("o")
                elif self.cells[r][c] == CellState.OCCUPIED:
                    chars.append("#")
                else:
                    chars.append(".")
            lines.append("".join(chars))
        return lines


@dataclass
class PublicGrid(DataClassJSONMixin):
    """
    The shared upright board both players shoot at.

    Each player hangs markers on their own face of the board, so a public
    cell carries one mark per slot: first holds First's shots, second
    holds Second's.
    """

    size: int = BOARD_SIZE
    first: list[list[Mark]] = field(default_factory=_unknown_marks)
    second: list[list[Mark]] = field(default_factory=_unknown_marks)

    def _face(self, slot: "PlayerSlot") -> list[list[Mark]]:
        return self.first if slot.value == "first" else self.second

    def get(self, coord: Coord, slot: "PlayerSlot") -> Mark:
        coord.check(self.size)
        return self._face(slot)[coord.row][coord.col]

    def set(self, coord: Coord, slot: "PlayerSlot", mark: Mark) -> None:
        coord.check(self.size)
        self._face(slot)[coord.row][coord.col] = mark

    def count(self, mark: Mark, slot: "PlayerSlot | None" = None) -> int:
        """Count a mark on one face, or on both when slot is None."""
        faces = [self.first, self.second] if slot is None else [self._face(slot)]
        return sum(row.count(mark) for face in faces for row in face)

    def unknown_cells(self, slot: "PlayerSlot") -> list[Coord]:
        face = self._face(slot)
        return [
            Coord(r, c)
            for r in range(self.size)
            for c in range(self.size)
            if face[r][c] == Mark.UNKNOWN
        ]

    def clear(self) -> None:
        self.first = _unknown_marks(self.size)
        self.second = _unknown_marks(self.size)

    def rows(self, slot: "PlayerSlot") -> list[str]:
        symbols = {Mark.UNKNOWN: ".", Mark.HIT: "X", Mark.MISS: "o"}
        return ["".join(symbols[m] for m in row) for row in self._face(slot)]
