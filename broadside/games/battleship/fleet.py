"""Fleet extraction and validation.

A finished board is scanned row by row. Each unvisited ship cell starts a
segment: the longer of its rightward and downward runs. Shape, adjacency
and length problems fail at the first violation; the fleet composition
is compared only once every segment has been found.
"""

from dataclasses import dataclass, field
import logging

from mashumaro.mixins.json import DataClassJSONMixin

from .errors import (
    BentShip,
    ShipsTouching,
    ShipTooLong,
    ShipTooShort,
    WrongFleetComposition,
)
from .grid import Coord, Grid

logger = logging.getLogger(__name__)

# Ship lengths every player must place
REQUIRED_FLEET = (5, 4, 3, 2, 2)
FLEET_CELLS = sum(REQUIRED_FLEET)  # 16
MIN_SHIP_LENGTH = 2
MAX_SHIP_LENGTH = 5


@dataclass(frozen=True)
class ShipSegment(DataClassJSONMixin):
    """A straight run of ship cells, ordered from its top-left end."""

    cells: tuple[Coord, ...]

    @property
    def length(self) -> int:
        return len(self.cells)

    @property
    def horizontal(self) -> bool:
        return self.length > 1 and self.cells[0].row == self.cells[1].row

    def __contains__(self, coord: object) -> bool:
        return coord in self.cells


@dataclass
class Fleet(DataClassJSONMixin):
    """The segments of a validated board, in scan order."""

    segments: list[ShipSegment] = field(default_factory=list)

    @property
    def lengths(self) -> list[int]:
        return [s.length for s in self.segments]

    @property
    def cell_count(self) -> int:
        return sum(self.lengths)

    def segment_at(self, coord: Coord) -> ShipSegment | None:
        """The segment holding a cell, or None for water."""
        for segment in self.segments:
            if coord in segment:
                return segment
        return None


def _run(
    grid: Grid, start: Coord, d_row: int, d_col: int, visited: set[Coord]
) -> list[Coord]:
    """Unvisited ship cells from start stepping by (d_row, d_col)."""
    cells = []
    coord = start
    while (
        grid.in_bounds(coord) and grid.is_occupied(coord) and coord not in visited
    ):
        cells.append(coord)
        coord = Coord(coord.row + d_row, coord.col + d_col)
    return cells


def extract_segments(grid: Grid) -> list[ShipSegment]:
    """
    Split a board into straight ship segments.

    Raises:
        BentShip: A cell starts both a horizontal and a vertical run.
        ShipsTouching: A segment borders another ship, diagonals included.
        ShipTooShort: A segment is a single cell.
        ShipTooLong: A segment is longer than MAX_SHIP_LENGTH.
    """
    visited: set[Coord] = set()
    segments: list[ShipSegment] = []

    for row in range(grid.size):
        col = 0
        while col < grid.size:
            start = Coord(row, col)
            if not grid.is_occupied(start) or start in visited:
                col += 1
                continue

            across = _run(grid, start, 0, 1, visited)
            down = _run(grid, start, 1, 0, visited)
            if len(across) > 1 and len(down) > 1:
                raise BentShip()

            cells = across if len(across) >= len(down) else down
            visited.update(cells)

            for cell in cells:
                for neighbour in cell.neighbours():
                    if (
                        grid.in_bounds(neighbour)
                        and grid.is_occupied(neighbour)
                        and neighbour not in visited
                    ):
                        raise ShipsTouching()

            if len(cells) < MIN_SHIP_LENGTH:
                raise ShipTooShort(len(cells))
            if len(cells) > MAX_SHIP_LENGTH:
                raise ShipTooLong(len(cells))

            segments.append(ShipSegment(tuple(cells)))
            # Rest of a horizontal run is already part of this segment
            col += len(across) if cells is across else 1

    return segments


def composition_diff(
    found: list[int], required: tuple[int, ...] = REQUIRED_FLEET
) -> tuple[list[int], list[int]]:
    """
    Compare found ship lengths against the required ones.

    Each found length cancels one matching required length and vice
    versa, so duplicates are counted.

    Returns:
        (missing, excess): required lengths not found, found lengths not required.
    """
    missing = list(required)
    for length in found:
        if length in missing:
            missing.remove(length)

    excess = list(found)
    for length in required:
        if length in excess:
            excess.remove(length)

    return missing, excess


def validate(grid: Grid, required: tuple[int, ...] = REQUIRED_FLEET) -> Fleet:
    """
    Check a finished board and return its fleet.

    Does not modify the grid.

    Raises:
        ValidationError: The first rule the board breaks.
    """
    segments = extract_segments(grid)
    missing, excess = composition_diff([s.length for s in segments], required)
    if missing or excess:
        logger.debug("fleet rejected: missing=%s excess=%s", missing, excess)
        raise WrongFleetComposition(missing, excess)

    fleet = Fleet(segments=segments)
    logger.debug("fleet accepted: %s", fleet.lengths)
    return fleet
