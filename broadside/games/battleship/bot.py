"""Bot AI for battleship: fleet layout and shot selection."""

import random

from .coords import PlayerSlot
from .fleet import REQUIRED_FLEET
from .grid import BOARD_SIZE, Coord, Mark, PublicGrid

MAX_TRIES_PER_SHIP = 200


def _ship_cells(row: int, col: int, length: int, horizontal: bool) -> list[Coord]:
    if horizontal:
        return [Coord(row, col + i) for i in range(length)]
    return [Coord(row + i, col) for i in range(length)]


def _fits(cells: list[Coord], taken: set[Coord], size: int) -> bool:
    """In bounds and not touching any taken cell, diagonals included."""
    for cell in cells:
        if not cell.in_bounds(size) or cell in taken:
            return False
        if any(n in taken for n in cell.neighbours()):
            return False
    return True


def plan_fleet(
    size: int = BOARD_SIZE, required: tuple[int, ...] = REQUIRED_FLEET
) -> list[Coord]:
    """
    Pick a random legal layout.

    Returns the ship cells in placement order, longest ship first. A
    layout that paints itself into a corner is thrown away and retried.
    """
    while True:
        taken: set[Coord] = set()
        order: list[Coord] = []
        for length in sorted(required, reverse=True):
            for _ in range(MAX_TRIES_PER_SHIP):
                horizontal = random.random() < 0.5
                row = random.randint(0, size - 1)
                col = random.randint(0, size - 1)
                cells = _ship_cells(row, col, length, horizontal)
                if _fits(cells, taken, size):
                    taken.update(cells)
                    order.extend(cells)
                    break
            else:
                break
        else:
            return order


def choose_target(public: PublicGrid, slot: PlayerSlot) -> Coord | None:
    """
    Choose the next public cell for slot to shoot at.

    Hunt mode shoots at random unknown cells. Once something is hit the
    bot fires next to it along the rows and columns; cells diagonal to a
    hit are skipped because ships never touch.
    """
    unknown = public.unknown_cells(slot)
    if not unknown:
        return None

    hits = [
        Coord(r, c)
        for r in range(public.size)
        for c in range(public.size)
        if public.get(Coord(r, c), slot) is Mark.HIT
    ]
    unknown_set = set(unknown)

    # Target mode
    candidates = []
    for hit in hits:
        for d_row, d_col in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            cell = Coord(hit.row + d_row, hit.col + d_col)
            if cell in unknown_set:
                candidates.append(cell)
    if candidates:
        return random.choice(candidates)

    # Hunt mode
    diagonal = {
        Coord(h.row + d_row, h.col + d_col)
        for h in hits
        for d_row in (-1, 1)
        for d_col in (-1, 1)
    }
    open_water = [c for c in unknown if c not in diagonal]
    return random.choice(open_water or unknown)
