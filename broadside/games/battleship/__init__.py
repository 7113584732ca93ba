"""Battleship: two fleets, one upright public board between them.

The engine (grid, fleet, coords, session, scoring) has no dependency on
the host framework; game.py adapts it to a Broadside table.
"""

from .coords import (
    Orientation,
    PlayerSlot,
    format_coord,
    marker_offset,
    mirror_for_opponent,
    parse_coord,
    to_local,
    to_public,
)
from .errors import (
    AlreadyJoined,
    AlreadyTargeted,
    BattleshipError,
    BentShip,
    CellEmpty,
    CellOccupied,
    NoShipsLeft,
    NotInSession,
    NotYourTurn,
    OutOfBounds,
    PlacementError,
    SessionError,
    SessionFull,
    ShipsTouching,
    ShipTooLong,
    ShipTooShort,
    TurnError,
    ValidationError,
    WrongFleetComposition,
    WrongPhase,
)
from .fleet import FLEET_CELLS, REQUIRED_FLEET, Fleet, ShipSegment, validate
from .game import BattleshipGame, BattleshipOptions, BattleshipPlayer
from .grid import BOARD_SIZE, CellState, Coord, Grid, Mark, PublicGrid
from .scoring import HITS_TO_WIN, Scoreboard
from .session import MatchSession, Phase, apply

__all__ = [
    # Host adapter
    "BattleshipGame",
    "BattleshipOptions",
    "BattleshipPlayer",
    # Board model
    "BOARD_SIZE",
    "CellState",
    "Coord",
    "Grid",
    "Mark",
    "PublicGrid",
    # Fleet
    "FLEET_CELLS",
    "REQUIRED_FLEET",
    "Fleet",
    "ShipSegment",
    "validate",
    # Coordinates
    "Orientation",
    "PlayerSlot",
    "to_public",
    "to_local",
    "mirror_for_opponent",
    "marker_offset",
    "format_coord",
    "parse_coord",
    # Match
    "MatchSession",
    "Phase",
    "apply",
    "HITS_TO_WIN",
    "Scoreboard",
    # Errors
    "BattleshipError",
    "ValidationError",
    "BentShip",
    "ShipsTouching",
    "ShipTooShort",
    "ShipTooLong",
    "WrongFleetComposition",
    "TurnError",
    "NotYourTurn",
    "OutOfBounds",
    "WrongPhase",
    "AlreadyTargeted",
    "PlacementError",
    "NoShipsLeft",
    "CellOccupied",
    "CellEmpty",
    "SessionError",
    "SessionFull",
    "AlreadyJoined",
    "NotInSession",
]
