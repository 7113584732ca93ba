"""Inbound events and outbound notifications of a match session.

The host feeds events into MatchSession.apply() in arrival order and
presents the notifications it gets back. Both sides are plain frozen
dataclasses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from .coords import PlayerSlot
from .errors import BattleshipError, ValidationError
from .grid import CellState, Coord, Mark

if TYPE_CHECKING:
    from .session import Phase


# Inbound


@dataclass(frozen=True)
class Join:
    player_id: str


@dataclass(frozen=True)
class Leave:
    player_id: str


@dataclass(frozen=True)
class Place:
    """Place a ship cell on the player's own board, or remove one."""

    player_id: str
    coord: Coord
    place: bool = True


@dataclass(frozen=True)
class Attack:
    """Shoot at a cell of the public board (public coordinates)."""

    player_id: str
    coord: Coord


@dataclass(frozen=True)
class Tick:
    pass


Event = Union[Join, Leave, Place, Attack, Tick]


# Outbound


class BoardId(str, Enum):
    PUBLIC = "public"
    FIRST = "first"
    SECOND = "second"

    @classmethod
    def for_slot(cls, slot: PlayerSlot) -> "BoardId":
        return cls.FIRST if slot is PlayerSlot.FIRST else cls.SECOND


class PhaseReason(str, Enum):
    BOTH_READY = "both-ready"
    COUNTDOWN_FINISHED = "countdown-finished"
    BOARD_INVALID = "board-invalid"
    BOARD_CHANGED = "board-changed"
    PLAYER_LEFT = "player-left"
    FLEET_SUNK = "fleet-sunk"


@dataclass(frozen=True)
class PlayerJoined:
    player_id: str
    slot: PlayerSlot


@dataclass(frozen=True)
class PlayerLeft:
    player_id: str
    slot: PlayerSlot


@dataclass(frozen=True)
class CellChanged:
    board: BoardId
    coord: Coord
    state: CellState | Mark


@dataclass(frozen=True)
class BoardCleared:
    board: BoardId


@dataclass(frozen=True)
class BoardChecked:
    """A full board was validated; error is None when it passed."""

    slot: PlayerSlot
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PhaseChanged:
    """
    The session moved between phases.

    slot names the board responsible when the reason is a board problem.
    """

    previous: "Phase"
    phase: "Phase"
    reason: PhaseReason
    slot: PlayerSlot | None = None


@dataclass(frozen=True)
class TurnChanged:
    slot: PlayerSlot
    player_id: str | None


@dataclass(frozen=True)
class TurnReminder:
    slot: PlayerSlot
    player_id: str | None


@dataclass(frozen=True)
class AttackResolved:
    """
    An attack landed.

    coord is the public cell that was shot; target is the same cell on
    the defender's private board.
    """

    attacker: PlayerSlot
    player_id: str
    coord: Coord
    target: Coord
    hit: bool
    hits: int


@dataclass(frozen=True)
class ShipSunk:
    owner: PlayerSlot
    length: int


@dataclass(frozen=True)
class MatchWon:
    winner: PlayerSlot
    player_id: str | None


@dataclass(frozen=True)
class Forfeit:
    """A player left mid-combat; the other seat wins by default."""

    slot: PlayerSlot
    player_id: str


@dataclass(frozen=True)
class EventRejected:
    player_id: str | None
    error: BattleshipError


Notification = Union[
    PlayerJoined,
    PlayerLeft,
    CellChanged,
    BoardCleared,
    BoardChecked,
    PhaseChanged,
    TurnChanged,
    TurnReminder,
    AttackResolved,
    ShipSunk,
    MatchWon,
    Forfeit,
    EventRejected,
]
