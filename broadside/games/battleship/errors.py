"""Exceptions raised by the battleship engine.

Every error carries a Fluent message id and the keyword arguments for it,
so the host can read the rejection back to the player in their locale.
"""

from typing import Any


class BattleshipError(Exception):
    """Base class for everything the engine rejects."""

    message_id = "battleship-error"

    def message_kwargs(self) -> dict[str, Any]:
        return {}

    def __str__(self) -> str:
        kwargs = self.message_kwargs()
        if kwargs:
            details = ", ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{type(self).__name__}({details})"
        return type(self).__name__


# Fleet layout


class ValidationError(BattleshipError):
    """A finished layout breaks the fleet rules."""

    message_id = "battleship-invalid-fleet"


class BentShip(ValidationError):
    message_id = "battleship-error-bent-ship"


class ShipsTouching(ValidationError):
    message_id = "battleship-error-ships-touching"


class ShipTooShort(ValidationError):
    message_id = "battleship-error-ship-too-short"

    def __init__(self, length: int):
        super().__init__(length)
        self.length = length

    def message_kwargs(self) -> dict[str, Any]:
        return {"length": self.length}


class ShipTooLong(ValidationError):
    message_id = "battleship-error-ship-too-long"

    def __init__(self, length: int):
        super().__init__(length)
        self.length = length

    def message_kwargs(self) -> dict[str, Any]:
        return {"length": self.length}


class WrongFleetComposition(ValidationError):
    """Ship lengths differ from the required fleet.

    missing holds the required lengths that were not found, excess the
    found lengths that were not required.
    """

    message_id = "battleship-error-wrong-fleet"

    def __init__(self, missing: list[int], excess: list[int]):
        super().__init__(missing, excess)
        self.missing = list(missing)
        self.excess = list(excess)

    def message_kwargs(self) -> dict[str, Any]:
        return {"missing": self.missing, "excess": self.excess}


# Turns


class TurnError(BattleshipError):
    """An event arrived at the wrong time or pointed at the wrong place."""


class NotYourTurn(TurnError):
    message_id = "battleship-error-not-your-turn"


class WrongPhase(TurnError):
    message_id = "battleship-error-wrong-phase"

    def __init__(self, phase: str = ""):
        super().__init__(phase)
        self.phase = phase

    def message_kwargs(self) -> dict[str, Any]:
        return {"phase": self.phase}


class OutOfBounds(TurnError):
    message_id = "battleship-error-out-of-bounds"

    def __init__(self, row: int, col: int):
        super().__init__(row, col)
        self.row = row
        self.col = col

    def message_kwargs(self) -> dict[str, Any]:
        return {"row": self.row, "col": self.col}


class AlreadyTargeted(TurnError):
    message_id = "battleship-error-already-targeted"


# Placement


class PlacementError(BattleshipError):
    """A placement or removal cannot be applied to the board."""


class NoShipsLeft(PlacementError):
    message_id = "battleship-error-no-ships-left"


class CellOccupied(PlacementError):
    message_id = "battleship-error-cell-occupied"


class CellEmpty(PlacementError):
    message_id = "battleship-error-cell-empty"


# Seats


class SessionError(BattleshipError):
    """A join or leave does not fit the current seating."""


class SessionFull(SessionError):
    message_id = "battleship-error-session-full"


class AlreadyJoined(SessionError):
    message_id = "battleship-error-already-joined"


class NotInSession(SessionError):
    message_id = "battleship-error-not-in-session"
