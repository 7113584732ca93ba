"""The seat-facing User interface: what a game may say and show to a player."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import uuid as uuid_module

from ..messages.localization import Localization


class EscapeBehavior(Enum):
    """What pressing escape does in a menu."""

    KEYBIND = "keybind"  # Forwarded to the game as a key press
    SELECT_LAST = "select_last_option"  # Activates the last item (e.g. "close")


@dataclass
class MenuItem:
    """
    One selectable line of a menu.

    id is what comes back through Game.execute_action when the line is
    chosen, e.g. "attack:C4" for a board cell.
    """

    text: str
    id: str | None = None


class User(ABC):
    """
    A person (or bot) sitting at a table.

    Games only ever talk to players through this interface: speech,
    sounds, music and menus. Concrete users decide where that output
    goes (a client connection, a test recorder, nowhere for bots).
    """

    @property
    @abstractmethod
    def uuid(self) -> str:
        """Stable id; becomes Player.id when the user takes a seat."""
        ...

    @property
    @abstractmethod
    def username(self) -> str:
        ...

    @property
    @abstractmethod
    def locale(self) -> str:
        """Fluent locale code, e.g. 'en'."""
        ...

    @property
    def is_bot(self) -> bool:
        return False

    @abstractmethod
    def speak(self, text: str, buffer: str = "misc") -> None:
        """Say already-rendered text. buffer groups history (misc, table, activity)."""
        ...

    def speak_l(self, message_id: str, buffer: str = "misc", /, **kwargs) -> None:
        """Render a Fluent message in this user's locale and speak it."""
        self.speak(Localization.get(self.locale, message_id, **kwargs), buffer)

    @abstractmethod
    def play_sound(
        self, name: str, volume: int = 100, pan: int = 0, pitch: int = 100
    ) -> None:
        """
        Play a one-shot sound.

        Args:
            name: Path under the sounds directory, e.g. "game_battleship/hit.ogg".
            volume: 0-100.
            pan: -100 (left) to 100 (right).
            pitch: 100 is normal.
        """
        ...

    @abstractmethod
    def play_music(self, name: str, looping: bool = True) -> None:
        ...

    @abstractmethod
    def show_menu(
        self,
        menu_id: str,
        items: list[str | MenuItem],
        *,
        multiletter: bool = True,
        escape_behavior: EscapeBehavior = EscapeBehavior.KEYBIND,
        position: int | None = None,
        grid_enabled: bool = False,
        grid_width: int = 1,
    ) -> None:
        """
        Show (or replace) the menu called menu_id.

        With grid_enabled the client lays items out row by row,
        grid_width to a row, and arrow keys move in two dimensions.
        The battleship board is a 7-wide grid menu.
        """
        ...


def generate_uuid() -> str:
    return str(uuid_module.uuid4())
