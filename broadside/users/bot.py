"""AI seats."""

from .base import User, MenuItem, generate_uuid


class Bot(User):
    """
    A seat played by the game's own AI.

    Bots never read what they are told: BotHelper asks the game for a
    bot's next action each tick, so all output sent here is discarded.
    """

    def __init__(self, name: str, uuid: str | None = None, locale: str = "en"):
        self._uuid = uuid or generate_uuid()
        self._username = name
        self._locale = locale

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def username(self) -> str:
        return self._username

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def is_bot(self) -> bool:
        return True

    def speak(self, text: str, buffer: str = "misc") -> None:
        pass

    def speak_l(self, message_id: str, buffer: str = "misc", /, **kwargs) -> None:
        # Skip rendering text nobody reads
        pass

    def play_sound(
        self, name: str, volume: int = 100, pan: int = 0, pitch: int = 100
    ) -> None:
        pass

    def play_music(self, name: str, looping: bool = True) -> None:
        pass

    def show_menu(self, menu_id: str, items: list[str | MenuItem], **kwargs) -> None:
        pass
