"""Registry of game classes, keyed by their type identifier."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import Game


class GameRegistry:
    """Class-level registry filled by the @register_game decorator."""

    _games: dict[str, type["Game"]] = {}

    @classmethod
    def register(cls, game_class: type["Game"]) -> type["Game"]:
        cls._games[game_class.get_type()] = game_class
        return game_class

    @classmethod
    def get(cls, game_type: str) -> type["Game"] | None:
        return cls._games.get(game_type)

    @classmethod
    def get_all(cls) -> list[type["Game"]]:
        """All registered games, sorted by type."""
        return [cls._games[key] for key in sorted(cls._games)]


def register_game(game_class: type["Game"]) -> type["Game"]:
    """Class decorator that makes a game available to tables and the CLI."""
    return GameRegistry.register(game_class)


def get_game_class(game_type: str) -> type["Game"] | None:
    """Look up a game class by type identifier."""
    return GameRegistry.get(game_type)
