"""Game implementations."""

from .base import Game
from .registry import GameRegistry, register_game, get_game_class

# Import all games to trigger registration
from .battleship.game import BattleshipGame

__all__ = [
    "Game",
    "GameRegistry",
    "register_game",
    "get_game_class",
    "BattleshipGame",
]
