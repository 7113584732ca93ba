"""Shared game utilities."""

from .bot_helper import BotHelper
from .countdown_timer import CountdownTimer, TICKS_PER_SECOND
from .game_result import GameResult, PlayerResult
from .game_communication_mixin import GameCommunicationMixin
from .options import GameOptions, IntOption, MenuOption, option_field

__all__ = [
    "BotHelper",
    "CountdownTimer",
    "TICKS_PER_SECOND",
    "GameResult",
    "PlayerResult",
    "GameCommunicationMixin",
    "GameOptions",
    "IntOption",
    "MenuOption",
    "option_field",
]
