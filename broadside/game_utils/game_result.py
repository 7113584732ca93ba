"""Structured game results handed to the host when a game finishes."""

from dataclasses import dataclass, field
from typing import Any

from mashumaro.mixins.json import DataClassJSONMixin


@dataclass
class PlayerResult(DataClassJSONMixin):
    """One player's line in a finished game."""

    player_id: str
    player_name: str
    is_bot: bool = False


@dataclass
class GameResult(DataClassJSONMixin):
    """
    Outcome of a finished game.

    custom_data carries game-specific values; the host reads
    "winner_name" to grant rewards.
    """

    game_type: str
    timestamp: str
    duration_ticks: int
    player_results: list[PlayerResult] = field(default_factory=list)
    custom_data: dict[str, Any] = field(default_factory=dict)

    @property
    def winner_name(self) -> str | None:
        return self.custom_data.get("winner_name")
