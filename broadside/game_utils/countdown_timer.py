"""Countdowns measured in server ticks."""

from dataclasses import dataclass

from mashumaro.mixins.json import DataClassJSONMixin

# One tick every 50ms
TICKS_PER_SECOND = 20


@dataclass
class CountdownTimer(DataClassJSONMixin):
    """
    A one-shot countdown stored in game state.

    Saved with the game, so a restored table carries on counting from
    where it stopped.
    """

    ticks_remaining: int = 0

    @property
    def running(self) -> bool:
        return self.ticks_remaining > 0

    def start_ticks(self, ticks: int) -> None:
        self.ticks_remaining = max(0, ticks)

    def clear(self) -> None:
        self.ticks_remaining = 0

    def tick(self) -> bool:
        """Count down once. True only on the tick that reaches zero."""
        if not self.running:
            return False
        self.ticks_remaining -= 1
        return self.ticks_remaining == 0

    def seconds_remaining(self) -> int:
        """Whole seconds left, rounded up."""
        return -(-self.ticks_remaining // TICKS_PER_SECOND) if self.running else 0
