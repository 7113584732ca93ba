"""Hit counters and win detection."""

from dataclasses import dataclass

from mashumaro.mixins.json import DataClassJSONMixin

from .coords import PlayerSlot
from .fleet import FLEET_CELLS

# Sinking every ship cell wins
HITS_TO_WIN = FLEET_CELLS


@dataclass
class Scoreboard(DataClassJSONMixin):
    """Per-slot hits and shots for one match."""

    first_hits: int = 0
    second_hits: int = 0
    first_shots: int = 0
    second_shots: int = 0
    winner_slot: PlayerSlot | None = None

    def record(self, slot: PlayerSlot, hit: bool) -> PlayerSlot | None:
        """Count one shot by slot. Returns the winner once someone has won."""
        if slot is PlayerSlot.FIRST:
            self.first_shots += 1
            if hit:
                self.first_hits += 1
        else:
            self.second_shots += 1
            if hit:
                self.second_hits += 1

        if self.winner_slot is None and self.hits_for(slot) >= HITS_TO_WIN:
            self.winner_slot = slot
        return self.winner_slot

    def hits_for(self, slot: PlayerSlot) -> int:
        return self.first_hits if slot is PlayerSlot.FIRST else self.second_hits

    def shots_for(self, slot: PlayerSlot) -> int:
        return self.first_shots if slot is PlayerSlot.FIRST else self.second_shots

    def accuracy(self, slot: PlayerSlot) -> float:
        """Share of shots that hit, 0.0 before the first shot."""
        shots = self.shots_for(slot)
        if shots == 0:
            return 0.0
        return self.hits_for(slot) / shots

    def winner(self) -> PlayerSlot | None:
        return self.winner_slot

    def reset(self) -> None:
        self.first_hits = 0
        self.second_hits = 0
        self.first_shots = 0
        self.second_shots = 0
        self.winner_slot = None
