"""Match state machine for one two-player battleship table.

    SETUP -> COUNTDOWN -> COMBAT -> RESOLVED

All changes go through MatchSession.apply(event), which returns the
notifications the host should present. Rejected events come back as an
EventRejected notification; nothing raises out of apply().
"""

from dataclasses import dataclass, field
from enum import Enum
import logging

from mashumaro.mixins.json import DataClassJSONMixin

from ...game_utils.countdown_timer import CountdownTimer, TICKS_PER_SECOND
from .coords import Orientation, PlayerSlot, mirror_for_opponent, to_local
from .errors import (
    AlreadyJoined,
    AlreadyTargeted,
    BattleshipError,
    CellEmpty,
    CellOccupied,
    NoShipsLeft,
    NotInSession,
    NotYourTurn,
    SessionFull,
    ValidationError,
    WrongPhase,
)
from .events import (
    Attack,
    AttackResolved,
    BoardChecked,
    BoardCleared,
    BoardId,
    CellChanged,
    Event,
    EventRejected,
    Forfeit,
    Join,
    Leave,
    MatchWon,
    Notification,
    PhaseChanged,
    PhaseReason,
    Place,
    PlayerJoined,
    PlayerLeft,
    ShipSunk,
    Tick,
    TurnChanged,
    TurnReminder,
)
from .fleet import FLEET_CELLS, Fleet, validate
from .grid import CellState, Coord, Grid, Mark, PublicGrid
from .scoring import Scoreboard

logger = logging.getLogger(__name__)

DEFAULT_COUNTDOWN_TICKS = 5 * TICKS_PER_SECOND
DEFAULT_REMINDER_TICKS = 2 * TICKS_PER_SECOND

SLOTS = (PlayerSlot.FIRST, PlayerSlot.SECOND)


class Phase(str, Enum):
    SETUP = "setup"
    COUNTDOWN = "countdown"
    COMBAT = "combat"
    RESOLVED = "resolved"


@dataclass
class MatchSession(DataClassJSONMixin):
    """
    All state of one match.

    Per-slot values are stored as two-element lists indexed by
    PlayerSlot.index so the whole session round-trips through JSON.
    """

    orientation: Orientation = Orientation.NORTH
    countdown_ticks: int = DEFAULT_COUNTDOWN_TICKS
    reminder_ticks: int = DEFAULT_REMINDER_TICKS  # 0 disables reminders

    player_ids: list[str | None] = field(default_factory=lambda: [None, None])
    grids: list[Grid] = field(default_factory=lambda: [Grid(), Grid()])
    public: PublicGrid = field(default_factory=PublicGrid)
    ready: list[bool] = field(default_factory=lambda: [False, False])
    fleets: list[Fleet | None] = field(default_factory=lambda: [None, None])

    phase: Phase = Phase.SETUP
    current_turn: PlayerSlot = PlayerSlot.FIRST
    countdown: CountdownTimer = field(default_factory=CountdownTimer)
    scoreboard: Scoreboard = field(default_factory=Scoreboard)
    ticks_since_turn: int = 0

    @classmethod
    def create(
        cls,
        orientation: Orientation = Orientation.NORTH,
        countdown_seconds: int = 5,
        reminder_seconds: int = 2,
    ) -> "MatchSession":
        return cls(
            orientation=orientation,
            countdown_ticks=countdown_seconds * TICKS_PER_SECOND,
            reminder_ticks=reminder_seconds * TICKS_PER_SECOND,
        )

    # Queries

    def slot_of(self, player_id: str) -> PlayerSlot | None:
        for slot in SLOTS:
            if self.player_ids[slot.index] == player_id:
                return slot
        return None

    def player_id_for(self, slot: PlayerSlot) -> str | None:
        return self.player_ids[slot.index]

    def grid_for(self, slot: PlayerSlot) -> Grid:
        return self.grids[slot.index]

    def fleet_for(self, slot: PlayerSlot) -> Fleet | None:
        return self.fleets[slot.index]

    def is_ready(self, slot: PlayerSlot) -> bool:
        return self.ready[slot.index]

    def cells_remaining(self, slot: PlayerSlot) -> int:
        """Ship cells a player may still place."""
        return FLEET_CELLS - self.grid_for(slot).count_occupied()

    def is_full(self) -> bool:
        return all(pid is not None for pid in self.player_ids)

    def winner(self) -> PlayerSlot | None:
        if self.phase is not Phase.RESOLVED:
            return None
        return self.scoreboard.winner()

    # Transitions

    def apply(self, event: Event) -> list[Notification]:
        """Apply one event and return what happened."""
        notes: list[Notification] = []
        try:
            if isinstance(event, Tick):
                self._tick(notes)
            elif isinstance(event, Place):
                self._place(event, notes)
            elif isinstance(event, Attack):
                self._attack(event, notes)
            elif isinstance(event, Join):
                self._join(event, notes)
            elif isinstance(event, Leave):
                self._leave(event, notes)
            else:
                raise TypeError(f"unknown event: {event!r}")
        except BattleshipError as e:
            logger.debug("rejected %r: %s", event, e)
            return [EventRejected(getattr(event, "player_id", None), e)]
        return notes

    def _require_slot(self, player_id: str) -> PlayerSlot:
        slot = self.slot_of(player_id)
        if slot is None:
            raise NotInSession()
        return slot

    def _set_phase(
        self,
        phase: Phase,
        reason: PhaseReason,
        notes: list[Notification],
        slot: PlayerSlot | None = None,
    ) -> None:
        previous = self.phase
        self.phase = phase
        logger.info("phase %s -> %s (%s)", previous.value, phase.value, reason.value)
        notes.append(PhaseChanged(previous, phase, reason, slot))

    def _join(self, event: Join, notes: list[Notification]) -> None:
        if self.phase is Phase.RESOLVED:
            raise WrongPhase(self.phase.value)
        if self.slot_of(event.player_id) is not None:
            raise AlreadyJoined()
        for slot in SLOTS:
            if self.player_ids[slot.index] is None:
                self.player_ids[slot.index] = event.player_id
                notes.append(PlayerJoined(event.player_id, slot))
                return
        raise SessionFull()

    def _leave(self, event: Leave, notes: list[Notification]) -> None:
        slot = self._require_slot(event.player_id)
        self.player_ids[slot.index] = None
        notes.append(PlayerLeft(event.player_id, slot))

        if self.phase is Phase.RESOLVED:
            return

        if self.phase is Phase.COMBAT:
            notes.append(Forfeit(slot, event.player_id))
        self._reset_boards(notes)
        if self.phase is not Phase.SETUP:
            self._set_phase(Phase.SETUP, PhaseReason.PLAYER_LEFT, notes, slot)

    def _reset_boards(self, notes: list[Notification]) -> None:
        """Wipe both boards and the public board for a fresh setup."""
        for slot in SLOTS:
            self.grids[slot.index].clear()
            self.ready[slot.index] = False
            self.fleets[slot.index] = None
            notes.append(BoardCleared(BoardId.for_slot(slot)))
        self.public.clear()
        notes.append(BoardCleared(BoardId.PUBLIC))
        self.scoreboard.reset()
        self.countdown.clear()
        self.current_turn = PlayerSlot.FIRST
        self.ticks_since_turn = 0

    def _place(self, event: Place, notes: list[Notification]) -> None:
        slot = self._require_slot(event.player_id)
        if self.phase not in (Phase.SETUP, Phase.COUNTDOWN):
            raise WrongPhase(self.phase.value)

        grid = self.grid_for(slot)
        occupied = grid.is_occupied(event.coord)  # raises OutOfBounds
        board = BoardId.for_slot(slot)

        if event.place:
            if occupied:
                raise CellOccupied()
            if grid.count_occupied() >= FLEET_CELLS:
                raise NoShipsLeft()
            grid.set_cell(event.coord, CellState.OCCUPIED)
            notes.append(CellChanged(board, event.coord, CellState.OCCUPIED))
            if grid.count_occupied() == FLEET_CELLS:
                self._check_board(slot, notes)
            return

        if not occupied:
            raise CellEmpty()
        grid.set_cell(event.coord, CellState.EMPTY)
        notes.append(CellChanged(board, event.coord, CellState.EMPTY))
        if self.ready[slot.index]:
            self.ready[slot.index] = False
            self.fleets[slot.index] = None
            if self.phase is Phase.COUNTDOWN:
                self.countdown.clear()
                self._set_phase(Phase.SETUP, PhaseReason.BOARD_CHANGED, notes, slot)

    def _check_board(self, slot: PlayerSlot, notes: list[Notification]) -> None:
        try:
            fleet = validate(self.grid_for(slot))
        except ValidationError as e:
            self.ready[slot.index] = False
            self.fleets[slot.index] = None
            notes.append(BoardChecked(slot, e))
            return

        self.ready[slot.index] = True
        self.fleets[slot.index] = fleet
        notes.append(BoardChecked(slot))

        if self.phase is Phase.SETUP and all(self.ready):
            self._set_phase(Phase.COUNTDOWN, PhaseReason.BOTH_READY, notes)
            self.countdown.start_ticks(self.countdown_ticks)
            if not self.countdown.running:
                self._countdown_finished(notes)

    def _tick(self, notes: list[Notification]) -> None:
        if self.phase is Phase.COUNTDOWN:
            if self.countdown.tick():
                self._countdown_finished(notes)
        elif self.phase is Phase.COMBAT and self.reminder_ticks > 0:
            self.ticks_since_turn += 1
            if self.ticks_since_turn >= self.reminder_ticks:
                self.ticks_since_turn = 0
                notes.append(
                    TurnReminder(self.current_turn, self.player_id_for(self.current_turn))
                )

    def _countdown_finished(self, notes: list[Notification]) -> None:
        for slot in SLOTS:
            if not self.ready[slot.index]:
                self._set_phase(Phase.SETUP, PhaseReason.BOARD_INVALID, notes, slot)
                return

        self._set_phase(Phase.COMBAT, PhaseReason.COUNTDOWN_FINISHED, notes)
        self.current_turn = PlayerSlot.FIRST
        self.ticks_since_turn = 0
        notes.append(TurnChanged(PlayerSlot.FIRST, self.player_id_for(PlayerSlot.FIRST)))

    def _attack(self, event: Attack, notes: list[Notification]) -> None:
        slot = self._require_slot(event.player_id)
        if self.phase is not Phase.COMBAT:
            raise WrongPhase(self.phase.value)
        if slot is not self.current_turn:
            raise NotYourTurn()
        coord = event.coord.check(self.public.size)
        if self.public.get(coord, slot) is not Mark.UNKNOWN:
            raise AlreadyTargeted()

        defender = slot.other
        attacker_view = to_local(coord, slot, self.orientation)
        target = mirror_for_opponent(attacker_view, slot, self.orientation)
        grid = self.grid_for(defender)
        hit = grid.is_occupied(target)
        mark = Mark.HIT if hit else Mark.MISS

        self.public.set(coord, slot, mark)
        grid.set_mark(target, mark)
        notes.append(CellChanged(BoardId.PUBLIC, coord, mark))
        notes.append(CellChanged(BoardId.for_slot(defender), target, mark))

        winner = self.scoreboard.record(slot, hit)
        hits = self.scoreboard.hits_for(slot)
        logger.debug(
            "%s fires at public %s -> %s local %s: %s",
            slot.value, coord, defender.value, target, mark.value,
        )
        notes.append(AttackResolved(slot, event.player_id, coord, target, hit, hits))

        if hit:
            self._check_sunk(defender, target, notes)

        if winner is not None:
            self._set_phase(Phase.RESOLVED, PhaseReason.FLEET_SUNK, notes, winner)
            notes.append(MatchWon(winner, self.player_id_for(winner)))
            return

        self.current_turn = defender
        self.ticks_since_turn = 0
        notes.append(TurnChanged(defender, self.player_id_for(defender)))

    def _check_sunk(
        self, owner: PlayerSlot, target: Coord, notes: list[Notification]
    ) -> None:
        fleet = self.fleet_for(owner)
        if fleet is None:
            return
        segment = fleet.segment_at(target)
        if segment is None:
            return
        grid = self.grid_for(owner)
        if all(grid.get_mark(cell) is Mark.HIT for cell in segment.cells):
            notes.append(ShipSunk(owner, segment.length))


def apply(
    session: MatchSession, event: Event
) -> tuple[MatchSession, list[Notification]]:
    """Functional form of MatchSession.apply. The session is updated in place."""
    notes = session.apply(event)
    return session, notes
