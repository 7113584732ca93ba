"""Tests for the battleship match state machine."""

import pytest

from broadside.games.battleship.coords import Orientation, PlayerSlot, to_public
from broadside.games.battleship.errors import (
    AlreadyJoined,
    AlreadyTargeted,
    BentShip,
    CellEmpty,
    CellOccupied,
    NoShipsLeft,
    NotInSession,
    NotYourTurn,
    OutOfBounds,
    SessionFull,
    WrongFleetComposition,
    WrongPhase,
)
from broadside.games.battleship.events import (
    Attack,
    AttackResolved,
    BoardChecked,
    BoardCleared,
    BoardId,
    CellChanged,
    EventRejected,
    Forfeit,
    Join,
    Leave,
    MatchWon,
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
from broadside.games.battleship.grid import BOARD_SIZE, CellState, Coord, Mark
from broadside.games.battleship.session import MatchSession, Phase, apply


def cells_of(*runs: tuple[int, int, int, bool]) -> list[Coord]:
    """Expand (row, col, length, horizontal) runs into cells."""
    cells = []
    for row, col, length, horizontal in runs:
        for i in range(length):
            cells.append(Coord(row, col + i) if horizontal else Coord(row + i, col))
    return cells


VALID_FLEET = cells_of(
    (0, 0, 5, True),
    (2, 0, 4, True),
    (4, 0, 3, True),
    (4, 5, 2, True),
    (6, 0, 2, True),
)

EMPTY_CELLS = [
    Coord(r, c)
    for r in range(BOARD_SIZE)
    for c in range(BOARD_SIZE)
    if Coord(r, c) not in VALID_FLEET
]


def of_type(notes, kind):
    return [n for n in notes if isinstance(n, kind)]


def rejection(notes):
    """The error of the single EventRejected in notes."""
    assert len(notes) == 1
    assert isinstance(notes[0], EventRejected)
    return notes[0].error


def place_all(session, player_id, cells):
    notes = []
    for cell in cells:
        notes.extend(session.apply(Place(player_id, cell)))
    return notes


def seated_session(**kwargs) -> MatchSession:
    session = MatchSession.create(**kwargs)
    session.apply(Join("alice"))
    session.apply(Join("bob"))
    return session


def ready_session(**kwargs) -> MatchSession:
    """Both players placed a valid fleet; countdown running."""
    session = seated_session(**kwargs)
    place_all(session, "alice", VALID_FLEET)
    place_all(session, "bob", VALID_FLEET)
    return session


def run_ticks(session, count):
    notes = []
    for _ in range(count):
        notes.extend(session.apply(Tick()))
    return notes


def combat_session(**kwargs) -> MatchSession:
    session = ready_session(**kwargs)
    run_ticks(session, session.countdown_ticks)
    assert session.phase is Phase.COMBAT
    return session


def public_cell_for(session, defender: PlayerSlot, cell: Coord) -> Coord:
    """The public cell the attacker must shoot to reach cell on defender's board."""
    return to_public(cell, defender, session.orientation)


class TestSeating:
    """Tests for joining and leaving."""

    def test_join_assigns_slots_in_order(self):
        """Test that players get First then Second."""
        session = MatchSession()
        notes = session.apply(Join("alice"))
        assert notes == [PlayerJoined("alice", PlayerSlot.FIRST)]
        notes = session.apply(Join("bob"))
        assert notes == [PlayerJoined("bob", PlayerSlot.SECOND)]
        assert session.slot_of("bob") is PlayerSlot.SECOND
        assert session.is_full()

    def test_third_join_rejected(self):
        """Test that a full table rejects another player."""
        session = seated_session()
        assert isinstance(rejection(session.apply(Join("carol"))), SessionFull)

    def test_repeat_join_rejected(self):
        """Test that a seated player cannot join twice."""
        session = seated_session()
        assert isinstance(rejection(session.apply(Join("alice"))), AlreadyJoined)

    def test_unknown_player_rejected(self):
        """Test that events from strangers are rejected."""
        session = seated_session()
        error = rejection(session.apply(Place("mallory", Coord(0, 0))))
        assert isinstance(error, NotInSession)
        assert isinstance(rejection(session.apply(Leave("mallory"))), NotInSession)

    def test_leave_during_setup_clears_boards(self):
        """Test that a leave wipes both boards and keeps the phase."""
        session = seated_session()
        place_all(session, "alice", VALID_FLEET)
        assert session.is_ready(PlayerSlot.FIRST)

        notes = session.apply(Leave("bob"))
        assert notes[0] == PlayerLeft("bob", PlayerSlot.SECOND)
        assert {n.board for n in of_type(notes, BoardCleared)} == set(BoardId)
        assert not of_type(notes, PhaseChanged)
        assert session.phase is Phase.SETUP
        assert not session.is_ready(PlayerSlot.FIRST)
        assert session.grid_for(PlayerSlot.FIRST).count_occupied() == 0
        assert session.player_id_for(PlayerSlot.SECOND) is None

    def test_rejoin_takes_free_slot(self):
        """Test that a newcomer takes the vacated seat."""
        session = seated_session()
        session.apply(Leave("alice"))
        notes = session.apply(Join("carol"))
        assert notes == [PlayerJoined("carol", PlayerSlot.FIRST)]

    def test_leave_during_countdown_returns_to_setup(self):
        """Test that leaving during the countdown cancels it."""
        session = ready_session()
        assert session.phase is Phase.COUNTDOWN

        notes = session.apply(Leave("alice"))
        changes = of_type(notes, PhaseChanged)
        assert changes == [
            PhaseChanged(Phase.COUNTDOWN, Phase.SETUP, PhaseReason.PLAYER_LEFT, PlayerSlot.FIRST)
        ]
        assert not session.countdown.running
        assert not of_type(notes, Forfeit)

    def test_leave_during_combat_is_forfeit(self):
        """Test that leaving mid-combat reports a forfeit and resets."""
        session = combat_session()
        session.apply(Attack("alice", Coord(0, 0)))

        notes = session.apply(Leave("bob"))
        assert of_type(notes, Forfeit) == [Forfeit(PlayerSlot.SECOND, "bob")]
        assert session.phase is Phase.SETUP
        assert session.scoreboard.shots_for(PlayerSlot.FIRST) == 0
        assert session.public.count(Mark.UNKNOWN) == 2 * BOARD_SIZE * BOARD_SIZE
        assert session.ready == [False, False]

    def test_leave_after_resolution_only_vacates(self):
        """Test that a finished match keeps its result when a player leaves."""
        session = combat_session(reminder_seconds=0)
        win_for_first(session)

        notes = session.apply(Leave("bob"))
        assert notes == [PlayerLeft("bob", PlayerSlot.SECOND)]
        assert session.phase is Phase.RESOLVED
        assert session.winner() is PlayerSlot.FIRST


class TestSetup:
    """Tests for placing fleets."""

    def test_place_and_remove(self):
        """Test that placing and removing cells reports the change."""
        session = seated_session()
        notes = session.apply(Place("alice", Coord(1, 1)))
        assert notes == [CellChanged(BoardId.FIRST, Coord(1, 1), CellState.OCCUPIED)]
        assert session.cells_remaining(PlayerSlot.FIRST) == 15

        notes = session.apply(Place("alice", Coord(1, 1), place=False))
        assert notes == [CellChanged(BoardId.FIRST, Coord(1, 1), CellState.EMPTY)]
        assert session.cells_remaining(PlayerSlot.FIRST) == 16

    def test_boards_are_private(self):
        """Test that a placement only touches the placing player's board."""
        session = seated_session()
        session.apply(Place("bob", Coord(3, 3)))
        assert session.grid_for(PlayerSlot.SECOND).is_occupied(Coord(3, 3))
        assert session.grid_for(PlayerSlot.FIRST).count_occupied() == 0

    def test_place_errors(self):
        """Test rejected placements and removals."""
        session = seated_session()
        session.apply(Place("alice", Coord(0, 0)))
        assert isinstance(rejection(session.apply(Place("alice", Coord(0, 0)))), CellOccupied)
        assert isinstance(
            rejection(session.apply(Place("alice", Coord(5, 5), place=False))), CellEmpty
        )
        assert isinstance(rejection(session.apply(Place("alice", Coord(7, 0)))), OutOfBounds)

    def test_no_ships_left(self):
        """Test that a seventeenth cell is rejected."""
        session = seated_session()
        place_all(session, "alice", VALID_FLEET)
        error = rejection(session.apply(Place("alice", EMPTY_CELLS[0])))
        assert isinstance(error, NoShipsLeft)

    def test_valid_board_becomes_ready(self):
        """Test that the sixteenth cell triggers a successful check."""
        session = seated_session()
        notes = place_all(session, "alice", VALID_FLEET)
        assert of_type(notes, BoardChecked) == [BoardChecked(PlayerSlot.FIRST)]
        assert session.is_ready(PlayerSlot.FIRST)
        assert session.fleet_for(PlayerSlot.FIRST).lengths == [5, 4, 3, 2, 2]
        assert session.phase is Phase.SETUP

    def test_invalid_board_reports_error(self):
        """Test that a wrong fleet is reported to its owner and not marked ready."""
        session = seated_session()
        # 5, 5, 4, 2: sixteen cells but the wrong ships
        cells = cells_of((0, 0, 5, True), (2, 0, 5, True), (4, 0, 4, True), (6, 0, 2, True))
        notes = place_all(session, "alice", cells)
        checks = of_type(notes, BoardChecked)
        assert len(checks) == 1
        assert not checks[0].ok
        assert isinstance(checks[0].error, WrongFleetComposition)
        assert checks[0].error.missing == [3, 2]
        assert checks[0].error.excess == [5]
        assert not session.is_ready(PlayerSlot.FIRST)
        assert session.fleet_for(PlayerSlot.FIRST) is None

    def test_bent_board_rejected(self):
        """Test a full board whose first ship is bent."""
        session = seated_session()
        # Corner at A1: A1, B1 across and A2 down
        cells = [Coord(0, 0), Coord(0, 1), Coord(1, 0)]
        cells += [c for c in EMPTY_CELLS if c.row >= 3][: 16 - len(cells)]
        notes = place_all(session, "alice", cells)
        checks = of_type(notes, BoardChecked)
        assert len(checks) == 1
        assert isinstance(checks[0].error, BentShip)
        assert not session.is_ready(PlayerSlot.FIRST)

    def test_both_ready_starts_countdown(self):
        """Test that the second valid board starts the countdown."""
        session = seated_session()
        place_all(session, "alice", VALID_FLEET)
        notes = place_all(session, "bob", VALID_FLEET)
        assert of_type(notes, PhaseChanged) == [
            PhaseChanged(Phase.SETUP, Phase.COUNTDOWN, PhaseReason.BOTH_READY)
        ]
        assert session.countdown.ticks_remaining == 100

    def test_remove_cancels_countdown(self):
        """Test that breaking a ready board during the countdown returns to setup."""
        session = ready_session()
        notes = session.apply(Place("bob", VALID_FLEET[0], place=False))
        assert of_type(notes, PhaseChanged) == [
            PhaseChanged(Phase.COUNTDOWN, Phase.SETUP, PhaseReason.BOARD_CHANGED, PlayerSlot.SECOND)
        ]
        assert session.phase is Phase.SETUP
        assert not session.is_ready(PlayerSlot.SECOND)
        assert session.is_ready(PlayerSlot.FIRST)
        assert not session.countdown.running

        # Putting it back restarts the countdown
        notes = session.apply(Place("bob", VALID_FLEET[0]))
        assert session.phase is Phase.COUNTDOWN
        assert of_type(notes, PhaseChanged)[0].phase is Phase.COUNTDOWN

    def test_attack_during_setup_rejected(self):
        """Test that attacks are only accepted in combat."""
        session = seated_session()
        error = rejection(session.apply(Attack("alice", Coord(0, 0))))
        assert isinstance(error, WrongPhase)
        assert error.phase == "setup"


class TestCountdown:
    """Tests for the tick-driven countdown."""

    def test_countdown_enters_combat(self):
        """Test that combat starts with First to move when the countdown ends."""
        session = ready_session()
        notes = run_ticks(session, session.countdown_ticks - 1)
        assert session.phase is Phase.COUNTDOWN
        assert not of_type(notes, PhaseChanged)

        notes = session.apply(Tick())
        assert notes == [
            PhaseChanged(Phase.COUNTDOWN, Phase.COMBAT, PhaseReason.COUNTDOWN_FINISHED),
            TurnChanged(PlayerSlot.FIRST, "alice"),
        ]
        assert session.current_turn is PlayerSlot.FIRST

    def test_custom_countdown_length(self):
        """Test a one-second countdown."""
        session = ready_session(countdown_seconds=1)
        run_ticks(session, 20)
        assert session.phase is Phase.COMBAT

    def test_expiry_rechecks_ready_flags(self):
        """Test that a board no longer ready at expiry sends everyone back to setup."""
        session = ready_session()
        session.ready[PlayerSlot.SECOND.index] = False
        notes = run_ticks(session, session.countdown_ticks)
        assert of_type(notes, PhaseChanged) == [
            PhaseChanged(Phase.COUNTDOWN, Phase.SETUP, PhaseReason.BOARD_INVALID, PlayerSlot.SECOND)
        ]
        assert session.phase is Phase.SETUP

    def test_placement_allowed_during_countdown(self):
        """Test that players may still edit boards while the countdown runs."""
        session = ready_session()
        notes = session.apply(Place("alice", VALID_FLEET[-1], place=False))
        assert not of_type(notes, EventRejected)


def win_for_first(session):
    """First sinks Second's fleet while Second keeps missing."""
    notes = []
    misses = iter(EMPTY_CELLS)
    for i, cell in enumerate(VALID_FLEET):
        notes.extend(session.apply(Attack("alice", public_cell_for(session, PlayerSlot.SECOND, cell))))
        if i < len(VALID_FLEET) - 1:
            miss = next(misses)
            notes.extend(
                session.apply(Attack("bob", public_cell_for(session, PlayerSlot.FIRST, miss)))
            )
    return notes


class TestCombat:
    """Tests for attacks, turns and the win condition."""

    def test_first_hit_passes_turn(self):
        """Test that hitting Second's 5-ship counts one hit and passes the turn."""
        session = combat_session()
        target = VALID_FLEET[0]
        public = public_cell_for(session, PlayerSlot.SECOND, target)

        notes = session.apply(Attack("alice", public))
        resolved = of_type(notes, AttackResolved)
        assert resolved == [AttackResolved(PlayerSlot.FIRST, "alice", public, target, True, 1)]
        assert session.scoreboard.hits_for(PlayerSlot.FIRST) == 1
        assert session.current_turn is PlayerSlot.SECOND
        assert of_type(notes, TurnChanged) == [TurnChanged(PlayerSlot.SECOND, "bob")]

        assert session.public.get(public, PlayerSlot.FIRST) is Mark.HIT
        assert session.grid_for(PlayerSlot.SECOND).get_mark(target) is Mark.HIT
        assert CellChanged(BoardId.PUBLIC, public, Mark.HIT) in notes

    def test_miss(self):
        """Test that a miss is marked and still passes the turn."""
        session = combat_session()
        water = EMPTY_CELLS[0]
        public = public_cell_for(session, PlayerSlot.SECOND, water)

        notes = session.apply(Attack("alice", public))
        assert of_type(notes, AttackResolved)[0].hit is False
        assert session.scoreboard.hits_for(PlayerSlot.FIRST) == 0
        assert session.scoreboard.shots_for(PlayerSlot.FIRST) == 1
        assert session.grid_for(PlayerSlot.SECOND).get_mark(water) is Mark.MISS
        assert session.current_turn is PlayerSlot.SECOND

    def test_not_your_turn(self):
        """Test that an attack out of turn changes nothing."""
        session = combat_session()
        error = rejection(session.apply(Attack("bob", Coord(0, 0))))
        assert isinstance(error, NotYourTurn)
        assert session.current_turn is PlayerSlot.FIRST
        assert session.phase is Phase.COMBAT
        assert session.scoreboard.shots_for(PlayerSlot.SECOND) == 0

    def test_out_of_bounds_attack(self):
        """Test that shooting off the board is rejected without a turn change."""
        session = combat_session()
        error = rejection(session.apply(Attack("alice", Coord(0, 7))))
        assert isinstance(error, OutOfBounds)
        assert session.current_turn is PlayerSlot.FIRST

    def test_already_targeted(self):
        """Test that the same public cell cannot be shot twice by one player."""
        session = combat_session()
        session.apply(Attack("alice", Coord(3, 3)))
        session.apply(Attack("bob", Coord(3, 3)))  # Bob's own face is separate
        error = rejection(session.apply(Attack("alice", Coord(3, 3))))
        assert isinstance(error, AlreadyTargeted)
        assert session.current_turn is PlayerSlot.FIRST

    def test_place_during_combat_rejected(self):
        """Test that boards are locked once combat starts."""
        session = combat_session()
        error = rejection(session.apply(Place("alice", EMPTY_CELLS[0])))
        assert isinstance(error, WrongPhase)

    def test_ship_sunk(self):
        """Test that hitting every cell of a ship reports it sunk."""
        session = combat_session()
        small_ship = [Coord(6, 0), Coord(6, 1)]
        misses = iter(EMPTY_CELLS)

        session.apply(Attack("alice", public_cell_for(session, PlayerSlot.SECOND, small_ship[0])))
        session.apply(Attack("bob", public_cell_for(session, PlayerSlot.FIRST, next(misses))))
        notes = session.apply(
            Attack("alice", public_cell_for(session, PlayerSlot.SECOND, small_ship[1]))
        )
        assert of_type(notes, ShipSunk) == [ShipSunk(PlayerSlot.SECOND, 2)]

    def test_sixteen_hits_win(self):
        """Test that sinking the whole fleet resolves the match."""
        session = combat_session(reminder_seconds=0)
        notes = win_for_first(session)

        assert session.phase is Phase.RESOLVED
        assert session.winner() is PlayerSlot.FIRST
        assert session.scoreboard.hits_for(PlayerSlot.FIRST) == 16
        assert of_type(notes, MatchWon) == [MatchWon(PlayerSlot.FIRST, "alice")]
        assert len(of_type(notes, ShipSunk)) == 5
        assert of_type(notes, PhaseChanged)[-1] == PhaseChanged(
            Phase.COMBAT, Phase.RESOLVED, PhaseReason.FLEET_SUNK, PlayerSlot.FIRST
        )

    def test_resolved_rejects_input(self):
        """Test that a finished match rejects attacks, placements and joins."""
        session = combat_session(reminder_seconds=0)
        win_for_first(session)

        for event in (
            Attack("bob", Coord(0, 0)),
            Place("alice", Coord(0, 0)),
            Join("carol"),
        ):
            assert isinstance(rejection(session.apply(event)), WrongPhase)
        assert session.apply(Tick()) == []

    def test_turn_reminder(self):
        """Test that the player to move is reminded every two seconds."""
        session = combat_session()
        notes = run_ticks(session, 39)
        assert not of_type(notes, TurnReminder)
        notes = session.apply(Tick())
        assert notes == [TurnReminder(PlayerSlot.FIRST, "alice")]

    def test_reminders_disabled(self):
        """Test that a zero reminder interval stays silent."""
        session = combat_session(reminder_seconds=0)
        assert not of_type(run_ticks(session, 200), TurnReminder)

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_every_orientation_reaches_defender(self, orientation):
        """Test that a public shot lands on the defender's matching cell for any facing."""
        session = combat_session(orientation=orientation)
        target = Coord(2, 3)
        public = public_cell_for(session, PlayerSlot.SECOND, target)
        notes = session.apply(Attack("alice", public))
        assert of_type(notes, AttackResolved)[0].target == target
        assert of_type(notes, AttackResolved)[0].hit


class TestFunctionalApply:
    """Tests for the functional transition form and persistence."""

    def test_apply_returns_session_and_notes(self):
        """Test the module-level apply()."""
        session = MatchSession()
        result, notes = apply(session, Join("alice"))
        assert result is session
        assert notes == [PlayerJoined("alice", PlayerSlot.FIRST)]

    def test_unknown_event_type(self):
        """Test that a non-event is a programming error, not a rejection."""
        with pytest.raises(TypeError):
            MatchSession().apply("attack")

    def test_session_round_trip(self):
        """Test that a session mid-combat survives JSON."""
        session = combat_session()
        session.apply(Attack("alice", public_cell_for(session, PlayerSlot.SECOND, VALID_FLEET[0])))
        session.apply(Tick())

        loaded = MatchSession.from_json(session.to_json())
        assert loaded == session
        assert loaded.current_turn is PlayerSlot.SECOND
        assert loaded.fleet_for(PlayerSlot.FIRST).lengths == [5, 4, 3, 2, 2]

        # The restored session keeps playing
        notes = loaded.apply(Attack("bob", Coord(0, 0)))
        assert of_type(notes, AttackResolved)
