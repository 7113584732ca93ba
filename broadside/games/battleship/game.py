"""
Battleship Game Implementation for Broadside.

Two players secretly lay out a fleet on their own 7x7 board, then take
turns shooting at the upright public board that stands between them.
The match itself lives in MatchSession; this class seats players, turns
their actions into session events and reads the results back to them.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
import random

from ..base import Game, Player, GameOptions
from ..registry import register_game
from ...game_utils.bot_helper import BotHelper
from ...game_utils.countdown_timer import TICKS_PER_SECOND
from ...game_utils.game_result import GameResult, PlayerResult
from ...game_utils.options import IntOption, MenuOption, option_field
from ...messages.localization import Localization
from ...users.base import MenuItem, User
from .bot import choose_target, plan_fleet
from .coords import Orientation, PlayerSlot, format_coord, marker_offset, parse_coord
from .errors import BattleshipError, OutOfBounds
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
    ShipSunk,
    Tick,
    TurnChanged,
    TurnReminder,
)
from .fleet import FLEET_CELLS, REQUIRED_FLEET
from .grid import CellState, Coord
from .scoring import Scoreboard
from .session import MatchSession, Phase

SOUND_DIR = "game_battleship"


@dataclass
class BattleshipPlayer(Player):
    """Player state for Battleship."""

    bot_plan: list[str] = field(default_factory=list)  # Cell labels a bot will place


@dataclass
class BattleshipOptions(GameOptions):
    """Options for Battleship using declarative option system."""

    orientation: str = option_field(
        MenuOption(
            default="north",
            choices=["north", "south", "east", "west"],
            value_key="orientation",
            choice_labels={
                "north": "battleship-orientation-north",
                "south": "battleship-orientation-south",
                "east": "battleship-orientation-east",
                "west": "battleship-orientation-west",
            },
            label="battleship-set-orientation",
            change_msg="battleship-option-changed-orientation",
        )
    )
    countdown_seconds: int = option_field(
        IntOption(
            default=5,
            min_val=1,
            max_val=30,
            value_key="seconds",
            label="battleship-set-countdown",
            change_msg="battleship-option-changed-countdown",
        )
    )
    reminder_seconds: int = option_field(
        IntOption(
            default=2,
            min_val=0,
            max_val=30,
            value_key="seconds",
            label="battleship-set-reminder",
            change_msg="battleship-option-changed-reminder",
        )
    )


@dataclass
@register_game
class BattleshipGame(Game):
    """
    Battleship for two players.

    Setup is simultaneous: each player places sixteen ship cells forming
    ships of length 5, 4, 3, 2 and 2 that may not bend or touch. Once both
    boards are valid a countdown runs, then players alternate shots. The
    first to hit all sixteen enemy cells wins.

    Actions:
        place:<cell>   add a ship cell to your own board (e.g. "place:B3")
        remove:<cell>  take a ship cell off your own board
        attack:<cell>  shoot at a cell of the public board
        status         show hits and shots so far
    """

    players: list[BattleshipPlayer] = field(default_factory=list)
    options: BattleshipOptions = field(default_factory=BattleshipOptions)
    session: MatchSession = field(default_factory=MatchSession)
    winner_id: str | None = None
    # Scores as they stood when a player walked out of combat
    forfeit_scores: Scoreboard | None = None

    @classmethod
    def get_name(cls) -> str:
        return "Battleship"

    @classmethod
    def get_type(cls) -> str:
        return "battleship"

    @classmethod
    def get_category(cls) -> str:
        return "category-board-games"

    @classmethod
    def get_min_players(cls) -> int:
        return 2

    @classmethod
    def get_max_players(cls) -> int:
        return 2

    def create_player(
        self, player_id: str, name: str, is_bot: bool = False
    ) -> BattleshipPlayer:
        """Create a new player with Battleship-specific state."""
        return BattleshipPlayer(id=player_id, name=name, is_bot=is_bot)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def on_start(self) -> None:
        """Called when the game starts."""
        self.status = "playing"
        self.game_active = True
        self.round = 1
        self.winner_id = None
        self.forfeit_scores = None

        self.session = MatchSession.create(
            orientation=Orientation.from_str(self.options.orientation),
            countdown_seconds=self.options.countdown_seconds,
            reminder_seconds=self.options.reminder_seconds,
        )
        for player in self.get_active_players():
            player.bot_plan = []
            self._apply(Join(player.id))

        self.play_music(f"{SOUND_DIR}/mus.ogg")
        self._announce_setup()
        BotHelper.jolt_bots(self, ticks=random.randint(10, 20))
        self.rebuild_all_boards()

    def add_player(self, name: str, user: User) -> BattleshipPlayer:
        """Add a player; during play they take the free seat."""
        player = super().add_player(name, user)
        if self.status == "playing":
            self._apply(Join(player.id))
            self.rebuild_all_boards()
        return player

    def on_player_leave(self, player: Player) -> None:
        """Vacate the player's seat in the match."""
        if self.status != "playing" or self.session.slot_of(player.id) is None:
            return
        if self.session.phase is Phase.COMBAT:
            # Leaving combat resets the session, and the end screen still needs the scores
            self.forfeit_scores = replace(self.session.scoreboard)
        self._apply(Leave(player.id))

    def remove_player(self, player: Player) -> None:
        """Remove a player; a forfeit ends the game for the one who stays."""
        super().remove_player(player)
        if self.status == "playing" and self.winner_id is not None:
            self.finish_game()
        elif self.status == "playing":
            self.rebuild_all_boards()

    def on_tick(self) -> None:
        """Called every tick. Drives the countdown, reminders and bots."""
        super().on_tick()

        if not self.game_active:
            return

        self._apply(Tick())
        self._announce_countdown()

        BotHelper.on_tick(self)

    def _announce_setup(self) -> None:
        for player in self.players:
            user = self.get_user(player)
            if user:
                ships = Localization.format_list_and(
                    user.locale, [str(n) for n in REQUIRED_FLEET]
                )
                user.speak_l("battleship-setup-start", ships=ships, cells=FLEET_CELLS)

    def _announce_countdown(self) -> None:
        """Call out each whole second left on the countdown."""
        timer = self.session.countdown
        if self.session.phase is not Phase.COUNTDOWN or not timer.running:
            return
        if timer.ticks_remaining % TICKS_PER_SECOND == 0:
            self.broadcast_l(
                "battleship-countdown-tick", seconds=timer.seconds_remaining()
            )
            self.play_sound(f"{SOUND_DIR}/countdown.ogg")

    # ==========================================================================
    # Actions
    # ==========================================================================

    def _action_place(self, player: Player, argument: str, action_id: str) -> None:
        """Place a ship cell on the player's own board."""
        coord = self._parse_cell(player, argument)
        if coord is not None:
            self._apply(Place(player.id, coord, place=True))

    def _action_remove(self, player: Player, argument: str, action_id: str) -> None:
        """Remove a ship cell from the player's own board."""
        coord = self._parse_cell(player, argument)
        if coord is not None:
            self._apply(Place(player.id, coord, place=False))

    def _action_attack(self, player: Player, argument: str, action_id: str) -> None:
        """Shoot at a cell of the public board."""
        coord = self._parse_cell(player, argument)
        if coord is not None:
            self._apply(Attack(player.id, coord))

    def _action_status(self, player: Player, argument: str, action_id: str) -> None:
        """Show the match status to one player."""
        user = self.get_user(player)
        if user:
            self.status_box(player, self.status_lines(user.locale))

    def _parse_cell(self, player: Player, label: str) -> Coord | None:
        try:
            return parse_coord(label)
        except OutOfBounds as e:
            self._speak_error(player, e)
        except ValueError:
            self.speak_to_l(player, "battleship-bad-cell", cell=label)
        return None

    # ==========================================================================
    # Session events and presentation
    # ==========================================================================

    def _apply(self, event: Event) -> list[Notification]:
        """Feed one event to the session and present what happened."""
        notes = self.session.apply(event)
        shown = notes
        if any(isinstance(n, Forfeit) for n in notes):
            # The match is over; the reset for the next pair is not news
            shown = [n for n in notes if not isinstance(n, (BoardCleared, PhaseChanged))]
        for note in shown:
            self._present(note)
        if any(isinstance(n, (CellChanged, BoardCleared, PhaseChanged)) for n in shown):
            self.rebuild_all_boards()
        return notes

    def _player_for_slot(self, slot: PlayerSlot) -> Player | None:
        player_id = self.session.player_id_for(slot)
        return self.get_player_by_id(player_id) if player_id else None

    def _name_for_slot(self, slot: PlayerSlot) -> str:
        player = self._player_for_slot(slot)
        return player.name if player else ""

    def _present(self, note: Notification) -> None:
        if isinstance(note, PlayerJoined):
            player = self.get_player_by_id(note.player_id)
            if player:
                self.broadcast_l(
                    "battleship-player-seated", player=player.name, seat=note.slot.value
                )

        elif isinstance(note, CellChanged):
            self._present_cell(note)

        elif isinstance(note, BoardCleared):
            if note.board is not BoardId.PUBLIC:
                player = self._player_for_slot(PlayerSlot(note.board.value))
                if player:
                    self.speak_to_l(player, "battleship-board-cleared")

        elif isinstance(note, BoardChecked):
            self._present_board_check(note)

        elif isinstance(note, PhaseChanged):
            self._present_phase(note)

        elif isinstance(note, TurnChanged):
            player = self._player_for_slot(note.slot)
            if player:
                self.broadcast_personal_l(
                    player, "battleship-your-turn", "battleship-turn-of"
                )
                self.play_sound(f"{SOUND_DIR}/turn.ogg")
                BotHelper.jolt_bot(player, ticks=random.randint(8, 16))

        elif isinstance(note, TurnReminder):
            player = self._player_for_slot(note.slot)
            if player:
                self.speak_to_l(player, "battleship-turn-reminder")

        elif isinstance(note, AttackResolved):
            self._present_attack(note)

        elif isinstance(note, ShipSunk):
            self.broadcast_l(
                "battleship-ship-sunk",
                player=self._name_for_slot(note.owner),
                length=note.length,
            )
            self.play_sound(f"{SOUND_DIR}/sunk.ogg")

        elif isinstance(note, MatchWon):
            self.winner_id = note.player_id
            self.play_sound(f"{SOUND_DIR}/win.ogg")
            self.broadcast_l("battleship-winner", player=self._name_for_slot(note.winner))
            self.finish_game()

        elif isinstance(note, Forfeit):
            leaver = self.get_player_by_id(note.player_id)
            self.winner_id = self.session.player_id_for(note.slot.other)
            self.broadcast_l(
                "battleship-forfeit",
                exclude=leaver,
                player=leaver.name if leaver else "",
            )

        elif isinstance(note, EventRejected):
            player = self.get_player_by_id(note.player_id) if note.player_id else None
            if player:
                self._speak_error(player, note.error)

    def _present_cell(self, note: CellChanged) -> None:
        if note.board is BoardId.PUBLIC or not isinstance(note.state, CellState):
            return
        slot = PlayerSlot(note.board.value)
        player = self._player_for_slot(slot)
        if not player:
            return
        if note.state is CellState.OCCUPIED:
            message_id = "battleship-cell-placed"
            self.play_sound(f"{SOUND_DIR}/place.ogg")
        else:
            message_id = "battleship-cell-removed"
        self.speak_to_l(
            player,
            message_id,
            cell=format_coord(note.coord),
            remaining=self.session.cells_remaining(slot),
        )

    def _present_board_check(self, note: BoardChecked) -> None:
        player = self._player_for_slot(note.slot)
        if not player:
            return
        if note.ok:
            self.broadcast_personal_l(
                player, "battleship-board-ready", "battleship-player-ready"
            )
            self.play_sound(f"{SOUND_DIR}/ready.ogg")
        else:
            self.speak_to_l(player, "battleship-board-invalid")
            self._speak_error(player, note.error)

    def _present_phase(self, note: PhaseChanged) -> None:
        name = self._name_for_slot(note.slot) if note.slot else ""
        if note.phase is Phase.COUNTDOWN:
            self.broadcast_l(
                "battleship-countdown-start",
                seconds=self.session.countdown.seconds_remaining(),
            )
        elif note.phase is Phase.COMBAT:
            self.play_sound(f"{SOUND_DIR}/start.ogg")
            self.broadcast_l("battleship-combat-start")
        elif note.phase is Phase.SETUP:
            if note.reason is PhaseReason.BOARD_CHANGED:
                self.broadcast_l("battleship-countdown-cancelled", player=name)
            elif note.reason is PhaseReason.BOARD_INVALID:
                self.broadcast_l("battleship-countdown-board-invalid", player=name)
            else:
                self.broadcast_l("battleship-back-to-setup")

    def _marker_pan(self, slot: PlayerSlot) -> int:
        """Stereo pan toward the side of the public board where slot hangs its markers."""
        dx, _ = marker_offset(slot, self.session.orientation)
        return dx * 60

    def _present_attack(self, note: AttackResolved) -> None:
        attacker = self.get_player_by_id(note.player_id)
        defender = self._player_for_slot(note.attacker.other)
        outcome = "hit" if note.hit else "miss"
        self.play_sound(f"{SOUND_DIR}/{outcome}.ogg", pan=self._marker_pan(note.attacker))
        for player in self.players:
            if player is attacker:
                self.speak_to_l(
                    player,
                    f"battleship-you-{outcome}",
                    cell=format_coord(note.coord),
                    hits=note.hits,
                )
            elif player is defender:
                self.speak_to_l(
                    player,
                    f"battleship-{outcome}-on-you",
                    player=attacker.name if attacker else "",
                    cell=format_coord(note.target),
                )
            else:
                self.speak_to_l(
                    player,
                    f"battleship-player-{outcome}",
                    player=attacker.name if attacker else "",
                    cell=format_coord(note.coord),
                )

    def _speak_error(self, player: Player, error: BattleshipError) -> None:
        """Read an engine error back to a player in their locale."""
        user = self.get_user(player)
        if not user:
            return
        kwargs = {}
        for key, value in error.message_kwargs().items():
            if isinstance(value, list):
                kwargs[key] = Localization.format_list_and(
                    user.locale, [str(v) for v in value]
                )
                kwargs[f"{key}_count"] = len(value)
            else:
                kwargs[key] = value
        user.speak_l(error.message_id, **kwargs)
        user.play_sound(f"{SOUND_DIR}/error.ogg")

    # ==========================================================================
    # Boards
    # ==========================================================================

    def board_items(self, player: Player, locale: str) -> list[MenuItem]:
        """
        The 7x7 board a player interacts with, row by row.

        During setup this is the player's own board and each cell places
        or removes a ship. From combat on it is the player's face of the
        public board and each cell is an attack.
        """
        slot = self.session.slot_of(player.id)
        if slot is None:
            return []

        items = []
        setup = self.session.phase in (Phase.SETUP, Phase.COUNTDOWN)
        grid = self.session.grid_for(slot)
        size = grid.size
        for row in range(size):
            for col in range(size):
                coord = Coord(row, col)
                label = format_coord(coord)
                if setup:
                    occupied = grid.is_occupied(coord)
                    state = "ship" if occupied else "water"
                    action = "remove" if occupied else "place"
                else:
                    state = self.session.public.get(coord, slot).value
                    action = "attack"
                text = Localization.get(locale, "battleship-cell", cell=label, state=state)
                items.append(MenuItem(text=text, id=f"{action}:{label}"))
        return items

    def rebuild_board(self, player: Player) -> None:
        user = self.get_user(player)
        if not user or user.is_bot:
            return
        items = self.board_items(player, user.locale)
        if not items:
            return
        user.show_menu(
            "board",
            items,
            multiletter=False,
            grid_enabled=True,
            grid_width=self.session.public.size,
        )

    def rebuild_all_boards(self) -> None:
        if self.status != "playing":
            return
        for player in self.get_active_players():
            self.rebuild_board(player)

    def status_lines(self, locale: str) -> list[str]:
        lines = [
            Localization.get(
                locale, "battleship-status-phase", phase=self.session.phase.value
            )
        ]
        board = self.session.scoreboard
        for slot in (PlayerSlot.FIRST, PlayerSlot.SECOND):
            player = self._player_for_slot(slot)
            if not player:
                continue
            lines.append(
                Localization.get(
                    locale,
                    "battleship-status-player",
                    player=player.name,
                    hits=board.hits_for(slot),
                    shots=board.shots_for(slot),
                    remaining=self.session.cells_remaining(slot),
                    ready="yes" if self.session.is_ready(slot) else "no",
                )
            )
        return lines

    # ==========================================================================
    # Bot AI
    # ==========================================================================

    def bot_think(self, player: BattleshipPlayer) -> str | None:
        """Bot AI decision making. Called by BotHelper."""
        slot = self.session.slot_of(player.id)
        if slot is None:
            return None

        phase = self.session.phase
        if phase in (Phase.SETUP, Phase.COUNTDOWN):
            return self._bot_setup_action(player, slot)

        if phase is Phase.COMBAT and self.session.current_turn is slot:
            target = choose_target(self.session.public, slot)
            if target is not None:
                return f"attack:{format_coord(target)}"
        return None

    def _bot_setup_action(self, player: BattleshipPlayer, slot: PlayerSlot) -> str | None:
        if self.session.is_ready(slot):
            return None
        grid = self.session.grid_for(slot)
        if grid.count_occupied() >= FLEET_CELLS:
            # Full but invalid: clear it one cell at a time and plan again
            player.bot_plan = []
            return f"remove:{format_coord(grid.occupied_cells()[0])}"

        if not player.bot_plan:
            player.bot_plan = [format_coord(c) for c in plan_fleet(grid.size)]
        for label in player.bot_plan:
            if not grid.is_occupied(parse_coord(label)):
                return f"place:{label}"
        # Plan is on the board but something else is too
        player.bot_plan = []
        return None

    # ==========================================================================
    # Results
    # ==========================================================================

    def build_game_result(self) -> GameResult:
        """Build the game result with Battleship-specific data."""
        winner = self.get_player_by_id(self.winner_id) if self.winner_id else None
        board = self.forfeit_scores or self.session.scoreboard

        stats = {}
        for slot in (PlayerSlot.FIRST, PlayerSlot.SECOND):
            player = self._player_for_slot(slot)
            if player:
                stats[player.name] = {
                    "hits": board.hits_for(slot),
                    "shots": board.shots_for(slot),
                    "accuracy": round(board.accuracy(slot), 3),
                }

        return GameResult(
            game_type=self.get_type(),
            timestamp=datetime.now().isoformat(),
            duration_ticks=self.tick_count,
            player_results=[
                PlayerResult(
                    player_id=p.id,
                    player_name=p.name,
                    is_bot=p.is_bot,
                )
                for p in self.get_active_players()
            ],
            custom_data={
                "winner_name": winner.name if winner else None,
                "winner_id": self.winner_id,
                "forfeit": self.session.phase is not Phase.RESOLVED,
                "orientation": self.session.orientation.value,
                "stats": stats,
            },
        )

    def format_end_screen(self, result: GameResult, locale: str) -> list[str]:
        """Format the end screen for Battleship."""
        lines = [Localization.get(locale, "game-over")]
        winner_name = result.custom_data.get("winner_name")
        if winner_name:
            lines.append(Localization.get(locale, "battleship-winner", player=winner_name))

        for name, stat in result.custom_data.get("stats", {}).items():
            lines.append(
                Localization.get(
                    locale,
                    "battleship-final-line",
                    player=name,
                    hits=stat["hits"],
                    shots=stat["shots"],
                    accuracy=round(stat["accuracy"] * 100),
                )
            )
        return lines
