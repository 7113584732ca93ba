"""The Game and Player dataclasses every table game builds on."""

from dataclasses import dataclass, field
from datetime import datetime
from abc import ABC, abstractmethod
import logging

from mashumaro.mixins.json import DataClassJSONMixin
from mashumaro.config import BaseConfig

from ..users.base import User, MenuItem, EscapeBehavior
from ..game_utils.game_communication_mixin import GameCommunicationMixin
from ..game_utils.game_result import GameResult, PlayerResult
from ..game_utils.options import GameOptions, get_option_meta
from ..messages.localization import Localization

logger = logging.getLogger(__name__)


# Names handed to bots when only a count is given
BOT_NAMES = [
    "Alice",
    "Bob",
    "Charlie",
    "Diana",
    "Eve",
    "Frank",
]


@dataclass
class Player(DataClassJSONMixin):
    """
    One seat at the table, saved with the game.

    The User behind the seat is runtime-only and is attached again
    after a restore (see Game.attach_user).
    """

    id: str  # user.uuid
    name: str
    is_bot: bool = False
    is_spectator: bool = False
    # BotHelper state; saved so a restored bot carries on where it was
    bot_think_ticks: int = 0
    bot_pending_action: str | None = None


@dataclass
class Game(GameCommunicationMixin, ABC, DataClassJSONMixin):
    """
    A tick-driven table game whose whole state is its dataclass fields.

    The host calls on_tick() 20 times a second and feeds player input
    to execute_action(); the game answers through each seat's User.
    Everything that must survive a save lives in fields, so
    to_json()/from_json() are a complete save and restore.

    status moves from "waiting" to "playing" to "finished".
    """

    class Config(BaseConfig):
        serialize_by_alias = True

    players: list[Player] = field(default_factory=list)
    round: int = 0
    game_active: bool = False
    status: str = "waiting"
    host: str = ""  # player name
    current_music: str = ""
    tick_count: int = 0

    def __post_init__(self):
        self._users: dict[str, User] = {}  # player id -> User

    def rebuild_runtime_state(self) -> None:
        """Recreate runtime-only objects after from_json(). Users are attached separately."""

    # Identity

    @classmethod
    @abstractmethod
    def get_name(cls) -> str:
        """English display name."""
        ...

    @classmethod
    @abstractmethod
    def get_type(cls) -> str:
        """Registry key, e.g. "battleship"."""
        ...

    @classmethod
    def get_name_key(cls) -> str:
        return f"game-name-{cls.get_type()}"

    @classmethod
    def get_category(cls) -> str:
        return "category-uncategorized"

    @classmethod
    def get_min_players(cls) -> int:
        return 2

    @classmethod
    def get_max_players(cls) -> int:
        return 4

    # Lifecycle

    @abstractmethod
    def on_start(self) -> None:
        ...

    def on_tick(self) -> None:
        """Advance one tick. Overrides call super().on_tick() first."""
        if self.game_active:
            self.tick_count += 1

    def on_player_leave(self, player: Player) -> None:
        """Hook run before a seat is removed."""

    def finish_game(self, show_end_screen: bool = True) -> None:
        """Stop the game, log its result and show everyone the end screen."""
        self.game_active = False
        self.status = "finished"

        result = self.build_game_result()
        logger.info(
            "%s finished after %d ticks, winner=%s",
            self.get_type(),
            result.duration_ticks,
            result.winner_name,
        )
        if show_end_screen:
            self.show_end_screen(result)

    def build_game_result(self) -> GameResult:
        return GameResult(
            game_type=self.get_type(),
            timestamp=datetime.now().isoformat(),
            duration_ticks=self.tick_count,
            player_results=[
                PlayerResult(player_id=p.id, player_name=p.name, is_bot=p.is_bot)
                for p in self.get_active_players()
            ],
            custom_data={},
        )

    def format_end_screen(self, result: GameResult, locale: str) -> list[str]:
        return [Localization.get(locale, "game-over")] + [
            p.player_name for p in result.player_results
        ]

    def show_end_screen(self, result: GameResult) -> None:
        """The "game_over" menu: result lines, then a way out."""
        for player in self.players:
            user = self.get_user(player)
            if user is None:
                continue
            items = [
                MenuItem(text=line, id="score_line")
                for line in self.format_end_screen(result, user.locale)
            ]
            items.append(
                MenuItem(text=Localization.get(user.locale, "leave-table"), id="leave_game")
            )
            user.show_menu("game_over", items, multiletter=False)

    # Seats

    def attach_user(self, player_id: str, user: User) -> None:
        self._users[player_id] = user
        if self.current_music:
            user.play_music(self.current_music)

    def get_user(self, player: Player) -> User | None:
        return self._users.get(player.id)

    def get_player_by_id(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def get_active_players(self) -> list[Player]:
        """Seated players, spectators excluded."""
        return [p for p in self.players if not p.is_spectator]

    def create_player(self, player_id: str, name: str, is_bot: bool = False) -> Player:
        """Games with extra per-player state return their own Player subclass."""
        return Player(id=player_id, name=name, is_bot=is_bot)

    def add_player(self, name: str, user: User) -> Player:
        player = self.create_player(user.uuid, name, is_bot=user.is_bot)
        self.players.append(player)
        self.attach_user(player.id, user)
        return player

    def add_spectator(self, name: str, user: User) -> Player:
        """Seat a listener: hears every broadcast, never plays."""
        player = self.create_player(user.uuid, name)
        player.is_spectator = True
        self.players.append(player)
        self.attach_user(player.id, user)
        return player

    def remove_player(self, player: Player) -> None:
        self.on_player_leave(player)
        self.players = [p for p in self.players if p.id != player.id]
        self._users.pop(player.id, None)
        self.broadcast_l("table-left", player=player.name)
        self.play_sound("leave.ogg")

    # Input

    def execute_action(self, player: Player, action_id: str) -> None:
        """
        Run a player's menu choice or key press.

        "attack:C4" calls self._action_attack(player, "C4", "attack:C4");
        ids without a colon get an empty argument. Unknown verbs are
        logged and ignored.
        """
        verb, _, argument = action_id.partition(":")
        handler = getattr(self, f"_action_{verb}", None)
        if handler is None:
            logger.debug("%s: no handler for action %r", self.get_type(), action_id)
            return
        handler(player, argument, action_id)

    def _action_leave_game(self, player: Player, argument: str, action_id: str) -> None:
        self.remove_player(player)

    def set_option(self, name: str, value: str) -> bool:
        """Change a declared option and announce the new value to the table."""
        options: GameOptions | None = getattr(self, "options", None)
        if options is None or not options.set_option(name, value):
            return False
        meta = get_option_meta(type(options), name)
        self.broadcast_l(meta.change_msg, **meta.get_change_kwargs(getattr(options, name)))
        return True

    # Output

    def play_sound(
        self, name: str, volume: int = 100, pan: int = 0, pitch: int = 100
    ) -> None:
        """Play a sound for everyone at the table."""
        for player in self.players:
            user = self.get_user(player)
            if user:
                user.play_sound(name, volume, pan, pitch)

    def play_music(self, name: str, looping: bool = True) -> None:
        """Start music for everyone; users attached later hear it too."""
        self.current_music = name
        for player in self.players:
            user = self.get_user(player)
            if user:
                user.play_music(name, looping)

    def status_box(self, player: Player, lines: list[str]) -> None:
        """Show lines of read-only text as the "status_box" menu."""
        user = self.get_user(player)
        if user is None:
            return
        user.show_menu(
            "status_box",
            [MenuItem(text=line, id="status_line") for line in lines],
            multiletter=False,
            escape_behavior=EscapeBehavior.SELECT_LAST,
        )
