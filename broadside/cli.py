"""
Broadside command line: watch bots play, inspect games and options.

Nothing here is interactive; every choice is a flag.

Usage examples:
    # Two bots play a match
    python -m broadside simulate battleship --bots 2

    # Named bots, public board facing east, 3 second countdown
    python -m broadside simulate battleship --bots Alice,Bob -o orientation=east -o countdown_seconds=3

    # Machine-readable result
    python -m broadside simulate battleship --bots 2 --json

    # Round-trip the whole game through JSON after every tick
    python -m broadside simulate battleship --bots 2 --test-serialization

    # Replay the same match
    python -m broadside simulate battleship --bots 2 --seed 42

    # Engine debug log on stderr
    python -m broadside --verbose simulate battleship --bots 2 --quiet

    python -m broadside list-games
    python -m broadside show-options battleship
"""

import argparse
import json
import logging
import random
import sys
from dataclasses import dataclass, field
from typing import Any

# Games render option labels at import, so the catalogue must be ready first
from broadside.messages.localization import Localization

Localization.init()

from broadside.games import GameRegistry, get_game_class  # noqa: E402
from broadside.games.base import Game, BOT_NAMES  # noqa: E402
from broadside.game_utils.options import get_all_option_metas  # noqa: E402
from broadside.users.base import User, MenuItem, generate_uuid  # noqa: E402
from broadside.users.bot import Bot  # noqa: E402

logger = logging.getLogger("broadside.cli")

SPECTATOR_NAME = "__spectator__"


@dataclass
class SpectatorUser(User):
    """
    A silent seat that hears every broadcast.

    Speech is echoed to stdout when echo is set; the latest version of
    each menu is kept so the end screen can be reported.
    """

    _username: str = SPECTATOR_NAME
    _locale: str = "en"
    _uuid: str = field(default_factory=generate_uuid)
    echo: bool = True
    transcript: list[str] = field(default_factory=list)
    menus: dict[str, list[str]] = field(default_factory=dict)

    @property
    def username(self) -> str:
        return self._username

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def uuid(self) -> str:
        return self._uuid

    def speak(self, text: str, buffer: str = "misc") -> None:
        self.transcript.append(text)
        if self.echo:
            print(f"  {text}")

    def play_sound(
        self, name: str, volume: int = 100, pan: int = 0, pitch: int = 100
    ) -> None:
        pass

    def play_music(self, name: str, looping: bool = True) -> None:
        pass

    def show_menu(self, menu_id: str, items: list[str | MenuItem], **kwargs) -> None:
        self.menus[menu_id] = [
            item.text if isinstance(item, MenuItem) else str(item) for item in items
        ]


class GameSimulator:
    """Seats bots plus a spectator at one game and ticks it to the end."""

    def __init__(
        self,
        game_type: str,
        bot_names: list[str],
        options: dict[str, str],
        json_mode: bool = False,
        quiet: bool = False,
        max_ticks: int = 100000,
        test_serialization: bool = False,
    ):
        self.game_type = game_type
        self.bot_names = bot_names
        self.options = options
        self.json_mode = json_mode
        self.quiet = quiet
        self.max_ticks = max_ticks
        self.test_serialization = test_serialization

        self.game_class: type[Game] | None = None
        self.game: Game | None = None
        self.spectator: SpectatorUser | None = None

    def _say(self, text: str) -> None:
        # Human-facing only; JSON output must stay parseable
        if not self.json_mode:
            print(text)

    def setup(self) -> bool:
        """Create the game and seat everyone. Returns False on bad input."""
        self.game_class = get_game_class(self.game_type)
        if self.game_class is None:
            self._say(f"Error: Unknown game type '{self.game_type}'")
            self._say("Use 'list-games' to see available games.")
            return False

        low = self.game_class.get_min_players()
        high = self.game_class.get_max_players()
        if not low <= len(self.bot_names) <= high:
            self._say(
                f"Error: {self.game_type} needs {low}-{high} players, "
                f"got {len(self.bot_names)}"
            )
            return False

        self.game = self.game_class()
        self._apply_options()

        self.game.host = self.bot_names[0]
        for name in self.bot_names:
            self.game.add_player(name, Bot(name))

        self.spectator = SpectatorUser(echo=not (self.quiet or self.json_mode))
        self.game.add_spectator(SPECTATOR_NAME, self.spectator)
        return True

    def _apply_options(self) -> None:
        options = getattr(self.game, "options", None)
        for key, value in self.options.items():
            if options is None or not options.set_option(key, value):
                self._say(
                    f"Warning: Unknown or invalid option '{key}={value}' for {self.game_type}"
                )

    def _reload(self, tick: int) -> None:
        """Replace the game with a copy restored from its own JSON."""
        users = dict(self.game._users)
        try:
            restored = self.game_class.from_json(self.game.to_json())
        except Exception as e:
            raise RuntimeError(f"Save/restore failed at tick {tick}: {e}") from e
        restored._users = users
        restored.rebuild_runtime_state()
        self.game = restored

    def run(self) -> dict[str, Any]:
        """Play until the game ends or max_ticks pass, and report what happened."""
        if self.game is None or self.spectator is None:
            return {"error": "Game not set up"}

        if not self.quiet:
            suffix = " [testing serialization]" if self.test_serialization else ""
            self._say(
                f"\n=== {self.game.get_name()} ({len(self.bot_names)} bots){suffix} ===\n"
            )

        self.game.on_start()

        tick = 0
        reload_error = None
        while self.game.game_active and tick < self.max_ticks:
            self.game.on_tick()
            tick += 1
            if not self.test_serialization:
                continue
            try:
                self._reload(tick)
            except RuntimeError as e:
                reload_error = str(e)
                self._say(f"\nError: {reload_error}")
                break

        timed_out = tick >= self.max_ticks
        if timed_out:
            self._say(f"\nWarning: Game timed out after {self.max_ticks} ticks")
        logger.debug("simulation stopped after %d ticks (timed_out=%s)", tick, timed_out)

        results = {
            "game_type": self.game_type,
            "game_name": self.game.get_name(),
            "ticks": tick,
            "rounds": self.game.round,
            "timed_out": timed_out,
            "messages": list(self.spectator.transcript),
            "final_menu": list(self.spectator.menus.get("game_over", [])),
        }

        # Private boards as text rows, ships and shots marked
        session = getattr(self.game, "session", None)
        if session is not None:
            results["boards"] = {
                slot: grid.rows() for slot, grid in zip(("first", "second"), session.grids)
            }

        if self.test_serialization:
            results["serialization_tested"] = True
            if reload_error:
                results["serialization_error"] = reload_error
            else:
                results["serialization_passed"] = True
        return results


def describe_game(game_class: type[Game]) -> dict[str, Any]:
    return {
        "type": game_class.get_type(),
        "name": game_class.get_name(),
        "category": game_class.get_category(),
        "min_players": game_class.get_min_players(),
        "max_players": game_class.get_max_players(),
    }


def describe_options(game_class: type[Game]) -> list[dict[str, Any]]:
    """Name, type, default, English label and limits of each declared option."""
    options = getattr(game_class(), "options", None)
    if options is None:
        return []

    described = []
    for name, meta in get_all_option_metas(type(options)).items():
        value = getattr(options, name)
        entry = {
            "name": name,
            "type": type(value).__name__,
            "default": value,
            "label": meta.get_label("en", value),
        }
        if hasattr(meta, "min_val"):
            entry["min"] = meta.min_val
            entry["max"] = meta.max_val
        if hasattr(meta, "choices"):
            entry["choices"] = list(meta.choices)
        described.append(entry)
    return described


def cmd_list_games(args):
    games = [describe_game(game_class) for game_class in GameRegistry.get_all()]
    if args.json:
        print(json.dumps(games, indent=2))
        return

    print("Available games:\n")
    for game in games:
        print(f"  {game['type']}")
        print(f"    Name: {game['name']}")
        print(f"    Category: {game['category']}")
        print(f"    Players: {game['min_players']}-{game['max_players']}")
        print()


def cmd_show_options(args):
    game_class = get_game_class(args.game_type)
    if game_class is None:
        print(f"Error: Unknown game type '{args.game_type}'")
        sys.exit(1)

    options = describe_options(game_class)
    if args.json:
        print(json.dumps({"game_type": args.game_type, "options": options}, indent=2))
        return
    if not options:
        print(f"{args.game_type} has no configurable options.")
        return

    print(f"Options for {args.game_type}:\n")
    for opt in options:
        print(f"  {opt['name']} ({opt['type']})")
        print(f"    {opt['label']}")
        print(f"    Default: {opt['default']}")
        if "min" in opt:
            print(f"    Range: {opt['min']} - {opt['max']}")
        if "choices" in opt:
            print(f"    Choices: {', '.join(opt['choices'])}")
        print()


def parse_bots(value: str) -> list[str]:
    """'2' gives the first two default names; 'Ann,Ben' gives those names."""
    if value.isdigit():
        return BOT_NAMES[: int(value)]
    return [name.strip() for name in value.split(",") if name.strip()]


def parse_options(pairs: list[str] | None) -> dict[str, str]:
    options = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if sep:
            options[key.strip()] = value.strip()
    return options


def print_summary(results: dict[str, Any]) -> None:
    print(f"\n=== Finished: {results['ticks']} ticks, {results['rounds']} rounds ===")
    standings = [
        line
        for line in results.get("final_menu", [])
        if line and not line.lower().startswith("leave")
    ]
    if standings:
        print("\nFinal standings:")
        for line in standings:
            print(f"  {line}")
    for slot, rows in results.get("boards", {}).items():
        print(f"\nBoard ({slot}):")
        for row in rows:
            print(f"  {row}")


def cmd_simulate(args):
    if args.seed is not None:
        random.seed(args.seed)

    simulator = GameSimulator(
        game_type=args.game_type,
        bot_names=parse_bots(args.bots),
        options=parse_options(args.option),
        json_mode=args.json,
        quiet=args.quiet,
        max_ticks=args.max_ticks,
        test_serialization=args.test_serialization,
    )
    if not simulator.setup():
        sys.exit(1)

    results = simulator.run()
    if args.json:
        print(json.dumps(results, indent=2))
    elif not args.quiet:
        print_summary(results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Broadside game simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log engine debug output to stderr"
    )
    commands = parser.add_subparsers(dest="command", help="Available commands")

    list_games = commands.add_parser("list-games", help="List available games")
    list_games.add_argument("--json", action="store_true", help="Output as JSON")

    show_options = commands.add_parser("show-options", help="Show options for a game")
    show_options.add_argument("game_type", help="Game type (e.g., battleship)")
    show_options.add_argument("--json", action="store_true", help="Output as JSON")

    simulate = commands.add_parser("simulate", help="Let bots play a game")
    simulate.add_argument("game_type", help="Game type (e.g., battleship)")
    simulate.add_argument(
        "--bots",
        "-b",
        required=True,
        help="How many bots (e.g., 2) or their names (e.g., Alice,Bob)",
    )
    simulate.add_argument(
        "--option", "-o", action="append", help="Set an option (e.g., -o orientation=east)"
    )
    simulate.add_argument("--json", action="store_true", help="Output as JSON")
    simulate.add_argument("--quiet", "-q", action="store_true", help="Suppress game output")
    simulate.add_argument(
        "--max-ticks",
        type=int,
        default=100000,
        help="Give up after this many ticks (default: 100000)",
    )
    simulate.add_argument(
        "--test-serialization",
        "-s",
        action="store_true",
        help="Save and restore the game after every tick",
    )
    simulate.add_argument("--seed", type=int, default=None, help="Seed the bots' random choices")
    return parser


COMMANDS = {
    "list-games": cmd_list_games,
    "show-options": cmd_show_options,
    "simulate": cmd_simulate,
}


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)
    command(args)


if __name__ == "__main__":
    main()
