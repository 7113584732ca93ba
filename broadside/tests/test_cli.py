"""Tests for the command-line simulator."""

import json
import random
import sys

import pytest

from broadside import cli
from broadside.cli import GameSimulator


def run_simulation(**kwargs) -> dict:
    kwargs.setdefault("quiet", True)
    simulator = GameSimulator("battleship", ["Alice", "Bob"], {}, **kwargs)
    assert simulator.setup()
    return simulator.run()


def test_simulate_battleship_to_the_end():
    random.seed(3)
    results = run_simulation()
    assert results["game_type"] == "battleship"
    assert results["timed_out"] is False
    assert any(line.endswith("wins!") for line in results["messages"])
    assert results["final_menu"][0] == "Game over."
    assert set(results["boards"]) == {"first", "second"}
    assert all(len(rows) == 7 for rows in results["boards"].values())


def test_simulate_with_options():
    simulator = GameSimulator(
        "battleship",
        ["Alice", "Bob"],
        {"orientation": "west", "countdown_seconds": "1"},
        quiet=True,
    )
    assert simulator.setup()
    assert simulator.game.options.orientation == "west"
    results = simulator.run()
    assert results["timed_out"] is False
    assert simulator.game.session.orientation.value == "west"


def test_invalid_option_warns(capsys):
    simulator = GameSimulator("battleship", ["Alice", "Bob"], {"orientation": "up"})
    assert simulator.setup()
    assert "Unknown or invalid option 'orientation=up'" in capsys.readouterr().out
    assert simulator.game.options.orientation == "north"


def test_simulate_with_serialization():
    random.seed(7)
    results = run_simulation(test_serialization=True)
    assert results["serialization_tested"] is True
    assert results.get("serialization_passed") is True
    assert results["timed_out"] is False


def test_timeout():
    results = run_simulation(max_ticks=10)
    assert results["timed_out"] is True
    assert results["ticks"] == 10


def test_unknown_game(capsys):
    simulator = GameSimulator("chess", ["Alice", "Bob"], {})
    assert not simulator.setup()
    assert "Unknown game type 'chess'" in capsys.readouterr().out


def test_player_count_checked():
    assert not GameSimulator("battleship", ["Alice"], {}, quiet=True).setup()
    assert not GameSimulator("battleship", ["A", "B", "C"], {}, quiet=True).setup()


def test_same_seed_same_game():
    random.seed(11)
    first = run_simulation()
    random.seed(11)
    second = run_simulation()
    assert first["messages"] == second["messages"]
    assert first["boards"] == second["boards"]


def test_list_games_json(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["broadside", "list-games", "--json"])
    cli.main()
    games = json.loads(capsys.readouterr().out)
    assert {"type": "battleship", "name": "Battleship", "category": "category-board-games",
            "min_players": 2, "max_players": 2} in games


def test_show_options_json(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["broadside", "show-options", "battleship", "--json"])
    cli.main()
    data = json.loads(capsys.readouterr().out)
    options = {opt["name"]: opt for opt in data["options"]}
    assert options["orientation"]["choices"] == ["north", "south", "east", "west"]
    assert options["countdown_seconds"]["min"] == 1
    assert options["countdown_seconds"]["max"] == 30
    assert options["reminder_seconds"]["label"] == "Turn reminder: every 2 seconds"


def test_simulate_command_json(monkeypatch, capsys):
    monkeypatch.setattr(
        sys,
        "argv",
        ["broadside", "simulate", "battleship", "--bots", "2", "--json", "--seed", "5"],
    )
    cli.main()
    results = json.loads(capsys.readouterr().out)
    assert results["game_name"] == "Battleship"
    assert results["timed_out"] is False


def test_no_command(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["broadside"])
    with pytest.raises(SystemExit):
        cli.main()
