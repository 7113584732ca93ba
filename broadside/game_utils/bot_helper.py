"""Tick-driven bot scheduling.

A bot's whole state lives in two serialized Player fields, so a
restored game resumes bots mid-thought:
- player.bot_think_ticks: ticks left before the bot may act
- player.bot_pending_action: action id chosen, run on the next free tick
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..games.base import Game, Player


class BotHelper:
    """
    Runs every bot seat through think -> pending -> execute.

    A game implements bot_think(player) -> action id | None and calls
    BotHelper.on_tick(self) from on_tick. Choosing an action and running
    it happen on separate ticks, and jolting a bot makes it wait before
    choosing again, which spaces bot moves out like a human's.
    """

    DEFAULT_THINK_TICKS = 5

    @staticmethod
    def jolt_bot(player: "Player", ticks: int | None = None) -> None:
        """Make one bot wait ticks before acting and forget any pending choice."""
        if not player.is_bot:
            return
        player.bot_think_ticks = (
            ticks if ticks is not None else BotHelper.DEFAULT_THINK_TICKS
        )
        player.bot_pending_action = None

    @staticmethod
    def jolt_bots(game: "Game", ticks: int | None = None) -> None:
        for player in game.players:
            BotHelper.jolt_bot(player, ticks)

    @staticmethod
    def step(game: "Game", bot: "Player") -> bool:
        """Advance one bot by a tick. Returns True if it chose or ran an action."""
        if bot.bot_think_ticks > 0:
            bot.bot_think_ticks -= 1
            return False

        if bot.bot_pending_action:
            action_id, bot.bot_pending_action = bot.bot_pending_action, None
            game.execute_action(bot, action_id)
            return True

        bot.bot_pending_action = game.bot_think(bot)
        return bot.bot_pending_action is not None

    @staticmethod
    def on_tick(game: "Game") -> None:
        """
        Step every seated bot.

        Both seats place their fleets at the same time, so each bot gets
        a step every tick; bot_think decides whether it may act now.
        """
        if not game.game_active or game.status != "playing":
            return

        for player in game.get_active_players():
            # An action may have ended the game
            if not game.game_active:
                return
            if player.is_bot:
                BotHelper.step(game, player)
