"""Localized messaging to the players of a table."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..games.base import Player


class GameCommunicationMixin:
    """
    Speak Fluent messages to one, some or all seats.

    Each user renders the message in their own locale. Spectators are
    players too, so they hear every broadcast.

    The leading parameters are positional-only, so any name, including
    player, message_id or buffer, can be passed as a Fluent variable:

        self.speak_to_l(bob, "battleship-hit-on-you", player="Alice", cell="C4")

    Expects on the Game class:
        - self.players: list[Player]
        - self.get_user(player) -> User | None
    """

    def broadcast_l(
        self,
        message_id: str,
        buffer: str = "misc",
        /,
        exclude: "Player | None" = None,
        **kwargs,
    ) -> None:
        """Tell everyone at the table, except exclude."""
        for player in self.players:
            if player is exclude:
                continue
            user = self.get_user(player)
            if user:
                user.speak_l(message_id, buffer, **kwargs)

    def broadcast_personal_l(
        self,
        player: "Player",
        personal_message_id: str,
        others_message_id: str,
        buffer: str = "misc",
        /,
        **kwargs,
    ) -> None:
        """
        Tell player one thing and everyone else another.

        The others' message also gets player=player.name, e.g.
        "battleship-board-ready" for the owner and
        "battleship-player-ready" ("Alice's board is ready.") for the rest.
        """
        self.speak_to_l(player, personal_message_id, buffer, **kwargs)
        self.broadcast_l(
            others_message_id, buffer, exclude=player, **{**kwargs, "player": player.name}
        )

    def speak_to_l(
        self, player: "Player", message_id: str, buffer: str = "misc", /, **kwargs
    ) -> None:
        """Tell a single player."""
        user = self.get_user(player)
        if user:
            user.speak_l(message_id, buffer, **kwargs)
