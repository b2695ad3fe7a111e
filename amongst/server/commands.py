"""Lobby commands.

Arguments arrive as a list the length of the client's array. Positions that
held non-string values are None and must be treated as absent.
"""

from __future__ import annotations

import logging
import random
import typing

from amongst.configurations.configuration_constants import (CommandStatuses,
                                                            GameStage,
                                                            PlayerStage,
                                                            VitalState)
from amongst.server import messages
from amongst.server.session import GameSession
from amongst.utils.typing import SlotID

logger = logging.getLogger(__name__)

CommandArguments = list[typing.Optional[str]]
CommandHandler = typing.Callable[[GameSession, SlotID, CommandArguments], None]


class CommandRegistry:

    def __init__(self, session: GameSession, rng: random.Random | None = None):
        self.session = session
        self.rng = rng or random.Random()
        self._commands: dict[str, CommandHandler] = {
            "players": self.list_players,
            "start": self.start_round,
        }

    def register(self, command: str, handler: CommandHandler) -> None:
        self._commands[command] = handler

    def parse_command(self, slot: SlotID, command: str, arguments: CommandArguments) -> None:
        handler = self._commands.get(command.strip().lower())
        if handler is None:
            logger.debug(f"Unknown command {command!r} from slot {slot}")
            self.session.send(
                self.session.players[slot],
                messages.command_result(command, CommandStatuses.Unknown),
            )
            return

        handler(self.session, slot, arguments)

    def list_players(self, session: GameSession, slot: SlotID, arguments: CommandArguments) -> None:
        names = ", ".join(p.name for p in session.players.named())
        session.send(
            session.players[slot],
            messages.command_result("players", CommandStatuses.Ok, names),
        )

    def start_round(self, session: GameSession, slot: SlotID, arguments: CommandArguments) -> None:
        """Assign an impostor and move every lobby player into the round."""
        requester = session.players[slot]
        if session.stage != GameStage.LOBBY:
            session.send(
                requester,
                messages.command_result("start", CommandStatuses.Error, "A round is already in progress."),
            )
            return

        crew = session.players.in_stage(PlayerStage.LOBBY)
        if len(crew) < session.config.min_players:
            session.send(
                requester,
                messages.command_result(
                    "start",
                    CommandStatuses.Error,
                    f"At least {session.config.min_players} players are needed, "
                    f"{len(crew)} are in the lobby.",
                ),
            )
            return

        impostor = self.rng.choice(crew)
        for player in crew:
            player.is_impostor = player is impostor
            player.vital_state = VitalState.ALIVE
            player.location = session.config.spawn_room
            player.stage = PlayerStage.MAIN

        session.set_stage(GameStage.IN_PROGRESS)
        for player in crew:
            session.send(player, messages.role(player.is_impostor))

        logger.info(
            f"Round started by {requester.name} with {len(crew)} players, "
            f"impostor in slot {impostor.slot}"
        )
        session.callback.on_round_start(session)
