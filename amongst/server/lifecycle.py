"""Connection welcome and teardown."""

from __future__ import annotations

import logging

from amongst.configurations.configuration_constants import (NOT_FOUND,
                                                            GameStage,
                                                            GameStatuses,
                                                            PlayerStage,
                                                            PlayerStatuses)
from amongst.server import messages
from amongst.server.session import GameSession
from amongst.utils.typing import ConnectionHandle, SlotID

logger = logging.getLogger(__name__)


class ConnectionLifecycle:

    def __init__(self, session: GameSession):
        self.session = session

    def welcome(self, handle: ConnectionHandle) -> SlotID:
        """Greet a new connection and give it a slot.

        Returns the slot index, or NOT_FOUND when the game is full. A full
        game closes the connection without touching the table.
        """
        session = self.session
        session.transport.send(handle, messages.info())

        slot = session.players.find_free_slot()
        if slot == NOT_FOUND:
            logger.info(f"Rejecting connection {handle}: all {session.players.capacity} slots taken")
            session.transport.send(handle, messages.game_status(GameStatuses.Full))
            session.transport.close(handle)
            return NOT_FOUND

        if session.stage != GameStage.LOBBY:
            session.broadcast(messages.game_status(GameStatuses.InProgress))

        player = session.players[slot]
        player.reset()
        session.players.assign(slot, handle)
        player.stage = PlayerStage.NAMING

        logger.info(f"Assigned connection {handle} to slot {slot}")
        session.callback.on_player_welcome(session, player)
        return slot

    def disconnect(self, slot: SlotID, should_broadcast: bool) -> None:
        """Free ``slot`` and tell the others who left.

        Safe to call on a slot that is already free.
        """
        session = self.session
        player = session.players[slot]

        handle = session.players.release(slot)
        if handle is None:
            logger.debug(f"Slot {slot} already free, nothing to disconnect")
            return

        if should_broadcast:
            session.broadcast(
                messages.player_status(PlayerStatuses.Leave, player.name)
            )

        # Disconnecting may end the round
        session.callback.check_win_condition(session)
        session.callback.on_player_disconnect(session, player)

        logger.info(
            f"Player {player.name or '<unnamed>'} disconnected from slot {slot} "
            f"(connection {handle})"
        )
        player.name = ""

        if session.stage != GameStage.LOBBY and not session.players.occupied():
            logger.info("Last player left, returning to the lobby")
            session.set_stage(GameStage.LOBBY)

    @staticmethod
    def should_broadcast_leave(stage: PlayerStage) -> bool:
        """Unnamed players were never announced, so their exit is not either."""
        return stage != PlayerStage.NAMING
