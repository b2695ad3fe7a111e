"""Generic packet handlers, offered every typed packet before the stage fallback.

A handler returns True when it recognised and handled the packet. Returning
False lets the dispatcher continue with its built-in stage handling.
"""

from __future__ import annotations

import logging
import typing

from amongst.configurations.configuration_constants import (NOT_FOUND,
                                                            KillError,
                                                            PacketTypes,
                                                            PlayerStage)
from amongst.server import kill_action, messages
from amongst.server.session import GameSession
from amongst.utils.typing import Packet, PacketType, SlotID

logger = logging.getLogger(__name__)

PacketHandler = typing.Callable[[GameSession, SlotID, Packet], bool]


class PacketRegistry:
    """Maps packet types to handlers."""

    def __init__(self, session: GameSession):
        self.session = session
        self._handlers: dict[PacketType, PacketHandler] = {}

    def register(self, packet_type: PacketType, handler: PacketHandler) -> None:
        if packet_type in self._handlers:
            logger.warning(f"Replacing handler for packet type {packet_type!r}")
        self._handlers[packet_type] = handler

    def handle_packet(self, slot: SlotID, packet_type: PacketType, packet: Packet) -> bool:
        handler = self._handlers.get(packet_type)
        if handler is None:
            return False
        return handler(self.session, slot, packet)


def handle_kill(session: GameSession, slot: SlotID, packet: Packet) -> bool:
    """``{"type": "kill", "target": "<name>"}``"""
    actor = session.players[slot]
    if actor.stage != PlayerStage.MAIN or not actor.is_alive:
        return False

    target_name = packet.get("target")
    target_slot = (
        session.players.find_slot_by_name(target_name)
        if isinstance(target_name, str)
        else NOT_FOUND
    )
    if target_slot == NOT_FOUND or target_slot == slot:
        error = KillError.INVALID_PLAYER
    else:
        error = kill_action.kill(session, actor, session.players[target_slot])

    if error is not None:
        logger.info(f"Kill by {actor.name} on {target_name!r} refused: {error.value}")
    session.send(actor, messages.kill_result(error))
    return True


def handle_move(session: GameSession, slot: SlotID, packet: Packet) -> bool:
    """``{"type": "move", "location": "<room>"}``"""
    player = session.players[slot]
    if player.stage != PlayerStage.MAIN or not player.is_alive:
        return False

    room = packet.get("location")
    if not isinstance(room, str) or room not in session.config.rooms:
        logger.debug(f"Player {player.name} tried to move to unknown room {room!r}")
        return True

    player.location = room
    session.send(player, messages.location(room))
    return True


def default_registry(session: GameSession) -> PacketRegistry:
    registry = PacketRegistry(session)
    registry.register(PacketTypes.Kill, handle_kill)
    registry.register(PacketTypes.Move, handle_move)
    return registry
