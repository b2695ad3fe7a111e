"""Inbound line handling.

Each line from a connection is resolved to its slot, parsed, offered to the
generic packet handlers and otherwise handled according to the player's
stage. Protocol errors are logged and dropped; only read errors and end of
stream close a connection.
"""

from __future__ import annotations

import json
import logging

from amongst.configurations.configuration_constants import (NOT_FOUND,
                                                            GameStage,
                                                            PacketTypes,
                                                            PlayerStage,
                                                            PlayerStatuses)
from amongst.server import messages
from amongst.server.commands import CommandArguments, CommandRegistry
from amongst.server.lifecycle import ConnectionLifecycle
from amongst.server.names import is_valid_name
from amongst.server.packet_handlers import PacketRegistry
from amongst.server.session import GameSession
from amongst.utils.typing import ConnectionHandle, Packet, SlotID

logger = logging.getLogger(__name__)


def strip_line(text: str) -> str:
    """Cut ``text`` at the first carriage return or line feed."""
    for i, char in enumerate(text):
        if char in "\r\n":
            return text[:i]
    return text


def parse_packet(text: str) -> Packet | None:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        # RecursionError: nesting deeper than the decoder allows
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def is_type(packet: Packet, packet_type: str) -> bool:
    return packet.get("type") == packet_type


def get_string(packet: Packet, key: str) -> str | None:
    value = packet.get(key)
    return value if isinstance(value, str) else None


def string_arguments(arguments: list) -> CommandArguments:
    """Keep string elements in place, leaving None where anything else was."""
    return [arg if isinstance(arg, str) else None for arg in arguments]


class PacketDispatcher:

    def __init__(
        self,
        session: GameSession,
        lifecycle: ConnectionLifecycle,
        packets: PacketRegistry,
        commands: CommandRegistry,
    ):
        self.session = session
        self.lifecycle = lifecycle
        self.packets = packets
        self.commands = commands

    def handle_read(self, handle: ConnectionHandle, data: bytes | None) -> bool:
        """Process one read from ``handle``.

        ``data`` is None when the read itself failed. Returns False when the
        connection was torn down and should not be read from again.
        """
        slot = self.session.players.find_slot_by_connection(handle)
        if slot == NOT_FOUND:
            logger.warning(f"Read from connection {handle} with no assigned player")
            return False

        player = self.session.players[slot]
        should_broadcast = ConnectionLifecycle.should_broadcast_leave(player.stage)

        if data is None or len(data) >= self.session.config.input_max:
            logger.info(f"Read error from player {slot}")
            self.lifecycle.disconnect(slot, should_broadcast)
            return False

        if len(data) == 0:
            logger.info(f"Received EOF from player {slot}")
            self.lifecycle.disconnect(slot, should_broadcast)
            return False

        self.handle_line(slot, data.decode("utf-8", errors="replace"))
        return True

    def handle_line(self, slot: SlotID, text: str) -> None:
        text = strip_line(text)
        logger.debug(f"{slot}: {text}")

        packet = parse_packet(text)
        if packet is None:
            logger.info(f"Player {slot} sent invalid JSON")
            return

        packet_type = packet.get("type")
        if isinstance(packet_type, str) and self.packets.handle_packet(slot, packet_type, packet):
            return

        stage = self.session.players[slot].stage
        if stage == PlayerStage.NAMING:
            self.handle_naming(slot, packet)
        elif stage == PlayerStage.LOBBY:
            self.handle_lobby(slot, packet)
        # MAIN and WAITING are handled entirely by the packet handlers

    def handle_naming(self, slot: SlotID, packet: Packet) -> None:
        if not is_type(packet, PacketTypes.Name):
            return

        name = get_string(packet, "name")
        if name is None:
            return

        session = self.session
        player = session.players[slot]
        if not is_valid_name(session, name, player.connection_handle):
            logger.debug(f"Player {slot} sent rejected name {name!r}")
            return

        player.name = name
        if session.stage == GameStage.LOBBY:
            player.stage = PlayerStage.LOBBY
            session.broadcast(
                messages.player_status(PlayerStatuses.Join, name),
                exclude=player.connection_handle,
            )
        else:
            # Named mid-round: sit out until the next round
            player.stage = PlayerStage.WAITING

        session.send(player, messages.greeting())
        logger.info(f"Player {slot} is now {name} ({player.stage.name})")
        session.callback.on_player_named(session, player)

    def handle_lobby(self, slot: SlotID, packet: Packet) -> None:
        if is_type(packet, PacketTypes.Message):
            self.handle_chat(slot, packet)
        elif is_type(packet, PacketTypes.Command):
            self.handle_command(slot, packet)

    def handle_chat(self, slot: SlotID, packet: Packet) -> None:
        message = get_string(packet, "message")
        if message is None:
            return

        # Blank messages are accepted but never relayed
        if not message.strip():
            return

        player = self.session.players[slot]
        self.session.broadcast(
            messages.chat(player.name, message),
            exclude=player.connection_handle,
        )

    def handle_command(self, slot: SlotID, packet: Packet) -> None:
        command = packet.get("command")
        arguments = packet.get("arguments")

        if not isinstance(command, str) or not isinstance(arguments, list):
            return

        self.commands.parse_command(slot, command, string_arguments(arguments))
