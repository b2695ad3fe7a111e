"""TCP transport for the line protocol.

Every connection gets its own green thread, but all calls into the session
go through one semaphore so only a single line is ever being processed.
"""

from __future__ import annotations

import itertools
import logging
import socket
import typing

import eventlet
import eventlet.semaphore

from amongst.configurations.configuration_constants import NOT_FOUND
from amongst.configurations.server_config import ServerConfig
from amongst.server import messages
from amongst.server.lifecycle import ConnectionLifecycle
from amongst.server.session import Transport
from amongst.utils.typing import ConnectionHandle

if typing.TYPE_CHECKING:
    from amongst.server.dispatcher import PacketDispatcher

logger = logging.getLogger(__name__)


def read_line(reader: typing.BinaryIO, input_max: int) -> bytes | None:
    """Read one line of at most ``input_max`` bytes.

    Returns b"" at end of stream and None when the read failed. A result of
    ``input_max`` bytes means the line was too long.
    """
    try:
        return reader.readline(input_max)
    except (OSError, ValueError) as e:
        logger.info(f"Read failed: {e}")
        return None


class LineServer(Transport):
    """Accepts TCP clients and feeds their lines to the dispatcher."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.lock = eventlet.semaphore.Semaphore()
        self.connections: dict[ConnectionHandle, socket.socket] = {}
        self._handles = itertools.count(1)
        self.lifecycle: ConnectionLifecycle | None = None
        self.dispatcher: PacketDispatcher | None = None
        self.listener = None

    def attach(self, lifecycle: ConnectionLifecycle, dispatcher: PacketDispatcher) -> LineServer:
        self.lifecycle = lifecycle
        self.dispatcher = dispatcher
        return self

    def send(self, handle: ConnectionHandle, payload: dict) -> None:
        sock = self.connections.get(handle)
        if sock is None:
            return
        try:
            sock.sendall(messages.encode(payload))
        except OSError as e:
            # The reader side notices the broken connection and tears it down
            logger.warning(f"Send to connection {handle} failed: {e}")

    def close(self, handle: ConnectionHandle) -> None:
        sock = self.connections.pop(handle, None)
        if sock is None:
            return
        try:
            sock.close()
        except OSError as e:
            logger.debug(f"Closing connection {handle} failed: {e}")

    def listen(self):
        self.listener = eventlet.listen((self.config.host, self.config.port))
        logger.info(f"Game server listening on {self.config.host}:{self.config.port}")
        return self.listener

    def serve_forever(self) -> None:
        assert self.lifecycle is not None and self.dispatcher is not None, (
            "attach() must be called before serving"
        )
        listener = self.listener or self.listen()
        while True:
            sock, address = listener.accept()
            eventlet.spawn_n(self.handle_connection, sock, address)

    def handle_connection(self, sock: socket.socket, address) -> None:
        handle = next(self._handles)
        self.connections[handle] = sock
        logger.info(f"Connection {handle} from {address}")

        with self.lock:
            slot = self.lifecycle.welcome(handle)
        if slot == NOT_FOUND:
            return

        reader = sock.makefile("rb")
        try:
            while True:
                data = read_line(reader, self.config.input_max)
                with self.lock:
                    if not self.dispatcher.handle_read(handle, data):
                        break
        except Exception:
            logger.exception(f"Error while handling connection {handle}")
        finally:
            reader.close()
            self.close(handle)
            with self.lock:
                self.release(handle)

    def release(self, handle: ConnectionHandle) -> None:
        """Free the slot still held by ``handle`` after its reader stopped."""
        slot = self.lifecycle.session.players.find_slot_by_connection(handle)
        if slot == NOT_FOUND:
            return

        player = self.lifecycle.session.players[slot]
        logger.warning(f"Releasing player {slot} left behind by connection {handle}")
        self.lifecycle.disconnect(slot, ConnectionLifecycle.should_broadcast_leave(player.stage))
