"""Unit tests for the TCP line transport, driven with in-memory sockets."""

from __future__ import annotations

import io
import json
from unittest.mock import MagicMock

from amongst.configurations.configuration_constants import PlayerStage
from amongst.configurations.server_config import ServerConfig
from amongst.server import messages
from amongst.server.app import build_session
from amongst.server.transport import LineServer, read_line


class FakeSocket:
    def __init__(self, incoming: bytes = b""):
        self.incoming = incoming
        self.outgoing = bytearray()
        self.closed = False

    def makefile(self, mode):
        return io.BytesIO(self.incoming)

    def sendall(self, data):
        self.outgoing.extend(data)

    def close(self):
        self.closed = True

    def received(self) -> list[dict]:
        return [json.loads(raw) for raw in self.outgoing.decode("utf-8").splitlines()]


def _server(num_players=4, input_max=64):
    config = (
        ServerConfig()
        .game(num_players=num_players, min_players=2)
        .protocol(input_max=input_max)
        .logs(log_file=None)
    )
    server = LineServer(config)
    session, lifecycle, dispatcher = build_session(config, server)
    server.attach(lifecycle, dispatcher)
    return server, session


class TestReadLine:

    def test_reads_one_line(self):
        reader = io.BytesIO(b'{"a": 1}\n{"b": 2}\n')
        assert read_line(reader, 64) == b'{"a": 1}\n'
        assert read_line(reader, 64) == b'{"b": 2}\n'
        assert read_line(reader, 64) == b""

    def test_long_line_fills_limit(self):
        reader = io.BytesIO(b"x" * 100 + b"\n")
        assert len(read_line(reader, 64)) == 64

    def test_read_error_returns_none(self):
        reader = MagicMock()
        reader.readline.side_effect = ConnectionResetError("reset")
        assert read_line(reader, 64) is None


class TestEncode:

    def test_one_compact_line(self):
        data = messages.encode(messages.chat("Red", "hi"))
        assert data.endswith(b"\n")
        assert data.count(b"\n") == 1
        assert json.loads(data) == {"type": "chat", "player": "Red", "message": "hi"}


class TestLineServer:

    def test_connection_session_until_eof(self):
        server, session = _server()
        sock = FakeSocket(b'{"type": "name", "name": "Red"}\n')

        server.handle_connection(sock, ("127.0.0.1", 5000))

        received = [m["type"] for m in sock.received()]
        assert received == ["info", "greeting"]
        assert sock.closed
        assert session.players.occupied() == []
        assert server.connections == {}

    def test_over_length_line_tears_down(self):
        server, session = _server(input_max=32)
        sock = FakeSocket(b"x" * 40 + b'\n{"type": "name", "name": "Red"}\n')

        server.handle_connection(sock, ("127.0.0.1", 5000))

        assert [m["type"] for m in sock.received()] == ["info"]
        assert sock.closed

    def test_full_server_rejects(self):
        server, session = _server(num_players=1)
        session.players.assign(0, "other")
        sock = FakeSocket(b'{"type": "name", "name": "Red"}\n')

        server.handle_connection(sock, ("127.0.0.1", 5000))

        assert sock.received() == [
            messages.info(),
            messages.game_status("full"),
        ]
        assert sock.closed
        assert session.players.find_slot_by_connection("other") == 0

    def test_send_to_unknown_handle_is_ignored(self):
        server, _ = _server()
        server.send(99, messages.greeting())
        server.close(99)

    def test_send_failure_is_swallowed(self):
        server, _ = _server()
        sock = MagicMock()
        sock.sendall.side_effect = BrokenPipeError("gone")
        server.connections[1] = sock

        server.send(1, messages.greeting())

        sock.sendall.assert_called_once()

    def test_nested_line_keeps_connection(self):
        server, session = _server(input_max=8192)
        sock = FakeSocket(b"[" * 5000 + b'\n{"type": "name", "name": "Red"}\n')

        server.handle_connection(sock, ("127.0.0.1", 5000))

        assert [m["type"] for m in sock.received()] == ["info", "greeting"]
        assert session.players.occupied() == []

    def test_handler_error_releases_slot(self):
        server, session = _server()
        server.dispatcher.handle_read = MagicMock(side_effect=RuntimeError("boom"))
        sock = FakeSocket(b'{"type": "name", "name": "Red"}\n')

        server.handle_connection(sock, ("127.0.0.1", 5000))

        assert session.players.occupied() == []
        assert sock.closed
        assert server.connections == {}

    def test_released_named_player_announces_leave(self):
        server, session = _server()
        watcher = FakeSocket()
        server.connections["watcher"] = watcher
        session.players.assign(1, "watcher")
        session.players[1].name = "Blue"

        def handle_read(handle, data):
            slot = session.players.find_slot_by_connection(handle)
            session.players[slot].name = "Red"
            session.players[slot].stage = PlayerStage.LOBBY
            raise RuntimeError("boom")

        server.dispatcher.handle_read = handle_read
        server.handle_connection(FakeSocket(b"anything\n"), ("127.0.0.1", 5000))

        assert session.players.find_slot_by_connection("watcher") == 1
        assert watcher.received()[-1] == messages.player_status("leave", "Red")
