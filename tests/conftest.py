"""
Shared pytest fixtures for amongst tests.

Provides:
- config / transport / session: a small game (4 slots, 2 players to start)
- lifecycle / commands / dispatcher: the core wired around a RecordingTransport
- connect / name_player / start_round: bring players into a given stage
"""

from __future__ import annotations

import random

import pytest

from amongst.configurations.server_config import ServerConfig
from amongst.server.commands import CommandRegistry
from amongst.server.dispatcher import PacketDispatcher
from amongst.server.lifecycle import ConnectionLifecycle
from amongst.server.packet_handlers import default_registry
from amongst.server.session import GameSession
from tests.fixtures.protocol_helpers import RecordingTransport, line


@pytest.fixture()
def config():
    return (
        ServerConfig()
        .game(num_players=4, min_players=2, rooms=["cafeteria", "electrical", "medbay"])
        .protocol(input_max=256)
        .logs(log_file=None)
    )


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def session(config, transport):
    return GameSession(config, transport)


@pytest.fixture()
def lifecycle(session):
    return ConnectionLifecycle(session)


@pytest.fixture()
def commands(session):
    return CommandRegistry(session, rng=random.Random(0))


@pytest.fixture()
def dispatcher(session, lifecycle, commands):
    return PacketDispatcher(
        session,
        lifecycle,
        packets=default_registry(session),
        commands=commands,
    )


@pytest.fixture()
def connect(lifecycle):
    """Welcome a connection and return its slot."""

    def _connect(handle):
        return lifecycle.welcome(handle)

    return _connect


@pytest.fixture()
def name_player(connect, dispatcher):
    """Welcome ``handle`` and complete naming. Returns the slot."""

    def _name_player(handle, name):
        slot = connect(handle)
        assert dispatcher.handle_read(handle, line({"type": "name", "name": name}))
        return slot

    return _name_player


@pytest.fixture()
def start_round(dispatcher):
    """Send the start command from ``handle``."""

    def _start_round(handle):
        packet = {"type": "command", "command": "start", "arguments": []}
        assert dispatcher.handle_read(handle, line(packet))

    return _start_round
