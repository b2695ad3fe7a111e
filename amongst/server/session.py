from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from amongst.configurations.configuration_constants import GameStage
from amongst.configurations.server_config import ServerConfig
from amongst.server.player_table import Player, PlayerTable
from amongst.utils.typing import ConnectionHandle

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Outbound side of the connection layer, addressed by connection handle."""

    @abstractmethod
    def send(self, handle: ConnectionHandle, payload: dict) -> None:
        """Write one message to a connection. Must not raise on a dead peer."""

    @abstractmethod
    def close(self, handle: ConnectionHandle) -> None:
        """Close a connection. Closing an unknown handle is a no-op."""


class SessionCallback:
    """Base callback interface for session lifecycle hooks."""

    def __init__(self, **kwargs) -> None:
        pass

    def on_player_welcome(self, session: GameSession, player: Player):
        pass

    def on_player_named(self, session: GameSession, player: Player):
        pass

    def on_player_disconnect(self, session: GameSession, player: Player):
        pass

    def on_round_start(self, session: GameSession):
        pass

    def on_kill(self, session: GameSession, actor: Player, target: Player):
        """Called after a kill has been applied and the target notified."""
        pass

    def check_win_condition(self, session: GameSession):
        """Called whenever a player leaves. Round scoring lives here."""
        pass


class MultiCallback(SessionCallback):
    """Aggregates multiple callbacks into a single callback interface."""

    def __init__(self, callbacks: list[SessionCallback], **kwargs) -> None:
        self.callbacks = list(callbacks)

    def on_player_welcome(self, session: GameSession, player: Player):
        for callback in self.callbacks:
            callback.on_player_welcome(session, player)

    def on_player_named(self, session: GameSession, player: Player):
        for callback in self.callbacks:
            callback.on_player_named(session, player)

    def on_player_disconnect(self, session: GameSession, player: Player):
        for callback in self.callbacks:
            callback.on_player_disconnect(session, player)

    def on_round_start(self, session: GameSession):
        for callback in self.callbacks:
            callback.on_round_start(session)

    def on_kill(self, session: GameSession, actor: Player, target: Player):
        for callback in self.callbacks:
            callback.on_kill(session, actor, target)

    def check_win_condition(self, session: GameSession):
        for callback in self.callbacks:
            callback.check_win_condition(session)


class GameSession:
    """The single game a server process hosts.

    Starts with an empty player table in the LOBBY stage. Components receive
    the session explicitly; nothing reads it from module globals.
    """

    def __init__(
        self,
        config: ServerConfig,
        transport: Transport,
        callback: SessionCallback | None = None,
    ):
        self.config = config
        self.transport = transport
        self.callback = callback or SessionCallback()
        self.stage = GameStage.LOBBY
        self.players = PlayerTable(config.num_players)

    def set_stage(self, stage: GameStage) -> None:
        if stage == self.stage:
            return
        old_stage = self.stage
        self.stage = stage
        logger.info(f"Game stage: {old_stage.name} -> {stage.name}")

    def send(self, player: Player, payload: dict) -> None:
        if player.connection_handle is None:
            logger.debug(f"Dropping {payload.get('type')} for free slot {player.slot}")
            return
        self.transport.send(player.connection_handle, payload)

    def broadcast(
        self,
        payload: dict,
        exclude: ConnectionHandle | None = None,
    ) -> None:
        """Send ``payload`` to every connected player except ``exclude``."""
        for player in self.players.occupied():
            if exclude is not None and player.connection_handle == exclude:
                continue
            self.transport.send(player.connection_handle, payload)

    def broadcast_to_room(
        self,
        payload: dict,
        location: str | None,
        exclude: ConnectionHandle | None = None,
    ) -> None:
        for player in self.players.occupied():
            if player.location != location:
                continue
            if exclude is not None and player.connection_handle == exclude:
                continue
            self.transport.send(player.connection_handle, payload)

    def snapshot(self) -> dict:
        occupied = self.players.occupied()
        return {
            "stage": self.stage.name.lower(),
            "capacity": self.players.capacity,
            "players": [p.to_dict() for p in occupied],
            "summary": {
                "connected": len(occupied),
                "named": len(self.players.named()),
                "alive": len([p for p in occupied if p.name and p.is_alive]),
            },
        }
