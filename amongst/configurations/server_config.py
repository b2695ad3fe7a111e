from __future__ import annotations

import logging
import os

from amongst.configurations import configuration_constants
from amongst.utils.sentinels import NotProvided

logger = logging.getLogger(__name__)


class ServerConfig:
    def __init__(self):

        # Hosting
        self.host = "0.0.0.0"
        self.port = 4444
        self.admin_port = 5702

        # Game
        self.num_players: int = configuration_constants.DEFAULT_NUM_PLAYERS
        self.min_players: int = configuration_constants.DEFAULT_MIN_PLAYERS
        self.rooms: tuple[str, ...] = configuration_constants.DEFAULT_ROOMS
        self.spawn_room: str = configuration_constants.DEFAULT_ROOMS[0]
        self.max_name_length: int = configuration_constants.DEFAULT_MAX_NAME_LENGTH

        # Wire protocol
        self.input_max: int = configuration_constants.DEFAULT_INPUT_MAX

        # Logging
        self.log_file: str | None = "./amongst.log"
        self.log_level: int = logging.INFO

        # Admin dashboard
        self.admin_enabled: bool = True
        self.admin_password: str | None = None

    def hosting(
        self,
        host: str = NotProvided,
        port: int = NotProvided,
        admin_port: int = NotProvided,
    ) -> ServerConfig:
        if host is not NotProvided:
            self.host = host

        if port is not NotProvided:
            self.port = port

        if admin_port is not NotProvided:
            self.admin_port = admin_port

        return self

    def game(
        self,
        num_players: int = NotProvided,
        min_players: int = NotProvided,
        rooms: list[str] | tuple[str, ...] = NotProvided,
        spawn_room: str = NotProvided,
        max_name_length: int = NotProvided,
    ) -> ServerConfig:
        if num_players is not NotProvided:
            self.num_players = num_players

        if min_players is not NotProvided:
            self.min_players = min_players

        if rooms is not NotProvided:
            self.rooms = tuple(rooms)
            # Keep the spawn room valid unless one is passed explicitly
            if spawn_room is NotProvided and self.rooms:
                self.spawn_room = self.rooms[0]

        if spawn_room is not NotProvided:
            self.spawn_room = spawn_room

        if max_name_length is not NotProvided:
            self.max_name_length = max_name_length

        return self

    def protocol(self, input_max: int = NotProvided) -> ServerConfig:
        if input_max is not NotProvided:
            self.input_max = input_max

        return self

    def logs(
        self,
        log_file: str | None = NotProvided,
        level: int = NotProvided,
    ) -> ServerConfig:
        if log_file is not NotProvided:
            self.log_file = log_file

        if level is not NotProvided:
            self.log_level = level

        return self

    def admin(
        self,
        enabled: bool = NotProvided,
        password: str | None = None,
    ) -> ServerConfig:
        """
        Configure the admin dashboard.

        The password can be provided directly or via the ADMIN_PASSWORD
        environment variable. Without a password the dashboard refuses
        every login.

        Args:
            enabled: Serve the admin app next to the game server.
            password: Dashboard password. Falls back to ADMIN_PASSWORD.
        """
        if enabled is not NotProvided:
            self.admin_enabled = enabled

        resolved_password = password or os.environ.get("ADMIN_PASSWORD")
        if resolved_password:
            self.admin_password = resolved_password
        elif self.admin_enabled:
            logger.warning(
                "No admin password set. Set ADMIN_PASSWORD to enable dashboard logins."
            )

        return self

    def validate(self) -> ServerConfig:
        """Raise ValueError when the settings cannot run a game."""
        if not isinstance(self.num_players, int) or self.num_players < 1:
            raise ValueError("num_players must be a positive integer")

        if not isinstance(self.min_players, int) or self.min_players < 2:
            raise ValueError("min_players must be an integer of at least 2")

        if self.min_players > self.num_players:
            raise ValueError(
                f"min_players ({self.min_players}) must not exceed "
                f"num_players ({self.num_players})"
            )

        if not self.rooms:
            raise ValueError("at least one room is required")

        if self.spawn_room not in self.rooms:
            raise ValueError(
                f"spawn_room {self.spawn_room!r} is not one of the rooms {list(self.rooms)}"
            )

        # Room for at least "{}" and the line terminator
        if not isinstance(self.input_max, int) or self.input_max < 4:
            raise ValueError("input_max must be an integer of at least 4")

        if not isinstance(self.max_name_length, int) or self.max_name_length < 1:
            raise ValueError("max_name_length must be a positive integer")

        return self
