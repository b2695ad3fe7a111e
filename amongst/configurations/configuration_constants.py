from __future__ import annotations

import dataclasses
from enum import Enum, auto


class PlayerStage(Enum):
    """Per-connection onboarding stages.

    - NAMING: Connected, has not picked a name yet
    - LOBBY: Named and waiting for a round to start
    - MAIN: Playing in the current round
    - WAITING: Named while a round was in progress, waits for the next one
    """
    NAMING = auto()
    LOBBY = auto()
    MAIN = auto()
    WAITING = auto()


class VitalState(Enum):
    ALIVE = auto()
    DEAD = auto()


class GameStage(Enum):
    LOBBY = auto()
    IN_PROGRESS = auto()


class KillError(Enum):
    """Reasons a kill can be refused. Values are sent to the client as-is."""
    INVALID_PLAYER = "invalid-player"
    NOT_IMPOSTOR = "not-impostor"
    NOT_IN_ROOM = "not-in-room"


@dataclasses.dataclass(frozen=True)
class PacketTypes:
    Name = "name"
    Message = "message"
    Command = "command"
    Kill = "kill"
    Move = "move"


@dataclasses.dataclass(frozen=True)
class OutboundTypes:
    Info = "info"
    Greeting = "greeting"
    GameStatus = "game-status"
    PlayerStatus = "player-status"
    Chat = "chat"
    Death = "death"
    Kill = "kill"
    Body = "body"
    Location = "location"
    Role = "role"
    Command = "command"


@dataclasses.dataclass(frozen=True)
class GameStatuses:
    Full = "full"
    InProgress = "in-progress"


@dataclasses.dataclass(frozen=True)
class PlayerStatuses:
    Join = "join"
    Leave = "leave"


@dataclasses.dataclass(frozen=True)
class DeathCauses:
    Kill = "kill"


@dataclasses.dataclass(frozen=True)
class CommandStatuses:
    Ok = "ok"
    Error = "error"
    Unknown = "unknown"


# Returned by slot lookups that found nothing
NOT_FOUND = -1

PROTOCOL_VERSION = 1

DEFAULT_NUM_PLAYERS = 10
DEFAULT_MIN_PLAYERS = 4
DEFAULT_INPUT_MAX = 1024
DEFAULT_MAX_NAME_LENGTH = 16
DEFAULT_ROOMS = (
    "cafeteria",
    "admin",
    "electrical",
    "medbay",
    "navigation",
    "reactor",
    "storage",
)
