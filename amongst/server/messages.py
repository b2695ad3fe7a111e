"""Outbound message builders.

Every message is a flat JSON object with a ``type`` field, written to the
wire as one compact line terminated by ``\\n``.
"""

from __future__ import annotations

import json

from amongst.configurations.configuration_constants import (PROTOCOL_VERSION,
                                                            KillError,
                                                            OutboundTypes)


def encode(payload: dict) -> bytes:
    return (json.dumps(payload, separators=(",", ":")) + "\n").encode("utf-8")


def info() -> dict:
    return {
        "type": OutboundTypes.Info,
        "protocol": PROTOCOL_VERSION,
        "message": "Welcome! Send your name to join the game.",
    }


def greeting() -> dict:
    return {"type": OutboundTypes.Greeting, "message": "Welcome aboard!"}


def game_status(status: str) -> dict:
    return {"type": OutboundTypes.GameStatus, "status": status}


def player_status(status: str, name: str) -> dict:
    return {"type": OutboundTypes.PlayerStatus, "status": status, "name": name}


def chat(name: str, message: str) -> dict:
    return {"type": OutboundTypes.Chat, "player": name, "message": message}


def death(cause: str) -> dict:
    return {"type": OutboundTypes.Death, "cause": cause}


def kill_result(error: KillError | None) -> dict:
    if error is None:
        return {"type": OutboundTypes.Kill, "success": True}
    return {"type": OutboundTypes.Kill, "success": False, "error": error.value}


def body(name: str, location: str | None) -> dict:
    return {"type": OutboundTypes.Body, "name": name, "location": location}


def location(room: str) -> dict:
    return {"type": OutboundTypes.Location, "location": room}


def role(is_impostor: bool) -> dict:
    return {
        "type": OutboundTypes.Role,
        "role": "impostor" if is_impostor else "crewmate",
    }


def command_result(command: str, status: str, message: str = "") -> dict:
    return {
        "type": OutboundTypes.Command,
        "command": command,
        "status": status,
        "message": message,
    }
