from __future__ import annotations

from amongst.server.session import GameSession
from amongst.utils.typing import ConnectionHandle


def is_valid_name(session: GameSession, name: str, handle: ConnectionHandle) -> bool:
    """Check that ``name`` is legal and not taken by another player.

    The sender's own slot is ignored so re-sending a current name is fine.
    """
    if not isinstance(name, str):
        return False

    stripped = name.strip()
    if not stripped or stripped != name:
        return False

    if len(name) > session.config.max_name_length:
        return False

    if not name.isprintable():
        return False

    for player in session.players.named():
        if player.connection_handle != handle and player.name == name:
            return False

    return True
