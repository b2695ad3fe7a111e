from __future__ import annotations

import logging

from amongst.configurations.configuration_constants import (DeathCauses,
                                                            KillError,
                                                            PlayerStage,
                                                            VitalState)
from amongst.server import messages
from amongst.server.player_table import Player
from amongst.server.session import GameSession

logger = logging.getLogger(__name__)


def kill(session: GameSession, actor: Player, target: Player) -> KillError | None:
    """Have ``actor`` eliminate ``target``.

    Checks run in a fixed order and the first failure is returned; nothing is
    changed unless all of them pass. Returns None on success.
    """
    # A dead target stays in MAIN, so liveness is checked alongside the stage
    if target.stage != PlayerStage.MAIN or not target.is_alive:
        return KillError.INVALID_PLAYER

    if not actor.is_impostor or target.is_impostor:
        return KillError.NOT_IMPOSTOR

    if actor.location != target.location:
        return KillError.NOT_IN_ROOM

    target.vital_state = VitalState.DEAD
    session.send(target, messages.death(DeathCauses.Kill))
    logger.info(f"{actor.name} killed {target.name} in {target.location}")

    notify_kill(session, actor, target)
    return None


def notify_kill(session: GameSession, actor: Player, target: Player) -> None:
    """Tell everyone in the target's room about the body, then run the hook."""
    session.broadcast_to_room(
        messages.body(target.name, target.location),
        target.location,
        exclude=target.connection_handle,
    )
    session.callback.on_kill(session, actor, target)
