"""
Admin SocketIO namespace for real-time dashboard updates.

Kept apart from the game protocol entirely: players talk line-delimited
JSON over TCP, only the dashboard uses SocketIO.
"""
from __future__ import annotations

import logging

from flask_login import current_user
from flask_socketio import Namespace, emit, join_room, leave_room

from amongst.server.session import SessionCallback

logger = logging.getLogger(__name__)

ADMIN_ROOM = 'admin_broadcast'


class AdminNamespace(Namespace):
    """
    Handles all admin client connections on /admin namespace.

    Requires an authenticated admin session before allowing connection.
    """

    def __init__(self, namespace, session=None):
        super().__init__(namespace)
        self.session = session
        logger.info(f"AdminNamespace initialized on {namespace}")

    def on_connect(self):
        if not current_user.is_authenticated:
            logger.warning("Unauthenticated admin connection attempt rejected")
            return False

        logger.info(f"Admin connected: {current_user.get_id()}")
        join_room(ADMIN_ROOM)
        emit('admin_connected', {'status': 'connected'})
        return True

    def on_disconnect(self):
        logger.info("Admin disconnected from /admin namespace")
        leave_room(ADMIN_ROOM)

    def on_request_state(self):
        """Admin requests current game state snapshot."""
        if self.session is None:
            emit('state_update', {'players': [], 'message': 'No game session'})
            return
        emit('state_update', self.session.snapshot())


class AdminBroadcastCallback(SessionCallback):
    """Pushes a fresh snapshot to connected dashboards on every table change."""

    def __init__(self, socketio, namespace='/admin', **kwargs) -> None:
        super().__init__(**kwargs)
        self.socketio = socketio
        self.namespace = namespace

    def _push(self, session):
        self.socketio.emit(
            'state_update',
            session.snapshot(),
            to=ADMIN_ROOM,
            namespace=self.namespace,
        )

    def on_player_welcome(self, session, player):
        self._push(session)

    def on_player_named(self, session, player):
        self._push(session)

    def on_player_disconnect(self, session, player):
        self._push(session)

    def on_round_start(self, session):
        self._push(session)

    def on_kill(self, session, actor, target):
        self._push(session)
