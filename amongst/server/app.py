from __future__ import annotations

import logging
import secrets

import eventlet
import flask
import flask_socketio
from flask_login import LoginManager

from amongst.configurations.server_config import ServerConfig
from amongst.server.admin import AdminUser, admin_bp
from amongst.server.admin.namespace import (AdminBroadcastCallback,
                                            AdminNamespace)
from amongst.server.commands import CommandRegistry
from amongst.server.dispatcher import PacketDispatcher
from amongst.server.lifecycle import ConnectionLifecycle
from amongst.server.packet_handlers import default_registry
from amongst.server.session import (GameSession, MultiCallback,
                                    SessionCallback, Transport)
from amongst.server.transport import LineServer


def setup_logger(name, log_file, level=logging.INFO):
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Console handler shares the file formatter
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger


logger = logging.getLogger(__name__)

socketio = flask_socketio.SocketIO(cors_allowed_origins="*")


def build_session(
    config: ServerConfig,
    transport: Transport,
    callbacks: list[SessionCallback] | None = None,
) -> tuple[GameSession, ConnectionLifecycle, PacketDispatcher]:
    """Wire a session with its lifecycle and dispatcher around ``transport``."""
    callback = MultiCallback(callbacks) if callbacks else None
    session = GameSession(config, transport, callback=callback)
    lifecycle = ConnectionLifecycle(session)
    dispatcher = PacketDispatcher(
        session,
        lifecycle,
        packets=default_registry(session),
        commands=CommandRegistry(session),
    )
    return session, lifecycle, dispatcher


def create_app(session: GameSession, config: ServerConfig) -> flask.Flask:
    app = flask.Flask(__name__)
    app.config["SECRET_KEY"] = secrets.token_urlsafe(32)
    app.config["ADMIN_PASSWORD"] = config.admin_password
    app.config["GAME_SESSION"] = session

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        if user_id == 'admin':
            return AdminUser(user_id)
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return flask.jsonify({'success': False, 'message': 'Login required'}), 401

    app.register_blueprint(admin_bp)
    return app


def run(config: ServerConfig):
    config.validate()
    setup_logger("amongst", config.log_file, level=config.log_level)

    server = LineServer(config)
    callbacks = [AdminBroadcastCallback(socketio)] if config.admin_enabled else []
    session, lifecycle, dispatcher = build_session(config, server, callbacks)
    server.attach(lifecycle, dispatcher)
    server.listen()

    print("\n" + "=" * 70)
    print(f"Game server for {config.num_players} players")
    print("=" * 70)
    print(f"  Players: tcp://{config.host}:{config.port}")
    if config.admin_enabled:
        print(f"  Admin:   http://{config.host}:{config.admin_port}/admin/state")
    print("=" * 70 + "\n")

    if not config.admin_enabled:
        server.serve_forever()
        return

    eventlet.spawn_n(server.serve_forever)

    app = create_app(session, config)
    socketio.init_app(app, async_mode="eventlet")
    socketio.on_namespace(AdminNamespace('/admin', session=session))
    logger.info("Admin namespace registered on /admin")

    socketio.run(app, host=config.host, port=config.admin_port, log_output=False)
