from __future__ import annotations

import argparse
import logging

from amongst.configurations import configuration_constants, server_config
from amongst.server import app


def player_count(value: str) -> int:
    players = int(value)
    if players < 2:
        raise argparse.ArgumentTypeError("a game needs room for at least 2 players")
    return players


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--port", type=int, default=4444, help="Port number for game clients"
    )
    parser.add_argument(
        "--admin-port", type=int, default=5702, help="Port number for the admin dashboard"
    )
    parser.add_argument(
        "--players", type=player_count, default=10, help="Maximum number of connected players"
    )
    parser.add_argument(
        "--no-admin", action="store_true", help="Do not serve the admin dashboard"
    )
    parser.add_argument("--debug", action="store_true", help="Log every inbound line")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> server_config.ServerConfig:
    min_players = min(configuration_constants.DEFAULT_MIN_PLAYERS, args.players)
    return (
        server_config.ServerConfig()
        .hosting(host="0.0.0.0", port=args.port, admin_port=args.admin_port)
        .game(num_players=args.players, min_players=min_players)
        .logs(level=logging.DEBUG if args.debug else logging.INFO)
        .admin(enabled=not args.no_admin)
    )


if __name__ == "__main__":
    app.run(build_config(parse_args()))
