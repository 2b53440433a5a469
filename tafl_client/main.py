#!/usr/bin/env python3
"""A Copenhagen hnefatafl AI client that connects to an HTP server."""

import argparse
import sys

from tafl_client.config import SessionConfig, client_config
from tafl_client.copenhagen import Role
from tafl_client.errors import TaflClientError
from tafl_client.logger import get_logger, setup_logger
from tafl_client.players import FALLBACK_TYPES, PLAYER_TYPES
from tafl_client.session import TaflClient

logger = get_logger(__name__)


def playing_role(value: str) -> str:
    """argparse type for --role: attacker or defender, never roleless."""
    try:
        role = Role.from_str(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None
    if role is Role.ROLELESS:
        raise argparse.ArgumentTypeError("you can't be roleless")
    return str(role)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--username", required=True, help="account name (sent as ai-<username>)")
    parser.add_argument("--password", default="", help="account password")
    parser.add_argument("--role", type=playing_role, required=True, help="attacker or defender")
    parser.add_argument(
        "--host", default=client_config.DEFAULT_HOST, help="connect to the HTP server at host"
    )
    parser.add_argument("--port", type=int, default=client_config.PORT, help="server port")
    parser.add_argument("--join-game", type=int, default=None, help="join game with id")
    parser.add_argument(
        "--games",
        type=int,
        default=0,
        help="number of games to play back-to-back (0 = until disconnected)",
    )
    parser.add_argument(
        "--systemd",
        action="store_true",
        help="whether the application is being run by systemd",
    )
    parser.add_argument(
        "--version-id",
        default=client_config.VERSION_ID,
        help="protocol version sent with login",
    )
    parser.add_argument("--player", choices=PLAYER_TYPES, default="rule")
    parser.add_argument("--fallback", choices=FALLBACK_TYPES, default="mcts")
    return parser


def build_session_config(args: argparse.Namespace) -> SessionConfig:
    return SessionConfig(
        username=args.username,
        role=args.role,
        password=args.password,
        host=args.host,
        port=args.port,
        version_id=args.version_id,
        join_game=args.join_game,
        games=args.games,
        systemd=args.systemd,
        player=args.player,
        fallback=args.fallback,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = build_session_config(args)

    # エントリーポイントでロギングを初期化
    setup_logger(systemd=config.systemd)
    logger.info(f"Connecting to {config.address} as {config.login_name} ({config.role})")

    client = TaflClient(config)
    try:
        games = client.run()
    except (TaflClientError, OSError) as error:
        logger.error(f"{type(error).__name__}: {error}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1

    logger.info(f"Played {games} game(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
