"""Login and match setup.

    -> <version> login <username> <password>
    <- = login
    -> new_game <role> rated fischer 900000 10 11
    <- = new_game game <match_id> ...
    <- ... challenge_requested ...
    -> join_game <match_id>
"""

from tafl_client.copenhagen import Role
from tafl_client.errors import ProtocolViolation
from tafl_client.logger import get_logger
from tafl_client.transport import Connection, token_at

logger = get_logger(__name__)

LOGIN_ACK = "= login"


def login(connection: Connection, version_id: str, username: str, password: str) -> None:
    connection.send(f"{version_id} login {username} {password}")

    reply = connection.recv_line()
    if reply != LOGIN_ACK:
        raise ProtocolViolation(LOGIN_ACK, reply)
    logger.info(f"Logged in as {username}")


def create_match(connection: Connection, role: Role, time_control: str) -> str:
    """Create a match and return the identifier the server assigned.

    Lines whose second token is not ``new_game`` are discarded.
    """
    connection.send(f"new_game {role} {time_control}")

    while True:
        # "= new_game game GAME_ID ai-00 _ rated fischer 900000 10 _ false {}"
        line = connection.recv_line()
        tokens = line.split()
        if token_at(tokens, 1) != "new_game":
            continue

        logger.info(f"{tokens}")
        if tokens[0] == "?" or len(tokens) < 4:
            raise ProtocolViolation("= new_game game <match_id> ...", line)
        return tokens[3]


def await_challenger(connection: Connection, match_id: str) -> None:
    """Wait for an opponent's challenge, then accept it."""
    while True:
        tokens = connection.recv_line().split()
        if token_at(tokens, 1) == "challenge_requested":
            logger.info(f"{tokens}")
            break

    connection.send(f"join_game {match_id}")


def join_pending_match(connection: Connection, match_id: str) -> None:
    connection.send(f"join_game_pending {match_id}")
