"""Protocol loop for one match, and the client that plays match after match."""

from typing import Callable

from tafl_client.config import SessionConfig, client_config
from tafl_client.copenhagen import Move, Resignation, Role, Status, parse_play
from tafl_client.decision import MovePipeline
from tafl_client.errors import (
    InternalConsistencyError,
    InvalidPlay,
    ProposerExhausted,
    ProtocolViolation,
)
from tafl_client.handshake import await_challenger, create_match, join_pending_match, login
from tafl_client.logger import get_logger
from tafl_client.players import BasePlayer, create_fallback, create_player
from tafl_client.tracker import DualModelTracker
from tafl_client.transport import Connection, token_at

logger = get_logger(__name__)


class GameSession:
    """Drives one match until it ends.

    Lines are classified by fixed token positions:

        game <id> generate_move <role>      our turn
        game <id> play <role> <from> <to>   opponent's move
        ... game_over ...                   match concluded

    Anything else is discarded.
    """

    def __init__(
        self,
        connection: Connection,
        match_id: str,
        role: Role,
        player: BasePlayer,
        fallback: BasePlayer,
    ):
        self.connection = connection
        self.match_id = match_id
        self.role = role
        self.tracker = DualModelTracker(role)
        self.pipeline = MovePipeline(self.tracker, player, fallback)
        self.finished = False

    def run(self) -> Status:
        """Read lines until the match is over.

        Raises:
            ConnectionClosed: the server went away mid-match.
            ProposerExhausted: a proposer produced nothing.
        """
        logger.debug(f"\n{self.tracker.primary}")
        while not self.finished:
            self.handle_line(self.connection.recv_line())
        return self.tracker.status()

    def handle_line(self, line: str) -> None:
        tokens = line.split()
        try:
            if token_at(tokens, 2) == "generate_move":
                self._on_generate_move(tokens)
            elif token_at(tokens, 2) == "play":
                self._on_play(tokens)
            elif "game_over" in (token_at(tokens, 1), token_at(tokens, 2)):
                self._on_game_over(tokens)
        except (InvalidPlay, InternalConsistencyError) as error:
            logger.error(f"{type(error).__name__}: {error}")
            self._resign()
        except ProposerExhausted:
            # resign while the connection is still open, then stop the client
            self._resign()
            raise

    def _is_this_match(self, tokens) -> bool:
        if tokens[1] != self.match_id:
            logger.debug(f"ignoring a line for game {tokens[1]}")
            return False
        return True

    def _on_generate_move(self, tokens) -> None:
        if not self._is_this_match(tokens):
            return
        side = token_at(tokens, 3)
        if side is not None and side != str(self.role):
            return
        if not self.tracker.is_ongoing():
            logger.warning(f"move requested after the game ended ({self.tracker.status()})")
            return

        move = self.pipeline.decide()
        self._report(move)
        logger.debug(f"\n{self.tracker.primary}")

        if not self.tracker.is_ongoing():
            self.finished = True

    def _on_play(self, tokens) -> None:
        if not self._is_this_match(tokens):
            return
        try:
            move = parse_play(tokens[2:])
        except ValueError as error:
            raise ProtocolViolation("game <id> play <role> <from> <to>", " ".join(tokens)) from error

        if move.role is self.role:
            # echo of our own move
            return
        if not self.tracker.is_ongoing():
            logger.warning(f"ignoring {move}: the game already ended ({self.tracker.status()})")
            return

        self.tracker.apply_from_protocol(move)
        logger.debug(f"\n{self.tracker.primary}")

        if not self.tracker.is_ongoing():
            self.finished = True

    def _on_game_over(self, tokens) -> None:
        logger.info(f"{tokens}")
        self.finished = True

    def _report(self, move: Move) -> None:
        self.connection.send(f"game {self.match_id} {move}")

    def _resign(self) -> None:
        self._report(Resignation(self.role))
        self.finished = True


class TaflClient:
    """Logs in once, then creates (or joins) matches and plays them."""

    def __init__(
        self,
        config: SessionConfig,
        connect: Callable[[str, int], Connection] = Connection.connect,
    ):
        self.config = config
        self.role = Role.from_str(config.role)
        self.connect = connect
        self.games_played = 0

    def run(self) -> int:
        """Play until the match limit is reached or the connection drops.

        Returns:
            The number of matches played.
        """
        config = self.config
        with self.connect(config.host, config.port) as connection:
            login(connection, config.version_id, config.login_name, config.password)

            while True:
                match_id = self._start_match(connection)
                status = self.play_match(connection, match_id)
                self.games_played += 1
                logger.info(f"Game {match_id} finished: {status}")

                if config.join_game is not None:
                    return self.games_played
                if config.games and self.games_played >= config.games:
                    return self.games_played

    def _start_match(self, connection: Connection) -> str:
        if self.config.join_game is not None:
            match_id = str(self.config.join_game)
            join_pending_match(connection, match_id)
            return match_id

        match_id = create_match(connection, self.role, client_config.time_control())
        logger.info(f"Created game {match_id}, waiting for a challenger")
        await_challenger(connection, match_id)
        return match_id

    def play_match(self, connection: Connection, match_id: str) -> Status:
        player = create_player(self.config.player, self.role)
        fallback = create_fallback(self.config.fallback, self.role)
        session = GameSession(connection, match_id, self.role, player, fallback)
        return session.run()
