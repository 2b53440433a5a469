"""Keeps the primary and mirror game models in lock-step."""

import numpy as np

from tafl_client.copenhagen import CopenhagenGame, Move, Play, Resignation, Role, Status
from tafl_client.errors import InternalConsistencyError
from tafl_client.logger import get_logger
from tafl_client.notation import (
    mirror_status,
    play_to_action,
    player_to_role,
    primary_to_pieces,
    role_to_player,
)
from tafl_client.tafl_game import TaflGame, format_action

logger = get_logger(__name__)


class DualModelTracker:
    """Owns both game models for one match.

    The primary model (protocol notation) decides turns and the result; the
    mirror model is a shadow fed only with plays the primary model accepted.
    """

    def __init__(self, role: Role):
        self.role = role
        self.player_id = role_to_player(role)
        self.primary = CopenhagenGame()
        self.mirror = TaflGame()

    def status(self) -> Status:
        return self.primary.status

    def is_ongoing(self) -> bool:
        return self.primary.status is Status.ONGOING

    def apply_from_protocol(self, move: Move) -> None:
        """Apply a move reported by the server for the opponent.

        Raises:
            InvalidPlay: either model rejected the move.
            InternalConsistencyError: the models disagree afterwards.
        """
        self.apply_to_primary(move)
        if isinstance(move, Resignation):
            logger.info(f"The {move.role} resigned")
            return

        self.apply_to_mirror(move)

    def apply_to_primary(self, move: Move) -> None:
        self.primary.play(move)

    def apply_to_mirror(self, play: Play) -> None:
        action = play_to_action(play)
        logger.debug(f"mirror play: {format_action(action)} ({play.origin} {play.destination})")
        self.mirror.apply(action)
        self.check_lock_step()

    def check_lock_step(self) -> None:
        mirror_turn = player_to_role(self.mirror.current_player)
        if mirror_turn is not self.primary.turn:
            raise InternalConsistencyError(
                f"turn mismatch: primary {self.primary.turn}, mirror {mirror_turn}"
            )

        # The mirror has no repetition rule, so it may still be ongoing after
        # the primary model has ended the game. Any other disagreement is fatal.
        status = mirror_status(self.mirror)
        if status is not Status.ONGOING and status is not self.primary.status:
            raise InternalConsistencyError(
                f"status mismatch: primary {self.primary.status}, mirror {status}"
            )
        if status is not self.primary.status:
            logger.info(f"primary model concluded: {self.primary.status} (mirror {status})")

        if not np.array_equal(primary_to_pieces(self.primary), self.mirror.pieces):
            raise InternalConsistencyError(
                f"board mismatch:\n{self.primary}\n---\n{self.mirror}"
            )
