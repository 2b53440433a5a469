"""Chooses this side's move when the server asks for one.

The primary proposer searches the mirror model. Its play is checked by the
primary model; when the primary model rejects it, the fallback proposer
searches the primary model directly, so whatever is finally reported has
been accepted by the authoritative model first.
"""

from tafl_client.copenhagen import Move, Resignation
from tafl_client.errors import InternalConsistencyError, InvalidPlay, ProposerExhausted
from tafl_client.logger import get_logger
from tafl_client.notation import action_to_play
from tafl_client.players import BasePlayer
from tafl_client.tafl_game import format_action
from tafl_client.tracker import DualModelTracker

logger = get_logger(__name__)


class MovePipeline:
    def __init__(self, tracker: DualModelTracker, player: BasePlayer, fallback: BasePlayer):
        self.tracker = tracker
        self.player = player
        self.fallback = fallback
        self.fallback_count = 0

    def decide(self) -> Move:
        """Pick a move, apply it to both models and return it for reporting.

        Raises:
            ProposerExhausted: a proposer returned nothing.
            InvalidPlay: the fallback play or the mirror replay was rejected.
            InternalConsistencyError: the models disagree afterwards.
        """
        tracker = self.tracker
        if not tracker.is_ongoing():
            raise InternalConsistencyError(
                f"asked for a move after the game ended: {tracker.status()}"
            )

        action = self.player.get_action(tracker.mirror)
        if action is None:
            raise ProposerExhausted(f"{type(self.player).__name__} found no move")

        play = action_to_play(action, tracker.role)
        logger.debug(f"proposed: {format_action(action)} -> {play}")

        try:
            tracker.apply_to_primary(play)
        except InvalidPlay as invalid_play:
            logger.info(f"{invalid_play}; asking the fallback")
            move = self._fallback()
        else:
            move = play

        if isinstance(move, Resignation):
            return move

        tracker.apply_to_mirror(move)
        return move

    def _fallback(self) -> Move:
        tracker = self.tracker
        move = self.fallback.get_action(tracker.primary)
        if move is None:
            raise ProposerExhausted(f"{type(self.fallback).__name__} found no move")

        tracker.apply_to_primary(move)
        self.fallback_count += 1
        logger.info(f"changed play to: {move}")
        return move
