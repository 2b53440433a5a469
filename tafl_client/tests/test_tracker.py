"""DualModelTracker のテスト"""

import random
import unittest

import numpy as np

from tafl_client.copenhagen import Play, Resignation, Role, Status, Vertex
from tafl_client.errors import InternalConsistencyError, InvalidPlay
from tafl_client.notation import mirror_status, primary_to_pieces
from tafl_client.tafl_game import ATTACKER_PIECE, DEFENDER, INITIAL_LAYOUT
from tafl_client.tracker import DualModelTracker


def play(role, origin, destination):
    return Play(role, Vertex.from_str(origin), Vertex.from_str(destination))


class TestApplyFromProtocol(unittest.TestCase):
    def test_opponent_play_reaches_both_models(self):
        tracker = DualModelTracker(Role.DEFENDER)
        tracker.apply_from_protocol(play(Role.ATTACKER, "d1", "d4"))

        self.assertIs(tracker.primary.turn, Role.DEFENDER)
        self.assertEqual(tracker.mirror.current_player, DEFENDER)
        self.assertEqual(tracker.mirror.pieces[7, 3], ATTACKER_PIECE)
        self.assertTrue(np.array_equal(primary_to_pieces(tracker.primary), tracker.mirror.pieces))

    def test_illegal_play_leaves_mirror_untouched(self):
        """主モデルが拒否した手はミラーモデルに届かない"""
        tracker = DualModelTracker(Role.ATTACKER)
        with self.assertRaises(InvalidPlay):
            tracker.apply_from_protocol(play(Role.DEFENDER, "f4", "f3"))
        self.assertTrue(np.array_equal(tracker.mirror.pieces, INITIAL_LAYOUT))
        self.assertEqual(tracker.mirror.move_count, 0)

    def test_resignation_ends_game(self):
        tracker = DualModelTracker(Role.DEFENDER)
        tracker.apply_from_protocol(Resignation(Role.ATTACKER))
        self.assertIs(tracker.status(), Status.DEFENDER_WINS)
        self.assertFalse(tracker.is_ongoing())
        self.assertEqual(tracker.mirror.move_count, 0)

    def test_roleless_tracker_rejected(self):
        with self.assertRaises(InternalConsistencyError):
            DualModelTracker(Role.ROLELESS)


class TestLockStep(unittest.TestCase):
    def test_board_mismatch_detected(self):
        tracker = DualModelTracker(Role.ATTACKER)
        tracker.mirror.pieces[0, 0] = ATTACKER_PIECE
        with self.assertRaises(InternalConsistencyError):
            tracker.check_lock_step()

    def test_turn_mismatch_detected(self):
        tracker = DualModelTracker(Role.ATTACKER)
        tracker.mirror.current_player = DEFENDER
        with self.assertRaises(InternalConsistencyError):
            tracker.check_lock_step()

    def test_primary_may_conclude_before_mirror(self):
        """主モデルだけが終局している状態は許容する"""
        tracker = DualModelTracker(Role.ATTACKER)
        tracker.primary.status = Status.ATTACKER_WINS
        tracker.check_lock_step()

    def test_mirror_concluding_alone_is_fatal(self):
        tracker = DualModelTracker(Role.ATTACKER)
        tracker.mirror.game_over = True
        tracker.mirror.winner = DEFENDER
        with self.assertRaises(InternalConsistencyError):
            tracker.check_lock_step()

    def test_different_winners_are_fatal(self):
        tracker = DualModelTracker(Role.ATTACKER)
        tracker.primary.status = Status.ATTACKER_WINS
        tracker.mirror.game_over = True
        tracker.mirror.winner = DEFENDER
        with self.assertRaises(InternalConsistencyError):
            tracker.check_lock_step()

    def test_mirror_rejection_raises(self):
        """ミラーモデルが拒否した手は InvalidPlay になる"""
        tracker = DualModelTracker(Role.ATTACKER)
        with self.assertRaises(InvalidPlay):
            tracker.apply_to_mirror(play(Role.ATTACKER, "d4", "d9"))

    def test_many_plays_stay_in_step(self):
        tracker = DualModelTracker(Role.ATTACKER)
        for move in (
            play(Role.ATTACKER, "d1", "d2"),
            play(Role.DEFENDER, "f4", "f3"),
            play(Role.ATTACKER, "d2", "d1"),
            play(Role.DEFENDER, "f3", "e3"),
        ):
            tracker.apply_from_protocol(move)
        tracker.check_lock_step()
        self.assertEqual(tracker.primary.move_count, tracker.mirror.move_count)


class TestRandomGames(unittest.TestCase):
    """ランダムな対局を最後まで両モデルで進める"""

    def test_random_games_stay_in_step(self):
        rng = random.Random(2024)
        for _ in range(6):
            tracker = DualModelTracker(Role.ATTACKER)
            for _ in range(200):
                if not tracker.is_ongoing():
                    break
                tracker.apply_from_protocol(rng.choice(tracker.primary.legal_plays()))

            self.assertTrue(
                np.array_equal(primary_to_pieces(tracker.primary), tracker.mirror.pieces)
            )
            self.assertEqual(tracker.primary.move_count, tracker.mirror.move_count)
            if tracker.mirror.game_over:
                self.assertIs(mirror_status(tracker.mirror), tracker.status())


if __name__ == "__main__":
    unittest.main()
