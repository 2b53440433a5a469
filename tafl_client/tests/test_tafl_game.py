"""
TaflGame (ミラーモデル) のテストコード

テストカバレッジ:
- 初期配置の検証
- 移動ルールと合法手生成
- 捕獲と勝利条件
- アクションのエンコード/デコード
- 状態のコピー
"""

import unittest

import numpy as np

from tafl_client.copenhagen import CopenhagenGame
from tafl_client.errors import InvalidPlay
from tafl_client.tafl_game import (
    ATTACKER,
    ATTACKER_PIECE,
    CORNERS,
    DEFENDER,
    DEFENDER_PIECE,
    EMPTY,
    KING,
    NUM_ACTIONS,
    THRONE,
    TaflGame,
    decode_action,
    encode_action,
    format_action,
    index_to_xy,
    xy_to_index,
)


def action(fx, fy, tx, ty):
    return encode_action(xy_to_index(fx, fy), xy_to_index(tx, ty))


def empty_game(current_player=ATTACKER):
    game = TaflGame()
    game.pieces = np.zeros((11, 11), dtype=np.int8)
    game.current_player = current_player
    return game


class TestTaflGameInitialization(unittest.TestCase):
    """初期化と初期配置のテスト"""

    def test_piece_counts(self):
        game = TaflGame()
        self.assertEqual(np.count_nonzero(game.pieces == ATTACKER_PIECE), 24)
        self.assertEqual(np.count_nonzero(game.pieces == DEFENDER_PIECE), 12)
        self.assertEqual(np.count_nonzero(game.pieces == KING), 1)

    def test_king_on_throne(self):
        game = TaflGame()
        self.assertEqual(game.find_king(), THRONE)

    def test_initial_state(self):
        game = TaflGame()
        self.assertEqual(game.current_player, ATTACKER)
        self.assertFalse(game.game_over)
        self.assertEqual(game.winner, 0)
        self.assertEqual(game.move_count, 0)

    def test_same_number_of_plays_as_primary(self):
        """初期局面の合法手の数は主モデルと一致する"""
        self.assertEqual(
            len(TaflGame().get_all_legal_actions()), len(CopenhagenGame().legal_plays())
        )


class TestTaflGameMovement(unittest.TestCase):
    """移動ルールのテスト"""

    def test_valid_moves_of_bottom_attacker(self):
        """最下段 d1 (x=3, y=10) の移動先"""
        game = TaflGame()
        moves = set(game.get_valid_moves(3, 10))
        self.assertEqual(moves, {(3, 9), (3, 8), (3, 7), (3, 6), (2, 10), (1, 10)})

    def test_opponent_piece_cannot_move(self):
        game = TaflGame()
        self.assertEqual(game.get_valid_moves(5, 3), [])

    def test_soldier_passes_empty_throne(self):
        game = empty_game()
        game.pieces[2, 5] = ATTACKER_PIECE
        game.pieces[8, 2] = KING
        moves = game.get_valid_moves(5, 2)
        self.assertNotIn(THRONE, moves)
        self.assertIn((5, 6), moves)

    def test_only_king_reaches_corner(self):
        game = empty_game(DEFENDER)
        game.pieces[10, 4] = DEFENDER_PIECE
        game.pieces[0, 4] = KING
        self.assertNotIn((0, 10), game.get_valid_moves(4, 10))
        self.assertIn((0, 0), game.get_valid_moves(4, 0))

    def test_apply_illegal_action_raises(self):
        game = TaflGame()
        before = game.pieces.copy()
        with self.assertRaises(InvalidPlay):
            game.apply(action(3, 10, 3, 4))
        self.assertTrue(np.array_equal(game.pieces, before))
        self.assertEqual(game.current_player, ATTACKER)

    def test_apply_out_of_range_raises(self):
        game = TaflGame()
        with self.assertRaises(InvalidPlay):
            game.apply(NUM_ACTIONS)

    def test_apply_legal_action(self):
        game = TaflGame()
        game.apply(action(3, 10, 3, 7))
        self.assertEqual(game.pieces[7, 3], ATTACKER_PIECE)
        self.assertEqual(game.pieces[10, 3], EMPTY)
        self.assertEqual(game.current_player, DEFENDER)
        self.assertEqual(game.move_count, 1)

    def test_all_legal_actions_are_legal(self):
        game = TaflGame()
        for a in game.get_all_legal_actions():
            self.assertTrue(game.is_legal(a))


class TestTaflGameCapture(unittest.TestCase):
    """捕獲と勝利条件のテスト"""

    def test_custodial_capture(self):
        game = empty_game()
        game.pieces[8, 2] = ATTACKER_PIECE
        game.pieces[8, 3] = DEFENDER_PIECE
        game.pieces[6, 4] = ATTACKER_PIECE
        game.pieces[2, 5] = KING
        game.apply(action(4, 6, 4, 8))
        self.assertEqual(game.pieces[8, 3], EMPTY)
        self.assertFalse(game.game_over)

    def test_capture_against_corner(self):
        game = empty_game()
        game.pieces[10, 1] = DEFENDER_PIECE
        game.pieces[7, 2] = ATTACKER_PIECE
        game.pieces[2, 5] = KING
        game.apply(action(2, 7, 2, 10))
        self.assertEqual(game.pieces[10, 1], EMPTY)

    def test_king_captured(self):
        game = empty_game()
        game.pieces[3, 5] = KING
        game.pieces[3, 4] = ATTACKER_PIECE
        game.pieces[3, 6] = ATTACKER_PIECE
        game.pieces[2, 5] = ATTACKER_PIECE
        game.pieces[4, 2] = ATTACKER_PIECE
        game_over, winner = game.apply(action(2, 4, 5, 4))
        self.assertTrue(game_over)
        self.assertEqual(winner, ATTACKER)

    def test_king_escape(self):
        game = empty_game(DEFENDER)
        game.pieces[10, 4] = KING
        game.pieces[5, 7] = ATTACKER_PIECE
        game_over, winner = game.apply(action(4, 10, 0, 10))
        self.assertTrue(game_over)
        self.assertEqual(winner, DEFENDER)
        self.assertIn(game.find_king(), CORNERS)

    def test_no_actions_after_game_over(self):
        game = empty_game(DEFENDER)
        game.pieces[10, 4] = KING
        game.pieces[5, 7] = ATTACKER_PIECE
        game.apply(action(4, 10, 0, 10))
        self.assertEqual(game.get_all_legal_actions(), [])


class TestActionEncoding(unittest.TestCase):
    """アクションのエンコード/デコードのテスト"""

    def test_encode_decode(self):
        self.assertEqual(decode_action(encode_action(37, 81)), (37, 81))
        self.assertEqual(encode_action(120, 120), NUM_ACTIONS - 1)

    def test_index_xy(self):
        self.assertEqual(index_to_xy(xy_to_index(3, 7)), (3, 7))
        self.assertEqual(xy_to_index(10, 0), 10)

    def test_format_action(self):
        """ミラー表記は 'y,x-y,x'"""
        self.assertEqual(format_action(action(3, 10, 3, 7)), "10,3-7,3")


class TestTaflGameCopy(unittest.TestCase):
    def test_copy_is_independent(self):
        game = TaflGame()
        clone = game.copy()
        clone.apply(action(3, 10, 3, 7))
        self.assertEqual(game.pieces[10, 3], ATTACKER_PIECE)
        self.assertEqual(game.current_player, ATTACKER)


if __name__ == "__main__":
    unittest.main()
