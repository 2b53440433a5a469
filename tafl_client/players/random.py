import random

from tafl_client.tafl_game import TaflGame

from .base import BasePlayer


class RandomPlayer(BasePlayer):
    def get_action(self, game: TaflGame):
        """ゲームの状態に基づいてランダムに行動を選択するメソッド

        Args:
            game: 現在のゲーム状態を表すTaflGameオブジェクト

        Returns:
            選択された行動のハッシュ (int)
        """
        valid_actions = game.get_all_legal_actions()
        if not valid_actions:
            return None  # 合法手がない場合はNoneを返す
        return random.choice(valid_actions)
