class BasePlayer:
    def __init__(self, player_id, think_seconds=None):
        self.player_id = player_id
        self.think_seconds = think_seconds

    def get_action(self, game):
        """ゲームの状態に基づいて行動を選択するメソッド

        Args:
            game: 現在のゲーム状態 (プレイヤーごとに TaflGame または CopenhagenGame)

        Returns:
            選択された行動。選べる手が無い場合は None
        """
        raise NotImplementedError("get_actionメソッドはサブクラスで実装してください")
