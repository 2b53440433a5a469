import random

from tafl_client.config import search_config
from tafl_client.copenhagen import CopenhagenGame, Role, Status
from tafl_client.logger import get_logger
from tafl_client.mcts import MCTS

from .base import BasePlayer

logger = get_logger(__name__)


class MCTSPlayer(BasePlayer):
    """主モデル上で探索するフォールバック用プレイヤー"""

    def __init__(
        self,
        player_id: Role,
        think_seconds=None,
        rollout_depth=None,
        seed=None,
    ):
        if think_seconds is None:
            think_seconds = search_config.FALLBACK_THINK_SECONDS
        if rollout_depth is None:
            rollout_depth = search_config.FALLBACK_ROLLOUT_DEPTH
        super().__init__(player_id, think_seconds)
        self.rollout_depth = rollout_depth
        self.seed = seed

    def get_action(self, game: CopenhagenGame):
        """MCTSで手を選択するメソッド

        ゲームが続いている限り必ず合法手を返します。
        探索が手を返せなかった場合は合法手からランダムに選びます。

        Args:
            game: 現在のゲーム状態を表すCopenhagenGameオブジェクト

        Returns:
            選択された Play、終局していれば None
        """
        if game.status is not Status.ONGOING:
            return None

        # 1手ごとに木を作り直す (メモリを抑えるため)
        mcts = MCTS(rollout_depth=self.rollout_depth, seed=self.seed)
        policy, values = mcts.search(game, self.think_seconds)
        logger.debug(f"MCTS stats: {mcts.get_stats()}")

        if not policy:
            plays = game.legal_plays()
            if not plays:
                logger.error("フォールバックが手を選択できませんでした")
                return None
            logger.warning("探索結果が空のためランダムに手を選択します")
            return random.choice(plays)

        # 最も訪問回数が多い手を選択
        play = max(policy, key=lambda x: policy[x])
        logger.info(f"MCTS selected {play} with value {values.get(play, 0.0):.3f}")
        return play
