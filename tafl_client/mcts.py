import math
import time

import numpy as np

from tafl_client.config import search_config
from tafl_client.copenhagen import (
    ATTACKER_PIECE,
    CORNERS,
    DEFENDER_PIECE,
    CopenhagenGame,
    Role,
    Status,
)
from tafl_client.logger import get_logger

logger = get_logger(__name__)

WINNERS = {Status.ATTACKER_WINS: Role.ATTACKER, Status.DEFENDER_WINS: Role.DEFENDER}


def evaluate_position(game: CopenhagenGame, role: Role) -> float:
    """ロールアウト打ち切り時の盤面評価 (-1.0 ~ 1.0, role視点)"""
    king = game.find_king()
    if king is None:
        defender_value = -1.0
    else:
        material = game.count(DEFENDER_PIECE) / 12 - game.count(ATTACKER_PIECE) / 24
        distance = min(abs(king.file - c.file) + abs(king.rank - c.rank) for c in CORNERS)
        defender_value = math.tanh(material + 0.5 * (1 - distance / 10))
    return defender_value if role is Role.DEFENDER else -defender_value


class MCTS:
    """モンテカルロ木探索 (MCTS) の実装

    UCTで木を降り、未展開ノードでは深さ制限付きのランダムロールアウトで
    価値を見積もります。主モデル (CopenhagenGame) 上で探索するため、
    返す手は常に主モデルで合法です。
    """

    def __init__(self, c_uct=None, rollout_depth=None, seed=None):
        """
        Args:
            c_uct: UCTの探索係数 (Noneの場合はconfig.pyから取得)
            rollout_depth: ロールアウトの最大手数 (Noneの場合はconfig.pyから取得)
            seed: 乱数シード
        """
        if c_uct is None:
            c_uct = search_config.UCT_C
        if rollout_depth is None:
            rollout_depth = search_config.FALLBACK_ROLLOUT_DEPTH
        self.c_uct = c_uct
        self.rollout_depth = rollout_depth
        self.rng = np.random.default_rng(seed)

        self.N = {}  # Visit count
        self.W = {}  # Total action value

        # 統計情報
        self.search_stats = {
            "total_simulations": 0,
            "total_expansions": 0,
            "max_depth": 0,
        }

    def game_to_key(self, game: CopenhagenGame):
        """
        ゲーム状態をハッシュ可能なタプルに変換
        move_countを含めることで、同じ盤面の循環 (無限再帰) を防ぐ
        """
        return (game.position_key(), game.turn, game.move_count)

    def search(self, root_game: CopenhagenGame, think_seconds: float, max_simulations=None):
        """ルートノードから思考時間が尽きるまでMCTS探索を実行

        Args:
            root_game: 探索を開始するゲーム状態 (変更されない)
            think_seconds: 思考時間 (秒)。最低1回はシミュレーションする
            max_simulations: シミュレーション回数の上限 (Noneなら時間のみで打ち切り)

        Returns:
            (mcts_policy, action_values):
                - mcts_policy: 各手の訪問確率分布
                - action_values: 各手のQ値
        """
        root_key = self.game_to_key(root_game)
        if root_key not in self.N:
            self._expand(root_game)

        valid_plays = list(self.N[root_key].keys())
        if not valid_plays:
            logger.debug("No valid plays at root")
            return {}, {}

        deadline = time.monotonic() + think_seconds
        simulations = 0
        while True:
            self._evaluate(root_game.copy(), depth=0)
            simulations += 1
            self.search_stats["total_simulations"] += 1
            if max_simulations is not None and simulations >= max_simulations:
                break
            if time.monotonic() >= deadline:
                break

        root_visits = sum(self.N[root_key].values())
        mcts_policy = {p: self.N[root_key][p] / root_visits for p in valid_plays}

        action_values = {}
        for play in valid_plays:
            n = self.N[root_key][play]
            action_values[play] = self.W[root_key][play] / n if n > 0 else 0.0

        best_play = max(mcts_policy, key=lambda x: mcts_policy[x])
        logger.debug(
            f"MCTS search completed: {simulations} simulations, best {best_play} "
            f"visit rate={mcts_policy[best_play]:.3f}, Q-value={action_values[best_play]:.3f}"
        )

        return mcts_policy, action_values

    def _evaluate(self, game: CopenhagenGame, depth: int) -> float:
        """
        再帰的な探索関数 (戻り値は入った時点の手番側から見た価値)
        """
        self.search_stats["max_depth"] = max(self.search_stats["max_depth"], depth)

        # 1. ゲーム終了判定
        if game.status is not Status.ONGOING:
            return 1.0 if WINNERS[game.status] is game.turn else -1.0

        # 2. 未展開ノードなら展開してロールアウト
        key = self.game_to_key(game)
        if key not in self.N:
            self._expand(game)
            return self._rollout(game)

        # 3. 展開済みならUCTで手を選択 (未訪問の手を優先)
        valid_plays = list(self.N[key].keys())
        if not valid_plays:
            return 0.0

        log_total = math.log(sum(self.N[key].values()) + 1)
        best_score = -float("inf")
        best_play = valid_plays[0]

        for play in valid_plays:
            n = self.N[key][play]
            if n == 0:
                best_play = play
                break
            score = self.W[key][play] / n + self.c_uct * math.sqrt(log_total / n)
            if score > best_score:
                best_score = score
                best_play = play

        # 4. 次の状態へ遷移 & 再帰
        game.play(best_play)

        # 相手の手番での価値が返ってくるため反転させる
        v = -self._evaluate(game, depth + 1)

        # 5. バックプロパゲーション
        self.W[key][best_play] += v
        self.N[key][best_play] += 1

        return v

    def _expand(self, game: CopenhagenGame) -> None:
        key = self.game_to_key(game)
        plays = game.legal_plays()
        self.N[key] = {play: 0 for play in plays}
        self.W[key] = {play: 0.0 for play in plays}
        self.search_stats["total_expansions"] += 1

    def _rollout(self, game: CopenhagenGame) -> float:
        """深さ制限付きのランダムプレイアウト"""
        role = game.turn
        for _ in range(self.rollout_depth):
            if game.status is not Status.ONGOING:
                break
            plays = game.legal_plays()
            game.play(plays[self.rng.integers(len(plays))])

        if game.status is not Status.ONGOING:
            return 1.0 if WINNERS[game.status] is role else -1.0
        return evaluate_position(game, role)

    def get_stats(self) -> dict:
        """探索統計情報を取得"""
        return self.search_stats.copy()
