import time

import numpy as np

from tafl_client.config import search_config
from tafl_client.logger import get_logger
from tafl_client.tafl_game import (
    ATTACKER_PIECE,
    CORNERS,
    DEFENDER,
    DEFENDER_PIECE,
    DIRS,
    EMPTY,
    OPPONENT,
    THRONE,
    TaflGame,
    decode_action,
    xy_to_index,
)

from .base import BasePlayer

logger = get_logger(__name__)

# スコアの重み (守備側視点)
DEFENDER_WEIGHT = 20
ATTACKER_WEIGHT = 10
CORNER_DISTANCE_WEIGHT = 3
ESCAPE_ROUTE_WEIGHT = 60
KING_PRESSURE_WEIGHT = 8
KING_MOBILITY_WEIGHT = 1
THREAT_PENALTY = 10_000


class RuleBasedPlayer(BasePlayer):
    """ルールベースのAIプレイヤー

    ミラーモデル (TaflGame) 上で全合法手を1手読みし、
    3段階の優先順位に基づいて手を選択します。
    思考時間 (think_seconds) を使い切った時点の最善手を返します。
    """

    def __init__(self, player_id: int, think_seconds=None):
        if think_seconds is None:
            think_seconds = search_config.PRIMARY_THINK_SECONDS
        super().__init__(player_id, think_seconds)
        self.opponent_id = OPPONENT[player_id]

    def get_action(self, game: TaflGame):
        """戦略的な行動選択

        優先順位:
        1. 即時勝利
        2. 相手の即時勝利を許す手の回避
        3. スコアベース選択

        Args:
            game: 現在のゲーム状態

        Returns:
            選択されたアクションのハッシュ値、合法手が無ければ None
        """
        legal_hashes = game.get_all_legal_actions()
        if not legal_hashes:
            return None

        deadline = time.monotonic() + self.think_seconds
        best_action = legal_hashes[0]
        best_score = -float("inf")

        for action in legal_hashes:
            child = game.copy()
            child.step(action)

            # 1. 即時勝利 (Check Immediate Win)
            if child.game_over and child.winner == self.player_id:
                return action

            # 2. 即時敗北の回避 (Avoid Immediate Threat)
            score = self._score(child)
            if self._opponent_wins_next(child):
                score -= THREAT_PENALTY

            # 3. スコアベース (Fallback by Score)
            if score > best_score:
                best_score = score
                best_action = action

            if time.monotonic() >= deadline:
                logger.debug("思考時間を使い切ったため探索を打ち切ります")
                break

        return best_action

    # --- 内部ヘルパーメソッド ---

    def _score(self, game: TaflGame) -> float:
        """盤面評価 (自分視点)"""
        king = game.find_king()
        if king is None:
            defender_score = -THREAT_PENALTY
        else:
            attackers = np.count_nonzero(game.pieces == ATTACKER_PIECE)
            defenders = np.count_nonzero(game.pieces == DEFENDER_PIECE)
            defender_score = (
                defenders * DEFENDER_WEIGHT
                - attackers * ATTACKER_WEIGHT
                - self._corner_distance(king) * CORNER_DISTANCE_WEIGHT
                + len(self._escape_routes(game, king)) * ESCAPE_ROUTE_WEIGHT
                - len(self._hostile_neighbours(game, king)) * KING_PRESSURE_WEIGHT
                + self._king_mobility(game, king) * KING_MOBILITY_WEIGHT
            )

        return defender_score if self.player_id == DEFENDER else -defender_score

    def _opponent_wins_next(self, game: TaflGame) -> bool:
        """相手 (次の手番) が1手で勝てるか"""
        if game.game_over:
            return game.winner == self.opponent_id

        king = game.find_king()
        if king is None:
            return False

        if self.opponent_id == DEFENDER:
            return len(self._escape_routes(game, king)) > 0

        # 攻撃側: 王の四方のうち3つが塞がれ、残り1マスに攻撃側が入れるか
        kx, ky = king
        if kx in (0, game.size - 1) or ky in (0, game.size - 1):
            return False
        hostile = self._hostile_neighbours(game, king)
        if len(hostile) != 3:
            return False

        free = [
            (kx + dx, ky + dy)
            for dx, dy in DIRS.tolist()
            if (kx + dx, ky + dy) not in hostile
        ]
        fx, fy = free[0]
        if game.pieces[fy, fx] != EMPTY:
            return False

        target = xy_to_index(fx, fy)
        return any(decode_action(a)[1] == target for a in game.get_all_legal_actions())

    def _corner_distance(self, king) -> int:
        kx, ky = king
        return min(abs(kx - cx) + abs(ky - cy) for cx, cy in CORNERS)

    def _escape_routes(self, game: TaflGame, king):
        """王が1手で到達できる角の一覧"""
        kx, ky = king
        routes = []
        for cx, cy in CORNERS:
            if cx == kx:
                step = 1 if cy > ky else -1
                path = [game.pieces[y, kx] for y in range(ky + step, cy + step, step)]
            elif cy == ky:
                step = 1 if cx > kx else -1
                path = [game.pieces[ky, x] for x in range(kx + step, cx + step, step)]
            else:
                continue
            if all(p == EMPTY for p in path):
                routes.append((cx, cy))
        return routes

    def _hostile_neighbours(self, game: TaflGame, king):
        """王の四方のうち、攻撃側の駒か空の玉座であるマス"""
        kx, ky = king
        hostile = []
        for dx, dy in DIRS.tolist():
            nx, ny = kx + dx, ky + dy
            if not (0 <= nx < game.size and 0 <= ny < game.size):
                continue
            piece = game.pieces[ny, nx]
            if piece == ATTACKER_PIECE or ((nx, ny) == THRONE and piece == EMPTY):
                hostile.append((nx, ny))
        return hostile

    def _king_mobility(self, game: TaflGame, king) -> int:
        kx, ky = king
        mobility = 0
        for dx, dy in DIRS.tolist():
            nx, ny = kx + dx, ky + dy
            while 0 <= nx < game.size and 0 <= ny < game.size and game.pieces[ny, nx] == EMPTY:
                mobility += 1
                nx += dx
                ny += dy
        return mobility

