"""Players module"""

from tafl_client.copenhagen import Role
from tafl_client.notation import role_to_player

from .base import BasePlayer
from .mcts import MCTSPlayer
from .random import RandomPlayer
from .rule_based import RuleBasedPlayer

PLAYER_TYPES = ("rule", "random")
FALLBACK_TYPES = ("mcts",)


def create_player(player_type: str, role: Role, think_seconds=None) -> BasePlayer:
    """ミラーモデル上で手を提案する主プレイヤーを作成"""
    player_id = role_to_player(role)
    if player_type == "rule":
        return RuleBasedPlayer(player_id, think_seconds)
    if player_type == "random":
        return RandomPlayer(player_id, think_seconds)
    raise ValueError(f"Unknown player type: {player_type}")


def create_fallback(fallback_type: str, role: Role, think_seconds=None) -> BasePlayer:
    """主モデル上で手を提案するフォールバックプレイヤーを作成"""
    if fallback_type == "mcts":
        return MCTSPlayer(role, think_seconds)
    raise ValueError(f"Unknown fallback type: {fallback_type}")


__all__ = [
    "BasePlayer",
    "MCTSPlayer",
    "RandomPlayer",
    "RuleBasedPlayer",
    "PLAYER_TYPES",
    "FALLBACK_TYPES",
    "create_player",
    "create_fallback",
]
