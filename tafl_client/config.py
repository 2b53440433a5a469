"""設定ファイル

このモジュールでは、クライアント全体で使用される定数と探索パラメータを定義します。
"""

from dataclasses import dataclass
from typing import Optional


# ===== ゲーム設定 =====
@dataclass
class GameConfig:
    """ゲームの基本設定"""

    BOARD_SIZE: int = 11
    NUM_BOARD_POSITIONS: int = BOARD_SIZE * BOARD_SIZE  # 121
    NUM_ACTIONS: int = NUM_BOARD_POSITIONS * NUM_BOARD_POSITIONS  # 14641: from * 121 + to

    FILE_LETTERS: str = "abcdefghijk"


# ===== サーバ接続設定 =====
@dataclass
class ClientConfig:
    """サーバとプロトコルの設定"""

    DEFAULT_HOST: str = "hnefatafl.org"
    PORT: int = 49152
    VERSION_ID: str = "ad746a65"  # loginコマンドに付けるプロトコルバージョン
    USERNAME_PREFIX: str = "ai-"

    # new_game <role> rated <ruleset> <time_ms> <increment> <board_size>
    RULESET: str = "fischer"
    TIME_MS: int = 900_000
    INCREMENT_SECONDS: int = 10

    def time_control(self) -> str:
        return f"rated {self.RULESET} {self.TIME_MS} {self.INCREMENT_SECONDS} {GameConfig.BOARD_SIZE}"


# ===== 探索設定 =====
@dataclass
class SearchConfig:
    """手の生成 (proposer) のパラメータ"""

    PRIMARY_THINK_SECONDS: float = 15.0  # 主プレイヤーの思考時間
    FALLBACK_THINK_SECONDS: float = 10.0  # フォールバックMCTSの思考時間
    FALLBACK_ROLLOUT_DEPTH: int = 20  # ロールアウトの最大手数
    UCT_C: float = 1.4  # UCTの探索係数


# ===== 実行時設定 =====
@dataclass
class SessionConfig:
    """コマンドライン引数から組み立てる1プロセス分の設定"""

    username: str
    role: str
    password: str = ""
    host: str = ClientConfig.DEFAULT_HOST
    port: int = ClientConfig.PORT
    version_id: str = ClientConfig.VERSION_ID
    join_game: Optional[int] = None
    games: int = 0  # 0 = 無制限
    systemd: bool = False
    player: str = "rule"
    fallback: str = "mcts"

    @property
    def login_name(self) -> str:
        return f"{ClientConfig.USERNAME_PREFIX}{self.username}"

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


# グローバル設定インスタンス（簡単にアクセスできるように）
game_config = GameConfig()
client_config = ClientConfig()
search_config = SearchConfig()
