"""ヘネファタフルの探索用ゲーム実装 (ミラーモデル)

このモジュールは、盤面を numpy 配列で持ち、行動をハッシュ値 (int) で扱う
探索向けのゲーム表現を実装しています。
座標は (x, y) で、y=0 が盤面の最上段です。
"""

from typing import List, Tuple

import numpy as np

from tafl_client.config import game_config
from tafl_client.errors import InvalidPlay

# --- Game Constants ---
# Players
ATTACKER = 1
DEFENDER = 2
OPPONENT = {ATTACKER: DEFENDER, DEFENDER: ATTACKER}

# Pieces
EMPTY = 0
ATTACKER_PIECE = 1
DEFENDER_PIECE = 2
KING = 3

# Action Space (from config)
BOARD_SIZE = game_config.BOARD_SIZE
NUM_BOARD_POSITIONS = game_config.NUM_BOARD_POSITIONS
NUM_ACTIONS = game_config.NUM_ACTIONS

CENTER = BOARD_SIZE // 2
THRONE = (CENTER, CENTER)
CORNERS = frozenset(
    {(0, 0), (BOARD_SIZE - 1, 0), (0, BOARD_SIZE - 1), (BOARD_SIZE - 1, BOARD_SIZE - 1)}
)
RESTRICTED = CORNERS | {THRONE}

# Directions (dx, dy)
DIRS = np.array([(0, -1), (0, 1), (-1, 0), (1, 0)], dtype=np.int8)

# 初期配置 (攻撃側 1, 守備側 2, 王 3)
INITIAL_LAYOUT = np.array(
    [
        [0, 0, 0, 1, 1, 1, 1, 1, 0, 0, 0],
        [0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [1, 0, 0, 0, 0, 2, 0, 0, 0, 0, 1],
        [1, 0, 0, 0, 2, 2, 2, 0, 0, 0, 1],
        [1, 1, 0, 2, 2, 3, 2, 2, 0, 1, 1],
        [1, 0, 0, 0, 2, 2, 2, 0, 0, 0, 1],
        [1, 0, 0, 0, 0, 2, 0, 0, 0, 0, 1],
        [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0],
        [0, 0, 0, 1, 1, 1, 1, 1, 0, 0, 0],
    ],
    dtype=np.int8,
)


def owner(piece: int) -> int:
    """駒の所属プレイヤー (空なら0)"""
    if piece == ATTACKER_PIECE:
        return ATTACKER
    if piece in (DEFENDER_PIECE, KING):
        return DEFENDER
    return 0


class TaflGame:
    """探索用のゲーム状態管理クラス

    盤面、手番、終局判定を管理します。
    主モデルと違い、千日手の記録は行いません。
    """

    def __init__(self, board_size: int = BOARD_SIZE) -> None:
        self.size = board_size

        # pieces: 0=Empty, 1=Attacker, 2=Defender, 3=King
        self.pieces = np.zeros((self.size, self.size), dtype=np.int8)

        self.current_player = ATTACKER
        self.game_over = False
        self.winner = 0
        self.move_count = 0

        self.setup_initial_position()

    def setup_initial_position(self) -> None:
        """初期配置をセットアップ"""
        self.pieces = INITIAL_LAYOUT.copy()
        self.current_player = ATTACKER
        self.move_count = 0
        self.game_over = False
        self.winner = 0

    def copy(self) -> "TaflGame":
        """シミュレーション用の軽量コピー

        Returns:
            TaflGame: ゲーム状態のコピー
        """
        new_game = TaflGame.__new__(TaflGame)
        new_game.size = self.size
        new_game.pieces = self.pieces.copy()
        new_game.current_player = self.current_player
        new_game.game_over = self.game_over
        new_game.winner = self.winner
        new_game.move_count = self.move_count
        return new_game

    def find_king(self):
        """王の座標 (x, y)、盤上にいなければ None"""
        ys, xs = np.where(self.pieces == KING)
        if len(xs) == 0:
            return None
        return int(xs[0]), int(ys[0])

    def get_valid_moves(self, x: int, y: int) -> List[Tuple[int, int]]:
        """指定された位置の駒の合法的な移動先を取得

        Args:
            x: X座標 (0-10)
            y: Y座標 (0-10)

        Returns:
            合法的な移動先座標のリスト [(x, y), ...]
        """
        piece = self.pieces[y, x]
        # 自分の駒でなければ移動不可
        if owner(piece) != self.current_player:
            return []

        moves = []
        p_arr = self.pieces

        for dx, dy in DIRS.tolist():
            nx, ny = x + dx, y + dy

            while 0 <= nx < self.size and 0 <= ny < self.size:
                if p_arr[ny, nx] != EMPTY:
                    # 駒があればそこで止まる
                    break
                # 空の玉座は通過可、止まれるのは王のみ
                if piece == KING or (nx, ny) not in RESTRICTED:
                    moves.append((int(nx), int(ny)))
                nx += dx
                ny += dy

        return moves

    def get_all_legal_actions(self) -> List[int]:
        """現在のプレイヤーの全合法手を取得

        Returns:
            合法手のアクションハッシュのリスト
            各ハッシュは from_idx * NUM_BOARD_POSITIONS + to_idx の形式
        """
        if self.game_over:
            return []

        legal_hashes = []
        ys, xs = np.where((self.pieces != EMPTY) & (self._owners() == self.current_player))

        for cx, cy in zip(xs, ys):
            from_idx = int(cy) * self.size + int(cx)
            for mx, my in self.get_valid_moves(int(cx), int(cy)):
                legal_hashes.append(encode_action(from_idx, my * self.size + mx))

        return legal_hashes

    def _owners(self) -> np.ndarray:
        owners = np.zeros_like(self.pieces)
        owners[self.pieces == ATTACKER_PIECE] = ATTACKER
        owners[(self.pieces == DEFENDER_PIECE) | (self.pieces == KING)] = DEFENDER
        return owners

    def is_legal(self, action_hash: int) -> bool:
        if self.game_over or not 0 <= action_hash < NUM_ACTIONS:
            return False
        from_idx, to_idx = decode_action(action_hash)
        fx, fy = index_to_xy(from_idx)
        return index_to_xy(to_idx) in self.get_valid_moves(fx, fy)

    # --- Step & Update ---

    def apply(self, action_hash: int) -> Tuple[bool, int]:
        """合法性を検証してからアクションを実行

        Raises:
            InvalidPlay: 合法手でない場合 (状態は変更されない)
        """
        if not self.is_legal(action_hash):
            raise InvalidPlay(format_action(action_hash), "not a legal action in the mirror model")
        return self.step(action_hash)

    def step(self, action_hash: int) -> Tuple[bool, int]:
        """アクションを実行してゲーム状態を更新 (合法性は検証しない)

        Args:
            action_hash: エンコードされたアクションハッシュ

        Returns:
            (game_over, winner): ゲーム終了フラグと勝者ID
        """
        if action_hash is None or self.game_over:
            return self.game_over, self.winner

        from_idx, to_idx = decode_action(action_hash)
        fx, fy = index_to_xy(from_idx)
        tx, ty = index_to_xy(to_idx)
        mover = self.current_player

        # --- Execute Move (In-place) ---
        self.pieces[ty, tx] = self.pieces[fy, fx]
        self.pieces[fy, fx] = EMPTY

        self._capture_around(tx, ty, mover)
        if mover == ATTACKER:
            self._capture_king(tx, ty)

        self.current_player = OPPONENT[mover]
        self.move_count += 1

        self._check_win()

        # 敗北条件チェック: 次のプレイヤーに合法手がない場合
        if not self.game_over and len(self.get_all_legal_actions()) == 0:
            self.game_over = True
            self.winner = OPPONENT[self.current_player]

        return self.game_over, self.winner

    def _hostile_to(self, x: int, y: int, player: int) -> bool:
        """(x, y) が player の駒を挟む壁になるか"""
        piece = self.pieces[y, x]
        if piece != EMPTY:
            return owner(piece) == OPPONENT[player]
        return (x, y) in RESTRICTED

    def _capture_around(self, tx: int, ty: int, mover: int) -> None:
        """移動先の四方にいる敵の兵を挟み撃ちで取る (王は対象外)"""
        enemy = OPPONENT[mover]
        for dx, dy in DIRS.tolist():
            ax, ay = tx + dx, ty + dy
            bx, by = ax + dx, ay + dy
            if not (0 <= ax < self.size and 0 <= ay < self.size):
                continue

            piece = self.pieces[ay, ax]
            if piece == KING or owner(piece) != enemy:
                continue

            if 0 <= bx < self.size and 0 <= by < self.size and self._hostile_to(bx, by, enemy):
                self.pieces[ay, ax] = EMPTY

    def _capture_king(self, tx: int, ty: int) -> None:
        """攻撃側の着手で王が四方を囲まれたら取る (盤端の王は取れない)"""
        king = self.find_king()
        if king is None:
            return
        kx, ky = king
        if kx in (0, self.size - 1) or ky in (0, self.size - 1):
            return
        if abs(kx - tx) + abs(ky - ty) != 1:
            return

        for dx, dy in DIRS.tolist():
            nx, ny = kx + dx, ky + dy
            if self.pieces[ny, nx] == ATTACKER_PIECE:
                continue
            if (nx, ny) == THRONE and self.pieces[ny, nx] == EMPTY:
                continue
            return

        self.pieces[ky, kx] = EMPTY

    def _check_win(self) -> None:
        """王が取られたら攻撃側、王が角に到達したら守備側の勝ち"""
        king = self.find_king()
        if king is None:
            self.game_over = True
            self.winner = ATTACKER
        elif king in CORNERS:
            self.game_over = True
            self.winner = DEFENDER

    def __str__(self) -> str:
        symbols = {EMPTY: ".", ATTACKER_PIECE: "X", DEFENDER_PIECE: "O", KING: "K"}
        return "\n".join(
            "".join(symbols[int(piece)] for piece in row) for row in self.pieces
        )


def xy_to_index(x: int, y: int) -> int:
    """(x, y) -> 行優先インデックス (0-120)"""
    return y * BOARD_SIZE + x


def index_to_xy(idx: int) -> Tuple[int, int]:
    """行優先インデックス (0-120) -> (x, y)"""
    y, x = divmod(int(idx), BOARD_SIZE)
    return x, y


def encode_action(from_idx: int, to_idx: int) -> int:
    """
    (from_idx, to_idx) -> unique hash (int)
    Range: 0 ~ 14640 (121 * 121 - 1)
    """
    return from_idx * NUM_BOARD_POSITIONS + to_idx


def decode_action(action_hash: int) -> Tuple[int, int]:
    """
    unique hash (int) -> (from_idx, to_idx)
    """
    return divmod(int(action_hash), NUM_BOARD_POSITIONS)


def format_action(action_hash: int) -> str:
    """ミラー表記 'y,x-y,x' で行動を表示"""
    from_idx, to_idx = decode_action(action_hash)
    fx, fy = index_to_xy(from_idx)
    tx, ty = index_to_xy(to_idx)
    return f"{fy},{fx}-{ty},{tx}"
