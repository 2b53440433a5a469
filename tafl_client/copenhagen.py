"""コペンハーゲン・ヘネファタフルの実装 (主モデル)

このモジュールはサーバと同じ代数表記 (a1-k11) で盤面を管理し、
セッションの手番・終局判定の基準となるモデルを提供します。
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set, Union

from tafl_client.config import game_config
from tafl_client.errors import InvalidPlay

BOARD_SIZE = game_config.BOARD_SIZE
FILE_LETTERS = game_config.FILE_LETTERS

# Pieces
EMPTY = "."
ATTACKER_PIECE = "X"
DEFENDER_PIECE = "O"
KING_PIECE = "K"

# 上がランク11、左がファイルa
STARTING_POSITION = [
    "...XXXXX...",
    ".....X.....",
    "...........",
    "X....O....X",
    "X...OOO...X",
    "XX.OOKOO.XX",
    "X...OOO...X",
    "X....O....X",
    "...........",
    ".....X.....",
    "...XXXXX...",
]

# (dfile, drank)
DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))


class Role(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"
    ROLELESS = "roleless"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, value: str) -> "Role":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown role: {value!r}") from None

    def opposite(self) -> "Role":
        if self is Role.ATTACKER:
            return Role.DEFENDER
        if self is Role.DEFENDER:
            return Role.ATTACKER
        return Role.ROLELESS


class Status(Enum):
    ONGOING = "ongoing"
    ATTACKER_WINS = "attacker_wins"
    DEFENDER_WINS = "defender_wins"

    def __str__(self) -> str:
        return self.value


WINS = {Role.ATTACKER: Status.ATTACKER_WINS, Role.DEFENDER: Status.DEFENDER_WINS}


@dataclass(frozen=True)
class Vertex:
    """盤上の1マス

    file: 0-10 (a-k)
    rank: 1-11 (下から数える)
    """

    file: int
    rank: int

    @classmethod
    def from_str(cls, text: str) -> "Vertex":
        text = text.strip().lower()
        if len(text) < 2 or text[0] not in FILE_LETTERS or not text[1:].isdigit():
            raise ValueError(f"not a vertex: {text!r}")

        vertex = cls(FILE_LETTERS.index(text[0]), int(text[1:]))
        if not vertex.in_bounds():
            raise ValueError(f"vertex off the board: {text!r}")
        return vertex

    def in_bounds(self) -> bool:
        return 0 <= self.file < BOARD_SIZE and 1 <= self.rank <= BOARD_SIZE

    def step(self, dfile: int, drank: int) -> Optional["Vertex"]:
        vertex = Vertex(self.file + dfile, self.rank + drank)
        return vertex if vertex.in_bounds() else None

    def on_edge(self) -> bool:
        return self.file in (0, BOARD_SIZE - 1) or self.rank in (1, BOARD_SIZE)

    def __str__(self) -> str:
        return f"{FILE_LETTERS[self.file]}{self.rank}"


THRONE = Vertex(BOARD_SIZE // 2, BOARD_SIZE // 2 + 1)  # f6
CORNERS = frozenset(
    {
        Vertex(0, 1),
        Vertex(BOARD_SIZE - 1, 1),
        Vertex(0, BOARD_SIZE),
        Vertex(BOARD_SIZE - 1, BOARD_SIZE),
    }
)
RESTRICTED = CORNERS | {THRONE}


@dataclass(frozen=True)
class Play:
    role: Role
    origin: Vertex
    destination: Vertex

    def __str__(self) -> str:
        return f"play {self.role} {self.origin} {self.destination}"


@dataclass(frozen=True)
class Resignation:
    role: Role

    def __str__(self) -> str:
        return f"play {self.role} resigns _"


Move = Union[Play, Resignation]


def parse_play(tokens: List[str]) -> Move:
    """["play", role, from, to] の形式のトークン列を手に変換

    Raises:
        ValueError: トークン列が手の形式になっていない場合
    """
    if len(tokens) < 4 or tokens[0] != "play":
        raise ValueError(f"not a play: {' '.join(tokens)!r}")

    role = Role.from_str(tokens[1])
    if role is Role.ROLELESS:
        raise ValueError("a roleless side cannot play")
    if tokens[2] == "resigns":
        return Resignation(role)
    return Play(role, Vertex.from_str(tokens[2]), Vertex.from_str(tokens[3]))


def role_of(piece: str) -> Optional[Role]:
    if piece == ATTACKER_PIECE:
        return Role.ATTACKER
    if piece in (DEFENDER_PIECE, KING_PIECE):
        return Role.DEFENDER
    return None


class CopenhagenGame:
    """コペンハーゲン・ルールのゲーム状態

    盤面は grid[rank - 1][file] で参照します。攻撃側が先手です。
    守備側は過去に現れた盤面を再現する手を指せません (千日手の禁止)。
    """

    def __init__(self) -> None:
        self.grid: List[List[str]] = [list(row) for row in reversed(STARTING_POSITION)]
        self.turn = Role.ATTACKER
        self.status = Status.ONGOING
        self.move_count = 0
        self.plays: List[Move] = []
        self.seen_positions: Set[str] = {self.position_key()}

    def copy(self) -> "CopenhagenGame":
        """探索用のコピー"""
        new_game = CopenhagenGame.__new__(CopenhagenGame)
        new_game.grid = [row[:] for row in self.grid]
        new_game.turn = self.turn
        new_game.status = self.status
        new_game.move_count = self.move_count
        new_game.plays = list(self.plays)
        new_game.seen_positions = set(self.seen_positions)
        return new_game

    # --- 盤面アクセス ---

    def piece_at(self, vertex: Vertex) -> str:
        return self.grid[vertex.rank - 1][vertex.file]

    def _set(self, vertex: Vertex, piece: str) -> None:
        self.grid[vertex.rank - 1][vertex.file] = piece

    def position_key(self) -> str:
        return "".join("".join(row) for row in self.grid)

    def find_king(self) -> Optional[Vertex]:
        for rank_idx, row in enumerate(self.grid):
            if KING_PIECE in row:
                return Vertex(row.index(KING_PIECE), rank_idx + 1)
        return None

    def count(self, piece: str) -> int:
        return sum(row.count(piece) for row in self.grid)

    def _hostile_to(self, vertex: Vertex, role: Role) -> bool:
        """vertex が role の駒にとって敵対的か (挟み撃ちの壁になるか)

        角は常に敵対的、玉座は空のときは両陣営に、玉がいるときは攻撃側にのみ敵対的です。
        """
        piece = self.piece_at(vertex)
        if piece != EMPTY:
            return role_of(piece) is role.opposite()
        return vertex in RESTRICTED

    # --- 合法手 ---

    def destinations(self, origin: Vertex) -> List[Vertex]:
        """origin の駒が移動できるマスの一覧 (千日手は考慮しない)"""
        piece = self.piece_at(origin)
        if piece == EMPTY:
            return []

        result = []
        for dfile, drank in DIRECTIONS:
            vertex = origin.step(dfile, drank)
            while vertex is not None and self.piece_at(vertex) == EMPTY:
                # 空の玉座は通過できるが、止まれるのは玉だけ
                if piece == KING_PIECE or vertex not in RESTRICTED:
                    result.append(vertex)
                vertex = vertex.step(dfile, drank)
        return result

    def _plays_ignoring_repetition(self, role: Role) -> List[Play]:
        plays = []
        for rank_idx, row in enumerate(self.grid):
            for file, piece in enumerate(row):
                if role_of(piece) is not role:
                    continue
                origin = Vertex(file, rank_idx + 1)
                for destination in self.destinations(origin):
                    plays.append(Play(role, origin, destination))
        return plays

    def legal_plays(self) -> List[Play]:
        """手番側の全合法手"""
        if self.status is not Status.ONGOING:
            return []

        plays = self._plays_ignoring_repetition(self.turn)
        if self.turn is Role.DEFENDER:
            plays = [play for play in plays if not self._would_repeat(play)]
        return plays

    def has_legal_play(self) -> bool:
        for play in self._plays_ignoring_repetition(self.turn):
            if self.turn is not Role.DEFENDER or not self._would_repeat(play):
                return True
        return False

    def _would_repeat(self, play: Play) -> bool:
        sim = CopenhagenGame.__new__(CopenhagenGame)
        sim.grid = [row[:] for row in self.grid]
        sim._move(play)
        return sim.position_key() in self.seen_positions

    def _reject_reason(self, play: Play) -> Optional[str]:
        if not (play.origin.in_bounds() and play.destination.in_bounds()):
            return "vertex off the board"

        piece = self.piece_at(play.origin)
        if piece == EMPTY:
            return f"no piece on {play.origin}"
        if role_of(piece) is not play.role:
            return f"the piece on {play.origin} does not belong to the {play.role}"
        if play.destination not in self.destinations(play.origin):
            return f"{play.origin} cannot move to {play.destination}"
        if play.role is Role.DEFENDER and self._would_repeat(play):
            return "the defenders may not repeat a position"
        return None

    # --- 着手 ---

    def play(self, move: Move) -> None:
        """手を検証して適用する

        Raises:
            InvalidPlay: 手が不正な場合 (状態は変更されない)
        """
        if self.status is not Status.ONGOING:
            raise InvalidPlay(move, f"the game is over: {self.status}")

        # 投了は手番に関係なく受け付ける
        if isinstance(move, Resignation):
            self.plays.append(move)
            self.status = WINS[move.role.opposite()]
            return

        if move.role is not self.turn:
            raise InvalidPlay(move, f"it is the {self.turn}'s turn")

        reason = self._reject_reason(move)
        if reason is not None:
            raise InvalidPlay(move, reason)

        self._move(move)
        self.plays.append(move)
        self.move_count += 1
        self.seen_positions.add(self.position_key())
        self.turn = self.turn.opposite()
        self._update_status()

    def _move(self, play: Play) -> None:
        piece = self.piece_at(play.origin)
        self._set(play.origin, EMPTY)
        self._set(play.destination, piece)

        self._capture_around(play.destination, play.role)
        if play.role is Role.ATTACKER:
            self._capture_king(play.destination)

    def _capture_around(self, destination: Vertex, mover: Role) -> None:
        enemy = mover.opposite()
        for dfile, drank in DIRECTIONS:
            neighbour = destination.step(dfile, drank)
            if neighbour is None:
                continue

            piece = self.piece_at(neighbour)
            if piece == KING_PIECE or role_of(piece) is not enemy:
                continue

            beyond = neighbour.step(dfile, drank)
            if beyond is not None and self._hostile_to(beyond, enemy):
                self._set(neighbour, EMPTY)

    def _capture_king(self, destination: Vertex) -> None:
        king = self.find_king()
        if king is None or king.on_edge():
            return
        if abs(king.file - destination.file) + abs(king.rank - destination.rank) != 1:
            return

        for dfile, drank in DIRECTIONS:
            neighbour = king.step(dfile, drank)
            if self.piece_at(neighbour) == ATTACKER_PIECE:
                continue
            if neighbour == THRONE and self.piece_at(neighbour) == EMPTY:
                continue
            return

        self._set(king, EMPTY)

    def _update_status(self) -> None:
        king = self.find_king()
        if king is None:
            self.status = Status.ATTACKER_WINS
        elif king in CORNERS:
            self.status = Status.DEFENDER_WINS
        elif not self.has_legal_play():
            # 手番側に合法手が無ければ負け
            self.status = WINS[self.turn.opposite()]

    def __str__(self) -> str:
        lines = []
        for rank in range(BOARD_SIZE, 0, -1):
            lines.append(f"{rank:>2} {''.join(self.grid[rank - 1])}")
        lines.append("   " + FILE_LETTERS)
        return "\n".join(lines)
