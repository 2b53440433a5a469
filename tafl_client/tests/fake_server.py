"""テスト用のサーバ代替と補助関数"""

from tafl_client.copenhagen import Role
from tafl_client.errors import ConnectionClosed
from tafl_client.notation import primary_to_pieces, role_to_player
from tafl_client.players import BasePlayer


class FakeConnection:
    """台本どおりの行を返し、送信された行を記録する接続

    台本を読み切ると ConnectionClosed を送出します (EOFと同じ扱い)。
    """

    def __init__(self, lines=()):
        self.lines = list(lines)
        self.sent = []
        self.reads = 0
        self.closed = False

    def send(self, line):
        if self.closed:
            raise BrokenPipeError("send on a closed connection")
        self.sent.append(line)

    def recv_line(self):
        self.reads += 1
        if not self.lines:
            raise ConnectionClosed()
        return self.lines.pop(0)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ScriptedPlayer(BasePlayer):
    """あらかじめ決めた手を順番に返すプレイヤー"""

    def __init__(self, actions, player_id=None):
        super().__init__(player_id)
        self.actions = list(actions)
        self.calls = 0

    def get_action(self, game):
        self.calls += 1
        if not self.actions:
            return None
        return self.actions.pop(0)


def set_position(tracker, rows, turn: Role):
    """両モデルを同じ局面にする

    Args:
        tracker: DualModelTracker
        rows: 上 (ランク11) から並べた11行の文字列 ('X', 'O', 'K', '.')
        turn: 次の手番
    """
    primary = tracker.primary
    primary.grid = [list(row) for row in reversed(rows)]
    primary.turn = turn
    primary.seen_positions = {primary.position_key()}

    mirror = tracker.mirror
    mirror.pieces = primary_to_pieces(primary)
    mirror.current_player = role_to_player(turn)


EMPTY_ROWS = ["..........."] * 11


def rows_with(pieces):
    """{'e1': 'K', ...} から11行の盤面文字列を作る"""
    grid = [list(row) for row in EMPTY_ROWS]
    for vertex, piece in pieces.items():
        file = "abcdefghijk".index(vertex[0])
        rank = int(vertex[1:])
        grid[11 - rank][file] = piece
    return ["".join(row) for row in grid]
