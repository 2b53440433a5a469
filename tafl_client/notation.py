"""Translation between the protocol notation and the mirror model.

Protocol side: ``Vertex`` ('a1'..'k11', rank counted from the bottom) and
``Play``/``Role``. Mirror side: row-major square index (row 0 at the top),
action hash ``from_idx * 121 + to_idx`` and integer players.

Every input here comes from a model that already validated it, so a value
off the board means the two models have gone out of sync and raises
``InternalConsistencyError``.
"""

import numpy as np

from tafl_client import copenhagen, tafl_game
from tafl_client.copenhagen import CopenhagenGame, Play, Role, Status, Vertex
from tafl_client.errors import InternalConsistencyError
from tafl_client.tafl_game import ATTACKER, DEFENDER, TaflGame

BOARD_SIZE = tafl_game.BOARD_SIZE

ROLE_TO_PLAYER = {Role.ATTACKER: ATTACKER, Role.DEFENDER: DEFENDER}
PLAYER_TO_ROLE = {player: role for role, player in ROLE_TO_PLAYER.items()}


def vertex_to_index(vertex: Vertex) -> int:
    """Vertex('d4') -> mirror square index"""
    if not vertex.in_bounds():
        raise InternalConsistencyError(f"vertex off the board: {vertex!r}")
    x = vertex.file
    y = BOARD_SIZE - vertex.rank
    return tafl_game.xy_to_index(x, y)


def index_to_vertex(index: int) -> Vertex:
    """mirror square index -> Vertex"""
    if not 0 <= index < tafl_game.NUM_BOARD_POSITIONS:
        raise InternalConsistencyError(f"square index off the board: {index}")
    x, y = tafl_game.index_to_xy(index)
    return Vertex(x, BOARD_SIZE - y)


def play_to_action(play: Play) -> int:
    return tafl_game.encode_action(
        vertex_to_index(play.origin), vertex_to_index(play.destination)
    )


def action_to_play(action_hash: int, role: Role) -> Play:
    if not 0 <= action_hash < tafl_game.NUM_ACTIONS:
        raise InternalConsistencyError(f"action hash out of range: {action_hash}")
    from_idx, to_idx = tafl_game.decode_action(action_hash)
    return Play(role, index_to_vertex(from_idx), index_to_vertex(to_idx))


def role_to_player(role: Role) -> int:
    try:
        return ROLE_TO_PLAYER[role]
    except KeyError:
        raise InternalConsistencyError(f"{role} has no mirror side") from None


def player_to_role(player: int) -> Role:
    try:
        return PLAYER_TO_ROLE[player]
    except KeyError:
        raise InternalConsistencyError(f"unknown mirror player: {player}") from None


def mirror_status(game: TaflGame) -> Status:
    """The mirror model's result expressed as a primary ``Status``."""
    if not game.game_over:
        return Status.ONGOING
    if game.winner == ATTACKER:
        return Status.ATTACKER_WINS
    if game.winner == DEFENDER:
        return Status.DEFENDER_WINS
    raise InternalConsistencyError("the mirror model finished without a winner")


PIECE_CODES = {
    copenhagen.EMPTY: tafl_game.EMPTY,
    copenhagen.ATTACKER_PIECE: tafl_game.ATTACKER_PIECE,
    copenhagen.DEFENDER_PIECE: tafl_game.DEFENDER_PIECE,
    copenhagen.KING_PIECE: tafl_game.KING,
}


def primary_to_pieces(game: CopenhagenGame) -> np.ndarray:
    """The primary board laid out as a mirror ``pieces`` array."""
    pieces = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
    for rank_idx, row in enumerate(game.grid):
        y = BOARD_SIZE - 1 - rank_idx
        for x, piece in enumerate(row):
            pieces[y, x] = PIECE_CODES[piece]
    return pieces
