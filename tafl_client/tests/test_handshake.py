"""ログインと対局作成のテスト"""

import socket
import unittest

from fake_server import FakeConnection

from tafl_client.config import client_config
from tafl_client.copenhagen import Role
from tafl_client.errors import ConnectionClosed, ProtocolViolation
from tafl_client.handshake import await_challenger, create_match, join_pending_match, login
from tafl_client.transport import Connection


class TestLogin(unittest.TestCase):
    def test_login_bytes_on_the_wire(self):
        """パスワードが空でも末尾の空白は残る"""
        local, peer = socket.socketpair()
        peer.settimeout(5)
        local.settimeout(5)
        try:
            peer.sendall(b"= login\n")
            login(Connection(local), "ad746a65", "ai-alice", "")
            self.assertEqual(peer.recv(1024), b"ad746a65 login ai-alice \n")
        finally:
            local.close()
            peer.close()

    def test_login_with_password(self):
        connection = FakeConnection(["= login"])
        login(connection, "ad746a65", "ai-alice", "hunter2")
        self.assertEqual(connection.sent, ["ad746a65 login ai-alice hunter2"])

    def test_bad_acknowledgement(self):
        connection = FakeConnection(["? login wrong password"])
        with self.assertRaises(ProtocolViolation) as ctx:
            login(connection, "ad746a65", "ai-alice", "")
        self.assertEqual(ctx.exception.expected, "= login")

    def test_login_then_closed(self):
        with self.assertRaises(ConnectionClosed):
            login(FakeConnection([]), "ad746a65", "ai-alice", "")


class TestCreateMatch(unittest.TestCase):
    def test_match_id_extracted(self):
        connection = FakeConnection(
            [
                "= display_games",
                "= new_game game 42 ai-alice _ rated copenhagen 900000 10 _ false {}",
            ]
        )
        match_id = create_match(connection, Role.ATTACKER, client_config.time_control())

        self.assertEqual(match_id, "42")
        self.assertEqual(connection.sent, ["new_game attacker rated fischer 900000 10 11"])

    def test_rejected_new_game(self):
        connection = FakeConnection(["? new_game"])
        with self.assertRaises(ProtocolViolation):
            create_match(connection, Role.DEFENDER, client_config.time_control())

    def test_closed_before_reply(self):
        with self.assertRaises(ConnectionClosed):
            create_match(FakeConnection([]), Role.DEFENDER, client_config.time_control())


class TestAwaitChallenger(unittest.TestCase):
    def test_other_lines_are_discarded(self):
        connection = FakeConnection(
            ["= display_users", "= new_game game 42", "= challenge_requested 42"]
        )
        await_challenger(connection, "42")
        self.assertEqual(connection.sent, ["join_game 42"])
        self.assertEqual(connection.lines, [])

    def test_closed_while_waiting(self):
        connection = FakeConnection(["= display_users"])
        with self.assertRaises(ConnectionClosed):
            await_challenger(connection, "42")
        self.assertEqual(connection.sent, [])


class TestJoinPendingMatch(unittest.TestCase):
    def test_join_pending(self):
        connection = FakeConnection()
        join_pending_match(connection, "17")
        self.assertEqual(connection.sent, ["join_game_pending 17"])


if __name__ == "__main__":
    unittest.main()
