"""Line-oriented TCP connection to the game server."""

import socket

from tafl_client.errors import ConnectionClosed
from tafl_client.logger import get_logger

logger = get_logger(__name__)


def token_at(tokens, index):
    """tokens[index], or None when the line is too short."""
    return tokens[index] if len(tokens) > index else None


class Connection:
    """One persistent connection; sends commands and reads reply lines.

    The connection does no interpretation of the lines it carries.
    """

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.buffer = b""

    @classmethod
    def connect(cls, host: str, port: int) -> "Connection":
        # socket errors (ConnectionRefusedError, socket.gaierror, ...) propagate
        sock = socket.create_connection((host, port))
        logger.info(f"Connected to {host}:{port}")
        return cls(sock)

    def send(self, line: str) -> None:
        """Write one command terminated by exactly one newline."""
        line = line.rstrip("\r\n")
        logger.debug(f">> {line}")
        self.sock.sendall(f"{line}\n".encode("utf-8"))

    def recv_line(self) -> str:
        """Block until a full line arrives.

        Raises:
            ConnectionClosed: the peer closed the stream.
        """
        while True:
            pos = self.buffer.find(b"\n")
            if pos >= 0:
                raw = self.buffer[:pos]
                self.buffer = self.buffer[pos + 1 :]
                line = raw.decode("utf-8", errors="replace").rstrip("\r")
                logger.debug(f"<< {line}")
                return line
            chunk = self.sock.recv(4096)
            if not chunk:
                raise ConnectionClosed()
            self.buffer += chunk

    def close(self) -> None:
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
