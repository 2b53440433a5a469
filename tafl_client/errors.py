"""Exceptions raised by the client.

Socket level failures are left as the builtin ``ConnectionError``/``OSError``
and are never wrapped.
"""


class TaflClientError(Exception):
    """Base class for every error raised by tafl_client."""


class ConnectionClosed(TaflClientError):
    """The server closed the stream (empty read)."""

    def __init__(self, message="the TCP stream has closed"):
        super().__init__(message)


class ProtocolViolation(TaflClientError):
    """A required acknowledgement or token was missing or different."""

    def __init__(self, expected, received):
        self.expected = expected
        self.received = received
        super().__init__(f"expected {expected!r}, received {received!r}")


class InvalidPlay(TaflClientError):
    """A game model rejected a play."""

    def __init__(self, play, reason):
        self.play = play
        self.reason = reason
        super().__init__(f"invalid play {play}: {reason}")


class ProposerExhausted(TaflClientError):
    """A move proposer returned nothing while the game is still ongoing."""


class InternalConsistencyError(TaflClientError):
    """The two game models disagree, or a translation fell off the board."""
