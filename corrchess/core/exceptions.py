"""
Custom exceptions raised by the domain and service layers.

Every exception derives from GameError so that the (excluded) transport layer can map the whole family in one place.
Anything that is not a GameError (e.g. SQLAlchemy errors) is an infrastructure failure and propagates untouched.
"""


class GameError(Exception):
    """Top-level exception for anything that goes wrong while handling a game."""

    retryable: bool = False


# --- Codec / input errors ---
class MalformedPositionError(GameError):
    """Position text could not be parsed. Fatal to the operation, never retried."""


class MalformedMoveError(GameError):
    """Move text is not a valid square-pair (+ optional promotion letter)."""


class IllegalMoveError(GameError):
    """Move is well-formed, but not allowed in the position it is played from."""


# --- State-precondition / authorization errors ---
class WrongTurnError(GameError):
    """The acting player is in the game, but it is the opponent's turn."""


class NotAPlayerError(GameError):
    """The acting player is neither white nor black in this game."""


class GameNotActiveError(GameError):
    """The game has already reached a terminal status."""


# --- Creation-time validation ---
class UnknownPlayerError(GameError):
    """A player identifier does not resolve to a registered player."""


class SelfPlayError(GameError):
    """Both sides of a new game were assigned to the same player."""


class InvalidRequestError(GameError):
    """Request could not be turned into a valid call to the service."""


# --- Persistence ---
class ConflictError(GameError):
    """
    A conditional write lost against a concurrently committed state change.
    The caller should re-read the game and retry.
    """

    retryable = True


class RepositoryError(GameError):
    """Lookup in the persistence layer did not find what was asked for."""


class GameNotFoundError(RepositoryError):
    pass
