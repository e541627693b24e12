"""Error taxonomy for the rule engine.

Every error carries a ``recoverable`` flag. Recoverable errors leave the game
playable and the caller may retry a different action; fatal ones end the game.
"""


class ArimaaError(Exception):
    """Base class for all rule engine errors."""

    recoverable: bool = True


class ValidationError(ArimaaError, ValueError):
    """Illegal geometry, wrong side, frozen piece, weak push/pull or bad choice."""


class OutOfStepsError(ArimaaError):
    """The action needs more steps than the current turn has left."""


class TimeExceededError(ArimaaError):
    """A turn or the whole game ran past its configured duration."""

    recoverable = False


class GameOverError(ArimaaError):
    """A mutating call was made after the game ended."""

    recoverable = False


class MalformedNotationError(ArimaaError, ValueError):
    """A notation token does not follow the move grammar."""
