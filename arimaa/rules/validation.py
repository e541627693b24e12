from __future__ import annotations

from typing import TYPE_CHECKING

from ..constants import FORWARD
from ..pieces import Position, is_in_board, manhattan
from .base import ValidationRule

if TYPE_CHECKING:
    from ..engine import RuleEngine


def effective_strength(engine: RuleEngine, pos: Position) -> int:
    """Base strength of the piece on ``pos`` plus its count of adjacent allies."""
    piece = engine.board.get(pos)
    if piece is None:
        return 0
    return piece.strength + engine.board.count_friendly_neighbors(pos)


class InBoardRule(ValidationRule):
    """Both squares of the step lie on the board."""

    message = "Step from {origin} to {target} leaves the board"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check that ``origin`` and ``target`` are on the board."""
        return is_in_board(*origin) and is_in_board(*target)


class OwnershipRule(ValidationRule):
    """A piece stands on the origin square and belongs to the side to move."""

    message = "No piece of the side to move at {origin}"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check the origin holds one of the active side's pieces."""
        piece = engine.board.get(origin)
        return piece is not None and piece.side == engine.active_side


class AdjacencyRule(ValidationRule):
    """Steps move exactly one square orthogonally."""

    message = "{target} is not orthogonally adjacent to {origin}"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check the Manhattan distance is exactly one."""
        return manhattan(origin, target) == 1


class NotFrozenRule(ValidationRule):
    """Frozen pieces cannot initiate a step."""

    message = "Piece at {origin} is frozen"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check the moving piece is not frozen."""
        return not engine.board.is_frozen(origin)


class FriendlyTargetRule(ValidationRule):
    """A piece cannot step onto a square held by its own side."""

    message = "{target} is occupied by a friendly piece"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check the target is empty or held by the enemy."""
        mover = engine.board.get(origin)
        other = engine.board.get(target)
        return other is None or mover is None or other.side != mover.side


class RabbitDirectionRule(ValidationRule):
    """Rabbits never step back towards their own home row."""

    message = "Rabbit at {origin} cannot step back to {target}"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check a rabbit's step onto an empty square does not retreat."""
        mover = engine.board.get(origin)
        if mover is None or not mover.is_rabbit or engine.board.get(target) is not None:
            return True
        dr = target[0] - origin[0]
        return dr != -FORWARD[mover.side]


class StrengthRule(ValidationRule):
    """Only a strictly stronger piece may push or pull an enemy."""

    message = "Piece at {origin} is not strong enough to move the piece at {target}"

    @staticmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Compare effective strengths when the target holds an enemy; ties fail."""
        mover = engine.board.get(origin)
        victim = engine.board.get(target)
        if mover is None or victim is None or victim.side == mover.side:
            return True
        return effective_strength(engine, origin) > effective_strength(engine, target)


STANDARD_VALIDATION_RULES: list[type[ValidationRule]] = [
    InBoardRule,
    OwnershipRule,
    AdjacencyRule,
    NotFrozenRule,
    FriendlyTargetRule,
    RabbitDirectionRule,
    StrengthRule,
]
