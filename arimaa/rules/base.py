"""Abstract base classes for Arimaa game rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine import RuleEngine
    from ..notation import Capture
    from ..pieces import Position


class InitializeBoard(ABC):
    """Abstract base class for board initialization rules."""

    @staticmethod
    @abstractmethod
    def init_board(engine: RuleEngine) -> None:
        """Initialize the board with starting pieces."""
        pass


class ValidationRule(ABC):
    """Abstract base class for step validation rules.

    ``message`` is formatted with ``origin`` and ``target`` square names when
    the rule rejects a step.
    """

    message: str = "Illegal step from {origin} to {target}"

    @staticmethod
    @abstractmethod
    def is_valid(engine: RuleEngine, origin: Position, target: Position) -> bool:
        """Check if a step from ``origin`` to ``target`` passes this rule."""
        pass


class UpdateRule(ABC):
    """Abstract base class for effects applied after every completed action."""

    @staticmethod
    @abstractmethod
    def update(engine: RuleEngine) -> list[Capture]:
        """Apply the effect and return the capture tokens it produced."""
        pass
