from __future__ import annotations

from typing import TYPE_CHECKING

from ..board import BoardState
from ..constants import GOLD, SILVER, STANDARD_LAYOUT
from ..pieces import Piece, Position
from .base import InitializeBoard

if TYPE_CHECKING:
    from ..engine import RuleEngine


def standard_placements(side: int) -> list[tuple[Piece, Position]]:
    """Placements of the standard layout for ``side``, back row first."""
    return [
        (Piece(kind, side), (row, col))
        for row, kinds in STANDARD_LAYOUT[side].items()
        for col, kind in enumerate(kinds)
    ]


class EmptyInitialization(InitializeBoard):
    """Start with an empty board; both sides record their own setup lines.

    Used for Classic and Fast.
    """

    @staticmethod
    def init_board(engine: RuleEngine) -> None:
        """Clear the board."""
        engine.board.clear()


class StandardInitialization(InitializeBoard):
    """Standard layout: rabbits in front, officers on the back row.

    Gold: rabbits on row 6, E M H D D H C C on row 7.
    Silver: rabbits on row 1, C C H D D H M E on row 0.
    """

    @staticmethod
    def init_board(engine: RuleEngine) -> None:
        """Place and record the standard layout for both sides."""
        engine.board.clear()
        engine.add_setup(GOLD, standard_placements(GOLD))
        engine.add_setup(SILVER, standard_placements(SILVER))


class QuickStartInitialization(InitializeBoard):
    """Standard Gold layout against a randomly arranged Silver side.

    Used for quick single-player games.
    """

    @staticmethod
    def init_board(engine: RuleEngine) -> None:
        """Place Gold's standard layout and a shuffled Silver setup."""
        engine.board.clear()
        engine.add_setup(GOLD, standard_placements(GOLD))
        scratch = BoardState()
        placements = scratch.randomize_one_side(SILVER, engine.config.expected_counts, engine.rng)
        engine.add_setup(SILVER, placements)
