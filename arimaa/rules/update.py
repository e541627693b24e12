from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import TRAPS
from ..notation import Capture
from ..pieces import square_name
from .base import UpdateRule

if TYPE_CHECKING:
    from ..engine import RuleEngine

logger = logging.getLogger(__name__)


class TrapCaptureUpdateRule(UpdateRule):
    """Removes every piece standing on a trap without an adjacent ally."""

    @staticmethod
    def update(engine: RuleEngine) -> list[Capture]:
        """Clear unsupported trap squares, in fixed trap order."""
        captures = []
        for trap in TRAPS:
            piece = engine.board.get(trap)
            if piece is not None and engine.board.count_friendly_neighbors(trap) == 0:
                engine.board.set(trap, None)
                captures.append(Capture(piece, trap))
                logger.info("Auto-capture: %s on %s", piece.describe(), square_name(trap))
        return captures
