"""Undo ledger: a stack of independent board and turn snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .board import BoardState

if TYPE_CHECKING:
    from .engine import PendingChoice
    from .notation import MoveToken


@dataclass(frozen=True)
class UndoSnapshot:
    """Engine state captured before a mutating call.

    ``history`` holds the move history as it was, so restoring the snapshot
    brings back tokens a retraction removed as well as dropping newer ones.
    """

    board: BoardState
    active_side: int
    steps_used: int
    history: tuple[MoveToken, ...]
    pending: PendingChoice | None = None

    @classmethod
    def capture(
        cls,
        board: BoardState,
        active_side: int,
        steps_used: int,
        history: list[MoveToken],
        pending: PendingChoice | None = None,
    ) -> UndoSnapshot:
        """Snapshot ``board`` and ``history`` by value so later mutations never leak into them."""
        return cls(board.snapshot(), active_side, steps_used, tuple(history), pending)


class UndoLedger:
    """Last-in first-out store of :class:`UndoSnapshot` objects."""

    def __init__(self) -> None:
        self._stack: list[UndoSnapshot] = []

    def push(self, snapshot: UndoSnapshot) -> None:
        self._stack.append(snapshot)

    def pop(self) -> UndoSnapshot | None:
        """Remove and return the latest snapshot, or None if the ledger is empty."""
        if not self._stack:
            return None
        return self._stack.pop()

    def peek(self) -> UndoSnapshot | None:
        return self._stack[-1] if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)
