"""Board state: an 8x8 grid of signed piece codes plus the fixed trap squares."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

import numpy as np

from .constants import BOARD_DIM, EMPTY, HOME_ROWS, ORTHOGONAL, SIDE_NAMES, TRAPS
from .pieces import Piece, Position, is_in_board, offset, square_name

logger = logging.getLogger(__name__)


class BoardState:
    """Piece placement for one game.

    Squares hold ``side * kind`` codes (Gold positive, Silver negative,
    ``EMPTY`` for no piece), so a snapshot is a plain array copy.
    """

    traps: frozenset[Position] = frozenset(TRAPS)

    def __init__(self, grid: np.ndarray | None = None) -> None:
        """Create an empty board, or wrap a copy of an existing code grid."""
        if grid is None:
            self.grid = np.zeros((BOARD_DIM, BOARD_DIM), dtype=np.int8)
        else:
            if grid.shape != (BOARD_DIM, BOARD_DIM):
                raise ValueError(f"Board grid must be {BOARD_DIM}x{BOARD_DIM}, got {grid.shape}")
            self.grid = np.array(grid, dtype=np.int8)

    @staticmethod
    def _check(pos: Position) -> None:
        # numpy would silently wrap negative indices
        if not is_in_board(*pos):
            raise ValueError(f"Position {pos} is off the board")

    def get(self, pos: Position) -> Piece | None:
        """Return the piece at ``pos`` or None if the square is empty."""
        self._check(pos)
        code = self.grid[pos]
        if code == EMPTY:
            return None
        return Piece.from_code(code)

    def set(self, pos: Position, piece: Piece | None) -> None:
        """Place ``piece`` at ``pos`` (None clears the square)."""
        self._check(pos)
        self.grid[pos] = EMPTY if piece is None else piece.code

    def move(self, src: Position, dst: Position) -> None:
        """Relocate the piece on ``src`` to the empty square ``dst``."""
        piece = self.get(src)
        if piece is None:
            raise ValueError(f"No piece to move at {square_name(src)}")
        if self.get(dst) is not None:
            raise ValueError(f"Cannot move onto occupied square {square_name(dst)}")
        self.set(dst, piece)
        self.set(src, None)

    def is_trap(self, pos: Position) -> bool:
        return tuple(pos) in self.traps

    def neighbors(self, pos: Position) -> list[Position]:
        """Orthogonal neighbours of ``pos`` that lie on the board."""
        result = []
        for delta in ORTHOGONAL:
            n = offset(pos, delta)
            if is_in_board(*n):
                result.append(n)
        return result

    def empty_neighbors(self, pos: Position, exclude: Position | None = None) -> list[Position]:
        return [n for n in self.neighbors(pos) if n != exclude and self.grid[n] == EMPTY]

    def count_friendly_neighbors(self, pos: Position) -> int:
        """Count orthogonal neighbours holding a piece of the same side as ``pos``."""
        piece = self.get(pos)
        if piece is None:
            return 0
        count = 0
        for n in self.neighbors(pos):
            other = self.get(n)
            if other is not None and other.side == piece.side:
                count += 1
        return count

    def is_frozen(self, pos: Position) -> bool:
        """A piece is frozen next to a strictly stronger enemy with no adjacent ally."""
        piece = self.get(pos)
        if piece is None:
            return False

        enemy_stronger = False
        for n in self.neighbors(pos):
            other = self.get(n)
            if other is None:
                continue
            if other.side == piece.side:
                return False
            if other.strength > piece.strength:
                enemy_stronger = True

        return enemy_stronger

    def pieces(self, side: int | None = None) -> Iterator[tuple[Position, Piece]]:
        """Yield ``(position, piece)`` pairs in row-major order."""
        for row, col in zip(*np.nonzero(self.grid), strict=True):
            pos = (int(row), int(col))
            piece = Piece.from_code(self.grid[pos])
            if side is None or piece.side == side:
                yield pos, piece

    def count(self, kind: int, side: int) -> int:
        return int(np.sum(self.grid == side * kind))

    def snapshot(self) -> BoardState:
        """Return an independent copy of this board."""
        return BoardState(self.grid.copy())

    def restore(self, other: BoardState) -> None:
        """Overwrite this board in place with the contents of ``other``."""
        self.grid[...] = other.grid

    def clear(self) -> None:
        self.grid[...] = EMPTY

    def randomize_one_side(
        self,
        side: int,
        expected_counts: Mapping[int, int],
        rng: np.random.Generator | None = None,
    ) -> list[tuple[Piece, Position]]:
        """Fill the side's empty home-row squares with a shuffled piece multiset.

        Used for quick single-player setups. If there are fewer free squares
        than pieces, the surplus pieces are left off the board.

        Returns:
            The ``(piece, position)`` placements that were made.
        """
        if rng is None:
            rng = np.random.default_rng()

        free = [
            (row, col)
            for row in HOME_ROWS[side]
            for col in range(BOARD_DIM)
            if self.grid[row, col] == EMPTY
        ]
        kinds = [kind for kind, n in expected_counts.items() for _ in range(n)]
        rng.shuffle(free)
        rng.shuffle(kinds)

        placements = []
        for pos, kind in zip(free, kinds, strict=False):
            piece = Piece(kind, side)
            self.set(pos, piece)
            placements.append((piece, pos))

        logger.debug("Randomized %d %s pieces", len(placements), SIDE_NAMES[side])
        return placements

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardState):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    __hash__ = None  # mutable
