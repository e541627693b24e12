"""Tests for arimaa.board.BoardState."""

import numpy as np
import pytest

from arimaa.board import BoardState
from arimaa.constants import (
    CAMEL,
    CAT,
    DOG,
    ELEPHANT,
    EMPTY,
    EXPECTED_COUNTS,
    GOLD,
    HORSE,
    RABBIT,
    SILVER,
)
from arimaa.pieces import Piece


@pytest.fixture
def board() -> BoardState:
    """Fresh empty board."""
    return BoardState()


class TestAccess:
    """Test get/set/move."""

    def test_empty_board(self, board: BoardState) -> None:
        """New board is an 8x8 int8 grid of EMPTY."""
        assert board.grid.shape == (8, 8)
        assert board.grid.dtype == np.int8
        assert np.all(board.grid == EMPTY)
        assert board.get((4, 4)) is None

    def test_set_and_get(self, board: BoardState) -> None:
        """A placed piece reads back unchanged."""
        board.set((2, 3), Piece(CAMEL, SILVER))
        assert board.get((2, 3)) == Piece(CAMEL, SILVER)
        assert board.grid[2, 3] == -CAMEL

    def test_set_none_clears(self, board: BoardState) -> None:
        """Setting None empties the square."""
        board.set((2, 3), Piece(CAMEL, SILVER))
        board.set((2, 3), None)
        assert board.get((2, 3)) is None

    @pytest.mark.parametrize("pos", [(-1, 0), (0, -1), (8, 0), (0, 8)])
    def test_off_board_raises(self, board: BoardState, pos: tuple[int, int]) -> None:
        """Off-board access raises ValueError instead of wrapping."""
        with pytest.raises(ValueError):
            board.get(pos)
        with pytest.raises(ValueError):
            board.set(pos, Piece(RABBIT, GOLD))

    def test_move(self, board: BoardState) -> None:
        """move relocates a piece to an empty square."""
        board.set((4, 4), Piece(DOG, GOLD))
        board.move((4, 4), (3, 4))
        assert board.get((4, 4)) is None
        assert board.get((3, 4)) == Piece(DOG, GOLD)

    def test_move_from_empty_raises(self, board: BoardState) -> None:
        """Moving from an empty square is an error."""
        with pytest.raises(ValueError):
            board.move((4, 4), (3, 4))

    def test_move_onto_occupied_raises(self, board: BoardState) -> None:
        """At most one piece per square."""
        board.set((4, 4), Piece(DOG, GOLD))
        board.set((3, 4), Piece(CAT, SILVER))
        with pytest.raises(ValueError):
            board.move((4, 4), (3, 4))


class TestAdjacency:
    """Test neighbour, friend and freeze queries."""

    def test_traps(self, board: BoardState) -> None:
        """Exactly four trap squares."""
        assert board.is_trap((2, 2))
        assert board.is_trap((5, 5))
        assert not board.is_trap((3, 3))
        assert len(board.traps) == 4

    def test_corner_neighbors(self, board: BoardState) -> None:
        """Corners have two on-board neighbours."""
        assert sorted(board.neighbors((0, 0))) == [(0, 1), (1, 0)]
        assert len(board.neighbors((3, 3))) == 4

    def test_empty_neighbors_excludes(self, board: BoardState) -> None:
        """empty_neighbors skips occupied squares and the excluded one."""
        board.set((2, 3), Piece(CAT, GOLD))
        assert board.empty_neighbors((3, 3), exclude=(3, 4)) == [(4, 3), (3, 2)]

    def test_friendly_count(self, board: BoardState) -> None:
        """Only same-side orthogonal neighbours count."""
        board.set((3, 3), Piece(HORSE, GOLD))
        board.set((2, 3), Piece(CAT, GOLD))
        board.set((4, 3), Piece(RABBIT, GOLD))
        board.set((3, 4), Piece(DOG, SILVER))
        board.set((2, 2), Piece(CAT, GOLD))  # diagonal
        assert board.count_friendly_neighbors((3, 3)) == 2

    def test_friendly_count_empty_square(self, board: BoardState) -> None:
        """Empty squares have no friends."""
        board.set((2, 3), Piece(CAT, GOLD))
        assert board.count_friendly_neighbors((3, 3)) == 0

    def test_friendly_count_at_most_four(self, board: BoardState) -> None:
        """A fully surrounded piece has four friends."""
        board.set((3, 3), Piece(RABBIT, SILVER))
        for pos in board.neighbors((3, 3)):
            board.set(pos, Piece(CAT, SILVER))
        assert board.count_friendly_neighbors((3, 3)) == 4

    def test_frozen_by_stronger_enemy(self, board: BoardState) -> None:
        """A stronger adjacent enemy freezes a lone piece."""
        board.set((4, 4), Piece(RABBIT, GOLD))
        board.set((4, 5), Piece(CAT, SILVER))
        assert board.is_frozen((4, 4))

    def test_ally_unfreezes(self, board: BoardState) -> None:
        """An adjacent ally prevents freezing."""
        board.set((4, 4), Piece(RABBIT, GOLD))
        board.set((4, 5), Piece(CAT, SILVER))
        board.set((5, 4), Piece(RABBIT, GOLD))
        assert not board.is_frozen((4, 4))

    def test_equal_strength_does_not_freeze(self, board: BoardState) -> None:
        """Equal strength is not enough."""
        board.set((4, 4), Piece(DOG, GOLD))
        board.set((4, 5), Piece(DOG, SILVER))
        assert not board.is_frozen((4, 4))

    def test_weaker_enemy_does_not_freeze(self, board: BoardState) -> None:
        """Only strictly stronger enemies freeze."""
        board.set((4, 4), Piece(ELEPHANT, GOLD))
        board.set((4, 5), Piece(CAMEL, SILVER))
        assert not board.is_frozen((4, 4))

    def test_empty_square_not_frozen(self, board: BoardState) -> None:
        """is_frozen is False on an empty square."""
        assert not board.is_frozen((4, 4))

    def test_frozen_on_edge(self, board: BoardState) -> None:
        """Off-board neighbours are skipped."""
        board.set((0, 0), Piece(RABBIT, SILVER))
        board.set((0, 1), Piece(HORSE, GOLD))
        assert board.is_frozen((0, 0))


class TestQueries:
    """Test piece iteration and counting."""

    def test_pieces_row_major(self, board: BoardState) -> None:
        """pieces yields in row-major order, optionally filtered by side."""
        board.set((5, 1), Piece(CAT, GOLD))
        board.set((1, 6), Piece(DOG, SILVER))
        board.set((1, 2), Piece(RABBIT, GOLD))
        assert [pos for pos, _ in board.pieces()] == [(1, 2), (1, 6), (5, 1)]
        assert [pos for pos, _ in board.pieces(GOLD)] == [(1, 2), (5, 1)]

    def test_count(self, board: BoardState) -> None:
        """count is per kind and side."""
        board.set((6, 0), Piece(RABBIT, GOLD))
        board.set((6, 1), Piece(RABBIT, GOLD))
        board.set((1, 1), Piece(RABBIT, SILVER))
        assert board.count(RABBIT, GOLD) == 2
        assert board.count(RABBIT, SILVER) == 1
        assert board.count(CAT, GOLD) == 0


class TestSnapshot:
    """Test snapshot/restore value semantics."""

    def test_snapshot_is_independent(self, board: BoardState) -> None:
        """Mutating the board does not touch an earlier snapshot."""
        board.set((3, 3), Piece(ELEPHANT, GOLD))
        snap = board.snapshot()
        board.move((3, 3), (3, 4))
        assert snap.get((3, 3)) == Piece(ELEPHANT, GOLD)
        assert snap.get((3, 4)) is None

    def test_restore(self, board: BoardState) -> None:
        """restore copies the snapshot back in place."""
        board.set((3, 3), Piece(ELEPHANT, GOLD))
        snap = board.snapshot()
        grid = board.grid
        board.clear()
        board.restore(snap)
        assert board == snap
        assert board.grid is grid

    def test_bad_grid_shape_raises(self) -> None:
        """Wrapped grids must be 8x8."""
        with pytest.raises(ValueError):
            BoardState(np.zeros((7, 8)))


class TestRandomize:
    """Test randomize_one_side."""

    def test_fills_home_rows(self, board: BoardState) -> None:
        """All 16 pieces land on the side's two home rows with the expected counts."""
        placements = board.randomize_one_side(SILVER, EXPECTED_COUNTS, np.random.default_rng(0))
        assert len(placements) == 16
        assert all(pos[0] in (0, 1) for _, pos in placements)
        for kind, n in EXPECTED_COUNTS.items():
            assert board.count(kind, SILVER) == n

    def test_skips_occupied_squares(self, board: BoardState) -> None:
        """Occupied home-row squares are kept and surplus pieces dropped."""
        board.set((7, 0), Piece(ELEPHANT, GOLD))
        placements = board.randomize_one_side(GOLD, EXPECTED_COUNTS, np.random.default_rng(1))
        assert len(placements) == 15
        assert board.get((7, 0)) == Piece(ELEPHANT, GOLD)
        assert all(pos != (7, 0) for _, pos in placements)

    def test_seeded_is_reproducible(self) -> None:
        """Same seed, same layout."""
        a, b = BoardState(), BoardState()
        a.randomize_one_side(GOLD, EXPECTED_COUNTS, np.random.default_rng(42))
        b.randomize_one_side(GOLD, EXPECTED_COUNTS, np.random.default_rng(42))
        assert a == b
