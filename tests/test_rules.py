"""Tests for the rule plug-ins in arimaa.rules."""

from collections.abc import Callable

import numpy as np

from arimaa.constants import EXPECTED_COUNTS, GOLD, RABBIT, SILVER
from arimaa.engine import RuleEngine
from arimaa.notation import Capture, Setup
from arimaa.pieces import Piece
from arimaa.rules.initialization import (
    EmptyInitialization,
    QuickStartInitialization,
    StandardInitialization,
    standard_placements,
)
from arimaa.rules.update import TrapCaptureUpdateRule
from arimaa.rules.validation import (
    STANDARD_VALIDATION_RULES,
    AdjacencyRule,
    FriendlyTargetRule,
    InBoardRule,
    NotFrozenRule,
    OwnershipRule,
    RabbitDirectionRule,
    StrengthRule,
    effective_strength,
)

Place = Callable[..., None]


def bare_engine() -> RuleEngine:
    """Engine on an empty board with no validation or update rules."""
    return RuleEngine(EmptyInitialization, [], [])


class TestInitialization:
    """Test the board initialization rules."""

    def test_empty(self) -> None:
        """EmptyInitialization leaves the board empty and records nothing."""
        game = bare_engine()
        assert not game.board.grid.any()
        assert game.history == []

    def test_standard_placements(self) -> None:
        """Back row first, sixteen pieces per side on the home rows."""
        gold = standard_placements(GOLD)
        assert len(gold) == 16
        assert gold[0] == (Piece(1, GOLD), (7, 0))
        assert all(pos[0] in (6, 7) for _, pos in gold)
        assert all(pos[0] in (0, 1) for _, pos in standard_placements(SILVER))

    def test_standard(self) -> None:
        """StandardInitialization places both sides and records two setup tokens."""
        game = RuleEngine(StandardInitialization, STANDARD_VALIDATION_RULES, [])
        assert [type(t) for t in game.history] == [Setup, Setup]
        assert [t.side for t in game.history] == [GOLD, SILVER]
        assert game.board.get((6, 0)) == Piece(RABBIT, GOLD)
        assert game.board.get((0, 7)) == Piece(1, SILVER)
        for kind, n in EXPECTED_COUNTS.items():
            assert game.board.count(kind, GOLD) == n
            assert game.board.count(kind, SILVER) == n

    def test_quickstart(self) -> None:
        """QuickStart uses the standard Gold layout and a shuffled full Silver side."""
        game = RuleEngine(QuickStartInitialization, [], [], rng=np.random.default_rng(3))
        gold = [(p, pos) for pos, p in game.board.pieces(GOLD)]
        assert sorted(gold, key=lambda x: x[1]) == sorted(
            standard_placements(GOLD), key=lambda x: x[1]
        )
        silver = list(game.board.pieces(SILVER))
        assert len(silver) == 16
        assert all(pos[0] in (0, 1) for pos, _ in silver)
        assert game.history[1].side == SILVER

    def test_reinitialize_resets(self, place: Place) -> None:
        """Re-running EmptyInitialization clears the board."""
        game = bare_engine()
        place(game, "Ed4", "rc6")
        EmptyInitialization.init_board(game)
        assert not game.board.grid.any()


class TestValidationRules:
    """Test each validation rule in isolation."""

    def test_in_board(self) -> None:
        """Both squares must be on the board."""
        game = bare_engine()
        assert InBoardRule.is_valid(game, (0, 0), (1, 0))
        assert not InBoardRule.is_valid(game, (0, 0), (-1, 0))

    def test_ownership(self, place: Place) -> None:
        """Only the active side's pieces may move."""
        game = bare_engine()
        place(game, "Ed4", "ed5")
        assert OwnershipRule.is_valid(game, (4, 3), (5, 3))
        assert not OwnershipRule.is_valid(game, (3, 3), (2, 3))
        assert not OwnershipRule.is_valid(game, (5, 5), (4, 5))

    def test_adjacency(self) -> None:
        """Diagonal and long moves are rejected."""
        game = bare_engine()
        assert AdjacencyRule.is_valid(game, (3, 3), (3, 4))
        assert not AdjacencyRule.is_valid(game, (3, 3), (4, 4))
        assert not AdjacencyRule.is_valid(game, (3, 3), (3, 5))

    def test_not_frozen(self, place: Place) -> None:
        """A frozen piece may not step."""
        game = bare_engine()
        place(game, "Re4", "cf4")
        assert not NotFrozenRule.is_valid(game, (4, 4), (3, 4))

    def test_friendly_target(self, place: Place) -> None:
        """Pieces never step onto their own side."""
        game = bare_engine()
        place(game, "Ed4", "Cd5", "rc4")
        assert not FriendlyTargetRule.is_valid(game, (4, 3), (3, 3))
        assert FriendlyTargetRule.is_valid(game, (4, 3), (4, 2))

    def test_rabbit_direction(self, place: Place) -> None:
        """Gold rabbits may not step south, Silver rabbits may not step north."""
        game = bare_engine()
        place(game, "Re4", "rd5")
        assert RabbitDirectionRule.is_valid(game, (4, 4), (3, 4))
        assert RabbitDirectionRule.is_valid(game, (4, 4), (4, 5))
        assert not RabbitDirectionRule.is_valid(game, (4, 4), (5, 4))
        assert RabbitDirectionRule.is_valid(game, (3, 3), (4, 3))
        assert not RabbitDirectionRule.is_valid(game, (3, 3), (2, 3))

    def test_strength_strict(self, place: Place) -> None:
        """Horse with one friend (4) cannot move a lone Dog (4)."""
        game = bare_engine()
        place(game, "Hd5", "Cd4", "de5")
        assert effective_strength(game, (3, 3)) == 4
        assert effective_strength(game, (3, 4)) == 4
        assert not StrengthRule.is_valid(game, (3, 3), (3, 4))

    def test_strength_with_support(self, place: Place) -> None:
        """Two friends lift the Horse above the Dog."""
        game = bare_engine()
        place(game, "Hd5", "Cd4", "Cd6", "de5")
        assert StrengthRule.is_valid(game, (3, 3), (3, 4))

    def test_effective_strength_empty(self) -> None:
        """Empty squares have zero strength."""
        assert effective_strength(bare_engine(), (3, 3)) == 0

    def test_rule_order(self) -> None:
        """The standard rule list is checked in a fixed order."""
        assert STANDARD_VALIDATION_RULES == [
            InBoardRule,
            OwnershipRule,
            AdjacencyRule,
            NotFrozenRule,
            FriendlyTargetRule,
            RabbitDirectionRule,
            StrengthRule,
        ]


class TestTrapCapture:
    """Test the trap capture update rule."""

    def test_lone_piece_captured(self, place: Place) -> None:
        """An unsupported piece on a trap is removed with one Capture token."""
        game = bare_engine()
        place(game, "Dc6")
        captures = TrapCaptureUpdateRule.update(game)
        assert captures == [Capture(Piece(4, GOLD), (2, 2))]
        assert game.board.get((2, 2)) is None

    def test_supported_piece_survives(self, place: Place) -> None:
        """A friendly neighbour protects the trapped piece."""
        game = bare_engine()
        place(game, "Dc6", "Rc5")
        assert TrapCaptureUpdateRule.update(game) == []
        assert game.board.get((2, 2)) == Piece(4, GOLD)

    def test_enemy_neighbour_does_not_protect(self, place: Place) -> None:
        """Only friends count as support."""
        game = bare_engine()
        place(game, "Dc6", "ec5")
        assert len(TrapCaptureUpdateRule.update(game)) == 1

    def test_fixed_trap_order(self, place: Place) -> None:
        """Traps are visited c6, f6, c3, f3."""
        game = bare_engine()
        place(game, "rf3", "Cc6", "Hf6")
        captures = TrapCaptureUpdateRule.update(game)
        assert [c.position for c in captures] == [(2, 2), (2, 5), (5, 5)]
