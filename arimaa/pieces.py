"""Piece value type and helpers shared by the board, rules and notation."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    BOARD_DIM,
    GOLD,
    KIND_LETTERS,
    KIND_NAMES,
    LETTER_KINDS,
    RABBIT,
    SIDE_NAMES,
    SIDES,
    SILVER,
    STRENGTH,
    tuple2square,
)

Position = tuple[int, int]


@dataclass(frozen=True)
class Piece:
    """A piece of a given kind owned by one side."""

    kind: int
    side: int

    def __post_init__(self) -> None:
        if self.kind not in KIND_LETTERS:
            raise ValueError(f"Unknown piece kind {self.kind!r}")
        if self.side not in SIDES:
            raise ValueError(f"Unknown side {self.side!r}")

    @property
    def strength(self) -> int:
        return STRENGTH[self.kind]

    @property
    def code(self) -> int:
        """Signed board code: positive for Gold, negative for Silver."""
        return self.side * self.kind

    @property
    def letter(self) -> str:
        letter = KIND_LETTERS[self.kind]
        return letter if self.side == GOLD else letter.lower()

    @property
    def is_rabbit(self) -> bool:
        return self.kind == RABBIT

    @classmethod
    def from_code(cls, code: int) -> Piece:
        """Build a piece from a non-zero board code."""
        code = int(code)
        if code == 0:
            raise ValueError("Board code 0 is an empty square, not a piece")
        return cls(abs(code), GOLD if code > 0 else SILVER)

    @classmethod
    def from_letter(cls, letter: str) -> Piece:
        """Build a piece from its notation letter; case selects the side."""
        if len(letter) != 1 or letter.upper() not in LETTER_KINDS:
            raise ValueError(f"Unknown piece letter {letter!r}")
        side = GOLD if letter.isupper() else SILVER
        return cls(LETTER_KINDS[letter.upper()], side)

    def __str__(self) -> str:
        return self.letter

    def describe(self) -> str:
        return f"{SIDE_NAMES[self.side]} {KIND_NAMES[self.kind]}"


def is_in_board(row: int, col: int) -> bool:
    """Check if coordinates are within the board boundaries."""
    return 0 <= row < BOARD_DIM and 0 <= col < BOARD_DIM


def offset(pos: Position, delta: tuple[int, int]) -> Position:
    return (pos[0] + delta[0], pos[1] + delta[1])


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def square_name(pos: Position) -> str:
    """Name a position in file/rank form, falling back to the raw tuple off-board."""
    return tuple2square.get(tuple(pos), str(tuple(pos)))
