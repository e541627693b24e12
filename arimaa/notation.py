"""Move tokens and the text codec for Arimaa step notation.

Token grammar (uppercase piece letters are Gold, lowercase Silver)::

    1g Ra2 Rb2 ...   setup line
    Ra2n             simple step, direction in n/s/e/w ('n' towards rank 8)
    Ed5e>f5          push: mover origin + direction to the victim, victim destination
    Ed5e<d4          pull: mover origin + direction to the victim, mover destination
    Cc6x             capture on a trap square
    -                pass
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import ClassVar

from .constants import (
    CHAR_SIDES,
    DIRECTIONS,
    OFFSET_DIRECTIONS,
    PASS_SYMBOL,
    SETUP_TURN,
    SIDE_CHARS,
    SIDES,
    square2tuple,
    tuple2square,
)
from .errors import MalformedNotationError
from .pieces import Piece, Position, is_in_board, manhattan, offset

logger = logging.getLogger(__name__)


def direction_between(origin: Position, target: Position) -> str:
    """Direction letter of the single orthogonal step from ``origin`` to ``target``."""
    delta = (target[0] - origin[0], target[1] - origin[1])
    if delta not in OFFSET_DIRECTIONS:
        raise ValueError(f"Positions {origin} and {target} are not orthogonally adjacent")
    return OFFSET_DIRECTIONS[delta]


@dataclass(frozen=True)
class Setup:
    """Initial placement of one side's pieces."""

    side: int
    placements: tuple[tuple[Piece, Position], ...]
    turn: int = SETUP_TURN

    cost: ClassVar[int] = 0


@dataclass(frozen=True)
class Simple:
    """A piece stepping onto an empty square."""

    piece: Piece
    origin: Position
    direction: str

    cost: ClassVar[int] = 1

    @property
    def target(self) -> Position:
        return offset(self.origin, DIRECTIONS[self.direction])

    @property
    def mover_path(self) -> tuple[Position, Position]:
        return self.origin, self.target


@dataclass(frozen=True)
class Push:
    """Mover steps onto the victim's square after shoving it to ``destination``."""

    piece: Piece
    origin: Position
    direction: str
    destination: Position

    cost: ClassVar[int] = 2

    @property
    def target(self) -> Position:
        return offset(self.origin, DIRECTIONS[self.direction])

    @property
    def mover_path(self) -> tuple[Position, Position]:
        return self.origin, self.target


@dataclass(frozen=True)
class Pull:
    """Mover steps to ``destination`` and drags the victim into its old square."""

    piece: Piece
    origin: Position
    direction: str
    destination: Position

    cost: ClassVar[int] = 2

    @property
    def target(self) -> Position:
        return offset(self.origin, DIRECTIONS[self.direction])

    @property
    def mover_path(self) -> tuple[Position, Position]:
        return self.origin, self.destination


@dataclass(frozen=True)
class Capture:
    """A piece removed from a trap square."""

    piece: Piece
    position: Position

    cost: ClassVar[int] = 0


@dataclass(frozen=True)
class Pass:
    """An unused step padded at the end of a turn.

    ``side`` is known for passes the engine records and None for decoded
    ones; the notation does not carry it, so it takes no part in equality.
    """

    side: int | None = field(default=None, compare=False)

    cost: ClassVar[int] = 1


MoveToken = Setup | Simple | Push | Pull | Capture | Pass
StepToken = Simple | Push | Pull

_PIECE = r"([EMHDCRemhdcr])"
_SQUARE = r"([a-h][1-8])"
SIMPLE_RE = re.compile(rf"^{_PIECE}{_SQUARE}([nsew])$")
SHIFT_RE = re.compile(rf"^{_PIECE}{_SQUARE}([nsew])([<>]){_SQUARE}$")
CAPTURE_RE = re.compile(rf"^{_PIECE}{_SQUARE}x$")
PLACEMENT_RE = re.compile(rf"^{_PIECE}{_SQUARE}$")
SETUP_RE = re.compile(r"^([1-9]\d*)([gs])((?: \S+)*)$")


class NotationCodec:
    """Converts move tokens to and from their text notation."""

    def encode(self, token: MoveToken) -> str:
        """Encode a single token to its notation string."""
        if isinstance(token, Pass):
            return PASS_SYMBOL
        if isinstance(token, Simple):
            return f"{token.piece.letter}{tuple2square[token.origin]}{token.direction}"
        if isinstance(token, Push | Pull):
            sep = ">" if isinstance(token, Push) else "<"
            return (
                f"{token.piece.letter}{tuple2square[token.origin]}{token.direction}"
                f"{sep}{tuple2square[token.destination]}"
            )
        if isinstance(token, Capture):
            return f"{token.piece.letter}{tuple2square[token.position]}x"
        if isinstance(token, Setup):
            entries = "".join(f" {self.encode_placement(p, pos)}" for p, pos in token.placements)
            return f"{self.turn_header(token.side, token.turn)}{entries}"
        raise TypeError(f"Cannot encode {token!r}")

    def encode_placement(self, piece: Piece, pos: Position) -> str:
        return f"{piece.letter}{tuple2square[pos]}"

    def decode(self, text: str) -> MoveToken:
        """Decode a notation string into a token.

        Raises:
            MalformedNotationError: If ``text`` does not follow the grammar or
                describes an impossible geometry.
        """
        if not isinstance(text, str):
            raise MalformedNotationError(f"Invalid notation: {text!r}")
        if text == PASS_SYMBOL:
            return Pass()

        if m := SIMPLE_RE.match(text):
            piece, origin = Piece.from_letter(m[1]), square2tuple[m[2]]
            self._check_direction(text, origin, m[3])
            return Simple(piece, origin, m[3])

        if m := SHIFT_RE.match(text):
            piece, origin = Piece.from_letter(m[1]), square2tuple[m[2]]
            target = self._check_direction(text, origin, m[3])
            destination = square2tuple[m[5]]
            if m[4] == ">":
                if manhattan(target, destination) != 1 or destination == origin:
                    raise MalformedNotationError(f"Push destination not beside victim: {text!r}")
                return Push(piece, origin, m[3], destination)
            if manhattan(origin, destination) != 1 or destination == target:
                raise MalformedNotationError(f"Pull destination not beside mover: {text!r}")
            return Pull(piece, origin, m[3], destination)

        if m := CAPTURE_RE.match(text):
            return Capture(Piece.from_letter(m[1]), square2tuple[m[2]])

        if m := SETUP_RE.match(text):
            side = CHAR_SIDES[m[2]]
            placements = []
            for entry in m[3].split():
                piece, pos = self.decode_placement(entry)
                if piece.side != side:
                    raise MalformedNotationError(
                        f"Setup entry {entry!r} does not belong to side {m[2]!r}"
                    )
                placements.append((piece, pos))
            return Setup(side, tuple(placements), int(m[1]))

        raise MalformedNotationError(f"Invalid notation: {text!r}")

    def decode_placement(self, text: str) -> tuple[Piece, Position]:
        """Decode a setup entry such as ``Ra2``."""
        m = PLACEMENT_RE.match(text)
        if m is None:
            raise MalformedNotationError(f"Invalid placement: {text!r}")
        return Piece.from_letter(m[1]), square2tuple[m[2]]

    @staticmethod
    def _check_direction(text: str, origin: Position, direction: str) -> Position:
        target = offset(origin, DIRECTIONS[direction])
        if not is_in_board(*target):
            raise MalformedNotationError(f"Step leaves the board: {text!r}")
        return target

    def encode_batch(self, tokens: Iterable[MoveToken]) -> list[str]:
        """Encode multiple tokens at once."""
        return [self.encode(t) for t in tokens]

    def decode_batch(self, texts: Iterable[str]) -> list[MoveToken]:
        """Decode multiple notation strings at once; any malformed entry raises."""
        return [self.decode(t) for t in texts]

    def decode_lenient(self, texts: Iterable[str]) -> list[MoveToken]:
        """Decode what can be decoded, logging and skipping malformed entries."""
        tokens = []
        for text in texts:
            try:
                tokens.append(self.decode(text))
            except MalformedNotationError as exc:
                logger.warning("Skipping malformed token %r: %s", text, exc)
        return tokens

    @staticmethod
    def turn_header(side: int, turn: int) -> str:
        """Line header such as ``1g`` or ``12s``."""
        if side not in SIDES:
            raise ValueError(f"Unknown side {side!r}")
        return f"{turn}{SIDE_CHARS[side]}"


def token_side(token: MoveToken) -> int | None:
    """Side that produced ``token``; None for passes of unknown side."""
    if isinstance(token, Setup | Pass):
        return token.side
    return token.piece.side


def is_step(token: MoveToken) -> bool:
    return isinstance(token, Simple | Push | Pull)
