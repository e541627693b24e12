"""Flat text persistence of a game's move history.

One line per turn: setup lines (``1g ...``, ``1s ...``) first, then
``<turn><g|s>`` followed by the turn's step, pass and capture tokens in the
order they occurred. Turn numbers start at 2 with Gold and alternate sides.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from .config import GameConfig
from .constants import CHAR_SIDES, GOLD, MAX_STEPS_PER_TURN, SETUP_TURN, SILVER
from .engine import RuleEngine
from .errors import ArimaaError, MalformedNotationError
from .games import GAME_REGISTRY
from .notation import Capture, MoveToken, NotationCodec, Pass, Setup, is_step, token_side

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^([1-9]\d*)([gs])$")

_codec = NotationCodec()


def _next_turn(turn: int, side: int) -> tuple[int, int]:
    if side == GOLD:
        return turn, SILVER
    return turn + 1, GOLD


def format_history(history: Iterable[MoveToken]) -> list[str]:
    """Group a token history into notation lines, one per turn.

    A new turn line starts when the current one already holds four steps'
    worth of tokens or a step or pass by the other side arrives. Captures stay on the
    line of the step that caused them. The last turn may be incomplete.
    """
    lines = []
    turn, side = SETUP_TURN + 1, GOLD
    current: list[MoveToken] = []
    cost = 0

    def flush() -> None:
        lines.append(" ".join([_codec.turn_header(side, turn), *_codec.encode_batch(current)]))

    for token in history:
        if isinstance(token, Setup):
            lines.append(_codec.encode(token))
            continue

        if is_step(token) or isinstance(token, Pass):
            mover = token_side(token)
            if current and (cost >= MAX_STEPS_PER_TURN or (mover is not None and mover != side)):
                flush()
                turn, side = _next_turn(turn, side)
                current, cost = [], 0
            # a side's turn may have passed without any recorded token
            while not current and mover is not None and mover != side:
                turn, side = _next_turn(turn, side)
            cost += token.cost

        current.append(token)

    if current:
        flush()
    return lines


def save_history(engine: RuleEngine, path: str | Path) -> None:
    """Write the engine's history to ``path`` as UTF-8 text."""
    lines = format_history(engine.get_history())
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    logger.info("Saved %d lines to %s", len(lines), path)


def load_history(
    path: str | Path, game: str = "classic", config: GameConfig | None = None
) -> RuleEngine:
    """Build a fresh ``game`` engine and replay the history stored at ``path``."""
    if game not in GAME_REGISTRY:
        raise ValueError(f"Unknown game {game!r}; choose from {sorted(GAME_REGISTRY)}")
    engine = GAME_REGISTRY[game](config=config)

    with open(path, encoding="utf-8") as f:
        lines = f.read().splitlines()

    replay_lines(engine, lines)
    logger.info("Loaded %s: %d tokens", path, len(engine.history))
    return engine


def replay_lines(engine: RuleEngine, lines: Iterable[str]) -> None:
    """Replay notation lines through the engine's public calls.

    Malformed tokens and recoverable engine rejections are logged and skipped;
    fatal errors propagate.
    """
    for lineno, line in enumerate(lines, start=1):
        parts = line.split()
        if not parts:
            continue
        m = HEADER_RE.match(parts[0])
        if m is None:
            logger.warning("Line %d: skipping line with bad header %r", lineno, parts[0])
            continue
        turn, side = int(m[1]), CHAR_SIDES[m[2]]

        if turn == SETUP_TURN:
            _replay_setup(engine, side, parts[1:], lineno)
        else:
            _replay_turn(engine, side, parts[1:], lineno)


def _replay_setup(engine: RuleEngine, side: int, entries: list[str], lineno: int) -> None:
    placements = []
    for entry in entries:
        try:
            placements.append(_codec.decode_placement(entry))
        except MalformedNotationError as exc:
            logger.warning("Line %d: skipping setup entry: %s", lineno, exc)
    try:
        engine.add_setup(side, placements, validate=False)
    except ArimaaError as exc:
        if not exc.recoverable:
            raise
        logger.warning("Line %d: setup rejected: %s", lineno, exc)


def _replay_turn(engine: RuleEngine, side: int, texts: list[str], lineno: int) -> None:
    engine.begin_turn(side)
    passes = 0
    for text in texts:
        try:
            token = _codec.decode(text)
        except MalformedNotationError as exc:
            logger.warning("Line %d: skipping token: %s", lineno, exc)
            continue

        if isinstance(token, Capture):
            continue
        if isinstance(token, Pass):
            passes += 1
            continue
        if isinstance(token, Setup):
            logger.warning("Line %d: skipping setup token %r inside a turn", lineno, text)
            continue

        try:
            engine.play_token(token)
        except ArimaaError as exc:
            if not exc.recoverable:
                raise
            logger.warning("Line %d: %s rejected: %s", lineno, text, exc)

    if passes and engine.active_side == side and not engine.is_game_over():
        engine.end_turn_early()
