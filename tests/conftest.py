"""Pytest configuration and fixtures for arimaa tests."""

from collections.abc import Callable, Iterator

import pytest

from arimaa.clock import TurnClock
from arimaa.config import GameConfig
from arimaa.constants import GOLD, RABBIT, SILVER
from arimaa.engine import RuleEngine
from arimaa.games import ClassicArimaa, FastArimaa, StandardArimaa
from arimaa.notation import NotationCodec
from arimaa.pieces import Piece


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingListener:
    """TimerListener that records every notification."""

    def __init__(self) -> None:
        self.updates: list[tuple[float, int]] = []
        self.total_updates: list[float] = []
        self.turn_timeouts: list[int] = []
        self.total_timeouts = 0

    def on_time_update(self, elapsed: float, side: int) -> None:
        self.updates.append((elapsed, side))

    def on_total_time_update(self, total: float) -> None:
        self.total_updates.append(total)

    def on_turn_timeout(self, side: int) -> None:
        self.turn_timeouts.append(side)

    def on_total_timeout(self) -> None:
        self.total_timeouts += 1


@pytest.fixture
def classic_game() -> ClassicArimaa:
    """Fresh ClassicArimaa instance (empty board, no setup yet)."""
    return ClassicArimaa()


@pytest.fixture
def standard_game() -> StandardArimaa:
    """Fresh StandardArimaa instance with both setups recorded."""
    return StandardArimaa()


@pytest.fixture
def sparse_game() -> ClassicArimaa:
    """ClassicArimaa with only a Gold rabbit on h1 and a Silver rabbit on a8."""
    game = ClassicArimaa()
    game.board.set((7, 7), Piece(RABBIT, GOLD))
    game.board.set((0, 0), Piece(RABBIT, SILVER))
    return game


@pytest.fixture
def place() -> Callable[..., None]:
    """Helper placing pieces from setup entries such as ``"Ed5"`` or ``"rc6"``."""
    codec = NotationCodec()

    def _place(game: RuleEngine, *entries: str) -> None:
        for entry in entries:
            piece, pos = codec.decode_placement(entry)
            game.board.set(pos, piece)

    return _place


@pytest.fixture
def fake_time() -> FakeTime:
    """Manually advanced time source."""
    return FakeTime()


@pytest.fixture
def listener() -> RecordingListener:
    """Fresh recording listener."""
    return RecordingListener()


@pytest.fixture
def timed_game(fake_time: FakeTime) -> Iterator[FastArimaa]:
    """FastArimaa with a 10 s turn limit, a 30 s game limit and a fake time source."""
    config = GameConfig(timed=True, max_turn_duration=10.0, max_total_duration=30.0)
    clock = TurnClock(
        timed=True,
        max_turn_duration=config.max_turn_duration,
        max_total_duration=config.max_total_duration,
        tick_interval=0.05,
        time_fn=fake_time,
    )
    game = FastArimaa(config=config, clock=clock)
    game.board.set((7, 7), Piece(RABBIT, GOLD))
    game.board.set((0, 0), Piece(RABBIT, SILVER))
    yield game
    game.stop_clock()
