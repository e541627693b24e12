"""Game configuration: timing mode, durations and expected setup counts."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .constants import (
    EXPECTED_COUNTS,
    KIND_LETTERS,
    LETTER_KINDS,
    MAX_TOTAL_DURATION,
    MAX_TURN_DURATION,
    TICK_INTERVAL,
)


@dataclass(frozen=True)
class GameConfig:
    """Mode-gated constants for one game.

    Durations are in seconds. ``expected_counts`` maps piece kinds to the
    number of pieces each side places during setup.
    """

    timed: bool = False
    max_turn_duration: float = MAX_TURN_DURATION
    max_total_duration: float = MAX_TOTAL_DURATION
    tick_interval: float = TICK_INTERVAL
    expected_counts: Mapping[int, int] = field(default_factory=lambda: dict(EXPECTED_COUNTS))

    def __post_init__(self) -> None:
        if self.max_turn_duration <= 0 or self.max_total_duration <= 0:
            raise ValueError("Durations must be positive")
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        unknown = set(self.expected_counts) - set(KIND_LETTERS)
        if unknown:
            raise ValueError(f"Unknown piece kinds in expected_counts: {sorted(unknown)}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameConfig:
        """Build a config from plain data, e.g. a parsed JSON file.

        ``expected_counts`` uses piece letters as keys (``{"R": 8, ...}``).
        """
        allowed = {f.name for f in fields(cls)}
        unknown = set(data) - allowed
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        kwargs = dict(data)
        if "expected_counts" in kwargs:
            counts = {}
            for letter, n in kwargs["expected_counts"].items():
                if letter.upper() not in LETTER_KINDS:
                    raise ValueError(f"Unknown piece letter {letter!r} in expected_counts")
                counts[LETTER_KINDS[letter.upper()]] = int(n)
            kwargs["expected_counts"] = counts
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: str | Path) -> GameConfig:
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        return {
            "timed": self.timed,
            "max_turn_duration": self.max_turn_duration,
            "max_total_duration": self.max_total_duration,
            "tick_interval": self.tick_interval,
            "expected_counts": {KIND_LETTERS[k]: n for k, n in self.expected_counts.items()},
        }
