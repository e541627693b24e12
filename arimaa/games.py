from __future__ import annotations

from dataclasses import replace
from typing import Any

from .config import GameConfig
from .engine import RuleEngine
from .rules.initialization import (
    EmptyInitialization,
    QuickStartInitialization,
    StandardInitialization,
)
from .rules.update import TrapCaptureUpdateRule
from .rules.validation import STANDARD_VALIDATION_RULES


class ClassicArimaa(RuleEngine):
    """Untimed Arimaa; both sides record their own setup."""

    alias = "classic"

    def __init__(self, config: GameConfig | None = None, **kwargs: Any) -> None:
        """Initialize an untimed game on an empty board."""
        super().__init__(
            initialization_rule=EmptyInitialization,
            validation_rules=STANDARD_VALIDATION_RULES,
            update_rules=[TrapCaptureUpdateRule],
            config=config,
            **kwargs,
        )


class FastArimaa(RuleEngine):
    """Timed Arimaa with per-turn and total limits."""

    alias = "fast"

    def __init__(self, config: GameConfig | None = None, **kwargs: Any) -> None:
        """Initialize a timed game on an empty board; ``config.timed`` is forced on."""
        super().__init__(
            initialization_rule=EmptyInitialization,
            validation_rules=STANDARD_VALIDATION_RULES,
            update_rules=[TrapCaptureUpdateRule],
            config=replace(config or GameConfig(), timed=True),
            **kwargs,
        )


class StandardArimaa(RuleEngine):
    """Both sides start from the standard layout."""

    alias = "standard"

    def __init__(self, config: GameConfig | None = None, **kwargs: Any) -> None:
        super().__init__(
            initialization_rule=StandardInitialization,
            validation_rules=STANDARD_VALIDATION_RULES,
            update_rules=[TrapCaptureUpdateRule],
            config=config,
            **kwargs,
        )


class QuickStartArimaa(RuleEngine):
    """Gold in the standard layout against a randomly arranged Silver."""

    alias = "quickstart"

    def __init__(self, config: GameConfig | None = None, **kwargs: Any) -> None:
        super().__init__(
            initialization_rule=QuickStartInitialization,
            validation_rules=STANDARD_VALIDATION_RULES,
            update_rules=[TrapCaptureUpdateRule],
            config=config,
            **kwargs,
        )


GAME_REGISTRY: dict[str, type[RuleEngine]] = {
    cls.alias: cls for cls in [ClassicArimaa, FastArimaa, StandardArimaa, QuickStartArimaa]
}
