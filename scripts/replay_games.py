"""Replay stored Arimaa history files through the rule engine.

Each file is loaded into a fresh engine of the chosen variant; skipped tokens
and rejected steps are logged, fatal errors count the file as failed.

Usage::

    python scripts/replay_games.py games/ --game classic
    python scripts/replay_games.py a.txt b.txt --config config.json -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from arimaa.config import GameConfig
from arimaa.constants import SIDE_NAMES
from arimaa.errors import ArimaaError
from arimaa.games import GAME_REGISTRY
from arimaa.persistence import format_history, load_history

logger = logging.getLogger(__name__)


def collect_paths(inputs: list[str], pattern: str) -> list[Path]:
    """Expand directories into the history files they contain, sorted by name."""
    paths = []
    for item in inputs:
        p = Path(item)
        if p.is_dir():
            paths.extend(sorted(p.glob(pattern)))
        else:
            paths.append(p)
    return paths


def replay_files(paths: list[Path], game: str, config: GameConfig | None) -> int:
    """Replay every file and return the number that failed."""
    failures = 0
    for path in tqdm(paths, desc=f"Replaying {game}", unit="game"):
        try:
            engine = load_history(path, game=game, config=config)
        except (ArimaaError, OSError) as exc:
            failures += 1
            logger.error("%s: replay failed: %s", path, exc)
            continue

        lines = format_history(engine.get_history())
        logger.info(
            "%s: %d tokens, %d lines, %s to move, game over: %s",
            path,
            len(engine.history),
            len(lines),
            SIDE_NAMES[engine.get_active_side()],
            engine.is_game_over(),
        )
    return failures


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay stored Arimaa game histories.")
    parser.add_argument(
        "paths",
        nargs="+",
        help="History files or directories containing them",
    )
    parser.add_argument(
        "--game",
        type=str,
        default="classic",
        choices=GAME_REGISTRY.keys(),
        help="Game variant to replay into (default: classic)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional JSON game configuration",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default="*.txt",
        help="Glob used inside directories (default: *.txt)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug-level logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = GameConfig.from_json(args.config) if args.config else None
    paths = collect_paths(args.paths, args.pattern)
    if not paths:
        logger.error("No history files found in %s", args.paths)
        sys.exit(1)

    logger.info("Replaying %d files as %s", len(paths), args.game)
    failed = replay_files(paths, args.game, config)
    logger.info("Done. %d/%d files replayed cleanly.", len(paths) - failed, len(paths))
    sys.exit(1 if failed else 0)
