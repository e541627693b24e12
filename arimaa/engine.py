from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .board import BoardState
from .clock import Dispatcher, TimerListener, TurnClock
from .config import GameConfig
from .constants import GOAL_ROW, GOLD, HOME_ROWS, MAX_STEPS_PER_TURN, RABBIT, SIDE_NAMES, SILVER
from .errors import (
    GameOverError,
    OutOfStepsError,
    TimeExceededError,
    ValidationError,
)
from .notation import (
    Capture,
    MoveToken,
    NotationCodec,
    Pass,
    Pull,
    Push,
    Setup,
    Simple,
    StepToken,
    direction_between,
    is_step,
)
from .pieces import Piece, Position, square_name
from .rules.base import InitializeBoard, UpdateRule, ValidationRule
from .undo import UndoLedger, UndoSnapshot

logger = logging.getLogger(__name__)


class EngineState(Enum):
    AWAITING_STEP = "awaiting_step"
    AWAITING_CHOICE = "awaiting_choice"
    GAME_OVER = "game_over"


class ActionType(Enum):
    PUSH = "push"
    PULL = "pull"
    BOTH = "both"


@dataclass(frozen=True)
class Player:
    """A participant, identified explicitly at engine construction."""

    player_id: int
    side: int

    def has_rabbit(self, board: BoardState) -> bool:
        return board.count(RABBIT, self.side) > 0


@dataclass(frozen=True)
class PendingChoice:
    """Push/pull options offered after a step onto an enemy piece."""

    origin: Position
    target: Position
    push_destinations: tuple[Position, ...]
    pull_destinations: tuple[Position, ...]

    @property
    def kind(self) -> ActionType:
        if self.push_destinations and self.pull_destinations:
            return ActionType.BOTH
        return ActionType.PUSH if self.push_destinations else ActionType.PULL


@dataclass(frozen=True)
class Completed:
    """A finished action and the tokens it recorded (step first, then captures)."""

    tokens: tuple[MoveToken, ...] = ()
    turn_ended: bool = False
    retracted: StepToken | None = None


@dataclass(frozen=True)
class ChoiceRequired:
    """The step landed on an enemy; the caller must pick a destination."""

    kind: ActionType
    destinations: tuple[Position, ...]
    push_destinations: tuple[Position, ...] = ()
    pull_destinations: tuple[Position, ...] = ()


StepResult = Completed | ChoiceRequired


class RuleEngine:
    """State machine for one Arimaa game.

    Owns the board, the move history and the undo ledger, and consults the
    turn clock in timed games. Calls are synchronous and must be serialized
    by the caller.
    """

    alias: str = "base"
    max_steps: int = MAX_STEPS_PER_TURN

    def __init__(
        self,
        initialization_rule: type[InitializeBoard],
        validation_rules: list[type[ValidationRule]],
        update_rules: list[type[UpdateRule]],
        config: GameConfig | None = None,
        player_ids: tuple[int, int] = (1, 2),
        listener: TimerListener | None = None,
        dispatcher: Dispatcher | None = None,
        clock: TurnClock | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialize a game with the given rules.

        Args:
            initialization_rule: Places (and records) the starting pieces.
            validation_rules: Checked in order before every step.
            update_rules: Applied after every completed step, push or pull.
            config: Timing mode, durations and setup counts.
            player_ids: Identifiers for the Gold and Silver players.
            listener: Receiver of clock notifications in timed games.
            dispatcher: Runs clock notifications, e.g. on a UI thread.
            clock: Pre-built clock; by default one is built from ``config``.
            rng: Random generator for randomized setups.
        """
        self.config = config or GameConfig()
        self.board = BoardState()
        self.players = {
            GOLD: Player(player_ids[0], GOLD),
            SILVER: Player(player_ids[1], SILVER),
        }
        self.active_side = GOLD
        self.steps_used = 0
        self.history: list[MoveToken] = []
        self.ledger = UndoLedger()
        self.pending: PendingChoice | None = None
        self.timed_out = False
        self.codec = NotationCodec()
        self.rng = rng if rng is not None else np.random.default_rng()

        self.clock = clock or TurnClock(
            timed=self.config.timed,
            max_turn_duration=self.config.max_turn_duration,
            max_total_duration=self.config.max_total_duration,
            tick_interval=self.config.tick_interval,
            listener=listener,
            dispatcher=dispatcher,
        )
        self._clock_started = False

        # rules
        self.initialization_rule = initialization_rule
        self.validation_rules = validation_rules
        self.update_rules = update_rules

        logger.info("Initializing a new %s game (timed=%s)", self.alias, self.config.timed)
        self._initialize_board()

    def _initialize_board(self) -> None:
        self.initialization_rule.init_board(self)

    # ---- setup ------------------------------------------------------------

    def add_setup(
        self,
        side: int,
        placements: Iterable[tuple[Piece, Position]],
        validate: bool = True,
    ) -> Setup:
        """Place ``side``'s starting pieces and record the setup line.

        Args:
            side: GOLD or SILVER.
            placements: ``(piece, position)`` pairs.
            validate: Enforce piece ownership, home rows and per-kind counts.
                Replays of stored games pass False.

        Raises:
            ValidationError: If play has started, the side already set up,
                a square is occupied, or validation fails.
        """
        placements = tuple(placements)
        if any(not isinstance(t, Setup) for t in self.history):
            raise ValidationError("Setup is only allowed before the first step")
        if any(t.side == side for t in self.history):
            raise ValidationError(f"{SIDE_NAMES[side].capitalize()} has already been set up")

        if validate:
            self._validate_setup(side, placements)

        seen = set()
        for piece, pos in placements:
            if pos in seen or self.board.get(pos) is not None:
                raise ValidationError(f"Setup square {square_name(pos)} is already occupied")
            seen.add(pos)

        for piece, pos in placements:
            self.board.set(pos, piece)

        token = Setup(side, placements)
        self.history.append(token)
        logger.info("Setup recorded for %s: %d pieces", SIDE_NAMES[side], len(placements))
        return token

    def _validate_setup(self, side: int, placements: tuple[tuple[Piece, Position], ...]) -> None:
        counts: dict[int, int] = {}
        for piece, pos in placements:
            if piece.side != side:
                raise ValidationError(
                    f"{piece.describe()} cannot be placed by {SIDE_NAMES[side]}"
                )
            if pos[0] not in HOME_ROWS[side]:
                raise ValidationError(
                    f"{square_name(pos)} is outside {SIDE_NAMES[side]}'s home rows"
                )
            counts[piece.kind] = counts.get(piece.kind, 0) + 1

        expected = {k: n for k, n in self.config.expected_counts.items() if n}
        if counts != expected:
            raise ValidationError(
                f"Setup for {SIDE_NAMES[side]} has counts {counts}, expected {expected}"
            )

    # ---- stepping ---------------------------------------------------------

    def attempt_step(self, origin: Position, target: Position) -> StepResult:
        """Try to move the piece on ``origin`` one square to ``target``.

        Returns:
            ``Completed`` for a step onto an empty square or a retraction of
            the previous step, ``ChoiceRequired`` when ``target`` holds a
            weaker enemy that can be pushed or pulled.

        Raises:
            ValidationError: The step breaks a movement rule.
            OutOfStepsError: The turn has no steps left for this action.
            TimeExceededError: A timed game ran out of time.
            GameOverError: The game has already ended.
        """
        origin, target = tuple(origin), tuple(target)
        self._ensure_playable()
        self._save_state()
        self.pending = None

        logger.debug(
            "Player %s attempts to move from %s to %s",
            SIDE_NAMES[self.active_side],
            square_name(origin),
            square_name(target),
        )

        if self.steps_used >= self.max_steps:
            raise OutOfStepsError("No steps left: please end your turn first")

        retraction = self._find_retraction(origin, target)
        if retraction is not None:
            return self._retract(retraction)

        self._enforce_timers()
        self._validate(origin, target)

        mover = self.board.get(origin)
        victim = self.board.get(target)
        if victim is None:
            token = Simple(mover, origin, direction_between(origin, target))
            self.board.move(origin, target)
            self.steps_used += token.cost
            return self._complete(token)

        if self.steps_used + 2 > self.max_steps:
            raise OutOfStepsError("Not enough steps left for push/pull")

        pending = PendingChoice(
            origin,
            target,
            tuple(self.board.empty_neighbors(target, exclude=origin)),
            tuple(self.board.empty_neighbors(origin, exclude=target)),
        )
        if not pending.push_destinations and not pending.pull_destinations:
            raise ValidationError(f"Cannot push or pull the piece at {square_name(target)}")

        self.pending = pending
        logger.debug(
            "Offering %s options: push %s, pull %s",
            pending.kind.value,
            pending.push_destinations,
            pending.pull_destinations,
        )
        return ChoiceRequired(
            pending.kind,
            pending.push_destinations + pending.pull_destinations,
            pending.push_destinations,
            pending.pull_destinations,
        )

    def resolve_choice(self, origin: Position, target: Position, destination: Position) -> Completed:
        """Finish a push or pull offered by the preceding :meth:`attempt_step`.

        ``destination`` is the victim's square for a push and the mover's
        square for a pull.

        Raises:
            ValidationError: No matching choice is pending or ``destination``
                was not offered; the pending choice is kept.
            OutOfStepsError: The turn has fewer than two steps left.
            TimeExceededError: A timed game ran out of time.
            GameOverError: The game has already ended.
        """
        origin, target, destination = tuple(origin), tuple(target), tuple(destination)
        self._ensure_playable()
        self._save_state()

        pending = self.pending
        if pending is None or (pending.origin, pending.target) != (origin, target):
            raise ValidationError(
                f"No push or pull pending from {square_name(origin)} to {square_name(target)}"
            )
        if self.steps_used + 2 > self.max_steps:
            raise OutOfStepsError("Not enough steps left for push/pull")
        self._enforce_timers()

        mover = self.board.get(origin)
        direction = direction_between(origin, target)
        if destination in pending.push_destinations:
            token = Push(mover, origin, direction, destination)
            self._perform_push(origin, target, destination)
        elif destination in pending.pull_destinations:
            token = Pull(mover, origin, direction, destination)
            self._perform_pull(origin, target, destination)
        else:
            raise ValidationError(
                f"Destination {square_name(destination)} is not valid for push/pull"
            )

        self.pending = None
        self.steps_used += token.cost
        return self._complete(token)

    def _perform_push(self, origin: Position, victim: Position, destination: Position) -> None:
        self.board.move(victim, destination)
        self.board.move(origin, victim)

    def _perform_pull(self, origin: Position, victim: Position, destination: Position) -> None:
        self.board.move(origin, destination)
        self.board.move(victim, origin)

    def _complete(self, token: StepToken) -> Completed:
        tokens = self._record(token)
        logger.info(
            "Player %s made move: %s",
            SIDE_NAMES[self.active_side],
            " ".join(self.codec.encode_batch(tokens)),
        )
        turn_ended = self.steps_used >= self.max_steps
        if turn_ended:
            self._switch_side()
        return Completed(tuple(tokens), turn_ended=turn_ended)

    def _record(self, token: StepToken) -> list[MoveToken]:
        """Append ``token`` and the captures of the trap cascade it triggers."""
        tokens: list[MoveToken] = [token]
        for rule in self.update_rules:
            tokens.extend(rule.update(self))
        self.history.extend(tokens)
        return tokens

    # ---- retraction -------------------------------------------------------

    def _find_retraction(self, origin: Position, target: Position) -> StepToken | None:
        """The previous step of this turn if ``origin -> target`` walks it back."""
        if self.steps_used == 0 or not self.history:
            return None
        last = self.history[-1]
        if not is_step(last):
            return None
        start, end = last.mover_path
        if (origin, target) != (end, start):
            return None
        if self.board.get(origin) != last.piece:
            return None
        return last

    def _retract(self, token: StepToken) -> Completed:
        if isinstance(token, Simple):
            self.board.move(token.target, token.origin)
        elif isinstance(token, Push):
            self.board.move(token.target, token.origin)
            self.board.move(token.destination, token.target)
        else:
            self.board.move(token.origin, token.target)
            self.board.move(token.destination, token.origin)

        self.history.pop()
        self.steps_used = max(0, self.steps_used - token.cost)
        logger.info("Inverse move %s undone automatically", self.codec.encode(token))
        return Completed((), retracted=token)

    # ---- validation -------------------------------------------------------

    def _validate(self, origin: Position, target: Position) -> None:
        for rule in self.validation_rules:
            if not rule.is_valid(self, origin, target):
                msg = rule.message.format(origin=square_name(origin), target=square_name(target))
                logger.warning("Illegal step rejected by %s: %s", rule.__name__, msg)
                raise ValidationError(msg)

    def is_legal(self, origin: Position, target: Position) -> bool:
        """Preview whether :meth:`attempt_step` would succeed; never mutates."""
        origin, target = tuple(origin), tuple(target)
        if self.state is EngineState.GAME_OVER or self.steps_used >= self.max_steps:
            return False
        if self._find_retraction(origin, target) is not None:
            return True
        if not all(rule.is_valid(self, origin, target) for rule in self.validation_rules):
            return False
        if self.board.get(target) is None:
            return True
        if self.steps_used + 2 > self.max_steps:
            return False
        return bool(
            self.board.empty_neighbors(target, exclude=origin)
            or self.board.empty_neighbors(origin, exclude=target)
        )

    def get_all_legal_steps(self) -> list[tuple[Position, Position]]:
        """All ``(origin, target)`` pairs the side to move may attempt."""
        steps = []
        for pos, _piece in self.board.pieces(self.active_side):
            for n in self.board.neighbors(pos):
                if self.is_legal(pos, n):
                    steps.append((pos, n))
        return steps

    # ---- turns ------------------------------------------------------------

    def end_turn_early(self) -> list[Pass]:
        """Pad the turn with passes for the unused steps and hand over the move."""
        self._ensure_playable()
        self._save_state()
        self.pending = None

        unused = self.max_steps - self.steps_used
        logger.info("Ending turn early for %s", SIDE_NAMES[self.active_side])
        passes = [Pass(self.active_side) for _ in range(unused)]
        self.history.extend(passes)
        self._switch_side()
        return passes

    def skip_step(self) -> None:
        """Spend one step without a token; the turn switches after the last step."""
        self._ensure_playable()
        self._save_state()
        self.pending = None
        self.steps_used += 1
        if self.steps_used >= self.max_steps:
            self._switch_side()

    def begin_turn(self, side: int) -> None:
        """Make ``side`` the side to move with a fresh step budget (replay support)."""
        self._ensure_playable()
        self._save_state()
        self.pending = None
        if self.active_side != side:
            self._switch_side()
        self.steps_used = 0

    def _switch_side(self) -> None:
        new_side = SILVER if self.active_side == GOLD else GOLD
        logger.info(
            "Switching turn from %s to %s", SIDE_NAMES[self.active_side], SIDE_NAMES[new_side]
        )
        if self._clock_started:
            self.clock.end_turn()
        self.active_side = new_side
        self.steps_used = 0
        if self._clock_started:
            self.clock.start_turn(new_side)

    # ---- clock ------------------------------------------------------------

    def start_clock(self) -> None:
        """Start game and turn timing (timed games only)."""
        if not self.config.timed:
            return
        self._clock_started = True
        self.clock.start_game()
        self.clock.start_turn(self.active_side)

    def stop_clock(self) -> None:
        self._clock_started = False
        self.clock.stop_game_timer()

    def get_current_turn_time(self) -> float:
        return self.clock.get_current_turn_time()

    def get_total_time(self) -> float:
        return self.clock.get_total_time()

    def _enforce_timers(self) -> None:
        if not self.config.timed:
            return
        if self.clock.get_current_turn_time() > self.config.max_turn_duration:
            self._lose_on_time("Turn time exceeded")
        if self.clock.get_total_time() > self.config.max_total_duration:
            self._lose_on_time("Total time exceeded")

    def _lose_on_time(self, reason: str) -> None:
        logger.warning("%s for %s: game over", reason, SIDE_NAMES[self.active_side])
        self.timed_out = True
        self.stop_clock()
        raise TimeExceededError(f"{reason} for {SIDE_NAMES[self.active_side]}")

    # ---- game state -------------------------------------------------------

    def _ensure_playable(self) -> None:
        if self.timed_out:
            raise TimeExceededError("The game was lost on time")
        if self._goal_or_elimination():
            raise GameOverError("The game is over")

    def _in_setup(self) -> bool:
        """True while the board is empty or only one side has recorded its setup."""
        if not self.board.grid.any():
            return True
        set_up = {t.side for t in self.history if isinstance(t, Setup)}
        return len(set_up) == 1 and all(isinstance(t, Setup) for t in self.history)

    def _goal_or_elimination(self) -> bool:
        if self._in_setup():
            return False
        for side in (GOLD, SILVER):
            rabbit = Piece(RABBIT, side)
            if any(self.board.get((GOAL_ROW[side], col)) == rabbit for col in range(8)):
                return True
        return not all(player.has_rabbit(self.board) for player in self.players.values())

    def is_game_over(self) -> bool:
        """True once a rabbit reached its goal row, a side lost all rabbits, or time ran out."""
        over = self.timed_out or self._goal_or_elimination()
        if over:
            logger.debug("Game over")
        return over

    @property
    def state(self) -> EngineState:
        if self.timed_out or self._goal_or_elimination():
            return EngineState.GAME_OVER
        if self.pending is not None:
            return EngineState.AWAITING_CHOICE
        return EngineState.AWAITING_STEP

    def get_active_side(self) -> int:
        return self.active_side

    def get_remaining_steps(self) -> int:
        return self.max_steps - self.steps_used

    def get_history(self) -> list[MoveToken]:
        """Returns the history of tokens recorded so far."""
        return self.history.copy()

    def get_notation(self) -> list[str]:
        return self.codec.encode_batch(self.history)

    # ---- replay -----------------------------------------------------------

    def play_token(self, token: MoveToken) -> Completed | None:
        """Replay one recorded step token through the public step calls.

        Captures and passes are not replayed: the trap cascade regenerates
        captures and passes are produced by :meth:`end_turn_early`.
        """
        if isinstance(token, Simple):
            result = self.attempt_step(token.origin, token.target)
            if not isinstance(result, Completed):
                raise ValidationError(f"{self.codec.encode(token)} landed on an occupied square")
            return result
        if isinstance(token, Push | Pull):
            result = self.attempt_step(token.origin, token.target)
            if not isinstance(result, ChoiceRequired):
                raise ValidationError(f"{self.codec.encode(token)} found no piece to move")
            return self.resolve_choice(token.origin, token.target, token.destination)
        if isinstance(token, Capture | Pass):
            return None
        raise ValidationError(f"Cannot replay {token!r} as a step")

    # ---- undo -------------------------------------------------------------

    def _save_state(self) -> None:
        self.ledger.push(
            UndoSnapshot.capture(
                self.board, self.active_side, self.steps_used, self.history, self.pending
            )
        )

    def undo(self) -> bool:
        """Reverse the most recent mutating call.

        Returns:
            False if there is nothing to undo or the game was lost on time.
        """
        if self.timed_out:
            return False
        prev = self.ledger.pop()
        if prev is None:
            return False

        self.board.restore(prev.board)
        if prev.active_side != self.active_side:
            self._switch_side()
        self.steps_used = prev.steps_used
        self.history[:] = prev.history
        self.pending = prev.pending

        logger.info(
            "Undo complete: history size=%d, current player=%s",
            len(self.history),
            SIDE_NAMES[self.active_side],
        )
        return True
