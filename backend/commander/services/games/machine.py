"""Round state machine for a single playthrough.

A transition is looked up by ``(session.phase, type(event))`` and returns the
next phase plus a list of effects for the engine to carry out (timers,
narration, end-of-session summary). Pairs missing from the table are
ignored, which is how late inputs and stale timer events become no-ops.
"""

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from .commands import Color, Command, Direction, generate_command
from .difficulty import Difficulty, DifficultyConfig, get_config
from .errors import GameValidationError
from .pacing import wait_time
from .scoring import TIMEOUT_RESTRAINT_SCORE, multiplier_for, round_score


MAX_NAME_LENGTH = 64


class SessionPhase(str, Enum):
    MENU = 'MENU'
    ANNOUNCING = 'ANNOUNCING'
    AWAITING_INPUT = 'AWAITING_INPUT'
    TRANSITIONING = 'TRANSITIONING'
    VICTORY = 'VICTORY'
    DEFEAT = 'DEFEAT'


PLAYING_PHASES = frozenset({
    SessionPhase.ANNOUNCING,
    SessionPhase.AWAITING_INPUT,
    SessionPhase.TRANSITIONING,
})
TERMINAL_PHASES = frozenset({SessionPhase.VICTORY, SessionPhase.DEFEAT})


# ---- Events ----

@dataclass(frozen=True)
class StartGame:
    pass


@dataclass(frozen=True)
class AnnounceElapsed:
    pass


@dataclass(frozen=True)
class PlayerInput:
    color: Color
    direction: Direction


@dataclass(frozen=True)
class CountdownExpired:
    pass


@dataclass(frozen=True)
class NextRoundDue:
    pass


@dataclass(frozen=True)
class VictoryDue:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ReturnToMenu:
    pass


# ---- Effects ----

@dataclass(frozen=True)
class CancelTimer:
    pass


@dataclass(frozen=True)
class ScheduleTimer:
    delay: float
    event: Any


@dataclass(frozen=True)
class Announce:
    text: str


@dataclass(frozen=True)
class Summarize:
    won: bool


@dataclass
class Session:
    player_name: str
    difficulty: Difficulty
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    phase: SessionPhase = SessionPhase.MENU
    current_round: int = 0
    score: float = 0.0
    last_negated: bool = False
    left_color: Color = Color.RED
    command: Optional[Command] = None
    round_started_at: Optional[float] = None
    last_round_score: Optional[float] = None
    feedback: str = 'none'  # none, green, red
    mood: str = 'neutral'  # neutral, happy, angry
    commentary: str = ''
    loading_commentary: bool = False
    # Single pending timer slot; replaced only after cancelling the old one
    timer: Any = None

    @property
    def config(self) -> DifficultyConfig:
        return get_config(self.difficulty)


@dataclass(frozen=True)
class TransitionContext:
    now: float
    rng: Any = random
    announce_delay: float = 1.0
    victory_delay: float = 0.5


Outcome = Tuple[SessionPhase, List[Any]]


def validate_player_name(name) -> str:
    cleaned = str(name).strip() if name is not None else ''
    if not cleaned:
        raise GameValidationError('Please enter a name!')
    if len(cleaned) > MAX_NAME_LENGTH:
        raise GameValidationError(f'Name must be at most {MAX_NAME_LENGTH} characters')
    return cleaned


def _begin_session(session: Session, event: StartGame, ctx: TransitionContext) -> Outcome:
    session.score = 0.0
    session.current_round = 1
    session.last_negated = False
    session.last_round_score = None
    session.commentary = ''
    session.loading_commentary = False
    session.mood = 'neutral'
    # Sides stay fixed for the whole session
    session.left_color = ctx.rng.choice([Color.RED, Color.WHITE])
    return _announce_round(session, event, ctx)


def _announce_round(session: Session, event, ctx: TransitionContext) -> Outcome:
    command = generate_command(session.last_negated, ctx.rng)
    session.command = command
    session.last_negated = command.is_negated
    session.round_started_at = None
    session.feedback = 'none'
    return SessionPhase.ANNOUNCING, [
        CancelTimer(),
        Announce(command.spoken_text()),
        ScheduleTimer(ctx.announce_delay, AnnounceElapsed()),
    ]


def _open_input(session: Session, event: AnnounceElapsed, ctx: TransitionContext) -> Outcome:
    session.round_started_at = ctx.now
    return SessionPhase.AWAITING_INPUT, [
        CancelTimer(),
        ScheduleTimer(session.config.max_time, CountdownExpired()),
    ]


def _evaluate_input(session: Session, event: PlayerInput, ctx: TransitionContext) -> Outcome:
    command = session.command
    if command.is_satisfied_by(event.color, event.direction):
        elapsed = ctx.now - session.round_started_at
        points = round_score(session.config, elapsed, multiplier_for(session.difficulty))
        return _succeed(session, points, ctx)
    if command.is_negated:
        return _fail(session, 'That was the forbidden one!')
    return _fail(session, 'Wrong tentacle!')


def _expire_countdown(session: Session, event: CountdownExpired, ctx: TransitionContext) -> Outcome:
    if session.command.is_negated:
        return _succeed(session, TIMEOUT_RESTRAINT_SCORE, ctx)
    return _fail(session, 'Too slow!')


def _succeed(session: Session, points: float, ctx: TransitionContext) -> Outcome:
    session.score += points
    session.last_round_score = points
    session.feedback = 'green'
    session.mood = 'happy'
    config = session.config
    if session.current_round >= config.rounds:
        follow_up = ScheduleTimer(ctx.victory_delay, VictoryDue())
    else:
        session.current_round += 1
        follow_up = ScheduleTimer(wait_time(session.current_round, config), NextRoundDue())
    return SessionPhase.TRANSITIONING, [CancelTimer(), follow_up]


def _fail(session: Session, narration: str) -> Outcome:
    session.last_round_score = 0
    session.feedback = 'red'
    session.mood = 'angry'
    session.loading_commentary = True
    return SessionPhase.DEFEAT, [CancelTimer(), Announce(narration), Summarize(won=False)]


def _declare_victory(session: Session, event: VictoryDue, ctx: TransitionContext) -> Outcome:
    session.mood = 'happy'
    session.loading_commentary = True
    return SessionPhase.VICTORY, [CancelTimer(), Summarize(won=True)]


def _abandon(session: Session, event, ctx: TransitionContext) -> Outcome:
    # No Summarize: abandoned sessions are never recorded
    session.command = None
    session.round_started_at = None
    session.feedback = 'none'
    session.mood = 'neutral'
    return SessionPhase.MENU, [CancelTimer()]


Handler = Callable[[Session, Any, TransitionContext], Outcome]

_TRANSITIONS: Dict[Tuple[SessionPhase, Type], Handler] = {
    (SessionPhase.MENU, StartGame): _begin_session,
    (SessionPhase.ANNOUNCING, AnnounceElapsed): _open_input,
    (SessionPhase.AWAITING_INPUT, PlayerInput): _evaluate_input,
    (SessionPhase.AWAITING_INPUT, CountdownExpired): _expire_countdown,
    (SessionPhase.TRANSITIONING, NextRoundDue): _announce_round,
    (SessionPhase.TRANSITIONING, VictoryDue): _declare_victory,
}
_TRANSITIONS.update({(phase, Quit): _abandon for phase in PLAYING_PHASES})
_TRANSITIONS.update({(phase, ReturnToMenu): _abandon for phase in TERMINAL_PHASES})


def transition(session: Session, event, ctx: TransitionContext) -> Outcome:
    """Return ``(next_phase, effects)``; unknown pairs leave the phase unchanged."""
    handler = _TRANSITIONS.get((session.phase, type(event)))
    if handler is None:
        return session.phase, []
    return handler(session, event, ctx)
