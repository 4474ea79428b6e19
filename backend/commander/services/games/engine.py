import logging
import random
import threading
from typing import Callable, Optional

from .commands import parse_color, parse_direction
from .difficulty import parse_difficulty
from .errors import GameStateError
from .machine import (
    PLAYING_PHASES,
    Announce,
    CancelTimer,
    PlayerInput,
    Quit,
    ReturnToMenu,
    ScheduleTimer,
    Session,
    SessionPhase,
    StartGame,
    Summarize,
    TransitionContext,
    transition,
    validate_player_name,
)


logger = logging.getLogger(__name__)


class RoundEngine:
    """Drives one player's table through sessions.

    The engine owns the current Session and is the only thing that mutates
    it. Every entry point (HTTP/socket requests, timer callbacks, commentary
    results) takes the same lock, so the state machine sees one event at a
    time.
    """

    def __init__(
        self,
        code: str,
        scheduler,
        announcer=None,
        summary=None,
        on_change: Optional[Callable[[dict], None]] = None,
        clock: Optional[Callable[[], float]] = None,
        rng=None,
        announce_delay: float = 1.0,
        victory_delay: float = 0.5,
    ):
        self.code = code
        self.scheduler = scheduler
        self.announcer = announcer
        self.summary = summary
        self.on_change = on_change
        self.clock = clock or scheduler.now
        self.rng = rng or random.Random()
        self.announce_delay = announce_delay
        self.victory_delay = victory_delay
        self.session = Session(player_name='', difficulty=parse_difficulty(None))
        self._lock = threading.RLock()

    @property
    def phase(self) -> SessionPhase:
        return self.session.phase

    # ---- player actions ----

    def start(self, name, difficulty=None) -> dict:
        """Begin a fresh session. Validation happens before anything changes."""
        player_name = validate_player_name(name)
        tier = parse_difficulty(difficulty)
        with self._lock:
            if self.session.phase in PLAYING_PHASES:
                raise GameStateError('A game is already in progress')
            self._cancel_timer(self.session)
            self.session = Session(player_name=player_name, difficulty=tier)
            self._dispatch(StartGame())
            return self._snapshot()

    def restart(self) -> dict:
        with self._lock:
            return self.start(self.session.player_name, self.session.difficulty)

    def submit_input(self, color, direction) -> bool:
        """Returns False when the input arrived outside AWAITING_INPUT."""
        event = PlayerInput(parse_color(color), parse_direction(direction))
        with self._lock:
            return self._dispatch(event)

    def quit(self) -> bool:
        with self._lock:
            return self._dispatch(Quit())

    def return_to_menu(self) -> bool:
        with self._lock:
            return self._dispatch(ReturnToMenu())

    def close(self) -> None:
        with self._lock:
            self._cancel_timer(self.session)

    # ---- state ----

    def snapshot(self) -> dict:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> dict:
        s = self.session
        config = s.config
        if s.phase == SessionPhase.AWAITING_INPUT and s.round_started_at is not None:
            time_left = max(0.0, config.max_time - (self.clock() - s.round_started_at))
        elif s.phase == SessionPhase.ANNOUNCING:
            time_left = float(config.max_time)
        else:
            time_left = 0.0
        show_command = s.command is not None and s.phase in (SessionPhase.ANNOUNCING, SessionPhase.AWAITING_INPUT)
        return {
            'game_code': self.code,
            'session_id': s.id,
            'phase': s.phase.value,
            'player_name': s.player_name,
            'difficulty': s.difficulty.value,
            'difficulty_label': config.label,
            'current_round': s.current_round,
            'total_rounds': config.rounds,
            'score': s.score,
            'display_score': round(s.score),
            'last_round_score': s.last_round_score,
            'command': s.command.to_dict() if show_command else None,
            'is_waiting': s.phase == SessionPhase.TRANSITIONING,
            'time_left': round(time_left, 2),
            'max_time': config.max_time,
            'layout': {'left': s.left_color.value, 'right': s.left_color.other.value},
            'feedback': s.feedback,
            'mood': s.mood,
            'commentary': s.commentary,
            'loading_commentary': s.loading_commentary,
        }

    # ---- internals ----

    def _dispatch(self, event) -> bool:
        session = self.session
        ctx = TransitionContext(
            now=self.clock(),
            rng=self.rng,
            announce_delay=self.announce_delay,
            victory_delay=self.victory_delay,
        )
        previous = session.phase
        new_phase, effects = transition(session, event, ctx)
        if not effects and new_phase == previous:
            logger.debug(f"[phase-ignore] table={self.code} phase={previous.value} event={type(event).__name__}")
            return False
        session.phase = new_phase
        logger.info(
            f"[phase] table={self.code} session={session.id[:8]} {previous.value} -> {new_phase.value} "
            f"round={session.current_round} score={session.score:.1f}"
        )
        for effect in effects:
            self._apply(session, effect)
        self._publish()
        return True

    def _apply(self, session: Session, effect) -> None:
        if isinstance(effect, CancelTimer):
            self._cancel_timer(session)
        elif isinstance(effect, ScheduleTimer):
            self._cancel_timer(session)
            label = f"table={self.code} phase={session.phase.value} round={session.current_round}"
            session.timer = self.scheduler.schedule(
                effect.delay,
                lambda handle, event=effect.event: self._on_timer(handle, event),
                label=label,
            )
        elif isinstance(effect, Announce):
            if self.announcer is None:
                return
            try:
                self.announcer.announce(effect.text)
            except Exception:
                logger.exception(f"[announce] table={self.code} failed to announce {effect.text!r}")
        elif isinstance(effect, Summarize):
            if self.summary is None:
                session.loading_commentary = False
                return
            self.summary.record(session, effect.won, on_commentary=self._receive_commentary)

    def _cancel_timer(self, session: Session) -> None:
        if session.timer is not None:
            session.timer.cancel()
            session.timer = None

    def _on_timer(self, handle, event) -> None:
        with self._lock:
            if handle.cancelled or handle is not self.session.timer:
                logger.info(f"[timer-abort] table={self.code} stale {type(event).__name__}")
                return
            self.session.timer = None
            self._dispatch(event)

    def _receive_commentary(self, session_id: str, text: str) -> None:
        with self._lock:
            if session_id != self.session.id:
                logger.info(f"[commentary] table={self.code} dropping result for old session {session_id[:8]}")
                return
            self.session.commentary = text
            self.session.loading_commentary = False
            self._publish()

    def _publish(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self._snapshot())
        except Exception:
            logger.exception(f"[state-update] table={self.code} publish failed")
