"""
Lookahead Scheduler

Converts the step sequence and tempo into sound triggers committed ahead
of their sounding time against the output's audio clock.

A coarse wake-up (LOOKAHEAD_INTERVAL) fills everything that falls inside
the horizon (SCHEDULE_AHEAD_TIME). Wake-up jitter only changes *when* a
step gets committed, never *when* it sounds, as long as the horizon
exceeds the worst wake-up delay.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING

from clave_core.exceptions import ValidationError

from ..result import COMMAND_ERROR, INVALID_TEMPO

if TYPE_CHECKING:
    from clave_core.protocols import Renderer, SoundOutput

    from ..state import RuntimeState

logger = logging.getLogger(__name__)

NOTE_SOUND = "note"
KICK_SOUND = "kick"


def _current_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class CancellationToken:
    """Cancellation flag for one playback run."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class LookaheadScheduler:
    """
    Schedules clave and metronome triggers with a lookahead window.

    State (sequence, tempo, volume, loop, mute) is read from RuntimeState
    on every step, so changes apply to the next unscheduled step.
    """

    LOOKAHEAD_INTERVAL: float = 0.025  # wake-up period (seconds)
    SCHEDULE_AHEAD_TIME: float = 0.100  # horizon (seconds)
    START_LEAD_TIME: float = 0.050  # first step offset from "now" (seconds)

    # A step scheduled this far behind the audio clock is reported
    LATE_WARNING_THRESHOLD_MS: float = 20.0

    # Event-loop seconds without audio clock progress before the run halts
    CLOCK_STALL_TIMEOUT: float = 1.0

    HISTORY_SIZE = 256

    def __init__(
        self,
        state: RuntimeState,
        output: SoundOutput,
        renderer: Renderer,
        on_halt: Callable[[str | None, str | None], None] | None = None,
        lookahead_interval: float | None = None,
        schedule_ahead_time: float | None = None,
        start_lead_time: float | None = None,
    ):
        """
        Initialize scheduler.

        Args:
            state: Shared runtime state (owned by TransportController)
            output: Sound output providing trigger() and the audio clock
            renderer: Visual display called once per scheduled step
            on_halt: Called when playback halts on its own, with a message
                for the user and its error code (both None when the
                sequence simply ran out)
            lookahead_interval: Override LOOKAHEAD_INTERVAL
            schedule_ahead_time: Override SCHEDULE_AHEAD_TIME
            start_lead_time: Override START_LEAD_TIME
        """
        self._state = state
        self._output = output
        self._renderer = renderer
        self._on_halt = on_halt

        self.lookahead_interval = (
            lookahead_interval if lookahead_interval is not None else self.LOOKAHEAD_INTERVAL
        )
        self.schedule_ahead_time = (
            schedule_ahead_time if schedule_ahead_time is not None else self.SCHEDULE_AHEAD_TIME
        )
        self.start_lead_time = (
            start_lead_time if start_lead_time is not None else self.START_LEAD_TIME
        )
        self.clock_stall_timeout = self.CLOCK_STALL_TIMEOUT
        if self.schedule_ahead_time <= self.lookahead_interval:
            logger.warning(
                f"Schedule-ahead window ({self.schedule_ahead_time * 1000:.0f}ms) does not "
                f"exceed wake-up interval ({self.lookahead_interval * 1000:.0f}ms); "
                "expect audible gaps"
            )

        self._next_event_time: float = 0.0
        self._token: CancellationToken | None = None
        self._task: asyncio.Task[None] | None = None

        # Recent (cursor, when) pairs for monitoring
        self.scheduled_times: deque[tuple[int, float]] = deque(maxlen=self.HISTORY_SIZE)

        self._timing_stats: dict[str, float | int] = {
            "ticks": 0,
            "scheduled_steps": 0,
            "late_events": 0,
            "max_lateness_ms": 0.0,
        }

    # ================================================================
    # Lifecycle
    # ================================================================

    def arm(self) -> CancellationToken:
        """
        Prepare a new playback run.

        Cancels any previous run, resets the cursor and anchors the first
        step slightly in the future so nothing is scheduled into the past.
        """
        self.cancel()
        self._state.reset_position()
        self._next_event_time = self._output.current_time + self.start_lead_time
        self.scheduled_times.clear()
        self._token = CancellationToken()
        logger.debug(f"Scheduler armed, first step at {self._next_event_time:.3f}s")
        return self._token

    def spawn(self, token: CancellationToken) -> bool:
        """
        Start the recurring wake-up task on the running event loop.

        Returns:
            False if no event loop is running (ticks must be driven manually)
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop (e.g., in tests), skip
            return False
        self._task = loop.create_task(self.run(token))
        return True

    def cancel(self) -> None:
        """Cancel the current run; pending wake-ups become no-ops."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._task is not None:
            # A halt raised from inside the task ends it by returning
            if not self._task.done() and self._task is not _current_task():
                self._task.cancel()
            self._task = None

    async def run(self, token: CancellationToken) -> None:
        """
        Recurring wake-up: tick, sleep, repeat until halted or cancelled.

        A failing tick, or an audio clock that stops advancing for
        clock_stall_timeout seconds, halts the run with a message instead
        of leaving the transport playing.
        """
        loop = asyncio.get_running_loop()
        last_audio_time = self._output.current_time
        last_progress = loop.time()
        try:
            while self.tick(token):
                audio_time = self._output.current_time
                if audio_time > last_audio_time:
                    last_audio_time, last_progress = audio_time, loop.time()
                elif loop.time() - last_progress > self.clock_stall_timeout:
                    logger.error(
                        f"Audio clock stuck at {audio_time:.3f}s for "
                        f"{self.clock_stall_timeout:.1f}s, halting playback"
                    )
                    self._halt(token, "Audio clock stopped; playback halted", COMMAND_ERROR)
                    return
                await asyncio.sleep(self.lookahead_interval)
        except asyncio.CancelledError:
            logger.debug("Scheduler task cancelled")
            raise
        except Exception as e:
            logger.exception("Scheduler wake-up failed, halting playback")
            self._halt(token, f"Playback halted: {e}", COMMAND_ERROR)

    # ================================================================
    # Scheduling
    # ================================================================

    def tick(self, token: CancellationToken) -> bool:
        """
        One wake-up: schedule every step that falls inside the horizon.

        Args:
            token: Token of the run this wake-up belongs to

        Returns:
            True if the caller should wake up again, False if the run is
            over (cancelled, stopped, or halted)
        """
        # A wake-up that was in flight when stop() ran must do nothing
        if token.cancelled or not self._state.playing:
            return False

        self._timing_stats["ticks"] = int(self._timing_stats["ticks"]) + 1
        horizon = self._output.current_time + self.schedule_ahead_time

        while self._next_event_time < horizon:
            if not self._schedule_step(token):
                return False
        return True

    def _schedule_step(self, token: CancellationToken) -> bool:
        """Schedule the step under the cursor and advance. False = halted."""
        state = self._state
        sequences = state.sequences
        length = len(sequences)

        if state.cursor.is_exhausted(length):
            if state.loop and length > 0:
                state.cursor.reset()
            else:
                logger.info("Sequence finished, halting playback")
                self._halt(token, None, None)
                return False

        try:
            interval = state.tempo.seconds_per_subdivision
        except ValidationError as e:
            logger.warning(f"Halting playback: {e}")
            self._halt(token, str(e), INVALID_TEMPO)
            return False

        index = state.cursor.index
        when = self._next_event_time
        self._record_lateness(when)

        volume = state.volume
        if sequences.clave[index] == 1:
            self._trigger(NOTE_SOUND, volume.clave_gain, when)
        if sequences.metronome[index] == 1 and not state.metronome_muted:
            self._trigger(KICK_SOUND, volume.metronome_gain, when)

        # Visual is anchored to scheduling time, not to the audible onset
        self._renderer.render(sequences.clave, sequences.metronome, index)

        self.scheduled_times.append((index, when))
        self._timing_stats["scheduled_steps"] = int(self._timing_stats["scheduled_steps"]) + 1

        self._next_event_time = when + interval
        state.cursor.advance()
        return True

    def _trigger(self, sound_name: str, gain: float, when: float) -> None:
        """Resume the backend if needed, then submit; drop the beat if it stays suspended."""
        if not self._output.resume():
            logger.debug(f"Output suspended, dropped '{sound_name}' at {when:.3f}s")
            return
        self._output.trigger(sound_name, gain, when)

    def _record_lateness(self, when: float) -> None:
        lateness_ms = (self._output.current_time - when) * 1000
        if lateness_ms <= 0:
            return
        self._timing_stats["late_events"] = int(self._timing_stats["late_events"]) + 1
        if lateness_ms > self._timing_stats["max_lateness_ms"]:
            self._timing_stats["max_lateness_ms"] = lateness_ms
        if lateness_ms > self.LATE_WARNING_THRESHOLD_MS:
            logger.warning(
                f"Step scheduled {lateness_ms:.1f}ms late "
                f"(wake-up delayed beyond {self.schedule_ahead_time * 1000:.0f}ms horizon)"
            )
        else:
            logger.debug(f"Step scheduled {lateness_ms:.1f}ms late")

    def _halt(self, token: CancellationToken, message: str | None, code: str | None) -> None:
        token.cancel()
        if self._token is token:
            self._token = None
        if self._on_halt is not None:
            self._on_halt(message, code)

    # ================================================================
    # Status
    # ================================================================

    @property
    def next_event_time(self) -> float:
        """Audio time at which the next unscheduled step will sound"""
        return self._next_event_time

    @property
    def token(self) -> CancellationToken | None:
        """Token of the current run (None when not armed)"""
        return self._token

    @property
    def is_active(self) -> bool:
        """Whether a run is armed and not cancelled"""
        return self._token is not None and not self._token.cancelled

    def get_timing_stats(self) -> dict[str, float | int]:
        """Get scheduling statistics for monitoring."""
        return {
            **self._timing_stats,
            "next_event_time": self._next_event_time,
        }
