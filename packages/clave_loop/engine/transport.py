"""
Clave Loop Transport Controller

User-facing state machine that orchestrates:
- Sequence generation (clave text or uniform pattern)
- Play / stop / toggle (Idle <-> Playing)
- Tempo, subdivision, loop, metronome mute and volume changes
- The lookahead scheduler that turns all of the above into sound

Dependencies are injected via constructor for testability.
Use create_transport() factory for production instances.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from typing import Any

from pydantic import ValidationError as PayloadValidationError

from clave_core.exceptions import EmptySequenceError, ValidationError
from clave_core.patterns import (
    describe_bases,
    generate_uniform,
    parse_sequence,
    possible_bases,
)
from clave_core.protocols import CommandSource, Renderer, SoundOutput, StatusSink

from ..commands import (
    BpmCommand,
    GenerateCommand,
    LoopCommand,
    MuteMetronomeCommand,
    PlayCommand,
    QuitCommand,
    StopCommand,
    SubdivisionCommand,
    ToggleCommand,
    VolumeCommand,
)
from ..result import (
    COMMAND_ERROR,
    EMPTY_SEQUENCE,
    INVALID_TEMPO,
    VALIDATION_ERROR,
    CommandResult,
)
from ..state import PlaybackState, RuntimeState, Voice
from .lookahead_scheduler import LookaheadScheduler

logger = logging.getLogger(__name__)


class TransportController:
    """
    Transport state machine for claveloop.

    Idle -> (play) -> Playing -> (stop | sequence exhausted) -> Idle

    Owns the RuntimeState and one LookaheadScheduler. Every handler
    validates its payload, aborts without touching state on failure and
    reports through the StatusSink.
    """

    # Command loop backoff configuration (CPU optimization)
    COMMAND_POLL_MIN_INTERVAL: float = 0.001  # 1ms minimum (responsive)
    COMMAND_POLL_MAX_INTERVAL: float = 0.050  # 50ms maximum

    def __init__(
        self,
        output: SoundOutput,
        renderer: Renderer,
        status: StatusSink,
        commands: CommandSource,
        state: RuntimeState | None = None,
        lookahead_interval: float | None = None,
        schedule_ahead_time: float | None = None,
        start_lead_time: float | None = None,
    ):
        """
        Initialize TransportController with injected dependencies.

        Args:
            output: Sound output (DeviceOutput, SuperDirtOutput or mock)
            renderer: Visual display (TerminalRenderer or mock)
            status: Status sink for errors, bases and transport status
            commands: Command source (ConsoleCommandSource, NoopCommandSource or mock)
            state: Initial runtime state (default: fresh RuntimeState)
            lookahead_interval: Scheduler wake-up period override (seconds)
            schedule_ahead_time: Scheduler horizon override (seconds)
            start_lead_time: First-step lead override (seconds)
        """
        self.state = state if state is not None else RuntimeState()

        # Output (injected)
        self._output = output
        self._renderer = renderer

        # IPC (injected)
        self._status = status
        self._commands = commands

        self._scheduler = LookaheadScheduler(
            self.state,
            self._output,
            self._renderer,
            on_halt=self._on_scheduler_halt,
            lookahead_interval=lookahead_interval,
            schedule_ahead_time=schedule_ahead_time,
            start_lead_time=start_lead_time,
        )

        # Control flags
        self._running = False

    # ================================================================
    # Lifecycle
    # ================================================================

    def start(self) -> None:
        """Connect outputs and the command source"""
        self._output.connect()
        self._renderer.connect()
        self._status.connect()
        self._commands.connect()

        self._register_handlers()
        self._render_idle()

        logger.info("Transport started")

    def stop(self) -> None:
        """Stop playback and disconnect everything"""
        self._running = False

        if self.state.playback_state != PlaybackState.IDLE:
            self._handle_stop({})

        self._commands.disconnect()
        self._renderer.disconnect()
        self._status.disconnect()
        self._output.disconnect()

        logger.info("Transport stopped")

    def shutdown(self) -> None:
        """Ask run() to return"""
        self._running = False

    def _register_handlers(self) -> None:
        """Register command handlers"""
        self._commands.register_handler("generate", self._handle_generate)
        self._commands.register_handler("play", self._handle_play)
        self._commands.register_handler("stop", self._handle_stop)
        self._commands.register_handler("toggle", self._handle_toggle)
        self._commands.register_handler("bpm", self._handle_bpm)
        self._commands.register_handler("subdivision", self._handle_subdivision)
        self._commands.register_handler("loop", self._handle_loop)
        self._commands.register_handler("mute_metronome", self._handle_mute_metronome)
        self._commands.register_handler("volume", self._handle_volume)
        self._commands.register_handler("quit", self._handle_quit)

    # ================================================================
    # Command Handlers
    # ================================================================

    def _handle_generate(self, payload: dict[str, Any]) -> CommandResult:
        """
        Replace the clave (and re-derive the metronome).

        Stops playback first if playing, so the scheduler never runs
        against a stale sequence. On invalid input nothing changes.
        """
        try:
            cmd = GenerateCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid generate command: {e}", VALIDATION_ERROR)

        try:
            if cmd.text is not None:
                clave = parse_sequence(cmd.text)
            else:
                assert cmd.uniform is not None
                clave = generate_uniform(cmd.uniform)
            sequences = self.state.sequences.regenerate(clave)
        except ValidationError as e:
            return self._fail(f"Error: {e}", VALIDATION_ERROR)

        if self.state.playing:
            logger.info("Sequence regenerated during playback, stopping")
            self._stop_playback()

        self.state.sequences = sequences
        self.state.last_error = None

        bases = possible_bases(len(clave))
        self._status.clear_error()
        self._status.send_bases(describe_bases(bases))
        self._render_idle()

        logger.info(f"Sequence generated: {len(clave)} steps ({clave})")
        return CommandResult.ok(data={
            "sequence": list(clave),
            "length": len(clave),
            "bases": [base.label for base in sorted(bases)],
        })

    def _handle_play(self, payload: dict[str, Any]) -> CommandResult:
        """Start playback from the first step"""
        try:
            PlayCommand.model_validate(payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid play command: {e}", VALIDATION_ERROR)

        if self.state.playing:
            # Already playing, do nothing
            return CommandResult.ok("Already playing")

        if self.state.sequences.is_empty:
            error = EmptySequenceError("Generate a clave first")
            return self._fail(str(error), EMPTY_SEQUENCE)

        try:
            interval = self.state.tempo.seconds_per_subdivision
        except ValidationError as e:
            return self._fail(str(e), INVALID_TEMPO)

        self.state.last_error = None
        self._status.clear_error()

        if not self._output.resume():
            logger.warning("Audio output is suspended; beats are dropped until it resumes")

        token = self._scheduler.arm()
        self.state.playback_state = PlaybackState.PLAYING
        self._scheduler.spawn(token)

        logger.info(
            f"Playback started: {self.state.length} steps at {self.state.bpm} BPM "
            f"({interval * 1000:.1f}ms/step, loop={self.state.loop})"
        )
        self._send_status()
        return CommandResult.ok()

    def _handle_stop(self, payload: dict[str, Any]) -> CommandResult:
        """Stop playback and reset to the first step"""
        try:
            StopCommand.model_validate(payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid stop command: {e}", VALIDATION_ERROR)

        if self.state.playback_state == PlaybackState.IDLE:
            # Already stopped, do nothing
            return CommandResult.ok("Already stopped")

        self._stop_playback()
        return CommandResult.ok()

    def _handle_toggle(self, payload: dict[str, Any]) -> CommandResult:
        """Play if idle, stop if playing"""
        try:
            ToggleCommand.model_validate(payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid toggle command: {e}", VALIDATION_ERROR)

        if self.state.playing:
            return self._handle_stop({})
        return self._handle_play({})

    def _handle_bpm(self, payload: dict[str, Any]) -> CommandResult:
        """
        Change BPM.

        Already-committed triggers keep their times; the new interval
        applies from the next unscheduled step.
        """
        try:
            cmd = BpmCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid bpm command: {e}", INVALID_TEMPO)

        old_bpm = self.state.bpm
        try:
            self.state.set_bpm(cmd.bpm)
        except ValidationError as e:
            return self._fail(str(e), INVALID_TEMPO)
        logger.debug(f"BPM changed {old_bpm} → {cmd.bpm}")

        self._send_status()
        return CommandResult.ok()

    def _handle_subdivision(self, payload: dict[str, Any]) -> CommandResult:
        """Re-derive the metronome for a new subdivision"""
        try:
            cmd = SubdivisionCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid subdivision command: {e}", VALIDATION_ERROR)

        try:
            self.state.sequences = self.state.sequences.with_subdivision(cmd.subdivision)
        except ValidationError as e:
            return self._fail(f"Error: {e}", VALIDATION_ERROR)

        logger.debug(f"Subdivision changed to {cmd.subdivision}")
        if not self.state.playing:
            self._render_idle()
        return CommandResult.ok()

    def _handle_loop(self, payload: dict[str, Any]) -> CommandResult:
        """Enable/disable looping"""
        try:
            cmd = LoopCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid loop command: {e}", VALIDATION_ERROR)

        self.state.loop = cmd.loop
        logger.debug(f"Loop={cmd.loop}")
        return CommandResult.ok()

    def _handle_mute_metronome(self, payload: dict[str, Any]) -> CommandResult:
        """Mute/unmute the metronome voice"""
        try:
            cmd = MuteMetronomeCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid mute_metronome command: {e}", VALIDATION_ERROR)

        self.state.metronome_muted = cmd.mute
        logger.debug(f"Metronome mute={cmd.mute}")
        return CommandResult.ok()

    def _handle_volume(self, payload: dict[str, Any]) -> CommandResult:
        """Set one of the master/clave/metronome levels"""
        try:
            cmd = VolumeCommand(**payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid volume command: {e}", VALIDATION_ERROR)

        self.state.set_volume(cmd.voice, cmd.level)
        logger.debug(f"Volume {cmd.voice}={cmd.level}")
        return CommandResult.ok()

    def _handle_quit(self, payload: dict[str, Any]) -> CommandResult:
        """End the session"""
        try:
            QuitCommand.model_validate(payload)
        except PayloadValidationError as e:
            return self._fail(f"Invalid quit command: {e}", VALIDATION_ERROR)

        if self.state.playing:
            self._stop_playback()
        self.shutdown()
        return CommandResult.ok("Bye")

    # ================================================================
    # Public API Methods
    # ================================================================

    def generate(self, text: str) -> CommandResult:
        """
        Public API: Generate the clave from onset counts.

        Args:
            text: Whitespace-separated positive integers, e.g. "3 3 2"

        Returns:
            CommandResult with sequence, length and bases in data
        """
        return self._handle_generate({"text": text})

    def generate_uniform(self, length: int) -> CommandResult:
        """Public API: Generate an alternating on/off sequence."""
        return self._handle_generate({"uniform": length})

    def play(self) -> CommandResult:
        """Public API: Start playback."""
        return self._handle_play({})

    def stop_playback(self) -> CommandResult:
        """Public API: Stop playback and reset position."""
        return self._handle_stop({})

    def toggle(self) -> CommandResult:
        """Public API: Toggle between playing and idle."""
        return self._handle_toggle({})

    def set_bpm(self, bpm: float) -> CommandResult:
        """Public API: Change the BPM (must be positive)."""
        return self._handle_bpm({"bpm": bpm})

    def set_subdivision(self, subdivision: int) -> CommandResult:
        """Public API: Change the metronome subdivision (1-16)."""
        return self._handle_subdivision({"subdivision": subdivision})

    def set_loop(self, loop: bool = True) -> CommandResult:
        """Public API: Enable or disable looping."""
        return self._handle_loop({"loop": loop})

    def set_metronome_muted(self, mute: bool = True) -> CommandResult:
        """Public API: Mute or unmute the metronome."""
        return self._handle_mute_metronome({"mute": mute})

    def set_volume(self, voice: Voice, level: float) -> CommandResult:
        """Public API: Set a volume level in [0, 1]."""
        return self._handle_volume({"voice": voice, "level": level})

    # ================================================================
    # Main Loop
    # ================================================================

    async def run(self) -> None:
        """Run the command loop until shutdown() or a quit command"""
        self._running = True
        await self._command_loop()

    async def _command_loop(self) -> None:
        """
        Process incoming commands with exponential backoff.

        - Starts at COMMAND_POLL_MIN_INTERVAL sleep
        - Doubles on each idle iteration (no commands)
        - Caps at COMMAND_POLL_MAX_INTERVAL
        - Resets to minimum when commands are received
        """
        backoff = self.COMMAND_POLL_MIN_INTERVAL

        while self._running:
            try:
                processed = await self._commands.process_commands()
                if processed > 0:
                    backoff = self.COMMAND_POLL_MIN_INTERVAL
                else:
                    backoff = min(self.COMMAND_POLL_MAX_INTERVAL, backoff * 2)
            except Exception as e:
                logger.error(f"Command processing error: {e}\n{traceback.format_exc()}")
            await asyncio.sleep(backoff)

    async def wait_until_idle(self, timeout: float | None = None) -> bool:
        """
        Wait for playback to halt on its own.

        Returns:
            True if playback ended, False if the timeout elapsed first
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self.state.playing:
            if deadline is not None and loop.time() >= deadline:
                return False
            await asyncio.sleep(self._scheduler.lookahead_interval)
        return True

    # ================================================================
    # Internals
    # ================================================================

    def _stop_playback(self) -> None:
        """Cancel scheduling, reset the cursor and clear the highlight."""
        self._scheduler.cancel()
        self.state.reset_position()
        self.state.playback_state = PlaybackState.IDLE
        self._render_idle()

        logger.info("Playback stopped, position reset")
        self._send_status()

    def _on_scheduler_halt(self, message: str | None, code: str | None) -> None:
        """Scheduler ran out of steps (no loop), hit an invalid tempo or failed."""
        self._stop_playback()
        if message:
            self._fail(message, code or COMMAND_ERROR)

    def _fail(self, message: str, code: str) -> CommandResult:
        """Surface an error to the user without changing any other state."""
        logger.warning(f"{code}: {message}")
        self.state.last_error = message
        self._status.send_error(code, message)
        return CommandResult.error(message, code)

    def _render_idle(self) -> None:
        sequences = self.state.sequences
        self._renderer.render(sequences.clave, sequences.metronome, None)

    def _send_status(self) -> None:
        self._status.send_status(
            transport=self.state.playback_state.value,
            bpm=self.state.bpm,
            length=self.state.length,
        )

    def get_timing_stats(self) -> dict[str, float | int]:
        """Scheduler statistics for monitoring."""
        return self._scheduler.get_timing_stats()

    # ================================================================
    # Properties
    # ================================================================

    @property
    def scheduler(self) -> LookaheadScheduler:
        """The lookahead scheduler"""
        return self._scheduler

    @property
    def output(self) -> SoundOutput:
        """Sound output"""
        return self._output

    @property
    def renderer(self) -> Renderer:
        """Visual renderer"""
        return self._renderer

    @property
    def commands(self) -> CommandSource:
        """Command source"""
        return self._commands

    @property
    def status(self) -> StatusSink:
        """Status sink"""
        return self._status
