"""
Clave Loop Device Output

Plays sound-bank samples on a local audio device through a sounddevice
output stream. While the stream runs, the audio clock is the number of
frames it has rendered. While it is stopped or cannot be opened (a
suspended audio context), the clock keeps running on time.perf_counter(),
so the scheduler drops beats instead of waiting on a clock that never
moves. Switching clocks carries the current time over, so it never jumps.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import numpy as np
import sounddevice as sd

from clave_core.exceptions import UnknownSoundError

from .sound_bank import SoundBank
from .voices import Voice, mix_voices

logger = logging.getLogger(__name__)


class DeviceOutput:
    """Sample playback on the default (or a chosen) output device"""

    DEFAULT_BLOCKSIZE = 256

    def __init__(
        self,
        bank: SoundBank,
        blocksize: int = DEFAULT_BLOCKSIZE,
        device: int | str | None = None,
        channels: int = 1,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._bank = bank
        self.samplerate = bank.samplerate
        self.blocksize = int(blocksize)
        self._device = device
        self._channels = int(channels)

        self._stream: sd.OutputStream | None = None
        self._lock = threading.Lock()
        self._voices: list[Voice] = []
        self._frames_rendered = 0

        # Audio time is _frame_offset + frames / samplerate while running,
        # otherwise _idle_audio_time + (clock() - _idle_since)
        self._clock = clock
        self._running = False
        self._frame_offset = 0.0
        self._idle_since = clock()
        self._idle_audio_time = 0.0
        self._suspend_reported = False

    # ================================================================
    # Lifecycle
    # ================================================================

    def connect(self) -> None:
        """Open the output stream (not started: the fallback clock keeps time)"""
        if self._stream is not None:
            return
        try:
            self._stream = sd.OutputStream(
                samplerate=self.samplerate,
                blocksize=self.blocksize,
                channels=self._channels,
                dtype="float32",
                device=self._device,
                callback=self._callback,
                latency="low",
            )
            logger.info(
                f"Audio device opened ({self.samplerate}Hz, blocksize {self.blocksize})"
            )
        except sd.PortAudioError as e:
            # Retried before every trigger while suspended; report once
            log = logger.debug if self._suspend_reported else logger.error
            log(f"Failed to open audio device: {e}")
            self._stream = None

    def disconnect(self) -> None:
        """Stop and close the stream, dropping pending voices"""
        if self._stream is not None:
            try:
                self._stream.abort()
                self._stream.close()
            except sd.PortAudioError as e:
                logger.error(f"Error closing audio device: {e}")
            self._stream = None
        self._set_running(False)
        with self._lock:
            self._voices.clear()
        logger.info("Audio device closed")

    def resume(self) -> bool:
        """Start the stream if needed (idempotent)"""
        if self._stream is None:
            self.connect()
            if self._stream is None:
                self._suspend()
                return False
        if self._stream.active:
            self._set_running(True)
            return True
        try:
            self._stream.start()
        except sd.PortAudioError as e:
            log = logger.debug if self._suspend_reported else logger.error
            log(f"Failed to start audio stream: {e}")
            self._suspend()
            return False
        self._set_running(True)
        self._suspend_reported = False
        logger.info("Audio stream started")
        return True

    def _suspend(self) -> None:
        self._set_running(False)
        if not self._suspend_reported:
            self._suspend_reported = True
            logger.error("Audio output suspended; beats are dropped until it resumes")

    # ================================================================
    # Clock
    # ================================================================

    def _set_running(self, running: bool) -> None:
        """Hand timekeeping to the frame counter or back to the fallback clock"""
        with self._lock:
            if running == self._running:
                return
            now = self._now_locked()
            if running:
                self._frame_offset = now - self._frames_rendered / self.samplerate
            else:
                self._idle_since = self._clock()
                self._idle_audio_time = now
            self._running = running

    def _now_locked(self) -> float:
        if self._running:
            return self._frame_offset + self._frames_rendered / self.samplerate
        return self._idle_audio_time + (self._clock() - self._idle_since)

    # ================================================================
    # Triggers
    # ================================================================

    def trigger(self, sound_name: str, gain: float, when: float) -> None:
        """Queue a sample to start at audio time `when`"""
        try:
            samples = self._bank.get(sound_name)
        except UnknownSoundError as e:
            logger.error(f"Trigger dropped: {e}")
            return

        with self._lock:
            self._voices.append(Voice(
                samples=samples,
                gain=float(gain),
                start_frame=int(round((when - self._frame_offset) * self.samplerate)),
            ))

    def _callback(self, outdata: np.ndarray, frames: int, time_info: Any, status: sd.CallbackFlags) -> None:
        if status:
            logger.debug(f"Audio callback status: {status}")

        with self._lock:
            block, self._voices = mix_voices(self._voices, self._frames_rendered, frames)
            self._frames_rendered += frames

        np.clip(block, -1.0, 1.0, out=block)
        outdata[:] = block[:, None]

    # ================================================================
    # Properties
    # ================================================================

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._now_locked()

    @property
    def is_running(self) -> bool:
        """Whether the frame counter (not the fallback clock) keeps time"""
        with self._lock:
            return self._running

    @property
    def pending_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    @property
    def is_connected(self) -> bool:
        return self._stream is not None
