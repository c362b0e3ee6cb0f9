"""
Voice mixing for the device output.

A Voice is one triggered sample, positioned on the output's frame clock.
mix_voices() renders one audio block and returns the voices that still
have samples left to play.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class Voice:
    """A triggered sample waiting for, or in the middle of, playback."""
    samples: np.ndarray  # mono float32
    gain: float
    start_frame: int
    position: int = 0  # frames already played

    @property
    def finished(self) -> bool:
        return self.position >= len(self.samples)


def mix_voices(
    voices: list[Voice],
    block_start: int,
    frames: int,
) -> tuple[np.ndarray, list[Voice]]:
    """
    Render one block of `frames` frames starting at `block_start`.

    A voice whose start frame already passed starts at the top of the
    block (late triggers play immediately rather than being lost).

    Args:
        voices: Pending and playing voices
        block_start: Frame clock value at the first frame of the block
        frames: Block length

    Returns:
        (mono float32 block, voices still pending or playing)
    """
    mix = np.zeros(frames, dtype=np.float32)
    remaining: list[Voice] = []

    for voice in voices:
        offset = max(0, voice.start_frame - block_start)
        if offset >= frames:
            remaining.append(voice)
            continue

        length = min(frames - offset, len(voice.samples) - voice.position)
        if length > 0:
            chunk = voice.samples[voice.position:voice.position + length]
            mix[offset:offset + length] += chunk * voice.gain
            voice.position += length

        if not voice.finished:
            remaining.append(voice)

    return mix, remaining
