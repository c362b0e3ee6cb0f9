"""
Clave Loop Runtime State

Explicit state struct owned by the TransportController and read by the
scheduler on every step. Composite values (tempo, volume, sequences) are
frozen and replaced by assignment, so a scheduler iteration never sees a
half-updated value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal

from clave_core.exceptions import ValidationError
from clave_core.patterns import seconds_per_subdivision
from clave_core.sequence_model import SequenceModel

Voice = Literal["master", "clave", "metronome"]

DEFAULT_BPM = 120.0


class PlaybackState(Enum):
    """Transport state enumeration"""
    IDLE = "idle"
    PLAYING = "playing"


@dataclass
class PlaybackCursor:
    """Index of the next step to be scheduled"""
    index: int = 0

    def advance(self) -> None:
        """Advance by one step"""
        self.index += 1

    def reset(self) -> None:
        """Reset to the first step"""
        self.index = 0

    def is_exhausted(self, length: int) -> bool:
        """True once every step of a `length`-step sequence was scheduled"""
        return self.index >= length


@dataclass(frozen=True)
class TempoState:
    """Tempo in beats per minute"""
    bpm: float = DEFAULT_BPM

    @property
    def seconds_per_subdivision(self) -> float:
        """Step duration (half a beat); raises ValidationError if bpm is invalid"""
        return seconds_per_subdivision(self.bpm)


@dataclass(frozen=True)
class VolumeState:
    """Gain multipliers in [0, 1]"""
    master: float = 1.0
    clave: float = 1.0
    metronome: float = 1.0

    def __post_init__(self) -> None:
        for name in ("master", "clave", "metronome"):
            level = getattr(self, name)
            if not 0.0 <= level <= 1.0:
                raise ValidationError(f"Volume '{name}' must be between 0 and 1, got {level}")

    @property
    def clave_gain(self) -> float:
        """Effective gain for the clave voice"""
        return self.clave * self.master

    @property
    def metronome_gain(self) -> float:
        """Effective gain for the metronome voice"""
        return self.metronome * self.master

    def with_level(self, voice: Voice, level: float) -> VolumeState:
        """New VolumeState with one level replaced"""
        if voice not in ("master", "clave", "metronome"):
            raise ValidationError(f"Unknown volume '{voice}'")
        return replace(self, **{voice: float(level)})


@dataclass
class RuntimeState:
    """
    Runtime state for the transport and scheduler.

    Replaces free-standing UI-bound variables: everything the scheduler
    needs is read from here on each step.
    """

    sequences: SequenceModel = field(default_factory=SequenceModel)
    tempo: TempoState = field(default_factory=TempoState)
    volume: VolumeState = field(default_factory=VolumeState)
    loop: bool = False
    metronome_muted: bool = False

    # Transport
    playback_state: PlaybackState = PlaybackState.IDLE
    cursor: PlaybackCursor = field(default_factory=PlaybackCursor)

    # Last message surfaced to the user (None when cleared)
    last_error: str | None = None

    @property
    def playing(self) -> bool:
        """Check if actively playing"""
        return self.playback_state == PlaybackState.PLAYING

    @property
    def bpm(self) -> float:
        """Get current BPM"""
        return self.tempo.bpm

    @property
    def subdivision(self) -> int:
        """Get current metronome subdivision"""
        return self.sequences.subdivision

    @property
    def length(self) -> int:
        """Get current sequence length"""
        return len(self.sequences)

    def set_bpm(self, bpm: float) -> None:
        """Replace tempo (validated)"""
        seconds_per_subdivision(bpm)
        self.tempo = TempoState(bpm=float(bpm))

    def set_volume(self, voice: Voice, level: float) -> None:
        """Replace one volume level (validated)"""
        self.volume = self.volume.with_level(voice, level)

    def reset_position(self) -> None:
        """Reset playback cursor to start"""
        self.cursor.reset()

    def to_status_dict(self) -> dict[str, Any]:
        """Convert to status message format"""
        return {
            "playing": self.playing,
            "playback_state": self.playback_state.value,
            "bpm": self.bpm,
            "subdivision": self.subdivision,
            "length": self.length,
            "cursor": self.cursor.index,
            "loop": self.loop,
            "metronome_muted": self.metronome_muted,
            "volume": {
                "master": self.volume.master,
                "clave": self.volume.clave,
                "metronome": self.volume.metronome,
            },
            "error": self.last_error,
        }
