"""Clave Loop State Management"""

from .runtime_state import (
    DEFAULT_BPM,
    PlaybackCursor,
    PlaybackState,
    RuntimeState,
    TempoState,
    Voice,
    VolumeState,
)

__all__ = [
    "RuntimeState",
    "PlaybackCursor",
    "PlaybackState",
    "TempoState",
    "VolumeState",
    "Voice",
    "DEFAULT_BPM",
]
