"""
Clave Loop

Lookahead scheduling engine for clave and metronome playback.
"""

__version__ = "0.1.0"

from .engine import LookaheadScheduler, TransportController
from .factory import create_output, create_runtime_state, create_transport
from .result import CommandResult
from .state import PlaybackState, RuntimeState

__all__ = [
    "create_output",
    "create_runtime_state",
    "create_transport",
    "CommandResult",
    "LookaheadScheduler",
    "PlaybackState",
    "RuntimeState",
    "TransportController",
]
