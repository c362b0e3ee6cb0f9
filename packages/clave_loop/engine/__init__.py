"""Clave Loop Engine"""

from .lookahead_scheduler import (
    KICK_SOUND,
    NOTE_SOUND,
    CancellationToken,
    LookaheadScheduler,
)
from .transport import TransportController

__all__ = [
    "CancellationToken",
    "LookaheadScheduler",
    "TransportController",
    "NOTE_SOUND",
    "KICK_SOUND",
]
