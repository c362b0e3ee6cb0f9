"""
Protocol interfaces for clave_core.

This module exports protocol definitions for:
- Output interfaces (SoundOutput, Renderer)
- Command/status channel (CommandSource, StatusSink)
"""

from clave_core.protocols.ipc import CommandSource, StatusSink
from clave_core.protocols.output import Renderer, SoundOutput

__all__ = [
    "CommandSource",
    "StatusSink",
    "Renderer",
    "SoundOutput",
]
