"""Clave Loop IPC: console command source and status output."""

from .console import (
    ConsoleCommandSource,
    ConsoleStatusSink,
    NoopCommandSource,
    parse_command_line,
)

__all__ = [
    "ConsoleCommandSource",
    "ConsoleStatusSink",
    "NoopCommandSource",
    "parse_command_line",
]
