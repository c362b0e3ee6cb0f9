"""
Console Command Source and Status Sink

Lines typed on stdin become commands for the TransportController:

    gen 3 3 2        generate a clave from onset counts
    uniform 16       generate an alternating sequence
    play | stop | toggle
    bpm 140          set tempo
    sub 4            set metronome subdivision
    loop on|off      enable/disable looping
    mute on|off      mute/unmute the metronome
    vol clave 0.5    set a volume (master, clave, metronome)
    quit

A daemon thread reads stdin and hands lines to the event loop through a
thread-safe queue; process_commands() drains it on the loop.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from typing import TYPE_CHECKING, Any, TextIO

from rich.console import Console

from clave_core.exceptions import ValidationError

from ..result import VALIDATION_ERROR

if TYPE_CHECKING:
    from collections.abc import Callable

    from clave_core.protocols import StatusSink

logger = logging.getLogger(__name__)

_ALIASES = {
    "gen": "generate",
    "generate": "generate",
    "uniform": "uniform",
    "play": "play",
    "stop": "stop",
    "toggle": "toggle",
    "bpm": "bpm",
    "tempo": "bpm",
    "sub": "subdivision",
    "subdivision": "subdivision",
    "loop": "loop",
    "mute": "mute_metronome",
    "vol": "volume",
    "volume": "volume",
    "quit": "quit",
    "exit": "quit",
}

_SWITCHES = {"on": True, "off": False}


def _expect_args(word: str, args: list[str], count: int) -> None:
    if len(args) != count:
        raise ValidationError(f"'{word}' takes {count} argument(s), got {len(args)}")


def _parse_number(word: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError:
        raise ValidationError(f"'{word}' expects a number (got '{value}')") from None


def _parse_switch(word: str, value: str) -> bool:
    try:
        return _SWITCHES[value.lower()]
    except KeyError:
        raise ValidationError(f"'{word}' expects on or off (got '{value}')") from None


def parse_command_line(line: str) -> tuple[str, dict[str, Any]]:
    """
    Parse one console line into (command_type, payload).

    Only the shape of the line is checked here; value ranges are
    validated by the command models in the handlers.

    Raises:
        ValidationError: Unknown command or malformed arguments
    """
    tokens = line.split()
    if not tokens:
        raise ValidationError("Empty command")

    word, args = tokens[0].lower(), tokens[1:]
    command = _ALIASES.get(word)
    if command is None:
        raise ValidationError(f"Unknown command '{word}'")

    if command == "generate":
        if not args:
            raise ValidationError(f"'{word}' needs onset counts, e.g. '{word} 3 3 2'")
        return "generate", {"text": " ".join(args)}

    if command == "uniform":
        _expect_args(word, args, 1)
        return "generate", {"uniform": _parse_number(word, args[0], int)}

    if command in ("play", "stop", "toggle", "quit"):
        _expect_args(word, args, 0)
        return command, {}

    if command == "bpm":
        _expect_args(word, args, 1)
        return "bpm", {"bpm": _parse_number(word, args[0], float)}

    if command == "subdivision":
        _expect_args(word, args, 1)
        return "subdivision", {"subdivision": _parse_number(word, args[0], int)}

    if command == "loop":
        _expect_args(word, args, 1)
        return "loop", {"loop": _parse_switch(word, args[0])}

    if command == "mute_metronome":
        _expect_args(word, args, 1)
        return "mute_metronome", {"mute": _parse_switch(word, args[0])}

    # volume
    _expect_args(word, args, 2)
    return "volume", {
        "voice": args[0].lower(),
        "level": _parse_number(word, args[1], float),
    }


class ConsoleCommandSource:
    """CommandSource reading lines from a text stream (stdin by default)"""

    def __init__(
        self,
        stream: TextIO | None = None,
        status: StatusSink | None = None,
    ):
        self._stream = stream if stream is not None else sys.stdin
        self._status = status
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = {}
        self._lines: queue.SimpleQueue[str] = queue.SimpleQueue()
        self._reader: threading.Thread | None = None
        self._connected = False

    def connect(self) -> None:
        """Start the stdin reader thread"""
        if self._connected:
            return
        self._connected = True
        self._reader = threading.Thread(
            target=self._read_lines, name="clave-console-reader", daemon=True
        )
        self._reader.start()
        logger.info("Console command source connected")

    def disconnect(self) -> None:
        """Stop dispatching (the reader thread exits at the next line or EOF)"""
        self._connected = False
        self._reader = None
        logger.info("Console command source disconnected")

    def _read_lines(self) -> None:
        while self._connected:
            try:
                line = self._stream.readline()
            except (ValueError, OSError) as e:
                # Stream closed underneath us
                logger.debug(f"Console reader stopped: {e}")
                return
            if not line:
                # EOF ends the session
                self.submit_line("quit")
                return
            self.submit_line(line)

    def submit_line(self, line: str) -> None:
        """Queue a line as if it had been typed"""
        self._lines.put(line)

    def register_handler(
        self, command_type: str, handler: Callable[[dict[str, Any]], Any]
    ) -> None:
        """Register a handler for a command type"""
        self._handlers[command_type] = handler

    async def process_commands(self) -> int:
        """
        Dispatch queued lines to registered handlers

        Returns:
            Number of commands processed
        """
        processed = 0

        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                break

            if not line.strip():
                continue

            try:
                cmd_type, payload = parse_command_line(line)
            except ValidationError as e:
                self._report(str(e))
                continue

            handler = self._handlers.get(cmd_type)
            if handler is None:
                logger.warning(f"No handler for command type: {cmd_type}")
                continue

            try:
                result = handler(payload)
                processed += 1
            except Exception as e:
                logger.error(f"Handler error for '{cmd_type}': {e}")
                continue

            message = getattr(result, "message", None)
            if message and getattr(result, "success", False):
                logger.info(f"{cmd_type}: {message}")

        return processed

    def _report(self, message: str) -> None:
        if self._status is not None:
            self._status.send_error(VALIDATION_ERROR, message)
        else:
            logger.warning(f"Invalid command: {message}")

    @property
    def is_connected(self) -> bool:
        return self._connected


class NoopCommandSource:
    """CommandSource that does nothing.

    process_commands() always returns 0, so the command loop backs off
    to its full interval. Used for scripted (non-interactive) playback.
    """

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def register_handler(self, command_type: str, handler: Any) -> None:
        """No-op handler registration."""
        pass

    async def process_commands(self) -> int:
        return 0

    @property
    def is_connected(self) -> bool:
        """Always connected (no-op)."""
        return True


class ConsoleStatusSink:
    """StatusSink printing to a rich console"""

    def __init__(self, console: Console | None = None, show_status: bool = True):
        self._console = console if console is not None else Console(stderr=True)
        self._show_status = show_status
        self.last_error: str | None = None
        self.bases: str | None = None

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def send_error(self, code: str, message: str) -> None:
        self.last_error = message
        self._console.print(f"[red]✗[/red] {message}", highlight=False)

    def clear_error(self) -> None:
        self.last_error = None

    def send_bases(self, description: str) -> None:
        self.bases = description
        self._console.print(f"[cyan]{description}[/cyan]", highlight=False)

    def send_status(self, transport: str, bpm: float, length: int) -> None:
        if self._show_status:
            self._console.print(
                f"[dim]{transport} · {bpm:g} BPM · {length} steps[/dim]",
                highlight=False,
            )

    @property
    def is_connected(self) -> bool:
        return True
