"""
Command and Status Protocols

Abstract interfaces between the user-facing surface and the engine:
- CommandSource: surface -> engine (generate, play, bpm, ...)
- StatusSink: engine -> surface (errors, bases, transport status)
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class CommandSource(Protocol):
    """
    Command receiver interface.

    Implementations:
        - ConsoleCommandSource: Lines typed on stdin
        - NoopCommandSource: No commands (scripted playback)
        - MockCommandSource: Test double for unit tests
    """

    def connect(self) -> None:
        """Connect to command source."""
        ...

    def disconnect(self) -> None:
        """Disconnect from command source."""
        ...

    def register_handler(
        self,
        command_type: str,
        handler: Callable[[dict[str, Any]], Any],
    ) -> None:
        """
        Register a handler for a command type.

        Args:
            command_type: Command type (e.g., "play", "bpm")
            handler: Callable that receives the payload dict
        """
        ...

    async def process_commands(self) -> int:
        """
        Dispatch all pending commands to registered handlers.

        Returns:
            Number of commands processed
        """
        ...

    @property
    def is_connected(self) -> bool:
        """Whether connected to command source."""
        ...


@runtime_checkable
class StatusSink(Protocol):
    """
    Status sender interface (engine -> user).

    Implementations:
        - ConsoleStatusSink: rich console output
        - MockStatusSink: Test double for unit tests
    """

    def connect(self) -> None:
        """Connect to status output."""
        ...

    def disconnect(self) -> None:
        """Disconnect from status output."""
        ...

    def send_error(self, code: str, message: str) -> None:
        """
        Surface an error message to the user.

        Args:
            code: Error code (e.g., "VALIDATION_ERROR")
            message: Human-readable message
        """
        ...

    def clear_error(self) -> None:
        """Clear any error message currently shown."""
        ...

    def send_bases(self, description: str) -> None:
        """Show the possible-bases line for the current sequence."""
        ...

    def send_status(self, transport: str, bpm: float, length: int) -> None:
        """
        Send transport status.

        Args:
            transport: "idle" or "playing"
            bpm: Current tempo
            length: Current sequence length
        """
        ...

    @property
    def is_connected(self) -> bool:
        """Whether connected to status output."""
        ...
