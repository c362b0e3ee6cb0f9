"""CLI output: JSON envelopes or rich status lines"""

import json
import sys
from typing import Any

from rich.console import Console

from clave_loop.result import CommandResult


class OutputFormatter:
    """
    Prints command outcomes as one JSON envelope or as rich text.

    Success goes to stdout and failures to stderr in both modes, so
    `claveloop --json parse 3 3 2 | jq .data` only ever sees success payloads.
    """

    SUCCESS_MARK = "[green]✓[/green]"
    ERROR_MARK = "[red]✗[/red]"
    INFO_MARK = "[blue]ℹ[/blue]"

    def __init__(self, json_mode: bool = False, console: Console | None = None):
        self.json_mode = json_mode
        self.console = console or Console()
        self.err_console = Console(stderr=True)

    @staticmethod
    def format_value(value: Any) -> str:
        """Human form of a data value; onset and base lists print space separated"""
        if isinstance(value, (list, tuple)):
            return " ".join(str(item) for item in value) or "-"
        if isinstance(value, float):
            return f"{value:g}"
        return str(value)

    def _emit(self, envelope: dict[str, Any], to_stderr: bool = False) -> None:
        print(json.dumps(envelope, indent=2), file=sys.stderr if to_stderr else sys.stdout)

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self._emit({"status": "success", "message": message, "data": data})
            return

        self.console.print(f"{self.SUCCESS_MARK} {message}", highlight=False)
        for key, value in (data or {}).items():
            self.console.print(f"  {key}: {self.format_value(value)}", highlight=False)

    def error(self, message: str, details: str | None = None, code: str | None = None) -> None:
        """
        Report a failure.

        Args:
            message: One-line error text
            details: Longer explanation (e.g. a pydantic error dump)
            code: Transport error code when the failure came from a CommandResult
        """
        if self.json_mode:
            self._emit(
                {"status": "error", "message": message, "code": code, "details": details},
                to_stderr=True,
            )
            return

        suffix = f" [dim]({code})[/dim]" if code else ""
        self.err_console.print(f"{self.ERROR_MARK} {message}{suffix}", highlight=False)
        if details:
            self.err_console.print(f"  {details}", highlight=False)

    def info(self, message: str) -> None:
        """Human mode only; JSON consumers get nothing"""
        if not self.json_mode:
            self.console.print(f"{self.INFO_MARK} {message}", highlight=False)

    def report(self, result: CommandResult, success_message: str) -> bool:
        """Print a transport CommandResult. Returns its success flag."""
        if result.success:
            self.success(success_message, result.data)
        else:
            self.error(result.message or "Command failed", code=result.code)
        return result.success
