"""
Handler results and error codes.

Every TransportController handler returns a CommandResult instead of
raising; failures carry one of the error codes below.
"""

from dataclasses import asdict, dataclass
from typing import Any, Final

VALIDATION_ERROR: Final[str] = "VALIDATION_ERROR"  # bad text, payload or range
EMPTY_SEQUENCE: Final[str] = "EMPTY_SEQUENCE"  # play before generate
INVALID_TEMPO: Final[str] = "INVALID_TEMPO"  # non-finite or non-positive bpm
COMMAND_ERROR: Final[str] = "COMMAND_ERROR"  # anything else

ERROR_CODES: Final[frozenset[str]] = frozenset(
    {VALIDATION_ERROR, EMPTY_SEQUENCE, INVALID_TEMPO, COMMAND_ERROR}
)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one transport command.

    Attributes:
        success: Whether the command took effect (no-ops count as success)
        message: User-facing text ("Already playing", "Error: ...")
        data: Command-specific payload (e.g. generated sequence and bases)
        code: One of ERROR_CODES when success is False
    """

    success: bool
    message: str | None = None
    data: dict[str, Any] | None = None
    code: str | None = None

    @classmethod
    def ok(cls, message: str | None = None, data: dict[str, Any] | None = None) -> "CommandResult":
        return cls(True, message, data)

    @classmethod
    def error(
        cls,
        message: str,
        code: str = COMMAND_ERROR,
        data: dict[str, Any] | None = None,
    ) -> "CommandResult":
        """Failed result; `code` must be one of ERROR_CODES."""
        if code not in ERROR_CODES:
            raise ValueError(f"Unknown error code: {code}")
        return cls(False, message, data, code)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output."""
        return asdict(self)
