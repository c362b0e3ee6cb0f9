"""StepSequence and MetronomeSequence models.

Sequences are immutable: regeneration builds a new object, never mutates.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class StepSequence:
    """Ordered binary step markers (1 = sound, 0 = silence)."""

    markers: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        for marker in self.markers:
            if marker not in (0, 1):
                raise ValueError(f"Step markers must be 0 or 1, got {marker!r}")

    @classmethod
    def from_iterable(cls, markers: Iterable[int]) -> StepSequence:
        """Create from any iterable of 0/1 values."""
        return cls(markers=tuple(int(m) for m in markers))

    def __len__(self) -> int:
        return len(self.markers)

    def __getitem__(self, index: int) -> int:
        return self.markers[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self.markers)

    def __bool__(self) -> bool:
        return bool(self.markers)

    @property
    def onsets(self) -> list[int]:
        """Indices of sounding steps."""
        return [i for i, marker in enumerate(self.markers) if marker == 1]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"markers": list(self.markers), "length": len(self.markers)}

    def __str__(self) -> str:
        return "".join(str(m) for m in self.markers)


@dataclass(frozen=True, slots=True)
class MetronomeSequence(StepSequence):
    """Metronome markers derived from a length and a subdivision."""

    subdivision: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "markers": list(self.markers),
            "length": len(self.markers),
            "subdivision": self.subdivision,
        }
