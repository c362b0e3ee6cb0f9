"""
Output Protocols

Interfaces the scheduling engine drives:
- SoundOutput: timed sound triggers against an audio-domain clock
- Renderer: visual display of the sequence and the current step
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from clave_core.models import MetronomeSequence, StepSequence


@runtime_checkable
class SoundOutput(Protocol):
    """
    Sound trigger interface.

    Implementations:
        - DeviceOutput: Local audio device via sounddevice
        - SuperDirtOutput: Timestamped OSC bundles to SuperDirt
        - MockSoundOutput: Test double with a manual clock
    """

    def connect(self) -> None:
        """Prepare the backend (load resources, open handles)."""
        ...

    def disconnect(self) -> None:
        """Release the backend."""
        ...

    def resume(self) -> bool:
        """
        Make sure the backend is running.

        Idempotent. Returns False when the backend stays suspended;
        callers then drop the trigger instead of failing.
        """
        ...

    def trigger(self, sound_name: str, gain: float, when: float) -> None:
        """
        Fire-and-forget: play `sound_name` at `gain` at audio time `when`.

        Never raises for backend failures.
        """
        ...

    @property
    def current_time(self) -> float:
        """Monotonic audio-domain clock in seconds."""
        ...

    @property
    def is_connected(self) -> bool:
        """Whether the backend is connected."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """
    Visual display of the clave and metronome rows.

    Implementations:
        - TerminalRenderer: rich live display
        - MockRenderer: Test double recording frames
    """

    def connect(self) -> None:
        """Open the display."""
        ...

    def disconnect(self) -> None:
        """Close the display."""
        ...

    def render(
        self,
        clave: StepSequence,
        metronome: MetronomeSequence,
        highlight_index: int | None,
    ) -> None:
        """Draw both rows, highlighting `highlight_index` (None = no highlight)."""
        ...
