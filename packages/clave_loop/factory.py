"""
Clave Loop Factory

Factory functions for creating production TransportController instances.
Separates object creation from business logic (DI pattern).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, cast

from clave_core.models import StepSequence
from clave_core.protocols import CommandSource, Renderer, SoundOutput, StatusSink
from clave_core.sequence_model import SequenceModel

from .display import TerminalRenderer
from .engine import TransportController
from .ipc import ConsoleStatusSink, NoopCommandSource
from .output import SoundBank, SuperDirtOutput
from .state import RuntimeState, TempoState, VolumeState

Backend = Literal["device", "superdirt"]


def create_runtime_state(
    bpm: float = 120.0,
    subdivision: int = 1,
    loop: bool = False,
    mute_metronome: bool = False,
    volume_master: float = 1.0,
    volume_clave: float = 1.0,
    volume_metronome: float = 1.0,
) -> RuntimeState:
    """
    Build the initial RuntimeState from configuration values.

    Raises:
        ValidationError: If the subdivision or a volume is out of range
    """
    return RuntimeState(
        sequences=SequenceModel.from_clave(StepSequence(), subdivision),
        tempo=TempoState(bpm=float(bpm)),
        volume=VolumeState(
            master=volume_master,
            clave=volume_clave,
            metronome=volume_metronome,
        ),
        loop=loop,
        metronome_muted=mute_metronome,
    )


def create_output(
    backend: Backend = "device",
    sample_dir: Path | str | None = None,
    samplerate: int = 44100,
    blocksize: int = 256,
    osc_host: str = "127.0.0.1",
    osc_port: int = 57120,
    osc_address: str = "/dirt/play",
    superdirt_sounds: dict[str, str] | None = None,
) -> SoundOutput:
    """
    Create the sound output for a backend.

    Args:
        backend: "device" (local audio via sounddevice) or "superdirt" (OSC)
        sample_dir: Directory with note.* / kick.* samples (device only)
        samplerate: Output sample rate (device only)
        blocksize: Audio callback block size in frames (device only)
        osc_host: SuperDirt host
        osc_port: SuperDirt port
        osc_address: OSC message address (default: "/dirt/play")
        superdirt_sounds: Logical sound name -> SuperDirt sample name

    Raises:
        ValueError: Unknown backend
    """
    if backend == "device":
        # Imported here so the OSC backend works without PortAudio installed
        from .output.device_output import DeviceOutput

        bank = SoundBank.load(sample_dir, samplerate)
        return cast(SoundOutput, DeviceOutput(bank, blocksize=blocksize))
    if backend == "superdirt":
        return cast(
            SoundOutput,
            SuperDirtOutput(osc_host, osc_port, osc_address, sounds=superdirt_sounds),
        )
    raise ValueError(f"Unknown backend: {backend}")


def create_transport(
    output: SoundOutput | None = None,
    renderer: Renderer | None = None,
    status: StatusSink | None = None,
    command_source: CommandSource | None = None,
    state: RuntimeState | None = None,
    lookahead_interval: float | None = None,
    schedule_ahead_time: float | None = None,
    start_lead_time: float | None = None,
) -> TransportController:
    """
    Create a production TransportController with real I/O dependencies.

    Args:
        output: SoundOutput (default: device backend via create_output())
        renderer: Renderer (default: TerminalRenderer)
        status: StatusSink (default: ConsoleStatusSink)
        command_source: CommandSource (default: NoopCommandSource)
        state: Initial RuntimeState (default: fresh state)
        lookahead_interval: Scheduler wake-up period (seconds)
        schedule_ahead_time: Scheduler horizon (seconds)
        start_lead_time: First-step lead (seconds)

    Returns:
        Configured TransportController instance
    """
    return TransportController(
        output=output if output is not None else create_output(),
        renderer=cast(Renderer, renderer if renderer is not None else TerminalRenderer()),
        status=cast(StatusSink, status if status is not None else ConsoleStatusSink()),
        commands=cast(
            CommandSource,
            command_source if command_source is not None else NoopCommandSource()
        ),
        state=state,
        lookahead_interval=lookahead_interval,
        schedule_ahead_time=schedule_ahead_time,
        start_lead_time=start_lead_time,
    )
