"""Build transports from settings plus command-line overrides"""

from typing import Any

from rich.console import Console

from clave_cli.config import Settings
from clave_core.protocols import CommandSource, SoundOutput, StatusSink
from clave_loop import TransportController, create_output, create_runtime_state, create_transport
from clave_loop.display import TerminalRenderer


def merge_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Settings copy with every non-None override applied (validated)"""
    values = settings.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings.model_validate(values)


def build_output(settings: Settings) -> SoundOutput:
    """Sound output for the configured backend"""
    return create_output(
        backend=settings.backend,
        sample_dir=settings.sample_dir,
        samplerate=settings.samplerate,
        blocksize=settings.blocksize,
        osc_host=settings.osc_host,
        osc_port=settings.osc_port,
        osc_address=settings.osc_address,
        superdirt_sounds=settings.superdirt_sounds,
    )


def build_transport(
    settings: Settings,
    console: Console,
    status: StatusSink,
    command_source: CommandSource | None = None,
    output: SoundOutput | None = None,
) -> TransportController:
    """
    Wire a TransportController for an interactive terminal session.

    Raises:
        ValidationError: If the configured subdivision or volumes are invalid
    """
    state = create_runtime_state(
        bpm=settings.bpm,
        subdivision=settings.subdivision,
        loop=settings.loop,
        mute_metronome=settings.mute_metronome,
        volume_master=settings.volume_master,
        volume_clave=settings.volume_clave,
        volume_metronome=settings.volume_metronome,
    )
    return create_transport(
        output=output if output is not None else build_output(settings),
        renderer=TerminalRenderer(console),
        status=status,
        command_source=command_source,
        state=state,
        lookahead_interval=settings.lookahead_interval_ms / 1000,
        schedule_ahead_time=settings.schedule_ahead_ms / 1000,
        start_lead_time=settings.start_lead_ms / 1000,
    )
