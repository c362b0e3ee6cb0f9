"""Play commands - scripted playback and interactive live sessions"""

import asyncio
import logging

import click
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console

from clave_cli.utils.session import build_output, build_transport, merge_overrides
from clave_core import ValidationError
from clave_loop import CommandResult, TransportController
from clave_loop.ipc import ConsoleCommandSource, ConsoleStatusSink

logger = logging.getLogger(__name__)

LIVE_HELP = (
    "Commands: gen 3 3 2 | uniform 16 | play | stop | toggle | bpm 140 | "
    "sub 4 | loop on|off | mute on|off | vol clave 0.5 | quit"
)


def _resolve_settings(ctx, formatter, **overrides):
    try:
        return merge_overrides(ctx.obj["settings"], **overrides)
    except SettingsValidationError as e:
        formatter.error("Invalid option", str(e))
        raise click.Abort()


def _display_console(ctx) -> Console:
    # Keep stdout clean for JSON consumers
    if ctx.obj["formatter"].json_mode:
        return Console(stderr=True)
    return ctx.obj["console"]


@click.command()
@click.argument("counts", nargs=-1)
@click.option("--uniform", type=int, help="Play an alternating sequence of this length")
@click.option("--bpm", type=float, help="Tempo in beats per minute")
@click.option("--subdivision", "-s", type=int, help="Steps between metronome accents")
@click.option("--loop/--no-loop", default=None, help="Repeat the sequence")
@click.option("--mute-metronome/--no-mute-metronome", default=None, help="Silence the metronome")
@click.option("--volume-master", type=float, help="Master volume (0-1)")
@click.option("--volume-clave", type=float, help="Clave volume (0-1)")
@click.option("--volume-metronome", type=float, help="Metronome volume (0-1)")
@click.option("--backend", type=click.Choice(["device", "superdirt"]), help="Sound backend")
@click.option("--duration", type=float, help="Stop after this many seconds")
@click.pass_context
def play(
    ctx,
    counts: tuple[str, ...],
    uniform: int | None,
    bpm: float | None,
    subdivision: int | None,
    loop: bool | None,
    mute_metronome: bool | None,
    volume_master: float | None,
    volume_clave: float | None,
    volume_metronome: float | None,
    backend: str | None,
    duration: float | None,
):
    """Play a clave with a live display

    Plays until the sequence ends (or forever with --loop), the duration
    elapses, or Ctrl-C.

    Example:
        claveloop play 3 3 2 --bpm 100 --loop -s 4
        claveloop play --uniform 16 --duration 10
    """
    formatter = ctx.obj["formatter"]

    if bool(counts) == (uniform is not None):
        formatter.error("Give onset counts or --uniform N (not both)")
        raise click.Abort()

    settings = _resolve_settings(
        ctx,
        formatter,
        bpm=bpm,
        subdivision=subdivision,
        loop=loop,
        mute_metronome=mute_metronome,
        volume_master=volume_master,
        volume_clave=volume_clave,
        volume_metronome=volume_metronome,
        backend=backend,
    )
    console = _display_console(ctx)

    try:
        transport = build_transport(
            settings,
            console,
            ConsoleStatusSink(console, show_status=ctx.obj["verbose"]),
            output=build_output(settings),
        )
    except (ValidationError, ValueError, OSError) as e:
        formatter.error(f"Error: {e}")
        raise click.Abort()

    try:
        result = asyncio.run(_play_async(transport, " ".join(counts), uniform, duration))
    except KeyboardInterrupt:
        formatter.info("Interrupted")
        return

    if not formatter.report(result, "Playback finished"):
        raise click.Abort()


async def _play_async(
    transport: TransportController,
    text: str,
    uniform: int | None,
    duration: float | None,
) -> CommandResult:
    """Generate, play and wait for the end of playback"""
    transport.start()
    try:
        if uniform is not None:
            result = transport.generate_uniform(uniform)
        else:
            result = transport.generate(text)
        if not result.success:
            return result

        sequence_data = result.data or {}
        result = transport.play()
        if not result.success:
            return result

        finished = await transport.wait_until_idle(timeout=duration)
        if not finished:
            transport.stop_playback()

        stats = transport.get_timing_stats()
        return CommandResult.ok(data={
            "length": sequence_data.get("length"),
            "bases": sequence_data.get("bases"),
            "scheduled_steps": stats["scheduled_steps"],
            "late_events": stats["late_events"],
        })
    finally:
        transport.stop()


@click.command()
@click.argument("counts", nargs=-1)
@click.option("--bpm", type=float, help="Tempo in beats per minute")
@click.option("--subdivision", "-s", type=int, help="Steps between metronome accents")
@click.option("--backend", type=click.Choice(["device", "superdirt"]), help="Sound backend")
@click.pass_context
def live(ctx, counts: tuple[str, ...], bpm: float | None, subdivision: int | None, backend: str | None):
    """Interactive session: type commands while the clave plays

    Example:
        claveloop live 3 3 2
    """
    formatter = ctx.obj["formatter"]
    settings = _resolve_settings(ctx, formatter, bpm=bpm, subdivision=subdivision, backend=backend)
    console = _display_console(ctx)

    status = ConsoleStatusSink(console)
    try:
        transport = build_transport(
            settings,
            console,
            status,
            command_source=ConsoleCommandSource(status=status),
            output=build_output(settings),
        )
    except (ValidationError, ValueError, OSError) as e:
        formatter.error(f"Error: {e}")
        raise click.Abort()

    formatter.info(LIVE_HELP)
    try:
        asyncio.run(_live_async(transport, " ".join(counts)))
    except KeyboardInterrupt:
        formatter.info("Interrupted")


async def _live_async(transport: TransportController, text: str) -> None:
    """Run the command loop until quit (or EOF on stdin)"""
    transport.start()
    try:
        if text:
            transport.generate(text)
        await transport.run()
    finally:
        transport.stop()
