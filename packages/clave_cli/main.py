"""Main CLI entry point"""

import logging

import click
from rich.console import Console

from clave_cli.commands.play import live, play
from clave_cli.commands.sequence import bases, metronome, parse
from clave_cli.config import Settings
from clave_cli.utils.output import OutputFormatter


def setup_logging(verbose: bool = False) -> None:
    """Configure logging (WARNING by default so the live display stays clean)"""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.option('--json', 'json_mode', is_flag=True, help='Output as JSON')
@click.option('--verbose', is_flag=True, help='Verbose output (debug logging)')
@click.pass_context
def cli(ctx, json_mode: bool, verbose: bool):
    """claveloop - clave sequencer with a lookahead audio scheduler

    Examples:
        claveloop parse 3 3 2
        claveloop bases 12
        claveloop play 3 3 2 --loop --bpm 100
        claveloop live
        claveloop --json parse 3 2
    """
    setup_logging(verbose)

    # Initialize context
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['settings'] = Settings()

    # Initialize output formatter
    console = Console()
    ctx.obj['console'] = console
    ctx.obj['formatter'] = OutputFormatter(json_mode=json_mode, console=console)


# Register commands
cli.add_command(parse)
cli.add_command(bases)
cli.add_command(metronome)
cli.add_command(play)
cli.add_command(live)


if __name__ == '__main__':
    cli()
