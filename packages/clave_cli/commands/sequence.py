"""Sequence commands - parse, bases, metronome (no audio)"""

import click

from clave_core import (
    ValidationError,
    derive_metronome,
    describe_bases,
    parse_sequence,
    possible_bases,
)


@click.command()
@click.argument("counts", nargs=-1, required=True)
@click.pass_context
def parse(ctx, counts: tuple[str, ...]):
    """Expand onset counts into a clave sequence

    Example:
        claveloop parse 3 3 2
    """
    formatter = ctx.obj["formatter"]

    try:
        clave = parse_sequence(" ".join(counts))
    except ValidationError as e:
        formatter.error(f"Error: {e}")
        raise click.Abort()

    bases = possible_bases(len(clave))
    formatter.success(str(clave), {
        "length": len(clave),
        "onsets": clave.onsets,
        "bases": describe_bases(bases),
    })


@click.command()
@click.argument("length", type=int)
@click.pass_context
def bases(ctx, length: int):
    """List the bases (3, 4, 5, 7) that divide a sequence length

    Example:
        claveloop bases 12
    """
    formatter = ctx.obj["formatter"]

    found = possible_bases(length)
    formatter.success(describe_bases(found), {
        "length": length,
        "bases": [base.label for base in sorted(found)],
    })


@click.command()
@click.argument("length", type=int)
@click.option("--subdivision", "-s", default=1, show_default=True, help="Steps between accents")
@click.pass_context
def metronome(ctx, length: int, subdivision: int):
    """Show the metronome markers for a length

    Example:
        claveloop metronome 12 -s 4
    """
    formatter = ctx.obj["formatter"]

    try:
        markers = derive_metronome(length, subdivision)
    except ValidationError as e:
        formatter.error(f"Error: {e}")
        raise click.Abort()

    formatter.success(str(markers), {
        "length": len(markers),
        "subdivision": subdivision,
        "accents": markers.onsets,
    })
