"""
Sequence builders.

Pure functions that turn user input into step sequences:
- parse_sequence: onset-count text ("3 3 2") to clave markers
- generate_uniform: alternating on/off fallback pattern
- derive_metronome: metronome accents every `subdivision` steps
- possible_bases: which musical bases divide a sequence length
"""

from __future__ import annotations

import math
from typing import NamedTuple

from clave_core.constants import BASE_LABELS, MAX_SEQUENCE_LENGTH, SUBDIVISIONS_PER_BEAT
from clave_core.exceptions import ValidationError
from clave_core.models.sequence import MetronomeSequence, StepSequence

# Silent steps closing every group
GROUP_REST_STEPS = 2


class Base(NamedTuple):
    """A candidate musical base for a sequence length."""

    value: int
    label: str


def expand_group(onsets: int) -> list[int]:
    """
    Expand one onset count into markers.

    n onsets separated by single silent steps, then two trailing rests:
    3 -> [1, 0, 1, 0, 1, 0, 0]
    """
    markers: list[int] = []
    for i in range(onsets):
        markers.append(1)
        if i != onsets - 1:
            markers.append(0)
    markers.extend([0] * GROUP_REST_STEPS)
    return markers


def parse_sequence(text: str) -> StepSequence:
    """
    Parse whitespace-separated onset counts into a clave sequence.

    Args:
        text: e.g. "3 3 2"

    Returns:
        StepSequence with 2n+1 markers per group

    Raises:
        ValidationError: If the text is blank or any token is not a
            positive integer
    """
    tokens = text.split()
    if not tokens:
        raise ValidationError("Each number must be a positive integer (got empty input)")

    counts: list[int] = []
    for token in tokens:
        if not token.isdecimal() or int(token) <= 0:
            raise ValidationError(
                f"Each number must be a positive integer (got {token!r})"
            )
        counts.append(int(token))

    markers: list[int] = []
    for count in counts:
        markers.extend(expand_group(count))
    return StepSequence(markers=tuple(markers))


def _check_length(length: object) -> int:
    if isinstance(length, bool) or not isinstance(length, int):
        raise ValidationError(f"Length must be an integer, got {length!r}")
    if not 0 <= length <= MAX_SEQUENCE_LENGTH:
        raise ValidationError(
            f"Length must be between 0 and {MAX_SEQUENCE_LENGTH}, got {length}"
        )
    return length


def generate_uniform(length: int) -> StepSequence:
    """Alternating 1,0,1,0,... markers of the given length."""
    length = _check_length(length)
    return StepSequence(markers=tuple(1 if i % 2 == 0 else 0 for i in range(length)))


def derive_metronome(
    sequence: StepSequence | int, subdivision: int
) -> MetronomeSequence:
    """
    Derive metronome markers: index i sounds iff i % subdivision == 0.

    Args:
        sequence: The clave sequence, or just its length
        subdivision: Steps between metronome accents (>= 1)

    Raises:
        ValidationError: If subdivision is not a positive integer
    """
    if isinstance(subdivision, bool) or not isinstance(subdivision, int):
        raise ValidationError(f"Subdivision must be an integer, got {subdivision!r}")
    if subdivision < 1:
        raise ValidationError(f"Subdivision must be at least 1, got {subdivision}")

    length = sequence if isinstance(sequence, int) else len(sequence)
    length = _check_length(length)
    return MetronomeSequence(
        markers=tuple(1 if i % subdivision == 0 else 0 for i in range(length)),
        subdivision=subdivision,
    )


def possible_bases(length: int) -> frozenset[Base]:
    """Bases among 3, 4, 5, 7 that evenly divide a (non-zero) length."""
    if length <= 0:
        return frozenset()
    return frozenset(
        Base(value, label)
        for value, label in BASE_LABELS.items()
        if length % value == 0
    )


def describe_bases(bases: frozenset[Base]) -> str:
    """User-facing line listing bases in ascending order."""
    labels = [base.label for base in sorted(bases)]
    return "Possible bases: " + (", ".join(labels) if labels else "none")


def seconds_per_subdivision(bpm: float) -> float:
    """
    Duration of one step (half a beat) in seconds.

    Raises:
        ValidationError: If bpm is not a finite number greater than zero,
            or is so small that the step duration overflows
    """
    try:
        value = float(bpm)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid tempo: {bpm!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"Invalid tempo: {bpm!r}")
    interval = 60.0 / value / SUBDIVISIONS_PER_BEAT
    if not math.isfinite(interval):
        raise ValidationError(f"Invalid tempo: {bpm!r} (step duration overflows)")
    return interval
