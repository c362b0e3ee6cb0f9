"""
Clave Core

Sequence models, builders, exceptions and protocols shared by the
scheduling engine and the command-line interface.
"""

from .exceptions import ClaveError, EmptySequenceError, UnknownSoundError, ValidationError
from .models import MetronomeSequence, StepSequence
from .patterns import (
    Base,
    derive_metronome,
    describe_bases,
    generate_uniform,
    parse_sequence,
    possible_bases,
    seconds_per_subdivision,
)
from .sequence_model import SequenceModel

__all__ = [
    "Base",
    "ClaveError",
    "EmptySequenceError",
    "MetronomeSequence",
    "SequenceModel",
    "StepSequence",
    "UnknownSoundError",
    "ValidationError",
    "derive_metronome",
    "describe_bases",
    "generate_uniform",
    "parse_sequence",
    "possible_bases",
    "seconds_per_subdivision",
]
