"""Sequence models for claveloop."""

from .sequence import MetronomeSequence, StepSequence

__all__ = [
    "MetronomeSequence",
    "StepSequence",
]
