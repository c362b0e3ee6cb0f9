"""Constants for the clave core."""

from .steps import (
    BASE_LABELS,
    MAX_SEQUENCE_LENGTH,
    MAX_SUBDIVISION,
    MIN_SUBDIVISION,
    SUBDIVISIONS_PER_BEAT,
)

__all__ = [
    "BASE_LABELS",
    "MAX_SEQUENCE_LENGTH",
    "MAX_SUBDIVISION",
    "MIN_SUBDIVISION",
    "SUBDIVISIONS_PER_BEAT",
]
