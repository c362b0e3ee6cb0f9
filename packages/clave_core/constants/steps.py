"""Step-related constants for the clave core.

The atomic step is fixed at a half-beat (eighth note).
"""

from typing import Final

# One step = half a beat
SUBDIVISIONS_PER_BEAT: Final[int] = 2

# Metronome subdivision range offered to the user
MIN_SUBDIVISION: Final[int] = 1
MAX_SUBDIVISION: Final[int] = 16

# Upper bound for synthetic sequences
MAX_SEQUENCE_LENGTH: Final[int] = 4096

# Candidate bases reported for a sequence length
BASE_LABELS: Final[dict[int, str]] = {
    3: "ternary",
    4: "binary",
    5: "quinary",
    7: "septenary",
}
