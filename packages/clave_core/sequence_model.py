"""SequenceModel: the clave sequence and its aligned metronome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from clave_core.constants import MIN_SUBDIVISION
from clave_core.models.sequence import MetronomeSequence, StepSequence
from clave_core.patterns import derive_metronome


@dataclass(frozen=True, slots=True)
class SequenceModel:
    """
    Current clave sequence plus derived metronome.

    Always replaced wholesale, so len(metronome) == len(clave) holds for
    every instance anyone can observe.
    """

    clave: StepSequence = field(default_factory=StepSequence)
    metronome: MetronomeSequence = field(default_factory=MetronomeSequence)
    subdivision: int = MIN_SUBDIVISION

    def __post_init__(self) -> None:
        if len(self.metronome) != len(self.clave):
            raise ValueError(
                f"Metronome length {len(self.metronome)} does not match "
                f"clave length {len(self.clave)}"
            )

    @classmethod
    def from_clave(
        cls, clave: StepSequence, subdivision: int = MIN_SUBDIVISION
    ) -> SequenceModel:
        """Build a model, deriving the metronome from the clave length."""
        metronome = derive_metronome(len(clave), subdivision)
        return cls(clave=clave, metronome=metronome, subdivision=subdivision)

    def regenerate(self, clave: StepSequence) -> SequenceModel:
        """New model for a new clave, keeping the subdivision."""
        return SequenceModel.from_clave(clave, self.subdivision)

    def with_subdivision(self, subdivision: int) -> SequenceModel:
        """New model with the metronome re-derived for a subdivision."""
        return SequenceModel.from_clave(self.clave, subdivision)

    def __len__(self) -> int:
        return len(self.clave)

    @property
    def is_empty(self) -> bool:
        return len(self.clave) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for status display"""
        return {
            "clave": list(self.clave),
            "metronome": list(self.metronome),
            "subdivision": self.subdivision,
            "length": len(self.clave),
        }
