"""
Pydantic models for command validation.

Each command has a corresponding model that validates the payload structure.
This ensures type safety and provides clear error messages for invalid commands.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from clave_core.constants import MAX_SEQUENCE_LENGTH, MAX_SUBDIVISION, MIN_SUBDIVISION


class GenerateCommand(BaseModel):
    """
    Generate command payload.

    Exactly one of the fields must be given.

    Fields:
        text: Onset counts, e.g. "3 3 2"
        uniform: Length of an alternating on/off sequence
    """

    text: str | None = None
    uniform: int | None = Field(default=None, ge=0, le=MAX_SEQUENCE_LENGTH)

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "GenerateCommand":
        if (self.text is None) == (self.uniform is None):
            raise ValueError("Provide either 'text' or 'uniform'")
        return self


class PlayCommand(BaseModel):
    """Play command payload (empty)."""

    pass


class StopCommand(BaseModel):
    """Stop command payload (empty)."""

    pass


class ToggleCommand(BaseModel):
    """Play/stop toggle command payload (empty)."""

    pass


class BpmCommand(BaseModel):
    """
    BPM change command payload.

    Fields:
        bpm: Beats per minute (must be positive)
    """

    bpm: float = Field(gt=0, allow_inf_nan=False)


class SubdivisionCommand(BaseModel):
    """
    Metronome subdivision command payload.

    Fields:
        subdivision: Steps between metronome accents (1-16)
    """

    subdivision: int = Field(ge=MIN_SUBDIVISION, le=MAX_SUBDIVISION)


class LoopCommand(BaseModel):
    """
    Loop toggle command payload.

    Fields:
        loop: True to wrap at the end of the sequence (default: True)
    """

    loop: bool = True


class MuteMetronomeCommand(BaseModel):
    """
    Metronome mute command payload.

    Fields:
        mute: True to mute, False to unmute (default: True)
    """

    mute: bool = True


class VolumeCommand(BaseModel):
    """
    Volume command payload.

    Fields:
        voice: "master", "clave" or "metronome"
        level: Gain multiplier in [0, 1]
    """

    voice: Literal["master", "clave", "metronome"]
    level: float = Field(ge=0.0, le=1.0)


class QuitCommand(BaseModel):
    """Quit command payload (empty)."""

    pass
