"""Centralized configuration using Pydantic Settings

All environment variables (prefix CLAVE_) are managed here.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="CLAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Playback defaults
    bpm: float = Field(default=120.0, gt=0, allow_inf_nan=False)
    subdivision: int = Field(default=1, ge=1, le=16)
    loop: bool = False
    mute_metronome: bool = False

    # Volume (0-1)
    volume_master: float = Field(default=1.0, ge=0.0, le=1.0)
    volume_clave: float = Field(default=1.0, ge=0.0, le=1.0)
    volume_metronome: float = Field(default=1.0, ge=0.0, le=1.0)

    # Sound backend
    backend: Literal["device", "superdirt"] = "device"

    # Device backend
    sample_dir: Path = Path("./samples")
    samplerate: int = Field(default=44100, gt=0)
    blocksize: int = Field(default=256, gt=0)

    # SuperDirt backend
    osc_host: str = "127.0.0.1"
    osc_port: int = 57120
    osc_address: str = "/dirt/play"
    superdirt_note_sound: str = "cp"
    superdirt_kick_sound: str = "bd"

    # Scheduler timing (milliseconds)
    lookahead_interval_ms: float = Field(default=25.0, gt=0)
    schedule_ahead_ms: float = Field(default=100.0, gt=0)
    start_lead_ms: float = Field(default=50.0, ge=0)

    @property
    def superdirt_sounds(self) -> dict[str, str]:
        """Logical sound name -> SuperDirt sample name"""
        return {"note": self.superdirt_note_sound, "kick": self.superdirt_kick_sound}
