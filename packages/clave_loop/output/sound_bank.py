"""
Sound Bank

Maps logical sound names ("note", "kick") to mono float32 sample buffers.
Loaded once at startup; files that are missing fall back to short
synthesized sounds so playback works without any sample pack.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import soundfile as sf

from clave_core.exceptions import UnknownSoundError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLERATE = 44100


def to_mono(data: np.ndarray) -> np.ndarray:
    """Downmix (frames, channels) or (frames,) audio to mono float32."""
    data = np.asarray(data, dtype=np.float32)
    if data.ndim == 2:
        data = data.mean(axis=1)
    return data.astype(np.float32, copy=False)


def resample(data: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    """Linear-interpolation resample (good enough for one-shot percussion)."""
    if source_rate == target_rate or len(data) == 0:
        return data
    duration = len(data) / source_rate
    target_len = max(1, int(round(duration * target_rate)))
    source_t = np.arange(len(data)) / source_rate
    target_t = np.arange(target_len) / target_rate
    return np.interp(target_t, source_t, data).astype(np.float32)


def load_sample(path: Path, samplerate: int) -> np.ndarray:
    """Read an audio file as mono float32 at `samplerate`."""
    data, file_rate = sf.read(str(path), dtype="float32", always_2d=True)
    return resample(to_mono(data), int(file_rate), samplerate)


def synthesize(name: str, samplerate: int) -> np.ndarray:
    """
    Fallback sounds.

    note: bright woodblock-like click with a falling pitch
    kick: sine sweep from 150Hz down to 50Hz with exponential decay
    """
    if name == "note":
        length = int(samplerate * 0.08)
        t = np.arange(length) / samplerate
        freq = np.linspace(1200.0, 800.0, length)
        phase = 2 * np.pi * np.cumsum(freq) / samplerate
        wave = np.sin(phase) * np.exp(-t * 45) * 0.7
    elif name == "kick":
        length = int(samplerate * 0.25)
        t = np.arange(length) / samplerate
        freq = 50.0 + 100.0 * np.exp(-t * 30)
        phase = 2 * np.pi * np.cumsum(freq) / samplerate
        wave = np.sin(phase) * np.exp(-t * 12) * 0.9
    else:
        raise UnknownSoundError(f"No fallback sound for '{name}'")
    return wave.astype(np.float32)


class SoundBank:
    """Logical sound name -> playable mono buffer."""

    SOUND_NAMES = ("note", "kick")
    SAMPLE_EXTENSIONS = (".wav", ".flac", ".ogg", ".aiff", ".mp3")

    def __init__(self, samplerate: int = DEFAULT_SAMPLERATE):
        self.samplerate = int(samplerate)
        self._buffers: dict[str, np.ndarray] = {}

    @classmethod
    def load(
        cls,
        sample_dir: Path | str | None = None,
        samplerate: int = DEFAULT_SAMPLERATE,
    ) -> SoundBank:
        """
        Build a bank from `<sample_dir>/<name>.<ext>` files.

        Missing or unreadable files are replaced by synthesized sounds.
        """
        bank = cls(samplerate)
        directory = Path(sample_dir) if sample_dir is not None else None

        for name in cls.SOUND_NAMES:
            path = bank._find_sample(directory, name)
            if path is not None:
                try:
                    bank.add(name, load_sample(path, bank.samplerate))
                    logger.info(f"Loaded sound '{name}' from {path}")
                    continue
                except (sf.LibsndfileError, RuntimeError, OSError) as e:
                    logger.error(f"Failed to load '{path}': {e}. Using synthesized '{name}'")
            else:
                logger.info(f"No sample for '{name}', using synthesized sound")
            bank.add(name, synthesize(name, bank.samplerate))

        return bank

    def _find_sample(self, directory: Path | None, name: str) -> Path | None:
        if directory is None or not directory.is_dir():
            return None
        for ext in self.SAMPLE_EXTENSIONS:
            candidate = directory / f"{name}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def add(self, name: str, samples: np.ndarray) -> None:
        """Register (or replace) a buffer."""
        self._buffers[name] = to_mono(samples)

    def get(self, name: str) -> np.ndarray:
        """
        Look up a buffer.

        Raises:
            UnknownSoundError: If the name was never loaded
        """
        try:
            return self._buffers[name]
        except KeyError:
            raise UnknownSoundError(f"Unknown sound '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._buffers

    @property
    def names(self) -> list[str]:
        return sorted(self._buffers)

    def duration(self, name: str) -> float:
        """Length of a buffer in seconds."""
        return len(self.get(name)) / self.samplerate
