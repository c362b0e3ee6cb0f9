"""Tests for RuntimeState."""

import pytest

from clave_core import ValidationError, parse_sequence
from clave_core.sequence_model import SequenceModel
from clave_loop.state import (
    DEFAULT_BPM,
    PlaybackCursor,
    PlaybackState,
    RuntimeState,
    TempoState,
    VolumeState,
)


class TestPlaybackCursor:
    """Test PlaybackCursor dataclass."""

    def test_advance_and_reset(self) -> None:
        """Cursor advances one step at a time and resets to 0."""
        cursor = PlaybackCursor()
        cursor.advance()
        cursor.advance()
        assert cursor.index == 2

        cursor.reset()
        assert cursor.index == 0

    def test_is_exhausted(self) -> None:
        """Exhausted once the index reaches the length."""
        cursor = PlaybackCursor(index=11)
        assert not cursor.is_exhausted(12)
        cursor.advance()
        assert cursor.is_exhausted(12)
        assert PlaybackCursor().is_exhausted(0)


class TestTempoState:
    """Test TempoState."""

    def test_default_tempo(self) -> None:
        """Default is 120 BPM, i.e. 0.25s per step."""
        tempo = TempoState()
        assert tempo.bpm == DEFAULT_BPM
        assert tempo.seconds_per_subdivision == pytest.approx(0.25)

    def test_invalid_tempo_raises_on_read(self) -> None:
        """The interval is validated when it is read."""
        with pytest.raises(ValidationError):
            _ = TempoState(bpm=-1.0).seconds_per_subdivision

    def test_is_immutable(self) -> None:
        """Tempo is replaced, never mutated."""
        tempo = TempoState()
        with pytest.raises(AttributeError):
            tempo.bpm = 90.0  # type: ignore[misc]


class TestVolumeState:
    """Test VolumeState."""

    def test_gains_include_master(self) -> None:
        """Effective gain is voice level times master."""
        volume = VolumeState(master=0.5, clave=0.8, metronome=0.4)
        assert volume.clave_gain == pytest.approx(0.4)
        assert volume.metronome_gain == pytest.approx(0.2)

    def test_with_level_returns_new_state(self) -> None:
        """with_level() returns a copy."""
        volume = VolumeState()
        louder = volume.with_level("clave", 0.5)

        assert volume.clave == 1.0
        assert louder.clave == 0.5

    @pytest.mark.parametrize("level", [-0.01, 1.01])
    def test_out_of_range(self, level: float) -> None:
        """Levels outside [0, 1] are rejected."""
        with pytest.raises(ValidationError):
            VolumeState(master=level)

    def test_unknown_voice(self) -> None:
        """Only master, clave and metronome exist."""
        with pytest.raises(ValidationError):
            VolumeState().with_level("drums", 0.5)  # type: ignore[arg-type]


class TestRuntimeState:
    """Test RuntimeState."""

    def test_defaults(self) -> None:
        """Fresh state: idle, empty, no loop, metronome audible."""
        state = RuntimeState()

        assert state.playback_state == PlaybackState.IDLE
        assert not state.playing
        assert state.length == 0
        assert state.subdivision == 1
        assert state.loop is False
        assert state.metronome_muted is False
        assert state.last_error is None

    def test_set_bpm_replaces_tempo(self) -> None:
        """set_bpm() swaps in a new TempoState."""
        state = RuntimeState()
        before = state.tempo

        state.set_bpm(140)

        assert state.bpm == 140.0
        assert state.tempo is not before
        assert before.bpm == DEFAULT_BPM

    def test_set_bpm_rejects_invalid(self) -> None:
        """Invalid tempo leaves the old value."""
        state = RuntimeState()
        with pytest.raises(ValidationError):
            state.set_bpm(0)
        assert state.bpm == DEFAULT_BPM

    def test_set_volume(self) -> None:
        """set_volume() swaps in a new VolumeState."""
        state = RuntimeState()
        state.set_volume("master", 0.25)
        assert state.volume.master == 0.25

    def test_reset_position(self) -> None:
        """reset_position() rewinds the cursor."""
        state = RuntimeState()
        state.cursor.index = 7
        state.reset_position()
        assert state.cursor.index == 0

    def test_to_status_dict(self) -> None:
        """Status dict reflects the current state."""
        state = RuntimeState()
        state.sequences = SequenceModel.from_clave(parse_sequence("3 2"), 4)
        state.loop = True

        status = state.to_status_dict()

        assert status["playback_state"] == "idle"
        assert status["length"] == 12
        assert status["subdivision"] == 4
        assert status["loop"] is True
        assert status["volume"] == {"master": 1.0, "clave": 1.0, "metronome": 1.0}
