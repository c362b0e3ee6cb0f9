"""Tests for the claveloop CLI."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field

import pytest
from click.testing import CliRunner

from clave_cli.commands import play as play_module
from clave_cli.config import Settings
from clave_cli.main import cli


@dataclass
class WallClockOutput:
    """SoundOutput on time.perf_counter() that records triggers."""

    triggers: list[tuple[str, float, float]] = field(default_factory=list)
    connected: bool = False

    def connect(self) -> None:
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def resume(self) -> bool:
        return True

    def trigger(self, sound_name: str, gain: float, when: float) -> None:
        self.triggers.append((sound_name, gain, when))

    @property
    def current_time(self) -> float:
        return time.perf_counter()

    @property
    def is_connected(self) -> bool:
        return self.connected


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fake_output(monkeypatch: pytest.MonkeyPatch) -> WallClockOutput:
    """Replace the audio backend for play/live."""
    output = WallClockOutput()
    monkeypatch.setattr(play_module, "build_output", lambda settings: output)
    return output


class TestSequenceCommands:
    """parse, bases, metronome."""

    def test_parse(self, runner: CliRunner):
        result = runner.invoke(cli, ["parse", "3", "2"])

        assert result.exit_code == 0
        assert "101010010100" in result.output
        assert "Possible bases: ternary, binary" in result.output

    def test_parse_quoted(self, runner: CliRunner):
        result = runner.invoke(cli, ["parse", "3 3 2"])

        assert result.exit_code == 0
        assert "length: 19" in result.output

    def test_parse_json(self, runner: CliRunner):
        result = runner.invoke(cli, ["--json", "parse", "3", "2"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["status"] == "success"
        assert payload["message"] == "101010010100"
        assert payload["data"]["length"] == 12
        assert payload["data"]["onsets"] == [0, 2, 4, 7, 9]

    def test_parse_invalid(self, runner: CliRunner):
        result = runner.invoke(cli, ["parse", "3", "x"])

        assert result.exit_code == 1
        assert "positive integer" in result.output

    def test_bases(self, runner: CliRunner):
        result = runner.invoke(cli, ["--json", "bases", "35"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["message"] == "Possible bases: quinary, septenary"
        assert payload["data"]["bases"] == ["quinary", "septenary"]

    def test_bases_none(self, runner: CliRunner):
        result = runner.invoke(cli, ["bases", "11"])

        assert result.exit_code == 0
        assert "Possible bases: none" in result.output

    def test_metronome(self, runner: CliRunner):
        result = runner.invoke(cli, ["metronome", "12", "-s", "4"])

        assert result.exit_code == 0
        assert "100010001000" in result.output

    def test_metronome_invalid_subdivision(self, runner: CliRunner):
        result = runner.invoke(cli, ["metronome", "12", "-s", "0"])

        assert result.exit_code == 1
        assert "Subdivision" in result.output


class TestPlayCommand:
    """Scripted playback."""

    def test_play_to_end(self, runner: CliRunner, fake_output: WallClockOutput):
        """A short sequence at a fast tempo plays through and exits."""
        result = runner.invoke(cli, ["play", "1", "1", "--bpm", "600"])

        assert result.exit_code == 0, result.output
        assert "Playback finished" in result.output
        assert "scheduled_steps: 6" in result.output
        notes = [when for name, _, when in fake_output.triggers if name == "note"]
        assert len(notes) == 2
        assert notes[1] - notes[0] == pytest.approx(0.15)

    def test_play_loop_with_duration(self, runner: CliRunner, fake_output: WallClockOutput):
        """--duration stops a looping run."""
        result = runner.invoke(cli, ["play", "--uniform", "4", "--loop", "--bpm", "600", "--duration", "0.3"])

        assert result.exit_code == 0, result.output
        assert len(fake_output.triggers) > 4
        assert not fake_output.connected

    def test_play_muted_metronome(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["play", "2", "--bpm", "600", "--mute-metronome"])

        assert result.exit_code == 0, result.output
        assert {name for name, _, _ in fake_output.triggers} == {"note"}

    def test_play_settings_from_env(
        self, runner: CliRunner, fake_output: WallClockOutput, monkeypatch: pytest.MonkeyPatch
    ):
        """CLAVE_* environment variables configure playback."""
        monkeypatch.setenv("CLAVE_BPM", "600")
        monkeypatch.setenv("CLAVE_VOLUME_CLAVE", "0.5")

        result = runner.invoke(cli, ["play", "1"])

        assert result.exit_code == 0, result.output
        gains = [gain for name, gain, _ in fake_output.triggers if name == "note"]
        assert gains == [pytest.approx(0.5)]

    def test_play_needs_a_sequence(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["play"])

        assert result.exit_code == 1
        assert "onset counts or --uniform" in result.output

    def test_play_rejects_both_sources(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["play", "3", "--uniform", "4"])

        assert result.exit_code == 1

    def test_play_invalid_sequence(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["play", "3", "x"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert fake_output.triggers == []

    def test_play_invalid_bpm(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["play", "3", "--bpm", "0"])

        assert result.exit_code == 1
        assert "Invalid option" in result.output


class TestLiveCommand:
    """Interactive console session."""

    def test_live_session(self, runner: CliRunner, fake_output: WallClockOutput):
        """Typed commands drive the transport until quit."""
        result = runner.invoke(cli, ["live"], input="gen 3 2\nbpm 90\nsub 4\nquit\n")

        assert result.exit_code == 0, result.output
        assert "Possible bases: ternary, binary" in result.output

    def test_live_bad_command(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["live"], input="dance\nquit\n")

        assert result.exit_code == 0, result.output
        assert "Unknown command 'dance'" in result.output

    def test_live_ends_on_eof(self, runner: CliRunner, fake_output: WallClockOutput):
        result = runner.invoke(cli, ["live", "3", "3"], input="")

        assert result.exit_code == 0, result.output
        assert "Possible bases" in result.output


class TestSettings:
    """pydantic-settings configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        for name in ("CLAVE_BPM", "CLAVE_BACKEND", "CLAVE_SUBDIVISION"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.bpm == 120.0
        assert settings.subdivision == 1
        assert settings.loop is False
        assert settings.backend == "device"
        assert settings.osc_port == 57120
        assert settings.superdirt_sounds == {"note": "cp", "kick": "bd"}
        assert settings.lookahead_interval_ms == 25.0
        assert settings.schedule_ahead_ms == 100.0
        assert settings.start_lead_ms == 50.0

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CLAVE_BACKEND", "superdirt")
        monkeypatch.setenv("CLAVE_SUPERDIRT_KICK_SOUND", "808bd")

        settings = Settings(_env_file=None)

        assert settings.backend == "superdirt"
        assert settings.superdirt_sounds["kick"] == "808bd"
