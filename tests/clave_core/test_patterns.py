"""Tests for sequence builders."""

import math

import pytest

from clave_core import (
    Base,
    ValidationError,
    derive_metronome,
    describe_bases,
    generate_uniform,
    parse_sequence,
    possible_bases,
    seconds_per_subdivision,
)
from clave_core.constants import MAX_SEQUENCE_LENGTH
from clave_core.patterns import expand_group


class TestParseSequence:
    """Test parse_sequence()."""

    def test_3_2_example(self):
        """'3 2' is the 12-step clave 101010010100."""
        clave = parse_sequence("3 2")
        assert str(clave) == "101010010100"
        assert len(clave) == 12

    @pytest.mark.parametrize("counts", [[1], [2, 2], [3, 3, 2], [5], [1, 7, 2, 4]])
    def test_length_is_sum_of_group_lengths(self, counts):
        """Each group of n onsets takes 2n + 1 steps."""
        clave = parse_sequence(" ".join(str(n) for n in counts))
        assert len(clave) == sum(2 * n + 1 for n in counts)

    @pytest.mark.parametrize("count", [1, 2, 3, 6])
    def test_group_shape(self, count):
        """n onsets separated by single rests, then two trailing rests."""
        group = expand_group(count)

        assert group.count(1) == count
        assert group[-2:] == [0, 0]
        assert group[0] == 1
        assert group[:-2] == [1, 0] * (count - 1) + [1]

    def test_onsets_per_group(self):
        """Onset count matches the sum of the numbers."""
        assert len(parse_sequence("3 3 2").onsets) == 8

    def test_whitespace_is_flexible(self):
        assert parse_sequence("  3\t2\n") == parse_sequence("3 2")

    @pytest.mark.parametrize("text", ["", "   ", "3 x", "0", "3 -1", "2.0", "+3", "three"])
    def test_invalid_text(self, text):
        """Blank input or non-positive-integer tokens are rejected."""
        with pytest.raises(ValidationError):
            parse_sequence(text)

    def test_error_message(self):
        with pytest.raises(ValidationError, match="positive integer"):
            parse_sequence("3 x")


class TestGenerateUniform:
    """Test generate_uniform()."""

    def test_alternates_from_one(self):
        assert list(generate_uniform(5)) == [1, 0, 1, 0, 1]

    def test_zero_length(self):
        assert len(generate_uniform(0)) == 0

    @pytest.mark.parametrize("length", [-1, MAX_SEQUENCE_LENGTH + 1, 2.5, True, "8"])
    def test_invalid_length(self, length):
        with pytest.raises(ValidationError):
            generate_uniform(length)


class TestDeriveMetronome:
    """Test derive_metronome()."""

    def test_12_by_4_example(self):
        """Length 12, subdivision 4: accents at 0, 4 and 8."""
        metronome = derive_metronome(12, 4)
        assert str(metronome) == "100010001000"
        assert metronome.subdivision == 4

    @pytest.mark.parametrize("length", [0, 1, 7, 12, 31])
    @pytest.mark.parametrize("subdivision", [1, 2, 3, 5, 16])
    def test_marker_law(self, length, subdivision):
        """Marker i is 1 exactly when i % subdivision == 0."""
        metronome = derive_metronome(length, subdivision)

        assert len(metronome) == length
        assert list(metronome) == [1 if i % subdivision == 0 else 0 for i in range(length)]

    def test_accepts_sequence(self):
        """A sequence gives its length."""
        clave = parse_sequence("3 2")
        assert len(derive_metronome(clave, 3)) == len(clave)

    def test_subdivision_larger_than_length(self):
        assert str(derive_metronome(3, 16)) == "100"

    @pytest.mark.parametrize("subdivision", [0, -1, 1.5, None])
    def test_invalid_subdivision(self, subdivision):
        with pytest.raises(ValidationError):
            derive_metronome(12, subdivision)


class TestPossibleBases:
    """Test possible_bases() and describe_bases()."""

    def test_12(self):
        assert possible_bases(12) == {Base(3, "ternary"), Base(4, "binary")}

    def test_420_has_all_bases(self):
        assert {b.label for b in possible_bases(420)} == {"ternary", "binary", "quinary", "septenary"}

    @pytest.mark.parametrize("length", [0, -12, 1, 11])
    def test_none(self, length):
        assert possible_bases(length) == frozenset()

    @pytest.mark.parametrize("length", [12, 35, 60, 13])
    def test_idempotent(self, length):
        """Same length, same result."""
        assert possible_bases(length) == possible_bases(length)

    def test_describe(self):
        assert describe_bases(possible_bases(12)) == "Possible bases: ternary, binary"
        assert describe_bases(possible_bases(11)) == "Possible bases: none"

    def test_describe_orders_by_base(self):
        assert describe_bases(possible_bases(140)) == "Possible bases: binary, quinary, septenary"


class TestSecondsPerSubdivision:
    """Test seconds_per_subdivision()."""

    def test_120_bpm(self):
        assert seconds_per_subdivision(120) == pytest.approx(0.25)

    def test_60_bpm(self):
        assert seconds_per_subdivision(60) == pytest.approx(0.5)

    @pytest.mark.parametrize("bpm", [0, -1, math.inf, math.nan, "fast", None])
    def test_invalid(self, bpm):
        with pytest.raises(ValidationError, match="Invalid tempo"):
            seconds_per_subdivision(bpm)

    def test_subnormal_bpm_overflows(self):
        """A tiny positive tempo whose step duration is infinite is rejected."""
        with pytest.raises(ValidationError, match="step duration overflows"):
            seconds_per_subdivision(1e-320)
