import pytest

import etherdaw.notation


@pytest.mark.parametrize("code, dotted, beats", [
	("w", False, 4.0),
	("h", False, 2.0),
	("q", False, 1.0),
	("8", False, 0.5),
	("16", False, 0.25),
	("32", False, 0.125),
	("w", True, 6.0),
	("h", True, 3.0),
	("q", True, 1.5),
	("8", True, 0.75),
	("16", True, 0.375),
	("32", True, 0.1875),
	("2", False, 2.0),
	("4", False, 1.0),
])
def test_duration_table (code: str, dotted: bool, beats: float) -> None:

	"""Every duration code maps to its beat value, dotted values are 1.5 times longer."""

	assert etherdaw.notation.parse_duration(code, dotted) == pytest.approx(beats)


def test_invalid_duration_raises () -> None:

	"""An unknown duration code is a notation error naming the code."""

	with pytest.raises(etherdaw.notation.NotationError, match="'7'"):
		etherdaw.notation.parse_duration("7")


def test_parse_plain_note () -> None:

	"""A plain note string parses to pitch and beats with no expression fields."""

	token = etherdaw.notation.parse_note("C4:q")

	assert token.pitch == "C4"
	assert token.duration == 1.0
	assert token.articulation == ""
	assert token.velocity is None
	assert token.probability is None
	assert token.timing_offset is None
	assert token.portamento is False


def test_octave_defaults_to_four () -> None:

	"""A note without an octave sits in octave 4."""

	assert etherdaw.notation.parse_note("Bb:h").pitch == "Bb4"


def test_lowercase_letter_is_accepted () -> None:

	"""The pitch letter may be written in lower case."""

	assert etherdaw.notation.parse_note("f#3:8.").pitch == "F#3"


def test_full_expression_suffix () -> None:

	"""Articulation, glide, velocity, timing and probability combine in order."""

	token = etherdaw.notation.parse_note("G4:8.>~>@0.9-15ms?0.5")

	assert token.duration == pytest.approx(0.75)
	assert token.articulation == ">"
	assert token.portamento is True
	assert token.velocity == pytest.approx(0.9)
	assert token.timing_offset == -15
	assert token.probability == pytest.approx(0.5)


def test_dynamics_marking () -> None:

	"""Dynamics names stand in for numeric velocities."""

	assert etherdaw.notation.parse_note("A4:q@mf").velocity == pytest.approx(0.65)
	assert etherdaw.notation.parse_note("A4:q@pp").velocity == pytest.approx(0.20)
	assert etherdaw.notation.parse_note("A4:q@fff").velocity == pytest.approx(1.0)


def test_tuplet_suffix () -> None:

	"""A t3 eighth lasts two thirds of an eighth; t5 fits five in the time of three."""

	assert etherdaw.notation.parse_note("E4:8t3").duration == pytest.approx(1.0 / 3.0)
	assert etherdaw.notation.parse_note("E4:qt5").duration == pytest.approx(0.6)


@pytest.mark.parametrize("text", ["C4:q@1.5", "C4:q?2", "C4:qt1", "C4:qt10"])
def test_out_of_range_values_raise (text: str) -> None:

	"""Velocity and probability outside [0, 1] and tuplets outside 2-9 are fatal."""

	with pytest.raises(etherdaw.notation.NotationError):
		etherdaw.notation.parse_note(text)


@pytest.mark.parametrize("text", ["C4", "H4:q", "C4:x", "C4:q!!", ""])
def test_malformed_notes_raise (text: str) -> None:

	"""Malformed strings raise and keep the offending text."""

	with pytest.raises(etherdaw.notation.NotationError) as info:
		etherdaw.notation.parse_note(text)

	assert info.value.text == text


def test_rest_strings () -> None:

	"""Rests carry only their length."""

	assert etherdaw.notation.parse_rest("r:h.") == pytest.approx(3.0)
	assert etherdaw.notation.is_rest("R:q")
	assert isinstance(etherdaw.notation.parse_token("r:8"), etherdaw.notation.RestToken)

	with pytest.raises(etherdaw.notation.NotationError):
		etherdaw.notation.parse_rest("r:")


def test_format_token_round_trip () -> None:

	"""A parsed token formats back to an equivalent string."""

	text = "D5:8.*~>@0.5+10ms?0.25"

	assert etherdaw.notation.format_token(etherdaw.notation.parse_note(text)) == text


def test_pitch_helpers () -> None:

	"""MIDI numbers follow (octave + 1) * 12 + pitch class."""

	assert etherdaw.notation.pitch_to_midi("C4") == 60
	assert etherdaw.notation.pitch_to_midi("A4") == 69
	assert etherdaw.notation.pitch_to_midi("Cb4") == 59
	assert etherdaw.notation.pitch_to_midi("C-1") == 0
	assert etherdaw.notation.midi_to_pitch(61) == "C#4"
	assert etherdaw.notation.transpose_pitch("B3", 1) == "C4"
	assert etherdaw.notation.shift_pitch_octave("Eb4", -2) == "Eb2"


def test_drum_tokens () -> None:

	"""Drum tokens are recognised and built from name and kit."""

	token = etherdaw.notation.drum_pitch("kick", "909")

	assert token == "drum:kick@909"
	assert etherdaw.notation.is_drum_pitch(token)
	assert not etherdaw.notation.is_drum_pitch("C4")


def test_drum_time () -> None:

	"""Drum times add up their duration codes."""

	assert etherdaw.notation.parse_drum_time("0") == 0.0
	assert etherdaw.notation.parse_drum_time("h+8") == pytest.approx(2.5)
	assert etherdaw.notation.parse_drum_time("q+q+q") == pytest.approx(3.0)
	assert etherdaw.notation.parse_drum_time("q.+16") == pytest.approx(1.75)

	with pytest.raises(etherdaw.notation.NotationError):
		etherdaw.notation.parse_drum_time("q+zz")


def test_compact_note_strings () -> None:

	"""Space separated notes and bar lines expand into single note strings."""

	expanded = etherdaw.notation.expand_note_strings(["C4:q E4:q | G4:h", "r:q"])

	assert expanded == ["C4:q", "E4:q", "G4:h", "r:q"]


def test_beats_to_seconds () -> None:

	"""At 120 BPM a beat lasts half a second."""

	assert etherdaw.notation.beats_to_seconds(16, 120) == pytest.approx(8.0)
