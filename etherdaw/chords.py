"""Chord symbols, qualities and voicings.

This module turns chord strings such as ``"Cmaj7:w"``, ``"Am7@drop2:h"`` or
``"F/A:q*"`` into concrete pitches.

Module-level constants:
- `CHORD_INTERVALS`: Maps chord quality suffixes (``"m7"``, ``"maj9"``, ``"7b9"``...) to
  semitone intervals from the root
- `CHORD_VOICINGS`: Alternative interval layouts per quality, selected with ``@<voicing>``

Module-level helpers:
- `chord_intervals(quality)`: Intervals for a quality, applying ``b``/``#`` alterations
- `parse_chord(text, octave)`: Parse a full chord string into a `ChordToken`
- `chord_notes(symbol, octave)`: Pitches for a bare symbol without a duration

Chords are built from octave 3 unless told otherwise.  A slash bass is placed
one octave below the chord root octave.
"""

import dataclasses
import re
import typing

import etherdaw.constants
import etherdaw.notation


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	# Triads
	"": [0, 4, 7],
	"maj": [0, 4, 7],
	"M": [0, 4, 7],
	"m": [0, 3, 7],
	"min": [0, 3, 7],
	"dim": [0, 3, 6],
	"aug": [0, 4, 8],
	"sus2": [0, 2, 7],
	"sus4": [0, 5, 7],
	"sus": [0, 5, 7],

	# Sevenths
	"7": [0, 4, 7, 10],
	"maj7": [0, 4, 7, 11],
	"M7": [0, 4, 7, 11],
	"m7": [0, 3, 7, 10],
	"min7": [0, 3, 7, 10],
	"dim7": [0, 3, 6, 9],
	"m7b5": [0, 3, 6, 10],
	"aug7": [0, 4, 8, 10],

	# Extensions
	"9": [0, 4, 7, 10, 14],
	"maj9": [0, 4, 7, 11, 14],
	"m9": [0, 3, 7, 10, 14],
	"11": [0, 4, 7, 10, 14, 17],
	"13": [0, 4, 7, 10, 14, 21],

	# Added tones
	"add9": [0, 4, 7, 14],
	"add11": [0, 4, 7, 17],
	"add13": [0, 4, 7, 21],
	"madd9": [0, 3, 7, 14],
	"madd11": [0, 3, 7, 17],
	"6": [0, 4, 7, 9],
	"m6": [0, 3, 7, 9],
	"7add11": [0, 4, 7, 10, 17],
	"7add13": [0, 4, 7, 10, 21],
	"maj7add11": [0, 4, 7, 11, 17],
	"maj7add13": [0, 4, 7, 11, 21],
	"m7add11": [0, 3, 7, 10, 17],
	"m7add13": [0, 3, 7, 10, 21],

	# Altered dominants
	"7alt": [0, 4, 6, 10, 13],
	"7b5": [0, 4, 6, 10],
	"7#5": [0, 4, 8, 10],
	"7b9": [0, 4, 7, 10, 13],
	"7#9": [0, 4, 7, 10, 15],
}


CHORD_VOICINGS: typing.Dict[str, typing.Dict[str, typing.List[int]]] = {
	"maj7": {
		"close": [0, 4, 7, 11],
		"drop2": [0, 7, 11, 16],
		"drop3": [0, 11, 16, 19],
		"shell": [0, 11, 16],
		"open": [-12, 0, 7, 16],
	},
	"m7": {
		"close": [0, 3, 7, 10],
		"drop2": [0, 7, 10, 15],
		"shell": [0, 10, 15],
		"open": [-12, 0, 7, 15],
		"rootless_a": [3, 7, 10, 14],
	},
	"7": {
		"close": [0, 4, 7, 10],
		"drop2": [0, 7, 10, 16],
		"shell": [0, 10, 16],
		"open": [-12, 0, 7, 16],
	},
	"m9": {
		"close": [0, 3, 7, 10, 14],
		"drop2": [0, 7, 10, 14, 15],
		"shell": [0, 10, 14, 15],
		"open": [-12, 0, 10, 14, 15],
	},
	"maj9": {
		"close": [0, 4, 7, 11, 14],
		"drop2": [0, 7, 11, 14, 16],
		"shell": [0, 11, 14, 16],
		"open": [-12, 0, 11, 14, 16],
	},
	"9": {
		"close": [0, 4, 7, 10, 14],
		"drop2": [0, 7, 10, 14, 16],
		"shell": [0, 10, 14, 16],
		"open": [-12, 0, 10, 14, 16],
	},
	"m": {
		"close": [0, 3, 7],
		"open": [-12, 0, 7, 15],
	},
	"maj": {
		"close": [0, 4, 7],
		"open": [-12, 0, 7, 16],
	},
	"": {
		"close": [0, 4, 7],
		"open": [-12, 0, 7, 16],
	},
}

# Extension degree -> semitones above the root, for b/# alterations.
_ALTERED_DEGREES: typing.Dict[int, int] = {5: 7, 9: 14, 11: 17, 13: 21}

_ALTERATION_RE = re.compile(r"([b#])(\d+)")

_CHORD_RE = re.compile(
	r"^(?P<root>[A-G][#b]?)"
	r"(?P<quality>(?:maj|min|m|M|dim|aug|sus[24]?)?(?:\d+)?(?:add\d+)?(?:alt)?(?:b\d+|#\d+)*)"
	r"(?:@(?P<voicing>\w+))?"
	r"(?:/(?P<bass>[A-G][#b]?))?"
	r":(?P<code>\d+|[whq])(?P<dot>\.?)(?P<articulation>[*~>^]?)$"
)


@dataclasses.dataclass(frozen=True)
class ChordToken:

	"""
	One parsed chord string.

	``notes`` holds the resolved pitches from lowest to highest (slash bass
	first).  A rest inside a chord list parses to a token with no notes.
	``voiced`` is False when a requested voicing is not defined for the
	quality and standard stacking was used instead.
	"""

	root: str
	quality: str
	duration: float
	code: str
	notes: typing.Tuple[str, ...]
	dotted: bool = False
	articulation: str = ""
	voicing: typing.Optional[str] = None
	bass: typing.Optional[str] = None
	voiced: bool = True

	@property
	def is_rest (self) -> bool:

		return not self.notes


def chord_intervals (quality: str) -> typing.List[int]:

	"""
	Return the intervals for a chord quality.

	Qualities missing from :data:`CHORD_INTERVALS` are read as a base quality
	plus ``b``/``#`` alterations of the 5th, 9th, 11th or 13th.  An unknown
	base falls back to a major triad.

	Example:
		```python
		chord_intervals("m7")     # [0, 3, 7, 10]
		chord_intervals("9#11")   # [0, 4, 7, 10, 14, 18]
		```
	"""

	if quality in CHORD_INTERVALS:
		return list(CHORD_INTERVALS[quality])

	alterations = _ALTERATION_RE.findall(quality)
	base_quality = _ALTERATION_RE.sub("", quality)
	result = list(CHORD_INTERVALS.get(base_quality, CHORD_INTERVALS[""]))

	for accidental, degree in alterations:

		semitone = _ALTERED_DEGREES.get(int(degree))

		if semitone is None:
			continue

		delta = 1 if accidental == "#" else -1

		if semitone in result:
			result[result.index(semitone)] += delta
		else:
			result.append(semitone + delta)

	return sorted(result)


def parse_chord (text: str, octave: int = etherdaw.constants.DEFAULT_CHORD_OCTAVE) -> ChordToken:

	"""
	Parse ``<root><quality>[@voicing][/bass]:<duration>[.][articulation]``.

	Parameters:
		text: The chord string, e.g. ``"Dm7:h"`` or ``"Am9@drop2:w"``.
		octave: Octave of the chord root.

	Returns:
		A :class:`ChordToken`.  ``r:<duration>`` gives an empty chord.

	Raises:
		NotationError: If the string is not a valid chord or rest.
	"""

	if etherdaw.notation.is_rest(text):
		rest = etherdaw.notation.parse_token(text)
		return ChordToken(root="r", quality="", duration=rest.duration, code=rest.code, dotted=rest.dotted, notes=())

	match = _CHORD_RE.match(text.strip())

	if not match:
		raise etherdaw.notation.NotationError(
			f"Invalid chord format: {text!r}. Expected <root><quality>[@voicing][/bass]:<duration>[articulation] "
			"(e.g. 'Cmaj7:w', 'Dm:h', 'Am7:q*', 'Am9@drop2:w')",
			text
		)

	root = match.group("root")
	quality = match.group("quality")
	voicing = match.group("voicing")
	bass = match.group("bass")
	dotted = match.group("dot") == "."
	duration = etherdaw.notation.parse_duration(match.group("code"), dotted)

	root_midi = etherdaw.notation.pitch_to_midi(f"{root}{octave}")

	intervals: typing.Optional[typing.List[int]] = None
	voiced = True

	if voicing:
		intervals = CHORD_VOICINGS.get(quality, {}).get(voicing)
		voiced = intervals is not None

	if intervals is None:
		intervals = chord_intervals(quality)

	notes = [etherdaw.notation.midi_to_pitch(root_midi + interval) for interval in intervals]

	if bass:
		notes.insert(0, f"{bass}{octave - 1}")

	return ChordToken(
		root = root,
		quality = quality or "maj",
		duration = duration,
		code = match.group("code"),
		notes = tuple(notes),
		dotted = dotted,
		articulation = match.group("articulation"),
		voicing = voicing,
		bass = bass,
		voiced = voiced,
	)


def chord_notes (symbol: str, octave: int = etherdaw.constants.DEFAULT_CHORD_OCTAVE) -> typing.List[str]:

	"""Return the pitches of a bare chord symbol such as ``"Am7"`` or ``"Cmaj7@drop2"``."""

	return list(parse_chord(f"{symbol}:q", octave).notes)
