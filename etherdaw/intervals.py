"""Scales, keys, scale degrees and time signatures.

Keys are written ``"<root> <mode>"``: ``"C major"``, ``"F# minor"``,
``"Bb dorian"``, ``"A harmonic_minor"``.  The mode may be omitted (major) or
abbreviated (``"Am"``, ``"D min"``).
"""

import dataclasses
import re
import typing

import etherdaw.notation


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	# Diatonic modes
	"major": [0, 2, 4, 5, 7, 9, 11],
	"ionian": [0, 2, 4, 5, 7, 9, 11],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"aeolian": [0, 2, 3, 5, 7, 8, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],

	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],

	"pentatonic_major": [0, 2, 4, 7, 9],
	"pentatonic_minor": [0, 3, 5, 7, 10],

	"blues": [0, 3, 5, 6, 7, 10],
	"blues_major": [0, 2, 3, 4, 7, 9],

	"whole_tone": [0, 2, 4, 6, 8, 10],
	"diminished": [0, 2, 3, 5, 6, 8, 9, 11],
	"diminished_half_whole": [0, 1, 3, 4, 6, 7, 9, 10],
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],

	"bebop_dominant": [0, 2, 4, 5, 7, 9, 10, 11],
	"bebop_major": [0, 2, 4, 5, 7, 8, 9, 11],
	"altered": [0, 1, 3, 4, 6, 8, 10],
}


SCALE_ALIASES: typing.Dict[str, str] = {
	"maj": "major",
	"m": "minor",
	"min": "minor",
	"nat_minor": "minor",
	"natural_minor": "minor",
	"pent": "pentatonic_major",
	"pent_major": "pentatonic_major",
	"pent_minor": "pentatonic_minor",
	"harm_minor": "harmonic_minor",
	"mel_minor": "melodic_minor",
}

_KEY_RE = re.compile(r"^(?P<root>[A-Ga-g][#b]?)\s*(?P<mode>.*)$")

_TIME_SIGNATURE_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


@dataclasses.dataclass(frozen=True)
class Key:

	"""A parsed key: root name, root pitch class and scale mode."""

	root: str
	mode: str

	@property
	def root_pc (self) -> int:

		return etherdaw.notation.note_name_to_pc(self.root)

	@property
	def intervals (self) -> typing.List[int]:

		return list(SCALE_INTERVALS[self.mode])

	def __str__ (self) -> str:

		return f"{self.root} {self.mode}"


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""A parsed time signature.  ``beats_per_bar`` is measured in quarter notes."""

	numerator: int
	denominator: int

	@property
	def beats_per_bar (self) -> float:

		return self.numerator * 4.0 / self.denominator


def normalize_mode (mode: str) -> str:

	"""
	Return the canonical scale name for a mode string.

	Raises:
		ValueError: If the mode is not a known scale or alias.
	"""

	# Upper-case M is major, everything else is case-insensitive.
	if mode == "M":
		return "major"

	name = re.sub(r"\s+", "_", mode.strip().lower()) or "major"
	name = SCALE_ALIASES.get(name, name)

	if name not in SCALE_INTERVALS:
		raise ValueError(f"Unknown scale {mode!r}. Available scales: {', '.join(SCALE_INTERVALS)}")

	return name


def parse_key (text: str) -> Key:

	"""
	Parse a key string such as ``"C major"`` or ``"F#m"``.

	Raises:
		ValueError: If the root or mode is not recognised.

	Example:
		```python
		parse_key("Bb dorian")   # Key(root='Bb', mode='dorian')
		parse_key("A")           # Key(root='A', mode='major')
		```
	"""

	match = _KEY_RE.match(text.strip()) if isinstance(text, str) else None

	if not match:
		raise ValueError(f"Invalid key: {text!r}")

	root = match.group("root")
	root = root[0].upper() + root[1:]

	try:
		mode = normalize_mode(match.group("mode"))
	except ValueError as exc:
		raise ValueError(f"Invalid key {text!r}: {exc}") from exc

	return Key(root=root, mode=mode)


def parse_time_signature (text: str) -> TimeSignature:

	"""
	Parse ``"<numerator>/<denominator>"``.

	Raises:
		ValueError: If the string is malformed or either part is zero.
	"""

	match = _TIME_SIGNATURE_RE.match(str(text))

	if not match:
		raise ValueError(f"Invalid time signature: {text!r}")

	numerator, denominator = int(match.group(1)), int(match.group(2))

	if numerator <= 0 or denominator <= 0:
		raise ValueError(f"Invalid time signature: {text!r}")

	return TimeSignature(numerator=numerator, denominator=denominator)


def scale_pitch_classes (key: Key) -> typing.List[int]:

	"""
	Return the pitch classes (0-11) that belong to a key.

	Example:
		```python
		scale_pitch_classes(parse_key("A minor"))  # [9, 11, 0, 2, 4, 5, 7]
		```
	"""

	return [(key.root_pc + i) % 12 for i in key.intervals]


def quantize_pitch (pitch: int, scale_pcs: typing.Sequence[int], max_distance: int = 6) -> int:

	"""
	Snap a MIDI pitch to the nearest note in the given scale.

	Searches outward in semitone steps from the input pitch.  When two notes
	are equidistant the upward one wins.  Returns the pitch unchanged if no
	scale tone lies within ``max_distance`` semitones.
	"""

	pc = pitch % 12

	if pc in scale_pcs:
		return pitch

	for offset in range(1, max_distance + 1):
		if (pc + offset) % 12 in scale_pcs:
			return pitch + offset
		if (pc - offset) % 12 in scale_pcs:
			return pitch - offset

	return pitch


def snap_to_scale (pitch: str, key: Key) -> str:

	"""Snap a pitch name to the nearest tone of ``key``."""

	midi = etherdaw.notation.pitch_to_midi(pitch)
	snapped = quantize_pitch(midi, scale_pitch_classes(key))

	if snapped == midi:
		return pitch

	return etherdaw.notation.midi_to_pitch(snapped)


def degree_to_midi (
	key: Key,
	degree: int,
	octave: int,
	accidental: int = 0,
	octave_shift: int = 0
) -> int:

	"""
	Map a 1-based scale degree to a MIDI note number.

	Degrees beyond the scale length wrap into the next octave, so in a
	seven-note scale degree 8 is the root an octave up and degree 10 is the
	third an octave up.

	Parameters:
		key: The active key.
		degree: 1-based scale degree.
		octave: Octave of the key root.
		accidental: Semitone adjustment (+1 for ``#``, -1 for ``b``).
		octave_shift: Extra whole octaves (``+`` / ``-`` modifiers).
	"""

	if degree < 1:
		raise etherdaw.notation.NotationError(f"Invalid scale degree: {degree}. Degrees start at 1", str(degree))

	intervals = key.intervals
	size = len(intervals)
	wraps, index = divmod(degree - 1, size)

	root_midi = etherdaw.notation.pitch_to_midi(f"{key.root}{octave}")

	return root_midi + intervals[index] + accidental + (wraps + octave_shift) * 12
