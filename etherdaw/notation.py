"""Note, rest and duration string parsing.

Every literal in a score is a short string.  A note names its pitch, its
length and, optionally, how it is played::

	"C4:q"          quarter-note middle C
	"F#3:8."        dotted eighth
	"Bb:h*"         half note, staccato (octave defaults to 4)
	"E4:8t3"        eighth-note triplet
	"G4:q>@0.9"     accented, velocity 0.9
	"A4:q@mf"       dynamics marking instead of a number
	"D5:q~>"        glide into the next note
	"C4:16-10ms"    played 10 ms early
	"C4:16?0.5"     sounds half of the time
	"r:q"           a quarter rest

The grammar, in order:
``<letter>[#|b][octave]:<code>[.][tN][* ~ > ^][~>][@velocity][+/-Nms][?probability]``.

Parsing never applies articulation; the gate ratio and velocity boost are
looked up at expansion time from :data:`etherdaw.constants.velocity.ARTICULATIONS`.
"""

import dataclasses
import re
import typing

import etherdaw.constants
import etherdaw.constants.durations
import etherdaw.constants.velocity


class NotationError (ValueError):

	"""A note, chord, rest, duration or degree string could not be parsed."""

	def __init__ (self, message: str, text: typing.Optional[str] = None) -> None:

		super().__init__(message)
		self.text = text


LETTER_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
]

_DURATION_PATTERN = r"(?P<code>\d+|[whq])(?P<dot>\.?)"

_NOTE_RE = re.compile(
	r"^(?P<letter>[A-Ga-g])(?P<accidental>[#b]?)(?P<octave>-?\d)?"
	r":" + _DURATION_PATTERN +
	r"(?:t(?P<tuplet>\d+))?"
	r"(?P<articulation>[*~>^])??"
	r"(?P<portamento>~>)?"
	r"(?:@(?P<velocity>\d*\.?\d+|ppp|pp|p|mp|mf|fff|ff|f))?"
	r"(?:(?P<timing>[+-]\d+)ms)?"
	r"(?:\?(?P<probability>\d*\.?\d+))?"
	r"(?P<trailing_portamento>~>)?$"
)

_REST_RE = re.compile(r"^[rR]:" + _DURATION_PATTERN + r"$")

_PITCH_RE = re.compile(r"^(?P<letter>[A-G])(?P<accidental>[#b]?)(?P<octave>-?\d+)$")


@dataclasses.dataclass(frozen=True)
class NoteToken:

	"""
	One parsed note string.

	``duration`` is in beats with the dot and any tuplet suffix already
	applied.  ``code``, ``dotted`` and ``tuplet`` keep the written form so the
	token can be formatted back into a string after a transform.
	"""

	letter: str
	accidental: str
	octave: int
	duration: float
	code: str
	dotted: bool = False
	tuplet: typing.Optional[int] = None
	articulation: str = ""
	portamento: bool = False
	velocity: typing.Optional[float] = None
	timing_offset: typing.Optional[int] = None
	probability: typing.Optional[float] = None

	@property
	def pitch (self) -> str:

		"""Return the pitch name with octave, e.g. ``"C#4"``."""

		return f"{self.letter}{self.accidental}{self.octave}"

	@property
	def midi (self) -> int:

		"""Return the MIDI note number of the pitch."""

		return pitch_to_midi(self.pitch)


@dataclasses.dataclass(frozen=True)
class RestToken:

	"""A parsed rest.  Carries only its length in beats."""

	duration: float
	code: str
	dotted: bool = False


Token = typing.Union[NoteToken, RestToken]


def parse_duration (code: str, dotted: bool = False) -> float:

	"""
	Convert a duration code to beats.

	Parameters:
		code: One of ``w h q 8 16 32`` (or the aliases ``2`` and ``4``).
		dotted: Multiply by 1.5.

	Example:
		```python
		parse_duration("q")          # 1.0
		parse_duration("8", True)    # 0.75
		```
	"""

	base = etherdaw.constants.durations.DURATION_CODES.get(code)

	if base is None:
		valid = ", ".join(etherdaw.constants.durations.DURATION_CODES)
		raise NotationError(f"Invalid duration: {code!r}. Valid durations: {valid}", code)

	return base * etherdaw.constants.durations.DOTTED_MULTIPLIER if dotted else base


def parse_duration_string (text: str) -> float:

	"""Parse a duration code that may carry a trailing dot, e.g. ``"8."``."""

	text = text.strip()

	if text.endswith("."):
		return parse_duration(text[:-1], dotted=True)

	return parse_duration(text)


def is_rest (text: str) -> bool:

	"""Return True if the string is written as a rest (``r:...``)."""

	return text.strip().lower().startswith("r:")


def parse_rest (text: str) -> float:

	"""Parse ``r:<code>[.]`` and return its length in beats."""

	match = _REST_RE.match(text.strip())

	if not match:
		raise NotationError(f"Invalid rest format: {text!r}. Expected r:<duration> (e.g. 'r:q', 'r:h.')", text)

	return parse_duration(match.group("code"), match.group("dot") == ".")


def _unit_interval (raw: str, what: str, text: str) -> float:

	value = float(raw)

	if value < 0.0 or value > 1.0:
		raise NotationError(f"Invalid {what} {value} in {text!r}. Must be 0.0-1.0", text)

	return value


def parse_note (text: str) -> NoteToken:

	"""
	Parse a note string into a :class:`NoteToken`.

	Raises :class:`NotationError` when the string does not match the grammar,
	when velocity or probability fall outside [0, 1] or when a tuplet suffix
	is outside 2-9.
	"""

	match = _NOTE_RE.match(text.strip())

	if not match:
		raise NotationError(
			f"Invalid note format: {text!r}. Expected <pitch>[octave]:<duration>[.][tN][articulation][~>][@velocity][+/-Nms][?probability] "
			"(e.g. 'C4:q', 'C4:q*', 'C4:q@0.8', 'C4:8t3')",
			text
		)

	code = match.group("code")
	dotted = match.group("dot") == "."
	duration = parse_duration(code, dotted)

	tuplet: typing.Optional[int] = None

	if match.group("tuplet"):
		tuplet = int(match.group("tuplet"))

		if tuplet < 2 or tuplet > 9:
			raise NotationError(f"Invalid tuplet ratio {tuplet} in {text!r}. Must be 2-9 (t3 = triplet, t5 = quintuplet)", text)

		# Three in the time of two, five in the time of three, six in the time of three...
		base = tuplet // 2 if tuplet % 2 == 0 else tuplet // 2 + 1
		duration = duration * base / tuplet

	velocity: typing.Optional[float] = None
	raw_velocity = match.group("velocity")

	if raw_velocity is not None:
		if raw_velocity in etherdaw.constants.velocity.DYNAMICS:
			velocity = etherdaw.constants.velocity.DYNAMICS[raw_velocity]
		else:
			velocity = _unit_interval(raw_velocity, "velocity", text)

	probability: typing.Optional[float] = None

	if match.group("probability") is not None:
		probability = _unit_interval(match.group("probability"), "probability", text)

	timing = match.group("timing")

	return NoteToken(
		letter = match.group("letter").upper(),
		accidental = match.group("accidental"),
		octave = int(match.group("octave")) if match.group("octave") is not None else etherdaw.constants.DEFAULT_NOTE_OCTAVE,
		duration = duration,
		code = code,
		dotted = dotted,
		tuplet = tuplet,
		articulation = match.group("articulation") or "",
		portamento = bool(match.group("portamento") or match.group("trailing_portamento")),
		velocity = velocity,
		timing_offset = int(timing) if timing is not None else None,
		probability = probability,
	)


def parse_token (text: str) -> Token:

	"""Parse a note or rest string."""

	if is_rest(text):
		match = _REST_RE.match(text.strip())

		if not match:
			raise NotationError(f"Invalid rest format: {text!r}. Expected r:<duration> (e.g. 'r:q', 'r:h.')", text)

		code = match.group("code")
		dotted = match.group("dot") == "."

		return RestToken(duration=parse_duration(code, dotted), code=code, dotted=dotted)

	return parse_note(text)


def format_token (token: Token) -> str:

	"""Write a token back out as a note or rest string."""

	duration = token.code + ("." if token.dotted else "")

	if isinstance(token, RestToken):
		return f"r:{duration}"

	parts = [f"{token.pitch}:{duration}"]

	if token.tuplet is not None:
		parts.append(f"t{token.tuplet}")

	parts.append(token.articulation)

	if token.portamento:
		parts.append("~>")

	if token.velocity is not None:
		parts.append(f"@{token.velocity:g}")

	if token.timing_offset is not None:
		parts.append(f"{token.timing_offset:+d}ms")

	if token.probability is not None:
		parts.append(f"?{token.probability:g}")

	return "".join(parts)


# ---------------------------------------------------------------------------
# Pitch helpers
# ---------------------------------------------------------------------------


def split_pitch (pitch: str) -> typing.Tuple[str, int]:

	"""Split ``"C#4"`` into ``("C#", 4)``."""

	match = _PITCH_RE.match(pitch)

	if not match:
		raise NotationError(f"Invalid pitch: {pitch!r}", pitch)

	return match.group("letter") + match.group("accidental"), int(match.group("octave"))


def note_name_to_pc (name: str) -> int:

	"""Return the pitch class (0-11) of a note name such as ``"Bb"``."""

	if not name or name[0] not in LETTER_TO_PC or name[1:] not in ("", "#", "b"):
		raise NotationError(f"Invalid note name: {name!r}", name)

	value = LETTER_TO_PC[name[0]]

	if name[1:] == "#":
		value += 1
	elif name[1:] == "b":
		value -= 1

	return value % 12


def pitch_to_midi (pitch: str) -> int:

	"""
	Convert a pitch name to a MIDI note number.

	``C4`` is 60.  Accidentals may cross the octave boundary: ``Cb4`` is 59.
	"""

	match = _PITCH_RE.match(pitch)

	if not match:
		raise NotationError(f"Invalid pitch: {pitch!r}", pitch)

	value = LETTER_TO_PC[match.group("letter")]

	if match.group("accidental") == "#":
		value += 1
	elif match.group("accidental") == "b":
		value -= 1

	return (int(match.group("octave")) + 1) * etherdaw.constants.SEMITONES_PER_OCTAVE + value


def midi_to_pitch (midi: int) -> str:

	"""Convert a MIDI note number to a sharp-spelled pitch name."""

	octave = midi // etherdaw.constants.SEMITONES_PER_OCTAVE - 1

	return f"{PC_TO_NOTE_NAME[midi % etherdaw.constants.SEMITONES_PER_OCTAVE]}{octave}"


def transpose_pitch (pitch: str, semitones: int) -> str:

	"""Transpose a pitch name.  A zero shift returns the spelling untouched."""

	if semitones == 0:
		return pitch

	return midi_to_pitch(pitch_to_midi(pitch) + semitones)


def shift_pitch_octave (pitch: str, octaves: int) -> str:

	"""Move a pitch by whole octaves, keeping its spelling."""

	if octaves == 0:
		return pitch

	name, octave = split_pitch(pitch)

	return f"{name}{octave + octaves}"


def is_drum_pitch (pitch: str) -> bool:

	"""Return True for ``drum:<name>@<kit>`` tokens."""

	return pitch.startswith("drum:")


def drum_pitch (name: str, kit: str) -> str:

	"""Build a ``drum:<name>@<kit>`` token."""

	return f"drum:{name}@{kit}"


# ---------------------------------------------------------------------------
# Compound strings
# ---------------------------------------------------------------------------


def parse_drum_time (text: str) -> float:

	"""
	Parse a drum hit time made of ``+``-joined duration codes.

	``"0"`` is the start of the pattern and plain numbers are taken as beats.

	Example:
		```python
		parse_drum_time("h+8")    # 2.5
		parse_drum_time("q+q+q")  # 3.0
		```
	"""

	total = 0.0

	for part in str(text).split("+"):

		part = part.strip()

		if part == "0":
			continue

		if part in etherdaw.constants.durations.DURATION_CODES or part.rstrip(".") in etherdaw.constants.durations.DURATION_CODES:
			total += parse_duration_string(part)
			continue

		try:
			total += float(part)
		except ValueError:
			raise NotationError(f"Invalid drum time {text!r}: unknown part {part!r}", str(text)) from None

	return total


def expand_note_strings (notes: typing.Union[str, typing.Sequence[str]]) -> typing.List[str]:

	"""
	Split compact notation into individual note strings.

	A string containing spaces or ``|`` bar lines is split on whitespace;
	bar lines are only visual.

	Example:
		```python
		expand_note_strings(["C4:q E4:q | G4:h"])  # ["C4:q", "E4:q", "G4:h"]
		```
	"""

	if isinstance(notes, str):
		notes = [notes]

	expanded: typing.List[str] = []

	for item in notes:
		if " " in item.strip() or "|" in item:
			expanded.extend(part for part in item.replace("|", " ").split() if part)
		else:
			expanded.append(item.strip())

	return expanded


def beats_to_seconds (beats: float, tempo: float) -> float:

	"""Convert beats to seconds at a fixed tempo in BPM."""

	return beats * 60.0 / tempo
