"""Scale-degree melodies.

A degree is a number, or a string that adds modifiers to one::

	5        fifth of the key
	"7b"     flattened seventh
	"3+"     third, an octave up
	"5-:h"   fifth, an octave down, half note
	"#4"     raised fourth (older prefix form)
	"r"      rest for one rhythm step

Degrees without an inline duration take the next value from the pattern's
``rhythm`` list, which cycles.
"""

import dataclasses
import re
import typing

import etherdaw.constants
import etherdaw.intervals
import etherdaw.notation
import etherdaw.patterns


_DEGREE_RE = re.compile(r"^(?P<number>\d+)(?P<accidental>[#b]?)(?P<shift>[+-]?)(?::(?P<duration>(?:\d+|[whq])\.?))?$")

_LEGACY_DEGREE_RE = re.compile(r"^(?P<accidental>[#b]?)(?P<number>\d+)$")

_REST_DEGREE_RE = re.compile(r"^[rR](?::(?P<duration>(?:\d+|[whq])\.?))?$")

_ACCIDENTALS = {"": 0, "#": 1, "b": -1}

_SHIFTS = {"": 0, "+": 1, "-": -1}


@dataclasses.dataclass(frozen=True)
class Degree:

	number: int
	accidental: int = 0
	octave_shift: int = 0
	duration: typing.Optional[str] = None
	rest: bool = False


def parse_degree (value: typing.Union[int, str]) -> Degree:

	"""
	Parse one entry of a ``degrees`` list.

	Raises:
		NotationError: If the entry is not a degree, a modified degree or a rest.
	"""

	if isinstance(value, int):
		return Degree(number=value)

	text = str(value).strip()

	rest = _REST_DEGREE_RE.match(text)

	if rest:
		return Degree(number=0, duration=rest.group("duration"), rest=True)

	match = _DEGREE_RE.match(text)

	if match:
		return Degree(
			number = int(match.group("number")),
			accidental = _ACCIDENTALS[match.group("accidental")],
			octave_shift = _SHIFTS[match.group("shift")],
			duration = match.group("duration"),
		)

	legacy = _LEGACY_DEGREE_RE.match(text)

	if legacy:
		return Degree(number=int(legacy.group("number")), accidental=_ACCIDENTALS[legacy.group("accidental")])

	raise etherdaw.notation.NotationError(f"Invalid degree: {text!r}. Expected <degree>[#|b][+|-][:<duration>] (e.g. '5', '7b', '3+:h')", text)


def expand_degrees (pattern: etherdaw.patterns.DegreesPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	expanded = etherdaw.patterns.ExpandedPattern()
	rhythm = pattern.rhythm or ("q",)
	rhythm_index = 0
	cursor = 0.0

	for value in pattern.degrees:

		degree = parse_degree(value)
		length = etherdaw.notation.parse_duration_string(degree.duration or rhythm[rhythm_index % len(rhythm)])

		if not degree.rest:

			midi = etherdaw.intervals.degree_to_midi(
				ctx.key,
				degree.number,
				etherdaw.constants.DEFAULT_NOTE_OCTAVE,
				degree.accidental,
				degree.octave_shift
			)

			expanded.notes.append(etherdaw.patterns.ExpandedNote(
				pitch = ctx.place(etherdaw.notation.midi_to_pitch(midi)),
				start = cursor,
				duration = length,
				velocity = ctx.velocity,
			))

		cursor += length

		if degree.duration is None:
			rhythm_index += 1

	expanded.total_beats = cursor

	return expanded
