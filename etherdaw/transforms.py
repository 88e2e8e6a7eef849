"""Melodic transforms on lists of note strings.

Each transform takes note and rest strings and returns new strings, so the
result can be expanded exactly like a hand-written ``notes`` list.
Articulation, velocity, timing and probability suffixes are carried over
unchanged.

Example:
	```python
	invert(["C4:q", "E4:q", "G4:h"])          # ['C4:q', 'G#3:q', 'F3:h']
	augment(["C4:8", "D4:8."], 2)              # ['C4:q', 'D4:q.']
	```
"""

import dataclasses
import typing

import etherdaw.constants.durations
import etherdaw.notation


def beats_to_code (beats: float) -> typing.Tuple[str, bool]:

	"""
	Return the duration code (and dot flag) closest to a beat length.

	Exact codes win, then dotted codes; anything else rounds down to the
	largest code that fits, with a 32nd note as the floor.
	"""

	table = etherdaw.constants.durations.BEATS_TO_CODE

	if beats in table:
		return table[beats], False

	undotted = beats / etherdaw.constants.durations.DOTTED_MULTIPLIER

	if undotted in table:
		return table[undotted], True

	for value in sorted(table, reverse=True):
		if beats >= value:
			return table[value], False

	return "32", False


def _sounding (notes: typing.Sequence[str]) -> typing.List[etherdaw.notation.Token]:

	return [etherdaw.notation.parse_token(text) for text in etherdaw.notation.expand_note_strings(list(notes))]


def invert (notes: typing.Sequence[str], axis: typing.Optional[str] = None) -> typing.List[str]:

	"""
	Mirror every pitch around ``axis`` (default: the first sounding note).

	Rests stay where they are.  A list of only rests is returned unchanged.
	"""

	tokens = _sounding(notes)

	if axis is not None:
		axis_midi = etherdaw.notation.pitch_to_midi(axis)
	else:
		first = next((t for t in tokens if isinstance(t, etherdaw.notation.NoteToken)), None)
		if first is None:
			return [etherdaw.notation.format_token(t) for t in tokens]
		axis_midi = first.midi

	result: typing.List[str] = []

	for token in tokens:
		if isinstance(token, etherdaw.notation.NoteToken):
			token = _with_pitch(token, 2 * axis_midi - token.midi)
		result.append(etherdaw.notation.format_token(token))

	return result


def retrograde (notes: typing.Sequence[str]) -> typing.List[str]:

	"""Play the notes backwards."""

	return list(reversed(etherdaw.notation.expand_note_strings(list(notes))))


def augment (notes: typing.Sequence[str], factor: float = 2.0) -> typing.List[str]:

	"""
	Multiply every duration by ``factor``; rests included.

	New lengths are written with the nearest duration code, see
	:func:`beats_to_code`.  Tuplet suffixes are kept, so the factor applies
	to the written value.
	"""

	result: typing.List[str] = []

	for token in _sounding(notes):
		written = etherdaw.notation.parse_duration(token.code, token.dotted)
		code, dotted = beats_to_code(written * factor)
		result.append(etherdaw.notation.format_token(dataclasses.replace(
			token,
			code = code,
			dotted = dotted,
			duration = etherdaw.notation.parse_duration(code, dotted),
		)))

	return result


def diminish (notes: typing.Sequence[str], factor: float = 0.5) -> typing.List[str]:

	return augment(notes, factor)


def transpose (notes: typing.Sequence[str], semitones: int) -> typing.List[str]:

	"""Move every pitch by ``semitones``.  Rests are unchanged."""

	result: typing.List[str] = []

	for token in _sounding(notes):
		if isinstance(token, etherdaw.notation.NoteToken) and semitones:
			token = _with_pitch(token, token.midi + semitones)
		result.append(etherdaw.notation.format_token(token))

	return result


def shift_octave (notes: typing.Sequence[str], octaves: int = 1) -> typing.List[str]:

	return transpose(notes, octaves * 12)


def _with_pitch (token: etherdaw.notation.NoteToken, midi: int) -> etherdaw.notation.NoteToken:

	name, octave = etherdaw.notation.split_pitch(etherdaw.notation.midi_to_pitch(midi))

	return dataclasses.replace(token, letter=name[0], accidental=name[1:], octave=octave)


def apply_transform (notes: typing.Sequence[str], operation: str, params: typing.Mapping[str, typing.Any]) -> typing.List[str]:

	"""
	Run a named transform with its score parameters.

	Raises:
		ValueError: For an unknown operation name.
	"""

	if operation == "invert":
		return invert(notes, params.get("axis"))

	if operation == "retrograde":
		return retrograde(notes)

	if operation == "augment":
		return augment(notes, params.get("factor", 2.0))

	if operation == "diminish":
		return diminish(notes, params.get("factor", 0.5))

	if operation == "transpose":
		return transpose(notes, int(params.get("semitones", 0)))

	if operation == "octave":
		return shift_octave(notes, int(params.get("octaves", 1)))

	raise ValueError(f"Unknown transform operation {operation!r}")
