import logging
import random
import typing

import etherdaw.chords
import etherdaw.notation
import etherdaw.patterns


logger = logging.getLogger(__name__)

ARPEGGIO_MODES = ("up", "down", "updown", "downup", "random")


def arpeggio_indices (
	tone_count: int,
	mode: str,
	octaves: int,
	steps: typing.Optional[int],
	rng: random.Random
) -> typing.List[int]:

	"""
	Return 1-based chord-tone indices for an arpeggio mode.

	Indices run across ``octaves`` copies of the chord, so with a triad over
	two octaves index 4 is the root an octave up.  ``updown`` and ``downup``
	do not repeat the turning notes.  ``steps`` repeats or truncates the
	order to exactly that many notes; for ``random`` it is the number of
	draws.

	Example:
		```python
		arpeggio_indices(4, "downup", 1, None, rng)   # [4, 3, 2, 1, 2, 3]
		```
	"""

	if octaves < 1:
		raise ValueError(f"Arpeggio needs at least one octave, got {octaves}")

	indices = list(range(1, tone_count * octaves + 1))

	if mode == "random":
		return [rng.choice(indices) for _ in range(steps or len(indices))]

	if mode == "up":
		order = indices
	elif mode == "down":
		order = list(reversed(indices))
	elif mode == "updown":
		order = indices + list(reversed(indices[1:-1]))
	elif mode == "downup":
		order = list(reversed(indices)) + indices[1:-1]
	else:
		raise ValueError(f"Unknown arpeggio mode {mode!r}. Valid modes: {', '.join(ARPEGGIO_MODES)}")

	if steps:
		return [order[i % len(order)] for i in range(steps)]

	return order


def expand_arpeggio (pattern: etherdaw.patterns.ArpeggioPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	tones = etherdaw.chords.chord_notes(pattern.chord)
	length = etherdaw.notation.parse_duration_string(pattern.duration)

	if pattern.pattern:
		order = list(pattern.pattern)

	elif pattern.mode:

		mode = pattern.mode

		if mode not in ARPEGGIO_MODES:
			ctx.diagnostics.warn(f"Unknown arpeggio mode {mode!r}, using 'up'", logger)
			mode = "up"

		order = arpeggio_indices(len(tones), mode, pattern.octaves, pattern.steps, ctx.rng)

	else:
		order = list(range(1, len(tones) + 1))

	expanded = etherdaw.patterns.ExpandedPattern()
	cursor = 0.0

	for index in order:

		octave, position = divmod(index - 1, len(tones))
		pitch = etherdaw.notation.shift_pitch_octave(tones[position], octave)

		expanded.notes.append(etherdaw.patterns.ExpandedNote(
			pitch = ctx.place(pitch),
			start = cursor,
			duration = length * pattern.gate,
			velocity = ctx.velocity,
		))

		cursor += length

	expanded.total_beats = cursor

	return expanded
