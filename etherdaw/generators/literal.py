import logging
import typing

import etherdaw.chords
import etherdaw.constants.velocity
import etherdaw.notation
import etherdaw.patterns


logger = logging.getLogger(__name__)


def note_from_token (
	token: etherdaw.notation.NoteToken,
	start: float,
	length: float,
	ctx: etherdaw.patterns.PatternContext,
	use_note_velocity: bool = True
) -> etherdaw.patterns.ExpandedNote:

	"""
	Turn one parsed note into an expanded note.

	The articulation gate shortens (or for legato, stretches) the sounding
	length and its boost is added to the velocity.  A per-note ``@velocity``
	replaces the track velocity unless ``use_note_velocity`` is False.
	"""

	articulation = etherdaw.constants.velocity.ARTICULATIONS.get(token.articulation, etherdaw.constants.velocity.ARTICULATIONS[""])

	if use_note_velocity and token.velocity is not None:
		base = token.velocity
	else:
		base = ctx.velocity

	return etherdaw.patterns.ExpandedNote(
		pitch = ctx.place(token.pitch),
		start = start,
		duration = length * articulation.gate,
		velocity = min(etherdaw.constants.velocity.MAX_VELOCITY, base + articulation.velocity_boost),
		timing_offset = token.timing_offset,
		probability = token.probability,
		portamento = token.portamento,
	)


def expand_note_list (
	notes: typing.Sequence[str],
	ctx: etherdaw.patterns.PatternContext,
	scale: float = 1.0,
	use_note_velocity: bool = True
) -> etherdaw.patterns.ExpandedPattern:

	"""
	Expand note and rest strings one after another.

	Every written length is multiplied by ``scale`` (tuplets pass
	``normal / actual``).  The cursor always advances by the scaled written
	length, never by the gated one.
	"""

	expanded = etherdaw.patterns.ExpandedPattern()
	cursor = 0.0

	for text in etherdaw.notation.expand_note_strings(list(notes)):

		token = etherdaw.notation.parse_token(text)
		length = token.duration * scale

		if isinstance(token, etherdaw.notation.NoteToken):
			expanded.notes.append(note_from_token(token, cursor, length, ctx, use_note_velocity))

		cursor += length

	expanded.total_beats = cursor

	return expanded


def expand_notes (pattern: etherdaw.patterns.NotesPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	return expand_note_list(pattern.notes, ctx)


def expand_chords (pattern: etherdaw.patterns.ChordsPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""Sound every tone of each chord at the same start, then move on by the chord's length."""

	expanded = etherdaw.patterns.ExpandedPattern()
	cursor = 0.0

	for text in pattern.chords:

		chord = etherdaw.chords.parse_chord(text)

		if not chord.voiced:
			ctx.diagnostics.warn(f"Unknown voicing {chord.voicing!r} for chord quality {chord.quality!r} in {text!r}, using standard stacking", logger)

		articulation = etherdaw.constants.velocity.ARTICULATIONS.get(chord.articulation, etherdaw.constants.velocity.ARTICULATIONS[""])
		velocity = min(etherdaw.constants.velocity.MAX_VELOCITY, ctx.velocity + articulation.velocity_boost)

		for pitch in chord.notes:
			expanded.notes.append(etherdaw.patterns.ExpandedNote(
				pitch = ctx.place(pitch),
				start = cursor,
				duration = chord.duration * articulation.gate,
				velocity = velocity,
			))

		cursor += chord.duration

	expanded.total_beats = cursor

	return expanded


def expand_rest (pattern: etherdaw.patterns.RestPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	return etherdaw.patterns.ExpandedPattern(total_beats=etherdaw.notation.parse_rest(pattern.rest))
