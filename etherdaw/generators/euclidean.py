import etherdaw.constants
import etherdaw.notation
import etherdaw.patterns
import etherdaw.sequence_utils


def expand_euclidean (pattern: etherdaw.patterns.EuclideanPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""
	Place one note on every hit of a Euclidean rhythm.

	A ``drum`` plays from the pattern's kit; otherwise ``pitch`` (default
	C4) is played with the track's octave and transpose offsets.  The
	pattern always lasts ``steps`` slots, hits or not.
	"""

	sequence = etherdaw.sequence_utils.generate_euclidean(pattern.hits, pattern.steps, pattern.rotation)
	length = etherdaw.notation.parse_duration_string(pattern.duration)

	if pattern.drum:
		pitch = etherdaw.notation.drum_pitch(pattern.drum, pattern.kit)
	else:
		pitch = ctx.place(pattern.pitch or f"C{etherdaw.constants.DEFAULT_NOTE_OCTAVE}")

	notes = [
		etherdaw.patterns.ExpandedNote(
			pitch = pitch,
			start = index * length,
			duration = length,
			velocity = ctx.velocity,
		)
		for index in etherdaw.sequence_utils.sequence_to_indices(sequence)
	]

	return etherdaw.patterns.ExpandedPattern(notes=notes, total_beats=max(pattern.steps, 0) * length)
