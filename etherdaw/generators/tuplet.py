import etherdaw.generators.literal
import etherdaw.notation
import etherdaw.patterns


def expand_tuplet (pattern: etherdaw.patterns.TupletPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""
	Fit ``actual`` notes into the time of ``normal``.

	Every written length, rests included, is scaled by ``normal / actual``,
	so a ``[3, 2]`` triplet of quarter notes lasts two beats.

	Raises:
		NotationError: If the ratio is not two positive whole numbers.
	"""

	ratio = tuple(pattern.ratio)

	if len(ratio) != 2 or not all(isinstance(part, int) and not isinstance(part, bool) and part > 0 for part in ratio):
		raise etherdaw.notation.NotationError(f"Invalid tuplet ratio {list(ratio)!r}. Expected [actual, normal] with positive whole numbers (e.g. [3, 2])", str(list(ratio)))

	actual, normal = ratio

	return etherdaw.generators.literal.expand_note_list(pattern.notes, ctx, scale=normal / actual)
