"""Melodic continuation of a source motif.

Techniques:

- ``ascending_sequence`` / ``descending_sequence``: the motif repeated
  ``steps`` times, each copy moved by ``interval`` semitones further
- ``extension``: ``steps`` extra notes that repeat the motif's intervals
  backwards from its last note
- ``fragmentation``: ever shorter pieces, alternating head and tail, each
  raised a whole tone more than the last
- ``development``: the motif, one sequence step, then fragmentation
"""

import logging
import typing

import etherdaw.generators.literal
import etherdaw.notation
import etherdaw.patterns
import etherdaw.resolver
import etherdaw.transforms


logger = logging.getLogger(__name__)

TECHNIQUES = ("ascending_sequence", "descending_sequence", "extension", "fragmentation", "development")

FRAGMENT_RATIO = 0.7
FRAGMENT_STEP = 2


def sequence (motif: typing.Sequence[str], repetitions: int, interval: int) -> typing.List[str]:

	result: typing.List[str] = []

	for i in range(repetitions):
		result.extend(etherdaw.transforms.transpose(motif, i * interval))

	return result


def analyze_intervals (notes: typing.Sequence[str]) -> typing.List[int]:

	"""Semitone steps between neighbouring notes.  Pairs touching a rest are skipped."""

	tokens = [etherdaw.notation.parse_token(text) for text in notes]
	steps: typing.List[int] = []

	for previous, current in zip(tokens, tokens[1:]):
		if isinstance(previous, etherdaw.notation.NoteToken) and isinstance(current, etherdaw.notation.NoteToken):
			steps.append(current.midi - previous.midi)

	return steps


def extension (motif: typing.Sequence[str], additional: int) -> typing.List[str]:

	result = list(motif)

	if len(motif) < 2:
		return result

	steps = analyze_intervals(motif)

	if not steps:
		return result

	last = motif[-1]

	for i in range(additional):
		last = etherdaw.transforms.transpose([last], steps[len(steps) - 1 - (i % len(steps))])[0]
		result.append(last)

	return result


def fragmentation (motif: typing.Sequence[str], repetitions: int) -> typing.List[str]:

	result: typing.List[str] = []
	size = len(motif)

	for i in range(repetitions):

		size = max(1, int(size * FRAGMENT_RATIO))
		fragment = motif[:size] if i % 2 == 0 else motif[-size:]

		result.extend(etherdaw.transforms.transpose(fragment, i * FRAGMENT_STEP))

	return result


def development (motif: typing.Sequence[str], steps: int, interval: int) -> typing.List[str]:

	result = list(motif)
	result.extend(sequence(motif, 2, interval)[len(motif):])

	if steps > 2:
		result.extend(fragmentation(motif, steps - 2))

	return result


def continue_motif (motif: typing.Sequence[str], technique: str, steps: int = 3, interval: int = -2) -> typing.List[str]:

	"""
	Continue a motif with one technique.

	Raises:
		ValueError: For an unknown technique name.
	"""

	motif = etherdaw.notation.expand_note_strings(list(motif))

	if technique == "ascending_sequence":
		return sequence(motif, steps, abs(interval))

	if technique == "descending_sequence":
		return sequence(motif, steps, -abs(interval))

	if technique == "extension":
		return extension(motif, steps)

	if technique == "fragmentation":
		return fragmentation(motif, steps)

	if technique == "development":
		return development(motif, steps, interval)

	raise ValueError(f"Unknown continuation technique {technique!r}. Valid techniques: {', '.join(TECHNIQUES)}")


def expand_continuation (pattern: etherdaw.patterns.ContinuationPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""
	Expand a continuation of another pattern's notes.

	The source must resolve to a notes pattern.  Continued notes play at the
	track velocity plus their articulation boost; per-note ``@velocity``
	marks in the source are not used.
	"""

	source = ctx.patterns.get(pattern.source)
	resolved = etherdaw.resolver.resolve(source, ctx) if source is not None else None

	if not isinstance(resolved, etherdaw.patterns.NotesPattern) or not resolved.notes:
		ctx.diagnostics.warn(f'Continuation source pattern "{pattern.source}" not found or has no notes', logger)
		return etherdaw.patterns.ExpandedPattern()

	if pattern.technique in TECHNIQUES:
		notes = continue_motif(resolved.notes, pattern.technique, pattern.steps, pattern.interval)
	else:
		ctx.diagnostics.warn(f"Unknown continuation technique {pattern.technique!r}, using the source notes unchanged", logger)
		notes = list(resolved.notes)

	return etherdaw.generators.literal.expand_note_list(notes, ctx, use_note_velocity=False)
