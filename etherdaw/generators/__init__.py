"""Pattern generators.

Every generator has the same shape: it takes one base pattern and a
:class:`~etherdaw.patterns.PatternContext` and returns an
:class:`~etherdaw.patterns.ExpandedPattern` whose note starts are relative to
the pattern's start.  :func:`expand` picks the generator for a pattern and
then applies the post-processing flags every base pattern shares.

Example:
	```python
	ctx = etherdaw.patterns.PatternContext(key=key, tempo=120, patterns=table, rng=rng, diagnostics=diagnostics)
	expanded = etherdaw.generators.expand_pattern(table["riff"], ctx)
	```
"""

import dataclasses
import typing

import etherdaw.generators.arpeggio as arpeggio
import etherdaw.generators.continuation as continuation
import etherdaw.generators.degrees as degrees
import etherdaw.generators.drums as drums
import etherdaw.generators.envelope as envelope
import etherdaw.generators.euclidean as euclidean
import etherdaw.generators.literal as literal
import etherdaw.generators.markov as markov
import etherdaw.generators.tuplet as tuplet
import etherdaw.generators.voice_lead as voice_lead
import etherdaw.intervals
import etherdaw.notation
import etherdaw.patterns
import etherdaw.resolver


Generator = typing.Callable[[typing.Any, etherdaw.patterns.PatternContext], etherdaw.patterns.ExpandedPattern]

GENERATORS: typing.Dict[type, Generator] = {
	etherdaw.patterns.NotesPattern: literal.expand_notes,
	etherdaw.patterns.ChordsPattern: literal.expand_chords,
	etherdaw.patterns.DegreesPattern: degrees.expand_degrees,
	etherdaw.patterns.ArpeggioPattern: arpeggio.expand_arpeggio,
	etherdaw.patterns.DrumsPattern: drums.expand_drums,
	etherdaw.patterns.EuclideanPattern: euclidean.expand_euclidean,
	etherdaw.patterns.MarkovPattern: markov.expand_markov,
	etherdaw.patterns.ContinuationPattern: continuation.expand_continuation,
	etherdaw.patterns.VoiceLeadPattern: voice_lead.expand_voice_lead,
	etherdaw.patterns.TupletPattern: tuplet.expand_tuplet,
	etherdaw.patterns.RestPattern: literal.expand_rest,
}


def expand (pattern: etherdaw.patterns.BasePattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""
	Expand a base pattern.

	A pattern ``velocity`` replaces the track velocity for the generator and
	the envelope.  The envelope runs before the scale snap; drum notes are
	never snapped.

	Raises:
		TypeError: If ``pattern`` is a meta pattern; resolve it first.
	"""

	generator = GENERATORS.get(type(pattern))

	if generator is None:
		raise TypeError(f"Cannot expand {type(pattern).__name__}; resolve meta patterns first")

	if pattern.velocity is not None:
		ctx = dataclasses.replace(ctx, velocity=pattern.velocity)

	expanded = generator(pattern, ctx)

	if pattern.envelope is not None:
		expanded.notes = envelope.apply_envelope(expanded.notes, pattern.envelope, ctx.velocity, ctx.diagnostics)

	if pattern.constrain_to_scale:
		expanded.notes = [
			note if etherdaw.notation.is_drum_pitch(note.pitch)
			else dataclasses.replace(note, pitch=etherdaw.intervals.snap_to_scale(note.pitch, ctx.key))
			for note in expanded.notes
		]

	return expanded


def expand_pattern (pattern: etherdaw.patterns.Pattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""Resolve a pattern, then expand it.  A pattern that resolves to nothing expands to nothing."""

	resolved = etherdaw.resolver.resolve(pattern, ctx)

	if resolved is None:
		return etherdaw.patterns.ExpandedPattern()

	return expand(resolved, ctx)
