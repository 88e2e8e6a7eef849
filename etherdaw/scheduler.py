"""Lay a section's tracks out in beats.

For every unmuted track the scheduler expands its pattern list ``repeat``
times end to end, then runs each note through the performance stages in a
fixed order:

1. drop notes that start at or after the end of the section
2. resolve probability and density into a keep/drop decision
3. global swing
4. groove template (the track's own, else its expression preset's)
5. humanize (timing, velocity, duration) and velocity variance

Every random draw comes from the section occurrence's stream, in track order
and then note order, so a seeded compile always schedules the same notes.
"""

import dataclasses
import logging
import random
import typing

import etherdaw.constants.velocity
import etherdaw.density
import etherdaw.diagnostics
import etherdaw.generators
import etherdaw.groove
import etherdaw.intervals
import etherdaw.patterns
import etherdaw.resolver
import etherdaw.score


logger = logging.getLogger(__name__)


class CompileError (ValueError):

	"""A fatal error inside a section, reported with the section and track it came from."""

	pass


@dataclasses.dataclass(frozen=True)
class ScheduledNote:

	"""One note placed in a section; ``beat`` is measured from the section start."""

	instrument: str
	pitch: str
	beat: float
	duration: float
	velocity: float
	timing_offset: typing.Optional[int] = None
	portamento: bool = False


@dataclasses.dataclass(frozen=True)
class Performance:

	"""How a track is played: humanize amount, groove name and extra velocity variance."""

	humanize: float = 0.0
	groove: typing.Optional[str] = None
	velocity_variance: float = 0.0


def track_performance (track: etherdaw.score.Track, diagnostics: etherdaw.diagnostics.Diagnostics) -> Performance:

	"""
	Combine a track's expression preset with its own settings.

	``humanize`` and ``groove`` set on the track win over the preset.  An
	unknown preset is reported and ignored.
	"""

	preset: typing.Optional[etherdaw.groove.ExpressionPreset] = None

	if track.expression is not None:
		try:
			preset = etherdaw.groove.get_expression(track.expression)
		except ValueError as e:
			diagnostics.warn(str(e), logger)

	humanize = track.humanize if track.humanize is not None else (preset.humanize if preset else 0.0)
	groove = track.groove if track.groove is not None else (preset.groove if preset else None)

	return Performance(
		humanize = humanize,
		groove = groove,
		velocity_variance = preset.velocity_variance if preset else 0.0,
	)


def expand_track (
	track: etherdaw.score.Track,
	ctx: etherdaw.patterns.PatternContext
) -> typing.List[etherdaw.patterns.ExpandedNote]:

	"""
	Expand a track's patterns in order, ``repeat`` times, as one note list.

	Each repeat expands again, so randomised patterns vary between repeats.
	Unknown pattern names are reported and contribute nothing.
	"""

	notes: typing.List[etherdaw.patterns.ExpandedNote] = []
	cursor = 0.0

	for _ in range(max(track.repeat, 0)):

		for name in track.patterns:

			pattern = ctx.patterns.get(name)

			if pattern is None:
				ctx.diagnostics.warn(f'Pattern "{name}" not found', logger)
				continue

			expanded = etherdaw.generators.expand_pattern(pattern, ctx)

			notes.extend(dataclasses.replace(note, start=note.start + cursor) for note in expanded.notes)
			cursor += expanded.total_beats

	return notes


def _keep (
	note: etherdaw.patterns.ExpandedNote,
	density: typing.Optional[etherdaw.density.DensityCurve],
	section_beats: float,
	rng: random.Random
) -> bool:

	if density is None:
		if note.probability is None:
			return True
		return rng.random() < note.probability

	level = etherdaw.density.density_at_beat(density, note.start, section_beats)

	return etherdaw.density.should_play(note.probability, level, rng.random())


def perform_notes (
	notes: typing.Sequence[etherdaw.patterns.ExpandedNote],
	instrument: str,
	performance: Performance,
	section_beats: float,
	swing: float,
	rng: random.Random,
	diagnostics: etherdaw.diagnostics.Diagnostics,
	density: typing.Optional[etherdaw.density.DensityCurve] = None
) -> typing.List[ScheduledNote]:

	"""Run expanded notes through clipping, dropout, swing, groove and humanize."""

	groove: typing.Optional[etherdaw.groove.Groove] = None

	if performance.groove is not None:
		try:
			groove = etherdaw.groove.get_groove(performance.groove)
		except ValueError as e:
			diagnostics.warn(str(e), logger)

	scheduled: typing.List[ScheduledNote] = []

	for note in notes:

		if note.start >= section_beats:
			continue

		if not _keep(note, density, section_beats, rng):
			continue

		beat = etherdaw.groove.apply_swing(note.start, swing)
		velocity = note.velocity
		duration = note.duration

		if groove is not None:
			beat, velocity = etherdaw.groove.apply_groove(beat, velocity, groove)

		if performance.humanize:
			beat = etherdaw.groove.humanize_timing(beat, performance.humanize, rng)
			velocity = etherdaw.groove.humanize_velocity(velocity, performance.humanize, rng)
			duration = etherdaw.groove.humanize_duration(duration, performance.humanize, rng)

		if performance.velocity_variance:
			velocity += rng.uniform(-performance.velocity_variance, performance.velocity_variance)

		velocity = min(etherdaw.constants.velocity.MAX_VELOCITY, max(etherdaw.constants.velocity.MIN_VELOCITY, velocity))

		scheduled.append(ScheduledNote(
			instrument = instrument,
			pitch = note.pitch,
			beat = max(0.0, beat),
			duration = duration,
			velocity = velocity,
			timing_offset = note.timing_offset,
			portamento = note.portamento,
		))

	return scheduled


def schedule_section (
	name: str,
	section: etherdaw.score.Section,
	section_beats: float,
	key: etherdaw.intervals.Key,
	tempo: float,
	swing: float,
	patterns: typing.Mapping[str, etherdaw.patterns.Pattern],
	rng: random.Random,
	diagnostics: etherdaw.diagnostics.Diagnostics,
	section_index: int = 0
) -> typing.List[ScheduledNote]:

	"""
	Schedule every track of one section occurrence.

	Notes come back grouped by track in the section's track order, each
	group in pattern order.

	Raises:
		CompileError: When a note string or reference chain inside the
			section is malformed.  The original error is chained.
	"""

	density_start: typing.Optional[float] = None

	if section.density is not None:
		diagnostics.extend(etherdaw.density.validate_density(section.density), logger)
		density_start = etherdaw.density.density_at_position(section.density, 0.0)

	scheduled: typing.List[ScheduledNote] = []

	for track_name, track in section.tracks.items():

		if track.mute:
			logger.debug(f"Section {name!r}: track {track_name!r} is muted")
			continue

		if not track.patterns:
			diagnostics.warn(f'Section "{name}" track "{track_name}" has no pattern', logger)
			continue

		ctx = etherdaw.patterns.PatternContext(
			key = key,
			tempo = tempo,
			patterns = patterns,
			rng = rng,
			diagnostics = diagnostics,
			velocity = track.velocity if track.velocity is not None else etherdaw.constants.velocity.DEFAULT_VELOCITY,
			octave_offset = track.octave,
			transpose = track.transpose,
			density = density_start,
			section_index = section_index,
		)

		try:
			notes = expand_track(track, ctx)
		except (ValueError, etherdaw.resolver.ResolutionError) as e:
			raise CompileError(f'Section "{name}" track "{track_name}": {e}') from e

		performed = perform_notes(
			notes,
			instrument = track_name,
			performance = track_performance(track, diagnostics),
			section_beats = section_beats,
			swing = swing,
			rng = rng,
			diagnostics = diagnostics,
			density = section.density,
		)

		logger.debug(f"Section {name!r}: track {track_name!r} scheduled {len(performed)} of {len(notes)} notes")

		scheduled.extend(performed)

	return scheduled
