"""Compile a Score into a Timeline.

The compiler walks the arrangement in order.  Each section occurrence is
scheduled on its own random stream, drawn from one master stream seeded by
:attr:`CompileOptions.seed`, so repeated sections vary while the whole
compile stays reproducible.  Beats become seconds at the section's tempo, or
through its ``tempo`` automation when it has one.

Missing sections and patterns do not stop a compile.  They are reported in
:attr:`CompilationResult.warnings` and the section or track is skipped.

Example:
	```python
	score = etherdaw.score.load_score_file("song.yaml")
	result = etherdaw.compiler.compile(score, etherdaw.compiler.CompileOptions(seed=1))
	print(result.stats.total_notes, result.stats.duration_seconds)
	```
"""

import dataclasses
import logging
import random
import typing

import etherdaw.automation
import etherdaw.diagnostics
import etherdaw.intervals
import etherdaw.notation
import etherdaw.scheduler
import etherdaw.score
import etherdaw.timeline


logger = logging.getLogger(__name__)

CompileError = etherdaw.scheduler.CompileError

SEED_BITS = 63


@dataclasses.dataclass(frozen=True)
class CompileOptions:

	"""
	Parameters:
		start_section: First arrangement entry to compile (inclusive).  Unknown names are ignored.
		end_section: Last arrangement entry to compile (inclusive).  Unknown names are ignored.
		tempo: Replaces the score's global tempo.
		key: Replaces the score's global key.
		seed: Seed for every random choice.  ``None`` gives a different result each time.
	"""

	start_section: typing.Optional[str] = None
	end_section: typing.Optional[str] = None
	tempo: typing.Optional[float] = None
	key: typing.Optional[str] = None
	seed: typing.Optional[int] = None


@dataclasses.dataclass(frozen=True)
class CompilationStats:

	total_sections: int
	total_bars: float
	total_notes: int
	instruments: typing.Tuple[str, ...]
	duration_seconds: float
	sections: typing.Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class CompilationResult:

	timeline: etherdaw.timeline.Timeline
	warnings: typing.List[str]
	stats: CompilationStats


@dataclasses.dataclass(frozen=True)
class SectionSummary:

	name: str
	bars: float
	instruments: typing.Tuple[str, ...]


@dataclasses.dataclass(frozen=True)
class ScoreAnalysis:

	"""What :func:`analyze` reports: the compile statistics that need no expansion."""

	total_sections: int
	total_bars: float
	instruments: typing.Tuple[str, ...]
	duration_seconds: float
	sections: typing.Tuple[SectionSummary, ...]
	patterns: typing.Tuple[str, ...]


def effective_settings (score: etherdaw.score.Score, options: CompileOptions) -> etherdaw.score.Settings:

	return dataclasses.replace(
		score.settings,
		tempo = options.tempo or score.settings.tempo,
		key = options.key or score.settings.key,
	)


def sections_to_compile (score: etherdaw.score.Score, options: CompileOptions) -> typing.List[typing.Tuple[int, str]]:

	"""Return ``(arrangement index, section name)`` for the slice between the start and end sections."""

	start = 0
	end = len(score.arrangement)

	if options.start_section is not None and options.start_section in score.arrangement:
		start = score.arrangement.index(options.start_section)

	if options.end_section is not None and options.end_section in score.arrangement:
		end = score.arrangement.index(options.end_section) + 1

	return [(index, score.arrangement[index]) for index in range(start, end)]


def _seconds_in_section (
	section: etherdaw.score.Section,
	section_beats: float,
	tempo: float
) -> typing.Callable[[float], float]:

	tempo_automation = section.automation.get(etherdaw.automation.TEMPO_PATH)

	if tempo_automation is None:
		return lambda beat: etherdaw.notation.beats_to_seconds(beat, tempo)

	return lambda beat: etherdaw.automation.automated_seconds(beat, section_beats, tempo_automation)


def compile (score: etherdaw.score.Score, options: typing.Optional[CompileOptions] = None) -> CompilationResult:

	"""
	Compile a score.

	Raises:
		ValueError: For an invalid key or time signature.
		CompileError: For a malformed note string or a reference cycle inside
			a section.
	"""

	options = options or CompileOptions()
	diagnostics = etherdaw.diagnostics.Diagnostics()

	settings = effective_settings(score, options)
	beats_per_bar = etherdaw.intervals.parse_time_signature(settings.time_signature).beats_per_bar
	selected = sections_to_compile(score, options)
	master = random.Random(options.seed)

	logger.info(f"Compiling {len(selected)} of {len(score.arrangement)} arrangement entries at {settings.tempo} BPM in {settings.key}")

	builder = etherdaw.timeline.TimelineBuilder(settings)
	current_beat = 0.0
	current_seconds = 0.0
	total_bars = 0.0
	compiled: typing.List[str] = []

	for index, name in selected:

		# Every arrangement entry takes a seed, so skipping one leaves the others unchanged.
		rng = random.Random(master.randint(0, 2 ** SEED_BITS))
		section = score.sections.get(name)

		if section is None:
			diagnostics.warn(f'Section "{name}" in arrangement not found', logger)
			continue

		section_beats = section.bars * beats_per_bar
		tempo = section.tempo or settings.tempo
		key_name = section.key or settings.key
		key = etherdaw.intervals.parse_key(key_name)
		seconds_at = _seconds_in_section(section, section_beats, tempo)

		scheduled = etherdaw.scheduler.schedule_section(
			name,
			section,
			section_beats = section_beats,
			key = key,
			tempo = tempo,
			swing = settings.swing,
			patterns = score.patterns,
			rng = rng,
			diagnostics = diagnostics,
			section_index = index,
		)

		for note in scheduled:
			start = seconds_at(note.beat)
			builder.add_note(etherdaw.timeline.NoteEvent(
				instrument = note.instrument,
				pitch = note.pitch,
				beat = current_beat + note.beat,
				duration_beats = note.duration,
				time = current_seconds + start,
				duration = seconds_at(note.beat + note.duration) - start,
				velocity = note.velocity,
				timing_offset = note.timing_offset,
				portamento = note.portamento,
				section = name,
			))

		for path, config in section.automation.items():

			diagnostics.extend(etherdaw.automation.validate_automation(path, config), logger)

			for beat, value in etherdaw.automation.generate_automation_events(config, section_beats):
				builder.add_automation(etherdaw.timeline.AutomationEvent(
					path = path,
					beat = current_beat + beat,
					time = current_seconds + seconds_at(beat),
					value = value,
				))

		section_seconds = seconds_at(section_beats)

		builder.add_section(etherdaw.timeline.SectionMarker(
			name = name,
			index = index,
			beat = current_beat,
			time = current_seconds,
			bars = section.bars,
			beats = section_beats,
			seconds = section_seconds,
			tempo = tempo,
			key = str(key),
		))

		logger.debug(f"Section {name!r} at beat {current_beat}: {len(scheduled)} notes over {section_beats} beats")

		current_beat += section_beats
		current_seconds += section_seconds
		total_bars += section.bars
		compiled.append(name)

	timeline = builder.build(total_beats=current_beat, total_seconds=current_seconds)

	stats = CompilationStats(
		total_sections = len(compiled),
		total_bars = total_bars,
		total_notes = len(timeline.notes),
		instruments = timeline.instruments,
		duration_seconds = timeline.total_seconds,
		sections = tuple(compiled),
	)

	logger.info(f"Compiled {stats.total_notes} notes over {stats.total_bars} bars ({stats.duration_seconds:.2f}s) with {len(diagnostics)} warnings")

	return CompilationResult(timeline=timeline, warnings=list(diagnostics.warnings), stats=stats)


def analyze (score: etherdaw.score.Score) -> ScoreAnalysis:

	"""Summarise a score without expanding any pattern.  Missing sections are left out."""

	beats_per_bar = etherdaw.intervals.parse_time_signature(score.settings.time_signature).beats_per_bar
	instruments: typing.Dict[str, None] = {}
	summaries: typing.List[SectionSummary] = []
	total_bars = 0.0
	duration = 0.0

	for name in score.arrangement:

		section = score.sections.get(name)

		if section is None:
			continue

		beats = section.bars * beats_per_bar
		tempo = section.tempo or score.settings.tempo

		total_bars += section.bars
		duration += _seconds_in_section(section, beats, tempo)(beats)

		for track_name in section.tracks:
			instruments.setdefault(track_name, None)

		summaries.append(SectionSummary(name=name, bars=section.bars, instruments=tuple(section.tracks)))

	return ScoreAnalysis(
		total_sections = len(summaries),
		total_bars = total_bars,
		instruments = tuple(instruments),
		duration_seconds = duration,
		sections = tuple(summaries),
		patterns = tuple(score.patterns),
	)


def validate_references (score: etherdaw.score.Score) -> typing.List[str]:

	"""
	List every unknown section, pattern or instrument reference without compiling.

	Tracks are only checked against the instrument table when the score has one.
	"""

	problems: typing.List[str] = []

	for name in score.arrangement:
		if name not in score.sections:
			problems.append(f'Arrangement references unknown section: "{name}"')

	for section_name, section in score.sections.items():
		for track_name, track in section.tracks.items():
			for pattern_name in track.patterns:
				if pattern_name not in score.patterns:
					problems.append(f'Section "{section_name}" track "{track_name}" references unknown pattern: "{pattern_name}"')

	if score.instruments:
		for section_name, section in score.sections.items():
			for track_name in section.tracks:
				if track_name not in score.instruments:
					problems.append(f'Section "{section_name}" has track "{track_name}" with no matching instrument')

	return problems
